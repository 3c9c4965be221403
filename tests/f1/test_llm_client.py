"""Tests for LLM client module and the generation service adapter."""

from unittest.mock import MagicMock, patch

import httpx
import openai
import pytest

from syllabus.config.app_config import AppConfig, ExtractionConfig, ProviderConfig
from syllabus.llm.client import (
    LLMClient,
    LLMConfig,
    LLMConnectionError,
    LLMError,
    LLMResponseError,
    Message,
    decode_json,
)
from syllabus.llm.service import SYSTEM_PROMPT_EXTRACTION, LLMGenerationService


_REQUEST = httpx.Request("POST", "http://localhost:1234/v1/chat/completions")


def _mock_response(content: str, model: str = "test-model") -> MagicMock:
    response = MagicMock()
    response.choices = [MagicMock()]
    response.choices[0].message.content = content
    response.model = model
    response.usage = MagicMock()
    response.usage.prompt_tokens = 10
    response.usage.completion_tokens = 20
    response.usage.total_tokens = 30
    return response


@pytest.fixture
def mock_openai_client():
    """Patch the OpenAI SDK so no real API calls happen."""
    with patch("syllabus.llm.client.OpenAI") as mock:
        mock_instance = MagicMock()
        mock.return_value = mock_instance
        yield mock_instance


class TestLLMConfig:
    """Tests for LLMConfig dataclass."""

    def test_default_config(self):
        config = LLMConfig()

        assert config.provider == "lmstudio"
        assert config.base_url == "http://localhost:1234/v1"
        assert config.timeout == 120

    def test_from_yaml_missing_file(self, tmp_path):
        config = LLMConfig.from_yaml(tmp_path / "nonexistent.yaml")

        assert config.provider == "lmstudio"
        assert config.model == "default"

    def test_from_yaml_valid_file(self, tmp_path):
        config_path = tmp_path / "config.yaml"
        config_path.write_text(
            """
llm:
  provider: openai
  model: gpt-4o-mini
  temperature: 0.1
  max_tokens: 2048
  timeout: 60
"""
        )

        with patch.dict("os.environ", {"OPENAI_API_KEY": "test-key"}):
            config = LLMConfig.from_yaml(config_path)

        assert config.provider == "openai"
        assert config.base_url == "https://api.openai.com/v1"
        assert config.model == "gpt-4o-mini"
        assert config.temperature == 0.1
        assert config.timeout == 60
        assert config.api_key == "test-key"


class TestLLMConfigProviders:
    """Provider resolution through the app config."""

    def test_for_provider_uses_providers_section(self):
        app_config = AppConfig(
            providers={
                "lmstudio": ProviderConfig(
                    base_url="http://gpu-box:1234/v1", default_model="qwen2.5-7b"
                )
            }
        )

        config = LLMConfig.for_provider("lmstudio", app_config)

        assert config.base_url == "http://gpu-box:1234/v1"
        assert config.model == "qwen2.5-7b"
        assert config.api_key == "lm-studio"

    def test_for_provider_falls_back_to_known_url(self):
        app_config = AppConfig(
            providers={"openai": ProviderConfig(base_url=None, default_model="gpt-4o-mini")}
        )

        config = LLMConfig.for_provider("openai", app_config)

        assert config.base_url == "https://api.openai.com/v1"

    def test_unknown_provider(self):
        with pytest.raises(LLMError, match="Unknown LLM provider"):
            LLMConfig.for_provider("mystery", AppConfig())

    def test_json_object_mode(self):
        assert LLMConfig(provider="openai").json_object_mode is True
        assert LLMConfig(provider="lmstudio").json_object_mode is False
        assert LLMConfig(provider="lmstudio", supports_json_object=True).json_object_mode


class TestDecodeJson:
    def test_plain_object(self):
        assert decode_json('{"a": 1}') == {"a": 1}

    def test_invalid(self):
        assert decode_json("no json here") is None


class TestMessage:
    def test_message_to_dict(self):
        msg = Message(role="user", content="Hello")

        assert msg.to_dict() == {"role": "user", "content": "Hello"}


class TestLLMClientMocked:
    """Tests for LLMClient using mocks (no real API calls)."""

    def test_client_overrides(self, mock_openai_client):
        with patch.dict("os.environ", {"OPENAI_API_KEY": "test-key"}):
            client = LLMClient(config=LLMConfig(), provider="openai", model="custom")

        assert client.config.provider == "openai"
        assert client.config.model == "custom"
        assert client.config.api_key == "test-key"

    def test_client_does_not_mutate_config(self, mock_openai_client):
        config = LLMConfig()

        LLMClient(config=config, model="other")

        assert config.model == "default"

    def test_chat_success(self, mock_openai_client):
        mock_openai_client.chat.completions.create.return_value = _mock_response("Hi")

        client = LLMClient(config=LLMConfig())
        response = client.chat([Message(role="user", content="Hello")], temperature=0.1)

        assert response.content == "Hi"
        assert response.total_tokens == 30
        call_kwargs = mock_openai_client.chat.completions.create.call_args.kwargs
        assert call_kwargs["temperature"] == 0.1

    def test_chat_empty_response(self, mock_openai_client):
        response = MagicMock()
        response.choices = []
        mock_openai_client.chat.completions.create.return_value = response

        client = LLMClient(config=LLMConfig())

        with pytest.raises(LLMResponseError, match="no choices"):
            client.chat([Message(role="user", content="Hello")])

    def test_chat_connection_error(self, mock_openai_client):
        mock_openai_client.chat.completions.create.side_effect = openai.APIConnectionError(
            request=_REQUEST
        )

        client = LLMClient(config=LLMConfig())

        with pytest.raises(LLMConnectionError, match="Could not connect"):
            client.chat([Message(role="user", content="Hello")])

    def test_chat_other_error(self, mock_openai_client):
        mock_openai_client.chat.completions.create.side_effect = openai.APIError(
            "rate limited", request=_REQUEST, body=None
        )

        client = LLMClient(config=LLMConfig())

        with pytest.raises(LLMError) as exc_info:
            client.chat([Message(role="user", content="Hello")])
        assert not isinstance(exc_info.value, LLMConnectionError)

    def test_chat_json_direct(self, mock_openai_client):
        mock_openai_client.chat.completions.create.return_value = _mock_response(
            '{"grading_weights": [], "assignments": []}'
        )

        client = LLMClient(config=LLMConfig())
        result = client.chat_json([Message(role="user", content="JSON please")])

        assert result == {"grading_weights": [], "assignments": []}

    def test_chat_json_strips_think_and_markdown(self, mock_openai_client):
        mock_openai_client.chat.completions.create.return_value = _mock_response(
            '<think>weights first</think>\n```json\n{"assignments": []}\n```'
        )

        client = LLMClient(config=LLMConfig())
        result = client.chat_json([Message(role="user", content="JSON please")])

        assert result == {"assignments": []}

    def test_chat_json_extracts_from_text(self, mock_openai_client):
        mock_openai_client.chat.completions.create.return_value = _mock_response(
            'Here it is:\n{"data": "test"}\nDone.'
        )

        client = LLMClient(config=LLMConfig())

        assert client.chat_json([Message(role="user", content="x")]) == {"data": "test"}

    def test_chat_json_invalid_without_retries(self, mock_openai_client):
        mock_openai_client.chat.completions.create.return_value = _mock_response(
            "Not JSON at all"
        )

        client = LLMClient(config=LLMConfig())

        with pytest.raises(LLMResponseError, match="Could not get valid JSON"):
            client.chat_json([Message(role="user", content="x")], max_retries=0)
        assert mock_openai_client.chat.completions.create.call_count == 1

    def test_chat_json_repair_retry(self, mock_openai_client):
        mock_openai_client.chat.completions.create.side_effect = [
            _mock_response("oops"),
            _mock_response('{"fixed": true}'),
        ]

        client = LLMClient(config=LLMConfig())
        result = client.chat_json([Message(role="user", content="x")], max_retries=1)

        assert result == {"fixed": True}
        assert mock_openai_client.chat.completions.create.call_count == 2

    def test_no_response_format_for_lmstudio(self, mock_openai_client):
        mock_openai_client.chat.completions.create.return_value = _mock_response("{}")

        client = LLMClient(config=LLMConfig(provider="lmstudio"))
        client.chat([Message(role="user", content="x")], json_mode=True)

        call_kwargs = mock_openai_client.chat.completions.create.call_args.kwargs
        assert "response_format" not in call_kwargs

    def test_response_format_for_openai(self, mock_openai_client):
        mock_openai_client.chat.completions.create.return_value = _mock_response("{}")

        client = LLMClient(config=LLMConfig(provider="openai"))
        client.chat([Message(role="user", content="x")], json_mode=True)

        call_kwargs = mock_openai_client.chat.completions.create.call_args.kwargs
        assert call_kwargs["response_format"] == {"type": "json_object"}


class TestLLMGenerationService:
    """Tests for the generation service adapter."""

    def test_generate_calls_simple_json(self):
        client = MagicMock()
        client.simple_json.return_value = {"assignments": []}
        service = LLMGenerationService(client, max_tokens=2048, json_repair_retries=0)

        result = service.generate("Extract this", temperature=0.1)

        assert result == {"assignments": []}
        client.simple_json.assert_called_once_with(
            system_prompt=SYSTEM_PROMPT_EXTRACTION,
            user_message="Extract this",
            temperature=0.1,
            max_tokens=2048,
            max_retries=0,
        )

    def test_generate_propagates_llm_errors(self):
        client = MagicMock()
        client.simple_json.side_effect = LLMConnectionError("down")
        service = LLMGenerationService(client)

        with pytest.raises(LLMConnectionError):
            service.generate("Extract this")

    def test_from_config(self, mock_openai_client):
        app_config = AppConfig(
            extraction=ExtractionConfig(max_tokens=1024, json_repair_retries=2)
        )

        service = LLMGenerationService.from_config(
            app_config, llm_config=LLMConfig(), model="tiny"
        )

        assert service.max_tokens == 1024
        assert service.json_repair_retries == 2
        assert service.client.config.model == "tiny"
