"""Chat client for OpenAI-compatible endpoints.

The extraction service only ever asks for one thing: a JSON object
answering a single prompt. This module wraps the openai SDK for that,
resolving the endpoint from the `providers:` section of the app config.

Supported providers:
- lmstudio: Local LM Studio server
- openai: OpenAI API
- anthropic: Anthropic API (via its OpenAI-compatible endpoint)
"""

from __future__ import annotations

import json
import re
import time
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Literal

import openai
import structlog
import yaml
from openai import OpenAI

from syllabus.config.app_config import CONFIG_FILE, AppConfig, load_app_config

logger = structlog.get_logger(__name__)

# =============================================================================
# CONSTANTS
# =============================================================================

# Used when the providers section leaves base_url empty
DEFAULT_BASE_URLS: dict[str, str] = {
    "lmstudio": "http://localhost:1234/v1",
    "openai": "https://api.openai.com/v1",
    "anthropic": "https://api.anthropic.com/v1",
}

# LM Studio ignores the key but the SDK requires one
LMSTUDIO_API_KEY = "lm-studio"

# Providers that accept response_format={"type": "json_object"}
JSON_OBJECT_PROVIDERS = frozenset({"openai"})

JSON_REPAIR_PROMPT = """Your previous answer was not valid JSON:
<<<
{invalid_output}
>>>

Return the same data as ONE valid JSON object. No explanations, no markdown."""

_REASONING_BLOCK = re.compile(
    r"<(think|analysis|reasoning)>.*?</\1>", re.DOTALL | re.IGNORECASE
)
_FENCED_BLOCK = re.compile(r"```(?:json)?\s*([\s\S]*?)```")


def decode_json(text: str) -> Any | None:
    """Decode the JSON payload of a model answer.

    Reasoning blocks (<think>...</think> and similar) are dropped first.
    Candidates are tried in order: the whole text, the first fenced
    code block, then the span from the first "{" to the last "}".

    Returns:
        Decoded value, or None if no candidate is valid JSON
    """
    text = _REASONING_BLOCK.sub("", text).strip()

    candidates = [text]
    fenced = _FENCED_BLOCK.search(text)
    if fenced:
        candidates.append(fenced.group(1).strip())
    start, end = text.find("{"), text.rfind("}")
    if 0 <= start < end:
        candidates.append(text[start : end + 1])

    for candidate in candidates:
        try:
            return json.loads(candidate)
        except json.JSONDecodeError:
            continue
    return None


# =============================================================================
# DATA CLASSES
# =============================================================================


@dataclass
class LLMConfig:
    """Endpoint and sampling settings for LLMClient."""

    provider: str = "lmstudio"
    base_url: str = DEFAULT_BASE_URLS["lmstudio"]
    model: str = "default"
    temperature: float = 0.7
    max_tokens: int = 4096
    timeout: int = 120
    api_key: str | None = None
    supports_json_object: bool | None = None

    @classmethod
    def for_provider(
        cls,
        provider: str,
        app_config: AppConfig | None = None,
    ) -> LLMConfig:
        """Endpoint, key and default model of a configured provider.

        Raises:
            LLMError: If the provider isn't in the providers section
        """
        if app_config is None:
            app_config = load_app_config()

        provider_config = app_config.providers.get(provider)
        if provider_config is None:
            raise LLMError(f"Unknown LLM provider: {provider}")

        api_key = provider_config.get_api_key()
        if api_key is None and provider == "lmstudio":
            api_key = LMSTUDIO_API_KEY

        return cls(
            provider=provider,
            base_url=provider_config.base_url or DEFAULT_BASE_URLS.get(provider, ""),
            model=provider_config.default_model,
            api_key=api_key,
        )

    @classmethod
    def from_yaml(cls, config_path: Path | None = None) -> LLMConfig:
        """Build from the `llm:` section of the app config file.

        The provider named there supplies the endpoint and key; every other
        key in the section overrides the provider defaults.
        """
        path = config_path or CONFIG_FILE
        if not path.exists():
            logger.warning("llm.config_not_found", path=str(path))
            return cls()

        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        section = data.get("llm") or {}

        base = cls.for_provider(
            section.get("provider", "lmstudio"),
            load_app_config(config_path=path),
        )
        return replace(
            base,
            base_url=section.get("base_url", base.base_url),
            model=section.get("model", base.model),
            temperature=float(section.get("temperature", base.temperature)),
            max_tokens=int(section.get("max_tokens", base.max_tokens)),
            timeout=int(section.get("timeout", base.timeout)),
            supports_json_object=section.get("supports_json_object"),
        )

    @property
    def json_object_mode(self) -> bool:
        """Whether to send response_format={"type": "json_object"}."""
        if self.supports_json_object is not None:
            return self.supports_json_object
        return self.provider in JSON_OBJECT_PROVIDERS


@dataclass
class Message:
    """A chat message."""

    role: Literal["system", "user", "assistant"]
    content: str

    def to_dict(self) -> dict[str, str]:
        return {"role": self.role, "content": self.content}


@dataclass
class LLMResponse:
    """Text answer plus usage metadata."""

    content: str
    model: str
    usage: dict[str, int] = field(default_factory=dict)
    latency_ms: int = 0

    @property
    def total_tokens(self) -> int:
        return self.usage.get("total_tokens", 0)


class LLMError(Exception):
    """The model call failed (auth, quota, bad request, server error)."""

    pass


class LLMConnectionError(LLMError):
    """The endpoint could not be reached or timed out."""

    pass


class LLMResponseError(LLMError):
    """The endpoint answered, but not with usable content."""

    pass


# =============================================================================
# LLM CLIENT
# =============================================================================


class LLMClient:
    """Thin wrapper over the openai SDK returning text or decoded JSON."""

    def __init__(
        self,
        config: LLMConfig | None = None,
        provider: str | None = None,
        model: str | None = None,
    ):
        """Create a client.

        Args:
            config: Endpoint settings (read from the app config file if None)
            provider: Switch to another configured provider, keeping the
                sampling settings of config
            model: Model name override
        """
        if config is None:
            config = LLMConfig.from_yaml()

        if provider is not None and provider != config.provider:
            switched = LLMConfig.for_provider(provider)
            config = replace(
                switched,
                temperature=config.temperature,
                max_tokens=config.max_tokens,
                timeout=config.timeout,
            )
        if model is not None:
            config = replace(config, model=model)

        self.config = config
        self._client = OpenAI(
            base_url=config.base_url,
            api_key=config.api_key or "not-needed",
            timeout=config.timeout,
        )

        logger.info(
            "llm.client_initialized",
            provider=config.provider,
            model=config.model,
            base_url=config.base_url,
        )

    def chat(
        self,
        messages: list[Message],
        temperature: float | None = None,
        max_tokens: int | None = None,
        json_mode: bool = False,
    ) -> LLMResponse:
        """Send one chat completion request.

        Raises:
            LLMConnectionError: Endpoint unreachable or request timed out
            LLMError: Any other API failure
            LLMResponseError: The answer had no choices
        """
        request: dict[str, Any] = {
            "model": self.config.model,
            "messages": [m.to_dict() for m in messages],
            "temperature": self.config.temperature if temperature is None else temperature,
            "max_tokens": max_tokens or self.config.max_tokens,
        }
        if json_mode and self.config.json_object_mode:
            request["response_format"] = {"type": "json_object"}

        start_time = time.time()
        try:
            completion = self._client.chat.completions.create(**request)
        except openai.APIConnectionError as e:
            raise LLMConnectionError(
                f"Could not connect to {self.config.provider} at {self.config.base_url}: {e}"
            ) from e
        except openai.APIError as e:
            raise LLMError(f"{self.config.provider} request failed: {e}") from e

        if not completion.choices:
            raise LLMResponseError(f"{self.config.provider} returned no choices")

        usage = {}
        if completion.usage:
            usage = {
                "prompt_tokens": completion.usage.prompt_tokens,
                "completion_tokens": completion.usage.completion_tokens,
                "total_tokens": completion.usage.total_tokens,
            }
        response = LLMResponse(
            content=completion.choices[0].message.content or "",
            model=completion.model,
            usage=usage,
            latency_ms=int((time.time() - start_time) * 1000),
        )

        logger.debug(
            "llm.response",
            provider=self.config.provider,
            model=response.model,
            tokens=response.total_tokens,
            latency_ms=response.latency_ms,
        )
        return response

    def chat_json(
        self,
        messages: list[Message],
        temperature: float | None = None,
        max_tokens: int | None = None,
        max_retries: int = 1,
    ) -> Any:
        """Chat expecting JSON back.

        When the answer doesn't decode, the model is shown its answer and
        asked to repair it, up to max_retries times.

        Raises:
            LLMResponseError: If no answer decodes as JSON
        """
        response = self.chat(messages, temperature, max_tokens, json_mode=True)
        parsed = decode_json(response.content)

        repairs = 0
        while parsed is None and repairs < max_retries:
            repairs += 1
            logger.warning(
                "llm.json_repair",
                attempt=repairs,
                provider=self.config.provider,
                preview=response.content[:100],
            )
            repair = Message(
                role="user",
                content=JSON_REPAIR_PROMPT.format(invalid_output=response.content[:1000]),
            )
            response = self.chat(
                [*messages, repair], temperature, max_tokens, json_mode=True
            )
            parsed = decode_json(response.content)

        if parsed is None:
            raise LLMResponseError(f"Could not get valid JSON: {response.content[:200]}")
        return parsed

    def simple_json(
        self,
        system_prompt: str,
        user_message: str,
        temperature: float | None = None,
        max_tokens: int | None = None,
        max_retries: int = 1,
    ) -> Any:
        """Single-turn chat_json with a system prompt."""
        messages = [
            Message(role="system", content=system_prompt),
            Message(role="user", content=user_message),
        ]
        return self.chat_json(messages, temperature, max_tokens, max_retries)
