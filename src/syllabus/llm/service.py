"""Structured-generation service boundary.

The extraction engine only needs one capability: send instructions,
get back decoded JSON. GenerationService names that capability;
LLMGenerationService provides it on top of LLMClient.
"""

from __future__ import annotations

from typing import Any, Protocol

import structlog

from syllabus.config.app_config import AppConfig, load_app_config
from syllabus.llm.client import LLMClient, LLMConfig

logger = structlog.get_logger(__name__)

SYSTEM_PROMPT_EXTRACTION = """You convert academic course documents into structured data.

RULES:
1. Use ONLY information present in the document - do not invent anything
2. Reply ONLY with valid JSON, no markdown and no commentary
3. Follow the requested JSON structure exactly"""


class GenerationService(Protocol):
    """Turns instructions into schema-shaped data (treated as a black box)."""

    def generate(self, instructions: str, temperature: float | None = None) -> Any:
        ...


class LLMGenerationService:
    """GenerationService backed by an OpenAI-compatible chat endpoint."""

    def __init__(
        self,
        client: LLMClient,
        max_tokens: int | None = None,
        json_repair_retries: int = 0,
    ):
        self.client = client
        self.max_tokens = max_tokens
        self.json_repair_retries = json_repair_retries

    @classmethod
    def from_config(
        cls,
        app_config: AppConfig | None = None,
        llm_config: LLMConfig | None = None,
        provider: str | None = None,
        model: str | None = None,
    ) -> LLMGenerationService:
        """Build a service from application and LLM configuration."""
        if app_config is None:
            app_config = load_app_config()

        client = LLMClient(config=llm_config, provider=provider, model=model)
        return cls(
            client=client,
            max_tokens=app_config.extraction.max_tokens,
            json_repair_retries=app_config.extraction.json_repair_retries,
        )

    def generate(self, instructions: str, temperature: float | None = None) -> Any:
        """Send instructions and return the decoded JSON response.

        Raises:
            LLMResponseError: If the output is not JSON
            LLMError: If the call itself fails
        """
        logger.debug("generation_requested", chars=len(instructions), temperature=temperature)
        return self.client.simple_json(
            system_prompt=SYSTEM_PROMPT_EXTRACTION,
            user_message=instructions,
            temperature=temperature,
            max_tokens=self.max_tokens,
            max_retries=self.json_repair_retries,
        )
