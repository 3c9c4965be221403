"""LLM access: OpenAI-compatible client and the generation service adapter."""

from syllabus.llm.client import (
    LLMClient,
    LLMConfig,
    LLMConnectionError,
    LLMError,
    LLMResponseError,
    Message,
)
from syllabus.llm.service import GenerationService, LLMGenerationService

__all__ = [
    "GenerationService",
    "LLMClient",
    "LLMConfig",
    "LLMConnectionError",
    "LLMError",
    "LLMGenerationService",
    "LLMResponseError",
    "Message",
]
