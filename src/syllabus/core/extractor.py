"""Extraction engine.

Responsibilities:
- Pick the instruction template for a document type (syllabus | schedule)
- Send template + document text to the structured-generation service
- Check the response against the record schema; reject it whole if it
  does not conform

The engine is stateless and never retries; retry policy belongs to the
caller (see syllabus.core.pipeline).
"""

from __future__ import annotations

import time
from enum import Enum
from typing import Any

import structlog

from syllabus.config.app_config import ExtractionConfig
from syllabus.core.schema import ExtractedRecord, ParseErr, parse_record
from syllabus.llm.client import LLMError, LLMResponseError
from syllabus.llm.service import GenerationService
from syllabus.prompts.registry import get_prompt

logger = structlog.get_logger(__name__)

# =============================================================================
# TYPES
# =============================================================================


class DocumentType(str, Enum):
    """Kinds of course document the engine knows how to read."""

    SYLLABUS = "syllabus"
    SCHEDULE = "schedule"

    @property
    def template_key(self) -> str:
        """Prompt registry key of this type's instruction template."""
        return f"extraction/{self.value}"


class ErrorCode(str, Enum):
    """Why an extraction call failed."""

    MALFORMED_RESPONSE = "MALFORMED_RESPONSE"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"


class ExtractionError(Exception):
    """Extraction failed; no record was produced."""

    def __init__(self, code: ErrorCode, reason: str):
        self.code = code
        self.reason = reason
        super().__init__(f"{code.value}: {reason}")


# =============================================================================
# ENGINE
# =============================================================================


def build_instructions(
    text: str,
    document_type: DocumentType,
    max_input_chars: int | None = None,
) -> str:
    """Compose the instruction template with the document text."""
    if max_input_chars is not None and len(text) > max_input_chars:
        logger.warning(
            "extraction.input_truncated",
            document_type=document_type.value,
            chars=len(text),
            limit=max_input_chars,
        )
        text = text[:max_input_chars]

    return get_prompt(document_type.template_key, document_text=text)


class SyllabusExtractor:
    """Turns raw document text into a validated ExtractedRecord."""

    def __init__(
        self,
        service: GenerationService,
        config: ExtractionConfig | None = None,
    ):
        self.service = service
        self.config = config or ExtractionConfig()

    def _generate(self, instructions: str, document_type: DocumentType) -> Any:
        try:
            return self.service.generate(
                instructions, temperature=self.config.temperature
            )
        except LLMResponseError as e:
            logger.warning(
                "extraction.malformed",
                document_type=document_type.value,
                error=str(e),
            )
            raise ExtractionError(ErrorCode.MALFORMED_RESPONSE, str(e)) from e
        except LLMError as e:
            logger.error(
                "extraction.service_unavailable",
                document_type=document_type.value,
                error=str(e),
            )
            raise ExtractionError(ErrorCode.SERVICE_UNAVAILABLE, str(e)) from e

    def extract(
        self,
        text: str,
        document_type: DocumentType | str = DocumentType.SYLLABUS,
    ) -> ExtractedRecord:
        """Extract a structured record from document text.

        Args:
            text: Plain text of the document (already OCR'd/extracted)
            document_type: DocumentType or its string value

        Returns:
            ExtractedRecord conforming to the schema

        Raises:
            ValueError: If the text is empty or the document type unknown
            ExtractionError: MALFORMED_RESPONSE if the service output does
                not match the schema, SERVICE_UNAVAILABLE if the call failed
        """
        document_type = DocumentType(document_type)
        if not text or not text.strip():
            raise ValueError("Document text is empty")

        start_time = time.time()
        logger.info(
            "extraction.started",
            document_type=document_type.value,
            chars=len(text),
        )

        instructions = build_instructions(
            text, document_type, self.config.max_input_chars
        )
        raw = self._generate(instructions, document_type)

        result = parse_record(raw)
        if isinstance(result, ParseErr):
            logger.warning(
                "extraction.malformed",
                document_type=document_type.value,
                reason=result.reason,
            )
            raise ExtractionError(ErrorCode.MALFORMED_RESPONSE, result.reason)

        record = result.record
        logger.info(
            "extraction.completed",
            document_type=document_type.value,
            grading_weights=len(record.grading_weights),
            assignments=len(record.assignments),
            schedule_weeks=len(record.schedule or []),
            time_ms=int((time.time() - start_time) * 1000),
        )
        return record


def extract_record(
    text: str,
    document_type: DocumentType | str,
    service: GenerationService,
    config: ExtractionConfig | None = None,
) -> ExtractedRecord:
    """Convenience wrapper around SyllabusExtractor.extract."""
    return SyllabusExtractor(service, config).extract(text, document_type)
