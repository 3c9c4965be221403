"""Syllabus ingestion pipeline.

Extract(syllabus) and Extract(schedule) run concurrently, then
Merge -> Validate -> hand-off to the catalog store. A failed extraction
aborts the run; validation warnings never do.
"""

from __future__ import annotations

import time
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from dataclasses import dataclass, field

import structlog

from syllabus.config.app_config import AppConfig, PipelineConfig, load_app_config
from syllabus.core.extractor import (
    DocumentType,
    ErrorCode,
    ExtractionError,
    SyllabusExtractor,
)
from syllabus.core.merger import merge_records
from syllabus.core.schema import ExtractedRecord
from syllabus.core.validator import validate_record
from syllabus.db.catalog_repository import (
    CatalogError,
    StoreStats,
    save_ingestion,
    store_record,
)
from syllabus.llm.service import LLMGenerationService

logger = structlog.get_logger(__name__)

# =============================================================================
# DATA CLASSES
# =============================================================================


@dataclass
class PipelineResult:
    """Merged record plus the per-document records it came from."""

    record: ExtractedRecord
    warnings: list[str]
    syllabus_record: ExtractedRecord
    schedule_record: ExtractedRecord | None = None


@dataclass
class IngestResult:
    """Result of ingesting documents into the catalog."""

    success: bool
    record: ExtractedRecord | None
    message: str
    warnings: list[str] = field(default_factory=list)
    stats: StoreStats | None = None
    error_code: ErrorCode | None = None


# =============================================================================
# PIPELINE
# =============================================================================


def build_extractor(app_config: AppConfig | None = None) -> SyllabusExtractor:
    """Create an extractor wired to the configured LLM provider."""
    if app_config is None:
        app_config = load_app_config()
    service = LLMGenerationService.from_config(app_config)
    return SyllabusExtractor(service, app_config.extraction)


def _extract_with_attempts(
    extractor: SyllabusExtractor,
    text: str,
    document_type: DocumentType,
    max_attempts: int,
) -> ExtractedRecord:
    """Run one extraction, re-trying failed calls up to max_attempts."""
    attempt = 1
    while True:
        try:
            return extractor.extract(text, document_type)
        except ExtractionError as e:
            if attempt >= max_attempts:
                raise
            logger.warning(
                "pipeline.extraction_retry",
                document_type=document_type.value,
                attempt=attempt,
                code=e.code.value,
            )
            attempt += 1


def _await_record(
    future: Future[ExtractedRecord],
    document_type: DocumentType,
    deadline: float,
    timeout: float,
) -> ExtractedRecord:
    """Wait for one extraction until the shared monotonic deadline."""
    try:
        return future.result(timeout=max(0.0, deadline - time.monotonic()))
    except FutureTimeoutError as e:
        logger.error(
            "pipeline.extraction_timeout",
            document_type=document_type.value,
            timeout=timeout,
        )
        raise ExtractionError(
            ErrorCode.SERVICE_UNAVAILABLE,
            f"{document_type.value} extraction timed out after {timeout:g}s",
        ) from e


def run_pipeline(
    syllabus_text: str,
    schedule_text: str | None = None,
    extractor: SyllabusExtractor | None = None,
    config: PipelineConfig | None = None,
) -> PipelineResult:
    """Extract, merge and validate a syllabus and optional schedule.

    Args:
        syllabus_text: Plain text of the syllabus
        schedule_text: Plain text of the companion schedule, if any
        extractor: Pre-configured extractor (built from config if None)
        config: Timeout and retry settings

    Returns:
        PipelineResult with the merged record and its warnings

    Raises:
        ExtractionError: If either extraction fails or times out
        ValueError: If a document text is empty
    """
    if config is None:
        config = load_app_config().pipeline
    if extractor is None:
        extractor = build_extractor()

    start_time = time.time()
    texts = {DocumentType.SYLLABUS: syllabus_text}
    if schedule_text is not None:
        texts[DocumentType.SCHEDULE] = schedule_text

    timeout = config.extraction_timeout
    # Shared by every extraction wait
    deadline = time.monotonic() + timeout
    pool = ThreadPoolExecutor(max_workers=len(texts), thread_name_prefix="extract")
    try:
        futures = {
            document_type: pool.submit(
                _extract_with_attempts,
                extractor,
                text,
                document_type,
                config.max_attempts,
            )
            for document_type, text in texts.items()
        }
        records = {
            document_type: _await_record(future, document_type, deadline, timeout)
            for document_type, future in futures.items()
        }
    finally:
        # Don't block on a call that is still running after a failure
        pool.shutdown(wait=False, cancel_futures=True)

    syllabus_record = records[DocumentType.SYLLABUS]
    schedule_record = records.get(DocumentType.SCHEDULE)

    merged = merge_records(syllabus_record, schedule_record)
    warnings = validate_record(merged)

    if warnings:
        logger.warning("syllabus.validation_warnings", warnings=warnings)

    logger.info(
        "pipeline.completed",
        documents=len(texts),
        assignments=len(merged.assignments),
        warnings=len(warnings),
        time_ms=int((time.time() - start_time) * 1000),
    )

    return PipelineResult(
        record=merged,
        warnings=warnings,
        syllabus_record=syllabus_record,
        schedule_record=schedule_record,
    )


def ingest_documents(
    course_id: str,
    user_id: str,
    syllabus_text: str,
    schedule_text: str | None = None,
    extractor: SyllabusExtractor | None = None,
    app_config: AppConfig | None = None,
) -> IngestResult:
    """Run the pipeline and persist the merged record for a course.

    Nothing is persisted when an extraction fails. The course must
    already exist in the catalog.

    Returns:
        IngestResult; success is False with a message on failure
    """
    if app_config is None:
        app_config = load_app_config()
    if extractor is None:
        extractor = build_extractor(app_config)

    try:
        result = run_pipeline(
            syllabus_text,
            schedule_text,
            extractor=extractor,
            config=app_config.pipeline,
        )
    except ExtractionError as e:
        logger.error("ingest.extraction_failed", course_id=course_id, code=e.code.value)
        return IngestResult(
            success=False,
            record=None,
            message=f"Extraction failed: {e}",
            error_code=e.code,
        )
    except ValueError as e:
        return IngestResult(success=False, record=None, message=str(e))

    try:
        stats = store_record(course_id, user_id, result.record)
    except CatalogError as e:
        return IngestResult(
            success=False,
            record=result.record,
            message=str(e),
            warnings=result.warnings,
        )

    save_ingestion(course_id, user_id, DocumentType.SYLLABUS.value, result.record)
    if result.schedule_record is not None:
        save_ingestion(
            course_id, user_id, DocumentType.SCHEDULE.value, result.schedule_record
        )

    return IngestResult(
        success=True,
        record=result.record,
        message=(
            f"Stored {stats.grade_weights_stored} grading weights and "
            f"{stats.assignments_inserted} new assignments"
        ),
        warnings=result.warnings,
        stats=stats,
    )
