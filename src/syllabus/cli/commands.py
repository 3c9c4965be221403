"""CLI commands for syllabus ingestion.

Commands:
- extract: Extract a record from one document's text
- merge: Merge a saved syllabus record with a saved schedule record
- check: Validate a saved record and list warnings
- ingest: Extract, merge, validate and store documents for a course
- show: Show what the catalog holds for a course

Document text must already be plain text (no PDF/OCR handling here).
"""

import json
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from syllabus.config.app_config import load_app_config
from syllabus.core.extractor import DocumentType, ExtractionError, SyllabusExtractor
from syllabus.core.merger import merge_records
from syllabus.core.pipeline import ingest_documents
from syllabus.core.schema import ExtractedRecord, load_record
from syllabus.core.validator import validate_record
from syllabus.db.catalog_repository import (
    CatalogError,
    get_course_syllabus,
    upsert_course,
)
from syllabus.db.database import init_db
from syllabus.llm.service import LLMGenerationService

app = typer.Typer(
    name="syllabus",
    help="Extract grading weights, assignments and schedules from course documents.",
    no_args_is_help=True,
)

console = Console()


def _read_text_or_exit(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except OSError as e:
        console.print(f"[red]✗ Cannot read {path}: {e}[/red]")
        raise typer.Exit(code=1)


def _load_record_or_exit(path: Path) -> ExtractedRecord:
    try:
        return load_record(path)
    except (OSError, ValueError) as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(code=1)


def _make_extractor(provider: str | None, model: str | None) -> SyllabusExtractor:
    app_config = load_app_config()
    service = LLMGenerationService.from_config(
        app_config, provider=provider, model=model
    )
    return SyllabusExtractor(service, app_config.extraction)


def _print_warnings(warnings: list[str]) -> None:
    if not warnings:
        console.print("[green]✓ No consistency warnings[/green]")
        return
    for warning in warnings:
        console.print(f"  [yellow]⚠ {warning}[/yellow]")


def _print_summary(record: ExtractedRecord) -> None:
    if record.course_info is not None:
        info = record.course_info
        label = " ".join(part for part in (info.code, info.name) if part)
        if label:
            console.print(f"  [dim]course:[/dim]      {label}")
        if info.instructor:
            console.print(f"  [dim]instructor:[/dim]  {info.instructor}")

    if record.grading_weights:
        table = Table(title="Grading weights")
        table.add_column("Category")
        table.add_column("Weight", justify="right")
        for weight in record.grading_weights:
            table.add_row(weight.name, f"{weight.weight_fraction * 100:.1f}%")
        console.print(table)

    console.print(f"  [dim]assignments:[/dim] {len(record.assignments)}")
    console.print(f"  [dim]weeks:[/dim]       {len(record.schedule or [])}")


def _write_record(record: ExtractedRecord, out: Path | None) -> None:
    payload = json.dumps(record.to_dict(), indent=2, ensure_ascii=False)
    if out is None:
        console.print_json(payload)
        return
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(payload, encoding="utf-8")
    console.print(f"  [dim]saved:[/dim]       {out}")


@app.command()
def extract(
    file: Path = typer.Argument(..., help="Plain-text document"),
    doc_type: DocumentType = typer.Option(
        DocumentType.SYLLABUS, "--type", "-t", help="Document type: syllabus or schedule"
    ),
    out: Path | None = typer.Option(None, "--out", "-o", help="Write the record as JSON"),
    provider: str | None = typer.Option(
        None, "--provider", "-p", help="LLM provider: lmstudio, openai, anthropic"
    ),
    model: str | None = typer.Option(None, "--model", "-m", help="Model name (overrides config)"),
) -> None:
    """Extract a structured record from one document."""
    text = _read_text_or_exit(file)

    console.print(f"[blue]Extracting {doc_type.value} from {file.name}...[/blue]")
    try:
        record = _make_extractor(provider, model).extract(text, doc_type)
    except (ExtractionError, ValueError) as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(code=1)

    console.print("[green]✓ Extraction complete[/green]")
    _print_summary(record)
    _write_record(record, out)


@app.command()
def merge(
    syllabus_record: Path = typer.Argument(..., help="Record extracted from the syllabus"),
    schedule_record: Path | None = typer.Argument(
        None, help="Record extracted from the schedule"
    ),
    out: Path | None = typer.Option(None, "--out", "-o", help="Write the merged record"),
) -> None:
    """Merge saved records and report consistency warnings."""
    primary = _load_record_or_exit(syllabus_record)
    secondary = _load_record_or_exit(schedule_record) if schedule_record else None

    merged = merge_records(primary, secondary)
    _print_summary(merged)
    _print_warnings(validate_record(merged))
    _write_record(merged, out)


@app.command()
def check(
    record_file: Path = typer.Argument(..., help="Saved record (JSON)"),
) -> None:
    """Validate a saved record. Warnings never change the exit code."""
    record = _load_record_or_exit(record_file)
    _print_summary(record)
    _print_warnings(validate_record(record))


@app.command()
def ingest(
    syllabus_file: Path = typer.Argument(..., help="Plain-text syllabus"),
    course: str = typer.Option(..., "--course", "-c", help="Course ID"),
    schedule_file: Path | None = typer.Option(
        None, "--schedule", "-s", help="Plain-text companion schedule"
    ),
    user: str = typer.Option("local", "--user", "-u", help="Owner user ID"),
    db: Path | None = typer.Option(None, "--db", help="SQLite database path"),
) -> None:
    """Extract, merge, validate and store course documents."""
    app_config = load_app_config()
    init_db(db or app_config.db_path)
    upsert_course(course, user)

    syllabus_text = _read_text_or_exit(syllabus_file)
    schedule_text = _read_text_or_exit(schedule_file) if schedule_file else None

    console.print(f"[blue]Ingesting documents for {course}...[/blue]")
    result = ingest_documents(
        course_id=course,
        user_id=user,
        syllabus_text=syllabus_text,
        schedule_text=schedule_text,
        extractor=_make_extractor(None, None),
        app_config=app_config,
    )

    if not result.success:
        console.print(f"[red]✗ {result.message}[/red]")
        raise typer.Exit(code=1)

    console.print(f"[green]✓ {result.message}[/green]")
    if result.stats and result.stats.assignments_skipped:
        console.print(
            f"  [dim]skipped:[/dim]     {result.stats.assignments_skipped} already stored"
        )
    _print_summary(result.record)
    _print_warnings(result.warnings)


@app.command()
def show(
    course: str = typer.Argument(..., help="Course ID"),
    db: Path | None = typer.Option(None, "--db", help="SQLite database path"),
) -> None:
    """Show stored grading weights and assignments for a course."""
    init_db(db or load_app_config().db_path)

    try:
        data = get_course_syllabus(course)
    except CatalogError as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(code=1)

    weights = Table(title=f"{course}: grading weights")
    weights.add_column("Category")
    weights.add_column("Weight", justify="right")
    for row in data["grade_weights"]:
        weights.add_row(row["name"], f"{row['weight_fraction'] * 100:.1f}%")
    console.print(weights)

    assignments = Table(title=f"{course}: assignments")
    for column in ("Title", "Type", "Due", "Week", "Category"):
        assignments.add_column(column)
    for row in data["assignments"]:
        assignments.add_row(
            row["title"],
            row["assignment_type"],
            row["due_date"] or "-",
            str(row["week_number"] or "-"),
            row["weight_category"] or "-",
        )
    console.print(assignments)
    console.print(f"  [dim]ingestions:[/dim]  {len(data['syllabus_records'])}")


def main() -> None:
    """Console-script entry point."""
    app()


if __name__ == "__main__":
    main()
