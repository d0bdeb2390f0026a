from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from docsplit import main as worker_main
from docsplit.config.settings import Settings
from docsplit.database.connection import apply_schema, close_pool, init_pool
from docsplit.database.repositories.staging_repository import StagingRepository
from docsplit.logging.logger import Log
from docsplit.pdf.factory import PdfInspectorFactory
from docsplit.pipeline.exceptions import PipelineError, RecordNotFoundError
from docsplit.pipeline.models import STEP_RETRY, LogStatus, StageLogEntry
from docsplit.storage.factory import ArtifactStoreFactory
from docsplit.storage.naming import original_title

app = typer.Typer(help="docsplit: split multi-document PDFs into one document per segment")
console = Console()


def _bootstrap() -> Settings:
    settings = Settings()
    Log.configure(settings.log_level)
    init_pool(settings)
    return settings


@app.command()
def run(
    max_records: Optional[int] = typer.Option(None, help="Stop after this many records"),
) -> None:
    """Start the worker loop."""
    worker_main.main(max_records=max_records)


@app.command("init-db")
def init_db() -> None:
    """Create the staging_records and derived_documents tables."""
    _bootstrap()
    try:
        apply_schema()
        console.print("[green]Schema applied[/]")
    finally:
        close_pool()


@app.command()
def enqueue(
    path: Path,
    project_id: int = typer.Option(..., help="Project that receives the derived documents"),
    uploader_id: int = typer.Option(..., help="User recorded as the uploader"),
) -> None:
    """Store a local PDF and create a pending staging record for it."""
    if not path.is_file():
        console.print(f"[red]Error:[/] {path} is not a file")
        raise typer.Exit(1)

    settings = _bootstrap()
    try:
        data = path.read_bytes()
        pages = PdfInspectorFactory.create(settings).page_count(data)
        artifact = ArtifactStoreFactory.create(settings).save(
            data, path.name, "application/pdf"
        )
        record = StagingRepository().create(
            project_id=project_id,
            uploader_id=uploader_id,
            source_file_id=artifact.id,
            source_file_key=artifact.key,
            original_name=original_title(path.name),
        )
    except PipelineError as exc:
        console.print(f"[red]Error:[/] {exc}")
        raise typer.Exit(1)
    finally:
        close_pool()

    console.print(f"[green]Queued record {record.id}[/] ({pages} pages, key {artifact.key})")


@app.command()
def retry(record_id: int) -> None:
    """Re-run the pipeline from scratch for a record in error."""
    _bootstrap()
    repo = StagingRepository()
    try:
        record = repo.find_by_id(record_id)
        entry = StageLogEntry(
            step=STEP_RETRY,
            status=LogStatus.STARTED,
            details="Manual retry requested",
            data={
                "attempt": record.attempt + 1,
                "previousBoundaries": record.boundaries,
                "previousDerivedIds": list(record.derived_ids),
                "previousError": record.error,
            },
        )
        repo.requeue(record_id, entry)
    except RecordNotFoundError as exc:
        console.print(f"[red]Error:[/] {exc}")
        raise typer.Exit(1)
    except PipelineError as exc:
        console.print(f"[red]Error:[/] {exc}")
        raise typer.Exit(2)
    finally:
        close_pool()

    console.print(f"[green]Record {record_id} requeued[/] (attempt {record.attempt + 1})")


@app.command()
def show(record_id: int) -> None:
    """Print a staging record and its stage log."""
    _bootstrap()
    try:
        record = StagingRepository().find_by_id(record_id)
    except RecordNotFoundError as exc:
        console.print(f"[red]Error:[/] {exc}")
        raise typer.Exit(1)
    finally:
        close_pool()

    console.print(f"[bold]Record:[/] {record.id}  [bold]Status:[/] {record.status.value}")
    console.print(f"[bold]Project:[/] {record.project_id}  [bold]Attempt:[/] {record.attempt}")
    console.print(f"[bold]Boundaries:[/] {record.boundaries}")
    console.print(f"[bold]Derived IDs:[/] {record.derived_ids}")
    if record.error:
        console.print(f"[red]Error:[/] {record.error}")

    table = Table(title="Stage log")
    table.add_column("At")
    table.add_column("Step")
    table.add_column("Status")
    table.add_column("Details")
    for raw in record.stage_log:
        table.add_row(
            str(raw.get("at", "")),
            str(raw.get("step", "")),
            str(raw.get("status", "")),
            str(raw.get("details", "")),
        )
    console.print(table)


if __name__ == "__main__":
    app()
