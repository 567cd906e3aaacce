"""CLI for skinscores: serve / seed-templates / score / aggregate commands."""

from __future__ import annotations

import json
from datetime import date, datetime, time, timedelta, timezone
from pathlib import Path
from typing import Any, Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from skinscores.core.config import AppSettings
from skinscores.core.logging_config import setup_logging
from skinscores.exceptions import SkinScoresError
from skinscores.models import ScoreTemplate
from skinscores.persistence.factory import create_document_store
from skinscores.persistence.protocols import IDocumentStore
from skinscores.scoring.engine import compute_outcome
from skinscores.scoring.values import format_number
from skinscores.services.aggregation_service import NightlyAggregationService
from skinscores.services.template_store import TemplateRepository, load_templates_file

app = typer.Typer(name="skinscores", help="Template-driven clinical scoring service")
console = Console()


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v")) -> None:
    """Configure logging once for every command."""
    settings = AppSettings()
    if verbose:
        settings.observability.log_level = "DEBUG"
    setup_logging(settings.observability)


def _open_store() -> IDocumentStore:
    return create_document_store(AppSettings().persistence)


def _read_json(path: Path) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise typer.BadParameter(f"{path} is not valid JSON: {e}") from e


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, help="Bind address (default from SKINSCORES_API_HOST)"),
    port: Optional[int] = typer.Option(None, help="Port (default from SKINSCORES_API_PORT)"),
    reload: bool = typer.Option(False, "--reload", help="Auto-reload on code changes"),
) -> None:
    """Run the HTTP API under uvicorn."""
    import uvicorn

    api_config = AppSettings().api
    uvicorn.run(
        "skinscores.api.app:app",
        host=host or api_config.host,
        port=port or api_config.port,
        reload=reload,
        log_config=None,
    )


@app.command("seed-templates")
def seed_templates(
    templates_file: Path = typer.Argument(..., exists=True, dir_okay=False, help="JSON array of templates"),
) -> None:
    """Store every template in FILE under ``<slug>-v<version>``."""
    try:
        templates = load_templates_file(templates_file)
    except (ValueError, ValidationError) as e:
        console.print(f"[red]Cannot load templates: {e}[/red]")
        raise typer.Exit(code=1)

    repository = TemplateRepository(_open_store())
    for template in templates:
        doc_id = repository.save(template)
        console.print(f"Seeded [cyan]{doc_id}[/cyan] ({template.name})")
    console.print(f"[green]{len(templates)} template(s) stored[/green]")


@app.command()
def score(
    template_file: Path = typer.Argument(..., exists=True, dir_okay=False, help="Template JSON"),
    inputs_file: Path = typer.Argument(..., exists=True, dir_okay=False, help="Inputs JSON object"),
) -> None:
    """Score INPUTS_FILE against TEMPLATE_FILE locally, without persisting anything."""
    raw_template = _read_json(template_file)
    if isinstance(raw_template, list):
        if len(raw_template) != 1:
            raise typer.BadParameter(f"Expected a single template in {template_file}")
        raw_template = raw_template[0]
    raw_inputs = _read_json(inputs_file)
    if not isinstance(raw_inputs, dict):
        raise typer.BadParameter(f"Expected a JSON object of inputs in {inputs_file}")

    try:
        template = ScoreTemplate.model_validate(raw_template)
    except ValidationError as e:
        console.print(f"[red]Invalid template: {e}[/red]")
        raise typer.Exit(code=1)

    try:
        outcome = compute_outcome(template, raw_inputs)
    except SkinScoresError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(code=1)

    table = Table(title=template.name)
    table.add_column("Input", style="cyan")
    table.add_column("Points", justify="right")
    for contribution in outcome.computation.contributions:
        table.add_row(contribution.label, format_number(contribution.points))
    console.print(table)

    console.print(f"\n[bold]Score:[/bold] {format_number(outcome.score)}")
    console.print(f"[bold]{outcome.interpretation.label}:[/bold] {outcome.interpretation.guidance}")
    for block in outcome.copy_blocks:
        console.print(f"\n{block}")


@app.command()
def aggregate(
    day: Optional[str] = typer.Option(None, "--date", help="UTC day to aggregate (YYYY-MM-DD); default yesterday"),
) -> None:
    """Roll up one UTC day of results into per-template snapshots."""
    now: Optional[datetime] = None
    if day:
        try:
            target = date.fromisoformat(day)
        except ValueError as e:
            raise typer.BadParameter(f"--date must be YYYY-MM-DD: {e}") from e
        # The job aggregates the day before ``now``
        now = datetime.combine(target + timedelta(days=1), time.min, tzinfo=timezone.utc)

    snapshots = NightlyAggregationService(_open_store()).run(now)
    if not snapshots:
        console.print("No results in window; nothing aggregated.")
        return

    table = Table(title="Aggregate snapshots")
    table.add_column("Snapshot", style="cyan")
    table.add_column("Count", justify="right")
    table.add_column("Numeric", justify="right")
    table.add_column("Average", justify="right")
    table.add_column("Min", justify="right")
    table.add_column("Max", justify="right")
    for snapshot in snapshots:
        table.add_row(
            snapshot.id,
            str(snapshot.count),
            str(snapshot.numeric_count),
            _fmt_optional(snapshot.average_score),
            _fmt_optional(snapshot.min_score),
            _fmt_optional(snapshot.max_score),
        )
    console.print(table)


@app.command("clear-aggregates")
def clear_aggregates(
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Delete every aggregate snapshot."""
    if not yes:
        typer.confirm("Delete all aggregate snapshots?", abort=True)
    deleted = NightlyAggregationService(_open_store()).clear()
    console.print(f"[green]Deleted {deleted} snapshot(s)[/green]")


def _fmt_optional(value: Optional[float]) -> str:
    return "-" if value is None else format_number(round(value, 2))


if __name__ == "__main__":
    app()
