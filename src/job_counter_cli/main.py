"""CLI entrypoint using typer."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Literal, cast

import typer
from rich.console import Console

from job_counter_agents.agents.rules_resolver import resolve_file
from job_counter_agents.observability import configure_logging, configure_tracing
from job_counter_agents.orchestrator.pipeline import Pipeline
from job_counter_agents.tools.postcodes import postcode_universe
from job_counter_agents.tools.recency import classify_recency
from job_counter_core.config.settings import Settings
from job_counter_core.constants import REGIONAL_AUSTRALIA_FLAT, REMOTE_VERY_REMOTE_FLAT
from job_counter_core.exceptions import JobCounterError
from job_counter_core.models.run import RunConfig

app = typer.Typer(
    name="job-counter",
    help="Count recent regional job postings per eligible postcode",
)
console = Console()


@app.command()
def resolve(
    rules: Path | None = typer.Argument(None, help="Rules document (default: JC_RULES_PATH)"),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Enable debug logging"),
) -> None:
    """Expand the rules document's ranges into flat postcode sets, in place."""
    settings = Settings()
    if verbose:
        settings.log_level = "DEBUG"
    configure_logging(settings)

    rules_path = rules or settings.rules_path
    try:
        resolved, gaps = resolve_file(rules_path)
        universe = postcode_universe(resolved)
    except JobCounterError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(code=1) from exc

    definitions = resolved["definitions"]
    console.print(f"[bold green]Resolved:[/bold green] {rules_path}")
    console.print(f"  Regional Australia: {len(definitions[REGIONAL_AUSTRALIA_FLAT])}")
    console.print(f"  Remote / very remote: {len(definitions[REMOTE_VERY_REMOTE_FLAT])}")
    console.print(f"  Postcode universe: {len(universe)}")
    for gap in gaps:
        console.print(f"  [yellow]Not expanded (ALL):[/yellow] {gap}")


@app.command()
def count(
    rules: Path | None = typer.Option(None, "--rules", help="Rules document"),
    report: Path | None = typer.Option(None, "--report", help="Report output path"),
    window_days: int | None = typer.Option(
        None, "--window-days", min=1, help="Recency window in days"
    ),
    max_pages: int | None = typer.Option(
        None, "--max-pages", min=1, help="Result pages per query"
    ),
    policy: str | None = typer.Option(
        None, "--policy", help="Cross-group counting: 'sum' or 'dedupe'"
    ),
    sessions: int | None = typer.Option(
        None, "--sessions", min=1, help="Parallel browser sessions"
    ),
    skip_resolve: bool = typer.Option(
        False, "--skip-resolve", help="Use the flat sets already in the rules document"
    ),
    headed: bool = typer.Option(False, "--headed", help="Show the browser window"),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Enable debug logging"),
) -> None:
    """Resolve the rules, count recent postings per postcode and write the report."""
    settings = Settings()
    if window_days is not None:
        settings.window_days = window_days
    if max_pages is not None:
        settings.max_pages = max_pages
    if policy is not None:
        if policy not in ("sum", "dedupe"):
            console.print(f"[red]Error:[/red] unknown policy {policy!r}")
            raise typer.Exit(code=1)
        settings.count_policy = cast(Literal["sum", "dedupe"], policy)
    if sessions is not None:
        settings.max_sessions = sessions
    if headed:
        settings.headless = False
    if verbose:
        settings.log_level = "DEBUG"

    configure_logging(settings)
    configure_tracing(settings)

    config = RunConfig(
        rules_path=rules or settings.rules_path,
        report_path=report or settings.report_path,
        skip_resolve=skip_resolve,
    )
    console.print(f"[bold green]Starting run:[/bold green] {config.run_id}")

    result = asyncio.run(Pipeline(settings).run(config))

    console.print(f"\n[bold]Run complete:[/bold] {result.status}")
    console.print(f"  Postcodes: {result.postcodes}")
    succeeded = result.pairs_attempted - result.pairs_failed
    console.print(f"  Queries: {succeeded}/{result.pairs_attempted}")
    console.print(f"  Postings counted: {result.total_count}")
    console.print(f"  Duration: {result.duration_seconds:.1f}s")

    if result.report_path:
        console.print(f"\n[bold]Report:[/bold] {result.report_path}")

    for warning in result.warnings:
        console.print(f"[yellow]Warning:[/yellow] {warning}")

    fatal = [e for e in result.errors if e.is_fatal]
    for error in fatal:
        console.print(f"[red]Error:[/red] {error.error_type}: {error.error_message}")

    if result.status == "failed":
        raise typer.Exit(code=1)


@app.command()
def classify(
    text: str = typer.Argument(..., help="Posting text, e.g. 'Added 3 days ago'"),
    window_days: int = typer.Option(10, "--window-days", help="Recency window in days"),
) -> None:
    """Show how a posting's recency text is classified."""
    console.print(classify_recency(text, window_days).value)


@app.command()
def version() -> None:
    """Show version."""
    console.print("job-counter v0.1.0")


if __name__ == "__main__":
    app()
