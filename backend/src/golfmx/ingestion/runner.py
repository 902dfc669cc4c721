"""CLI entry point for matchup ingestion.

Usage:
    python -m golfmx.ingestion.runner ingest --tour pga
    python -m golfmx.ingestion.runner ingest-all
    python -m golfmx.ingestion.runner resolve-tournament "Wyndham Championship" --tour pga
"""

import logging

import typer
from rich.console import Console
from rich.table import Table

from golfmx.config import Tour, get_settings
from golfmx.models.results import IngestResult, IngestStatus

app = typer.Typer(help="Golf matchup ingestion CLI")
console = Console()

_STATUS_COLORS = {
    IngestStatus.SUCCESS: "green",
    IngestStatus.TEE_TIMES_REFRESHED: "green",
    IngestStatus.NO_MATCHUPS: "dim",
    IngestStatus.TOURNAMENT_NOT_FOUND: "yellow",
    IngestStatus.TOURNAMENT_UNSUPPORTED: "yellow",
    IngestStatus.FAILED: "red",
}


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def _print_result(result: IngestResult) -> None:
    color = _STATUS_COLORS.get(result.status, "white")
    console.print(f"  [{color}]{result.status.value}: {result.message}[/{color}]")

    table = Table(title=f"Ingestion Summary ({result.tour.upper()})")
    table.add_column("Metric")
    table.add_column("Value", justify="right")
    table.add_row("Event", result.event_name or "-")
    table.add_row("Tournament id", str(result.tournament_id or "-"))
    table.add_row("Round", str(result.round_num or "-"))
    table.add_row("Players upserted", str(result.players_upserted))
    table.add_row("Snapshots", str(result.snapshots_written))
    for market_type in ("3ball", "2ball"):
        table.add_row(f"Inserted {market_type}", str(result.inserted_by_type.get(market_type, 0)))
        table.add_row(f"Updated {market_type}", str(result.updated_by_type.get(market_type, 0)))
    for market_type in ("3ball", "2ball"):
        coverage = result.diagnostics.get(f"odds_{market_type}")
        if coverage:
            table.add_row(
                f"{market_type} with primary odds",
                f"{coverage['with_primary']}/{coverage['total']}",
            )
    console.print(table)

    suggestions = result.diagnostics.get("suggestions")
    if suggestions:
        console.print("[yellow]Closest known tournaments:[/yellow]")
        for s in suggestions:
            console.print(f"  {s['name']} ({s['confidence']:.2f})")
    if result.error:
        console.print(f"[red]✗ {result.error}[/red]")


@app.command()
def ingest(
    tour: Tour = typer.Option(Tour.PGA, help="Tour to ingest"),
    log_level: str = typer.Option("INFO", "--log-level", help="Logging level"),
) -> None:
    """Run one ingestion cycle for a tour."""
    _setup_logging(log_level)
    from golfmx.ingestion.datagolf import run_cycle

    console.print(f"[bold]Tour:[/bold] {tour.value}")
    console.print("[cyan]▶ Ingesting matchups...[/cyan]")
    result = run_cycle(tour, get_settings())
    _print_result(result)
    if result.status is IngestStatus.FAILED:
        raise typer.Exit(1)


@app.command("ingest-all")
def ingest_all(
    log_level: str = typer.Option("INFO", "--log-level", help="Logging level"),
) -> None:
    """Run one cycle per tour, one after another."""
    _setup_logging(log_level)
    from golfmx.ingestion.datagolf import run_cycle

    settings = get_settings()
    failures = 0
    for tour in Tour:
        console.print(f"[cyan]▶ Ingesting {tour.value}...[/cyan]")
        result = run_cycle(tour, settings)
        _print_result(result)
        if result.status is IngestStatus.FAILED:
            failures += 1

    if failures:
        console.print(f"[yellow]⚠ {failures} tour(s) failed. Check ingestion_errors table.[/yellow]")
        raise typer.Exit(1)
    console.print("[green]✓ All tours done.[/green]")


@app.command("resolve-tournament")
def resolve_tournament(
    event_name: str = typer.Argument(..., help="Event name as the feed reports it"),
    tour: Tour = typer.Option(Tour.PGA, help="Tour the event belongs to"),
    log_level: str = typer.Option("WARNING", "--log-level", help="Logging level"),
) -> None:
    """Show how an event name resolves against stored tournaments."""
    _setup_logging(log_level)
    from golfmx.db import Database
    from golfmx.tournaments import TournamentResolver

    resolver = TournamentResolver(Database.from_settings(get_settings()))
    match = resolver.resolve(event_name, tour.value)
    if match.found:
        console.print(
            f"[green]✓ {match.name} (id={match.tournament_id}, tour={match.tour}, "
            f"{match.match_type.value}, confidence {match.confidence:.2f})[/green]"
        )
        return

    console.print(f"[yellow]No tournament found for {event_name!r} on {tour.value}[/yellow]")
    for s in resolver.suggest(event_name, tour.value):
        console.print(f"  {s['name']} ({s['confidence']:.2f})")
    raise typer.Exit(1)


if __name__ == "__main__":
    app()
