"""CLI entry point for the schedule poller.

Usage:
    python -m fbpool.ingestion.runner schedule --week 3
    python -m fbpool.ingestion.runner clock
    python -m fbpool.ingestion.runner standings --picks picks.json
    python -m fbpool.ingestion.runner poll --picks picks.json
"""

import logging
from datetime import datetime
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from fbpool.config import get_settings

app = typer.Typer(help="fbpool confidence pool CLI")
console = Console()


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


@app.command()
def schedule(
    week: int = typer.Option(..., "--week", help="Week number (1-based)"),
    log_level: str = typer.Option("INFO", "--log-level", help="Logging level"),
) -> None:
    """Fetch one week's page and print the games found on it."""
    _setup_logging(log_level)
    s = get_settings()

    from fbpool.ingestion.schedule import extract_week
    from fbpool.ingestion.source import FETCH_ERRORS, fetch_schedule_page

    try:
        page = fetch_schedule_page(week)
    except FETCH_ERRORS as e:
        console.print(f"[red]Could not read week {week}: {e}[/red]")
        raise typer.Exit(1)

    extractor = extract_week(page, s.season_year, s.schedule_tz)

    table = Table(title=f"Week {week}")
    table.add_column("Day")
    table.add_column("Status")
    table.add_column("Visitor")
    table.add_column("Score", justify="right")
    table.add_column("Home")
    table.add_column("Score", justify="right")
    for g in extractor.games:
        table.add_row(
            g.day.strftime("%a %b %d"),
            g.status_text,
            g.visitor,
            g.score_visitor,
            g.home,
            g.score_home,
        )
    console.print(table)

    bounds = extractor.bounds
    if bounds is not None:
        console.print(f"[bold]Week span:[/bold] {bounds[0]:%a %b %d} → {bounds[1]:%a %b %d}")
    if extractor.failed:
        console.print("[yellow]⚠ Page ended mid-row, list may be incomplete.[/yellow]")


@app.command()
def clock(
    log_level: str = typer.Option("INFO", "--log-level", help="Logging level"),
) -> None:
    """Load the season and print the current week."""
    _setup_logging(log_level)

    from fbpool.ingestion.loader import build_state
    from fbpool.season import SeasonConfigError

    try:
        state = build_state()
    except SeasonConfigError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    week = state.clock.current_week
    console.print(f"[bold]Current week:[/bold] {week.num} (index {state.clock.week_index})")
    console.print(f"[bold]Span:[/bold]         {week.start} → {week.extended_end}")
    console.print(f"[bold]Season ended:[/bold] {state.clock.season_ended}")


@app.command()
def standings(
    picks: str = typer.Option(..., "--picks", help="JSON file with members and their picks"),
    week: Optional[int] = typer.Option(None, "--week", help="Also show this week's leaderboard"),
    log_level: str = typer.Option("INFO", "--log-level", help="Logging level"),
) -> None:
    """Score every week and print the pool standings."""
    _setup_logging(log_level)

    from fbpool.ingestion.loader import build_state, load_users
    from fbpool.scoring import standings as compute_standings
    from fbpool.scoring import update_all_scores, week_leaderboard

    state = build_state(load_users(picks))
    update_all_scores(state)

    table = Table(title="Standings")
    table.add_column("Player")
    table.add_column("Total", justify="right")
    table.add_column("Weeks played", justify="right")
    table.add_column("Weeks won", justify="right")
    table.add_column("Avg / week", justify="right")
    for row in compute_standings(state):
        table.add_row(row.name, str(row.total), str(row.weeks_played), str(row.weeks_won), row.ave_per_week)
    console.print(table)

    if week is not None:
        if not 1 <= week <= state.num_weeks:
            console.print(f"[red]Week must be between 1 and {state.num_weeks}[/red]")
            raise typer.Exit(1)
        board = Table(title=f"Week {week}")
        board.add_column("Player")
        board.add_column("Points", justify="right")
        for name, points in week_leaderboard(state, week - 1):
            board.add_row(name, str(points))
        console.print(board)


@app.command()
def poll(
    picks: str = typer.Option(..., "--picks", help="JSON file with members and their picks"),
    log_level: str = typer.Option("INFO", "--log-level", help="Logging level"),
) -> None:
    """Run the poll loop in the foreground until interrupted."""
    _setup_logging(log_level)
    s = get_settings()

    from fbpool.ingestion.loader import build_state, load_users
    from fbpool.ingestion.poller import PollScheduler
    from fbpool.scoring import update_all_scores

    state = build_state(load_users(picks))

    callbacks = {}
    if s.publishing_enabled:
        from fbpool.publish import Publisher

        publisher = Publisher(s.season_year)
        callbacks = {
            "on_page": publisher.page,
            "on_games_updated": publisher.games,
            "on_scores_changed": publisher.user_week,
        }
        console.print("[bold]Publishing:[/bold] supabase")
    else:
        console.print("[dim]Publishing disabled (no Supabase settings)[/dim]")

    update_all_scores(state, callbacks.get("on_scores_changed"))

    scheduler = PollScheduler.from_settings(state, s, **callbacks)
    console.print(f"[cyan]▶ Polling from week {state.clock.current_week.num} ({datetime.now():%Y-%m-%d %H:%M})...[/cyan]")
    scheduler.start()
    try:
        while scheduler.running:
            scheduler.join(1.0)
    except KeyboardInterrupt:
        console.print("[yellow]Stopping...[/yellow]")
    finally:
        scheduler.stop(timeout=5.0)
    console.print("[green]✓ Poller stopped.[/green]")


if __name__ == "__main__":
    app()
