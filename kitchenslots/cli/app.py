"""
Main CLI application using Typer.
"""

import logging
from pathlib import Path
from typing import Annotated, Optional

import pendulum
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from ..config import AppConfig, load_config
from ..domain.availability import slots_for_day
from ..domain.exceptions import InvalidInput, UpstreamUnavailable
from ..domain.models import WEEKDAY_NAMES, AvailabilityResult
from ..services.availability_service import build_service

app = typer.Typer(
    name="kitchenslots",
    help="Check venue slot availability for classes and events",
    add_completion=False
)

console = Console()


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _load(config_file: Optional[Path]) -> AppConfig:
    try:
        return load_config(config_file)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


def _render_result(result: AvailabilityResult) -> None:
    """Print a result as a table of slots with their status."""
    title = f"{result.weekday_name}, {result.date}"
    if result.requested_duration_minutes:
        title += f" ({result.requested_duration_minutes} min booking)"

    if not result.all_slots:
        console.print(f"[yellow]⚠ No slots are offered on {title}.[/yellow]")
        return

    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Slot", style="bold")
    table.add_column("Label")
    table.add_column("Status")

    blocked = set(result.blocked_slots)
    for slot in result.all_slots:
        if result.degraded:
            status = "[yellow]unknown[/yellow]"
        elif slot in blocked:
            status = "[red]blocked[/red]"
        else:
            status = "[green]available[/green]"
        table.add_row(str(slot), slot.label, status)

    console.print()
    console.print(table)
    console.print(
        f"[dim]{len(result.available_slots)} available, {len(result.blocked_slots)} blocked, "
        f"buffer {result.buffer_minutes} min[/dim]"
    )
    if result.degraded:
        console.print("[yellow]⚠ No reservation store configured, blocked status is unknown.[/yellow]")
    console.print()


@app.command()
def check(
    date: Annotated[Optional[str], typer.Argument(help="Date to check (YYYY-MM-DD). Defaults to today.")] = None,
    duration: Annotated[Optional[int], typer.Option("--duration", "-d", help="Length of the planned booking in minutes")] = None,
    config_file: Annotated[Optional[Path], typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml")] = None,
    mock: Annotated[bool, typer.Option("--mock", help="Use bundled mock bookings instead of the store.")] = False,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging.")] = False,
):
    """
    Show which slots are available on a date.

    Examples:

        kitchenslots check 2025-03-13

        kitchenslots check 2025-03-13 --duration 150 --mock
    """
    _configure_logging(verbose)
    config = _load(config_file)

    day = date or pendulum.now(config.timezone).to_date_string()

    if mock:
        console.print("[yellow]⚠  MOCK MODE: using bundled test bookings[/yellow]")

    try:
        service = build_service(config, mock=mock)
        result = service.get_availability(day, requested_duration_minutes=duration)
    except InvalidInput as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)
    except UpstreamUnavailable as e:
        console.print(f"[bold red]Reservation store unavailable:[/bold red] {e}")
        raise typer.Exit(2)

    _render_result(result)


@app.command()
def slots(
    day: Annotated[Optional[int], typer.Option("--day", help="Only slots offered on this weekday (0=Sunday .. 6=Saturday)", min=0, max=6)] = None,
    config_file: Annotated[Optional[Path], typer.Option("--config", "-c", help="Path to config file")] = None,
):
    """
    List the configured slot calendar.
    """
    config = _load(config_file)
    calendar = config.slot_calendar()
    if day is not None:
        calendar = slots_for_day(calendar, day)

    if not calendar:
        console.print("[yellow]No slots configured for that day.[/yellow]")
        return

    table = Table(
        title="Slot calendar",
        show_header=True,
        header_style="bold cyan"
    )
    table.add_column("Slot", style="bold yellow")
    table.add_column("Label")
    table.add_column("Minutes", justify="right")
    table.add_column("Days", style="dim")

    for slot in calendar:
        days = ", ".join(WEEKDAY_NAMES[d][:3] for d in sorted(slot.days_offered))
        table.add_row(str(slot), slot.label, str(slot.duration_minutes), days)

    console.print()
    console.print(table)
    console.print(f"[dim]Buffer after each booking: {config.buffer_minutes} min[/dim]\n")


@app.command()
def serve(
    host: Annotated[str, typer.Option("--host", help="Bind address")] = "127.0.0.1",
    port: Annotated[int, typer.Option("--port", "-p", help="Bind port")] = 8000,
    config_file: Annotated[Optional[Path], typer.Option("--config", "-c", help="Path to config file")] = None,
    mock: Annotated[bool, typer.Option("--mock", help="Use bundled mock bookings instead of the store.")] = False,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging.")] = False,
):
    """
    Run the availability HTTP API.
    """
    import uvicorn

    from ..api import create_app

    _configure_logging(verbose)
    config = _load(config_file)
    console.print(f"[bold cyan]kitchenslots[/bold cyan] listening on http://{host}:{port}")
    uvicorn.run(create_app(config, mock=mock), host=host, port=port, log_level="info")


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]kitchenslots[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()
