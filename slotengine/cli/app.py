"""
Main CLI application using Typer.
"""

import asyncio
import logging
from pathlib import Path
from typing import Annotated, Optional

import pendulum
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from ..adapters.config_repository import ConfigScheduleRepository
from ..adapters.json_calendar_client import JsonCalendarClient
from ..config import AppConfig, get_default_config_path
from ..domain.exceptions import SlotEngineError
from ..domain.recurrence import DAY_CODES, matches
from ..domain.slot_calculator import resolve_timezone
from ..services.availability import AvailabilityService

app = typer.Typer(
    name="slotengine",
    help="Compute bookable appointment slots from working hours, overrides and busy time",
    add_completion=False
)

console = Console()

DAY_NAMES = {index: code for code, index in DAY_CODES.items()}


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _parse_date(value: str):
    try:
        return pendulum.from_format(value, "YYYY-MM-DD").date()
    except ValueError as e:
        console.print(f"[red]Error parsing date {escape(repr(value))}: {escape(str(e))}[/red]")
        raise typer.Exit(1)


@app.command()
def slots(
    booking_type: Annotated[str, typer.Option("--type", "-t", help="Booking type slug")],
    date: Annotated[Optional[str], typer.Argument(help="Target date (YYYY-MM-DD). Defaults to today.")] = None,
    config_file: Annotated[Optional[Path], typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml")] = None,
    timezone: Annotated[Optional[str], typer.Option("--timezone", "-z", help="IANA timezone. Defaults to the configured one.")] = None,
    as_json: Annotated[bool, typer.Option("--json", help="Print slots as JSON.")] = False,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging.")] = False,
):
    """
    List bookable slots for one day.

    Examples:

        slotengine slots 2026-02-02 --type intro-call

        slotengine slots --type consultation --timezone America/New_York
    """
    _configure_logging(verbose)

    try:
        config_path = config_file or get_default_config_path()
        config = AppConfig.load_from_yaml(config_path)
        tz = timezone or config.timezone
        resolve_timezone(tz)

        target_date = _parse_date(date) if date else pendulum.today(tz).date()

        calendar_client = JsonCalendarClient(config.calendar_file) if config.calendar_file else None
        service = AvailabilityService(
            repository=ConfigScheduleRepository(config),
            calendar_client=calendar_client,
        )

        found = asyncio.run(
            service.find_slots(
                booking_type_slug=booking_type,
                target_date=target_date,
                timezone=tz,
            )
        )

    except FileNotFoundError as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        raise typer.Exit(1)

    except (SlotEngineError, ValueError) as e:
        console.print(f"[bold red]Unable to compute availability:[/bold red] {escape(str(e))}")
        raise typer.Exit(1)

    if as_json:
        console.print_json(data=[slot.to_dict() for slot in found])
        return

    console.print()
    if not found:
        console.print(
            f"[yellow]No bookable slots on {target_date.isoformat()}.[/yellow]\n"
            "Try another date or booking type."
        )
        console.print()
        return

    table = Table(
        title=f"Bookable slots ({booking_type}, {tz})",
        show_header=True,
        header_style="bold cyan"
    )
    table.add_column("#", style="dim", justify="right")
    table.add_column("Start", style="bold yellow")
    table.add_column("End")

    for idx, slot in enumerate(found, 1):
        table.add_row(
            str(idx),
            slot.start.in_timezone(tz).format("ddd DD.MM.YYYY HH:mm"),
            slot.end.in_timezone(tz).format("HH:mm"),
        )

    console.print(table)
    console.print()


@app.command()
def check_rule(
    rule: Annotated[str, typer.Argument(help="Weekly rule, e.g. 'FREQ=WEEKLY;BYDAY=MO,WE'")],
    day_of_week: Annotated[int, typer.Argument(min=0, max=6, help="0=Sunday .. 6=Saturday")],
):
    """
    Check whether a weekly recurrence rule applies to a weekday.
    """
    day = DAY_NAMES[day_of_week]
    if matches(rule, day_of_week):
        console.print(f"[green]✓ {escape(rule)} applies on {day}[/green]")
    else:
        console.print(f"[yellow]✗ {escape(rule)} does not apply on {day}[/yellow]")
        raise typer.Exit(1)


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]slotengine[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()
