"""
Main CLI application using Typer.
"""

import logging
from datetime import date
from pathlib import Path
from typing import Annotated, Optional, Union

import pendulum
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from ..adapters.http_schedule_source import HttpScheduleSource
from ..adapters.json_schedule_source import JsonScheduleSource
from ..config import AppConfig
from ..domain.clock import format_duration, parse_instant
from ..domain.exceptions import SchedulingError
from ..domain.models import SlotState
from ..domain.slot_generator import available_dates
from ..services.availability_service import AvailabilityService

app = typer.Typer(
    name="barberslots",
    help="Compute bookable slots and validate reschedules for a barbershop",
    add_completion=False
)

console = Console()
err_console = Console(stderr=True)

ConfigOption = Annotated[Optional[Path], typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml")]
FileOption = Annotated[Optional[Path], typer.Option("--file", "-f", help="Timeline JSON file, or a directory of YYYY-MM-DD.json files")]
LogLevelOption = Annotated[Optional[str], typer.Option("--log-level", help="Logging level, overrides the config file")]
DateArgument = Annotated[str, typer.Argument(help="Day to compute (YYYY-MM-DD)")]

STATE_STYLES = {
    SlotState.AVAILABLE: "[green]free[/green]",
    SlotState.OCCUPIED: "[bold red]booked[/bold red]",
    SlotState.BREAK: "[yellow]break[/yellow]",
    SlotState.OUTSIDE_WORKING_HOURS: "[dim]-[/dim]",
    SlotState.CLOSED: "[dim]closed[/dim]",
}


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def _load(config_file: Optional[Path], log_level: Optional[str]) -> AppConfig:
    config = AppConfig.load_or_default(config_file)
    _configure_logging(log_level or config.log_level)
    return config


def _build_service(config: AppConfig, timeline_file: Optional[Path]) -> AvailabilityService:
    """
    Pick the schedule source: a local timeline file wins over the API.
    """
    if timeline_file is not None:
        source = JsonScheduleSource(path=timeline_file, timezone=config.timezone)
    elif config.api is not None and config.business_id is not None:
        source = HttpScheduleSource(
            base_url=config.api.base_url,
            business_id=config.business_id,
            timezone=config.timezone,
            token=config.api.token,
            timeout_seconds=config.api.timeout_seconds,
            professional_ids=config.api.professional_ids,
        )
    else:
        console.print(
            "[bold red]Error:[/bold red] No schedule source. "
            "Pass --file or configure api.base_url and business_id."
        )
        raise typer.Exit(1)

    return AvailabilityService(schedule_source=source, config=config)


def _parse_day(value: str, tz: str) -> date:
    try:
        return pendulum.from_format(value, "YYYY-MM-DD", tz=tz).date()
    except ValueError as e:
        console.print(f"[red]Could not parse date {value!r}: {e}[/red]")
        raise typer.Exit(1)


def _parse_id(value: str) -> Union[int, str]:
    """Timeline ids are integers in practice; keep anything else verbatim."""
    return int(value) if value.isdigit() else value


def _fail(error: Exception) -> None:
    console.print(f"[bold red]Error:[/bold red] {error}")
    raise typer.Exit(1)


@app.command()
def slots(
    day: DateArgument,
    professional: Annotated[Optional[str], typer.Option("--professional", "-p", help="Only this professional's slots")] = None,
    duration: Annotated[Optional[int], typer.Option("--duration", "-d", help="Service duration in minutes")] = None,
    now: Annotated[Optional[str], typer.Option("--now", help="Reference instant (ISO-8601). Defaults to the current time")] = None,
    include_past: Annotated[bool, typer.Option("--include-past", help="Keep slots that already started")] = False,
    timeline_file: FileOption = None,
    config_file: ConfigOption = None,
    log_level: LogLevelOption = None,
):
    """
    List bookable slots for a day.

    Examples:

        barberslots slots 2024-11-25 -f timeline.json

        barberslots slots 2024-11-25 -p 3 --duration 45
    """
    try:
        config = _load(config_file, log_level)
        tz = config.timezone
        target_day = _parse_day(day, tz)
        service = _build_service(config, timeline_file)

        reference = None
        if not include_past:
            reference = parse_instant(now, tz) if now else pendulum.now(tz)

        if professional is None:
            found = service.merged_slots(target_day, now=reference)
            title = f"Free slots on {target_day.isoformat()} (any professional)"
        else:
            found = service.professional_slots(
                target_day,
                _parse_id(professional),
                service_duration_minutes=duration,
                now=reference,
            )
            title = f"Free slots on {target_day.isoformat()} for professional {professional}"

        console.print()
        if not found:
            console.print("[yellow]⚠ No bookable slots.[/yellow]\n")
            return

        console.print(f"[bold green]✓ {title}:[/bold green]\n")
        for slot in found:
            console.print(f"  {slot} ({format_duration(slot.duration_minutes())})")
        console.print()

    except (SchedulingError, FileNotFoundError, ValueError) as e:
        _fail(e)


@app.command()
def timeline(
    day: DateArgument,
    timeline_file: FileOption = None,
    config_file: ConfigOption = None,
    log_level: LogLevelOption = None,
):
    """
    Show the timeline grid: one row per start time, one column per professional.
    """
    try:
        config = _load(config_file, log_level)
        target_day = _parse_day(day, config.timezone)
        service = _build_service(config, timeline_file)

        schedule, rows = service.timeline_view(target_day)

        if not rows:
            console.print("[yellow]Nobody works on this day.[/yellow]")
            return

        table = Table(
            title=f"Timeline {target_day.isoformat()}",
            show_header=True,
            header_style="bold cyan"
        )
        table.add_column("Time", style="bold yellow")
        for professional in schedule.professionals:
            table.add_column(professional.name or str(professional.professional_id))

        for row in rows:
            cells = []
            for cell in row.cells:
                text = STATE_STYLES[cell.state]
                if cell.appointment_ids:
                    text += " " + ", ".join(f"#{aid}" for aid in cell.appointment_ids)
                cells.append(text)
            table.add_row(row.slot.start_time, *cells)

        console.print()
        console.print(table)
        console.print()

    except (SchedulingError, FileNotFoundError, ValueError) as e:
        _fail(e)


@app.command()
def reschedule(
    day: DateArgument,
    appointment_id: Annotated[str, typer.Argument(help="Appointment to move")],
    professional_id: Annotated[str, typer.Argument(help="Target professional")],
    start: Annotated[str, typer.Argument(help="New start time (HH:MM)")],
    timeline_file: FileOption = None,
    config_file: ConfigOption = None,
    log_level: LogLevelOption = None,
):
    """
    Validate moving an appointment and print the update payload.

    Exits with code 1 when the move conflicts.
    """
    try:
        config = _load(config_file, log_level)
        target_day = _parse_day(day, config.timezone)
        service = _build_service(config, timeline_file)

        result = service.reschedule(
            target_day,
            _parse_id(appointment_id),
            _parse_id(professional_id),
            start,
        )

        if not result.ok:
            console.print(f"[bold red]✗ Conflict:[/bold red] {result.reason.value}")
            raise typer.Exit(1)

        console.print(f"[bold green]✓ Move is valid:[/bold green] {result.slot}")
        console.print_json(data=result.to_update_payload(target_day, config.timezone))

    except (SchedulingError, FileNotFoundError, ValueError) as e:
        _fail(e)


@app.command()
def assign(
    day: DateArgument,
    start: Annotated[str, typer.Argument(help="Start time (HH:MM)")],
    duration: Annotated[Optional[int], typer.Option("--duration", "-d", help="Service duration in minutes")] = None,
    timeline_file: FileOption = None,
    config_file: ConfigOption = None,
    log_level: LogLevelOption = None,
):
    """
    Suggest the free professional with the fewest appointments.
    """
    try:
        config = _load(config_file, log_level)
        target_day = _parse_day(day, config.timezone)
        service = _build_service(config, timeline_file)

        chosen = service.auto_assign(target_day, start, service_duration_minutes=duration)

        if chosen is None:
            console.print(f"[yellow]⚠ No professional is free at {start}.[/yellow]")
            raise typer.Exit(1)

        console.print(f"[bold green]✓ Professional {chosen}[/bold green]")

    except (SchedulingError, FileNotFoundError, ValueError) as e:
        _fail(e)


@app.command()
def dates(
    start: Annotated[Optional[str], typer.Option("--from", help="Reference date (YYYY-MM-DD). Defaults to today")] = None,
    config_file: ConfigOption = None,
    log_level: LogLevelOption = None,
):
    """
    List the open dates within the booking horizon.
    """
    try:
        config = _load(config_file, log_level)
        tz = config.timezone
        reference = _parse_day(start, tz) if start else pendulum.today(tz).date()

        found = available_dates(
            config.weekly_hours(),
            reference,
            config.defaults.booking_horizon_days,
        )

        if not found:
            console.print("[yellow]No open dates. Configure working_hours in the config file.[/yellow]")
            return

        for day in found:
            console.print(f"  {day.isoformat()}")

    except (SchedulingError, FileNotFoundError, ValueError) as e:
        _fail(e)


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]barberslots[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()
