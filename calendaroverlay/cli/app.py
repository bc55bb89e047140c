"""
Main CLI application using Typer.
"""

import asyncio
import logging
from pathlib import Path
from typing import Annotated, Dict, List, Optional

import typer
from rich.console import Console
from rich.table import Table

from ..adapters.calendar_client import CalendarClient
from ..adapters.mock_calendar_client import MockCalendarClient
from ..config import AppConfig, get_default_config_path
from ..domain.day_alignment import fetch_range
from ..domain.exceptions import OverlayError
from ..domain.models import ClippedInterval, EventConfig
from ..domain.timenum import date_to_time_num, time_num_to_display_text
from ..services.overlay_service import OverlayService

app = typer.Typer(
    name="calendaroverlay",
    help="Overlay busy calendar intervals onto an event's availability grid",
    add_completion=False
)

console = Console()

ConfigOption = Annotated[
    Optional[Path],
    typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml")
]


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s"
    )


def _load_config(config_file: Optional[Path]) -> AppConfig:
    config_path = config_file or get_default_config_path()
    return AppConfig.load_from_yaml(config_path)


def _format_range(interval: ClippedInterval, hour12: bool) -> str:
    start = time_num_to_display_text(date_to_time_num(interval.start), hour12)
    end = time_num_to_display_text(date_to_time_num(interval.end), hour12)
    return f"{start} - {end}"


def _render_overlay(
    event: EventConfig,
    overlays: Dict[str, Dict[int, List[ClippedInterval]]],
    hour12: bool
) -> None:
    """Print one table per calendar account."""
    if not overlays:
        console.print("[yellow]⚠ Keine Kalenderkonten mit Terminen gefunden.[/yellow]")
        return

    for account, by_day in overlays.items():
        table = Table(
            title=account,
            show_header=True,
            header_style="bold cyan"
        )
        table.add_column("Tag", style="bold yellow")
        table.add_column("Belegt")
        table.add_column("Offset (h)", justify="right", style="dim")
        table.add_column("Dauer (h)", justify="right", style="dim")
        table.add_column("Termin")

        for window in event.availability_windows():
            day_label = window.start.format("ddd DD.MM.")
            intervals = by_day.get(window.day_index, [])
            if not intervals:
                table.add_row(day_label, "[green]frei[/green]", "", "", "")
                continue
            for interval in intervals:
                table.add_row(
                    day_label,
                    _format_range(interval, hour12),
                    f"{interval.hours_offset:.2f}",
                    f"{interval.hours_length:.2f}",
                    str(interval.metadata.get("summary", ""))
                )
                day_label = ""

        console.print()
        console.print(table)

    console.print()


@app.command()
def overlay(
    event_name: Annotated[str, typer.Argument(help="Name of a configured event")],
    config_file: ConfigOption = None,
    week_offset: Annotated[Optional[int], typer.Option("--week-offset", "-w", help="Weeks relative to the current week (recurring events)")] = None,
    mock: Annotated[bool, typer.Option("--mock", help="Use bundled mock calendar data instead of the backend.")] = False,
    mock_data: Annotated[Optional[Path], typer.Option("--mock-data", help="JSON file with mock calendar events.")] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging.")] = False,
):
    """
    Show which parts of each event day are busy on your calendars.

    Examples:

        calendaroverlay overlay teamweek

        calendaroverlay overlay standup --week-offset 1

        calendaroverlay overlay teamweek --mock
    """
    _configure_logging(verbose)

    try:
        config = _load_config(config_file)
        tz = config.display_timezone()
        definition = config.resolve_event(event_name)
        event = definition.to_event_config(tz)
        offset = week_offset if week_offset is not None else config.defaults.week_offset

        if mock or mock_data:
            console.print("[yellow]⚠  MOCK-MODUS: Verwende Test-Daten[/yellow]")
            client = MockCalendarClient(data_file=mock_data, timezone=tz)
        else:
            client = CalendarClient(
                base_url=config.api_base_url,
                access_token=config.access_token,
                timezone=tz
            )

        service = OverlayService(calendar_client=client)
        overlays = asyncio.run(
            service.build_overlay(
                event,
                week_offset=offset,
                event_id=definition.event_id,
                tz=tz
            )
        )

        _render_overlay(event, overlays, config.hour12)

    except FileNotFoundError as e:
        console.print(f"[bold red]Fehler:[/bold red] {e}")
        raise typer.Exit(1)

    except (OverlayError, ValueError) as e:
        console.print(f"[bold red]Fehler:[/bold red] {e}")
        raise typer.Exit(1)


@app.command("fetch-range")
def fetch_range_cmd(
    event_name: Annotated[str, typer.Argument(help="Name of a configured event")],
    config_file: ConfigOption = None,
    week_offset: Annotated[int, typer.Option("--week-offset", "-w", help="Weeks relative to the current week")] = 0,
):
    """
    Show the time range calendar events are fetched for.
    """
    try:
        config = _load_config(config_file)
        tz = config.display_timezone()
        event = config.resolve_event(event_name).to_event_config(tz)

        time_min, time_max = fetch_range(event, week_offset, tz=tz)
        console.print(f"timeMin: [bold]{time_min.to_iso8601_string()}[/bold]")
        console.print(f"timeMax: [bold]{time_max.to_iso8601_string()}[/bold]")

    except (FileNotFoundError, ValueError) as e:
        console.print(f"[bold red]Fehler:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def list_events(config_file: ConfigOption = None):
    """
    List all configured events.
    """
    try:
        config = _load_config(config_file)

        if not config.events:
            console.print("[yellow]Keine Events in der Config-Datei definiert.[/yellow]")
            return

        table = Table(
            title="Konfigurierte Events",
            show_header=True,
            header_style="bold cyan"
        )
        table.add_column("Name", style="bold yellow")
        table.add_column("Typ")
        table.add_column("Tage", justify="right")
        table.add_column("Dauer (h)", justify="right", style="dim")

        for event in config.events:
            table.add_row(
                event.name,
                event.type.value,
                str(len(event.dates)),
                f"{event.duration:g}"
            )

        console.print()
        console.print(table)
        console.print()

    except (FileNotFoundError, ValueError) as e:
        console.print(f"[bold red]Fehler:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]calendaroverlay[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()
