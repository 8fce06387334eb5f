"""
Main CLI application using Typer.
"""

import json
import logging
from pathlib import Path
from typing import Annotated, List, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from ..adapters.api_client import EventAPIClient
from ..adapters.mock_api_client import MockEventClient
from ..config import AppConfig
from ..domain.aggregator import AggregationResult
from ..domain.calendar_math import (
    format_date_display,
    format_minimal_time_label,
    get_timezone_offset_string,
)
from ..domain.cell_range_codec import CellRangeCodec
from ..domain.exceptions import AgreedTimeError
from ..domain.grid import build_time_slots, build_weeks
from ..domain.models import CellKey, TimeRange
from ..services.event_results import EventClientProtocol, EventResultsService, EventResultsView

app = typer.Typer(
    name="agreedtime",
    help="Find the time that works for everyone",
    add_completion=False
)

console = Console()

# Shading steps for heatmap cells, from faint to full.
HEAT_STYLES = ["grey50", "green4", "green3", "spring_green2", "bold bright_green"]

ConfigOption = Annotated[Optional[Path], typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml")]
MockOption = Annotated[bool, typer.Option("--mock", help="Serve results from the bundled mock data instead of the API.")]
TzOption = Annotated[Optional[str], typer.Option("--tz", help="Timezone for displaying local times (IANA name or 'local').")]
DurationOption = Annotated[Optional[int], typer.Option("--duration", "-d", help="Slot duration in minutes. Defaults to grid.slot_duration from the config.")]


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging.")] = False,
):
    """
    Availability grid tools: results, heatmap and cell/range conversion.
    """
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=console, show_path=False)],
        )


def _load_config(config_file: Optional[Path]) -> AppConfig:
    try:
        return AppConfig.load_or_default(config_file)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


def _build_client(config: AppConfig, mock: bool) -> EventClientProtocol:
    if mock:
        console.print("[yellow]⚠  MOCK MODE: using bundled sample events[/yellow]\n")
        return MockEventClient()
    return EventAPIClient(base_url=config.api_base_url, timeout=config.request_timeout)


def _build_codec(config: AppConfig, duration: Optional[int], tz: Optional[str]) -> CellRangeCodec:
    return CellRangeCodec(
        slot_duration=duration or config.grid.slot_duration,
        tz=tz or config.timezone,
    )


def _load_view(token: str, config: AppConfig, mock: bool, tz: str) -> EventResultsView:
    service = EventResultsService(client=_build_client(config, mock), tz=tz)
    try:
        return service.load_results(token)
    except AgreedTimeError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


def _print_rankings(view: EventResultsView, aggregation: AggregationResult, limit: int, tz: str) -> None:
    event = view.event
    total = aggregation.total_participants

    plural = "s" if len(aggregation.top_picks) > 1 else ""
    console.print(f"[bold cyan]✦ Best Time{plural}[/bold cyan]")
    if aggregation.top_picks:
        for pick in aggregation.top_picks:
            console.print(
                f"  [bold]{pick.format_display(event.slot_duration, tz)}[/bold]  "
                f"[green]{pick.count} / {total} available[/green]  "
                f"[dim]Includes: {', '.join(pick.attendees)}[/dim]"
            )
    else:
        console.print("  [dim]No common times found yet.[/dim]")

    console.print("\n[bold]Other Options[/bold]")
    if aggregation.other_options:
        table = Table(show_header=True, header_style="bold cyan")
        table.add_column("Time")
        table.add_column("Attendees", style="dim")
        table.add_column("Votes", justify="right")
        for option in aggregation.other_options[:limit]:
            table.add_row(
                option.format_display(event.slot_duration, tz),
                ", ".join(option.attendees),
                str(option.count),
            )
        console.print(table)
    else:
        console.print("  [dim]No other options.[/dim]")


@app.command()
def results(
    token: Annotated[str, typer.Argument(help="Public token of the event")],
    config_file: ConfigOption = None,
    mock: MockOption = False,
    tz: TzOption = None,
):
    """
    Show the best times and other options for an event.

    Examples:

        agreedtime results demo --mock
        agreedtime results 3f9a... --tz Europe/Berlin
    """
    config = _load_config(config_file)
    tz = tz or config.timezone
    view = _load_view(token, config, mock, tz)
    event = view.event
    aggregation = view.aggregation

    console.print(Panel.fit(
        f"[bold]{event.title}[/bold]\n{event.description}".rstrip(),
        title=f"Event ({event.state})",
    ))
    console.print(
        f"[dim italic]All times are shown in your local timezone "
        f"({get_timezone_offset_string(tz)}).[/dim italic]\n"
    )

    if aggregation.total_participants == 0:
        console.print("[yellow]No responses yet![/yellow] Share the guest link with your participants.")
        return

    if aggregation.is_organizer_only:
        console.print(
            "[yellow]Waiting for participants.[/yellow] Only the organizer has filled in "
            "their availability. Share the guest link to collect responses."
        )
        return

    _print_rankings(view, aggregation, config.other_options_limit, tz)

    console.print(f"\n[bold]Participants[/bold] [cyan]{aggregation.total_participants}[/cyan]")
    for participant in event.participants:
        badge = " [magenta](Organizer)[/magenta]" if participant.is_organizer else ""
        comment = f" [dim]“{participant.comment}”[/dim]" if participant.comment else ""
        console.print(f"  • {participant.name}{badge}{comment}")
    console.print()


@app.command()
def heatmap(
    token: Annotated[str, typer.Argument(help="Public token of the event")],
    config_file: ConfigOption = None,
    mock: MockOption = False,
    tz: TzOption = None,
):
    """
    Render the event's availability heatmap, one table per week.
    """
    config = _load_config(config_file)
    tz = tz or config.timezone
    view = _load_view(token, config, mock, tz)
    cells = view.aggregation.heatmap()

    if not cells:
        console.print("[yellow]No availability submitted yet.[/yellow]")
        return

    dates = sorted(cell.date for cell in cells)
    minutes = sorted(cell.minute for cell in cells)
    slot_duration = view.event.slot_duration
    start_hour = minutes[0] // 60
    end_hour = min(24, -(-(minutes[-1] + slot_duration) // 60))

    rows = build_time_slots(start_hour, end_hour, slot_duration)
    for week in build_weeks(dates[0], dates[-1], max_weeks=config.grid.max_weeks):
        table = Table(title=f"Week {week.week_number + 1}", show_header=True, header_style="bold cyan")
        table.add_column("")
        for date in week.dates:
            table.add_column(format_date_display(date).replace("\n", " "), justify="center")

        for row in rows:
            rendered: List[str] = [format_minimal_time_label(row.start_hour)]
            for date in week.dates:
                cell = cells.get(CellKey(date=date, minute=row.start_minute))
                if cell is None or cell.count == 0:
                    rendered.append("[dim]·[/dim]")
                    continue
                style = HEAT_STYLES[min(int(cell.opacity * len(HEAT_STYLES)), len(HEAT_STYLES) - 1)]
                rendered.append(f"[{style}]{cell.count}[/{style}]")
            table.add_row(*rendered)

        console.print(table)


@app.command()
def encode(
    cells: Annotated[List[str], typer.Argument(help="Cell keys such as 2025-12-08_9 or 2025-12-08_9.5")],
    duration: DurationOption = None,
    tz: TzOption = None,
    config_file: ConfigOption = None,
):
    """
    Merge cell keys into the API's UTC range payload (printed as JSON).
    """
    config = _load_config(config_file)
    try:
        keys = [CellKey.parse(value) for value in cells]
        codec = _build_codec(config, duration, tz)
    except (KeyError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    typer.echo(json.dumps(codec.cells_to_api(keys), indent=2))


@app.command()
def decode(
    ranges_file: Annotated[Path, typer.Argument(help="JSON file holding a list of {start_at, end_at} ranges")],
    duration: DurationOption = None,
    tz: TzOption = None,
    config_file: ConfigOption = None,
):
    """
    Expand a JSON list of UTC ranges into local cell keys.
    """
    config = _load_config(config_file)
    try:
        with open(ranges_file, "r", encoding="utf-8") as f:
            payload = json.load(f)
        codec = _build_codec(config, duration, tz)
        ranges = [TimeRange.from_api(item) for item in payload]
    except FileNotFoundError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)
    except (KeyError, TypeError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] Invalid ranges file: {e}")
        raise typer.Exit(1)

    for key in sorted(codec.ranges_to_cells(ranges)):
        typer.echo(str(key))


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]agreedtime[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()
