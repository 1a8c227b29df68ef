#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
from rich.console import Console
from rich.table import Table

from cadence.engine.events import Events
from cadence.engine.overrides import Entry

TIME_FORMAT = "%Y-%m-%d %H:%M"


def _status(entry: Entry) -> str:
    if entry.is_cancelled:
        return "[red]cancelled[/red]"
    if entry.is_moved:
        return "[yellow]moved[/yellow]"
    if entry.is_overridden:
        return "[yellow]edited[/yellow]"
    return ""


def entries_table(events: Events, show_cancelled: bool = False) -> Table:
    """Build a table listing query entries in the following format

    ┏━━━┳━━━━━━━━━┳━━━━━━━━━━━━━━━━━━┳━━━━━━━━━━━━━━━━━━┳━━━━━━━━┓
    ┃ # ┃ Event   ┃ Starts           ┃ Ends             ┃ Status ┃
    ┡━━━╇━━━━━━━━━╇━━━━━━━━━━━━━━━━━━╇━━━━━━━━━━━━━━━━━━╇━━━━━━━━┩
    """  # noqa

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("#", justify="right", style="cyan", no_wrap=True)
    table.add_column("Event", style="dim")
    table.add_column("Starts", style="white", no_wrap=True)
    table.add_column("Ends", style="white", no_wrap=True)
    table.add_column("Status", justify="center")

    shown = [e for e in events.entries if show_cancelled or not e.is_cancelled]
    for i, entry in enumerate(shown):
        summary = events.events.get(entry.event_id)
        title = entry.payload.get("title")
        if title is None and summary is not None:
            title = summary.metadata.get("title")
        table.add_row(
            str(i),
            str(title or entry.event_id),
            entry.starts_at.strftime(TIME_FORMAT),
            entry.ends_at.strftime(TIME_FORMAT),
            _status(entry),
        )
    return table


def display_entries(events: Events, show_cancelled: bool = False):
    """Print the entries of a query result as a rich table."""
    console = Console()
    console.print(entries_table(events, show_cancelled=show_cancelled))
