"""Rich rendering of the list and calendar projections."""

from __future__ import annotations

from rich.markup import escape
from rich.table import Table
from rich.text import Text

from dayorg.models import Task
from dayorg.views import CalendarWeek, ListEntry

EMPTY_MESSAGE = "No tasks yet. Time to plan!"


def _time_span(task: Task) -> str:
    start_at = task.start_at
    end_at = task.end_at
    if start_at is None:
        return task.start or "-"
    start_text = start_at.strftime("%a %d %b %H:%M")
    if end_at is None:
        return start_text
    if end_at.date() == start_at.date():
        return f"{start_text} - {end_at.strftime('%H:%M')}"
    return f"{start_text} - {end_at.strftime('%a %d %b %H:%M')}"


def render_list(entries: list[ListEntry]) -> Table | Text:
    """Build the list projection as a table."""
    if not entries:
        return Text(EMPTY_MESSAGE, style="dim")

    table = Table(title="Tasks", show_header=True)
    table.add_column("#", style="dim", justify="right")
    table.add_column("ID", style="cyan")
    table.add_column("Priority")
    table.add_column("Title", style="bold")
    table.add_column("When", style="white")
    table.add_column("Description", style="dim")

    for entry in entries:
        d = entry.descriptor
        table.add_row(
            str(entry.position),
            escape(entry.task.id),
            f"[{d.color}]{d.emoji} {d.label}[/{d.color}]",
            escape(entry.task.title),
            escape(_time_span(entry.task)),
            escape(entry.task.description),
        )

    return table


def render_calendar(week: CalendarWeek) -> Table:
    """Build the week as a seven-column grid, Sunday first."""
    table = Table(
        title=f"Week of {week.start.strftime('%d %b %Y')}",
        show_header=True,
        show_lines=True,
    )
    for bucket in week.days:
        table.add_column(bucket.day.strftime("%a %d"), vertical="top", overflow="fold")

    cells = []
    for bucket in week.days:
        cell = Text()
        for entry in bucket.entries:
            start_at = entry.task.start_at
            clock = start_at.strftime("%H:%M") if start_at is not None else ""
            if cell:
                cell.append("\n")
            cell.append(f"{entry.descriptor.emoji} {clock} ", style=entry.descriptor.color)
            cell.append(entry.task.title)
        cells.append(cell)
    table.add_row(*cells)

    if week.outside:
        table.caption = f"{len(week.outside)} task(s) outside this week"

    return table
