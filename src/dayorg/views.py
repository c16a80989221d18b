"""List and calendar projections of the task collection.

Both projections are pure functions of the collection's current sequence;
neither reorders it.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import date, timedelta

from dayorg.models import DEFAULT_PRIORITY, Task

DAYS_IN_WEEK = 7


@dataclass(frozen=True)
class PriorityDescriptor:
    """How a priority level is presented."""

    level: int
    label: str
    emoji: str
    color: str


PRIORITY_DESCRIPTORS: dict[int, PriorityDescriptor] = {
    1: PriorityDescriptor(1, "Minimal", "⚪", "bright_black"),
    2: PriorityDescriptor(2, "Low", "🔵", "blue"),
    3: PriorityDescriptor(3, "Medium", "🟢", "green"),
    4: PriorityDescriptor(4, "High", "🟠", "dark_orange"),
    5: PriorityDescriptor(5, "Critical", "🔴", "red"),
}


def describe_priority(priority: int) -> PriorityDescriptor:
    """Look up a priority descriptor, falling back to the medium level."""
    return PRIORITY_DESCRIPTORS.get(priority, PRIORITY_DESCRIPTORS[DEFAULT_PRIORITY])


@dataclass(frozen=True)
class ListEntry:
    """A task annotated for the list view."""

    position: int
    task: Task
    descriptor: PriorityDescriptor


@dataclass
class DayBucket:
    """Tasks starting on one calendar day."""

    day: date
    entries: list[ListEntry] = field(default_factory=list)


@dataclass
class CalendarWeek:
    """A Sunday-first week of day buckets."""

    start: date
    days: list[DayBucket]
    outside: list[Task] = field(default_factory=list)

    @property
    def end(self) -> date:
        return self.start + timedelta(days=DAYS_IN_WEEK - 1)

    def bucket_for(self, day: date) -> DayBucket | None:
        for bucket in self.days:
            if bucket.day == day:
                return bucket
        return None


def list_view(tasks: Sequence[Task]) -> list[ListEntry]:
    """Annotate the sequence with priority descriptors, order unchanged."""
    return [
        ListEntry(position=i, task=task, descriptor=describe_priority(task.priority))
        for i, task in enumerate(tasks)
    ]


def week_start(today: date) -> date:
    """Most recent Sunday on or before today."""
    # date.weekday(): Monday == 0 ... Sunday == 6
    return today - timedelta(days=(today.weekday() + 1) % DAYS_IN_WEEK)


def calendar_view(tasks: Sequence[Task], today: date) -> CalendarWeek:
    """Bucket tasks by the calendar date of their start.

    Each task lands in at most one bucket. Tasks starting outside the week
    (or with an unparseable start) are collected in ``outside``.
    """
    first = week_start(today)
    week = CalendarWeek(
        start=first,
        days=[DayBucket(day=first + timedelta(days=n)) for n in range(DAYS_IN_WEEK)],
    )

    for entry in list_view(tasks):
        start_at = entry.task.start_at
        bucket = week.bucket_for(start_at.date()) if start_at is not None else None
        if bucket is None:
            week.outside.append(entry.task)
        else:
            bucket.entries.append(entry)

    return week
