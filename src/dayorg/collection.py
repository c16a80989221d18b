"""In-memory task collection with canonical ordering.

The store is the source of truth. The collection is rebuilt from scratch
on every reload and the canonical order is always reapplied, whatever order
the store returned. Local reordering (drag-and-drop) only lives until the
next reload.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from datetime import datetime
from typing import TYPE_CHECKING

from dayorg.models import Task

if TYPE_CHECKING:
    from dayorg.client import TaskStoreClient

Observer = Callable[[], None]


def canonical_key(task: Task) -> tuple[int, bool, datetime, str]:
    """Sort key: priority descending, then start ascending.

    Tasks whose start cannot be parsed go after parseable ones of the same
    priority, ordered by their raw start text.
    """
    start_at = task.start_at
    return (
        -task.priority,
        start_at is None,
        start_at or datetime.min,
        task.start,
    )


def canonical_order(tasks: Iterable[Task]) -> list[Task]:
    """Return tasks in canonical order."""
    return sorted(tasks, key=canonical_key)


class Subject:
    """Synchronous observer registry."""

    def __init__(self) -> None:
        self._observers: list[Observer] = []

    def subscribe(self, observer: Observer) -> Callable[[], None]:
        """Register an observer. Returns a function that unsubscribes it."""
        self._observers.append(observer)

        def unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return unsubscribe

    def _notify(self) -> None:
        for observer in list(self._observers):
            observer()


class TaskCollection(Subject):
    """The authoritative in-memory sequence of tasks."""

    def __init__(self, tasks: Iterable[Task] = ()) -> None:
        super().__init__()
        self._tasks: list[Task] = canonical_order(tasks)

    @property
    def tasks(self) -> list[Task]:
        """Current display sequence (a copy)."""
        return list(self._tasks)

    def __len__(self) -> int:
        return len(self._tasks)

    def __iter__(self) -> Iterator[Task]:
        return iter(list(self._tasks))

    def get(self, task_id: str) -> Task | None:
        """Get a task by ID."""
        for task in self._tasks:
            if task.id == task_id:
                return task
        return None

    def replace(self, tasks: Iterable[Task]) -> None:
        """Rebuild from a fresh listing, discarding any local reorder."""
        self._tasks = canonical_order(tasks)
        self._notify()

    async def reload(self, client: TaskStoreClient) -> None:
        """Fetch the listing from the store and rebuild."""
        self.replace(await client.list())

    def swap(self, i: int, j: int) -> None:
        """Exchange the display positions of two tasks.

        Not persisted. Raises IndexError for positions outside the sequence.
        """
        size = len(self._tasks)
        for index in (i, j):
            if not 0 <= index < size:
                raise IndexError(f"position {index} out of range for {size} tasks")

        self._tasks[i], self._tasks[j] = self._tasks[j], self._tasks[i]
        self._notify()
