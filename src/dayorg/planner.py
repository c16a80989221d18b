"""Planner: the owned state container for one view session.

Wires the store client, the task collection, the edit session and the
current view mode together. Each user action has exactly one entry point
here, and every successful write is followed by a full reload.
"""

from __future__ import annotations

import logging
from datetime import date
from enum import Enum

from dayorg.client import StoreResult, TaskStoreClient
from dayorg.collection import Subject, TaskCollection
from dayorg.config import DayorgConfig
from dayorg.session import EditSession, SessionMode, SubmitOutcome
from dayorg.views import CalendarWeek, ListEntry, calendar_view, list_view

logger = logging.getLogger(__name__)


class ViewMode(Enum):
    """Which projection is displayed."""

    LIST = "list"
    CALENDAR = "calendar"


class Planner(Subject):
    """State container for the task list, edit session and view mode.

    The collection and the session notify their own observers; observers of
    the planner itself are told when the view mode changes.
    """

    def __init__(self, client: TaskStoreClient, config: DayorgConfig | None = None) -> None:
        super().__init__()
        config = config or DayorgConfig()
        self.client = client
        self.collection = TaskCollection()
        self.session = EditSession(guard_double_submit=config.editing.guard_double_submit)
        self.view_mode = ViewMode(config.view.default_mode)

    async def load(self) -> None:
        """Reload the collection from the store."""
        await self.collection.reload(self.client)
        logger.debug("Loaded %d tasks", len(self.collection))

    async def submit(self) -> SubmitOutcome:
        """Submit the edit session's draft; reload on success."""
        outcome = await self.session.submit(self.client)
        if outcome.saved:
            await self.load()
        return outcome

    async def delete(self, task_id: str) -> StoreResult:
        """Delete a task; reload on success, leave state alone on failure."""
        result = await self.client.delete(task_id)
        if not result.ok:
            return result

        if self.session.mode is SessionMode.EDITING and self.session.editing_id == task_id:
            self.session.cancel()
        await self.load()
        return result

    def start_create(self) -> None:
        self.session.start_create()

    def start_edit(self, task_id: str) -> bool:
        """Open a loaded task for editing. Returns False if the id is unknown."""
        task = self.collection.get(task_id)
        if task is None:
            return False
        self.session.start_edit(task)
        return True

    def cancel(self) -> None:
        self.session.cancel()

    def swap(self, i: int, j: int) -> None:
        """Local drag-and-drop reorder; discarded on the next reload."""
        self.collection.swap(i, j)

    def set_view(self, mode: ViewMode | str) -> None:
        view_mode = ViewMode(mode)
        if view_mode is self.view_mode:
            return
        self.view_mode = view_mode
        self._notify()

    def list_view(self) -> list[ListEntry]:
        return list_view(self.collection.tasks)

    def calendar_view(self, today: date | None = None) -> CalendarWeek:
        return calendar_view(self.collection.tasks, today or date.today())
