"""Task data model for dayorg."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator

DEFAULT_PRIORITY = 3
MIN_PRIORITY = 1
MAX_PRIORITY = 5


def parse_timestamp(value: str | None) -> datetime | None:
    """Parse an ISO-8601-like local datetime string.

    Returns None for empty or unparseable values instead of raising.
    """
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.strip())
    except ValueError:
        return None
    # Compared as local wall-clock time; offsets are not normalized.
    return parsed.replace(tzinfo=None)


class Task(BaseModel):
    """A task as held by the remote store."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    description: str = ""
    priority: int = DEFAULT_PRIORITY
    start: str = ""
    end: str = ""

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> Any:
        # Some stores hand out numeric ids
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("description", "start", "end", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @property
    def start_at(self) -> datetime | None:
        return parse_timestamp(self.start)

    @property
    def end_at(self) -> datetime | None:
        return parse_timestamp(self.end)


class TaskDraft(BaseModel):
    """A task payload that is not confirmed to exist in the store yet.

    Drafts are deliberately lenient: an out-of-range priority or a missing
    time is representable so the validation step can report it.
    """

    title: str = ""
    description: str = ""
    priority: int = DEFAULT_PRIORITY
    start: str = ""
    end: str = ""

    @field_validator("title", "description", "start", "end", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @classmethod
    def from_task(cls, task: Task) -> TaskDraft:
        """Copy every editable field of a stored task."""
        return cls(
            title=task.title,
            description=task.description,
            priority=task.priority,
            start=task.start,
            end=task.end,
        )

    def to_payload(self) -> dict[str, Any]:
        """JSON body sent to the store. Never carries an id."""
        return {
            "title": self.title,
            "description": self.description,
            "priority": self.priority,
            "start": self.start,
            "end": self.end,
        }

    @property
    def start_at(self) -> datetime | None:
        return parse_timestamp(self.start)

    @property
    def end_at(self) -> datetime | None:
        return parse_timestamp(self.end)

