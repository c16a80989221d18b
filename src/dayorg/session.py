"""Edit-session controller for the task form.

A small state machine over a single draft:

    IDLE     - new-task form with default values
    EDITING  - form pre-populated from a stored task, identified by its id

Only one draft is ever in progress; starting another discards unsaved
changes of the previous one.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Literal

from pydantic import ValidationError

from dayorg.collection import Subject
from dayorg.models import Task, TaskDraft
from dayorg.validation import ValidationIssue, validate_draft

if TYPE_CHECKING:
    from dayorg.client import StoreResult, TaskStoreClient


class SessionMode(Enum):
    """Edit-session states."""

    IDLE = "idle"
    EDITING = "editing"


@dataclass
class SubmitOutcome:
    """Result of submitting the current draft."""

    status: Literal["saved", "invalid", "failed", "busy"]
    issues: list[ValidationIssue] = field(default_factory=list)
    result: StoreResult | None = None

    @property
    def saved(self) -> bool:
        return self.status == "saved"


class EditSession(Subject):
    """Owns the one in-progress draft."""

    def __init__(self, guard_double_submit: bool = True) -> None:
        super().__init__()
        self.guard_double_submit = guard_double_submit
        self.mode = SessionMode.IDLE
        self.editing_id: str | None = None
        self.draft = TaskDraft()
        self._submitting = False
        self._input_issues: dict[str, ValidationIssue] = {}

    @property
    def submitting(self) -> bool:
        return self._submitting

    def start_create(self) -> None:
        """Switch to a fresh new-task draft."""
        self._reset()
        self._notify()

    def start_edit(self, task: Task) -> None:
        """Load a stored task into the form, discarding unsaved changes."""
        self.mode = SessionMode.EDITING
        self.editing_id = task.id
        self.draft = TaskDraft.from_task(task)
        self._input_issues.clear()
        self._notify()

    def cancel(self) -> None:
        """Drop in-progress edits without persisting anything."""
        self._reset()
        self._notify()

    def update_draft(self, **changes: object) -> list[ValidationIssue]:
        """Apply form field changes to the draft.

        Values are coerced the way a form hands them over ("4" becomes 4).
        A value that cannot be coerced leaves its field unchanged and is
        reported as an issue, both here and by the next submit.
        """
        unknown = set(changes) - set(TaskDraft.model_fields)
        if unknown:
            raise TypeError(f"unknown draft fields: {', '.join(sorted(unknown))}")

        issues: list[ValidationIssue] = []
        values = self.draft.model_dump()
        for name, value in changes.items():
            try:
                values = TaskDraft.model_validate({**values, name: value}).model_dump()
            except ValidationError:
                issue = ValidationIssue(
                    name,
                    "invalid_value",
                    f"{name.capitalize()} value {value!r} is not valid.",
                )
                self._input_issues[name] = issue
                issues.append(issue)
            else:
                self._input_issues.pop(name, None)

        self.draft = TaskDraft.model_validate(values)
        self._notify()
        return issues

    async def submit(self, client: TaskStoreClient) -> SubmitOutcome:
        """Validate and send the draft.

        Editing sessions replace the stored record, idle sessions create a
        new one. On any failure the draft and mode are left untouched.
        """
        if self.guard_double_submit and self._submitting:
            return SubmitOutcome(status="busy")

        issues = list(self._input_issues.values()) + validate_draft(self.draft)
        if issues:
            return SubmitOutcome(status="invalid", issues=issues)

        # Snapshot so edits made while the request is pending are not sent
        draft = self.draft.model_copy()
        editing_id = self.editing_id

        self._submitting = True
        try:
            if self.mode is SessionMode.EDITING and editing_id is not None:
                result = await client.update(editing_id, draft)
            else:
                result = await client.create(draft)
        finally:
            self._submitting = False

        if not result.ok:
            return SubmitOutcome(status="failed", result=result)

        self._reset()
        self._notify()
        return SubmitOutcome(status="saved", result=result)

    def _reset(self) -> None:
        self.mode = SessionMode.IDLE
        self.editing_id = None
        self.draft = TaskDraft()
        self._input_issues.clear()
