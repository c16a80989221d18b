"""Draft validation for dayorg.

Validation runs once, at submission time. A draft that fails validation
never reaches the store and is left exactly as the user typed it.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from dayorg.models import MAX_PRIORITY, MIN_PRIORITY, TaskDraft, parse_timestamp


@dataclass(frozen=True)
class ValidationIssue:
    """A single failed constraint on a draft."""

    field: str
    code: str
    message: str


class DraftValidationError(ValueError):
    """Raised by ensure_valid when a draft fails validation."""

    def __init__(self, issues: list[ValidationIssue]) -> None:
        self.issues = issues
        super().__init__("; ".join(issue.message for issue in issues))


def validate_draft(draft: TaskDraft, require_times: bool = True) -> list[ValidationIssue]:
    """Check a draft against the task constraints.

    Args:
        draft: The draft to check.
        require_times: Whether start and end must both be present. Task
            creation and update always require them.

    Returns:
        Every failed constraint, in field order. Empty when the draft is valid.
    """
    issues: list[ValidationIssue] = []

    if not draft.title.strip():
        issues.append(ValidationIssue("title", "empty_title", "Title must not be empty."))

    if not MIN_PRIORITY <= draft.priority <= MAX_PRIORITY:
        issues.append(
            ValidationIssue(
                "priority",
                "priority_out_of_range",
                f"Priority must be between {MIN_PRIORITY} and {MAX_PRIORITY}, "
                f"got {draft.priority}.",
            )
        )

    start_at = _check_time(draft.start, "start", require_times, issues)
    end_at = _check_time(draft.end, "end", require_times, issues)

    if start_at is not None and end_at is not None and end_at <= start_at:
        issues.append(
            ValidationIssue(
                "end",
                "end_not_after_start",
                f"End time ({draft.end}) must be later than start time ({draft.start}).",
            )
        )

    return issues


def ensure_valid(draft: TaskDraft, require_times: bool = True) -> None:
    """Raise DraftValidationError if the draft fails validation."""
    issues = validate_draft(draft, require_times=require_times)
    if issues:
        raise DraftValidationError(issues)


def _check_time(
    value: str, name: str, required: bool, issues: list[ValidationIssue]
) -> datetime | None:
    """Parse one time field, recording a missing or invalid value."""
    if not value.strip():
        if required:
            issues.append(
                ValidationIssue(name, f"missing_{name}", f"{name.capitalize()} time is required.")
            )
        return None

    parsed = parse_timestamp(value)
    if parsed is None:
        issues.append(
            ValidationIssue(
                name,
                f"invalid_{name}",
                f"{name.capitalize()} time '{value}' is not a valid date and time.",
            )
        )
    return parsed
