"""Tests for dayorg.session module."""

from __future__ import annotations

import asyncio

import pytest

from dayorg.client import StoreResult, TaskStoreClient
from dayorg.models import TaskDraft
from dayorg.session import EditSession, SessionMode
from dayorg.validation import validate_draft

from .fakes import FakeTaskStore, make_task

VALID = {
    "title": "Study",
    "description": "",
    "priority": 5,
    "start": "2024-01-01T09:00",
    "end": "2024-01-01T10:00",
}


class SlowClient:
    """Client whose create blocks until released."""

    def __init__(self) -> None:
        self.release = asyncio.Event()
        self.creates = 0

    async def create(self, draft: TaskDraft) -> StoreResult:
        self.creates += 1
        await self.release.wait()
        return StoreResult(ok=True, status_code=201)


class TestTransitions:
    """Tests for the session state machine."""

    def test_starts_idle_with_defaults(self) -> None:
        """Test a new session is idle with a default draft."""
        session = EditSession()
        assert session.mode is SessionMode.IDLE
        assert session.editing_id is None
        assert session.draft == TaskDraft()

    def test_start_edit_copies_task(self) -> None:
        """Test editing pre-populates the draft from the task."""
        session = EditSession()
        task = make_task("7", priority=4, title="Gym")
        session.start_edit(task)

        assert session.mode is SessionMode.EDITING
        assert session.editing_id == "7"
        assert session.draft == TaskDraft.from_task(task)

    def test_cancel_returns_to_idle(self) -> None:
        """Test cancel discards edits and restores defaults."""
        session = EditSession()
        session.start_edit(make_task("7"))
        session.update_draft(title="changed")

        session.cancel()

        assert session.mode is SessionMode.IDLE
        assert session.editing_id is None
        assert session.draft == TaskDraft()

    def test_start_edit_discards_previous(self) -> None:
        """Test only one draft is in progress at a time."""
        session = EditSession()
        session.start_edit(make_task("1"))
        session.update_draft(title="unsaved")

        session.start_edit(make_task("2", title="Second"))

        assert session.editing_id == "2"
        assert session.draft.title == "Second"

    def test_start_create_resets(self) -> None:
        """Test starting a new task leaves edit mode."""
        session = EditSession()
        session.start_edit(make_task("1"))
        session.start_create()
        assert session.mode is SessionMode.IDLE
        assert session.draft == TaskDraft()

    def test_observers_notified(self) -> None:
        """Test each transition notifies observers."""
        session = EditSession()
        modes: list[SessionMode] = []
        session.subscribe(lambda: modes.append(session.mode))

        session.start_edit(make_task("1"))
        session.update_draft(title="x")
        session.cancel()

        assert modes == [SessionMode.EDITING, SessionMode.EDITING, SessionMode.IDLE]


class TestUpdateDraft:
    """Tests for EditSession.update_draft."""

    def test_form_values_coerced(self) -> None:
        """Test text form values are coerced into draft types."""
        session = EditSession()
        issues = session.update_draft(**{**VALID, "priority": "4", "description": None})

        assert issues == []
        assert session.draft.priority == 4
        assert session.draft.description == ""
        assert validate_draft(session.draft) == []

    def test_none_title_reported_not_raised(self) -> None:
        """Test a missing title becomes an empty-title issue."""
        session = EditSession()
        session.update_draft(**{**VALID, "title": None})

        codes = [issue.code for issue in validate_draft(session.draft)]
        assert codes == ["empty_title"]

    def test_uncoercible_value_keeps_field(self) -> None:
        """Test a value that cannot be coerced is reported and not applied."""
        session = EditSession()
        session.update_draft(**VALID)

        issues = session.update_draft(priority="high", title="Gym")

        assert [(i.field, i.code) for i in issues] == [("priority", "invalid_value")]
        assert session.draft.priority == 5
        assert session.draft.title == "Gym"

    def test_unknown_field(self) -> None:
        """Test unknown field names are a programming error."""
        with pytest.raises(TypeError):
            EditSession().update_draft(colour="red")

    @pytest.mark.asyncio
    async def test_submit_reports_uncoercible_value(
        self, store: FakeTaskStore, client: TaskStoreClient
    ) -> None:
        """Test submit refuses while a rejected form value is outstanding."""
        session = EditSession()
        session.update_draft(**VALID)
        session.update_draft(priority="high")

        outcome = await session.submit(client)

        assert outcome.status == "invalid"
        assert [i.field for i in outcome.issues] == ["priority"]
        assert store.requests == []

        session.update_draft(priority="2")
        assert (await session.submit(client)).saved

    def test_cancel_clears_rejected_values(self) -> None:
        """Test a reset session carries no rejected form values."""
        session = EditSession()
        session.update_draft(priority="high")
        session.cancel()
        session.update_draft(**VALID)

        assert validate_draft(session.draft) == []


class TestSubmit:
    """Tests for EditSession.submit."""

    @pytest.mark.asyncio
    async def test_create_on_idle(self, store: FakeTaskStore, client: TaskStoreClient) -> None:
        """Test an idle session creates a task and resets."""
        session = EditSession()
        session.update_draft(**VALID)

        outcome = await session.submit(client)

        assert outcome.saved
        assert [r.method for r in store.writes()] == ["POST"]
        assert session.draft == TaskDraft()

    @pytest.mark.asyncio
    async def test_update_on_editing(
        self, seeded_store: FakeTaskStore, client: TaskStoreClient
    ) -> None:
        """Test an editing session updates under the same id."""
        session = EditSession()
        task = (await client.list())[2]
        session.start_edit(task)
        session.update_draft(priority=2)

        outcome = await session.submit(client)

        assert outcome.saved
        (request,) = seeded_store.writes()
        assert (request.method, request.task_id) == ("PUT", task.id)
        assert seeded_store.records[task.id]["priority"] == 2
        assert session.mode is SessionMode.IDLE

    @pytest.mark.parametrize(
        "changes",
        [
            {"title": ""},
            {"priority": 0},
            {"priority": 6},
            {"priority": 3, "start": "2024-01-01T10:00", "end": "2024-01-01T09:00"},
        ],
    )
    @pytest.mark.asyncio
    async def test_invalid_draft_never_reaches_store(
        self, changes: dict, store: FakeTaskStore, client: TaskStoreClient
    ) -> None:
        """Test rejected drafts make no store call and stay intact."""
        session = EditSession()
        session.update_draft(**{**VALID, **changes})
        before = session.draft.model_copy()

        outcome = await session.submit(client)

        assert outcome.status == "invalid"
        assert outcome.issues
        assert store.requests == []
        assert session.draft == before

    @pytest.mark.asyncio
    async def test_store_failure_keeps_draft(
        self, store: FakeTaskStore, client: TaskStoreClient
    ) -> None:
        """Test a failed create leaves the draft for retry."""
        session = EditSession()
        session.update_draft(**VALID)
        store.fail_with = 500

        outcome = await session.submit(client)

        assert outcome.status == "failed"
        assert outcome.result is not None and outcome.result.failure == "rejected"
        assert session.draft.title == "Study"

        store.fail_with = None
        assert (await session.submit(client)).saved

    @pytest.mark.asyncio
    async def test_failed_update_keeps_edit_session(
        self, seeded_store: FakeTaskStore, client: TaskStoreClient
    ) -> None:
        """Test a failed update stays in edit mode."""
        session = EditSession()
        session.start_edit(make_task("1", title="Email"))
        seeded_store.unreachable = True

        outcome = await session.submit(client)

        assert outcome.status == "failed"
        assert session.mode is SessionMode.EDITING
        assert session.editing_id == "1"

    @pytest.mark.asyncio
    async def test_double_submit_guarded(self) -> None:
        """Test a second submit while one is pending is refused."""
        client = SlowClient()
        session = EditSession()
        session.update_draft(**VALID)

        first = asyncio.create_task(session.submit(client))  # type: ignore[arg-type]
        await asyncio.sleep(0)
        second = await session.submit(client)  # type: ignore[arg-type]
        client.release.set()

        assert second.status == "busy"
        assert (await first).saved
        assert client.creates == 1

    @pytest.mark.asyncio
    async def test_double_submit_unguarded_races(self) -> None:
        """Test the guard can be turned off, letting both requests through."""
        client = SlowClient()
        session = EditSession(guard_double_submit=False)
        session.update_draft(**VALID)

        first = asyncio.create_task(session.submit(client))  # type: ignore[arg-type]
        second = asyncio.create_task(session.submit(client))  # type: ignore[arg-type]
        await asyncio.sleep(0)
        client.release.set()

        assert (await first).saved
        assert (await second).saved
        assert client.creates == 2
