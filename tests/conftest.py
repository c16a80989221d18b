"""Shared fixtures for dayorg tests."""

from __future__ import annotations

import os
from collections.abc import AsyncGenerator, Generator
from pathlib import Path

import pytest
import pytest_asyncio

from dayorg.client import TaskStoreClient

from .fakes import FakeTaskStore


@pytest.fixture
def temp_project(tmp_path: Path) -> Generator[Path, None, None]:
    """Create a temporary project directory and change to it."""
    original_dir = os.getcwd()
    os.chdir(tmp_path)
    try:
        yield tmp_path
    finally:
        os.chdir(original_dir)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep DAYORG_* variables from the host out of the tests."""
    monkeypatch.delenv("DAYORG_BASE_URL", raising=False)
    monkeypatch.delenv("DAYORG_LOG_LEVEL", raising=False)


@pytest.fixture
def store() -> FakeTaskStore:
    """An empty in-memory task store."""
    return FakeTaskStore()


@pytest.fixture
def seeded_store(store: FakeTaskStore) -> FakeTaskStore:
    """A store holding five tasks in non-canonical order."""
    store.add(
        title="Email", description="", priority=2, start="2024-01-02T08:00", end="2024-01-02T08:30"
    )
    store.add(
        title="Gym", description="legs", priority=5, start="2024-01-03T18:00", end="2024-01-03T19:00"
    )
    store.add(
        title="Study", description="", priority=5, start="2024-01-01T09:00", end="2024-01-01T10:00"
    )
    store.add(
        title="Groceries", description="", priority=3, start="2024-01-06T11:00", end="2024-01-06T12:00"
    )
    store.add(
        title="Call mom", description="", priority=1, start="2024-01-04T20:00", end="2024-01-04T20:15"
    )
    return store


@pytest_asyncio.fixture
async def client(store: FakeTaskStore) -> AsyncGenerator[TaskStoreClient, None]:
    """A store client talking to the fake store."""
    http = store.http_client()
    try:
        yield TaskStoreClient(http=http)
    finally:
        await http.aclose()

