"""Async client for the remote task store.

Wire contract:
    GET    /tasks            -> JSON array of tasks
    POST   /tasks            -> create from a draft (no id)
    PUT    /tasks?id=<id>    -> replace the full record at id
    DELETE /tasks?id=<id>    -> remove the record at id

Every call is single-flight: no retries and no deduplication. Failures
never raise into the caller; list() degrades to an empty listing and the
write operations report a StoreResult.
"""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass
from typing import Any, Literal

import httpx
from pydantic import TypeAdapter, ValidationError

from dayorg.config import StoreConfig
from dayorg.models import Task, TaskDraft

logger = logging.getLogger(__name__)

_TASK_LIST = TypeAdapter(list[Task])

REQUEST_ID_HEADER = "X-Request-ID"


@dataclass(frozen=True)
class StoreResult:
    """Outcome of a create, update or delete call."""

    ok: bool
    failure: Literal["transport", "rejected"] | None = None
    status_code: int | None = None
    message: str = ""
    request_id: str | None = None


class TaskStoreClient:
    """Task store client over httpx.

    Use as an async context manager, or pass an existing httpx.AsyncClient
    (the caller then owns its lifetime).
    """

    def __init__(
        self,
        config: StoreConfig | None = None,
        http: httpx.AsyncClient | None = None,
    ) -> None:
        self.config = config or StoreConfig()
        self._owns_http = http is None
        self._http = http or httpx.AsyncClient(
            base_url=self.config.base_url,
            timeout=self.config.timeout_seconds,
        )

    async def __aenter__(self) -> TaskStoreClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_http:
            await self._http.aclose()

    # ---- public API ----

    async def list(self) -> list[Task]:
        """Fetch every task. Returns [] on any failure, logging the cause."""
        try:
            response = await self._send("GET")
        except httpx.HTTPError as exc:
            logger.error("Failed to fetch tasks: %s", exc)
            return []

        if not response.is_success:
            logger.error(
                "Failed to fetch tasks: store answered %s %s",
                response.status_code,
                _short_body(response),
            )
            return []

        try:
            data = response.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            logger.error("Failed to parse task listing: %s", exc)
            return []

        if data is None:
            return []

        try:
            return _TASK_LIST.validate_python(data)
        except ValidationError as exc:
            logger.error("Task listing has malformed records: %s", exc)
            return []

    async def create(self, draft: TaskDraft) -> StoreResult:
        """Create a task from a draft. The store assigns the id."""
        return await self._write("POST", json_body=draft.to_payload())

    async def update(self, task_id: str, draft: TaskDraft) -> StoreResult:
        """Replace the full record at task_id with the draft's fields."""
        return await self._write("PUT", task_id=task_id, json_body=draft.to_payload())

    async def delete(self, task_id: str) -> StoreResult:
        """Delete the record at task_id.

        Success is whatever the store says: deleting an unknown id counts as
        success when the store answers 2xx.
        """
        return await self._write("DELETE", task_id=task_id)

    # ---- low-level helpers ----

    async def _send(
        self,
        method: str,
        task_id: str | None = None,
        json_body: dict[str, Any] | None = None,
    ) -> httpx.Response:
        params = {"id": task_id} if task_id is not None else None
        started = time.monotonic()
        try:
            response = await self._http.request(
                method,
                self.config.tasks_path,
                params=params,
                json=json_body,
            )
        except httpx.HTTPError:
            logger.debug(
                "method=%s path=%s id=%s failed after %.3fs",
                method,
                self.config.tasks_path,
                task_id,
                time.monotonic() - started,
            )
            raise

        logger.debug(
            "method=%s path=%s id=%s status=%s request_id=%s duration=%.3fs",
            method,
            self.config.tasks_path,
            task_id,
            response.status_code,
            response.headers.get(REQUEST_ID_HEADER),
            time.monotonic() - started,
        )
        return response

    async def _write(
        self,
        method: str,
        task_id: str | None = None,
        json_body: dict[str, Any] | None = None,
    ) -> StoreResult:
        try:
            response = await self._send(method, task_id=task_id, json_body=json_body)
        except httpx.HTTPError as exc:
            logger.error("%s %s failed: %s", method, self.config.tasks_path, exc)
            return StoreResult(ok=False, failure="transport", message=str(exc))

        request_id = response.headers.get(REQUEST_ID_HEADER)
        if not response.is_success:
            body = _short_body(response)
            logger.error(
                "%s %s rejected: status=%s request_id=%s body=%s",
                method,
                self.config.tasks_path,
                response.status_code,
                request_id,
                body,
            )
            return StoreResult(
                ok=False,
                failure="rejected",
                status_code=response.status_code,
                message=body or response.reason_phrase,
                request_id=request_id,
            )

        logger.info(
            "%s %s ok: status=%s id=%s",
            method,
            self.config.tasks_path,
            response.status_code,
            task_id,
        )
        return StoreResult(ok=True, status_code=response.status_code, request_id=request_id)


def _short_body(response: httpx.Response, limit: int = 200) -> str:
    """First line of a response body, trimmed for log output."""
    text = response.text.strip()
    first = text.splitlines()[0] if text else ""
    return first[:limit]
