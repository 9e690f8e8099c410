"""Client for the search stream: SSE line parsing, UI state updates and cancellation."""
from __future__ import annotations

import asyncio
import json
import time
from contextlib import suppress
from dataclasses import dataclass, field
from typing import Any, Callable

import httpx
from loguru import logger

from health_informer.models.events import EventType

DATA_PREFIX = "data: "

UpdateCallback = Callable[["StreamState", dict[str, Any]], None]


def parse_data_line(line: str) -> dict[str, Any] | None:
    """Parse one SSE line into an event dict.

    Only `data: <json object with "type">` lines count; comments, other fields,
    blank separators and malformed JSON yield None.
    """
    line = line.rstrip("\r")
    if not line.startswith(DATA_PREFIX):
        return None
    try:
        payload = json.loads(line[len(DATA_PREFIX):])
    except json.JSONDecodeError:
        logger.warning(f"Skipping malformed event line: {line[:200]}")
        return None
    if not isinstance(payload, dict) or "type" not in payload:
        return None
    return payload


@dataclass
class StreamState:
    phase: str = ""
    message: str = ""
    sources: list[dict[str, Any]] = field(default_factory=list)
    answer: str = ""
    done: bool = False
    error: str | None = None
    cancelled: bool = False
    elapsed_ms: int = 0

    @property
    def finished(self) -> bool:
        return self.done or self.error is not None or self.cancelled


def apply_event(state: StreamState, event: dict[str, Any]) -> StreamState:
    etype = event.get("type")

    if etype == EventType.PHASE_UPDATE.value:
        state.phase = event.get("phase", state.phase)
        state.message = event.get("message", "")
    elif etype == EventType.FOUND.value:
        state.sources = list(event.get("sources") or [])
    elif etype == EventType.CONTENT_CHUNK.value:
        state.answer += event.get("chunk", "")
    elif etype == EventType.FINAL_RESULT.value:
        # Authoritative: replaces whatever the chunks built up.
        state.answer = event.get("content", "")
        state.sources = list(event.get("sources") or [])
    elif etype == EventType.DONE.value:
        state.done = True
    elif etype == EventType.ERROR.value:
        state.error = event.get("message") or "Search failed"
    elif "message" in event:
        state.message = event["message"]
    return state


class SearchStreamConsumer:
    def __init__(
        self,
        base_url: str,
        http_client: httpx.AsyncClient | None = None,
        *,
        path: str = "/api/health-news/search",
        timeout: float | None = None,
    ):
        self.url = f"{base_url.rstrip('/')}{path}"
        self.http_client = http_client
        self.timeout = timeout

    async def run(
        self,
        query: str,
        *,
        cancel: asyncio.Event | None = None,
        on_update: UpdateCallback | None = None,
    ) -> StreamState:
        """Consume one search stream until done, error, or `cancel` is set.

        Cancellation abandons the read and is not recorded as an error.
        """
        state = StreamState()
        started_at = time.monotonic()
        read_task = asyncio.create_task(self._read(query, state, on_update))
        cancel_task = asyncio.create_task(cancel.wait()) if cancel is not None else None
        try:
            waiting = {read_task} if cancel_task is None else {read_task, cancel_task}
            finished, _ = await asyncio.wait(waiting, return_when=asyncio.FIRST_COMPLETED)
            if read_task in finished:
                read_task.result()
            else:
                state.cancelled = True
        finally:
            for task in (read_task, cancel_task):
                if task is not None and not task.done():
                    task.cancel()
                    with suppress(asyncio.CancelledError):
                        await task
            state.elapsed_ms = int((time.monotonic() - started_at) * 1000)
        return state

    async def _read(
        self,
        query: str,
        state: StreamState,
        on_update: UpdateCallback | None,
    ) -> None:
        owns_client = self.http_client is None
        client = self.http_client or httpx.AsyncClient(timeout=self.timeout)
        try:
            async with client.stream("POST", self.url, json={"query": query}) as response:
                if response.status_code >= 400:
                    body = (await response.aread()).decode("utf-8", errors="replace")
                    state.error = f"Search request failed: {response.status_code} {body}".strip()
                    return
                async for line in response.aiter_lines():
                    event = parse_data_line(line)
                    if event is not None and self._dispatch(state, event, on_update):
                        return
        except httpx.HTTPError as exc:
            state.error = f"Search request failed: {exc}"
        finally:
            if owns_client:
                await client.aclose()

    @staticmethod
    def _dispatch(
        state: StreamState,
        event: dict[str, Any],
        on_update: UpdateCallback | None,
    ) -> bool:
        apply_event(state, event)
        if on_update is not None:
            on_update(state, event)
        return state.done or state.error is not None
