from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from health_informer.client.stream_consumer import (
    SearchStreamConsumer,
    StreamState,
    apply_event,
    parse_data_line,
)
from health_informer.services import streaming
from health_informer.models.events import Phase


def frame(*events) -> bytes:
    return "".join(event.format() for event in events).encode("utf-8")


SOURCES = [{"url": "https://example.com/1", "title": "Result 1"}]

HAPPY_STREAM = [
    streaming.phase_update(Phase.UNDERSTANDING, "Analyzing your health question..."),
    streaming.found(SOURCES, "sleep"),
    streaming.content_start(),
    streaming.content_chunk("Sleep "),
    streaming.content_chunk("matters [Source 1]."),
    streaming.phase_update(Phase.COMPLETE, "Answer complete"),
    streaming.final_result("Sleep matters [Source 1](#source-1).", SOURCES),
    streaming.done(),
]


def consumer_for(handler) -> SearchStreamConsumer:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return SearchStreamConsumer("http://testserver", http_client=client)


class TestParseDataLine:
    def test_parses_event_object(self):
        assert parse_data_line('data: {"type": "done"}') == {"type": "done"}

    def test_tolerates_trailing_carriage_return(self):
        assert parse_data_line('data: {"type": "done"}\r') == {"type": "done"}

    @pytest.mark.parametrize(
        "line",
        ["", ": ping", "event: message", "data: {not json}", "data: [1, 2]", 'data: {"chunk": "x"}'],
    )
    def test_ignores_non_event_lines(self, line):
        assert parse_data_line(line) is None


class TestApplyEvent:
    def test_chunks_accumulate_then_final_result_overrides(self):
        state = StreamState()
        for event in HAPPY_STREAM[:5]:
            apply_event(state, event.to_dict())

        assert state.answer == "Sleep matters [Source 1]."
        assert state.sources == SOURCES

        apply_event(state, HAPPY_STREAM[6].to_dict())

        assert state.answer == "Sleep matters [Source 1](#source-1)."

    def test_phase_update_sets_phase_and_message(self):
        state = apply_event(StreamState(), {"type": "phase-update", "phase": "searching", "message": "Searching..."})

        assert (state.phase, state.message) == ("searching", "Searching...")

    def test_progress_messages_update_message_only(self):
        state = apply_event(StreamState(phase="analyzing"), streaming.source_processing("Result 1").to_dict())

        assert state.phase == "analyzing"
        assert state.message == "Analyzing Result 1..."

    def test_error_is_terminal(self):
        state = apply_event(StreamState(), {"type": "error", "message": "Search failed: boom"})

        assert state.error == "Search failed: boom"
        assert state.finished


class TestSearchStreamConsumer:
    @pytest.mark.asyncio
    async def test_consumes_stream_until_done(self):
        body = frame(*HAPPY_STREAM)
        seen_requests: list[dict] = []

        async def stream_body():
            for i in range(0, len(body), 50):
                yield body[i:i + 50]

        def handler(request: httpx.Request) -> httpx.Response:
            seen_requests.append(json.loads(request.content))
            return httpx.Response(200, headers={"content-type": "text/event-stream"}, content=stream_body())

        updates: list[str] = []
        state = await consumer_for(handler).run("sleep", on_update=lambda s, e: updates.append(e["type"]))

        assert seen_requests == [{"query": "sleep"}]
        assert state.done is True
        assert state.error is None
        assert state.answer == "Sleep matters [Source 1](#source-1)."
        assert state.sources == SOURCES
        assert state.phase == "complete"
        assert state.elapsed_ms >= 0
        assert updates == [e.event.value for e in HAPPY_STREAM]

    @pytest.mark.asyncio
    async def test_chunks_split_inside_characters_and_lines(self):
        body = (
            b": ping\r\n\r\n"
            + frame(streaming.content_chunk("café "), streaming.content_chunk("naïve"))
            + b"data: {not json}\n\n"
            + frame(streaming.done())
        )
        split_at = body.index("é".encode("utf-8")) + 1

        async def stream_body():
            yield body[:split_at]
            for i in range(split_at, len(body), 5):
                yield body[i:i + 5]

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200,
                headers={"content-type": "text/event-stream; charset=utf-8"},
                content=stream_body(),
            )

        seen: list[str] = []
        state = await consumer_for(handler).run("coffee", on_update=lambda s, e: seen.append(e["type"]))

        assert seen == ["content-chunk", "content-chunk", "done"]
        assert state.answer == "café naïve"
        assert state.done is True
        assert state.error is None

    @pytest.mark.asyncio
    async def test_error_event_stops_reading(self):
        body = frame(
            streaming.phase_update(Phase.UNDERSTANDING, "Analyzing your health question..."),
            streaming.error("Search failed: network unreachable"),
            streaming.done(),
        )

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, content=body)

        state = await consumer_for(handler).run("sleep")

        assert state.error == "Search failed: network unreachable"
        assert state.done is False

    @pytest.mark.asyncio
    async def test_http_error_status_is_recorded(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(400, json={"detail": "Query is required"})

        state = await consumer_for(handler).run("")

        assert state.error is not None
        assert "400" in state.error

    @pytest.mark.asyncio
    async def test_cancel_exits_cleanly_without_error(self):
        cancel = asyncio.Event()

        async def never_ending_body():
            yield frame(streaming.phase_update(Phase.UNDERSTANDING, "Analyzing your health question..."))
            await asyncio.Event().wait()

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, content=never_ending_body())

        def on_update(state: StreamState, event: dict) -> None:
            if event["type"] == "phase-update":
                cancel.set()

        state = await consumer_for(handler).run("sleep", cancel=cancel, on_update=on_update)

        assert state.cancelled is True
        assert state.error is None
        assert state.done is False
        assert state.phase == "understanding"
