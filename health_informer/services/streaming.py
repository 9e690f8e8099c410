from __future__ import annotations

from typing import Any

from health_informer.models.events import EventType, Phase, SearchEvent


def phase_update(phase: Phase, message: str) -> SearchEvent:
    return SearchEvent(
        event=EventType.PHASE_UPDATE,
        data={"phase": phase.value, "message": message},
    )


def searching(query: str) -> SearchEvent:
    return SearchEvent(
        event=EventType.SEARCHING,
        data={"query": query, "message": f"Searching for: {query}"},
    )


def found(sources: list[dict[str, Any]], query: str) -> SearchEvent:
    return SearchEvent(event=EventType.FOUND, data={"sources": sources, "query": query})


def source_processing(title: str) -> SearchEvent:
    return SearchEvent(
        event=EventType.SOURCE_PROCESSING,
        data={"message": f"Analyzing {title}..."},
    )


def source_complete(summary: str) -> SearchEvent:
    return SearchEvent(event=EventType.SOURCE_COMPLETE, data={"message": summary})


def content_start() -> SearchEvent:
    return SearchEvent(
        event=EventType.CONTENT_START,
        data={"message": "Generating answer..."},
    )


def content_chunk(chunk: str) -> SearchEvent:
    return SearchEvent(event=EventType.CONTENT_CHUNK, data={"chunk": chunk})


def final_result(content: str, sources: list[dict[str, Any]]) -> SearchEvent:
    return SearchEvent(
        event=EventType.FINAL_RESULT,
        data={"content": content, "sources": sources},
    )


def done() -> SearchEvent:
    return SearchEvent(event=EventType.DONE)


def error(message: str) -> SearchEvent:
    return SearchEvent(event=EventType.ERROR, data={"message": message})
