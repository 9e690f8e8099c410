from __future__ import annotations

from typing import Any, AsyncIterator

from fastapi import APIRouter, HTTPException
from sse_starlette.sse import EventSourceResponse

from health_informer.agents.orchestrator import SearchOrchestrator
from health_informer.models.schemas import SearchStreamRequest

router = APIRouter(prefix="/api/health-news", tags=["search"])


async def event_stream(
    query: str,
    orchestrator: SearchOrchestrator,
) -> AsyncIterator[dict[str, Any]]:
    """Frame each pipeline event as one `data: <json>` SSE message."""
    async for event in orchestrator.run(query):
        yield {"data": event.to_json()}


@router.post("/search")
async def stream_search(request: SearchStreamRequest):
    """SSE endpoint that streams search, analysis and the cited answer."""
    query = request.query.strip()
    if not query:
        raise HTTPException(status_code=400, detail="Query is required")

    return EventSourceResponse(
        event_stream(query, SearchOrchestrator()),
        headers={"Cache-Control": "no-cache", "Connection": "keep-alive"},
        sep="\n",
    )
