from __future__ import annotations

import asyncio
import re
import time
from contextlib import aclosing
from typing import AsyncGenerator

from loguru import logger

from health_informer.config import settings
from health_informer.errors import HealthInformerError, LLMError, ParseError
from health_informer.llm_client import LLMClient, client as llm_client
from health_informer.models.events import Phase, SearchEvent
from health_informer.models.research import PipelineRun, Source
from health_informer.services import logger as log_service
from health_informer.services import streaming
from health_informer.services.prompt_store import render_prompt
from health_informer.tools.search_provider import UnifiedSearchClient

# A bare marker is one not already followed by a link target.
CITATION_PATTERN = re.compile(r"\[Source (\d+)\](?!\()")


def link_citations(text: str) -> str:
    """Turn every bare `[Source N]` into `[Source N](#source-N)`.

    Idempotent: already-linked citations are left alone.
    """
    return CITATION_PATTERN.sub(r"[Source \1](#source-\1)", text)


class SearchOrchestrator:
    """Runs the search-and-synthesize pipeline for one query.

    Flow:
      1. understanding
      2. searching: one web search, capped to the display limit
      3. analyzing: short LLM summary per source, one at a time, in order
      4. synthesizing: cited answer streamed chunk by chunk
      5. complete: citation links fixed up, final result, done

    `run` is a lazy, finite async generator of SearchEvents. A failure anywhere ends
    the sequence with a single `error` event; a failed per-source summary is skipped.
    """

    def __init__(
        self,
        search_client: UnifiedSearchClient | None = None,
        llm: LLMClient | None = None,
    ):
        self.search_client = search_client
        self.llm = llm
        self.max_sources_per_search = max(int(settings.max_sources_per_search), 1)
        self.max_display_sources = max(int(settings.max_display_sources), 1)
        self.summary_min_content_chars = max(int(settings.summary_min_content_chars), 0)
        self.summary_content_chars = max(int(settings.summary_content_chars), 1)
        self.context_fallback_chars = max(int(settings.context_fallback_chars), 0)

    def _search_client(self) -> UnifiedSearchClient:
        if self.search_client is None:
            self.search_client = UnifiedSearchClient()
        return self.search_client

    def _llm(self) -> LLMClient:
        return self.llm or llm_client()

    async def run(self, query: str) -> AsyncGenerator[SearchEvent, None]:
        query = (query or "").strip()
        if not query:
            raise ValueError("Query is required")

        pipeline = PipelineRun(query=query)
        started_at = time.monotonic()
        log_service.log_event(
            event_type="search_started",
            message="Search-and-synthesize started",
            query=query[:100],
        )
        try:
            yield streaming.phase_update(Phase.UNDERSTANDING, "Analyzing your health question...")
            for phase in (self._search, self._analyze, self._synthesize, self._complete):
                async with aclosing(phase(pipeline)) as events:
                    async for event in events:
                        yield event
        except (asyncio.CancelledError, GeneratorExit):
            log_service.log_event(
                event_type="search_cancelled",
                message="Client went away before the pipeline finished",
                query=query[:100],
            )
            raise
        except Exception as exc:
            logger.exception(f"Search pipeline failed for query {query[:100]!r}")
            yield streaming.error(self._client_message(exc))
            return

        log_service.log_event(
            event_type="search_complete",
            message="Search-and-synthesize complete",
            query=query[:100],
            sources_count=len(pipeline.sources),
            runtime_ms=int((time.monotonic() - started_at) * 1000),
        )

    @staticmethod
    def _client_message(exc: Exception) -> str:
        if isinstance(exc, HealthInformerError) and str(exc):
            return str(exc)
        return "Search failed unexpectedly."

    async def _search(self, pipeline: PipelineRun) -> AsyncGenerator[SearchEvent, None]:
        yield streaming.phase_update(Phase.SEARCHING, "Searching health sources...")
        yield streaming.searching(pipeline.query)

        response = await self._search_client().search(
            pipeline.query,
            limit=self.max_sources_per_search,
        )
        # Citation numbers are positions in this list, so it is never reordered.
        pipeline.sources = [
            Source(url=r.url, title=r.title, content=r.content or r.markdown or None)
            for r in response.data[: self.max_display_sources]
        ]
        yield streaming.found(pipeline.source_dicts(), pipeline.query)

    def _should_summarize(self, source: Source) -> bool:
        return bool(source.content) and len(source.content) > self.summary_min_content_chars

    async def _summarize_source(self, query: str, source: Source) -> str:
        prompt = render_prompt(
            "orchestrator.source_summary",
            query=query,
            content=(source.content or "")[: self.summary_content_chars],
        )
        result = await self._llm().invoke(
            [{"role": "user", "content": prompt}],
            caller="orchestrator.source_summary",
        )
        return result.content.strip()

    async def _analyze(self, pipeline: PipelineRun) -> AsyncGenerator[SearchEvent, None]:
        yield streaming.phase_update(Phase.ANALYZING, "Analyzing medical information...")

        for source in pipeline.sources:
            if not self._should_summarize(source):
                continue

            yield streaming.source_processing(source.title)
            try:
                summary = await self._summarize_source(pipeline.query, source)
            except (LLMError, ParseError) as exc:
                logger.warning(f"Summary failed for {source.url}: {exc}")
                continue

            if not summary:
                logger.warning(f"Empty summary for {source.url}")
                continue
            source.summary = summary
            yield streaming.source_complete(summary)

    def _build_context(self, pipeline: PipelineRun) -> str:
        blocks = []
        for index, source in enumerate(pipeline.sources, start=1):
            body = source.summary or (source.content or "")[: self.context_fallback_chars]
            blocks.append(f"Source {index} ({source.title}):\n{body}")
        return "\n\n".join(blocks)

    async def _synthesize(self, pipeline: PipelineRun) -> AsyncGenerator[SearchEvent, None]:
        yield streaming.phase_update(Phase.SYNTHESIZING, "Generating your answer...")

        prompt = render_prompt(
            "orchestrator.answer",
            query=pipeline.query,
            context=self._build_context(pipeline),
        )
        yield streaming.content_start()

        chunks = self._llm().iter_stream(
            [{"role": "user", "content": prompt}],
            caller="orchestrator.synthesis",
        )
        async with aclosing(chunks):
            async for chunk in chunks:
                pipeline.full_answer += chunk
                yield streaming.content_chunk(chunk)

    async def _complete(self, pipeline: PipelineRun) -> AsyncGenerator[SearchEvent, None]:
        pipeline.full_answer = link_citations(pipeline.full_answer)

        yield streaming.phase_update(Phase.COMPLETE, "Answer complete")
        yield streaming.final_result(pipeline.full_answer, pipeline.source_dicts())
        yield streaming.done()
