from __future__ import annotations

import time
from dataclasses import dataclass, field

from health_informer.config import settings
from health_informer.errors import ProviderError, SearchError
from health_informer.services import logger as log_service
from health_informer.tools.base import SearchProvider, SearchProviderName, SearchResult
from health_informer.tools.brave_search import BraveProvider
from health_informer.tools.tavily_search import TavilyProvider


@dataclass
class NormalizedResult:
    url: str
    title: str
    description: str
    content: str
    markdown: str
    scraped: bool
    score: float = 0.0


@dataclass
class SearchResponse:
    data: list[NormalizedResult] = field(default_factory=list)
    provider: str = ""


def get_provider(name: str | None = None) -> SearchProvider:
    """Build the adapter for a configured provider name."""
    raw = (name if name is not None else settings.search_provider).lower().strip()
    try:
        provider_name = SearchProviderName(raw)
    except ValueError:
        raise ValueError(f"Unsupported SEARCH_PROVIDER: {raw}") from None

    timeout = settings.search_timeout_seconds
    if provider_name is SearchProviderName.TAVILY:
        return TavilyProvider(
            settings.tavily_api_key,
            base_url=settings.tavily_base_url,
            timeout=timeout,
        )
    return BraveProvider(settings.brave_api_key, timeout=timeout)


def normalize(result: SearchResult) -> NormalizedResult:
    # Full page text beats the short snippet when the provider returned it.
    body = result.raw_content or result.content
    return NormalizedResult(
        url=result.url,
        title=result.title,
        description=result.content,
        content=body,
        markdown=body,
        scraped=bool(result.raw_content),
        score=result.score,
    )


class UnifiedSearchClient:
    """Front door for web search: one provider, bounded and normalized results."""

    def __init__(self, provider: SearchProvider | None = None):
        self.provider = provider or get_provider()

    async def search(self, query: str, *, limit: int | None = None) -> SearchResponse:
        max_results = limit or settings.max_sources_per_search
        provider_name = self.provider.name.value
        t0 = time.monotonic()
        try:
            results = await self.provider.search(
                query,
                max_results=max_results,
                depth=settings.search_depth,
            )
        except ProviderError as exc:
            log_service.log_search_call(
                provider=provider_name,
                query=query,
                duration_ms=int((time.monotonic() - t0) * 1000),
                status="error",
                error=str(exc),
            )
            raise SearchError(f"Search failed: {exc}") from exc

        normalized = [normalize(r) for r in results[:max_results]]
        log_service.log_search_call(
            provider=provider_name,
            query=query,
            results_count=len(normalized),
            duration_ms=int((time.monotonic() - t0) * 1000),
        )
        return SearchResponse(data=normalized, provider=provider_name)
