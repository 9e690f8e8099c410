from __future__ import annotations

from typing import Any

import httpx

from health_informer.errors import ParseError, ProviderError
from health_informer.tools.base import SearchProvider, SearchProviderName, SearchResult

BRAVE_SEARCH_URL = "https://api.search.brave.com/res/v1/web/search"


class BraveProvider(SearchProvider):
    name = SearchProviderName.BRAVE

    async def search(
        self,
        query: str,
        *,
        max_results: int = 10,
        depth: str = "advanced",
    ) -> list[SearchResult]:
        """Execute a Brave web search and normalize results.

        Brave has no depth setting and never returns full page content.
        """
        self._require_key("BRAVE_API_KEY")

        params: dict[str, Any] = {
            "q": query,
            "count": max_results,
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(
                    BRAVE_SEARCH_URL,
                    params=params,
                    headers={
                        "Accept": "application/json",
                        "X-Subscription-Token": self.api_key,
                    },
                )
        except httpx.HTTPError as exc:
            raise ProviderError(self.name.value, None, str(exc) or type(exc).__name__) from exc

        payload = self._check_response(response)
        try:
            raw_results = (payload.get("web") or {}).get("results", []) or []
            total = max(len(raw_results), 1)
            mapped: list[SearchResult] = []
            for idx, item in enumerate(raw_results):
                snippets = item.get("extra_snippets", []) or []
                description = item.get("description", "") or ""
                content = description.strip() or " ".join(snippets).strip()
                # Brave does not expose a relevance score in this response shape.
                score = max(0.0, 1.0 - (idx / total))
                mapped.append(
                    SearchResult(
                        title=item.get("title", ""),
                        url=item.get("url", ""),
                        content=content,
                        score=score,
                    )
                )
        except (AttributeError, TypeError, ValueError) as exc:
            raise ParseError(f"{self.name.value} returned an unexpected result shape") from exc
        return mapped
