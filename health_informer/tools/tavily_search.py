from __future__ import annotations

from typing import Any

import httpx

from health_informer.errors import ParseError, ProviderError
from health_informer.tools.base import SearchProvider, SearchProviderName, SearchResult


class TavilyProvider(SearchProvider):
    name = SearchProviderName.TAVILY

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = "https://api.tavily.com",
        timeout: float = 30.0,
    ):
        super().__init__(api_key, timeout=timeout)
        self.base_url = base_url.rstrip("/")

    async def search(
        self,
        query: str,
        *,
        max_results: int = 10,
        depth: str = "advanced",
    ) -> list[SearchResult]:
        """Execute a Tavily web search, asking for full page content alongside snippets."""
        self._require_key("TAVILY_API_KEY")

        body: dict[str, Any] = {
            "query": query,
            "search_depth": depth,
            "max_results": max_results,
            "include_answer": True,
            "include_raw_content": True,
            "include_images": False,
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    f"{self.base_url}/search",
                    json=body,
                    headers={
                        "Content-Type": "application/json",
                        "Authorization": f"Bearer {self.api_key}",
                    },
                )
        except httpx.HTTPError as exc:
            raise ProviderError(self.name.value, None, str(exc) or type(exc).__name__) from exc

        payload = self._check_response(response)
        try:
            return [
                SearchResult(
                    title=r.get("title", "") or "",
                    url=r.get("url", "") or "",
                    content=r.get("content", "") or "",
                    score=float(r.get("score", 0.0) or 0.0),
                    raw_content=r.get("raw_content") or None,
                )
                for r in payload.get("results", []) or []
            ]
        except (AttributeError, TypeError, ValueError) as exc:
            raise ParseError(f"{self.name.value} returned an unexpected result shape") from exc
