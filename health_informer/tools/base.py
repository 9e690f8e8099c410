from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum

import httpx

from health_informer.errors import ParseError, ProviderError


class SearchProviderName(str, Enum):
    TAVILY = "tavily"
    BRAVE = "brave"


@dataclass
class SearchResult:
    """Raw result as returned by a provider adapter."""

    title: str
    url: str
    content: str
    score: float = 0.0
    raw_content: str | None = None


class SearchProvider(ABC):
    """One web-search API. Adapters make a single call and never retry."""

    name: SearchProviderName

    def __init__(self, api_key: str, *, timeout: float = 30.0):
        self.api_key = api_key
        self.timeout = timeout

    @abstractmethod
    async def search(
        self,
        query: str,
        *,
        max_results: int = 10,
        depth: str = "advanced",
    ) -> list[SearchResult]:
        ...

    def _require_key(self, env_name: str) -> None:
        if not self.api_key:
            raise ProviderError(self.name.value, None, f"{env_name} is not configured")

    def _check_response(self, response: httpx.Response) -> dict:
        if response.status_code >= 400:
            raise ProviderError(self.name.value, response.status_code, response.text)
        try:
            payload = response.json()
        except ValueError as exc:
            raise ParseError(f"{self.name.value} returned a non-JSON response") from exc
        if not isinstance(payload, dict):
            raise ParseError(f"{self.name.value} returned an unexpected response shape")
        return payload
