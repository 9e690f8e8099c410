"""Error types raised by the search, LLM and parsing layers."""
from __future__ import annotations


class HealthInformerError(Exception):
    """Base class; str(error) is always safe to show to a client."""


class ProviderError(HealthInformerError):
    """A web-search provider call failed."""

    def __init__(self, provider: str, status_code: int | None, body: str):
        self.provider = provider
        self.status_code = status_code
        self.body = body
        if status_code is None:
            message = f"{provider} search failed: {body}"
        else:
            message = f"{provider} API error: {status_code} - {body}"
        super().__init__(message)


class SearchError(HealthInformerError):
    """The unified search client could not produce results."""


class LLMError(HealthInformerError):
    """The language model endpoint failed or dropped the connection."""


class ParseError(HealthInformerError):
    """An upstream response could not be parsed into the expected shape."""
