from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class Source:
    """A normalized search result; `summary` is attached once during analysis."""

    url: str
    title: str
    content: str | None = None
    summary: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"url": self.url, "title": self.title}
        if self.content is not None:
            data["content"] = self.content
        if self.summary is not None:
            data["summary"] = self.summary
        return data


@dataclass
class PipelineRun:
    """Mutable state owned by a single search-and-synthesize request."""

    query: str
    sources: list[Source] = field(default_factory=list)
    full_answer: str = ""

    def source_dicts(self) -> list[dict[str, Any]]:
        return [s.to_dict() for s in self.sources]
