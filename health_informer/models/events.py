from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class EventType(str, Enum):
    PHASE_UPDATE = "phase-update"
    SEARCHING = "searching"
    FOUND = "found"
    SOURCE_PROCESSING = "source-processing"
    SOURCE_COMPLETE = "source-complete"
    CONTENT_START = "content-start"
    CONTENT_CHUNK = "content-chunk"
    FINAL_RESULT = "final-result"
    DONE = "done"
    ERROR = "error"


class Phase(str, Enum):
    UNDERSTANDING = "understanding"
    SEARCHING = "searching"
    ANALYZING = "analyzing"
    SYNTHESIZING = "synthesizing"
    COMPLETE = "complete"


@dataclass
class SearchEvent:
    event: EventType
    data: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Wire shape: the type tag plus whichever optional fields are set."""
        return {"type": self.event.value, **self.data}

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    def format(self) -> str:
        return f"data: {self.to_json()}\n\n"
