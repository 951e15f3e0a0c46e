"""
Core data models / schemas for Spyglass.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional, Dict, Any
import uuid


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------

class AnalysisMode(str, Enum):
    STANDARD = "standard"
    DEEP = "deep"            # grounded on live web search


# ---------------------------------------------------------------------------
# Report structure
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Section:
    """One `## `-delimited chunk of a report, in document order."""
    index: int
    text: str

    @property
    def title(self) -> str:
        first_line = self.text.split("\n", 1)[0]
        return first_line.lstrip("#").strip()


# Column labels exactly as the report template writes them.
TRAFFIC_SOURCE_LABELS = ["Busca Orgânica", "Busca Paga", "Social", "Direto", "Referência"]


@dataclass
class TrafficRecord:
    competitor: str
    organic_search: float = 0.0
    paid_search: float = 0.0
    social: float = 0.0
    direct: float = 0.0
    referral: float = 0.0

    @property
    def sources(self) -> Dict[str, float]:
        return dict(zip(
            TRAFFIC_SOURCE_LABELS,
            [self.organic_search, self.paid_search, self.social, self.direct, self.referral],
        ))


# ---------------------------------------------------------------------------
# History
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class HistoryItem:
    id: str
    competitors: List[str]
    report: str
    date: str                       # ISO-8601, UTC

    @classmethod
    def new(cls, competitors: List[str], report: str) -> "HistoryItem":
        return cls(
            id=str(uuid.uuid4()),
            competitors=list(competitors),
            report=report,
            date=datetime.now(timezone.utc).isoformat(),
        )

    @property
    def label(self) -> str:
        return ", ".join(self.competitors)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "competitors": list(self.competitors),
            "report": self.report,
            "date": self.date,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HistoryItem":
        competitors = data["competitors"]
        if not isinstance(competitors, list):
            raise TypeError("competitors must be a list")
        return cls(
            id=str(data["id"]),
            competitors=[str(c) for c in competitors],
            report=str(data["report"]),
            date=str(data["date"]),
        )


# ---------------------------------------------------------------------------
# Media
# ---------------------------------------------------------------------------

@dataclass
class VideoOperation:
    """Long-running video generation handle."""
    name: str
    done: bool = False
    video_uri: Optional[str] = None
    error: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "done": self.done,
            "video_uri": self.video_uri,
            "error": self.error,
        }
