"""Data structures for the statistics pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

# Breakdown key used for records whose grouped column is NULL
NULL_BUCKET = "null"


@dataclass(slots=True)
class ThemeCount:
    name: str
    count: int


@dataclass(slots=True)
class TrendPoint:
    """Feedback volume and mean sentiment for one calendar day."""

    date: str  # ISO-8601 date (UTC)
    count: int
    avg_sentiment: Optional[float]


@dataclass(slots=True)
class AggregatedStats:
    """Derived dashboard statistics over every stored record."""

    total: int
    sentiment: Dict[str, int] = field(default_factory=dict)
    sources: Dict[str, int] = field(default_factory=dict)
    urgency: Dict[str, int] = field(default_factory=dict)
    top_themes: List[ThemeCount] = field(default_factory=list)
    average_sentiment: float = 0.0
    trend: List[TrendPoint] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Return the JSON payload served by ``/api/stats`` and cached as-is."""
        return {
            "total": self.total,
            "sentiment": dict(self.sentiment),
            "sources": dict(self.sources),
            "urgency": dict(self.urgency),
            "topThemes": [{"name": t.name, "count": t.count} for t in self.top_themes],
            "averageSentiment": self.average_sentiment,
            "trend": [
                {"date": p.date, "count": p.count, "avg_sentiment": p.avg_sentiment}
                for p in self.trend
            ],
        }
