import datetime
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


def _isoformat(value: Optional[datetime.datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


@dataclass
class FeedbackRecord:
    """A single feedback item and its annotation.

    ``id``, ``created_at`` and ``analyzed_at`` are assigned by the feedback
    store on insert; callers leave them unset. The annotation fields are
    nullable because the underlying table does not enforce them, even though
    every record written through the pipeline carries a full annotation.
    """

    source: str
    content: str
    source_id: Optional[str] = None
    author: Optional[str] = None
    metadata: Optional[str] = None
    sentiment: Optional[str] = None
    sentiment_score: Optional[float] = None
    urgency: Optional[str] = None
    themes: List[str] = field(default_factory=list)
    summary: Optional[str] = None
    analyzed_at: Optional[datetime.datetime] = None
    created_at: Optional[datetime.datetime] = None
    id: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        """Return the JSON-ready representation served by the HTTP API."""
        return {
            "id": self.id,
            "source": self.source,
            "source_id": self.source_id,
            "author": self.author,
            "content": self.content,
            "sentiment": self.sentiment,
            "sentiment_score": self.sentiment_score,
            "urgency": self.urgency,
            "themes": list(self.themes),
            "summary": self.summary,
            "analyzed_at": _isoformat(self.analyzed_at),
            "created_at": _isoformat(self.created_at),
            "metadata": self.metadata,
        }

    def __repr__(self) -> str:
        preview = self.content if len(self.content) <= 20 else f"{self.content[:20]}..."
        parts = [
            f"id={self.id}",
            f"source='{self.source}'",
            f"content='{preview}'",
        ]
        if self.sentiment:
            parts.append(f"sentiment='{self.sentiment}'")
        if self.urgency:
            parts.append(f"urgency='{self.urgency}'")
        if self.created_at:
            parts.append(f"created_at='{self.created_at.isoformat()}'")
        return f"FeedbackRecord({', '.join(parts)})"
