"""Feedback classification using OpenAI.

This module provides ``annotate`` which asks the model for a compact JSON
annotation (sentiment, score, urgency, themes, summary) of a single feedback
item. The model is not trusted to emit pure JSON, so the first balanced
``{...}`` in the reply is extracted and every field is validated on its own.

``annotate`` never raises: when the model is unreachable or its reply is
unusable the fixed fallback annotation is returned so ingestion can proceed.
"""
from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from src.openai_client import chat_completion

_logger = logging.getLogger(__name__)

SUMMARY_FALLBACK_CHARS = 100


class SentimentLabel(str, Enum):
    """Enumeration of supported sentiment classes."""

    POSITIVE = "positive"
    NEUTRAL = "neutral"
    NEGATIVE = "negative"


class UrgencyLevel(str, Enum):
    """Enumeration of supported urgency levels."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


@dataclass(frozen=True)
class Annotation:
    """Structured classification attached to a feedback record."""

    sentiment: str
    sentiment_score: float  # range -1.0 .. 1.0
    urgency: str
    themes: List[str] = field(default_factory=list)
    summary: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sentiment": self.sentiment,
            "sentiment_score": self.sentiment_score,
            "urgency": self.urgency,
            "themes": list(self.themes),
            "summary": self.summary,
        }


def fallback_annotation(content: str) -> Annotation:
    """Return the fixed annotation used when the model output is unusable."""

    return Annotation(
        sentiment=SentimentLabel.NEUTRAL.value,
        sentiment_score=0.0,
        urgency=UrgencyLevel.MEDIUM.value,
        themes=[],
        summary=content[:SUMMARY_FALLBACK_CHARS],
    )


def extract_json_object(text: str) -> Optional[str]:
    """Return the first balanced ``{...}`` substring of *text*, if any.

    Braces inside JSON string literals are ignored so that a summary such as
    ``"uses {curly} braces"`` does not end the object early.
    """

    start = text.find("{")
    while start != -1:
        depth = 0
        in_string = False
        escaped = False
        for idx in range(start, len(text)):
            char = text[idx]
            if in_string:
                if escaped:
                    escaped = False
                elif char == "\\":
                    escaped = True
                elif char == '"':
                    in_string = False
                continue
            if char == '"':
                in_string = True
            elif char == "{":
                depth += 1
            elif char == "}":
                depth -= 1
                if depth == 0:
                    return text[start : idx + 1]
        # Unbalanced from this brace; try the next opening brace.
        start = text.find("{", start + 1)
    return None


def _label(value: Any, enum_cls: type, default: Enum) -> str:
    if isinstance(value, str):
        try:
            return enum_cls(value.strip().lower()).value
        except ValueError:
            pass
    return default.value


def _score(value: Any) -> float:
    # bool is an int subclass; reject it explicitly
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0.0
    try:
        score = float(value)
    except (OverflowError, ValueError):
        return 0.0
    # json.loads accepts NaN and Infinity literals
    if not math.isfinite(score):
        return 0.0
    return max(-1.0, min(1.0, score))


def _themes(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, str)]


def parse_annotation(text: str, content: str) -> Optional[Annotation]:
    """Extract an :class:`Annotation` from the model's raw *text* reply.

    Returns ``None`` when no JSON object can be recovered. Individual fields
    that are missing or malformed fall back to their defaults; *content* is
    used for the default summary.
    """

    candidate = extract_json_object(text)
    if candidate is None:
        return None

    try:
        payload = json.loads(candidate)
    except json.JSONDecodeError:
        return None
    if not isinstance(payload, dict):
        return None

    summary = payload.get("summary")
    if not isinstance(summary, str) or not summary.strip():
        summary = content[:SUMMARY_FALLBACK_CHARS]

    return Annotation(
        sentiment=_label(payload.get("sentiment"), SentimentLabel, SentimentLabel.NEUTRAL),
        sentiment_score=_score(payload.get("sentiment_score")),
        urgency=_label(payload.get("urgency"), UrgencyLevel, UrgencyLevel.MEDIUM),
        themes=_themes(payload.get("themes")),
        summary=summary,
    )


_PROMPT_SYSTEM = (
    "You are a precise customer feedback analyst. "
    "Respond with ONLY valid JSON, no other text."
)


def _build_user_prompt(content: str) -> str:
    return (
        "Analyze the following customer feedback and provide a JSON response "
        "with these fields:\n"
        '- sentiment: one of "positive", "negative", or "neutral"\n'
        "- sentiment_score: a number from -1 (very negative) to 1 (very positive)\n"
        '- urgency: one of "low", "medium", "high", or "critical"\n'
        "- themes: an array of 1-3 key themes or topics mentioned "
        '(e.g., ["performance", "pricing", "documentation"])\n'
        "- summary: a one-sentence summary of the feedback\n\n"
        f'Feedback: "{content}"'
    )


def annotate(content: str, *, temperature: float = 0.0, max_tokens: int = 300) -> Annotation:
    """Classify *content*; degrade to :func:`fallback_annotation` on any failure."""

    messages = [
        {"role": "system", "content": _PROMPT_SYSTEM},
        {"role": "user", "content": _build_user_prompt(content)},
    ]

    try:
        response = chat_completion(
            messages, temperature=temperature, max_tokens=max_tokens
        )
        reply: str = response["choices"][0]["message"]["content"] or ""
        annotation = parse_annotation(reply, content)
    except Exception as exc:  # noqa: BLE001
        _logger.warning("Feedback annotation failed: %s", exc, exc_info=True)
        return fallback_annotation(content)

    if annotation is None:
        _logger.warning("Model reply contained no JSON object; using fallback")
        return fallback_annotation(content)
    return annotation
