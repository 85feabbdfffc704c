"""Render the dashboard page and the Slack stats digest using Jinja2 templates."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Optional

from jinja2 import Environment, FileSystemLoader, select_autoescape

from src import config

logger = logging.getLogger(__name__)

_TEMPLATE_DIR = Path(__file__).parent / "templates"

# HTML is autoescaped; the Slack markdown digest must keep characters as-is.
_env = Environment(
    loader=FileSystemLoader(str(_TEMPLATE_DIR)),
    autoescape=select_autoescape(enabled_extensions=("html.j2",), default=False),
    trim_blocks=True,
    lstrip_blocks=True,
)

_SENTIMENT_EMOJI = {"positive": "😊", "neutral": "😐", "negative": "🙁"}


# ---------------------------------------------------------------------------
# Helper functions
# ---------------------------------------------------------------------------


def _emoji_bar(counts: Dict[str, int], max_emoji: int = 20) -> str:
    """Return a string bar of emojis based on sentiment *counts*.

    Positive → 😊, Neutral → 😐, Negative → 🙁.  Limit total length to *max_emoji*.
    """

    pos = counts.get("positive", 0)
    neu = counts.get("neutral", 0)
    neg = counts.get("negative", 0)
    total = pos + neu + neg or 1

    scale = max_emoji / total
    pos_e = _SENTIMENT_EMOJI["positive"] * max(1 if pos else 0, round(pos * scale))
    neu_e = _SENTIMENT_EMOJI["neutral"] * max(1 if neu else 0, round(neu * scale))
    neg_e = _SENTIMENT_EMOJI["negative"] * max(1 if neg else 0, round(neg * scale))
    return pos_e + neu_e + neg_e


def _percent(count: int, total: int) -> int:
    return round(100 * count / total) if total else 0


_env.filters["percent"] = _percent


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def render_dashboard(stats: Optional[Dict[str, Any]], *, error: Optional[str] = None) -> str:
    """Render the HTML dashboard.

    *stats* is the ``/api/stats`` payload used for the first paint; ``None``
    means it could not be loaded and *error* explains why. The page refreshes
    itself through the JSON API afterwards.
    """

    template = _env.get_template("dashboard.html.j2")
    return template.render(
        stats=stats,
        error=error,
        list_limit=config.DEFAULT_LIST_LIMIT,
    )


def render_digest(stats: Dict[str, Any]) -> str:
    """Render a Slack-friendly markdown digest of dashboard *stats*."""

    template = _env.get_template("digest.md.j2")
    text = template.render(
        stats=stats,
        emoji_bar=_emoji_bar(stats.get("sentiment", {})),
    )
    logger.debug("Digest rendered len=%d total=%s", len(text), stats.get("total"))
    return text
