"""Aggregate stored feedback into :class:`AggregatedStats`."""

from __future__ import annotations

import datetime
import logging
from collections import Counter, defaultdict
from typing import Dict, Iterable, List, Optional, Sequence

from src import config
from src.analysis.themes import top_themes
from src.feedback_data import FeedbackRecord
from src.reporting.models import NULL_BUCKET, AggregatedStats, ThemeCount, TrendPoint

logger = logging.getLogger(__name__)

_PRECISION = 3


def _tally(values: Iterable[Optional[str]]) -> Dict[str, int]:
    """Return a mapping value→count, tallying ``None`` under :data:`NULL_BUCKET`."""
    counts: Counter[str] = Counter()
    for value in values:
        counts[NULL_BUCKET if value is None else value] += 1
    return dict(counts)


def _mean(scores: Sequence[float]) -> Optional[float]:
    if not scores:
        return None
    return round(sum(scores) / len(scores), _PRECISION)


def _trend(
    records: Sequence[FeedbackRecord], now: datetime.datetime, days: int
) -> List[TrendPoint]:
    cutoff = (now - datetime.timedelta(days=days)).date()
    per_day: Dict[datetime.date, List[FeedbackRecord]] = defaultdict(list)
    for rec in records:
        if rec.created_at is None:
            continue
        day = rec.created_at.date()
        if cutoff <= day <= now.date():
            per_day[day].append(rec)

    return [
        TrendPoint(
            date=day.isoformat(),
            count=len(items),
            avg_sentiment=_mean(
                [r.sentiment_score for r in items if r.sentiment_score is not None]
            ),
        )
        for day, items in sorted(per_day.items())
    ]


def compute_stats(
    records: Sequence[FeedbackRecord],
    *,
    now: Optional[datetime.datetime] = None,
    theme_limit: int = config.TOP_THEMES_LIMIT,
    trend_days: int = config.TREND_DAYS,
) -> AggregatedStats:
    """Convert *records* into :class:`AggregatedStats`.

    The function is pure: it reads nothing but its arguments. *now* is the
    naive-UTC reference time for the trailing trend window and defaults to
    the current time.
    """

    if now is None:
        now = datetime.datetime.now(datetime.timezone.utc).replace(tzinfo=None)

    # Sources are listed busiest first; sorted() keeps ties in encounter order.
    source_counts = _tally(r.source for r in records)
    sources = dict(sorted(source_counts.items(), key=lambda kv: kv[1], reverse=True))

    scores = [r.sentiment_score for r in records if r.sentiment_score is not None]

    stats = AggregatedStats(
        total=len(records),
        sentiment=_tally(r.sentiment for r in records),
        sources=sources,
        urgency=_tally(r.urgency for r in records),
        top_themes=[
            ThemeCount(name=name, count=count)
            for name, count in top_themes((r.themes for r in records), limit=theme_limit)
        ],
        average_sentiment=_mean(scores) or 0.0,
        trend=_trend(records, now, trend_days),
    )
    logger.debug(
        "Computed stats over %d records (%d themes, %d trend days)",
        stats.total,
        len(stats.top_themes),
        len(stats.trend),
    )
    return stats
