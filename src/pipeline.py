"""Feedback ingestion and read pipeline.

:class:`FeedbackService` ties the classifier, the feedback store, the stats
cache and the summary generator together. HTTP handlers and the Slack
adapter call into it; it never touches request objects itself.
"""
from __future__ import annotations

import json
import logging
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from src import config
from src.analysis.classifier import Annotation, annotate
from src.analysis.summary import summarize_feedback
from src.exceptions import FeedbackValidationError
from src.feedback_data import FeedbackRecord
from src.feedback_store import FeedbackFilter, FeedbackStore
from src.reporting.aggregator import compute_stats
from src.result_cache import ResultCache
from src.seed_data import DEMO_FEEDBACK, DemoFeedback

logger = logging.getLogger(__name__)

Annotator = Callable[[str], Annotation]
Summarizer = Callable[[Sequence[FeedbackRecord]], str]


def _metadata_text(metadata: Union[str, Mapping[str, Any], None]) -> Optional[str]:
    if metadata is None or isinstance(metadata, str):
        return metadata
    return json.dumps(metadata)


class FeedbackService:
    """Submit, list, aggregate and summarise feedback."""

    def __init__(
        self,
        store: FeedbackStore,
        cache: ResultCache,
        *,
        annotator: Annotator = annotate,
        summarizer: Summarizer = summarize_feedback,
    ):
        self.store = store
        self.cache = cache
        self._annotate = annotator
        self._summarize = summarizer

    def init(self) -> None:
        self.store.init_schema()

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def submit(
        self,
        source: Optional[str],
        content: Optional[str],
        *,
        source_id: Optional[str] = None,
        author: Optional[str] = None,
        metadata: Union[str, Mapping[str, Any], None] = None,
    ) -> Tuple[int, Annotation]:
        """Classify and persist one feedback item.

        Returns the new record id and the annotation attached to it.

        Raises
        ------
        FeedbackValidationError
            If ``content`` or ``source`` is missing or blank. The model is
            not called in that case.
        """
        missing = [
            name
            for name, value in (("content", content), ("source", source))
            if not (value or "").strip()
        ]
        if missing:
            raise FeedbackValidationError(missing)

        annotation = self._annotate(content)
        record_id = self._persist(
            FeedbackRecord(
                source=source,
                content=content,
                source_id=source_id,
                author=author,
                metadata=_metadata_text(metadata),
            ),
            annotation,
        )
        self.cache.invalidate()
        logger.info(
            "feedback_received",
            extra={"feedback_id": record_id, "source": source, "sentiment": annotation.sentiment},
        )
        return record_id, annotation

    def _persist(self, record: FeedbackRecord, annotation: Annotation) -> int:
        record.sentiment = annotation.sentiment
        record.sentiment_score = annotation.sentiment_score
        record.urgency = annotation.urgency
        record.themes = list(annotation.themes)
        record.summary = annotation.summary
        return self.store.insert(record)

    def reset(self) -> None:
        """Delete every record and drop the cached stats."""
        self.store.delete_all()
        self.cache.invalidate()
        logger.info("feedback_reset")

    def seed(self, items: Iterable[DemoFeedback] = DEMO_FEEDBACK) -> int:
        """Replace all feedback with the demo data set; return the number imported.

        Items are annotated and inserted strictly one at a time, so repeated
        seeding always leaves exactly ``len(items)`` records.
        """
        self.store.init_schema()
        self.store.delete_all()
        self.cache.invalidate()

        imported = 0
        for item in items:
            annotation = self._annotate(item.content)
            self._persist(
                FeedbackRecord(source=item.source, content=item.content, author=item.author),
                annotation,
            )
            imported += 1

        self.cache.invalidate()
        logger.info("feedback_seeded", extra={"imported": imported})
        return imported

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def list_feedback(
        self,
        *,
        source: Optional[str] = None,
        sentiment: Optional[str] = None,
        urgency: Optional[str] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> Tuple[List[FeedbackRecord], int]:
        """Return one page of matching records and the total match count.

        *limit* defaults to ``config.DEFAULT_LIST_LIMIT`` and is capped at
        ``config.MAX_LIST_LIMIT``.
        """
        page_size = config.DEFAULT_LIST_LIMIT if limit is None else limit
        if page_size > config.MAX_LIST_LIMIT:
            logger.debug("Capping list limit %d to %d", page_size, config.MAX_LIST_LIMIT)
            page_size = config.MAX_LIST_LIMIT

        filters = FeedbackFilter(source=source, sentiment=sentiment, urgency=urgency)
        records = self.store.list(filters, limit=page_size, offset=offset)
        return records, self.store.count(filters)

    def stats(self) -> Dict[str, Any]:
        """Return dashboard statistics, recomputing them on a cache miss."""
        cached = self.cache.get()
        if cached is not None:
            return cached

        logger.info("stats_cache_miss")
        stats = compute_stats(self.store.all_records()).to_dict()
        self.cache.put(stats, config.STATS_CACHE_TTL_SECONDS)
        return stats

    def summary(self) -> Dict[str, Any]:
        """Return an executive summary of the most recent feedback."""
        records = self.store.recent(config.SUMMARY_RECENT_LIMIT)
        return {"summary": self._summarize(records), "feedbackCount": len(records)}
