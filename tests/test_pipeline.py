"""Tests for FeedbackService wiring: ingestion, cache coherence and seeding."""
from unittest.mock import MagicMock

import pytest

from src import config
from src.analysis.classifier import Annotation, fallback_annotation
from src.exceptions import FeedbackValidationError
from src.feedback_store import FeedbackStore
from src.pipeline import FeedbackService
from src.result_cache import InMemoryResultCache
from src.seed_data import DEMO_FEEDBACK, DemoFeedback


def _fake_annotator(content: str) -> Annotation:
    negative = "bug" in content.lower() or "crash" in content.lower()
    return Annotation(
        sentiment="negative" if negative else "positive",
        sentiment_score=-0.8 if negative else 0.6,
        urgency="high" if negative else "low",
        themes=["stability"] if negative else ["praise"],
        summary=content[:40],
    )


@pytest.fixture()
def store():
    s = FeedbackStore.from_url("sqlite://")
    s.init_schema()
    return s


@pytest.fixture()
def service(store):
    return FeedbackService(store, InMemoryResultCache(), annotator=_fake_annotator)


def test_submit_persists_annotated_record(service, store):
    record_id, analysis = service.submit(
        "github", "App crashes on launch", source_id="GH-1", author="dev", metadata={"repo": "x"}
    )

    stored = store.list()[0]
    assert stored.id == record_id
    assert stored.sentiment == analysis.sentiment == "negative"
    assert stored.themes == ["stability"]
    assert stored.source_id == "GH-1"
    assert stored.metadata == '{"repo": "x"}'


@pytest.mark.parametrize(
    "source, content, message",
    [
        ("github", "", "content is required"),
        ("", "hello", "source is required"),
        (None, "  ", "content and source are required"),
    ],
)
def test_submit_validation_skips_model(store, source, content, message):
    annotator = MagicMock()
    svc = FeedbackService(store, InMemoryResultCache(), annotator=annotator)

    with pytest.raises(FeedbackValidationError, match=message):
        svc.submit(source, content)
    annotator.assert_not_called()


def test_submit_survives_annotation_fallback(store):
    svc = FeedbackService(store, InMemoryResultCache(), annotator=fallback_annotation)
    _, analysis = svc.submit("email", "x" * 150)
    assert analysis.sentiment == "neutral"
    assert store.list()[0].summary == "x" * 100


def test_stats_cache_is_invalidated_by_insert(service):
    service.submit("github", "Found a bug")
    assert service.stats()["total"] == 1

    service.submit("discord", "Love it")
    assert service.stats()["total"] == 2


def test_stats_served_from_cache_until_invalidated(store):
    cache = InMemoryResultCache()
    svc = FeedbackService(store, cache, annotator=_fake_annotator)
    svc.stats()
    cache.put({"total": 42}, config.STATS_CACHE_TTL_SECONDS)

    assert svc.stats() == {"total": 42}
    svc.reset()
    assert svc.stats()["total"] == 0


def test_stats_failure_on_miss_propagates(store):
    broken = MagicMock()
    broken.all_records.side_effect = RuntimeError("db unreachable")
    svc = FeedbackService(broken, InMemoryResultCache(), annotator=_fake_annotator)
    with pytest.raises(RuntimeError, match="db unreachable"):
        svc.stats()


def test_list_feedback_caps_limit(service, store, monkeypatch):
    monkeypatch.setattr(config, "MAX_LIST_LIMIT", 2)
    for i in range(3):
        service.submit("github", f"bug {i}")

    records, total = service.list_feedback(limit=10)
    assert len(records) == 2
    assert total == 3


def test_list_feedback_filters(service):
    service.submit("github", "bug in sync")
    service.submit("github", "great release")
    service.submit("discord", "crash on start")

    records, total = service.list_feedback(source="github", sentiment="negative")
    assert total == 1
    assert records[0].content == "bug in sync"


def test_seed_is_idempotent_and_sequential(store):
    seen = []

    def annotator(content):
        seen.append(content)
        return _fake_annotator(content)

    svc = FeedbackService(store, InMemoryResultCache(), annotator=annotator)

    assert svc.seed() == len(DEMO_FEEDBACK)
    assert svc.seed() == len(DEMO_FEEDBACK)
    assert store.count() == len(DEMO_FEEDBACK)
    assert seen == [item.content for item in DEMO_FEEDBACK] * 2
    assert svc.stats()["total"] == len(DEMO_FEEDBACK)


def test_seed_custom_items_replace_existing(service, store):
    service.submit("github", "old item")
    imported = service.seed([DemoFeedback("forum", "someone", "Nice forum")])
    assert imported == 1
    assert [r.content for r in store.all_records()] == ["Nice forum"]


def test_summary_uses_most_recent_records(store, monkeypatch):
    monkeypatch.setattr(config, "SUMMARY_RECENT_LIMIT", 2)
    summarizer = MagicMock(return_value="Executive summary")
    svc = FeedbackService(store, InMemoryResultCache(), annotator=_fake_annotator, summarizer=summarizer)
    for text in ("first", "second", "third"):
        svc.submit("email", text)

    assert svc.summary() == {"summary": "Executive summary", "feedbackCount": 2}
    passed = summarizer.call_args.args[0]
    assert [r.content for r in passed] == ["third", "second"]


def test_summary_empty_store_makes_no_model_call(store, monkeypatch):
    import src.analysis.summary as sm

    chat = MagicMock()
    monkeypatch.setattr(sm, "chat_completion", chat)
    svc = FeedbackService(store, InMemoryResultCache(), annotator=_fake_annotator)

    assert svc.summary() == {"summary": sm.NO_FEEDBACK_SUMMARY, "feedbackCount": 0}
    chat.assert_not_called()
