import unittest

from sqlalchemy import text, update

from src.exceptions import FeedbackValidationError
from src.feedback_data import FeedbackRecord
from src.feedback_store import (
    DEFAULT_AUTHOR,
    FeedbackFilter,
    FeedbackStore,
    feedback_table,
)


def _record(source="github", sentiment="negative", urgency="high", themes=None, content="It broke"):
    return FeedbackRecord(
        source=source,
        content=content,
        sentiment=sentiment,
        sentiment_score=-0.5 if sentiment == "negative" else 0.5,
        urgency=urgency,
        themes=themes if themes is not None else ["bugs"],
        summary="summary",
    )


class TestFeedbackStore(unittest.TestCase):
    def setUp(self):
        self.store = FeedbackStore.from_url("sqlite://")
        self.store.init_schema()

    def test_init_schema_is_idempotent(self):
        self.store.init_schema()
        self.assertEqual(self.store.count(), 0)

    def test_insert_assigns_id_and_timestamps(self):
        record = _record()
        new_id = self.store.insert(record)

        stored = self.store.list()[0]
        self.assertEqual(stored.id, new_id)
        self.assertIsNotNone(stored.created_at)
        self.assertIsNotNone(stored.analyzed_at)
        self.assertEqual(stored.author, DEFAULT_AUTHOR)

    def test_insert_requires_content_and_source(self):
        with self.assertRaises(FeedbackValidationError) as ctx:
            self.store.insert(FeedbackRecord(source="", content="   "))
        self.assertEqual(ctx.exception.missing_fields, ["content", "source"])
        self.assertEqual(self.store.count(), 0)

    def test_themes_round_trip_as_sequence(self):
        self.store.insert(_record(themes=["x", "y"]))
        stored = self.store.list()[0]
        self.assertEqual(stored.themes, ["x", "y"])
        self.assertEqual(stored.to_dict()["themes"], ["x", "y"])

    def test_unparseable_themes_read_as_empty(self):
        new_id = self.store.insert(_record())
        with self.store.engine.begin() as conn:
            conn.execute(
                update(feedback_table).where(feedback_table.c.id == new_id).values(themes="not json")
            )
        self.assertEqual(self.store.list()[0].themes, [])

    def test_filters_combine_and_order_newest_first(self):
        first = self.store.insert(_record(source="github", sentiment="negative"))
        self.store.insert(_record(source="github", sentiment="positive"))
        self.store.insert(_record(source="discord", sentiment="negative"))
        third = self.store.insert(_record(source="github", sentiment="negative"))

        matches = self.store.list(FeedbackFilter(source="github", sentiment="negative"))

        self.assertEqual([r.id for r in matches], [third, first])
        for rec in matches:
            self.assertEqual((rec.source, rec.sentiment), ("github", "negative"))
        self.assertGreaterEqual(matches[0].created_at, matches[1].created_at)
        self.assertEqual(self.store.count(FeedbackFilter(source="github", sentiment="negative")), 2)

    def test_limit_and_offset(self):
        ids = [self.store.insert(_record(content=f"item {i}")) for i in range(5)]
        page = self.store.list(limit=2, offset=1)
        self.assertEqual([r.id for r in page], [ids[3], ids[2]])

    def test_count_by_dimension_with_null_bucket(self):
        self.store.insert(_record(urgency="high"))
        self.store.insert(_record(urgency="low"))
        self.store.insert(_record(urgency=None))

        self.assertEqual(self.store.count_by("urgency"), {"high": 1, "low": 1, "null": 1})
        self.assertEqual(self.store.count_by("source"), {"github": 3})
        with self.assertRaises(ValueError):
            self.store.count_by("content")

    def test_recent_and_all_records_order(self):
        ids = [self.store.insert(_record(content=f"item {i}")) for i in range(3)]
        self.assertEqual([r.id for r in self.store.recent(2)], [ids[2], ids[1]])
        self.assertEqual([r.id for r in self.store.all_records()], ids)

    def test_theme_tally_is_updated(self):
        self.store.insert(_record(themes=["bugs", "docs", "bugs"]))
        self.store.insert(_record(themes=["bugs"]))
        self.assertEqual(self.store.theme_tally(), {"bugs": 2, "docs": 1})

    def test_theme_tally_failure_does_not_fail_insert(self):
        with self.store.engine.begin() as conn:
            conn.execute(text("DROP TABLE themes"))
        new_id = self.store.insert(_record(themes=["bugs"]))
        self.assertEqual(self.store.list()[0].id, new_id)

    def test_delete_all(self):
        self.store.insert(_record())
        self.store.insert(_record())
        self.store.delete_all()
        self.assertEqual(self.store.count(), 0)
        self.assertEqual(self.store.theme_tally(), {})


if __name__ == "__main__":
    unittest.main()
