import unittest

from src.analysis.classifier import Annotation
from src.slack_bot.views import build_annotation_message


class TestViews(unittest.TestCase):
    def test_build_annotation_message_structure(self):
        """
        Tests the ephemeral reply for a stored feedback item.
        Ensures the fallback text, fields and summary context are present.
        """
        annotation = Annotation(
            sentiment="positive",
            sentiment_score=0.75,
            urgency="low",
            themes=["onboarding", "docs"],
            summary="Smooth onboarding",
        )

        message = build_annotation_message(7, annotation)

        self.assertEqual(message["response_type"], "ephemeral")
        self.assertEqual(message["text"], "Feedback #7 recorded (positive, low urgency).")

        blocks = message["blocks"]
        self.assertEqual([b["type"] for b in blocks], ["section", "section", "context"])
        self.assertIn("*#7*", blocks[0]["text"]["text"])

        fields = [f["text"] for f in blocks[1]["fields"]]
        self.assertIn("+0.75", fields[0])
        self.assertIn("low", fields[1])
        self.assertEqual(fields[2], "*Themes*\nonboarding, docs")
        self.assertEqual(blocks[2]["elements"][0]["text"], "Smooth onboarding")

    def test_build_annotation_message_without_themes_or_summary(self):
        annotation = Annotation(
            sentiment="neutral",
            sentiment_score=0.0,
            urgency="medium",
            themes=[],
            summary="",
        )

        message = build_annotation_message(1, annotation)

        self.assertEqual(len(message["blocks"]), 2)
        self.assertEqual(message["blocks"][1]["fields"][2]["text"], "*Themes*\nnone detected")


if __name__ == "__main__":
    unittest.main()
