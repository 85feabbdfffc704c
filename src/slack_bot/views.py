import logging
from typing import Any, Dict, List

from src.analysis.classifier import Annotation

logger = logging.getLogger(__name__)

_SENTIMENT_EMOJI = {"positive": ":smile:", "neutral": ":neutral_face:", "negative": ":slightly_frowning_face:"}
_URGENCY_EMOJI = {
    "low": ":white_circle:",
    "medium": ":large_yellow_circle:",
    "high": ":large_orange_circle:",
    "critical": ":red_circle:",
}


def build_annotation_message(record_id: int, annotation: Annotation) -> Dict[str, Any]:
    """
    Constructs the ephemeral reply sent after a Slack feedback submission.

    Args:
        record_id: The id assigned to the stored feedback record.
        annotation: The classification attached to the record.

    Returns a ``respond`` payload with a plain-text fallback and Block Kit
    blocks showing sentiment, urgency, themes and the one-line summary.
    """
    sentiment = annotation.sentiment
    urgency = annotation.urgency
    themes = ", ".join(annotation.themes) if annotation.themes else "none detected"

    blocks: List[Dict[str, Any]] = [
        {
            "type": "section",
            "text": {
                "type": "mrkdwn",
                "text": f"Thanks! Your feedback was recorded as *#{record_id}*.",
            },
        },
        {
            "type": "section",
            "fields": [
                {
                    "type": "mrkdwn",
                    "text": (
                        f"*Sentiment*\n{_SENTIMENT_EMOJI.get(sentiment, '')} {sentiment}"
                        f" ({annotation.sentiment_score:+.2f})"
                    ),
                },
                {
                    "type": "mrkdwn",
                    "text": f"*Urgency*\n{_URGENCY_EMOJI.get(urgency, '')} {urgency}",
                },
                {"type": "mrkdwn", "text": f"*Themes*\n{themes}"},
            ],
        },
    ]

    if annotation.summary:
        blocks.append(
            {
                "type": "context",
                "elements": [{"type": "mrkdwn", "text": annotation.summary}],
            }
        )

    return {
        "response_type": "ephemeral",
        "text": f"Feedback #{record_id} recorded ({sentiment}, {urgency} urgency).",
        "blocks": blocks,
    }
