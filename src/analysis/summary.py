"""Utility to generate an executive summary of recent feedback using OpenAI."""
from __future__ import annotations

import logging
from typing import Sequence

from src.feedback_data import FeedbackRecord
from src.openai_client import chat_completion

_logger = logging.getLogger(__name__)

NO_FEEDBACK_SUMMARY = "No feedback available yet."
EMPTY_REPLY_SUMMARY = "Unable to generate summary."

_SYSTEM_PROMPT = (
    "You are a product manager analyzing customer feedback. Based on the "
    "feedback items provided, write a concise executive summary (2-3 "
    "paragraphs) covering:\n"
    "1. Overall sentiment and key concerns\n"
    "2. The most urgent issues that need attention\n"
    "3. Recommended priorities for the product team"
)


def _build_user_prompt(records: Sequence[FeedbackRecord]) -> str:
    transcript = "\n".join(
        f"{idx}. [{rec.sentiment}/{rec.urgency}] {rec.content}"
        for idx, rec in enumerate(records, start=1)
    )
    return f"Feedback:\n{transcript}\n\nProvide a helpful, actionable summary:"


def summarize_feedback(
    records: Sequence[FeedbackRecord],
    *,
    max_tokens: int = 500,
    temperature: float = 0.4,
) -> str:
    """Generate an executive summary of *records*.

    Returns :data:`NO_FEEDBACK_SUMMARY` without calling the model when
    *records* is empty. Model failures propagate to the caller.
    """

    if not records:
        return NO_FEEDBACK_SUMMARY

    messages = [
        {"role": "system", "content": _SYSTEM_PROMPT},
        {"role": "user", "content": _build_user_prompt(records)},
    ]

    resp = chat_completion(messages, temperature=temperature, max_tokens=max_tokens)
    content = (resp["choices"][0]["message"]["content"] or "").strip()
    if not content:
        _logger.warning("Summary model returned an empty reply for %d items", len(records))
        return EMPTY_REPLY_SUMMARY
    return content
