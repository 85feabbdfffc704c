"""Project-wide custom exception types."""
from __future__ import annotations

from typing import Iterable


class FeedbackValidationError(ValueError):
    """Raised when a feedback submission lacks a required field."""

    def __init__(self, missing_fields: Iterable[str]) -> None:
        self.missing_fields = list(missing_fields)
        verb = "is" if len(self.missing_fields) == 1 else "are"
        super().__init__(f"{' and '.join(self.missing_fields)} {verb} required")
