"""Runtime configuration for Feedback Pulse.

Values are read once from the environment (and a local ``.env`` file, if
present) when the module is imported.
"""
from __future__ import annotations

import logging
import os
from typing import Optional

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)


def _int_from_env(name: str, default: int) -> int:
    raw_val = os.getenv(name)
    if not raw_val:
        return default
    try:
        parsed = int(raw_val)
    except ValueError:
        logger.warning("Invalid %s value '%s'; must be integer.", name, raw_val)
        return default
    if parsed <= 0:
        logger.warning("Ignoring %s=%s (must be positive int)", name, raw_val)
        return default
    return parsed


def _optional(name: str) -> Optional[str]:
    return os.getenv(name) or None


# Storage
DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///feedback.db")
AUTO_INIT_DB: bool = os.getenv("AUTO_INIT_DB", "true").lower() != "false"

# Stats cache; unset REDIS_URL keeps the cache in process memory
REDIS_URL: Optional[str] = _optional("REDIS_URL")
STATS_CACHE_KEY: str = "dashboard_stats"
STATS_CACHE_TTL_SECONDS: int = 300

# Model channel
OPENAI_MODEL: str = os.getenv("OPENAI_MODEL", "gpt-4.1")

# Listing and summary
DEFAULT_LIST_LIMIT: int = _int_from_env("DEFAULT_LIST_LIMIT", 50)
MAX_LIST_LIMIT: int = _int_from_env("MAX_LIST_LIMIT", 500)
SUMMARY_RECENT_LIMIT: int = _int_from_env("SUMMARY_RECENT_LIMIT", 20)
TOP_THEMES_LIMIT: int = 10
TREND_DAYS: int = 7

# HTTP server
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
HOST: str = os.getenv("HOST", "0.0.0.0")
PORT: int = _int_from_env("PORT", 8787)

# Slack ingestion channel (optional)
SLACK_BOT_TOKEN: Optional[str] = _optional("SLACK_BOT_TOKEN")
SLACK_APP_TOKEN: Optional[str] = _optional("SLACK_APP_TOKEN")
FEEDBACK_COMMAND: str = os.getenv("FEEDBACK_COMMAND", "/feedback")
FEEDBACK_DIGEST_COMMAND: str = os.getenv("FEEDBACK_DIGEST_COMMAND", "/feedback-digest")
