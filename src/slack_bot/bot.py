"""Slack ingestion channel built on Slack Bolt.

The Bolt ``App`` is created on demand by :func:`create_slack_app` so that the
HTTP service can run without any Slack credentials.
"""
from __future__ import annotations

import logging
from concurrent.futures import Executor
from typing import Optional

from slack_bolt import App

from src import config
from src.pipeline import FeedbackService
from src.slack_bot.handlers import handle_digest_command, handle_feedback_command

logger = logging.getLogger(__name__)


def _help_text() -> str:
    """Return a help message describing bot purpose and usage."""

    return (
        "*Feedback Pulse – customer feedback, classified*\n\n"
        "Every item is tagged with sentiment, urgency and themes, and rolled "
        "into the dashboard statistics.\n\n"
        "*Commands*\n"
        f"• `{config.FEEDBACK_COMMAND} <text>` — record a piece of feedback.\n"
        f"• `{config.FEEDBACK_DIGEST_COMMAND}` — show the current statistics digest.\n"
        "• `@feedback-pulse help` — show this message.\n"
    )


def log_request(logger, body, next):
    logger.debug(f"Received event: {body}")
    return next()


def custom_error_handler(error, body, logger):
    logger.exception(f"Error handling request: {error}")
    logger.debug(f"Request body: {body}")


def handle_app_mention(event, say, logger: logging.Logger):
    """Respond to `@feedback-pulse help`; other mentions are ignored."""
    text = event.get("text", "").lower()
    if "help" in text:
        say(_help_text())
    else:
        logger.debug("Ignoring mention without help: %s", text)


def create_slack_app(
    service: FeedbackService,
    executor: Executor,
    *,
    token: Optional[str] = None,
    token_verification_enabled: bool = True,
) -> App:
    """Build a Bolt ``App`` whose commands feed into *service*."""

    app = App(
        token=token or config.SLACK_BOT_TOKEN,
        process_before_response=True,
        token_verification_enabled=token_verification_enabled,
    )

    app.middleware(log_request)
    app.error(custom_error_handler)
    app.event("app_mention")(handle_app_mention)

    @app.command(config.FEEDBACK_COMMAND)
    def feedback_command_wrapper(ack, command, respond, logger):
        handle_feedback_command(
            ack=ack,
            command=command,
            respond=respond,
            logger=logger,
            executor=executor,
            service=service,
        )

    @app.command(config.FEEDBACK_DIGEST_COMMAND)
    def digest_command_wrapper(ack, respond, logger):
        handle_digest_command(ack=ack, respond=respond, logger=logger, service=service)

    logger.info(
        "Slack commands registered: %s, %s",
        config.FEEDBACK_COMMAND,
        config.FEEDBACK_DIGEST_COMMAND,
    )
    return app
