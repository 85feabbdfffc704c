import logging
from concurrent.futures import Executor
from typing import Any, Dict

from slack_bolt import Ack, Respond

from src import config
from src.exceptions import FeedbackValidationError
from src.pipeline import FeedbackService
from src.reporting.render import render_digest
from src.slack_bot.views import build_annotation_message

logger = logging.getLogger(__name__)

SLACK_SOURCE = "slack"


def _usage_text() -> str:
    return (
        f"Usage: `{config.FEEDBACK_COMMAND} <your feedback>` records feedback, "
        f"`{config.FEEDBACK_DIGEST_COMMAND}` shows the current statistics."
    )


# ------------------------------------------------------------------
# Slash command: submit feedback
# ------------------------------------------------------------------


def handle_feedback_command(
    ack: Ack,
    command: Dict[str, Any],
    respond: Respond,
    logger: logging.Logger,
    executor: Executor,
    service: FeedbackService,
) -> None:
    """Acknowledge the slash command and classify it in the background.

    Slack expects an acknowledgement within three seconds; the model call can
    take longer, so the actual work runs on *executor*.
    """
    ack()
    executor.submit(
        process_feedback_command,
        command=command,
        respond=respond,
        logger=logger,
        service=service,
    )


def process_feedback_command(
    command: Dict[str, Any],
    respond: Respond,
    logger: logging.Logger,
    service: FeedbackService,
) -> None:
    """Store the slash-command text as feedback and reply with its annotation."""
    text = (command.get("text") or "").strip()
    user_id = command.get("user_id")
    if not text:
        respond(_usage_text())
        return

    logger.info(f"Processing {config.FEEDBACK_COMMAND} from user '{user_id}'")
    try:
        record_id, annotation = service.submit(
            SLACK_SOURCE,
            text,
            source_id=f"{command.get('channel_id')}:{user_id}",
            author=command.get("user_name"),
        )
    except FeedbackValidationError as exc:
        respond(f"Sorry, that feedback could not be recorded: {exc}.")
        return
    except Exception as exc:  # noqa: BLE001
        logger.error("Failed to store Slack feedback: %s", exc, exc_info=True)
        respond("Sorry, I couldn't record your feedback right now. Please try again later.")
        return

    respond(**build_annotation_message(record_id, annotation))


# ------------------------------------------------------------------
# Slash command: stats digest
# ------------------------------------------------------------------


def handle_digest_command(
    ack: Ack,
    respond: Respond,
    logger: logging.Logger,
    service: FeedbackService,
) -> None:
    """Reply with the dashboard statistics rendered as a markdown digest."""
    ack()
    try:
        stats = service.stats()
    except Exception as exc:  # noqa: BLE001
        logger.error("Failed to load stats for digest: %s", exc, exc_info=True)
        respond("Sorry, statistics are unavailable right now.")
        return
    respond(render_digest(stats))
