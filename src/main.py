"""Application bootstrap for Feedback Pulse.

This module starts the HTTP API with uvicorn and, when Slack credentials are
configured, connects the Slack ingestion channel via Socket Mode. Keeping the
runtime bootstrap here (instead of in ``src/app.py``) ensures the core app
module can be safely imported by unit tests and tooling without side-effects.
"""
from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from contextlib import suppress

import uvicorn
from slack_bolt.adapter.socket_mode import SocketModeHandler

from src import config
from src.app import create_app, logger


def main() -> None:  # pragma: no cover
    """Serve the API until the process receives a termination signal.

    On shutdown the Socket Mode connection (if any) and the Slack worker pool
    are closed gracefully.
    """

    api = create_app()
    executor = ThreadPoolExecutor(max_workers=10)
    handler = None

    if config.SLACK_BOT_TOKEN and config.SLACK_APP_TOKEN:
        from src.slack_bot.bot import create_slack_app  # local import

        slack_app = create_slack_app(api.state.service, executor)
        handler = SocketModeHandler(slack_app, config.SLACK_APP_TOKEN)
        handler.connect()  # non-blocking
        logger.info("Slack channel connected via Socket Mode.")
    else:
        logger.info("SLACK_BOT_TOKEN/SLACK_APP_TOKEN not set; Slack channel disabled.")

    try:
        logger.info("Serving Feedback Pulse on %s:%d", config.HOST, config.PORT)
        uvicorn.run(api, host=config.HOST, port=config.PORT, log_level=config.LOG_LEVEL.lower())
    except KeyboardInterrupt:  # pragma: no cover
        logger.info("Shutdown requested (KeyboardInterrupt). Exiting…")
    finally:
        if handler is not None:
            with suppress(Exception):
                handler.close()
        executor.shutdown(wait=True)
        logger.info("Goodbye.")


if __name__ == "__main__":  # pragma: no cover
    main()
