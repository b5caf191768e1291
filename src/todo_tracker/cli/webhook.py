# src/todo_tracker/cli/webhook.py

"""`todo-webhook` entrypoint: serve the chat-bot webhook on PORT (default 8080)."""

from __future__ import annotations

import logging

from ..connectors.webhook_connector import create_app
from .bootstrap import (
    BACKEND_FIELDS,
    create_chat_client,
    create_initial_state,
    init_logging,
    load_settings_or_exit,
)

logger = logging.getLogger(__name__)


def main() -> None:
    settings = load_settings_or_exit(*BACKEND_FIELDS, "bot_token")
    init_logging(settings, log_name="todo-webhook.log")

    state = create_initial_state(settings=settings)
    chat = create_chat_client(settings)
    app = create_app(state, chat)

    logger.info("Starting webhook server on port %s", settings.port)
    app.run(host="0.0.0.0", port=settings.port)


if __name__ == "__main__":
    main()
