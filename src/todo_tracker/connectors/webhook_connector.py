# src/todo_tracker/connectors/webhook_connector.py

from __future__ import annotations

import logging
from typing import Any

from flask import Flask, request

from ..cli.commands import UnknownCommandError, chat_registry, format_error
from ..core.ports import ChatSender
from ..core.state import AppState
from ..tasks.task_input import CommandError
from ..tasks.task_store import BackendError

logger = logging.getLogger(__name__)

UNKNOWN_REPLY = "❌ Unknown command. Use add, list (ls), done (rm), snooze or subtask"


def _extract_message(update: Any) -> tuple[str, str] | None:
    """Return (chat_id, text) for a text message update, None for anything else."""
    if not isinstance(update, dict):
        return None
    message = update.get("message")
    if not isinstance(message, dict):
        return None
    text = message.get("text")
    chat = message.get("chat")
    if not isinstance(text, str) or not text.strip() or not isinstance(chat, dict):
        return None
    chat_id = chat.get("id")
    if chat_id is None:
        return None
    return str(chat_id), text


def handle_chat_message(state: AppState, chat_id: str, text: str) -> str:
    """Run one chat command; the chat ID is the owner of the tasks it touches."""
    try:
        reply = chat_registry.handle(state, text, owner_id=chat_id)
    except UnknownCommandError:
        return UNKNOWN_REPLY
    except CommandError as e:
        return format_error(e)
    except BackendError as e:
        logger.warning("Command failed chat=%s: %s", chat_id, e)
        return format_error(e)
    return reply or UNKNOWN_REPLY


def create_app(state: AppState, chat: ChatSender) -> Flask:
    """
    Webhook app:
    - POST /webhook: one Telegram update in, one sendMessage out
    - GET /health: liveness probe

    Each request is independent; only the read-only state is shared.
    """
    app = Flask("todo_tracker.webhook")

    @app.get("/health")
    def health():
        return "OK", 200

    @app.route("/webhook", methods=["GET", "POST"])
    def webhook():
        if request.method != "POST":
            return "Method not allowed", 405

        update = request.get_json(force=True, silent=True)
        if update is None:
            return "Invalid JSON", 400

        extracted = _extract_message(update)
        if extracted is None:
            return "", 200

        chat_id, text = extracted
        logger.info("Chat %s: %s", chat_id, text.split(maxsplit=1)[0])
        reply = handle_chat_message(state, chat_id, text)

        try:
            chat.send_text(chat_id, reply)
        except Exception:
            logger.exception("Failed to send reply to chat %s", chat_id)
        # Telegram retries non-2xx deliveries; the command already ran.
        return "", 200

    return app
