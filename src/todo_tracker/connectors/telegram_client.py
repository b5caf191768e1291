# src/todo_tracker/connectors/telegram_client.py

from __future__ import annotations

import logging

import httpx

logger = logging.getLogger(__name__)

TELEGRAM_API_BASE = "https://api.telegram.org"


class TelegramError(RuntimeError):
    pass


class TelegramClient:
    """Minimal Bot API client: replies and digests are plain-text sendMessage calls."""

    def __init__(
        self,
        bot_token: str,
        *,
        client: httpx.Client | None = None,
        timeout: float = 10.0,
        api_base: str = TELEGRAM_API_BASE,
    ) -> None:
        if not bot_token:
            raise ValueError("bot_token is required")
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=timeout)
        self._send_url = f"{api_base.rstrip('/')}/bot{bot_token}/sendMessage"

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def send_text(self, chat_id: str | int, text: str) -> None:
        payload = {"chat_id": chat_id, "text": text}
        try:
            resp = self._client.post(self._send_url, json=payload)
        except httpx.HTTPError as e:
            raise TelegramError(f"sendMessage failed: {e}") from e
        if resp.status_code >= 400:
            raise TelegramError(f"sendMessage error {resp.status_code}: {resp.text.strip()}")
        logger.debug("Sent %d chars to chat %s", len(text), chat_id)
