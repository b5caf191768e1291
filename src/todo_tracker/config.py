# src/todo_tracker/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object per process, built once and passed explicitly.
- No secrets required at import time; each entry point calls require() for what it needs.
- Every variable accepts the TODO_CLI_ prefix and falls back to the plain legacy name.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

ENV_PREFIX = "TODO_CLI"

DEFAULT_OWNER_ID = "cli"
DEFAULT_PORT = 8080


class ConfigError(RuntimeError):
    """A required setting is missing or invalid (fatal at startup)."""


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _load_dotenv_if_available() -> None:
    from dotenv import load_dotenv

    load_dotenv(override=False)


def _first_env(*names: str, default: str | None = None) -> str | None:
    for n in names:
        v = os.getenv(n)
        if v is not None and v.strip() != "":
            return v
    return default


def _env_int(*names: str, default: int) -> int:
    raw = _first_env(*names)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(*names: str, default: float) -> float:
    raw = _first_env(*names)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_path(*names: str) -> Path | None:
    raw = _first_env(*names)
    if raw is None:
        return None
    return Path(raw.strip()).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- Backend ----
    supabase_url: str
    supabase_key: str
    owner_id: str

    # ---- Chat bot / webhook ----
    bot_token: str
    port: int

    # ---- Sync daemon ----
    todo_file: Path | None
    doc_format: str
    poll_interval_seconds: float
    debounce_seconds: float
    settle_seconds: float

    # ---- Misc ----
    http_timeout_seconds: float
    log_level: str
    data_dir: Path

    @staticmethod
    def from_env(load_dotenv: bool = True) -> "Settings":
        if load_dotenv:
            _load_dotenv_if_available()

        supabase_url = (_first_env(_k("SUPABASE_URL"), "SUPABASE_URL", default="") or "").strip()
        supabase_key = (
            _first_env(_k("SUPABASE_SERVICE_ROLE_KEY"), "SUPABASE_SERVICE_ROLE_KEY", default="") or ""
        ).strip()
        owner_id = (
            _first_env(_k("TELEGRAM_CHAT_ID"), "TELEGRAM_CHAT_ID", default=DEFAULT_OWNER_ID)
            or DEFAULT_OWNER_ID
        ).strip()

        bot_token = (_first_env(_k("TELEGRAM_BOT_TOKEN"), "TELEGRAM_BOT_TOKEN", default="") or "").strip()
        port = _env_int(_k("PORT"), "PORT", default=DEFAULT_PORT)

        # TODO_CLI_FILE already carries the prefix; FILE is too generic to fall back to.
        todo_file = _env_path(_k("FILE"))
        doc_format = (_first_env(_k("DOC_FORMAT"), default="inline") or "inline").strip().lower()

        return Settings(
            supabase_url=supabase_url.rstrip("/"),
            supabase_key=supabase_key,
            owner_id=owner_id,
            bot_token=bot_token,
            port=port,
            todo_file=todo_file,
            doc_format=doc_format,
            poll_interval_seconds=_env_float(_k("POLL_INTERVAL_SECONDS"), default=30.0),
            debounce_seconds=_env_float(_k("DEBOUNCE_SECONDS"), default=2.0),
            settle_seconds=_env_float(_k("SETTLE_SECONDS"), default=0.5),
            http_timeout_seconds=_env_float(_k("HTTP_TIMEOUT_SECONDS"), default=10.0),
            log_level=(_first_env(_k("LOG_LEVEL"), default="INFO") or "INFO").upper(),
            data_dir=_env_path(_k("DATA_DIR")) or Path(".local/todo"),
        )

    def require(self, *fields: str) -> None:
        """
        Raise ConfigError if any of the named settings is empty.

        Each entry point declares what it needs:
        the CLI only the backend, the webhook also the bot token, the daemon also the file.
        """
        env_names = {
            "supabase_url": "SUPABASE_URL",
            "supabase_key": "SUPABASE_SERVICE_ROLE_KEY",
            "bot_token": "TELEGRAM_BOT_TOKEN",
            "todo_file": "TODO_CLI_FILE",
        }
        missing = [env_names.get(f, f.upper()) for f in fields if not getattr(self, f)]
        if missing:
            raise ConfigError("Missing required environment variable(s): " + ", ".join(missing))


_settings: Settings | None = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings.from_env()
    return _settings
