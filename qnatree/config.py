"""
Configuration and Logging

All runtime settings live in a BotConfig that is built once at startup
and passed to the builder, the question store and the transport. Nothing
reads paths or tokens from module globals.

Sources, in order of use:
- BotConfig.from_env(): QNATREE_* environment variables, after loading a
  .env file from the working directory if one exists
- BotConfig.from_json(path): the same keys from a JSON file

Environment variables:
    QNATREE_DOCUMENT   Path to the Q&A JSON document (default: db.json)
    QNATREE_DB         Path to the unanswered-questions database
                       (default: questions.db)
    QNATREE_LOG_LEVEL  debug / info / warning / error (default: info)
    QNATREE_LOG_JSON   "1" or "true" for JSON log lines
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

import structlog
from dotenv import find_dotenv, load_dotenv

from qnatree.exceptions import ConfigError

LOG_LEVELS = ("debug", "info", "warning", "error", "critical")


def _env_flag(value: str | None) -> bool:
    return (value or "").strip().lower() in {"1", "true", "yes", "on"}


@dataclass
class BotConfig:
    """Runtime configuration for the Q&A bot."""

    document_path: Path = field(default_factory=lambda: Path("db.json"))
    questions_db_path: Path = field(default_factory=lambda: Path("questions.db"))
    log_level: str = "info"
    log_json: bool = False

    @classmethod
    def from_env(cls, env_file: Path | str | None = None) -> "BotConfig":
        """Load config from environment variables (and a .env file)."""
        load_dotenv(env_file or find_dotenv(usecwd=True), override=False)

        return cls(
            document_path=Path(os.getenv("QNATREE_DOCUMENT", "db.json")),
            questions_db_path=Path(os.getenv("QNATREE_DB", "questions.db")),
            log_level=os.getenv("QNATREE_LOG_LEVEL", "info").lower(),
            log_json=_env_flag(os.getenv("QNATREE_LOG_JSON")),
        )

    @classmethod
    def from_json(cls, path: Path | str) -> "BotConfig":
        """Load config from a JSON file."""
        path = Path(path)
        try:
            with open(path) as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigError(f"Cannot load config {path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigError(f"Config {path} must hold a JSON object")

        return cls(
            document_path=Path(data.get("document_path", "db.json")),
            questions_db_path=Path(data.get("questions_db_path", "questions.db")),
            log_level=str(data.get("log_level", "info")).lower(),
            log_json=bool(data.get("log_json", False)),
        )

    def validate(self) -> "BotConfig":
        """
        Check the config before startup.

        Raises:
            ConfigError: If the document is missing or the log level is unknown.
        """
        if self.log_level not in LOG_LEVELS:
            raise ConfigError(
                f"Unknown log level {self.log_level!r}, expected one of {', '.join(LOG_LEVELS)}"
            )
        if not self.document_path.is_file():
            raise ConfigError(f"Q&A document not found: {self.document_path}")
        return self


def configure_logging(level: str = "info", json_logs: bool = False) -> None:
    """Configure structlog for the CLI and the reply loop."""
    if level.lower() not in LOG_LEVELS:
        raise ConfigError(f"Unknown log level {level!r}")

    renderer = (
        structlog.processors.JSONRenderer()
        if json_logs
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(level.upper())
        ),
        cache_logger_on_first_use=False,
    )
