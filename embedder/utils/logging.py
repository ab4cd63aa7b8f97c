"""
Dual-sink logging: a Rich console for humans and a JSONL file for machines.

Call sites attach structured context through ``extra``:

    logger.info("Reposted", extra={"subsys": "repost", "event": "sent", "user_id": 123})

Any key listed in ``JsonlFormatter.KEYS`` is lifted into its own JSON field;
everything else stays in the rendered message.
"""
import json
import logging
import os
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, NoReturn, Optional, Union

from rich.logging import RichHandler

PRETTY_HANDLER_NAME = "pretty_handler"
JSONL_HANDLER_NAME = "jsonl_handler"
DEFAULT_JSONL_PATH = "logs/embedder.jsonl"

# Libraries that log every request at INFO
NOISY_LOGGERS = ("discord", "httpx", "aiohttp", "urllib3")

LEVEL_ICONS = (
    (logging.ERROR, "✖"),
    (logging.WARNING, "⚠"),
    (logging.INFO, "✔"),
)
DEBUG_ICON = "ℹ"


class LevelIconFilter(logging.Filter):
    """Sets ``record.level_icon`` for the console format string."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.level_icon = next(
            (icon for threshold, icon in LEVEL_ICONS if record.levelno >= threshold),
            DEBUG_ICON,
        )
        return True


class JsonlFormatter(logging.Formatter):
    """One JSON object per line, keys always in ``KEYS`` order, absent keys omitted."""

    KEYS = (
        "ts",
        "level",
        "name",
        "subsys",
        "guild_id",
        "channel_id",
        "user_id",
        "msg_id",
        "event",
        "platform",
        "detail",
        "error",
    )
    CONTEXT_KEYS = ("subsys", "guild_id", "channel_id", "user_id", "msg_id", "event", "platform")

    @staticmethod
    def _timestamp(record: logging.LogRecord) -> str:
        # Local time, millisecond precision
        moment = datetime.fromtimestamp(record.created, tz=timezone.utc).astimezone()
        return moment.strftime("%Y-%m-%d %H:%M:%S.%f")[:-3]

    def format(self, record: logging.LogRecord) -> str:
        try:
            message = record.getMessage()
        except (TypeError, ValueError):
            message = str(record.msg)

        payload: Dict[str, Any] = {
            "ts": self._timestamp(record),
            "level": record.levelname,
            "name": record.name,
        }
        for key in self.CONTEXT_KEYS:
            payload[key] = getattr(record, key, None)

        detail = getattr(record, "detail", None)
        payload["detail"] = message if detail is None else detail

        if record.exc_info and record.exc_info[1] is not None:
            exc = record.exc_info[1]
            payload["error"] = f"{type(exc).__name__}: {exc}"

        ordered = {key: payload[key] for key in self.KEYS if payload.get(key) is not None}
        return json.dumps(ordered, ensure_ascii=False, default=str)


class SensitiveDataFilter(logging.Filter):
    """Replaces secret-looking values inside dict extras with ``[REDACTED]``."""

    SECRET_KEYS = frozenset({"discord_token", "authorization", "token", "bearer"})
    REDACTED = "[REDACTED]"

    def filter(self, record: logging.LogRecord) -> bool:
        for value in list(record.__dict__.values()):
            if isinstance(value, dict):
                self._scrub(value)
        return True

    def _scrub(self, obj: Dict[Any, Any]) -> None:
        for key, value in list(obj.items()):
            if isinstance(value, dict):
                self._scrub(value)
            elif isinstance(value, str) and isinstance(key, str) and key.lower() in self.SECRET_KEYS:
                obj[key] = self.REDACTED


def _console_handler() -> logging.Handler:
    handler = RichHandler(
        rich_tracebacks=True,
        show_path=False,
        show_time=True,
        enable_link_path=False,
        log_time_format="%Y-%m-%d %H:%M:%S.%f",
    )
    handler.set_name(PRETTY_HANDLER_NAME)
    handler.addFilter(LevelIconFilter())
    handler.setFormatter(logging.Formatter(fmt="%(level_icon)s %(message)s"))
    return handler


def _jsonl_handler(path: Path) -> logging.Handler:
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(str(path), encoding="utf-8")
    handler.set_name(JSONL_HANDLER_NAME)
    handler.setFormatter(JsonlFormatter())
    return handler


def _verify_sinks() -> None:
    names = sorted(h.get_name() for h in logging.getLogger().handlers)
    if names != sorted((JSONL_HANDLER_NAME, PRETTY_HANDLER_NAME)):
        sys.stderr.write(f"[logging] expected {PRETTY_HANDLER_NAME} + {JSONL_HANDLER_NAME}, got {names}\n")
        sys.stderr.flush()
        logging.shutdown()
        sys.exit(2)


def init_logging(
    level: Optional[str] = None,
    jsonl_path: Optional[Union[str, Path]] = None,
    third_party_level: Optional[str] = None,
) -> None:
    """
    Install the console and JSONL sinks on the root logger.

    Arguments left as None are read from LOG_LEVEL, LOG_JSONL_PATH and
    THIRD_PARTY_LOG_LEVEL. Existing root handlers are replaced. Exits the
    process if the two sinks did not end up installed.
    """
    level = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    path = Path(jsonl_path or os.getenv("LOG_JSONL_PATH", DEFAULT_JSONL_PATH))
    third_party_level = (third_party_level or os.getenv("THIRD_PARTY_LOG_LEVEL", "WARNING")).upper()

    scrubber = SensitiveDataFilter()
    handlers = [_console_handler(), _jsonl_handler(path)]
    for handler in handlers:
        handler.addFilter(scrubber)

    logging.basicConfig(handlers=handlers, level=level, force=True, format="%(message)s")
    _verify_sinks()

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(third_party_level)

    logging.getLogger(__name__).info(
        f"Logging initialized (level={level}, jsonl={path})",
        extra={"subsys": "logging", "event": "logging_ready"},
    )


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def cleanup_rich_handlers() -> None:
    """Close Rich console handlers so interpreter shutdown does not render tracebacks."""
    for handler in list(logging.getLogger().handlers):
        if isinstance(handler, RichHandler):
            handler.rich_tracebacks = False
            handler.close()


def shutdown_logging_and_exit(exit_code: int) -> NoReturn:
    try:
        logging.getLogger(__name__).info(
            f"Shutting down (exit code {exit_code})",
            extra={"subsys": "logging", "event": "shutdown"},
        )
    finally:
        try:
            cleanup_rich_handlers()
            logging.shutdown()
        finally:
            sys.exit(exit_code)
