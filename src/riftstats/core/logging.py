"""
Logging setup for riftstats.

File logs are JSON lines (one object per record) so fetch runs can be
grepped by region or request key. The terminal gets Rich-styled lines
prefixed with the region being queried.
"""

from __future__ import annotations

import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Any

import orjson

if TYPE_CHECKING:
    from rich.console import Console


ROOT_LOGGER = "riftstats"

# Record attributes carried into JSON lines and console prefixes
CONTEXT_FIELDS = ("region", "request_key", "failure", "puuid")

LEVEL_STYLES = {
    logging.DEBUG: "dim",
    logging.INFO: "default",
    logging.WARNING: "yellow",
    logging.ERROR: "red",
    logging.CRITICAL: "bold red",
}

PLAIN_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

# Third-party loggers that are too chatty at INFO
NOISY_LOGGERS = ("httpx", "httpcore")


def json_dumps(obj: Any) -> str:
    return orjson.dumps(obj, default=str).decode("utf-8")


def record_context(record: logging.LogRecord) -> dict[str, Any]:
    """Context fields set on a record through ``extra``."""
    return {
        key: getattr(record, key)
        for key in CONTEXT_FIELDS
        if getattr(record, key, None) is not None
    }


class JSONFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **record_context(record),
        }
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json_dumps(payload)


class RichConsoleHandler(logging.Handler):
    """Writes records to a Rich console, colored by level."""

    def __init__(self, console: "Console | None" = None, level: int = logging.INFO):
        super().__init__(level)
        if console is None:
            from rich.console import Console
            console = Console(stderr=True)
        self.console = console

    def emit(self, record: logging.LogRecord) -> None:
        try:
            style = LEVEL_STYLES.get(record.levelno, "default")
            region = getattr(record, "region", None)
            prefix = f"[cyan][{region}][/cyan] " if region else ""

            self.console.print(f"{prefix}[{style}]{self.format(record)}[/{style}]", highlight=False)
            if record.exc_info:
                self.console.print_exception()
        except Exception:
            self.handleError(record)


def _console_handler(level: int, rich_console: bool) -> logging.Handler:
    if rich_console:
        handler: logging.Handler = RichConsoleHandler(level=level)
        handler.setFormatter(logging.Formatter("%(message)s"))
    else:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(PLAIN_FORMAT))
        handler.setLevel(level)
    return handler


def _file_handler(log_file: Path | str, json_format: bool) -> logging.Handler:
    path = Path(log_file)
    path.parent.mkdir(parents=True, exist_ok=True)

    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setLevel(logging.DEBUG)  # file keeps everything
    if json_format:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(PLAIN_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    return handler


def setup_logging(
    level: str = "INFO",
    log_file: Path | str | None = None,
    json_format: bool = True,
    rich_console: bool = True,
) -> logging.Logger:
    """Configure the riftstats logger tree.

    Replaces handlers from any earlier call, so CLI commands can call
    this once per invocation.

    Args:
        level: Console log level name
        log_file: Optional log file, created with its parent directory
        json_format: JSON lines in the log file instead of plain text
        rich_console: Rich console output instead of a plain stream

    Returns:
        The root riftstats logger
    """
    numeric_level = getattr(logging, level.upper())

    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(numeric_level)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    logger.addHandler(_console_handler(numeric_level, rich_console))
    if log_file:
        logger.addHandler(_file_handler(log_file, json_format))

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(numeric_level, logging.WARNING))

    return logger


def get_logger(name: str | None = None) -> logging.Logger:
    """Logger under the riftstats namespace ("riot" -> "riftstats.riot")."""
    return logging.getLogger(f"{ROOT_LOGGER}.{name}" if name else ROOT_LOGGER)


class ContextualLogger(logging.LoggerAdapter):
    """Adapter stamping context fields (region, request_key, ...) on every record.

    Fields given per call through ``extra`` win over the adapter's own.
    """

    def __init__(self, logger: logging.Logger, **context: Any):
        super().__init__(logger, {k: v for k, v in context.items() if v is not None})

    def process(self, msg: str, kwargs: dict[str, Any]) -> tuple[str, dict[str, Any]]:
        kwargs["extra"] = {**self.extra, **kwargs.get("extra", {})}
        return msg, kwargs

    def with_context(self, **context: Any) -> "ContextualLogger":
        """New adapter with this one's context plus the given fields."""
        return ContextualLogger(self.logger, **{**self.extra, **context})


def get_contextual_logger(name: str | None = None, **context: Any) -> ContextualLogger:
    return ContextualLogger(get_logger(name), **context)
