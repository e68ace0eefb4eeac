"""Structured logging configuration for CYOA.

Console events go to stderr through rich, at a level picked by ``-v``. With
``--log`` every event is also appended to ``{story}/logs/debug.jsonl``, one
JSON object per line.
"""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING

import structlog
from rich.console import Console
from rich.logging import RichHandler

if TYPE_CHECKING:
    from pathlib import Path

    from structlog.typing import Processor

LOG_FILENAME = "debug.jsonl"

# prompt_toolkit logs every key binding lookup at DEBUG
_QUIET_LOGGERS = ("asyncio", "prompt_toolkit")

_CONSOLE_LEVELS = {0: logging.WARNING, 1: logging.INFO}

_configured = False
_file_handler: logging.FileHandler | None = None


class JSONLFileHandler(logging.FileHandler):
    """File handler that writes one JSON object per record."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            entry: dict[str, object] = {
                "timestamp": datetime.now(UTC).isoformat(),
                "level": record.levelname,
                "logger": record.name,
            }
            entry.update(_event_fields(record))
            if self.stream:
                self.stream.write(json.dumps(entry, default=str) + "\n")
                self.stream.flush()
        except Exception:
            self.handleError(record)


def _event_fields(record: logging.LogRecord) -> dict[str, object]:
    """Event name and key/value context of a record.

    structlog hands its event dict over as ``record.msg`` via
    ``wrap_for_formatter``; plain stdlib records only have a message.
    """
    if not isinstance(record.msg, dict):
        return {"message": record.getMessage()}
    fields = {k: v for k, v in record.msg.items() if k not in ("level", "timestamp")}
    fields["message"] = fields.pop("event", str(record.msg))
    return fields


def _console_handler(verbosity: int) -> RichHandler:
    # Story text can contain square brackets, so rich markup stays off
    return RichHandler(
        console=Console(stderr=True),
        level=_CONSOLE_LEVELS.get(verbosity, logging.DEBUG),
        rich_tracebacks=True,
        tracebacks_show_locals=verbosity >= 2,
        show_time=verbosity >= 1,
        show_path=verbosity >= 2,
        markup=False,
    )


def _open_file_handler(log_dir: Path) -> JSONLFileHandler:
    log_dir.mkdir(parents=True, exist_ok=True)
    handler = JSONLFileHandler(str(log_dir / LOG_FILENAME), mode="a")
    handler.setLevel(logging.DEBUG)
    return handler


def configure_logging(
    verbosity: int = 0,
    log_to_file: bool = False,
    log_dir: Path | None = None,
) -> None:
    """Configure console and optional file logging.

    Safe to call repeatedly; a previously opened log file is closed first.

    Args:
        verbosity: 0=WARNING (default), 1=INFO, 2+=DEBUG on the console.
        log_to_file: If True, append every event to ``log_dir/debug.jsonl``.
        log_dir: Directory for the log file. Required if log_to_file=True.

    Raises:
        ValueError: If log_to_file=True but log_dir is not provided.
    """
    global _configured, _file_handler

    if log_to_file and log_dir is None:
        raise ValueError("log_dir is required when log_to_file=True")

    close_file_logging()

    handlers: list[logging.Handler] = [_console_handler(verbosity)]
    if log_to_file and log_dir is not None:
        _file_handler = _open_file_handler(log_dir)
        handlers.append(_file_handler)

    # The root logger lets everything through when a file wants DEBUG records;
    # the console handler applies its own level
    root_level = logging.DEBUG if (verbosity > 0 or log_to_file) else logging.WARNING
    logging.basicConfig(level=root_level, format="%(message)s", handlers=handlers, force=True)

    for logger_name in _QUIET_LOGGERS:
        logging.getLogger(logger_name).setLevel(logging.WARNING)

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
    ]
    structlog.configure(
        processors=processors,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.make_filtering_bound_logger(root_level),
        cache_logger_on_first_use=True,
    )

    _configured = True


def get_logger(name: str | None = None) -> structlog.typing.FilteringBoundLogger:
    """Get a structured logger, configuring defaults on first use.

    Args:
        name: Logger name (typically __name__).
    """
    if not _configured:
        configure_logging()

    logger: structlog.typing.FilteringBoundLogger = structlog.get_logger(name)
    return logger


def close_file_logging() -> None:
    """Close the JSONL log file, if one is open."""
    global _file_handler
    if _file_handler is not None:
        _file_handler.close()
        _file_handler = None
