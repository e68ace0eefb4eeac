"""Observability module for CYOA.

Provides structured logging to the console and, optionally, to JSONL files.
"""

from cyoa.observability.logging import (
    close_file_logging,
    configure_logging,
    get_logger,
)

__all__ = [
    "close_file_logging",
    "configure_logging",
    "get_logger",
]
