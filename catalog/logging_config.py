"""Logging configuration for the catalog pipeline and the storefront API.

``setup_logging`` attaches a console handler and a JSONL file handler to the
``catalog`` and ``web`` logger namespaces. Catalog events are logged with an
``event_type`` from :class:`CatalogEvent` plus event-specific fields, which the
JSONL handler flattens into each line so conversion runs can be reviewed
afterwards.
"""

import json
import logging
import sys
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional, Sequence, Union

__all__ = [
    "CatalogEvent",
    "setup_logging",
    "get_logger",
    "log_catalog_event",
    "LOG_DIR",
    "LOGGER_NAMESPACES",
]

LOG_DIR = Path(__file__).parent.parent / "logs"

LOGGER_NAMESPACES = ("catalog", "web")


class CatalogEvent(str, Enum):
    FILE_PROCESSED = "file_processed"
    MERGE_COMPLETED = "merge_completed"
    STORE_PERSISTED = "store_persisted"


class JSONLFileHandler(logging.Handler):
    """One JSON object per record in ``<prefix>_<YYYYMMDD>.jsonl``."""

    def __init__(self, log_dir: Path, prefix: str = "catalog"):
        super().__init__()
        self.log_dir = Path(log_dir)
        self.log_dir.mkdir(parents=True, exist_ok=True)
        self.prefix = prefix

    def log_file(self) -> Path:
        return self.log_dir / f"{self.prefix}_{datetime.now():%Y%m%d}.jsonl"

    def to_entry(self, record: logging.LogRecord) -> Dict[str, Any]:
        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        event_type = getattr(record, "event_type", None)
        if event_type is not None:
            entry["event_type"] = event_type
        entry.update(getattr(record, "event_data", None) or {})
        if record.exc_info:
            entry["exception"] = logging.Formatter().formatException(record.exc_info)
        return entry

    def emit(self, record: logging.LogRecord) -> None:
        try:
            line = json.dumps(self.to_entry(record), ensure_ascii=False, default=str)
            with open(self.log_file(), "a", encoding="utf-8") as f:
                f.write(line + "\n")
        except Exception:
            self.handleError(record)


class ColoredConsoleHandler(logging.StreamHandler):
    """Colors the level name when the stream is a terminal."""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        color = self.COLORS.get(record.levelname)
        if color and getattr(self.stream, "isatty", lambda: False)():
            message = message.replace(record.levelname, f"{color}{record.levelname}{self.RESET}", 1)
        return message


def setup_logging(
    level: int = logging.INFO,
    log_to_file: bool = True,
    log_to_console: bool = True,
    log_dir: Optional[Path] = None,
    namespaces: Sequence[str] = LOGGER_NAMESPACES,
) -> logging.Logger:
    """Configure the package loggers, replacing any handlers from an earlier call.

    Args:
        level: Logging level (default: INFO)
        log_to_file: Whether to write JSONL records under ``log_dir``
        log_to_console: Whether to log to stdout
        log_dir: Custom log directory (default: project logs/)
        namespaces: Top-level logger names to configure

    Returns:
        The ``catalog`` logger
    """
    handlers = []
    if log_to_console:
        console_handler = ColoredConsoleHandler(sys.stdout)
        console_handler.setLevel(level)
        console_handler.setFormatter(
            logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s", datefmt="%H:%M:%S")
        )
        handlers.append(console_handler)
    if log_to_file:
        file_handler = JSONLFileHandler(log_dir or LOG_DIR)
        file_handler.setLevel(logging.DEBUG)
        handlers.append(file_handler)

    for name in namespaces:
        logger = logging.getLogger(name)
        logger.setLevel(level)
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()
        for handler in handlers:
            logger.addHandler(handler)

    return logging.getLogger("catalog")


def get_logger(name: str = "catalog") -> logging.Logger:
    """Get a logger under the ``catalog`` namespace."""
    if name == "catalog" or name.startswith("catalog."):
        return logging.getLogger(name)
    return logging.getLogger(f"catalog.{name}")


def log_catalog_event(
    event: Union[CatalogEvent, str],
    data: Dict[str, Any],
    level: int = logging.INFO,
    logger_name: str = "catalog",
) -> None:
    """Log a structured catalog event.

    ``data["message"]``, when present, becomes the log message; every other
    key is written as a field of the JSONL entry.
    """
    event_type = CatalogEvent(event).value
    fields = {k: v for k, v in data.items() if k != "message"}
    get_logger(logger_name).log(
        level,
        data.get("message", event_type),
        extra={"event_type": event_type, "event_data": fields},
    )
