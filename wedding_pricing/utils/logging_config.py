"""
Logging setup for the CLI and the pricing API.

`logging.format` in config.yaml picks plain text lines or one JSON object
per line (python-json-logger). Modules log through
`logging.getLogger(__name__)`.
"""

import logging
import logging.handlers
import sys
from pathlib import Path

from pythonjsonlogger import jsonlogger

TEXT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_FILE_MAX_BYTES = 5 * 1024 * 1024
LOG_FILE_BACKUPS = 3

# Chatty at INFO: urllib3 on every rate fetch, httpx under TestClient
QUIET_LOGGERS = ("urllib3", "httpx")


class JSONFormatter(jsonlogger.JsonFormatter):
    """One JSON object per record with level, logger and source location."""

    def add_fields(self, log_record: dict, record: logging.LogRecord, message_dict: dict):
        super().add_fields(log_record, record, message_dict)
        log_record.update(
            timestamp=self.formatTime(record),
            level=record.levelname,
            logger=record.name,
            location=f"{record.module}:{record.lineno}",
        )


def _make_formatter(log_format: str) -> logging.Formatter:
    if log_format.lower() == "json":
        return JSONFormatter("%(message)s")
    return logging.Formatter(TEXT_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")


def setup_logging(
    level: str = "INFO",
    log_format: str = "text",
    log_file: str | Path | None = None,
) -> None:
    """
    Replace the root logger's handlers.

    Args:
        level: Level name; unknown names fall back to INFO.
        log_format: "text" or "json".
        log_file: Also write to this file, rotated by size.
    """
    formatter = _make_formatter(log_format)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(
            logging.handlers.RotatingFileHandler(
                path, maxBytes=LOG_FILE_MAX_BYTES, backupCount=LOG_FILE_BACKUPS, encoding="utf-8"
            )
        )

    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    root.debug(f"Logging configured: level={level}, format={log_format}")
