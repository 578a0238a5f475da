"""
Logging setup and the envelope journal middleware.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from pathlib import Path

from kvbridge.core.bus import MiddlewareNext
from kvbridge.core.events import Event, EventType


def setup_logging(
    log_dir: Path | None = None,
    console_level: int = logging.WARNING,
    file_level: int = logging.DEBUG,
) -> logging.Logger:
    """
    Setup kvbridge logging.

    Args:
        log_dir: Directory for log files (default: ~/.kvbridge/logs)
        console_level: Minimum level for console output
        file_level: Minimum level for file output

    Returns:
        The configured logger
    """
    log_dir = (log_dir or Path.home() / ".kvbridge" / "logs").expanduser()
    log_dir.mkdir(parents=True, exist_ok=True)

    logger = logging.getLogger("kvbridge")
    logger.setLevel(logging.DEBUG)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler()
    console_handler.setLevel(console_level)
    console_handler.setFormatter(logging.Formatter("[%(levelname)s] %(message)s"))
    logger.addHandler(console_handler)

    log_file = log_dir / f"kvbridge_{datetime.now().strftime('%Y%m%d')}.log"
    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(file_level)
    file_handler.setFormatter(
        logging.Formatter(
            "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    logger.addHandler(file_handler)

    logger.info(f"Logging initialized. File: {log_file}")
    return logger


class EnvelopeLogger:
    """
    Journals every envelope that crosses the bus as a JSON line.

    Usage:
        envelope_logger = EnvelopeLogger(log_dir=Path("~/.kvbridge/logs"))
        bus.use(envelope_logger.middleware)
    """

    def __init__(self, log_dir: Path | None = None) -> None:
        self._log_dir = (log_dir or Path.home() / ".kvbridge" / "logs").expanduser()
        self._log_dir.mkdir(parents=True, exist_ok=True)
        self._file = self._log_dir / f"envelopes_{datetime.now().strftime('%Y%m%d')}.jsonl"
        self._logger = logging.getLogger("kvbridge.envelopes")

    @property
    def path(self) -> Path:
        return self._file

    async def middleware(self, event: Event, next_handler: MiddlewareNext) -> Event:
        if event.type == EventType.STORAGE_RESULT:
            self._write(event)
        return await next_handler(event)

    def _write(self, event: Event) -> None:
        record = {
            "timestamp": datetime.now().isoformat(),
            "id": event.id,
            "callback_id": event.data.get("callback_id"),
            "envelope": event.data.get("envelope"),
        }
        try:
            with open(self._file, "a", encoding="utf-8") as f:
                f.write(json.dumps(record) + "\n")
        except OSError as e:
            self._logger.warning(f"Failed to write envelope log: {e}")
