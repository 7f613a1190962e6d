"""
Logging Middleware — logs every delivered event to file and optionally console.
"""

from __future__ import annotations

import json
import logging
import time
from datetime import datetime
from pathlib import Path
from typing import Any

from wetdry.core.bus import Delivery, MiddlewareNext
from wetdry.core.events import (
    Event,
    MessageEvent,
    NotificationClickEvent,
    NotificationCloseEvent,
    PushEvent,
    SyncEvent,
)


def setup_logging(
    log_dir: Path | None = None,
    console_level: int | str = logging.WARNING,
    file_level: int = logging.DEBUG,
) -> logging.Logger:
    """
    Setup WetDry logging.

    Args:
        log_dir: Directory for log files (default: ~/.wetdry/logs)
        console_level: Minimum level for console output
        file_level: Minimum level for file output

    Returns:
        The configured logger
    """
    log_dir = (log_dir or (Path.home() / ".wetdry" / "logs")).expanduser()
    log_dir.mkdir(parents=True, exist_ok=True)

    logger = logging.getLogger("wetdry")
    logger.setLevel(logging.DEBUG)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler()
    console_handler.setLevel(console_level)
    console_handler.setFormatter(logging.Formatter("[%(levelname)s] %(message)s"))
    logger.addHandler(console_handler)

    log_file = log_dir / f"wetdry_{datetime.now().strftime('%Y%m%d')}.log"
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


class EventLogger:
    """
    Logs all events delivered to the agent, with their outcomes.

    Usage:
        event_logger = EventLogger(log_dir=Path("~/.wetdry/logs"))
        worker.use(event_logger.middleware)
    """

    def __init__(
        self,
        log_dir: Path | None = None,
        log_events: bool = True,
    ) -> None:
        self._log_dir = (log_dir or Path.home() / ".wetdry" / "logs").expanduser()
        self._log_events = log_events
        if log_events:
            self._log_dir.mkdir(parents=True, exist_ok=True)

        # Events log file (JSON lines format)
        self._events_file = self._log_dir / f"events_{datetime.now().strftime('%Y%m%d')}.jsonl"

        self._logger = logging.getLogger("wetdry.events")

    @property
    def events_file(self) -> Path:
        return self._events_file

    async def middleware(self, event: Event, next_handler: MiddlewareNext) -> Delivery:
        """Log events passing through, after their handlers settle."""
        self._logger.debug(f"[{event.type}] id={event.id} {describe(event)}")

        started = time.perf_counter()
        delivery = await next_handler(event)
        elapsed_ms = (time.perf_counter() - started) * 1000

        outcomes = [o.value for r in delivery.results for o in r.outcomes]
        self._logger.debug(
            f"[{event.type}] id={event.id} handled in {elapsed_ms:.1f}ms outcomes={outcomes}"
        )

        if self._log_events:
            self._write_event(event, outcomes, elapsed_ms)

        return delivery

    def _write_event(self, event: Event, outcomes: list[str], elapsed_ms: float) -> None:
        """Write event to JSON lines file."""
        try:
            record = {
                "timestamp": datetime.now().isoformat(),
                "id": event.id,
                "type": event.type,
                "detail": describe(event),
                "outcomes": outcomes,
                "elapsed_ms": round(elapsed_ms, 2),
            }
            with open(self._events_file, "a", encoding="utf-8") as f:
                f.write(json.dumps(record) + "\n")
        except Exception as e:
            self._logger.warning(f"Failed to write event log: {e}")


def describe(event: Event) -> dict[str, Any]:
    """Small JSON-safe summary of an event. Never includes payload bodies."""
    if isinstance(event, PushEvent):
        return {"payload_bytes": len(event.data) if event.data is not None else 0}
    if isinstance(event, NotificationClickEvent):
        return {"tag": event.notification.tag, "action": event.action}
    if isinstance(event, NotificationCloseEvent):
        return {"tag": event.notification.tag}
    if isinstance(event, SyncEvent):
        return {"tag": event.tag}
    if isinstance(event, MessageEvent):
        kind = event.data.get("type") if isinstance(event.data, dict) else None
        return {"message_type": kind}
    return {}
