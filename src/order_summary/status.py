"""Progress status for report fetches.

Advisory only: observers poll ``StatusTracker.snapshot()`` to show which
stage the current fetch reached. It carries no correctness obligation.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable

logger = logging.getLogger(__name__)


class Stage(str, Enum):
    """Named stages of one fetch, in the order they are normally reached."""

    IDLE = "idle"
    NAVIGATING = "navigating"
    LOGGING_IN = "logging-in"
    NAVIGATING_TO_REPORTING = "navigating-to-reporting"
    SELECTING_STORE = "selecting-store"
    RUNNING_REPORT = "running-report"
    EXPORTING = "exporting"
    PROCESSING = "processing"
    COMPLETED = "completed"
    ERROR = "error"


@dataclass(frozen=True)
class StatusSnapshot:
    """Current stage, message and last update time (epoch milliseconds)."""

    stage: Stage
    message: str
    last_updated: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.stage.value,
            "message": self.message,
            "lastUpdated": self.last_updated,
        }


def _now_ms() -> int:
    return int(time.time() * 1000)


class StatusTracker:
    """Thread-safe holder of the most recent stage reached.

    Each fetch runs in its own generation: ``begin()`` opens one and
    ``reporter()`` hands the source a callback bound to it. Once the
    generation is closed by ``end()`` (the fetch finished or was abandoned
    at the ceiling) late updates from that source are dropped.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._snapshot = StatusSnapshot(Stage.IDLE, "", _now_ms())
        self._generation = 0
        self._open = False

    def update(self, stage: Stage, message: str = "") -> None:
        with self._lock:
            self._set(stage, message)

    def reset(self) -> None:
        self.update(Stage.IDLE, "")

    def fail(self, message: str) -> None:
        self.update(Stage.ERROR, message)

    def begin(self) -> int:
        """Reset to idle and open a new fetch generation."""
        with self._lock:
            self._generation += 1
            self._open = True
            self._set(Stage.IDLE, "")
            return self._generation

    def end(self, generation: int) -> None:
        """Close a generation; its reporter stops updating the status."""
        with self._lock:
            if generation == self._generation:
                self._open = False

    def reporter(self, generation: int) -> Callable[[Stage, str], None]:
        """Progress callback that only counts while ``generation`` is open."""

        def report(stage: Stage, message: str = "") -> None:
            with self._lock:
                if self._open and generation == self._generation:
                    self._set(stage, message)
                else:
                    logger.debug("Dropping stale progress %s from fetch %d", stage, generation)

        return report

    def snapshot(self) -> StatusSnapshot:
        with self._lock:
            return self._snapshot

    def _set(self, stage: Stage, message: str) -> None:
        self._snapshot = StatusSnapshot(Stage(stage), message, _now_ms())
