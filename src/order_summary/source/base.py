"""Report source contract.

A report source turns a time range and a store into raw order rows. It may
retry internally as much as it likes but must end in either a list of
records or one of the ReportSourceError subclasses.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Optional, Protocol

import pandas as pd

from order_summary.orders.records import OrderRecord, TimeWindow
from order_summary.status import Stage

ProgressCallback = Callable[[Stage, str], None]


@dataclass(frozen=True)
class TimeRange:
    """Requested start/end timestamps.

    ``raw_start`` / ``raw_end`` keep the caller's original values; they make
    up the cache key and feed the time-of-day window.
    """

    start: datetime
    end: datetime
    raw_start: Any = None
    raw_end: Any = None

    @classmethod
    def parse(cls, start: Any, end: Any) -> TimeRange:
        """Build a range from datetimes or ISO-8601 strings.

        Raises:
            ValueError: If a value is not a timestamp or start is after end.
        """
        try:
            start_ts = pd.Timestamp(start)
            end_ts = pd.Timestamp(end)
        except (TypeError, ValueError) as e:
            raise ValueError(f"Invalid timestamp: {e}") from e
        if pd.isna(start_ts) or pd.isna(end_ts):
            raise ValueError("start and end timestamps are required")
        try:
            reversed_range = start_ts > end_ts
        except TypeError as e:
            raise ValueError(f"Cannot compare {start!r} and {end!r}: {e}") from e
        if reversed_range:
            raise ValueError(f"Start {start} is after end {end}")
        return cls(
            start=start_ts.to_pydatetime(),
            end=end_ts.to_pydatetime(),
            raw_start=start,
            raw_end=end,
        )

    def window(self) -> TimeWindow:
        """Hour:minute window of this request (dates dropped)."""
        return TimeWindow.from_datetimes(
            self.raw_start if self.raw_start is not None else self.start,
            self.raw_end if self.raw_end is not None else self.end,
        )

    def cache_key(self) -> str:
        start = self.raw_start if self.raw_start is not None else self.start.isoformat()
        end = self.raw_end if self.raw_end is not None else self.end.isoformat()
        return f"{start}-{end}"


class ReportSource(Protocol):
    """Anything that can produce order rows for a range and a store."""

    requires_credentials: bool

    def fetch_orders(
        self,
        time_range: TimeRange,
        store: str,
        progress: Optional[ProgressCallback] = None,
    ) -> list[OrderRecord]:
        """Return the report's order rows.

        Raises:
            SourceUnavailableError: Upstream unreachable or not authenticated.
            ExportFailedError: No artifact within the bounded wait.
            ParseFailedError: Artifact exists but cannot be decoded.
        """
        ...


def report_progress(progress: Optional[ProgressCallback], stage: Stage, message: str) -> None:
    """Invoke the optional progress callback."""
    if progress is not None:
        progress(stage, message)
