"""Order rows and time-of-day windows.

An ``OrderRecord`` keeps the values exactly as the export delivered them;
parsing happens in the aggregation pipeline so that one bad row can be
skipped without losing the rest of the report.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Any

import pandas as pd

from order_summary.exceptions import MalformedRowError
from order_summary.orders.cleaning import is_missing, strip_invisibles, to_float

# "10:59 AM", "10:59AM", "10:59:30 pm", "14:05"
_TIME_RE = re.compile(
    r"^(?P<hour>\d{1,2}):(?P<minute>\d{2})(?::\d{2})?\s*(?P<period>[AaPp]\.?[Mm]\.?)?$"
)

# Date formats seen in order-details exports, most common first
DATE_FORMATS = ("%b %d %Y", "%b %d, %Y", "%m/%d/%Y", "%Y-%m-%d", "%m/%d/%y")

_ISO_CLOCK_RE = re.compile(r"[T ](?P<hour>\d{2}):(?P<minute>\d{2})")


@dataclass(frozen=True)
class OrderRecord:
    """One row of the order-details report.

    Attributes:
        date: Order date as exported (string, date or Excel timestamp).
        time_of_day: Wall-clock time as exported, usually ``"10:59 AM"``.
        order_number: Vendor order number, diagnostics only.
        channel: Free-text order type ("Pickup", "Delivery", ...).
        payment_method: Free-text payment label ("Cash", "Visa", ...).
        total: Order total; non-numeric values count as 0.
        tip: Tip amount; absent values count as 0.
    """

    date: Any
    time_of_day: Any
    channel: str = ""
    payment_method: str = ""
    total: Any = 0.0
    tip: Any = 0.0
    order_number: str | None = None


def parse_time_of_day(value: Any) -> tuple[int, int]:
    """Parse an order time into a 24-hour ``(hour, minute)`` pair.

    Raises:
        MalformedRowError: If the value is missing or not a clock time.

    Examples:
        >>> parse_time_of_day("12:05 AM")
        (0, 5)
        >>> parse_time_of_day("1:30 PM")
        (13, 30)
    """
    if is_missing(value):
        raise MalformedRowError("missing time of day")
    if isinstance(value, (datetime, pd.Timestamp)):
        return value.hour, value.minute
    if isinstance(value, time):
        return value.hour, value.minute

    text = strip_invisibles(value) or ""
    m = _TIME_RE.match(text)
    if not m:
        raise MalformedRowError(f"unparseable time of day {value!r}")

    hour = int(m.group("hour"))
    minute = int(m.group("minute"))
    period = (m.group("period") or "").replace(".", "").upper()
    if minute > 59:
        raise MalformedRowError(f"minute out of range in {value!r}")
    if period:
        if not 1 <= hour <= 12:
            raise MalformedRowError(f"hour out of range in {value!r}")
        if period == "PM" and hour < 12:
            hour += 12
        elif period == "AM" and hour == 12:
            hour = 0
    elif hour > 23:
        raise MalformedRowError(f"hour out of range in {value!r}")
    return hour, minute


def parse_order_date(value: Any) -> date:
    """Parse the export's date column.

    Raises:
        MalformedRowError: If the value is missing or not a date.

    Examples:
        >>> parse_order_date("Mar 26 2025")
        datetime.date(2025, 3, 26)
    """
    if is_missing(value):
        raise MalformedRowError("missing order date")
    if isinstance(value, (datetime, pd.Timestamp)):
        return value.date()
    if isinstance(value, date):
        return value

    text = strip_invisibles(value) or ""
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            pass
    raise MalformedRowError(f"unparseable order date {value!r}")


def parse_amount(value: Any) -> float:
    """Monetary amount, 0.0 when absent or non-numeric."""
    parsed = to_float(value)
    return 0.0 if parsed is None else parsed


@dataclass(frozen=True)
class TimeWindow:
    """Inclusive hour:minute range applied to any day's orders.

    The window does not wrap past midnight; ``start`` is expected to be
    at or before ``end``.
    """

    start_hour: int
    start_minute: int
    end_hour: int
    end_minute: int

    def __post_init__(self) -> None:
        for hour in (self.start_hour, self.end_hour):
            if not 0 <= hour <= 23:
                raise ValueError(f"hour must be within 0..23, got {hour}")
        for minute in (self.start_minute, self.end_minute):
            if not 0 <= minute <= 59:
                raise ValueError(f"minute must be within 0..59, got {minute}")

    @classmethod
    def from_datetimes(cls, start: Any, end: Any) -> TimeWindow:
        """Build a window from request timestamps, keeping only hour and minute.

        The calendar date of the request is dropped on purpose: the window
        applies to every day present in the report. ISO strings keep the
        wall-clock digits they carry, offsets included (``"...T07:00:00Z"``
        means 07:00).

        Examples:
            >>> TimeWindow.from_datetimes("2025-03-26T07:00:00.000Z", "2025-03-26T11:30:00Z")
            TimeWindow(start_hour=7, start_minute=0, end_hour=11, end_minute=30)
        """
        sh, sm = _clock_of(start)
        eh, em = _clock_of(end)
        return cls(start_hour=sh, start_minute=sm, end_hour=eh, end_minute=em)

    def contains(self, hour: int, minute: int) -> bool:
        """Inclusive comparison on (hour, minute) pairs."""
        after_start = hour > self.start_hour or (
            hour == self.start_hour and minute >= self.start_minute
        )
        before_end = hour < self.end_hour or (hour == self.end_hour and minute <= self.end_minute)
        return after_start and before_end

    def label(self) -> str:
        """``"HH:MM-HH:MM"`` label for logs and console output."""
        return (
            f"{self.start_hour:02d}:{self.start_minute:02d}-"
            f"{self.end_hour:02d}:{self.end_minute:02d}"
        )


def _clock_of(value: Any) -> tuple[int, int]:
    if isinstance(value, (datetime, pd.Timestamp, time)):
        return value.hour, value.minute
    if isinstance(value, str):
        m = _ISO_CLOCK_RE.search(value.strip())
        if m:
            return int(m.group("hour")), int(m.group("minute"))
        try:
            ts = pd.Timestamp(value)
        except ValueError as e:
            raise ValueError(f"Invalid timestamp {value!r}: {e}") from e
        return ts.hour, ts.minute
    raise ValueError(f"Invalid timestamp {value!r}")
