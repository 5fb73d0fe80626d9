"""Public API for order summaries.

``ReportService`` is the single entry point callers use: it owns the report
source, the progress tracker, the result cache and the fetch lock, so one
process never runs two portal sessions at the same time.

Failure policy:
- ConfigError: raised before any fetch.
- BusyError: raised when another fetch holds the lock past ``queue_timeout``.
- ReportSourceError (including the overall timeout): answered with the
  fallback summary, ``error`` set and the status moved to ``error``.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import Any, Optional

from order_summary.cache import ResultCache
from order_summary.config import ReportConfig
from order_summary.exceptions import BusyError, ExportFailedError, ReportSourceError
from order_summary.orders.aggregate import summarize
from order_summary.orders.records import OrderRecord
from order_summary.source.base import ReportSource, TimeRange
from order_summary.status import Stage, StatusSnapshot, StatusTracker
from order_summary.summary import OFFLINE_NOTE, SummaryResponse

logger = logging.getLogger(__name__)


class ReportService:
    """Fetch, aggregate and cache order summaries.

    Args:
        source: Report source used for live fetches.
        config: Settings; ``fetch_timeout``, ``store`` and ``offline`` are
            read here.
        cache: Result cache; a fresh 20-entry cache by default.
        tracker: Progress tracker; a fresh one by default.
        queue_timeout: Seconds a request waits for an in-flight fetch to
            finish before BusyError. Defaults to ``config.fetch_timeout``;
            0 rejects immediately.

    Examples:
        >>> from order_summary.source import PortalReportSource
        >>> config = ReportConfig.from_env()
        >>> with ReportService(PortalReportSource(config), config) as service:
        ...     response = service.generate_summary(
        ...         "2025-03-26T07:00:00", "2025-03-26T11:00:00"
        ...     )
        >>> response.to_dict()["totalOrders"]
    """

    def __init__(
        self,
        source: ReportSource,
        config: Optional[ReportConfig] = None,
        cache: Optional[ResultCache[SummaryResponse]] = None,
        tracker: Optional[StatusTracker] = None,
        queue_timeout: Optional[float] = None,
    ) -> None:
        self.source = source
        self.config = config or ReportConfig()
        self.cache: ResultCache[SummaryResponse] = cache if cache is not None else ResultCache()
        self.tracker = tracker or StatusTracker()
        self.queue_timeout = (
            self.config.fetch_timeout if queue_timeout is None else queue_timeout
        )
        self._fetch_lock = threading.Lock()
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="report-fetch")

    def __enter__(self) -> ReportService:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        """Stop accepting fetches; an in-flight fetch is left to finish."""
        self._executor.shutdown(wait=False)

    def status(self) -> StatusSnapshot:
        """Most recent stage reached; safe to call at any time."""
        return self.tracker.snapshot()

    def generate_summary(self, start: Any, end: Any) -> SummaryResponse:
        """Summarize the orders whose time of day falls between start and end.

        Only the hour and minute of ``start``/``end`` filter orders; their
        dates select which report to export but do not narrow the rows.

        Args:
            start: Start timestamp (datetime or ISO-8601 string).
            end: End timestamp (datetime or ISO-8601 string).

        Returns:
            SummaryResponse with rounded figures, or the fallback dataset
            with ``error`` set when the report could not be fetched.

        Raises:
            ValueError: If the timestamps cannot be parsed.
            ConfigError: If portal credentials are missing.
            BusyError: If another fetch is still running after queue_timeout.
        """
        time_range = TimeRange.parse(start, end)
        window = time_range.window()
        key = time_range.cache_key()

        cached = self.cache.get(key)
        if cached is not None:
            logger.info("Returning cached summary for %s", key)
            return SummaryResponse(
                summary=cached.summary, error=cached.error, note=cached.note, cached=True
            )

        if self.config.offline:
            logger.info("Offline mode: returning fallback summary for %s", key)
            return SummaryResponse.fallback(note=OFFLINE_NOTE)

        if getattr(self.source, "requires_credentials", False):
            self.config.require_credentials()

        try:
            records = self._fetch(time_range)
        except ReportSourceError as e:
            message = f"Automation failed: {e}"
            logger.error("%s", message)
            self.tracker.fail(message)
            return SummaryResponse.fallback(error=message)
        except BusyError:
            raise
        except Exception as e:
            self.tracker.fail(str(e))
            raise

        self.tracker.update(Stage.PROCESSING, f"Calculating summary for {window.label()}")
        summary = summarize(records, window).rounded()
        response = SummaryResponse(summary=summary)
        self.cache.put(key, response)
        self.tracker.update(Stage.COMPLETED, "Generation complete!")
        logger.info("Generated summary for %s: %s", key, summary.to_dict())
        return response

    def _fetch(self, time_range: TimeRange) -> list[OrderRecord]:
        """Run the source under the fetch lock and the overall ceiling.

        Raises:
            BusyError: Lock not obtained within queue_timeout.
            ExportFailedError: The ceiling elapsed before the source finished.
        """
        if self.queue_timeout > 0:
            acquired = self._fetch_lock.acquire(timeout=self.queue_timeout)
        else:
            acquired = self._fetch_lock.acquire(blocking=False)
        if not acquired:
            raise BusyError("A report fetch is already in progress; try again shortly.")

        generation = self.tracker.begin()
        try:
            future: Future[list[OrderRecord]] = self._executor.submit(
                self.source.fetch_orders,
                time_range,
                self.config.store,
                self.tracker.reporter(generation),
            )
        except RuntimeError:
            self.tracker.end(generation)
            self._fetch_lock.release()
            raise
        # released when the session really ends, not when we stop waiting
        future.add_done_callback(lambda _f: self._fetch_lock.release())

        try:
            return future.result(timeout=self.config.fetch_timeout)
        except FutureTimeoutError as e:
            raise ExportFailedError(
                f"Report fetch did not finish within {self.config.fetch_timeout:g}s"
            ) from e
        finally:
            # an abandoned source may keep reporting; those updates are dropped
            self.tracker.end(generation)
