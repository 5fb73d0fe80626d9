"""Report source that waits for an export to land in a download folder.

Used when the export is triggered outside this package (a browser session,
a person clicking "Export all data to Excel"): the newest
``order-details-*.xlsx`` in the folder is picked up and parsed.
"""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Callable, Optional

from order_summary.exceptions import ExportFailedError, SourceUnavailableError
from order_summary.orders.records import OrderRecord
from order_summary.source.base import ProgressCallback, TimeRange, report_progress
from order_summary.source.excel import load_orders
from order_summary.status import Stage

logger = logging.getLogger(__name__)

EXPORT_PATTERN = "order-details-*.xlsx"


def find_latest_export(
    folder: Path, pattern: str = EXPORT_PATTERN, newer_than: float | None = None
) -> Path | None:
    """Return the most recently modified file matching pattern, or None.

    Args:
        folder: Directory to scan (not recursive).
        pattern: Glob pattern, case-sensitive.
        newer_than: Optional epoch seconds; older files are ignored.
    """
    candidates = []
    for path in folder.glob(pattern):
        try:
            if not path.is_file():
                continue
            mtime = path.stat().st_mtime
        except OSError as e:
            # renamed or removed between the scan and the stat
            logger.debug("Skipping %s: %s", path, e)
            continue
        if newer_than is not None and mtime < newer_than:
            continue
        candidates.append((mtime, path))
    if not candidates:
        return None
    return max(candidates)[1]


class DownloadFolderSource:
    """Poll a folder until an order-details export appears, then parse it.

    Args:
        folder: Directory the export is downloaded into.
        wait_seconds: Bounded wait for the file to materialise.
        poll_interval: Seconds between scans.
        accept_existing: Accept exports already present before the fetch
            started. When False only files written after the fetch began
            count.
        pattern: Glob pattern of export files.
        sleep: Injected for tests.
        clock: Injected for tests.
    """

    requires_credentials = False

    def __init__(
        self,
        folder: str | Path,
        wait_seconds: float = 30.0,
        poll_interval: float = 1.0,
        accept_existing: bool = False,
        pattern: str = EXPORT_PATTERN,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.folder = Path(folder)
        self.wait_seconds = wait_seconds
        self.poll_interval = poll_interval
        self.accept_existing = accept_existing
        self.pattern = pattern
        self._sleep = sleep
        self._clock = clock

    def fetch_orders(
        self,
        time_range: TimeRange,
        store: str,
        progress: Optional[ProgressCallback] = None,
    ) -> list[OrderRecord]:
        if not self.folder.is_dir():
            raise SourceUnavailableError(f"Download folder not found: {self.folder}")

        started = self._clock()
        newer_than = None if self.accept_existing else started
        deadline = started + self.wait_seconds
        report_progress(progress, Stage.EXPORTING, f"Waiting for {self.pattern} in {self.folder}")

        while True:
            found = find_latest_export(self.folder, self.pattern, newer_than)
            if found is not None:
                break
            if self._clock() >= deadline:
                raise ExportFailedError(
                    f"No {self.pattern} appeared in {self.folder} within {self.wait_seconds:.0f}s"
                )
            self._sleep(self.poll_interval)

        logger.info("Using export %s for store %s", found, store)
        report_progress(progress, Stage.PROCESSING, f"Processing Excel file {found.name}")
        return load_orders(found)
