"""Tests for the download-folder report source."""

import os
from pathlib import Path

import pytest

from order_summary.exceptions import ExportFailedError, SourceUnavailableError
from order_summary.source import DownloadFolderSource, TimeRange
from order_summary.source.folder import find_latest_export
from order_summary.status import Stage

RANGE = TimeRange.parse("2025-03-26T09:00:00", "2025-03-26T11:00:00")


class FakeClock:
    """Clock advanced only by the injected sleep."""

    def __init__(self, start=1_000_000.0):
        self.now = start
        self.sleeps = []

    def __call__(self):
        return self.now

    def sleep(self, seconds):
        self.sleeps.append(seconds)
        self.now += seconds


def test_find_latest_export_picks_newest(workbook_factory, order_rows, tmp_path):
    old = workbook_factory(order_rows, name="order-details-old.xlsx")
    new = workbook_factory(order_rows, name="order-details-new.xlsx")
    os.utime(old, (100, 100))
    os.utime(new, (200, 200))
    (tmp_path / "other.xlsx").write_bytes(b"")

    assert find_latest_export(tmp_path) == new
    assert find_latest_export(tmp_path, newer_than=300) is None


def test_missing_folder(tmp_path):
    source = DownloadFolderSource(tmp_path / "missing")
    with pytest.raises(SourceUnavailableError):
        source.fetch_orders(RANGE, "Piqua")


def test_existing_export_accepted(workbook_factory, order_rows, tmp_path):
    workbook_factory(order_rows)
    seen = []
    source = DownloadFolderSource(tmp_path, wait_seconds=0, accept_existing=True)

    records = source.fetch_orders(RANGE, "Piqua", lambda stage, msg: seen.append(stage))

    assert len(records) == 7
    assert seen == [Stage.EXPORTING, Stage.PROCESSING]


def test_stale_export_ignored_until_deadline(workbook_factory, order_rows, tmp_path):
    path = workbook_factory(order_rows)
    os.utime(path, (10, 10))
    clock = FakeClock()
    source = DownloadFolderSource(
        tmp_path, wait_seconds=3, poll_interval=1, sleep=clock.sleep, clock=clock
    )

    with pytest.raises(ExportFailedError, match="within 3s"):
        source.fetch_orders(RANGE, "Piqua")
    assert clock.sleeps == [1, 1, 1]


def test_export_arriving_while_polling(workbook_factory, order_rows, tmp_path):
    clock = FakeClock(start=50.0)

    def sleep(seconds):
        clock.sleep(seconds)
        path = workbook_factory(order_rows, name="order-details-late.xlsx")
        os.utime(path, (clock.now, clock.now))

    source = DownloadFolderSource(tmp_path, wait_seconds=10, sleep=sleep, clock=clock)

    records = source.fetch_orders(RANGE, "Piqua")

    assert records[0].order_number == "1001"
    assert len(clock.sleeps) == 1


def test_export_vanishing_during_scan_is_skipped(workbook_factory, order_rows, tmp_path, monkeypatch):
    kept = workbook_factory(order_rows, name="order-details-kept.xlsx")
    workbook_factory(order_rows, name="order-details-gone.xlsx")
    real_stat = Path.stat

    def flaky_stat(self, *args, **kwargs):
        if self.name == "order-details-gone.xlsx":
            raise FileNotFoundError(self)
        return real_stat(self, *args, **kwargs)

    monkeypatch.setattr(Path, "is_file", lambda self: True)
    monkeypatch.setattr(Path, "stat", flaky_stat)

    assert find_latest_export(tmp_path) == kept
