"""Live portal check. Runs only with ``pytest -m live`` and HR_* credentials."""

import os

import pytest

from order_summary import ReportConfig, ReportService
from order_summary.source import PortalReportSource

pytestmark = pytest.mark.live


@pytest.fixture
def live_config(tmp_path):
    if not all(os.environ.get(name) for name in ("HR_BASE", "HR_USER", "HR_PASS")):
        pytest.skip("HR_BASE/HR_USER/HR_PASS not set")
    return ReportConfig.from_env(download_dir=tmp_path, offline=False)


def test_live_summary(live_config):
    with ReportService(PortalReportSource(live_config), live_config) as service:
        response = service.generate_summary("2025-03-26T07:00:00", "2025-03-26T23:00:00")

    assert response.error is None, response.error
    summary = response.summary
    assert summary.total_orders >= 0
    assert summary.cash_sales_in_store + summary.cash_sales_delivery <= (
        summary.average_order_value * summary.total_orders + 0.01 * max(summary.total_orders, 1)
    )
