"""POS Order Summary - cash sales and card tips by time of day.

This package fetches a store's order-details report from the vendor back
office, keeps the orders whose clock time falls in a requested window and
totals cash sales and credit-card tips per channel.

Module Structure:
    order_summary.orders: Order rows, classification, aggregation
    order_summary.source: Report sources (portal export, download folder, workbook)
    order_summary.service: ReportService (fetch lock, cache, status, fallback)
    order_summary.formatters: Console output
    order_summary.config: ReportConfig (HR_* environment)

Quick Start:
    >>> from order_summary import ReportConfig, ReportService
    >>> from order_summary.source import PortalReportSource
    >>>
    >>> config = ReportConfig.from_env()
    >>> service = ReportService(PortalReportSource(config), config)
    >>> response = service.generate_summary("2025-03-26T07:00:00", "2025-03-26T11:00:00")
    >>> response.to_dict()
    {'cashSalesInStore': ..., 'totalOrders': ..., ...}

Time window:
    Only the hour and minute of the request's start/end filter orders. The
    window applies to every day in the exported report, not to an absolute
    date range.
"""

__version__ = "0.1.0"

from order_summary.config import ReportConfig
from order_summary.exceptions import (
    BusyError,
    ConfigError,
    ExportFailedError,
    ParseFailedError,
    ReportSourceError,
    SourceUnavailableError,
    SummaryAPIError,
)
from order_summary.service import ReportService
from order_summary.summary import FALLBACK_SUMMARY, Summary, SummaryResponse

__all__ = [
    "BusyError",
    "ConfigError",
    "ExportFailedError",
    "FALLBACK_SUMMARY",
    "ParseFailedError",
    "ReportConfig",
    "ReportService",
    "ReportSourceError",
    "SourceUnavailableError",
    "Summary",
    "SummaryAPIError",
    "SummaryResponse",
    "__version__",
]
