"""Report sources: where order rows come from.

- `PortalReportSource`: exports the order-details report over HTTP
- `DownloadFolderSource`: waits for an export to land in a folder
- `excel.load_orders()`: parse an export already on disk

Example:
    >>> from order_summary.config import ReportConfig
    >>> from order_summary.source import PortalReportSource, TimeRange
    >>>
    >>> source = PortalReportSource(ReportConfig.from_env())
    >>> rows = source.fetch_orders(
    ...     TimeRange.parse("2025-03-26T07:00:00", "2025-03-26T11:00:00"), "Piqua"
    ... )

"""

from order_summary.source.base import ReportSource, TimeRange
from order_summary.source.excel import load_orders, read_order_details
from order_summary.source.folder import DownloadFolderSource
from order_summary.source.portal import PortalReportSource

__all__ = [
    "DownloadFolderSource",
    "PortalReportSource",
    "ReportSource",
    "TimeRange",
    "load_orders",
    "read_order_details",
]
