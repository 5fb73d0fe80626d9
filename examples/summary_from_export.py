"""Example: Order summary from an export already on disk

This example runs the same pipeline the service uses, but against a
workbook that was exported by hand ("Export all data to Excel" on the
Order Details report):
1. Parse the order-details workbook into order rows
2. Keep the rows whose clock time falls in the window (any day)
3. Total cash sales and credit-card tips per channel

Prerequisites:
- An order-details-*.xlsx export in downloads/ (or modify the path below)
"""

from pathlib import Path

from order_summary import ReportConfig, ReportService
from order_summary.formatters import format_summary_for_console
from order_summary.orders import TimeWindow, filter_by_time_of_day, summarize
from order_summary.source import DownloadFolderSource, load_orders

export_path = Path("downloads/order-details-2025-03-26.xlsx")  # MODIFY AS NEEDED
window = TimeWindow(7, 0, 11, 0)  # 07:00-11:00 on every day of the report

# Pipeline by hand: rows -> filtered frame -> Summary
records = load_orders(export_path)
frame = filter_by_time_of_day(records, window)
print(f"{len(frame)} of {len(records)} rows fall in {window.label()}")
print(frame[["order_number", "hour", "minute", "order_type", "payment_method", "total", "tip"]].head())

summary = summarize(records, window).rounded()
print(f"\nCash sales in store: ${summary.cash_sales_in_store:,.2f}")

# Same result through the service, which adds caching and the fallback policy
config = ReportConfig.from_env()
source = DownloadFolderSource(
    export_path.parent, wait_seconds=0, accept_existing=True, pattern=export_path.name
)
with ReportService(source, config) as service:
    response = service.generate_summary("2025-03-26T07:00:00", "2025-03-26T11:00:00")

print()
print(format_summary_for_console(response, window=window, store=config.store))
print(f"\nStatus: {service.status().to_dict()}")
