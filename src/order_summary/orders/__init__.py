"""Orders domain module.

This module turns raw order-details rows into a Summary:

- **records**: `OrderRecord`, `TimeWindow` and the row parsers
- **classify**: channel / payment categories
- **aggregate**: `filter_by_time_of_day()`, `summarize()`

Example:
    >>> from order_summary.orders import OrderRecord, TimeWindow, summarize
    >>>
    >>> window = TimeWindow(9, 0, 11, 0)
    >>> rows = [OrderRecord("Mar 26 2025", "10:00 AM", "Pickup", "Cash", 10.0)]
    >>> summarize(rows, window).cash_sales_in_store
    10.0

"""

from order_summary.orders.aggregate import build_summary, filter_by_time_of_day, summarize
from order_summary.orders.classify import Channel, PaymentKind, classify_channel, classify_payment
from order_summary.orders.records import OrderRecord, TimeWindow

__all__ = [
    "Channel",
    "OrderRecord",
    "PaymentKind",
    "TimeWindow",
    "build_summary",
    "classify_channel",
    "classify_payment",
    "filter_by_time_of_day",
    "summarize",
]
