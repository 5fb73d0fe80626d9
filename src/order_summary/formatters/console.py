"""Console output formatting utilities."""

from __future__ import annotations

import re

from order_summary.orders.records import TimeWindow
from order_summary.summary import SummaryResponse

LINE_LABELS = [
    ("cash_sales_in_store", "Cash Sales (In-Store)"),
    ("cash_sales_delivery", "Cash Sales (Delivery)"),
    ("credit_card_tips_in_store", "Credit Card Tips (In-Store)"),
    ("credit_card_tips_delivery", "Credit Card Tips (Delivery)"),
]


def sanitize_for_console(text: str) -> str:
    """Drop non-ASCII characters so cp1252 consoles do not choke."""
    return re.sub(r"[^\x00-\x7F]+", "", text)


def format_summary_for_console(
    response: SummaryResponse, window: TimeWindow | None = None, store: str | None = None
) -> str:
    """Build a human-readable report of one summary response.

    Args:
        response: Result of ReportService.generate_summary.
        window: Time-of-day window, shown in the title when given.
        store: Store name, shown in the title when given.

    Returns:
        Multi-line text for console output.
    """
    summary = response.summary
    title = "Order Summary"
    if store:
        title += f" - {store}"
    if window is not None:
        title += f" ({window.label()})"

    lines = [title, "=" * 60]
    if response.is_fallback:
        lines.append("WARNING: placeholder data, not a live report.")
        if response.error:
            lines.append(f"  Error: {response.error}")
        if response.note:
            lines.append(f"  Note: {response.note}")
        lines.append("")
    elif response.cached:
        lines.append("(served from cache)")
        lines.append("")

    width = max(len(label) for _, label in LINE_LABELS) + 2
    for attr, label in LINE_LABELS:
        lines.append(f"{label + ':':<{width}} ${getattr(summary, attr):,.2f}")
    lines.append("-" * 60)
    lines.append(f"{'Total Orders:':<{width}} {summary.total_orders}")
    lines.append(f"{'Average Order Value:':<{width}} ${summary.average_order_value:,.2f}")

    return sanitize_for_console("\n".join(lines))
