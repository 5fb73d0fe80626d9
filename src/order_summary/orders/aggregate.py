"""Aggregation pipeline: time-of-day filter and categorized sums.

Pure and synchronous: order records in, Summary out, no I/O besides
logging. Amounts are summed at full precision; rounding belongs to the
caller (``Summary.rounded()``).
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

import pandas as pd

from order_summary.exceptions import MalformedRowError
from order_summary.orders.classify import (
    Channel,
    PaymentKind,
    classify_channel,
    classify_payment,
)
from order_summary.orders.records import (
    OrderRecord,
    TimeWindow,
    parse_amount,
    parse_order_date,
    parse_time_of_day,
)
from order_summary.summary import Summary

logger = logging.getLogger(__name__)

FRAME_COLUMNS = [
    "order_number",
    "order_date",
    "hour",
    "minute",
    "order_type",
    "payment_method",
    "channel",
    "payment_kind",
    "total",
    "tip",
]


def filter_by_time_of_day(records: Iterable[OrderRecord], window: TimeWindow) -> pd.DataFrame:
    """Keep the orders whose clock time falls inside the window.

    The order's calendar date is parsed (a row without one is malformed)
    but never used for inclusion. Malformed rows are logged and skipped.

    Args:
        records: Raw order rows from a report source.
        window: Inclusive hour:minute window.

    Returns:
        DataFrame with FRAME_COLUMNS, one row per included order, with
        amounts normalized to floats and labels classified.
    """
    rows = []
    seen = 0
    skipped = 0
    for record in records:
        seen += 1
        try:
            order_date = parse_order_date(record.date)
            hour, minute = parse_time_of_day(record.time_of_day)
        except MalformedRowError as e:
            skipped += 1
            logger.warning("Skipping order #%s: %s", record.order_number or "N/A", e)
            continue

        total = parse_amount(record.total)
        included = window.contains(hour, minute)
        logger.debug(
            'Order #%s: Time "%s" -> %02d:%02d | %s | %s | $%.2f',
            record.order_number or "N/A",
            record.time_of_day,
            hour,
            minute,
            "INCLUDED" if included else "EXCLUDED",
            record.channel or "N/A",
            total,
        )
        if not included:
            continue

        rows.append(
            {
                "order_number": record.order_number,
                "order_date": order_date,
                "hour": hour,
                "minute": minute,
                "order_type": record.channel,
                "payment_method": record.payment_method,
                "channel": classify_channel(record.channel),
                "payment_kind": classify_payment(record.payment_method),
                "total": total,
                "tip": parse_amount(record.tip),
            }
        )

    logger.info(
        "Filtered %d of %d orders to window %s (%d malformed)",
        len(rows),
        seen,
        window.label(),
        skipped,
    )
    return pd.DataFrame(rows, columns=FRAME_COLUMNS)


def build_summary(frame: pd.DataFrame) -> Summary:
    """Sum payments and tips per channel x payment category.

    Every row counts toward ``total_orders`` and the average; each row feeds
    at most one of the four money buckets.

    Args:
        frame: Output of ``filter_by_time_of_day``.

    Returns:
        Full-precision Summary.
    """
    total_orders = int(len(frame))
    if total_orders == 0:
        return Summary()

    totals = frame["total"].astype(float)
    tips = frame["tip"].astype(float)
    in_store = frame["channel"] == Channel.IN_STORE
    delivery = frame["channel"] == Channel.DELIVERY
    cash = frame["payment_kind"] == PaymentKind.CASH
    card = frame["payment_kind"] == PaymentKind.CREDIT_CARD

    return Summary(
        cash_sales_in_store=float(totals[cash & in_store].sum()),
        cash_sales_delivery=float(totals[cash & delivery].sum()),
        credit_card_tips_in_store=float(tips[card & in_store].sum()),
        credit_card_tips_delivery=float(tips[card & delivery].sum()),
        total_orders=total_orders,
        average_order_value=float(totals.sum()) / total_orders,
    )


def summarize(records: Iterable[OrderRecord], window: TimeWindow) -> Summary:
    """Filter by time of day, then aggregate. Not rounded."""
    return build_summary(filter_by_time_of_day(records, window))
