"""Shared fixtures: order rows and order-details workbooks."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any

import pandas as pd
import pytest

from order_summary.orders.records import OrderRecord

HEADER = ["Date", "Time", "Order #", "Type", "Payment", "Total", "Tips"]


def write_order_details(path: Path, rows: list[list[Any]], title: bool = True) -> Path:
    """Write a workbook shaped like the vendor export.

    A title row and a blank row precede the header, and a totals row with no
    date/time closes the sheet, as in real exports.
    """
    lines: list[list[Any]] = []
    if title:
        lines.append(["Order Details - Piqua", None, None, None, None, None, None])
        lines.append([None] * len(HEADER))
    lines.append(HEADER)
    lines.extend(rows)
    lines.append(["Totals", None, None, None, None, sum_totals(rows), None])
    path.parent.mkdir(parents=True, exist_ok=True)
    pd.DataFrame(lines).to_excel(path, header=False, index=False, engine="openpyxl")
    return path


def sum_totals(rows: list[list[Any]]) -> float:
    return float(sum(r[5] for r in rows if isinstance(r[5], (int, float))))


@pytest.fixture
def order_rows() -> list[list[Any]]:
    """Rows across two days, all channels and payment kinds."""
    return [
        ["Mar 26 2025", "10:00 AM", 1001, "Pickup", "Cash", 10.00, None],
        ["Mar 26 2025", "10:30 AM", 1002, "Delivery", "Visa", 20.00, 3.00],
        ["Mar 26 2025", "12:15 PM", 1003, "To Go", "MC", 15.50, 2.25],
        ["Mar 27 2025", "10:45 AM", 1004, "Web Pick Up", "AMEX", 30.00, 4.50],
        ["Mar 27 2025", "9:05 AM", 1005, "Delivery", "Cash", 18.25, None],
        ["Mar 27 2025", "10:10 AM", 1006, "Dine In", "Gift Card", 12.00, 1.00],
    ]


@pytest.fixture
def workbook_factory(tmp_path: Path) -> Callable[..., Path]:
    """Return a function that writes an order-details workbook under tmp_path."""

    def _make(rows: list[list[Any]], name: str = "order-details-2025-03-26.xlsx", **kw: Any) -> Path:
        return write_order_details(tmp_path / name, rows, **kw)

    return _make


@pytest.fixture
def scenario_records() -> list[OrderRecord]:
    """The two orders of the basic split scenario."""
    return [
        OrderRecord(
            date="Mar 26 2025",
            time_of_day="10:00 AM",
            channel="Pickup",
            payment_method="Cash",
            total=10.00,
            order_number="1",
        ),
        OrderRecord(
            date="Mar 26 2025",
            time_of_day="10:30 AM",
            channel="Delivery",
            payment_method="Visa",
            total=20.00,
            tip=3.00,
            order_number="2",
        ),
    ]
