"""Tests for the time-of-day filter and categorized sums."""

import logging

import pytest

from order_summary.orders import OrderRecord, TimeWindow, summarize
from order_summary.orders.aggregate import FRAME_COLUMNS, build_summary, filter_by_time_of_day
from order_summary.orders.classify import Channel, PaymentKind
from order_summary.summary import Summary


def _records_from_rows(rows):
    return [
        OrderRecord(
            date=r[0],
            time_of_day=r[1],
            order_number=str(r[2]),
            channel=r[3],
            payment_method=r[4],
            total=r[5],
            tip=r[6],
        )
        for r in rows
    ]


def test_basic_split(scenario_records):
    summary = summarize(scenario_records, TimeWindow(9, 0, 11, 0)).rounded()

    assert summary == Summary(
        cash_sales_in_store=10.00,
        cash_sales_delivery=0.00,
        credit_card_tips_in_store=0.00,
        credit_card_tips_delivery=3.00,
        total_orders=2,
        average_order_value=15.00,
    )


def test_orders_outside_window_are_excluded(scenario_records):
    summary = summarize(scenario_records, TimeWindow(12, 0, 13, 0)).rounded()

    assert summary == Summary()
    assert summary.total_orders == 0
    assert summary.average_order_value == 0.0


def test_malformed_row_is_skipped(scenario_records, caplog):
    records = scenario_records + [
        OrderRecord(date="Mar 26 2025", time_of_day="garbage", channel="Pickup",
                    payment_method="Cash", total=99.0, order_number="3"),
    ]

    with caplog.at_level(logging.WARNING, logger="order_summary.orders.aggregate"):
        summary = summarize(records, TimeWindow(9, 0, 11, 0)).rounded()

    assert summary.total_orders == 2
    assert summary.cash_sales_in_store == 10.00
    assert "Skipping order #3" in caplog.text


def test_row_without_date_is_malformed(scenario_records):
    records = scenario_records + [OrderRecord(date="Totals", time_of_day=None, total=30.0)]
    assert summarize(records, TimeWindow(0, 0, 23, 59)).total_orders == 2


def test_window_start_is_inclusive_and_minute_before_is_not():
    records = [
        OrderRecord(date="Mar 26 2025", time_of_day="9:00 AM", channel="Pickup",
                    payment_method="Cash", total=5.0),
        OrderRecord(date="Mar 26 2025", time_of_day="8:59 AM", channel="Pickup",
                    payment_method="Cash", total=7.0),
        OrderRecord(date="Mar 26 2025", time_of_day="11:00 AM", channel="Pickup",
                    payment_method="Cash", total=11.0),
    ]

    summary = summarize(records, TimeWindow(9, 0, 11, 0))

    assert summary.total_orders == 2
    assert summary.cash_sales_in_store == pytest.approx(16.0)


def test_calendar_date_is_ignored(order_rows):
    """Orders from every day of the report count when their clock time fits."""
    frame = filter_by_time_of_day(_records_from_rows(order_rows), TimeWindow(10, 0, 11, 0))

    assert sorted(frame["order_number"]) == ["1001", "1002", "1004", "1006"]
    assert frame["order_date"].nunique() == 2


def test_report_rows_summary(order_rows):
    summary = summarize(_records_from_rows(order_rows), TimeWindow(10, 0, 11, 0)).rounded()

    assert summary.cash_sales_in_store == 10.00
    assert summary.cash_sales_delivery == 0.00
    assert summary.credit_card_tips_in_store == 4.50
    assert summary.credit_card_tips_delivery == 3.00
    assert summary.total_orders == 4
    assert summary.average_order_value == 18.00


def test_other_channel_counts_toward_orders_only():
    records = [
        OrderRecord(date="Mar 26 2025", time_of_day="10:00 AM", channel="Dine In",
                    payment_method="Cash", total=40.0, tip=5.0),
        OrderRecord(date="Mar 26 2025", time_of_day="10:05 AM", channel="Delivery",
                    payment_method="Gift Card", total=20.0, tip=2.0),
    ]

    summary = summarize(records, TimeWindow(10, 0, 11, 0))

    assert summary.total_orders == 2
    assert summary.average_order_value == pytest.approx(30.0)
    assert summary.cash_sales_in_store == 0.0
    assert summary.cash_sales_delivery == 0.0
    assert summary.credit_card_tips_in_store == 0.0
    assert summary.credit_card_tips_delivery == 0.0


def test_average_times_count_matches_total_and_buckets_never_exceed_it(order_rows):
    frame = filter_by_time_of_day(_records_from_rows(order_rows), TimeWindow(0, 0, 23, 59))
    summary = build_summary(frame)

    grand_total = frame["total"].sum()
    assert summary.total_orders == 6
    assert summary.average_order_value * summary.total_orders == pytest.approx(grand_total)
    assert summary.cash_sales_in_store + summary.cash_sales_delivery <= grand_total


def test_rounding_happens_once_after_summing():
    records = [
        OrderRecord(date="Mar 26 2025", time_of_day="10:00 AM", channel="Pickup",
                    payment_method="Cash", total=1.004, order_number=str(i))
        for i in range(3)
    ] + [
        OrderRecord(date="Mar 26 2025", time_of_day="10:00 AM", channel="Delivery",
                    payment_method="Visa", total=0.0, tip=0.004, order_number=str(i))
        for i in range(3, 6)
    ]

    summary = summarize(records, TimeWindow(9, 0, 11, 0)).rounded()

    assert summary.cash_sales_in_store == 3.01
    assert summary.credit_card_tips_delivery == 0.01


def test_non_numeric_amounts_count_as_zero():
    records = [
        OrderRecord(date="Mar 26 2025", time_of_day="10:00 AM", channel="Pickup",
                    payment_method="Cash", total="n/a", tip=None),
        OrderRecord(date="Mar 26 2025", time_of_day="10:01 AM", channel="Pickup",
                    payment_method="Cash", total="$12.00"),
    ]

    summary = summarize(records, TimeWindow(10, 0, 10, 30))

    assert summary.total_orders == 2
    assert summary.cash_sales_in_store == pytest.approx(12.0)
    assert summary.average_order_value == pytest.approx(6.0)


def test_frame_shape_and_classification(scenario_records):
    frame = filter_by_time_of_day(scenario_records, TimeWindow(9, 0, 11, 0))

    assert list(frame.columns) == FRAME_COLUMNS
    assert list(frame["channel"]) == [Channel.IN_STORE, Channel.DELIVERY]
    assert list(frame["payment_kind"]) == [PaymentKind.CASH, PaymentKind.CREDIT_CARD]
    assert list(frame["hour"]) == [10, 10]


def test_empty_input_gives_empty_frame_and_zero_summary():
    frame = filter_by_time_of_day([], TimeWindow(9, 0, 11, 0))

    assert frame.empty
    assert list(frame.columns) == FRAME_COLUMNS
    assert build_summary(frame) == Summary()
