from datetime import date, timedelta

import pytest

from services.ledger import (
    DayClass,
    build_daily_ledger,
    classify_day,
    daily_totals,
    index_by_date,
    projection_window,
    resolve_day_balance,
)


def test_classify_day(today):
    assert classify_day(today - timedelta(days=1), today) is DayClass.HISTORICAL
    assert classify_day(today, today) is DayClass.TODAY
    assert classify_day(today + timedelta(days=1), today) is DayClass.FUTURE


@pytest.mark.parametrize(
    "day_class, expected",
    [
        (DayClass.HISTORICAL, (500.0, 650.0)),
        (DayClass.TODAY, (1000.0, 1000.0)),
        (DayClass.FUTURE, (500.0, 650.0)),
    ],
)
def test_resolve_day_balance(day_class, expected):
    assert resolve_day_balance(day_class, previous_ending=500.0, starting_balance=1000.0, income=200.0, expenses=50.0) == expected


def test_today_balance_ignores_todays_activity_in_both_directions():
    assert resolve_day_balance(DayClass.TODAY, 0.0, 1000.0, income=5000.0, expenses=0.0) == (1000.0, 1000.0)
    assert resolve_day_balance(DayClass.TODAY, 0.0, 1000.0, income=0.0, expenses=5000.0) == (1000.0, 1000.0)
    assert resolve_day_balance(DayClass.TODAY, -250.0, -40.0, income=0.0, expenses=0.0) == (-40.0, -40.0)


def test_projection_window_defaults_to_three_months_back(today):
    assert projection_window([], today, months_to_project=1) == (date(2025, 12, 10), date(2026, 4, 10))


def test_projection_window_extends_to_earliest_transaction(make_tx, today):
    old = make_tx("Rent", 1500, date(2025, 8, 1))
    assert projection_window([old], today, months_to_project=0) == (date(2025, 8, 1), today)


def test_projection_window_with_negative_horizon(today):
    start, end = projection_window([], today, months_to_project=-1)
    assert end == date(2026, 2, 10)
    assert start < end


def test_daily_totals_bucket_by_type_and_transfer_sign(make_tx, today):
    txs = [
        make_tx("Salary", 2000, today, "paycheck"),
        make_tx("Refund", -30, today, "income"),
        make_tx("Rent", -1500, today, "bill"),
        make_tx("Groceries", 90, today, "expense"),
        make_tx("From savings", 300, today, "internal_transfer"),
        make_tx("To savings", -125, today, "internal_transfer"),
        make_tx("Unknown", 999, today, "other"),
    ]
    assert daily_totals(txs) == (2330.0, 1715.0)


def test_index_by_date_groups_transactions(make_tx, today):
    a = make_tx("A", 1, today)
    b = make_tx("B", 2, today)
    c = make_tx("C", 3, today + timedelta(days=1))
    by_date = index_by_date([a, b, c])
    assert by_date[today] == [a, b]
    assert by_date[today + timedelta(days=1)] == [c]


def test_ledger_is_gap_free_and_ordered(make_tx, today):
    start, end = today - timedelta(days=10), today + timedelta(days=20)
    periods, _ = build_daily_ledger([make_tx("Rent", 100, today + timedelta(days=3))], 1000.0, today, start, end)

    assert len(periods) == (end - start).days + 1
    assert [p.date for p in periods] == [start + timedelta(days=i) for i in range(len(periods))]


def test_ledger_balance_rules_by_day_class(make_tx, today):
    txs = [
        make_tx("Coffee", 50, today - timedelta(days=2), "expense"),
        make_tx("Groceries", 300, today, "expense"),
        make_tx("Salary", 2000, today + timedelta(days=1), "paycheck"),
        make_tx("Rent", 1500, today + timedelta(days=2), "bill"),
    ]
    periods, final = build_daily_ledger(txs, 1000.0, today, today - timedelta(days=3), today + timedelta(days=3))
    by_date = {p.date: p for p in periods}

    assert by_date[today - timedelta(days=2)].ending_balance == 950.0
    assert by_date[today - timedelta(days=2)].is_historical

    current = by_date[today]
    assert current.starting_balance == current.ending_balance == 1000.0
    assert current.total_expenses == 300.0
    assert not current.is_historical

    assert by_date[today + timedelta(days=1)].starting_balance == 1000.0
    assert by_date[today + timedelta(days=1)].ending_balance == 3000.0
    assert by_date[today + timedelta(days=2)].ending_balance == 1500.0
    assert final == 1500.0


def test_historical_days_report_no_safe_amounts(make_tx, today):
    periods, _ = build_daily_ledger([make_tx("Salary", 2000, today - timedelta(days=1), "paycheck")], 5000.0, today, today - timedelta(days=5), today)
    historical = [p for p in periods if p.is_historical]
    assert len(historical) == 5
    assert all(p.safe_to_spend == 0 and p.safe_to_save == 0 for p in historical)
    assert periods[-1].safe_to_spend == pytest.approx(4000.0)


def test_empty_window_returns_starting_balance(today):
    periods, final = build_daily_ledger([], 750.0, today, today, today - timedelta(days=1))
    assert periods == []
    assert final == 750.0
