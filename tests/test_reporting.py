from datetime import date, timedelta

import pytest

from schemas.domain import ProjectionResult, ScheduleConfig
from services.projection import compute_projection
from services.reporting import projection_to_frame, rollup_projection, summarize_outlook, upcoming_events


@pytest.fixture()
def result(make_tx, today):
    txs = [
        make_tx("Rent", 1500, date(2026, 3, 1), "bill", recurring=True),
        make_tx("Salary", 2100, today + timedelta(days=1), "paycheck", recurring=True, schedule={"frequency": "weekly", "interval": 2}),
    ]
    return compute_projection(txs, 1000.0, ScheduleConfig(months_to_project=1), today=today)


def test_projection_to_frame_has_one_row_per_day(result):
    df = projection_to_frame(result)
    assert len(df) == len(result.periods)
    assert df.iloc[-1]["ending_balance"] == result.final_balance
    assert df["transaction_count"].sum() == sum(len(p.transactions) for p in result.periods)


def test_monthly_rollup_preserves_totals(result):
    daily = projection_to_frame(result)
    monthly = rollup_projection(result, freq="month")

    assert list(monthly["period_start"]) == [date(2025, 12, 10), date(2026, 1, 1), date(2026, 2, 1), date(2026, 3, 1), date(2026, 4, 1)]
    assert monthly["total_income"].sum() == pytest.approx(daily["total_income"].sum())
    assert monthly.iloc[-1]["ending_balance"] == result.final_balance
    assert monthly.iloc[-1]["min_safe_to_spend"] >= 0


def test_pay_period_rollup_uses_fixed_buckets(result):
    periods = rollup_projection(result, freq="pay_period", pay_period_days=14)
    days = len(result.periods)
    assert len(periods) == -(-days // 14)
    assert (periods.iloc[1]["period_start"] - periods.iloc[0]["period_start"]).days == 14


def test_rollup_rejects_unknown_frequency(result):
    with pytest.raises(ValueError):
        rollup_projection(result, freq="fortnight")


def test_rollup_of_empty_projection():
    assert rollup_projection(ProjectionResult(periods=[], final_balance=0.0)).empty


def test_upcoming_events_flags_synthetic_occurrences(result, today):
    events = upcoming_events(result, days=30)
    assert list(events["date"]) == sorted(events["date"])
    assert events["date"].min() >= today

    salary = events[events["name"] == "Salary"]
    assert list(salary["synthetic"]) == [False, True, True]
    assert events[events["name"] == "Rent"]["synthetic"].all()


def test_outlook_summarizes_first_weeks(result):
    outlook = summarize_outlook(result)
    assert outlook.safe_to_spend_today == 800.0
    assert outlook.safe_to_save_today == 200.0
    assert outlook.expected_min_balance_14d == 1000.0
    assert outlook.expected_min_balance_30d == 1000.0
    assert outlook.first_shortfall_date is None


def test_outlook_reports_first_shortfall(make_tx, today):
    txs = [make_tx("Car repair", 500, today + timedelta(days=2), "expense")]
    outlook = summarize_outlook(compute_projection(txs, 100.0, ScheduleConfig(months_to_project=1), today=today))
    assert outlook.first_shortfall_date == today + timedelta(days=2)
    assert outlook.expected_min_balance_14d == -400.0
    assert outlook.safe_to_spend_today == 0.0


def test_upcoming_events_do_not_guess_synthetic_from_ids(make_tx, today):
    bonus = make_tx("Bonus", 500, today + timedelta(days=3), "income", tx_id="bonus-recurring-2")
    result = compute_projection([bonus], 100.0, ScheduleConfig(months_to_project=1), today=today)

    events = upcoming_events(result, days=30)
    assert list(events["name"]) == ["Bonus"]
    assert not events["synthetic"].any()
