from __future__ import annotations

from datetime import date, timedelta
from enum import Enum
from typing import Iterable, Sequence

from schemas.domain import DailyProjection, Transaction
from services.projection_settings import DEFAULT_POLICY, SafeSpendPolicy
from services.recurrence import add_months
from services.safe_spend import HISTORICAL_ESTIMATE, estimate_safe_spend


class DayClass(str, Enum):
    HISTORICAL = "historical"
    TODAY = "today"
    FUTURE = "future"


def classify_day(day: date, today: date) -> DayClass:
    if day < today:
        return DayClass.HISTORICAL
    if day == today:
        return DayClass.TODAY
    return DayClass.FUTURE


def resolve_day_balance(
    day_class: DayClass,
    previous_ending: float,
    starting_balance: float,
    income: float,
    expenses: float,
) -> tuple[float, float]:
    """Return ``(starting, ending)`` balance for one day of the walk.

    TODAY is pinned to the supplied starting balance: it comes from a live
    account balance that already includes today's postings, so today's
    transactions are reported but never applied. HISTORICAL and FUTURE days
    apply income and expenses to the previous day's ending balance.
    """
    if day_class is DayClass.TODAY:
        return starting_balance, starting_balance
    return previous_ending, previous_ending + income - expenses


def projection_window(
    transactions: Iterable[Transaction],
    today: date,
    months_to_project: int,
    history_months: int = 3,
) -> tuple[date, date]:
    window_start = add_months(today, -history_months)
    earliest = min((t.date for t in transactions), default=None)
    if earliest is not None and earliest < window_start:
        window_start = earliest
    return window_start, add_months(today, months_to_project)


def index_by_date(transactions: Iterable[Transaction]) -> dict[date, list[Transaction]]:
    by_date: dict[date, list[Transaction]] = {}
    for tx in transactions:
        by_date.setdefault(tx.date, []).append(tx)
    return by_date


def daily_totals(day_transactions: Sequence[Transaction]) -> tuple[float, float]:
    income = sum(t.income_amount for t in day_transactions)
    expenses = sum(t.expense_amount for t in day_transactions)
    return float(income), float(expenses)


def build_daily_ledger(
    transactions: Iterable[Transaction],
    starting_balance: float,
    today: date,
    window_start: date,
    horizon_end: date,
    policy: SafeSpendPolicy = DEFAULT_POLICY,
) -> tuple[list[DailyProjection], float]:
    """Walk every day of ``[window_start, horizon_end]`` and return ``(periods, final_balance)``."""
    by_date = index_by_date(transactions)
    periods: list[DailyProjection] = []
    running = float(starting_balance)

    day = window_start
    while day <= horizon_end:
        day_class = classify_day(day, today)
        day_txs = by_date.get(day, [])
        income, expenses = daily_totals(day_txs)
        start_balance, running = resolve_day_balance(day_class, running, starting_balance, income, expenses)

        if day_class is DayClass.HISTORICAL:
            estimate = HISTORICAL_ESTIMATE
        else:
            estimate = estimate_safe_spend(day, running, by_date, policy)

        periods.append(
            DailyProjection(
                date=day,
                starting_balance=start_balance,
                transactions=list(day_txs),
                total_income=income,
                total_expenses=expenses,
                ending_balance=running,
                safe_to_spend=estimate.safe_to_spend,
                safe_to_save=estimate.safe_to_save,
                days_until_next_income=estimate.days_until_next_income,
                is_historical=day_class is DayClass.HISTORICAL,
            )
        )
        day += timedelta(days=1)

    final_balance = periods[-1].ending_balance if periods else float(starting_balance)
    return periods, final_balance
