from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Mapping, Sequence

from schemas.domain import Transaction
from services.projection_settings import DEFAULT_POLICY, SafeSpendPolicy


@dataclass(frozen=True)
class SafeSpendEstimate:
    safe_to_spend: float
    safe_to_save: float
    days_until_next_income: int
    upcoming_expenses: float


HISTORICAL_ESTIMATE = SafeSpendEstimate(safe_to_spend=0.0, safe_to_save=0.0, days_until_next_income=0, upcoming_expenses=0.0)


def scan_until_next_income(
    day: date,
    transactions_by_date: Mapping[date, Sequence[Transaction]],
    lookahead_days: int = 30,
) -> tuple[int, float]:
    """Return ``(days_until_next_income, expenses_before_it)`` looking ahead from ``day``.

    The scan covers offsets ``1..lookahead_days``. When no income lands in
    that window the offset is the cap and every scanned expense counts.
    """
    upcoming_expenses = 0.0
    for offset in range(1, lookahead_days + 1):
        day_txs = transactions_by_date.get(day + timedelta(days=offset), ())
        if any(t.income_amount > 0 for t in day_txs):
            return offset, upcoming_expenses
        upcoming_expenses += sum(t.expense_amount for t in day_txs)
    return lookahead_days, upcoming_expenses


def estimate_safe_spend(
    day: date,
    ending_balance: float,
    transactions_by_date: Mapping[date, Sequence[Transaction]],
    policy: SafeSpendPolicy = DEFAULT_POLICY,
) -> SafeSpendEstimate:
    days_until_next_income, upcoming_expenses = scan_until_next_income(
        day, transactions_by_date, lookahead_days=policy.lookahead_days
    )
    safe_balance = ending_balance - upcoming_expenses
    return SafeSpendEstimate(
        safe_to_spend=max(0.0, safe_balance * policy.spend_ratio),
        safe_to_save=max(0.0, safe_balance * policy.save_ratio),
        days_until_next_income=days_until_next_income,
        upcoming_expenses=upcoming_expenses,
    )
