from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta

import pandas as pd

from schemas.domain import ProjectionResult

DAILY_COLUMNS = [
    "date",
    "starting_balance",
    "total_income",
    "total_expenses",
    "ending_balance",
    "safe_to_spend",
    "safe_to_save",
    "days_until_next_income",
    "is_historical",
    "transaction_count",
]

ROLLUP_COLUMNS = [
    "period_start",
    "period_end",
    "starting_balance",
    "total_income",
    "total_expenses",
    "ending_balance",
    "min_ending_balance",
    "min_safe_to_spend",
]


def projection_to_frame(result: ProjectionResult) -> pd.DataFrame:
    rows = [
        {
            "date": p.date,
            "starting_balance": p.starting_balance,
            "total_income": p.total_income,
            "total_expenses": p.total_expenses,
            "ending_balance": p.ending_balance,
            "safe_to_spend": p.safe_to_spend,
            "safe_to_save": p.safe_to_save,
            "days_until_next_income": p.days_until_next_income,
            "is_historical": p.is_historical,
            "transaction_count": len(p.transactions),
        }
        for p in result.periods
    ]
    return pd.DataFrame(rows, columns=DAILY_COLUMNS)


def _bucket_labels(df: pd.DataFrame, freq: str, pay_period_days: int) -> pd.Series:
    if freq == "month":
        return pd.to_datetime(df["date"]).dt.to_period("M").dt.start_time.dt.date
    if freq == "pay_period":
        origin = df["date"].iloc[0]
        offsets = df["date"].map(lambda d: (d - origin).days // pay_period_days)
        return offsets.map(lambda n: origin + timedelta(days=int(n) * pay_period_days))
    raise ValueError(f"Unknown rollup frequency: {freq}")


def rollup_projection(result: ProjectionResult, freq: str = "month", pay_period_days: int = 14) -> pd.DataFrame:
    """Aggregate daily periods into calendar months or fixed-length pay periods."""
    df = projection_to_frame(result)
    if df.empty:
        return pd.DataFrame(columns=ROLLUP_COLUMNS)

    df["bucket"] = _bucket_labels(df, freq, max(1, int(pay_period_days)))
    df["projected_safe_to_spend"] = df["safe_to_spend"].where(~df["is_historical"])

    grouped = df.groupby("bucket", sort=True)
    out = pd.DataFrame(
        {
            "period_start": grouped["date"].min(),
            "period_end": grouped["date"].max(),
            "starting_balance": grouped["starting_balance"].first(),
            "total_income": grouped["total_income"].sum(),
            "total_expenses": grouped["total_expenses"].sum(),
            "ending_balance": grouped["ending_balance"].last(),
            "min_ending_balance": grouped["ending_balance"].min(),
            "min_safe_to_spend": grouped["projected_safe_to_spend"].min(),
        }
    )
    return out.reset_index(drop=True)


def upcoming_events(result: ProjectionResult, days: int = 30) -> pd.DataFrame:
    future = [p for p in result.periods if not p.is_historical]
    if not future:
        return pd.DataFrame(columns=["date", "name", "type", "amount", "synthetic"])

    cutoff = future[0].date + timedelta(days=days)
    rows = [
        {
            "date": p.date,
            "name": tx.name,
            "type": tx.type,
            "amount": tx.amount,
            "synthetic": tx.synthetic,
        }
        for p in future
        if p.date <= cutoff
        for tx in p.transactions
    ]
    df = pd.DataFrame(rows, columns=["date", "name", "type", "amount", "synthetic"])
    return df.sort_values("date", kind="stable").reset_index(drop=True)


@dataclass
class ProjectionOutlook:
    safe_to_spend_today: float
    safe_to_save_today: float
    expected_min_balance_14d: float
    expected_min_balance_30d: float
    first_shortfall_date: date | None


def summarize_outlook(result: ProjectionResult) -> ProjectionOutlook:
    """Headline numbers for the first 14 and 30 projected days, starting today."""
    df = projection_to_frame(result)
    future = df[~df["is_historical"].astype(bool)]
    f14 = future.head(14)
    f30 = future.head(30)

    negative = future[future["ending_balance"] < 0]
    return ProjectionOutlook(
        safe_to_spend_today=round(float(future.iloc[0]["safe_to_spend"]), 2) if not future.empty else 0.0,
        safe_to_save_today=round(float(future.iloc[0]["safe_to_save"]), 2) if not future.empty else 0.0,
        expected_min_balance_14d=round(float(f14["ending_balance"].min()), 2) if not f14.empty else 0.0,
        expected_min_balance_30d=round(float(f30["ending_balance"].min()), 2) if not f30.empty else 0.0,
        first_shortfall_date=negative.iloc[0]["date"] if not negative.empty else None,
    )
