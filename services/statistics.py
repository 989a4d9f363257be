from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Iterable, Mapping

import pandas as pd

from schemas.domain import EXPENSE_TYPES, INCOME_TYPES, TRANSFER_TYPE, Transaction

BUCKETS = ("income", "bills", "expenses", "transfers")
TOP_N = 5


@dataclass
class TransactionStats:
    totals: dict[str, float]
    monthly_averages: dict[str, float]
    counts: dict[str, int]
    start: date | None
    end: date | None
    months: int
    top_names: dict[str, list[dict]] = field(default_factory=dict)
    avg_transaction_size: float = 0.0
    net_monthly: float = 0.0


def _bucket(tx_type: str, amount: float) -> list[str]:
    buckets = []
    if tx_type in INCOME_TYPES or (tx_type == TRANSFER_TYPE and amount > 0):
        buckets.append("income")
    if tx_type == "bill":
        buckets.append("bills")
    if tx_type == "expense":
        buckets.append("expenses")
    if tx_type == TRANSFER_TYPE:
        buckets.append("transfers")
    return buckets


def _empty_stats() -> TransactionStats:
    return TransactionStats(
        totals={b: 0.0 for b in BUCKETS},
        monthly_averages={b: 0.0 for b in BUCKETS},
        counts={b: 0 for b in BUCKETS},
        start=None,
        end=None,
        months=0,
        top_names={b: [] for b in BUCKETS[:3]},
    )


def summarize_transactions(transactions: Iterable[Transaction]) -> TransactionStats:
    """Totals, monthly averages and top names per bucket.

    Positive transfers count as income and also as transfers; the month span
    is the date range in 30-day blocks, at least one.
    """
    transactions = list(transactions)
    if not transactions:
        return _empty_stats()

    rows = [
        {"name": t.name.lower(), "date": t.date, "amount": abs(t.amount), "bucket": bucket}
        for t in transactions
        for bucket in _bucket(t.type, t.amount)
    ]
    df = pd.DataFrame(rows, columns=["name", "date", "amount", "bucket"])

    start = min(t.date for t in transactions)
    end = max(t.date for t in transactions)
    months = max(1, math.ceil((end - start).days / 30))

    totals = df.groupby("bucket")["amount"].sum().to_dict()
    counts = df.groupby("bucket")["amount"].count().to_dict()
    totals = {b: float(totals.get(b, 0.0)) for b in BUCKETS}
    counts = {b: int(counts.get(b, 0)) for b in BUCKETS}
    monthly_averages = {b: totals[b] / months for b in BUCKETS}

    top_names = {}
    for bucket in BUCKETS[:3]:
        part = df[df["bucket"] == bucket]
        if part.empty:
            top_names[bucket] = []
            continue
        agg = part.groupby("name")["amount"].agg(["count", "sum"]).reset_index()
        agg = agg.sort_values(["sum", "name"], ascending=[False, True]).head(TOP_N)
        top_names[bucket] = [
            {"name": r["name"], "count": int(r["count"]), "total": round(float(r["sum"]), 2), "avg": round(float(r["sum"]) / int(r["count"]), 2)}
            for _, r in agg.iterrows()
        ]

    flow_total = totals["income"] + totals["bills"] + totals["expenses"]
    return TransactionStats(
        totals={b: round(v, 2) for b, v in totals.items()},
        monthly_averages={b: round(v, 2) for b, v in monthly_averages.items()},
        counts=counts,
        start=start,
        end=end,
        months=months,
        top_names=top_names,
        avg_transaction_size=round(flow_total / len(transactions), 2),
        net_monthly=round(monthly_averages["income"] - monthly_averages["bills"] - monthly_averages["expenses"], 2),
    )


# Checked in order; the first category with a keyword in the name wins.
SPENDING_CATEGORIES = {
    "Dining & Restaurants": ("restaurant", "cafe", "bistro", "diner", "food", "pizza", "burger", "taco", "sushi", "bar", "pub", "grill", "kitchen", "eatery", "mcdonald", "subway", "starbucks", "dunkin", "chipotle"),
    "Groceries": ("grocery", "supermarket", "market", "kroger", "safeway", "walmart", "target", "costco", "whole foods", "trader joe", "publix", "aldi", "food lion", "harris teeter"),
    "Gas & Fuel": ("gas", "fuel", "shell", "exxon", "bp", "chevron", "mobil", "texaco", "sunoco", "speedway", "wawa", "circle k"),
    "Shopping & Retail": ("amazon", "ebay", "walmart", "target", "best buy", "home depot", "lowes", "macy", "nordstrom", "tj maxx", "marshalls", "kohls", "old navy", "gap"),
    "Entertainment": ("netflix", "spotify", "hulu", "disney", "amazon prime", "apple music", "youtube", "theater", "cinema", "movie", "concert", "gaming", "steam", "playstation", "xbox"),
    "Transportation": ("uber", "lyft", "taxi", "parking", "toll", "metro", "bus", "train", "airline", "flight", "rental car", "car rental"),
    "Health & Medical": ("pharmacy", "cvs", "walgreens", "rite aid", "hospital", "clinic", "doctor", "dentist", "medical", "health"),
    "Utilities & Services": ("electric", "power", "energy", "water", "gas", "internet", "wifi", "phone", "mobile", "cable", "tv", "insurance"),
    "Travel & Hotels": ("hotel", "motel", "airbnb", "booking", "expedia", "marriott", "hilton", "hyatt", "holiday inn", "travel", "vacation"),
    "Subscriptions": ("subscription", "monthly", "annual", "membership", "gym", "fitness", "club"),
}
UNCATEGORIZED = "Other"
CATEGORY_COLUMNS = ["category", "total_amount", "transaction_count", "average_amount", "monthly_average"]


def categorize(tx: Transaction, overrides: Mapping[str, str] | None = None) -> str:
    """Category for ``tx``: a per-id override, else the first keyword hit in its name."""
    if overrides and overrides.get(tx.id):
        return overrides[tx.id]
    text = tx.name.lower()
    for category, keywords in SPENDING_CATEGORIES.items():
        if any(keyword in text for keyword in keywords):
            return category
    return UNCATEGORIZED


def category_spending(
    transactions: Iterable[Transaction],
    today: date,
    days: int = 90,
    overrides: Mapping[str, str] | None = None,
) -> pd.DataFrame:
    """Spending per category over the ``days`` up to and including ``today``.

    Only bills and expenses count; income and transfers are left out. The
    monthly average divides by ``days / 30``.
    """
    cutoff = today - timedelta(days=days)
    rows = [
        {"category": categorize(t, overrides), "amount": abs(t.amount)}
        for t in transactions
        if t.type in EXPENSE_TYPES and cutoff <= t.date <= today
    ]
    if not rows:
        return pd.DataFrame(columns=CATEGORY_COLUMNS)

    months = max(days, 1) / 30
    df = pd.DataFrame(rows)
    out = df.groupby("category")["amount"].agg(total_amount="sum", transaction_count="count").reset_index()
    out["average_amount"] = (out["total_amount"] / out["transaction_count"]).round(2)
    out["monthly_average"] = (out["total_amount"] / months).round(2)
    out["total_amount"] = out["total_amount"].round(2)
    out = out.sort_values(["total_amount", "category"], ascending=[False, True])
    return out[CATEGORY_COLUMNS].reset_index(drop=True)
