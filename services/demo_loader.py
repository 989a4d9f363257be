from __future__ import annotations

from datetime import date, timedelta

SAMPLE_BILLS = [
    {"id": "sample-rent", "name": "Rent", "offset_days": 2, "amount": 1500},
    {"id": "sample-utilities", "name": "Utilities", "offset_days": 10, "amount": 200},
    {"id": "sample-internet", "name": "Internet", "offset_days": 20, "amount": 80},
]

SAMPLE_PAYCHECKS = [
    {"id": "sample-paycheck-1", "name": "Salary", "offset_days": 1, "amount": 2100},
    {"id": "sample-paycheck-2", "name": "Salary", "offset_days": 15, "amount": 2050},
]


def _record(item: dict, tx_type: str, today: date, schedule: dict) -> dict:
    return {
        "id": item["id"],
        "name": item["name"],
        "amount": item["amount"],
        "date": (today + timedelta(days=item["offset_days"])).isoformat(),
        "type": tx_type,
        "recurring": True,
        "schedule": schedule,
    }


def sample_inputs(today: date | None = None) -> dict:
    """Payload in the engine's boundary shape: three monthly bills and a biweekly salary."""
    today = today or date.today()
    transactions = [_record(b, "bill", today, {"frequency": "monthly", "interval": 1}) for b in SAMPLE_BILLS]
    transactions += [_record(p, "paycheck", today, {"frequency": "weekly", "interval": 2}) for p in SAMPLE_PAYCHECKS]
    return {
        "transactions": transactions,
        "startingBalance": 1000,
        "config": {"monthsToProject": 12, "payPeriodDays": 14, "averagePaycheckAmount": 2050},
    }
