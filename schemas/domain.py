from __future__ import annotations

import math
from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

TransactionType = Literal["bill", "paycheck", "internal_transfer", "income", "expense", "other"]
Frequency = Literal["daily", "weekly", "monthly", "yearly"]
RecurrenceMode = Literal["explicit", "inferred"]

INCOME_TYPES = ("paycheck", "income")
EXPENSE_TYPES = ("bill", "expense")
TRANSFER_TYPE = "internal_transfer"


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


def _require_finite(value: float, label: str) -> float:
    if not math.isfinite(value):
        raise ValueError(f"{label} must be a finite number")
    return value


class RecurringSchedule(_CamelModel):
    frequency: Frequency = "monthly"
    interval: int = Field(default=1, ge=1)


class Transaction(_CamelModel):
    id: str
    name: str
    amount: float
    date: date
    type: TransactionType
    recurring: bool = False
    schedule: RecurringSchedule | None = None
    # Set on occurrences generated from a recurring group, never on posted ones.
    synthetic: bool = False

    @field_validator("date", mode="before")
    @classmethod
    def _truncate_to_calendar_date(cls, value):
        # ISO timestamps ("2026-01-02T00:00:00.000Z") count on their calendar date.
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, str) and len(value.strip()) > 10:
            return datetime.fromisoformat(value.strip().replace("Z", "+00:00")).date()
        return value

    @field_validator("amount")
    @classmethod
    def _finite_amount(cls, value: float) -> float:
        return _require_finite(value, "amount")

    @property
    def income_amount(self) -> float:
        if self.type in INCOME_TYPES:
            return abs(self.amount)
        if self.type == TRANSFER_TYPE and self.amount > 0:
            return self.amount
        return 0.0

    @property
    def expense_amount(self) -> float:
        if self.type in EXPENSE_TYPES:
            return abs(self.amount)
        if self.type == TRANSFER_TYPE and self.amount < 0:
            return -self.amount
        return 0.0


class ScheduleConfig(_CamelModel):
    months_to_project: int = 12
    pay_period_days: int = 14
    average_paycheck_amount: float = 2000.0
    safety_cushion_days: int = 3
    recurrence_mode: RecurrenceMode = "explicit"


class OpeningBalance(_CamelModel):
    starting_balance: float = 0.0

    @field_validator("starting_balance")
    @classmethod
    def _finite_balance(cls, value: float) -> float:
        return _require_finite(value, "starting balance")


class DailyProjection(_CamelModel):
    date: date
    starting_balance: float
    transactions: list[Transaction] = Field(default_factory=list)
    total_income: float = 0.0
    total_expenses: float = 0.0
    ending_balance: float
    safe_to_spend: float = 0.0
    safe_to_save: float = 0.0
    days_until_next_income: int = 0
    is_historical: bool = False


class ProjectionResult(_CamelModel):
    periods: list[DailyProjection] = Field(default_factory=list)
    final_balance: float
