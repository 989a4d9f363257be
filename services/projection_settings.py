from __future__ import annotations

import os

from pydantic import BaseModel, ConfigDict

from schemas.domain import ScheduleConfig

RECURRENCE_MODES = ("explicit", "inferred")

DEFAULT_SCHEDULE_CONFIG = ScheduleConfig(
    months_to_project=12,
    pay_period_days=14,
    average_paycheck_amount=2000.0,
    safety_cushion_days=3,
    recurrence_mode="explicit",
)


class SafeSpendPolicy(BaseModel):
    model_config = ConfigDict(frozen=True)

    spend_ratio: float = 0.8
    lookahead_days: int = 30
    history_months: int = 3
    max_instances_per_group: int = 50
    max_interval_days: int = 90

    @property
    def save_ratio(self) -> float:
        return round(1.0 - self.spend_ratio, 10)


DEFAULT_POLICY = SafeSpendPolicy()


def build_policy(
    spend_ratio: float | None = None,
    lookahead_days: int | None = None,
    history_months: int | None = None,
) -> SafeSpendPolicy:
    values = {}
    if spend_ratio is not None:
        values["spend_ratio"] = min(1.0, max(0.0, float(spend_ratio)))
    if lookahead_days is not None:
        values["lookahead_days"] = max(1, int(lookahead_days))
    if history_months is not None:
        values["history_months"] = max(0, int(history_months))
    return SafeSpendPolicy(**values)


def _env_number(name: str, cast):
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return None
    try:
        return cast(raw.strip())
    except ValueError:
        return None


def load_policy() -> SafeSpendPolicy:
    """Build the policy from ``CASHFLOW_*`` environment overrides, ignoring unparsable values."""
    return build_policy(
        spend_ratio=_env_number("CASHFLOW_SPEND_RATIO", float),
        lookahead_days=_env_number("CASHFLOW_LOOKAHEAD_DAYS", int),
        history_months=_env_number("CASHFLOW_HISTORY_MONTHS", int),
    )
