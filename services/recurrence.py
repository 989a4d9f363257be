from __future__ import annotations

import calendar
from collections import Counter
from dataclasses import dataclass
from datetime import date, timedelta
from statistics import mean
from typing import Iterable

from schemas.domain import RecurrenceMode, RecurringSchedule, Transaction
from services.logging_setup import get_logger
from services.projection_settings import DEFAULT_POLICY, SafeSpendPolicy

logger = get_logger(__name__)

BIWEEKLY_RANGE_DAYS = (10, 18)
MONTHLY_RANGE_DAYS = (25, 35)
PAY_PERIOD_MAX_DAYS = 35
MIN_POINTS = {"explicit": 1, "inferred": 2}
SYNTHETIC_ID_MARKER = "-recurring-"


def add_months(anchor: date, months: int, anchor_day: int | None = None) -> date:
    """Move ``anchor`` by whole months, clamping to the last day of the target month."""
    day = anchor_day or anchor.day
    month_index = anchor.month - 1 + months
    year = anchor.year + month_index // 12
    month = month_index % 12 + 1
    return date(year, month, min(day, calendar.monthrange(year, month)[1]))


def shift_weekend(d: date) -> date:
    if d.weekday() == 5:
        return d + timedelta(days=2)
    if d.weekday() == 6:
        return d + timedelta(days=1)
    return d


@dataclass(frozen=True)
class Cadence:
    unit: str  # "days" or "months"
    length: int

    def nth(self, anchor: date, n: int) -> date:
        if self.unit == "days":
            return anchor + timedelta(days=self.length * n)
        # Always clamp from the anchor's own day so 31 -> Feb 28 -> Mar 31.
        return shift_weekend(add_months(anchor, self.length * n, anchor_day=anchor.day))

    def first_step_on_or_after(self, anchor: date, today: date) -> int:
        if self.length <= 0 or anchor >= today:
            return 1
        if self.unit == "days":
            return max(1, -(-(today - anchor).days // self.length))
        months_between = (today.year - anchor.year) * 12 + today.month - anchor.month
        # A weekend shift can push the previous step onto or past today.
        return max(1, months_between // self.length - 1)


def cadence_from_schedule(schedule: RecurringSchedule | None) -> Cadence:
    if schedule is None:
        return Cadence("months", 1)
    if schedule.frequency == "daily":
        return Cadence("days", schedule.interval)
    if schedule.frequency == "weekly":
        return Cadence("days", 7 * schedule.interval)
    if schedule.frequency == "yearly":
        return Cadence("months", 12 * schedule.interval)
    return Cadence("months", schedule.interval)


def infer_cadence(history: Iterable[Transaction], max_interval_days: int = 90) -> Cadence | None:
    ordered = sorted(history, key=lambda t: t.date)
    deltas = [(later.date - earlier.date).days for earlier, later in zip(ordered, ordered[1:])]
    usable = [d for d in deltas if 0 < d <= max_interval_days]
    if not usable:
        return None

    period = mean(usable)
    if BIWEEKLY_RANGE_DAYS[0] <= period <= BIWEEKLY_RANGE_DAYS[1]:
        return Cadence("days", round(period))
    if MONTHLY_RANGE_DAYS[0] <= period <= MONTHLY_RANGE_DAYS[1]:
        return Cadence("months", 1)
    return None


def group_key(tx: Transaction) -> tuple[str, str]:
    return tx.name.lower(), tx.type


def group_transactions(transactions: Iterable[Transaction]) -> dict[tuple[str, str], list[Transaction]]:
    groups: dict[tuple[str, str], list[Transaction]] = {}
    for tx in transactions:
        groups.setdefault(group_key(tx), []).append(tx)
    return groups


def project_occurrences(
    anchor: Transaction,
    cadence: Cadence,
    horizon_end: date,
    today: date,
    max_instances: int = 50,
) -> list[Transaction]:
    """Synthesize occurrences after ``anchor`` that land in ``[today, horizon_end]``.

    At most ``max_instances`` steps are taken, which also bounds zero or
    negative cadences.
    """
    occurrences = []
    step = cadence.first_step_on_or_after(anchor.date, today)
    for _ in range(max_instances):
        occurs_on = cadence.nth(anchor.date, step)
        ordinal = step
        step += 1
        if occurs_on > horizon_end:
            break
        if occurs_on < today:
            continue
        update = {
            "id": f"{anchor.id}{SYNTHETIC_ID_MARKER}{ordinal}",
            "date": occurs_on,
            "recurring": True,
            "synthetic": True,
        }
        occurrences.append(anchor.model_copy(update=update))
    return occurrences


def synthesize_occurrences(
    transactions: Iterable[Transaction],
    horizon_end: date,
    today: date,
    mode: RecurrenceMode = "explicit",
    policy: SafeSpendPolicy = DEFAULT_POLICY,
) -> list[Transaction]:
    """Expand recurring groups into synthetic future transactions.

    ``explicit`` mode follows the ``recurring`` flag and ``schedule`` hint of
    the latest transaction in each group. ``inferred`` mode estimates a period
    from the spacing of every group's history. Inputs are never modified.
    """
    candidates = [t for t in transactions if t.recurring] if mode == "explicit" else list(transactions)
    synthetic: list[Transaction] = []

    for key, members in group_transactions(candidates).items():
        if len(members) < MIN_POINTS[mode]:
            logger.debug("Skipping %s: %d point(s) below %s minimum", key, len(members), mode)
            continue

        anchor = max(members, key=lambda t: (t.date, t.id))
        if mode == "explicit":
            cadence = cadence_from_schedule(anchor.schedule)
        else:
            cadence = infer_cadence(members, max_interval_days=policy.max_interval_days)
        if cadence is None:
            logger.debug("Skipping %s: no recognizable cadence", key)
            continue

        occurrences = project_occurrences(
            anchor,
            cadence,
            horizon_end=horizon_end,
            today=today,
            max_instances=policy.max_instances_per_group,
        )
        logger.debug("Group %s: %d synthetic occurrence(s) every %d %s", key, len(occurrences), cadence.length, cadence.unit)
        synthetic.extend(occurrences)

    return synthetic


def detect_pay_period_days(transactions: Iterable[Transaction], default: int = 14) -> int:
    """Most common spacing between consecutive paychecks, or ``default`` without usable history."""
    paychecks = sorted((t for t in transactions if t.type == "paycheck"), key=lambda t: t.date)
    if len(paychecks) < 2:
        return default

    deltas = [(later.date - earlier.date).days for earlier, later in zip(paychecks, paychecks[1:])]
    counts = Counter(d for d in deltas if 0 < d <= PAY_PERIOD_MAX_DAYS)
    if not counts:
        return default
    return max(counts, key=lambda days: (counts[days], days))
