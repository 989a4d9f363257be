from __future__ import annotations

import itertools
import re
from datetime import date
from typing import Any, Iterable, Mapping

from pydantic import ValidationError

from schemas.domain import OpeningBalance, ScheduleConfig, Transaction
from services.errors import ConfigValidationError, PayloadValidationError, TransactionValidationError
from services.projection_settings import DEFAULT_SCHEDULE_CONFIG

LEGACY_TYPED_LISTS = {"bills": "bill", "paychecks": "paycheck"}


def parse_transactions(records: Iterable[Mapping[str, Any] | Transaction]) -> list[Transaction]:
    """Validate raw records into immutable transactions, failing on the first bad one."""
    parsed: list[Transaction] = []
    seen_ids: set[str] = set()
    for index, record in enumerate(records):
        if isinstance(record, Transaction):
            tx = record
        else:
            try:
                tx = Transaction.model_validate(record)
            except ValidationError as exc:
                record_id = record.get("id") if isinstance(record, Mapping) else None
                raise TransactionValidationError(index, exc.errors(include_url=False), record_id=record_id) from exc

        if tx.id in seen_ids:
            raise TransactionValidationError(index, [{"loc": ("id",), "msg": "duplicate transaction id"}], record_id=tx.id)
        seen_ids.add(tx.id)
        parsed.append(tx)
    return parsed


def parse_config(raw: Mapping[str, Any] | ScheduleConfig | None) -> ScheduleConfig:
    if raw is None:
        return DEFAULT_SCHEDULE_CONFIG
    if isinstance(raw, ScheduleConfig):
        return raw
    try:
        return ScheduleConfig.model_validate(raw)
    except ValidationError as exc:
        raise ConfigValidationError(exc.errors(include_url=False)) from exc


def parse_starting_balance(raw: Any) -> float:
    """Validate the payload's starting balance; a missing value means 0."""
    if raw is None:
        return 0.0
    try:
        return OpeningBalance.model_validate({"startingBalance": raw}).starting_balance
    except ValidationError as exc:
        raise PayloadValidationError(exc.errors(include_url=False)) from exc


def migrate_legacy_state(state: Mapping[str, Any]) -> dict[str, Any]:
    """Fold the older ``bills``/``paychecks`` layout into a single ``transactions`` list."""
    migrated = {k: v for k, v in state.items() if k not in LEGACY_TYPED_LISTS}
    if not any(key in state for key in LEGACY_TYPED_LISTS):
        migrated["transactions"] = list(state.get("transactions") or [])
        return migrated

    transactions = []
    for key, tx_type in LEGACY_TYPED_LISTS.items():
        transactions.extend({**item, "type": tx_type} for item in state.get(key) or [])
    migrated["transactions"] = transactions
    return migrated


class ManualIdGenerator:
    """Monotonic ``{prefix}-{n}`` identifiers for manually entered transactions."""

    def __init__(self, prefix: str = "manual", start: int = 1):
        self.prefix = prefix
        self._counter = itertools.count(start)

    def __call__(self) -> str:
        return f"{self.prefix}-{next(self._counter)}"

    @classmethod
    def continuing_from(cls, existing_ids: Iterable[str], prefix: str = "manual") -> "ManualIdGenerator":
        pattern = re.compile(rf"^{re.escape(prefix)}-(\d+)$")
        highest = 0
        for existing in existing_ids:
            match = pattern.match(existing or "")
            if match:
                highest = max(highest, int(match.group(1)))
        return cls(prefix=prefix, start=highest + 1)


def build_manual_transaction(
    next_id: ManualIdGenerator,
    name: str,
    amount: float,
    on: date | str,
    tx_type: str = "bill",
    recurring: bool = False,
    frequency: str = "monthly",
    interval: int = 1,
) -> Transaction:
    record = {
        "id": next_id(),
        "name": (name or "").strip(),
        "amount": abs(float(amount)),
        "date": on,
        "type": tx_type,
        "recurring": recurring,
        "schedule": {"frequency": frequency, "interval": interval} if recurring else None,
    }
    if not record["name"]:
        raise TransactionValidationError(0, [{"loc": ("name",), "msg": "name is required"}], record_id=record["id"])
    return parse_transactions([record])[0]
