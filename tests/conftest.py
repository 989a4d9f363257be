from datetime import date

import pytest

from schemas.domain import Transaction


@pytest.fixture()
def today():
    # A Tuesday, so nearby weekday arithmetic stays predictable.
    return date(2026, 3, 10)


@pytest.fixture()
def make_tx():
    counter = {"n": 0}

    def _make(name, amount, on, tx_type="bill", recurring=False, schedule=None, tx_id=None):
        counter["n"] += 1
        return Transaction(
            id=tx_id or f"t{counter['n']}",
            name=name,
            amount=amount,
            date=on,
            type=tx_type,
            recurring=recurring,
            schedule=schedule,
        )

    return _make
