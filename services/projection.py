from __future__ import annotations

from datetime import date
from typing import Any, Iterable, Mapping

from schemas.domain import ProjectionResult, ScheduleConfig, Transaction
from services.ingestion import migrate_legacy_state, parse_config, parse_starting_balance, parse_transactions
from services.ledger import build_daily_ledger, projection_window
from services.logging_setup import get_logger
from services.projection_settings import DEFAULT_POLICY, DEFAULT_SCHEDULE_CONFIG, SafeSpendPolicy
from services.recurrence import synthesize_occurrences

logger = get_logger(__name__)


def compute_projection(
    transactions: Iterable[Transaction],
    starting_balance: float,
    config: ScheduleConfig | None = None,
    *,
    today: date | None = None,
    policy: SafeSpendPolicy | None = None,
) -> ProjectionResult:
    """Project a day-by-day balance from validated transactions.

    Recurring groups are expanded first, then every day from the history
    window start through ``today + months_to_project`` is walked. Synthetic
    occurrences only show up inside the returned periods; ``transactions`` is
    never modified.
    """
    config = config or DEFAULT_SCHEDULE_CONFIG
    policy = policy or DEFAULT_POLICY
    today = today or date.today()
    transactions = list(transactions)

    window_start, horizon_end = projection_window(
        transactions,
        today=today,
        months_to_project=config.months_to_project,
        history_months=policy.history_months,
    )
    synthetic = synthesize_occurrences(
        transactions,
        horizon_end=horizon_end,
        today=today,
        mode=config.recurrence_mode,
        policy=policy,
    )
    periods, final_balance = build_daily_ledger(
        transactions + synthetic,
        starting_balance=starting_balance,
        today=today,
        window_start=window_start,
        horizon_end=horizon_end,
        policy=policy,
    )

    logger.info(
        "Projected %d day(s) %s..%s from %d transaction(s) (+%d synthetic, %s mode); final balance %.2f",
        len(periods),
        window_start.isoformat(),
        horizon_end.isoformat(),
        len(transactions),
        len(synthetic),
        config.recurrence_mode,
        final_balance,
    )
    return ProjectionResult(periods=periods, final_balance=final_balance)


def compute_projection_from_payload(
    payload: Mapping[str, Any],
    *,
    today: date | None = None,
    policy: SafeSpendPolicy | None = None,
) -> ProjectionResult:
    """Validate a ``{transactions, startingBalance, config}`` payload, then project it.

    Validation errors are raised before any projection work starts.
    """
    state = migrate_legacy_state(payload)
    transactions = parse_transactions(state["transactions"])
    config = parse_config(state.get("config"))
    starting_balance = parse_starting_balance(state.get("startingBalance", state.get("balanceStart")))
    return compute_projection(transactions, starting_balance, config, today=today, policy=policy)
