#!/usr/bin/env python3
from __future__ import annotations

import argparse
import json
import sys
from datetime import date
from pathlib import Path

import pandas as pd

from services.demo_loader import sample_inputs
from services.errors import ProjectionError
from services.logging_setup import configure_logging
from services.projection import compute_projection_from_payload
from services.projection_settings import load_policy
from services.reporting import projection_to_frame, rollup_projection, summarize_outlook


def _parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Day-by-day cashflow projection with safe-to-spend guidance")
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--input", help="JSON file with transactions, startingBalance and config")
    source.add_argument("--demo", action="store_true", help="Project the built-in sample data")
    parser.add_argument("--today", type=date.fromisoformat, default=None, help="Reference date (YYYY-MM-DD)")
    parser.add_argument("--days", type=int, default=14, help="Number of days to print from today")
    parser.add_argument("--rollup", choices=["month", "pay_period"], default=None, help="Print an aggregated view instead")
    parser.add_argument("--log-level", default=None, help="Logging level (default: CASHFLOW_LOG_LEVEL or INFO)")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = _parse_args(argv)
    configure_logging(args.log_level)

    today = args.today or date.today()
    if args.demo:
        payload = sample_inputs(today)
    else:
        path = Path(args.input)
        if not path.exists():
            print(f"Input file not found: {path}", file=sys.stderr)
            return 1
        try:
            payload = json.loads(path.read_text())
        except json.JSONDecodeError as exc:
            print(f"Input file is not valid JSON: {path} ({exc})", file=sys.stderr)
            return 1
        if not isinstance(payload, dict):
            print(f"Input file must hold a JSON object: {path}", file=sys.stderr)
            return 1

    try:
        result = compute_projection_from_payload(payload, today=today, policy=load_policy())
    except ProjectionError as exc:
        print(str(exc), file=sys.stderr)
        return 1

    with pd.option_context("display.width", 160, "display.max_columns", 20):
        if args.rollup:
            config = payload.get("config") or {}
            print(rollup_projection(result, freq=args.rollup, pay_period_days=config.get("payPeriodDays", 14)).to_string(index=False))
        else:
            df = projection_to_frame(result)
            upcoming = df[df["date"] >= today].head(max(0, args.days))
            print(upcoming.to_string(index=False))

    outlook = summarize_outlook(result)
    print(f"Safe to spend today: {outlook.safe_to_spend_today:,.2f} (save {outlook.safe_to_save_today:,.2f})")
    if outlook.first_shortfall_date:
        print(f"First projected shortfall: {outlook.first_shortfall_date.isoformat()}")
    print(f"Final balance: {result.final_balance:,.2f}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
