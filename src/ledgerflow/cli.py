"""Command-line reports over a snapshot file.

Usage:
    ledgerflow cash-flow snapshot.yaml --start 2024-01-01 --end 2024-01-31
    ledgerflow projection snapshot.yaml --months 3
    ledgerflow reconcile snapshot.yaml --year 2024 --month 1
    ledgerflow preview snapshot.yaml --year 2024 --month 2
"""

from __future__ import annotations

import argparse
import json
import sys
from datetime import date
from typing import Any

from ledgerflow.balance import in_scope, is_all_accounts, select_accounts
from ledgerflow.config import configure_logging
from ledgerflow.engine import compute_cash_flow, compute_projection, compute_reconciliation
from ledgerflow.errors import LedgerflowError
from ledgerflow.loader import load_snapshot
from ledgerflow.models import LedgerEntry
from ledgerflow.reconciliation import ReconciliationPeriod
from ledgerflow.recurring import preview_materialization


def _iso_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"not an ISO date: {value!r}") from exc


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ledgerflow",
        description="Cash-flow, projection and reconciliation reports",
    )
    parser.add_argument("--json", action="store_true", help="Print the report as JSON")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Override LOG_LEVEL",
    )
    parser.add_argument(
        "--log-format",
        choices=["json", "console"],
        default=None,
        help="Override LOG_FORMAT",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    cash = sub.add_parser("cash-flow", help="Reconciled daily cash-flow table")
    cash.add_argument("snapshot", help="YAML or JSON snapshot file")
    cash.add_argument("--account", default="all", help="Account id (default: all active)")
    cash.add_argument("--start", type=_iso_date, required=True)
    cash.add_argument("--end", type=_iso_date, required=True)

    proj = sub.add_parser("projection", help="Forward projection with recurring rules")
    proj.add_argument("snapshot", help="YAML or JSON snapshot file")
    proj.add_argument("--account", default="all", help="Account id (default: all active)")
    proj.add_argument("--months", type=int, default=None, help="Horizon in months")
    proj.add_argument("--today", type=_iso_date, default=None, help="Override today's date")

    rec = sub.add_parser("reconcile", help="Per-account reconciliation")
    rec.add_argument("snapshot", help="YAML or JSON snapshot file")
    rec.add_argument("--account", action="append", default=None, help="Account id (repeatable)")
    rec.add_argument("--year", type=int, required=True)
    rec.add_argument("--month", type=int, default=None, help="Month 1-12 (default: whole year)")

    prev = sub.add_parser("preview", help="Entries a month's recurring rules would generate")
    prev.add_argument("snapshot", help="YAML or JSON snapshot file")
    prev.add_argument("--account", default="all", help="Account id (default: all active)")
    prev.add_argument("--year", type=int, required=True)
    prev.add_argument("--month", type=int, required=True)

    return parser


def _print_table(headers: list[str], rows: list[list[Any]]) -> None:
    widths = [
        max(len(str(h)), *(len(str(r[i])) for r in rows)) if rows else len(str(h))
        for i, h in enumerate(headers)
    ]
    print("  ".join(str(h).rjust(w) for h, w in zip(headers, widths)))
    print("  ".join("-" * w for w in widths))
    for row in rows:
        print("  ".join(str(c).rjust(w) for c, w in zip(row, widths)))


def _print_summary(summary: dict[str, Any]) -> None:
    print()
    for key, value in summary.items():
        print(f"  {key}: {value}")


def _draft_dict(entry: LedgerEntry) -> dict[str, Any]:
    return {
        "id": entry.id,
        "due_date": entry.due_date.isoformat() if entry.due_date else None,
        "direction": entry.direction.value,
        "amount": str(entry.amount),
        "account_id": entry.account_id,
        "description": entry.description,
    }


def run(args: argparse.Namespace) -> int:
    snapshot = load_snapshot(args.snapshot)

    if args.command == "cash-flow":
        report = compute_cash_flow(snapshot, args.account, args.start, args.end)
        if report is None:
            print("No accounts selected", file=sys.stderr)
            return 1
        if args.json:
            print(json.dumps(report.to_dict(), indent=2))
            return 0
        _print_table(
            ["date", "opening", "exp.in", "exp.out", "real.in", "real.out", "exp.close", "real.close"],
            [
                [
                    d.date.isoformat(),
                    d.opening_balance,
                    d.expected_income,
                    d.expected_expense,
                    d.realized_income,
                    d.realized_expense,
                    d.expected_closing,
                    d.realized_closing,
                ]
                for d in report.days
            ],
        )
        _print_summary(report.summary.to_dict())
        return 0

    if args.command == "projection":
        report = compute_projection(snapshot, args.account, args.months, today=args.today)
        if report is None:
            print("No accounts selected", file=sys.stderr)
            return 1
        if args.json:
            print(json.dumps(report.to_dict(), indent=2))
            return 0
        _print_table(
            ["date", "opening", "income", "expense", "closing", "projected", "negative"],
            [
                [
                    d.date.isoformat(),
                    d.opening_balance,
                    d.income,
                    d.expense,
                    d.closing_balance,
                    "yes" if d.is_projected else "",
                    "!" if d.has_negative_balance else "",
                ]
                for d in report.days
            ],
        )
        _print_summary(report.summary.to_dict())
        return 0

    if args.command == "preview":
        month = ReconciliationPeriod.for_month(args.year, args.month).start
        selected = {acc.id for acc in select_accounts(snapshot.accounts, args.account)}
        unassigned = is_all_accounts(args.account)
        rules = [r for r in snapshot.rules if in_scope(r.account_id, selected, unassigned)]
        drafts = preview_materialization(rules, month)
        if args.json:
            print(json.dumps([_draft_dict(entry) for entry in drafts], indent=2))
            return 0
        _print_table(
            ["id", "due", "direction", "amount", "account", "description"],
            [
                [
                    e.id,
                    e.due_date.isoformat() if e.due_date else "",
                    e.direction.value,
                    e.amount,
                    e.account_id or "",
                    e.description or "",
                ]
                for e in drafts
            ],
        )
        return 0

    if args.month is None:
        period = ReconciliationPeriod.for_year(args.year)
    else:
        period = ReconciliationPeriod.for_month(args.year, args.month)
    report = compute_reconciliation(snapshot, period, args.account)
    if args.json:
        print(json.dumps(report.to_dict(), indent=2))
        return 0
    _print_table(
        ["account", "opening", "received", "paid", "calculated", "entries"],
        [
            [
                r.name,
                r.opening_balance,
                r.total_received,
                r.total_paid,
                r.calculated_balance,
                r.transactions_count,
            ]
            for r in report.accounts
        ],
    )
    _print_summary(report.totals.to_dict())
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(level=args.log_level, format=args.log_format)
    try:
        return run(args)
    except LedgerflowError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
