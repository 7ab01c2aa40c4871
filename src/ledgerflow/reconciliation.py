"""Per-account reconciliation for matching against bank statements."""

from __future__ import annotations

from collections.abc import Collection, Iterable
from dataclasses import dataclass, field
from datetime import date, datetime, tzinfo
from decimal import Decimal
from typing import Any

import structlog

from ledgerflow.dates import UTC_ZONE, days_in_month
from ledgerflow.errors import InputError
from ledgerflow.models import ZERO, Direction, EntryStatus, FinancialAccount, LedgerEntry

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ReconciliationPeriod:
    """Inclusive range of business dates."""

    start: date
    end: date

    def __post_init__(self) -> None:
        if self.end < self.start:
            raise InputError(
                f"Period end {self.end.isoformat()} is before start {self.start.isoformat()}"
            )

    @classmethod
    def for_month(cls, year: int, month: int) -> ReconciliationPeriod:
        if not 1 <= month <= 12:
            raise InputError(f"Invalid month: {month}")
        return cls(date(year, month, 1), date(year, month, days_in_month(year, month)))

    @classmethod
    def for_year(cls, year: int) -> ReconciliationPeriod:
        return cls(date(year, 1, 1), date(year, 12, 31))

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end


@dataclass(frozen=True)
class AccountReconciliation:
    """Realized totals of one account within a period."""

    account_id: str
    name: str
    bank_name: str | None
    opening_balance: Decimal
    opening_date: date
    total_received: Decimal
    total_paid: Decimal
    calculated_balance: Decimal
    entries: tuple[LedgerEntry, ...] = ()

    @property
    def transactions_count(self) -> int:
        return len(self.entries)

    def to_dict(self) -> dict[str, Any]:
        return {
            "account_id": self.account_id,
            "name": self.name,
            "bank_name": self.bank_name,
            "opening_balance": str(self.opening_balance),
            "opening_date": self.opening_date.isoformat(),
            "total_received": str(self.total_received),
            "total_paid": str(self.total_paid),
            "calculated_balance": str(self.calculated_balance),
            "transactions_count": self.transactions_count,
        }


@dataclass(frozen=True)
class ReconciliationTotals:
    """Cross-account sums for the global reconciliation view."""

    opening_balance: Decimal = ZERO
    total_received: Decimal = ZERO
    total_paid: Decimal = ZERO
    calculated_balance: Decimal = ZERO
    transactions_count: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "opening_balance": str(self.opening_balance),
            "total_received": str(self.total_received),
            "total_paid": str(self.total_paid),
            "calculated_balance": str(self.calculated_balance),
            "transactions_count": self.transactions_count,
        }


@dataclass(frozen=True)
class ReconciliationReport:
    period: ReconciliationPeriod
    accounts: list[AccountReconciliation] = field(default_factory=list)
    totals: ReconciliationTotals = field(default_factory=ReconciliationTotals)

    def entries_for(self, account_id: str) -> list[LedgerEntry]:
        """Realized entries of one account, for manual audit."""
        for rec in self.accounts:
            if rec.account_id == account_id:
                return list(rec.entries)
        return []

    def to_dict(self) -> dict[str, Any]:
        return {
            "period": {"start": self.period.start.isoformat(), "end": self.period.end.isoformat()},
            "accounts": [rec.to_dict() for rec in self.accounts],
            "totals": self.totals.to_dict(),
        }


def _paid_sort_key(entry: LedgerEntry, tz: tzinfo | None) -> tuple[date, str]:
    paid = entry.paid_at
    # Sort by the full timestamp within a day when one is available
    if isinstance(paid, datetime):
        local = paid.astimezone(tz or UTC_ZONE) if paid.tzinfo is not None else paid
        return (local.date(), local.time().isoformat())
    return (entry.paid_on(tz) or date.min, "")


def reconcile_accounts(
    accounts: Iterable[FinancialAccount],
    entries: Iterable[LedgerEntry],
    period: ReconciliationPeriod,
    tz: tzinfo | None = None,
    account_ids: Collection[str] | None = None,
) -> ReconciliationReport:
    """Aggregate realized movements per active account within ``period``.

    Args:
        accounts: All known accounts; inactive ones are ignored.
        entries: Ledger entries supplied by the caller.
        period: Inclusive range matched against the ``paid_at`` business date.
        tz: Business timezone used to date ``paid_at`` timestamps.
        account_ids: Optional subset of accounts to reconcile.

    Returns:
        Per-account reconciliations and their totals.
    """
    selected = [
        acc
        for acc in accounts
        if acc.is_active and (account_ids is None or acc.id in account_ids)
    ]
    wanted = {acc.id for acc in selected}

    by_account: dict[str, list[LedgerEntry]] = {acc_id: [] for acc_id in wanted}
    for entry in entries:
        if entry.status is not EntryStatus.PAID or entry.account_id not in wanted:
            continue
        paid_on = entry.paid_on(tz)
        if paid_on is None or not period.contains(paid_on):
            continue
        by_account[entry.account_id].append(entry)  # type: ignore[index]

    results: list[AccountReconciliation] = []
    for acc in selected:
        acc_entries = sorted(by_account[acc.id], key=lambda e: _paid_sort_key(e, tz))
        received = sum(
            (e.amount for e in acc_entries if e.direction is Direction.RECEIVE), ZERO
        )
        paid = sum((e.amount for e in acc_entries if e.direction is Direction.PAY), ZERO)
        results.append(
            AccountReconciliation(
                account_id=acc.id,
                name=acc.name,
                bank_name=acc.bank_name,
                opening_balance=acc.opening_balance,
                opening_date=acc.opening_balance_date,
                total_received=received,
                total_paid=paid,
                calculated_balance=acc.opening_balance + received - paid,
                entries=tuple(acc_entries),
            )
        )

    totals = ReconciliationTotals(
        opening_balance=sum((r.opening_balance for r in results), ZERO),
        total_received=sum((r.total_received for r in results), ZERO),
        total_paid=sum((r.total_paid for r in results), ZERO),
        calculated_balance=sum((r.calculated_balance for r in results), ZERO),
        transactions_count=sum(r.transactions_count for r in results),
    )

    logger.debug(
        "reconciliation_computed",
        period_start=period.start.isoformat(),
        period_end=period.end.isoformat(),
        accounts=len(results),
        entries=totals.transactions_count,
    )
    return ReconciliationReport(period=period, accounts=results, totals=totals)
