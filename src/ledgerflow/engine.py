"""Cash-flow, projection and reconciliation operations over a ledger snapshot.

Each operation is a pure function of an immutable snapshot and its
parameters, so callers may run several concurrently and recompute freely.
"""

from __future__ import annotations

from collections.abc import Collection
from dataclasses import dataclass, field
from datetime import date, tzinfo
from decimal import Decimal
from typing import Any

import structlog

from ledgerflow.balance import (
    AccountFilter,
    in_scope,
    is_all_accounts,
    opening_balance_before,
    select_accounts,
)
from ledgerflow.config import get_settings
from ledgerflow.dates import add_months, month_end, month_start, today_in
from ledgerflow.errors import InputError
from ledgerflow.ledger import LedgerDiagnostics, LedgerIndex
from ledgerflow.models import DailyBalance, FinancialAccount, LedgerEntry, ProjectedBalance, RecurringRule
from ledgerflow.reconciliation import ReconciliationPeriod, ReconciliationReport, reconcile_accounts
from ledgerflow.recurring import project_recurring
from ledgerflow.summary import CashFlowSummary, ProjectionSummary, summarize_cash_flow, summarize_projection
from ledgerflow.walker import walk_forecast, walk_reconciled

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class LedgerSnapshot:
    """Immutable set of records fetched for one computation."""

    accounts: tuple[FinancialAccount, ...] = ()
    entries: tuple[LedgerEntry, ...] = ()
    rules: tuple[RecurringRule, ...] = ()

    @classmethod
    def of(
        cls,
        accounts: Collection[FinancialAccount] = (),
        entries: Collection[LedgerEntry] = (),
        rules: Collection[RecurringRule] = (),
    ) -> LedgerSnapshot:
        return cls(tuple(accounts), tuple(entries), tuple(rules))


@dataclass(frozen=True)
class CashFlowReport:
    start_date: date
    end_date: date
    days: list[DailyBalance] = field(default_factory=list)
    summary: CashFlowSummary = field(default_factory=CashFlowSummary)
    diagnostics: LedgerDiagnostics = field(default_factory=LedgerDiagnostics)

    def to_dict(self) -> dict[str, Any]:
        return {
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "days": [day.to_dict() for day in self.days],
            "summary": self.summary.to_dict(),
            "diagnostics": self.diagnostics.as_dict(),
        }


@dataclass(frozen=True)
class ProjectionReport:
    today: date
    start_date: date
    end_date: date
    days: list[ProjectedBalance] = field(default_factory=list)
    summary: ProjectionSummary = field(default_factory=ProjectionSummary)
    diagnostics: LedgerDiagnostics = field(default_factory=LedgerDiagnostics)

    def to_dict(self) -> dict[str, Any]:
        return {
            "today": self.today.isoformat(),
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "days": [day.to_dict() for day in self.days],
            "summary": self.summary.to_dict(),
            "diagnostics": self.diagnostics.as_dict(),
        }


def _scope(
    accounts: list[FinancialAccount], account_filter: AccountFilter
) -> tuple[set[str], bool]:
    # Entries without an account only count toward the "all accounts" view
    return {acc.id for acc in accounts}, is_all_accounts(account_filter)


def _resolve_tz(tz: tzinfo | None) -> tzinfo:
    return tz if tz is not None else get_settings().tzinfo


def compute_cash_flow(
    snapshot: LedgerSnapshot,
    account_filter: AccountFilter,
    start_date: date,
    end_date: date,
    tz: tzinfo | None = None,
) -> CashFlowReport | None:
    """Reconciled daily table for ``start_date``..``end_date`` inclusive.

    Returns None when the filter selects no account.

    Raises:
        InputError: If ``end_date`` is before ``start_date``.
    """
    if end_date < start_date:
        raise InputError(
            f"End date {end_date.isoformat()} is before start date {start_date.isoformat()}"
        )
    tz = _resolve_tz(tz)

    accounts = select_accounts(snapshot.accounts, account_filter)
    account_ids, unassigned = _scope(accounts, account_filter)
    opening = opening_balance_before(
        accounts, snapshot.entries, start_date, tz, account_ids, unassigned
    )
    if opening is None:
        logger.info("cash_flow_no_accounts", account_filter=str(account_filter))
        return None

    index = LedgerIndex.build(snapshot.entries, tz, account_ids, unassigned)
    days = walk_reconciled(index, opening, start_date, end_date)
    summary = summarize_cash_flow(days)

    logger.info(
        "cash_flow_computed",
        start=start_date.isoformat(),
        end=end_date.isoformat(),
        accounts=len(accounts),
        days=len(days),
        skipped=index.diagnostics.total_skipped,
    )
    return CashFlowReport(
        start_date=start_date,
        end_date=end_date,
        days=days,
        summary=summary,
        diagnostics=index.diagnostics,
    )


def projection_window(today: date, horizon_months: int) -> tuple[date, date]:
    """First day of ``today``'s month through the end of the horizon month."""
    if horizon_months <= 0:
        raise InputError(f"Projection horizon must be positive, got {horizon_months}")
    return month_start(today), month_end(add_months(month_start(today), horizon_months))


def compute_projection(
    snapshot: LedgerSnapshot,
    account_filter: AccountFilter,
    horizon_months: int | None = None,
    today: date | None = None,
    tz: tzinfo | None = None,
    epsilon: Decimal | None = None,
) -> ProjectionReport | None:
    """Forward projection from the start of the current month.

    Returns None when the filter selects no account.

    Raises:
        InputError: If ``horizon_months`` is not positive.
    """
    settings = get_settings()
    horizon = settings.projection_months if horizon_months is None else horizon_months
    tz = _resolve_tz(tz)
    today = today or today_in(tz)
    epsilon = settings.dedup_epsilon if epsilon is None else epsilon
    start_date, end_date = projection_window(today, horizon)

    accounts = select_accounts(snapshot.accounts, account_filter)
    account_ids, unassigned = _scope(accounts, account_filter)
    opening = opening_balance_before(
        accounts, snapshot.entries, start_date, tz, account_ids, unassigned
    )
    if opening is None:
        logger.info("projection_no_accounts", account_filter=str(account_filter))
        return None

    rules = [
        rule
        for rule in snapshot.rules
        if rule.is_active and in_scope(rule.account_id, account_ids, unassigned)
    ]
    index = LedgerIndex.build(snapshot.entries, tz, account_ids, unassigned)
    projections = project_recurring(rules, index, today, end_date, epsilon)
    days = walk_forecast(index, projections, opening, start_date, end_date, today)
    summary = summarize_projection(days, today)

    logger.info(
        "projection_computed",
        today=today.isoformat(),
        end=end_date.isoformat(),
        accounts=len(accounts),
        rules=len(rules),
        days=len(days),
        first_negative=summary.first_negative_date.isoformat()
        if summary.first_negative_date
        else None,
    )
    return ProjectionReport(
        today=today,
        start_date=start_date,
        end_date=end_date,
        days=days,
        summary=summary,
        diagnostics=index.diagnostics,
    )


def compute_reconciliation(
    snapshot: LedgerSnapshot,
    period: ReconciliationPeriod,
    accounts: AccountFilter = None,
    tz: tzinfo | None = None,
) -> ReconciliationReport:
    """Per-account realized totals for ``period``."""
    account_ids = None if is_all_accounts(accounts) else {
        acc.id for acc in select_accounts(snapshot.accounts, accounts)
    }
    return reconcile_accounts(
        snapshot.accounts, snapshot.entries, period, _resolve_tz(tz), account_ids
    )
