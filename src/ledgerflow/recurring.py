"""Projection of recurring rules into synthetic future amounts."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

import structlog

from ledgerflow.dates import iter_month_starts, month_start
from ledgerflow.ledger import LedgerIndex
from ledgerflow.models import ZERO, Direction, EntryStatus, LedgerEntry, RecurringRule

logger = structlog.get_logger(__name__)

DEFAULT_EPSILON = Decimal("0.01")


@dataclass
class ProjectedAmounts:
    """Recurring income and expense projected onto one date."""

    income: Decimal = ZERO
    expense: Decimal = ZERO

    def add(self, direction: Direction, amount: Decimal) -> None:
        if direction is Direction.RECEIVE:
            self.income += amount
        else:
            self.expense += amount


def project_recurring(
    rules: Iterable[RecurringRule],
    index: LedgerIndex,
    today: date,
    horizon_end: date,
    epsilon: Decimal = DEFAULT_EPSILON,
) -> dict[date, ProjectedAmounts]:
    """Expand active rules into per-date projected amounts.

    Only dates strictly after ``today`` and up to ``horizon_end`` are
    projected. A month is skipped when the rule's validity window does not
    overlap it, and an occurrence is skipped when the ledger already records
    an entry with the same due date, direction and amount (within
    ``epsilon``), meaning the rule was materialized by hand.
    """
    active = [rule for rule in rules if rule.is_active]
    projections: dict[date, ProjectedAmounts] = {}
    deduplicated = 0

    for first_day in iter_month_starts(today, horizon_end):
        for rule in active:
            if not rule.is_active_in_month(first_day):
                continue
            due = rule.due_date_in(first_day.year, first_day.month)
            if due <= today or due > horizon_end:
                continue
            if index.has_entry(due, rule.direction, rule.amount, epsilon):
                deduplicated += 1
                continue
            projections.setdefault(due, ProjectedAmounts()).add(rule.direction, rule.amount)

    logger.debug(
        "recurring_projected",
        rules=len(active),
        dates=len(projections),
        deduplicated=deduplicated,
    )
    return dict(sorted(projections.items()))


def preview_materialization(
    rules: Iterable[RecurringRule], month: date
) -> list[LedgerEntry]:
    """Draft the entries a materializer would create for ``month``.

    Rules that are inactive, outside their validity window, or already
    generated for the month are left out. Nothing is persisted.
    """
    first_day = month_start(month)
    drafts: list[LedgerEntry] = []
    for rule in rules:
        if not rule.is_active or not rule.is_active_in_month(first_day):
            continue
        last = rule.last_generated_month
        if last is not None and (last.year, last.month) == (first_day.year, first_day.month):
            continue
        due = rule.due_date_in(first_day.year, first_day.month)
        drafts.append(
            LedgerEntry(
                id=f"{rule.id}:{first_day.strftime('%Y-%m')}",
                amount=rule.amount,
                direction=rule.direction,
                status=EntryStatus.OPEN,
                due_date=due,
                account_id=rule.account_id,
                description=f"Generated from: {rule.description or rule.id}",
            )
        )
    return drafts
