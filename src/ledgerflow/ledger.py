"""Date-ordered index of ledger movements.

Entries are grouped once by business date so the daily walk reads sums in a
fixed chronological order instead of re-filtering the ledger for every day.
"""

from __future__ import annotations

from collections.abc import Collection, Iterable
from dataclasses import dataclass, field
from datetime import date, tzinfo
from decimal import Decimal

import structlog

from ledgerflow.models import ZERO, Direction, EntryStatus, LedgerEntry

logger = structlog.get_logger(__name__)


@dataclass
class DayMovements:
    """Expected and realized sums for one business date."""

    expected_income: Decimal = ZERO
    expected_expense: Decimal = ZERO
    realized_income: Decimal = ZERO
    realized_expense: Decimal = ZERO

    def add_expected(self, entry: LedgerEntry) -> None:
        if entry.direction is Direction.RECEIVE:
            self.expected_income += entry.amount
        else:
            self.expected_expense += entry.amount

    def add_realized(self, entry: LedgerEntry) -> None:
        if entry.direction is Direction.RECEIVE:
            self.realized_income += entry.amount
        else:
            self.realized_expense += entry.amount


EMPTY_DAY = DayMovements()


@dataclass
class LedgerDiagnostics:
    """Counts of entries left out of the sums, by reason."""

    canceled: int = 0
    partial: int = 0
    missing_due_date: int = 0
    missing_paid_at: int = 0
    unassigned: int = 0
    other_account: int = 0

    @property
    def total_skipped(self) -> int:
        return (
            self.canceled
            + self.partial
            + self.missing_due_date
            + self.missing_paid_at
            + self.unassigned
            + self.other_account
        )

    def as_dict(self) -> dict[str, int]:
        return {
            "canceled": self.canceled,
            "partial": self.partial,
            "missing_due_date": self.missing_due_date,
            "missing_paid_at": self.missing_paid_at,
            "unassigned": self.unassigned,
            "other_account": self.other_account,
        }


@dataclass
class LedgerIndex:
    """Ledger movements keyed by business date, plus recorded amounts by due date."""

    days: dict[date, DayMovements] = field(default_factory=dict)
    recorded_due: dict[tuple[date, Direction], list[Decimal]] = field(default_factory=dict)
    diagnostics: LedgerDiagnostics = field(default_factory=LedgerDiagnostics)

    @classmethod
    def build(
        cls,
        entries: Iterable[LedgerEntry],
        tz: tzinfo | None = None,
        account_ids: Collection[str] | None = None,
        include_unassigned: bool = False,
    ) -> LedgerIndex:
        """Index entries, optionally restricted to a set of account ids.

        With ``account_ids`` set, entries without an account are excluded
        unless ``include_unassigned`` is true.
        """
        index = cls()
        diag = index.diagnostics

        for entry in entries:
            if entry.status is EntryStatus.CANCELED:
                diag.canceled += 1
                continue
            if account_ids is not None:
                if entry.account_id is None:
                    if not include_unassigned:
                        diag.unassigned += 1
                        continue
                elif entry.account_id not in account_ids:
                    diag.other_account += 1
                    continue

            # Every non-canceled dated entry counts for de-duplication of recurring rules
            if entry.due_date is not None:
                index.recorded_due.setdefault((entry.due_date, entry.direction), []).append(
                    entry.amount
                )

            if entry.status is EntryStatus.PARTIAL:
                diag.partial += 1
            elif entry.status is EntryStatus.OPEN:
                if entry.due_date is None:
                    diag.missing_due_date += 1
                else:
                    index._day(entry.due_date).add_expected(entry)
            elif entry.status is EntryStatus.PAID:
                paid_on = entry.paid_on(tz)
                if paid_on is None:
                    diag.missing_paid_at += 1
                else:
                    index._day(paid_on).add_realized(entry)

        index.days = dict(sorted(index.days.items()))
        if diag.total_skipped:
            logger.debug("ledger_entries_skipped", **diag.as_dict())
        return index

    def _day(self, day: date) -> DayMovements:
        movements = self.days.get(day)
        if movements is None:
            movements = self.days[day] = DayMovements()
        return movements

    def movements_on(self, day: date) -> DayMovements:
        return self.days.get(day, EMPTY_DAY)

    def has_entry(
        self,
        due_date: date,
        direction: Direction,
        amount: Decimal,
        epsilon: Decimal = Decimal("0.01"),
    ) -> bool:
        """True if a recorded entry matches the due date, direction and amount."""
        return any(
            abs(existing - amount) < epsilon
            for existing in self.recorded_due.get((due_date, direction), ())
        )
