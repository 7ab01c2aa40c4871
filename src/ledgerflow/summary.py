"""Period roll-ups of computed daily series."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any

from ledgerflow.models import ZERO, DailyBalance, ProjectedBalance


@dataclass(frozen=True)
class CashFlowSummary:
    """Totals of a reconciled cash-flow table."""

    initial_balance: Decimal = ZERO
    total_expected_income: Decimal = ZERO
    total_expected_expense: Decimal = ZERO
    total_realized_income: Decimal = ZERO
    total_realized_expense: Decimal = ZERO
    final_expected_balance: Decimal = ZERO
    final_realized_balance: Decimal = ZERO

    def to_dict(self) -> dict[str, Any]:
        return {key: str(value) for key, value in self.__dict__.items()}


@dataclass(frozen=True)
class ProjectionSummary:
    """Totals and insolvency markers of a projection."""

    initial_balance: Decimal = ZERO
    current_balance: Decimal = ZERO
    projected_end_balance: Decimal = ZERO
    total_projected_income: Decimal = ZERO
    total_projected_expense: Decimal = ZERO
    has_negative_projection: bool = False
    first_negative_date: date | None = None
    lowest_balance: Decimal = ZERO

    def to_dict(self) -> dict[str, Any]:
        return {
            "initial_balance": str(self.initial_balance),
            "current_balance": str(self.current_balance),
            "projected_end_balance": str(self.projected_end_balance),
            "total_projected_income": str(self.total_projected_income),
            "total_projected_expense": str(self.total_projected_expense),
            "has_negative_projection": self.has_negative_projection,
            "first_negative_date": (
                self.first_negative_date.isoformat() if self.first_negative_date else None
            ),
            "lowest_balance": str(self.lowest_balance),
        }


def summarize_cash_flow(days: Sequence[DailyBalance]) -> CashFlowSummary:
    if not days:
        return CashFlowSummary()
    last = days[-1]
    return CashFlowSummary(
        initial_balance=days[0].opening_balance,
        total_expected_income=sum((d.expected_income for d in days), ZERO),
        total_expected_expense=sum((d.expected_expense for d in days), ZERO),
        total_realized_income=sum((d.realized_income for d in days), ZERO),
        total_realized_expense=sum((d.realized_expense for d in days), ZERO),
        final_expected_balance=last.expected_closing,
        final_realized_balance=last.realized_closing,
    )


def summarize_projection(
    days: Sequence[ProjectedBalance], today: date | None = None
) -> ProjectionSummary:
    """Summarize a projection.

    ``current_balance`` is the closing balance of ``today`` when the series
    covers it. Projected totals only count days after today.
    """
    if not days:
        return ProjectionSummary()

    current = ZERO
    if today is not None:
        for day in days:
            if day.date == today:
                current = day.closing_balance
                break

    projected = [d for d in days if d.is_projected]
    first_negative = next((d.date for d in days if d.has_negative_balance), None)

    return ProjectionSummary(
        initial_balance=days[0].opening_balance,
        current_balance=current,
        projected_end_balance=days[-1].closing_balance,
        total_projected_income=sum((d.income for d in projected), ZERO),
        total_projected_expense=sum((d.expense for d in projected), ZERO),
        has_negative_projection=first_negative is not None,
        first_negative_date=first_negative,
        lowest_balance=min(d.closing_balance for d in days),
    )
