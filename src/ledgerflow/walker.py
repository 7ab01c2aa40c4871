"""Day-by-day walk over a calendar window.

Only realized figures are carried into the next day's opening balance in
the reconciled table. The forecast carries its single closing balance.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import date
from decimal import Decimal

from ledgerflow.dates import iter_days
from ledgerflow.ledger import LedgerIndex
from ledgerflow.models import ZERO, DailyBalance, ProjectedBalance
from ledgerflow.recurring import ProjectedAmounts


def walk_reconciled(
    index: LedgerIndex,
    opening: Decimal,
    start: date,
    end: date,
) -> list[DailyBalance]:
    """Build the reconciled daily table for ``start``..``end`` inclusive."""
    days: list[DailyBalance] = []
    balance = opening

    for day in iter_days(start, end):
        moves = index.movements_on(day)
        realized_closing = balance + moves.realized_income - moves.realized_expense
        days.append(
            DailyBalance(
                date=day,
                opening_balance=balance,
                expected_income=moves.expected_income,
                expected_expense=moves.expected_expense,
                realized_income=moves.realized_income,
                realized_expense=moves.realized_expense,
                expected_closing=balance + moves.expected_income - moves.expected_expense,
                realized_closing=realized_closing,
            )
        )
        balance = realized_closing

    return days


def walk_forecast(
    index: LedgerIndex,
    projections: Mapping[date, ProjectedAmounts],
    opening: Decimal,
    start: date,
    end: date,
    today: date,
) -> list[ProjectedBalance]:
    """Build the projected daily series for ``start``..``end`` inclusive.

    Days up to and including ``today`` use realized movements. Later days
    use open entries due that day plus projected recurring amounts.
    """
    days: list[ProjectedBalance] = []
    balance = opening

    for day in iter_days(start, end):
        moves = index.movements_on(day)
        is_projected = day > today
        if is_projected:
            recurring = projections.get(day)
            income = moves.expected_income + (recurring.income if recurring else ZERO)
            expense = moves.expected_expense + (recurring.expense if recurring else ZERO)
        else:
            income = moves.realized_income
            expense = moves.realized_expense

        closing = balance + income - expense
        days.append(
            ProjectedBalance(
                date=day,
                opening_balance=balance,
                income=income,
                expense=expense,
                closing_balance=closing,
                is_projected=is_projected,
                has_negative_balance=closing < 0,
            )
        )
        balance = closing

    return days
