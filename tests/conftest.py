"""Pytest configuration and fixtures."""

import os
from datetime import date, datetime
from decimal import Decimal

import pytest

# Set test environment variables before importing settings
os.environ.setdefault("LEDGERFLOW_BUSINESS_TIMEZONE", "UTC")
os.environ.setdefault("LEDGERFLOW_PROJECTION_MONTHS", "3")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from ledgerflow.config import get_settings  # noqa: E402
from ledgerflow.engine import LedgerSnapshot  # noqa: E402
from ledgerflow.models import (  # noqa: E402
    Direction,
    EntryStatus,
    FinancialAccount,
    LedgerEntry,
    RecurringRule,
)


@pytest.fixture(autouse=True)
def _fresh_settings():
    """Rebuild settings for every test so monkeypatched env vars apply."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def make_account(
    account_id: str = "acc-1",
    opening: str = "1000.00",
    opening_date: date = date(2024, 1, 1),
    is_active: bool = True,
    name: str | None = None,
) -> FinancialAccount:
    return FinancialAccount(
        id=account_id,
        name=name or f"Account {account_id}",
        opening_balance=Decimal(opening),
        opening_balance_date=opening_date,
        is_active=is_active,
        bank_name="Test Bank",
    )


def make_entry(
    entry_id: str,
    amount: str,
    direction: Direction,
    status: EntryStatus = EntryStatus.OPEN,
    due_date: date | None = None,
    paid_at: date | datetime | None = None,
    account_id: str | None = "acc-1",
) -> LedgerEntry:
    return LedgerEntry(
        id=entry_id,
        amount=Decimal(amount),
        direction=direction,
        status=status,
        due_date=due_date,
        paid_at=paid_at,
        account_id=account_id,
    )


def make_rule(
    rule_id: str = "rule-1",
    amount: str = "1500.00",
    direction: Direction = Direction.PAY,
    day_of_month: int = 31,
    start_date: date = date(2024, 1, 1),
    end_date: date | None = None,
    is_active: bool = True,
    account_id: str | None = "acc-1",
) -> RecurringRule:
    return RecurringRule(
        id=rule_id,
        amount=Decimal(amount),
        direction=direction,
        day_of_month=day_of_month,
        start_date=start_date,
        end_date=end_date,
        is_active=is_active,
        account_id=account_id,
        description="Office rent",
    )


@pytest.fixture
def account():
    """Account opened with 1000.00 on 2024-01-01."""
    return make_account()


@pytest.fixture
def january_snapshot(account):
    """One paid payable on Jan 5 and one open receivable due Jan 10."""
    return LedgerSnapshot.of(
        accounts=[account],
        entries=[
            make_entry(
                "pay-1",
                "200.00",
                Direction.PAY,
                EntryStatus.PAID,
                due_date=date(2024, 1, 5),
                paid_at=datetime(2024, 1, 5, 14, 30),
            ),
            make_entry(
                "rec-1",
                "500.00",
                Direction.RECEIVE,
                EntryStatus.OPEN,
                due_date=date(2024, 1, 10),
            ),
        ],
    )


@pytest.fixture
def snapshot_records():
    """Raw backend rows as a hosted database returns them."""
    return {
        "accounts": [
            {
                "id": "acc-1",
                "name": "Main checking",
                "bank_name": "First Bank",
                "account_type": "bank",
                "opening_balance": "1000.00",
                "opening_balance_date": "2024-01-01",
                "is_active": True,
            },
            {
                "id": "acc-2",
                "name": "Petty cash",
                "account_type": "cash",
                "opening_balance": None,
                "opening_balance_date": "2024-01-01",
                "is_active": True,
            },
        ],
        "entries": [
            {
                "id": "e-1",
                "amount": 200,
                "direction": "PAY",
                "status": "PAID",
                "due_date": "2024-01-05",
                "paid_at": "2024-01-05T14:30:00Z",
                "financial_account_id": "acc-1",
            },
            {
                "id": "e-2",
                "amount": "500.00",
                "direction": "RECEIVE",
                "status": "OPEN",
                "due_date": "2024-01-10",
                "paid_at": None,
                "financial_account_id": "acc-1",
            },
        ],
        "rules": [
            {
                "id": "r-1",
                "description": "Office rent",
                "amount": "1500.00",
                "direction": "PAY",
                "day_of_month": 31,
                "start_date": "2024-01-01",
                "end_date": None,
                "is_active": True,
                "financial_account_id": "acc-1",
            }
        ],
    }
