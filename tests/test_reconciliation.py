"""Tests for per-account reconciliation."""

from datetime import date, datetime
from decimal import Decimal

import pytest
from conftest import make_account, make_entry

from ledgerflow.errors import InputError
from ledgerflow.models import Direction, EntryStatus
from ledgerflow.reconciliation import ReconciliationPeriod, reconcile_accounts


class TestReconciliationPeriod:
    def test_for_month(self):
        """Month period spans first to last day."""
        period = ReconciliationPeriod.for_month(2024, 2)

        assert period.start == date(2024, 2, 1)
        assert period.end == date(2024, 2, 29)

    def test_for_year(self):
        """Year period spans January 1 to December 31."""
        period = ReconciliationPeriod.for_year(2024)

        assert period.contains(date(2024, 12, 31))
        assert not period.contains(date(2025, 1, 1))

    def test_inverted_period_is_rejected(self):
        """End before start raises InputError."""
        with pytest.raises(InputError):
            ReconciliationPeriod(date(2024, 2, 1), date(2024, 1, 1))

    def test_invalid_month_is_rejected(self):
        """Month outside 1-12 raises InputError."""
        with pytest.raises(InputError):
            ReconciliationPeriod.for_month(2024, 13)


def _paid(entry_id, amount, direction, paid_at, account_id="acc-1"):
    return make_entry(entry_id, amount, direction, EntryStatus.PAID, paid_at=paid_at, account_id=account_id)


class TestReconcileAccounts:
    @pytest.fixture
    def accounts(self):
        return [
            make_account("acc-1", "1000.00"),
            make_account("acc-2", "250.10"),
            make_account("acc-3", "999.99", is_active=False),
        ]

    @pytest.fixture
    def entries(self):
        return [
            _paid("r1", "300.33", Direction.RECEIVE, datetime(2024, 1, 20, 16, 0)),
            _paid("p1", "120.10", Direction.PAY, datetime(2024, 1, 3, 9, 0)),
            _paid("r2", "0.01", Direction.RECEIVE, date(2024, 1, 31)),
            # Outside the period
            _paid("old", "50.00", Direction.RECEIVE, date(2023, 12, 31)),
            # Not realized
            make_entry("open", "70.00", Direction.RECEIVE, due_date=date(2024, 1, 10)),
            make_entry("canceled", "70.00", Direction.RECEIVE, EntryStatus.CANCELED, paid_at=date(2024, 1, 10)),
            # Unassigned and inactive account
            _paid("none", "10.00", Direction.PAY, date(2024, 1, 10), account_id=None),
            _paid("inactive", "10.00", Direction.PAY, date(2024, 1, 10), account_id="acc-3"),
            _paid("p2", "49.90", Direction.PAY, date(2024, 1, 15), account_id="acc-2"),
        ]

    def test_calculated_balance_is_exact(self, accounts, entries):
        """Calculated balance is opening plus received minus paid."""
        report = reconcile_accounts(accounts, entries, ReconciliationPeriod.for_month(2024, 1))
        first = report.accounts[0]

        assert first.account_id == "acc-1"
        assert first.total_received == Decimal("300.34")
        assert first.total_paid == Decimal("120.10")
        assert first.calculated_balance == Decimal("1180.24")
        assert first.transactions_count == 3

    def test_every_account_satisfies_balance_identity(self, accounts, entries):
        """The balance identity holds for every account."""
        report = reconcile_accounts(accounts, entries, ReconciliationPeriod.for_month(2024, 1))

        for rec in report.accounts:
            assert rec.calculated_balance == rec.opening_balance + rec.total_received - rec.total_paid

    def test_inactive_accounts_are_excluded(self, accounts, entries):
        """Inactive accounts are not reconciled."""
        report = reconcile_accounts(accounts, entries, ReconciliationPeriod.for_month(2024, 1))

        assert [r.account_id for r in report.accounts] == ["acc-1", "acc-2"]
        assert report.entries_for("acc-3") == []

    def test_entries_are_ordered_by_payment(self, accounts, entries):
        """Entries are listed in settlement order."""
        report = reconcile_accounts(accounts, entries, ReconciliationPeriod.for_month(2024, 1))

        assert [e.id for e in report.entries_for("acc-1")] == ["p1", "r1", "r2"]

    def test_totals_across_accounts(self, accounts, entries):
        """Totals sum the per-account figures."""
        report = reconcile_accounts(accounts, entries, ReconciliationPeriod.for_month(2024, 1))
        totals = report.totals

        assert totals.opening_balance == Decimal("1250.10")
        assert totals.total_received == Decimal("300.34")
        assert totals.total_paid == Decimal("170.00")
        assert totals.calculated_balance == Decimal("1380.44")
        assert totals.transactions_count == 4

    def test_account_subset(self, accounts, entries):
        """Only the requested accounts are reconciled."""
        report = reconcile_accounts(
            accounts, entries, ReconciliationPeriod.for_month(2024, 1), account_ids={"acc-2"}
        )

        assert [r.account_id for r in report.accounts] == ["acc-2"]
        assert report.totals.calculated_balance == Decimal("200.20")

    def test_account_without_movements(self, accounts):
        """An account with no movements keeps its opening balance."""
        report = reconcile_accounts(accounts, [], ReconciliationPeriod.for_year(2024))

        assert report.accounts[0].calculated_balance == Decimal("1000.00")
        assert report.totals.transactions_count == 0

    def test_to_dict(self, accounts, entries):
        """Report serializes amounts as strings."""
        data = reconcile_accounts(accounts, entries, ReconciliationPeriod.for_month(2024, 1)).to_dict()

        assert data["period"] == {"start": "2024-01-01", "end": "2024-01-31"}
        assert data["accounts"][0]["calculated_balance"] == "1180.24"
