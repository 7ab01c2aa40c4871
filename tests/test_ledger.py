"""Tests for the date-ordered ledger index."""

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

from conftest import make_entry

from ledgerflow.ledger import LedgerIndex
from ledgerflow.models import Direction, EntryStatus


class TestLedgerIndex:
    def test_expected_and_realized_are_separated(self):
        """Open entries are expected by due date, paid ones realized by payment date."""
        entries = [
            make_entry("o1", "100", Direction.RECEIVE, due_date=date(2024, 1, 3)),
            make_entry("o2", "40", Direction.PAY, due_date=date(2024, 1, 3)),
            make_entry(
                "p1",
                "70",
                Direction.RECEIVE,
                EntryStatus.PAID,
                due_date=date(2024, 1, 1),
                paid_at=datetime(2024, 1, 3, 9, 0),
            ),
        ]

        index = LedgerIndex.build(entries)
        day = index.movements_on(date(2024, 1, 3))

        assert day.expected_income == Decimal("100")
        assert day.expected_expense == Decimal("40")
        assert day.realized_income == Decimal("70")
        assert day.realized_expense == Decimal("0")
        # The paid entry is dated by paid_at, not due_date
        assert index.movements_on(date(2024, 1, 1)).realized_income == Decimal("0")

    def test_days_are_sorted(self):
        """Days are kept in calendar order."""
        entries = [
            make_entry("a", "1", Direction.PAY, due_date=date(2024, 3, 1)),
            make_entry("b", "1", Direction.PAY, due_date=date(2024, 1, 1)),
            make_entry("c", "1", Direction.PAY, due_date=date(2024, 2, 1)),
        ]

        index = LedgerIndex.build(entries)

        assert list(index.days) == [date(2024, 1, 1), date(2024, 2, 1), date(2024, 3, 1)]

    def test_skipped_entries_are_counted(self):
        """Each skip reason is counted in the diagnostics."""
        entries = [
            make_entry("c", "10", Direction.PAY, EntryStatus.CANCELED, due_date=date(2024, 1, 2)),
            make_entry("p", "10", Direction.PAY, EntryStatus.PARTIAL, due_date=date(2024, 1, 2)),
            make_entry("nd", "10", Direction.PAY, EntryStatus.OPEN, due_date=None),
            make_entry("np", "10", Direction.PAY, EntryStatus.PAID, due_date=date(2024, 1, 2)),
            make_entry("u", "10", Direction.PAY, due_date=date(2024, 1, 2), account_id=None),
            make_entry("x", "10", Direction.PAY, due_date=date(2024, 1, 2), account_id="acc-9"),
        ]

        index = LedgerIndex.build(entries, account_ids={"acc-1"})
        diag = index.diagnostics

        assert diag.canceled == 1
        assert diag.partial == 1
        assert diag.missing_due_date == 1
        assert diag.missing_paid_at == 1
        assert diag.unassigned == 1
        assert diag.other_account == 1
        assert diag.total_skipped == 6
        assert index.movements_on(date(2024, 1, 2)).expected_expense == Decimal("0")

    def test_unassigned_entries_kept_without_account_scope(self):
        """Unscoped builds keep entries without an account."""
        entries = [make_entry("u", "10", Direction.PAY, due_date=date(2024, 1, 2), account_id=None)]

        index = LedgerIndex.build(entries)

        assert index.movements_on(date(2024, 1, 2)).expected_expense == Decimal("10")
        assert index.diagnostics.unassigned == 0

    def test_unassigned_entries_kept_when_requested(self):
        """Scoped builds keep entries without an account only on request."""
        entries = [
            make_entry("u", "10", Direction.PAY, due_date=date(2024, 1, 2), account_id=None),
            make_entry("x", "5", Direction.PAY, due_date=date(2024, 1, 2), account_id="closed"),
        ]

        index = LedgerIndex.build(entries, account_ids={"acc-1"}, include_unassigned=True)

        assert index.movements_on(date(2024, 1, 2)).expected_expense == Decimal("10")
        assert index.diagnostics.unassigned == 0
        assert index.diagnostics.other_account == 1

    def test_paid_at_uses_business_timezone(self):
        """Settlement dates follow the business timezone."""
        tz = timezone(timedelta(hours=-3))
        entries = [
            make_entry(
                "p",
                "25",
                Direction.RECEIVE,
                EntryStatus.PAID,
                paid_at=datetime(2024, 1, 5, 1, 0, tzinfo=timezone.utc),
            )
        ]

        index = LedgerIndex.build(entries, tz=tz)

        assert index.movements_on(date(2024, 1, 4)).realized_income == Decimal("25")
        assert index.movements_on(date(2024, 1, 5)).realized_income == Decimal("0")

    def test_has_entry_uses_epsilon(self):
        """Recorded-entry lookup tolerates sub-cent differences."""
        entries = [make_entry("o", "1500.00", Direction.PAY, due_date=date(2024, 4, 30))]
        index = LedgerIndex.build(entries)

        assert index.has_entry(date(2024, 4, 30), Direction.PAY, Decimal("1500.005"))
        assert not index.has_entry(date(2024, 4, 30), Direction.PAY, Decimal("1500.02"))
        assert not index.has_entry(date(2024, 4, 30), Direction.RECEIVE, Decimal("1500.00"))
        assert not index.has_entry(date(2024, 4, 29), Direction.PAY, Decimal("1500.00"))

    def test_canceled_entries_do_not_count_as_recorded(self):
        """Canceled entries never count as recorded."""
        entries = [
            make_entry(
                "c", "1500.00", Direction.PAY, EntryStatus.CANCELED, due_date=date(2024, 4, 30)
            )
        ]
        index = LedgerIndex.build(entries)

        assert not index.has_entry(date(2024, 4, 30), Direction.PAY, Decimal("1500.00"))
