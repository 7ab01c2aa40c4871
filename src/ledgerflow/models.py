"""Domain records read by the engine and the daily series it produces."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, tzinfo
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any

from ledgerflow.dates import clamp_day, month_end, parse_date, to_business_date
from ledgerflow.errors import InputError

ZERO = Decimal("0")


class Direction(str, Enum):
    """Whether money comes in or goes out."""

    RECEIVE = "RECEIVE"
    PAY = "PAY"

    @property
    def sign(self) -> int:
        return 1 if self is Direction.RECEIVE else -1


class EntryStatus(str, Enum):
    """Settlement status of a ledger entry."""

    OPEN = "OPEN"
    PAID = "PAID"
    PARTIAL = "PARTIAL"
    CANCELED = "CANCELED"


class AccountType(str, Enum):
    """Kind of financial account."""

    BANK = "bank"
    CASH = "cash"
    OTHER = "other"


def to_decimal(value: Any, field_name: str = "amount") -> Decimal:
    """Convert a raw numeric value to Decimal; missing values are zero."""
    if value is None or value == "":
        return ZERO
    try:
        result = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError) as exc:
        raise InputError(f"Invalid {field_name}: {value!r}") from exc
    if not result.is_finite():
        raise InputError(f"Invalid {field_name}: {value!r}")
    return result


_TRUE_STRINGS = frozenset({"true", "t", "yes", "y", "1"})
_FALSE_STRINGS = frozenset({"false", "f", "no", "n", "0"})


def _to_bool(value: Any, field_name: str, default: bool = True) -> bool:
    if value is None or value == "":
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    text = str(value).strip().lower()
    if text in _TRUE_STRINGS:
        return True
    if text in _FALSE_STRINGS:
        return False
    raise InputError(f"Invalid {field_name}: {value!r}")


def _to_enum(enum_cls: type[Enum], value: Any, field_name: str, default: Enum | None = None) -> Any:
    if value is None or value == "":
        if default is None:
            raise InputError(f"Missing {field_name}")
        return default
    if isinstance(value, enum_cls):
        return value
    text = str(value).strip()
    for member in enum_cls:
        if member.value.lower() == text.lower():
            return member
    raise InputError(f"Invalid {field_name}: {value!r}")


def _to_date(value: Any, field_name: str, required: bool = False) -> date | None:
    result = to_business_date(value)
    if result is None and required:
        raise InputError(f"Missing {field_name}")
    return result


def _optional_str(value: Any) -> str | None:
    return None if value is None or value == "" else str(value)


@dataclass(frozen=True)
class FinancialAccount:
    """Bank, cash or other account holding a configured opening balance."""

    id: str
    name: str
    opening_balance: Decimal
    opening_balance_date: date
    is_active: bool = True
    bank_name: str | None = None
    account_type: AccountType = AccountType.BANK

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> FinancialAccount:
        """Build an account from a raw backend row."""
        if not record.get("id"):
            raise InputError("Account record without id", details=record)
        return cls(
            id=str(record["id"]),
            name=str(record.get("name") or record["id"]),
            opening_balance=to_decimal(record.get("opening_balance"), "opening_balance"),
            opening_balance_date=_to_date(  # type: ignore[arg-type]
                record.get("opening_balance_date"), "opening_balance_date", required=True
            ),
            is_active=_to_bool(record.get("is_active"), "is_active"),
            bank_name=_optional_str(record.get("bank_name")),
            account_type=_to_enum(
                AccountType, record.get("account_type"), "account_type", AccountType.BANK
            ),
        )


@dataclass(frozen=True)
class LedgerEntry:
    """A single payable or receivable."""

    id: str
    amount: Decimal
    direction: Direction
    status: EntryStatus = EntryStatus.OPEN
    due_date: date | None = None
    paid_at: date | datetime | None = None
    account_id: str | None = None
    description: str | None = None

    def __post_init__(self) -> None:
        if not self.amount.is_finite() or self.amount < 0:
            raise InputError(f"Ledger entry {self.id} has an invalid amount")

    @property
    def signed_amount(self) -> Decimal:
        return self.amount * self.direction.sign

    @property
    def is_realized(self) -> bool:
        """Settled entries: PAID with a settlement timestamp."""
        return self.status is EntryStatus.PAID and self.paid_at is not None

    @property
    def is_expected(self) -> bool:
        """Open entries with a due date."""
        return self.status is EntryStatus.OPEN and self.due_date is not None

    def paid_on(self, tz: tzinfo | None = None) -> date | None:
        """Business date of settlement."""
        return to_business_date(self.paid_at, tz)

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> LedgerEntry:
        """Build an entry from a raw backend row."""
        if not record.get("id"):
            raise InputError("Ledger record without id", details=record)
        account_id = record.get("account_id", record.get("financial_account_id"))
        return cls(
            id=str(record["id"]),
            amount=to_decimal(record.get("amount")),
            direction=_to_enum(Direction, record.get("direction"), "direction"),
            status=_to_enum(EntryStatus, record.get("status"), "status", EntryStatus.OPEN),
            due_date=_to_date(record.get("due_date"), "due_date"),
            paid_at=parse_date(record.get("paid_at")),
            account_id=_optional_str(account_id),
            description=_optional_str(record.get("description")),
        )


@dataclass(frozen=True)
class RecurringRule:
    """Monthly recurring charge or income anchored on a day of month."""

    id: str
    amount: Decimal
    direction: Direction
    day_of_month: int
    start_date: date
    end_date: date | None = None
    is_active: bool = True
    account_id: str | None = None
    description: str = ""
    last_generated_month: date | None = None

    def __post_init__(self) -> None:
        if not 1 <= self.day_of_month <= 31:
            raise InputError(
                f"Recurring rule {self.id} has day_of_month {self.day_of_month} outside 1-31"
            )
        if not self.amount.is_finite() or self.amount < 0:
            raise InputError(f"Recurring rule {self.id} has an invalid amount")

    def is_active_in_month(self, first_day: date) -> bool:
        """True if the rule's validity window overlaps the given month."""
        if self.start_date > month_end(first_day):
            return False
        if self.end_date is not None and self.end_date < first_day:
            return False
        return True

    def due_date_in(self, year: int, month: int) -> date:
        """Occurrence date for the month, clamped to the month length."""
        return clamp_day(year, month, self.day_of_month)

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> RecurringRule:
        """Build a rule from a raw backend row."""
        if not record.get("id"):
            raise InputError("Recurring rule record without id", details=record)
        try:
            day_of_month = int(record.get("day_of_month") or 0)
        except (TypeError, ValueError) as exc:
            raise InputError(f"Invalid day_of_month: {record.get('day_of_month')!r}") from exc
        account_id = record.get("account_id", record.get("financial_account_id"))
        return cls(
            id=str(record["id"]),
            amount=to_decimal(record.get("amount")),
            direction=_to_enum(Direction, record.get("direction"), "direction"),
            day_of_month=day_of_month,
            start_date=_to_date(record.get("start_date"), "start_date", required=True),  # type: ignore[arg-type]
            end_date=_to_date(record.get("end_date"), "end_date"),
            is_active=_to_bool(record.get("is_active"), "is_active"),
            account_id=_optional_str(account_id),
            description=str(record.get("description") or ""),
            last_generated_month=_to_date(record.get("last_generated_month"), "last_generated_month"),
        )


@dataclass(frozen=True)
class DailyBalance:
    """One day of the reconciled cash-flow table."""

    date: date
    opening_balance: Decimal
    expected_income: Decimal
    expected_expense: Decimal
    realized_income: Decimal
    realized_expense: Decimal
    expected_closing: Decimal
    realized_closing: Decimal

    def to_dict(self) -> dict[str, Any]:
        """Serialize for reporting layers."""
        return {
            "date": self.date.isoformat(),
            "opening_balance": str(self.opening_balance),
            "expected_income": str(self.expected_income),
            "expected_expense": str(self.expected_expense),
            "realized_income": str(self.realized_income),
            "realized_expense": str(self.realized_expense),
            "expected_closing": str(self.expected_closing),
            "realized_closing": str(self.realized_closing),
        }


@dataclass(frozen=True)
class ProjectedBalance:
    """One day of the forward projection."""

    date: date
    opening_balance: Decimal
    income: Decimal
    expense: Decimal
    closing_balance: Decimal
    is_projected: bool
    has_negative_balance: bool

    def to_dict(self) -> dict[str, Any]:
        """Serialize for reporting layers."""
        return {
            "date": self.date.isoformat(),
            "opening_balance": str(self.opening_balance),
            "income": str(self.income),
            "expense": str(self.expense),
            "closing_balance": str(self.closing_balance),
            "is_projected": self.is_projected,
            "has_negative_balance": self.has_negative_balance,
        }
