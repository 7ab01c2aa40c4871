"""Opening balance entering a computation window."""

from __future__ import annotations

from collections.abc import Collection, Iterable, Sequence
from datetime import date, tzinfo
from decimal import Decimal

import structlog

from ledgerflow.models import EntryStatus, FinancialAccount, LedgerEntry

logger = structlog.get_logger(__name__)

ALL_ACCOUNTS = "all"

AccountFilter = str | Collection[str] | None


def is_all_accounts(account_filter: AccountFilter) -> bool:
    return account_filter is None or account_filter == ALL_ACCOUNTS


def select_accounts(
    accounts: Iterable[FinancialAccount], account_filter: AccountFilter = None
) -> list[FinancialAccount]:
    """Resolve an account filter to the accounts it covers.

    ``None`` or ``"all"`` selects every active account. A single id or a
    collection of ids selects exactly those accounts, active or not.
    """
    if is_all_accounts(account_filter):
        return [acc for acc in accounts if acc.is_active]
    if isinstance(account_filter, str):
        wanted: Collection[str] = {account_filter}
    else:
        wanted = set(account_filter)  # type: ignore[arg-type]
    return [acc for acc in accounts if acc.id in wanted]


def in_scope(
    account_id: str | None,
    account_ids: Collection[str],
    include_unassigned: bool = False,
) -> bool:
    """Whether a record booked on ``account_id`` belongs to the selection."""
    if account_id is None:
        return include_unassigned
    return account_id in account_ids


def opening_balance_before(
    accounts: Sequence[FinancialAccount],
    entries: Iterable[LedgerEntry],
    window_start: date,
    tz: tzinfo | None = None,
    account_ids: Collection[str] | None = None,
    include_unassigned: bool = False,
) -> Decimal | None:
    """Balance of the selected accounts as of the instant before ``window_start``.

    Sums the opening balances and every realized movement dated between the
    earliest opening-balance date and the day before the window.

    Args:
        accounts: The selected accounts.
        entries: Ledger entries supplied by the caller.
        window_start: First day of the window.
        tz: Business timezone used to date ``paid_at`` timestamps.
        account_ids: Restrict movements to these accounts. ``None`` keeps
            every entry the caller supplied.
        include_unassigned: Keep entries without an account when
            ``account_ids`` is set.

    Returns:
        The carried balance, or None if no account is selected.
    """
    if not accounts:
        return None

    base = sum((acc.opening_balance for acc in accounts), Decimal("0"))
    earliest = min(acc.opening_balance_date for acc in accounts)

    movement = Decimal("0")
    counted = 0
    for entry in entries:
        if entry.status is not EntryStatus.PAID or entry.paid_at is None:
            continue
        if account_ids is not None and not in_scope(
            entry.account_id, account_ids, include_unassigned
        ):
            continue
        paid_on = entry.paid_on(tz)
        if paid_on is None or not (earliest <= paid_on < window_start):
            continue
        movement += entry.signed_amount
        counted += 1

    logger.debug(
        "opening_balance_computed",
        window_start=window_start.isoformat(),
        accounts=len(accounts),
        base=str(base),
        movements=counted,
    )
    return base + movement
