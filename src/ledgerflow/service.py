"""Service that fetches snapshots from providers and caches computed reports.

The engine itself never performs I/O. This layer gathers the three input
collections concurrently, turns fetch failures into ``DataUnavailable`` and
keeps results in an explicit cache keyed by view parameters. When parameters
change while a computation is in flight, the stale result is discarded and
only the newest request's result is published.
"""

from __future__ import annotations

import asyncio
from collections import OrderedDict
from collections.abc import Hashable
from datetime import date, tzinfo
from typing import Any, Protocol

from ledgerflow.balance import AccountFilter, is_all_accounts, select_accounts
from ledgerflow.config import component_logger, get_settings
from ledgerflow.dates import today_in
from ledgerflow.engine import (
    CashFlowReport,
    LedgerSnapshot,
    ProjectionReport,
    compute_cash_flow,
    compute_projection,
    compute_reconciliation,
    projection_window,
)
from ledgerflow.errors import DataUnavailable, InputError
from ledgerflow.models import FinancialAccount, LedgerEntry, RecurringRule
from ledgerflow.reconciliation import ReconciliationPeriod, ReconciliationReport


class AccountProvider(Protocol):
    async def list_accounts(self) -> list[FinancialAccount]: ...


class LedgerProvider(Protocol):
    async def query(
        self,
        account_filter: AccountFilter,
        start: date | None,
        end: date | None,
    ) -> list[LedgerEntry]:
        """Entries relevant to the range; may return a superset."""
        ...


class RecurringRuleProvider(Protocol):
    async def list_rules(self, account_filter: AccountFilter) -> list[RecurringRule]: ...


def _filter_key(account_filter: AccountFilter) -> Hashable:
    if is_all_accounts(account_filter):
        return "all"
    if isinstance(account_filter, str):
        return (account_filter,)
    return tuple(sorted(account_filter))  # type: ignore[arg-type]


class ResultCache:
    """Least-recently-used cache of computed reports."""

    def __init__(self, maxsize: int = 32):
        self._maxsize = maxsize
        self._data: OrderedDict[Hashable, Any] = OrderedDict()

    def __len__(self) -> int:
        return len(self._data)

    def __contains__(self, key: Hashable) -> bool:
        return key in self._data

    def get(self, key: Hashable) -> Any | None:
        if key not in self._data:
            return None
        self._data.move_to_end(key)
        return self._data[key]

    def put(self, key: Hashable, value: Any) -> None:
        if self._maxsize <= 0:
            return
        self._data[key] = value
        self._data.move_to_end(key)
        while len(self._data) > self._maxsize:
            self._data.popitem(last=False)

    def clear(self) -> None:
        self._data.clear()


class CashFlowService:
    """Fetch, compute and cache cash-flow views."""

    def __init__(
        self,
        accounts: AccountProvider,
        ledger: LedgerProvider,
        rules: RecurringRuleProvider,
        cache_size: int | None = None,
        tz: tzinfo | None = None,
    ):
        settings = get_settings()
        self._accounts = accounts
        self._ledger = ledger
        self._rules = rules
        self._tz = tz or settings.tzinfo
        self._cache = ResultCache(settings.cache_size if cache_size is None else cache_size)
        self._generations: dict[str, int] = {}
        self._latest: dict[str, Any] = {}
        self._logger = component_logger(__name__, "cash_flow_service")

    @property
    def cache(self) -> ResultCache:
        return self._cache

    def latest(self, view: str) -> Any | None:
        """Most recent result published for a view."""
        return self._latest.get(view)

    def invalidate(self) -> None:
        """Drop cached results, e.g. after the ledger was written to."""
        self._cache.clear()
        self._logger.info("cache_invalidated")

    async def cash_flow(
        self, account_filter: AccountFilter, start_date: date, end_date: date
    ) -> CashFlowReport:
        """Reconciled daily table for the window.

        Raises:
            InputError: If the window is inverted.
            DataUnavailable: If no account is selected or a fetch failed.
        """
        if end_date < start_date:
            raise InputError(
                f"End date {end_date.isoformat()} is before start date {start_date.isoformat()}"
            )
        key = ("cash_flow", _filter_key(account_filter), start_date, end_date)
        generation = self._begin("cash_flow")

        report = self._cache.get(key)
        if report is None:
            # History before the window feeds the opening balance
            snapshot = await self._fetch(account_filter, None, end_date, with_rules=False)
            report = compute_cash_flow(snapshot, account_filter, start_date, end_date, self._tz)
            if report is None:
                raise DataUnavailable("No accounts selected", details={"filter": account_filter})
            self._cache.put(key, report)
        return self._publish("cash_flow", generation, report)

    async def projection(
        self,
        account_filter: AccountFilter,
        horizon_months: int | None = None,
        today: date | None = None,
    ) -> ProjectionReport:
        """Forward projection with recurring rules.

        Raises:
            InputError: If the horizon is not positive.
            DataUnavailable: If no account is selected or a fetch failed.
        """
        horizon = get_settings().projection_months if horizon_months is None else horizon_months
        today = today or today_in(self._tz)
        _, end_date = projection_window(today, horizon)
        key = ("projection", _filter_key(account_filter), horizon, today)
        generation = self._begin("projection")

        report = self._cache.get(key)
        if report is None:
            snapshot = await self._fetch(account_filter, None, end_date, with_rules=True)
            report = compute_projection(
                snapshot, account_filter, horizon, today=today, tz=self._tz
            )
            if report is None:
                raise DataUnavailable("No accounts selected", details={"filter": account_filter})
            self._cache.put(key, report)
        return self._publish("projection", generation, report)

    async def reconciliation(
        self, period: ReconciliationPeriod, accounts: AccountFilter = None
    ) -> ReconciliationReport:
        """Per-account reconciliation for the period.

        Raises:
            DataUnavailable: If no active account is selected or a fetch failed.
        """
        key = ("reconciliation", _filter_key(accounts), period.start, period.end)
        generation = self._begin("reconciliation")

        report = self._cache.get(key)
        if report is None:
            snapshot = await self._fetch(accounts, period.start, period.end, with_rules=False)
            report = compute_reconciliation(snapshot, period, accounts, self._tz)
            if not report.accounts:
                raise DataUnavailable("No active accounts to reconcile", details={"filter": accounts})
            self._cache.put(key, report)
        return self._publish("reconciliation", generation, report)

    def _begin(self, view: str) -> int:
        generation = self._generations.get(view, 0) + 1
        self._generations[view] = generation
        return generation

    def _publish(self, view: str, generation: int, report: Any) -> Any:
        if self._generations.get(view) == generation:
            self._latest[view] = report
        else:
            self._logger.info(
                "stale_result_discarded",
                view=view,
                generation=generation,
                current=self._generations.get(view),
            )
        return report

    async def _fetch(
        self,
        account_filter: AccountFilter,
        start: date | None,
        end: date | None,
        with_rules: bool,
    ) -> LedgerSnapshot:
        async def no_rules() -> list[RecurringRule]:
            return []

        try:
            accounts, entries, rules = await asyncio.gather(
                self._accounts.list_accounts(),
                self._ledger.query(account_filter, start, end),
                self._rules.list_rules(account_filter) if with_rules else no_rules(),
            )
        except Exception as e:
            self._logger.error("snapshot_fetch_failed", error=str(e))
            raise DataUnavailable("Failed to fetch ledger snapshot", cause=e) from e

        if not select_accounts(accounts, account_filter):
            raise DataUnavailable("No accounts selected", details={"filter": account_filter})

        self._logger.debug(
            "snapshot_fetched",
            accounts=len(accounts),
            entries=len(entries),
            rules=len(rules),
        )
        return LedgerSnapshot.of(accounts, entries, rules)
