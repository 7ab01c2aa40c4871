"""Ledgerflow - cash-flow, projection and reconciliation engine."""

__version__ = "0.1.0"

from ledgerflow.config import configure_logging, get_settings
from ledgerflow.engine import (
    CashFlowReport,
    LedgerSnapshot,
    ProjectionReport,
    compute_cash_flow,
    compute_projection,
    compute_reconciliation,
)
from ledgerflow.errors import DataUnavailable, InputError, LedgerflowError
from ledgerflow.models import (
    DailyBalance,
    Direction,
    EntryStatus,
    FinancialAccount,
    LedgerEntry,
    ProjectedBalance,
    RecurringRule,
)
from ledgerflow.reconciliation import ReconciliationPeriod, ReconciliationReport
from ledgerflow.recurring import preview_materialization
from ledgerflow.service import CashFlowService, ResultCache

__all__ = [
    # Version
    "__version__",
    # Records
    "FinancialAccount",
    "LedgerEntry",
    "RecurringRule",
    "Direction",
    "EntryStatus",
    "DailyBalance",
    "ProjectedBalance",
    # Operations
    "LedgerSnapshot",
    "CashFlowReport",
    "ProjectionReport",
    "ReconciliationPeriod",
    "ReconciliationReport",
    "compute_cash_flow",
    "compute_projection",
    "compute_reconciliation",
    "preview_materialization",
    # Service
    "CashFlowService",
    "ResultCache",
    # Errors
    "LedgerflowError",
    "InputError",
    "DataUnavailable",
    # Config
    "get_settings",
    "configure_logging",
]
