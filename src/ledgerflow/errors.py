"""Exception types raised by Ledgerflow."""

from typing import Any


class LedgerflowError(Exception):
    """Base exception for Ledgerflow errors."""

    def __init__(self, message: str, details: Any = None):
        super().__init__(message)
        self.details = details


class InputError(LedgerflowError, ValueError):
    """Parameters or records were rejected before computation began."""

    pass


class DataUnavailable(LedgerflowError):
    """No accounts were selected or the snapshot could not be fetched."""

    def __init__(self, message: str, cause: BaseException | None = None, details: Any = None):
        super().__init__(message, details=details)
        self.cause = cause
