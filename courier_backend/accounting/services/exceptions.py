# accounting/services/exceptions.py

"""
ACCOUNTING SERVICE ERRORS

Centralized domain errors for the ledger engine (accounting, parties, billing).

Every error carries a machine-readable `code` so API callers can tell the
categories apart without parsing messages.
"""

from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    VALIDATION = "validation_error"
    UNBALANCED_ENTRY = "unbalanced_entry"
    INVALID_LINE = "invalid_line"
    NOT_FOUND = "not_found"
    DUPLICATE_CODE = "duplicate_code"
    ALREADY_INITIALIZED = "already_initialized"
    ALREADY_POSTED = "already_posted"
    REFERENCED = "referenced"


class AccountingServiceError(Exception):
    """Base exception for all ledger engine failures."""

    code = ErrorCode.VALIDATION


class LedgerValidationError(AccountingServiceError):
    """Missing required field or malformed amount."""

    code = ErrorCode.VALIDATION


class UnbalancedEntryError(AccountingServiceError):
    """Raised when total debits differ from total credits."""

    code = ErrorCode.UNBALANCED_ENTRY


class InvalidLineError(AccountingServiceError):
    """Raised when a journal line violates the debit-xor-credit rule or omits an account."""

    code = ErrorCode.INVALID_LINE


class NotFoundError(AccountingServiceError):
    code = ErrorCode.NOT_FOUND


class InvoiceNotFoundError(NotFoundError):
    pass


class DuplicateCodeError(AccountingServiceError):
    code = ErrorCode.DUPLICATE_CODE


class AlreadyInitializedError(AccountingServiceError):
    code = ErrorCode.ALREADY_INITIALIZED


class AlreadyPostedError(AccountingServiceError):
    code = ErrorCode.ALREADY_POSTED


class ReferencedError(AccountingServiceError):
    """Raised when a delete (or a category change) is blocked by existing references."""

    code = ErrorCode.REFERENCED
