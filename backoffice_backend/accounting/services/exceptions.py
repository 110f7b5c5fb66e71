# accounting/services/exceptions.py

"""
ACCOUNTING SERVICE ERRORS

Centralized domain errors for the ledger core.

Every error carries a stable `code` so API callers can tell the operator
whether to fix the date, the account configuration, or the amounts.
"""


class AccountingServiceError(Exception):
    """Base exception for all accounting service failures."""

    code = "accounting_error"


class LedgerValidationError(AccountingServiceError):
    """Malformed input: missing account, negative amount, both sides set."""

    code = "validation_error"


class UnbalancedEntryError(AccountingServiceError):
    """Raised when total debits and total credits differ beyond tolerance."""

    code = "unbalanced_entry"


class PeriodClosedError(AccountingServiceError):
    """Raised when the entry date falls in a locked year or month."""

    code = "period_closed"


class ConfigurationError(AccountingServiceError):
    """Raised when a required mapped account is missing from the directory."""

    code = "configuration_error"


class NotFoundError(AccountingServiceError):
    code = "not_found"


class AlreadyReversedError(AccountingServiceError):
    code = "already_reversed"


class ReferencedError(AccountingServiceError):
    """Raised when deleting something that is still in use."""

    code = "referenced"


class ConflictError(AccountingServiceError):
    """Raised when a state transition would violate a ledger invariant."""

    code = "conflict"


class IdempotencyError(ConflictError):
    """Raised when a source document already has a journal entry."""

    code = "duplicate_reference"


class OrphanIntegrityError(AccountingServiceError):
    """Raised when a document would be committed without a journal entry."""

    code = "orphan_integrity"
