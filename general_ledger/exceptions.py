"""
Typed exceptions for the ledger.

Callers catch by class, not by message text. Every exception
carries a machine-readable ``code`` so the HTTP layer (or any
other collaborator) can translate it without parsing strings.

    LedgerError
    +-- ValidationError
    |   +-- UnbalancedEntryError
    |   +-- EmptyEntryError
    |   +-- AllocationMismatchError
    |   +-- DuplicateCodeError
    |   +-- InvalidStateError
    |   +-- InvalidDateRangeError
    |   +-- InactiveAccountError
    +-- NotFoundError
    +-- ConfigurationError
    |   +-- AccountCodeNotConfiguredError
    |   +-- JurisdictionNotConfiguredError
    +-- StateError
        +-- AlreadyPostedError
        +-- AlreadyReversedError
        +-- NotPostedError
        +-- HasOpenTransactionsError

LedgerError subclasses ValueError so code that only knows
about ValueError keeps working.
"""

from decimal import Decimal


class LedgerError(ValueError):
    code: str = "LEDGER_ERROR"


# --- Validation errors (caller input) ---

class ValidationError(LedgerError):
    code = "VALIDATION_ERROR"


class UnbalancedEntryError(ValidationError):
    code = "UNBALANCED_ENTRY"

    def __init__(self, total_debits: Decimal, total_credits: Decimal):
        self.total_debits = total_debits
        self.total_credits = total_credits
        super().__init__(
            f"Journal entry does not balance: "
            f"debits={total_debits}, credits={total_credits}"
        )


class EmptyEntryError(ValidationError):
    code = "EMPTY_ENTRY"


class AllocationMismatchError(ValidationError):
    code = "ALLOCATION_MISMATCH"


class DuplicateCodeError(ValidationError):
    code = "DUPLICATE_CODE"

    def __init__(self, account_code: str):
        self.account_code = account_code
        super().__init__(f"Account with code '{account_code}' already exists")


class InvalidStateError(ValidationError):
    code = "INVALID_STATE"


class InvalidDateRangeError(ValidationError):
    code = "INVALID_DATE_RANGE"


class InactiveAccountError(ValidationError):
    code = "INACTIVE_ACCOUNT"

    def __init__(self, account_code: str):
        self.account_code = account_code
        super().__init__(f"Account {account_code} is not active")


# --- Lookup errors ---

class NotFoundError(LedgerError):
    code = "NOT_FOUND"

    def __init__(self, kind: str, key):
        self.kind = kind
        self.key = key
        super().__init__(f"{kind} {key} not found")


class ConfigurationError(LedgerError):
    code = "CONFIGURATION_ERROR"


class AccountCodeNotConfiguredError(ConfigurationError):
    """A workflow needs a well-known account that is not in the chart."""

    code = "ACCOUNT_CODE_NOT_CONFIGURED"

    def __init__(self, account_code: str, role: str | None = None):
        self.account_code = account_code
        self.role = role
        label = f" ({role})" if role else ""
        super().__init__(
            f"Account code {account_code}{label} is not configured "
            f"in the chart of accounts"
        )


class JurisdictionNotConfiguredError(ConfigurationError):
    code = "JURISDICTION_NOT_CONFIGURED"


# --- State errors ---

class StateError(LedgerError):
    code = "STATE_ERROR"


class AlreadyPostedError(StateError):
    code = "ALREADY_POSTED"


class AlreadyReversedError(StateError):
    code = "ALREADY_REVERSED"


class NotPostedError(StateError):
    code = "NOT_POSTED"


class HasOpenTransactionsError(StateError):
    code = "HAS_OPEN_TRANSACTIONS"
