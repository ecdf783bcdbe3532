"""
Translate ledger exceptions into HTTP errors.

Routers catch LedgerError, roll the session back and raise
whatever http_error() returns. The body carries the error's
machine-readable code next to the message.
"""

from fastapi import HTTPException

from general_ledger.exceptions import (
    ConfigurationError,
    InvalidStateError,
    JurisdictionNotConfiguredError,
    LedgerError,
    NotFoundError,
    StateError,
)


def status_for(error: LedgerError) -> int:
    # Jurisdiction codes arrive in requests, so an unknown one is a lookup miss
    if isinstance(error, (NotFoundError, JurisdictionNotConfiguredError)):
        return 404
    if isinstance(error, (StateError, InvalidStateError)):
        return 409
    if isinstance(error, ConfigurationError):
        return 500
    return 400


def http_error(error: LedgerError) -> HTTPException:
    return HTTPException(
        status_code=status_for(error),
        detail={"code": error.code, "message": str(error)},
    )
