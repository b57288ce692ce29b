"""
Ledger error taxonomy.

Every failure raised by the finance services derives from LedgerError so the
API layer can map it to an HTTP status in one place (see main.py).
"""
from fastapi import status


class LedgerError(Exception):
    """Base class for ledger failures."""
    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class Unauthenticated(LedgerError):
    """A mutating operation was attempted without a signed-in principal."""
    status_code = status.HTTP_401_UNAUTHORIZED


class NotFound(LedgerError):
    """The referenced transaction does not exist in the tenant."""
    status_code = status.HTTP_404_NOT_FOUND


class InvalidState(LedgerError):
    """The stored transaction variant does not match the operation."""
    status_code = status.HTTP_409_CONFLICT


class ConflictError(LedgerError):
    """The caller's version is older than the stored one."""
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, message: str, current_version: int | None = None):
        super().__init__(message)
        self.current_version = current_version


class PersistenceError(LedgerError):
    """The database call failed; nothing from the unit of work was committed."""
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE


class SchemaError(LedgerError):
    """A stored row could not be decoded into its domain type."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
