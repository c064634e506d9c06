"""
Ledger Errors
=============

Every rejected transaction raises a `LedgerError` subclass. The `kind`
attribute is the discriminator callers switch on; the HTTP layer maps it
to a status code.

Version: 0.1.0
"""

from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    """Fixed set of transaction failure kinds."""

    NOT_AUTHORIZED = "not_authorized"
    ALREADY_AUTHORIZED = "already_authorized"
    PRODUCT_ALREADY_EXISTS = "product_already_exists"
    PRODUCT_NOT_FOUND = "product_not_found"
    NOT_MANUFACTURER = "not_manufacturer"
    NOT_OWNER = "not_owner"
    WARRANTY_EXPIRED = "warranty_expired"
    INVALID_TRANSFER = "invalid_transfer"
    CLAIM_NOT_PENDING = "claim_not_pending"


class LedgerError(Exception):
    """Base class for rejected ledger transactions."""

    kind: ErrorKind

    def __init__(self, message: str, **details: Any) -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    def __repr__(self) -> str:
        return f"{type(self).__name__}(kind={self.kind.value!r}, message={self.message!r})"


class NotAuthorized(LedgerError):
    """Caller lacks the privilege the operation requires."""

    kind = ErrorKind.NOT_AUTHORIZED


class AlreadyAuthorized(LedgerError):
    kind = ErrorKind.ALREADY_AUTHORIZED


class ProductAlreadyExists(LedgerError):
    kind = ErrorKind.PRODUCT_ALREADY_EXISTS


class ProductNotFound(LedgerError):
    kind = ErrorKind.PRODUCT_NOT_FOUND


class NotManufacturer(LedgerError):
    """Caller is not an authorized manufacturer, or not the bound one."""

    kind = ErrorKind.NOT_MANUFACTURER


class NotOwner(LedgerError):
    kind = ErrorKind.NOT_OWNER


class WarrantyExpired(LedgerError):
    """Reserved. No current operation raises it."""

    kind = ErrorKind.WARRANTY_EXPIRED


class InvalidTransfer(LedgerError):
    """Transfer to the caller itself."""

    kind = ErrorKind.INVALID_TRANSFER


class ClaimNotPending(LedgerError):
    kind = ErrorKind.CLAIM_NOT_PENDING


class InvalidArgument(ValueError):
    """An operation argument is outside its domain (e.g. negative warranty)."""

    code = "invalid_argument"


class LedgerPersistenceError(Exception):
    """Committing a snapshot to durable storage failed."""
