"""
Warranty Ledger Service.

Ledger for product authenticity, ownership and warranty lifecycle.

Key Features:
- Administrator-controlled manufacturer authorization
- Product registration bound to the registering manufacturer
- Append-only ownership transfer history with audit reasons
- Warranty claims with a pending -> resolved lifecycle
- Manufacturer reputation derived from claim resolution
"""

from services.ledger.engine import ProductLedger
from services.ledger.errors import ErrorKind, LedgerError
from services.ledger.models import (
    ClaimStatus,
    ManufacturerStats,
    ProductRecord,
    TransferRecord,
    WarrantyClaim,
    WarrantyStatus,
)

__all__ = [
    "ProductLedger",
    "ErrorKind",
    "LedgerError",
    "ClaimStatus",
    "ManufacturerStats",
    "ProductRecord",
    "TransferRecord",
    "WarrantyClaim",
    "WarrantyStatus",
]
