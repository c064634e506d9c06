"""
Ledger Records
==============

Record types for the five ledger stores and the state container that
owns them.

Version: 0.1.0
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr


# One average Gregorian month (30.436875 days) in host time units.
TIME_UNITS_PER_MONTH = 2_629_746

INITIAL_REPUTATION_SCORE = 100

# Journal marker for a row that did not exist before the transaction.
_ABSENT = object()


class ClaimStatus(str, Enum):
    """Warranty claim state. Only pending -> resolved is allowed."""

    PENDING = "pending"
    RESOLVED = "resolved"


class WarrantyStatus(str, Enum):
    """Derived warranty validity."""

    ACTIVE = "active"
    EXPIRED = "expired"


class ReputationEvent(str, Enum):
    """Events that move a manufacturer's counters."""

    REGISTER = "register"
    CLAIM = "claim"
    RESOLVE = "resolve"


class ProductRecord(BaseModel):
    """A registered product bound to its manufacturer."""

    product_id: str
    manufacturer: str
    owner: str
    model: str
    serial_number: str
    warranty_months: int = Field(..., ge=0)
    manufactured_at: int
    registered_at: int
    authentic: bool = True
    claim_count: int = 0


class TransferRecord(BaseModel):
    """One ownership change. Never updated once written."""

    model_config = ConfigDict(frozen=True)

    transfer_id: int
    product_id: str
    from_owner: str
    to_owner: str
    transferred_at: int
    reason: str


class WarrantyClaim(BaseModel):
    """A warranty claim against a product."""

    claim_id: int
    product_id: str
    claimant: str
    claimant_contact: str = ""
    filed_at: int
    claim_type: str
    status: ClaimStatus = ClaimStatus.PENDING
    resolved_at: int | None = None
    resolution_notes: str | None = None

    @property
    def is_pending(self) -> bool:
        return self.status == ClaimStatus.PENDING


class ManufacturerStats(BaseModel):
    """Per-manufacturer counters and the score derived from them."""

    products_registered: int = 0
    total_warranty_claims: int = 0
    resolved_claims: int = 0
    reputation_score: int = INITIAL_REPUTATION_SCORE


class ProductVerification(BaseModel):
    """Read-only verification summary for a product."""

    product: ProductRecord
    authentic: bool
    manufacturer_authorized: bool
    warranty_status: WarrantyStatus
    warranty_expires_at: int
    transfer_count: int
    manufacturer_stats: ManufacturerStats | None = None


class LedgerState(BaseModel):
    """
    All ledger tables plus the monotonic counters.

    Mutations made inside a transaction are journaled per key: callers
    `touch` a row before changing it, and `rollback` puts back the prior
    value of every touched row plus the counters saved by `begin`.
    """

    authorized_manufacturers: dict[str, bool] = Field(default_factory=dict)
    products: dict[str, ProductRecord] = Field(default_factory=dict)
    transfers: dict[int, TransferRecord] = Field(default_factory=dict)
    claims: dict[int, WarrantyClaim] = Field(default_factory=dict)
    manufacturer_stats: dict[str, ManufacturerStats] = Field(default_factory=dict)
    transfer_counter: int = 0
    claim_counter: int = 0
    # Highest `now` committed so far.
    height: int = 0

    _journal: list[tuple[str, Any, Any]] | None = PrivateAttr(default=None)
    _saved_counters: tuple[int, int, int] | None = PrivateAttr(default=None)

    def begin(self) -> None:
        """Start journaling row changes for a new transaction."""
        self._journal = []
        self._saved_counters = (self.transfer_counter, self.claim_counter, self.height)

    def touch(self, table: str, key: Any) -> None:
        """Record the current value of `table[key]` before it is modified."""
        if self._journal is None:
            return
        previous = getattr(self, table).get(key, _ABSENT)
        if isinstance(previous, BaseModel):
            previous = previous.model_copy()
        self._journal.append((table, key, previous))

    def rollback(self) -> None:
        """Undo every journaled change, newest first."""
        for table, key, previous in reversed(self._journal or []):
            rows = getattr(self, table)
            if previous is _ABSENT:
                rows.pop(key, None)
            else:
                rows[key] = previous
        if self._saved_counters is not None:
            self.transfer_counter, self.claim_counter, self.height = self._saved_counters
        self.commit()

    def commit(self) -> None:
        """Discard the journal; journaled changes become permanent."""
        self._journal = None
        self._saved_counters = None
