"""
Product Ledger Engine
=====================

State-transition engine over the five ledger stores:

- manufacturer authorization
- product records
- transfer history
- warranty claims
- manufacturer statistics

Every public mutation runs as one transaction: it executes under a single
process-wide lock, a failed check or write rolls the touched rows and the
counters back to their pre-transaction values, and a successful one is
committed to the snapshot store before the lock is released. `caller` and `now` are explicit
arguments; the engine reads no ambient identity or clock.

Version: 0.1.0
"""

import threading
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from services.ledger.authorization import AuthorizationRegistry
from services.ledger.claims import WarrantyClaimLedger
from services.ledger.errors import InvalidArgument, LedgerError
from services.ledger.models import (
    LedgerState,
    ManufacturerStats,
    ProductRecord,
    ProductVerification,
    TransferRecord,
    WarrantyClaim,
    WarrantyStatus,
)
from services.ledger.persistence import MemorySnapshotStore, SnapshotStore
from services.ledger.products import ProductRegistry
from services.ledger.reputation import ReputationTracker
from services.ledger.transfers import TransferLedger
from shared.logging import get_logger, transaction_context


logger = get_logger(__name__)


class ProductLedger:
    """
    Authenticity, ownership and warranty ledger.

    All stores are mutated only through the methods of this class.
    """

    def __init__(
        self,
        administrator: str,
        store: SnapshotStore | None = None,
    ) -> None:
        """
        Initialize the ledger, restoring the last committed snapshot if any.

        Args:
            administrator: Principal allowed to authorize manufacturers
            store: Durable snapshot storage (in-memory when omitted)
        """
        self.administrator = administrator
        self.store = store or MemorySnapshotStore()
        self._lock = threading.RLock()
        self._state = self.store.load() or LedgerState()

        self._reputation = ReputationTracker(self._state)
        self._authorization = AuthorizationRegistry(self._state, administrator, self._reputation)
        self._products = ProductRegistry(self._state, self._authorization, self._reputation)
        self._transfers = TransferLedger(self._state, self._products)
        self._claims = WarrantyClaimLedger(self._state, self._products, self._reputation)

        logger.debug(
            "ledger_initialized",
            store=self.store.get_uri(),
            manufacturers=len(self._state.authorized_manufacturers),
            products=len(self._state.products),
        )

    @contextmanager
    def _transaction(self, operation: str, caller: str, now: int | None = None, **context: Any) -> Iterator[None]:
        with self._lock, transaction_context(operation, caller):
            self._state.begin()
            try:
                yield
                if now is not None:
                    self._state.height = max(self._state.height, now)
                self.store.save(self._state)
                self._state.commit()
            except (LedgerError, InvalidArgument) as e:
                self._state.rollback()
                logger.warning(
                    "ledger_transaction_rejected",
                    error_kind=e.kind.value if isinstance(e, LedgerError) else InvalidArgument.code,
                    error=str(e),
                    **context,
                )
                raise
            except Exception as e:
                self._state.rollback()
                logger.error(
                    "ledger_transaction_failed",
                    error=str(e),
                    error_type=type(e).__name__,
                    **context,
                )
                raise

    @contextmanager
    def locked(self) -> Iterator[None]:
        """
        Hold the ledger lock across several calls.

        The lock is reentrant, so ledger methods may be called inside.
        """
        with self._lock:
            yield

    # =========================================================================
    # Authorization
    # =========================================================================

    def authorize_manufacturer(self, caller: str, candidate: str) -> ManufacturerStats:
        """Authorize `candidate` as a manufacturer. Administrator only."""
        with self._transaction("authorize_manufacturer", caller, candidate=candidate):
            stats = self._authorization.authorize(caller, candidate)
        logger.info("manufacturer_authorized", manufacturer=candidate, caller=caller)
        return stats.model_copy()

    def is_authorized(self, candidate: str) -> bool:
        with self._lock:
            return self._authorization.is_authorized(candidate)

    def manufacturers(self) -> list[str]:
        with self._lock:
            return self._authorization.manufacturers()

    # =========================================================================
    # Products
    # =========================================================================

    def register_product(
        self,
        caller: str,
        product_id: str,
        model: str,
        serial_number: str,
        warranty_months: int,
        initial_owner: str,
        now: int,
    ) -> ProductRecord:
        """Register a product bound to the calling manufacturer."""
        with self._transaction("register_product", caller, now, product_id=product_id):
            record = self._products.register(
                caller,
                product_id,
                model,
                serial_number,
                warranty_months,
                initial_owner,
                now,
            )
        logger.info(
            "product_registered",
            product_id=product_id,
            manufacturer=caller,
            owner=initial_owner,
            warranty_months=warranty_months,
            now=now,
        )
        return record.model_copy()

    def get_product(self, product_id: str) -> ProductRecord | None:
        with self._lock:
            record = self._products.get(product_id)
            return record.model_copy() if record else None

    def is_authentic(self, product_id: str) -> bool:
        with self._lock:
            return self._products.is_authentic(product_id)

    def warranty_status(self, product_id: str, now: int) -> WarrantyStatus | None:
        with self._lock:
            return self._products.warranty_status(product_id, now)

    def verify_product(self, product_id: str, now: int) -> ProductVerification | None:
        """Summarize a product's authenticity, warranty and provenance."""
        with self._lock:
            record = self._products.get(product_id)
            if record is None:
                return None
            stats = self._reputation.get_stats(record.manufacturer)
            return ProductVerification(
                product=record.model_copy(),
                authentic=self._products.is_authentic(product_id),
                manufacturer_authorized=self._authorization.is_authorized(record.manufacturer),
                warranty_status=self._products.warranty_status(product_id, now),
                warranty_expires_at=self._products.warranty_expires_at(product_id),
                transfer_count=len(self._transfers.transfers_for(product_id)),
                manufacturer_stats=stats.model_copy() if stats else None,
            )

    # =========================================================================
    # Transfers
    # =========================================================================

    def transfer_ownership(
        self,
        caller: str,
        product_id: str,
        new_owner: str,
        reason: str,
        now: int,
    ) -> int:
        """Transfer a product to `new_owner`; returns the transfer id."""
        with self._transaction("transfer_ownership", caller, now, product_id=product_id):
            transfer_id = self._transfers.transfer(caller, product_id, new_owner, reason, now)
        logger.info(
            "ownership_transferred",
            transfer_id=transfer_id,
            product_id=product_id,
            from_owner=caller,
            to_owner=new_owner,
            now=now,
        )
        return transfer_id

    def get_transfer(self, transfer_id: int) -> TransferRecord | None:
        with self._lock:
            return self._transfers.get_transfer(transfer_id)

    def product_transfers(self, product_id: str) -> list[TransferRecord]:
        with self._lock:
            return self._transfers.transfers_for(product_id)

    def transfer_count(self) -> int:
        with self._lock:
            return self._transfers.transfer_count()

    # =========================================================================
    # Warranty Claims
    # =========================================================================

    def file_claim(
        self,
        caller: str,
        product_id: str,
        claim_type: str,
        claimant_contact: str,
        now: int,
    ) -> int:
        """File a warranty claim; returns the claim id."""
        with self._transaction("file_claim", caller, now, product_id=product_id):
            claim_id = self._claims.file_claim(caller, product_id, claim_type, claimant_contact, now)
        logger.info(
            "warranty_claim_filed",
            claim_id=claim_id,
            product_id=product_id,
            claimant=caller,
            claim_type=claim_type,
            now=now,
        )
        return claim_id

    def resolve_claim(
        self,
        caller: str,
        claim_id: int,
        resolution_notes: str,
        now: int,
    ) -> WarrantyClaim:
        """Resolve a pending claim as the product's manufacturer."""
        with self._transaction("resolve_claim", caller, now, claim_id=claim_id):
            claim = self._claims.resolve_claim(caller, claim_id, resolution_notes, now)
            stats = self._reputation.get_stats(caller)
        logger.info(
            "warranty_claim_resolved",
            claim_id=claim_id,
            product_id=claim.product_id,
            manufacturer=caller,
            reputation_score=stats.reputation_score if stats else None,
            now=now,
        )
        return claim.model_copy()

    def get_claim(self, claim_id: int) -> WarrantyClaim | None:
        with self._lock:
            claim = self._claims.get_claim(claim_id)
            return claim.model_copy() if claim else None

    def product_claims(self, product_id: str) -> list[WarrantyClaim]:
        with self._lock:
            return [c.model_copy() for c in self._claims.claims_for(product_id)]

    def claim_count(self) -> int:
        with self._lock:
            return self._claims.claim_count()

    # =========================================================================
    # Reputation
    # =========================================================================

    def get_stats(self, manufacturer: str) -> ManufacturerStats | None:
        with self._lock:
            stats = self._reputation.get_stats(manufacturer)
            return stats.model_copy() if stats else None

    # =========================================================================
    # Host Metadata
    # =========================================================================

    @property
    def height(self) -> int:
        """Highest `now` committed so far."""
        with self._lock:
            return self._state.height

    def health_check(self) -> dict[str, Any]:
        with self._lock:
            return {
                "status": "healthy",
                "store": self.store.get_uri(),
                "height": self._state.height,
                "manufacturers": len(self._state.authorized_manufacturers),
                "products": len(self._state.products),
                "transfers": self._state.transfer_counter,
                "claims": self._state.claim_counter,
            }
