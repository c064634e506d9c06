"""
Product Registry
================

Keyed store of product records. Owns the authenticity flag, the binding
to the registering manufacturer, the current owner and the warranty terms.

Version: 0.1.0
"""

from services.ledger.authorization import AuthorizationRegistry
from services.ledger.errors import InvalidArgument, NotManufacturer, ProductAlreadyExists
from services.ledger.models import (
    TIME_UNITS_PER_MONTH,
    LedgerState,
    ProductRecord,
    ReputationEvent,
    WarrantyStatus,
)
from services.ledger.reputation import ReputationTracker


def warranty_expiry(record: ProductRecord) -> int:
    """First instant at which the product's warranty is no longer active."""
    return record.manufactured_at + record.warranty_months * TIME_UNITS_PER_MONTH


class ProductRegistry:
    """Product table and the read-only queries derived from it."""

    def __init__(
        self,
        state: LedgerState,
        authorization: AuthorizationRegistry,
        reputation: ReputationTracker,
    ) -> None:
        self._state = state
        self._authorization = authorization
        self._reputation = reputation

    def register(
        self,
        caller: str,
        product_id: str,
        model: str,
        serial_number: str,
        warranty_months: int,
        initial_owner: str,
        now: int,
    ) -> ProductRecord:
        """
        Register a new product bound to the calling manufacturer.

        Args:
            caller: Manufacturer principal
            product_id: Caller-supplied globally unique identifier
            model: Product model
            serial_number: Product serial number
            warranty_months: Warranty duration in months
            initial_owner: First owner of the product
            now: Host timestamp; becomes both manufacturing and registration time

        Returns:
            ProductRecord: The stored record

        Raises:
            NotManufacturer: If caller is not an authorized manufacturer
            ProductAlreadyExists: If product_id is taken
            InvalidArgument: If warranty_months is negative
        """
        if not self._authorization.is_authorized(caller):
            raise NotManufacturer(
                f"{caller} is not an authorized manufacturer",
                caller=caller,
            )
        if product_id in self._state.products:
            raise ProductAlreadyExists(
                f"Product {product_id} is already registered",
                product_id=product_id,
            )
        if warranty_months < 0:
            raise InvalidArgument("warranty_months must be non-negative")

        record = ProductRecord(
            product_id=product_id,
            manufacturer=caller,
            owner=initial_owner,
            model=model,
            serial_number=serial_number,
            warranty_months=warranty_months,
            manufactured_at=now,
            registered_at=now,
        )
        self._state.touch("products", product_id)
        self._state.products[product_id] = record
        self._reputation.record_event(caller, ReputationEvent.REGISTER)
        return record

    def get(self, product_id: str) -> ProductRecord | None:
        return self._state.products.get(product_id)

    def is_authentic(self, product_id: str) -> bool:
        """
        Check the product's ledger authenticity.

        A product is authentic when it is registered, its authenticity flag
        is set and its bound manufacturer is currently authorized.
        """
        record = self.get(product_id)
        if record is None:
            return False
        return record.authentic and self._authorization.is_authorized(record.manufacturer)

    def warranty_status(self, product_id: str, now: int) -> WarrantyStatus | None:
        """Active strictly before the expiry boundary, expired from it on."""
        record = self.get(product_id)
        if record is None:
            return None
        if now < warranty_expiry(record):
            return WarrantyStatus.ACTIVE
        return WarrantyStatus.EXPIRED

    def warranty_expires_at(self, product_id: str) -> int | None:
        record = self.get(product_id)
        if record is None:
            return None
        return warranty_expiry(record)
