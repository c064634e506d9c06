"""
Transfer Ledger
===============

Append-only history of ownership changes, numbered from 1. Appending a
transfer and moving the product's owner happen in the same transaction.

Version: 0.1.0
"""

from services.ledger.errors import InvalidTransfer, NotAuthorized, NotOwner, ProductNotFound
from services.ledger.models import LedgerState, TransferRecord
from services.ledger.products import ProductRegistry


class TransferLedger:
    """Ownership transfer history."""

    def __init__(self, state: LedgerState, products: ProductRegistry) -> None:
        self._state = state
        self._products = products

    def transfer(
        self,
        caller: str,
        product_id: str,
        new_owner: str,
        reason: str,
        now: int,
    ) -> int:
        """
        Move a product from its current owner to `new_owner`.

        Args:
            caller: Principal submitting the transfer; must be the owner
            product_id: Product to transfer
            new_owner: Receiving principal
            reason: Free-text reason kept in the audit trail
            now: Host timestamp

        Returns:
            int: The new transfer id

        Raises:
            InvalidTransfer: If new_owner is the caller
            ProductNotFound: If the product is not registered
            NotOwner: If caller is not the current owner
            NotAuthorized: If the product is no longer authentic
        """
        if new_owner == caller:
            raise InvalidTransfer(
                "Cannot transfer a product to its current holder",
                product_id=product_id,
                caller=caller,
            )

        record = self._products.get(product_id)
        if record is None:
            raise ProductNotFound(f"Product {product_id} not found", product_id=product_id)
        if record.owner != caller:
            raise NotOwner(
                f"{caller} does not own product {product_id}",
                product_id=product_id,
                caller=caller,
            )
        if not self._products.is_authentic(product_id):
            raise NotAuthorized(
                f"Product {product_id} failed authenticity check",
                product_id=product_id,
            )

        transfer_id = self._state.transfer_counter + 1
        self._state.touch("transfers", transfer_id)
        self._state.touch("products", product_id)
        self._state.transfers[transfer_id] = TransferRecord(
            transfer_id=transfer_id,
            product_id=product_id,
            from_owner=caller,
            to_owner=new_owner,
            transferred_at=now,
            reason=reason,
        )
        record.owner = new_owner
        self._state.transfer_counter = transfer_id
        return transfer_id

    def get_transfer(self, transfer_id: int) -> TransferRecord | None:
        return self._state.transfers.get(transfer_id)

    def transfers_for(self, product_id: str) -> list[TransferRecord]:
        """The product's ownership chain, oldest first."""
        return [
            t
            for _, t in sorted(self._state.transfers.items())
            if t.product_id == product_id
        ]

    def transfer_count(self) -> int:
        return self._state.transfer_counter
