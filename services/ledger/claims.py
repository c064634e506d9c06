"""
Warranty Claim Ledger
=====================

Claims numbered from 1, each moving pending -> resolved exactly once.

Filing is permissive: anyone may file against a registered
product, whether or not they own it and whether or not its warranty is
still active. Warranty validity is exposed separately through
`ProductRegistry.warranty_status`.

Version: 0.1.0
"""

from services.ledger.errors import ClaimNotPending, NotManufacturer, ProductNotFound
from services.ledger.models import ClaimStatus, LedgerState, ReputationEvent, WarrantyClaim
from services.ledger.products import ProductRegistry
from services.ledger.reputation import ReputationTracker


class WarrantyClaimLedger:
    """Warranty claim table and its state machine."""

    def __init__(
        self,
        state: LedgerState,
        products: ProductRegistry,
        reputation: ReputationTracker,
    ) -> None:
        self._state = state
        self._products = products
        self._reputation = reputation

    def file_claim(
        self,
        caller: str,
        product_id: str,
        claim_type: str,
        claimant_contact: str,
        now: int,
    ) -> int:
        """
        File a pending claim and count it against the product's manufacturer.

        Returns:
            int: The new claim id

        Raises:
            ProductNotFound: If the product is not registered
        """
        record = self._products.get(product_id)
        if record is None:
            raise ProductNotFound(f"Product {product_id} not found", product_id=product_id)

        claim_id = self._state.claim_counter + 1
        self._state.touch("claims", claim_id)
        self._state.claims[claim_id] = WarrantyClaim(
            claim_id=claim_id,
            product_id=product_id,
            claimant=caller,
            claimant_contact=claimant_contact,
            filed_at=now,
            claim_type=claim_type,
        )
        self._state.claim_counter = claim_id
        self._reputation.record_event(record.manufacturer, ReputationEvent.CLAIM)
        return claim_id

    def resolve_claim(
        self,
        caller: str,
        claim_id: int,
        resolution_notes: str,
        now: int,
    ) -> WarrantyClaim:
        """
        Resolve a pending claim as the product's manufacturer.

        Returns:
            WarrantyClaim: The resolved claim

        Raises:
            ProductNotFound: If the claim, or the product it refers to, is missing
            ClaimNotPending: If the claim was already resolved
            NotManufacturer: If caller is not the product's manufacturer
        """
        claim = self._state.claims.get(claim_id)
        if claim is None:
            raise ProductNotFound(f"Claim {claim_id} not found", claim_id=claim_id)
        if not claim.is_pending:
            raise ClaimNotPending(f"Claim {claim_id} is already {claim.status.value}", claim_id=claim_id)

        record = self._products.get(claim.product_id)
        if record is None:
            raise ProductNotFound(
                f"Product {claim.product_id} for claim {claim_id} not found",
                claim_id=claim_id,
                product_id=claim.product_id,
            )
        if record.manufacturer != caller:
            raise NotManufacturer(
                f"{caller} did not manufacture product {record.product_id}",
                claim_id=claim_id,
                caller=caller,
            )

        self._state.touch("claims", claim_id)
        claim.status = ClaimStatus.RESOLVED
        claim.resolved_at = now
        claim.resolution_notes = resolution_notes
        self._reputation.record_event(caller, ReputationEvent.RESOLVE)
        return claim

    def get_claim(self, claim_id: int) -> WarrantyClaim | None:
        return self._state.claims.get(claim_id)

    def claims_for(self, product_id: str) -> list[WarrantyClaim]:
        return [
            c
            for _, c in sorted(self._state.claims.items())
            if c.product_id == product_id
        ]

    def claim_count(self) -> int:
        return self._state.claim_counter
