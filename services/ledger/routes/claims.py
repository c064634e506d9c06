"""
Claims Processing API Endpoints.

Warranty claim filing and manufacturer resolution.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from services.ledger.clock import LedgerClock
from services.ledger.dependencies import get_clock, get_ledger, write_slot
from services.ledger.engine import ProductLedger
from services.ledger.schemas import ClaimFileRequest, ClaimResolveRequest, ClaimResponse
from shared.auth import Principal, get_current_principal


router = APIRouter(prefix="/claims", tags=["claims"])


def _claim_response(ledger: ProductLedger, claim_id: int) -> ClaimResponse:
    claim = ledger.get_claim(claim_id)
    if claim is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Claim {claim_id} not found",
        )
    product = ledger.get_product(claim.product_id)
    stats = ledger.get_stats(product.manufacturer) if product else None
    return ClaimResponse(claim=claim, manufacturer_stats=stats)


@router.post(
    "",
    response_model=ClaimResponse,
    status_code=status.HTTP_201_CREATED,
    summary="File a warranty claim",
)
def file_claim(
    request: ClaimFileRequest,
    caller: Principal = Depends(get_current_principal),
    ledger: ProductLedger = Depends(get_ledger),
    clock: LedgerClock = Depends(get_clock),
) -> ClaimResponse:
    """
    File a warranty claim against a registered product.

    The claim starts pending and counts against the product's manufacturer.
    """
    with write_slot(ledger, clock) as now:
        claim_id = ledger.file_claim(
            caller=caller.id,
            product_id=request.product_id,
            claim_type=request.claim_type,
            claimant_contact=request.claimant_contact,
            now=now,
        )
    return _claim_response(ledger, claim_id)


@router.get(
    "/{claim_id}",
    response_model=ClaimResponse,
    summary="Get claim status",
)
def get_claim(
    claim_id: int,
    ledger: ProductLedger = Depends(get_ledger),
) -> ClaimResponse:
    """Get claim details and current status."""
    return _claim_response(ledger, claim_id)


@router.post(
    "/{claim_id}/resolve",
    response_model=ClaimResponse,
    summary="Resolve a warranty claim",
)
def resolve_claim(
    claim_id: int,
    request: ClaimResolveRequest,
    caller: Principal = Depends(get_current_principal),
    ledger: ProductLedger = Depends(get_ledger),
    clock: LedgerClock = Depends(get_clock),
) -> ClaimResponse:
    """Resolve a pending claim. Only the product's manufacturer may resolve."""
    with write_slot(ledger, clock) as now:
        ledger.resolve_claim(
            caller=caller.id,
            claim_id=claim_id,
            resolution_notes=request.resolution_notes,
            now=now,
        )
    return _claim_response(ledger, claim_id)
