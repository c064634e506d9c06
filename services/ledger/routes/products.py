"""
Product API Endpoints.

Product registration, authenticity verification, warranty status and
ownership transfer.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status

from services.ledger.clock import LedgerClock
from services.ledger.dependencies import get_clock, get_ledger, write_slot
from services.ledger.engine import ProductLedger
from services.ledger.models import ProductRecord, ProductVerification, TransferRecord, WarrantyClaim
from services.ledger.schemas import (
    ProductRegisterRequest,
    TransferRequest,
    TransferResponse,
    WarrantyStatusResponse,
)
from shared.auth import Principal, get_current_principal


router = APIRouter(prefix="/products", tags=["products"])


def _not_found(product_id: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Product {product_id} not found",
    )


@router.post(
    "",
    response_model=ProductRecord,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new product",
)
def register_product(
    request: ProductRegisterRequest,
    caller: Principal = Depends(get_current_principal),
    ledger: ProductLedger = Depends(get_ledger),
    clock: LedgerClock = Depends(get_clock),
) -> ProductRecord:
    """
    Register a product as the calling manufacturer.

    The product is permanently bound to the caller.
    """
    with write_slot(ledger, clock) as now:
        return ledger.register_product(
            caller=caller.id,
            product_id=request.product_id,
            model=request.model,
            serial_number=request.serial_number,
            warranty_months=request.warranty_months,
            initial_owner=request.initial_owner,
            now=now,
        )


@router.get(
    "/{product_id}",
    response_model=ProductRecord,
    summary="Get product by ID",
)
def get_product(
    product_id: str,
    ledger: ProductLedger = Depends(get_ledger),
) -> ProductRecord:
    """Get a product record."""
    record = ledger.get_product(product_id)
    if record is None:
        raise _not_found(product_id)
    return record


@router.get(
    "/{product_id}/verification",
    response_model=ProductVerification,
    summary="Verify product authenticity",
)
def verify_product(
    product_id: str,
    ledger: ProductLedger = Depends(get_ledger),
    clock: LedgerClock = Depends(get_clock),
) -> ProductVerification:
    """Authenticity, warranty and provenance summary for a product."""
    verification = ledger.verify_product(product_id, clock.now())
    if verification is None:
        raise _not_found(product_id)
    return verification


@router.get(
    "/{product_id}/warranty",
    response_model=WarrantyStatusResponse,
    summary="Get warranty status",
)
def get_warranty_status(
    product_id: str,
    as_of: int | None = Query(None, ge=0, description="Evaluate at this timestamp instead of now"),
    ledger: ProductLedger = Depends(get_ledger),
    clock: LedgerClock = Depends(get_clock),
) -> WarrantyStatusResponse:
    """Whether the product's warranty is active."""
    now = clock.now() if as_of is None else as_of
    verification = ledger.verify_product(product_id, now)
    if verification is None:
        raise _not_found(product_id)
    return WarrantyStatusResponse(
        product_id=product_id,
        status=verification.warranty_status,
        as_of=now,
        expires_at=verification.warranty_expires_at,
    )


@router.post(
    "/{product_id}/transfer",
    response_model=TransferResponse,
    summary="Transfer product ownership",
)
def transfer_product(
    product_id: str,
    request: TransferRequest,
    caller: Principal = Depends(get_current_principal),
    ledger: ProductLedger = Depends(get_ledger),
    clock: LedgerClock = Depends(get_clock),
) -> TransferResponse:
    """
    Transfer the product from the caller to a new owner.

    Records the transfer in the append-only history.
    """
    with write_slot(ledger, clock) as now:
        transfer_id = ledger.transfer_ownership(
            caller=caller.id,
            product_id=product_id,
            new_owner=request.new_owner,
            reason=request.reason,
            now=now,
        )
    return TransferResponse(
        transfer_id=transfer_id,
        transfer=ledger.get_transfer(transfer_id),
        product=ledger.get_product(product_id),
    )


@router.get(
    "/{product_id}/transfers",
    response_model=list[TransferRecord],
    summary="Get ownership history",
)
def get_product_transfers(
    product_id: str,
    ledger: ProductLedger = Depends(get_ledger),
) -> list[TransferRecord]:
    """Ownership transfers of a product, oldest first."""
    if ledger.get_product(product_id) is None:
        raise _not_found(product_id)
    return ledger.product_transfers(product_id)


@router.get(
    "/{product_id}/claims",
    response_model=list[WarrantyClaim],
    summary="Get claims for product",
)
def get_product_claims(
    product_id: str,
    ledger: ProductLedger = Depends(get_ledger),
) -> list[WarrantyClaim]:
    """Warranty claims filed against a product."""
    if ledger.get_product(product_id) is None:
        raise _not_found(product_id)
    return ledger.product_claims(product_id)
