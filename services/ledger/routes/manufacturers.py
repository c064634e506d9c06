"""
Manufacturer Authorization API Endpoints.

Administrator-only authorization and manufacturer statistics.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from services.ledger.dependencies import get_ledger
from services.ledger.engine import ProductLedger
from services.ledger.schemas import AuthorizeManufacturerRequest, ManufacturerResponse
from shared.auth import Principal, get_current_principal


router = APIRouter(prefix="/manufacturers", tags=["manufacturers"])


@router.post(
    "",
    response_model=ManufacturerResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Authorize a manufacturer",
)
def authorize_manufacturer(
    request: AuthorizeManufacturerRequest,
    caller: Principal = Depends(get_current_principal),
    ledger: ProductLedger = Depends(get_ledger),
) -> ManufacturerResponse:
    """Authorize a principal to register products. Administrator only."""
    stats = ledger.authorize_manufacturer(caller.id, request.candidate)
    return ManufacturerResponse(principal=request.candidate, authorized=True, stats=stats)


@router.get(
    "",
    response_model=list[ManufacturerResponse],
    summary="List authorized manufacturers",
)
def list_manufacturers(
    ledger: ProductLedger = Depends(get_ledger),
) -> list[ManufacturerResponse]:
    """List authorized manufacturers with their statistics."""
    return [
        ManufacturerResponse(principal=p, authorized=True, stats=ledger.get_stats(p))
        for p in ledger.manufacturers()
    ]


@router.get(
    "/{principal}",
    response_model=ManufacturerResponse,
    summary="Get manufacturer statistics",
)
def get_manufacturer(
    principal: str,
    ledger: ProductLedger = Depends(get_ledger),
) -> ManufacturerResponse:
    """Get a manufacturer's authorization and reputation statistics."""
    stats = ledger.get_stats(principal)

    if stats is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Manufacturer {principal} not found",
        )

    return ManufacturerResponse(
        principal=principal,
        authorized=ledger.is_authorized(principal),
        stats=stats,
    )
