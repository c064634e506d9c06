"""
Transfer History API Endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from services.ledger.dependencies import get_ledger
from services.ledger.engine import ProductLedger
from services.ledger.models import TransferRecord


router = APIRouter(prefix="/transfers", tags=["transfers"])


@router.get(
    "/{transfer_id}",
    response_model=TransferRecord,
    summary="Get transfer by ID",
)
def get_transfer(
    transfer_id: int,
    ledger: ProductLedger = Depends(get_ledger),
) -> TransferRecord:
    """Get a single ownership transfer record."""
    record = ledger.get_transfer(transfer_id)

    if record is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Transfer {transfer_id} not found",
        )

    return record
