"""
API Schemas
===========

Request and response bodies for the ledger HTTP endpoints.

Version: 0.1.0
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from services.ledger.models import (
    ManufacturerStats,
    ProductRecord,
    TransferRecord,
    WarrantyClaim,
    WarrantyStatus,
)


class AuthorizeManufacturerRequest(BaseModel):
    """Request to authorize a manufacturer."""

    candidate: str = Field(..., min_length=1, description="Principal to authorize")


class ManufacturerResponse(BaseModel):
    """Manufacturer authorization and statistics."""

    principal: str
    authorized: bool
    stats: ManufacturerStats | None = None


class ProductRegisterRequest(BaseModel):
    """Request to register a new product."""

    product_id: str = Field(..., min_length=1, description="Unique product identifier")
    model: str = Field(..., description="Product model")
    serial_number: str = Field(..., description="Product serial number")
    warranty_months: int = Field(..., ge=0, description="Warranty duration in months")
    initial_owner: str = Field(..., min_length=1, description="First owner principal")


class WarrantyStatusResponse(BaseModel):
    """Warranty validity at a point in time."""

    product_id: str
    status: WarrantyStatus
    as_of: int
    expires_at: int


class TransferRequest(BaseModel):
    """Request to transfer product ownership."""

    new_owner: str = Field(..., min_length=1, description="Receiving principal")
    reason: str = Field(default="", description="Free-text reason for the audit trail")


class TransferResponse(BaseModel):
    """Result of an ownership transfer."""

    transfer_id: int
    transfer: TransferRecord
    product: ProductRecord


class ClaimFileRequest(BaseModel):
    """Request to file a warranty claim."""

    product_id: str = Field(..., min_length=1)
    claim_type: str = Field(..., description="Type of claim: repair, replacement, refund")
    claimant_contact: str = Field(default="", description="How the manufacturer reaches the claimant")


class ClaimResolveRequest(BaseModel):
    """Request to resolve a warranty claim."""

    resolution_notes: str = Field(default="")


class ClaimResponse(BaseModel):
    """Warranty claim with the manufacturer's current statistics."""

    claim: WarrantyClaim
    manufacturer_stats: ManufacturerStats | None = None
