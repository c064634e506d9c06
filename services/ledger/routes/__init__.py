"""Warranty ledger API routes."""

from services.ledger.routes.manufacturers import router as manufacturers_router
from services.ledger.routes.products import router as products_router
from services.ledger.routes.transfers import router as transfers_router
from services.ledger.routes.claims import router as claims_router

__all__ = [
    "manufacturers_router",
    "products_router",
    "transfers_router",
    "claims_router",
]
