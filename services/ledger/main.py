"""
Warranty Ledger Service - Main Application
==========================================

FastAPI application exposing the product authenticity, ownership and
warranty ledger. Bearer tokens identify the calling principal; the
configured clock supplies each transaction's timestamp.

Version: 0.1.0
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, HTTPException, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from services.ledger.dependencies import get_ledger
from services.ledger.engine import ProductLedger
from services.ledger.errors import ErrorKind, InvalidArgument, LedgerError, LedgerPersistenceError
from services.ledger.routes import (
    claims_router,
    manufacturers_router,
    products_router,
    transfers_router,
)
from shared.config import settings
from shared.logging import get_logger, setup_logging
from shared.models.common import ErrorResponse, HealthResponse


setup_logging(
    log_level=settings.log_level.value,
    json_logs=settings.is_production,
    service_name="warranty-ledger",
)

logger = get_logger(__name__)


ERROR_STATUS: dict[ErrorKind, int] = {
    ErrorKind.NOT_AUTHORIZED: status.HTTP_403_FORBIDDEN,
    ErrorKind.NOT_MANUFACTURER: status.HTTP_403_FORBIDDEN,
    ErrorKind.NOT_OWNER: status.HTTP_403_FORBIDDEN,
    ErrorKind.ALREADY_AUTHORIZED: status.HTTP_409_CONFLICT,
    ErrorKind.PRODUCT_ALREADY_EXISTS: status.HTTP_409_CONFLICT,
    ErrorKind.CLAIM_NOT_PENDING: status.HTTP_409_CONFLICT,
    ErrorKind.PRODUCT_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.INVALID_TRANSFER: status.HTTP_400_BAD_REQUEST,
    ErrorKind.WARRANTY_EXPIRED: status.HTTP_400_BAD_REQUEST,
}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    ledger = get_ledger()
    logger.info(
        "warranty_ledger_starting",
        environment=settings.environment.value,
        port=settings.ports.ledger,
        store=ledger.store.get_uri(),
        clock=settings.ledger.clock.value,
    )
    yield
    logger.info("warranty_ledger_shutting_down")


app = FastAPI(
    title="Warranty Ledger",
    description="Product authenticity, ownership and warranty lifecycle ledger",
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
    openapi_tags=[
        {"name": "manufacturers", "description": "Manufacturer authorization and reputation"},
        {"name": "products", "description": "Product registration, verification and transfer"},
        {"name": "transfers", "description": "Ownership transfer history"},
        {"name": "claims", "description": "Warranty claims"},
        {"name": "health", "description": "Service health checks"},
    ],
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors.origins_list,
    allow_credentials=settings.cors.allow_credentials,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(manufacturers_router, prefix="/api/v1")
app.include_router(products_router, prefix="/api/v1")
app.include_router(transfers_router, prefix="/api/v1")
app.include_router(claims_router, prefix="/api/v1")


# ============================================================================
# Health Check Endpoints
# ============================================================================


@app.get("/health", response_model=HealthResponse, tags=["health"])
def health_check(ledger: ProductLedger = Depends(get_ledger)) -> HealthResponse:
    """Service health check endpoint."""
    return HealthResponse(
        service="warranty-ledger",
        version="0.1.0",
        components={"ledger": ledger.health_check()},
    )


@app.get("/", tags=["health"])
async def root() -> dict[str, str]:
    """Root endpoint."""
    return {
        "service": "Warranty Ledger",
        "description": "Product authenticity, ownership and warranty lifecycle ledger",
        "docs": "/docs",
    }


# ============================================================================
# Error Handlers
# ============================================================================


@app.exception_handler(LedgerError)
async def ledger_error_handler(request: Request, exc: LedgerError) -> JSONResponse:
    """Render a rejected transaction."""
    status_code = ERROR_STATUS.get(exc.kind, status.HTTP_400_BAD_REQUEST)
    body = ErrorResponse(
        error=exc.message,
        error_code=exc.kind.value,
        details={k: str(v) for k, v in exc.details.items()} or None,
    )
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


@app.exception_handler(InvalidArgument)
async def invalid_argument_handler(request: Request, exc: InvalidArgument) -> JSONResponse:
    """Handle out-of-domain operation arguments."""
    body = ErrorResponse(error=str(exc), error_code=InvalidArgument.code)
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=body.model_dump(mode="json"),
    )


@app.exception_handler(LedgerPersistenceError)
async def persistence_error_handler(request: Request, exc: LedgerPersistenceError) -> JSONResponse:
    """Handle snapshot commit failures."""
    logger.error("ledger_persistence_failed", error=str(exc), path=request.url.path)
    body = ErrorResponse(error="Ledger storage unavailable", error_code="persistence_failed")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=body.model_dump(mode="json"),
    )


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Handle HTTP exceptions."""
    logger.warning(
        "http_exception",
        status_code=exc.status_code,
        detail=exc.detail,
        path=request.url.path,
    )
    body = ErrorResponse(error=str(exc.detail))
    return JSONResponse(
        status_code=exc.status_code,
        content=body.model_dump(mode="json"),
        headers=exc.headers,
    )


# ============================================================================
# Run with Uvicorn
# ============================================================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "services.ledger.main:app",
        host="0.0.0.0",
        port=settings.ports.ledger,
        reload=settings.debug,
        log_level=settings.log_level.value.lower(),
    )
