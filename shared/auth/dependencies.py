"""
FastAPI Authentication Dependencies
===================================

Translates bearer-token authentication into the `caller` principal
that ledger transactions execute as.

Version: 0.1.0
"""

from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from pydantic import BaseModel, Field

from shared.auth.jwt import decode_token
from shared.logging import get_logger


logger = get_logger(__name__)

# OAuth2 scheme for token extraction from Authorization header
oauth2_scheme = OAuth2PasswordBearer(
    tokenUrl="/auth/token",
    auto_error=False,
)


class Principal(BaseModel):
    """Authenticated caller identity for dependency injection."""

    id: str = Field(..., description="Opaque principal identifier")


async def get_current_principal(
    token: Annotated[str | None, Depends(oauth2_scheme)],
) -> Principal:
    """
    Extract and validate the calling principal from a JWT token.

    Raises:
        HTTPException: 401 if token is missing or invalid
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    if token is None:
        logger.warning("auth_token_missing")
        raise credentials_exception

    token_data = decode_token(token, verify_type="access")

    if token_data is None:
        logger.warning("auth_token_invalid")
        raise credentials_exception

    logger.debug("principal_authenticated", principal=token_data.sub)

    return Principal(id=token_data.sub)
