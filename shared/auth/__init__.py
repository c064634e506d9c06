"""
Authentication Module
=====================

JWT-based authentication for the warranty ledger service.

Features:
- JWT token generation and validation
- FastAPI dependency resolving the calling principal

Usage:
    from shared.auth import create_access_token, get_current_principal

    token = create_access_token({"sub": "manufacturer-1"})

    @app.post("/products")
    async def register(caller: Principal = Depends(get_current_principal)):
        return {"caller": caller.id}
"""

from shared.auth.jwt import (
    create_access_token,
    decode_token,
    TokenData,
)
from shared.auth.dependencies import (
    Principal,
    get_current_principal,
    oauth2_scheme,
)

__all__ = [
    # JWT
    "create_access_token",
    "decode_token",
    "TokenData",
    # Dependencies
    "Principal",
    "get_current_principal",
    "oauth2_scheme",
]
