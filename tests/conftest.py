"""
Test Configuration
==================

Pytest fixtures for warranty ledger tests.
"""

import os
from collections.abc import AsyncGenerator, Callable

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# Set test environment
os.environ["ENVIRONMENT"] = "testing"
os.environ["LEDGER_ADMINISTRATOR"] = "ADMIN"
os.environ["LEDGER_STATE_URI"] = "memory://"

ADMIN = "ADMIN"
MANUFACTURER = "M"
OWNER_1 = "O1"
OWNER_2 = "O2"


@pytest.fixture(scope="session")
def anyio_backend() -> str:
    """Use asyncio backend for async tests."""
    return "asyncio"


@pytest.fixture
def ledger():
    """Empty ledger administered by ADMIN."""
    from services.ledger.engine import ProductLedger

    return ProductLedger(administrator=ADMIN)


@pytest.fixture
def seeded_ledger(ledger):
    """Ledger with M authorized and product P1 (12 months, owner O1) registered at 100."""
    ledger.authorize_manufacturer(ADMIN, MANUFACTURER)
    ledger.register_product(
        caller=MANUFACTURER,
        product_id="P1",
        model="X-100",
        serial_number="SN-0001",
        warranty_months=12,
        initial_owner=OWNER_1,
        now=100,
    )
    return ledger


@pytest.fixture
def block_clock():
    """Block clock starting at height 100."""
    from services.ledger.clock import BlockClock

    return BlockClock(height=100)


@pytest_asyncio.fixture
async def ledger_client(ledger, block_clock) -> AsyncGenerator[AsyncClient, None]:
    """Create test client for the ledger service backed by a fresh ledger."""
    from services.ledger.dependencies import get_clock, get_ledger
    from services.ledger.main import app

    app.dependency_overrides[get_ledger] = lambda: ledger
    app.dependency_overrides[get_clock] = lambda: block_clock

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers() -> Callable[[str], dict[str, str]]:
    """Build bearer headers for a principal."""
    from shared.auth import create_access_token

    def _headers(principal: str) -> dict[str, str]:
        token = create_access_token({"sub": principal})
        return {"Authorization": f"Bearer {token}"}

    return _headers
