"""
Tests for the warranty ledger HTTP API.
"""

import asyncio
import threading

import pytest
from httpx import AsyncClient
from pydantic import ValidationError

from services.ledger.clock import BlockClock
from services.ledger.dependencies import get_ledger, write_slot
from services.ledger.engine import ProductLedger
from services.ledger.errors import InvalidArgument
from services.ledger.main import app
from services.ledger.models import ProductRecord

PRODUCT = {
    "product_id": "P1",
    "model": "X-100",
    "serial_number": "SN-0001",
    "warranty_months": 12,
    "initial_owner": "O1",
}


async def _seed(client: AsyncClient, auth_headers) -> None:
    response = await client.post(
        "/api/v1/manufacturers", json={"candidate": "M"}, headers=auth_headers("ADMIN")
    )
    assert response.status_code == 201
    response = await client.post("/api/v1/products", json=PRODUCT, headers=auth_headers("M"))
    assert response.status_code == 201


class TestHealth:
    @pytest.mark.asyncio
    async def test_health(self, ledger_client: AsyncClient) -> None:
        response = await ledger_client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["service"] == "warranty-ledger"
        assert data["components"]["ledger"]["status"] == "healthy"

    @pytest.mark.asyncio
    async def test_root(self, ledger_client: AsyncClient) -> None:
        response = await ledger_client.get("/")

        assert response.status_code == 200
        assert response.json()["service"] == "Warranty Ledger"


class TestManufacturerEndpoints:
    """Tests for /api/v1/manufacturers."""

    @pytest.mark.asyncio
    async def test_authorize_requires_token(self, ledger_client: AsyncClient) -> None:
        response = await ledger_client.post("/api/v1/manufacturers", json={"candidate": "M"})

        assert response.status_code == 401
        assert response.json()["success"] is False

    @pytest.mark.asyncio
    async def test_authorize(self, ledger_client: AsyncClient, auth_headers) -> None:
        response = await ledger_client.post(
            "/api/v1/manufacturers", json={"candidate": "M"}, headers=auth_headers("ADMIN")
        )

        assert response.status_code == 201
        data = response.json()
        assert data["authorized"] is True
        assert data["stats"]["reputation_score"] == 100

    @pytest.mark.asyncio
    async def test_non_admin_forbidden(self, ledger_client: AsyncClient, auth_headers) -> None:
        response = await ledger_client.post(
            "/api/v1/manufacturers", json={"candidate": "M"}, headers=auth_headers("M")
        )

        assert response.status_code == 403
        assert response.json()["error_code"] == "not_authorized"

    @pytest.mark.asyncio
    async def test_duplicate_conflict(self, ledger_client: AsyncClient, auth_headers) -> None:
        headers = auth_headers("ADMIN")
        await ledger_client.post("/api/v1/manufacturers", json={"candidate": "M"}, headers=headers)

        response = await ledger_client.post(
            "/api/v1/manufacturers", json={"candidate": "M"}, headers=headers
        )

        assert response.status_code == 409
        assert response.json()["error_code"] == "already_authorized"

    @pytest.mark.asyncio
    async def test_list_and_get(self, ledger_client: AsyncClient, auth_headers) -> None:
        await _seed(ledger_client, auth_headers)

        listing = await ledger_client.get("/api/v1/manufacturers")
        single = await ledger_client.get("/api/v1/manufacturers/M")
        missing = await ledger_client.get("/api/v1/manufacturers/nobody")

        assert [m["principal"] for m in listing.json()] == ["M"]
        assert single.json()["stats"]["products_registered"] == 1
        assert missing.status_code == 404


class TestProductEndpoints:
    """Tests for /api/v1/products."""

    @pytest.mark.asyncio
    async def test_register_uses_clock(self, ledger_client: AsyncClient, auth_headers) -> None:
        await _seed(ledger_client, auth_headers)

        response = await ledger_client.get("/api/v1/products/P1")

        assert response.status_code == 200
        data = response.json()
        assert data["manufacturer"] == "M"
        assert data["owner"] == "O1"
        assert data["manufactured_at"] == 101

    @pytest.mark.asyncio
    async def test_register_unauthorized_manufacturer(
        self, ledger_client: AsyncClient, auth_headers
    ) -> None:
        response = await ledger_client.post(
            "/api/v1/products", json=PRODUCT, headers=auth_headers("M")
        )

        assert response.status_code == 403
        assert response.json()["error_code"] == "not_manufacturer"

    @pytest.mark.asyncio
    async def test_register_duplicate(self, ledger_client: AsyncClient, auth_headers) -> None:
        await _seed(ledger_client, auth_headers)

        response = await ledger_client.post(
            "/api/v1/products", json=PRODUCT, headers=auth_headers("M")
        )

        assert response.status_code == 409
        assert response.json()["error_code"] == "product_already_exists"

    @pytest.mark.asyncio
    async def test_unknown_product(self, ledger_client: AsyncClient) -> None:
        response = await ledger_client.get("/api/v1/products/P404")

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_verification(self, ledger_client: AsyncClient, auth_headers) -> None:
        await _seed(ledger_client, auth_headers)

        response = await ledger_client.get("/api/v1/products/P1/verification")

        data = response.json()
        assert data["authentic"] is True
        assert data["warranty_status"] == "active"
        assert data["transfer_count"] == 0

    @pytest.mark.asyncio
    async def test_warranty_as_of(self, ledger_client: AsyncClient, auth_headers) -> None:
        await _seed(ledger_client, auth_headers)
        expires_at = 101 + 12 * 2_629_746

        active = await ledger_client.get(
            "/api/v1/products/P1/warranty", params={"as_of": expires_at - 1}
        )
        expired = await ledger_client.get(
            "/api/v1/products/P1/warranty", params={"as_of": expires_at}
        )

        assert active.json()["status"] == "active"
        assert expired.json()["status"] == "expired"
        assert expired.json()["expires_at"] == expires_at

    @pytest.mark.asyncio
    async def test_transfer(self, ledger_client: AsyncClient, auth_headers) -> None:
        await _seed(ledger_client, auth_headers)

        response = await ledger_client.post(
            "/api/v1/products/P1/transfer",
            json={"new_owner": "O2", "reason": "sale"},
            headers=auth_headers("O1"),
        )

        assert response.status_code == 200
        data = response.json()
        assert data["transfer_id"] == 1
        assert data["transfer"]["from_owner"] == "O1"
        assert data["product"]["owner"] == "O2"

        history = await ledger_client.get("/api/v1/products/P1/transfers")
        assert [t["to_owner"] for t in history.json()] == ["O2"]

        single = await ledger_client.get("/api/v1/transfers/1")
        assert single.json()["reason"] == "sale"

    @pytest.mark.asyncio
    async def test_transfer_errors(self, ledger_client: AsyncClient, auth_headers) -> None:
        await _seed(ledger_client, auth_headers)

        not_owner = await ledger_client.post(
            "/api/v1/products/P1/transfer", json={"new_owner": "O3"}, headers=auth_headers("O2")
        )
        self_transfer = await ledger_client.post(
            "/api/v1/products/P1/transfer", json={"new_owner": "O1"}, headers=auth_headers("O1")
        )
        missing = await ledger_client.post(
            "/api/v1/products/P404/transfer", json={"new_owner": "O2"}, headers=auth_headers("O1")
        )

        assert not_owner.status_code == 403
        assert not_owner.json()["error_code"] == "not_owner"
        assert self_transfer.status_code == 400
        assert self_transfer.json()["error_code"] == "invalid_transfer"
        assert missing.status_code == 404
        assert missing.json()["error_code"] == "product_not_found"

    @pytest.mark.asyncio
    async def test_unknown_transfer(self, ledger_client: AsyncClient) -> None:
        response = await ledger_client.get("/api/v1/transfers/7")

        assert response.status_code == 404


class TestClaimEndpoints:
    """Tests for /api/v1/claims."""

    @pytest.mark.asyncio
    async def test_file_and_resolve(self, ledger_client: AsyncClient, auth_headers) -> None:
        await _seed(ledger_client, auth_headers)

        filed = await ledger_client.post(
            "/api/v1/claims",
            json={"product_id": "P1", "claim_type": "repair", "claimant_contact": "o1@example.com"},
            headers=auth_headers("O1"),
        )

        assert filed.status_code == 201
        data = filed.json()
        assert data["claim"]["claim_id"] == 1
        assert data["claim"]["status"] == "pending"
        assert data["manufacturer_stats"]["reputation_score"] == 0

        resolved = await ledger_client.post(
            "/api/v1/claims/1/resolve",
            json={"resolution_notes": "replaced"},
            headers=auth_headers("M"),
        )

        assert resolved.status_code == 200
        data = resolved.json()
        assert data["claim"]["status"] == "resolved"
        assert data["claim"]["resolution_notes"] == "replaced"
        assert data["manufacturer_stats"]["resolved_claims"] == 1
        assert data["manufacturer_stats"]["reputation_score"] == 100

        listing = await ledger_client.get("/api/v1/products/P1/claims")
        assert [c["claim_id"] for c in listing.json()] == [1]

    @pytest.mark.asyncio
    async def test_resolve_errors(self, ledger_client: AsyncClient, auth_headers) -> None:
        await _seed(ledger_client, auth_headers)
        await ledger_client.post(
            "/api/v1/claims",
            json={"product_id": "P1", "claim_type": "repair"},
            headers=auth_headers("O1"),
        )

        wrong_caller = await ledger_client.post(
            "/api/v1/claims/1/resolve", json={}, headers=auth_headers("O1")
        )
        await ledger_client.post("/api/v1/claims/1/resolve", json={}, headers=auth_headers("M"))
        again = await ledger_client.post(
            "/api/v1/claims/1/resolve", json={}, headers=auth_headers("M")
        )

        assert wrong_caller.status_code == 403
        assert wrong_caller.json()["error_code"] == "not_manufacturer"
        assert again.status_code == 409
        assert again.json()["error_code"] == "claim_not_pending"

    @pytest.mark.asyncio
    async def test_claim_unknown_product(self, ledger_client: AsyncClient, auth_headers) -> None:
        response = await ledger_client.post(
            "/api/v1/claims",
            json={"product_id": "P404", "claim_type": "repair"},
            headers=auth_headers("O1"),
        )

        assert response.status_code == 404
        assert response.json()["error_code"] == "product_not_found"

    @pytest.mark.asyncio
    async def test_unknown_claim(self, ledger_client: AsyncClient) -> None:
        response = await ledger_client.get("/api/v1/claims/9")

        assert response.status_code == 404


class _FailingLedger(ProductLedger):
    """Ledger whose product lookup raises a fixed exception."""

    def __init__(self, exc: Exception) -> None:
        super().__init__(administrator="ADMIN")
        self.exc = exc

    def get_product(self, product_id: str) -> ProductRecord | None:
        raise self.exc


class TestErrorMapping:
    """Tests for exception-to-response mapping."""

    @pytest.mark.asyncio
    async def test_invalid_argument_is_422(self, ledger_client: AsyncClient) -> None:
        app.dependency_overrides[get_ledger] = lambda: _FailingLedger(
            InvalidArgument("warranty_months must be non-negative")
        )

        response = await ledger_client.get("/api/v1/products/P1")

        assert response.status_code == 422
        assert response.json()["error_code"] == "invalid_argument"

    @pytest.mark.asyncio
    async def test_model_validation_bug_is_not_a_client_error(self, ledger_client: AsyncClient) -> None:
        with pytest.raises(ValidationError) as exc_info:
            ProductRecord.model_validate({"product_id": "P1"})
        app.dependency_overrides[get_ledger] = lambda: _FailingLedger(exc_info.value)

        with pytest.raises(ValidationError):
            await ledger_client.get("/api/v1/products/P1")


class TestWriteOrdering:
    """Tests for serialized write timestamps."""

    def test_write_slot_holds_ledger_lock(self, ledger: ProductLedger) -> None:
        clock = BlockClock(height=7)
        acquired: list[bool] = []

        def try_lock() -> None:
            acquired.append(ledger._lock.acquire(blocking=False))

        with write_slot(ledger, clock) as now:
            worker = threading.Thread(target=try_lock)
            worker.start()
            worker.join()

        assert now == 8
        assert acquired == [False]

    @pytest.mark.asyncio
    async def test_concurrent_writes_get_distinct_timestamps(
        self, ledger_client: AsyncClient, auth_headers
    ) -> None:
        await ledger_client.post(
            "/api/v1/manufacturers", json={"candidate": "M"}, headers=auth_headers("ADMIN")
        )
        headers = auth_headers("M")

        responses = await asyncio.gather(
            *[
                ledger_client.post(
                    "/api/v1/products",
                    json={**PRODUCT, "product_id": f"P{i}"},
                    headers=headers,
                )
                for i in range(5)
            ]
        )

        assert all(r.status_code == 201 for r in responses)
        assert sorted(r.json()["manufactured_at"] for r in responses) == [101, 102, 103, 104, 105]
