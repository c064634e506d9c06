"""Tests for manufacturer authorization."""

import pytest

from services.ledger.engine import ProductLedger
from services.ledger.errors import AlreadyAuthorized, ErrorKind, NotAuthorized

ADMIN = "ADMIN"


class TestAuthorizeManufacturer:
    """Tests for ProductLedger.authorize_manufacturer."""

    def test_admin_authorizes(self, ledger: ProductLedger) -> None:
        stats = ledger.authorize_manufacturer(ADMIN, "M")

        assert ledger.is_authorized("M") is True
        assert stats.products_registered == 0
        assert stats.total_warranty_claims == 0
        assert stats.resolved_claims == 0
        assert stats.reputation_score == 100

    def test_stats_created_at_authorization(self, ledger: ProductLedger) -> None:
        assert ledger.get_stats("M") is None

        ledger.authorize_manufacturer(ADMIN, "M")

        stats = ledger.get_stats("M")
        assert stats is not None
        assert stats.reputation_score == 100

    def test_non_admin_rejected(self, ledger: ProductLedger) -> None:
        with pytest.raises(NotAuthorized) as exc_info:
            ledger.authorize_manufacturer("M", "M")

        assert exc_info.value.kind == ErrorKind.NOT_AUTHORIZED
        assert ledger.is_authorized("M") is False
        assert ledger.get_stats("M") is None

    def test_already_authorized(self, ledger: ProductLedger) -> None:
        ledger.authorize_manufacturer(ADMIN, "M")

        with pytest.raises(AlreadyAuthorized):
            ledger.authorize_manufacturer(ADMIN, "M")

    def test_admin_check_precedes_duplicate_check(self, ledger: ProductLedger) -> None:
        ledger.authorize_manufacturer(ADMIN, "M")

        with pytest.raises(NotAuthorized):
            ledger.authorize_manufacturer("intruder", "M")

    def test_is_authorized_never_fails(self, ledger: ProductLedger) -> None:
        assert ledger.is_authorized("") is False
        assert ledger.is_authorized("unknown") is False

    def test_manufacturers_in_authorization_order(self, ledger: ProductLedger) -> None:
        for principal in ["M2", "M1", "M3"]:
            ledger.authorize_manufacturer(ADMIN, principal)

        assert ledger.manufacturers() == ["M2", "M1", "M3"]

    def test_authorized_manufacturer_can_always_register(self, ledger: ProductLedger) -> None:
        ledger.authorize_manufacturer(ADMIN, "M")

        for i in range(5):
            ledger.register_product("M", f"P{i}", "model", f"SN{i}", 6, "O", now=i)

        stats = ledger.get_stats("M")
        assert stats is not None
        assert stats.products_registered == 5
