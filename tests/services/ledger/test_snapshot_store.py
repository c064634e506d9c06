"""Tests for ledger snapshot storage."""

from pathlib import Path

import pytest

from services.ledger.errors import LedgerPersistenceError
from services.ledger.models import LedgerState, ProductRecord, WarrantyClaim
from services.ledger.persistence import (
    FileSnapshotStore,
    MemorySnapshotStore,
    create_snapshot_store,
)


def _state() -> LedgerState:
    state = LedgerState()
    state.authorized_manufacturers["M"] = True
    state.products["P1"] = ProductRecord(
        product_id="P1",
        manufacturer="M",
        owner="O1",
        model="X",
        serial_number="SN",
        warranty_months=12,
        manufactured_at=100,
        registered_at=100,
    )
    state.claims[1] = WarrantyClaim(
        claim_id=1,
        product_id="P1",
        claimant="O1",
        filed_at=200,
        claim_type="repair",
    )
    state.claim_counter = 1
    state.height = 200
    return state


class TestCreateSnapshotStore:
    """Tests for URI-based store selection."""

    def test_memory(self) -> None:
        store = create_snapshot_store("memory://")

        assert isinstance(store, MemorySnapshotStore)
        assert store.get_uri() == "memory://"

    def test_file(self, tmp_path: Path) -> None:
        store = create_snapshot_store(f"file://{tmp_path}/ledger.json")

        assert isinstance(store, FileSnapshotStore)
        assert store.path == tmp_path / "ledger.json"

    def test_unsupported_scheme(self) -> None:
        with pytest.raises(ValueError, match="Unsupported snapshot scheme"):
            create_snapshot_store("s3://bucket/ledger.json")


class TestMemorySnapshotStore:
    def test_empty(self) -> None:
        assert MemorySnapshotStore().load() is None

    def test_load_returns_committed_state(self) -> None:
        """Commits keep a reference; nothing is serialized."""
        store = MemorySnapshotStore()
        state = _state()
        store.save(state)

        assert store.load() is state


class TestFileSnapshotStore:
    """Tests for the filesystem store."""

    def test_missing_file_loads_none(self, tmp_path: Path) -> None:
        assert FileSnapshotStore(tmp_path / "absent.json").load() is None

    def test_save_and_load(self, tmp_path: Path) -> None:
        store = FileSnapshotStore(tmp_path / "nested" / "ledger.json")
        store.save(_state())

        loaded = store.load()

        assert loaded.authorized_manufacturers == {"M": True}
        assert loaded.products["P1"].warranty_months == 12
        assert loaded.claims[1].is_pending
        assert loaded.claim_counter == 1
        assert loaded.height == 200

    def test_save_leaves_no_temp_files(self, tmp_path: Path) -> None:
        store = FileSnapshotStore(tmp_path / "ledger.json")
        store.save(_state())
        store.save(_state())

        assert [p.name for p in tmp_path.iterdir()] == ["ledger.json"]

    def test_corrupt_file(self, tmp_path: Path) -> None:
        path = tmp_path / "ledger.json"
        path.write_text("{not json")

        with pytest.raises(LedgerPersistenceError):
            FileSnapshotStore(path).load()
