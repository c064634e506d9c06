"""
Ledger Snapshot Storage
=======================

Durable storage for committed ledger state, selected by URI:

- memory://                    state lives for the process lifetime
- file:///var/lib/ledger.json  JSON document replaced atomically on commit

Version: 0.1.0
"""

import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from urllib.parse import urlparse

from pydantic import ValidationError

from services.ledger.errors import LedgerPersistenceError
from services.ledger.models import LedgerState
from shared.logging import get_logger


logger = get_logger(__name__)


class SnapshotStore(ABC):
    """Abstract base class for ledger snapshot storage."""

    @abstractmethod
    def load(self) -> LedgerState | None:
        """Return the last committed state, or None if nothing was committed."""
        ...

    @abstractmethod
    def save(self, state: LedgerState) -> None:
        """Durably commit `state`."""
        ...

    @abstractmethod
    def get_uri(self) -> str:
        ...


class MemorySnapshotStore(SnapshotStore):
    """
    Holds a reference to the live state.

    Nothing is copied on commit; the state lives for the process lifetime.
    """

    def __init__(self) -> None:
        self._state: LedgerState | None = None

    def load(self) -> LedgerState | None:
        return self._state

    def save(self, state: LedgerState) -> None:
        self._state = state

    def get_uri(self) -> str:
        return "memory://"


class FileSnapshotStore(SnapshotStore):
    """Local filesystem snapshot (file:// URIs)."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def load(self) -> LedgerState | None:
        if not self.path.exists():
            return None
        try:
            state = LedgerState.model_validate_json(self.path.read_text(encoding="utf-8"))
        except (OSError, ValidationError) as e:
            raise LedgerPersistenceError(f"Cannot read ledger snapshot {self.path}: {e}") from e

        logger.info(
            "ledger_snapshot_loaded",
            path=str(self.path),
            products=len(state.products),
            transfers=state.transfer_counter,
            claims=state.claim_counter,
        )
        return state

    def save(self, state: LedgerState) -> None:
        payload = state.model_dump_json(indent=2)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self.path.parent,
                prefix=f".{self.path.name}.",
                suffix=".tmp",
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(payload)
                    f.flush()
                    os.fsync(f.fileno())
                os.replace(tmp_name, self.path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise LedgerPersistenceError(f"Cannot write ledger snapshot {self.path}: {e}") from e

    def get_uri(self) -> str:
        return f"file://{self.path}"


def create_snapshot_store(uri: str) -> SnapshotStore:
    """
    Create the snapshot store for a URI.

    Raises:
        ValueError: If the URI scheme is not supported
    """
    parsed = urlparse(uri)

    if parsed.scheme == "memory":
        return MemorySnapshotStore()

    if parsed.scheme == "file":
        if not parsed.path:
            raise ValueError(f"file:// snapshot URI needs a path: {uri}")
        return FileSnapshotStore(Path(parsed.path))

    raise ValueError(
        f"Unsupported snapshot scheme: {parsed.scheme!r}. "
        f"Supported: memory://, file://"
    )
