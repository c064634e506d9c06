"""
Service Dependencies
====================

Process-wide ledger and clock instances for the HTTP layer. Tests replace
them through `app.dependency_overrides`.

Route handlers are plain functions, so FastAPI runs them in its worker
threadpool; snapshot writes and lock waits never block the event loop.

Version: 0.1.0
"""

from collections.abc import Iterator
from contextlib import contextmanager
from functools import lru_cache

from services.ledger.clock import LedgerClock, create_clock
from services.ledger.engine import ProductLedger
from services.ledger.persistence import create_snapshot_store
from shared.config import settings


@lru_cache
def get_ledger() -> ProductLedger:
    """Ledger singleton built from settings."""
    return ProductLedger(
        administrator=settings.ledger.administrator,
        store=create_snapshot_store(settings.ledger.state_uri),
    )


@lru_cache
def get_clock() -> LedgerClock:
    """Clock singleton, reseeded from the ledger's committed height."""
    height = max(settings.ledger.genesis_height, get_ledger().height)
    return create_clock(settings.ledger.clock, height)


@contextmanager
def write_slot(ledger: ProductLedger, clock: LedgerClock) -> Iterator[int]:
    """
    Take the next write timestamp while holding the ledger lock.

    Writes commit in the order their timestamps were issued.
    """
    with ledger.locked():
        yield clock.tick()
