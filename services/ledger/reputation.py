"""
Reputation Tracker
==================

Per-manufacturer counters and a reputation score derived from them.

The score is the share of a manufacturer's warranty claims that have been
resolved, as a whole percentage rounded down. It is recomputed from the
counters on every event rather than adjusted incrementally, so replaying
events in any order converges on the same value.

Version: 0.1.0
"""

from services.ledger.models import (
    INITIAL_REPUTATION_SCORE,
    LedgerState,
    ManufacturerStats,
    ReputationEvent,
)


def compute_reputation_score(resolved_claims: int, total_claims: int) -> int:
    """
    Derive the reputation score from claim counters.

    Args:
        resolved_claims: Claims the manufacturer has resolved
        total_claims: Claims filed against the manufacturer's products

    Returns:
        int: floor(resolved * 100 / total) clamped to 0..100, or 100 when
        no claims have been filed.
    """
    if total_claims <= 0:
        return INITIAL_REPUTATION_SCORE
    score = (resolved_claims * 100) // total_claims
    return max(0, min(100, score))


class ReputationTracker:
    """Maintains the manufacturer statistics table."""

    def __init__(self, state: LedgerState) -> None:
        self._state = state

    def ensure(self, manufacturer: str) -> ManufacturerStats:
        """Return the manufacturer's record, creating a zeroed one if absent."""
        stats = self._state.manufacturer_stats.get(manufacturer)
        if stats is None:
            self._state.touch("manufacturer_stats", manufacturer)
            stats = ManufacturerStats()
            self._state.manufacturer_stats[manufacturer] = stats
        return stats

    def record_event(self, manufacturer: str, kind: ReputationEvent) -> ManufacturerStats:
        """Increment the counter matching `kind` and recompute the score."""
        self._state.touch("manufacturer_stats", manufacturer)
        stats = self.ensure(manufacturer)

        if kind == ReputationEvent.REGISTER:
            stats.products_registered += 1
        elif kind == ReputationEvent.CLAIM:
            stats.total_warranty_claims += 1
        elif kind == ReputationEvent.RESOLVE:
            stats.resolved_claims += 1

        stats.reputation_score = compute_reputation_score(
            stats.resolved_claims,
            stats.total_warranty_claims,
        )
        return stats

    def get_stats(self, manufacturer: str) -> ManufacturerStats | None:
        return self._state.manufacturer_stats.get(manufacturer)
