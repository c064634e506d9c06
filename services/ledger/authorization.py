"""
Authorization Registry
======================

The set of principals allowed to register products. Only the configured
administrator may add to it, and entries are never removed.

Version: 0.1.0
"""

from services.ledger.errors import AlreadyAuthorized, NotAuthorized
from services.ledger.models import LedgerState, ManufacturerStats
from services.ledger.reputation import ReputationTracker


class AuthorizationRegistry:
    """Grow-only manufacturer authorization table."""

    def __init__(
        self,
        state: LedgerState,
        administrator: str,
        reputation: ReputationTracker,
    ) -> None:
        self._state = state
        self._reputation = reputation
        self.administrator = administrator

    def authorize(self, caller: str, candidate: str) -> ManufacturerStats:
        """
        Authorize `candidate` as a manufacturer.

        Args:
            caller: Principal submitting the transaction
            candidate: Principal to authorize

        Returns:
            ManufacturerStats: The candidate's freshly initialized statistics

        Raises:
            NotAuthorized: If caller is not the administrator
            AlreadyAuthorized: If candidate is already authorized
        """
        if caller != self.administrator:
            raise NotAuthorized(
                "Only the administrator may authorize manufacturers",
                caller=caller,
            )
        if self.is_authorized(candidate):
            raise AlreadyAuthorized(
                f"Manufacturer {candidate} is already authorized",
                candidate=candidate,
            )

        self._state.touch("authorized_manufacturers", candidate)
        self._state.authorized_manufacturers[candidate] = True
        return self._reputation.ensure(candidate)

    def is_authorized(self, candidate: str) -> bool:
        return self._state.authorized_manufacturers.get(candidate, False)

    def manufacturers(self) -> list[str]:
        """Authorized principals in authorization order."""
        return [p for p, ok in self._state.authorized_manufacturers.items() if ok]
