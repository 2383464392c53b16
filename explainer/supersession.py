"""Generation bookkeeping that keeps stale analyses from overwriting newer ones."""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)


class SupersessionGuard:
    """Hands out generations and decides which completions may be applied.

    A completion is accepted only if its generation is newer than every
    generation already completed; completion order over the network does
    not matter, issue order does.
    """

    def __init__(self):
        self._latest_issued = 0
        self._latest_completed = 0

    @property
    def latest_issued(self) -> int:
        return self._latest_issued

    @property
    def latest_completed(self) -> int:
        return self._latest_completed

    @property
    def in_flight(self) -> bool:
        """True while the newest issued generation has not completed."""
        return self._latest_issued > self._latest_completed

    def issue(self) -> int:
        self._latest_issued += 1
        logger.debug("Issued generation %d", self._latest_issued)
        return self._latest_issued

    def accept(self, generation: int) -> bool:
        if generation > self._latest_issued:
            raise ValueError(
                f"Generation {generation} was never issued "
                f"(latest issued: {self._latest_issued})"
            )
        if generation <= self._latest_completed:
            logger.debug(
                "Rejecting generation %d (already completed up to %d)",
                generation,
                self._latest_completed,
            )
            return False
        self._latest_completed = generation
        return True

    def invalidate(self) -> int:
        """Issue and immediately complete a generation, orphaning everything older."""
        generation = self.issue()
        self._latest_completed = generation
        logger.debug("Invalidated all generations up to %d", generation)
        return generation
