"""Short-lived in-memory cache of the active rule set."""

import logging
import time
from typing import Callable, Optional, Sequence

from furnledger.domain.entities import AssignmentRule

logger = logging.getLogger(__name__)


class RuleCache:
    """Caches the active rules for a bounded time.

    The snapshot is one immutable tuple replaced in a single assignment, so
    readers never see a half-updated rule set. Every rule mutation must call
    ``invalidate()``; otherwise readers may be stale for at most one TTL.
    """

    def __init__(
        self,
        loader: Callable[[], Sequence[AssignmentRule]],
        ttl_seconds: float = 30.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize rule cache.

        Args:
            loader: Callable returning the active rules from the store
            ttl_seconds: How long a fetched rule set may be served
            clock: Monotonic time source
        """
        if ttl_seconds < 0:
            raise ValueError(f"ttl_seconds must not be negative, got {ttl_seconds}")
        self._loader = loader
        self._ttl = ttl_seconds
        self._clock = clock
        self._snapshot: Optional[tuple[tuple[AssignmentRule, ...], float]] = None
        self._generation = 0

    @property
    def ttl_seconds(self) -> float:
        return self._ttl

    @property
    def is_fresh(self) -> bool:
        """True if a snapshot exists and is within its TTL."""
        snapshot = self._snapshot
        return snapshot is not None and (self._clock() - snapshot[1]) < self._ttl

    def get(self, force_refresh: bool = False) -> tuple[AssignmentRule, ...]:
        """Return the active rules, fetching them if stale or forced.

        Errors from the loader propagate; an expired snapshot is never served.
        """
        snapshot = self._snapshot
        now = self._clock()
        if not force_refresh and snapshot is not None and (now - snapshot[1]) < self._ttl:
            return snapshot[0]

        generation = self._generation
        rules = tuple(self._loader())
        if generation == self._generation:
            self._snapshot = (rules, now)
            logger.debug("Loaded %d active assignment rules", len(rules))
        else:
            # Invalidated while loading; the result may predate the change
            logger.debug("Rule cache invalidated during load; result not cached")
        return rules

    def invalidate(self) -> None:
        """Drop the snapshot so the next read refetches.

        A load already in progress will not store its result.
        """
        self._generation += 1
        self._snapshot = None
        logger.debug("Assignment rule cache invalidated")
