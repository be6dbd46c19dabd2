"""Time-bounded read cache over a single key-value medium key."""
import logging
import time
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Tuple

from .errors import DeserializationFailure, MediumUnavailable
from .models import WishlistEntry, parse_collection
from .repositories.base import KeyValueStore

DEFAULT_TTL_SECONDS = 0.1


@dataclass(frozen=True)
class CacheState:
    """Last known collection and when it was populated (``None`` = never)."""
    value: Optional[Tuple[WishlistEntry, ...]] = None
    fetched_at: Optional[float] = None


class TTLCache:
    """Memoises the deserialised collection stored under *key*.

    :meth:`get` serves the cached value while it is younger than
    *ttl_seconds*; afterwards it reads the medium again.  The window is
    meant to collapse bursts of reads, not to hide changes made by other
    processes: callers that need cross-process freshness call
    :meth:`invalidate` first.
    """

    def __init__(self, store: KeyValueStore, key: str,
                 ttl_seconds: float = DEFAULT_TTL_SECONDS,
                 clock: Optional[Callable[[], float]] = None) -> None:
        if ttl_seconds < 0:
            raise ValueError("ttl_seconds must be non-negative")
        self._store = store
        self.key = key
        self.ttl_seconds = ttl_seconds
        self._clock = clock or time.monotonic
        self._state = CacheState()
        self._log = logging.getLogger('gamescout.cache')

    @property
    def state(self) -> CacheState:
        return self._state

    def is_fresh(self) -> bool:
        state = self._state
        if state.value is None or state.fetched_at is None:
            return False
        return self._clock() - state.fetched_at < self.ttl_seconds

    def get(self) -> List[WishlistEntry]:
        """Return the collection, reading the medium only when stale.

        Unparseable content is logged and treated as an empty collection.
        An unavailable medium yields an empty list and nothing is cached.
        """
        try:
            return self.load()
        except MediumUnavailable as exc:
            self._log.warning("Wishlist medium unavailable: %s", exc)
            self._state = CacheState()
            return []

    def load(self) -> List[WishlistEntry]:
        """Like :meth:`get`, but let medium faults propagate.

        Raises:
            MediumUnavailable: If the medium cannot be read.
        """
        if self.is_fresh():
            return list(self._state.value)

        try:
            entries = parse_collection(self._store.read(self.key))
        except DeserializationFailure as exc:
            self._log.warning("Discarding unreadable wishlist under %s: %s", self.key, exc)
            entries = []
        self.set(entries)
        return entries

    def set(self, entries: Iterable[WishlistEntry]) -> None:
        """Seed the cache with a collection that was just written."""
        self._state = CacheState(value=tuple(entries), fetched_at=self._clock())

    def invalidate(self) -> None:
        self._state = CacheState()
