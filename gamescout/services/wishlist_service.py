"""Business logic for the game wishlist."""
import logging
import threading
from typing import Callable, List, Optional

from ..cache import DEFAULT_TTL_SECONDS, TTLCache
from ..errors import MediumUnavailable, WriteFailure
from ..models import WishlistEntry, dump_collection, normalise_id, utc_timestamp
from ..repositories.base import KeyValueStore

DEFAULT_STORAGE_KEY = 'gameWishlist'


class WishlistService:
    """Manages the wishlist collection stored under one key of a
    :class:`~gamescout.repositories.base.KeyValueStore`, reading through a
    :class:`~gamescout.cache.TTLCache`.

    Rules
    -----
    * Entry ids are unique; adding an id that is already present is a no-op.
    * Every mutation is one read-modify-write: the whole collection is
      rewritten under the fixed key and, on success, seeded into the cache.
    * A failed write invalidates the cache and raises
      :class:`~gamescout.errors.WriteFailure`, so the process never keeps a
      collection the medium does not hold.
    * When the medium does not exist at all, reads return an empty list and
      mutations do nothing.

    The read-modify-write span of each mutation is held under a lock owned
    by the instance.  Separate instances (or processes) sharing one medium
    are not coordinated: two concurrent toggles of the same id may both see
    the pre-toggle state and the last write wins.
    """

    def __init__(self, store: KeyValueStore,
                 key: str = DEFAULT_STORAGE_KEY,
                 ttl_seconds: float = DEFAULT_TTL_SECONDS,
                 clock: Optional[Callable[[], float]] = None) -> None:
        self._store = store
        self.key = key
        self._cache = TTLCache(store, key, ttl_seconds=ttl_seconds, clock=clock)
        self._lock = threading.RLock()
        self._log = logging.getLogger('gamescout.wishlist')

    @property
    def cache(self) -> TTLCache:
        return self._cache

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_all(self) -> List[WishlistEntry]:
        """Return every wishlist entry in insertion order."""
        return self._cache.get()

    def get(self, game_id) -> Optional[WishlistEntry]:
        """Return the entry for *game_id*, or ``None``."""
        wanted = normalise_id(game_id)
        for entry in self.get_all():
            if entry.id == wanted:
                return entry
        return None

    def contains(self, game_id) -> bool:
        """Return ``True`` if *game_id* is on the wishlist."""
        return self.get(game_id) is not None

    def refresh(self) -> List[WishlistEntry]:
        """Drop the cached collection and re-read it from the medium."""
        with self._lock:
            self._cache.invalidate()
            return self._cache.get()

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def add(self, entry) -> bool:
        """Append *entry* unless its id is already present.

        Args:
            entry: A :class:`~gamescout.models.WishlistEntry` or a game
                record dict (``{"id", "name", "cover", "url"}``).

        Returns:
            ``True`` if the entry was added; ``False`` if it was already on
            the wishlist or no medium is available.

        Raises:
            WriteFailure: If the medium rejected the write.
        """
        entry = WishlistEntry.coerce(entry)
        with self._lock:
            current = self._current('add')
            if current is None:
                return False
            if any(e.id == entry.id for e in current):
                return False
            self._commit(current + [self._stamped(entry)])
            return True

    def remove(self, game_id) -> bool:
        """Remove *game_id* from the wishlist.

        Returns:
            ``True`` if an entry was removed; ``False`` if it was absent.

        Raises:
            WriteFailure: If the medium rejected the write.
        """
        wanted = normalise_id(game_id)
        with self._lock:
            current = self._current('remove')
            if current is None:
                return False
            remaining = [e for e in current if e.id != wanted]
            if len(remaining) == len(current):
                return False
            self._commit(remaining)
            return True

    def toggle(self, entry) -> bool:
        """Remove *entry* if present, otherwise add it.

        Reads the collection once and writes once.

        Returns:
            ``True`` if the entry is on the wishlist afterwards.

        Raises:
            WriteFailure: If the medium rejected the write.
        """
        entry = WishlistEntry.coerce(entry)
        with self._lock:
            current = self._current('toggle')
            if current is None:
                return False
            remaining = [e for e in current if e.id != entry.id]
            if len(remaining) != len(current):
                self._commit(remaining)
                return False
            self._commit(current + [self._stamped(entry)])
            return True

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _stamped(entry: WishlistEntry) -> WishlistEntry:
        if entry.added_at is None:
            return entry.with_added_at(utc_timestamp())
        return entry

    def _current(self, operation: str) -> Optional[List[WishlistEntry]]:
        """Collection to modify, or ``None`` when the medium cannot be read."""
        try:
            return self._cache.load()
        except MediumUnavailable as exc:
            self._log.warning("Wishlist medium unavailable; %s ignored: %s", operation, exc)
            return None

    def _commit(self, entries: List[WishlistEntry]) -> None:
        try:
            ok = self._store.write(self.key, dump_collection(entries))
        except MediumUnavailable as exc:
            self._log.error("Wishlist write to %s failed: %s", self.key, exc)
            ok = False
        if not ok:
            self._cache.invalidate()
            raise WriteFailure(self.key)
        self._cache.set(entries)
