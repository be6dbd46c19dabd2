"""Key-value store base class used by all concrete media."""
import logging
import re
from typing import Optional

from ..errors import MediumUnavailable

_KEY_RE = re.compile(r'^[A-Za-z0-9_.:-]+$')


def check_key(key: str) -> None:
    """Raise ``ValueError`` unless *key* is a usable storage key."""
    if not isinstance(key, str) or not _KEY_RE.match(key):
        raise ValueError(f"Invalid storage key: {key!r}")


class KeyValueStore:
    """Durable medium addressed by opaque string keys.

    Sub-classes implement :meth:`_read`, :meth:`_write` and :meth:`_delete`;
    the public methods validate keys, apply the optional size quota and
    refuse to touch a medium that :meth:`is_available` reports as absent.

    Contract:

    * ``read`` returns ``None`` for a missing key; it only raises
      :class:`~gamescout.errors.MediumUnavailable` for medium faults.
      Content the medium cannot decode raises
      :class:`~gamescout.errors.DeserializationFailure` instead.
    * ``write`` returns ``False`` when the value was not stored (quota
      exceeded, I/O error) and never leaves a partial value behind.
    """

    def __init__(self, max_value_bytes: Optional[int] = None) -> None:
        if max_value_bytes is not None and max_value_bytes < 0:
            raise ValueError("max_value_bytes must be non-negative")
        self.max_value_bytes = max_value_bytes
        self._log = logging.getLogger(f'gamescout.store.{type(self).__name__}')

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def is_available(self) -> bool:
        """Return ``True`` if the medium exists in this environment."""
        return True

    def read(self, key: str) -> Optional[str]:
        self._check_key(key)
        self._require_available()
        return self._read(key)

    def write(self, key: str, value: str) -> bool:
        self._check_key(key)
        self._require_available()
        if not isinstance(value, str):
            raise TypeError(f"Stored values must be str, got {type(value).__name__}")
        if self.max_value_bytes is not None:
            size = len(value.encode('utf-8'))
            if size > self.max_value_bytes:
                self._log.error("Value for %s is %d bytes, quota is %d",
                                key, size, self.max_value_bytes)
                return False
        return self._write(key, value)

    def delete(self, key: str) -> bool:
        """Remove *key*.  Returns ``True`` if it existed."""
        self._check_key(key)
        self._require_available()
        return self._delete(key)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _check_key(key: str) -> None:
        check_key(key)

    def _require_available(self) -> None:
        if not self.is_available():
            raise MediumUnavailable(f"{type(self).__name__} is not available")

    def _read(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def _write(self, key: str, value: str) -> bool:
        raise NotImplementedError

    def _delete(self, key: str) -> bool:
        raise NotImplementedError
