"""Process-local key-value medium."""
from typing import Dict, Optional

from .base import KeyValueStore


class MemoryKeyValueStore(KeyValueStore):
    """Keeps values in a dict owned by the instance.

    Nothing survives the process; useful for ephemeral sessions and tests.
    Pass ``available=False`` to model an environment with no storage medium
    at all.
    """

    def __init__(self, initial: Optional[Dict[str, str]] = None,
                 max_value_bytes: Optional[int] = None,
                 available: bool = True) -> None:
        super().__init__(max_value_bytes)
        self.data: Dict[str, str] = dict(initial or {})
        self.available = available

    def is_available(self) -> bool:
        return self.available

    def _read(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def _write(self, key: str, value: str) -> bool:
        self.data[key] = value
        return True

    def _delete(self, key: str) -> bool:
        return self.data.pop(key, None) is not None
