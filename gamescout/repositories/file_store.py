"""Key-value medium backed by one file per key."""
import os
import tempfile
from typing import Optional

from ..errors import DeserializationFailure, MediumUnavailable
from .base import KeyValueStore


class FileKeyValueStore(KeyValueStore):
    """Persists each key as ``<directory>/<key>.json``.

    The file holds the raw serialised value.  Writes use a write-then-rename
    strategy so a key is never left in a partially-written state: readers
    see either the previous value or the new one.
    """

    def __init__(self, directory: str = '.gamescout',
                 max_value_bytes: Optional[int] = None,
                 create: bool = True) -> None:
        super().__init__(max_value_bytes)
        self.directory = os.path.abspath(directory)
        if create:
            try:
                os.makedirs(self.directory, exist_ok=True)
            except OSError as exc:
                self._log.warning("Could not create %s: %s", self.directory, exc)

    def is_available(self) -> bool:
        return os.path.isdir(self.directory)

    def path_for(self, key: str) -> str:
        self._check_key(key)
        return os.path.join(self.directory, f'{key}.json')

    def _read(self, key: str) -> Optional[str]:
        path = self.path_for(key)
        try:
            with open(path, 'r', encoding='utf-8') as fh:
                return fh.read()
        except FileNotFoundError:
            return None
        except UnicodeDecodeError as exc:
            raise DeserializationFailure(f"{path} is not valid UTF-8: {exc}") from exc
        except OSError as exc:
            raise MediumUnavailable(f"Could not read {path}: {exc}") from exc

    def _write(self, key: str, value: str) -> bool:
        path = self.path_for(key)
        try:
            fd, tmp_path = tempfile.mkstemp(dir=self.directory, suffix='.tmp')
        except OSError as exc:
            self._log.error("Could not write %s: %s", path, exc)
            return False
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as fh:
                fh.write(value)
            os.replace(tmp_path, path)
            return True
        except OSError as exc:
            self._log.error("Could not write %s: %s", path, exc)
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
            return False

    def _delete(self, key: str) -> bool:
        try:
            os.remove(self.path_for(key))
            return True
        except FileNotFoundError:
            return False
