"""Repository package: expose all key-value media from one import."""
from .base import KeyValueStore
from .memory_store import MemoryKeyValueStore
from .file_store import FileKeyValueStore
from .sql_store import SqlKeyValueStore

__all__ = [
    'KeyValueStore',
    'MemoryKeyValueStore',
    'FileKeyValueStore',
    'SqlKeyValueStore',
]
