from .base import KeyValueStore
from .json_storage import JsonFileStore
from .memory_storage import MemoryStore
from .sqlite_storage import SQLiteStore

__all__ = ["KeyValueStore", "JsonFileStore", "MemoryStore", "SQLiteStore"]
