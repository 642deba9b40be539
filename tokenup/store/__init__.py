from .base import DataStore
from .memory import MemoryDataStore
from .sql import SqlDataStore

__all__ = ["DataStore", "MemoryDataStore", "SqlDataStore"]
