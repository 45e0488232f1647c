"""Configuration, key-value, state and cache stores."""

from .base import (
    CacheBackend,
    Config,
    ConfigFactory,
    ConfigObject,
    KeyValueFactory,
    KeyValueStore,
    StateStore,
    StoreError,
)
from .filesystem import (
    FileCache,
    FileConfigFactory,
    FileKeyValueFactory,
    FileKeyValueStore,
    FileState,
    SiteStorage,
)
from .memory import (
    MemoryCache,
    MemoryConfigFactory,
    MemoryJournal,
    MemoryKeyValueFactory,
    MemoryKeyValueStore,
    MemoryState,
)

__all__ = [
    "CacheBackend",
    "Config",
    "ConfigFactory",
    "ConfigObject",
    "FileCache",
    "FileConfigFactory",
    "FileKeyValueFactory",
    "FileKeyValueStore",
    "FileState",
    "KeyValueFactory",
    "KeyValueStore",
    "MemoryCache",
    "MemoryConfigFactory",
    "MemoryJournal",
    "MemoryKeyValueFactory",
    "MemoryKeyValueStore",
    "MemoryState",
    "SiteStorage",
    "StateStore",
    "StoreError",
]
