"""In-memory store backend.

Every mutating call is appended to a shared journal so callers can inspect the
exact sequence of writes an operation performed.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from .base import ConfigObject

JournalEntry = Tuple[str, ...]


@dataclass
class MemoryJournal:
    """Ordered record of store mutations."""

    entries: List[JournalEntry] = field(default_factory=list)

    def record(self, *entry: str) -> None:
        self.entries.append(tuple(entry))

    def __len__(self) -> int:  # pragma: no cover - trivial
        return len(self.entries)


class MemoryConfigFactory:
    """Configuration store kept in a dictionary."""

    def __init__(
        self,
        data: Optional[Mapping[str, Mapping[str, Any]]] = None,
        journal: Optional[MemoryJournal] = None,
    ) -> None:
        self._data: Dict[str, Dict[str, Any]] = {
            name: copy.deepcopy(dict(values)) for name, values in (data or {}).items()
        }
        self.journal = journal if journal is not None else MemoryJournal()

    def get(self, name: str) -> ConfigObject:
        return ConfigObject(name, self._data.get(name))

    def get_editable(self, name: str) -> ConfigObject:
        return ConfigObject(name, self._data.get(name), writer=self._write)

    def list_all(self) -> Iterable[str]:
        return sorted(self._data)

    def delete(self, name: str) -> None:
        self.journal.record("config.delete", name)
        self._data.pop(name, None)

    def reset(self) -> None:
        """Nothing is cached in memory."""

    def _write(self, name: str, data: Dict[str, Any]) -> None:
        self.journal.record("config.save", name)
        self._data[name] = data


class MemoryKeyValueStore:
    def __init__(self, collection: str, journal: MemoryJournal) -> None:
        self.collection = collection
        self._values: Dict[str, Any] = {}
        self._journal = journal

    def get(self, key: str, default: Any = None) -> Any:
        return copy.deepcopy(self._values.get(key, default))

    def get_all(self) -> Dict[str, Any]:
        return copy.deepcopy(self._values)

    def set(self, key: str, value: Any) -> None:
        self._journal.record("keyvalue.set", self.collection, key)
        self._values[key] = copy.deepcopy(value)

    def delete(self, key: str) -> None:
        self._journal.record("keyvalue.delete", self.collection, key)
        self._values.pop(key, None)


class MemoryKeyValueFactory:
    def __init__(
        self,
        data: Optional[Mapping[str, Mapping[str, Any]]] = None,
        journal: Optional[MemoryJournal] = None,
    ) -> None:
        self.journal = journal if journal is not None else MemoryJournal()
        self._collections: Dict[str, MemoryKeyValueStore] = {}
        for collection, values in (data or {}).items():
            store = self.get(collection)
            store._values.update(copy.deepcopy(dict(values)))

    def get(self, collection: str) -> MemoryKeyValueStore:
        if collection not in self._collections:
            self._collections[collection] = MemoryKeyValueStore(collection, self.journal)
        return self._collections[collection]


class MemoryState:
    def __init__(
        self,
        data: Optional[Mapping[str, Any]] = None,
        journal: Optional[MemoryJournal] = None,
    ) -> None:
        self._values: Dict[str, Any] = copy.deepcopy(dict(data or {}))
        self.journal = journal if journal is not None else MemoryJournal()

    def get(self, key: str, default: Any = None) -> Any:
        return copy.deepcopy(self._values.get(key, default))

    def set(self, key: str, value: Any) -> None:
        self.journal.record("state.set", key)
        self._values[key] = copy.deepcopy(value)

    def delete(self, key: str) -> None:
        self.journal.record("state.delete", key)
        self._values.pop(key, None)


class MemoryCache:
    def __init__(self, journal: Optional[MemoryJournal] = None) -> None:
        self.journal = journal if journal is not None else MemoryJournal()
        self.flush_count = 0

    def flush_all(self) -> None:
        self.journal.record("cache.flush")
        self.flush_count += 1


__all__ = [
    "MemoryCache",
    "MemoryConfigFactory",
    "MemoryJournal",
    "MemoryKeyValueFactory",
    "MemoryKeyValueStore",
    "MemoryState",
]
