"""Store interfaces used by the profile switcher."""

from __future__ import annotations

import copy
from typing import Any, Dict, Iterable, Mapping, Optional, Protocol


class StoreError(RuntimeError):
    """Raised when a backing store cannot be read or written."""


class Config(Protocol):
    """Protocol describing a named configuration object."""

    name: str

    def get(self, key: str = "") -> Any:  # pragma: no cover - protocol
        ...

    def set(self, key: str, value: Any) -> "Config":  # pragma: no cover - protocol
        ...

    def clear(self, key: str) -> "Config":  # pragma: no cover - protocol
        ...

    def save(self) -> "Config":  # pragma: no cover - protocol
        ...


class ConfigFactory(Protocol):
    """Protocol describing access to the active configuration store."""

    def get(self, name: str) -> Config:  # pragma: no cover - protocol
        ...

    def get_editable(self, name: str) -> Config:  # pragma: no cover - protocol
        ...

    def list_all(self) -> Iterable[str]:  # pragma: no cover - protocol
        ...

    def delete(self, name: str) -> None:  # pragma: no cover - protocol
        ...

    def reset(self) -> None:  # pragma: no cover - protocol
        ...


class KeyValueStore(Protocol):
    """Protocol describing a single key-value collection."""

    collection: str

    def get(self, key: str, default: Any = None) -> Any:  # pragma: no cover - protocol
        ...

    def get_all(self) -> Dict[str, Any]:  # pragma: no cover - protocol
        ...

    def set(self, key: str, value: Any) -> None:  # pragma: no cover - protocol
        ...

    def delete(self, key: str) -> None:  # pragma: no cover - protocol
        ...


class KeyValueFactory(Protocol):
    """Protocol returning key-value collections by name."""

    def get(self, collection: str) -> KeyValueStore:  # pragma: no cover - protocol
        ...


class StateStore(Protocol):
    """Protocol describing the site state service."""

    def get(self, key: str, default: Any = None) -> Any:  # pragma: no cover - protocol
        ...

    def set(self, key: str, value: Any) -> None:  # pragma: no cover - protocol
        ...

    def delete(self, key: str) -> None:  # pragma: no cover - protocol
        ...


class CacheBackend(Protocol):
    """Protocol describing the flush-everything cache operation."""

    def flush_all(self) -> None:  # pragma: no cover - protocol
        ...


class ConfigWriter(Protocol):
    def __call__(self, name: str, data: Dict[str, Any]) -> None:  # pragma: no cover - protocol
        ...


class ConfigObject:
    """Configuration object with dotted-key access.

    Keys such as ``module.standard`` address nested mappings. Mutations stay in
    memory until :meth:`save` hands the data to the owning factory.
    """

    def __init__(
        self,
        name: str,
        data: Optional[Mapping[str, Any]],
        writer: Optional[ConfigWriter] = None,
    ) -> None:
        self.name = name
        self._data: Dict[str, Any] = copy.deepcopy(dict(data or {}))
        self._writer = writer

    def get(self, key: str = "") -> Any:
        if not key:
            return copy.deepcopy(self._data)
        node: Any = self._data
        for part in key.split("."):
            if not isinstance(node, Mapping) or part not in node:
                return None
            node = node[part]
        return copy.deepcopy(node)

    def set(self, key: str, value: Any) -> "ConfigObject":
        parts = key.split(".")
        node = self._data
        for part in parts[:-1]:
            child = node.get(part)
            if not isinstance(child, dict):
                child = {}
                node[part] = child
            node = child
        node[parts[-1]] = value
        return self

    def clear(self, key: str) -> "ConfigObject":
        parts = key.split(".")
        node: Any = self._data
        for part in parts[:-1]:
            node = node.get(part) if isinstance(node, dict) else None
            if node is None:
                return self
        if isinstance(node, dict):
            node.pop(parts[-1], None)
        return self

    def set_data(self, data: Mapping[str, Any]) -> "ConfigObject":
        self._data = copy.deepcopy(dict(data))
        return self

    def save(self) -> "ConfigObject":
        if self._writer is None:
            raise StoreError(f"Configuration '{self.name}' is read-only")
        self._writer(self.name, copy.deepcopy(self._data))
        return self


__all__ = [
    "CacheBackend",
    "Config",
    "ConfigFactory",
    "ConfigObject",
    "KeyValueFactory",
    "KeyValueStore",
    "StateStore",
    "StoreError",
]
