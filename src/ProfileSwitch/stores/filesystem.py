"""Site-directory store backend.

Layout under the storage root::

    config/<name>.yml        active configuration objects
    keyvalue/<collection>.json
    cache/<bin>/...          cache bins, emptied by a full flush

State lives in the ``state`` key-value collection. Every write is persisted
immediately.
"""

from __future__ import annotations

import json
import logging
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

import yaml

from .base import ConfigObject, StoreError

LOGGER = logging.getLogger(__name__)

CONFIG_DIRNAME = "config"
KEYVALUE_DIRNAME = "keyvalue"
CACHE_DIRNAME = "cache"
STATE_COLLECTION = "state"


def _safe_name(name: str) -> str:
    if not name or "/" in name or "\\" in name or name.startswith("."):
        raise StoreError(f"Invalid store name: {name!r}")
    return name


class FileConfigFactory:
    """Configuration store holding one YAML file per configuration object.

    Loaded objects are kept in a static cache until :meth:`reset` is called,
    which is what a full cache flush does.
    """

    def __init__(self, root: Path) -> None:
        self._root = root
        self._cache: Dict[str, Dict[str, Any]] = {}

    @property
    def root(self) -> Path:
        return self._root

    def _path(self, name: str) -> Path:
        return self._root / f"{_safe_name(name)}.yml"

    def _load(self, name: str) -> Dict[str, Any]:
        if name in self._cache:
            return self._cache[name]
        path = self._path(name)
        if not path.exists():
            return {}
        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8"))
        except (UnicodeDecodeError, yaml.YAMLError) as exc:
            raise StoreError(f"Configuration '{name}' is corrupt: {exc}") from exc
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise StoreError(f"Configuration '{name}' must be a mapping")
        self._cache[name] = data
        return data

    def get(self, name: str) -> ConfigObject:
        return ConfigObject(name, self._load(name))

    def get_editable(self, name: str) -> ConfigObject:
        return ConfigObject(name, self._load(name), writer=self._write)

    def list_all(self) -> Iterable[str]:
        if not self._root.is_dir():
            return []
        return sorted(path.stem for path in self._root.glob("*.yml"))

    def delete(self, name: str) -> None:
        self._path(name).unlink(missing_ok=True)
        self._cache.pop(name, None)

    def reset(self) -> None:
        self._cache.clear()

    def _write(self, name: str, data: Dict[str, Any]) -> None:
        path = self._path(name)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(yaml.safe_dump(data, sort_keys=True), encoding="utf-8")
        self._cache[name] = data
        LOGGER.debug("Configuration saved", extra={"config_name": name, "path": str(path)})


class FileKeyValueStore:
    """Key-value collection persisted as a JSON object."""

    def __init__(self, root: Path, collection: str) -> None:
        self.collection = collection
        self._path = root / f"{_safe_name(collection)}.json"

    def _read(self) -> Dict[str, Any]:
        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise StoreError(f"Key-value collection '{self.collection}' is corrupt: {exc}") from exc
        if not isinstance(data, dict):
            raise StoreError(f"Key-value collection '{self.collection}' must be an object")
        return data

    def _persist(self, data: Dict[str, Any]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(json.dumps(data, indent=2, sort_keys=True), encoding="utf-8")

    def get(self, key: str, default: Any = None) -> Any:
        return self._read().get(key, default)

    def get_all(self) -> Dict[str, Any]:
        return self._read()

    def set(self, key: str, value: Any) -> None:
        data = self._read()
        data[key] = value
        self._persist(data)

    def delete(self, key: str) -> None:
        data = self._read()
        if key in data:
            del data[key]
            self._persist(data)


class FileKeyValueFactory:
    def __init__(self, root: Path) -> None:
        self._root = root

    def get(self, collection: str) -> FileKeyValueStore:
        return FileKeyValueStore(self._root, collection)


class FileState:
    """State service backed by the ``state`` key-value collection."""

    def __init__(self, keyvalue: FileKeyValueFactory) -> None:
        self._store = keyvalue.get(STATE_COLLECTION)

    def get(self, key: str, default: Any = None) -> Any:
        return self._store.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._store.set(key, value)

    def delete(self, key: str) -> None:
        self._store.delete(key)


class FileCache:
    """Empties every cache bin and drops static configuration caches."""

    def __init__(self, root: Path, config_factory: Optional[FileConfigFactory] = None) -> None:
        self._root = root
        self._config_factory = config_factory

    def bins(self) -> List[str]:
        if not self._root.is_dir():
            return []
        return sorted(path.name for path in self._root.iterdir() if path.is_dir())

    def flush_all(self) -> None:
        flushed = self.bins()
        for name in flushed:
            shutil.rmtree(self._root / name)
        if self._config_factory is not None:
            self._config_factory.reset()
        LOGGER.debug("Caches flushed", extra={"cache_bins": flushed})


@dataclass(frozen=True)
class SiteStorage:
    """Bundle of file-backed stores rooted at a single directory."""

    root: Path
    config: FileConfigFactory
    keyvalue: FileKeyValueFactory
    state: FileState
    cache: FileCache

    @classmethod
    def open(cls, root: Path) -> "SiteStorage":
        config = FileConfigFactory(root / CONFIG_DIRNAME)
        keyvalue = FileKeyValueFactory(root / KEYVALUE_DIRNAME)
        return cls(
            root=root,
            config=config,
            keyvalue=keyvalue,
            state=FileState(keyvalue),
            cache=FileCache(root / CACHE_DIRNAME, config),
        )


__all__ = [
    "FileCache",
    "FileConfigFactory",
    "FileKeyValueFactory",
    "FileKeyValueStore",
    "FileState",
    "SiteStorage",
    "STATE_COLLECTION",
]
