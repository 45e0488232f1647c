"""Resolution of the current and target install profiles."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Optional

import yaml

from ..stores import ConfigFactory
from .models import DEFAULT_TARGET_PROFILE, EXTENSION_CONFIG, MANIFEST_FILENAME

LOGGER = logging.getLogger(__name__)

DEFAULT_SYNC_DIRECTORY = "../config/sync"


def resolve_sync_directory(site_root: Path, sync_directory: Optional[str | Path]) -> Path:
    """Return the absolute sync directory for a site.

    Relative values are interpreted against the site root.
    """

    candidate = Path(sync_directory or DEFAULT_SYNC_DIRECTORY).expanduser()
    if not candidate.is_absolute():
        candidate = site_root / candidate
    return candidate.resolve()


class ProfileLocator:
    """Determines which profile is active and which one should be."""

    def __init__(
        self,
        config_factory: ConfigFactory,
        sync_directory: Path,
        *,
        default_target: str = DEFAULT_TARGET_PROFILE,
        install_profile: Optional[str] = None,
        target_profile: Optional[str] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._config_factory = config_factory
        self._sync_directory = sync_directory
        self._default_target = default_target
        self._install_profile = install_profile
        self._target_profile = target_profile
        self._logger = logger or LOGGER

    @property
    def sync_directory(self) -> Path:
        return self._sync_directory

    def resolve_current_profile(self) -> str:
        if self._install_profile:
            return self._install_profile
        value = self._config_factory.get(EXTENSION_CONFIG).get("profile")
        return "" if value is None else str(value)

    def find_manifest_directory(self) -> Optional[Path]:
        """Return the directory expected to hold the extension manifest.

        When the sync directory does not exist, sibling directories are searched
        and the lexicographically first one containing a manifest wins.
        """

        directory = self._sync_directory
        if directory.is_dir():
            return directory
        parent = directory.parent
        if not parent.is_dir():
            return None
        matches = sorted(parent.glob(f"*/{MANIFEST_FILENAME}"))
        if not matches:
            return None
        if len(matches) > 1:
            self._logger.debug(
                "Multiple sibling manifests found; using first",
                extra={"candidates": [str(path.parent) for path in matches]},
            )
        return matches[0].parent

    def resolve_target_profile(self) -> str:
        if self._target_profile:
            return self._target_profile
        directory = self.find_manifest_directory()
        if directory is None:
            self._logger.debug(
                "Sync directory missing; using default target profile",
                extra={"sync_directory": str(self._sync_directory), "profile": self._default_target},
            )
            return self._default_target
        profile = _read_manifest_profile(directory / MANIFEST_FILENAME)
        if profile is None:
            self._logger.debug(
                "Extension manifest unusable; using default target profile",
                extra={"manifest_dir": str(directory), "profile": self._default_target},
            )
            return self._default_target
        return profile


def _read_manifest_profile(path: Path) -> Optional[str]:
    if not path.is_file():
        return None
    try:
        data: Any = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, yaml.YAMLError):
        return None
    if not isinstance(data, dict):
        return None
    profile = data.get("profile")
    return profile if isinstance(profile, str) else None


__all__ = [
    "DEFAULT_SYNC_DIRECTORY",
    "ProfileLocator",
    "resolve_sync_directory",
]
