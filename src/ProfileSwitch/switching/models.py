"""Data structures and constants for install profile switching."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

DEFAULT_TARGET_PROFILE = "minimal"
EXTENSION_CONFIG = "core.extension"
MANIFEST_FILENAME = f"{EXTENSION_CONFIG}.yml"
SCHEMA_COLLECTION = "system.schema"
PROFILE_DISCOVERY_STATE_KEY = "system.profile.files"

# Weight the extension system always assigns to the install profile module.
PROFILE_MODULE_WEIGHT = 1000
# Schema version meaning "install profile, assume latest".
PROFILE_SCHEMA_VERSION = 9000

EXIT_SUCCESS = 0
EXIT_FAILURE = 1
EXIT_FAILURE_WITH_CLARITY = 3


class SwitchOutcome(str, Enum):
    """Result classification for a switch attempt."""

    NOOP = "no-op"
    SWITCHED = "switched"


class SwitchState(str, Enum):
    """Lifecycle of a single switch invocation."""

    IDLE = "idle"
    RESOLVING = "resolving"
    SWITCHING = "switching"
    NOOP_DONE = "no-op-done"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True)
class SwitchResult:
    """Outcome of :meth:`ProfileSwitcher.switch`."""

    old: str
    target: str
    outcome: SwitchOutcome
    message: str

    @property
    def changed(self) -> bool:
        return self.outcome is SwitchOutcome.SWITCHED

    @property
    def exit_code(self) -> int:
        return EXIT_SUCCESS


__all__ = [
    "DEFAULT_TARGET_PROFILE",
    "EXIT_FAILURE",
    "EXIT_FAILURE_WITH_CLARITY",
    "EXIT_SUCCESS",
    "EXTENSION_CONFIG",
    "MANIFEST_FILENAME",
    "PROFILE_DISCOVERY_STATE_KEY",
    "PROFILE_MODULE_WEIGHT",
    "PROFILE_SCHEMA_VERSION",
    "SCHEMA_COLLECTION",
    "SwitchOutcome",
    "SwitchResult",
    "SwitchState",
]
