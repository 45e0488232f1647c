"""Install profile resolution and switching."""

from __future__ import annotations

import logging
from typing import Optional

from ..stores import CacheBackend, ConfigFactory, KeyValueFactory, StateStore
from .locator import DEFAULT_SYNC_DIRECTORY, ProfileLocator, resolve_sync_directory
from .models import (
    DEFAULT_TARGET_PROFILE,
    EXIT_FAILURE,
    EXIT_FAILURE_WITH_CLARITY,
    EXIT_SUCCESS,
    EXTENSION_CONFIG,
    MANIFEST_FILENAME,
    PROFILE_DISCOVERY_STATE_KEY,
    PROFILE_MODULE_WEIGHT,
    PROFILE_SCHEMA_VERSION,
    SCHEMA_COLLECTION,
    SwitchOutcome,
    SwitchResult,
    SwitchState,
)
from .switcher import ProfileSwitcher


def build_switcher(
    locator: ProfileLocator,
    *,
    config_factory: ConfigFactory,
    keyvalue: KeyValueFactory,
    state_store: StateStore,
    cache: CacheBackend,
    logger: Optional[logging.Logger] = None,
) -> ProfileSwitcher:
    """Resolve both profiles and return a switcher bound to them."""

    logger = logger or logging.getLogger(__name__)
    logger.debug(
        "Switch state changed",
        extra={"from_state": SwitchState.IDLE.value, "to_state": SwitchState.RESOLVING.value},
    )
    old_profile = locator.resolve_current_profile()
    target_profile = locator.resolve_target_profile()
    logger.debug(
        "Profiles resolved",
        extra={"old_profile": old_profile, "target_profile": target_profile},
    )
    switcher = ProfileSwitcher(
        old_profile,
        target_profile,
        state_store=state_store,
        config_factory=config_factory,
        keyvalue=keyvalue,
        cache=cache,
        logger=logger,
    )
    switcher.state = SwitchState.RESOLVING
    return switcher


__all__ = [
    "DEFAULT_SYNC_DIRECTORY",
    "DEFAULT_TARGET_PROFILE",
    "EXIT_FAILURE",
    "EXIT_FAILURE_WITH_CLARITY",
    "EXIT_SUCCESS",
    "EXTENSION_CONFIG",
    "MANIFEST_FILENAME",
    "PROFILE_DISCOVERY_STATE_KEY",
    "PROFILE_MODULE_WEIGHT",
    "PROFILE_SCHEMA_VERSION",
    "ProfileLocator",
    "ProfileSwitcher",
    "SCHEMA_COLLECTION",
    "SwitchOutcome",
    "SwitchResult",
    "SwitchState",
    "build_switcher",
    "resolve_sync_directory",
]
