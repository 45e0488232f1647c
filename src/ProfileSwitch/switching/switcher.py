"""Install profile switching against the site stores."""

from __future__ import annotations

import logging
from typing import Optional

from ..stores import CacheBackend, ConfigFactory, KeyValueFactory, StateStore
from .models import (
    EXTENSION_CONFIG,
    PROFILE_DISCOVERY_STATE_KEY,
    PROFILE_MODULE_WEIGHT,
    PROFILE_SCHEMA_VERSION,
    SCHEMA_COLLECTION,
    SwitchOutcome,
    SwitchResult,
    SwitchState,
)

LOGGER = logging.getLogger(__name__)


class ProfileSwitcher:
    """Replaces the active install profile.

    The mutation sequence is not transactional. A failing store write
    propagates to the caller and leaves the earlier steps applied.
    """

    def __init__(
        self,
        old_profile: str,
        target_profile: str,
        *,
        state_store: StateStore,
        config_factory: ConfigFactory,
        keyvalue: KeyValueFactory,
        cache: CacheBackend,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.old_profile = old_profile
        self.target_profile = target_profile
        self._state_store = state_store
        self._config_factory = config_factory
        self._keyvalue = keyvalue
        self._cache = cache
        self._logger = logger or LOGGER
        self.state = SwitchState.IDLE

    @property
    def is_pending(self) -> bool:
        return self.old_profile != self.target_profile

    def _transition(self, state: SwitchState) -> None:
        self._logger.debug(
            "Switch state changed",
            extra={"from_state": self.state.value, "to_state": state.value},
        )
        self.state = state

    def switch(self) -> SwitchResult:
        old, target = self.old_profile, self.target_profile
        if not self.is_pending:
            message = f"Current profile is already {target}"
            self._transition(SwitchState.NOOP_DONE)
            self._logger.info(message, extra={"profile": target})
            return SwitchResult(old=old, target=target, outcome=SwitchOutcome.NOOP, message=message)

        self._transition(SwitchState.SWITCHING)
        try:
            self._apply(old, target)
        except Exception:
            self._transition(SwitchState.FAILED)
            self._logger.exception(
                "Profile switch failed; stores may be partially updated",
                extra={"old_profile": old, "target_profile": target},
            )
            raise

        message = f"Changed profile from {old} to {target}"
        self._transition(SwitchState.DONE)
        self._logger.info(message, extra={"old_profile": old, "target_profile": target})
        return SwitchResult(old=old, target=target, outcome=SwitchOutcome.SWITCHED, message=message)

    def _apply(self, old: str, target: str) -> None:
        schema_store = self._keyvalue.get(SCHEMA_COLLECTION)
        # Forces profile discovery to rescan.
        self._state_store.delete(PROFILE_DISCOVERY_STATE_KEY)

        extension_config = self._config_factory.get_editable(EXTENSION_CONFIG)
        extension_config.set("profile", target).save()

        # The profile must be visible before the module list is rewritten.
        self._cache.flush_all()

        # Install profiles are also registered as enabled modules.
        extension_config.clear(f"module.{old}").set(
            f"module.{target}", PROFILE_MODULE_WEIGHT
        ).save()

        schema_store.delete(old)
        schema_store.set(target, PROFILE_SCHEMA_VERSION)

        self._cache.flush_all()


__all__ = ["ProfileSwitcher"]
