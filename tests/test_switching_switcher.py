"""Tests for the install profile mutation sequence."""

from __future__ import annotations

from typing import Dict, Tuple

import pytest

from ProfileSwitch.stores import (
    MemoryCache,
    MemoryConfigFactory,
    MemoryJournal,
    MemoryKeyValueFactory,
    MemoryState,
    StoreError,
)
from ProfileSwitch.switching import (
    ProfileLocator,
    ProfileSwitcher,
    SwitchOutcome,
    SwitchState,
    build_switcher,
)

Stores = Tuple[MemoryConfigFactory, MemoryKeyValueFactory, MemoryState, MemoryCache, MemoryJournal]


def make_stores(old: str) -> Stores:
    journal = MemoryJournal()
    config = MemoryConfigFactory(
        {
            "core.extension": {
                "profile": old,
                "module": {"node": 0, "system": 0, old: 1000},
            }
        },
        journal=journal,
    )
    keyvalue = MemoryKeyValueFactory({"system.schema": {"system": 8901, old: 8000}}, journal=journal)
    state = MemoryState({"system.profile.files": {old: "profiles/" + old}}, journal=journal)
    cache = MemoryCache(journal=journal)
    journal.entries.clear()
    return config, keyvalue, state, cache, journal


def make_switcher(old: str, target: str) -> Tuple[ProfileSwitcher, Stores]:
    stores = make_stores(old)
    config, keyvalue, state, cache, _ = stores
    switcher = ProfileSwitcher(
        old,
        target,
        state_store=state,
        config_factory=config,
        keyvalue=keyvalue,
        cache=cache,
    )
    return switcher, stores


@pytest.mark.parametrize("profile", ["minimal", "standard", "demo_umami"])
def test_same_profile_is_noop_without_store_calls(profile: str) -> None:
    switcher, (config, _, _, cache, journal) = make_switcher(profile, profile)

    result = switcher.switch()

    assert result.outcome is SwitchOutcome.NOOP
    assert result.exit_code == 0
    assert result.message == f"Current profile is already {profile}"
    assert journal.entries == []
    assert cache.flush_count == 0
    assert switcher.state is SwitchState.NOOP_DONE


@pytest.mark.parametrize(
    ("old", "target"),
    [("standard", "minimal"), ("minimal", "standard"), ("standard", "custom_profile")],
)
def test_switch_updates_all_stores(old: str, target: str) -> None:
    switcher, (config, keyvalue, state, cache, _) = make_switcher(old, target)

    result = switcher.switch()

    extension = config.get("core.extension")
    schema = keyvalue.get("system.schema")
    assert result.outcome is SwitchOutcome.SWITCHED
    assert result.changed
    assert result.message == f"Changed profile from {old} to {target}"
    assert extension.get("profile") == target
    assert extension.get(f"module.{target}") == 1000
    assert extension.get(f"module.{old}") is None
    assert extension.get("module.node") == 0
    assert schema.get(old) is None
    assert schema.get(target) == 9000
    assert schema.get("system") == 8901
    assert state.get("system.profile.files") is None
    assert cache.flush_count == 2
    assert switcher.state is SwitchState.DONE


def test_switch_runs_steps_in_order() -> None:
    switcher, (_, _, _, _, journal) = make_switcher("standard", "minimal")

    switcher.switch()

    assert journal.entries == [
        ("state.delete", "system.profile.files"),
        ("config.save", "core.extension"),
        ("cache.flush",),
        ("config.save", "core.extension"),
        ("keyvalue.delete", "system.schema", "standard"),
        ("keyvalue.set", "system.schema", "minimal"),
        ("cache.flush",),
    ]


class FailingSchemaStore:
    collection = "system.schema"

    def __init__(self) -> None:
        self.values: Dict[str, int] = {"standard": 8000}

    def get(self, key, default=None):
        return self.values.get(key, default)

    def get_all(self):
        return dict(self.values)

    def delete(self, key: str) -> None:
        raise StoreError("schema store unavailable")

    def set(self, key: str, value) -> None:  # pragma: no cover - never reached
        self.values[key] = value


class FailingKeyValueFactory:
    def get(self, collection: str) -> FailingSchemaStore:
        return FailingSchemaStore()


def test_store_failure_propagates_with_partial_application() -> None:
    config, _, state, cache, _ = make_stores("standard")
    switcher = ProfileSwitcher(
        "standard",
        "minimal",
        state_store=state,
        config_factory=config,
        keyvalue=FailingKeyValueFactory(),
        cache=cache,
    )

    with pytest.raises(StoreError):
        switcher.switch()

    extension = config.get("core.extension")
    assert switcher.state is SwitchState.FAILED
    assert extension.get("profile") == "minimal"
    assert extension.get("module.minimal") == 1000
    assert cache.flush_count == 1


def test_build_switcher_resolves_profiles(tmp_path) -> None:
    config, keyvalue, state, cache, _ = make_stores("standard")
    locator = ProfileLocator(config, tmp_path / "absent")

    switcher = build_switcher(
        locator,
        config_factory=config,
        keyvalue=keyvalue,
        state_store=state,
        cache=cache,
    )

    assert switcher.old_profile == "standard"
    assert switcher.target_profile == "minimal"
    assert switcher.is_pending
    assert switcher.state is SwitchState.RESOLVING
