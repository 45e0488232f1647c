"""Tests for the store backends."""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from ProfileSwitch.stores import (
    ConfigObject,
    MemoryCache,
    MemoryConfigFactory,
    MemoryJournal,
    MemoryState,
    SiteStorage,
    StoreError,
)


def test_config_object_dotted_access() -> None:
    config = ConfigObject("core.extension", {"module": {"node": 0}}, writer=lambda *_: None)

    config.set("module.standard", 1000).set("profile", "standard")
    assert config.get("module.standard") == 1000
    assert config.get("module") == {"node": 0, "standard": 1000}
    assert config.get("missing.key") is None

    config.clear("module.node").clear("not.there")
    assert config.get("module") == {"standard": 1000}


def test_read_only_config_cannot_be_saved() -> None:
    with pytest.raises(StoreError):
        ConfigObject("core.extension", {}).save()


def test_file_config_round_trip(tmp_path: Path) -> None:
    storage = SiteStorage.open(tmp_path)
    storage.config.get_editable("core.extension").set("profile", "standard").save()

    on_disk = yaml.safe_load((tmp_path / "config" / "core.extension.yml").read_text(encoding="utf-8"))
    assert on_disk == {"profile": "standard"}
    assert SiteStorage.open(tmp_path).config.get("core.extension").get("profile") == "standard"
    assert list(storage.config.list_all()) == ["core.extension"]


def test_file_config_static_cache_reset_on_flush(tmp_path: Path) -> None:
    storage = SiteStorage.open(tmp_path)
    storage.config.get_editable("system.site").set("name", "Before").save()
    (tmp_path / "config" / "system.site.yml").write_text("name: After\n", encoding="utf-8")

    assert storage.config.get("system.site").get("name") == "Before"
    storage.cache.flush_all()
    assert storage.config.get("system.site").get("name") == "After"


def test_corrupt_config_raises_store_error(tmp_path: Path) -> None:
    config_dir = tmp_path / "config"
    config_dir.mkdir()
    (config_dir / "core.extension.yml").write_text("profile: [oops\n", encoding="utf-8")

    with pytest.raises(StoreError):
        SiteStorage.open(tmp_path).config.get("core.extension")


def test_invalid_config_name_rejected(tmp_path: Path) -> None:
    with pytest.raises(StoreError):
        SiteStorage.open(tmp_path).config.get("../escape")


def test_keyvalue_persists_immediately(tmp_path: Path) -> None:
    storage = SiteStorage.open(tmp_path)
    schema = storage.keyvalue.get("system.schema")
    schema.set("standard", 8000)
    schema.set("system", 8901)
    schema.delete("standard")
    schema.delete("never-set")

    reopened = SiteStorage.open(tmp_path).keyvalue.get("system.schema")
    assert reopened.get_all() == {"system": 8901}
    assert reopened.get("standard", "absent") == "absent"


def test_state_uses_state_collection(tmp_path: Path) -> None:
    storage = SiteStorage.open(tmp_path)
    storage.state.set("system.profile.files", {"standard": "core/profiles/standard"})

    assert storage.keyvalue.get("state").get("system.profile.files") == {
        "standard": "core/profiles/standard"
    }
    storage.state.delete("system.profile.files")
    assert storage.state.get("system.profile.files") is None


def test_cache_flush_empties_bins(tmp_path: Path) -> None:
    storage = SiteStorage.open(tmp_path)
    for bin_name in ("render", "discovery"):
        bin_dir = tmp_path / "cache" / bin_name
        bin_dir.mkdir(parents=True)
        (bin_dir / "entry").write_text("cached", encoding="utf-8")

    assert storage.cache.bins() == ["discovery", "render"]
    storage.cache.flush_all()
    assert storage.cache.bins() == []


def test_corrupt_keyvalue_raises_store_error(tmp_path: Path) -> None:
    kv_dir = tmp_path / "keyvalue"
    kv_dir.mkdir()
    (kv_dir / "system.schema.json").write_text("{not json", encoding="utf-8")

    with pytest.raises(StoreError):
        SiteStorage.open(tmp_path).keyvalue.get("system.schema").get("system")


@pytest.mark.parametrize(
    "relative, read",
    [
        ("config/core.extension.yml", lambda storage: storage.config.get("core.extension")),
        ("keyvalue/system.schema.json", lambda storage: storage.keyvalue.get("system.schema").get_all()),
    ],
)
def test_undecodable_files_raise_store_error(tmp_path: Path, relative: str, read) -> None:
    path = tmp_path / relative
    path.parent.mkdir(parents=True)
    path.write_bytes(b"profile: \xff")

    with pytest.raises(StoreError):
        read(SiteStorage.open(tmp_path))


def test_memory_stores_share_an_empty_journal() -> None:
    journal = MemoryJournal()
    config = MemoryConfigFactory(journal=journal)
    state = MemoryState({"system.profile.files": {}}, journal=journal)
    cache = MemoryCache(journal=journal)

    assert config.journal is journal and state.journal is journal and cache.journal is journal
    config.get_editable("core.extension").set("profile", "minimal").save()
    state.delete("system.profile.files")
    cache.flush_all()

    assert journal.entries == [
        ("config.save", "core.extension"),
        ("state.delete", "system.profile.files"),
        ("cache.flush",),
    ]
