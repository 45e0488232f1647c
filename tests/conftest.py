from __future__ import annotations

import sys
from pathlib import Path
from typing import Callable, Optional

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

import pytest  # noqa: E402
import yaml  # noqa: E402

from ProfileSwitch.stores import SiteStorage  # noqa: E402

SiteFactory = Callable[..., Path]


def write_manifest(directory: Path, profile: Optional[str], **extra: object) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    payload: dict = {"module": {"node": 0, "system": 0}, **extra}
    if profile is not None:
        payload["profile"] = profile
        payload["module"][profile] = 1000
    path = directory / "core.extension.yml"
    path.write_text(yaml.safe_dump(payload), encoding="utf-8")
    return path


def seed_site(storage_root: Path, profile: str, modules: Optional[dict] = None) -> SiteStorage:
    storage = SiteStorage.open(storage_root)
    module_list = dict(modules or {"node": 0, "system": 0})
    module_list[profile] = 1000
    storage.config.get_editable("core.extension").set("profile", profile).set(
        "module", module_list
    ).save()
    schema = storage.keyvalue.get("system.schema")
    schema.set("system", 8901)
    schema.set(profile, 8000)
    storage.state.set("system.profile.files", {profile: f"core/profiles/{profile}"})
    return storage


@pytest.fixture
def make_site(tmp_path: Path) -> SiteFactory:
    """Create ``<tmp>/web`` with stores seeded on ``current`` and an optional manifest."""

    def factory(current: str = "standard", target: Optional[str] = "minimal") -> Path:
        site_root = tmp_path / "web"
        site_root.mkdir(parents=True, exist_ok=True)
        seed_site(site_root / ".profile_switch", current)
        if target is not None:
            write_manifest(tmp_path / "config" / "sync", target)
        return site_root

    return factory
