"""Runtime wiring between the CLI, the site stores and the switcher."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Optional, TypeVar

import click
import yaml

from ProfileSwitch.stores import SiteStorage, StoreError
from ProfileSwitch.switching import (
    ProfileLocator,
    ProfileSwitcher,
    SwitchResult,
    build_switcher,
    resolve_sync_directory,
)

from .config import ResolvedConfig
from .logging import progress_spinner

T = TypeVar("T")


@dataclass
class CommandRuntime:
    """Holds context required during command execution."""

    config: ResolvedConfig
    logger: logging.Logger
    storage: SiteStorage
    _switchers: Dict[Optional[str], ProfileSwitcher] = field(default_factory=dict, repr=False)

    @property
    def sync_directory(self) -> Path:
        return resolve_sync_directory(
            self.config.context.site_root, self.config.context.config_sync_directory
        )

    def locator(self, target_profile: Optional[str] = None) -> ProfileLocator:
        context = self.config.context
        return ProfileLocator(
            self.storage.config,
            self.sync_directory,
            default_target=context.default_target_profile,
            install_profile=context.install_profile,
            target_profile=target_profile or context.target_profile,
            logger=self.logger,
        )

    def switcher(self, target_profile: Optional[str] = None) -> ProfileSwitcher:
        """Return the switcher for this invocation, resolving profiles once."""

        if target_profile not in self._switchers:
            self._switchers[target_profile] = build_switcher(
                self.locator(target_profile),
                config_factory=self.storage.config,
                keyvalue=self.storage.keyvalue,
                state_store=self.storage.state,
                cache=self.storage.cache,
                logger=self.logger,
            )
        return self._switchers[target_profile]


def run_with_progress(runtime: CommandRuntime, message: str, performer: Callable[[], T]) -> T:
    if runtime.config.log_format == "json":
        return performer()
    with progress_spinner(message):
        return performer()


def execute_switch(runtime: CommandRuntime, switcher: ProfileSwitcher) -> SwitchResult:
    """Run the switch and report the outcome on stdout."""

    if not switcher.is_pending:
        result = switcher.switch()
    else:
        result = run_with_progress(
            runtime,
            f"Switching profile {switcher.old_profile} -> {switcher.target_profile}",
            switcher.switch,
        )
    click.echo(f"[{'ok' if result.changed else 'no-op'}] {result.message}")
    return result


def import_configuration(runtime: CommandRuntime, source: Path) -> Dict[str, List[str]]:
    """Synchronise the active configuration store with ``source``.

    Objects present in ``source`` are created or replaced, objects missing
    from it are deleted. Caches are flushed afterwards.
    """

    if not source.is_dir():
        raise StoreError(f"Sync directory not found: {source}")

    factory = runtime.storage.config
    incoming: Dict[str, dict] = {}
    for path in sorted(source.glob("*.yml")):
        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8"))
        except (UnicodeDecodeError, yaml.YAMLError) as exc:
            raise StoreError(f"Invalid configuration file {path.name}: {exc}") from exc
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise StoreError(f"Configuration file {path.name} must contain a mapping")
        incoming[path.stem] = data

    existing = set(factory.list_all())
    summary: Dict[str, List[str]] = {"create": [], "update": [], "delete": [], "unchanged": []}
    for name, data in incoming.items():
        config = factory.get_editable(name)
        if name not in existing:
            summary["create"].append(name)
        elif config.get() == data:
            summary["unchanged"].append(name)
            continue
        else:
            summary["update"].append(name)
        config.set_data(data).save()
    for name in sorted(existing.difference(incoming)):
        factory.delete(name)
        summary["delete"].append(name)

    runtime.storage.cache.flush_all()
    runtime.logger.info(
        "Configuration imported",
        extra={
            "sync_directory": str(source),
            **{f"config_{key}": len(value) for key, value in summary.items()},
        },
    )
    return summary


def build_runtime(ctx: click.Context) -> CommandRuntime:
    """Return the runtime stored on the Click context, creating it on first use."""

    runtime: Optional[CommandRuntime] = ctx.obj.get("runtime")
    if runtime is None:
        resolved: ResolvedConfig = ctx.obj["config"]
        logger: logging.Logger = ctx.obj["logger"]
        runtime = CommandRuntime(
            config=resolved,
            logger=logger,
            storage=SiteStorage.open(resolved.storage_root),
        )
        ctx.obj["runtime"] = runtime
    return runtime
