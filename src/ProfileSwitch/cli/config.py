"""Configuration loading utilities for the ProfileSwitch CLI."""

from __future__ import annotations

import json
import os
import tomllib
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from ProfileSwitch.switching import DEFAULT_SYNC_DIRECTORY, DEFAULT_TARGET_PROFILE

DEFAULT_CONFIG_PATH = Path.home() / ".config" / "profile_switch" / "cli.toml"
DEFAULT_STATE_HOME = Path.home() / ".profile_switch"
CONTEXT_FILENAME = "context"
DEFAULT_STORAGE_DIRNAME = ".profile_switch"
DEFAULT_HOOK_TARGETS = ("deploy",)
SUPPORTED_HOOK_TARGETS = frozenset({"deploy", "config:import"})


def _expand(path: Optional[str | Path], base: Optional[Path]) -> Optional[Path]:
    if path is None:
        return None
    candidate = Path(path).expanduser()
    if not candidate.is_absolute() and base is not None:
        candidate = (base / candidate).resolve()
    return candidate


def _parse_hook_targets(raw: Any) -> tuple[str, ...]:
    if raw is None:
        return DEFAULT_HOOK_TARGETS
    if isinstance(raw, str):
        raw = raw.split(",")
    targets = tuple(dict.fromkeys(str(item).strip() for item in raw if str(item).strip()))
    unknown = sorted(set(targets).difference(SUPPORTED_HOOK_TARGETS))
    if unknown:
        raise ValueError(f"Unsupported hook targets: {', '.join(unknown)}")
    return targets


@dataclass(frozen=True)
class ContextConfig:
    """Configuration specific to a named site context."""

    name: str
    site_root: Path
    storage_root: Optional[Path] = None
    config_sync_directory: str = DEFAULT_SYNC_DIRECTORY
    default_target_profile: str = DEFAULT_TARGET_PROFILE
    install_profile: Optional[str] = None
    target_profile: Optional[str] = None
    hook_targets: tuple[str, ...] = DEFAULT_HOOK_TARGETS
    log_level: str = "INFO"

    @property
    def storage_path(self) -> Path:
        return self.storage_root or self.site_root / DEFAULT_STORAGE_DIRNAME


@dataclass(frozen=True)
class CLIConfig:
    """Raw CLI configuration before overrides are applied."""

    contexts: Dict[str, ContextConfig] = field(default_factory=dict)
    default_context: Optional[str] = None


@dataclass(frozen=True)
class ResolvedConfig:
    """Final configuration used during a CLI invocation."""

    context: ContextConfig
    contexts: Dict[str, ContextConfig]
    log_format: str
    verbose: bool
    config_path: Optional[Path]
    state_path: Path

    @property
    def site_root(self) -> Path:
        return self.context.site_root

    @property
    def storage_root(self) -> Path:
        return self.context.storage_path


def _parse_context(name: str, data: Mapping[str, Any], base_dir: Path) -> ContextConfig:
    site_root = _expand(data.get("site_root"), base_dir)
    if site_root is None:
        raise ValueError(f"Context '{name}' missing site_root")
    storage_root = _expand(data.get("storage_root"), base_dir)
    return ContextConfig(
        name=name,
        site_root=site_root,
        storage_root=storage_root,
        config_sync_directory=str(data.get("config_sync_directory") or DEFAULT_SYNC_DIRECTORY),
        default_target_profile=str(data.get("default_target_profile") or DEFAULT_TARGET_PROFILE),
        install_profile=data.get("install_profile") or None,
        target_profile=data.get("target_profile") or None,
        hook_targets=_parse_hook_targets(data.get("hook_targets")),
        log_level=data.get("log_level", "INFO"),
    )


def _load_file_config(path: Path) -> CLIConfig:
    data: Dict[str, Any]
    suffix = path.suffix.lower()
    content = path.read_bytes()
    if suffix == ".json":
        data = json.loads(content)
    elif suffix in {".toml", ".tml"}:
        data = tomllib.loads(content.decode("utf-8"))
    else:
        raise ValueError(f"Unsupported config format: {path.suffix}")

    base_dir = path.parent
    contexts = {
        name: _parse_context(name, ctx_data, base_dir)
        for name, ctx_data in (data.get("contexts") or {}).items()
    }
    return CLIConfig(contexts=contexts, default_context=data.get("default_context"))


def _default_cli_config(base: Path) -> CLIConfig:
    site_root = base.resolve()
    context = ContextConfig(name="local", site_root=site_root)
    return CLIConfig(contexts={context.name: context}, default_context=context.name)


def _state_home(env: Mapping[str, str]) -> Path:
    override = env.get("PS_CONTEXT_HOME")
    if override:
        return Path(override).expanduser()
    return DEFAULT_STATE_HOME


def _state_path(env: Mapping[str, str]) -> Path:
    return _state_home(env) / CONTEXT_FILENAME


def read_current_context(env: Mapping[str, str]) -> Optional[str]:
    path = _state_path(env)
    try:
        return path.read_text(encoding="utf-8").strip() or None
    except FileNotFoundError:
        return None


def write_current_context(env: Mapping[str, str], context_name: str) -> None:
    home = _state_home(env)
    home.mkdir(parents=True, exist_ok=True)
    path = home / CONTEXT_FILENAME
    path.write_text(context_name, encoding="utf-8")


def _apply_env_overrides(context: ContextConfig, env: Mapping[str, str]) -> ContextConfig:
    updated = context
    site_root = env.get("PS_SITE_ROOT")
    storage_root = env.get("PS_STORAGE_ROOT")
    sync_directory = env.get("PS_CONFIG_SYNC_DIRECTORY")
    hook_targets = env.get("PS_HOOK_TARGETS")
    log_level = env.get("PS_LOG_LEVEL")

    if site_root:
        updated = replace(updated, site_root=_expand(site_root, None) or updated.site_root)
    if storage_root:
        updated = replace(updated, storage_root=_expand(storage_root, None) or updated.storage_root)
    if sync_directory:
        updated = replace(updated, config_sync_directory=sync_directory)
    if hook_targets:
        updated = replace(updated, hook_targets=_parse_hook_targets(hook_targets))
    if log_level:
        updated = replace(updated, log_level=log_level)
    return updated


def _apply_cli_overrides(context: ContextConfig, overrides: Mapping[str, Any]) -> ContextConfig:
    updated = context
    if overrides.get("site_root"):
        site_root = _expand(overrides["site_root"], None)
        if site_root is not None:
            updated = replace(updated, site_root=site_root)
    if overrides.get("storage_root"):
        storage_root = _expand(overrides["storage_root"], None)
        if storage_root is not None:
            updated = replace(updated, storage_root=storage_root)
    if overrides.get("sync_directory"):
        updated = replace(updated, config_sync_directory=str(overrides["sync_directory"]))
    return updated


def _select_context_name(
    config: CLIConfig,
    env: Mapping[str, str],
    overrides: Mapping[str, Any],
) -> str:
    if overrides.get("context"):
        return overrides["context"]
    if env.get("PS_CONTEXT"):
        return env["PS_CONTEXT"]
    persisted = read_current_context(env)
    if persisted and persisted in config.contexts:
        return persisted
    if config.default_context and config.default_context in config.contexts:
        return config.default_context
    if config.contexts:
        return next(iter(config.contexts.keys()))
    raise ValueError("No CLI contexts have been configured")


def load_cli_config(
    config_path: Optional[Path],
    env: Optional[Mapping[str, str]] = None,
    overrides: Optional[Mapping[str, Any]] = None,
) -> ResolvedConfig:
    env = env if env is not None else os.environ
    overrides = dict(overrides or {})

    path: Optional[Path] = config_path
    if path is None and env.get("PS_CLI_CONFIG"):
        path = Path(env["PS_CLI_CONFIG"])
    if path:
        path = Path(path).expanduser()
    elif DEFAULT_CONFIG_PATH.exists():
        path = DEFAULT_CONFIG_PATH

    if path and path.exists():
        config = _load_file_config(path)
    else:
        config = _default_cli_config(Path.cwd())
        path = None

    context_name = _select_context_name(config, env, overrides)
    if context_name not in config.contexts:
        raise ValueError(f"Unknown context '{context_name}'")
    context = config.contexts[context_name]
    context = _apply_env_overrides(context, env)
    context = _apply_cli_overrides(context, overrides)

    log_format = (overrides.get("log_format") or env.get("PS_LOG_FORMAT") or "text").lower()
    if log_format not in {"text", "json"}:
        raise ValueError("log_format must be 'text' or 'json'")
    verbose = bool(overrides.get("verbose") or env.get("PS_VERBOSE"))

    return ResolvedConfig(
        context=context,
        contexts=dict(config.contexts),
        log_format=log_format,
        verbose=verbose,
        config_path=path,
        state_path=_state_path(env),
    )
