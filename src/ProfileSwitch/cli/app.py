"""CLI application entrypoint built with Typer."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, List, Optional

import typer

from ProfileSwitch.stores import StoreError
from ProfileSwitch.switching import DEFAULT_TARGET_PROFILE, EXIT_FAILURE, MANIFEST_FILENAME

from .config import ResolvedConfig, load_cli_config, write_current_context
from .hooks import HookExecutionError
from .hooks import registry as hook_registry
from .logging import configure_logging
from .operations import CommandRuntime, build_runtime, execute_switch, import_configuration
from .safety import require_confirmation

app = typer.Typer(help="Switch a site's install profile alongside configuration deploys")
context_app = typer.Typer(help="Manage CLI contexts")

app.add_typer(context_app, name="context")


# ---------------------------------------------------------------------------
# Configuration helpers
# ---------------------------------------------------------------------------

def _resolve_config(
    context: Optional[str],
    config: Optional[Path],
    site_root: Optional[Path],
    storage_root: Optional[Path],
    sync_directory: Optional[str],
    log_format: str,
    verbose: bool,
) -> ResolvedConfig:
    overrides = {
        "context": context,
        "site_root": site_root,
        "storage_root": storage_root,
        "sync_directory": sync_directory,
        "log_format": log_format,
        "verbose": verbose,
    }
    overrides = {k: v for k, v in overrides.items() if v not in {None, False, ""}}
    try:
        resolved = load_cli_config(config, overrides=overrides)
    except ValueError as exc:
        raise typer.BadParameter(str(exc))
    state_env = {"PS_CONTEXT_HOME": str(resolved.state_path.parent)}
    write_current_context(state_env, resolved.context.name)
    return resolved


def _handle_error(runtime: CommandRuntime, exc: Exception) -> None:
    runtime.logger.error("Command failed", extra={"error": str(exc)})
    typer.echo(f"[error] {exc}")
    raise typer.Exit(code=EXIT_FAILURE)


def _switch(ctx: typer.Context, target_profile: Optional[str], yes: bool) -> None:
    runtime = build_runtime(ctx)
    try:
        switcher = runtime.switcher(target_profile)
    except (StoreError, OSError) as exc:
        _handle_error(runtime, exc)
        return

    if switcher.is_pending:
        require_confirmation(
            yes,
            f"Switch profile from {switcher.old_profile} to {switcher.target_profile}?",
        )
    try:
        execute_switch(runtime, switcher)
    except (StoreError, OSError) as exc:
        _handle_error(runtime, exc)


def _print_import_summary(summary: Dict[str, List[str]]) -> None:
    changed = sum(len(summary[key]) for key in ("create", "update", "delete"))
    if not changed:
        typer.echo("[no-op] Active configuration already matches the sync directory")
        return
    for key in ("create", "update", "delete"):
        for name in summary[key]:
            typer.echo(f"  {key:<6} {name}")
    typer.echo(f"[ok] Imported configuration ({changed} changes)")


# ---------------------------------------------------------------------------
# Typer callback
# ---------------------------------------------------------------------------


@app.callback()
def main_callback(
    ctx: typer.Context,
    config: Optional[Path] = typer.Option(None, "--config", help="Path to CLI configuration file (TOML or JSON)."),
    context: Optional[str] = typer.Option(None, "--context", "-c", help="Context name to activate for this invocation."),
    site_root: Optional[Path] = typer.Option(None, "--site-root", help="Override the site root for this invocation."),
    storage_root: Optional[Path] = typer.Option(None, "--storage-root", help="Override the store directory for this invocation."),
    sync_directory: Optional[str] = typer.Option(
        None, "--sync-directory", help="Override the configuration sync directory (relative to the site root)."
    ),
    log_format: str = typer.Option("text", "--log-format", help="Log format for file output (text or json)."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging."),
) -> None:
    """Top-level callback to resolve configuration and configure logging."""

    resolved = _resolve_config(
        context=context,
        config=config,
        site_root=site_root,
        storage_root=storage_root,
        sync_directory=sync_directory,
        log_format=log_format,
        verbose=verbose,
    )

    log_path = resolved.storage_root / "logs" / "cli.log"
    logger = configure_logging(
        log_path, resolved.log_format, resolved.verbose, resolved.context.log_level
    )
    ctx.obj = {"config": resolved, "logger": logger}


# ---------------------------------------------------------------------------
# Context commands
# ---------------------------------------------------------------------------


@context_app.command("list")
def context_list(ctx: typer.Context) -> None:
    """List configured contexts."""

    resolved: ResolvedConfig = ctx.obj["config"]
    for name in sorted(resolved.contexts.keys()):
        prefix = "*" if name == resolved.context.name else " "
        typer.echo(f"{prefix} {name}")


@context_app.command("use")
def context_use(ctx: typer.Context, name: str) -> None:
    """Switch to a named context."""

    resolved: ResolvedConfig = ctx.obj["config"]
    if name not in resolved.contexts:
        raise typer.BadParameter(f"Unknown context '{name}'")
    write_current_context({"PS_CONTEXT_HOME": str(resolved.state_path.parent)}, name)
    typer.echo(f"Context set to {name} (previous {resolved.context.name})")


@context_app.command("show")
def context_show(ctx: typer.Context, name: Optional[str] = None) -> None:
    """Show effective configuration for a context."""

    resolved: ResolvedConfig = ctx.obj["config"]
    target = name or resolved.context.name
    if target not in resolved.contexts:
        raise typer.BadParameter(f"Unknown context '{target}'")
    ctx_config = resolved.contexts[target] if name else resolved.context
    payload = {
        "site_root": str(ctx_config.site_root),
        "storage_root": str(ctx_config.storage_path),
        "config_sync_directory": ctx_config.config_sync_directory,
        "default_target_profile": ctx_config.default_target_profile,
        "install_profile": ctx_config.install_profile,
        "target_profile": ctx_config.target_profile,
        "hook_targets": list(ctx_config.hook_targets),
        "log_level": ctx_config.log_level,
    }
    typer.echo(json.dumps(payload, indent=2, sort_keys=True))


# ---------------------------------------------------------------------------
# Profile commands
# ---------------------------------------------------------------------------


@app.command("switch-profile")
def switch_profile(
    ctx: typer.Context,
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation prompt."),
) -> None:
    """Switch to the profile named in core.extension.yml and remove the old one."""

    _switch(ctx, None, yes)


@app.command("switch-to-minimal")
def switch_to_minimal(
    ctx: typer.Context,
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation prompt."),
) -> None:
    """Switch to the minimal profile regardless of the sync directory."""

    _switch(ctx, DEFAULT_TARGET_PROFILE, yes)


@app.command()
def status(ctx: typer.Context) -> None:
    """Show the current and target profiles as JSON."""

    runtime = build_runtime(ctx)
    locator = runtime.locator()
    try:
        switcher = runtime.switcher()
    except (StoreError, OSError) as exc:
        _handle_error(runtime, exc)
        return
    manifest_dir = locator.find_manifest_directory()
    payload = {
        "context": runtime.config.context.name,
        "current_profile": switcher.old_profile,
        "target_profile": switcher.target_profile,
        "switch_pending": switcher.is_pending,
        "sync_directory": str(locator.sync_directory),
        "manifest": str(manifest_dir / MANIFEST_FILENAME) if manifest_dir else None,
        "hook_targets": list(runtime.config.context.hook_targets),
    }
    typer.echo(json.dumps(payload, indent=2, sort_keys=True))


# ---------------------------------------------------------------------------
# Host commands with pre-command hooks
# ---------------------------------------------------------------------------


@app.command("config:import")
def config_import(ctx: typer.Context) -> None:
    """Import the sync directory into the active configuration."""

    runtime = build_runtime(ctx)
    try:
        hook_registry.run_pre_command("config:import", runtime)
        summary = import_configuration(runtime, runtime.sync_directory)
    except (HookExecutionError, StoreError, OSError) as exc:
        _handle_error(runtime, exc)
        return
    _print_import_summary(summary)


@app.command()
def deploy(ctx: typer.Context) -> None:
    """Run the deployment sequence: configuration import and cache rebuild."""

    runtime = build_runtime(ctx)
    try:
        hook_registry.run_pre_command("deploy", runtime)
        summary = import_configuration(runtime, runtime.sync_directory)
        runtime.storage.cache.flush_all()
    except (HookExecutionError, StoreError, OSError) as exc:
        _handle_error(runtime, exc)
        return
    _print_import_summary(summary)
    typer.echo("[ok] Caches rebuilt")
    runtime.logger.info("Deploy completed", extra={"context": runtime.config.context.name})


# ---------------------------------------------------------------------------
# Entrypoint
# ---------------------------------------------------------------------------


def main() -> None:
    """Entrypoint for the CLI."""

    app()
