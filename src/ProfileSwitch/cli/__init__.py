"""CLI package exports."""

from .app import app, main
from .config import (
    CLIConfig,
    ContextConfig,
    ResolvedConfig,
    load_cli_config,
    read_current_context,
    write_current_context,
)
from .hooks import HookExecutionError, HookRegistry, switch_profile_hook
from .operations import CommandRuntime, build_runtime

__all__ = [
    "app",
    "main",
    "CLIConfig",
    "CommandRuntime",
    "ContextConfig",
    "HookExecutionError",
    "HookRegistry",
    "ResolvedConfig",
    "build_runtime",
    "load_cli_config",
    "read_current_context",
    "switch_profile_hook",
    "write_current_context",
]
