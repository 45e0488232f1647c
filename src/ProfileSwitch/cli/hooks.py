"""Pre-command hook registry for the ProfileSwitch CLI."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional

from ProfileSwitch.switching import SwitchResult

from .operations import CommandRuntime, execute_switch

HookCallable = Callable[[CommandRuntime, str], Any]


class HookExecutionError(RuntimeError):
    """Raised when a pre-command hook fails."""


@dataclass(frozen=True)
class HookWrapper:
    """A named callable attached in front of a host command."""

    name: str
    target: str
    callable: HookCallable

    def execute(self, runtime: CommandRuntime) -> Any:
        return self.callable(runtime, self.target)


class HookRegistry:
    """Keeps pre-command hooks per target command, in registration order."""

    def __init__(self) -> None:
        self._manual: Dict[str, Dict[str, HookWrapper]] = {}

    def register(self, target: str, hook: HookCallable, name: Optional[str] = None) -> HookWrapper:
        wrapper = HookWrapper(
            name=name or getattr(hook, "__name__", hook.__class__.__name__),
            target=target,
            callable=hook,
        )
        self._manual.setdefault(target, {})[wrapper.name] = wrapper
        return wrapper

    def unregister(self, target: str, name: str) -> None:
        self._manual.get(target, {}).pop(name, None)

    def hooks_for(self, target: str) -> List[HookWrapper]:
        return list(self._manual.get(target, {}).values())

    def targets(self) -> Iterable[str]:
        return sorted(target for target, hooks in self._manual.items() if hooks)

    def run_pre_command(self, target: str, runtime: CommandRuntime) -> List[Any]:
        """Run every hook attached to ``target``; the first failure aborts."""

        results: List[Any] = []
        for hook in self.hooks_for(target):
            runtime.logger.debug(
                "Running pre-command hook",
                extra={"hook": hook.name, "target": target},
            )
            try:
                results.append(hook.execute(runtime))
            except Exception as exc:
                runtime.logger.error(
                    "Pre-command hook failed",
                    extra={"hook": hook.name, "target": target, "error": str(exc)},
                )
                raise HookExecutionError(
                    f"Pre-command hook '{hook.name}' failed before {target}: {exc}"
                ) from exc
        return results


def switch_profile_hook(runtime: CommandRuntime, target: str) -> Optional[SwitchResult]:
    """Bring the site onto the configured profile before ``target`` runs.

    Hooks are attached only to the commands listed in the context's
    ``hook_targets``; other targets are ignored.
    """

    if target not in runtime.config.context.hook_targets:
        return None
    return execute_switch(runtime, runtime.switcher())


registry = HookRegistry()
for _target in ("deploy", "config:import"):
    registry.register(_target, switch_profile_hook)


__all__ = [
    "HookExecutionError",
    "HookRegistry",
    "HookWrapper",
    "registry",
    "switch_profile_hook",
]
