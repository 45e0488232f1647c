"""Operator confirmation for state-changing commands."""

from __future__ import annotations

import typer

from ProfileSwitch.switching import EXIT_FAILURE_WITH_CLARITY


def require_confirmation(assume_yes: bool, prompt: str) -> None:
    """Prompt the operator; a declined prompt exits with a distinct code."""

    if assume_yes:
        return
    confirmed = typer.confirm(prompt, default=False)
    if not confirmed:
        typer.echo("[cancelled] No changes were made")
        raise typer.Exit(code=EXIT_FAILURE_WITH_CLARITY)


__all__ = ["require_confirmation"]
