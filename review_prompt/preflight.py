"""Fail-fast checks for executables, credentials and the working directory."""

from __future__ import annotations

import logging
import shutil
from collections.abc import Iterable
from pathlib import Path

from review_prompt.config import Settings
from review_prompt.context import RunContext
from review_prompt.github_client import get_github_token

logger = logging.getLogger(__name__)

GIT_EXECUTABLE = "git"


class PreflightError(RuntimeError):
    """Raised when a precondition for running is not met."""


def required_executables(settings: Settings) -> tuple[str, ...]:
    """Return executables that must be on PATH: git and the clipboard command."""
    return (GIT_EXECUTABLE, settings.clipboard_command[0])


def check_executables(names: Iterable[str]) -> None:
    """Raise `PreflightError` for the first executable not found on PATH."""
    for name in names:
        if shutil.which(name) is None:
            raise PreflightError(f"'{name}' is not installed. Please install it to continue.")
        logger.debug("Found executable: %s", name)


def check_workdir(workdir: Path | None = None) -> Path:
    """Return the resolved working directory (default: cwd) or raise if it cannot be entered."""
    try:
        resolved = (workdir or Path.cwd()).resolve(strict=True)
    except OSError as error:
        raise PreflightError(
            f"Could not access the project directory '{workdir or '.'}'."
        ) from error
    if not resolved.is_dir():
        raise PreflightError(f"Project directory '{workdir}' is not a directory.")
    return resolved


def build_run_context(
    *,
    pr_number: int,
    settings: Settings,
    workdir: Path,
) -> RunContext:
    """Run every precondition check and return the context for the run.

    Raises:
        PreflightError: a required executable or the working directory is missing.
        GitHubAuthError: no GitHub token is set.
    """
    check_executables(required_executables(settings))
    token = get_github_token()
    resolved_workdir = check_workdir(workdir)
    return RunContext(
        pr_number=pr_number,
        token=token,
        workdir=resolved_workdir,
        settings=settings,
    )
