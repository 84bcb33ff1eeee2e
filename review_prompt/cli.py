"""Typer CLI for the review prompt builder."""

from __future__ import annotations

import logging
import sys
from typing import Annotated

import httpx
import typer

from review_prompt.clipboard import ClipboardError, CommandClipboard
from review_prompt.config import ConfigError, load_settings
from review_prompt.git_ops import GitCommandError, GitRepository, RepositoryIdentityError
from review_prompt.github_client import (
    GitHubApiError,
    GitHubAuthError,
    GitHubInputError,
    PullRequestParseError,
    build_github_client,
    parse_pr_identifier,
)
from review_prompt.pipeline import run_review_prompt
from review_prompt.preflight import PreflightError, build_run_context, check_workdir

USAGE = "Usage: review-prompt <PR_ID>"

app = typer.Typer(
    help="Copy a GitHub pull request review prompt to the clipboard.",
    add_completion=False,
)


def _setup_logging(log_level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, log_level, logging.WARNING),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _fail(message: str) -> typer.Exit:
    typer.echo(message, err=True)
    return typer.Exit(code=1)


@app.command(context_settings={"allow_extra_args": True, "ignore_unknown_options": True})
def review_prompt_command(
    ctx: typer.Context,
    pr_id: Annotated[
        str | None,
        typer.Argument(help="Pull request number.", show_default=False),
    ] = None,
) -> None:
    """Fetch a pull request, sync its branches, and copy a review prompt to the clipboard."""
    if pr_id is None or ctx.args:
        raise _fail(USAGE)

    try:
        pr_number = parse_pr_identifier(pr_id)
    except GitHubInputError as error:
        raise _fail(f"Error: {error}\n{USAGE}") from error

    try:
        workdir = check_workdir()
        settings = load_settings(workdir)
        _setup_logging(settings.log_level)
        context = build_run_context(pr_number=pr_number, settings=settings, workdir=workdir)
    except (ConfigError, PreflightError, GitHubAuthError) as error:
        raise _fail(f"Error: {error}") from error

    vcs = GitRepository(workdir=context.workdir)
    clipboard = CommandClipboard(command=settings.clipboard_command)

    try:
        with build_github_client(
            context.token,
            base_url=settings.api_base_url,
            timeout_seconds=settings.timeout_seconds,
        ) as client:
            run_review_prompt(context, vcs=vcs, clipboard=clipboard, client=client)
    except (RepositoryIdentityError, GitHubInputError) as error:
        raise _fail(f"Error: {error}") from error
    except (GitHubApiError, PullRequestParseError) as error:
        raise _fail(f"Error: Could not fetch information about PR {pr_number}. {error}") from error
    except httpx.HTTPError as error:
        raise _fail(
            f"Error: Could not fetch information about PR {pr_number}: network error ({error})."
        ) from error
    except GitCommandError as error:
        raise _fail(f"Error: git command failed: {error}") from error
    except ClipboardError as error:
        raise _fail(f"Error: could not write to the clipboard: {error}") from error

    typer.echo("Review prompt copied to the clipboard!")


def main() -> None:
    """Console script entry point."""
    app()
