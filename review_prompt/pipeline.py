"""Review prompt orchestration: identity, metadata, branch sync, diff, publish."""

from __future__ import annotations

import logging
import tempfile
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from pathlib import Path

import httpx
import typer

from review_prompt.config import DIFF_CONTEXT_LINES, MAX_SNAPSHOT_BYTES
from review_prompt.context import RunContext
from review_prompt.git_ops import parse_repo_full_name_from_remote
from review_prompt.github_client import fetch_pull_request_info
from review_prompt.prompt import render_review_prompt
from review_prompt.schema import PullRequestInfo
from review_prompt.snapshot import capture_file_snapshots
from review_prompt.tools import Clipboard, VersionControl

logger = logging.getLogger(__name__)

DIFF_PATCH_FILENAME = "diff_patch.txt"


def resolve_repository(vcs: VersionControl, remote: str) -> str:
    """Return `owner/name` for the repository behind `remote`."""
    return parse_repo_full_name_from_remote(vcs.remote_url(remote))


def sync_branches(
    vcs: VersionControl,
    info: PullRequestInfo,
    *,
    remote: str,
    pr_number: int,
    echo: Callable[[str], None] = typer.echo,
) -> None:
    """Bring the local source branch to the pull request head and check it out.

    The target branch is always fetched first. When the source branch is
    already checked out it is hard-reset to the remote tip, dropping any
    local commits on it.
    """
    vcs.fetch_branch(remote, info.target_branch)

    if vcs.current_branch() != info.source_branch:
        vcs.fetch_pull_request_head(remote, pr_number, info.source_branch)
        vcs.checkout(info.source_branch)
        return

    echo(f"Already on branch {info.source_branch}. Updating...")
    vcs.fetch_branch(remote, info.source_branch)
    vcs.reset_hard(f"{remote}/{info.source_branch}")


@contextmanager
def diff_patch_file(
    vcs: VersionControl,
    *,
    base: str,
    head: str,
    context_lines: int = DIFF_CONTEXT_LINES,
) -> Iterator[Path]:
    """Yield a temporary file holding the base...head diff, removed on exit."""
    with tempfile.TemporaryDirectory(prefix="review-prompt-") as directory:
        diff_path = Path(directory) / DIFF_PATCH_FILENAME
        vcs.write_diff(base, head, diff_path, context_lines=context_lines)
        logger.debug("Diff written to %s", diff_path)
        yield diff_path


def build_review_prompt(
    vcs: VersionControl,
    info: PullRequestInfo,
    *,
    remote: str,
    diff_path: Path,
) -> str:
    """Collect changed files and their pre-change snapshots into the prompt text."""
    base = f"{remote}/{info.target_branch}"
    modified_files = vcs.changed_files(base, info.source_branch)
    snapshots = capture_file_snapshots(
        vcs,
        ref=base,
        paths=modified_files,
        max_bytes=MAX_SNAPSHOT_BYTES,
    )
    diff_text = diff_path.read_text(encoding="utf-8", errors="surrogateescape")
    return render_review_prompt(
        info,
        modified_files=modified_files,
        snapshots=snapshots,
        diff_text=diff_text,
    )


def run_review_prompt(
    context: RunContext,
    *,
    vcs: VersionControl,
    clipboard: Clipboard,
    client: httpx.Client,
    echo: Callable[[str], None] = typer.echo,
) -> str:
    """Run the whole pipeline and return the text written to the clipboard."""
    repo_full_name = resolve_repository(vcs, context.remote)
    logger.info("Repository: %s", repo_full_name)

    info = fetch_pull_request_info(
        client=client,
        repo_full_name=repo_full_name,
        pr_number=context.pr_number,
    )

    echo("Fetching branches...")
    sync_branches(
        vcs,
        info,
        remote=context.remote,
        pr_number=context.pr_number,
        echo=echo,
    )

    echo("Generating diff and preparing the prompt...")
    with diff_patch_file(
        vcs,
        base=f"{context.remote}/{info.target_branch}",
        head=info.source_branch,
    ) as diff_path:
        document = build_review_prompt(vcs, info, remote=context.remote, diff_path=diff_path)
        clipboard.write(document)

    return document
