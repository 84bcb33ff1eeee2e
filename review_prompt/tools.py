"""Contracts for the external tools the pipeline drives."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol


@dataclass(frozen=True, slots=True)
class TreeEntry:
    """One entry of a recursive tree listing.

    `object_type` is git's object type: `blob` for files and symlinks,
    `commit` for submodule pointers. `size_bytes` is only known for blobs.
    """

    mode: str
    object_type: str
    size_bytes: int | None = None


class VersionControl(Protocol):
    """Version-control operations needed to build a review prompt."""

    def remote_url(self, remote: str) -> str:
        """Return the configured URL of `remote`."""

    def current_branch(self) -> str:
        """Return the checked-out branch name."""

    def fetch_branch(self, remote: str, branch: str) -> None:
        """Fetch `branch` from `remote`."""

    def fetch_pull_request_head(self, remote: str, pr_number: int, local_branch: str) -> None:
        """Fetch the pull request head ref into `local_branch`."""

    def checkout(self, branch: str) -> None:
        """Switch the working tree to `branch`."""

    def reset_hard(self, ref: str) -> None:
        """Move the current branch to `ref`, discarding local changes."""

    def write_diff(self, base: str, head: str, output_path: Path, *, context_lines: int) -> None:
        """Write the three-dot unified diff between `base` and `head` to `output_path`."""

    def changed_files(self, base: str, head: str) -> tuple[str, ...]:
        """Return paths changed between `base` and `head` (three-dot)."""

    def list_tree(self, ref: str) -> Mapping[str, TreeEntry]:
        """Return every entry in the tree at `ref`, keyed by repository-relative path."""

    def read_blob(self, ref: str, path: str) -> bytes:
        """Return the raw content of `path` at `ref`."""


class Clipboard(Protocol):
    """Destination for the assembled prompt."""

    def write(self, text: str) -> None:
        """Replace the clipboard content with `text`."""
