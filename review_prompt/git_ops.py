"""Local git operations driven through the git executable."""

from __future__ import annotations

import logging
import os
import re
import subprocess
from dataclasses import dataclass, field
from pathlib import Path

from review_prompt.tools import TreeEntry

logger = logging.getLogger(__name__)

REMOTE_REPO_PATTERN = re.compile(r"[:/](?P<owner>[^/:]+)/(?P<name>[^/:]+)$")


class GitCommandError(RuntimeError):
    """Raised when a git command exits with a non-zero status."""

    def __init__(self, command: list[str], returncode: int, stderr: str) -> None:
        detail = stderr.strip() or "no error output"
        super().__init__(f"'{' '.join(command)}' failed with exit code {returncode}: {detail}")
        self.command = command
        self.returncode = returncode
        self.stderr = stderr


class RepositoryIdentityError(ValueError):
    """Raised when owner/name cannot be derived from the remote URL."""

    def __init__(self, message: str, *, remote_url: str) -> None:
        super().__init__(message)
        self.remote_url = remote_url


def parse_repo_full_name_from_remote(remote_url: str) -> str:
    """Extract `owner/name` from an SSH or HTTPS remote URL.

    Handles `git@github.com:owner/name.git`, `https://github.com/owner/name`
    and `ssh://git@github.com/owner/name.git`. A trailing `.git` and slash
    are ignored.
    """
    normalized = remote_url.strip().rstrip("/").removesuffix(".git")
    match = REMOTE_REPO_PATTERN.search(normalized)
    if not normalized or match is None:
        raise RepositoryIdentityError(
            f"Could not extract the repository name from the URL '{remote_url}'.",
            remote_url=remote_url,
        )
    return f"{match.group('owner')}/{match.group('name')}"


def parse_tree_record(record: str) -> tuple[str, TreeEntry]:
    """Parse one `ls-tree -l` record: `<mode> <type> <object> <size>\\t<path>`.

    The size column is right-aligned with spaces and is `-` for anything
    that is not a blob, such as a submodule pointer.
    """
    meta, _, path = record.partition("\t")
    mode, object_type, _object_name, size = meta.split()
    size_bytes = None if size == "-" else int(size)
    return path, TreeEntry(mode=mode, object_type=object_type, size_bytes=size_bytes)


@dataclass(slots=True)
class GitRepository:
    """Git working tree at `workdir`, operated through the `git` executable."""

    workdir: Path
    executable: str = "git"
    _tree_cache: dict[str, dict[str, TreeEntry]] = field(default_factory=dict, repr=False)

    def _run(self, args: list[str]) -> subprocess.CompletedProcess[bytes]:
        """Run a git command in the working tree and fail on non-zero exit."""
        command = [self.executable, *args]
        logger.debug("Running: %s", " ".join(command))
        result = subprocess.run(  # noqa: S603
            command,
            capture_output=True,
            cwd=self.workdir,
            check=False,
        )
        if result.returncode != 0:
            stderr = result.stderr.decode("utf-8", errors="replace")
            logger.error("Command failed: %s\nstderr: %s", " ".join(command), stderr.strip())
            raise GitCommandError(command, result.returncode, stderr)
        return result

    def _run_text(self, args: list[str]) -> str:
        # fsdecode round-trips undecodable path bytes back through subprocess args.
        return os.fsdecode(self._run(args).stdout)

    def remote_url(self, remote: str) -> str:
        """Return the configured URL of `remote`."""
        try:
            return self._run_text(["config", "--get", f"remote.{remote}.url"]).strip()
        except GitCommandError as error:
            raise RepositoryIdentityError(
                f"Remote '{remote}' has no configured URL.",
                remote_url="",
            ) from error

    def current_branch(self) -> str:
        """Return the checked-out branch name (`HEAD` when detached)."""
        return self._run_text(["rev-parse", "--abbrev-ref", "HEAD"]).strip()

    def fetch_branch(self, remote: str, branch: str) -> None:
        self._run(["fetch", remote, branch])

    def fetch_pull_request_head(self, remote: str, pr_number: int, local_branch: str) -> None:
        self._run(["fetch", remote, f"pull/{pr_number}/head:{local_branch}"])

    def checkout(self, branch: str) -> None:
        self._run(["checkout", branch])

    def reset_hard(self, ref: str) -> None:
        self._run(["reset", "--hard", ref])

    def write_diff(self, base: str, head: str, output_path: Path, *, context_lines: int) -> None:
        """Write the three-dot unified diff between `base` and `head` to `output_path`."""
        self._run(
            [
                "diff",
                "--no-color",
                f"-U{context_lines}",
                f"--output={output_path}",
                f"{base}...{head}",
                "--",
            ]
        )

    def changed_files(self, base: str, head: str) -> tuple[str, ...]:
        """Return paths changed between `base` and `head` in git's output order."""
        output = self._run_text(["diff", "--name-only", "-z", f"{base}...{head}", "--"])
        return tuple(path for path in output.split("\0") if path)

    def list_tree(self, ref: str) -> dict[str, TreeEntry]:
        """Return every entry in the tree at `ref` with its type and size, listed once per ref."""
        cached = self._tree_cache.get(ref)
        if cached is not None:
            return cached
        output = self._run_text(["ls-tree", "-r", "-l", "-z", "--full-tree", ref])
        entries = dict(
            parse_tree_record(record) for record in output.split("\0") if record
        )
        self._tree_cache[ref] = entries
        return entries

    def read_blob(self, ref: str, path: str) -> bytes:
        return self._run(["cat-file", "blob", f"{ref}:{path}"]).stdout
