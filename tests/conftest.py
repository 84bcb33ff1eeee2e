"""Shared pytest fixtures and test-run configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

import pytest
from review_prompt.tools import TreeEntry


def pytest_addoption(parser: pytest.Parser) -> None:
    """Add custom pytest options for integration test execution."""
    parser.addoption(
        "--run-integration",
        action="store_true",
        default=False,
        help="Run tests marked as integration (external dependencies).",
    )


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Skip integration tests unless explicitly enabled."""
    run_integration = config.getoption("--run-integration")
    env_enabled = os.getenv("RUN_INTEGRATION_TESTS") == "1"
    if run_integration or env_enabled:
        return

    skip_marker = pytest.mark.skip(
        reason=(
            "Integration tests are disabled by default. "
            "Use --run-integration or set RUN_INTEGRATION_TESTS=1."
        )
    )
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip_marker)


@dataclass
class FakeRepository:
    """In-memory stand-in for a git working tree."""

    remote: str = "git@github.com:acme/rocket.git"
    branch: str = "main"
    target_files: dict[str, bytes] = field(default_factory=dict)
    target_submodules: tuple[str, ...] = ()
    changed: tuple[str, ...] = ()
    diff_text: str = "diff --git a/src/launch.py b/src/launch.py\n"
    calls: list[tuple[object, ...]] = field(default_factory=list)
    diff_paths: list[Path] = field(default_factory=list)

    def remote_url(self, remote: str) -> str:
        self.calls.append(("remote_url", remote))
        return self.remote

    def current_branch(self) -> str:
        return self.branch

    def fetch_branch(self, remote: str, branch: str) -> None:
        self.calls.append(("fetch_branch", remote, branch))

    def fetch_pull_request_head(self, remote: str, pr_number: int, local_branch: str) -> None:
        self.calls.append(("fetch_pull_request_head", remote, pr_number, local_branch))

    def checkout(self, branch: str) -> None:
        self.calls.append(("checkout", branch))
        self.branch = branch

    def reset_hard(self, ref: str) -> None:
        self.calls.append(("reset_hard", ref))

    def write_diff(self, base: str, head: str, output_path: Path, *, context_lines: int) -> None:
        self.calls.append(("write_diff", base, head, context_lines))
        self.diff_paths.append(output_path)
        output_path.write_text(self.diff_text, encoding="utf-8")

    def changed_files(self, base: str, head: str) -> tuple[str, ...]:
        self.calls.append(("changed_files", base, head))
        return self.changed

    def list_tree(self, ref: str) -> dict[str, TreeEntry]:
        entries = {
            path: TreeEntry(mode="100644", object_type="blob", size_bytes=len(content))
            for path, content in self.target_files.items()
        }
        for path in self.target_submodules:
            entries[path] = TreeEntry(mode="160000", object_type="commit")
        return entries

    def read_blob(self, ref: str, path: str) -> bytes:
        return self.target_files[path]

    def mutating_calls(self) -> list[tuple[object, ...]]:
        """Calls that touch remotes or branch pointers."""
        names = {"fetch_branch", "fetch_pull_request_head", "checkout", "reset_hard"}
        return [call for call in self.calls if call[0] in names]


@dataclass
class FakeClipboard:
    """Records clipboard writes."""

    texts: list[str] = field(default_factory=list)

    def write(self, text: str) -> None:
        self.texts.append(text)


@pytest.fixture
def fake_repo() -> FakeRepository:
    return FakeRepository()


@pytest.fixture
def fake_clipboard() -> FakeClipboard:
    return FakeClipboard()


@pytest.fixture
def pr_payload() -> dict[str, object]:
    """Minimal valid pulls API payload."""
    return {
        "number": 42,
        "title": "Fix launch sequence",
        "body": "Adjust ignition ordering.",
        "state": "open",
        "user": {"login": "octocat"},
        "base": {"ref": "main", "sha": "base-sha"},
        "head": {"ref": "feature/launch-fix", "sha": "head-sha"},
    }
