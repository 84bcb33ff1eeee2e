"""Unit tests for the review prompt pipeline."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import httpx
import pytest
from review_prompt.config import Settings
from review_prompt.context import RunContext
from review_prompt.git_ops import RepositoryIdentityError
from review_prompt.github_client import PullRequestNotFoundError, PullRequestParseError
from review_prompt.pipeline import (
    diff_patch_file,
    resolve_repository,
    run_review_prompt,
    sync_branches,
)
from review_prompt.schema import PullRequestInfo


def make_client(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.Client:
    """Create an HTTP client backed by mock transport."""
    transport = httpx.MockTransport(handler)
    return httpx.Client(base_url="https://api.github.com", transport=transport)


def make_info() -> PullRequestInfo:
    return PullRequestInfo(
        source_branch="feature/launch-fix",
        target_branch="main",
        title="Fix launch sequence",
        description="Adjust ignition ordering.",
    )


def make_context(tmp_path: Path) -> RunContext:
    return RunContext(pr_number=42, token="token", workdir=tmp_path, settings=Settings())


@pytest.mark.unit
def test_resolve_repository_reads_configured_remote(fake_repo) -> None:  # type: ignore[no-untyped-def]
    fake_repo.remote = "https://github.com/acme/rocket.git"

    assert resolve_repository(fake_repo, "upstream") == "acme/rocket"
    assert fake_repo.calls == [("remote_url", "upstream")]


@pytest.mark.unit
def test_sync_from_other_branch_fetches_pull_head_and_checks_out(fake_repo) -> None:  # type: ignore[no-untyped-def]
    fake_repo.branch = "main"
    messages: list[str] = []

    sync_branches(fake_repo, make_info(), remote="origin", pr_number=42, echo=messages.append)

    assert fake_repo.mutating_calls() == [
        ("fetch_branch", "origin", "main"),
        ("fetch_pull_request_head", "origin", 42, "feature/launch-fix"),
        ("checkout", "feature/launch-fix"),
    ]
    assert fake_repo.branch == "feature/launch-fix"
    assert messages == []


@pytest.mark.unit
def test_sync_on_source_branch_force_resets_to_remote(fake_repo) -> None:  # type: ignore[no-untyped-def]
    fake_repo.branch = "feature/launch-fix"
    messages: list[str] = []

    sync_branches(fake_repo, make_info(), remote="origin", pr_number=42, echo=messages.append)

    assert fake_repo.mutating_calls() == [
        ("fetch_branch", "origin", "main"),
        ("fetch_branch", "origin", "feature/launch-fix"),
        ("reset_hard", "origin/feature/launch-fix"),
    ]
    assert messages == ["Already on branch feature/launch-fix. Updating..."]


@pytest.mark.unit
def test_diff_patch_file_is_removed_after_use(fake_repo) -> None:  # type: ignore[no-untyped-def]
    with diff_patch_file(fake_repo, base="origin/main", head="feature/x") as diff_path:
        assert diff_path.read_text(encoding="utf-8") == fake_repo.diff_text

    assert not diff_path.exists()
    assert not diff_path.parent.exists()
    assert ("write_diff", "origin/main", "feature/x", 10) in fake_repo.calls


@pytest.mark.unit
def test_diff_patch_file_is_removed_on_failure(fake_repo) -> None:  # type: ignore[no-untyped-def]
    with pytest.raises(RuntimeError, match="boom"):
        with diff_patch_file(fake_repo, base="origin/main", head="feature/x"):
            raise RuntimeError("boom")

    assert fake_repo.diff_paths
    assert not fake_repo.diff_paths[0].exists()


@pytest.mark.unit
def test_run_review_prompt_publishes_full_document(
    fake_repo, fake_clipboard, pr_payload, tmp_path: Path  # type: ignore[no-untyped-def]
) -> None:
    fake_repo.changed = ("src/launch.py", "src/new.py", "assets/big.bin")
    fake_repo.target_files = {
        "src/launch.py": b"def launch():\n    return 'wait'\n",
        "assets/big.bin": b"\0" * 60000,
    }
    fake_repo.diff_text = "diff --git a/src/launch.py b/src/launch.py\n-    return 'wait'\n"
    messages: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/repos/acme/rocket/pulls/42"
        return httpx.Response(status_code=200, json=pr_payload)

    with make_client(handler) as client:
        document = run_review_prompt(
            make_context(tmp_path),
            vcs=fake_repo,
            clipboard=fake_clipboard,
            client=client,
            echo=messages.append,
        )

    assert fake_clipboard.texts == [document]
    assert "## Pull Request Title: Fix launch sequence" in document
    assert "### Modified Files:\nsrc/launch.py\nsrc/new.py\nassets/big.bin\n" in document
    assert "```\ndef launch():\n    return 'wait'\n```" in document
    assert "**File not found in branch main**" in document
    assert "size (60000 bytes) exceeds the limit of 51200 bytes" in document
    assert document.endswith(f"```diff\n{fake_repo.diff_text}```\n")
    assert ("changed_files", "origin/main", "feature/launch-fix") in fake_repo.calls
    assert messages == ["Fetching branches...", "Generating diff and preparing the prompt..."]
    assert not fake_repo.diff_paths[0].exists()


@pytest.mark.unit
def test_malformed_remote_fails_before_any_network_call(
    fake_repo, fake_clipboard, tmp_path: Path  # type: ignore[no-untyped-def]
) -> None:
    fake_repo.remote = "not-a-url"
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(status_code=500)

    with make_client(handler) as client, pytest.raises(RepositoryIdentityError):
        run_review_prompt(
            make_context(tmp_path), vcs=fake_repo, clipboard=fake_clipboard, client=client
        )

    assert requests == []
    assert fake_repo.mutating_calls() == []
    assert fake_clipboard.texts == []


@pytest.mark.unit
@pytest.mark.parametrize("head", [None, {"ref": None}])
def test_missing_source_branch_fails_before_branch_mutation(
    fake_repo, fake_clipboard, pr_payload, tmp_path: Path, head: object  # type: ignore[no-untyped-def]
) -> None:
    pr_payload["head"] = head

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code=200, json=pr_payload)

    with make_client(handler) as client, pytest.raises(PullRequestParseError):
        run_review_prompt(
            make_context(tmp_path), vcs=fake_repo, clipboard=fake_clipboard, client=client
        )

    assert fake_repo.mutating_calls() == []
    assert fake_clipboard.texts == []


@pytest.mark.unit
def test_unknown_pull_request_fails_before_branch_mutation(
    fake_repo, fake_clipboard, tmp_path: Path  # type: ignore[no-untyped-def]
) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code=404, json={"message": "Not Found"})

    with make_client(handler) as client, pytest.raises(PullRequestNotFoundError):
        run_review_prompt(
            make_context(tmp_path), vcs=fake_repo, clipboard=fake_clipboard, client=client
        )

    assert fake_repo.mutating_calls() == []
    assert fake_clipboard.texts == []
