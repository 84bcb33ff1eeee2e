"""Review prompt rendering."""

from __future__ import annotations

from collections.abc import Sequence

from review_prompt.config import MAX_SNAPSHOT_BYTES
from review_prompt.schema import PullRequestInfo
from review_prompt.snapshot import FileSnapshot, SnapshotKind

REVIEW_INSTRUCTIONS = (
    "Please review the Pull Request described below, focusing on the following aspects:\n"
    "- Code quality and adherence to best practices.\n"
    "- Possible bugs or logic problems.\n"
    "- Suggestions for improvements or optimizations.\n"
    "- Security checks and error handling.\n"
    "Provide constructive, detailed feedback and list the changes (point by point) that "
    "should be made to the code, since they will be added to the review comment on GitHub."
)


def _fenced(text: str, language: str = "") -> list[str]:
    """Wrap text in a markdown code fence, keeping the closing fence on its own line."""
    body = text if not text or text.endswith("\n") else f"{text}\n"
    return [f"```{language}", body + "```"]


def render_file_snapshot(snapshot: FileSnapshot, *, target_branch: str) -> list[str]:
    """Render one pre-change file block."""
    lines = [f"#### File: {snapshot.path}"]
    if snapshot.kind is SnapshotKind.CONTENT:
        lines.extend(_fenced(snapshot.text or ""))
    elif snapshot.kind is SnapshotKind.OMITTED:
        lines.append(
            f"**File omitted, size ({snapshot.size_bytes} bytes) exceeds the limit of "
            f"{MAX_SNAPSHOT_BYTES} bytes**"
        )
    else:
        lines.append(f"**File not found in branch {target_branch}**")
    lines.append("")
    return lines


def render_review_prompt(
    info: PullRequestInfo,
    *,
    modified_files: Sequence[str],
    snapshots: Sequence[FileSnapshot],
    diff_text: str,
) -> str:
    """Render the full review prompt in its fixed section order."""
    lines = [
        f"## Pull Request Title: {info.title}",
        "",
        "### Description:",
        info.description,
        "",
        f"### Source Branch: {info.source_branch}",
        f"### Target Branch: {info.target_branch}",
        "",
        "### Modified Files:",
        *modified_files,
        "",
        "### Review Instructions:",
        REVIEW_INSTRUCTIONS,
        "",
        f"### Content Before Changes (branch {info.target_branch}):",
    ]
    for snapshot in snapshots:
        lines.extend(render_file_snapshot(snapshot, target_branch=info.target_branch))

    lines.append("### Detailed Changes (diff with context):")
    lines.extend(_fenced(diff_text, "diff"))
    return "\n".join(lines) + "\n"
