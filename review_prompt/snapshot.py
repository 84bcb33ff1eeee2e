"""Pre-change file snapshots taken from the target branch."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from enum import StrEnum

from review_prompt.config import MAX_SNAPSHOT_BYTES
from review_prompt.tools import VersionControl

logger = logging.getLogger(__name__)


class SnapshotKind(StrEnum):
    """How a changed file is represented in the prompt."""

    CONTENT = "content"
    OMITTED = "omitted"
    NOT_FOUND = "not_found"


@dataclass(frozen=True, slots=True)
class FileSnapshot:
    """Pre-change state of one changed path at the target ref."""

    path: str
    kind: SnapshotKind
    text: str | None = None
    size_bytes: int | None = None


def capture_file_snapshot(
    vcs: VersionControl,
    *,
    ref: str,
    path: str,
    max_bytes: int = MAX_SNAPSHOT_BYTES,
) -> FileSnapshot:
    """Read `path` at `ref`, or mark it not found or too large.

    Entries without file content at `ref`, such as submodule pointers, are
    reported as not found.
    """
    entry = vcs.list_tree(ref).get(path)
    if entry is None:
        logger.debug("%s: not present at %s", path, ref)
        return FileSnapshot(path=path, kind=SnapshotKind.NOT_FOUND)
    if entry.object_type != "blob" or entry.size_bytes is None:
        logger.debug("%s: %s entry at %s has no file content", path, entry.object_type, ref)
        return FileSnapshot(path=path, kind=SnapshotKind.NOT_FOUND)

    size_bytes = entry.size_bytes
    if size_bytes > max_bytes:
        logger.debug("%s: %d bytes exceeds %d, omitting", path, size_bytes, max_bytes)
        return FileSnapshot(path=path, kind=SnapshotKind.OMITTED, size_bytes=size_bytes)

    # surrogateescape keeps non-UTF-8 bytes intact through clipboard encoding.
    text = vcs.read_blob(ref, path).decode("utf-8", errors="surrogateescape")
    return FileSnapshot(path=path, kind=SnapshotKind.CONTENT, text=text, size_bytes=size_bytes)


def capture_file_snapshots(
    vcs: VersionControl,
    *,
    ref: str,
    paths: Iterable[str],
    max_bytes: int = MAX_SNAPSHOT_BYTES,
) -> tuple[FileSnapshot, ...]:
    """Capture snapshots for `paths` in enumeration order."""
    return tuple(
        capture_file_snapshot(vcs, ref=ref, path=path, max_bytes=max_bytes) for path in paths
    )
