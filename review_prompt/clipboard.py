"""System clipboard access through an external command."""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Sequence
from dataclasses import dataclass

from review_prompt.config import DEFAULT_CLIPBOARD_COMMAND

logger = logging.getLogger(__name__)


class ClipboardError(RuntimeError):
    """Raised when the clipboard command fails."""


@dataclass(frozen=True, slots=True)
class CommandClipboard:
    """Clipboard written by piping text to a command such as `xclip -selection clipboard`."""

    command: Sequence[str] = tuple(DEFAULT_CLIPBOARD_COMMAND.split())

    def write(self, text: str) -> None:
        """Replace the clipboard content with `text`."""
        logger.debug("Writing %d characters with: %s", len(text), " ".join(self.command))
        try:
            result = subprocess.run(  # noqa: S603
                list(self.command),
                input=text.encode("utf-8", errors="surrogateescape"),
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                check=False,
            )
        except OSError as error:
            raise ClipboardError(f"Could not run '{self.command[0]}': {error}") from error
        if result.returncode != 0:
            raise ClipboardError(
                f"'{' '.join(self.command)}' failed with exit code {result.returncode}."
            )
