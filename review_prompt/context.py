"""Immutable run context threaded through each pipeline step."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from review_prompt.config import Settings


@dataclass(frozen=True, slots=True)
class RunContext:
    """Everything one run needs from its environment, resolved up front."""

    pr_number: int
    token: str = field(repr=False)
    workdir: Path
    settings: Settings = field(default_factory=Settings)

    @property
    def remote(self) -> str:
        return self.settings.remote_name
