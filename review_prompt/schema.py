"""Schema contract for the GitHub pull request payload and its normalized record."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class BranchRef(BaseModel):
    """Branch pointer nested under `head` and `base` in the pulls API payload."""

    model_config = ConfigDict(extra="ignore")

    ref: str = Field(min_length=1)


class PullRequestPayload(BaseModel):
    """Subset of the GitHub pulls API response used to build the prompt."""

    model_config = ConfigDict(extra="ignore")

    title: str
    body: str | None = None
    head: BranchRef
    base: BranchRef

    @field_validator("body")
    @classmethod
    def normalize_body(cls, value: str | None) -> str:
        """Treat a null description as empty."""
        return value or ""


class PullRequestInfo(BaseModel):
    """Pull request metadata required by the review prompt."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    source_branch: str = Field(min_length=1)
    target_branch: str = Field(min_length=1)
    title: str
    description: str = Field(default="")

    @classmethod
    def from_api_payload(cls, payload: dict[str, Any]) -> PullRequestInfo:
        """Validate a raw pulls API payload and normalize it.

        Raises:
            pydantic.ValidationError: when `head.ref`, `base.ref` or `title`
                is missing, null, or of the wrong type.
        """
        parsed = PullRequestPayload.model_validate(payload)
        return cls(
            source_branch=parsed.head.ref,
            target_branch=parsed.base.ref,
            title=parsed.title,
            description=parsed.body or "",
        )
