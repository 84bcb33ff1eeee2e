"""GitHub API wrapper and auth helpers."""

from __future__ import annotations

import logging
import os
from typing import Any

import httpx
from pydantic import ValidationError

from review_prompt.config import GITHUB_API_BASE_URL, GITHUB_API_VERSION, load_env_file
from review_prompt.schema import PullRequestInfo

logger = logging.getLogger(__name__)


class GitHubAuthError(RuntimeError):
    """Raised when required GitHub authentication is missing."""


class GitHubInputError(ValueError):
    """Raised when repository or PR input values are invalid."""


class GitHubApiError(RuntimeError):
    """Raised when a GitHub API request fails."""

    def __init__(self, message: str, *, status_code: int, endpoint: str) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.endpoint = endpoint


class PullRequestNotFoundError(GitHubApiError):
    """Raised when the pull request does not exist or is not visible to the token."""


class PullRequestParseError(ValueError):
    """Raised when a pull request payload lacks a required field."""

    def __init__(self, message: str, *, endpoint: str) -> None:
        super().__init__(message)
        self.endpoint = endpoint


def _raise_http_error(response: httpx.Response, endpoint: str) -> None:
    """Raise a typed error for a non-success GitHub API response."""
    message = f"GitHub API request failed with status {response.status_code} for '{endpoint}'."
    if response.status_code == 404:
        raise PullRequestNotFoundError(
            message,
            status_code=response.status_code,
            endpoint=endpoint,
        )
    raise GitHubApiError(
        message,
        status_code=response.status_code,
        endpoint=endpoint,
    )


def _request_json(client: httpx.Client, endpoint: str) -> dict[str, Any]:
    """Perform a single JSON GET against GitHub API."""
    logger.debug("GET %s", endpoint)
    response = client.get(endpoint, headers={"Accept": "application/vnd.github+json"})
    if response.status_code >= 400:
        _raise_http_error(response, endpoint)

    try:
        payload = response.json()
    except ValueError as error:
        raise PullRequestParseError(
            "GitHub response body is not valid JSON.", endpoint=endpoint
        ) from error
    if not isinstance(payload, dict):
        raise PullRequestParseError("Expected JSON object in GitHub response.", endpoint=endpoint)
    return payload


def fetch_pull_request_info(
    *,
    client: httpx.Client,
    repo_full_name: str,
    pr_number: int,
) -> PullRequestInfo:
    """Fetch and validate the metadata the review prompt needs."""
    owner, repo = parse_repo_full_name(repo_full_name)
    normalized_pr_number = validate_pr_number(pr_number)
    endpoint = f"/repos/{owner}/{repo}/pulls/{normalized_pr_number}"

    payload = _request_json(client, endpoint)
    try:
        info = PullRequestInfo.from_api_payload(payload)
    except ValidationError as error:
        fields = ", ".join(
            ".".join(str(part) for part in detail["loc"]) for detail in error.errors()
        )
        raise PullRequestParseError(
            f"Missing or invalid field(s) in GitHub response: {fields}.",
            endpoint=endpoint,
        ) from error

    logger.debug(
        "PR #%d: %s -> %s", normalized_pr_number, info.source_branch, info.target_branch
    )
    return info


def parse_repo_full_name(repo_full_name: str) -> tuple[str, str]:
    """Parse and validate repository input in owner/repo format."""
    owner, separator, repo = repo_full_name.strip().partition("/")
    if not separator or not owner or not repo or "/" in repo:
        raise GitHubInputError(
            f"Invalid repo '{repo_full_name}'. Expected format is owner/repo."
        )
    return owner, repo


def validate_pr_number(pr_number: int) -> int:
    """Validate and normalize pull request number input."""
    if pr_number <= 0:
        raise GitHubInputError(f"Invalid PR number '{pr_number}'. Expected a positive integer.")
    return pr_number


def parse_pr_identifier(value: str) -> int:
    """Parse a command-line pull request identifier such as `42` or `#42`."""
    candidate = value.strip().removeprefix("#")
    if not (candidate.isascii() and candidate.isdigit()):
        raise GitHubInputError(f"Invalid PR number '{value}'. Expected a positive integer.")
    return validate_pr_number(int(candidate))


def get_github_token() -> str:
    """Read GitHub token from environment and fail fast if missing."""
    token, _source = get_github_token_with_source()
    return token


def get_github_token_with_source() -> tuple[str, str]:
    """Read GitHub token and return token value with environment source key."""
    load_env_file()

    github_token = os.getenv("GITHUB_TOKEN")
    if github_token:
        return github_token, "GITHUB_TOKEN"

    gh_token = os.getenv("GH_TOKEN")
    if gh_token:
        return gh_token, "GH_TOKEN"

    message = "Missing GitHub token. Set GITHUB_TOKEN (preferred) or GH_TOKEN."
    raise GitHubAuthError(message)


def build_github_client(
    token: str,
    *,
    base_url: str = GITHUB_API_BASE_URL,
    timeout_seconds: int = 20,
) -> httpx.Client:
    """Build an authenticated GitHub HTTP client."""
    headers = {
        "Accept": "application/vnd.github+json",
        "Authorization": f"Bearer {token}",
        "X-GitHub-Api-Version": GITHUB_API_VERSION,
    }
    return httpx.Client(
        base_url=base_url,
        headers=headers,
        timeout=timeout_seconds,
    )
