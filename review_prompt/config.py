"""Runtime settings loaded from the environment and an optional .env file."""

from __future__ import annotations

import os
import shlex
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

GITHUB_API_BASE_URL = "https://api.github.com"
GITHUB_API_VERSION = "2022-11-28"
DEFAULT_REMOTE_NAME = "origin"
DEFAULT_CLIPBOARD_COMMAND = "xclip -selection clipboard"
DEFAULT_TIMEOUT_SECONDS = 20
DEFAULT_LOG_LEVEL = "WARNING"

# Pre-change file contents above this many bytes are left out of the prompt.
MAX_SNAPSHOT_BYTES = 51200
DIFF_CONTEXT_LINES = 10

GITHUB_API_URL_ENV_VAR = "GITHUB_API_URL"
REMOTE_ENV_VAR = "REVIEW_PROMPT_REMOTE"
CLIPBOARD_ENV_VAR = "REVIEW_PROMPT_CLIPBOARD"
TIMEOUT_ENV_VAR = "REVIEW_PROMPT_TIMEOUT_SECONDS"
LOG_LEVEL_ENV_VAR = "LOG_LEVEL"


class ConfigError(ValueError):
    """Raised when an environment setting has an invalid value."""


@dataclass(frozen=True, slots=True)
class Settings:
    """Resolved settings for one run."""

    api_base_url: str = GITHUB_API_BASE_URL
    remote_name: str = DEFAULT_REMOTE_NAME
    clipboard_command: tuple[str, ...] = tuple(shlex.split(DEFAULT_CLIPBOARD_COMMAND))
    timeout_seconds: int = DEFAULT_TIMEOUT_SECONDS
    log_level: str = DEFAULT_LOG_LEVEL


def load_env_file(directory: Path | None = None) -> None:
    """Load `.env` from the working directory without overriding set variables."""
    load_dotenv(dotenv_path=(directory or Path.cwd()) / ".env", override=False)


def _parse_timeout(value: str) -> int:
    try:
        timeout = int(value)
    except ValueError as error:
        raise ConfigError(f"{TIMEOUT_ENV_VAR} must be an integer, got '{value}'.") from error
    if timeout <= 0:
        raise ConfigError(f"{TIMEOUT_ENV_VAR} must be positive, got '{value}'.")
    return timeout


def _parse_clipboard_command(value: str) -> tuple[str, ...]:
    command = tuple(shlex.split(value))
    if not command:
        raise ConfigError(f"{CLIPBOARD_ENV_VAR} must name a command.")
    return command


def load_settings(directory: Path | None = None) -> Settings:
    """Build settings from defaults, `.env`, and environment overrides."""
    load_env_file(directory)

    api_base_url = os.getenv(GITHUB_API_URL_ENV_VAR) or GITHUB_API_BASE_URL
    remote_name = os.getenv(REMOTE_ENV_VAR) or DEFAULT_REMOTE_NAME

    clipboard_value = os.getenv(CLIPBOARD_ENV_VAR)
    clipboard_command = (
        _parse_clipboard_command(clipboard_value)
        if clipboard_value is not None
        else tuple(shlex.split(DEFAULT_CLIPBOARD_COMMAND))
    )

    timeout_value = os.getenv(TIMEOUT_ENV_VAR)
    timeout_seconds = (
        _parse_timeout(timeout_value) if timeout_value is not None else DEFAULT_TIMEOUT_SECONDS
    )

    log_level = (os.getenv(LOG_LEVEL_ENV_VAR) or DEFAULT_LOG_LEVEL).upper()

    return Settings(
        api_base_url=api_base_url.rstrip("/"),
        remote_name=remote_name,
        clipboard_command=clipboard_command,
        timeout_seconds=timeout_seconds,
        log_level=log_level,
    )
