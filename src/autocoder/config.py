"""Autocoder configuration using pydantic-settings.

This module defines the AutocoderSettings class that reads configuration
from environment variables with the AUTOCODER_ prefix. The GitHub token,
Anthropic key and repository also accept the unprefixed names that GitHub
Actions exports (GITHUB_TOKEN, ANTHROPIC_API_KEY, GITHUB_REPOSITORY).

CLI flags override environment values by passing them as keyword arguments.
"""

from typing import Tuple

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_MODEL = "claude-sonnet-4-20250514"

LOG_LEVELS = ("info", "debug", "error")


class AutocoderSettings(BaseSettings):
    """Pipeline configuration from environment variables.

    Required fields:
    - github_token: Token used to read issues and open pull requests
    - repository: Target repository in "owner/name" format

    The anthropic_api_key drives backend selection: an empty value or the
    literal "mock" routes generation to the fallback generator.
    """

    model_config = SettingsConfigDict(
        env_prefix="AUTOCODER_",
        case_sensitive=False,
        populate_by_name=True,
    )

    # -------------------------------------------------------------------------
    # GitHub Configuration
    # -------------------------------------------------------------------------
    github_token: str = Field(
        validation_alias=AliasChoices("AUTOCODER_GITHUB_TOKEN", "GITHUB_TOKEN"),
    )

    repository: str = Field(
        validation_alias=AliasChoices(
            "AUTOCODER_REPOSITORY", "GITHUB_REPOSITORY"
        ),
    )

    # Supports GitHub Enterprise Server
    github_base_url: str = "https://api.github.com"

    # Branch the change request is opened against
    base_branch: str = "main"

    # -------------------------------------------------------------------------
    # Generation Configuration
    # -------------------------------------------------------------------------
    anthropic_api_key: str = Field(
        default="",
        validation_alias=AliasChoices(
            "AUTOCODER_ANTHROPIC_API_KEY", "ANTHROPIC_API_KEY"
        ),
    )

    # Forces the fallback generator regardless of credential
    mock_mode: bool = False

    llm_model: str = DEFAULT_MODEL

    max_output_tokens: int = 4096

    # -------------------------------------------------------------------------
    # Runtime Configuration
    # -------------------------------------------------------------------------
    # Accepted for compatibility; runs are strictly sequential
    concurrency: int = 3

    log_level: str = "info"

    # -------------------------------------------------------------------------
    # Validators
    # -------------------------------------------------------------------------
    @field_validator("github_token")
    @classmethod
    def validate_github_token(cls, v: str) -> str:
        """Validate that GitHub token is not empty."""
        if not v or not v.strip():
            raise ValueError("github_token cannot be empty")
        return v

    @field_validator("repository")
    @classmethod
    def validate_repository(cls, v: str) -> str:
        """Validate that repository is in owner/name format."""
        parts = v.strip().split("/")
        if len(parts) != 2 or not all(parts):
            raise ValueError("repository must be in owner/name format")
        return v.strip()

    @field_validator("github_base_url")
    @classmethod
    def validate_github_base_url(cls, v: str) -> str:
        """Validate that the GitHub API URL is a valid URL format."""
        if not v.startswith(("http://", "https://")):
            raise ValueError("github_base_url must start with http:// or https://")
        return v

    @field_validator("max_output_tokens")
    @classmethod
    def validate_max_output_tokens(cls, v: int) -> int:
        """Validate that the output ceiling is positive."""
        if v < 1:
            raise ValueError("max_output_tokens must be at least 1")
        return v

    @field_validator("concurrency")
    @classmethod
    def validate_concurrency(cls, v: int) -> int:
        """Validate that concurrency is positive."""
        if v < 1:
            raise ValueError("concurrency must be at least 1")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate that the log level is one of info, debug, error."""
        level = v.strip().lower()
        if level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}")
        return level

    @property
    def owner(self) -> str:
        """Repository owner (user or organization)."""
        return self._split_repository()[0]

    @property
    def repo_name(self) -> str:
        """Repository name without the owner prefix."""
        return self._split_repository()[1]

    def _split_repository(self) -> Tuple[str, str]:
        owner, name = self.repository.split("/")
        return owner, name


def get_settings(**overrides) -> AutocoderSettings:
    """Create and return an AutocoderSettings instance.

    Keyword arguments whose value is None are ignored so that unset CLI
    flags fall through to the environment.

    Raises:
        pydantic.ValidationError: If required fields are missing or invalid.
    """
    values = {k: v for k, v in overrides.items() if v is not None}
    return AutocoderSettings(**values)
