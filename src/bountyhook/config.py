"""Service configuration using pydantic-settings.

This module defines the BountyHookSettings class that reads configuration
from environment variables with the BOUNTYHOOK_ prefix.

The bounty label name lives here rather than as a module constant so that
the resolver and handlers receive it explicitly.
"""

from typing import Dict

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class BountyHookSettings(BaseSettings):
    """Webhook processor configuration from environment variables.

    All environment variables are prefixed with BOUNTYHOOK_
    (e.g., BOUNTYHOOK_GITHUB_TOKEN).

    Required fields (must be set via environment variables):
    - github_token: GitHub API token used for issue and timeline lookups
    """

    model_config = SettingsConfigDict(
        env_prefix="BOUNTYHOOK_",
        case_sensitive=False,
    )

    # -------------------------------------------------------------------------
    # GitHub Configuration
    # -------------------------------------------------------------------------
    # GitHub API token for reading issues and issue events
    github_token: str

    # Base URL for GitHub API (supports GitHub Enterprise)
    github_base_url: str = "https://api.github.com"

    # Lookups run inline with the webhook request, so keep these short
    github_timeout_seconds: float = 10.0
    github_max_retries: int = 1

    # -------------------------------------------------------------------------
    # Bounty Configuration
    # -------------------------------------------------------------------------
    # Label that marks an issue as a bounty issue
    bounty_label: str = "bounty"

    # Webhook secrets by repository full name, as JSON. Only used by the
    # in-memory repository store for local development.
    repository_secrets: Dict[str, str] = Field(default_factory=dict)

    # -------------------------------------------------------------------------
    # Server Configuration
    # -------------------------------------------------------------------------
    host: str = "0.0.0.0"
    port: int = 8080

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

    @field_validator("github_base_url")
    @classmethod
    def validate_github_base_url(cls, v: str) -> str:
        """Validate that the GitHub base URL is an http(s) URL."""
        if not v.startswith(("http://", "https://")):
            raise ValueError("github_base_url must start with http:// or https://")
        return v

    @field_validator("bounty_label")
    @classmethod
    def validate_bounty_label(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("bounty_label cannot be empty")
        return v

    @field_validator("github_timeout_seconds")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("github_timeout_seconds must be positive")
        return v

    @field_validator("github_max_retries")
    @classmethod
    def validate_max_retries(cls, v: int) -> int:
        if v < 0:
            raise ValueError("github_max_retries cannot be negative")
        return v

    @field_validator("port")
    @classmethod
    def validate_port(cls, v: int) -> int:
        """Validate that port is in valid range."""
        if not 1 <= v <= 65535:
            raise ValueError("port must be between 1 and 65535")
        return v


def get_settings() -> BountyHookSettings:
    """Create and return a BountyHookSettings instance.

    Returns:
        BountyHookSettings: Configured settings instance.

    Raises:
        pydantic.ValidationError: If required fields are missing or invalid.
    """
    return BountyHookSettings()
