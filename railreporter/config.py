"""Configuration loading for railreporter.

This module provides centralized configuration management:
- Load settings from environment variables and .env files
- Validate configuration using pydantic
- Provide typed access to all settings
"""

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment.

    Uses pydantic-settings for environment variable handling with
    .env file support via python-dotenv.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # TestRail connection
    testrail_hostname: str = Field(
        default="",
        description="TestRail host name, e.g. example.testrail.io",
    )
    testrail_username: str = Field(
        default="",
        description="Email of the API user; results are assigned to this user",
    )
    testrail_secret: str = Field(
        default="",
        description="TestRail password or API key",
    )
    testrail_port: int = Field(
        default=443,
        description="TestRail port",
    )
    testrail_scheme: Literal["http", "https"] = Field(
        default="https",
        description="TestRail URL scheme",
    )
    testrail_project_id: int = Field(
        default=1,
        description="Project the results belong to",
    )
    testrail_suite_id: int = Field(
        default=1,
        description="Suite the created run belongs to",
    )

    # Run naming
    run_name: str = Field(
        default="",
        description="Static run name; when empty the name is built from the fields below",
    )
    app_name: str = Field(
        default="",
        description="Application name used in generated run names",
    )
    device: str = Field(
        default="",
        description="Device or host name used in generated run names",
    )
    os_version: str = Field(
        default="",
        description="OS or runtime version used in generated run names",
    )
    branch_name: str = Field(
        default="",
        description="Source branch used in generated run names",
    )
    build_number: str = Field(
        default="",
        description="CI build number used in generated run names",
    )
    git_commit: str = Field(
        default="",
        description="Commit hash used in generated run names",
    )

    # Submission policy
    submit_results: bool = Field(
        default=True,
        description="Submit results to TestRail when the session finishes",
    )
    close_plan_after_submit: bool = Field(
        default=True,
        description="Close the run after submitting results",
    )
    include_all_cases_in_plan: bool = Field(
        default=False,
        description="Include every suite of the project instead of only tested ones",
    )

    # Logging configuration
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Log level",
    )
    log_format: Literal["json", "text"] = Field(
        default="text",
        description="Log format",
    )

    @field_validator("testrail_port")
    @classmethod
    def validate_port(cls, v: int) -> int:
        """Ensure port is in valid range."""
        if v <= 0 or v > 65535:
            raise ValueError("testrail_port must be between 1 and 65535")
        return v

    @field_validator("testrail_project_id", "testrail_suite_id")
    @classmethod
    def validate_positive_id(cls, v: int) -> int:
        """Ensure TestRail identifiers are positive."""
        if v <= 0:
            raise ValueError("TestRail identifiers must be positive")
        return v

    @field_validator("testrail_hostname")
    @classmethod
    def validate_hostname(cls, v: str) -> str:
        """Strip any scheme or trailing slash from the host name."""
        v = v.strip()
        for prefix in ("https://", "http://"):
            if v.startswith(prefix):
                v = v[len(prefix):]
        return v.rstrip("/")


def load_settings(env_file: str | None = None) -> Settings:
    """Load application settings from environment.

    Args:
        env_file: Optional path to .env file. If not provided,
                 uses the default .env in the current directory.

    Returns:
        Validated Settings instance.

    Raises:
        ValidationError: If settings validation fails.
    """
    if env_file:
        return Settings(_env_file=env_file)  # type: ignore[call-arg]
    return Settings()


__all__ = ["Settings", "load_settings"]
