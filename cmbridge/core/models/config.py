"""
Configuration models.

Provides Pydantic models for cmbridge configuration with validation.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import ConfigDict, Field, field_validator

from .base import CmBridgeBaseModel

# Type aliases
LogLevel = Literal["debug", "info", "warning", "error"]

# Date windows offered for branch and changeset listings, -1 means everything
ALLOWED_DAY_WINDOWS = (7, 30, 90, 365, -1)


class ConfigBaseModel(CmBridgeBaseModel):
    """Base model for config sections with relaxed strict mode for TOML loading."""

    model_config = ConfigDict(
        strict=False,  # Allow coercion from TOML types
        validate_assignment=True,
        extra="ignore",  # Ignore unknown fields in config files
        populate_by_name=True,
        use_enum_values=True,
        revalidate_instances="never",
    )


class CmConfig(ConfigBaseModel):
    """cm executable configuration section."""

    binary: str = "cm"
    timeout: float = Field(default=60.0, gt=0)
    working_dir: str | None = None
    redundant_error_filters: list[str] = Field(default_factory=list)
    report_checked_out_changed: bool = True

    @field_validator("redundant_error_filters", mode="before")
    @classmethod
    def parse_comma_separated(cls, v: Any) -> list[str]:
        """Parse comma-separated string to list."""
        if isinstance(v, str):
            return [x.strip() for x in v.split(",") if x.strip()]
        return v if v else []


class HistoryConfig(ConfigBaseModel):
    """File history configuration section."""

    limit: int = Field(default=100, gt=0)
    show_all: bool = False


class CacheConfig(ConfigBaseModel):
    """State cache and refresh configuration section."""

    default_days: int = 30
    cancel_superseded: bool = True
    max_workers: int = Field(default=4, ge=1)

    @field_validator("default_days")
    @classmethod
    def validate_days(cls, v: int) -> int:
        """Only the windows offered by the listings are accepted."""
        if v not in ALLOWED_DAY_WINDOWS:
            raise ValueError(f"default_days must be one of {ALLOWED_DAY_WINDOWS}")
        return v


class UsersConfig(ConfigBaseModel):
    """User name display configuration section."""

    hide_email_domain: bool = True
    display_names: dict[str, str] = Field(default_factory=dict)


class LoggingConfig(ConfigBaseModel):
    """Logging configuration section."""

    level: LogLevel = "warning"
    console: bool = False
    file: bool = True
    # Full stdout of long command output, in its own file next to the log
    command_output: bool = True
