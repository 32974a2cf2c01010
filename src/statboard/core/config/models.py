"""
Configuration data models for statboard.

These models define the structure of .statboard.json and
~/.config/statboard/config.json files, with validation via Pydantic.
"""

from datetime import timedelta

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_BASE_URL = "https://personal-data-dashboard.s3.us-east-1.amazonaws.com"
MIN_TIMEOUT_SECONDS = 1.0
MAX_TIMEOUT_SECONDS = 60.0


class SourceConfig(BaseModel):
    """
    Where snapshots live and how long to wait for them.

    The object store is addressed as ``<base_url>/<domain>/...``.
    """
    base_url: str = Field(
        default=DEFAULT_BASE_URL,
        min_length=1,
        description="Base URL of the static object store holding snapshots"
    )
    domain: str = Field(
        default="spotify",
        min_length=1,
        description="Data domain to read (e.g. 'spotify')"
    )
    timeout_seconds: float = Field(
        default=10.0,
        ge=MIN_TIMEOUT_SECONDS,
        le=MAX_TIMEOUT_SECONDS,
        description="Upper bound on the wait for any single fetch or probe"
    )

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalize the base URL so path joins never double the slash."""
        return v.rstrip("/")


class FreshnessConfig(BaseModel):
    """Staleness threshold for the data freshness indicator."""
    stale_threshold_hours: float = Field(
        default=24.0,
        gt=0.0,
        description="Data older than this many hours is reported as stale"
    )

    @property
    def stale_threshold(self) -> timedelta:
        return timedelta(hours=self.stale_threshold_hours)


class StatboardConfig(BaseModel):
    """
    Top-level statboard configuration.

    Loaded from defaults, user config, project config, and env vars.

    Example:
        >>> config = StatboardConfig(source=SourceConfig(domain="spotify"))
        >>> config.freshness.stale_threshold_hours
        24.0
    """
    source: SourceConfig = Field(
        default_factory=SourceConfig,
        description="Snapshot store location and timeouts"
    )
    freshness: FreshnessConfig = Field(
        default_factory=FreshnessConfig,
        description="Freshness indicator settings"
    )

    model_config = ConfigDict(
        extra="allow",  # Allow extra fields for forward compatibility
        validate_assignment=True,
    )
