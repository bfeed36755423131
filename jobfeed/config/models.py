"""Configuration schema models using Pydantic."""

from datetime import timedelta
from enum import Enum
from typing import List, Optional
from urllib.parse import urlparse

from pydantic import BaseModel, Field, field_validator, model_validator

from .duration import DurationParseError, parse_duration, validate_duration_range

# TTL bounds: one hour to one year
MIN_TTL_SECONDS = 3600
MAX_TTL_SECONDS = 365 * 86400

# Scheduler interval bounds: one minute to seven days
MIN_INTERVAL_SECONDS = 60
MAX_INTERVAL_SECONDS = 7 * 86400


class LogLevel(str, Enum):
    """Logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormat(str, Enum):
    """Log output formats."""

    JSON = "json"
    KEY_VALUE = "key-value"


def _validate_http_url(value: str, field_name: str) -> str:
    """Return the stripped URL if it is an absolute http(s) URL."""
    stripped = value.strip()
    parsed = urlparse(stripped)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValueError(f"{field_name} must be an absolute http(s) URL, got: {value!r}")
    return stripped


class SourceConfig(BaseModel):
    """Configuration for a single RSS job feed."""

    name: str = Field(..., min_length=1, description="Feed name, stored on every job as 'source'")
    feed_url: str = Field(..., description="Absolute http(s) URL of the RSS/Atom feed")
    ttl: str = Field("30d", description="How long jobs stay listed after publication")
    enabled: bool = Field(True, description="Whether to ingest this source")
    max_items: int = Field(
        0, ge=0, description="Maximum items taken from the feed per run (0 = unlimited)"
    )
    fallback_url: Optional[str] = Field(
        None, description="Link used for items without a valid URL (default derived from name)"
    )

    @field_validator("name")
    @classmethod
    def strip_whitespace(cls, v: str) -> str:
        """Strip whitespace from string fields."""
        stripped = v.strip()
        if not stripped:
            raise ValueError("Field cannot be empty or whitespace-only")
        return stripped

    @field_validator("feed_url")
    @classmethod
    def validate_feed_url(cls, v: str) -> str:
        """Require an absolute http(s) feed URL."""
        return _validate_http_url(v, "feed_url")

    @field_validator("fallback_url")
    @classmethod
    def validate_fallback_url(cls, v: Optional[str]) -> Optional[str]:
        """Require fallback URLs to be absolute http(s) URLs."""
        if v is None:
            return None
        return _validate_http_url(v, "fallback_url")

    @field_validator("ttl")
    @classmethod
    def validate_ttl(cls, v: str) -> str:
        """Validate that the TTL parses and is within range."""
        try:
            seconds = parse_duration(v)
            validate_duration_range(
                seconds, min_seconds=MIN_TTL_SECONDS, max_seconds=MAX_TTL_SECONDS, label="TTL"
            )
        except DurationParseError as e:
            raise ValueError(str(e)) from e
        return v.strip()

    @property
    def ttl_delta(self) -> timedelta:
        """TTL as a timedelta."""
        return timedelta(seconds=parse_duration(self.ttl))


class StoreConfig(BaseModel):
    """Job store settings."""

    path: str = Field("data/jobs.json", min_length=1, description="Path of the JSON jobs file")


class ScheduleConfig(BaseModel):
    """Intervals used by scheduler mode."""

    ingest_interval: str = Field("1h", description="How often to run ingestion")
    reap_interval: str = Field("1d", description="How often to purge expired jobs")

    @field_validator("ingest_interval", "reap_interval")
    @classmethod
    def validate_interval(cls, v: str) -> str:
        """Validate and range-check scheduler intervals."""
        try:
            seconds = parse_duration(v)
            validate_duration_range(
                seconds,
                min_seconds=MIN_INTERVAL_SECONDS,
                max_seconds=MAX_INTERVAL_SECONDS,
                label="Interval",
            )
        except DurationParseError as e:
            raise ValueError(str(e)) from e
        return v.strip()

    @property
    def ingest_interval_seconds(self) -> int:
        return parse_duration(self.ingest_interval)

    @property
    def reap_interval_seconds(self) -> int:
        return parse_duration(self.reap_interval)


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: LogLevel = Field(LogLevel.INFO, description="Log level")
    format: LogFormat = Field(
        LogFormat.KEY_VALUE, description="Log output format (json or key-value)"
    )

    model_config = {"use_enum_values": True}


class AdvancedConfig(BaseModel):
    """Advanced runtime settings."""

    http_request_timeout: int = Field(
        10, ge=1, le=300, description="Per-feed request timeout (seconds)"
    )
    user_agent: str = Field(
        "JobFeedIngestor/1.0",
        min_length=1,
        description="User-Agent string for HTTP requests",
    )
    max_workers: int = Field(
        1, ge=1, le=32, description="Feeds fetched in parallel (1 = sequential)"
    )
    description_max_length: int = Field(
        300, ge=20, le=10000, description="Stored description length, including the '...' marker"
    )

    @field_validator("user_agent")
    @classmethod
    def strip_user_agent(cls, v: str) -> str:
        """Strip whitespace from user agent."""
        stripped = v.strip()
        if not stripped:
            raise ValueError("user_agent cannot be empty")
        return stripped


class AppConfig(BaseModel):
    """Root configuration object for the Job Feed Ingestor."""

    sources: List[SourceConfig] = Field(
        ..., min_length=1, description="List of RSS feeds to ingest"
    )
    store: StoreConfig = Field(default_factory=StoreConfig, description="Job store settings")
    schedule: ScheduleConfig = Field(
        default_factory=ScheduleConfig, description="Scheduler mode intervals"
    )
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig, description="Logging configuration"
    )
    advanced: AdvancedConfig = Field(
        default_factory=AdvancedConfig, description="Advanced runtime settings"
    )

    @model_validator(mode="after")
    def validate_sources(self):
        """Require an enabled source and unique source names."""
        if not any(source.enabled for source in self.sources):
            raise ValueError(
                "At least one source must be enabled. All sources have enabled=false."
            )

        # Names feed into job ids case-insensitively
        seen_names = set()
        for source in self.sources:
            key = source.name.lower()
            if key in seen_names:
                raise ValueError(f"Duplicate source name: '{source.name}' appears multiple times")
            seen_names.add(key)

        return self

    def get_enabled_sources(self) -> List[SourceConfig]:
        """Get list of enabled sources."""
        return [source for source in self.sources if source.enabled]

    def get_source_by_name(self, name: str) -> Optional[SourceConfig]:
        """Get a source by its name (case-insensitive)."""
        for source in self.sources:
            if source.name.lower() == name.lower():
                return source
        return None
