"""Core domain models for feed items and jobs.

This module defines the data structures used throughout the application:
- RawItem: a single feed entry as parsed, before any defaulting
- Job: the canonical, persisted job record
- PassthroughRecord: a stored entry that is not a valid Job, kept verbatim
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator, model_validator

from jobfeed.utils.timestamps import ensure_utc, format_timestamp, parse_timestamp

# Stored timestamps that cannot be parsed are kept verbatim as strings
TimestampValue = Union[datetime, str]


class RawItem(BaseModel):
    """Feed entry as extracted by the parser.

    Every field is optional. Missing fields stay None here; defaulting is
    the normalizer's job.
    """

    title: Optional[str] = Field(None, description="Entry title (plain text)")
    link: Optional[str] = Field(None, description="Entry link as published")
    description: Optional[str] = Field(None, description="Entry summary or content (plain text)")
    author: Optional[str] = Field(None, description="Entry author / creator")
    published_at: Optional[datetime] = Field(None, description="Publish date (UTC)")

    @field_validator("title", "link", "description", "author")
    @classmethod
    def blank_to_none(cls, v: Optional[str]) -> Optional[str]:
        """Strip whitespace and treat blank strings as absent."""
        if v is None:
            return None
        stripped = v.strip()
        return stripped if stripped else None

    @field_validator("published_at")
    @classmethod
    def ensure_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        """Ensure datetime is timezone-aware and in UTC."""
        return ensure_utc(v)


class Job(BaseModel):
    """Canonical job record as stored in the jobs file.

    Attribute names are Pythonic; the JSON keys written to the store are the
    aliases (``date`` and ``expires``) so files produced by earlier runs stay
    readable. Unknown keys found on stored records are kept and written back.

    The id is computed from the source name and the item's URL (or title),
    never from the clock, so re-ingesting an unchanged feed yields the same
    ids.
    """

    title: str = Field(..., min_length=1, description="Job title")
    description: str = Field(..., description="Plain text description, truncated for display")
    company: str = Field(..., description="Hiring company or feed name")
    url: str = Field(..., min_length=1, description="Absolute http(s) link to the posting")
    source: str = Field(..., min_length=1, description="Name of the originating feed")
    published_at: TimestampValue = Field(..., alias="date", description="Publish time (UTC)")
    expires_at: TimestampValue = Field(..., alias="expires", description="Expiry time (UTC)")
    id: str = Field(..., min_length=1, description="Deterministic job identifier")

    model_config = ConfigDict(
        populate_by_name=True,
        extra="allow",
        json_schema_extra={
            "example": {
                "title": "Senior Python Developer",
                "description": "Remote contract role building data pipelines...",
                "company": "Example Corp",
                "url": "https://remoteok.io/remote-jobs/12345",
                "source": "RemoteOK",
                "date": "2026-10-18T06:00:00.000Z",
                "expires": "2026-11-17T06:00:00.000Z",
                "id": "5f0c2a9e4b1d7c3e8a6f2b9d0c1e4a7b3d6f9c2e5a8b1d4f7c0e3a6b9d2f5c8e",
            }
        },
    )

    @field_validator("published_at", "expires_at", mode="before")
    @classmethod
    def parse_timestamps(cls, v: Any) -> Any:
        """Parse timestamps, leaving unparseable strings untouched."""
        parsed = parse_timestamp(v)
        if parsed is not None:
            return parsed
        return v

    @model_validator(mode="after")
    def check_expiry_after_publication(self) -> "Job":
        """Reject records that expire at or before their publish time."""
        published = self.published_at
        expires = self.expires_at
        if isinstance(published, datetime) and isinstance(expires, datetime):
            if expires <= published:
                raise ValueError(
                    f"expires ({format_timestamp(expires)}) must be later than "
                    f"date ({format_timestamp(published)})"
                )
        return self

    @field_serializer("published_at", "expires_at")
    def serialize_timestamp(self, value: TimestampValue) -> str:
        """Serialize datetimes in the stored millisecond ISO layout."""
        if isinstance(value, datetime):
            return format_timestamp(value)
        return value

    @property
    def expiry(self) -> Optional[datetime]:
        """Expiry as a datetime, or None when the stored value is unparseable."""
        if isinstance(self.expires_at, datetime):
            return self.expires_at
        return None

    def to_record(self) -> Dict[str, Any]:
        """Convert to the JSON-ready dict written to the store."""
        return self.model_dump(by_alias=True)

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "Job":
        """Build a Job from a stored JSON object.

        Raises:
            pydantic.ValidationError: If the record is not a valid job
        """
        return cls.model_validate(record)


@dataclass
class PassthroughRecord:
    """Stored JSON object that does not validate as a Job.

    Such entries are written back exactly as they were read. They expose
    just enough of the Job interface for merging and reaping: an id when
    one is present, and an expiry when the ``expires`` value parses. An
    entry without a parseable expiry is never reaped.

    Attributes:
        record: The stored object, unchanged
        error: Why validation failed, for logging
    """

    record: Dict[str, Any]
    error: Optional[str] = field(default=None, compare=False)

    @property
    def id(self) -> Optional[str]:
        raw_id = self.record.get("id")
        if raw_id is None or isinstance(raw_id, (dict, list)) or raw_id == "":
            return None
        return str(raw_id)

    @property
    def title(self) -> str:
        return str(self.record.get("title") or "<untitled>")

    @property
    def expiry(self) -> Optional[datetime]:
        """Parsed ``expires`` value, or None when missing or unparseable."""
        value = self.record.get("expires")
        if not isinstance(value, str):
            return None
        return parse_timestamp(value)

    def to_record(self) -> Dict[str, Any]:
        return dict(self.record)


# Anything a loaded jobs file can contain
StoredEntry = Union[Job, PassthroughRecord]
