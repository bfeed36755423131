"""Domain models for the Job Feed Ingestor."""

from .models import Job, PassthroughRecord, RawItem, StoredEntry

__all__ = ["Job", "PassthroughRecord", "RawItem", "StoredEntry"]
