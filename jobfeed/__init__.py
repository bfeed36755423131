"""Job Feed Ingestor: RSS job feed ingestion, merging, and expiry."""

__version__ = "1.0.0"
