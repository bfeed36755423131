"""Pipeline orchestration for feed ingestion and expiry reaping."""

from jobfeed.collection.expiry import ReapResult

from .models import PipelineRunResult, SourceRunStats
from .runner import IngestPipeline, ReapRunner

__all__ = [
    "IngestPipeline",
    "ReapRunner",
    "PipelineRunResult",
    "ReapResult",
    "SourceRunStats",
]
