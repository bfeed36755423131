"""Shared fixtures for the test suite."""

from datetime import datetime, timedelta, timezone

import pytest

from jobfeed.config.models import AdvancedConfig, AppConfig, SourceConfig
from jobfeed.domain.models import Job
from jobfeed.logging.context import clear_log_context
from jobfeed.utils.hashing import compute_job_id

NOW = datetime(2026, 10, 18, 6, 0, 0, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def clean_log_context():
    """Keep log context from leaking between tests."""
    clear_log_context()
    yield
    clear_log_context()


@pytest.fixture
def now():
    """Fixed ingestion time."""
    return NOW


@pytest.fixture
def make_job():
    """Factory for Job records with sensible defaults."""

    def _make_job(
        key="1",
        source="RemoteOK",
        published_at=NOW - timedelta(days=1),
        ttl=timedelta(days=30),
        **overrides,
    ):
        url = overrides.pop("url", f"https://remoteok.io/remote-jobs/{key}")
        fields = {
            "id": compute_job_id(source, url),
            "title": f"Job {key}",
            "description": f"Description for job {key}",
            "company": "Acme Corp",
            "url": url,
            "source": source,
            "published_at": published_at,
            "expires_at": published_at + ttl,
        }
        fields.update(overrides)
        return Job(**fields)

    return _make_job


@pytest.fixture
def remoteok_source():
    return SourceConfig(
        name="RemoteOK",
        feed_url="https://remoteok.io/remote-freelance-jobs.rss",
        ttl="30d",
    )


@pytest.fixture
def upwork_source():
    return SourceConfig(
        name="Upwork",
        feed_url="https://www.upwork.com/ab/feed/jobs/rss",
        ttl="7d",
    )


@pytest.fixture
def app_config(remoteok_source, upwork_source):
    """Two enabled sources and one disabled source, sequential fetching."""
    return AppConfig(
        sources=[
            remoteok_source,
            upwork_source,
            SourceConfig(
                name="Disabled Board",
                feed_url="https://disabled.example.com/rss",
                enabled=False,
            ),
        ],
        advanced=AdvancedConfig(http_request_timeout=10, max_workers=1),
    )
