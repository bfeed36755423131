"""Integration tests for ingestion and reaping against a real jobs file."""

import json
from datetime import timedelta

import pytest

from jobfeed.config.models import AdvancedConfig, AppConfig, SourceConfig
from jobfeed.feeds.exceptions import FetchTimeoutError
from jobfeed.persistence import JobStore
from jobfeed.pipeline import IngestPipeline, ReapRunner
from tests.helpers import ATOM_FEED, FixtureFetcher, rss_feed

BOARD_URL = "https://board.example.com/feed.rss"
ATOM_URL = "https://atom.example.com/feed.atom"
SLOW_URL = "https://slow.example.com/rss"


def board_feed(*keys):
    return rss_feed(
        [
            {
                "title": f"Role {key}",
                "link": f"https://board.example.com/jobs/{key}",
                "description": f"<p>Details for role {key}</p>",
                "author": "Initech",
                "pub_date": "Thu, 15 Oct 2026 10:00:00 GMT",
            }
            for key in keys
        ],
        title="Board",
    )


@pytest.fixture
def config():
    return AppConfig(
        sources=[
            SourceConfig(name="Board", feed_url=BOARD_URL, ttl="7d"),
            SourceConfig(name="Atom Board", feed_url=ATOM_URL, ttl="30d"),
            SourceConfig(name="Slow Board", feed_url=SLOW_URL, ttl="30d"),
        ],
        advanced=AdvancedConfig(max_workers=3),
    )


@pytest.fixture
def store(tmp_path):
    return JobStore(tmp_path / "data" / "jobs.json")


class TestIngestCycle:
    """Ingest, re-ingest and reap over several runs."""

    def test_full_cycle(self, config, store, now):
        timeout = FetchTimeoutError("timed out", url=SLOW_URL, timeout=10)

        # First run: the slow board times out, the others succeed
        fetcher = FixtureFetcher({BOARD_URL: board_feed("a", "b"), ATOM_URL: ATOM_FEED, SLOW_URL: timeout})
        first = IngestPipeline(config, store, fetcher=fetcher).run_once(now=now)

        assert first.failed_sources == 1
        assert first.added_count == 3
        titles = [job.title for job in store.load()]
        assert titles == ["Role a", "Role b", "Data Engineer"]
        assert not any(job.source == "Slow Board" for job in store.load())

        # Second run: the board re-lists "b" and adds "c"
        fetcher.responses[BOARD_URL] = board_feed("b", "c")
        second = IngestPipeline(config, store, fetcher=fetcher).run_once(now=now + timedelta(hours=1))

        assert second.added_count == 1
        assert second.duplicate_count == 2
        assert [job.title for job in store.load()] == ["Role a", "Role b", "Data Engineer", "Role c"]

        # Ten days later the board's 7d jobs have expired, the atom job has not
        reaped = ReapRunner(store).run_once(now=now + timedelta(days=10))

        assert reaped.removed == 3
        assert [job.title for job in store.load()] == ["Data Engineer"]

    def test_stored_file_layout(self, config, store, now):
        fetcher = FixtureFetcher(
            {
                BOARD_URL: board_feed("a"),
                ATOM_URL: ATOM_FEED,
                SLOW_URL: FetchTimeoutError("timed out", url=SLOW_URL, timeout=10),
            }
        )

        IngestPipeline(config, store, fetcher=fetcher).run_once(now=now)

        records = json.loads(store.path.read_text(encoding="utf-8"))
        assert set(records[0]) == {
            "id",
            "title",
            "description",
            "company",
            "url",
            "source",
            "date",
            "expires",
        }
        assert records[0]["description"] == "Details for role a"
        assert records[0]["company"] == "Initech"
        assert records[0]["date"] == "2026-10-15T10:00:00.000Z"
        assert records[0]["expires"] == "2026-10-22T10:00:00.000Z"
        assert records[1]["company"] == "Globex"
        assert records[1]["description"] == "Airflow & dbt"

    def test_hand_edited_entries_survive_ingest(self, config, store, now):
        store.path.parent.mkdir(parents=True)
        store.path.write_text(
            json.dumps(
                [
                    {
                        "id": "manual-1",
                        "title": "Pinned role",
                        "description": "Added by hand",
                        "company": "Initech",
                        "url": "https://initech.example.com/careers",
                        "source": "Manual",
                        "date": "2026-10-01T00:00:00.000Z",
                        "expires": "2027-01-01T00:00:00.000Z",
                        "featured": True,
                    }
                ]
            ),
            encoding="utf-8",
        )
        fetcher = FixtureFetcher(
            {
                BOARD_URL: board_feed("a"),
                ATOM_URL: ATOM_FEED,
                SLOW_URL: FetchTimeoutError("timed out", url=SLOW_URL, timeout=10),
            }
        )

        IngestPipeline(config, store, fetcher=fetcher).run_once(now=now)

        records = json.loads(store.path.read_text(encoding="utf-8"))
        assert records[0]["id"] == "manual-1"
        assert records[0]["featured"] is True
        assert len(records) == 3

    def test_entries_that_are_not_valid_jobs_survive_ingest(self, config, store, now):
        legacy = [
            {"title": "No link", "source": "Board", "expires": "2026-12-01T00:00:00.000Z"},
            {"id": 17, "title": "", "expires": None},
        ]
        store.path.parent.mkdir(parents=True)
        store.path.write_text(json.dumps(legacy), encoding="utf-8")
        fetcher = FixtureFetcher(
            {
                BOARD_URL: board_feed("a"),
                ATOM_URL: ATOM_FEED,
                SLOW_URL: FetchTimeoutError("timed out", url=SLOW_URL, timeout=10),
            }
        )

        result = IngestPipeline(config, store, fetcher=fetcher).run_once(now=now)

        records = json.loads(store.path.read_text(encoding="utf-8"))
        assert records[:2] == legacy
        assert len(records) == 4
        assert result.existing_count == 2
        assert result.added_count == 2
