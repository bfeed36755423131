"""Unit tests for expiry reaping."""

import json
from datetime import timedelta

import pytest

from jobfeed.collection import ExpiryReaper, ReapResult, is_live, reap
from jobfeed.domain.models import Job
from jobfeed.persistence import JobStore
from jobfeed.utils.timestamps import utc_now


@pytest.fixture
def jobs(make_job, now):
    """One expired, one expiring exactly now, one live job."""
    return [
        make_job(key="expired", published_at=now - timedelta(days=40)),
        make_job(key="boundary", published_at=now - timedelta(days=30)),
        make_job(key="live", published_at=now - timedelta(days=1)),
    ]


@pytest.fixture
def unparseable_job(make_job):
    record = make_job(key="odd").to_record()
    record["expires"] = "not-a-date"
    return Job.from_record(record)


class TestReap:
    """Tests for the reap function."""

    def test_keeps_only_future_expiry(self, jobs, now):
        """Test that expires_at <= now is removed and the boundary counts as expired."""
        live = reap(jobs, now)

        assert [job.title for job in live] == ["Job live"]

    def test_preserves_order(self, make_job, now):
        ordered = [make_job(key=str(i), published_at=now - timedelta(days=i)) for i in range(5)]

        assert reap(ordered, now) == ordered

    def test_unparseable_expiry_retained(self, unparseable_job, now):
        assert reap([unparseable_job], now) == [unparseable_job]

    def test_is_live(self, jobs, unparseable_job, now):
        assert [is_live(job, now) for job in jobs] == [False, False, True]
        assert is_live(unparseable_job, now) is True

    def test_reap_is_idempotent(self, jobs, now):
        once = reap(jobs, now)

        assert reap(once, now) == once

    def test_empty_collection(self, now):
        assert reap([], now) == []


class TestExpiryReaper:
    """Tests for ExpiryReaper.reap_store."""

    def test_reap_store_removes_and_saves(self, tmp_path, jobs, now):
        store = JobStore(tmp_path / "jobs.json")
        store.save(jobs)

        result = ExpiryReaper().reap_store(store, now)

        assert isinstance(result, ReapResult)
        assert result.before == 3
        assert result.after == 1
        assert result.removed == 2
        assert result.removed_ids == [jobs[0].id, jobs[1].id]
        assert result.saved is True
        assert [job.id for job in store.load()] == [jobs[2].id]

    def test_reap_store_without_expired_jobs_does_not_write(self, tmp_path, make_job, now):
        store = JobStore(tmp_path / "jobs.json")
        store.save([make_job(key="live")])
        mtime = store.path.stat().st_mtime_ns

        result = ExpiryReaper().reap_store(store, now)

        assert result.removed == 0
        assert result.saved is False
        assert store.path.stat().st_mtime_ns == mtime

    def test_reap_store_missing_file(self, tmp_path, now):
        store = JobStore(tmp_path / "jobs.json")

        result = ExpiryReaper().reap_store(store, now)

        assert result.before == 0
        assert result.saved is False
        assert not store.path.exists()

    def test_unparseable_expiry_written_back(self, tmp_path, jobs, unparseable_job, now):
        store = JobStore(tmp_path / "jobs.json")
        store.save(jobs + [unparseable_job])

        ExpiryReaper().reap_store(store, now)

        remaining = store.load()
        assert [job.id for job in remaining] == [jobs[2].id, unparseable_job.id]
        assert remaining[1].to_record()["expires"] == "not-a-date"

    def test_entries_that_are_not_valid_jobs_survive(self, tmp_path, make_job, now):
        """Test that stored objects failing validation are kept unless clearly expired."""
        store = JobStore(tmp_path / "jobs.json")
        expired = make_job(key="expired", published_at=now - timedelta(days=40)).to_record()
        without_url = {
            "title": "Logo design",
            "description": "Check the link for more details",
            "company": "RemoteOK",
            "source": "RemoteOK",
            "date": "2026-10-17T00:00:00.000Z",
            "expires": "2026-11-16T00:00:00.000Z",
            "id": "job_RemoteOK_1",
        }
        null_expiry = {"id": "nullexp", "title": "Pinned", "expires": None}
        stale_without_url = {**without_url, "id": "job_RemoteOK_0", "expires": "2026-10-01T00:00:00.000Z"}
        store.path.write_text(
            json.dumps([expired, without_url, null_expiry, stale_without_url]), encoding="utf-8"
        )

        result = ExpiryReaper().reap_store(store, now)

        survivors = json.loads(store.path.read_text(encoding="utf-8"))
        assert [record["id"] for record in survivors] == ["job_RemoteOK_1", "nullexp"]
        assert survivors == [without_url, null_expiry]
        assert result.removed_ids == [expired["id"], "job_RemoteOK_0"]

    def test_removed_ids_match_removed_count_with_shared_id(self, tmp_path, make_job, now):
        store = JobStore(tmp_path / "jobs.json")
        expired = make_job(key="same", published_at=now - timedelta(days=40))
        live = make_job(key="same", published_at=now - timedelta(days=1))
        assert expired.id == live.id
        store.save([expired, live])

        result = ExpiryReaper().reap_store(store, now)

        assert result.removed == 1
        assert result.removed_ids == [expired.id]
        assert store.load() == [live]

    def test_days_left_logged_at_debug(self, tmp_path, jobs, now, caplog):
        store = JobStore(tmp_path / "jobs.json")
        store.save(jobs)

        with caplog.at_level("DEBUG", logger="jobfeed.collection.expiry"):
            ExpiryReaper().reap_store(store, now)

        remaining = [r for r in caplog.records if getattr(r, "event", None) == "reaper.job.remaining"]
        assert len(remaining) == 1
        assert remaining[0].days_left == 29

    def test_reaper_default_now(self, make_job):
        """Test that reap without now uses the current time."""
        current = utc_now()
        stale = make_job(key="stale", published_at=current - timedelta(days=60))
        fresh = make_job(key="fresh", published_at=current)

        assert ExpiryReaper().reap([stale, fresh]) == [fresh]
