"""Unit tests for the main entry point.

Tests the main() function including:
- CLI argument parsing
- Configuration loading with priority (CLI > env > config)
- Subcommand dispatch (ingest, reap, schedule)
- Exit code handling
- Error handling
"""

import json
from datetime import timedelta
from unittest.mock import Mock, patch

import pytest

from jobfeed.config.exceptions import ConfigurationError
from jobfeed.main import build_parser, load_runtime_config, main
from jobfeed.persistence import JobStore
from jobfeed.utils.timestamps import utc_now
from tests.helpers import RSS_FEED, FixtureFetcher

FEED_URL = "https://remoteok.io/remote-freelance-jobs.rss"

CONFIG_TEMPLATE = """
sources:
  - name: RemoteOK
    feed_url: {feed_url}
    ttl: 30d
store:
  path: {store_path}
logging:
  level: {log_level}
"""


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """Isolate tests from the caller's environment and working directory."""
    for var in ("JOB_STORE_PATH", "LOG_LEVEL", "ENVIRONMENT"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        CONFIG_TEMPLATE.format(
            feed_url=FEED_URL,
            store_path=tmp_path / "config-store" / "jobs.json",
            log_level="WARNING",
        )
    )
    return path


class TestLoadRuntimeConfig:
    """Test suite for load_runtime_config helper."""

    def test_values_from_config_file(self, config_file, tmp_path):
        app_config, env_config = load_runtime_config(config_file)

        assert env_config.log_level == "WARNING"
        assert env_config.store_path == str(tmp_path / "config-store" / "jobs.json")
        assert app_config.sources[0].name == "RemoteOK"

    def test_environment_overrides_config(self, config_file, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "error")
        monkeypatch.setenv("JOB_STORE_PATH", "/srv/jobs/env.json")

        _, env_config = load_runtime_config(config_file)

        assert env_config.log_level == "ERROR"
        assert env_config.store_path == "/srv/jobs/env.json"

    def test_cli_overrides_environment(self, config_file, monkeypatch):
        """Test priority: CLI > env > config."""
        monkeypatch.setenv("LOG_LEVEL", "ERROR")
        monkeypatch.setenv("JOB_STORE_PATH", "/srv/jobs/env.json")

        _, env_config = load_runtime_config(
            config_file, log_level_override="debug", store_path_override="/tmp/cli.json"
        )

        assert env_config.log_level == "DEBUG"
        assert env_config.store_path == "/tmp/cli.json"

    def test_missing_config_raises(self, tmp_path):
        with pytest.raises(ConfigurationError):
            load_runtime_config(tmp_path / "nonexistent.yaml")

    def test_invalid_environment_raises(self, config_file, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "VERBOSE")

        with pytest.raises(ConfigurationError):
            load_runtime_config(config_file)


class TestBuildParser:
    """Tests for CLI parsing."""

    def test_command_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])

    def test_global_options(self, tmp_path):
        args = build_parser().parse_args(
            ["--config", str(tmp_path / "c.yaml"), "--store", "jobs.json", "--log-level", "debug", "reap"]
        )

        assert args.command == "reap"
        assert args.config == tmp_path / "c.yaml"
        assert args.store == "jobs.json"
        assert args.log_level == "DEBUG"

    def test_invalid_log_level(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["--log-level", "LOUD", "ingest"])

    def test_unknown_command(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["rescan"])


class TestMain:
    """Test suite for main() function."""

    @pytest.fixture(autouse=True)
    def no_logging_setup(self):
        with patch("jobfeed.main.configure_logging") as mock_configure_logging:
            yield mock_configure_logging

    @pytest.fixture
    def fixture_fetcher(self):
        fetcher = FixtureFetcher({FEED_URL: RSS_FEED})
        with patch("jobfeed.pipeline.runner.FeedFetcher", return_value=fetcher):
            yield fetcher

    def test_ingest_writes_store(self, config_file, fixture_fetcher, tmp_path):
        store_path = tmp_path / "out" / "jobs.json"

        exit_code = main(["--config", str(config_file), "--store", str(store_path), "ingest"])

        assert exit_code == 0
        records = json.loads(store_path.read_text(encoding="utf-8"))
        assert [r["title"] for r in records] == ["Senior Python Developer", "Frontend Engineer"]
        assert fixture_fetcher.closed is True

    def test_ingest_uses_config_store_path(self, config_file, fixture_fetcher, tmp_path):
        exit_code = main(["--config", str(config_file), "ingest"])

        assert exit_code == 0
        assert (tmp_path / "config-store" / "jobs.json").exists()

    def test_ingest_configures_logging(self, config_file, fixture_fetcher, no_logging_setup):
        main(["--config", str(config_file), "--log-level", "debug", "ingest"])

        no_logging_setup.assert_called_once()
        assert no_logging_setup.call_args.kwargs["level"] == "DEBUG"

    def test_ingest_succeeds_when_sources_fail(self, config_file, tmp_path):
        from jobfeed.feeds.exceptions import FetchTimeoutError

        fetcher = FixtureFetcher({FEED_URL: FetchTimeoutError("timed out", url=FEED_URL, timeout=10)})
        store_path = tmp_path / "jobs.json"

        with patch("jobfeed.pipeline.runner.FeedFetcher", return_value=fetcher):
            exit_code = main(["--config", str(config_file), "--store", str(store_path), "ingest"])

        assert exit_code == 0
        assert json.loads(store_path.read_text(encoding="utf-8")) == []

    def test_store_write_failure_exit_code(self, config_file, fixture_fetcher, tmp_path, capsys):
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")

        exit_code = main(
            ["--config", str(config_file), "--store", str(blocker / "jobs.json"), "ingest"]
        )

        assert exit_code == 1
        assert "Store Error" in capsys.readouterr().err
        assert fixture_fetcher.closed is True

    def test_reap_removes_expired(self, config_file, tmp_path, make_job):
        now = utc_now()
        store = JobStore(tmp_path / "jobs.json")
        expired = make_job(key="old", published_at=now - timedelta(days=40))
        live = make_job(key="new", published_at=now - timedelta(days=1))
        store.save([expired, live])

        exit_code = main(["--config", str(config_file), "--store", str(store.path), "reap"])

        assert exit_code == 0
        assert [job.id for job in store.load()] == [live.id]

    def test_reap_on_missing_store(self, config_file, tmp_path):
        store_path = tmp_path / "absent.json"

        exit_code = main(["--config", str(config_file), "--store", str(store_path), "reap"])

        assert exit_code == 0
        assert not store_path.exists()

    @patch("signal.signal")
    @patch("jobfeed.main.SchedulerService")
    def test_schedule_mode(self, mock_scheduler_service, mock_signal, config_file, fixture_fetcher):
        """Test main() in scheduler mode exits cleanly on interrupt."""
        mock_scheduler_instance = Mock()
        mock_scheduler_service.return_value = mock_scheduler_instance
        mock_scheduler_instance.start.side_effect = KeyboardInterrupt()

        exit_code = main(["--config", str(config_file), "schedule"])

        assert exit_code == 0
        mock_scheduler_instance.start.assert_called_once()
        kwargs = mock_scheduler_service.call_args.kwargs
        assert kwargs["ingest_interval_seconds"] == 3600
        assert kwargs["reap_interval_seconds"] == 86400
        assert mock_signal.call_count == 2

    def test_configuration_error(self, tmp_path, capsys):
        """Test main() handles ConfigurationError gracefully."""
        exit_code = main(["--config", str(tmp_path / "nonexistent.yaml"), "ingest"])

        assert exit_code == 1
        assert "Configuration Error" in capsys.readouterr().err

    @patch("jobfeed.main.load_runtime_config")
    def test_keyboard_interrupt(self, mock_load_config):
        """Test main() handles KeyboardInterrupt gracefully."""
        mock_load_config.side_effect = KeyboardInterrupt()

        assert main(["ingest"]) == 0

    @patch("jobfeed.main.run_ingest")
    def test_unexpected_error(self, mock_run_ingest, config_file, fixture_fetcher, capsys):
        mock_run_ingest.side_effect = RuntimeError("boom")

        exit_code = main(["--config", str(config_file), "ingest"])

        assert exit_code == 1
        assert "Fatal error: boom" in capsys.readouterr().err
        assert fixture_fetcher.closed is True
