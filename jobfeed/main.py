"""Main entry point for the Job Feed Ingestor."""

from dotenv import load_dotenv
load_dotenv()

import argparse
import signal
import sys
import threading
import time
from pathlib import Path
from typing import List, Optional, Tuple

from jobfeed.config.environment import EnvironmentConfig
from jobfeed.config.exceptions import ConfigurationError
from jobfeed.config.loader import load_config
from jobfeed.config.models import AppConfig
from jobfeed.logging import get_logger
from jobfeed.logging.config import configure_logging
from jobfeed.persistence.exceptions import StoreWriteError
from jobfeed.persistence.store import JobStore
from jobfeed.pipeline import IngestPipeline, ReapRunner
from jobfeed.scheduler import SchedulerService

logger = get_logger(__name__, component="cli")

LOG_LEVEL_CHOICES = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def load_runtime_config(
    config_path: Optional[Path],
    log_level_override: Optional[str] = None,
    store_path_override: Optional[str] = None,
) -> Tuple[AppConfig, EnvironmentConfig]:
    """
    Load configuration and resolve the effective log level and store path.

    Priority for both values: CLI flag > environment variable > config file.
    The resolved values are written back onto the returned EnvironmentConfig.

    Args:
        config_path: Path to configuration file (None to search defaults)
        log_level_override: Log level from CLI
        store_path_override: Store path from CLI

    Returns:
        Tuple of (AppConfig, EnvironmentConfig)

    Raises:
        ConfigurationError: If configuration is invalid
    """
    app_config, env_config = load_config(config_path)

    if log_level_override:
        env_config.log_level = log_level_override.upper()
    elif not env_config.log_level:
        env_config.log_level = app_config.logging.level

    if store_path_override:
        env_config.store_path = store_path_override
    elif not env_config.store_path:
        env_config.store_path = app_config.store.path

    return app_config, env_config


def build_parser() -> argparse.ArgumentParser:
    """Build the command-line parser."""
    parser = argparse.ArgumentParser(
        prog="jobfeed",
        description="Job Feed Ingestor - fetch RSS job feeds into a deduplicated JSON job store",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to configuration file (default: config.yaml, then config/config.yaml)",
    )
    parser.add_argument(
        "--store",
        default=None,
        help="Path to the jobs file (overrides JOB_STORE_PATH and store.path)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        type=str.upper,
        choices=LOG_LEVEL_CHOICES,
        help="Log level (overrides config and environment)",
    )

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")
    subparsers.required = True
    subparsers.add_parser("ingest", help="Run one ingestion pass over all enabled sources and exit")
    subparsers.add_parser("reap", help="Remove expired jobs from the store and exit")
    subparsers.add_parser(
        "schedule", help="Run ingestion and reaping periodically until interrupted"
    )
    return parser


def run_ingest(pipeline: IngestPipeline) -> int:
    """Execute a single ingestion run and report it."""
    result = pipeline.run_once()

    logger.info(
        f"Ingestion completed: "
        f"{result.total_parsed} parsed, "
        f"{result.total_normalized} normalized, "
        f"{result.added_count} added, "
        f"{result.stored_count} stored",
        extra={
            "event": "service.ingest.completed",
            "duration_seconds": result.total_duration_seconds,
            "had_errors": result.had_errors,
            "failed_sources": result.failed_sources,
            "added": result.added_count,
            "stored": result.stored_count,
        },
    )

    # Failed sources are reported, but the store was persisted
    return 0


def run_reap(reap_runner: ReapRunner) -> int:
    """Execute a single reap run and report it."""
    result = reap_runner.run_once()

    logger.info(
        f"Reap completed: {result.removed} removed, {result.after} remaining",
        extra={
            "event": "service.reap.completed",
            "removed": result.removed,
            "remaining": result.after,
            "saved": result.saved,
        },
    )
    return 0


def run_schedule(
    app_config: AppConfig, pipeline: IngestPipeline, reap_runner: ReapRunner
) -> int:
    """Run the scheduler until SIGINT/SIGTERM."""
    shutdown_event = threading.Event()

    scheduler_service = SchedulerService(
        ingest_callable=pipeline.run_once,
        ingest_interval_seconds=app_config.schedule.ingest_interval_seconds,
        reap_callable=reap_runner.run_once,
        reap_interval_seconds=app_config.schedule.reap_interval_seconds,
        shutdown_event=shutdown_event,
    )

    def signal_handler(signum, frame):
        logger.info(
            f"Received signal {signum}, shutting down",
            extra={"event": "service.signal_received", "signal": signum},
        )
        scheduler_service.shutdown(wait=False)

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    scheduler_service.start()

    logger.info(
        "Scheduler started. Press Ctrl+C to stop",
        extra={"event": "service.daemon_mode.started"},
    )

    try:
        shutdown_event.wait()
    except KeyboardInterrupt:
        logger.info(
            "Keyboard interrupt received, shutting down",
            extra={"event": "service.keyboard_interrupt"},
        )
        scheduler_service.shutdown(wait=False)

    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for the Job Feed Ingestor.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code: 0 when the store was persisted, 1 on store write
        failure or configuration error.
    """
    start_time = time.time()
    args = build_parser().parse_args(argv)

    try:
        app_config, env_config = load_runtime_config(args.config, args.log_level, args.store)

        configure_logging(
            level=env_config.log_level,
            format_type=app_config.logging.format,
            environment=env_config.environment,
        )

        enabled_sources = app_config.get_enabled_sources()
        logger.info(
            "Job Feed Ingestor starting",
            extra={
                "event": "service.starting",
                "command": args.command,
                "config_path": str(args.config) if args.config else None,
                "store_path": env_config.store_path,
                "log_level": env_config.log_level,
                "source_count": len(app_config.sources),
                "enabled_source_count": len(enabled_sources),
            },
        )

        store = JobStore(env_config.store_path)
        pipeline = IngestPipeline(app_config=app_config, store=store)
        reap_runner = ReapRunner(store=store)

        try:
            if args.command == "ingest":
                exit_code = run_ingest(pipeline)
            elif args.command == "reap":
                exit_code = run_reap(reap_runner)
            else:
                exit_code = run_schedule(app_config, pipeline, reap_runner)
        finally:
            pipeline.fetcher.close()

        logger.info(
            "Job Feed Ingestor stopped",
            extra={
                "event": "service.stopping",
                "uptime_seconds": round(time.time() - start_time, 2),
                "exit_code": exit_code,
            },
        )
        return exit_code

    except ConfigurationError as e:
        # Logging may not be configured yet
        print(f"Configuration Error: {e}", file=sys.stderr)
        return 1
    except StoreWriteError as e:
        print(f"Store Error: {e}", file=sys.stderr)
        logger.error(
            f"Job store could not be written: {e}",
            extra={"event": "service.store_write.failed", "path": e.path},
        )
        return 1
    except KeyboardInterrupt:
        print("\nShutdown requested by user", file=sys.stderr)
        return 0
    except Exception as e:
        print(f"Fatal error: {e}", file=sys.stderr)
        logger.critical(
            "Fatal error",
            extra={
                "event": "service.failed",
                "error_type": type(e).__name__,
                "error": str(e),
            },
            exc_info=True,
        )
        return 1


if __name__ == "__main__":
    sys.exit(main())
