"""JSON file store for job records.

The jobs file holds a single JSON array of job objects. Reads are forgiving
(an absent or corrupt file reads as empty, and objects that are not valid
jobs are carried through untouched); writes are all-or-nothing.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Any, List, Sequence, Union

from pydantic import ValidationError

from jobfeed.domain.models import Job, PassthroughRecord, StoredEntry
from jobfeed.logging import get_logger

from .exceptions import StoreReadError, StoreWriteError

logger = get_logger(__name__, component="store")


class JobStore:
    """Loads and atomically replaces the jobs file.

    Attributes:
        path: Location of the jobs file
    """

    def __init__(self, path: Union[str, Path]):
        """Initialize the store.

        Args:
            path: Location of the jobs file; its directory is created on save
        """
        self.path = Path(path)

    def load(self) -> List[StoredEntry]:
        """Load all stored entries.

        Returns an empty list when the file is absent or unreadable, or does
        not hold a JSON array. Objects that do not validate as jobs are kept
        as PassthroughRecord so the next save writes them back unchanged;
        only entries that are not JSON objects are dropped.

        Returns:
            Stored entries in file order
        """
        try:
            records = self._read_records()
        except StoreReadError as e:
            logger.warning(
                f"Treating job store as empty: {e}",
                extra={"event": "store.load.failed", "path": str(self.path), "error": str(e)},
            )
            return []

        entries: List[StoredEntry] = []
        passthrough = 0
        for index, record in enumerate(records):
            if not isinstance(record, dict):
                logger.warning(
                    "Skipping stored entry that is not an object",
                    extra={"event": "store.load.entry_skipped", "index": index},
                )
                continue
            try:
                entries.append(Job.from_record(record))
            except ValidationError as e:
                passthrough += 1
                entries.append(PassthroughRecord(record, error=str(e)))
                logger.warning(
                    "Keeping stored entry that is not a valid job as-is",
                    extra={
                        "event": "store.load.entry_passthrough",
                        "index": index,
                        "job_id": record.get("id"),
                        "error_count": e.error_count(),
                    },
                )

        logger.info(
            f"Loaded {len(entries)} entries from {self.path}",
            extra={
                "event": "store.load.completed",
                "path": str(self.path),
                "count": len(entries),
                "passthrough": passthrough,
                "skipped": len(records) - len(entries),
            },
        )
        return entries

    def _read_records(self) -> List[Any]:
        """Read the raw JSON array.

        Raises:
            StoreReadError: If the file is unreadable or not a JSON array
        """
        if not self.path.exists():
            logger.info(
                "No job store yet; starting empty",
                extra={"event": "store.load.missing", "path": str(self.path)},
            )
            return []

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, UnicodeDecodeError) as e:
            raise StoreReadError(f"Cannot read {self.path}: {e}", path=str(self.path)) from e
        except json.JSONDecodeError as e:
            raise StoreReadError(f"Invalid JSON in {self.path}: {e}", path=str(self.path)) from e

        if not isinstance(data, list):
            raise StoreReadError(
                f"Expected a JSON array in {self.path}, got {type(data).__name__}",
                path=str(self.path),
            )
        return data

    def save(self, jobs: Sequence[StoredEntry]) -> None:
        """Replace the stored collection with jobs.

        The JSON is written to a temporary file in the target directory,
        flushed to disk, and renamed over the target, so readers see either
        the old or the new file and never a truncated one.

        Args:
            jobs: Full collection to persist

        Raises:
            StoreWriteError: If any step fails; the previous file is untouched
        """
        records = [job.to_record() for job in jobs]

        try:
            payload = json.dumps(records, indent=2, ensure_ascii=False)
        except (TypeError, ValueError) as e:
            raise StoreWriteError(f"Cannot serialize jobs: {e}", path=str(self.path)) from e

        tmp_path = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())
            # mkstemp creates 0600 files; keep the jobs file readable as before
            os.chmod(tmp_path, self._target_mode())
            os.replace(tmp_path, self.path)
            tmp_path = None
        except OSError as e:
            logger.error(
                f"Failed to write job store {self.path}: {e}",
                extra={"event": "store.save.failed", "path": str(self.path), "error": str(e)},
            )
            raise StoreWriteError(f"Cannot write {self.path}: {e}", path=str(self.path)) from e
        finally:
            if tmp_path is not None and os.path.exists(tmp_path):
                os.unlink(tmp_path)

        logger.info(
            f"Saved {len(records)} jobs to {self.path}",
            extra={"event": "store.save.completed", "path": str(self.path), "count": len(records)},
        )

    def _target_mode(self) -> int:
        """Permission bits for the new file: the existing file's, else 0644."""
        try:
            return self.path.stat().st_mode & 0o777
        except FileNotFoundError:
            return 0o644
