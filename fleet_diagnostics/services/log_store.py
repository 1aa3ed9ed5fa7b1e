"""
Log Store.
Owns the in-memory entry collection and its JSON file on disk.
"""

import json
import os
import tempfile
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, List, Optional, Union

from ..models.log_entry import LogEntry
from .ingestion import LogIngestor
from ..config.logging_config import get_logger

logger = get_logger(__name__)


class LogStoreError(Exception):
    """Raised when the data file cannot be written."""
    pass


class LogStore:
    """
    Append-only store of diagnostic entries backed by a JSON file.

    File layout: ``{"logs": [...], "lastUpdated": "<iso>"}``. A bare list
    of records (older files) is also accepted on load. Every mutation is
    persisted before it returns, and mutations are serialized by a lock.
    """

    def __init__(self, data_file: Union[str, Path], ingestor: Optional[LogIngestor] = None):
        self.path = Path(data_file)
        self.ingestor = ingestor or LogIngestor()
        self._entries: List[LogEntry] = []
        self._last_updated: Optional[str] = None
        self._lock = threading.Lock()

    @property
    def last_updated(self) -> Optional[str]:
        return self._last_updated

    def load(self) -> int:
        """
        Load entries from disk, repairing legacy records.

        Returns:
            Number of entries loaded
        """
        with self._lock:
            if not self.path.exists():
                logger.info(f"No existing log file found, starting with empty logs: {self.path}")
                self._entries = []
                self._save_locked()
                return 0

            try:
                raw = self.path.read_text(encoding="utf-8")
            except OSError as e:
                logger.error(f"Error reading log file {self.path}: {e}")
                self._entries = []
                return 0

            if not raw.strip():
                logger.info("Empty log file found, starting with empty logs")
                self._entries = []
                return 0

            try:
                data = json.loads(raw)
            except json.JSONDecodeError as e:
                logger.error(f"Error loading logs from file {self.path}: {e}")
                self._entries = []
                return 0

            if isinstance(data, dict):
                records = data.get("logs") or []
                self._last_updated = data.get("lastUpdated")
            elif isinstance(data, list):
                records = data
            else:
                logger.error(f"Unexpected data file layout in {self.path}")
                records = []

            entries = []
            for record in records:
                entry = self.ingestor.repair_record(record)
                if entry is not None:
                    entries.append(entry)

            self._entries = entries
            dropped = len(records) - len(entries)
            logger.info(
                f"Loaded {len(entries)} logs from file: {self.path}"
                + (f" ({dropped} unrecoverable records dropped)" if dropped else "")
            )
            return len(entries)

    def save(self) -> None:
        """Persist the current entries."""
        with self._lock:
            self._save_locked()

    def append(self, entries: Iterable[LogEntry]) -> int:
        """
        Append a batch of entries and persist.

        Returns:
            Number of entries appended
        """
        batch = list(entries)
        with self._lock:
            previous = self._entries
            self._entries = previous + batch
            try:
                self._save_locked()
            except LogStoreError:
                self._entries = previous
                raise
            total = len(self._entries)
        logger.info(f"Added {len(batch)} new logs. Total: {total}")
        return len(batch)

    def clear(self) -> None:
        """Remove every entry and persist the empty store."""
        with self._lock:
            previous = self._entries
            self._entries = []
            try:
                self._save_locked()
            except LogStoreError:
                self._entries = previous
                raise
        logger.info("All logs cleared")

    def entries(self) -> List[LogEntry]:
        """Snapshot of all entries in insertion order."""
        with self._lock:
            return list(self._entries)

    def count(self) -> int:
        with self._lock:
            return len(self._entries)

    def _save_locked(self) -> None:
        timestamp = datetime.now(timezone.utc).isoformat()
        payload = {
            "logs": [entry.to_dict() for entry in self._entries],
            "lastUpdated": timestamp,
        }
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self.path.name}.", suffix=".tmp", dir=str(self.path.parent)
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    json.dump(payload, fh, indent=2)
                os.replace(tmp_name, self.path)
            except BaseException:
                if os.path.exists(tmp_name):
                    os.unlink(tmp_name)
                raise
        except OSError as e:
            logger.error(f"Error saving logs to file {self.path}: {e}")
            raise LogStoreError(f"Failed to save logs: {e}") from e

        self._last_updated = timestamp
        logger.debug(f"Saved {len(self._entries)} logs to file: {self.path}")
