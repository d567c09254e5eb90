"""
History Store — bounded per-resource metric history.

Behavioral Contract:
- Each resource keeps at most `capacity` samples, oldest evicted first.
- The in-memory buffer is authoritative for the running process.
- Persistence is write-through and best-effort: failed writes are logged,
  never raised. Unreadable or malformed durable history loads as empty.
- Durable writes go through a single writer thread in append order, so a
  slow database never holds up the in-memory path.
- The durable series of a resource is trimmed with the same policy on
  every append.
"""

import logging
import queue
import sqlite3
import threading
from collections import deque
from typing import Deque, Dict, List, Optional

from pydantic import ValidationError

from netsim_kernel.models.network import MetricSample

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 50


class HistoryStore:
    """
    Ring buffer per resource with an optional SQLite backing table.
    db_path=None keeps everything in memory.
    """

    def __init__(
        self,
        db_path: Optional[str] = None,
        capacity: int = DEFAULT_CAPACITY,
        timeout_seconds: float = 5.0,
    ):
        self.db_path = db_path
        self.capacity = capacity
        self._buffers: Dict[str, Deque[MetricSample]] = {}
        self._lock = threading.Lock()        # buffers only, never held across I/O
        self._db_lock = threading.Lock()     # the SQLite connection
        self._conn: Optional[sqlite3.Connection] = None
        self._writes: "queue.Queue" = queue.Queue()
        self._writer: Optional[threading.Thread] = None
        if db_path is not None:
            self._open(db_path, timeout_seconds)

    @property
    def persistent(self) -> bool:
        return self._conn is not None

    def _open(self, db_path: str, timeout_seconds: float) -> None:
        try:
            conn = sqlite3.connect(
                db_path, timeout=timeout_seconds, check_same_thread=False
            )
            conn.row_factory = sqlite3.Row
            self._init_schema(conn)
        except sqlite3.Error as e:
            logger.error(
                "History database %s unavailable, keeping history in memory only: %s",
                db_path, e,
            )
            return
        self._conn = conn
        self._writer = threading.Thread(
            target=self._write_loop,
            name="history-writer",
            daemon=True,
        )
        self._writer.start()

    def _init_schema(self, conn: sqlite3.Connection) -> None:
        """Create the history table if it doesn't exist."""
        conn.execute("""
            CREATE TABLE IF NOT EXISTS history (
                resource_id TEXT NOT NULL,
                timestamp TEXT NOT NULL,
                value REAL NOT NULL
            )
        """)
        conn.execute("""
            CREATE INDEX IF NOT EXISTS idx_history_resource ON history(resource_id)
        """)
        conn.commit()

    def append(self, resource_id: str, sample: MetricSample) -> None:
        """Add a sample, evicting the oldest beyond capacity, and queue it for persistence."""
        buffer = self._buffer(resource_id)
        with self._lock:
            buffer.append(sample)
            if self._writer is not None:
                self._writes.put((resource_id, sample))

    def flush(self) -> None:
        """Block until every queued sample has been written (or has failed)."""
        if self._writer is not None:
            self._writes.join()

    def _write_loop(self) -> None:
        """Writer thread: drain queued samples into SQLite in order."""
        while True:
            item = self._writes.get()
            try:
                if item is None:
                    return
                with self._db_lock:
                    if self._conn is not None:
                        self._persist(*item)
            except Exception as e:
                logger.error("History writer failed on %s: %s", item[0], e)
            finally:
                self._writes.task_done()

    def _persist(self, resource_id: str, sample: MetricSample) -> None:
        try:
            self._conn.execute(
                "INSERT INTO history (resource_id, timestamp, value) VALUES (?, ?, ?)",
                (resource_id, sample.timestamp, sample.value),
            )
            self._conn.execute(
                """
                DELETE FROM history WHERE resource_id = ? AND rowid NOT IN (
                    SELECT rowid FROM history WHERE resource_id = ?
                    ORDER BY rowid DESC LIMIT ?
                )
                """,
                (resource_id, resource_id, self.capacity),
            )
            self._conn.commit()
        except sqlite3.Error as e:
            logger.warning("Failed to persist history for %s: %s", resource_id, e)
            try:
                self._conn.rollback()
            except sqlite3.Error:
                logger.debug("Rollback after failed history write also failed")

    def load(self, resource_id: str) -> List[MetricSample]:
        """Durable history for a resource, oldest first. Empty on any failure."""
        with self._db_lock:
            if self._conn is None:
                return []
            try:
                rows = self._conn.execute(
                    "SELECT timestamp, value FROM history WHERE resource_id = ? "
                    "ORDER BY rowid DESC LIMIT ?",
                    (resource_id, self.capacity),
                ).fetchall()
            except sqlite3.Error as e:
                logger.warning("Failed to read history for %s: %s", resource_id, e)
                return []

        try:
            return [
                MetricSample(timestamp=row["timestamp"], value=row["value"])
                for row in reversed(rows)
            ]
        except ValidationError as e:
            logger.warning(
                "Malformed history for %s, starting empty: %s", resource_id, e
            )
            return []

    def history(self, resource_id: str) -> List[MetricSample]:
        """Retained samples for a resource, oldest first."""
        buffer = self._buffer(resource_id)
        with self._lock:
            return list(buffer)

    def most_recent_value(self, resource_id: str) -> Optional[float]:
        buffer = self._buffer(resource_id)
        with self._lock:
            return buffer[-1].value if buffer else None

    def resource_ids(self) -> List[str]:
        """Resources seen by this process."""
        with self._lock:
            return list(self._buffers)

    def _buffer(self, resource_id: str) -> Deque[MetricSample]:
        """Buffer for a resource, primed from durable history on first use."""
        with self._lock:
            buffer = self._buffers.get(resource_id)
        if buffer is not None:
            return buffer

        loaded = self.load(resource_id)
        with self._lock:
            return self._buffers.setdefault(
                resource_id, deque(loaded, maxlen=self.capacity)
            )

    def close(self) -> None:
        """Drain pending writes and close the database connection."""
        if self._writer is not None:
            self._writes.put(None)
            self._writer.join()
            self._writer = None
        with self._db_lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None
