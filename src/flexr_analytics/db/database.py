"""SQLite store for ingested workout records."""

import json
import logging
import sqlite3
from contextlib import contextmanager
from datetime import datetime, timedelta
from pathlib import Path
from typing import List, Optional, Union

from ..exceptions import StorageError
from ..models import TimeSpan, WorkoutRecord

logger = logging.getLogger(__name__)


class WorkoutStore:
    """SQLite database manager for workout records."""

    def __init__(self, db_path: Union[str, Path] = "flexr.db"):
        self.db_path = Path(db_path)
        self._init_db()

    def _init_db(self):
        """Initialize database tables."""
        with self._get_connection() as conn:
            conn.executescript("""
                CREATE TABLE IF NOT EXISTS workouts (
                    id TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL,
                    start_time TEXT NOT NULL,
                    end_time TEXT NOT NULL,
                    start_ts REAL NOT NULL,
                    duration_seconds REAL NOT NULL,
                    distance_meters REAL NOT NULL DEFAULT 0,
                    activity_kind TEXT,
                    laps_json TEXT,
                    created_at TEXT NOT NULL
                );

                CREATE INDEX IF NOT EXISTS idx_workouts_user_start
                    ON workouts(user_id, start_ts);
            """)

    @contextmanager
    def _get_connection(self):
        """Get database connection with context manager."""
        try:
            conn = sqlite3.connect(self.db_path)
        except sqlite3.Error as e:
            raise StorageError(f"Cannot open workout store at {self.db_path}: {e}", operation="connect")
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            raise StorageError(f"Workout store query failed: {e}", operation="query") from e
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    @staticmethod
    def _row_to_record(row: sqlite3.Row) -> WorkoutRecord:
        laps = [
            TimeSpan(datetime.fromisoformat(lap["start"]), datetime.fromisoformat(lap["end"]))
            for lap in json.loads(row["laps_json"] or "[]")
        ]
        return WorkoutRecord(
            id=row["id"],
            span=TimeSpan(
                datetime.fromisoformat(row["start_time"]),
                datetime.fromisoformat(row["end_time"]),
            ),
            distance_meters=row["distance_meters"],
            activity_kind=row["activity_kind"],
            laps=tuple(laps),
        )

    def add(self, user_id: str, record: WorkoutRecord) -> None:
        """Insert a workout record. Raises StorageError if the id exists."""
        with self._get_connection() as conn:
            conn.execute("""
                INSERT INTO workouts
                (id, user_id, start_time, end_time, start_ts, duration_seconds,
                 distance_meters, activity_kind, laps_json, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """, (
                record.id,
                user_id,
                record.span.start.isoformat(),
                record.span.end.isoformat(),
                record.span.start.timestamp(),
                record.duration_seconds,
                record.distance_meters,
                record.activity_kind,
                json.dumps([lap.to_dict() for lap in record.laps]),
                datetime.now().isoformat(),
            ))

    def get(self, record_id: str, user_id: Optional[str] = None) -> Optional[WorkoutRecord]:
        """Get a workout by id, optionally only if it belongs to ``user_id``."""
        with self._get_connection() as conn:
            if user_id is None:
                row = conn.execute(
                    "SELECT * FROM workouts WHERE id = ?", (record_id,)
                ).fetchone()
            else:
                row = conn.execute(
                    "SELECT * FROM workouts WHERE id = ? AND user_id = ?", (record_id, user_id)
                ).fetchone()
            return self._row_to_record(row) if row else None

    def find_in_window(self, user_id: str, start: datetime, tolerance_seconds: float) -> List[WorkoutRecord]:
        """Workouts for a user starting within ``tolerance_seconds`` of ``start``."""
        low = (start - timedelta(seconds=tolerance_seconds)).timestamp()
        high = (start + timedelta(seconds=tolerance_seconds)).timestamp()
        with self._get_connection() as conn:
            rows = conn.execute("""
                SELECT * FROM workouts
                WHERE user_id = ? AND start_ts >= ? AND start_ts <= ?
                ORDER BY start_ts
            """, (user_id, low, high)).fetchall()
            return [self._row_to_record(row) for row in rows]

    def list_for_user(self, user_id: str) -> List[WorkoutRecord]:
        """All workouts for a user, oldest first."""
        with self._get_connection() as conn:
            rows = conn.execute(
                "SELECT * FROM workouts WHERE user_id = ? ORDER BY start_ts, created_at",
                (user_id,),
            ).fetchall()
            return [self._row_to_record(row) for row in rows]

    def delete(self, record_id: str) -> bool:
        """Delete a workout. Returns True if a row was removed."""
        with self._get_connection() as conn:
            cursor = conn.execute("DELETE FROM workouts WHERE id = ?", (record_id,))
            return cursor.rowcount > 0

    def count(self, user_id: Optional[str] = None) -> int:
        """Number of stored workouts, optionally for one user."""
        with self._get_connection() as conn:
            if user_id is None:
                row = conn.execute("SELECT COUNT(*) AS n FROM workouts").fetchone()
            else:
                row = conn.execute(
                    "SELECT COUNT(*) AS n FROM workouts WHERE user_id = ?", (user_id,)
                ).fetchone()
            return row["n"]
