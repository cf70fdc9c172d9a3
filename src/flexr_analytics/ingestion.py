"""
Idempotent workout ingestion.

A watch and a phone often record the same session, and imports are retried,
so the same workout arrives more than once with slightly different numbers.
Two records are the same workout when their starts are within 5 seconds,
their durations within 5 seconds and their distances within 10 meters
(all inclusive).

The duplicate check and the write run as one critical section per
(user, start-time bucket). Concurrent imports of the same session therefore
cannot both pass the check before either writes.
"""

import logging
import math
import threading
from contextlib import ExitStack, contextmanager
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Protocol, Tuple

from .exceptions import InvalidParameterError
from .models import IngestionResult, WorkoutRecord

logger = logging.getLogger(__name__)

START_TOLERANCE_SECONDS = 5.0
DURATION_TOLERANCE_SECONDS = 5.0
DISTANCE_TOLERANCE_METERS = 10.0

# Width of the time buckets used as lock keys
LOCK_BUCKET_SECONDS = 3600


class WorkoutRepository(Protocol):
    """Storage the ingestor writes through (see db.WorkoutStore)."""

    def add(self, user_id: str, record: WorkoutRecord) -> None:
        ...

    def get(self, record_id: str, user_id: Optional[str] = None) -> Optional[WorkoutRecord]:
        ...

    def find_in_window(self, user_id: str, start: datetime, tolerance_seconds: float) -> List[WorkoutRecord]:
        ...

    def list_for_user(self, user_id: str) -> List[WorkoutRecord]:
        ...

    def delete(self, record_id: str) -> bool:
        ...


def is_same_workout(a: WorkoutRecord, b: WorkoutRecord) -> bool:
    """True when two records describe the same session within tolerance."""
    start_delta = abs((a.span.start - b.span.start).total_seconds())
    duration_delta = abs(a.duration_seconds - b.duration_seconds)
    distance_delta = abs(a.distance_meters - b.distance_meters)
    return (
        start_delta <= START_TOLERANCE_SECONDS
        and duration_delta <= DURATION_TOLERANCE_SECONDS
        and distance_delta <= DISTANCE_TOLERANCE_METERS
    )


def find_duplicate(candidate: WorkoutRecord, existing: Iterable[WorkoutRecord]) -> Optional[WorkoutRecord]:
    """First record in ``existing`` that is the same workout as ``candidate``."""
    for record in existing:
        if is_same_workout(candidate, record):
            return record
    return None


def is_duplicate(candidate: WorkoutRecord, existing: Iterable[WorkoutRecord]) -> bool:
    """
    Check whether a candidate workout is already present.

    Args:
        candidate: Incoming workout
        existing: Workouts already stored

    Returns:
        True if any existing record matches within tolerance
    """
    return find_duplicate(candidate, existing) is not None


def find_duplicate_records(records: Iterable[WorkoutRecord]) -> List[WorkoutRecord]:
    """
    Redundant copies among already-stored records.

    Records are visited in start order; each one that matches an earlier
    kept record is reported, the first occurrence is kept.

    Args:
        records: Stored workouts

    Returns:
        Records that duplicate an earlier one
    """
    kept: List[WorkoutRecord] = []
    duplicates: List[WorkoutRecord] = []
    for record in sorted(records, key=lambda r: r.span.start):
        if find_duplicate(record, kept) is not None:
            duplicates.append(record)
        else:
            kept.append(record)
    return duplicates


class WorkoutIngestor:
    """
    Writes workouts to a repository, skipping ones already stored.

    Thread-safe. Locks are keyed by (user_id, hour bucket of the start
    time); a check spanning a bucket edge takes both locks in order. A lock
    lives only while some thread holds or waits for it.
    """

    def __init__(self, store: WorkoutRepository):
        self.store = store
        # key -> [lock, number of threads holding or waiting]
        self._locks: Dict[Tuple[str, int], List] = {}
        self._registry_lock = threading.Lock()

    @contextmanager
    def _key_lock(self, key: Tuple[str, int]):
        with self._registry_lock:
            entry = self._locks.get(key)
            if entry is None:
                entry = [threading.Lock(), 0]
                self._locks[key] = entry
            entry[1] += 1

        try:
            with entry[0]:
                yield
        finally:
            with self._registry_lock:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._locks[key]

    @property
    def active_lock_count(self) -> int:
        """Number of lock keys currently held or awaited."""
        with self._registry_lock:
            return len(self._locks)

    def _lock_keys(self, user_id: str, start: datetime) -> List[Tuple[str, int]]:
        ts = start.timestamp()
        low = math.floor((ts - START_TOLERANCE_SECONDS) / LOCK_BUCKET_SECONDS)
        high = math.floor((ts + START_TOLERANCE_SECONDS) / LOCK_BUCKET_SECONDS)
        return [(user_id, bucket) for bucket in range(low, high + 1)]

    def ingest(self, user_id: str, record: WorkoutRecord) -> IngestionResult:
        """
        Store a workout unless it is already present.

        Args:
            user_id: Owner of the workout
            record: Incoming workout

        Returns:
            IngestionResult with created=True and the record's id when
            written, or created=False and the existing record's id when the
            workout was already stored

        Raises:
            InvalidParameterError: If the record id is already stored for
                another user (ids are global)
        """
        with ExitStack() as stack:
            for key in self._lock_keys(user_id, record.span.start):
                stack.enter_context(self._key_lock(key))

            same_id = self.store.get(record.id, user_id)
            if same_id is not None:
                logger.info(f"Workout {record.id} already stored - skipping")
                return IngestionResult(record_id=same_id.id, created=False)
            if self.store.get(record.id) is not None:
                raise InvalidParameterError(
                    f"Workout id {record.id} is already stored for another user",
                    parameter="record.id",
                )

            nearby = self.store.find_in_window(user_id, record.span.start, START_TOLERANCE_SECONDS)
            existing = find_duplicate(record, nearby)
            if existing is not None:
                logger.info(
                    f"Workout {record.id} duplicates {existing.id} "
                    f"({record.span.start.isoformat()}) - skipping"
                )
                return IngestionResult(record_id=existing.id, created=False)

            self.store.add(user_id, record)
            logger.info(f"Workout {record.id} stored for user {user_id}")
            return IngestionResult(record_id=record.id, created=True)

    def ingest_many(self, user_id: str, records: Iterable[WorkoutRecord]) -> List[IngestionResult]:
        """Ingest records in order (a batch import)."""
        return [self.ingest(user_id, record) for record in records]

    def remove_duplicates(self, user_id: str) -> int:
        """
        Delete stored duplicates for a user, keeping the earliest copy.

        Returns:
            Number of records removed
        """
        duplicates = find_duplicate_records(self.store.list_for_user(user_id))
        removed = 0
        for record in duplicates:
            if self.store.delete(record.id):
                removed += 1
                logger.warning(f"Removed duplicate workout {record.id} for user {user_id}")
        return removed
