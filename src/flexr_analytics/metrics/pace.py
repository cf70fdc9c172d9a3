"""
Running pace and split analysis.

Pace is expressed in seconds per kilometer throughout: lower is faster.

Key metrics:
- Splits: one entry per kilometer, from watch laps or synthesized from the
  workout average when no usable laps exist
- Consistency: coefficient of variation of split paces (lower = more even)
- Fade factor: % change from first-half to second-half pace
  (positive = slowed down, negative = negative split)
- Pace zones: share of splits in five fixed pace bands
"""

import logging
import math
from typing import List, Optional, Sequence

from ..exceptions import InvalidParameterError
from ..models import (
    PaceMetrics,
    PaceZone,
    PerformanceTrend,
    RacePrediction,
    Split,
    WorkoutRecord,
)

logger = logging.getLogger(__name__)

# Physically plausible lap pace window (2:00 - 15:00 per km)
MIN_PLAUSIBLE_PACE = 120.0
MAX_PLAUSIBLE_PACE = 900.0

# Watches auto-lap every kilometer when running
LAP_DISTANCE_KM = 1.0

# Pace zone boundaries (seconds per km), zone 1 (slowest) to zone 5
PACE_ZONES = [
    ("Zone 1 (Recovery)", ">6:00"),
    ("Zone 2 (Easy)", "5:30-6:00"),
    ("Zone 3 (Tempo)", "5:00-5:30"),
    ("Zone 4 (Threshold)", "4:30-5:00"),
    ("Zone 5 (Max)", "<4:30"),
]

# HYROX: 8 x 1 km runs plus 8 stations
HYROX_RUN_KM = 8.0
DEFAULT_STATION_MINUTES = 30.0
PREDICTION_MARGIN_MINUTES = 5.0


def format_pace(seconds_per_km: float) -> str:
    """
    Format pace as M:SS.

    Args:
        seconds_per_km: Pace in seconds per kilometer

    Returns:
        Formatted pace string (e.g., "5:15")
    """
    total = int(seconds_per_km)
    return f"{total // 60}:{total % 60:02d}"


def is_plausible_pace(pace_sec_per_km: float) -> bool:
    """True when a pace lies inside the 2:00-15:00 /km window (inclusive)."""
    return MIN_PLAUSIBLE_PACE <= pace_sec_per_km <= MAX_PLAUSIBLE_PACE


def _splits_from_laps(workout: WorkoutRecord) -> List[Split]:
    splits: List[Split] = []
    for lap in workout.laps:
        duration = lap.duration_seconds
        pace = duration / LAP_DISTANCE_KM
        if not is_plausible_pace(pace):
            logger.debug(
                f"Discarding lap with implausible pace {pace:.0f}s/km in workout {workout.id}"
            )
            continue
        splits.append(Split(
            km_index=len(splits) + 1,
            duration_seconds=duration,
            pace_per_km=pace,
        ))
    return splits


def derive_splits(workout: WorkoutRecord) -> List[Split]:
    """
    Derive per-kilometer splits for a workout.

    Laps are taken as 1 km each. Laps whose pace falls outside
    [120, 900] s/km are dropped as sensor noise and the survivors are
    numbered from 1. Without usable laps, floor(distance_km) even splits are
    synthesized from the workout's average pace.

    Args:
        workout: Workout record with optional laps

    Returns:
        List of splits; empty when the workout has no usable laps and no
        positive distance and duration
    """
    splits = _splits_from_laps(workout)
    if splits:
        return splits

    distance_km = workout.distance_km
    duration = workout.duration_seconds
    if distance_km <= 0 or duration <= 0:
        return []

    avg_pace = duration / distance_km
    splits = [
        Split(km_index=km, duration_seconds=avg_pace, pace_per_km=avg_pace)
        for km in range(1, math.floor(distance_km) + 1)
    ]
    if splits:
        logger.debug(
            f"No usable laps in workout {workout.id}, "
            f"generated {len(splits)} estimated splits at {format_pace(avg_pace)}/km"
        )
    return splits


def pace_metrics(splits: Sequence[Split], avg_pace: Optional[float] = None) -> PaceMetrics:
    """
    Calculate fastest/slowest pace, consistency and fade for a run.

    Consistency is the population standard deviation of split paces around
    the run's average pace, as a percentage of that average. The caller's
    ``avg_pace`` (total duration / distance) is used as the average when
    positive, otherwise the mean of the split paces.

    The fade factor bisects the splits at count // 2 and compares the mean
    pace of the second half to the first.

    Args:
        splits: Splits in kilometer order
        avg_pace: Whole-run average pace in seconds per km

    Returns:
        PaceMetrics; every field None when there are no splits. fade is None
        for a single split (no first half to compare against).
    """
    if not splits:
        return PaceMetrics()

    paces = [s.pace_per_km for s in splits]
    mean = avg_pace if avg_pace is not None and avg_pace > 0 else sum(paces) / len(paces)

    consistency: Optional[float] = None
    if mean > 0:
        variance = sum((p - mean) ** 2 for p in paces) / len(paces)
        consistency = math.sqrt(variance) / mean * 100

    fade: Optional[float] = None
    half = len(paces) // 2
    if half > 0:
        first_half = sum(paces[:half]) / half
        second_half = sum(paces[half:]) / (len(paces) - half)
        if first_half > 0:
            fade = (second_half - first_half) / first_half * 100

    return PaceMetrics(
        fastest=min(paces),
        slowest=max(paces),
        consistency_percent=consistency,
        fade_factor_percent=fade,
    )


def pace_zone_for(pace_sec_per_km: float) -> int:
    """
    Return pace zone (1-5) for a pace.

    - Zone 1: > 6:00/km
    - Zone 2: 5:30-6:00/km (330, 360]
    - Zone 3: 5:00-5:30/km (300, 330]
    - Zone 4: 4:30-5:00/km (270, 300]
    - Zone 5: <= 4:30/km
    """
    if pace_sec_per_km > 360:
        return 1
    elif pace_sec_per_km > 330:
        return 2
    elif pace_sec_per_km > 300:
        return 3
    elif pace_sec_per_km > 270:
        return 4
    return 5


def pace_zone_percentages(paces: Sequence[float]) -> List[int]:
    """
    Percentage of paces in each pace zone, zone 1 first.

    Args:
        paces: Split paces in seconds per km

    Returns:
        Five integer percentages; all zero for no paces
    """
    counts = [0, 0, 0, 0, 0]
    for pace in paces:
        counts[pace_zone_for(pace) - 1] += 1

    total = len(paces)
    if total == 0:
        return [0, 0, 0, 0, 0]
    return [round(c / total * 100) for c in counts]


def pace_zone_breakdown(paces: Sequence[float]) -> List[PaceZone]:
    """Labelled pace zone percentages for display."""
    percentages = pace_zone_percentages(paces)
    return [
        PaceZone(zone_name=name, pace_range=pace_range, percentage=pct)
        for (name, pace_range), pct in zip(PACE_ZONES, percentages)
    ]


def predict_race_time(
    avg_pace_sec_per_km: float,
    station_minutes: float = DEFAULT_STATION_MINUTES,
) -> RacePrediction:
    """
    Predict a HYROX finish time from average running pace.

    HYROX = 8 km running + 8 stations. Station time is a flat estimate.

    Args:
        avg_pace_sec_per_km: Average running pace
        station_minutes: Estimated total time at stations

    Returns:
        RacePrediction with a fixed 5 minute margin

    Raises:
        InvalidParameterError: If pace or station time is negative
    """
    if avg_pace_sec_per_km < 0:
        raise InvalidParameterError(
            f"Pace must be non-negative, got {avg_pace_sec_per_km}",
            parameter="avg_pace_sec_per_km",
        )
    if station_minutes < 0:
        raise InvalidParameterError(
            f"Station time must be non-negative, got {station_minutes}",
            parameter="station_minutes",
        )

    running_minutes = avg_pace_sec_per_km / 60.0 * HYROX_RUN_KM
    total_minutes = running_minutes + station_minutes

    return RacePrediction(
        predicted_seconds=total_minutes * 60,
        margin_minutes=PREDICTION_MARGIN_MINUTES,
        trend=PerformanceTrend.IMPROVING if total_minutes < 60 else PerformanceTrend.STABLE,
    )
