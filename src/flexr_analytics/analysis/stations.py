"""Station performance tracking and time-of-effort distribution.

Station trend compares the most recent attempt against the earliest one:
faster is improving, anything else (including a tie) is declining.
"""

import logging
from collections import defaultdict
from typing import Dict, Iterable, List, Optional, Sequence

from ..models import (
    PerformanceTrend,
    SegmentLog,
    SegmentType,
    StationPerformance,
    TimeDistribution,
)

logger = logging.getLogger(__name__)

# HYROX race sequence
HYROX_STATION_ORDER = [
    "ski_erg",
    "sled_push",
    "sled_pull",
    "burpee_broad_jump",
    "rowing",
    "farmers_carry",
    "sandbag_lunges",
    "wall_balls",
]


def station_trend(chronological_times: Sequence[float]) -> PerformanceTrend:
    """Improving when the last time beats the first; ties resolve to declining."""
    if chronological_times[-1] < chronological_times[0]:
        return PerformanceTrend.IMPROVING
    return PerformanceTrend.DECLINING


def performance_score(best_time: float, average_time: float) -> int:
    """How close the average is to the best, 0-100. 0 when the average is 0."""
    if average_time == 0:
        return 0
    return min(100, round(best_time / average_time * 100))


def _summarize_station(name: str, segments: List[SegmentLog]) -> StationPerformance:
    ordered = sorted(segments, key=lambda s: s.timestamp)
    times = [s.duration_seconds for s in ordered]
    best = min(times)
    average = sum(times) / len(times)

    return StationPerformance(
        station_name=name,
        best_time=best,
        average_time=average,
        last_time=times[-1],
        trend=station_trend(times),
        score=performance_score(best, average),
        attempts=len(times),
    )


def station_performance(
    segments: Iterable[SegmentLog],
    station_order: Optional[Sequence[str]] = None,
) -> List[StationPerformance]:
    """
    Best, average and last times per station.

    Only station segments are considered; runs and transitions are skipped.

    Args:
        segments: Segment logs in any order
        station_order: Display order (e.g. HYROX_STATION_ORDER). Stations not
            in it follow the listed ones alphabetically. Alphabetical when None.

    Returns:
        One StationPerformance per station
    """
    by_station: Dict[str, List[SegmentLog]] = defaultdict(list)
    for segment in segments:
        if segment.segment_type == SegmentType.STATION:
            by_station[segment.station_name].append(segment)

    results = [_summarize_station(name, logs) for name, logs in by_station.items()]

    if station_order is not None:
        rank = {name: i for i, name in enumerate(station_order)}
        results.sort(key=lambda p: (rank.get(p.station_name, len(rank)), p.station_name))
    else:
        results.sort(key=lambda p: p.station_name)

    logger.debug(f"Summarized {len(results)} stations")
    return results


def time_distribution(segments: Iterable[SegmentLog]) -> TimeDistribution:
    """
    Share of logged time spent running, at stations and in transitions.

    Args:
        segments: Segment logs

    Returns:
        TimeDistribution in percent; all zero when no time was logged
    """
    totals = {segment_type: 0.0 for segment_type in SegmentType}
    for segment in segments:
        totals[segment.segment_type] += segment.duration_seconds

    total = sum(totals.values())
    if total <= 0:
        return TimeDistribution()

    return TimeDistribution(
        running_pct=totals[SegmentType.RUN] / total * 100,
        stations_pct=totals[SegmentType.STATION] / total * 100,
        transitions_pct=totals[SegmentType.TRANSITION] / total * 100,
    )
