"""Heart rate zone calculations."""

import logging
from typing import Iterable, List, Optional, Sequence, Tuple

from ..exceptions import InvalidParameterError
from ..models import HeartRateSample, HeartRateZoneDurations

logger = logging.getLogger(__name__)

# Exclusive upper bounds (fraction of max HR) for zones 1-4; anything at or
# above the last bound is zone 5.
ZONE_UPPER_BOUNDS: Tuple[float, ...] = (0.60, 0.70, 0.80, 0.90)

ZONE_NAMES = {
    1: "Recovery",
    2: "Aerobic",
    3: "Tempo",
    4: "Threshold",
    5: "Max",
}


def zone_for_percent_max(percent_max: float) -> int:
    """
    Return zone number (1-5) for a heart rate expressed as a fraction of max.

    Bounds are exclusive and evaluated in order:
    - Zone 1: < 60%  - Recovery
    - Zone 2: < 70%  - Aerobic
    - Zone 3: < 80%  - Tempo
    - Zone 4: < 90%  - Threshold
    - Zone 5: >= 90% - Max

    Args:
        percent_max: bpm / max_hr

    Returns:
        Zone number (1-5)
    """
    for zone, upper in enumerate(ZONE_UPPER_BOUNDS, start=1):
        if percent_max < upper:
            return zone
    return 5


def classify_zones(
    samples: Iterable[HeartRateSample],
    max_hr: float,
    sample_duration: Optional[float] = None,
) -> HeartRateZoneDurations:
    """
    Calculate time spent in each zone from heart rate samples.

    Each sample contributes its own window length (end - start) to the zone
    its bpm falls in. Instantaneous samples carry no length, so callers pass
    ``sample_duration`` to give every sample a fixed weight instead.

    Args:
        samples: Heart rate samples
        max_hr: Maximum heart rate, must be positive
        sample_duration: Seconds to attribute to each sample, overriding the
            sample window

    Returns:
        HeartRateZoneDurations in seconds; all zeros for no samples

    Raises:
        InvalidParameterError: If max_hr <= 0 or sample_duration < 0
    """
    if max_hr <= 0:
        raise InvalidParameterError(
            f"Max heart rate must be positive, got {max_hr}", parameter="max_hr"
        )
    if sample_duration is not None and sample_duration < 0:
        raise InvalidParameterError(
            f"Sample duration must be non-negative, got {sample_duration}",
            parameter="sample_duration",
        )

    totals = [0.0, 0.0, 0.0, 0.0, 0.0]
    count = 0
    for sample in samples:
        duration = sample_duration if sample_duration is not None else sample.span.duration_seconds
        zone = zone_for_percent_max(sample.bpm / max_hr)
        totals[zone - 1] += duration
        count += 1

    logger.debug(f"Classified {count} heart rate samples against max HR {max_hr}")

    return HeartRateZoneDurations(
        zone1=totals[0],
        zone2=totals[1],
        zone3=totals[2],
        zone4=totals[3],
        zone5=totals[4],
    )


def zone_percentages(durations: HeartRateZoneDurations) -> List[int]:
    """
    Integer percentage of sampled time per zone, zone 1 first.

    Args:
        durations: Zone durations from classify_zones

    Returns:
        Five integers; all zero when nothing was sampled
    """
    return [int(round(durations.percent_in_zone(zone))) for zone in range(1, 6)]


def average_and_max(samples: Sequence[HeartRateSample]) -> Tuple[float, float]:
    """
    Average and peak bpm for a workout summary.

    Args:
        samples: Heart rate samples

    Returns:
        (average bpm, max bpm); (0.0, 0.0) for no samples
    """
    if not samples:
        return 0.0, 0.0
    rates = [s.bpm for s in samples]
    return sum(rates) / len(rates), max(rates)
