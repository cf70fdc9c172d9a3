"""
Readiness Score Calculation

Combines physiological signals into a 0-100 readiness score:
- Base: 50 points
- HRV: up to 25 points (100 ms or more earns the full 25)
- Sleep quality: up to 25 points (quality / 4)
- Resting heart rate: up to 10 points, lower is better. When no resting
  reading exists, the average workout heart rate stands in for it.

Every contribution is truncated to a whole number before summing and the
total is clamped to [0, 100].
"""

from typing import Optional

from ..exceptions import InvalidParameterError
from ..models import ReadinessScore

BASE_SCORE = 50
MAX_HRV_POINTS = 25
MAX_RESTING_HR_POINTS = 10
RESTING_HR_FLOOR = 40  # bpm at or below which the full 10 points apply

GREEN_THRESHOLD = 70
YELLOW_THRESHOLD = 40


def _check_non_negative(value: Optional[float], name: str) -> None:
    if value is not None and value < 0:
        raise InvalidParameterError(f"{name} must be non-negative, got {value}", parameter=name)


def calculate_hrv_points(hrv: Optional[float]) -> int:
    """HRV contribution (0-25). 0 when HRV is unknown."""
    if hrv is None:
        return 0
    return min(MAX_HRV_POINTS, max(0, int(hrv / 100 * MAX_HRV_POINTS)))


def calculate_sleep_points(sleep_quality: Optional[int]) -> int:
    """Sleep contribution (0-25) from a 0-100 quality score."""
    if sleep_quality is None:
        return 0
    quality = min(100, max(0, sleep_quality))
    return int(quality / 4)


def calculate_resting_hr_points(heart_rate: Optional[float]) -> int:
    """Resting heart rate contribution (0-10). 40 bpm or lower earns all 10."""
    if heart_rate is None:
        return 0
    normalized = max(0, min(100, 100 - int(heart_rate - RESTING_HR_FLOOR)))
    return normalized // 10


def calculate_readiness(
    hrv: Optional[float],
    sleep_quality: Optional[int],
    resting_hr: Optional[int],
    fallback_avg_hr: Optional[int] = None,
) -> ReadinessScore:
    """
    Calculate the readiness score.

    Args:
        hrv: Last night's HRV in ms
        sleep_quality: Sleep quality score 0-100
        resting_hr: Resting heart rate in bpm
        fallback_avg_hr: Average workout heart rate, used in place of a
            missing resting heart rate

    Returns:
        ReadinessScore with each contribution and the clamped total

    Raises:
        InvalidParameterError: If a heart rate or HRV value is negative
    """
    _check_non_negative(hrv, "hrv")
    _check_non_negative(resting_hr, "resting_hr")
    _check_non_negative(fallback_avg_hr, "fallback_avg_hr")

    hrv_points = calculate_hrv_points(hrv)
    sleep_points = calculate_sleep_points(sleep_quality)
    heart_rate = resting_hr if resting_hr is not None else fallback_avg_hr
    resting_points = calculate_resting_hr_points(heart_rate)

    total = BASE_SCORE + hrv_points + sleep_points + resting_points

    return ReadinessScore(
        hrv_score=hrv_points,
        sleep_contribution=sleep_points,
        resting_hr_contribution=resting_points,
        total=min(100, max(0, total)),
    )


def readiness_zone(total: int) -> str:
    """Traffic-light zone for a readiness total: 'green', 'yellow' or 'red'."""
    if total >= GREEN_THRESHOLD:
        return "green"
    if total >= YELLOW_THRESHOLD:
        return "yellow"
    return "red"


def readiness_recommendation(total: int) -> str:
    """Short guidance for a readiness total."""
    if total >= GREEN_THRESHOLD:
        return "Ready for training"
    return "Consider recovery focus"
