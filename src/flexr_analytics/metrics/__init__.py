"""Stateless metric transforms over raw samples."""

from .intervals import merge_spans, total_duration, calendar_day, clip_span
from .zones import (
    ZONE_NAMES,
    zone_for_percent_max,
    classify_zones,
    zone_percentages,
    average_and_max,
)
from .pace import (
    format_pace,
    is_plausible_pace,
    derive_splits,
    pace_metrics,
    pace_zone_for,
    pace_zone_percentages,
    pace_zone_breakdown,
    predict_race_time,
)

__all__ = [
    # Intervals
    "merge_spans",
    "total_duration",
    "calendar_day",
    "clip_span",
    # HR zones
    "ZONE_NAMES",
    "zone_for_percent_max",
    "classify_zones",
    "zone_percentages",
    "average_and_max",
    # Pace
    "format_pace",
    "is_plausible_pace",
    "derive_splits",
    "pace_metrics",
    "pace_zone_for",
    "pace_zone_percentages",
    "pace_zone_breakdown",
    "predict_race_time",
]
