"""Aggregating analyses built on the metric transforms."""

from .sleep import (
    night_for,
    sleep_quality,
    nightly_report,
    weekly_report,
    summarize_week,
)
from .readiness import (
    calculate_readiness,
    readiness_zone,
    readiness_recommendation,
)
from .load import weekly_load
from .stations import (
    HYROX_STATION_ORDER,
    station_performance,
    time_distribution,
)

__all__ = [
    "night_for",
    "sleep_quality",
    "nightly_report",
    "weekly_report",
    "summarize_week",
    "calculate_readiness",
    "readiness_zone",
    "readiness_recommendation",
    "weekly_load",
    "HYROX_STATION_ORDER",
    "station_performance",
    "time_distribution",
]
