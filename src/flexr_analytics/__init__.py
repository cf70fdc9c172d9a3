"""Training analytics for HYROX and running workouts."""

from flexr_analytics.config import Settings, get_settings
from flexr_analytics.exceptions import (
    ErrorCode,
    FlexrAnalyticsError,
    InvalidParameterError,
    StorageError,
)
from flexr_analytics.models import (
    TimeSpan,
    SleepCategory,
    CategorizedSample,
    HeartRateSample,
    WorkoutRecord,
    SegmentType,
    SegmentLog,
    Split,
    NightlySleepMetrics,
    SleepSummary,
    HeartRateZoneDurations,
    PaceMetrics,
    PaceZone,
    PerformanceTrend,
    RacePrediction,
    ReadinessScore,
    StationPerformance,
    TimeDistribution,
    DailyTraining,
    WeeklyTrainingLoad,
    IngestionResult,
)
from flexr_analytics.metrics import (
    merge_spans,
    total_duration,
    classify_zones,
    zone_percentages,
    derive_splits,
    pace_metrics,
    pace_zone_breakdown,
    predict_race_time,
)
from flexr_analytics.analysis import (
    nightly_report,
    weekly_report,
    summarize_week,
    calculate_readiness,
    weekly_load,
    station_performance,
    time_distribution,
)
from flexr_analytics.db.database import WorkoutStore
from flexr_analytics.ingestion import WorkoutIngestor, is_duplicate, find_duplicate
from flexr_analytics.cache import AggregateCache

__version__ = "0.1.0"

__all__ = [
    "Settings",
    "get_settings",
    "ErrorCode",
    "FlexrAnalyticsError",
    "InvalidParameterError",
    "StorageError",
    # Value objects
    "TimeSpan",
    "SleepCategory",
    "CategorizedSample",
    "HeartRateSample",
    "WorkoutRecord",
    "SegmentType",
    "SegmentLog",
    "Split",
    "NightlySleepMetrics",
    "SleepSummary",
    "HeartRateZoneDurations",
    "PaceMetrics",
    "PaceZone",
    "PerformanceTrend",
    "RacePrediction",
    "ReadinessScore",
    "StationPerformance",
    "TimeDistribution",
    "DailyTraining",
    "WeeklyTrainingLoad",
    "IngestionResult",
    # Metrics
    "merge_spans",
    "total_duration",
    "classify_zones",
    "zone_percentages",
    "derive_splits",
    "pace_metrics",
    "pace_zone_breakdown",
    "predict_race_time",
    # Analysis
    "nightly_report",
    "weekly_report",
    "summarize_week",
    "calculate_readiness",
    "weekly_load",
    "station_performance",
    "time_distribution",
    # Ingestion
    "WorkoutStore",
    "WorkoutIngestor",
    "is_duplicate",
    "find_duplicate",
    "AggregateCache",
]
