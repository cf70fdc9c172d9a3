"""Value objects for raw samples and derived training metrics.

Raw samples are read-only snapshots handed over by the health-data
collaborator. Derived records are produced fresh by each analysis call and
serialize to plain dicts through ``to_dict``.
"""

from dataclasses import dataclass, field, asdict
from datetime import datetime, date
from enum import Enum
from typing import Optional, Tuple, List

from .exceptions import InvalidParameterError


@dataclass(frozen=True)
class TimeSpan:
    """A closed time range with start <= end."""
    start: datetime
    end: datetime

    def __post_init__(self):
        if (self.start.utcoffset() is None) != (self.end.utcoffset() is None):
            raise InvalidParameterError(
                "TimeSpan start and end must both be timezone-aware or both naive",
                parameter="span",
            )
        if self.start > self.end:
            raise InvalidParameterError(
                f"TimeSpan start {self.start.isoformat()} is after end {self.end.isoformat()}",
                parameter="span",
            )

    @property
    def duration_seconds(self) -> float:
        return (self.end - self.start).total_seconds()

    def to_dict(self) -> dict:
        return {"start": self.start.isoformat(), "end": self.end.isoformat()}


class SleepCategory(str, Enum):
    """Asleep stages reported by the health store."""
    ASLEEP_CORE = "asleepCore"
    ASLEEP_DEEP = "asleepDeep"
    ASLEEP_REM = "asleepREM"
    ASLEEP_UNSPECIFIED = "asleepUnspecified"


@dataclass(frozen=True)
class CategorizedSample:
    """One sleep-stage sample."""
    category: SleepCategory
    span: TimeSpan


@dataclass(frozen=True)
class HeartRateSample:
    """Heart rate reading over a short (or zero-length) window."""
    bpm: float
    span: TimeSpan


@dataclass(frozen=True)
class WorkoutRecord:
    """Completed workout as recorded by the watch or phone."""
    id: str
    span: TimeSpan
    distance_meters: float = 0.0
    activity_kind: str = "running"
    laps: Tuple[TimeSpan, ...] = ()

    def __post_init__(self):
        if self.distance_meters < 0:
            raise InvalidParameterError(
                f"Workout {self.id} has negative distance {self.distance_meters}",
                parameter="distance_meters",
            )
        # Accept any sequence of laps but store a tuple
        object.__setattr__(self, "laps", tuple(self.laps))

    @property
    def start(self) -> datetime:
        return self.span.start

    @property
    def duration_seconds(self) -> float:
        return self.span.duration_seconds

    @property
    def distance_km(self) -> float:
        return self.distance_meters / 1000.0

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "start_time": self.span.start.isoformat(),
            "end_time": self.span.end.isoformat(),
            "duration_seconds": self.duration_seconds,
            "distance_meters": self.distance_meters,
            "activity_kind": self.activity_kind,
            "laps": [lap.to_dict() for lap in self.laps],
        }


class SegmentType(str, Enum):
    """Kind of segment in a logged workout."""
    RUN = "run"
    TRANSITION = "transition"
    STATION = "station"


@dataclass(frozen=True)
class SegmentLog:
    """A single timed segment from a manual or generated workout."""
    station_name: str
    segment_type: SegmentType
    duration_seconds: float
    timestamp: datetime

    def __post_init__(self):
        if self.duration_seconds < 0:
            raise InvalidParameterError(
                f"Segment '{self.station_name}' has negative duration {self.duration_seconds}",
                parameter="duration_seconds",
            )


# =============================================================================
# Derived records
# =============================================================================

@dataclass(frozen=True)
class Split:
    """Pace and time for one kilometer."""
    km_index: int
    duration_seconds: float
    pace_per_km: float  # seconds per km
    heart_rate: Optional[int] = None
    elevation_gain: Optional[float] = None

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class NightlySleepMetrics:
    """Sleep totals and quality for one calendar night."""
    night_date: date
    total_hours: float = 0.0
    deep_hours: float = 0.0
    rem_hours: float = 0.0
    quality: int = 0

    @property
    def deep_pct(self) -> float:
        if self.total_hours == 0:
            return 0.0
        return self.deep_hours / self.total_hours * 100

    @property
    def rem_pct(self) -> float:
        if self.total_hours == 0:
            return 0.0
        return self.rem_hours / self.total_hours * 100

    def to_dict(self) -> dict:
        d = asdict(self)
        d["night_date"] = self.night_date.isoformat()
        d["deep_pct"] = round(self.deep_pct, 1)
        d["rem_pct"] = round(self.rem_pct, 1)
        return d


@dataclass(frozen=True)
class SleepSummary:
    """Averages over a run of nights."""
    average_hours: float
    deep_percentage: int
    nights_with_data: int
    is_optimal: bool

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class HeartRateZoneDurations:
    """Seconds spent in each of the five heart rate zones."""
    zone1: float = 0.0
    zone2: float = 0.0
    zone3: float = 0.0
    zone4: float = 0.0
    zone5: float = 0.0

    @property
    def total_seconds(self) -> float:
        return self.zone1 + self.zone2 + self.zone3 + self.zone4 + self.zone5

    def as_list(self) -> List[float]:
        return [self.zone1, self.zone2, self.zone3, self.zone4, self.zone5]

    def percent_in_zone(self, zone: int) -> float:
        """Share of sampled time in ``zone`` (1-5), 0-100."""
        if zone < 1 or zone > 5:
            raise InvalidParameterError(f"Zone must be 1-5, got {zone}", parameter="zone")
        total = self.total_seconds
        if total == 0:
            return 0.0
        return self.as_list()[zone - 1] / total * 100

    def to_dict(self) -> dict:
        d = asdict(self)
        d["total_seconds"] = self.total_seconds
        return d


@dataclass(frozen=True)
class PaceMetrics:
    """Pace statistics over a run's splits. All None when there are no splits."""
    fastest: Optional[float] = None
    slowest: Optional[float] = None
    consistency_percent: Optional[float] = None
    fade_factor_percent: Optional[float] = None

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class PaceZone:
    """Share of splits falling in one pace band."""
    zone_name: str
    pace_range: str
    percentage: int

    def to_dict(self) -> dict:
        return asdict(self)


class PerformanceTrend(str, Enum):
    """Direction of a performance series."""
    IMPROVING = "improving"
    DECLINING = "declining"
    STABLE = "stable"


@dataclass(frozen=True)
class RacePrediction:
    """Estimated HYROX finish time."""
    predicted_seconds: float
    margin_minutes: float
    trend: PerformanceTrend

    def to_dict(self) -> dict:
        d = asdict(self)
        d["trend"] = self.trend.value
        return d


@dataclass(frozen=True)
class ReadinessScore:
    """Composite readiness and the points each signal contributed."""
    hrv_score: int
    sleep_contribution: int
    resting_hr_contribution: int
    total: int

    @property
    def zone(self) -> str:
        from .analysis.readiness import readiness_zone
        return readiness_zone(self.total)

    @property
    def recommendation(self) -> str:
        from .analysis.readiness import readiness_recommendation
        return readiness_recommendation(self.total)

    def to_dict(self) -> dict:
        d = asdict(self)
        d["zone"] = self.zone
        d["recommendation"] = self.recommendation
        return d


@dataclass(frozen=True)
class StationPerformance:
    """Best/average/last times for one station."""
    station_name: str
    best_time: float
    average_time: float
    last_time: float
    trend: PerformanceTrend
    score: int
    attempts: int = 0

    def to_dict(self) -> dict:
        d = asdict(self)
        d["trend"] = self.trend.value
        return d


@dataclass(frozen=True)
class TimeDistribution:
    """Percent of logged time spent running, at stations and in transitions."""
    running_pct: float = 0.0
    stations_pct: float = 0.0
    transitions_pct: float = 0.0

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class DailyTraining:
    """Training hours on one calendar day."""
    day: date
    day_label: str
    hours: float
    is_today: bool

    def to_dict(self) -> dict:
        return {
            "day": self.day.isoformat(),
            "day_label": self.day_label,
            "hours": round(self.hours, 2),
            "is_today": self.is_today,
        }


@dataclass(frozen=True)
class WeeklyTrainingLoad:
    """Trailing seven-day training volume against a target."""
    target_hours: float
    current_hours: float
    daily_breakdown: Tuple[DailyTraining, ...] = field(default_factory=tuple)

    @property
    def progress_pct(self) -> float:
        if self.target_hours <= 0:
            return 0.0
        return self.current_hours / self.target_hours * 100

    def to_dict(self) -> dict:
        return {
            "target_hours": self.target_hours,
            "current_hours": round(self.current_hours, 2),
            "progress_pct": round(self.progress_pct, 1),
            "daily_breakdown": [d.to_dict() for d in self.daily_breakdown],
        }


@dataclass(frozen=True)
class IngestionResult:
    """Outcome of one ingestion call."""
    record_id: str
    created: bool

    def to_dict(self) -> dict:
        return asdict(self)
