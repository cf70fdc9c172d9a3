"""Pydantic models for payloads handed over by the health-data collaborator.

Payloads use camelCase keys; snake_case names are accepted as well.
Each model converts to the matching value object with ``to_model()``.
"""

import json
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Type, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from .exceptions import InvalidParameterError
from .models import (
    CategorizedSample,
    HeartRateSample,
    SegmentLog,
    SegmentType,
    SleepCategory,
    TimeSpan,
    WorkoutRecord,
)


def to_camel(string: str) -> str:
    """Convert snake_case to camelCase."""
    components = string.split("_")
    return components[0] + "".join(x.title() for x in components[1:])


class _Payload(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


def _is_aware(value: datetime) -> bool:
    return value.tzinfo is not None and value.utcoffset() is not None


class _SpanPayload(_Payload):
    start_time: datetime
    end_time: datetime

    @model_validator(mode="after")
    def check_order(self):
        if _is_aware(self.start_time) != _is_aware(self.end_time):
            raise ValueError("startTime and endTime must both carry a UTC offset or both omit it")
        if self.start_time > self.end_time:
            raise ValueError("startTime must not be after endTime")
        return self

    def span(self) -> TimeSpan:
        return TimeSpan(self.start_time, self.end_time)


# =============================================================================
# Sample payloads
# =============================================================================

class SleepSamplePayload(_SpanPayload):
    """One sleep-stage sample."""

    category: SleepCategory

    def to_model(self) -> CategorizedSample:
        return CategorizedSample(category=self.category, span=self.span())


class HeartRateSamplePayload(_SpanPayload):
    """One heart rate reading."""

    bpm: float = Field(..., ge=0, description="Beats per minute")

    def to_model(self) -> HeartRateSample:
        return HeartRateSample(bpm=self.bpm, span=self.span())


class LapPayload(_SpanPayload):
    """One watch lap."""

    def to_model(self) -> TimeSpan:
        return self.span()


class WorkoutPayload(_SpanPayload):
    """A completed workout with optional laps."""

    id: str = Field(..., min_length=1)
    total_distance_meters: float = Field(0.0, ge=0, description="Distance in meters")
    activity_kind: str = "running"
    laps: List[LapPayload] = Field(default_factory=list)

    def to_model(self) -> WorkoutRecord:
        return WorkoutRecord(
            id=self.id,
            span=self.span(),
            distance_meters=self.total_distance_meters,
            activity_kind=self.activity_kind,
            laps=tuple(lap.to_model() for lap in self.laps),
        )


class SegmentPayload(_Payload):
    """A timed segment from a logged workout."""

    station_name: str
    segment_type: SegmentType
    duration_seconds: float = Field(..., ge=0)
    timestamp: datetime

    def to_model(self) -> SegmentLog:
        return SegmentLog(
            station_name=self.station_name,
            segment_type=self.segment_type,
            duration_seconds=self.duration_seconds,
            timestamp=self.timestamp,
        )


class HealthExport(_Payload):
    """Bundle of everything exported for one user."""

    sleep: List[SleepSamplePayload] = Field(default_factory=list)
    heart_rate: List[HeartRateSamplePayload] = Field(default_factory=list)
    workouts: List[WorkoutPayload] = Field(default_factory=list)
    segments: List[SegmentPayload] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_consistent_offsets(self):
        """Timestamps are compared across samples, so all must be aware or all naive."""
        timestamps: List[datetime] = []
        for item in [*self.sleep, *self.heart_rate, *self.workouts]:
            timestamps.append(item.start_time)
        for workout in self.workouts:
            timestamps.extend(lap.start_time for lap in workout.laps)
        timestamps.extend(s.timestamp for s in self.segments)

        if len({_is_aware(ts) for ts in timestamps}) > 1:
            raise ValueError("Export mixes timestamps with and without a UTC offset")
        return self

    def sleep_samples(self) -> List[CategorizedSample]:
        return [s.to_model() for s in self.sleep]

    def heart_rate_samples(self) -> List[HeartRateSample]:
        return [s.to_model() for s in self.heart_rate]

    def workout_records(self) -> List[WorkoutRecord]:
        return [w.to_model() for w in self.workouts]

    def segment_logs(self) -> List[SegmentLog]:
        return [s.to_model() for s in self.segments]


# =============================================================================
# Parsing helpers
# =============================================================================

PayloadT = TypeVar("PayloadT", bound=BaseModel)


def parse_payload(model: Type[PayloadT], data: Any) -> PayloadT:
    """
    Validate a decoded payload.

    Raises:
        InvalidParameterError: with the pydantic errors in ``details``
    """
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise InvalidParameterError(
            f"Invalid {model.__name__} payload: {e.error_count()} error(s)",
            parameter=model.__name__,
            details={"errors": e.errors(include_url=False, include_context=False)},
        ) from e


def load_export(path: Union[str, Path]) -> HealthExport:
    """
    Read and validate a JSON HealthExport file.

    Raises:
        FileNotFoundError: if the file does not exist
        InvalidParameterError: if the file is not valid JSON or fails validation
    """
    text = Path(path).read_text(encoding="utf-8")
    try:
        data: Dict[str, Any] = json.loads(text)
    except json.JSONDecodeError as e:
        raise InvalidParameterError(f"{path} is not valid JSON: {e}", parameter="path") from e
    return parse_payload(HealthExport, data)
