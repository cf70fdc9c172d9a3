"""Tests for collaborator payload parsing."""

import json
from datetime import datetime

import pytest

from flexr_analytics.exceptions import InvalidParameterError
from flexr_analytics.models import SegmentType, SleepCategory
from flexr_analytics.schemas import (
    HealthExport,
    SegmentPayload,
    SleepSamplePayload,
    WorkoutPayload,
    load_export,
    parse_payload,
)

WORKOUT = {
    "id": "w1",
    "startTime": "2024-03-04T07:00:00",
    "endTime": "2024-03-04T07:30:00",
    "totalDistanceMeters": 6000,
    "activityKind": "running",
    "laps": [
        {"startTime": "2024-03-04T07:00:00", "endTime": "2024-03-04T07:05:00"},
        {"startTime": "2024-03-04T07:05:00", "endTime": "2024-03-04T07:10:10"},
    ],
}


class TestPayloads:
    """Tests for payload models."""

    def test_workout_camel_case(self):
        record = parse_payload(WorkoutPayload, WORKOUT).to_model()
        assert record.id == "w1"
        assert record.distance_meters == 6000
        assert record.duration_seconds == 1800
        assert [lap.duration_seconds for lap in record.laps] == [300, 310]

    def test_snake_case_accepted(self):
        payload = parse_payload(SleepSamplePayload, {
            "category": "asleepDeep",
            "start_time": "2024-03-04T23:00:00",
            "end_time": "2024-03-05T00:30:00",
        })
        sample = payload.to_model()
        assert sample.category == SleepCategory.ASLEEP_DEEP
        assert sample.span.start == datetime(2024, 3, 4, 23, 0)

    def test_segment(self):
        log = parse_payload(SegmentPayload, {
            "stationName": "sled_push",
            "segmentType": "station",
            "durationSeconds": 185.5,
            "timestamp": "2024-03-04T07:15:00",
        }).to_model()
        assert log.segment_type == SegmentType.STATION
        assert log.duration_seconds == 185.5

    @pytest.mark.parametrize("bad", [
        {**WORKOUT, "totalDistanceMeters": -1},
        {**WORKOUT, "endTime": "2024-03-04T06:00:00"},
        {k: v for k, v in WORKOUT.items() if k != "id"},
    ])
    def test_invalid_workout(self, bad):
        with pytest.raises(InvalidParameterError) as exc:
            parse_payload(WorkoutPayload, bad)
        assert exc.value.details["parameter"] == "WorkoutPayload"
        assert exc.value.details["errors"]

    def test_unknown_sleep_category(self):
        with pytest.raises(InvalidParameterError):
            parse_payload(SleepSamplePayload, {
                "category": "inBed",
                "startTime": "2024-03-04T23:00:00",
                "endTime": "2024-03-05T00:30:00",
            })


class TestHealthExport:
    """Tests for the export bundle."""

    def test_all_sections_optional(self):
        export = parse_payload(HealthExport, {})
        assert export.workout_records() == []
        assert export.sleep_samples() == []

    def test_load_export(self, tmp_path):
        path = tmp_path / "export.json"
        path.write_text(json.dumps({
            "workouts": [WORKOUT],
            "heartRate": [{"bpm": 150, "startTime": "2024-03-04T07:00:00", "endTime": "2024-03-04T07:10:00"}],
        }))
        export = load_export(path)
        assert len(export.workout_records()) == 1
        assert export.heart_rate_samples()[0].bpm == 150

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "export.json"
        path.write_text("{not json")
        with pytest.raises(InvalidParameterError):
            load_export(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_export(tmp_path / "missing.json")


class TestTimestampOffsets:
    """Tests for mixing timestamps with and without a UTC offset."""

    def test_span_with_one_aware_end_rejected(self):
        with pytest.raises(InvalidParameterError) as exc:
            parse_payload(HealthExport, {"sleep": [{
                "category": "asleepCore",
                "startTime": "2024-03-04T22:00:00Z",
                "endTime": "2024-03-05T06:00:00",
            }]})
        assert "UTC offset" in str(exc.value.details["errors"])

    def test_export_mixing_aware_and_naive_samples_rejected(self):
        with pytest.raises(InvalidParameterError) as exc:
            parse_payload(HealthExport, {"sleep": [
                {"category": "asleepCore", "startTime": "2024-03-04T22:00:00Z", "endTime": "2024-03-05T06:00:00Z"},
                {"category": "asleepDeep", "startTime": "2024-03-04T23:00:00", "endTime": "2024-03-05T00:30:00"},
            ]})
        assert exc.value.details["parameter"] == "HealthExport"

    def test_naive_lap_in_aware_export_rejected(self):
        workout = {
            **WORKOUT,
            "startTime": "2024-03-04T07:00:00+01:00",
            "endTime": "2024-03-04T07:30:00+01:00",
        }
        with pytest.raises(InvalidParameterError):
            parse_payload(HealthExport, {"workouts": [workout]})

    def test_all_aware_accepted(self):
        export = parse_payload(HealthExport, {
            "sleep": [{"category": "asleepCore", "startTime": "2024-03-04T22:00:00Z", "endTime": "2024-03-05T06:00:00Z"}],
            "segments": [{"stationName": "ski_erg", "segmentType": "station",
                          "durationSeconds": 240, "timestamp": "2024-03-05T07:00:00+01:00"}],
        })
        assert export.sleep_samples()[0].span.duration_seconds == 8 * 3600
