"""Tests for weekly training load."""

from datetime import date, datetime, timedelta

import pytest

from flexr_analytics.analysis.load import weekly_load
from flexr_analytics.exceptions import InvalidParameterError
from flexr_analytics.models import TimeSpan, WorkoutRecord

TODAY = date(2024, 3, 10)  # Sunday


def workout(day: date, hour: int = 7, minutes: float = 60, wid: str = None) -> WorkoutRecord:
    start = datetime(day.year, day.month, day.day, hour)
    return WorkoutRecord(
        id=wid or f"w-{day.isoformat()}-{hour}",
        span=TimeSpan(start, start + timedelta(minutes=minutes)),
        distance_meters=10000,
    )


class TestWeeklyLoad:
    """Tests for weekly_load."""

    def test_breakdown_starts_today(self):
        load = weekly_load([], target_hours=8, today=TODAY)
        assert len(load.daily_breakdown) == 7
        assert load.daily_breakdown[0].day == TODAY
        assert load.daily_breakdown[0].is_today is True
        assert load.daily_breakdown[0].day_label == "Sun"
        assert load.daily_breakdown[-1].day == TODAY - timedelta(days=6)
        assert not any(d.is_today for d in load.daily_breakdown[1:])

    def test_hours_bucketed_by_start_day(self):
        workouts = [
            workout(TODAY, minutes=90),
            workout(TODAY - timedelta(days=2), minutes=60),
            workout(TODAY - timedelta(days=2), hour=18, minutes=30),
        ]
        load = weekly_load(workouts, target_hours=8, today=TODAY)

        assert load.daily_breakdown[0].hours == pytest.approx(1.5)
        assert load.daily_breakdown[2].hours == pytest.approx(1.5)
        assert load.current_hours == pytest.approx(3.0)

    def test_workout_crossing_midnight_counts_on_start_day(self):
        load = weekly_load([workout(TODAY - timedelta(days=1), hour=23, minutes=120)], target_hours=8, today=TODAY)
        assert load.daily_breakdown[1].hours == pytest.approx(2.0)
        assert load.daily_breakdown[0].hours == 0

    def test_outside_window_ignored(self):
        workouts = [workout(TODAY - timedelta(days=7)), workout(TODAY + timedelta(days=1))]
        load = weekly_load(workouts, target_hours=8, today=TODAY)
        assert load.current_hours == 0

    def test_current_equals_sum_of_breakdown(self):
        workouts = [workout(TODAY - timedelta(days=i), minutes=30 + i * 10) for i in range(7)]
        load = weekly_load(workouts, target_hours=8, today=TODAY)
        assert load.current_hours == pytest.approx(sum(d.hours for d in load.daily_breakdown))

    def test_progress(self):
        load = weekly_load([workout(TODAY, minutes=240)], target_hours=8, today=TODAY)
        assert load.progress_pct == pytest.approx(50.0)

    def test_target_from_settings(self, monkeypatch):
        monkeypatch.setenv("FLEXR_WEEKLY_TARGET_HOURS", "6")
        load = weekly_load([], today=TODAY)
        assert load.target_hours == 6

    def test_negative_target_rejected(self):
        with pytest.raises(InvalidParameterError):
            weekly_load([], target_hours=-1, today=TODAY)

    def test_to_dict(self):
        data = weekly_load([workout(TODAY)], target_hours=8, today=TODAY).to_dict()
        assert data["current_hours"] == 1.0
        assert data["daily_breakdown"][0]["day"] == "2024-03-10"
