"""
Weekly Training Load

Trailing seven-day training volume, in hours, against a weekly target.
"""

import logging
from datetime import date, timedelta, tzinfo
from typing import Iterable, List, Optional

from ..config import get_settings
from ..exceptions import InvalidParameterError
from ..metrics.intervals import calendar_day
from ..models import DailyTraining, WeeklyTrainingLoad, WorkoutRecord

logger = logging.getLogger(__name__)

DAY_LABELS = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
WINDOW_DAYS = 7


def weekly_load(
    workouts: Iterable[WorkoutRecord],
    target_hours: Optional[float] = None,
    today: Optional[date] = None,
    tz: Optional[tzinfo] = None,
) -> WeeklyTrainingLoad:
    """
    Calculate training hours for today and the six days before it.

    Workouts are bucketed by the calendar day they start on. Entry i of the
    breakdown is ``today - i``, so the first entry is today.

    Args:
        workouts: Workout records (any date range; out-of-window ones are ignored)
        target_hours: Weekly target; defaults to the configured target
        today: Reference day; defaults to the current date
        tz: Timezone for calendar dates (aware timestamps only)

    Returns:
        WeeklyTrainingLoad with a seven-entry daily breakdown

    Raises:
        InvalidParameterError: If target_hours is negative
    """
    if target_hours is None:
        target_hours = get_settings().weekly_target_hours
    if target_hours < 0:
        raise InvalidParameterError(
            f"Target hours must be non-negative, got {target_hours}", parameter="target_hours"
        )
    if today is None:
        today = date.today()

    hours_by_day = {today - timedelta(days=i): 0.0 for i in range(WINDOW_DAYS)}
    for workout in workouts:
        day = calendar_day(workout.start, tz)
        if day in hours_by_day:
            hours_by_day[day] += workout.duration_seconds / 3600.0

    breakdown: List[DailyTraining] = []
    for i in range(WINDOW_DAYS):
        day = today - timedelta(days=i)
        breakdown.append(DailyTraining(
            day=day,
            day_label=DAY_LABELS[day.weekday()],
            hours=hours_by_day[day],
            is_today=(i == 0),
        ))

    current_hours = sum(d.hours for d in breakdown)
    logger.debug(f"Weekly load to {today}: {current_hours:.2f}h of {target_hours}h target")

    return WeeklyTrainingLoad(
        target_hours=target_hours,
        current_hours=current_hours,
        daily_breakdown=tuple(breakdown),
    )
