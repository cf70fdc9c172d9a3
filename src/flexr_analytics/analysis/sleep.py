"""Sleep analysis: nightly totals, stage shares and quality.

A sample belongs to the night before the calendar day it ends on, so sleep
ending at 07:00 on Tuesday counts toward Monday night. Stage samples
overlap freely (two sources, nested stages), so each night builds three
span sets (total, deep, REM) and merges them independently before summing.
"""

import logging
from collections import defaultdict
from datetime import date, timedelta, tzinfo
from typing import Dict, Iterable, List, Optional, Sequence

from ..metrics.intervals import calendar_day, clip_span, total_duration
from ..models import (
    CategorizedSample,
    NightlySleepMetrics,
    SleepCategory,
    SleepSummary,
    TimeSpan,
)

logger = logging.getLogger(__name__)

TARGET_SLEEP_HOURS = 8.0
DEEP_SLEEP_BAND = (13.0, 23.0)  # % of total sleep
REM_SLEEP_BAND = (20.0, 25.0)
OPTIMAL_AVERAGE_HOURS = (7.0, 9.0)
WEEK_NIGHTS = 7


def night_for(sample: CategorizedSample, tz: Optional[tzinfo] = None) -> date:
    """Night a sample belongs to: the day its end falls on, minus one."""
    return calendar_day(sample.span.end, tz) - timedelta(days=1)


def sleep_quality(total_hours: float, deep_hours: float, rem_hours: float) -> int:
    """
    Calculate sleep quality score (0-100).

    Components:
    - Duration (50%): 1.0 at 8 hours, falling linearly to 0 at 0 or 16 hours
    - Deep sleep (25%): 1.0 when 13-23% of total, else 0.5
    - REM sleep (25%): 1.0 when 20-25% of total, else 0.5

    Args:
        total_hours: Total sleep
        deep_hours: Deep sleep
        rem_hours: REM sleep

    Returns:
        Quality score 0-100
    """
    total_score = min(1.0, max(0.0, 1.0 - abs(total_hours - TARGET_SLEEP_HOURS) / TARGET_SLEEP_HOURS))

    deep_pct = deep_hours / total_hours * 100 if total_hours > 0 else 0.0
    deep_score = 1.0 if DEEP_SLEEP_BAND[0] <= deep_pct <= DEEP_SLEEP_BAND[1] else 0.5

    rem_pct = rem_hours / total_hours * 100 if total_hours > 0 else 0.0
    rem_score = 1.0 if REM_SLEEP_BAND[0] <= rem_pct <= REM_SLEEP_BAND[1] else 0.5

    quality = round((total_score * 0.5 + deep_score * 0.25 + rem_score * 0.25) * 100)
    return min(100, max(0, quality))


def _metrics_for_night(night_date: date, spans_by_category: Dict[SleepCategory, List[TimeSpan]]) -> NightlySleepMetrics:
    all_spans = [span for spans in spans_by_category.values() for span in spans]
    if not all_spans:
        return NightlySleepMetrics(night_date=night_date)

    total_hours = total_duration(all_spans) / 3600
    deep_hours = total_duration(spans_by_category.get(SleepCategory.ASLEEP_DEEP, [])) / 3600
    rem_hours = total_duration(spans_by_category.get(SleepCategory.ASLEEP_REM, [])) / 3600

    return NightlySleepMetrics(
        night_date=night_date,
        total_hours=total_hours,
        deep_hours=deep_hours,
        rem_hours=rem_hours,
        quality=sleep_quality(total_hours, deep_hours, rem_hours),
    )


def nightly_report(samples: Iterable[CategorizedSample], night_window: TimeSpan,
                   tz: Optional[tzinfo] = None) -> NightlySleepMetrics:
    """
    Sleep metrics for the samples inside one night window.

    Samples are clipped to the window; samples entirely outside it are
    ignored. The night is dated the day before the window ends.

    Args:
        samples: Sleep stage samples
        night_window: Time range covering the night
        tz: Timezone for calendar dates (aware timestamps only)

    Returns:
        NightlySleepMetrics; all zero when no sample overlaps the window
    """
    by_category: Dict[SleepCategory, List[TimeSpan]] = defaultdict(list)
    for sample in samples:
        clipped = clip_span(sample.span, night_window)
        if clipped is not None:
            by_category[sample.category].append(clipped)

    night_date = calendar_day(night_window.end, tz) - timedelta(days=1)
    return _metrics_for_night(night_date, by_category)


def weekly_report(samples: Iterable[CategorizedSample], reference_date: date,
                  tz: Optional[tzinfo] = None) -> List[NightlySleepMetrics]:
    """
    Sleep metrics for the last seven nights before ``reference_date``.

    Covers nights reference_date - 7 through reference_date - 1, oldest
    first, so sleep that ended on the reference date is the last entry.
    Nights without samples are included with zero metrics.

    Args:
        samples: Sleep stage samples
        reference_date: Day the report is made for (usually today)
        tz: Timezone for calendar dates (aware timestamps only)

    Returns:
        Exactly seven NightlySleepMetrics, oldest first
    """
    nights = [reference_date - timedelta(days=WEEK_NIGHTS - i) for i in range(WEEK_NIGHTS)]
    wanted = set(nights)

    grouped: Dict[date, Dict[SleepCategory, List[TimeSpan]]] = defaultdict(lambda: defaultdict(list))
    skipped = 0
    for sample in samples:
        night = night_for(sample, tz)
        if night not in wanted:
            skipped += 1
            continue
        grouped[night][sample.category].append(sample.span)

    if skipped:
        logger.debug(f"Ignored {skipped} sleep samples outside the week ending {reference_date}")

    return [_metrics_for_night(night, grouped.get(night, {})) for night in nights]


def summarize_week(nights: Sequence[NightlySleepMetrics]) -> SleepSummary:
    """
    Average sleep across nights that have data.

    Args:
        nights: Nightly metrics, e.g. from weekly_report

    Returns:
        SleepSummary; averages are zero when no night has data
    """
    with_data = [n for n in nights if n.total_hours > 0]
    if not with_data:
        return SleepSummary(average_hours=0.0, deep_percentage=0, nights_with_data=0, is_optimal=False)

    total_sleep = sum(n.total_hours for n in with_data)
    total_deep = sum(n.deep_hours for n in with_data)
    average = total_sleep / len(with_data)

    return SleepSummary(
        average_hours=average,
        deep_percentage=int(total_deep / total_sleep * 100),
        nights_with_data=len(with_data),
        is_optimal=OPTIMAL_AVERAGE_HOURS[0] <= average <= OPTIMAL_AVERAGE_HOURS[1],
    )
