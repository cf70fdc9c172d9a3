"""Interval algebra over time spans.

Sleep stages and heart rate windows overlap routinely (two devices writing
the same night, stage samples nested inside an "unspecified" block), so
durations are always computed over merged spans.
"""

from datetime import date, datetime, tzinfo
from typing import Iterable, List, Optional

from ..exceptions import InvalidParameterError
from ..models import TimeSpan


def merge_spans(spans: Iterable[TimeSpan]) -> List[TimeSpan]:
    """
    Merge overlapping or touching spans.

    Spans are sorted by start and swept left to right. A span whose start is
    at or before the current merged end extends it, so [0, 10] and [10, 20]
    become [0, 20].

    Args:
        spans: Spans in any order, possibly duplicated or empty

    Returns:
        Disjoint, non-touching spans sorted by start

    Raises:
        InvalidParameterError: If aware and naive spans are mixed
    """
    try:
        ordered = sorted(spans, key=lambda s: (s.start, s.end))
    except TypeError as e:
        raise InvalidParameterError(
            f"Cannot order spans mixing timezone-aware and naive timestamps: {e}",
            parameter="spans",
        ) from e
    if not ordered:
        return []

    merged: List[TimeSpan] = []
    current_start = ordered[0].start
    current_end = ordered[0].end

    for span in ordered[1:]:
        if span.start <= current_end:
            if span.end > current_end:
                current_end = span.end
        else:
            merged.append(TimeSpan(current_start, current_end))
            current_start, current_end = span.start, span.end

    merged.append(TimeSpan(current_start, current_end))
    return merged


def total_duration(spans: Iterable[TimeSpan]) -> float:
    """
    Total seconds covered by the spans, counting overlaps once.

    Args:
        spans: Spans in any order

    Returns:
        Seconds covered; 0.0 for no spans
    """
    return sum(span.duration_seconds for span in merge_spans(spans))


def calendar_day(timestamp: datetime, tz: Optional[tzinfo] = None) -> date:
    """Calendar date of ``timestamp``, seen from ``tz`` when it is timezone-aware."""
    if tz is not None and timestamp.tzinfo is not None:
        timestamp = timestamp.astimezone(tz)
    return timestamp.date()


def clip_span(span: TimeSpan, window: TimeSpan) -> Optional[TimeSpan]:
    """Intersect ``span`` with ``window``; None when they do not overlap."""
    start = max(span.start, window.start)
    end = min(span.end, window.end)
    if start > end:
        return None
    return TimeSpan(start, end)
