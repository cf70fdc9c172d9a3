"""Pytest configuration and fixtures."""

from datetime import datetime, timedelta

import pytest

from flexr_analytics.config import get_settings
from flexr_analytics.models import TimeSpan

# Monday evening, naive local time
BASE = datetime(2024, 3, 4, 22, 0, 0)


def span_at(offset_seconds: float, duration_seconds: float, base: datetime = BASE) -> TimeSpan:
    """Span starting ``offset_seconds`` after ``base``."""
    start = base + timedelta(seconds=offset_seconds)
    return TimeSpan(start, start + timedelta(seconds=duration_seconds))


@pytest.fixture
def base_time():
    return BASE


@pytest.fixture
def make_span():
    """Factory for spans relative to the fixed base time."""
    return span_at


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Settings are cached per process; reset between tests that patch env."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
