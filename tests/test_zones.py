"""Tests for heart rate zone classification."""

import pytest

from flexr_analytics.exceptions import InvalidParameterError
from flexr_analytics.metrics.zones import (
    average_and_max,
    classify_zones,
    zone_for_percent_max,
    zone_percentages,
)
from flexr_analytics.models import HeartRateSample, HeartRateZoneDurations

from conftest import span_at


def hr(bpm, offset=0, duration=60):
    return HeartRateSample(bpm=bpm, span=span_at(offset, duration))


class TestZoneForPercentMax:
    """Tests for zone boundaries."""

    @pytest.mark.parametrize("pct,zone", [
        (0.0, 1),
        (0.59, 1),
        (0.60, 2),
        (0.69, 2),
        (0.70, 3),
        (0.80, 4),
        (0.89, 4),
        (0.90, 5),
        (1.2, 5),
    ])
    def test_boundaries(self, pct, zone):
        """Upper bounds are exclusive."""
        assert zone_for_percent_max(pct) == zone


class TestClassifyZones:
    """Tests for classify_zones."""

    def test_single_sample_in_zone_3(self):
        """150 bpm at max 190 (78.9%) over 600 s lands in zone 3."""
        durations = classify_zones([hr(150, duration=600)], max_hr=190)
        assert durations.zone3 == 600
        assert durations.total_seconds == 600

    def test_fixed_sample_duration(self):
        """Zero-length samples are weighted by sample_duration."""
        samples = [hr(100, i * 5, 0) for i in range(4)] + [hr(180, 20, 0)]
        durations = classify_zones(samples, max_hr=190, sample_duration=5)
        assert durations.zone1 == 20
        assert durations.zone5 == 5

    def test_total_equals_sample_time(self):
        samples = [hr(110, 0, 30), hr(140, 30, 45), hr(175, 75, 15)]
        durations = classify_zones(samples, max_hr=190)
        assert durations.total_seconds == 90

    def test_empty_samples(self):
        assert classify_zones([], max_hr=190) == HeartRateZoneDurations()

    @pytest.mark.parametrize("max_hr", [0, -10])
    def test_non_positive_max_hr_rejected(self, max_hr):
        with pytest.raises(InvalidParameterError) as exc:
            classify_zones([hr(120)], max_hr=max_hr)
        assert exc.value.details["parameter"] == "max_hr"

    def test_negative_sample_duration_rejected(self):
        with pytest.raises(InvalidParameterError):
            classify_zones([hr(120)], max_hr=190, sample_duration=-1)


class TestZonePercentages:
    """Tests for zone_percentages and percent_in_zone."""

    def test_percentages(self):
        durations = HeartRateZoneDurations(zone1=300, zone3=600, zone5=100)
        assert zone_percentages(durations) == [30, 0, 60, 0, 10]

    def test_all_zero_when_nothing_sampled(self):
        assert zone_percentages(HeartRateZoneDurations()) == [0, 0, 0, 0, 0]

    def test_invalid_zone(self):
        with pytest.raises(InvalidParameterError):
            HeartRateZoneDurations().percent_in_zone(6)


class TestAverageAndMax:
    """Tests for average_and_max."""

    def test_average_and_peak(self):
        assert average_and_max([hr(120), hr(140), hr(160)]) == (140.0, 160)

    def test_empty(self):
        assert average_and_max([]) == (0.0, 0.0)
