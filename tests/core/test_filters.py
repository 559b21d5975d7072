"""Unit tests for event filtering.

Pure function tests - no mocks needed.
"""

from datetime import datetime, timedelta, timezone

import pytest

from src.core.earthquake import Earthquake
from src.core.filters import (
    FilterCriteria,
    TimeWindow,
    apply_filters,
    parse_filter_criteria,
)


NOW = datetime(2024, 3, 1, 12, 0, 0, tzinfo=timezone.utc)


def make_earthquake(id, magnitude=3.0, age=timedelta(minutes=10), place="Somewhere"):
    return Earthquake(
        id=id,
        magnitude=magnitude,
        place=place,
        time=NOW - age,
        latitude=0.0,
        longitude=0.0,
        depth_km=10.0,
    )


class TestApplyFilters:
    """Tests for apply_filters() pure function."""

    @pytest.fixture
    def earthquakes(self):
        return [
            make_earthquake("a", 2.0, timedelta(minutes=5)),
            make_earthquake("b", 4.9, timedelta(hours=3)),
            make_earthquake("c", 5.5, timedelta(hours=12)),
            make_earthquake("d", 5.0, timedelta(minutes=59)),
        ]

    def test_default_criteria_keep_everything(self, earthquakes):
        """No floor and ALL window returns the input."""
        result = apply_filters(earthquakes, FilterCriteria(), NOW)
        assert result == earthquakes

    def test_magnitude_floor(self):
        """Only events at or above the floor are kept."""
        earthquakes = [
            make_earthquake("m2", 2.0),
            make_earthquake("m49", 4.9),
            make_earthquake("m55", 5.5),
        ]
        criteria = FilterCriteria(min_magnitude=5.0, time_window=TimeWindow.ALL)

        result = apply_filters(earthquakes, criteria, NOW)

        assert [e.id for e in result] == ["m55"]

    def test_magnitude_floor_is_inclusive(self, earthquakes):
        result = apply_filters(earthquakes, FilterCriteria(min_magnitude=5.0), NOW)
        assert [e.id for e in result] == ["c", "d"]

    @pytest.mark.parametrize("window,expected", [
        (TimeWindow.LAST_HOUR, ["a", "d"]),
        (TimeWindow.LAST_6_HOURS, ["a", "b", "d"]),
        (TimeWindow.LAST_24_HOURS, ["a", "b", "c", "d"]),
    ])
    def test_time_windows(self, earthquakes, window, expected):
        """Each window keeps events at or after now minus its duration."""
        result = apply_filters(earthquakes, FilterCriteria(time_window=window), NOW)
        assert [e.id for e in result] == expected

    def test_event_exactly_at_cutoff_is_kept(self):
        eq = make_earthquake("edge", age=timedelta(hours=1))
        result = apply_filters([eq], FilterCriteria(time_window=TimeWindow.LAST_HOUR), NOW)
        assert result == [eq]

    def test_rules_combine_with_and(self, earthquakes):
        criteria = FilterCriteria(min_magnitude=5.0, time_window=TimeWindow.LAST_HOUR)
        result = apply_filters(earthquakes, criteria, NOW)
        assert [e.id for e in result] == ["d"]

    def test_is_idempotent(self, earthquakes):
        criteria = FilterCriteria(min_magnitude=4.5, time_window=TimeWindow.LAST_6_HOURS)
        once = apply_filters(earthquakes, criteria, NOW)
        assert apply_filters(once, criteria, NOW) == once

    def test_does_not_mutate_input(self, earthquakes):
        original = list(earthquakes)
        apply_filters(earthquakes, FilterCriteria(min_magnitude=5.0), NOW)
        assert earthquakes == original

    def test_one_strong_recent_event(self):
        """A recent M6.1 passes a M5 / last hour filter."""
        eq = make_earthquake("tonga", 6.1, timedelta(minutes=30), place="Tonga")
        criteria = FilterCriteria(min_magnitude=5.0, time_window=TimeWindow.LAST_HOUR)

        assert apply_filters([eq], criteria, NOW) == [eq]


class TestParseFilterCriteria:
    """Tests for parse_filter_criteria()."""

    def test_defaults(self):
        assert parse_filter_criteria() == FilterCriteria()

    def test_parses_strings(self):
        criteria = parse_filter_criteria("4.5", "6h")
        assert criteria == FilterCriteria(4.5, TimeWindow.LAST_6_HOURS)

    def test_empty_magnitude_means_no_floor(self):
        assert parse_filter_criteria("", "all").min_magnitude == 0.0

    @pytest.mark.parametrize("value", [-0.5, 7.5, "abc", 2.3])
    def test_rejects_bad_magnitude(self, value):
        with pytest.raises(ValueError):
            parse_filter_criteria(value, "all")

    def test_rejects_unknown_window(self):
        with pytest.raises(ValueError):
            parse_filter_criteria(0, "2h")

    def test_accepts_upper_bound(self):
        assert parse_filter_criteria(7, None).min_magnitude == 7.0
