"""Tests for time format detection and timestamp projection."""

import pytest

from forecast_engine.features.forecasting.timeline import (
    detect_interval,
    detect_time_format,
    project_times,
    to_month_index,
)


class TestDetectTimeFormat:
    """Tests for detect_time_format."""

    @pytest.mark.parametrize(
        ("time", "expected"),
        [
            (2023, "year"),
            (202403, "yearmonth"),
            (100000, "yearmonth"),
            (999999, "yearmonth"),
            (99999, "year"),
            (1000000, "year"),
        ],
    )
    def test_format(self, time, expected):
        """Six-digit keys are year-month, anything else a year."""
        assert detect_time_format(time) == expected


class TestDetectInterval:
    """Tests for detect_interval."""

    def test_consecutive_years(self):
        """Annual data has interval 1."""
        assert detect_interval([2018, 2019, 2020, 2021], "year") == 1

    def test_modal_step_wins(self):
        """The most frequent step is chosen over outliers."""
        assert detect_interval([2000, 2005, 2010, 2012], "year") == 5

    def test_tie_goes_to_smallest_step(self):
        """Equally frequent steps resolve to the smaller one."""
        assert detect_interval([2000, 2003, 2005], "year") == 2

    def test_duplicate_times_ignored(self):
        """Zero steps from duplicate keys are not counted."""
        assert detect_interval([2000, 2000, 2001], "year") == 1

    def test_no_positive_step_defaults_to_one(self):
        """All-equal keys fall back to interval 1."""
        assert detect_interval([2020, 2020], "year") == 1

    def test_months_across_year_boundary(self):
        """December to January is one month."""
        assert detect_interval([202211, 202212, 202301], "yearmonth") == 1

    def test_quarterly_months(self):
        """Quarterly year-month data has interval 3."""
        assert detect_interval([202201, 202204, 202207, 202210], "yearmonth") == 3

    def test_month_index(self):
        """January of year y maps to 12y."""
        assert to_month_index(202001) == 2020 * 12


class TestProjectTimes:
    """Tests for project_times."""

    def test_years(self):
        """Years advance by interval directly."""
        assert project_times(2023, 1, 3, "year") == [2024, 2025, 2026]

    def test_years_with_interval(self):
        """Multi-year steps are multiplied out."""
        assert project_times(2020, 5, 2, "year") == [2025, 2030]

    def test_months_carry_into_next_year(self):
        """December rolls over to January of the next year."""
        assert project_times(202311, 1, 3, "yearmonth") == [202312, 202401, 202402]

    def test_quarterly_carry(self):
        """Three-month steps carry correctly."""
        assert project_times(202211, 3, 2, "yearmonth") == [202302, 202305]

    def test_twelve_month_step_keeps_december(self):
        """A yearly step from December lands on December."""
        assert project_times(202312, 12, 2, "yearmonth") == [202412, 202512]
