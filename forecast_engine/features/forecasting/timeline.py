"""Time key handling: format detection, interval detection, projection.

Time keys are integers: a year (``2023``) or a year-month (``202403``).
Year-month intervals are measured in months.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Sequence

from forecast_engine.features.forecasting.schemas import TimeFormat

YEARMONTH_MIN = 100000
YEARMONTH_MAX = 999999


def detect_time_format(time: int) -> TimeFormat:
    """A six-digit key is year-month; anything else is a year."""
    if YEARMONTH_MIN <= time <= YEARMONTH_MAX:
        return "yearmonth"
    return "year"


def to_month_index(time: int) -> int:
    """Months since year 0 for a YYYYMM key."""
    year, month = divmod(time, 100)
    return year * 12 + (month - 1)


def detect_interval(times: Sequence[int], time_format: TimeFormat) -> int:
    """Most frequent positive step between consecutive sorted keys.

    Ties go to the smallest step. Returns 1 when no positive step exists.
    """
    if time_format == "yearmonth":
        positions = [to_month_index(t) for t in times]
    else:
        positions = list(times)

    deltas = Counter(
        later - earlier
        for earlier, later in zip(positions, positions[1:])
        if later - earlier > 0
    )
    if not deltas:
        return 1
    return min(deltas, key=lambda delta: (-deltas[delta], delta))


def project_times(last_time: int, interval: int, periods: int, time_format: TimeFormat) -> list[int]:
    """Future keys last_time + interval * (i + 1) for i in 0..periods-1.

    Year-month keys carry overflowing months into the year.
    """
    if time_format == "year":
        return [last_time + interval * (i + 1) for i in range(periods)]

    year, month = divmod(last_time, 100)
    projected: list[int] = []
    for i in range(periods):
        next_month = month + interval * (i + 1)
        next_year = year + (next_month - 1) // 12
        projected.append(next_year * 100 + (next_month - 1) % 12 + 1)
    return projected
