"""Half-month pay period arithmetic."""

from __future__ import annotations

import calendar
from datetime import date, timedelta

from piecework.core.schema import Period

FIRST_PERIOD_LAST_DAY = 15


def period_of(day: date) -> Period:
    return "first" if day.day <= FIRST_PERIOD_LAST_DAY else "second"


def period_bounds(year: int, month: int, period: Period) -> tuple[date, date]:
    if period == "first":
        return date(year, month, 1), date(year, month, FIRST_PERIOD_LAST_DAY)
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, FIRST_PERIOD_LAST_DAY + 1), date(year, month, last_day)


def periods_in_range(start: date, end: date) -> list[tuple[int, int, Period]]:
    """Every (year, month, period) touched by the inclusive range ``start..end``."""

    periods: list[tuple[int, int, Period]] = []
    current = start
    while current <= end:
        key = (current.year, current.month, period_of(current))
        periods.append(key)
        _, period_end = period_bounds(*key)
        current = period_end + timedelta(days=1)
    return periods


SEASON_START_MONTH = 5


def season_bounds(start_year: int) -> tuple[date, date]:
    """A season runs from May 1st to April 30th of the following year."""

    return date(start_year, SEASON_START_MONTH, 1), date(start_year + 1, SEASON_START_MONTH, 1) - timedelta(days=1)
