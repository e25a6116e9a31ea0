"""
Calendar period boundaries.

All periods are half-open ``[start, end)`` ranges of naive local datetimes
aligned to midnight.  Weeks start on Monday.
"""
from datetime import datetime, timedelta

TODAY = 'today'
WEEK = 'week'
MONTH = 'month'
YEAR = 'year'
ALL_TIME = 'all_time'

PERIODS = (TODAY, WEEK, MONTH, YEAR, ALL_TIME)


def start_of_day(moment):
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


def _next_month(first_of_month):
    if first_of_month.month == 12:
        return first_of_month.replace(year=first_of_month.year + 1, month=1)
    return first_of_month.replace(month=first_of_month.month + 1)


def start_of_period(kind: str, now: datetime) -> datetime | None:
    today = start_of_day(now)
    if kind == TODAY:
        return today
    if kind == WEEK:
        # weekday(): Monday is 0, Sunday is 6
        return today - timedelta(days=today.weekday())
    if kind == MONTH:
        return today.replace(day=1)
    if kind == YEAR:
        return today.replace(month=1, day=1)
    if kind == ALL_TIME:
        return None
    raise ValueError(f'Unknown period: {kind!r}')


def end_of_period(kind: str, now: datetime) -> datetime | None:
    start = start_of_period(kind, now)
    if kind == TODAY:
        return start + timedelta(days=1)
    if kind == WEEK:
        return start + timedelta(days=7)
    if kind == MONTH:
        return _next_month(start)
    if kind == YEAR:
        return start.replace(year=start.year + 1)
    return None


def period_bounds(kind, now):
    return start_of_period(kind, now), end_of_period(kind, now)


def in_bounds(moment, start, end):
    """True when ``moment`` lies in ``[start, end)``; a None bound is open."""
    if moment is None:
        return False
    if start is not None and moment < start:
        return False
    if end is not None and moment >= end:
        return False
    return True
