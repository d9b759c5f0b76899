"""Computing when a calendar timer should next wake up."""

from __future__ import annotations

from datetime import datetime, timedelta, tzinfo

from zeroplug.timerbits import Timer

_HOUR_SET = 0x8
_DAY_SET = 0x4
_WEEK_SET = 0x2
_MONTH_SET = 0x1


def _weekday(when: datetime) -> int:
    """Weekday with Sunday as 0."""
    return (when.weekday() + 1) % 7


def _normalized(
    year: int,
    month: int,
    day: int,
    hour: int,
    minute: int,
    second: int,
    microsecond: int,
    tz: tzinfo | None,
) -> datetime:
    """Build a datetime, letting out-of-range fields roll over into the next unit."""
    carry, month0 = divmod(month - 1, 12)
    base = datetime(year + carry, month0 + 1, 1, tzinfo=tz)
    return base + timedelta(
        days=day - 1, hours=hour, minutes=minute, seconds=second, microseconds=microsecond
    )


def _add_date(when: datetime, years: int, months: int, days: int) -> datetime:
    return _normalized(
        when.year + years,
        when.month + months,
        when.day + days,
        when.hour,
        when.minute,
        when.second,
        when.microsecond,
        when.tzinfo,
    )


def first_weekday(date: datetime, weekday: int) -> datetime:
    """The first day in ``date``'s month falling on ``weekday`` (Sunday is 0)."""
    day = _add_date(date, 0, 0, 1 - date.day)
    while _weekday(day) != weekday:
        day = _add_date(day, 0, 0, 1)
    return day


def next_wake_time(timer: Timer, now: datetime) -> datetime:
    """The moment after ``now`` at which the timer should be checked again."""
    month, day, hour, minute, week = timer.month, timer.day, timer.hour, timer.minute, timer.week

    unit = timedelta(0)
    if minute >= 0:
        if hour < 0:
            unit = timedelta(hours=1)
        elif day < 0 or week < 0:
            unit = timedelta(days=1)
        elif day == 0 and week >= 0:
            delta = timedelta(days=week - _weekday(now))
            if delta < timedelta(0):
                delta = timedelta(days=7)
            unit += delta
    else:
        unit = timedelta(minutes=1)

    stable = 0
    if minute < 0:
        minute = now.minute
    if hour < 0:
        hour = now.hour
    else:
        stable |= _HOUR_SET
    if day < 0:
        day = now.day
    elif day > 0:
        stable |= _DAY_SET
    else:
        day = now.day
        if week >= 0:
            stable |= _WEEK_SET
    if month < 0:
        month = now.month
    else:
        stable |= _MONTH_SET

    if stable == _DAY_SET | _MONTH_SET:
        if timer.day != now.day or timer.month != now.month:
            hour = 0
    elif stable == _HOUR_SET | _MONTH_SET:
        if timer.month != now.month:
            day = 0
    elif stable == _MONTH_SET:
        if timer.month != now.month:
            day = 0
            hour = 0

    date = _normalized(
        now.year, month, day, hour, minute, now.second, now.microsecond, now.tzinfo
    )
    if unit > timedelta(0):
        date += unit

    if date <= now:
        if timer.month < 0:
            if timer.day > 0 or (timer.day == 0 and timer.week >= 0):
                date = _add_date(date, 0, 1, 0)
            elif timer.day < 0 or timer.week < 0:
                if timer.hour > 0:
                    date = _add_date(date, 0, 0, 1)
                elif timer.minute > 0:
                    date += timedelta(hours=1)
        else:
            date = _add_date(date, 1, 0, 0)

    if stable & _HOUR_SET and date.hour != hour:
        if not stable & _DAY_SET:
            date = _add_date(date, 0, 0, 1) - timedelta(hours=1)
        elif not stable & _WEEK_SET:
            date = _add_date(date, 0, 0, 7) - timedelta(hours=1)
        else:
            date = _add_date(date, 1, 0, 0) - timedelta(hours=1)

    if stable & _DAY_SET and date.day != day:
        date = _add_date(date, 1, 0, -1)

    if stable & _WEEK_SET and _weekday(date) != week:
        date = first_weekday(_add_date(date, 1, 0, 0), week)

    if date <= now:
        date = now + timedelta(minutes=1)
    return date


def is_due(timer: Timer, now: datetime) -> bool:
    """Whether an enabled calendar timer should fire at ``now``."""
    if not timer.enabled:
        return False
    if timer.month >= 0 and timer.month != now.month:
        return False
    if timer.day < 0 or timer.day == now.day:
        pass
    elif timer.day == 0:
        if timer.week >= 0 and timer.week != _weekday(now):
            return False
    else:
        return False
    hour_ok = timer.hour < 0 or timer.hour == now.hour
    minute_ok = timer.minute < 0 or timer.minute == now.minute
    return hour_ok and minute_ok