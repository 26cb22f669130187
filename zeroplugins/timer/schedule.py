"""When a date timer next wakes up, and whether it fires at a given moment."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, tzinfo

from .model import Timer

log = logging.getLogger(__name__)

_DAY = timedelta(days=1)
_HOUR = timedelta(hours=1)
_MINUTE = timedelta(minutes=1)


def _weekday(date: datetime) -> int:
    """Weekday with Sunday as 0."""
    return date.isoweekday() % 7


def _make_date(
    year: int,
    month: int,
    day: int,
    hour: int,
    minute: int,
    second: int,
    microsecond: int,
    tz: tzinfo | None,
) -> datetime:
    """Build a datetime, carrying out-of-range fields into the next larger unit."""
    carry, month_index = divmod(month - 1, 12)
    start = datetime(year + carry, month_index + 1, 1, tzinfo=tz)
    return start + timedelta(
        days=day - 1, hours=hour, minutes=minute, seconds=second, microseconds=microsecond
    )


def _add_date(date: datetime, years: int, months: int, days: int) -> datetime:
    return _make_date(
        date.year + years,
        date.month + months,
        date.day + days,
        date.hour,
        date.minute,
        date.second,
        date.microsecond,
        date.tzinfo,
    )


def first_weekday(date: datetime, week: int) -> datetime:
    """The first day of ``date``'s month falling on ``week`` (Sunday is 0)."""
    if not 0 <= week <= 6:
        raise ValueError(f"weekday out of range: {week}")
    day = _add_date(date, 0, 0, 1 - date.day)
    while _weekday(day) != week:
        day = _add_date(day, 0, 0, 1)
    return day


def next_wake_time(timer: Timer, now: datetime | None = None) -> datetime:
    """The moment a date timer should next wake up, always after ``now``."""
    if now is None:
        now = datetime.now()
    date = now
    m, d, h, mn, w = timer.month, timer.day, timer.hour, timer.minute, timer.week

    unit = timedelta(0)
    if mn >= 0:
        if h < 0:
            unit = _HOUR
        elif d < 0 or w < 0:
            unit = _DAY
        elif d == 0 and w >= 0:
            delta = _DAY * (w - _weekday(date))
            if delta < timedelta(0):
                delta = _DAY * 7
            unit += delta
        elif m < 0:
            unit = -timedelta(microseconds=1)
    else:
        unit = _MINUTE
    log.debug("[timer] unit: %s", unit)

    stable = 0
    if mn < 0:
        mn = date.minute
    if h < 0:
        h = date.hour
    else:
        stable |= 0x8
    if d < 0:
        d = date.day
    elif d > 0:
        stable |= 0x4
    else:
        d = date.day
        if w >= 0:
            stable |= 0x2
    if m < 0:
        m = date.month
    else:
        stable |= 0x1

    if stable == 0b0101:
        if timer.day != now.day or timer.month != now.month:
            h = 0
    elif stable == 0b1001:
        if timer.month != now.month:
            d = 0
    elif stable == 0b0001:
        if timer.month != now.month:
            d = 0
            h = 0
    log.debug("[timer] stable: %d m: %d d: %d h: %d mn: %d w: %d", stable, m, d, h, mn, w)

    date = _make_date(date.year, m, d, h, mn, date.second, date.microsecond, date.tzinfo)
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
                    date += _HOUR
        else:
            date = _add_date(date, 1, 0, 0)

    if stable & 0x8 and date.hour != h:
        if not stable & 0x4:
            date = _add_date(date, 0, 0, 1) - _HOUR
        elif not stable & 0x2:
            date = _add_date(date, 0, 0, 7) - _HOUR
        else:
            date = _add_date(date, 1, 0, 0) - _HOUR

    if stable & 0x4 and date.day != d:
        date = _add_date(date, 1, 0, -1)

    if stable & 0x2 and _weekday(date) != w:
        date = first_weekday(_add_date(date, 1, 0, 0), w)

    if date <= now:
        date = now + _MINUTE
    log.debug("[timer] next wake: %s", date)
    return date


def is_due(timer: Timer, now: datetime | None = None) -> bool:
    """Whether the timer's date fields match ``now``; its enabled flag is not looked at."""
    if now is None:
        now = datetime.now()
    if timer.month >= 0 and timer.month != now.month:
        return False
    if timer.day < 0 or timer.day == now.day:
        pass
    elif timer.day == 0:
        if timer.week >= 0 and timer.week != _weekday(now):
            return False
    else:
        return False
    if timer.hour >= 0 and timer.hour != now.hour:
        return False
    return timer.minute < 0 or timer.minute == now.minute