"""Cron expressions and a small background scheduler that runs jobs by them."""

from __future__ import annotations

import logging
import re
import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta

log = logging.getLogger(__name__)

_MONTHS = {
    name: number
    for number, name in enumerate(
        ("jan", "feb", "mar", "apr", "may", "jun", "jul", "aug", "sep", "oct", "nov", "dec"),
        start=1,
    )
}
_WEEKDAYS = {
    name: number
    for number, name in enumerate(("sun", "mon", "tue", "wed", "thu", "fri", "sat"))
}
_DESCRIPTORS = {
    "@yearly": "0 0 1 1 *",
    "@annually": "0 0 1 1 *",
    "@monthly": "0 0 1 * *",
    "@weekly": "0 0 * * 0",
    "@daily": "0 0 * * *",
    "@midnight": "0 0 * * *",
    "@hourly": "0 * * * *",
}
_DIGITS = re.compile(r"[0-9]+")
_DURATION_PART = re.compile(r"([0-9]+(?:\.[0-9]*)?|\.[0-9]+)(ns|us|µs|ms|s|m|h)")
_DURATION_UNITS = {
    "ns": timedelta(microseconds=0.001),
    "us": timedelta(microseconds=1),
    "µs": timedelta(microseconds=1),
    "ms": timedelta(milliseconds=1),
    "s": timedelta(seconds=1),
    "m": timedelta(minutes=1),
    "h": timedelta(hours=1),
}
_SEARCH_DAYS = 366 * 5
_MAX_WAIT = 60.0


def _parse_number(text: str, names: dict[str, int] | None, label: str) -> int:
    if names and text.lower() in names:
        return names[text.lower()]
    if not _DIGITS.fullmatch(text):
        raise ValueError(f"failed to parse {label} value {text!r}")
    return int(text)


def _parse_field(
    text: str, low: int, high: int, names: dict[str, int] | None, label: str
) -> tuple[frozenset[int], bool]:
    """Parse one field; the flag tells whether it was written as a plain star."""
    values: set[int] = set()
    star = False
    for part in text.split(","):
        range_text, slash, step_text = part.partition("/")
        if range_text in ("*", "?"):
            start, end, part_star = low, high, True
        else:
            first, dash, last = range_text.partition("-")
            start = _parse_number(first, names, label)
            end = _parse_number(last, names, label) if dash else start
            if slash and not dash:  # "N/step" means "N-max/step"
                end = high
            part_star = False
        step = 1
        if slash:
            step = _parse_number(step_text, None, label)
            if step == 0:
                raise ValueError(f"step of {label} range should be a positive number: {part!r}")
            if step > 1:
                part_star = False
        if start < low:
            raise ValueError(f"{label} beginning of range ({start}) below minimum ({low}): {part!r}")
        if end > high:
            raise ValueError(f"{label} end of range ({end}) above maximum ({high}): {part!r}")
        if start > end:
            raise ValueError(f"{label} beginning of range ({start}) beyond end of range ({end}): {part!r}")
        values.update(range(start, end + 1, step))
        star = star or part_star
    return frozenset(values), star


def _parse_duration(text: str) -> timedelta:
    if text == "0":
        total = timedelta(0)
    else:
        position = 0
        total = timedelta(0)
        while position < len(text):
            match = _DURATION_PART.match(text, position)
            if match is None:
                raise ValueError(f"invalid duration {text!r}")
            total += float(match.group(1)) * _DURATION_UNITS[match.group(2)]
            position = match.end()
        if not text:
            raise ValueError("empty duration")
    if total < timedelta(seconds=1):
        total = timedelta(seconds=1)
    return timedelta(seconds=int(total.total_seconds()))


@dataclass(frozen=True)
class CronSchedule:
    """A five-field cron schedule (minute hour day-of-month month day-of-week).

    Descriptors such as ``@daily`` and ``@every 1h30m`` are accepted too.  When
    either day field is a plain star both day fields must match; otherwise a
    day matching either one is enough.
    """

    minutes: frozenset[int] = field(default_factory=frozenset)
    hours: frozenset[int] = field(default_factory=frozenset)
    days: frozenset[int] = field(default_factory=frozenset)
    months: frozenset[int] = field(default_factory=frozenset)
    weekdays: frozenset[int] = field(default_factory=frozenset)
    dom_star: bool = False
    dow_star: bool = False
    every: timedelta | None = None

    @classmethod
    def parse(cls, expr: str) -> "CronSchedule":
        """Parse a cron expression, raising ValueError when it is malformed."""
        text = expr.strip()
        if text.startswith("@every "):
            return cls(every=_parse_duration(text[len("@every "):].strip()))
        if text.startswith("@"):
            mapped = _DESCRIPTORS.get(text.lower())
            if mapped is None:
                raise ValueError(f"unrecognized descriptor: {text!r}")
            text = mapped
        fields = text.split()
        if len(fields) != 5:
            raise ValueError(f"expected exactly 5 fields, found {len(fields)}: {expr!r}")
        minutes, _ = _parse_field(fields[0], 0, 59, None, "minute")
        hours, _ = _parse_field(fields[1], 0, 23, None, "hour")
        days, dom_star = _parse_field(fields[2], 1, 31, None, "day of month")
        months, _ = _parse_field(fields[3], 1, 12, _MONTHS, "month")
        weekdays, dow_star = _parse_field(fields[4], 0, 6, _WEEKDAYS, "day of week")
        return cls(minutes, hours, days, months, weekdays, dom_star, dow_star)

    def _day_matches(self, day: date) -> bool:
        dom = day.day in self.days
        dow = day.isoweekday() % 7 in self.weekdays
        if self.dom_star or self.dow_star:
            return dom and dow
        return dom or dow

    def next_after(self, when: datetime) -> datetime | None:
        """The first activation strictly after ``when``; None if none within five years."""
        if self.every is not None:
            return when.replace(microsecond=0) + self.every
        start = when.replace(second=0, microsecond=0) + timedelta(minutes=1)
        hours = sorted(self.hours)
        minutes = sorted(self.minutes)
        day = start.date()
        for _ in range(_SEARCH_DAYS):
            if day.month in self.months and self._day_matches(day):
                first_day = day == start.date()
                for hour in hours:
                    if first_day and hour < start.hour:
                        continue
                    for minute in minutes:
                        if first_day and hour == start.hour and minute < start.minute:
                            continue
                        return datetime.combine(day, time(hour, minute), tzinfo=when.tzinfo)
            day += timedelta(days=1)
        return None


@dataclass
class _Entry:
    schedule: CronSchedule
    func: Callable[[], object]
    next_run: datetime | None


class CronScheduler:
    """Runs registered functions in their own threads whenever their schedule comes due."""

    def __init__(self, clock: Callable[[], datetime] | None = None) -> None:
        self._clock = clock or datetime.now
        self._entries: dict[int, _Entry] = {}
        self._last_id = 0
        self._cond = threading.Condition()
        self._running = False
        self._thread: threading.Thread | None = None

    def __contains__(self, entry_id: object) -> bool:
        with self._cond:
            return entry_id in self._entries

    def __len__(self) -> int:
        with self._cond:
            return len(self._entries)

    def add(self, expr: str, func: Callable[[], object]) -> int:
        """Schedule ``func`` by ``expr`` and return the entry's id (ids start at 1)."""
        schedule = CronSchedule.parse(expr)
        with self._cond:
            self._last_id += 1
            entry_id = self._last_id
            self._entries[entry_id] = _Entry(schedule, func, schedule.next_after(self._clock()))
            self._cond.notify_all()
        return entry_id

    def remove(self, entry_id: int) -> None:
        """Drop an entry; unknown ids are ignored."""
        with self._cond:
            self._entries.pop(entry_id, None)
            self._cond.notify_all()

    def start(self) -> None:
        """Start the background thread; does nothing if it is already running."""
        with self._cond:
            if self._running:
                return
            self._running = True
            self._thread = threading.Thread(target=self._run, name="cron", daemon=True)
            self._thread.start()

    def stop(self) -> None:
        """Stop the background thread and wait for it to finish."""
        with self._cond:
            self._running = False
            self._cond.notify_all()
            thread, self._thread = self._thread, None
        if thread is not None and thread is not threading.current_thread():
            thread.join()

    def _run(self) -> None:
        with self._cond:
            while self._running:
                now = self._clock()
                for entry in self._entries.values():
                    if entry.next_run is not None and entry.next_run <= now:
                        threading.Thread(target=entry.func, daemon=True).start()
                        entry.next_run = entry.schedule.next_after(now)
                pending = [
                    (entry.next_run - now).total_seconds()
                    for entry in self._entries.values()
                    if entry.next_run is not None
                ]
                timeout = min(pending, default=_MAX_WAIT)
                self._cond.wait(min(max(timeout, 0.01), _MAX_WAIT))