"""Holiday countdowns for the daily slacking-off reminder."""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, timedelta

HOLIDAY_NAMES = ("元旦", "春节", "清明节", "劳动节", "端午节", "中秋节", "国庆节")
GREETING = (
    "上午好，摸鱼人！\n工作再累，一定不要忘记摸鱼哦！有事没事起身去茶水间，去厕所，"
    "去廊道走走别老在工位上坐着，钱是老板的,但命是自己的。\n"
)
CLOSING = "上班是帮老板赚钱，摸鱼是赚老板的钱！最后，祝愿天下所有摸鱼人，都能愉快的渡过每一天…"

_RECORD = re.compile(r"([+-]?\d+)_([+-]?\d+)_([+-]?\d+)_([+-]?\d+)")


def _local_date(year: int, month: int, day: int) -> datetime:
    """Midnight of a date, carrying out-of-range months and days over."""
    carry, month_index = divmod(month - 1, 12)
    return datetime(year + carry, month_index + 1, 1) + timedelta(days=day - 1)


def _weekday(now: datetime) -> int:
    return now.isoweekday() % 7


@dataclass(frozen=True)
class Holiday:
    """A holiday starting at local midnight of ``date`` and lasting ``duration``."""

    name: str
    date: datetime
    duration: timedelta

    @classmethod
    def parse(cls, name: str, record: str) -> "Holiday":
        """Read a ``days_year_month_day`` record; raises ValueError if malformed."""
        match = _RECORD.fullmatch(record.strip())
        if match is None:
            raise ValueError(f"malformed holiday record: {record!r}")
        days, year, month, day = (int(part) for part in match.groups())
        return cls(name, _local_date(year, month, day), timedelta(days=days))

    def to_record(self) -> str:
        """The ``days_year_month_day`` form :meth:`parse` reads."""
        return f"{self.duration.days}_{self.date.year}_{self.date.month}_{self.date.day}"

    def describe(self, now: datetime | None = None) -> str:
        """How far away the holiday is, whether it is on, or that it is over."""
        if now is None:
            now = datetime.now()
        until = self.date - now
        if until >= timedelta(0):
            days = until.total_seconds() / 86400.0
            return f"距离{self.name}还有: {days:.2f}天！"
        if until + self.duration >= timedelta(0):
            return f"好好享受 {self.name} 假期吧!"
        return f"今年 {self.name} 假期已过"


def weekend_message(now: datetime | None = None) -> str:
    """Days left until the weekend, or a note that it is the weekend."""
    if now is None:
        now = datetime.now()
    weekday = _weekday(now)
    if weekday in (0, 6):
        return "好好享受周末吧！"
    return f"距离周末还有:{5 - weekday}天！"


def build_reminder(holidays: Iterable[Holiday], now: datetime | None = None) -> str:
    """The full reminder text: date, greeting, weekend and holiday countdowns."""
    if now is None:
        now = datetime.now()
    parts = [now.strftime("%Y-%m-%d"), GREETING, weekend_message(now)]
    for holiday in holidays:
        parts.append("\n")
        parts.append(holiday.describe(now))
    parts.append("\n")
    parts.append(CLOSING)
    return "".join(parts)