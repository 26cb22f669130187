"""Reminder timers whose date fields are packed into one integer."""

from __future__ import annotations

import hashlib
from dataclasses import dataclass

_ENABLED = 0x800000
_ALL_FIELDS = 0xFFFFFF


def _packed_field(shift: int, width: int, doc: str) -> property:
    """A property reading and writing ``width`` bits of ``packed``; all ones means -1."""
    all_ones = (1 << width) - 1
    mask = all_ones << shift

    def fget(self: "Timer") -> int:
        value = (self.packed & mask) >> shift
        return -1 if value == all_ones else value

    def fset(self: "Timer", value: int) -> None:
        self.packed = ((value << shift) & mask) | (self.packed & (_ALL_FIELDS ^ mask))

    return property(fget, fset, doc=doc)


@dataclass
class Timer:
    """A group reminder, either date based or driven by a cron expression.

    ``packed`` holds, from the high bits down: enabled (1 bit), month (4),
    day (5), weekday (3, Sunday is 0), hour (5) and minute (6).  A field whose
    bits are all set reads as -1, meaning "every".
    """

    id: int = 0
    packed: int = 0
    self_id: int = 0
    group_id: int = 0
    alert: str = ""
    cron: str = ""
    url: str = ""

    month = _packed_field(19, 4, "Month 1-12, -1 for every month, 0 when unset.")
    day = _packed_field(14, 5, "Day of month, -1 for every day, 0 when unset.")
    week = _packed_field(11, 3, "Weekday with Sunday as 0, -1 for every week.")
    hour = _packed_field(6, 5, "Hour 0-23, -1 for every hour.")
    minute = _packed_field(0, 6, "Minute 0-59, -1 for every minute.")

    @property
    def enabled(self) -> bool:
        """Whether the timer is active."""
        return self.packed & _ENABLED != 0

    @enabled.setter
    def enabled(self, value: bool) -> None:
        if value:
            self.packed |= _ENABLED
        else:
            self.packed &= 0x7FFFFF

    def info(self) -> str:
        """The normalised description the timer's identity is derived from."""
        if self.cron:
            return f"[{self.group_id}]{self.cron}"
        return (
            f"[{self.group_id}]{self.month}月{self.day}日{self.week}周"
            f"{self.hour}:{self.minute}"
        )

    def timer_id(self) -> int:
        """A 32-bit identifier: the first four bytes of the MD5 of :meth:`info`."""
        digest = hashlib.md5(self.info().encode("utf-8")).digest()
        return int.from_bytes(digest[:4], "little")