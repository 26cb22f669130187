"""Per-group folders of wife pictures, and drawing one for a member each day."""

from __future__ import annotations

import hashlib
import random
from dataclasses import dataclass
from datetime import date
from os import PathLike
from pathlib import Path

_DIGITS = "0123456789abcdefghijklmnopqrstuvwxyz"
NO_WIFE = "一个wife也没有哦~"
NO_NAME = "没有找到wife的名字！"


@dataclass(frozen=True)
class WifeDraw:
    """The drawn picture; ``shared`` when it is the only one in the group."""

    name: str
    path: Path
    shared: bool


def base36(number: int) -> str:
    """``number`` in base 36 with lower-case letters."""
    if number == 0:
        return "0"
    sign = "-" if number < 0 else ""
    remaining = abs(number)
    digits = []
    while remaining:
        remaining, digit = divmod(remaining, 36)
        digits.append(_DIGITS[digit])
    return sign + "".join(reversed(digits))


def group_folder(base: str | PathLike[str], group_id: int) -> Path:
    """The folder holding a group's pictures."""
    return Path(base) / base36(group_id)


def extract_name(text: str, keyword: str) -> str:
    """The wife name after the last ``keyword`` in a command, without spaces or slashes.

    Raises ValueError when the keyword is not in the text.
    """
    compact = text.replace(" ", "")
    index = compact.rfind(keyword)
    if index < 0:
        raise ValueError(f"{keyword} not found")
    name = compact[index + len(keyword):]
    return name.replace("/", "").replace("\\", "")


def _seed(nickname: str, today: date) -> int:
    digest = hashlib.md5(
        f"{nickname}{today.year}{today.month}{today.day}".encode("utf-8")
    ).digest()
    value = int.from_bytes(digest[:8], "little")
    return value - (1 << 64) if value >= 1 << 63 else value


def draw_wife(
    base: str | PathLike[str], group_id: int, nickname: str, today: date | None = None
) -> WifeDraw:
    """Draw a member's wife of the day; the same name on the same day draws the same one.

    Raises LookupError when the group has no pictures.
    """
    folder = group_folder(base, group_id)
    try:
        entries = sorted(folder.iterdir(), key=lambda p: p.name)
    except OSError as err:
        raise LookupError(NO_WIFE) from err
    if not entries:
        raise LookupError(NO_WIFE)
    if len(entries) == 1:
        return WifeDraw(entries[0].name, entries[0], True)
    if today is None:
        today = date.today()
    chosen = entries[random.Random(_seed(nickname, today)).randrange(len(entries))]
    return WifeDraw(chosen.name, chosen, False)


def _checked(name: str) -> str:
    if not name:
        raise ValueError(NO_NAME)
    if "/" in name or "\\" in name or name in (".", ".."):
        raise ValueError(f"invalid name: {name!r}")
    return name


def add_wife(base: str | PathLike[str], group_id: int, name: str, data: bytes) -> Path:
    """Store a picture under ``name`` in the group's folder and return its path."""
    name = _checked(name)
    folder = group_folder(base, group_id)
    folder.mkdir(parents=True, exist_ok=True)
    target = folder / name
    target.write_bytes(data)
    return target


def remove_wife(base: str | PathLike[str], group_id: int, name: str) -> None:
    """Delete a picture; raises FileNotFoundError when there is none by that name."""
    name = _checked(name)
    (group_folder(base, group_id) / name).unlink()


def can_add_wife(flags: int | None, is_admin: bool) -> bool:
    """Whether a member may add pictures.

    ``flags`` are the group's plugin flags, None when they are unavailable;
    bit 1 lets everyone add, otherwise only admins may.
    """
    if flags is None:
        return False
    if flags & 1:
        return True
    return is_admin