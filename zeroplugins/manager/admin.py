"""Small rules behind the group administration commands."""

from __future__ import annotations

import random
from collections.abc import Mapping, Sequence
from typing import Any

MAX_BAN_MINUTES = 43199  # a ban may not reach a month

_UNITS = {"分钟": 1, "小时": 60, "天": 60 * 24}
_EXTENDED_UNITS = {
    **_UNITS,
    "min": 1,
    "mins": 1,
    "m": 1,
    "hour": 60,
    "hours": 60,
    "h": 60,
    "day": 60 * 24,
    "days": 60 * 24,
    "d": 60 * 24,
}
_MAX_CARD_BYTES = 60
_MAX_TITLE_BYTES = 18
_CANDIDATES = 10


def ban_minutes(amount: int, unit: str, extended: bool = False) -> int:
    """Length of a ban in minutes, capped just below a month.

    ``unit`` is 分钟, 小时 or 天; with ``extended`` the English forms used by
    the self-ban command are understood too.  Unknown units mean minutes.
    """
    units = _EXTENDED_UNITS if extended else _UNITS
    minutes = amount * units.get(unit, 1)
    return MAX_BAN_MINUTES if minutes >= MAX_BAN_MINUTES + 1 else minutes


def unescape_brackets(text: str) -> str:
    """Turn escaped square brackets back into CQ code brackets."""
    return text.replace("&#91;", "[").replace("&#93;", "]")


def card_ok(card: str) -> bool:
    """Whether a group card fits in 60 bytes."""
    return len(card.encode("utf-8")) <= _MAX_CARD_BYTES


def title_ok(title: str) -> bool:
    """Whether a special title fits in 18 bytes."""
    return len(title.encode("utf-8")) <= _MAX_TITLE_BYTES


def pick_lucky_member(
    members: Sequence[Mapping[str, Any]], rng: random.Random | None = None
) -> Mapping[str, Any]:
    """Pick at random one of the ten members who spoke most recently.

    Raises ValueError when there are no members.
    """
    if not members:
        raise ValueError("no members to pick from")
    rng = rng or random.Random()
    ordered = sorted(members, key=lambda m: int(m.get("last_sent_time", 0)))
    recent = ordered[-_CANDIDATES:]
    return recent[rng.randrange(len(recent))]