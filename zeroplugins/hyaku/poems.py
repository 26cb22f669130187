"""The hundred poems of the Ogura Hyakunin Isshu."""

from __future__ import annotations

import csv
import random
from collections.abc import Sequence
from dataclasses import dataclass, fields
from os import PathLike

BED = "https://gitcode.net/u011570312/OguraHyakuninIsshu/-/raw/master/"
POEM_COUNT = 100
_INVALID = "invalid csvfile"
_MARKS = ("●", "◉", "○", "○", "◎", "◎")
_LABELS = ("番号", "歌人", "上の句", "下の句", "上の句ひらがな", "下の句ひらがな")


@dataclass(frozen=True)
class Poem:
    """One poem: its number, poet, both halves and their kana readings."""

    number: str
    poet: str
    upper: str
    lower: str
    upper_kana: str
    lower_kana: str

    def __str__(self) -> str:
        values = (getattr(self, f.name) for f in fields(self))
        return "".join(
            f"{mark}{label}：{value}\n" for mark, label, value in zip(_MARKS, _LABELS, values)
        )


def load_poems(path: str | PathLike[str]) -> list[Poem]:
    """Read the poem table, skipping its title row.

    Raises ValueError unless it holds exactly 100 rows of six fields,
    numbered 1 to 100 in order.
    """
    with open(path, encoding="utf-8-sig", newline="") as handle:
        records = list(csv.reader(handle))
    records = records[1:]
    if len(records) != POEM_COUNT:
        raise ValueError(_INVALID)
    poems = []
    for expected, record in enumerate(records, start=1):
        if len(record) != 6:
            raise ValueError(_INVALID)
        if int(record[0]) != expected:
            raise ValueError(_INVALID)
        poems.append(Poem(*record))
    return poems


def image_urls(number: int) -> tuple[str, str]:
    """The picture and the calligraphy image of poem ``number``."""
    return f"{BED}img/{number:03d}.jpg", f"{BED}img/{number:03d}.png"


def pick(poems: Sequence[Poem], number: int | None = None) -> Poem:
    """Poem ``number`` (1-based), or a random one when no number is given.

    Raises ValueError when the number is out of range.
    """
    if number is None:
        return poems[random.randrange(len(poems))]
    if number < 1 or number > POEM_COUNT or number > len(poems):
        raise ValueError("超出范围")
    return poems[number - 1]