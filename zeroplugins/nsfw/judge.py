"""Verdicts on the scores an image classifier gives a picture."""

from __future__ import annotations

from dataclasses import dataclass

HSO_IMAGE = "https://gchat.qpic.cn/gchatpic_new//--4234EDEC5F147A4C319A41149D7E0EA9/0"
_THRESHOLD = 0.3


@dataclass(frozen=True)
class Scores:
    """Class probabilities for one picture."""

    drawings: float = 0.0
    hentai: float = 0.0
    neutral: float = 0.0
    porn: float = 0.0
    sexy: float = 0.0


def _flags(scores: Scores) -> list[str]:
    labels = (
        (scores.hentai, "hentai"),
        (scores.porn, "porn"),
        (scores.sexy, "hso"),
    )
    return [label for value, label in labels if value > _THRESHOLD]


def judge(scores: Scores) -> str:
    """The verdict sent when someone asks for a picture to be rated."""
    if scores.neutral > _THRESHOLD:
        return "普通哦"
    if scores.drawings > _THRESHOLD or scores.neutral < _THRESHOLD:
        kind = "二次元"
    else:
        kind = "三次元"
    return "".join([kind, *(" " + flag for flag in _flags(scores))])


def auto_judge(scores: Scores) -> str | None:
    """The verdict for automatic checking, or None when nothing is worth saying.

    A reply is only due when the picture is not neutral and at least one
    of hentai, porn or sexy scores above the threshold.
    """
    if scores.neutral > _THRESHOLD:
        return None
    flags = _flags(scores)
    if not flags:
        return None
    kind = "二次元" if scores.drawings > _THRESHOLD else "三次元"
    return "".join([kind, *(" " + flag for flag in flags)])