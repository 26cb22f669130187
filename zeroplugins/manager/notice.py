"""Welcome and farewell messages, the join quiz and the per-group switches."""

from __future__ import annotations

import random
import re
import sqlite3
import threading
from os import PathLike

_ENABLE_WORDS = frozenset({"开启", "打开", "启用"})
_DISABLE_WORDS = frozenset({"关闭", "关掉", "禁用"})
_JOIN_VERIFICATION = 0x1
_GIST_APPROVAL = 0x10
_INTEGER = re.compile(r"[+-]?[0-9]+")
_ANSWER_MARKER = "答案：".encode("utf-8")
FORMAT_ERROR = "格式错误!"


class GreetingStore:
    """Per-group welcome and farewell templates kept in SQLite."""

    _TABLES = ("welcome", "farewell")

    def __init__(self, path: str | PathLike[str]) -> None:
        self._lock = threading.Lock()
        self._db = sqlite3.connect(str(path), check_same_thread=False)
        with self._lock:
            for table in self._TABLES:
                self._db.execute(
                    f"CREATE TABLE IF NOT EXISTS {table} "
                    "(gid INTEGER PRIMARY KEY NOT NULL, msg TEXT)"
                )
            self._db.commit()

    def __enter__(self) -> "GreetingStore":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def _set(self, table: str, group_id: int, text: str) -> None:
        with self._lock:
            self._db.execute(
                f"REPLACE INTO {table} (gid, msg) VALUES (?, ?)", (group_id, text)
            )
            self._db.commit()

    def _get(self, table: str, group_id: int) -> str | None:
        with self._lock:
            row = self._db.execute(
                f"SELECT msg FROM {table} WHERE gid = ?", (group_id,)
            ).fetchone()
        return None if row is None else row[0]

    def set_welcome(self, group_id: int, text: str) -> None:
        """Store the group's welcome template, replacing any earlier one."""
        self._set("welcome", group_id, text)

    def welcome(self, group_id: int) -> str | None:
        """The group's welcome template, or None when none was set."""
        return self._get("welcome", group_id)

    def set_farewell(self, group_id: int, text: str) -> None:
        """Store the group's farewell template, replacing any earlier one."""
        self._set("farewell", group_id, text)

    def farewell(self, group_id: int) -> str | None:
        """The group's farewell template, or None when none was set."""
        return self._get("farewell", group_id)

    def close(self) -> None:
        with self._lock:
            self._db.close()


def render_greeting(
    template: str, user_id: int, nickname: str, group_id: int, group_name: str
) -> str:
    """Fill the {at}, {nickname}, {avatar}, {uid}, {gid} and {groupname} placeholders."""
    uid = str(user_id)
    replacements = (
        ("{at}", f"[CQ:at,qq={uid}]"),
        ("{nickname}", nickname),
        ("{avatar}", f"[CQ:image,file=http://q4.qlogo.cn/g?b=qq&nk={uid}&s=640]"),
        ("{uid}", uid),
        ("{gid}", str(group_id)),
        ("{groupname}", group_name),
    )
    text = template
    for placeholder, value in replacements:
        text = text.replace(placeholder, value)
    return text


def make_question(rng: random.Random | None = None) -> tuple[int, int]:
    """Two addends, each in 0-99, for the join quiz; the answer is their sum."""
    rng = rng or random.Random()
    return rng.randrange(100), rng.randrange(100)


def check_answer(text: str, expected: int) -> bool | None:
    """Judge a quiz reply: None if it is not a number, else whether it is right.

    Spaces anywhere in the reply are ignored.
    """
    compact = text.replace(" ", "")
    if not _INTEGER.fullmatch(compact):
        return None
    return int(compact) == expected


def _toggle(data: int, option: str, bit: int, clear_mask: int) -> int | None:
    if option in _ENABLE_WORDS:
        return data | bit
    if option in _DISABLE_WORDS:
        return data & clear_mask
    return None


def toggle_join_verification(data: int, option: str) -> int | None:
    """Switch the join quiz bit by an option word; None for an unknown word."""
    return _toggle(data, option, _JOIN_VERIFICATION, 0x7FFFFFFF_FFFFFFFE)


def toggle_gist_approval(data: int, option: str) -> int | None:
    """Switch gist approval by an option word; None for an unknown word.

    Enabling sets bit 0x10; disabling clears bit 0x2, as the stored flags
    have always been written.
    """
    return _toggle(data, option, _GIST_APPROVAL, 0x7FFFFFFF_FFFFFFFD)


def parse_join_answer(comment: str) -> tuple[str, str]:
    """Split the answer of a join request into GitHub user name and gist hash.

    The answer follows "答案：" and has the form ``user/hash``.  Raises
    ValueError with the rejection reason when it does not.
    """
    raw = comment.encode("utf-8")
    start = raw.find(_ANSWER_MARKER) + len(_ANSWER_MARKER)
    if start > len(raw):
        raise ValueError(FORMAT_ERROR)
    answer = raw[start:]
    slash = answer.find(b"/")
    if slash <= 0:
        raise ValueError(FORMAT_ERROR)
    ghun = answer[:slash].decode("utf-8", "replace")
    gist_hash = answer[slash + 1:].decode("utf-8", "replace")
    return ghun, gist_hash