"""Approving group join requests with a timestamp published in a GitHub gist."""

from __future__ import annotations

import hashlib
import logging
import re
import sqlite3
import threading
import time
from collections.abc import Callable
from datetime import datetime
from os import PathLike

import requests

log = logging.getLogger(__name__)

GIST_RAW = "https://gist.githubusercontent.com/{}/{}/raw/{}"
_VALID_FOR = 600
_INTEGER = re.compile(r"[+-]?[0-9]+")


class MemberStore:
    """Which GitHub user joined as which QQ account."""

    def __init__(self, path: str | PathLike[str]) -> None:
        self._lock = threading.Lock()
        self._db = sqlite3.connect(str(path), check_same_thread=False)
        with self._lock:
            self._db.execute(
                "CREATE TABLE IF NOT EXISTS member (qq INTEGER PRIMARY KEY NOT NULL, ghun TEXT)"
            )
            self._db.commit()

    def __enter__(self) -> "MemberStore":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def has_github_user(self, ghun: str) -> bool:
        """Whether some member already joined with this GitHub user name."""
        with self._lock:
            row = self._db.execute(
                "SELECT 1 FROM member WHERE ghun = ? LIMIT 1", (ghun,)
            ).fetchone()
        return row is not None

    def add(self, qq: int, ghun: str) -> None:
        """Record a member, replacing an earlier record for the same QQ."""
        with self._lock:
            self._db.execute("REPLACE INTO member (qq, ghun) VALUES (?, ?)", (qq, ghun))
            self._db.commit()

    def close(self) -> None:
        with self._lock:
            self._db.close()


def gist_url(ghun: str, gist_hash: str, group_id: int) -> str:
    """Raw URL of the gist file named by the MD5 of the group number."""
    file_name = hashlib.md5(str(group_id).encode("ascii")).hexdigest()
    return GIST_RAW.format(ghun, gist_hash, file_name)


def _fetch(url: str) -> bytes:
    response = requests.get(url, timeout=30)
    response.raise_for_status()
    return response.content


def check_new_user(
    store: MemberStore,
    qq: int,
    group_id: int,
    ghun: str,
    gist_hash: str,
    fetch: Callable[[str], bytes] | None = None,
    now: float | datetime | None = None,
) -> tuple[bool, str]:
    """Verify a join request; return whether to approve it and, if not, why.

    The gist must hold a Unix timestamp less than ten minutes from ``now``.
    An approved user is recorded in ``store``.
    """
    if store.has_github_user(ghun):
        return False, "该github用户已入群"
    if fetch is None:
        fetch = _fetch
    if now is None:
        now = time.time()
    elif isinstance(now, datetime):
        now = now.timestamp()
    url = gist_url(ghun, gist_hash, group_id)
    log.debug("[gist]visit url: %s", url)
    try:
        data = fetch(url)
    except (requests.RequestException, OSError) as err:
        return False, "无法连接到gist: " + str(err)
    text = data.decode("utf-8", "replace")
    log.debug("[gist]get data: %s", text)
    if not _INTEGER.fullmatch(text) or not -(2**63) <= int(text) < 2**63:
        return False, "时间戳格式错误: " + text
    if abs(int(now) - int(text)) < _VALID_FOR:
        store.add(qq, ghun)
        return True, ""
    return False, "时间戳超时"