"""Senso-ji fortune slips and their explanations."""

from __future__ import annotations

import sqlite3
import threading
from os import PathLike

BED = "https://gitcode.net/u011570312/senso-ji-omikuji/-/raw/main/{}_{}.jpg"


class KujiStore:
    """The explanation texts of the hundred slips, kept in SQLite."""

    def __init__(self, path: str | PathLike[str]) -> None:
        self._lock = threading.Lock()
        self._db = sqlite3.connect(str(path), check_same_thread=False)
        with self._lock:
            self._db.execute(
                "CREATE TABLE IF NOT EXISTS kuji (id INTEGER PRIMARY KEY NOT NULL, text TEXT)"
            )
            self._db.commit()

    def __enter__(self) -> "KujiStore":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def __len__(self) -> int:
        with self._lock:
            (total,) = self._db.execute("SELECT COUNT(*) FROM kuji").fetchone()
        return total

    def text(self, number: int) -> str:
        """The explanation of slip ``number``; raises LookupError when it is missing."""
        with self._lock:
            row = self._db.execute(
                "SELECT text FROM kuji WHERE id = ?", (number,)
            ).fetchone()
        if row is None:
            raise LookupError(f"no kuji numbered {number}")
        return row[0]

    def close(self) -> None:
        with self._lock:
            self._db.close()


def image_urls(number: int) -> tuple[str, str]:
    """The front and back images of slip ``number``."""
    return BED.format(number, 0), BED.format(number, 1)