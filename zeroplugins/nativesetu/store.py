"""Local picture folders indexed by class in SQLite, with a difference hash per picture."""

from __future__ import annotations

import logging
import sqlite3
import threading
from collections.abc import Iterator
from dataclasses import dataclass
from os import PathLike
from pathlib import Path, PurePosixPath

from PIL import Image

log = logging.getLogger(__name__)

IMAGE_SUFFIXES = (".jpg", ".jpeg", ".png", ".gif", ".webp")
_HASH_SIZE = 8


def difference_hash(image: Image.Image) -> int:
    """A 64-bit difference hash of ``image``.

    The picture is shrunk to 9x8 and turned to grey; each bit, most
    significant first, tells whether a pixel is darker than its right
    neighbour.
    """
    small = image.convert("RGB").resize(
        (_HASH_SIZE + 1, _HASH_SIZE), Image.Resampling.BILINEAR
    )
    width, height = small.size
    data = small.tobytes()
    gray = [
        0.299 * r + 0.587 * g + 0.114 * b
        for r, g, b in zip(data[0::3], data[1::3], data[2::3])
    ]
    value = 0
    for y in range(height):
        row = gray[y * width:(y + 1) * width]
        for left, right in zip(row, row[1:]):
            value = (value << 1) | int(left < right)
    return value


def _signed64(value: int) -> int:
    return value - (1 << 64) if value >= 1 << 63 else value


def _quote(name: str) -> str:
    return '"' + name.replace('"', '""') + '"'


def _subdirectories(root: Path, rel: str = "") -> Iterator[str]:
    """Relative paths of every folder below ``root``, in sorted pre-order."""
    base = root / rel if rel else root
    for entry in sorted(base.iterdir(), key=lambda p: p.name):
        if entry.is_dir():
            child = f"{rel}/{entry.name}" if rel else entry.name
            yield child
            yield from _subdirectories(root, child)


@dataclass(frozen=True)
class SetuImage:
    """One indexed picture: its hash, file name and path relative to the root."""

    img_id: int
    name: str
    path: str


class SetuStore:
    """Pictures grouped by the name of the folder holding them, one table per class."""

    def __init__(self, db_path: str | PathLike[str]) -> None:
        self.db_path = Path(db_path)
        self._lock = threading.RLock()
        self._db: sqlite3.Connection | None = None

    def __enter__(self) -> "SetuStore":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def _connection(self) -> sqlite3.Connection:
        if self._db is None:
            self._db = sqlite3.connect(str(self.db_path), check_same_thread=False)
        return self._db

    def close(self) -> None:
        """Close the database; it is reopened when next needed."""
        with self._lock:
            if self._db is not None:
                self._db.close()
                self._db = None

    def list_classes(self) -> list[str]:
        """Names of all indexed classes, sorted; empty when nothing was indexed."""
        with self._lock:
            if not self.db_path.exists():
                return []
            rows = self._connection().execute(
                "SELECT name FROM sqlite_master WHERE type = 'table' "
                "AND name NOT LIKE 'sqlite_%' ORDER BY name"
            ).fetchall()
        return [row[0] for row in rows]

    def scan_all(self, root: str | PathLike[str]) -> None:
        """Rebuild the whole index from the folders below ``root``."""
        root = Path(root)
        with self._lock:
            self.close()
            self.db_path.unlink(missing_ok=True)
            for relpath in _subdirectories(root):
                self.scan_class(root, relpath, PurePosixPath(relpath).name)

    def scan_class(self, root: str | PathLike[str], path: str, name: str) -> None:
        """Re-index the pictures directly inside ``root/path`` as class ``name``.

        Raises OSError when a folder cannot be read or a picture cannot be decoded.
        """
        folder = Path(root) / path
        entries = sorted(folder.iterdir(), key=lambda p: p.name)
        table = _quote(name)
        with self._lock:
            db = self._connection()
            db.execute(f"DROP TABLE IF EXISTS {table}")
            db.execute(
                f"CREATE TABLE {table} "
                "(imgid INTEGER PRIMARY KEY NOT NULL, name TEXT, path TEXT)"
            )
            db.commit()
        for entry in entries:
            if entry.is_dir() or not entry.name.lower().endswith(IMAGE_SUFFIXES):
                continue
            relpath = f"{path}/{entry.name}"
            log.debug("[nsetu] read %s", relpath)
            with Image.open(entry) as image:
                img_id = _signed64(difference_hash(image))
            log.debug("[nsetu] insert %s with id %d into %s", entry.name, img_id, name)
            with self._lock:
                db = self._connection()
                db.execute(
                    f"REPLACE INTO {table} (imgid, name, path) VALUES (?, ?, ?)",
                    (img_id, entry.name, relpath),
                )
                db.commit()

    def _require(self, name: str) -> None:
        if name not in self.list_classes():
            raise LookupError(f"no such class: {name}")

    def pick(self, name: str) -> SetuImage:
        """A random picture of class ``name``; raises LookupError if there is none."""
        with self._lock:
            self._require(name)
            row = self._connection().execute(
                f"SELECT imgid, name, path FROM {_quote(name)} ORDER BY RANDOM() LIMIT 1"
            ).fetchone()
        if row is None:
            raise LookupError(f"class {name} is empty")
        return SetuImage(*row)

    def count(self, name: str) -> int:
        """How many pictures class ``name`` holds; raises LookupError for an unknown class."""
        with self._lock:
            self._require(name)
            (total,) = self._connection().execute(
                f"SELECT COUNT(*) FROM {_quote(name)}"
            ).fetchone()
        return total