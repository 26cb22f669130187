"""The reminder clock: keeps timers in SQLite and sends their alerts."""

from __future__ import annotations

import logging
import sqlite3
import threading
from collections.abc import Callable
from datetime import datetime
from os import PathLike
from typing import Any

from .cron import CronScheduler
from .model import Timer
from .schedule import is_due, next_wake_time

log = logging.getLogger(__name__)

Segment = dict[str, Any]
Sender = Callable[[int, int, list[Segment]], object]

_COLUMNS = "id, emdwhm, sid, gid, alert, cron, url"


def alert_message(timer: Timer) -> list[Segment]:
    """The message a timer sends: @all, its alert text, and its image if it has one."""
    message: list[Segment] = [
        {"type": "at", "data": {"qq": "all"}},
        {"type": "text", "data": {"text": timer.alert}},
    ]
    if timer.url:
        message.append({"type": "image", "data": {"file": timer.url, "cache": "0"}})
    return message


class Clock:
    """Holds group timers, persists them and fires them.

    ``sender(self_id, group_id, message)`` delivers an alert; ``self_id`` is 0
    when the timer names no particular bot.
    """

    def __init__(self, db_path: str | PathLike[str], sender: Sender) -> None:
        self._sender = sender
        self._lock = threading.RLock()
        self._timers: dict[int, Timer] = {}
        self._entries: dict[int, int] = {}
        self._wakers: dict[int, threading.Event] = {}
        self._closed = threading.Event()
        self._db = sqlite3.connect(str(db_path), check_same_thread=False)
        self._cron = CronScheduler()
        self._load_timers()
        self._cron.start()

    def __enter__(self) -> "Clock":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def register_timer(self, timer: Timer, save: bool, isinit: bool = False) -> bool:
        """Register a timer and start it; return whether registration succeeded.

        With ``save`` the timer gets its normalised id and is written to the
        database; otherwise its stored id is kept.  ``isinit`` marks timers
        reloaded at start-up.  A timer already held under the same id is
        disabled.  On a bad cron expression the error is put in ``alert``.
        """
        if save:
            key = timer.timer_id()
            timer.id = key
        else:
            key = timer.id
        old = self.get_timer(key)
        if old is not None and old is not timer:
            old.enabled = False
            with self._lock:
                waker = self._wakers.pop(key, None)
            if waker is not None:
                waker.set()
        log.info("[群管]%s计时器 %d", "载入" if isinit else "注册", key)

        if timer.cron:
            try:
                entry_id = self._cron.add(timer.cron, lambda: self._send(timer))
            except ValueError as err:
                timer.alert = str(err)
                return False
            with self._lock:
                self._entries[key] = entry_id
            try:
                if save:
                    self.add_timer_into_db(timer)
            except sqlite3.Error as err:
                log.error("[群管]保存计时器失败: %s", err)
                return False
            self.add_timer_into_map(timer)
            return True

        if save:
            try:
                self.add_timer_into_db(timer)
            except sqlite3.Error as err:
                log.error("[群管]保存计时器失败: %s", err)
        self.add_timer_into_map(timer)
        waker = threading.Event()
        with self._lock:
            self._wakers[key] = waker
        threading.Thread(
            target=self._run_date_timer, args=(timer, key, waker), daemon=True
        ).start()
        return True

    def _run_date_timer(self, timer: Timer, key: int, waker: threading.Event) -> None:
        while timer.enabled and not self._closed.is_set():
            wake_at = next_wake_time(timer)
            delay = (wake_at - datetime.now()).total_seconds()
            log.info("[群管]计时器%08x将睡眠%ds", key, int(delay))
            if waker.wait(max(delay, 0.0)):
                break
            if timer.enabled and is_due(timer):
                self._send(timer)

    def _send(self, timer: Timer) -> None:
        try:
            self._sender(timer.self_id, timer.group_id, alert_message(timer))
        except Exception:  # a failing delivery must not stop the timer
            log.exception("[群管]发送提醒失败")

    def cancel_timer(self, key: int) -> bool:
        """Stop and forget a timer; False if there is none or it could not be deleted."""
        timer = self.get_timer(key)
        if timer is None:
            return False
        with self._lock:
            if timer.cron:
                entry_id = self._entries.pop(key, None)
                if entry_id is not None:
                    self._cron.remove(entry_id)
            else:
                timer.enabled = False
                waker = self._wakers.pop(key, None)
                if waker is not None:
                    waker.set()
            self._timers.pop(key, None)
            try:
                self._db.execute("DELETE FROM timer WHERE id = ?", (key,))
                self._db.commit()
            except sqlite3.Error as err:
                log.error("[群管]删除计时器失败: %s", err)
                return False
        return True

    def list_timers(self, group_id: int) -> list[str]:
        """Readable descriptions of the group's timers, one line each."""
        with self._lock:
            timers = list(self._timers.values())
        lines = []
        for timer in timers:
            if timer.group_id != group_id:
                continue
            info = timer.info()
            line = info[info.index("]") + 1:] + "\n"
            line = line.replace("-1", "每")
            line = line.replace("月0日0周", "月周天")
            line = line.replace("月0日", "月")
            line = line.replace("日0周", "日")
            lines.append(line)
        return lines

    def get_timer(self, key: int) -> Timer | None:
        """The timer held under ``key``, if any."""
        with self._lock:
            return self._timers.get(key)

    def add_timer_into_db(self, timer: Timer) -> None:
        """Write a timer to the database, replacing one with the same id."""
        with self._lock:
            self._db.execute(
                f"REPLACE INTO timer ({_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?)",
                (
                    timer.id,
                    timer.packed,
                    timer.self_id,
                    timer.group_id,
                    timer.alert,
                    timer.cron,
                    timer.url,
                ),
            )
            self._db.commit()

    def add_timer_into_map(self, timer: Timer) -> None:
        """Hold a timer in memory under its id."""
        with self._lock:
            self._timers[timer.id] = timer

    def close(self) -> None:
        """Stop all timers and close the database."""
        self._closed.set()
        self._cron.stop()
        with self._lock:
            wakers = list(self._wakers.values())
            self._wakers.clear()
        for waker in wakers:
            waker.set()
        with self._lock:
            self._db.close()

    def _load_timers(self) -> None:
        with self._lock:
            self._db.execute(
                "CREATE TABLE IF NOT EXISTS timer ("
                "id INTEGER PRIMARY KEY NOT NULL, emdwhm INTEGER, sid INTEGER, "
                "gid INTEGER, alert TEXT, cron TEXT, url TEXT)"
            )
            self._db.commit()
            rows = self._db.execute(f"SELECT {_COLUMNS} FROM timer").fetchall()
        for row in rows:
            self.register_timer(Timer(*row), False, True)