"""Building timers from the captured parts of a reminder command."""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence

from .model import Timer

log = logging.getLogger(__name__)

_CHINESE_DIGITS = "零一二三四五六七八九十"
_ASCII_NUMBER = re.compile(r"[0-9]+")


def chinese_char_to_int(char: str) -> int:
    """Map one Chinese numeral (零 to 十) to 0-10; 日 and 天 mean Sunday, 7.

    Anything else maps to 0.
    """
    if char in ("日", "天"):
        return 7
    index = _CHINESE_DIGITS.find(char)
    return index if index >= 0 else 0


def chinese_num_to_int(text: str) -> int:
    """Convert a number of at most two places, Arabic or Chinese, to an int.

    "每" alone means -1, "每二" means -2 and so on.  Arabic text that is not
    a plain number gives 0.  Raises ValueError on empty text.
    """
    if not text:
        raise ValueError("empty number")
    if text[0].isdecimal():
        return int(text) if _ASCII_NUMBER.fullmatch(text) else 0
    if text[0] == "每":
        return -chinese_char_to_int(text[1]) if len(text) == 2 else -1
    if len(text) == 1:
        return chinese_char_to_int(text)
    tens = chinese_char_to_int(text[0])
    if tens != 10:
        tens *= 10
    ones = chinese_char_to_int(text[1])
    if ones == 10:
        ones = 0
    return tens + ones


def _drop_middle_ten(text: str) -> str:
    return text[0] + text[2] if len(text) == 3 else text


def filled_timer(
    date_strs: Sequence[str], bot_id: int, group_id: int, match_date_only: bool
) -> Timer:
    """Build a date timer from regex groups 1-6 (month, day/week, hour, minute, url, alert).

    An invalid field leaves the timer disabled with the reason in ``alert``.
    With ``match_date_only`` only the date fields are filled, as needed to
    identify a timer for cancelling.
    """
    month_str, day_week, hour_str, minute_str = date_strs[1:5]
    t = Timer()

    month = chinese_num_to_int(month_str)
    if (month != -1 and month <= 0) or month > 12:
        t.alert = "月份非法！"
        return t
    t.month = month

    if len(day_week) == 4:  # e.g. 二十五日, drop the middle 十
        day = chinese_num_to_int(day_week[0] + day_week[2])
        if (day != -1 and day <= 0) or day > 31:
            t.alert = "日期非法1！"
            return t
        t.day = day
    elif day_week.endswith("日"):
        day = chinese_num_to_int(day_week[:-1])
        if (day != -1 and day <= 0) or day > 31:
            t.alert = "日期非法2！"
            return t
        t.day = day
    elif day_week.startswith("每"):
        t.week = -1
    else:
        week = chinese_num_to_int(day_week[1:])
        if week == 7:
            week = 0
        if week < 0 or week > 6:
            t.alert = "星期非法！"
            return t
        t.week = week

    hour = chinese_num_to_int(_drop_middle_ten(hour_str))
    if hour < -1 or hour > 23:
        t.alert = "小时非法！"
        return t
    t.hour = hour

    minute = chinese_num_to_int(_drop_middle_ten(minute_str))
    if minute < -1 or minute > 59:
        t.alert = "分钟非法！"
        return t
    t.minute = minute

    if not match_date_only:
        url_str = date_strs[5]
        if url_str:
            # the group starts with 用, three bytes in UTF-8
            t.url = url_str.encode("utf-8")[3:].decode("utf-8", "replace")
            log.debug("[群管]%s", t.url)
            if not t.url.startswith("http"):
                t.url = "illegal"
                log.debug("[群管]url非法！")
                return t
        t.alert = date_strs[6]
        t.enabled = True

    t.self_id = bot_id
    t.group_id = group_id
    return t


def filled_cron_timer(cron: str, alert: str, url: str, bot_id: int, group_id: int) -> Timer:
    """Build a timer driven by a cron expression."""
    return Timer(self_id=bot_id, group_id=group_id, alert=alert, cron=cron, url=url)