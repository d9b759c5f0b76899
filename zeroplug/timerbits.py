"""Reminder timers whose schedule is packed into one 24-bit integer."""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from typing import Sequence

_ENABLED_BIT = 0x800000
_PACKED_MASK = 0xFFFFFF
_CHINESE_DIGITS = "零一二三四五六七八九十"
_EVERY = "每"


def _packed(shift: int, width: int) -> property:
    """A property reading and writing one bit field; all ones means -1 ("every")."""
    mask = (1 << width) - 1
    field_mask = mask << shift

    def getter(self: "Timer") -> int:
        value = (self.emdwhm >> shift) & mask
        return -1 if value == mask else value

    def setter(self: "Timer", value: int) -> None:
        kept = self.emdwhm & ~field_mask & _PACKED_MASK
        self.emdwhm = ((value << shift) & field_mask) | kept

    return property(getter, setter)


@dataclass
class Timer:
    """A group reminder, either a calendar rule or a cron expression.

    ``emdwhm`` packs, from the top: enabled (1 bit), month (4), day (5),
    weekday (3, Sunday is 0), hour (5) and minute (6). A field with every
    bit set reads as -1, meaning "every".
    """

    id: int = 0
    emdwhm: int = 0
    self_id: int = 0
    group_id: int = 0
    alert: str = ""
    cron: str = ""
    url: str = ""

    month = _packed(19, 4)
    day = _packed(14, 5)
    week = _packed(11, 3)
    hour = _packed(6, 5)
    minute = _packed(0, 6)

    @property
    def enabled(self) -> bool:
        return self.emdwhm & _ENABLED_BIT != 0

    @enabled.setter
    def enabled(self, value: bool) -> None:
        if value:
            self.emdwhm |= _ENABLED_BIT
        else:
            self.emdwhm &= _PACKED_MASK & ~_ENABLED_BIT

    def info(self) -> str:
        """The canonical text describing this timer."""
        if self.cron:
            return f"[{self.group_id}]{self.cron}"
        return (
            f"[{self.group_id}]{self.month}月{self.day}日{self.week}周"
            f"{self.hour}:{self.minute}"
        )

    def timer_id(self) -> int:
        """A 32-bit identifier derived from :meth:`info`."""
        digest = hashlib.md5(self.info().encode("utf-8")).digest()
        return int.from_bytes(digest[:4], "little")


def filled_cron_timer(cron: str, alert: str, url: str, bot_id: int, group_id: int) -> Timer:
    """A timer driven by a cron expression."""
    return Timer(self_id=bot_id, group_id=group_id, alert=alert, cron=cron, url=url)


def filled_timer(
    date_strs: Sequence[str], bot_id: int, group_id: int, match_date_only: bool
) -> Timer:
    """Build a calendar timer from the captured groups of a reminder command.

    ``date_strs`` holds month, day-or-week, hour and minute at indexes 1 to 4
    and, unless ``match_date_only``, the optional "用<url>" part and the alert
    text at 5 and 6. Invalid input yields a disabled timer whose ``alert``
    explains the problem.
    """
    month_str, day_week_str, hour_str, minute_str = (str(s) for s in date_strs[1:5])
    timer = Timer()

    month = chinese_num_to_int(month_str)
    if (month != -1 and month <= 0) or month > 12:
        timer.alert = "月份非法！"
        return timer
    timer.month = month

    if len(day_week_str) == 4:
        day = chinese_num_to_int(day_week_str[0] + day_week_str[2])
        if (day != -1 and day <= 0) or day > 31:
            timer.alert = "日期非法1！"
            return timer
        timer.day = day
    elif day_week_str.endswith("日"):
        day = chinese_num_to_int(day_week_str[:-1])
        if (day != -1 and day <= 0) or day > 31:
            timer.alert = "日期非法2！"
            return timer
        timer.day = day
    elif day_week_str.startswith(_EVERY):
        timer.week = -1
    else:
        week = chinese_num_to_int(day_week_str[1:])
        if week == 7:
            week = 0
        if not 0 <= week <= 6:
            timer.alert = "星期非法！"
            return timer
        timer.week = week

    if len(hour_str) == 3:
        hour_str = hour_str[0] + hour_str[2]
    hour = chinese_num_to_int(hour_str)
    if hour < -1 or hour > 23:
        timer.alert = "小时非法！"
        return timer
    timer.hour = hour

    if len(minute_str) == 3:
        minute_str = minute_str[0] + minute_str[2]
    minute = chinese_num_to_int(minute_str)
    if minute < -1 or minute > 59:
        timer.alert = "分钟非法！"
        return timer
    timer.minute = minute

    if not match_date_only:
        url_str = date_strs[5] or ""
        if url_str:
            timer.url = url_str[1:]  # drop the leading "用"
            if not timer.url.startswith("http"):
                timer.url = "illegal"
                return timer
        timer.alert = date_strs[6]
        timer.enabled = True
    timer.self_id = bot_id
    timer.group_id = group_id
    return timer


def chinese_num_to_int(text: str) -> int:
    """Convert a number from -10 to 99 written in Chinese or ASCII digits.

    "每" alone means -1, "每二" means -2 and so on.
    """
    if not text:
        raise ValueError("empty number")
    first = text[0]
    if first.isdecimal():
        return int(text) if text.isascii() and text.isdecimal() else 0
    if first == _EVERY:
        return -chinese_char_to_int(text[1]) if len(text) == 2 else -1
    if len(text) == 1:
        return chinese_char_to_int(first)
    tens = chinese_char_to_int(first)
    if tens != 10:
        tens *= 10
    ones = chinese_char_to_int(text[1])
    if ones == 10:
        ones = 0
    return tens + ones


def chinese_char_to_int(char: str) -> int:
    """Map one Chinese numeral to 0..10; "日" and "天" (Sunday) map to 7."""
    if char in ("日", "天"):
        return 7
    index = _CHINESE_DIGITS.find(char) if len(char) == 1 else -1
    return index if index >= 0 else 0