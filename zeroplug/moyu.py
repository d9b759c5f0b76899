"""The daily slacker reminder: days until the weekend and the next holidays."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterable

HOLIDAY_NAMES = ("元旦", "春节", "清明节", "劳动节", "端午节", "中秋节", "国庆节")

GREETING = (
    "上午好，摸鱼人！\n工作再累，一定不要忘记摸鱼哦！有事没事起身去茶水间，去厕所，"
    "去廊道走走别老在工位上坐着，钱是老板的,但命是自己的。\n"
)
CLOSING = "上班是帮老板赚钱，摸鱼是赚老板的钱！最后，祝愿天下所有摸鱼人，都能愉快的渡过每一天…"


@dataclass(frozen=True)
class Holiday:
    """A named holiday starting on ``date`` and lasting ``duration``."""

    name: str
    date: datetime
    duration: timedelta

    @classmethod
    def from_record(cls, name: str, record: str) -> "Holiday":
        """Parse a "days_year_month_day" record."""
        parts = record.strip().split("_")
        if len(parts) != 4:
            raise ValueError(f"invalid holiday record: {record!r}")
        days, year, month, day = (int(part) for part in parts)
        return cls(name, datetime(year, month, day), timedelta(days=days))

    def to_record(self) -> str:
        """The "days_year_month_day" form of this holiday."""
        return f"{self.duration.days}_{self.date.year}_{self.date.month}_{self.date.day}"

    def describe(self, now: datetime) -> str:
        """How far ``now`` is from the holiday."""
        remaining = self.date - now
        if remaining >= timedelta(0):
            days = remaining.total_seconds() / 86400
            return f"距离{self.name}还有: {days:.2f}天！"
        if remaining + self.duration >= timedelta(0):
            return f"好好享受 {self.name} 假期吧!"
        return f"今年 {self.name} 假期已过"


def weekend(now: datetime) -> str:
    """Days left until the weekend, or a cheer if it is the weekend."""
    weekday = (now.weekday() + 1) % 7
    if weekday in (0, 6):
        return "好好享受周末吧！"
    return f"距离周末还有:{5 - weekday}天！"


def daily_message(holidays: Iterable[Holiday], now: datetime) -> str:
    """The full reminder text for ``now``."""
    parts = [now.strftime("%Y-%m-%d"), GREETING, weekend(now)]
    for holiday in holidays:
        parts.append("\n")
        parts.append(holiday.describe(now))
    parts.append("\n")
    parts.append(CLOSING)
    return "".join(parts)