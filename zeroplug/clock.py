"""Reminder timers kept in SQLite and fired from background threads."""

from __future__ import annotations

import logging
import sqlite3
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta
from os import PathLike
from typing import Any, Callable

from zeroplug.schedule import is_due, next_wake_time
from zeroplug.timerbits import Timer

Segment = dict[str, Any]
Sender = Callable[[int, list[Segment]], None]

_log = logging.getLogger(__name__)

_MONTH_NAMES = {
    name: number
    for number, name in enumerate(
        ("JAN", "FEB", "MAR", "APR", "MAY", "JUN", "JUL", "AUG", "SEP", "OCT", "NOV", "DEC"),
        start=1,
    )
}
_WEEKDAY_NAMES = {
    name: number
    for number, name in enumerate(("SUN", "MON", "TUE", "WED", "THU", "FRI", "SAT"))
}
_DESCRIPTORS = {
    "@yearly": "0 0 1 1 *",
    "@annually": "0 0 1 1 *",
    "@monthly": "0 0 1 * *",
    "@weekly": "0 0 * * 0",
    "@daily": "0 0 * * *",
    "@midnight": "0 0 * * *",
    "@hourly": "0 * * * *",
}
_SEARCH_YEARS = 5


def _parse_number(text: str, names: dict[str, int]) -> int:
    upper = text.upper()
    if upper in names:
        return names[upper]
    if not (text.isascii() and text.isdecimal()):
        raise ValueError(f"invalid cron value: {text!r}")
    return int(text)


def _parse_field(
    text: str, low: int, high: int, names: dict[str, int]
) -> tuple[frozenset[int], bool]:
    """Parse one cron field into its set of values and whether it was a bare star."""
    values: set[int] = set()
    star = False
    for part in text.split(","):
        range_part, slash, step_part = part.partition("/")
        step = 1
        if slash:
            step = _parse_number(step_part, {})
            if step <= 0:
                raise ValueError(f"invalid cron step: {part!r}")
        if range_part in ("*", "?"):
            start, end = low, high
            if step == 1:
                star = True
        else:
            low_text, dash, high_text = range_part.partition("-")
            start = _parse_number(low_text, names)
            if dash:
                end = _parse_number(high_text, names)
            else:
                end = high if slash else start
        if start < low or end > high or start > end:
            raise ValueError(f"cron value out of range: {part!r}")
        values.update(range(start, end + 1, step))
    return frozenset(values), star


def _weekday(when: datetime) -> int:
    return (when.weekday() + 1) % 7


@dataclass(frozen=True)
class CronSpec:
    """A five-field cron expression: minute, hour, day of month, month, weekday."""

    minutes: frozenset[int]
    hours: frozenset[int]
    days: frozenset[int]
    months: frozenset[int]
    weekdays: frozenset[int]
    day_star: bool
    weekday_star: bool

    @classmethod
    def parse(cls, text: str) -> "CronSpec":
        """Parse an expression; raise ValueError if it is malformed."""
        expression = _DESCRIPTORS.get(text.strip().lower(), text)
        fields = expression.split()
        if len(fields) != 5:
            raise ValueError(f"expected 5 cron fields, found {len(fields)}: {text!r}")
        minutes, _ = _parse_field(fields[0], 0, 59, {})
        hours, _ = _parse_field(fields[1], 0, 23, {})
        days, day_star = _parse_field(fields[2], 1, 31, {})
        months, _ = _parse_field(fields[3], 1, 12, _MONTH_NAMES)
        weekdays, weekday_star = _parse_field(fields[4], 0, 6, _WEEKDAY_NAMES)
        return cls(minutes, hours, days, months, weekdays, day_star, weekday_star)

    def _day_matches(self, when: datetime) -> bool:
        day_ok = when.day in self.days
        weekday_ok = _weekday(when) in self.weekdays
        if self.day_star or self.weekday_star:
            return day_ok and weekday_ok
        return day_ok or weekday_ok

    def matches(self, when: datetime) -> bool:
        """Whether the minute containing ``when`` is scheduled."""
        return (
            when.minute in self.minutes
            and when.hour in self.hours
            and when.month in self.months
            and self._day_matches(when)
        )

    def next_after(self, when: datetime) -> datetime:
        """The first scheduled minute strictly after ``when``."""
        moment = when.replace(second=0, microsecond=0) + timedelta(minutes=1)
        last_year = when.year + _SEARCH_YEARS
        while moment.year <= last_year:
            if moment.month not in self.months:
                year, month = divmod(moment.month, 12)
                moment = datetime(moment.year + year, month + 1, 1, tzinfo=moment.tzinfo)
            elif not self._day_matches(moment):
                moment = moment.replace(hour=0, minute=0) + timedelta(days=1)
            elif moment.hour not in self.hours:
                moment = moment.replace(minute=0) + timedelta(hours=1)
            elif moment.minute not in self.minutes:
                moment += timedelta(minutes=1)
            else:
                return moment
        raise ValueError("cron expression never fires")


def timer_message(timer: Timer) -> list[Segment]:
    """The message a timer sends: @all, the alert, and the picture if any."""
    segments: list[Segment] = [
        {"type": "at", "data": {"qq": "all"}},
        {"type": "text", "data": {"text": timer.alert}},
    ]
    if timer.url:
        segments.append({"type": "image", "data": {"file": timer.url, "cache": "0"}})
    return segments


_COLUMNS = "id, emdwhm, sid, gid, alert, cron, url"


class Clock:
    """Keeps timers in memory and in SQLite, and fires them through ``sender``."""

    def __init__(self, db_path: str | PathLike[str], sender: Sender) -> None:
        self._sender = sender
        self._lock = threading.RLock()
        self._timers: dict[int, Timer] = {}
        self._stops: dict[int, threading.Event] = {}
        self._db = sqlite3.connect(str(db_path), check_same_thread=False)
        with self._lock:
            self._db.execute(
                "CREATE TABLE IF NOT EXISTS timer ("
                "id INTEGER PRIMARY KEY, emdwhm INTEGER, sid INTEGER, gid INTEGER, "
                "alert TEXT, cron TEXT, url TEXT)"
            )
            self._db.commit()
            rows = self._db.execute(f"SELECT {_COLUMNS} FROM timer").fetchall()
        for row in rows:
            self.register(Timer(*row), save=False)

    def __enter__(self) -> "Clock":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def register(self, timer: Timer, save: bool) -> bool:
        """Start a timer; with ``save`` it gets its canonical id and is stored."""
        if save:
            timer.id = timer.timer_id()
        key = timer.id
        with self._lock:
            old = self._timers.get(key)
            if old is not None and old is not timer:
                old.enabled = False
            self._stop_worker(key)
        if timer.cron:
            try:
                spec = CronSpec.parse(timer.cron)
            except ValueError as exc:
                timer.alert = str(exc)
                return False
            self._start(key, self._run_cron, timer, spec)
        try:
            if save:
                self.add_to_db(timer)
            self.add_to_map(timer)
        except sqlite3.Error:
            return False
        if not timer.cron and timer.enabled:
            self._start(key, self._run_calendar, timer)
        return True

    def cancel(self, key: int) -> bool:
        """Stop and forget a timer; False if there is none with that key."""
        with self._lock:
            timer = self._timers.pop(key, None)
            if timer is None:
                return False
            if not timer.cron:
                timer.enabled = False
            self._stop_worker(key)
            try:
                self._db.execute("DELETE FROM timer WHERE id = ?", (key,))
                self._db.commit()
            except sqlite3.Error:
                return False
        return True

    def list_timers(self, group_id: int) -> list[str]:
        """Human-readable descriptions of the timers of one group."""
        with self._lock:
            timers = list(self._timers.values())
        lines = []
        for timer in timers:
            if timer.group_id != group_id:
                continue
            info = timer.info()
            text = info[info.index("]") + 1 :] + "\n"
            text = text.replace("-1", "每")
            text = text.replace("月0日0周", "月周天")
            text = text.replace("月0日", "月")
            text = text.replace("日0周", "日")
            lines.append(text)
        return lines

    def get(self, key: int) -> Timer | None:
        """The timer registered under ``key``, if any."""
        with self._lock:
            return self._timers.get(key)

    def add_to_db(self, timer: Timer) -> None:
        """Store or replace a timer in the database."""
        with self._lock:
            self._db.execute(
                f"INSERT OR REPLACE INTO timer ({_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?)",
                (
                    timer.id,
                    timer.emdwhm,
                    timer.self_id,
                    timer.group_id,
                    timer.alert,
                    timer.cron,
                    timer.url,
                ),
            )
            self._db.commit()

    def add_to_map(self, timer: Timer) -> None:
        """Keep a timer in memory under its id."""
        with self._lock:
            self._timers[timer.id] = timer

    def close(self) -> None:
        """Stop every worker and close the database."""
        with self._lock:
            for stop in self._stops.values():
                stop.set()
            self._stops.clear()
            self._db.close()

    def _stop_worker(self, key: int) -> None:
        stop = self._stops.pop(key, None)
        if stop is not None:
            stop.set()

    def _start(self, key: int, target: Callable[..., None], *args: Any) -> None:
        stop = threading.Event()
        with self._lock:
            self._stops[key] = stop
        threading.Thread(target=target, args=(stop, *args), daemon=True).start()

    def _send(self, timer: Timer) -> None:
        try:
            self._sender(timer.group_id, timer_message(timer))
        except Exception:
            _log.exception("sending reminder %08x failed", timer.id)

    def _run_cron(self, stop: threading.Event, timer: Timer, spec: CronSpec) -> None:
        while not stop.is_set():
            now = datetime.now()
            wake = spec.next_after(now)
            if stop.wait((wake - now).total_seconds()):
                return
            self._send(timer)

    def _run_calendar(self, stop: threading.Event, timer: Timer) -> None:
        while timer.enabled and not stop.is_set():
            now = datetime.now()
            wake = next_wake_time(timer, now)
            _log.info("timer %08x sleeps until %s", timer.id, wake)
            if stop.wait(max((wake - now).total_seconds(), 0.0)):
                return
            if is_due(timer, datetime.now()):
                self._send(timer)