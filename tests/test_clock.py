from datetime import datetime

import pytest

from zeroplug.clock import Clock, CronSpec, timer_message
from zeroplug.timerbits import filled_cron_timer, filled_timer


def _sink(group_id, segments):
    pass


def test_cron_parse_and_match():
    spec = CronSpec.parse("30 8 * * *")
    assert spec.matches(datetime(2023, 1, 1, 8, 30))
    assert not spec.matches(datetime(2023, 1, 1, 8, 31))


def test_cron_next_after_same_day_and_next_day():
    spec = CronSpec.parse("30 8 * * *")
    assert spec.next_after(datetime(2023, 1, 1, 7, 0)) == datetime(2023, 1, 1, 8, 30)
    assert spec.next_after(datetime(2023, 1, 1, 8, 30)) == datetime(2023, 1, 2, 8, 30)


def test_cron_steps_ranges_and_names():
    spec = CronSpec.parse("*/15 9-10 * JAN,FEB MON")
    assert spec.minutes == frozenset({0, 15, 30, 45})
    assert spec.hours == frozenset({9, 10})
    assert spec.months == frozenset({1, 2})
    assert spec.weekdays == frozenset({1})


def test_cron_day_or_weekday_when_both_restricted():
    spec = CronSpec.parse("0 0 13 * 5")
    # 2023-01-06 is a Friday, not the 13th; 2023-02-13 is a Monday
    assert spec.matches(datetime(2023, 1, 6))
    assert spec.matches(datetime(2023, 2, 13))
    assert not spec.matches(datetime(2023, 2, 14))


def test_cron_descriptor():
    assert CronSpec.parse("@daily") == CronSpec.parse("0 0 * * *")


@pytest.mark.parametrize("text", ["", "* * * *", "61 * * * *", "* * * * 9", "a b c d e", "*/0 * * * *"])
def test_cron_invalid(text):
    with pytest.raises(ValueError):
        CronSpec.parse(text)


def test_timer_message_with_picture():
    timer = filled_cron_timer("0 0 * * *", "hello", "http://example.com/a.png", 1, 2)
    segments = timer_message(timer)
    assert segments[0] == {"type": "at", "data": {"qq": "all"}}
    assert segments[1] == {"type": "text", "data": {"text": "hello"}}
    assert segments[2]["data"]["file"] == "http://example.com/a.png"
    assert segments[2]["data"]["cache"] == "0"


def test_timer_message_without_picture():
    timer = filled_cron_timer("0 0 * * *", "hello", "", 1, 2)
    assert len(timer_message(timer)) == 2


def test_clock_source_case(tmp_path):
    db = tmp_path / "test.db"
    timer = filled_timer(["", "12", "-1", "12", "0", "", "test"], 0, 0, False)
    with Clock(db, _sink) as clock:
        clock.add_to_db(timer)
        assert clock.list_timers(0) == []
    with Clock(db, _sink) as clock:
        assert clock.list_timers(0) == ["12月1周12:0\n"]


def test_register_and_cancel_cron(tmp_path):
    with Clock(tmp_path / "c.db", _sink) as clock:
        timer = filled_cron_timer("30 8 * * *", "早", "", 1, 42)
        assert clock.register(timer, save=True)
        assert timer.id == timer.timer_id()
        assert clock.get(timer.id) is timer
        assert clock.list_timers(42) == ["30 8 * * *\n"]
        assert clock.list_timers(7) == []
        assert clock.cancel(timer.id)
        assert clock.get(timer.id) is None
        assert not clock.cancel(timer.id)


def test_register_bad_cron(tmp_path):
    with Clock(tmp_path / "c.db", _sink) as clock:
        timer = filled_cron_timer("not a cron", "x", "", 1, 42)
        assert not clock.register(timer, save=True)
        assert timer.alert != "x"
        assert clock.get(timer.id) is None


def test_timers_persist(tmp_path):
    db = tmp_path / "c.db"
    with Clock(db, _sink) as clock:
        timer = filled_cron_timer("0 12 * * *", "noon", "", 1, 5)
        clock.register(timer, save=True)
        key = timer.id
    with Clock(db, _sink) as clock:
        loaded = clock.get(key)
        assert loaded is not None
        assert loaded.cron == "0 12 * * *"
        assert loaded.alert == "noon"
    with Clock(db, _sink) as clock:
        assert clock.cancel(key)
    with Clock(db, _sink) as clock:
        assert clock.get(key) is None


def test_register_calendar_timer(tmp_path):
    with Clock(tmp_path / "c.db", _sink) as clock:
        timer = filled_timer(["", "每", "每周", "8", "0", "", "hi"], 0, 3, False)
        assert clock.register(timer, save=True)
        assert clock.list_timers(3) == ["每月每周8:0\n"]
        assert clock.cancel(timer.id)
        assert not timer.enabled