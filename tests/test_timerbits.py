import pytest

from zeroplug.timerbits import (
    Timer,
    chinese_char_to_int,
    chinese_num_to_int,
    filled_cron_timer,
    filled_timer,
)


def test_filled_timer_from_source_case():
    t = filled_timer(["", "12", "-1", "12", "0", "", "test"], 0, 0, False)
    assert t.month == 12
    assert t.day == 0
    assert t.week == 1
    assert t.hour == 12
    assert t.minute == 0
    assert t.alert == "test"
    assert t.enabled
    assert t.info() == "[0]12月0日1周12:0"


def test_packed_fields_round_trip():
    t = Timer()
    t.month = -1
    t.week = 6
    t.hour = 16
    t.minute = 30
    assert (t.month, t.day, t.week, t.hour, t.minute) == (-1, 0, 6, 16, 30)
    t.day = 31 - 1
    assert t.day == 30
    assert (t.month, t.week, t.hour, t.minute) == (-1, 6, 16, 30)
    assert not t.enabled


@pytest.mark.parametrize("name", ["month", "day", "week", "hour", "minute"])
def test_every_value_round_trips(name):
    t = Timer()
    setattr(t, name, -1)
    assert getattr(t, name) == -1
    assert t.emdwhm < 0x800000


def test_enabled_flag_does_not_touch_fields():
    t = Timer()
    t.minute = 5
    t.enabled = True
    assert t.enabled and t.minute == 5
    t.enabled = False
    assert not t.enabled and t.minute == 5


def test_timer_id_stable_and_32bit():
    a = filled_timer(["", "12", "-1", "12", "0", "", "test"], 0, 0, False)
    b = filled_timer(["", "12", "-1", "12", "0", "", "other"], 0, 0, False)
    c = filled_timer(["", "11", "-1", "12", "0", "", "test"], 0, 0, False)
    assert a.timer_id() == b.timer_id()
    assert a.timer_id() != c.timer_id()
    assert 0 <= a.timer_id() < 2**32


def test_cron_timer_id_depends_on_cron_and_group():
    full = filled_cron_timer("0 10 * * *", "hi", "", 123, 456)
    lookup = Timer(cron="0 10 * * *", group_id=456)
    assert full.info() == "[456]0 10 * * *"
    assert full.timer_id() == lookup.timer_id()


def test_cancel_form_matches_registered_form():
    reg = filled_timer(["", "12", "周三", "8", "30", "", "hello"], 1, 2, False)
    cancel = filled_timer(["", "12", "周三", "8", "30"], 1, 2, True)
    assert not cancel.enabled
    assert reg.timer_id() == cancel.timer_id()


@pytest.mark.parametrize(
    "text,expected",
    [("十二", 12), ("二十", 20), ("五", 5), ("每", -1), ("每二", -2), ("12", 12), ("十", 10)],
)
def test_chinese_num_to_int(text, expected):
    assert chinese_num_to_int(text) == expected


def test_chinese_num_to_int_bad_ascii_is_zero():
    assert chinese_num_to_int("1x") == 0


def test_chinese_num_to_int_empty_raises():
    with pytest.raises(ValueError):
        chinese_num_to_int("")


def test_chinese_char_to_int():
    assert chinese_char_to_int("日") == 7
    assert chinese_char_to_int("天") == 7
    assert chinese_char_to_int("零") == 0
    assert chinese_char_to_int("九") == 9
    assert chinese_char_to_int("x") == 0


def test_day_with_ten_in_middle():
    t = filled_timer(["", "1", "二十三日", "8", "0", "", "a"], 0, 0, False)
    assert t.day == 23
    assert t.enabled


def test_every_week_and_sunday():
    t = filled_timer(["", "每", "每周", "每", "30", "", "a"], 0, 0, False)
    assert (t.month, t.week, t.hour, t.minute) == (-1, -1, -1, 30)
    s = filled_timer(["", "1", "周天", "8", "0", "", "a"], 0, 0, False)
    assert s.week == 0


def test_invalid_month():
    t = filled_timer(["", "十三", "1日", "8", "0", "", "a"], 0, 0, False)
    assert t.alert == "月份非法！"
    assert not t.enabled


def test_invalid_hour_and_minute():
    t = filled_timer(["", "1", "1日", "二十五", "0", "", "a"], 0, 0, False)
    assert t.alert == "小时非法！"
    m = filled_timer(["", "1", "1日", "8", "六十一", "", "a"], 0, 0, False)
    assert m.alert == "分钟非法！"


def test_sunday_written_with_ri_is_rejected_as_day():
    t = filled_timer(["", "1", "周日", "8", "0", "", "a"], 0, 0, False)
    assert t.alert == "日期非法2！"


def test_illegal_url():
    t = filled_timer(["", "1", "1日", "8", "0", "用ftp://x", "a"], 0, 0, False)
    assert t.url == "illegal"
    assert not t.enabled


def test_image_url_kept():
    t = filled_timer(["", "1", "1日", "8", "0", "用http://example.com/a.png", "a"], 7, 9, False)
    assert t.url == "http://example.com/a.png"
    assert (t.self_id, t.group_id) == (7, 9)