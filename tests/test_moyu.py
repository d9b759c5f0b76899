from datetime import datetime, timedelta

import pytest

from zeroplug.moyu import CLOSING, Holiday, daily_message, weekend

RECORDS = {
    "元旦": (1, 2023, 1, 1),
    "春节": (7, 2023, 1, 21),
    "清明节": (1, 2023, 4, 5),
    "劳动节": (1, 2023, 5, 1),
    "端午节": (1, 2023, 6, 22),
    "中秋节": (1, 2023, 9, 29),
    "国庆节": (7, 2023, 10, 1),
}


@pytest.mark.parametrize("name, fields", list(RECORDS.items()))
def test_records_round_trip(name, fields):
    dur, year, month, day = fields
    record = f"{dur}_{year}_{month}_{day}"
    holiday = Holiday.from_record(name, record)
    assert holiday.date == datetime(year, month, day)
    assert holiday.duration == timedelta(days=dur)
    assert holiday.to_record() == record


def test_invalid_record():
    with pytest.raises(ValueError):
        Holiday.from_record("x", "1_2023_1")


def test_describe_before_during_after():
    holiday = Holiday.from_record("元旦", "1_2023_1_1")
    assert holiday.describe(datetime(2022, 12, 31)) == "距离元旦还有: 1.00天！"
    assert holiday.describe(datetime(2023, 1, 1, 12)) == "好好享受 元旦 假期吧!"
    assert holiday.describe(datetime(2023, 1, 3)) == "今年 元旦 假期已过"


def test_weekend():
    assert weekend(datetime(2023, 1, 2)) == "距离周末还有:4天！"
    assert weekend(datetime(2023, 1, 7)) == "好好享受周末吧！"
    assert weekend(datetime(2023, 1, 8)) == "好好享受周末吧！"


def test_daily_message():
    now = datetime(2023, 1, 2, 10)
    holidays = [Holiday.from_record(n, f"{d}_{y}_{m}_{dd}") for n, (d, y, m, dd) in RECORDS.items()]
    text = daily_message(holidays, now)
    assert text.startswith("2023-01-02上午好")
    assert text.endswith("\n" + CLOSING)
    assert "距离周末还有:4天！" in text
    for holiday in holidays:
        assert "\n" + holiday.describe(now) + "\n" in text