"""The Ogura Hyakunin Isshu: one hundred poems from a CSV table."""

from __future__ import annotations

import csv
import io
import re
from dataclasses import astuple, dataclass

BASE_URL = "https://gitcode.net/u011570312/OguraHyakuninIsshu/-/raw/master/"
CSV_NAME = "小倉百人一首.csv"
POEM_COUNT = 100

_LABELS = (
    ("●", "番号"),
    ("◉", "歌人"),
    ("○", "上の句"),
    ("○", "下の句"),
    ("◎", "上の句ひらがな"),
    ("◎", "下の句ひらがな"),
)
_INTEGER = re.compile(r"[+-]?[0-9]+")


@dataclass(frozen=True)
class Poem:
    """One poem: its number, poet, and both halves in kanji and in kana."""

    number: str
    poet: str
    upper: str
    lower: str
    upper_kana: str
    lower_kana: str

    def __str__(self) -> str:
        return "".join(
            f"{mark}{label}：{value}\n" for (mark, label), value in zip(_LABELS, astuple(self))
        )


def load_poems(text: str) -> list[Poem]:
    """Parse the CSV table (with a title row) into the hundred poems in order."""
    records = list(csv.reader(io.StringIO(text)))[1:]
    if len(records) != POEM_COUNT:
        raise ValueError("invalid csvfile")
    poems = []
    for index, record in enumerate(records):
        if len(record) != 6:
            raise ValueError("invalid csvfile")
        if not _INTEGER.fullmatch(record[0]):
            raise ValueError(f"invalid poem number: {record[0]!r}")
        if int(record[0]) - 1 != index:
            raise ValueError("invalid csvfile")
        poems.append(Poem(*record))
    return poems


def image_names(number: int) -> tuple[str, str]:
    """The picture and calligraphy file names for poem ``number`` (1 to 100)."""
    if not 1 <= number <= POEM_COUNT:
        raise ValueError("超出范围")
    return f"img/{number:03d}.jpg", f"img/{number:03d}.png"