"""A store of pictures scraped from a boring-pictures board."""

from __future__ import annotations

import re
import sqlite3
import threading
from os import PathLike

import lxml.html

API = "http://jandan.net/pic"

_ISO_POLY = 0xD800000000000000
_MASK64 = 0xFFFF_FFFF_FFFF_FFFF
_DIGITS = re.compile(r"\d+")

_CURRENT_PAGE = "//*[@id='comments']/div[2]/div/span[@class='current-comment-page']/text()"
_IMAGE_LINKS = "//*[@class='view_img_link']"
_PREVIOUS_PAGE = (
    "//*[@id='comments']/div[@class='comments']/div[@class='cp-pagenavi']"
    "/a[@class='previous-comment-page']"
)


def _make_table() -> list[int]:
    table = []
    for index in range(256):
        crc = index
        for _ in range(8):
            crc = (crc >> 1) ^ _ISO_POLY if crc & 1 else crc >> 1
        table.append(crc)
    return table


_TABLE = _make_table()


def picture_id(url: str) -> int:
    """The CRC-64 (ISO polynomial) of a picture URL, used as its key."""
    crc = _MASK64
    for byte in url.encode("utf-8"):
        crc = _TABLE[(crc ^ byte) & 0xFF] ^ (crc >> 8)
    return crc ^ _MASK64


def _signed(value: int) -> int:
    return value - (1 << 64) if value >= 1 << 63 else value


def page_number(text: str) -> int:
    """The first number in ``text``."""
    match = _DIGITS.search(text)
    if match is None:
        raise ValueError(f"no page number in {text!r}")
    return int(match.group())


def parse_page(html: str | bytes) -> tuple[int | None, list[str], str | None]:
    """Read a board page: its page number, picture URLs and the older page's URL."""
    document = lxml.html.document_fromstring(html)
    current_texts = document.xpath(_CURRENT_PAGE)
    current = page_number(str(current_texts[0])) if current_texts else None
    images = []
    for link in document.xpath(_IMAGE_LINKS):
        values = list(link.attrib.values())
        if values:
            images.append("https:" + values[0])
    previous = None
    navigation = document.xpath(_PREVIOUS_PAGE)
    if navigation:
        values = list(navigation[0].attrib.values())
        if len(values) > 1:
            previous = "https:" + values[1]
    return current, images, previous


class PictureStore:
    """Picture URLs in SQLite, keyed by :func:`picture_id`."""

    def __init__(self, path: str | PathLike[str]) -> None:
        self._lock = threading.Lock()
        self._db = sqlite3.connect(str(path), check_same_thread=False)
        with self._lock:
            self._db.execute(
                "CREATE TABLE IF NOT EXISTS picture (id INTEGER PRIMARY KEY, url TEXT)"
            )
            self._db.commit()

    def __enter__(self) -> "PictureStore":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def add(self, url: str) -> int:
        """Store a URL and return its id."""
        key = picture_id(url)
        with self._lock:
            self._db.execute(
                "INSERT OR REPLACE INTO picture (id, url) VALUES (?, ?)", (_signed(key), url)
            )
            self._db.commit()
        return key

    def contains(self, url: str) -> bool:
        """Whether the URL is already stored."""
        with self._lock:
            row = self._db.execute(
                "SELECT 1 FROM picture WHERE id = ?", (_signed(picture_id(url)),)
            ).fetchone()
        return row is not None

    def random_url(self) -> str:
        """A random stored URL; LookupError if the store is empty."""
        with self._lock:
            row = self._db.execute(
                "SELECT url FROM picture ORDER BY RANDOM() LIMIT 1"
            ).fetchone()
        if row is None:
            raise LookupError("no pictures stored")
        return row[0]

    def count(self) -> int:
        """How many pictures are stored."""
        with self._lock:
            return self._db.execute("SELECT COUNT(*) FROM picture").fetchone()[0]

    def close(self) -> None:
        """Close the database."""
        with self._lock:
            self._db.close()