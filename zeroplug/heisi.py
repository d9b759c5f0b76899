"""Picture URLs packed into 10-byte records."""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Sequence

ITEM_SIZE = 10
_BASE = "http://hs.heisiwu.com/wp-content/uploads"
_EXTENSIONS = {0: ".jpg", 1: ".png", 2: ".webp"}

COMMANDS = {
    "来点黑丝": "heisi.bin",
    "来点白丝": "baisi.bin",
    "来点jk": "jk.bin",
    "来点巨乳": "jur.bin",
    "来点足控": "zuk.bin",
    "来点网红": "mcn.bin",
}


@dataclass(frozen=True)
class Item:
    """One packed picture record."""

    data: bytes

    def __post_init__(self) -> None:
        if len(self.data) != ITEM_SIZE:
            raise ValueError(f"an item is {ITEM_SIZE} bytes, got {len(self.data)}")

    def url(self) -> str:
        """Unpack the picture's URL; raise ValueError for an unknown extension."""
        b = self.data
        year = 2021 + (b[0] >> 4)
        month = b[0] & 0x0F
        if year == 2021:
            num = int.from_bytes(b[1:5], "big")
            digest = b[5:9].hex()
            return (
                f"{_BASE}/{year:4d}/{month:02d}/"
                f"{year:4d}{month:02d}16{num:06d}-611a3{digest:>8}.jpg"
            )
        packed = int.from_bytes(b[1:9], "big")
        scaled = bool(b[9] & 0x80)
        num = b[9] & 0x7F
        url = f"{_BASE}/{year:4d}/{month:02d}/{packed & 0x0FFF_FFFF_FFFF_FFFF:015x}"
        if num > 0:
            url += f"-{num}"
        if scaled:
            url += "-scaled"
        extension = _EXTENSIONS.get(packed >> 60)
        if extension is None:
            raise ValueError("invalid ext")
        return url + extension


def load_items(data: bytes) -> list[Item]:
    """Split a data file into items."""
    if len(data) % ITEM_SIZE:
        raise ValueError("invalid data")
    return [Item(bytes(data[start : start + ITEM_SIZE])) for start in range(0, len(data), ITEM_SIZE)]


def random_url(items: Sequence[Item], rng: random.Random | None = None) -> str:
    """The URL of a randomly chosen item."""
    chooser = rng if rng is not None else random
    return chooser.choice(items).url()