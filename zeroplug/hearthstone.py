"""Hearthstone card search and deck images from a fan database."""

from __future__ import annotations

import json
import re
from typing import Any

import requests

HOME = "https://hs.fbigame.com"
HS = "https://hs.fbigame.com/ajax.php?"
PARA = (
    "mod=get_cards_list&"
    "mode=-1&"
    "extend=-1&"
    "mutil_extend=&"
    "hero=-1&"
    "rarity=-1&"
    "cost=-1&"
    "mutil_cost=&"
    "techlevel=-1&"
    "type=-1&"
    "collectible=-1&"
    "isbacon=-1&"
    "page=1&"
    "search_type=1&"
    "deckmode=normal"
)
USER_AGENT = (
    "Mozilla/5.0 (Linux; Android 6.0; Nexus 5 Build/MRA58N) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/86.0.4240.198 Mobile Safari/537.36"
)
_HASH_MARKER = 'var hash = "'
_DECK_CODE = re.compile(r"^[\s\S]*?(AAE[a-zA-Z0-9/+=]{70,})[\s\S]*$")
_TIMEOUT = 30


def _get(url: str) -> bytes:
    response = requests.get(
        url, headers={"Referer": HOME, "User-Agent": USER_AGENT}, timeout=_TIMEOUT
    )
    response.raise_for_status()
    return response.content


def extract_hash(page: str) -> str:
    """The request hash embedded in the site's home page."""
    _, marker, rest = page.partition(_HASH_MARKER)
    if not marker:
        raise ValueError("no hash in page")
    return rest.split('"', 1)[0]


def search_url(page_hash: str, query: str) -> str:
    """The card search address."""
    return HS + PARA + "&hash=" + page_hash + "&search=" + query


def deck_url(page_hash: str, code: str) -> str:
    """The deck image address."""
    return (
        HS + PARA + "mod=general_deck_image&deck_code=" + code
        + "&deck_text=&hash=" + page_hash + "&search=" + code
    )


def _page_hash() -> str:
    return extract_hash(_get(HOME).decode("utf-8", "replace"))


def search_cards(query: str) -> list[dict[str, Any]]:
    """The cards matching ``query``."""
    reply = json.loads(_get(search_url(_page_hash(), query)))
    cards = reply.get("list") if isinstance(reply, dict) else None
    return cards if isinstance(cards, list) else []


def deck_image(code: str) -> str:
    """The deck picture for a deck code, as a base64 image address."""
    reply = json.loads(_get(deck_url(_page_hash(), code)))
    image = reply.get("img") if isinstance(reply, dict) else None
    return "base64://" + (image if isinstance(image, str) else "")


def find_deck_code(text: str) -> str | None:
    """The deck code contained in ``text``, if any."""
    match = _DECK_CODE.match(text)
    return match.group(1) if match else None