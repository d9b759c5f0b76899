"""The "绝绝子" phrase generator."""

from __future__ import annotations

import json

import requests

JUEJUEZI_URL = "https://www.offjuan.com/api/juejuezi/text"
REFERER = "https://juejuezi.offjuan.com/"
USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/96.0.4664.110 Safari/537.36"
)
KEYWORD = "绝绝子"
_TIMEOUT = 30


def split_input(text: str) -> tuple[str, str] | None:
    """Split a message into a verb and a noun.

    Exactly two characters left after removing the keyword give one each.
    Longer text returns None: it needs word segmentation first. Fewer than
    two characters raise ValueError.
    """
    rest = text.replace(KEYWORD, "")
    if len(rest) < 2:
        raise ValueError("不要只输入绝绝子")
    if len(rest) == 2:
        return rest[0], rest[1]
    return None


def request_body(verb: str, noun: str) -> str:
    """The JSON body the generator expects."""
    return f'{{"verb":"{verb}","noun":"{noun}"}}'


def generate(verb: str, noun: str) -> str:
    """Ask the generator for a phrase; an unreadable reply gives ""."""
    response = requests.post(
        JUEJUEZI_URL,
        data=request_body(verb, noun).encode("utf-8"),
        headers={"Referer": REFERER, "User-Agent": USER_AGENT},
        timeout=_TIMEOUT,
    )
    try:
        reply = json.loads(response.content)
    except ValueError:
        return ""
    if not isinstance(reply, dict):
        return ""
    value = reply.get("text")
    if value is None:
        return ""
    return value if isinstance(value, str) else json.dumps(value, ensure_ascii=False)