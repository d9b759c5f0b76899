"""Keyword search for pixiv illustrations through a public mirror API."""

from __future__ import annotations

import json
import re
from typing import Any, Iterable, Mapping
from urllib.parse import quote_plus

import requests

SEARCH_API = "https://api.pixivel.moe/v2/pixiv/illust/search/{}?page=0"
REFERER = "https://pixivel.moe/"
USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/94.0.4606.61 Safari/537.36"
)
_HREF = re.compile(r'<a href=".*">')
_TIMEOUT = 30


class SearchError(Exception):
    """The search service reported an error."""


def parse_result(data: bytes | str) -> list[dict[str, Any]]:
    """The illustrations of a search reply; raise SearchError if it reports an error."""
    reply = json.loads(data)
    if not isinstance(reply, dict):
        raise ValueError("reply is not a JSON object")
    if reply.get("error"):
        raise SearchError(str(reply.get("message") or ""))
    payload = reply.get("data") or {}
    if not isinstance(payload, dict):
        raise ValueError("reply data is not a JSON object")
    illusts = payload.get("illusts") or []
    if not isinstance(illusts, list):
        raise ValueError("illusts is not a list")
    return illusts


def search(keyword: str) -> list[dict[str, Any]]:
    """Search illustrations by ``keyword``."""
    response = requests.get(
        SEARCH_API.format(quote_plus(keyword)),
        headers={"Referer": REFERER, "User-Agent": USER_AGENT},
        timeout=_TIMEOUT,
    )
    response.raise_for_status()
    return parse_result(response.content)


def format_tags(tags: Iterable[Mapping[str, Any]]) -> str:
    """Each tag on its own line as "#name", with its translation in brackets if any."""
    parts = []
    for tag in tags:
        parts.append("\n#" + str(tag.get("name") or ""))
        translation = tag.get("translation") or ""
        if translation:
            parts.append(f" ({translation})")
    return "".join(parts)


def clean_description(text: str) -> str:
    """Turn an HTML description into plain text with line breaks."""
    text = text.replace("<br />", "\n").replace("</a>", "")
    return _HREF.sub("", text)