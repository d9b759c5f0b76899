"""Meme lookups in an online slang dictionary."""

from __future__ import annotations

import json
from typing import Any, Mapping

import requests

URL = "https://api.jikipedia.com/go/search_entities"
DEFINITION_URL = "https://jikipedia.com/definition/"
BANNED_STATUS = 423
_TIMEOUT = 30
_HEADERS = {
    "Accept": "application/json, text/plain, */*",
    "Accept-Encoding": "gzip, deflate, br",
    "Accept-Language": "zh-CN,zh-TW;q=0.9,zh;q=0.8",
    "Client": "web",
    "Client-Version": "2.7.2g",
    "Connection": "keep-alive",
    "Host": "api.jikipedia.com",
    "Origin": "https://jikipedia.com",
    "Referer": "https://jikipedia.com/",
    "Sec-Fetch-Dest": "empty",
    "Sec-Fetch-Mode": "cors",
    "Sec-Fetch-Site": "same-site",
    "Token": "",
    "User-Agent": (
        "Mozilla/5.0 (Linux; Android 6.0; Nexus 5 Build/MRA58N) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/102.0.0.0 Mobile Safari/537.36"
    ),
    "sec-ch-ua": '" Not A;Brand";v="99", "Chromium";v="102", "Google Chrome";v="102"',
    "sec-ch-ua-mobile": "?1",
    "sec-ch-ua-platform": '"Android"',
    "Content-Type": "application/json;charset=UTF-8",
}


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return json.dumps(value, ensure_ascii=False)


def first_definition(data: bytes | str) -> dict[str, Any] | None:
    """The first non-empty definition among the search results, if any."""
    reply = json.loads(data)
    entries = reply.get("data") if isinstance(reply, dict) else None
    if isinstance(entries, dict):
        entries = list(entries.values())
    if not isinstance(entries, list):
        return None
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        definitions = entry.get("definitions")
        if isinstance(definitions, list) and definitions and definitions[0] not in (None, ""):
            return definitions[0]
    return None


def lookup(keyword: str) -> dict[str, Any] | None:
    """Search for ``keyword``; raise RuntimeError if the site refuses."""
    body = {"phrase": keyword.strip(" "), "page": 1, "size": 10}
    response = requests.post(
        URL,
        data=json.dumps(body, ensure_ascii=False).encode("utf-8"),
        headers=_HEADERS,
        timeout=_TIMEOUT,
    )
    if response.status_code != 200:
        extra = ""
        if response.status_code == BANNED_STATUS:
            extra = "\n调用过多被网站暂时封禁，请等待数个小时后使用该功能~"
        raise RuntimeError(f"status code: {response.status_code}{extra}")
    return first_definition(response.content)


def format_definition(definition: Mapping[str, Any]) -> tuple[str, str]:
    """The reply text for a definition and the address of its first picture."""
    term = definition.get("term")
    title = term.get("title") if isinstance(term, dict) else None
    text = (
        "【标题】:" + _text(title)
        + "\n【释义】:" + _text(definition.get("plaintext"))
        + "\n【原文】:" + DEFINITION_URL + _text(definition.get("id"))
    )
    image = ""
    images = definition.get("images")
    if isinstance(images, list) and images and isinstance(images[0], dict):
        scaled = images[0].get("scaled")
        if isinstance(scaled, dict):
            image = _text(scaled.get("path"))
    return text, image