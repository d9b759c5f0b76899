"""Beast-speak encryption and decryption through a public web API."""

from __future__ import annotations

import json

import requests

ENCRYPT_API = "http://ovooa.com/API/sho_u/?msg={}"
DECRYPT_API = "http://ovooa.com/API/sho_u/?format=1&msg={}"
_TIMEOUT = 30


def encrypt_url(text: str) -> str:
    """The API address that encrypts ``text``."""
    return ENCRYPT_API.format(text)


def decrypt_url(text: str) -> str:
    """The API address that decrypts ``text``."""
    return DECRYPT_API.format(text)


def parse_reply(data: bytes | str) -> str:
    """Extract ``data.message`` from an API reply; missing fields give ""."""
    reply = json.loads(data)
    if reply is None:
        return ""
    if not isinstance(reply, dict):
        raise ValueError("reply is not a JSON object")
    payload = reply.get("data")
    if payload is None:
        return ""
    if not isinstance(payload, dict):
        raise ValueError("reply data is not a JSON object")
    if isinstance(payload.get("Message"), str):
        return payload["Message"]
    for key, value in payload.items():
        if key.lower() == "message" and isinstance(value, str):
            return value
    return ""


def _fetch(url: str) -> bytes:
    response = requests.get(url, timeout=_TIMEOUT)
    response.raise_for_status()
    return response.content


def encrypt(text: str) -> str:
    """Encrypt ``text`` into beast speak."""
    return parse_reply(_fetch(encrypt_url(text)))


def decrypt(text: str) -> str:
    """Decrypt beast speak back into plain text."""
    return parse_reply(_fetch(decrypt_url(text)))