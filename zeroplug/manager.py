"""Group management helpers: welcome templates, bans and gist join checks."""

from __future__ import annotations

import hashlib
import re
import sqlite3
import time
from os import PathLike

import requests

GIST_RAW = "https://gist.githubusercontent.com/{}/{}/raw/{}"
AVATAR_URL = "http://q4.qlogo.cn/g?b=qq&nk={}&s=640"
MAX_BAN_MINUTES = 43199
GIST_WINDOW_SECONDS = 600
ANSWER_MARKER = "答案："

_HOUR_UNITS = frozenset({"小时", "hour", "hours", "h"})
_DAY_UNITS = frozenset({"天", "day", "days", "d"})
_INTEGER = re.compile(r"[+-]?[0-9]+")
_TIMEOUT = 30


class MemberStore:
    """Members admitted through a gist check, keyed by GitHub user name."""

    def __init__(self, path: str | PathLike[str]) -> None:
        self._db = sqlite3.connect(str(path), check_same_thread=False)
        self._db.execute("CREATE TABLE IF NOT EXISTS member (qq INTEGER, ghun TEXT)")
        self._db.commit()

    def __enter__(self) -> "MemberStore":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def has_github_user(self, name: str) -> bool:
        """Whether a member with this GitHub user name is already in the group."""
        row = self._db.execute("SELECT 1 FROM member WHERE ghun = ? LIMIT 1", (name,)).fetchone()
        return row is not None

    def add(self, qq: int, github_user: str) -> None:
        """Record an admitted member."""
        self._db.execute("INSERT INTO member (qq, ghun) VALUES (?, ?)", (qq, github_user))
        self._db.commit()

    def close(self) -> None:
        """Close the database."""
        self._db.close()


def render_welcome(
    template: str, user_id: int, nickname: str, group_id: int, group_name: str
) -> str:
    """Fill the placeholders of a welcome or farewell template with CQ codes."""
    uid = str(user_id)
    replacements = (
        ("{at}", f"[CQ:at,qq={uid}]"),
        ("{nickname}", nickname),
        ("{avatar}", f"[CQ:image,file={AVATAR_URL.format(uid)}]"),
        ("{uid}", uid),
        ("{gid}", str(group_id)),
        ("{groupname}", group_name),
    )
    text = template
    for placeholder, value in replacements:
        text = text.replace(placeholder, value)
    return text


def ban_minutes(amount: int, unit: str) -> int:
    """Minutes of a ban of ``amount`` ``unit``; unknown units mean minutes.

    The result is capped just below one month, the longest ban allowed.
    """
    minutes = amount
    if unit in _HOUR_UNITS:
        minutes *= 60
    elif unit in _DAY_UNITS:
        minutes *= 60 * 24
    return min(minutes, MAX_BAN_MINUTES)


def unescape_cq(text: str) -> str:
    """Turn escaped CQ brackets back into real ones."""
    return text.replace("&#91;", "[").replace("&#93;", "]")


def gist_url(user: str, gist_hash: str, group_id: int) -> str:
    """The raw gist file whose name is the md5 of the group number."""
    name = hashlib.md5(str(group_id).encode("ascii")).hexdigest()
    return GIST_RAW.format(user, gist_hash, name)


def verify_gist_timestamp(data: bytes | str, now: float | None = None) -> int:
    """Check that a gist holds a Unix timestamp within ten minutes of ``now``.

    Return the timestamp; raise ValueError with the reason otherwise.
    """
    text = data.decode("utf-8", "replace") if isinstance(data, bytes) else data
    if not _INTEGER.fullmatch(text):
        raise ValueError("时间戳格式错误: " + text)
    stamp = int(text)
    current = int(time.time() if now is None else now)
    if abs(current - stamp) >= GIST_WINDOW_SECONDS:
        raise ValueError("时间戳超时")
    return stamp


def parse_join_answer(comment: str) -> tuple[str, str]:
    """Split the "user/hash" answer of a join request; raise ValueError if malformed."""
    marker = comment.find(ANSWER_MARKER)
    if marker < 0:
        raise ValueError("格式错误!")
    answer = comment[marker + len(ANSWER_MARKER) :]
    divider = answer.find("/")
    if divider <= 0:
        raise ValueError("格式错误!")
    return answer[:divider], answer[divider + 1 :]


def check_new_user(
    store: MemberStore,
    qq: int,
    group_id: int,
    user: str,
    gist_hash: str,
    now: float | None = None,
) -> None:
    """Admit ``qq`` if the gist proves ``user`` asked just now; raise ValueError if not."""
    if store.has_github_user(user):
        raise ValueError("该github用户已入群")
    try:
        response = requests.get(gist_url(user, gist_hash, group_id), timeout=_TIMEOUT)
        response.raise_for_status()
    except requests.RequestException as exc:
        raise ValueError(f"无法连接到gist: {exc}") from exc
    verify_gist_timestamp(response.content, now)
    store.add(qq, user)