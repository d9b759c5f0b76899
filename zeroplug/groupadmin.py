"""Group administration helpers: join quizzes, feature flags, essence lists and roll calls."""

from __future__ import annotations

import random
import re
from datetime import datetime
from typing import Any, Mapping, Sequence

ENABLE_OPTIONS = frozenset({"开启", "打开", "启用"})
DISABLE_OPTIONS = frozenset({"关闭", "关掉", "禁用"})
VERIFY_FLAG = 0x1
GIST_FLAG = 0x10
MAX_CARD_BYTES = 60
MAX_TITLE_BYTES = 18
ROLL_CALL_WINDOW = 10

_INT63 = 0x7FFF_FFFF_FFFF_FFFF
_INTEGER = re.compile(r"[+-]?[0-9]+")
_TIME_FORMAT = "%Y/%m/%d %H:%M:%S"


class JoinQuiz:
    """An addition question a newcomer must answer to stay in the group."""

    def __init__(self, rng: random.Random | None = None) -> None:
        chooser = rng if rng is not None else random
        self.a = chooser.randrange(100)
        self.b = chooser.randrange(100)
        self.answer = self.a + self.b
        self.question = f"{self.a}+{self.b}=?"

    def check(self, text: str) -> bool | None:
        """Judge a reply: True if right, False if a wrong number, None if not a number."""
        cleaned = text.replace(" ", "")
        if not _INTEGER.fullmatch(cleaned):
            return None
        return int(cleaned) == self.answer


def toggle_flag(data: int, option: str, bit: int) -> int:
    """Set or clear ``bit`` in a group's plugin data according to ``option``."""
    if option in ENABLE_OPTIONS:
        return data | bit
    if option in DISABLE_OPTIONS:
        return data & ~bit & _INT63
    raise ValueError(f"unknown option: {option!r}")


def _stamp(value: Any) -> str:
    return datetime.fromtimestamp(int(value or 0)).strftime(_TIME_FORMAT)


def format_essence(info: Mapping[str, Any]) -> str:
    """Describe one entry of a group's essence message list."""
    return (
        f"信息ID: {int(info.get('message_id') or 0)}\n"
        f"发送者昵称: {info.get('sender_nick') or ''}\n"
        f"发送者QQ 号: {int(info.get('sender_id') or 0)}\n"
        f"消息发送时间: {_stamp(info.get('sender_time'))}\n"
        f"操作者昵称: {info.get('operator_nick') or ''}\n"
        f"操作者QQ 号: {int(info.get('operator_id') or 0)}\n"
        f"精华设置时间: {_stamp(info.get('operator_time'))}"
    )


def pick_member(
    members: Sequence[Mapping[str, Any]], rng: random.Random | None = None
) -> Mapping[str, Any]:
    """Pick one of the ten members who spoke most recently."""
    if not members:
        raise ValueError("no members to pick from")
    ordered = sorted(members, key=lambda member: int(member.get("last_sent_time") or 0))
    recent = ordered[-ROLL_CALL_WINDOW:]
    chooser = rng if rng is not None else random
    return chooser.choice(recent)


def parse_cron_reminder(groups: Sequence[str | None]) -> tuple[str, str, str]:
    """Split the captures of a cron reminder command into (cron, alert, url)."""
    values = ["" if group is None else group for group in groups]
    if len(values) == 4:
        url = values[2]
        if url.startswith("用"):
            url = url[1:]
        return values[1], values[3], url
    if len(values) == 3:
        return values[1], values[2], ""
    raise ValueError("参数非法!")


def card_too_long(name: str) -> bool:
    """Whether a group card exceeds the byte limit."""
    return len(name.encode("utf-8")) > MAX_CARD_BYTES


def title_too_long(title: str) -> bool:
    """Whether a special title exceeds the byte limit."""
    return len(title.encode("utf-8")) > MAX_TITLE_BYTES