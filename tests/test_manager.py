from unittest import mock

import pytest
import requests

from zeroplug.manager import (
    MAX_BAN_MINUTES,
    MemberStore,
    ban_minutes,
    check_new_user,
    gist_url,
    parse_join_answer,
    render_welcome,
    unescape_cq,
    verify_gist_timestamp,
)


@pytest.fixture
def store(tmp_path):
    with MemberStore(tmp_path / "config.db") as members:
        yield members


def test_member_store_round_trip(store):
    assert not store.has_github_user("octo")
    store.add(42, "octo")
    assert store.has_github_user("octo")
    assert not store.has_github_user("other")


def test_member_store_persists(tmp_path):
    path = tmp_path / "m.db"
    first = MemberStore(path)
    first.add(1, "alice")
    first.close()
    with MemberStore(path) as second:
        assert second.has_github_user("alice")


def test_render_welcome_all_placeholders():
    text = render_welcome("{at}{nickname}{avatar}{uid}{gid}{groupname}", 10, "Nick", 20, "Group")
    assert text == (
        "[CQ:at,qq=10]Nick[CQ:image,file=http://q4.qlogo.cn/g?b=qq&nk=10&s=640]1020Group"
    )


def test_render_welcome_plain_text_unchanged():
    assert render_welcome("欢迎~", 1, "n", 2, "g") == "欢迎~"


def test_ban_minutes_units():
    assert ban_minutes(5, "分钟") == 5
    assert ban_minutes(2, "小时") == 120
    assert ban_minutes(2, "h") == ban_minutes(2, "小时")
    assert ban_minutes(1, "天") == ban_minutes(24, "hours")
    assert ban_minutes(7, "whatever") == 7


def test_ban_minutes_capped():
    assert ban_minutes(30, "天") == MAX_BAN_MINUTES
    assert ban_minutes(43200, "m") == 43199


def test_unescape_cq():
    assert unescape_cq("&#91;CQ:face,id=1&#93;") == "[CQ:face,id=1]"


def test_gist_url_format():
    url = gist_url("octo", "abc", 123)
    assert url == (
        "https://gist.githubusercontent.com/octo/abc/raw/202cb962ac59075b964b07152d234b70"
    )


def test_verify_gist_timestamp_accepts_recent():
    assert verify_gist_timestamp(b"1000", now=1500) == 1000
    assert verify_gist_timestamp("2000", now=1500) == 2000


def test_verify_gist_timestamp_too_old():
    with pytest.raises(ValueError, match="时间戳超时"):
        verify_gist_timestamp("1000", now=1600)


def test_verify_gist_timestamp_bad_format():
    with pytest.raises(ValueError, match="时间戳格式错误: abc"):
        verify_gist_timestamp(b"abc", now=0)


def test_parse_join_answer():
    assert parse_join_answer("问题：gist\n答案：octo/deadbeef") == ("octo", "deadbeef")


@pytest.mark.parametrize("comment", ["答案：/hash", "答案：nohash", "no marker at all"])
def test_parse_join_answer_errors(comment):
    with pytest.raises(ValueError, match="格式错误"):
        parse_join_answer(comment)


def _response(body):
    response = mock.Mock()
    response.content = body
    response.raise_for_status.return_value = None
    return response


def test_check_new_user_admits(store):
    with mock.patch("zeroplug.manager.requests.get", return_value=_response(b"100")) as get:
        check_new_user(store, 7, 123, "octo", "abc", now=200)
    assert get.call_args[0][0] == gist_url("octo", "abc", 123)
    assert store.has_github_user("octo")


def test_check_new_user_rejects_known_user(store):
    store.add(1, "octo")
    with pytest.raises(ValueError, match="该github用户已入群"):
        check_new_user(store, 7, 123, "octo", "abc", now=200)


def test_check_new_user_network_error(store):
    with mock.patch(
        "zeroplug.manager.requests.get", side_effect=requests.ConnectionError("down")
    ):
        with pytest.raises(ValueError, match="无法连接到gist"):
            check_new_user(store, 7, 123, "octo", "abc", now=200)
    assert not store.has_github_user("octo")


def test_check_new_user_expired(store):
    with mock.patch("zeroplug.manager.requests.get", return_value=_response(b"100")):
        with pytest.raises(ValueError, match="时间戳超时"):
            check_new_user(store, 7, 123, "octo", "abc", now=100000)
    assert not store.has_github_user("octo")