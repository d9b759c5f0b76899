from unittest.mock import Mock, patch

import pytest

from zeroplug.jiami import decrypt, decrypt_url, encrypt, encrypt_url, parse_reply


def fake_response(body):
    response = Mock()
    response.content = body
    response.raise_for_status = Mock()
    return response


def test_urls():
    assert encrypt_url("abc") == "http://ovooa.com/API/sho_u/?msg=abc"
    assert decrypt_url("abc") == "http://ovooa.com/API/sho_u/?format=1&msg=abc"


def test_parse_reply_message_case_insensitive():
    assert parse_reply('{"data":{"Message":"嗷呜"}}') == "嗷呜"
    assert parse_reply(b'{"data":{"message":"abc"}}') == "abc"


def test_parse_reply_missing_fields():
    assert parse_reply('{"code":1}') == ""
    assert parse_reply('{"data":{}}') == ""


def test_parse_reply_invalid():
    with pytest.raises(ValueError):
        parse_reply("not json")
    with pytest.raises(ValueError):
        parse_reply('{"data":"text"}')


def test_encrypt_calls_api():
    with patch("requests.get", return_value=fake_response(b'{"data":{"Message":"out"}}')) as get:
        assert encrypt("in") == "out"
    assert get.call_args[0][0] == encrypt_url("in")


def test_decrypt_calls_api():
    with patch("requests.get", return_value=fake_response(b'{"data":{"Message":"plain"}}')) as get:
        assert decrypt("code") == "plain"
    assert get.call_args[0][0] == decrypt_url("code")