from __future__ import annotations

from livews.core.session import CookieJar


def test_cookie_string_from_header():
    jar = CookieJar.from_string("sessionid=abc; tt_csrf_token=xyz;  ")
    assert jar.get("sessionid") == "abc"
    assert jar.get_cookie_string() == "sessionid=abc; tt_csrf_token=xyz"


def test_set_cookie_headers_are_merged():
    jar = CookieJar({"sessionid": "old"})
    jar.update_from_header(["sessionid=new; Path=/; HttpOnly", "ttwid=1%7Cabc; Domain=.example.com"])

    assert jar.get("sessionid") == "new"
    assert jar.get("ttwid") == "1%7Cabc"
    assert len(jar) == 2


def test_empty_jar():
    assert CookieJar.from_string("").get_cookie_string() == ""
