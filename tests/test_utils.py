# File: tests/test_utils.py
import pytest

from site_harvest.utils import (
    is_crawlable,
    normalize_url,
    parse_url,
    remove_duplicates,
    url_domain,
    url_origin,
)


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("https://site.test/a/b/", "https://site.test/a/b"),
        ("https://site.test/a#section", "https://site.test/a"),
        ("https://site.test/", "https://site.test/"),
        ("https://site.test", "https://site.test/"),
        ("HTTPS://Site.TEST/Path/", "https://site.test/Path"),
        ("https://site.test:443/a", "https://site.test/a"),
        ("http://site.test:8080/a/", "http://site.test:8080/a"),
        ("https://site.test/a/?q=1#x", "https://site.test/a?q=1"),
    ],
)
def test_normalize_url(raw, expected):
    assert normalize_url(raw) == expected


@pytest.mark.parametrize("raw", ["not a url", "/relative/path", "mailto:me@site.test", "http://[::1", ""])
def test_normalize_url_invalid(raw):
    assert normalize_url(raw) is None
    assert parse_url(raw) is None


@pytest.mark.parametrize(
    "raw",
    [
        "https://site.test/a//",
        "https://site.test/",
        "https://Site.test:443/x/y/?a=b#frag",
        "http://user@site.test/p/",
    ],
)
def test_normalize_is_idempotent(raw):
    once = normalize_url(raw)
    assert once is not None
    assert normalize_url(once) == once


def test_url_origin_and_domain():
    assert url_origin("https://Site.test:443/a/b?c") == "https://site.test"
    assert url_origin("http://site.test:8080/") == "http://site.test:8080"
    assert url_origin("garbage") is None
    assert url_domain("https://www.site.test:8443/a") == "www.site.test"
    assert url_domain("garbage") == ""


def test_is_crawlable_accepts_same_origin_page():
    assert is_crawlable("https://site.test/products/widget", "https://site.test/", [])


def test_is_crawlable_rejects_non_document_extension():
    assert not is_crawlable("https://site.test/files/manual.pdf", "https://site.test", [])
    assert not is_crawlable("https://site.test/img/logo.PNG", "https://site.test", [])
    assert not is_crawlable("https://site.test/static/app.js", "https://site.test", [])


def test_is_crawlable_rejects_cross_origin():
    assert not is_crawlable("https://other.test/page", "https://site.test", [])
    assert not is_crawlable("http://site.test/page", "https://site.test", [])


def test_is_crawlable_rejects_excluded_pattern():
    assert not is_crawlable("https://site.test/blog/2020/post", "https://site.test", [r"/blog/\d{4}/"])
    assert is_crawlable("https://site.test/blog/latest", "https://site.test", [r"/blog/\d{4}/"])


def test_is_crawlable_never_raises():
    assert not is_crawlable("http://[broken", "https://site.test", [])
    assert not is_crawlable("https://site.test/a", "https://site.test", ["(unclosed"])


def test_remove_duplicates_keeps_order():
    assert remove_duplicates(["b", "a", "b", "c", "a"]) == ["b", "a", "c"]
