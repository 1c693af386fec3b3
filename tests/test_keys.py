import hashlib

import pytest

from site_harvest.keys import KeyScheme, hash_key, hierarchical_key, page_key, resource_key


def md5(value: str) -> str:
    return hashlib.md5(value.encode("utf-8")).hexdigest()


def test_hash_key():
    url = "https://ex.com/a/b/"
    assert hash_key(url, "ex.com") == f"ex.com/{md5(url)}.json"


@pytest.mark.parametrize(
    "url,expected",
    [
        ("https://ex.com/a/b/", "ex.com/a/b.json"),
        ("https://ex.com/a/b", "ex.com/a/b.json"),
        ("https://ex.com/", "ex.com/index.json"),
        ("https://ex.com", "ex.com/index.json"),
        ("https://ex.com//", "ex.com/index.json"),
        ("https://ex.com/a//", "ex.com/a/.json"),
        ("https://ex.com/docs/page.html", "ex.com/docs/page.html.json"),
    ],
)
def test_hierarchical_key(url, expected):
    assert hierarchical_key(url, "ex.com") == expected


def test_hierarchical_key_ignores_query_string():
    # known limitation: distinct URLs collide
    assert hierarchical_key("https://ex.com/list?page=1", "ex.com") == hierarchical_key(
        "https://ex.com/list?page=2", "ex.com"
    )
    assert hierarchical_key("https://ex.com/index", "ex.com") == hierarchical_key("https://ex.com/", "ex.com")


def test_hierarchical_key_falls_back_to_hash_on_parse_error():
    url = "http://[broken/page"
    assert hierarchical_key(url, "ex.com") == f"ex.com/{md5(url)}.json"


def test_page_key_selects_scheme():
    url = "https://ex.com/a/"
    assert page_key(url, "ex.com", KeyScheme.HIERARCHICAL) == "ex.com/a.json"
    assert page_key(url, "ex.com", "hierarchical") == "ex.com/a.json"
    assert page_key(url, "ex.com", KeyScheme.HASH) == hash_key(url, "ex.com")
    assert page_key(url, "ex.com") == hash_key(url, "ex.com")


def test_resource_key():
    img = "https://ex.com/img/photo.jpg"
    assert resource_key("ex.com/a/b.json", img, "jpg") == f"ex.com/a/b_resources/{md5(img)}.jpg"
    assert resource_key("ex.com/a/b.json", img, ".jpg") == f"ex.com/a/b_resources/{md5(img)}.jpg"
    assert resource_key("ex.com/a/b.json", img, "") == f"ex.com/a/b_resources/{md5(img)}.bin"
