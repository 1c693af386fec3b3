"""site_harvest.keys: storage keys for crawled pages and their resources.

Two page-key schemes are supported and both are part of the output contract:

* ``hash``: ``{domain}/{md5(url)}.json``. Flat and collision-free.
* ``hierarchical``: ``{domain}{path}.json`` mirroring the URL path
  (``/`` becomes ``/index``). Human-browsable, but the query string is ignored
  and a literal ``/index`` page shares its key with the site root.

Resource keys hang off the page key:
``{page key without .json}_resources/{md5(resource url)}.{extension}``.
"""
from __future__ import annotations

import hashlib
from enum import Enum
from urllib.parse import urlsplit

__all__ = ["KeyScheme", "url_hash", "hash_key", "hierarchical_key", "page_key", "resource_key"]

_PAGE_SUFFIX = ".json"


class KeyScheme(str, Enum):
    HASH = "hash"
    HIERARCHICAL = "hierarchical"


def url_hash(url: str) -> str:
    return hashlib.md5(url.encode("utf-8")).hexdigest()


def hash_key(url: str, domain: str) -> str:
    return f"{domain}/{url_hash(url)}{_PAGE_SUFFIX}"


def hierarchical_key(url: str, domain: str) -> str:
    """Key that mirrors the URL path; falls back to :func:`hash_key` if *url* does not parse."""
    try:
        path = urlsplit(url).path
    except ValueError:
        return hash_key(url, domain)
    if not path.startswith("/"):
        path = "/" + path
    if path.endswith("/"):
        path = path[:-1]
    if path in ("", "/"):
        path = "/index"
    return f"{domain}{path}{_PAGE_SUFFIX}"


def page_key(url: str, domain: str, scheme: KeyScheme | str = KeyScheme.HASH) -> str:
    if KeyScheme(scheme) is KeyScheme.HIERARCHICAL:
        return hierarchical_key(url, domain)
    return hash_key(url, domain)


def resource_key(page_key: str, resource_url: str, extension: str) -> str:
    base = page_key[: -len(_PAGE_SUFFIX)] if page_key.endswith(_PAGE_SUFFIX) else page_key
    extension = extension.lstrip(".") or "bin"
    return f"{base}_resources/{url_hash(resource_url)}.{extension}"
