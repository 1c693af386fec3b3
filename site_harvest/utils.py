# File: site_harvest/utils.py
"""site_harvest.utils: канонизация и классификация URL (нормализация, origin, фильтры обхода)."""

from __future__ import annotations

import re
from typing import Collection, Iterable, List, Optional, Pattern, Sequence, Union
from urllib.parse import SplitResult, urlsplit, urlunsplit

from site_harvest.logger import logger

__all__: Sequence[str] = (
    "NON_DOCUMENT_EXTENSIONS",
    "parse_url",
    "normalize_url",
    "url_origin",
    "url_domain",
    "is_crawlable",
    "remove_duplicates",
)

#: Расширения, которые никогда не считаются HTML-документами.
NON_DOCUMENT_EXTENSIONS: tuple[str, ...] = (
    ".jpg",
    ".jpeg",
    ".png",
    ".gif",
    ".webp",
    ".bmp",
    ".svg",
    ".ico",
    ".css",
    ".js",
    ".mp4",
    ".webm",
    ".mov",
    ".pdf",
)

_DEFAULT_PORTS = {"http": 80, "https": 443}

PatternT = Union[str, Pattern[str]]


def parse_url(url: str) -> Optional[SplitResult]:
    """Разбирает URL; возвращает None, если нет схемы/хоста или разбор падает."""
    try:
        parts = urlsplit(url.strip())
        parts.port  # noqa: B018 - raises ValueError on a malformed port
    except (AttributeError, ValueError):
        return None
    if not parts.scheme or not parts.hostname:
        return None
    return parts


def _host_port(parts: SplitResult) -> str:
    host = parts.hostname or ""
    if ":" in host:
        host = f"[{host}]"
    port = parts.port
    if port is not None and _DEFAULT_PORTS.get(parts.scheme.lower()) != port:
        host = f"{host}:{port}"
    return host


def normalize_url(url: str) -> Optional[str]:
    """Нормализует URL для дедупликации.

    Схема и хост приводятся к нижнему регистру, порт по умолчанию и фрагмент
    отбрасываются, завершающие слеши пути убираются (корень остаётся ``/``).
    Возвращает None для невалидного URL.
    """
    parts = parse_url(url)
    if parts is None:
        return None
    userinfo = parts.netloc.rpartition("@")[0]
    netloc = _host_port(parts)
    if userinfo:
        netloc = f"{userinfo}@{netloc}"
    path = parts.path.rstrip("/") or "/"
    return urlunsplit((parts.scheme.lower(), netloc, path, parts.query, ""))


def url_origin(url: str) -> Optional[str]:
    """Возвращает origin вида ``scheme://host[:port]`` или None."""
    parts = parse_url(url)
    if parts is None:
        return None
    return f"{parts.scheme.lower()}://{_host_port(parts)}"


def url_domain(url: str) -> str:
    """Хост URL без порта (пустая строка, если URL невалиден)."""
    parts = parse_url(url)
    return parts.hostname if parts is not None and parts.hostname else ""


def is_crawlable(url: str, origin_url: str, exclude_patterns: Iterable[PatternT] = ()) -> bool:
    """Проверяет, можно ли ставить URL в очередь обхода. Никогда не бросает исключений."""
    parts = parse_url(url)
    if parts is None:
        return False
    origin = url_origin(origin_url)
    if origin is None or url_origin(url) != origin:
        return False
    try:
        if any(re.search(pattern, url) for pattern in exclude_patterns):
            logger.debug("Excluded by pattern: %s", url)
            return False
    except re.error as exc:
        logger.debug("Bad exclude pattern while checking %s: %s", url, exc)
        return False
    return not parts.path.lower().endswith(NON_DOCUMENT_EXTENSIONS)


def remove_duplicates(urls: Collection[str]) -> List[str]:
    """Удаляет дубликаты из списка URL, сохраняя порядок."""
    unique = list(dict.fromkeys(urls))
    removed = len(urls) - len(unique)
    if removed:
        logger.debug("Removed %d duplicate URLs", removed)
    return unique
