# File: site_harvest/parser/robots_parser.py
"""site_harvest.parser.robots_parser: извлечение директив Sitemap из robots.txt."""

from __future__ import annotations

from typing import List, Tuple
from urllib.parse import urljoin


def parse_sitemap_directives(text: str, robots_url: str = "") -> List[str]:
    """Возвращает адреса из строк ``Sitemap:`` (регистр не важен), без дубликатов.

    Args:
        text: содержимое robots.txt.
        robots_url: адрес robots.txt; относительные значения дополняются от него.

    Returns:
        Список абсолютных URL sitemap в порядке появления.
    """
    sitemaps: List[str] = []
    for directive, value in _prepare_lines(text):
        if directive != "sitemap" or not value:
            continue
        url = urljoin(robots_url, value) if robots_url else value
        if url not in sitemaps:
            sitemaps.append(url)
    return sitemaps


def _prepare_lines(text: str) -> List[Tuple[str, str]]:
    """Разделяет строки на (директива, значение); комментарии отбрасываются."""
    lines: List[Tuple[str, str]] = []
    for raw in text.splitlines():
        line = raw.strip()
        if line.startswith("#") or ":" not in line:
            continue
        key, val = (part.strip() for part in line.split(":", 1))
        if key.lower() != "sitemap":
            val = val.split("#", 1)[0].strip()
        lines.append((key.lower(), val))
    return lines
