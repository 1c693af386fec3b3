# === FILE: site_harvest/parser/html_parser.py ===
"""HTML parsing utilities for SiteHarvest.

Used by :class:`~site_harvest.crawler.renderer.StaticRenderer` to answer the
same questions a browser page answers, straight from server-side markup:

* title:   document ``<title>`` text or ``""`` if absent.
* anchors: absolute http(s) links from ``<a href>`` with their text.
* images:  ``<img>`` sources with the declared width/height, if any.
* text:    visible text without script/style/nav/footer content.
"""
from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Optional
from urllib.parse import urljoin, urlsplit

from bs4 import BeautifulSoup
from bs4.element import Tag

from site_harvest.crawler.models import Anchor, ImageCandidate

__all__: Sequence[str] = ("ParsedPage", "parse_html")

#: Elements whose text never counts as page content.
HIDDEN_ELEMENTS: tuple[str, ...] = ("script", "style", "noscript", "template", "nav", "footer")


@dataclass(slots=True)
class ParsedPage:
    """Lightweight representation of an HTML page."""

    url: str
    title: str
    text: str
    anchors: list[Anchor] = field(default_factory=list)
    images: list[ImageCandidate] = field(default_factory=list)

    @property
    def links(self) -> list[str]:
        return [a.href for a in self.anchors]


def _absolute_http(base_url: str, href: str) -> Optional[str]:
    href = href.strip()
    if not href or href.startswith(("mailto:", "javascript:", "tel:", "data:")):
        return None
    try:
        absolute = urljoin(base_url, href)
        scheme = urlsplit(absolute).scheme
    except ValueError:
        return None
    return absolute if scheme in ("http", "https") else None


def _dimension(value: object) -> Optional[int]:
    if not isinstance(value, str):
        return None
    value = value.strip().lower().removesuffix("px")
    return int(value) if value.isdigit() else None


def parse_html(html: str | bytes, base_url: str = "") -> ParsedPage:
    """Parse raw HTML markup fetched from *base_url*."""
    soup = BeautifulSoup(html, "html.parser")

    title_tag = soup.find("title")
    title = title_tag.get_text(strip=True) if title_tag else ""

    anchors: list[Anchor] = []
    for tag in soup.find_all("a", href=True):
        if not isinstance(tag, Tag):
            continue
        href_val = tag.get("href")
        if not isinstance(href_val, str):
            continue
        absolute = _absolute_http(base_url, href_val)
        if absolute:
            anchors.append(Anchor(href=absolute, text=tag.get_text(" ", strip=True)))

    images: list[ImageCandidate] = []
    for tag in soup.find_all("img", src=True):
        if not isinstance(tag, Tag):
            continue
        src_val = tag.get("src")
        if not isinstance(src_val, str):
            continue
        absolute = _absolute_http(base_url, src_val)
        if absolute:
            images.append(
                ImageCandidate(
                    src=absolute,
                    width=_dimension(tag.get("width")),
                    height=_dimension(tag.get("height")),
                )
            )

    # Visible text (skip <script>, <style>, navigation and footers)
    for element in soup(list(HIDDEN_ELEMENTS)):
        element.decompose()
    body = soup.body or soup
    text = "\n".join(body.stripped_strings)

    return ParsedPage(url=base_url, title=title, text=text, anchors=anchors, images=images)
