# File: site_harvest/parser/sitemap_parser.py
"""site_harvest.parser.sitemap_parser: разбор sitemap.xml / sitemap-index (в т.ч. .xml.gz)."""

from __future__ import annotations

import gzip
from dataclasses import dataclass, field
from typing import List, Literal, Union

from lxml import etree

from site_harvest.exceptions import SitemapParseError

__all__ = ["SitemapDocument", "parse_sitemap"]

_GZIP_MAGIC = b"\x1f\x8b"

SitemapKind = Literal["index", "urlset", "unknown"]


@dataclass(slots=True)
class SitemapDocument:
    """Тип документа и найденные в нём <loc>."""

    kind: SitemapKind
    locs: List[str] = field(default_factory=list)

    @property
    def is_index(self) -> bool:
        return self.kind == "index"


def _decode(content: Union[str, bytes]) -> bytes:
    if isinstance(content, str):
        return content.encode("utf-8")
    if content.startswith(_GZIP_MAGIC):
        try:
            return gzip.decompress(content)
        except (OSError, EOFError) as exc:
            raise SitemapParseError(f"Broken gzip sitemap: {exc}", cause=exc) from exc
    return content


def parse_sitemap(content: Union[str, bytes]) -> SitemapDocument:
    """Разбирает sitemap и возвращает SitemapDocument.

    Args:
        content: текст или байты sitemap (gzip распаковывается автоматически).

    Returns:
        ``kind="index"`` с адресами дочерних sitemap из ``<sitemap><loc>``,
        ``kind="urlset"`` с адресами страниц из ``<url><loc>``, либо
        ``kind="unknown"`` без адресов для любого другого корня.

    Raises:
        SitemapParseError: если XML не разбирается.

    Пример:
    ```python
    doc = parse_sitemap(Path("sitemap.xml").read_bytes())
    if not doc.is_index:
        print(doc.locs)
    ```
    """
    data = _decode(content)
    parser = etree.XMLParser(ns_clean=True, recover=True, resolve_entities=False, no_network=True)
    try:
        root = etree.fromstring(data, parser=parser)
    except (etree.XMLSyntaxError, ValueError) as exc:
        raise SitemapParseError(f"Invalid sitemap XML: {exc}", cause=exc) from exc
    if root is None:
        raise SitemapParseError("Empty or unparseable sitemap document")

    tag = etree.QName(root).localname.lower() if isinstance(root.tag, str) else ""
    if tag == "sitemapindex":
        locs = root.findall("{*}sitemap/{*}loc")
        kind: SitemapKind = "index"
    elif tag == "urlset":
        locs = root.findall("{*}url/{*}loc")
        kind = "urlset"
    else:
        return SitemapDocument(kind="unknown")
    return SitemapDocument(kind=kind, locs=[loc.text.strip() for loc in locs if loc.text and loc.text.strip()])
