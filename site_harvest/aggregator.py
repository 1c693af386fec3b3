# File: site_harvest/aggregator.py
"""site_harvest.aggregator: отчёт о структуре сайта (гистограмма по первым сегментам пути)."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List

from site_harvest.utils import parse_url


@dataclass(slots=True)
class SiteStructure:
    """Итог discovery: все найденные URL и число URL в каждом разделе сайта."""

    total_urls: int = 0
    urls: List[str] = field(default_factory=list)
    sections: Dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Формат файла манифеста."""
        return {"totalUrls": self.total_urls, "urls": list(self.urls), "sections": dict(self.sections)}


def section_of(url: str) -> str | None:
    """``/первый-сегмент/`` или ``/`` для корня; None для невалидного URL."""
    parts = parse_url(url)
    if parts is None:
        return None
    segments = [s for s in parts.path.split("/") if s]
    return f"/{segments[0]}/" if segments else "/"


def analyze_structure(urls: Iterable[str]) -> SiteStructure:
    """Собирает SiteStructure; невалидные URL не попадают в sections, но учитываются в total_urls."""
    url_list = list(urls)
    sections: Dict[str, int] = {}
    for url in url_list:
        section = section_of(url)
        if section is not None:
            sections[section] = sections.get(section, 0) + 1
    return SiteStructure(total_urls=len(url_list), urls=url_list, sections=sections)
