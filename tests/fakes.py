"""In-memory stand-ins for the renderer, fetcher and storage sink used across the test-suite."""
from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple, Union

from site_harvest.crawler.models import Anchor, FetchResult, ImageCandidate, NavigationResult
from site_harvest.exceptions import RenderError

LinkSpec = Union[str, Tuple[str, str]]


class FakePage:
    def __init__(self, renderer: "FakeRenderer", url: str, spec: Dict[str, Any]) -> None:
        self._renderer = renderer
        self._spec = spec
        self.navigation = NavigationResult(
            final_url=spec.get("final_url", url),
            status=spec.get("status", 200),
        )

    async def title(self) -> str:
        return self._spec.get("title", "")

    async def visible_text(self) -> str:
        if self._spec.get("text_error"):
            raise RenderError("text extraction failed")
        return self._spec.get("text", "")

    async def anchors(self) -> List[Anchor]:
        anchors: List[Anchor] = []
        for link in self._spec.get("links", []):
            if isinstance(link, tuple):
                anchors.append(Anchor(href=link[0], text=link[1]))
            else:
                anchors.append(Anchor(href=link))
        return anchors

    async def anchor_hrefs(self) -> List[str]:
        return [a.href for a in await self.anchors()]

    async def image_candidates(self) -> List[ImageCandidate]:
        return [ImageCandidate(*img) for img in self._spec.get("images", [])]

    async def close(self) -> None:
        self._renderer.closed_pages += 1


class FakeRenderer:
    """Serves pages from a ``{url: spec}`` dict; unknown URLs fail to render."""

    def __init__(self, pages: Dict[str, Dict[str, Any]]) -> None:
        self.pages = pages
        self.visits: List[str] = []
        self.entered = 0
        self.exited = 0
        self.closed_pages = 0

    async def __aenter__(self) -> "FakeRenderer":
        self.entered += 1
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.exited += 1

    async def navigate(self, url: str) -> FakePage:
        self.visits.append(url)
        spec = self.pages.get(url)
        if spec is None:
            raise RenderError(f"net::ERR_NAME_NOT_RESOLVED at {url}")
        return FakePage(self, url, spec)

    @property
    def opened_pages(self) -> int:
        return sum(1 for url in self.visits if url in self.pages)


class FakeFetcher:
    """Answers from ``{url: (status, body, content_type)}``; anything else is a 404."""

    def __init__(self, responses: Optional[Dict[str, Tuple[int, Union[str, bytes], str]]] = None) -> None:
        self.responses = responses or {}
        self.calls: List[str] = []

    async def __aenter__(self) -> "FakeFetcher":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        return None

    async def fetch(self, url: str) -> FetchResult:
        self.calls.append(url)
        if url not in self.responses:
            return FetchResult(url=url, status=404)
        status, body, content_type = self.responses[url]
        if isinstance(body, str):
            body = body.encode("utf-8")
        return FetchResult(url=url, status=status, content_type=content_type, body=body)


class MemorySink:
    def __init__(self, fail_keys: Tuple[str, ...] = ()) -> None:
        self.objects: Dict[str, Tuple[bytes, str]] = {}
        self.fail_keys = fail_keys

    def put(self, key: str, body: bytes, content_type: str) -> bool:
        if any(key.endswith(suffix) for suffix in self.fail_keys):
            return False
        self.objects[key] = (body, content_type)
        return True


def urlset(*urls: str) -> str:
    entries = "".join(f"<url><loc>{u}</loc></url>" for u in urls)
    return f'<?xml version="1.0" encoding="UTF-8"?><urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">{entries}</urlset>'


def sitemap_index(*urls: str) -> str:
    entries = "".join(f"<sitemap><loc>{u}</loc></sitemap>" for u in urls)
    return f'<?xml version="1.0" encoding="UTF-8"?><sitemapindex xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">{entries}</sitemapindex>'
