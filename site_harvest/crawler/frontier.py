from __future__ import annotations

import asyncio
import time
from enum import Enum
from typing import AsyncIterator, List, Optional, Sequence

from site_harvest.config import CrawlRequest
from site_harvest.crawler.models import FrontierState, PageResult, QueueEntry
from site_harvest.crawler.renderer import RenderedPage, Renderer
from site_harvest.crawler.resources import ResourceCollector
from site_harvest.exceptions import ConfigurationError, RenderError
from site_harvest.logger import logger
from site_harvest.utils import is_crawlable, normalize_url, parse_url, remove_duplicates, url_origin

__all__ = ("Frontier", "FrontierStage")


class FrontierStage(str, Enum):
    IDLE = "idle"
    SEEDING = "seeding"
    DRAINING = "draining"
    DONE = "done"


class Frontier:
    """Breadth-first crawl of one :class:`CrawlRequest`.

    Pages are rendered one at a time in FIFO order. A frontier owns its queue and
    visited set and can run only once.

    In manifest mode (``request.include_urls``) exactly the manifest URLs are
    visited: no link discovery, no origin or pattern filtering, and the page
    limit equals the manifest length. Otherwise links of each page are queued
    at ``depth + 1`` while ``depth < max_depth`` if they are same-origin, not
    excluded, not visited and under the seed URL's path.

    A navigation answered with HTTP 400 or above counts as a failed page: it is
    logged and skipped rather than yielded, so error pages are never stored.
    The origin moves to the final URL of the first page only once that page
    has been extracted successfully.
    """

    def __init__(
        self,
        request: CrawlRequest,
        renderer: Renderer,
        *,
        resources: Optional[ResourceCollector] = None,
    ) -> None:
        if request.include_resources and resources is None:
            raise ConfigurationError("include_resources requires a ResourceCollector")
        self.request = request
        self.renderer = renderer
        self.resources = resources
        self.state = FrontierState()
        self.stage = FrontierStage.IDLE
        self.processed = 0
        self.origin: str = url_origin(request.seed_url) or ""
        self.scope_prefix: str = self._scope_for(self.origin)
        self._patterns = request.compiled_patterns()

    # ------------------------------------------------------------------ #
    # Public API                                                          #
    # ------------------------------------------------------------------ #

    async def crawl(self) -> List[PageResult]:
        return [page async for page in self.pages()]

    async def pages(self) -> AsyncIterator[PageResult]:
        """Yield pages as they are rendered; the renderer is released on every exit path."""
        if self.stage is not FrontierStage.IDLE:
            raise RuntimeError("Frontier instances are single-use")
        self.stage = FrontierStage.SEEDING
        self._seed()
        limit = self.request.page_limit
        max_depth = self.request.max_depth
        if self.request.manifest_mode:
            logger.info("Старт обхода по манифесту: %d URL", len(self.state.queue))
        else:
            logger.info("Старт обхода: %s (depth=%s, max_pages=%s)", self.request.seed_url, max_depth, limit)

        start = time.monotonic()
        self.stage = FrontierStage.DRAINING
        try:
            async with self.renderer:
                while self.state.queue and (limit is None or self.processed < limit):
                    entry = self.state.pop()
                    if max_depth is not None and entry.depth > max_depth:
                        continue
                    page = await self._process(entry)
                    if page is None:
                        continue
                    self.processed += 1
                    yield page
        finally:
            self.stage = FrontierStage.DONE
            logger.info(
                "Обход завершён: %d страниц за %.2f с, посещено %d URL",
                self.processed,
                time.monotonic() - start,
                len(self.state.visited),
            )

    # ------------------------------------------------------------------ #
    # Internals                                                           #
    # ------------------------------------------------------------------ #

    def _seed(self) -> None:
        if self.request.manifest_mode:
            for url in self.request.include_urls:
                normalized = normalize_url(url)
                if normalized is None:
                    logger.warning("Skipping invalid manifest URL: %r", url)
                elif not self.state.push(normalized, 0, normalized):
                    logger.debug("Duplicate manifest URL: %s", url)
            return
        seed = self.request.seed_url
        self.state.push(seed, 0, normalize_url(seed) or seed)

    async def _process(self, entry: QueueEntry) -> Optional[PageResult]:
        logger.info("Crawling: %s (depth %d)", entry.url, entry.depth)
        try:
            page = await self.renderer.navigate(entry.url)
        except (RenderError, asyncio.TimeoutError) as exc:
            logger.warning("Failed to crawl %s: %s", entry.url, exc)
            return None

        try:
            result = await self._extract(entry, page)
        except (RenderError, asyncio.TimeoutError) as exc:
            logger.warning("Failed to crawl %s: %s", entry.url, exc)
            return None
        finally:
            await page.close()

        if self.processed == 0 and not self.request.manifest_mode:
            self._rebase(result.final_url)
        if self._expands(entry.depth):
            self._enqueue_links(result.outgoing_links, entry.depth + 1)
        return result

    async def _extract(self, entry: QueueEntry, page: RenderedPage) -> PageResult:
        navigation = page.navigation
        if navigation.status >= 400:
            raise RenderError(f"HTTP {navigation.status}")

        anchors = await page.anchors()
        title = await page.title()
        text = await page.visible_text()

        resources = ()
        if self.request.include_resources and self.resources is not None:
            images = await page.image_candidates()
            resources = await self.resources.collect(images, anchors)

        return PageResult(
            url=entry.url,
            title=title,
            text_content=text,
            outgoing_links=tuple(remove_duplicates([a.href for a in anchors])),
            resources=resources,
            depth=entry.depth,
            final_url=navigation.final_url,
        )

    def _expands(self, depth: int) -> bool:
        if self.request.manifest_mode:
            return False
        return self.request.max_depth is None or depth < self.request.max_depth

    def _enqueue_links(self, links: Sequence[str], depth: int) -> None:
        added = 0
        for link in links:
            normalized = normalize_url(link)
            if normalized is None or normalized in self.state.visited:
                continue
            if not is_crawlable(link, self.origin, self._patterns):
                continue
            if not normalized.startswith(self.scope_prefix):
                continue
            if self.state.push(normalized, depth, normalized):
                added += 1
        logger.debug("Queued %d new links at depth %d (queue=%d)", added, depth, len(self.state.queue))

    def _rebase(self, final_url: str) -> None:
        new_origin = url_origin(final_url)
        if new_origin and new_origin != self.origin:
            logger.info("Redirected from %s to %s. Updating base origin.", self.origin, new_origin)
            self.origin = new_origin
            self.scope_prefix = self._scope_for(new_origin)

    def _scope_for(self, origin: str) -> str:
        """Origin plus the seed URL's path: links must start with it."""
        parts = parse_url(self.request.seed_url)
        path = parts.path if parts is not None and parts.path else "/"
        return origin + path
