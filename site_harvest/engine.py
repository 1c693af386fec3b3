# File: site_harvest/engine.py
"""site_harvest.engine: orchestration: discovery (sitemap → запасной обход → структура) и ingestion (обход → ключи → хранилище)."""

from __future__ import annotations

import asyncio
import json
from contextlib import AsyncExitStack, aclosing
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from site_harvest.aggregator import SiteStructure, analyze_structure
from site_harvest.config import CrawlRequest, HarvestConfig
from site_harvest.crawler.fetcher import Fetcher
from site_harvest.crawler.frontier import Frontier
from site_harvest.crawler.models import PageResult
from site_harvest.crawler.renderer import Renderer, create_renderer
from site_harvest.crawler.resources import ResourceCollector
from site_harvest.discovery.sitemap import SitemapResolver
from site_harvest.exceptions import ConfigurationError
from site_harvest.keys import page_key, resource_key
from site_harvest.logger import logger
from site_harvest.storage.base import StorageSink
from site_harvest.utils import remove_duplicates, url_origin

__all__ = ["DiscoveryService", "IngestionService", "IngestSummary", "build_page_record"]

RendererFactory = Callable[[], Renderer]


class DiscoveryService:
    """Находит URL сайта: sitemap, а если их нет, ограниченный обход; затем анализ структуры."""

    def __init__(
        self,
        site_url: str,
        config: HarvestConfig,
        *,
        fetcher: Optional[Fetcher] = None,
        renderer_factory: Optional[RendererFactory] = None,
    ) -> None:
        origin = url_origin(site_url)
        if origin is None:
            raise ConfigurationError(f"Discovery requires an absolute http(s) URL, got {site_url!r}")
        self.site_url = site_url
        self.origin = origin
        self.config = config
        self._fetcher = fetcher
        self._renderer_factory = renderer_factory or (lambda: create_renderer(config))

    async def discover(self) -> SiteStructure:
        async with AsyncExitStack() as stack:
            fetcher = self._fetcher or await stack.enter_async_context(Fetcher(self.config))
            resolver = SitemapResolver(fetcher, max_depth=self.config.sitemap_max_depth)
            urls = await resolver.discover_urls(self.site_url)

        if not urls:
            logger.info("No sitemaps found. Falling back to crawl discovery...")
            urls = await self._crawl_for_discovery()

        urls = remove_duplicates(urls)
        logger.info("Discovery found %d URLs.", len(urls))
        return analyze_structure(urls)

    async def _crawl_for_discovery(self) -> List[str]:
        request = CrawlRequest(
            seed_url=self.origin,
            max_depth=self.config.discovery_max_depth,
            max_pages=self.config.discovery_max_pages,
        )
        frontier = Frontier(request, self._renderer_factory())
        return [page.url for page in await frontier.crawl()]


@dataclass(slots=True)
class IngestSummary:
    pages: int = 0
    stored: int = 0
    failed: int = 0
    resources_stored: int = 0
    resources_failed: int = 0


def build_page_record(
    page: PageResult,
    crawled_at: Optional[datetime] = None,
    resources: Optional[List[Dict[str, str]]] = None,
) -> Dict[str, Any]:
    """JSON-запись страницы: url, title, content, crawledAt и (опционально) resources."""
    record: Dict[str, Any] = {
        "url": page.url,
        "title": page.title,
        "content": page.text_content,
        "crawledAt": (crawled_at or datetime.now(timezone.utc)).isoformat(),
    }
    if resources is not None:
        record["resources"] = resources
    return record


class IngestionService:
    """Обходит сайт (или манифест) и сохраняет каждую страницу и её ресурсы в sink."""

    def __init__(
        self,
        request: CrawlRequest,
        config: HarvestConfig,
        sink: StorageSink,
        *,
        fetcher: Optional[Fetcher] = None,
        renderer_factory: Optional[RendererFactory] = None,
    ) -> None:
        self.request = request
        self.config = config
        self.sink = sink
        self.domain = request.domain
        self._fetcher = fetcher
        self._renderer_factory = renderer_factory or (lambda: create_renderer(config))

    async def run(self) -> IngestSummary:
        summary = IngestSummary()
        mode = "(Manifest Mode)" if self.request.manifest_mode else (
            f"with depth {self.request.max_depth} and max pages {self.request.page_limit}"
        )
        logger.info("Starting crawl for %s %s", self.request.seed_url, mode)

        async with AsyncExitStack() as stack:
            collector: Optional[ResourceCollector] = None
            if self.request.include_resources:
                fetcher = self._fetcher or await stack.enter_async_context(Fetcher(self.config))
                collector = ResourceCollector(
                    fetcher,
                    min_image_size=self.config.min_image_size,
                    keywords=self.config.resource_keywords,
                )
            frontier = Frontier(self.request, self._renderer_factory(), resources=collector)
            pages = await stack.enter_async_context(aclosing(frontier.pages()))
            async for page in pages:
                summary.pages += 1
                await self._store(page, summary)

        logger.info(
            "Crawl completed. %d pages, %d stored, %d failed, %d resources stored.",
            summary.pages,
            summary.stored,
            summary.failed,
            summary.resources_stored,
        )
        return summary

    async def _put(self, key: str, body: bytes, content_type: str) -> bool:
        return await asyncio.to_thread(self.sink.put, key, body, content_type)

    async def _store(self, page: PageResult, summary: IngestSummary) -> None:
        key = page_key(page.url, self.domain, self.config.key_scheme)

        stored_resources: Optional[List[Dict[str, str]]] = None
        if self.request.include_resources:
            stored_resources = []
            for resource in page.resources:
                rkey = resource_key(key, resource.source_url, resource.extension)
                if await self._put(rkey, resource.body, resource.content_type):
                    summary.resources_stored += 1
                    stored_resources.append({"url": resource.source_url, "key": rkey, "type": resource.kind.value})
                else:
                    summary.resources_failed += 1

        record = build_page_record(page, resources=stored_resources)
        body = json.dumps(record, ensure_ascii=False, indent=2).encode("utf-8")
        if await self._put(key, body, "application/json"):
            summary.stored += 1
        else:
            logger.error("Failed to save/upload %s", page.url)
            summary.failed += 1
