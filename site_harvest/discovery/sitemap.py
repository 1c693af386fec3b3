"""site_harvest.discovery.sitemap: authoritative URL set of a site from robots.txt and sitemaps."""

from __future__ import annotations

from typing import List, Optional, Protocol, Set
from urllib.parse import urljoin

from site_harvest.crawler.models import FetchResult
from site_harvest.exceptions import SitemapParseError
from site_harvest.logger import logger
from site_harvest.parser.robots_parser import parse_sitemap_directives
from site_harvest.parser.sitemap_parser import parse_sitemap
from site_harvest.utils import url_origin

__all__ = ["COMMON_SITEMAP_PATHS", "SitemapResolver"]

#: Probed in this order when robots.txt lists no usable sitemap.
COMMON_SITEMAP_PATHS: tuple[str, ...] = ("/sitemap.xml", "/sitemap_index.xml", "/wp-sitemap.xml")


class SupportsFetch(Protocol):
    async def fetch(self, url: str) -> FetchResult: ...


class SitemapResolver:
    """Resolves page URLs through robots.txt ``Sitemap:`` lines and well-known sitemap paths.

    Sitemap indexes are followed recursively up to ``max_depth`` levels; a
    sitemap already seen during one resolution is not fetched again, so cyclic
    indexes terminate.
    """

    def __init__(self, fetcher: SupportsFetch, *, max_depth: int = 5) -> None:
        self.fetcher = fetcher
        self.max_depth = max_depth

    async def discover_urls(self, site_url: str) -> List[str]:
        """Page URLs of the site, or an empty list when no sitemap yields anything."""
        origin = url_origin(site_url)
        if origin is None:
            logger.warning("Cannot discover sitemaps for invalid URL %r", site_url)
            return []
        logger.info("Starting discovery for %s...", origin)

        urls: List[str] = []
        for sitemap_url in await self.sitemaps_from_robots(origin):
            urls.extend(await self.resolve_sitemap(sitemap_url))
        if urls:
            return urls

        for path in COMMON_SITEMAP_PATHS:
            urls = await self.resolve_sitemap(f"{origin}{path}")
            if urls:
                logger.info("Found %d URLs in %s%s", len(urls), origin, path)
                return urls
        return []

    async def sitemaps_from_robots(self, origin: str) -> List[str]:
        robots_url = f"{origin}/robots.txt"
        logger.info("Checking %s...", robots_url)
        result = await self.fetcher.fetch(robots_url)
        if result.status != 200:
            logger.debug("robots.txt %s -> HTTP %s", robots_url, result.status)
            return []
        sitemaps = parse_sitemap_directives(result.text(), robots_url)
        logger.debug("robots.txt lists %d sitemap(s)", len(sitemaps))
        return sitemaps

    async def resolve_sitemap(
        self,
        url: str,
        *,
        depth: int = 0,
        seen: Optional[Set[str]] = None,
    ) -> List[str]:
        """Page URLs reachable from the sitemap at *url*; ``[]`` if it cannot be fetched or parsed."""
        seen = set() if seen is None else seen
        if url in seen:
            logger.warning("Sitemap cycle detected, skipping %s", url)
            return []
        if depth > self.max_depth:
            logger.warning("Sitemap nesting deeper than %d, skipping %s", self.max_depth, url)
            return []
        seen.add(url)

        logger.info("Fetching sitemap: %s", url)
        result = await self.fetcher.fetch(url)
        if not result.ok:
            logger.warning("Failed to fetch sitemap %s: %s", url, result.error or f"HTTP {result.status}")
            return []
        try:
            document = parse_sitemap(result.body)
        except SitemapParseError as exc:
            logger.warning("Failed to parse sitemap %s: %s", url, exc)
            return []

        if not document.is_index:
            return [urljoin(url, loc) for loc in document.locs]

        urls: List[str] = []
        for child in document.locs:
            urls.extend(await self.resolve_sitemap(urljoin(url, child), depth=depth + 1, seen=seen))
        return urls
