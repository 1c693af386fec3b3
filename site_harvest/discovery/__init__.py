"""site_harvest.discovery: поиск URL сайта через robots.txt и sitemap."""

from site_harvest.discovery.sitemap import COMMON_SITEMAP_PATHS, SitemapResolver

__all__ = ["COMMON_SITEMAP_PATHS", "SitemapResolver"]
