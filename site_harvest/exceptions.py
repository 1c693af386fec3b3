"""Exception hierarchy for SiteHarvest.

Per-item failures (:class:`RenderError`, :class:`SitemapParseError`) are caught
close to where they happen and only skip that item. :class:`ConfigurationError`
is the one class that is allowed to stop a run, and it is raised before any
crawling starts.
"""
from __future__ import annotations


class HarvestError(Exception):
    """Base exception for all SiteHarvest errors."""

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause


class ConfigurationError(HarvestError):
    """Invalid crawl request or settings: nothing has been crawled yet."""


class ManifestError(ConfigurationError):
    """Manifest file is missing or cannot be parsed."""


class RenderError(HarvestError):
    """A single page could not be rendered (navigation error, HTTP error, timeout)."""


class SitemapParseError(HarvestError):
    """A sitemap payload is not parseable XML."""


__all__ = [
    "HarvestError",
    "ConfigurationError",
    "ManifestError",
    "RenderError",
    "SitemapParseError",
]
