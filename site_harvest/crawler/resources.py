"""Module for finding and downloading the assets of a rendered page.

Classification is done by two plain predicates so the policy can be swapped
without touching the traversal code:

* ``icon_filter(image) -> bool`` drops images that are probably icons.
* ``document_filter(anchor) -> bool`` picks links worth downloading.
"""
from __future__ import annotations

import mimetypes
from functools import partial
from pathlib import PurePosixPath
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from site_harvest.crawler.fetcher import Fetcher
from site_harvest.crawler.models import Anchor, ImageCandidate, PageResource, ResourceKind
from site_harvest.logger import logger
from site_harvest.utils import parse_url

DOCUMENT_EXTENSIONS: tuple[str, ...] = (".pdf", ".doc", ".docx", ".xls", ".xlsx", ".ppt", ".pptx")
DEFAULT_KEYWORDS: tuple[str, ...] = ("brochure", "specifications", "download")

IconFilter = Callable[[ImageCandidate], bool]
DocumentFilter = Callable[[Anchor], bool]


def is_probable_icon(image: ImageCandidate, min_size: int = 50) -> bool:
    """True for images smaller than *min_size* in both dimensions. Unknown size is not an icon."""
    if image.width is None or image.height is None:
        return False
    return image.width < min_size and image.height < min_size


def is_document_link(anchor: Anchor, keywords: Sequence[str] = DEFAULT_KEYWORDS) -> bool:
    """Check if an anchor points to a document by extension or by its text."""
    parts = parse_url(anchor.href)
    if parts is None:
        return False
    if parts.path.lower().endswith(DOCUMENT_EXTENSIONS):
        return True
    text = anchor.text.lower()
    return any(word in text for word in keywords)


def guess_extension(url: str, content_type: str = "") -> str:
    """Extension without the dot: from the URL path, then the content type, else ``bin``."""
    parts = parse_url(url)
    if parts is not None:
        suffix = PurePosixPath(parts.path).suffix.lower().lstrip(".")
        if suffix and suffix.isalnum() and len(suffix) <= 5:
            return suffix
    if content_type:
        guessed = mimetypes.guess_extension(content_type)
        if guessed:
            return guessed.lstrip(".")
    return "bin"


def classify(extension: str, content_type: str, from_image: bool) -> ResourceKind:
    if extension == "pdf" or content_type == "application/pdf":
        return ResourceKind.PDF
    if from_image or content_type.startswith("image/"):
        return ResourceKind.IMAGE
    return ResourceKind.OTHER


class ResourceCollector:
    """Picks candidate assets of a page and downloads them best-effort."""

    def __init__(
        self,
        fetcher: Fetcher,
        *,
        icon_filter: Optional[IconFilter] = None,
        document_filter: Optional[DocumentFilter] = None,
        min_image_size: int = 50,
        keywords: Sequence[str] = DEFAULT_KEYWORDS,
    ) -> None:
        self.fetcher = fetcher
        self.icon_filter: IconFilter = icon_filter or partial(is_probable_icon, min_size=min_image_size)
        self.document_filter: DocumentFilter = document_filter or partial(is_document_link, keywords=keywords)

    def candidates(self, images: Iterable[ImageCandidate], anchors: Iterable[Anchor]) -> List[Tuple[str, bool]]:
        """Deduplicated ``(url, is_image)`` pairs: images first, then documents."""
        found: Dict[str, bool] = {}
        for image in images:
            if not self.icon_filter(image):
                found.setdefault(image.src, True)
        for anchor in anchors:
            if self.document_filter(anchor):
                found.setdefault(anchor.href, False)
        return list(found.items())

    async def collect(self, images: Iterable[ImageCandidate], anchors: Iterable[Anchor]) -> Tuple[PageResource, ...]:
        resources: List[PageResource] = []
        for url, is_image in self.candidates(images, anchors):
            resource = await self.download(url, is_image)
            if resource is not None:
                resources.append(resource)
        return tuple(resources)

    async def download(self, url: str, is_image: bool = False) -> Optional[PageResource]:
        result = await self.fetcher.fetch(url)
        if not result.ok:
            logger.debug("Skipping resource %s: %s", url, result.error or f"HTTP {result.status}")
            return None
        extension = guess_extension(url, result.content_type)
        return PageResource(
            source_url=url,
            kind=classify(extension, result.content_type, is_image),
            body=result.body,
            extension=extension,
            content_type=result.content_type or "application/octet-stream",
        )
