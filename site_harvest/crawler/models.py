"""
Data models for the SiteHarvest crawler.
"""
from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Deque, Optional, Set, Tuple


class ResourceKind(str, Enum):
    """Coarse type of a downloaded page asset."""

    IMAGE = "image"
    PDF = "pdf"
    OTHER = "other"


@dataclass(slots=True, frozen=True)
class QueueEntry:
    """A URL waiting in the frontier and the depth it was discovered at."""

    url: str
    depth: int


@dataclass(slots=True)
class FrontierState:
    """Queue and visited set owned by a single frontier run."""

    queue: Deque[QueueEntry] = field(default_factory=deque)
    visited: Set[str] = field(default_factory=set)

    def push(self, url: str, depth: int, key: str) -> bool:
        """Mark *key* visited and enqueue *url*; False if *key* was already seen."""
        if key in self.visited:
            return False
        self.visited.add(key)
        self.queue.append(QueueEntry(url, depth))
        return True

    def pop(self) -> QueueEntry:
        return self.queue.popleft()


@dataclass(slots=True, frozen=True)
class NavigationResult:
    """Where the browser ended up after following redirects."""

    final_url: str
    status: int


@dataclass(slots=True, frozen=True)
class Anchor:
    href: str
    text: str = ""


@dataclass(slots=True, frozen=True)
class ImageCandidate:
    """An ``<img>`` element; width/height are None when the size is unknown."""

    src: str
    width: Optional[int] = None
    height: Optional[int] = None


@dataclass(slots=True, frozen=True)
class FetchResult:
    """Raw bytes returned by the fetcher. ``status`` is 0 on transport errors."""

    url: str
    status: int
    content_type: str = ""
    body: bytes = b""
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    def text(self, encoding: str = "utf-8") -> str:
        return self.body.decode(encoding, errors="replace")


@dataclass(slots=True, frozen=True)
class PageResource:
    """An asset downloaded for a page (image, PDF, other document)."""

    source_url: str
    kind: ResourceKind
    body: bytes
    extension: str
    content_type: str = "application/octet-stream"


@dataclass(slots=True, frozen=True)
class PageResult:
    """Holds the extracted content of one rendered page."""

    url: str
    title: str
    text_content: str
    outgoing_links: Tuple[str, ...] = ()
    resources: Tuple[PageResource, ...] = ()
    depth: int = 0
    final_url: str = ""
