"""Storage sink contract: put a payload under a key, report success as a bool."""
from __future__ import annotations

from typing import Protocol, runtime_checkable

from site_harvest.logger import logger


@runtime_checkable
class StorageSink(Protocol):
    def put(self, key: str, body: bytes, content_type: str) -> bool: ...


class LoggingSink:
    """Dry-run sink used when no output target is configured: logs keys, stores nothing."""

    def __init__(self) -> None:
        self.keys: list[str] = []

    def put(self, key: str, body: bytes, content_type: str) -> bool:
        self.keys.append(key)
        logger.info("Would store %s (%d bytes, %s)", key, len(body), content_type)
        return True

    def __repr__(self) -> str:
        return "LoggingSink()"
