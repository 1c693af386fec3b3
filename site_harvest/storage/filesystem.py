"""Filesystem sink: every key becomes a file path under a root directory."""
from __future__ import annotations

from pathlib import Path
from typing import Union

from site_harvest.logger import logger


class FileSystemSink:
    def __init__(self, root: Union[str, Path]) -> None:
        self.root = Path(root).expanduser().resolve()

    def path_for(self, key: str) -> Path:
        """Path of *key*; ValueError if the key would escape the root directory."""
        path = (self.root / key.lstrip("/")).resolve()
        if not path.is_relative_to(self.root):
            raise ValueError(f"Key escapes output directory: {key!r}")
        return path

    def put(self, key: str, body: bytes, content_type: str) -> bool:
        try:
            path = self.path_for(key)
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(body)
        except (OSError, ValueError) as exc:
            logger.error("Failed to save %s: %s", key, exc)
            return False
        logger.debug("Saved %s (%s)", path, content_type)
        return True

    def __repr__(self) -> str:
        return f"FileSystemSink({str(self.root)!r})"
