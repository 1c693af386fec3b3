"""site_harvest.storage: куда сохранять записи страниц и ресурсы."""
from __future__ import annotations

from pathlib import Path
from typing import Optional, Union

from site_harvest.exceptions import ConfigurationError
from site_harvest.storage.base import LoggingSink, StorageSink
from site_harvest.storage.filesystem import FileSystemSink
from site_harvest.storage.s3 import S3Sink


def build_sink(
    output_dir: Union[str, Path, None] = None,
    bucket: Optional[str] = None,
    *,
    profile: Optional[str] = None,
    region: Optional[str] = None,
) -> StorageSink:
    """Каталог, бакет S3 или (если не задано ни то ни другое) только логирование."""
    if output_dir and bucket:
        raise ConfigurationError("Choose either an output directory or a bucket, not both")
    if output_dir:
        return FileSystemSink(output_dir)
    if bucket:
        return S3Sink(bucket, profile=profile, region=region)
    return LoggingSink()


__all__ = ["StorageSink", "LoggingSink", "FileSystemSink", "S3Sink", "build_sink"]
