"""Zip-based container inspection (APK, IPA and similar packages)."""

from __future__ import annotations

import zipfile
from pathlib import Path
from typing import List, Tuple

from ..logging import get_logger
from ..models import AssetRecord, PathLayout, Platform, SourceKind, SourceResult
from .base import SourceUnavailable

_LOGGER = get_logger("sources.archive")


class ArchiveUnreadable(SourceUnavailable):
    """Raised when a container cannot be opened as a zip-compatible archive."""


class ArchiveInspector:
    """Reports the compressed cost of every file entry in a package."""

    def inspect(self, path: Path) -> List[Tuple[str, int]]:
        """Return ``(entry path, compressed size)`` for each non-directory entry.

        Compressed size is what the distributed artifact actually costs; the
        uncompressed size would overstate compressible content many times over.
        """
        try:
            with zipfile.ZipFile(path) as archive:
                return [
                    (info.filename, info.compress_size)
                    for info in archive.infolist()
                    if not info.is_dir()
                ]
        except (zipfile.BadZipFile, zipfile.LargeZipFile, OSError) as exc:
            raise ArchiveUnreadable(f"Cannot read {path} as a zip archive: {exc}") from exc

    def collect(self, path: Path, platform: Platform) -> SourceResult:
        entries = self.inspect(path)
        _LOGGER.debug("Inspected %s: %d entries", path, len(entries))
        return SourceResult(
            kind=SourceKind.ARCHIVE,
            layout=PathLayout.OUTPUT,
            records=[AssetRecord(path=name, size=size) for name, size in entries],
            platform=platform,
        )


__all__ = ["ArchiveInspector", "ArchiveUnreadable"]
