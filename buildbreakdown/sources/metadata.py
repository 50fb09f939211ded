"""Structured per-item size ledgers supplied by the build tool."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Iterable, Iterator, List, Optional

from ..logging import get_logger
from ..models import (
    AssetRecord,
    MetadataEntry,
    PathLayout,
    SourceKind,
    SourceResult,
    StructuredMetadata,
)
from .base import AnalysisContext, CompositionSource
from .directory import ExcludePredicate, default_exclude

_LOGGER = get_logger("sources.metadata")


class StructuredMetadataReader(CompositionSource):
    """Turns build-tool packed sizes into records; the most trustworthy source."""

    name = "metadata"

    def read(self, metadata: StructuredMetadata | None) -> List[AssetRecord]:
        """Return one record per entry; empty when no metadata was supplied."""
        if metadata is None or metadata.is_empty:
            return []
        return [
            AssetRecord(path=entry.source_path, size=entry.packed_size)
            for entry in metadata.entries
        ]

    def collect(self, context: AnalysisContext) -> Optional[SourceResult]:
        records = self.read(context.metadata)
        if not records:
            _LOGGER.debug("No structured metadata supplied")
            return None
        return SourceResult(
            kind=SourceKind.METADATA,
            layout=PathLayout.SOURCE,
            records=records,
        )


def load_metadata(
    path: Path | None, *, exclude: ExcludePredicate = default_exclude
) -> StructuredMetadata:
    """Resolve a JSON size ledger into ``StructuredMetadata``.

    Accepted shapes: a bare list of entries, ``{"entries": [...]}``, the packed
    asset shape ``{"packedAssets": [{"contents": [...]}]}`` and the build file
    shape ``{"files": [...]}``. Build-file entries pass through ``exclude``
    because that listing includes intermediates that never ship.
    """
    if path is None:
        return StructuredMetadata.empty()
    try:
        payload = json.loads(Path(path).read_text(encoding="utf-8"))
    except FileNotFoundError:
        _LOGGER.warning("Structured metadata file not found: %s", path)
        return StructuredMetadata.empty()
    except (OSError, json.JSONDecodeError) as exc:
        _LOGGER.warning("Failed to read structured metadata %s: %s", path, exc)
        return StructuredMetadata.empty()
    return parse_metadata(payload, exclude=exclude)


def parse_metadata(
    payload: Any, *, exclude: ExcludePredicate = default_exclude
) -> StructuredMetadata:
    """Resolve an already-decoded metadata document (see ``load_metadata``)."""
    if isinstance(payload, list):
        return StructuredMetadata.from_entries(_entries(payload))
    if not isinstance(payload, dict):
        return StructuredMetadata.empty()

    if isinstance(payload.get("packedAssets"), list):
        contents: List[Any] = []
        for packed in payload["packedAssets"]:
            if isinstance(packed, dict) and isinstance(packed.get("contents"), list):
                contents.extend(packed["contents"])
        return StructuredMetadata.from_entries(_entries(contents))

    if isinstance(payload.get("files"), list):
        entries = [
            entry
            for entry in _entries(payload["files"])
            if not exclude(entry.source_path, False)
        ]
        return StructuredMetadata.from_entries(entries)

    if isinstance(payload.get("entries"), list):
        return StructuredMetadata.from_entries(_entries(payload["entries"]))

    return StructuredMetadata.empty()


def _entries(items: Iterable[Any]) -> Iterator[MetadataEntry]:
    for item in items:
        entry = _entry_from_dict(item)
        if entry is not None:
            yield entry


def _entry_from_dict(item: Any) -> Optional[MetadataEntry]:
    if not isinstance(item, dict):
        return None
    path = _first(item, ("sourcePath", "sourceAssetPath", "path"))
    size = _first(item, ("packedSize", "size"))
    if not isinstance(path, str) or not path.strip():
        return None
    if isinstance(size, bool) or not isinstance(size, int) or size < 0:
        return None
    return MetadataEntry(source_path=path, packed_size=size)


def _first(item: dict, keys: Iterable[str]) -> Any:
    for key in keys:
        if key in item:
            return item[key]
    return None


__all__ = ["StructuredMetadataReader", "load_metadata", "parse_metadata"]
