"""Serialization and text rendering of composition breakdowns."""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Type, TypeVar

from .models import (
    AssetCategory,
    AssetRecord,
    CategoryBucket,
    CompositionBreakdown,
    FileCategory,
    OtherCategory,
    SourceKind,
    empty_buckets,
)

_E = TypeVar("_E", FileCategory, AssetCategory, OtherCategory)


def format_bytes(size: int) -> str:
    """Human-readable binary size (``512 B``, ``1.5 KB``, ``2.00 GB``)."""
    if size < 1024:
        return f"{size} B"
    if size < 1024**2:
        return f"{size / 1024:.1f} KB"
    if size < 1024**3:
        return f"{size / 1024**2:.1f} MB"
    return f"{size / 1024**3:.2f} GB"


def breakdown_to_dict(breakdown: CompositionBreakdown) -> Dict[str, Any]:
    """Flatten a breakdown into the JSON-ready shape consumed downstream."""
    return {
        "hasData": breakdown.has_data,
        "source": breakdown.source.value if breakdown.source else None,
        "totalSize": breakdown.total_size,
        "files": _buckets_to_dict(breakdown.files),
        "otherBreakdown": (
            _buckets_to_dict(breakdown.other) if breakdown.other is not None else None
        ),
        "assets": (
            _buckets_to_dict(breakdown.assets) if breakdown.assets is not None else None
        ),
        "totalAssetsSize": breakdown.total_assets_size,
        "totalAssets": breakdown.total_assets,
        "topContributors": [
            {"path": record.path, "size": record.size, "category": record.category}
            for record in breakdown.top_contributors
        ],
    }


def breakdown_from_dict(payload: object) -> Optional[CompositionBreakdown]:
    """Rebuild a breakdown; ``None`` when the payload is not a breakdown."""
    if not isinstance(payload, dict):
        return None
    files_payload = payload.get("files")
    if not isinstance(files_payload, dict):
        return None

    source_value = payload.get("source")
    try:
        source = SourceKind(source_value) if source_value is not None else None
    except ValueError:
        source = None

    assets_payload = payload.get("assets")
    other_payload = payload.get("otherBreakdown")
    return CompositionBreakdown(
        files=_buckets_from_dict(files_payload, FileCategory),
        assets=(
            _buckets_from_dict(assets_payload, AssetCategory)
            if isinstance(assets_payload, dict)
            else None
        ),
        other=(
            _buckets_from_dict(other_payload, OtherCategory)
            if isinstance(other_payload, dict)
            else None
        ),
        top_contributors=_records_from_list(payload.get("topContributors")),
        has_data=bool(payload.get("hasData", False)),
        source=source,
    )


def render_text(breakdown: CompositionBreakdown, *, title: str | None = None) -> str:
    """Plain-text table of a breakdown for terminal output."""
    lines: List[str] = []
    if title:
        lines.append(title)
    if breakdown.no_data:
        lines.append("No composition data available for this artifact.")
        return "\n".join(lines)

    source = breakdown.source.value if breakdown.source else "unknown"
    lines.append(f"Source: {source}")
    lines.append(f"Total: {format_bytes(breakdown.total_size)} in {breakdown.total_count} files")
    lines.append("")
    lines.extend(_bucket_table(breakdown.files, breakdown.total_size))

    if breakdown.other is not None and any(b.count for b in breakdown.other.values()):
        lines.append("")
        lines.append("Other, by kind:")
        lines.extend(_bucket_table(breakdown.other, breakdown.files[FileCategory.OTHER].size))

    if breakdown.assets is not None:
        lines.append("")
        lines.append(
            f"Project assets: {format_bytes(breakdown.total_assets_size)} in {breakdown.total_assets} assets"
        )
        lines.extend(_bucket_table(breakdown.assets, breakdown.total_assets_size))

    if breakdown.top_contributors:
        lines.append("")
        lines.append("Largest contributors:")
        for rank, record in enumerate(breakdown.top_contributors, start=1):
            lines.append(
                f"  {rank:>2}. {format_bytes(record.size):>10}  {record.category:<16} {record.path}"
            )
    return "\n".join(lines)


def _bucket_table(buckets: Mapping[Any, CategoryBucket], total: int) -> List[str]:
    rows = []
    for bucket in buckets.values():
        if not bucket.count:
            continue
        share = (bucket.size / total * 100) if total else 0.0
        rows.append(
            f"  {bucket.name:<20} {format_bytes(bucket.size):>10} {share:5.1f}%  ({bucket.count} files)"
        )
    return rows


def _buckets_to_dict(buckets: Mapping[Any, CategoryBucket]) -> Dict[str, Dict[str, int]]:
    return {bucket.name: {"size": bucket.size, "count": bucket.count} for bucket in buckets.values()}


def _buckets_from_dict(payload: Mapping[str, Any], taxonomy: Type[_E]) -> Dict[_E, CategoryBucket]:
    buckets = empty_buckets(taxonomy)
    for member, bucket in buckets.items():
        raw = payload.get(member.value)
        if not isinstance(raw, dict):
            continue
        size = raw.get("size")
        count = raw.get("count")
        if isinstance(size, int) and size >= 0:
            bucket.size = size
        if isinstance(count, int) and count >= 0:
            bucket.count = count
    return buckets


def _records_from_list(payload: object) -> List[AssetRecord]:
    if not isinstance(payload, list):
        return []
    records: List[AssetRecord] = []
    for item in payload:
        if not isinstance(item, dict):
            continue
        path = item.get("path")
        size = item.get("size")
        category = item.get("category", "")
        if not isinstance(path, str) or not isinstance(size, int):
            continue
        records.append(
            AssetRecord(path=path, size=size, category=category if isinstance(category, str) else "")
        )
    return records


__all__ = ["breakdown_from_dict", "breakdown_to_dict", "format_bytes", "render_text"]
