"""Collapse repeated reports of the same logical asset."""

from __future__ import annotations

from typing import Callable, Dict, Iterable, List

from .classifier import logical_path
from .models import AssetRecord


def dedupe(
    records: Iterable[AssetRecord],
    *,
    key: Callable[[str], str] = logical_path,
) -> List[AssetRecord]:
    """Keep one record per logical path: the one with the largest size.

    A source may report an asset several times (original import, compressed
    platform variant, generated mip levels); summing those would overstate
    its footprint. Output order follows the first appearance of each path, and
    the kept record's path is rewritten to the logical path.
    """
    best: Dict[str, AssetRecord] = {}
    for record in records:
        path = key(record.path)
        current = best.get(path)
        if current is None or record.size > current.size:
            best[path] = AssetRecord(path=path, size=record.size, category=record.category)
    return list(best.values())


__all__ = ["dedupe"]
