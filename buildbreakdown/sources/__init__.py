"""Composition sources and the default priority chain."""

from __future__ import annotations

from typing import Iterable, List

from .archive import ArchiveInspector, ArchiveUnreadable
from .base import AnalysisContext, CompositionSource, ProjectMismatch, SourceUnavailable
from .container import ContainerSource
from .directory import DirectoryWalker, ExcludePredicate, build_exclude, default_exclude
from .logmine import DEFAULT_WINDOW, LogMiner, default_editor_log_path
from .metadata import StructuredMetadataReader, load_metadata, parse_metadata


def default_sources(
    *,
    exclude_patterns: Iterable[str] = (),
    log_enabled: bool = True,
    log_window: int = DEFAULT_WINDOW,
) -> List[CompositionSource]:
    """Return the live sources in priority order: most reliable evidence first."""
    exclude = build_exclude(exclude_patterns)
    sources: List[CompositionSource] = [
        StructuredMetadataReader(),
        ContainerSource(exclude=exclude),
    ]
    if log_enabled:
        sources.append(LogMiner(window=log_window))
    return sources


__all__ = [
    "AnalysisContext",
    "ArchiveInspector",
    "ArchiveUnreadable",
    "CompositionSource",
    "ContainerSource",
    "DirectoryWalker",
    "ExcludePredicate",
    "LogMiner",
    "ProjectMismatch",
    "SourceUnavailable",
    "StructuredMetadataReader",
    "build_exclude",
    "default_editor_log_path",
    "default_exclude",
    "default_sources",
    "load_metadata",
    "parse_metadata",
]
