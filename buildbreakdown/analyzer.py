"""Source orchestration: from a build artifact to a composition breakdown."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Iterable, List, Optional

from .classifier import classify, classify_asset, classify_other, is_project_asset
from .config import DEFAULT_TOP_CONTRIBUTORS, BuildBreakdownConfig
from .dedupe import dedupe
from .logging import get_logger
from .models import (
    AssetCategory,
    AssetRecord,
    BuildArtifactLocation,
    CategoryBucket,
    CompositionBreakdown,
    FileCategory,
    OtherCategory,
    PathLayout,
    Platform,
    ProjectIdentity,
    SourceKind,
    SourceResult,
    StructuredMetadata,
    empty_buckets,
    top_records,
)
from .sources import (
    AnalysisContext,
    CompositionSource,
    ProjectMismatch,
    SourceUnavailable,
    default_sources,
)
from .stores import CompositionCache, cache_path_for


class CompositionAnalyzer:
    """Runs sources in priority order and stops at the first that yields records.

    Order: structured metadata, then the packaged output (archive or directory),
    then the editor log, then the last cached breakdown. When everything comes
    up empty the result is ``CompositionBreakdown.empty()``; no source failure
    ever reaches the caller.
    """

    def __init__(
        self,
        sources: Optional[Iterable[CompositionSource]] = None,
        cache: CompositionCache | None = None,
        *,
        top_contributors: int = DEFAULT_TOP_CONTRIBUTORS,
    ) -> None:
        self.sources: List[CompositionSource] = (
            list(sources) if sources is not None else default_sources()
        )
        self.cache = cache
        self.top_contributors = top_contributors
        self.logger = get_logger("analyzer")

    @classmethod
    def from_config(
        cls,
        config: BuildBreakdownConfig,
        identity: ProjectIdentity,
        *,
        use_cache: bool = True,
    ) -> "CompositionAnalyzer":
        sources = default_sources(
            exclude_patterns=config.analysis.exclude_paths,
            log_enabled=config.log.enabled,
            log_window=config.log.window,
        )
        cache = None
        if use_cache and config.cache.enabled:
            cache = CompositionCache(cache_path_for(identity, config.cache_directory))
        return cls(sources, cache, top_contributors=config.analysis.top_contributors)

    def analyze(
        self,
        location: BuildArtifactLocation,
        identity: ProjectIdentity,
        *,
        metadata: StructuredMetadata | None = None,
        log_path: Path | None = None,
    ) -> CompositionBreakdown:
        """Produce the breakdown for ``location``; never raises for missing evidence."""
        context = AnalysisContext(
            location=location,
            identity=identity,
            metadata=metadata or StructuredMetadata.empty(),
            log_path=log_path,
        )
        self.logger.info(
            "Analyzing %s build at %s", location.platform.value, location.path
        )

        for source in self.sources:
            result = self._run_source(source, context)
            if result is None or not result.records:
                continue
            breakdown = self.build_breakdown(result, location.platform)
            self.logger.info(
                "Source '%s' produced %d records (%d bytes)",
                source.name,
                breakdown.total_count,
                breakdown.total_size,
            )
            if self.cache is not None:
                self.cache.save(identity, breakdown)
            return breakdown

        if self.cache is not None:
            cached = self.cache.load(identity)
            if cached is not None and cached.has_data:
                cached.source = SourceKind.CACHE
                return cached

        self.logger.warning("No composition data available for %s", location.path)
        return CompositionBreakdown.empty()

    def build_breakdown(
        self, result: SourceResult, platform: Platform | None = None
    ) -> CompositionBreakdown:
        """Classify one source's records into bucket totals.

        Source-layout records are deduplicated by logical path first. Output
        entries are taken as listed, so bucket sizes add up to the packaged
        sizes.
        """
        platform = result.platform or platform
        layout_platform = platform if result.layout is PathLayout.OUTPUT else None

        files = empty_buckets(FileCategory)
        other = empty_buckets(OtherCategory)
        assets: Optional[Dict[AssetCategory, CategoryBucket]] = None
        classified: List[AssetRecord] = []

        # Packaged entries are distinct files; only project sources repeat.
        records = (
            dedupe(result.records)
            if result.layout is PathLayout.SOURCE
            else list(result.records)
        )
        for record in records:
            file_category = classify(record.path, layout_platform)
            files[file_category].add(record.size)
            if file_category is FileCategory.OTHER:
                other[classify_other(record.path, platform)].add(record.size)

            label = file_category.value
            if result.layout is PathLayout.SOURCE and is_project_asset(record.path):
                if assets is None:
                    assets = empty_buckets(AssetCategory)
                asset_category = classify_asset(record.path)
                assets[asset_category].add(record.size)
                label = asset_category.value

            classified.append(AssetRecord(path=record.path, size=record.size, category=label))

        return CompositionBreakdown(
            files=files,
            assets=assets,
            other=other,
            top_contributors=top_records(classified, self.top_contributors),
            has_data=bool(classified),
            source=result.kind,
        )

    def _run_source(
        self, source: CompositionSource, context: AnalysisContext
    ) -> Optional[SourceResult]:
        try:
            result = source.collect(context)
        except ProjectMismatch as exc:
            self.logger.warning("Source '%s' skipped, data from another project: %s", source.name, exc)
            return None
        except SourceUnavailable as exc:
            self.logger.warning("Source '%s' unavailable: %s", source.name, exc)
            return None
        except Exception as exc:
            self.logger.warning("Source '%s' failed: %s", source.name, exc)
            self.logger.debug("Source failure details", exc_info=True)
            return None
        if result is None or not result.records:
            self.logger.debug("Source '%s' produced nothing", source.name)
        return result


def analyze_project(
    config: BuildBreakdownConfig,
    location: BuildArtifactLocation,
    *,
    metadata: StructuredMetadata | None = None,
    log_path: Path | None = None,
    use_cache: bool = True,
) -> CompositionBreakdown:
    """Convenience wiring: identity from the config root, sources and cache from config."""
    identity = ProjectIdentity.from_root(config.root)
    analyzer = CompositionAnalyzer.from_config(config, identity, use_cache=use_cache)
    effective_log = log_path
    if effective_log is None and config.log.enabled:
        effective_log = config.resolve_log_path()
    return analyzer.analyze(location, identity, metadata=metadata, log_path=effective_log)


__all__ = ["CompositionAnalyzer", "analyze_project"]
