"""Platform-specific inspection of the packaged build output."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from ..logging import get_logger
from ..models import BuildArtifactLocation, Platform, SourceResult
from .archive import ArchiveInspector
from .base import AnalysisContext, CompositionSource, SourceUnavailable
from .directory import DirectoryWalker, ExcludePredicate, default_exclude

_LOGGER = get_logger("sources.container")


class ContainerSource(CompositionSource):
    """Reads an archive or output directory according to the build platform."""

    name = "container"

    def __init__(
        self,
        archive_inspector: ArchiveInspector | None = None,
        directory_walker: DirectoryWalker | None = None,
        exclude: ExcludePredicate | None = None,
    ) -> None:
        self.archive_inspector = archive_inspector or ArchiveInspector()
        self.directory_walker = directory_walker or DirectoryWalker()
        self.exclude = exclude or default_exclude

    def collect(self, context: AnalysisContext) -> Optional[SourceResult]:
        location = context.location
        path = location.path
        if not path.exists():
            raise SourceUnavailable(f"Build output not found: {path}")

        platform = location.platform
        if platform is Platform.ANDROID:
            return self._archive_or_directory(location, ".apk")
        if platform is Platform.IOS:
            return self._archive_or_directory(location, ".ipa")
        if platform is Platform.WEBGL:
            if not path.is_dir():
                raise SourceUnavailable(f"WebGL output must be a directory: {path}")
            return self._walk(path, platform)
        if platform.is_standalone:
            return self._walk(_standalone_data_dir(path), platform)
        raise SourceUnavailable(f"Unrecognised platform for {path}: {platform.value}")

    def _archive_or_directory(
        self, location: BuildArtifactLocation, archive_suffix: str
    ) -> SourceResult:
        path = location.path
        if path.is_file() and path.suffix.lower() == archive_suffix:
            return self.archive_inspector.collect(path, location.platform)
        if path.is_dir():
            return self._walk(path, location.platform)
        raise SourceUnavailable(
            f"Unrecognised {location.platform.value} artifact (expected {archive_suffix} or a directory): {path}"
        )

    def _walk(self, root: Path, platform: Platform) -> SourceResult:
        if not root.is_dir():
            raise SourceUnavailable(f"Build data directory not found: {root}")
        _LOGGER.debug("Walking %s build data at %s", platform.value, root)
        return self.directory_walker.collect(root, platform, self.exclude)


def _standalone_data_dir(path: Path) -> Path:
    """Locate the directory holding a desktop player's packaged data."""
    if path.is_file():
        # Game.exe / Game.x86_64 ship their data in a sibling Game_Data folder.
        return path.parent / f"{path.stem}_Data"
    if path.suffix.lower() == ".app":
        return path / "Contents" / "Data"
    return path


__all__ = ["ContainerSource"]
