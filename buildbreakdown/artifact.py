"""Artifact type detection and total output size."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from .models import ArtifactKind, BuildArtifactLocation, Platform

_PACKAGE_SUFFIXES = (".apk", ".aab", ".ipa")
_TYPE_BY_SUFFIX = {
    ".apk": "apk",
    ".aab": "aab",
    ".ipa": "ipa",
    ".exe": "exe",
    ".app": "app",
}


@dataclass(frozen=True)
class ArtifactInfo:
    """What kind of artifact a build produced."""

    type: str
    extension: Optional[str]


def describe_artifact(location: BuildArtifactLocation) -> ArtifactInfo:
    """Classify the artifact as apk/aab/ipa/exe/app/webgl/xcode/folder/file."""
    path = location.path
    if path.is_file():
        return _from_file(path, location.platform)
    if path.is_dir():
        packages = _packages_in(path)
        if packages:
            return _from_file(packages[0], location.platform)
        if path.suffix.lower() == ".app":
            return ArtifactInfo("app", ".app")
    if location.platform is Platform.WEBGL:
        return ArtifactInfo("webgl", None)
    if location.platform is Platform.IOS:
        return ArtifactInfo("xcode", None)
    if location.kind is ArtifactKind.DIRECTORY:
        return ArtifactInfo("folder", None)
    return ArtifactInfo("file", path.suffix or None)


def measure_output_size(location: BuildArtifactLocation) -> int:
    """Bytes the build produced: the file, the largest package inside, or the whole tree."""
    path = location.path
    if path.is_file():
        return path.stat().st_size
    if not path.is_dir():
        return 0
    packages = _packages_in(path)
    if packages:
        return max(package.stat().st_size for package in packages)
    total = 0
    for dirpath, _, filenames in os.walk(path):
        for filename in filenames:
            try:
                total += (Path(dirpath) / filename).stat().st_size
            except OSError:
                continue
    return total


def _from_file(path: Path, platform: Platform) -> ArtifactInfo:
    suffix = path.suffix.lower()
    artifact_type = _TYPE_BY_SUFFIX.get(suffix)
    if artifact_type is not None:
        return ArtifactInfo(artifact_type, suffix)
    if platform is Platform.WEBGL:
        return ArtifactInfo("webgl", None)
    if platform is Platform.IOS:
        return ArtifactInfo("xcode", None)
    return ArtifactInfo("file", suffix or None)


def _packages_in(root: Path) -> List[Path]:
    return sorted(
        candidate
        for candidate in root.rglob("*")
        if candidate.is_file() and candidate.suffix.lower() in _PACKAGE_SUFFIXES
    )


__all__ = ["ArtifactInfo", "describe_artifact", "measure_output_size"]
