"""Core data models shared across buildbreakdown components."""

from __future__ import annotations

import hashlib
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Type, TypeVar


class Platform(str, Enum):
    """Build targets whose packaged layout is understood."""

    ANDROID = "Android"
    IOS = "iOS"
    WEBGL = "WebGL"
    STANDALONE_WINDOWS = "StandaloneWindows"
    STANDALONE_WINDOWS64 = "StandaloneWindows64"
    STANDALONE_OSX = "StandaloneOSX"
    STANDALONE_LINUX64 = "StandaloneLinux64"
    UNKNOWN = "Unknown"

    @classmethod
    def parse(cls, value: str | None) -> "Platform":
        if not value:
            return cls.UNKNOWN
        key = value.strip().lower()
        for member in cls:
            if member.value.lower() == key:
                return member
        return _PLATFORM_ALIASES.get(key, cls.UNKNOWN)

    @property
    def is_standalone(self) -> bool:
        return self in _STANDALONE_PLATFORMS


_PLATFORM_ALIASES = {
    "android": Platform.ANDROID,
    "ios": Platform.IOS,
    "webgl": Platform.WEBGL,
    "windows": Platform.STANDALONE_WINDOWS,
    "win": Platform.STANDALONE_WINDOWS,
    "win64": Platform.STANDALONE_WINDOWS64,
    "osx": Platform.STANDALONE_OSX,
    "macos": Platform.STANDALONE_OSX,
    "linux": Platform.STANDALONE_LINUX64,
    "linux64": Platform.STANDALONE_LINUX64,
}

_STANDALONE_PLATFORMS = frozenset(
    {
        Platform.STANDALONE_WINDOWS,
        Platform.STANDALONE_WINDOWS64,
        Platform.STANDALONE_OSX,
        Platform.STANDALONE_LINUX64,
    }
)


class ArtifactKind(str, Enum):
    FILE = "file"
    DIRECTORY = "directory"


@dataclass(frozen=True)
class BuildArtifactLocation:
    """Identifies the build output to inspect."""

    kind: ArtifactKind
    path: Path
    platform: Platform

    @classmethod
    def from_path(cls, path: str | Path, platform: Platform | str) -> "BuildArtifactLocation":
        """Build a location, inferring the kind from what exists on disk."""
        resolved = Path(path).expanduser()
        kind = ArtifactKind.DIRECTORY if resolved.is_dir() else ArtifactKind.FILE
        if not isinstance(platform, Platform):
            platform = Platform.parse(platform)
        return cls(kind=kind, path=resolved, platform=platform)


class FileCategory(str, Enum):
    """Fixed taxonomy for where packaged bytes went."""

    SCRIPTS = "scripts"
    RESOURCES = "resources"
    STREAMING_ASSETS = "streamingAssets"
    PLUGINS = "plugins"
    SCENES = "scenes"
    SHADERS = "shaders"
    OTHER = "other"


class AssetCategory(str, Enum):
    """Fixed taxonomy for project-source assets grouped by media type."""

    TEXTURES = "textures"
    AUDIO = "audio"
    MODELS = "models"
    ANIMATIONS = "animations"
    PREFABS = "prefabs"
    SCENES = "scenes"
    SCRIPTS = "scripts"
    SHADERS = "shaders"
    MATERIALS = "materials"
    FONTS = "fonts"
    VIDEOS = "videos"
    OTHER_ASSETS = "otherAssets"


class OtherCategory(str, Enum):
    """Sub-taxonomy splitting the residual ``other`` file bucket."""

    SPRITE_ATLASES = "spriteAtlases"
    TEXTURES = "textures"
    MESHES = "meshes"
    AUDIO = "audio"
    ASSET_BUNDLES = "assetBundles"
    UNITY_RUNTIME = "unityRuntime"
    FONTS = "fonts"
    IOS_ASSET_CATALOGS = "iosAssetCatalogs"
    IOS_APP_RESOURCES = "iosAppResources"
    IOS_SYSTEM = "iosSystem"
    ANDROID_ADDRESSABLES = "androidAddressables"
    ANDROID_UNITY_DATA = "androidUnityData"
    ANDROID_RESOURCES = "androidResources"
    ANDROID_CODE = "androidCode"
    ANDROID_SYSTEM = "androidSystem"
    WEBGL_DATA = "webglData"
    WEBGL_WASM = "webglWasm"
    WEBGL_JS = "webglJs"
    OTHER = "other"


class SourceKind(str, Enum):
    """Evidence a breakdown was derived from, in priority order."""

    METADATA = "metadata"
    ARCHIVE = "archive"
    DIRECTORY = "directory"
    LOG = "log"
    CACHE = "cache"


class PathLayout(str, Enum):
    """Whether record paths describe packaged output or project source files."""

    OUTPUT = "output"
    SOURCE = "source"


@dataclass
class CategoryBucket:
    """Accumulator for one category; only ever grows during a pass."""

    name: str
    size: int = 0
    count: int = 0

    def add(self, size: int) -> None:
        if size < 0:
            raise ValueError(f"Bucket '{self.name}' cannot accumulate a negative size")
        self.size += size
        self.count += 1


@dataclass(frozen=True)
class AssetRecord:
    """One underlying asset as reported by a source."""

    path: str
    size: int
    category: str = ""


@dataclass(frozen=True)
class ProjectIdentity:
    """Stable marker for the project that produced a log section or cache entry."""

    value: str

    @classmethod
    def from_root(cls, root: str | Path) -> "ProjectIdentity":
        return cls(Path(root).expanduser().resolve().as_posix())

    @property
    def key(self) -> str:
        """Short hash used to scope on-disk storage per project."""
        return hashlib.md5(self.value.encode("utf-8")).hexdigest()[:8]

    def tokens(self) -> Tuple[str, ...]:
        """Strings whose presence in a log line ties that line to this project."""
        root = self.value.rstrip("/")
        variants = [f"{root}/Assets", root]
        windows_root = root.replace("/", "\\")
        if windows_root != root:
            variants.extend([f"{windows_root}\\Assets", windows_root])
        return tuple(variants)

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class MetadataEntry:
    """Per-item packed size reported by the build tool."""

    source_path: str
    packed_size: int


@dataclass(frozen=True)
class StructuredMetadata:
    """Build-tool size ledger, resolved once at the input boundary."""

    entries: Tuple[MetadataEntry, ...] = ()

    @classmethod
    def empty(cls) -> "StructuredMetadata":
        return cls()

    @classmethod
    def from_entries(cls, entries: Iterable[MetadataEntry]) -> "StructuredMetadata":
        return cls(tuple(entries))

    @property
    def is_empty(self) -> bool:
        return not self.entries


@dataclass
class SourceResult:
    """Records produced by one source together with how to interpret their paths."""

    kind: SourceKind
    layout: PathLayout
    records: List[AssetRecord]
    platform: Optional[Platform] = None


_E = TypeVar("_E", FileCategory, AssetCategory, OtherCategory)


def empty_buckets(taxonomy: Type[_E]) -> Dict[_E, CategoryBucket]:
    """Return one zeroed bucket per member, in declaration order."""
    return {member: CategoryBucket(name=member.value) for member in taxonomy}


@dataclass
class CompositionBreakdown:
    """Categorized size report for one build artifact."""

    files: Dict[FileCategory, CategoryBucket] = field(
        default_factory=lambda: empty_buckets(FileCategory)
    )
    assets: Optional[Dict[AssetCategory, CategoryBucket]] = None
    other: Optional[Dict[OtherCategory, CategoryBucket]] = None
    top_contributors: List[AssetRecord] = field(default_factory=list)
    has_data: bool = False
    source: Optional[SourceKind] = None

    @classmethod
    def empty(cls) -> "CompositionBreakdown":
        """Terminal state: every bucket at zero and the no-data flag raised."""
        return cls()

    @property
    def no_data(self) -> bool:
        return not self.has_data

    @property
    def total_size(self) -> int:
        return sum(bucket.size for bucket in self.files.values())

    @property
    def total_count(self) -> int:
        return sum(bucket.count for bucket in self.files.values())

    @property
    def total_assets_size(self) -> int:
        if not self.assets:
            return 0
        return sum(bucket.size for bucket in self.assets.values())

    @property
    def total_assets(self) -> int:
        if not self.assets:
            return 0
        return sum(bucket.count for bucket in self.assets.values())

    def sizes(self) -> Mapping[str, int]:
        """Flat ``bucket name -> size`` view of the file taxonomy."""
        return {category.value: bucket.size for category, bucket in self.files.items()}


def top_records(records: Sequence[AssetRecord], limit: int) -> List[AssetRecord]:
    """Return the ``limit`` largest records, descending by size then path."""
    if limit <= 0:
        return []
    ordered = sorted(records, key=lambda record: (-record.size, record.path))
    return ordered[:limit]
