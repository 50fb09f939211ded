"""Path classification into the fixed file, asset and ``other`` taxonomies.

Every function here is total: unknown or empty input lands in the residual
category of its taxonomy. Matching is case-insensitive (except the project
asset root, which is case-sensitive) and treats backslashes as forward slashes.
Within each rule table, directory markers are evaluated before extension
rules so that an item's location wins over its file type.
"""

from __future__ import annotations

from typing import Callable, Dict, Optional, Sequence, Tuple

from .models import AssetCategory, FileCategory, OtherCategory, Platform

PROJECT_ASSET_ROOT = "Assets/"

_SOURCE_DIRECTORY_MARKERS: Sequence[Tuple[str, FileCategory]] = (
    ("streamingassets", FileCategory.STREAMING_ASSETS),
    ("plugins", FileCategory.PLUGINS),
    ("resources", FileCategory.RESOURCES),
    ("scripts", FileCategory.SCRIPTS),
    ("shaders", FileCategory.SHADERS),
)

_SOURCE_EXTENSIONS: Sequence[Tuple[Tuple[str, ...], FileCategory]] = (
    ((".cs", ".js", ".boo"), FileCategory.SCRIPTS),
    ((".dll", ".so", ".bundle"), FileCategory.PLUGINS),
    ((".unity",), FileCategory.SCENES),
    ((".shader", ".cginc", ".shadergraph"), FileCategory.SHADERS),
)

_ASSET_EXTENSIONS: Sequence[Tuple[Tuple[str, ...], AssetCategory]] = (
    (
        (".png", ".jpg", ".jpeg", ".tga", ".psd", ".tif", ".tiff", ".gif", ".bmp", ".exr", ".hdr"),
        AssetCategory.TEXTURES,
    ),
    (
        (".mp3", ".wav", ".ogg", ".aiff", ".aif", ".mod", ".it", ".s3m", ".xm"),
        AssetCategory.AUDIO,
    ),
    (
        (".fbx", ".dae", ".3ds", ".dxf", ".obj", ".skp", ".blend", ".mb", ".ma"),
        AssetCategory.MODELS,
    ),
    ((".anim", ".controller", ".overridecontroller"), AssetCategory.ANIMATIONS),
    ((".prefab",), AssetCategory.PREFABS),
    ((".unity",), AssetCategory.SCENES),
    ((".cs", ".js", ".boo"), AssetCategory.SCRIPTS),
    (
        (".shader", ".cginc", ".hlsl", ".compute", ".shadergraph", ".shadersubgraph"),
        AssetCategory.SHADERS,
    ),
    ((".mat",), AssetCategory.MATERIALS),
    ((".ttf", ".otf"), AssetCategory.FONTS),
    ((".mp4", ".mov", ".avi", ".webm", ".ogv"), AssetCategory.VIDEOS),
)


def _normalise(path: str) -> str:
    return path.replace("\\", "/").strip().lower()


def _probe(lower: str) -> str:
    # A leading slash lets "/segment/" checks match top-level directories too.
    return "/" + lower.lstrip("/")


def _filename(lower: str) -> str:
    return lower.rstrip("/").rsplit("/", 1)[-1]


# ---------------------------------------------------------------------------
# File taxonomy


def classify(path: str, platform: Optional[Platform] = None) -> FileCategory:
    """Map a path to its file category.

    With a known ``platform`` the path is read as a location inside that
    platform's packaged output; otherwise it is read as a project source path.
    """
    lower = _normalise(path or "")
    if not lower:
        return FileCategory.OTHER
    if platform is None or platform is Platform.UNKNOWN:
        return _classify_source(lower)
    if platform is Platform.ANDROID:
        return _classify_android(lower)
    if platform is Platform.IOS:
        return _classify_ios(lower)
    if platform is Platform.WEBGL:
        return _classify_webgl(lower)
    return _classify_standalone(lower)


def _classify_source(lower: str) -> FileCategory:
    probe = _probe(lower)
    for marker, category in _SOURCE_DIRECTORY_MARKERS:
        if f"/{marker}/" in probe:
            return category
    for suffixes, category in _SOURCE_EXTENSIONS:
        if lower.endswith(suffixes):
            return category
    return FileCategory.OTHER


def _android_relative(lower: str) -> str:
    # Exported Gradle projects nest the packaged tree under src/main/.
    marker = "/src/main/"
    probe = _probe(lower)
    index = probe.find(marker)
    if index >= 0:
        return probe[index + len(marker):]
    return lower


def _classify_android(lower: str) -> FileCategory:
    relative = _android_relative(lower)
    probe = _probe(relative)

    if relative.startswith(("lib/", "jnilibs/")) or "/lib/" in probe or "/jnilibs/" in probe:
        return FileCategory.PLUGINS

    if relative.startswith("classes") and relative.endswith(".dex"):
        return FileCategory.SCRIPTS

    if relative.startswith("assets/bin/data/"):
        name = _filename(relative)
        if name.startswith("resources"):
            return FileCategory.RESOURCES
        if name.startswith(("sharedassets", "level")) or name == "maindata":
            return FileCategory.SCENES
        if "shader" in relative or "unity_builtin_extra" in relative:
            return FileCategory.SHADERS
        return FileCategory.OTHER

    if relative.startswith("assets/") and not relative.startswith("assets/bin/"):
        return FileCategory.STREAMING_ASSETS

    if relative.startswith("res/") or relative == "resources.arsc":
        return FileCategory.OTHER

    if "shader" in relative:
        return FileCategory.SHADERS

    return FileCategory.OTHER


def _classify_ios(lower: str) -> FileCategory:
    probe = _probe(lower)

    if "/data/raw/" in probe:
        return FileCategory.STREAMING_ASSETS

    if "/frameworks/" in probe or lower.endswith((".dylib", ".framework")):
        return FileCategory.PLUGINS

    if "/data/" in probe:
        if "sharedassets" in lower or "level" in lower:
            return FileCategory.SCENES
        if "resources" in lower or lower.endswith(".resource"):
            return FileCategory.RESOURCES

    if "shader" in lower:
        return FileCategory.SHADERS

    return FileCategory.OTHER


def _classify_webgl(lower: str) -> FileCategory:
    if "/streamingassets/" in _probe(lower):
        return FileCategory.STREAMING_ASSETS
    if lower.endswith((".wasm", ".js")):
        return FileCategory.SCRIPTS
    return FileCategory.OTHER


def _classify_standalone(lower: str) -> FileCategory:
    probe = _probe(lower)

    if "/streamingassets/" in probe:
        return FileCategory.STREAMING_ASSETS

    if "/managed/" in probe and lower.endswith(".dll"):
        return FileCategory.SCRIPTS

    if "/plugins/" in probe or lower.endswith((".dll", ".so", ".bundle")):
        return FileCategory.PLUGINS

    if "sharedassets" in lower or "level" in lower:
        return FileCategory.SCENES

    if "resources" in lower or lower.endswith((".resource", ".ress")):
        return FileCategory.RESOURCES

    if "shader" in lower:
        return FileCategory.SHADERS

    return FileCategory.OTHER


# ---------------------------------------------------------------------------
# Asset taxonomy


def is_project_asset(path: str) -> bool:
    """Return True when ``path`` lives under the project's editable-source root."""
    if not path:
        return False
    return (
        path.startswith(PROJECT_ASSET_ROOT)
        or f"/{PROJECT_ASSET_ROOT}" in path
        or "\\Assets\\" in path
    )


def logical_path(path: str) -> str:
    """Return the stable identifier used to group repeated reports of one asset."""
    normalised = path.replace("\\", "/").strip()
    while normalised.startswith("./"):
        normalised = normalised[2:]
    index = normalised.find(f"/{PROJECT_ASSET_ROOT}")
    if index >= 0 and not normalised.startswith(PROJECT_ASSET_ROOT):
        return normalised[index + 1:]
    return normalised


def classify_asset(path: str) -> AssetCategory:
    """Map a project asset path to its media-type category."""
    lower = _normalise(path or "")
    if not lower:
        return AssetCategory.OTHER_ASSETS
    for suffixes, category in _ASSET_EXTENSIONS:
        if lower.endswith(suffixes):
            return category
    if lower.endswith(".asset") and "textmesh" in lower:
        return AssetCategory.FONTS
    return AssetCategory.OTHER_ASSETS


# ---------------------------------------------------------------------------
# "other" sub-taxonomy


def _other_ios(lower: str, probe: str) -> Optional[OtherCategory]:
    if "assets.car" in lower:
        return OtherCategory.IOS_ASSET_CATALOGS
    if (
        lower.endswith((".storyboardc", ".nib", ".storyboard"))
        or "/base.lproj/" in probe
        or (".app/" in lower and lower.endswith((".png", ".jpg")))
    ):
        return OtherCategory.IOS_APP_RESOURCES
    if (
        any(
            marker in probe
            for marker in ("/frameworks/", "/swiftsupport/", "/plugins/", "/meta-inf/", "/extensions/")
        )
        or ".framework/" in lower
        or "_codesignature/" in lower
        or lower.endswith(".dylib")
    ):
        return OtherCategory.IOS_SYSTEM
    return None


def _other_android(lower: str, probe: str) -> Optional[OtherCategory]:
    if "/assets/aa/" in probe or ("/assets/" in probe and lower.endswith(".bundle")):
        return OtherCategory.ANDROID_ADDRESSABLES
    if "/assets/bin/data/" in probe or "sharedassets" in lower or lower.endswith(".ress"):
        return OtherCategory.ANDROID_UNITY_DATA
    if "/res/" in probe or "resources.arsc" in lower:
        return OtherCategory.ANDROID_RESOURCES
    if "classes" in lower and lower.endswith(".dex"):
        return OtherCategory.ANDROID_CODE
    if "/lib/" in probe or "/jnilibs/" in probe:
        return OtherCategory.ANDROID_SYSTEM
    return None


def _other_webgl(lower: str, probe: str) -> Optional[OtherCategory]:
    if lower.endswith(".data"):
        return OtherCategory.WEBGL_DATA
    if lower.endswith(".wasm"):
        return OtherCategory.WEBGL_WASM
    if lower.endswith(".js"):
        return OtherCategory.WEBGL_JS
    return None


_PLATFORM_OTHER_RULES: Dict[Platform, Callable[[str, str], Optional[OtherCategory]]] = {
    Platform.IOS: _other_ios,
    Platform.ANDROID: _other_android,
    Platform.WEBGL: _other_webgl,
}


def classify_other(path: str, platform: Optional[Platform] = None) -> OtherCategory:
    """Split an item of the ``other`` file bucket into a finer sub-category."""
    lower = _normalise(path or "")
    if not lower:
        return OtherCategory.OTHER
    probe = _probe(lower)

    platform_rule = _PLATFORM_OTHER_RULES.get(platform) if platform is not None else None
    if platform_rule is not None:
        category = platform_rule(lower, probe)
        if category is not None:
            return category

    if lower.endswith((".spriteatlas", ".spriteatlasv2")):
        return OtherCategory.SPRITE_ATLASES
    if (
        lower.endswith((".pvrtc", ".etc", ".etc2", ".astc", ".dds", ".ktx"))
        or "texture" in lower
        or ".png" in lower
        or ".jpg" in lower
    ):
        return OtherCategory.TEXTURES
    if "mesh" in lower:
        return OtherCategory.MESHES
    if lower.endswith((".mp3", ".ogg", ".wav", ".m4a", ".aac")):
        return OtherCategory.AUDIO
    if lower.endswith(".bundle") or "assetbundle" in lower or "/aa/" in probe:
        return OtherCategory.ASSET_BUNDLES
    if (
        "sharedassets" in lower
        or "globalgamemanagers" in lower
        or "level" in lower
        or lower.endswith((".resource", ".assets", ".ress"))
    ):
        return OtherCategory.UNITY_RUNTIME
    if lower.endswith((".ttf", ".otf")) or "font" in lower:
        return OtherCategory.FONTS
    return OtherCategory.OTHER


__all__ = [
    "PROJECT_ASSET_ROOT",
    "classify",
    "classify_asset",
    "classify_other",
    "is_project_asset",
    "logical_path",
]
