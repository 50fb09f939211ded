"""Directory walking with exclusion of build-tool intermediates."""

from __future__ import annotations

import os
from dataclasses import dataclass
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Callable, Iterable, Iterator, List, Optional, Sequence, Tuple

from ..logging import get_logger
from ..models import PathLayout, SourceKind, SourceResult, AssetRecord, Platform

ExcludePredicate = Callable[[str, bool], bool]

# Locations that never ship: IL2CPP backups and generated sources, debug symbols,
# scratch space, and the packaged artifact itself when it sits in the same tree.
DEFAULT_EXCLUDE_PATTERNS: Tuple[str, ...] = (
    "il2cppbackup/",
    "il2cppoutput/",
    "symbols/",
    "temp/",
    "*_backupthisfolder_butdontshipitwithyourgame/",
    "*_burstdebuginformation_donotship/",
    "*.apk",
    "*.aab",
    "*.ipa",
)

_LOGGER = get_logger("sources.directory")


@dataclass
class ExcludeRule:
    """A gitignore-style pattern matched case-insensitively against relative paths."""

    pattern: str
    directory_only: bool
    anchored: bool
    negate: bool
    has_slash: bool

    def matches(self, rel_path: str, is_dir: bool) -> bool:
        if not self.pattern:
            return False

        target = rel_path.lower()
        if self.anchored or self.has_slash:
            if fnmatchcase(target, self.pattern):
                return True
            if target.startswith(f"{self.pattern}/"):
                return True
            return False

        parts = target.split("/")
        if self.directory_only:
            # A file matches when any of its parent directories does.
            candidates = parts if is_dir else parts[:-1]
        else:
            candidates = parts
        for part in candidates:
            if fnmatchcase(part, self.pattern):
                return True
        return False


def build_rule(pattern: str) -> ExcludeRule | None:
    pattern = pattern.strip().replace("\\", "/").lower()
    if not pattern or pattern.startswith("#"):
        return None

    negate = pattern.startswith("!")
    if negate:
        pattern = pattern[1:]

    directory_only = pattern.endswith("/")
    if directory_only:
        pattern = pattern[:-1]

    anchored = pattern.startswith("/")
    if anchored:
        pattern = pattern[1:]

    if not pattern:
        return None

    return ExcludeRule(
        pattern=pattern,
        directory_only=directory_only,
        anchored=anchored,
        negate=negate,
        has_slash="/" in pattern,
    )


def build_exclude(extra_patterns: Iterable[str] = ()) -> ExcludePredicate:
    """Return a predicate combining the default rules with ``extra_patterns``.

    Later rules win, so a ``!pattern`` can re-include something a default hides.
    """
    rules: List[ExcludeRule] = []
    for pattern in (*DEFAULT_EXCLUDE_PATTERNS, *extra_patterns):
        rule = build_rule(pattern)
        if rule is not None:
            rules.append(rule)
    return _predicate_for(rules)


def _predicate_for(rules: Sequence[ExcludeRule]) -> ExcludePredicate:
    def _excluded(rel_path: str, is_dir: bool) -> bool:
        normalised = rel_path.replace("\\", "/").strip("/")
        excluded = False
        for rule in rules:
            if rule.matches(normalised, is_dir):
                excluded = not rule.negate
        return excluded

    return _excluded


default_exclude: ExcludePredicate = build_exclude()


class DirectoryWalker:
    """Lists files under a root with their on-disk sizes."""

    def walk(
        self, root: Path, exclude: Optional[ExcludePredicate] = None
    ) -> Iterator[Tuple[str, int]]:
        """Yield ``(relative posix path, size)`` for every non-excluded file."""
        excluded = exclude or default_exclude
        for dirpath, dirnames, filenames in os.walk(root):
            current_dir = Path(dirpath)
            rel_dir = current_dir.relative_to(root).as_posix() if current_dir != root else ""

            kept_dirs = []
            for name in sorted(dirnames):
                rel_path = f"{rel_dir}/{name}" if rel_dir else name
                if excluded(rel_path, True):
                    continue
                kept_dirs.append(name)
            dirnames[:] = kept_dirs

            for filename in sorted(filenames):
                rel_path = f"{rel_dir}/{filename}" if rel_dir else filename
                if excluded(rel_path, False):
                    continue
                try:
                    size = (current_dir / filename).stat().st_size
                except OSError as exc:
                    _LOGGER.debug("Skipping unreadable file %s: %s", rel_path, exc)
                    continue
                yield rel_path, size

    def collect(
        self,
        root: Path,
        platform: Platform,
        exclude: Optional[ExcludePredicate] = None,
    ) -> SourceResult:
        records = [AssetRecord(path=path, size=size) for path, size in self.walk(root, exclude)]
        _LOGGER.debug("Walked %s: %d files", root, len(records))
        return SourceResult(
            kind=SourceKind.DIRECTORY,
            layout=PathLayout.OUTPUT,
            records=records,
            platform=platform,
        )


__all__ = [
    "DEFAULT_EXCLUDE_PATTERNS",
    "DirectoryWalker",
    "ExcludePredicate",
    "ExcludeRule",
    "build_exclude",
    "build_rule",
    "default_exclude",
]
