"""Persistent fallback copy of the last successful breakdown for a project."""

from __future__ import annotations

from datetime import UTC, datetime
import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from ..logging import get_logger
from ..models import CompositionBreakdown, ProjectIdentity
from ..report import breakdown_from_dict, breakdown_to_dict

_CACHE_VERSION = 1
_CACHE_PREFIX = "composition_cache"

_LOGGER = get_logger("stores.composition_cache")


class PersistenceFailure(RuntimeError):
    """Raised internally when the cache file cannot be written."""


@dataclass
class CompositionCacheEntry:
    """What is stored on disk for one project."""

    project_identity: str
    breakdown: CompositionBreakdown
    captured_at: str


def cache_path_for(identity: ProjectIdentity, directory: Path) -> Path:
    """Identity-scoped cache location so projects sharing a directory never collide."""
    return directory / f"{_CACHE_PREFIX}-{identity.key}.json"


class CompositionCache:
    """Single-entry store, overwritten by every live analysis, read only as a last resort."""

    def __init__(self, path: Path) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def save(self, identity: ProjectIdentity, breakdown: CompositionBreakdown) -> bool:
        """Overwrite the entry; failures are logged and reported as ``False``."""
        try:
            self._write(identity, breakdown)
        except PersistenceFailure as exc:
            _LOGGER.warning("Failed to save composition cache: %s", exc)
            return False
        _LOGGER.debug("Saved composition cache for %s at %s", identity, self._path)
        return True

    def load(self, identity: ProjectIdentity) -> Optional[CompositionBreakdown]:
        """Return the cached breakdown when it was captured for ``identity``."""
        entry = self.read_entry()
        if entry is None:
            _LOGGER.info("No composition cache available at %s", self._path)
            return None
        if entry.project_identity != identity.value:
            _LOGGER.warning(
                "Composition cache at %s belongs to a different project (%s), ignoring",
                self._path,
                entry.project_identity,
            )
            return None
        _LOGGER.info("Using cached composition captured at %s", entry.captured_at)
        return entry.breakdown

    def read_entry(self) -> Optional[CompositionCacheEntry]:
        """Return the stored entry regardless of identity, or ``None``."""
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return None
        except (OSError, json.JSONDecodeError) as exc:
            _LOGGER.debug("Unreadable composition cache %s: %s", self._path, exc)
            return None
        if not isinstance(data, dict) or data.get("version") != _CACHE_VERSION:
            return None
        identity = data.get("projectIdentity")
        captured_at = data.get("capturedAt")
        if not isinstance(identity, str) or not isinstance(captured_at, str):
            return None
        breakdown = breakdown_from_dict(data.get("breakdown"))
        if breakdown is None:
            return None
        return CompositionCacheEntry(
            project_identity=identity,
            breakdown=breakdown,
            captured_at=captured_at,
        )

    # ------------------------------------------------------------------
    # Internal helpers

    def _write(self, identity: ProjectIdentity, breakdown: CompositionBreakdown) -> None:
        payload = {
            "version": _CACHE_VERSION,
            "projectIdentity": identity.value,
            "breakdown": breakdown_to_dict(breakdown),
            "capturedAt": datetime.now(UTC).isoformat().replace("+00:00", "Z"),
        }
        temp_path = self._path.with_name(f"{self._path.name}.tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with temp_path.open("w", encoding="utf-8") as handle:
                json.dump(payload, handle, indent=2, sort_keys=True)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(temp_path, self._path)
        except OSError as exc:
            raise PersistenceFailure(f"{self._path}: {exc}") from exc


__all__ = [
    "CompositionCache",
    "CompositionCacheEntry",
    "PersistenceFailure",
    "cache_path_for",
]
