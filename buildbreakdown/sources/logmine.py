"""Recovery of asset sizes from the shared editor build log.

The editor appends to one log for every project it opens, so a size table
near the end of the file may belong to someone else's build. The miner only
trusts the most recent table when the lines leading up to it mention the
current project root; otherwise it reports nothing.
"""

from __future__ import annotations

import os
import platform as _platform
import re
from pathlib import Path
from typing import List, Optional, Sequence

from ..logging import get_logger
from ..models import AssetRecord, PathLayout, ProjectIdentity, SourceKind, SourceResult
from .base import AnalysisContext, CompositionSource, ProjectMismatch, SourceUnavailable

SECTION_HEADER = "Used Assets and files from the Resources folder"
DEFAULT_WINDOW = 1000
COMMAND_LINE_MARKER = "COMMAND LINE ARGUMENTS"
COMMAND_LINE_LOOKAHEAD = 10
LOG_PATH_ENV = "BUILDBREAKDOWN_EDITOR_LOG"

UNIT_MULTIPLIERS = {
    "b": 1,
    "bytes": 1,
    "kb": 1024,
    "mb": 1024**2,
    "gb": 1024**3,
}

_SIZE_VALUE = re.compile(r"^\d+(?:\.\d+)?$", re.ASCII)

_LOGGER = get_logger("sources.logmine")


def default_editor_log_path(system: str | None = None) -> Optional[Path]:
    """Return where the editor writes its log on this operating system."""
    override = os.environ.get(LOG_PATH_ENV)
    if override:
        return Path(override).expanduser()

    system = system or _platform.system()
    home = Path.home()
    if system == "Darwin":
        return home / "Library" / "Logs" / "Unity" / "Editor.log"
    if system == "Windows":
        local_app_data = os.environ.get("LOCALAPPDATA")
        base = Path(local_app_data) if local_app_data else home / "AppData" / "Local"
        return base / "Unity" / "Editor" / "Editor.log"
    if system == "Linux":
        return home / ".config" / "unity3d" / "Editor.log"
    return None


def parse_size_line(line: str) -> Optional[AssetRecord]:
    """Parse one ``<value> <unit> <percent>% <path>`` row of the size table."""
    parts = line.split()
    if len(parts) < 3:
        return None

    asset_path = None
    for index, part in enumerate(parts):
        if part.startswith("Assets/"):
            # Paths may contain spaces; the remainder of the row is the path.
            asset_path = " ".join(parts[index:])
            break
    if not asset_path:
        return None

    # Plain invariant decimals only: no sign, exponent, separators or nan.
    if not _SIZE_VALUE.match(parts[0]):
        return None
    value = float(parts[0])

    multiplier = UNIT_MULTIPLIERS.get(parts[1].strip().lower())
    if multiplier is None:
        return None

    return AssetRecord(path=asset_path, size=int(value * multiplier))


def _token_patterns(identity: ProjectIdentity) -> List[re.Pattern[str]]:
    # A token must end at a path boundary so "/work/Game" does not vouch for
    # "/work/Game2".
    return [
        re.compile(re.escape(token) + r"(?=$|[/\\\s\"'])")
        for token in identity.tokens()
    ]


class LogMiner(CompositionSource):
    """Best-effort recovery of a path/size table from the editor log."""

    name = "log"

    def __init__(
        self,
        *,
        window: int = DEFAULT_WINDOW,
        header: str = SECTION_HEADER,
    ) -> None:
        self.window = max(1, window)
        self.header = header

    def mine(self, log_path: Path, identity: ProjectIdentity) -> Optional[List[AssetRecord]]:
        """Return the records of the latest size table if it belongs to ``identity``."""
        try:
            lines = self._read_lines(log_path)
            start = self._locate_section(lines)
            self._verify_project(lines, start, identity)
        except ProjectMismatch as exc:
            _LOGGER.warning(
                "%s; ignoring it. A clean build of this project refreshes the log.", exc
            )
            return None
        except SourceUnavailable as exc:
            _LOGGER.warning("%s", exc)
            return None

        records = self._parse_section(lines, start)
        _LOGGER.info("Recovered %d assets from %s", len(records), log_path)
        return records

    def collect(self, context: AnalysisContext) -> Optional[SourceResult]:
        if context.log_path is None:
            _LOGGER.debug("No editor log location known for this host")
            return None
        records = self.mine(context.log_path, context.identity)
        if not records:
            return None
        return SourceResult(kind=SourceKind.LOG, layout=PathLayout.SOURCE, records=records)

    # ------------------------------------------------------------------
    # Internal helpers

    def _read_lines(self, log_path: Path) -> List[str]:
        try:
            text = Path(log_path).read_text(encoding="utf-8", errors="replace")
        except FileNotFoundError as exc:
            raise SourceUnavailable(f"Editor log not found: {log_path}") from exc
        except OSError as exc:
            raise SourceUnavailable(f"Editor log unreadable: {log_path}: {exc}") from exc
        return text.splitlines()

    def _locate_section(self, lines: Sequence[str]) -> int:
        for index in range(len(lines) - 1, -1, -1):
            if self.header in lines[index]:
                return index
        raise SourceUnavailable(
            "Editor log has no asset size section (incremental builds do not write one)"
        )

    def _verify_project(
        self, lines: Sequence[str], start: int, identity: ProjectIdentity
    ) -> None:
        patterns = _token_patterns(identity)

        def _mentions_project(text: str) -> bool:
            return any(pattern.search(text) for pattern in patterns)

        lower_bound = max(0, start - self.window)
        for index in range(start - 1, lower_bound - 1, -1):
            line = lines[index]
            if _mentions_project(line):
                return
            if COMMAND_LINE_MARKER in line:
                following = "\n".join(lines[index:index + COMMAND_LINE_LOOKAHEAD])
                if _mentions_project(following):
                    return
        raise ProjectMismatch(
            f"Editor log asset section belongs to a different project than {identity}"
        )

    def _parse_section(self, lines: Sequence[str], start: int) -> List[AssetRecord]:
        records: List[AssetRecord] = []
        for line in lines[start + 1:]:
            if not line.strip() or line.startswith("---"):
                break
            if "Assets/" not in line or "Built-in" in line:
                continue
            record = parse_size_line(line)
            if record is not None:
                records.append(record)
        return records


__all__ = [
    "COMMAND_LINE_MARKER",
    "DEFAULT_WINDOW",
    "LOG_PATH_ENV",
    "LogMiner",
    "SECTION_HEADER",
    "UNIT_MULTIPLIERS",
    "default_editor_log_path",
    "parse_size_line",
]
