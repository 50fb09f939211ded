"""Base classes for composition sources."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from ..models import BuildArtifactLocation, ProjectIdentity, SourceResult, StructuredMetadata


class SourceUnavailable(RuntimeError):
    """Raised when a source has no usable evidence for this artifact."""


class ProjectMismatch(SourceUnavailable):
    """Raised when the evidence found belongs to a different project."""


@dataclass(frozen=True)
class AnalysisContext:
    """Inputs shared by every source during a single analysis pass."""

    location: BuildArtifactLocation
    identity: ProjectIdentity
    metadata: StructuredMetadata = field(default_factory=StructuredMetadata.empty)
    log_path: Optional[Path] = None


class CompositionSource(ABC):
    """Contract for one kind of evidence about where an artifact's bytes went."""

    name: str = "source"

    @abstractmethod
    def collect(self, context: AnalysisContext) -> Optional[SourceResult]:
        """Return the records this source can recover.

        ``None`` or a result with no records means the source produced nothing.
        Implementations raise ``SourceUnavailable`` when their evidence is missing
        or unusable; the caller treats both outcomes as a signal to move on.
        """
