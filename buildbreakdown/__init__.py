"""Build artifact composition analysis."""

from .analyzer import CompositionAnalyzer, analyze_project
from .models import BuildArtifactLocation, CompositionBreakdown, Platform, ProjectIdentity

__all__ = [
    "BuildArtifactLocation",
    "CompositionAnalyzer",
    "CompositionBreakdown",
    "Platform",
    "ProjectIdentity",
    "analyze_project",
]

__version__ = "0.1.0"
