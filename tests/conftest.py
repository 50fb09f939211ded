from __future__ import annotations

import logging
from pathlib import Path

import pytest

from tests._fixtures.artifacts import ArtifactBuilder


@pytest.fixture(autouse=True)
def _reset_package_logger():
    """Undo ``configure_logging`` so caplog sees records in every test."""
    logger = logging.getLogger("buildbreakdown")
    yield
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def artifacts(tmp_path: Path) -> ArtifactBuilder:
    """Provide a reusable artifact builder rooted at the pytest tmp_path."""
    return ArtifactBuilder(tmp_path)
