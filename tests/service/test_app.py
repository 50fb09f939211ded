"""Tests for the FastAPI service mode."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any

import pytest
from fastapi.testclient import TestClient

from buildbreakdown.models import (
    AssetRecord,
    CompositionBreakdown,
    FileCategory,
    SourceKind,
    empty_buckets,
)
from buildbreakdown.service import app as app_module
from buildbreakdown.service import create_app
from tests._fixtures.artifacts import ArtifactBuilder


class _StubRunner:
    def __init__(self) -> None:
        self.calls: list[dict[str, Any]] = []

    def __call__(self, config, location, *, metadata=None, use_cache=True) -> CompositionBreakdown:
        self.calls.append(
            {
                "root": config.root,
                "location": location,
                "metadata": metadata,
                "use_cache": use_cache,
            }
        )
        files = empty_buckets(FileCategory)
        files[FileCategory.SCRIPTS].add(10)
        return CompositionBreakdown(
            files=files,
            top_contributors=[AssetRecord("Build/game.wasm", 10, "scripts")],
            has_data=True,
            source=SourceKind.DIRECTORY,
        )


@pytest.fixture
def runner() -> _StubRunner:
    return _StubRunner()


@pytest.fixture
def client(runner: _StubRunner) -> TestClient:
    return TestClient(create_app(runner))


def test_health_endpoint(client: TestClient) -> None:
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_analyze_endpoint(
    client: TestClient, runner: _StubRunner, artifacts: ArtifactBuilder, tmp_path: Path
) -> None:
    build = artifacts.tree("webgl", {"Build/game.wasm": 10})

    response = client.post(
        "/analyze",
        json={
            "path": str(build),
            "platform": "webgl",
            "project_root": str(tmp_path),
            "metadata": [{"path": "Assets/a.png", "size": 3}],
            "use_cache": False,
        },
    )

    assert response.status_code == 200
    data = response.json()
    assert data["artifact"]["type"] == "webgl"
    assert data["artifact"]["platform"] == "WebGL"
    assert data["artifact"]["output_size"] == 10
    assert data["breakdown"]["source"] == "directory"
    assert data["breakdown"]["files"]["scripts"] == {"size": 10, "count": 1}

    call = runner.calls[0]
    assert call["root"] == tmp_path.resolve()
    assert call["use_cache"] is False
    assert [entry.source_path for entry in call["metadata"].entries] == ["Assets/a.png"]


def test_analyze_endpoint_rejects_bad_config(client: TestClient, tmp_path: Path) -> None:
    (tmp_path / ".buildbreakdown.yml").write_text("log:\n  window: 0\n", encoding="utf-8")

    response = client.post(
        "/analyze",
        json={"path": str(tmp_path), "platform": "WebGL", "project_root": str(tmp_path)},
    )

    assert response.status_code == 400
    assert "window" in response.json()["detail"]


def test_analyze_endpoint_validates_payload(client: TestClient) -> None:
    response = client.post("/analyze", json={"platform": "WebGL"})
    assert response.status_code == 422


def test_analyze_endpoint_runs_real_analysis(
    artifacts: ArtifactBuilder, tmp_path: Path
) -> None:
    project = tmp_path / "project"
    project.mkdir()
    (project / ".buildbreakdown.yml").write_text("log:\n  enabled: false\n", encoding="utf-8")
    apk = artifacts.archive("game.apk", {"classes.dex": 7})
    client = TestClient(create_app())

    response = client.post(
        "/analyze",
        json={"path": str(apk), "platform": "Android", "project_root": str(project)},
    )

    assert response.status_code == 200
    assert response.json()["breakdown"]["files"]["scripts"]["size"] == 7


def _loop_running() -> bool:
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return False
    return True


def test_analyze_endpoint_keeps_disk_work_off_the_event_loop(
    artifacts: ArtifactBuilder, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    seen: dict[str, bool] = {}

    def _recording(name: str, func: Any) -> Any:
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            seen[name] = _loop_running()
            return func(*args, **kwargs)

        return wrapper

    monkeypatch.setattr(app_module, "load_config", _recording("config", app_module.load_config))
    monkeypatch.setattr(
        app_module, "describe_artifact", _recording("describe", app_module.describe_artifact)
    )
    monkeypatch.setattr(
        app_module, "measure_output_size", _recording("measure", app_module.measure_output_size)
    )
    runner = _StubRunner()
    client = TestClient(create_app(_recording("runner", runner)))
    build = artifacts.tree("WebBuild", {"Build/game.wasm": 10})

    response = client.post(
        "/analyze",
        json={"path": str(build), "platform": "WebGL", "project_root": str(tmp_path)},
    )

    assert response.status_code == 200
    assert seen == {"config": False, "runner": False, "describe": False, "measure": False}
