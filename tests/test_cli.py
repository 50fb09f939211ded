"""CLI parser and command behaviour tests."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from buildbreakdown.cli import _build_parser, main
from tests._fixtures.artifacts import ArtifactBuilder


def test_cli_accepts_verbose_before_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["--verbose", "analyze", "build", "--platform", "WebGL"])
    assert args.verbose is True
    assert args.command == "analyze"


def test_cli_accepts_verbose_after_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["analyze", "build", "--platform", "WebGL", "--verbose"])
    assert args.verbose is True
    assert args.platform == "WebGL"


def test_cli_analyze_flags() -> None:
    parser = _build_parser()
    args = parser.parse_args(
        [
            "analyze",
            "game.apk",
            "--platform",
            "Android",
            "--project-root",
            "proj",
            "--metadata",
            "report.json",
            "--log",
            "Editor.log",
            "--no-cache",
            "--json",
        ]
    )
    assert args.path == "game.apk"
    assert args.project_root == "proj"
    assert args.metadata == "report.json"
    assert args.log == "Editor.log"
    assert args.no_cache is True
    assert args.json is True


def test_cli_analyze_requires_platform() -> None:
    parser = _build_parser()
    with pytest.raises(SystemExit):
        parser.parse_args(["analyze", "game.apk"])


def test_cli_cache_show_and_serve_parse() -> None:
    parser = _build_parser()
    cache_args = parser.parse_args(["cache", "show", "--project-root", "proj"])
    serve_args = parser.parse_args(["serve", "--port", "9000"])
    assert (cache_args.command, cache_args.cache_command) == ("cache", "show")
    assert serve_args.port == 9000
    assert serve_args.host == "127.0.0.1"


def _project(tmp_path: Path) -> Path:
    project = tmp_path / "project"
    project.mkdir()
    (project / ".buildbreakdown.yml").write_text("log:\n  enabled: false\n", encoding="utf-8")
    return project


def test_analyze_prints_json_report(
    artifacts: ArtifactBuilder, tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    project = _project(tmp_path)
    apk = artifacts.archive("game.apk", {"classes.dex": 100, "lib/arm64-v8a/libmain.so": 50})

    main(["analyze", str(apk), "--platform", "android", "--project-root", str(project), "--json"])

    payload = json.loads(capsys.readouterr().out)
    assert payload["artifact"]["type"] == "apk"
    assert payload["artifact"]["platform"] == "Android"
    assert payload["breakdown"]["source"] == "archive"
    assert payload["breakdown"]["files"]["scripts"]["size"] == 100
    assert payload["breakdown"]["files"]["plugins"]["size"] == 50


def test_analyze_uses_metadata_file(
    artifacts: ArtifactBuilder, tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    project = _project(tmp_path)
    apk = artifacts.archive("game.apk", {"classes.dex": 100})
    report = tmp_path / "report.json"
    report.write_text(json.dumps([{"path": "Assets/Art/hero.png", "size": 42}]), encoding="utf-8")

    main(
        [
            "analyze",
            str(apk),
            "--platform",
            "Android",
            "--project-root",
            str(project),
            "--metadata",
            str(report),
            "--no-cache",
            "--json",
        ]
    )

    payload = json.loads(capsys.readouterr().out)
    assert payload["breakdown"]["source"] == "metadata"
    assert payload["breakdown"]["assets"]["textures"] == {"size": 42, "count": 1}


def test_analyze_text_output_then_cache_show(
    artifacts: ArtifactBuilder, tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    project = _project(tmp_path)
    build = artifacts.tree("webgl", {"Build/game.wasm": 64})

    main(["analyze", str(build), "--platform", "WebGL", "--project-root", str(project)])
    analyze_out = capsys.readouterr().out

    main(["cache", "show", "--project-root", str(project)])
    cache_out = capsys.readouterr().out

    assert "Source: directory" in analyze_out
    assert "Cached breakdown captured at" in cache_out
    assert "scripts" in cache_out


def test_cache_show_without_cache(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    project = _project(tmp_path)

    main(["cache", "show", "--project-root", str(project)])

    assert "No composition cache" in capsys.readouterr().out


def test_analyze_reports_bad_config(tmp_path: Path) -> None:
    project = tmp_path / "project"
    project.mkdir()
    (project / ".buildbreakdown.yml").write_text("log:\n  window: -3\n", encoding="utf-8")

    with pytest.raises(SystemExit) as excinfo:
        main(["analyze", str(tmp_path), "--platform", "WebGL", "--project-root", str(project)])

    assert excinfo.value.code == 1


def test_cli_accepts_log_file_before_or_after_command() -> None:
    parser = _build_parser()
    before = parser.parse_args(["--log-file", "run.log", "serve"])
    after = parser.parse_args(["cache", "show", "--log-file", "run.log"])
    neither = parser.parse_args(["serve"])
    assert before.log_file == "run.log"
    assert after.log_file == "run.log"
    assert neither.log_file is None


def test_analyze_writes_trace_to_log_file(
    artifacts: ArtifactBuilder, tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    project = _project(tmp_path)
    apk = artifacts.archive("game.apk", {"classes.dex": 100})
    log_file = tmp_path / "logs" / "run.log"

    main(
        [
            "analyze",
            str(apk),
            "--platform",
            "Android",
            "--project-root",
            str(project),
            "--no-cache",
            "--log-file",
            str(log_file),
        ]
    )

    trace = log_file.read_text(encoding="utf-8")
    assert "buildbreakdown.analyzer: Source 'container' produced 1 records" in trace
    assert "Source 'container' produced" not in capsys.readouterr().out
