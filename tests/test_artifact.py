"""Artifact description tests."""

from __future__ import annotations

from buildbreakdown.artifact import describe_artifact, measure_output_size
from buildbreakdown.models import BuildArtifactLocation, Platform
from tests._fixtures.artifacts import ArtifactBuilder


def test_describe_package_files(artifacts: ArtifactBuilder) -> None:
    apk = artifacts.archive("game.apk", {"classes.dex": 10})
    ipa = artifacts.archive("game.ipa", {"Payload/Game.app/Game": 10})

    assert describe_artifact(BuildArtifactLocation.from_path(apk, Platform.ANDROID)).type == "apk"
    info = describe_artifact(BuildArtifactLocation.from_path(ipa, Platform.IOS))
    assert (info.type, info.extension) == ("ipa", ".ipa")


def test_describe_directories(artifacts: ArtifactBuilder) -> None:
    webgl = artifacts.tree("webgl", {"Build/game.wasm": 10})
    xcode = artifacts.tree("xcode", {"Data/data.unity3d": 10})
    plain = artifacts.tree("linux", {"Game_Data/globalgamemanagers": 10})

    assert describe_artifact(BuildArtifactLocation.from_path(webgl, Platform.WEBGL)).type == "webgl"
    assert describe_artifact(BuildArtifactLocation.from_path(xcode, Platform.IOS)).type == "xcode"
    assert (
        describe_artifact(BuildArtifactLocation.from_path(plain, Platform.STANDALONE_LINUX64)).type
        == "folder"
    )


def test_describe_directory_containing_package(artifacts: ArtifactBuilder) -> None:
    output = artifacts.tree("output", {"notes.txt": 3})
    artifacts.archive("output/game.aab", {"base/dex/classes.dex": 10})

    info = describe_artifact(BuildArtifactLocation.from_path(output, Platform.ANDROID))

    assert (info.type, info.extension) == ("aab", ".aab")


def test_measure_output_size(artifacts: ArtifactBuilder) -> None:
    tree = artifacts.tree("tree", {"a.bin": 100, "nested/b.bin": 50})
    exe = artifacts.tree("win", {"Game.exe": 64})

    assert measure_output_size(BuildArtifactLocation.from_path(tree, Platform.WEBGL)) == 150
    assert (
        measure_output_size(
            BuildArtifactLocation.from_path(exe / "Game.exe", Platform.STANDALONE_WINDOWS64)
        )
        == 64
    )
    missing = BuildArtifactLocation.from_path(tree / "missing", Platform.WEBGL)
    assert measure_output_size(missing) == 0
