"""CLI entrypoints for buildbreakdown commands."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from .analyzer import analyze_project
from .artifact import describe_artifact, measure_output_size
from .config import ConfigError, load_config
from .logging import configure_logging
from .models import BuildArtifactLocation, Platform, ProjectIdentity, StructuredMetadata
from .report import breakdown_to_dict, format_bytes, render_text
from .sources import build_exclude, load_metadata
from .stores import CompositionCache, cache_path_for


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )


def _add_log_file_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    parser.add_argument(
        "--log-file",
        default=argparse.SUPPRESS if suppress_default else None,
        help="Also write a debug-level trace of the run to this file.",
    )


def _add_project_root_option(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--project-root",
        default=".",
        help="Project root holding .buildbreakdown.yml (defaults to current directory).",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="buildbreakdown",
        description="Explain where the bytes of a build artifact went.",
    )
    _add_verbose_option(parser)
    _add_log_file_option(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    analyze_parser = subparsers.add_parser(
        "analyze",
        help="Break a build artifact down by file and asset category.",
    )
    _add_verbose_option(analyze_parser, suppress_default=True)
    _add_log_file_option(analyze_parser, suppress_default=True)
    _add_project_root_option(analyze_parser)
    analyze_parser.add_argument("path", help="Path to the build artifact (file or directory).")
    analyze_parser.add_argument(
        "--platform",
        required=True,
        help="Build target, e.g. Android, iOS, WebGL, StandaloneWindows64.",
    )
    analyze_parser.add_argument(
        "--metadata",
        help="JSON size report emitted by the build tool.",
    )
    analyze_parser.add_argument(
        "--log",
        help="Editor log to mine when no better evidence exists.",
    )
    analyze_parser.add_argument(
        "--no-cache",
        action="store_true",
        help="Neither read nor write the last-known-good breakdown.",
    )
    analyze_parser.add_argument(
        "--json",
        action="store_true",
        help="Print the breakdown as JSON instead of a text table.",
    )

    cache_parser = subparsers.add_parser(
        "cache",
        help="Inspect the cached breakdown for a project.",
    )
    _add_verbose_option(cache_parser, suppress_default=True)
    _add_log_file_option(cache_parser, suppress_default=True)
    cache_subparsers = cache_parser.add_subparsers(dest="cache_command", required=True)
    show_parser = cache_subparsers.add_parser("show", help="Print the cached breakdown.")
    _add_project_root_option(show_parser)

    serve_parser = subparsers.add_parser(
        "serve",
        help="Run the HTTP analysis service.",
    )
    _add_verbose_option(serve_parser, suppress_default=True)
    _add_log_file_option(serve_parser, suppress_default=True)
    serve_parser.add_argument("--host", default="127.0.0.1", help="Interface to bind.")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port to listen on.")

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for buildbreakdown commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(
        verbose=bool(args.verbose),
        log_file=Path(args.log_file).expanduser() if args.log_file else None,
    )

    if args.command == "analyze":
        _run_analyze(parser, args)
    elif args.command == "cache":
        _run_cache_show(parser, args)
    elif args.command == "serve":
        from .service import run_service

        run_service(host=args.host, port=args.port)
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _run_analyze(parser: argparse.ArgumentParser, args: argparse.Namespace) -> None:
    try:
        config = load_config(Path(args.project_root))
    except ConfigError as exc:
        parser.exit(1, f"{exc}\n")

    platform = Platform.parse(args.platform)
    location = BuildArtifactLocation.from_path(args.path, platform)

    metadata = StructuredMetadata.empty()
    if args.metadata:
        metadata = load_metadata(
            Path(args.metadata), exclude=build_exclude(config.analysis.exclude_paths)
        )

    breakdown = analyze_project(
        config,
        location,
        metadata=metadata,
        log_path=Path(args.log).expanduser() if args.log else None,
        use_cache=not args.no_cache,
    )
    artifact = describe_artifact(location)
    output_size = measure_output_size(location)

    if args.json:
        payload = {
            "artifact": {
                "path": str(location.path),
                "platform": platform.value,
                "type": artifact.type,
                "extension": artifact.extension,
                "outputSize": output_size,
            },
            "breakdown": breakdown_to_dict(breakdown),
        }
        print(json.dumps(payload, indent=2))
        return

    title = (
        f"{_relativize(location.path)} ({platform.value} {artifact.type}, "
        f"{format_bytes(output_size)})"
    )
    print(render_text(breakdown, title=title))


def _run_cache_show(parser: argparse.ArgumentParser, args: argparse.Namespace) -> None:
    try:
        config = load_config(Path(args.project_root))
    except ConfigError as exc:
        parser.exit(1, f"{exc}\n")

    identity = ProjectIdentity.from_root(config.root)
    cache = CompositionCache(cache_path_for(identity, config.cache_directory))
    entry = cache.read_entry()
    if entry is None or entry.project_identity != identity.value:
        print(f"No composition cache for {identity} at {_relativize(cache.path)}")
        return
    print(render_text(entry.breakdown, title=f"Cached breakdown captured at {entry.captured_at}"))


def _relativize(path: Path) -> str:
    try:
        return str(path.relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
