"""CLI entrypoints for docmap commands."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .config import ConfigError
from .lint.annotations import AnnotationLintError
from .lint.formatters import FORMATS, format_report
from .logging import configure_logging
from .orchestrator import Orchestrator


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


def _add_path_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Path to the repository root (defaults to current directory).",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="docmap",
        description="Extract feature maps from annotation comments and keep the annotations honest.",
    )
    _add_verbose_option(parser)
    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Only log warnings and errors.",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Also write debug logs to this file.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    feature_parser = subparsers.add_parser(
        "feature-map",
        help="Build the feature map of a repository.",
    )
    _add_verbose_option(feature_parser, suppress_default=True)
    _add_path_argument(feature_parser)
    feature_parser.add_argument(
        "--format",
        choices=("json", "markdown"),
        default="json",
        help="Output format (json writes a snapshot, markdown renders a document).",
    )
    feature_parser.add_argument(
        "--output",
        default=None,
        help="Write the result to this file instead of the configured location.",
    )
    feature_parser.add_argument(
        "--check-edges",
        action="store_true",
        help="Report references whose target is unknown or does not reference back.",
    )

    lint_parser = subparsers.add_parser(
        "lint-annotations",
        help="Check @screen, @component and @usedComponents annotations.",
    )
    _add_verbose_option(lint_parser, suppress_default=True)
    _add_path_argument(lint_parser)
    lint_parser.add_argument(
        "--strict",
        action="store_true",
        default=None,
        help="Exit non-zero when error-severity issues are found.",
    )
    lint_parser.add_argument(
        "--fix",
        action="store_true",
        help="Rewrite missing or stale annotations in place.",
    )
    lint_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="With --fix, print the changes instead of writing them.",
    )
    lint_parser.add_argument(
        "--format",
        choices=FORMATS,
        default="terminal",
        help="Report format.",
    )

    extract_parser = subparsers.add_parser(
        "extract",
        help="Print one declaration with its doc block.",
    )
    _add_verbose_option(extract_parser, suppress_default=True)
    extract_parser.add_argument("file", help="Source file to read.")
    extract_parser.add_argument("name", help="Name of the function or binding to extract.")

    serve_parser = subparsers.add_parser(
        "serve",
        help="Run the HTTP service (requires the service extra).",
    )
    _add_verbose_option(serve_parser, suppress_default=True)
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)

    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint for docmap commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(
        verbose=bool(args.verbose),
        quiet=bool(getattr(args, "quiet", False)),
        log_file=getattr(args, "log_file", None),
    )

    orchestrator = Orchestrator()

    if args.command == "feature-map":
        try:
            outcome = orchestrator.run_feature_map(
                args.path,
                fmt=args.format,
                output=args.output,
                check_edges=bool(args.check_edges),
            )
        except (FileNotFoundError, NotADirectoryError, ConfigError) as exc:
            parser.exit(1, f"{exc}\n")
        except Exception as exc:  # pragma: no cover - defensive guard
            parser.exit(1, f"docmap feature-map failed: {exc}\nRun with --verbose for more details.\n")
        if outcome.path is not None:
            print(f"Feature map written to {_relativize(outcome.path)}")
        else:
            print(outcome.content)
        for issue in outcome.edge_issues:
            print(f"{issue.path}: {issue.message}")
        return 0

    if args.command == "lint-annotations":
        try:
            outcome = orchestrator.run_lint(
                args.path,
                fix=bool(args.fix),
                dry_run=bool(args.dry_run),
                strict=args.strict,
            )
        except (FileNotFoundError, NotADirectoryError, ConfigError) as exc:
            parser.exit(1, f"{exc}\n")
        except AnnotationLintError as exc:  # pragma: no cover - raise_on_failure is off here
            parser.exit(1, f"{exc}\n")
        if outcome.dry_run and outcome.diff:
            print("Annotation fixes (dry-run):")
            print(outcome.diff)
        elif outcome.fixed:
            print(f"Fixed annotations in {len(outcome.fixed)} file(s)")
        print(format_report(outcome.report, args.format))
        return outcome.exit_code

    if args.command == "extract":
        try:
            print(orchestrator.run_extract(args.file, args.name))
        except OSError as exc:
            parser.exit(1, f"{exc}\n")
        return 0

    if args.command == "serve":  # pragma: no cover - integration path
        from .service.app import run_service

        try:
            run_service(host=args.host, port=args.port)
        except RuntimeError as exc:
            parser.exit(1, f"{exc}\n")
        return 0

    parser.exit(1, "Unknown command\n")  # pragma: no cover - argparse enforces choices
    return 1  # pragma: no cover


def _relativize(path: Path) -> str:
    try:
        return str(path.relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
