"""CLI parser and command behaviour tests."""

from __future__ import annotations

import json

import pytest

from docmap.cli import _build_parser, main
from tests._fixtures.repo_builder import RepoBuilder


def test_cli_accepts_verbose_before_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["--verbose", "feature-map"])
    assert args.verbose is True
    assert args.command == "feature-map"


def test_cli_accepts_verbose_after_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["lint-annotations", "--verbose"])
    assert args.verbose is True
    assert args.command == "lint-annotations"


def test_cli_lint_flags() -> None:
    parser = _build_parser()
    args = parser.parse_args(["lint-annotations", "repo", "--fix", "--dry-run", "--format", "json"])
    assert args.path == "repo"
    assert args.fix is True
    assert args.dry_run is True
    assert args.format == "json"
    assert args.strict is None


def test_cli_rejects_unknown_format() -> None:
    parser = _build_parser()
    with pytest.raises(SystemExit):
        parser.parse_args(["feature-map", "--format", "html"])


def test_main_feature_map_markdown(repo_builder: RepoBuilder, capsys: pytest.CaptureFixture[str]) -> None:
    repo_builder.write({"app/page.tsx": "/**\n * @screen HomeScreen\n */\nexport default function Home() {}\n"})

    code = main(["feature-map", str(repo_builder.path()), "--format", "markdown"])

    assert code == 0
    assert "**HomeScreen**" in capsys.readouterr().out


def test_main_lint_json_and_strict_exit_code(repo_builder: RepoBuilder, capsys: pytest.CaptureFixture[str]) -> None:
    repo_builder.write(
        {
            ".docmap.yml": "lint:\n  rules:\n    screen-required:\n      severity: error\n",
            "app/page.tsx": "export default function Home() {}\n",
        }
    )

    assert main(["lint-annotations", str(repo_builder.path()), "--format", "json"]) == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["summary"]["errorCount"] == 1

    assert main(["lint-annotations", str(repo_builder.path()), "--strict", "--format", "summary"]) == 1


def test_main_extract(repo_builder: RepoBuilder, capsys: pytest.CaptureFixture[str]) -> None:
    repo_builder.write({"lib/math.ts": "export function add(a: number, b: number) {\n  return a + b;\n}\n"})

    assert main(["extract", str(repo_builder.path() / "lib" / "math.ts"), "add"]) == 0
    assert capsys.readouterr().out.startswith("export function add")


def test_main_missing_repository_exits(tmp_path) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["feature-map", str(tmp_path / "missing")])
    assert excinfo.value.code == 1
