"""Tests for lint report formatting."""

from __future__ import annotations

import json
from pathlib import Path

from docmap.config import DocMapConfig
from docmap.lint.annotations import LintReport, run_annotation_lint
from docmap.lint.formatters import format_report, format_summary, format_terminal, report_to_dict

FILES = [
    ("app/page.tsx", "export default function Home() {}\n"),
    ("app/about/page.tsx", "/**\n * @screen AboutScreen\n */\nexport default function About() {}\n"),
]


def _report(tmp_path: Path) -> LintReport:
    return run_annotation_lint(FILES, DocMapConfig(root=tmp_path))


def test_terminal_format_lists_files_and_verdict(tmp_path: Path) -> None:
    output = format_terminal(_report(tmp_path))

    assert "Annotation Lint Results" in output
    assert "warn app/page.tsx" in output
    assert "  ! L1: Missing @screen annotation in page file (screen-required)" in output
    assert "pass app/about/page.tsx" in output
    assert "1 warnings" in output
    assert "FAIL - Some checks failed" in output


def test_terminal_format_passes_on_empty_report() -> None:
    assert "PASS - All checks passed" in format_terminal(LintReport())


def test_json_format_only_lists_files_with_issues(tmp_path: Path) -> None:
    payload = json.loads(format_report(_report(tmp_path), "json"))

    assert payload["passed"] is False
    assert payload["summary"]["filesChecked"] == 2
    assert payload["summary"]["missingScreen"] == 1
    assert [entry["file"] for entry in payload["results"]] == ["app/page.tsx"]
    assert payload["results"][0]["issues"][0]["annotation"] == "@screen"
    assert report_to_dict(LintReport())["results"] == []


def test_summary_format(tmp_path: Path) -> None:
    assert format_summary(_report(tmp_path)) == "2 files checked, 0 errors, 1 warnings, 0 info - FAILED"
    assert format_report(LintReport(), "summary") == "0 files checked, 0 errors, 0 warnings, 0 info - PASSED"
