"""Tests for the annotation lint rules."""

from __future__ import annotations

from pathlib import Path

from docmap.config import DocMapConfig, UsedComponentsRule
from docmap.lint.annotations import (
    RULE_COMPONENT_REQUIRED,
    RULE_SCREEN_REQUIRED,
    RULE_USED_COMPONENTS,
    check_component_annotation,
    check_screen_annotation,
    exit_code,
    extract_used_components_annotation,
    lint_used_components,
    run_annotation_lint,
)

SCREEN_OK = """import { Card } from "@/components/ui/card";

/**
 * @screen PostsScreen
 * @usedComponents Card
 */
export default function Page() {
  return <Card />;
}
"""

SCREEN_DRIFTED = """import { Card } from "@/components/ui/card";
import { Dialog } from "@/components/ui/dialog";
import { useToast } from "@/components/ui/toast";

/**
 * @screen PostsScreen
 * @usedComponents Card, Legacy
 */
export default function Page() {
  return <Card />;
}
"""


def _config(tmp_path: Path) -> DocMapConfig:
    return DocMapConfig(root=tmp_path)


def test_extract_used_components_annotation() -> None:
    assert extract_used_components_annotation(SCREEN_DRIFTED) == ["Card", "Legacy"]
    assert extract_used_components_annotation("export const a = 1;\n") == []


def test_used_components_in_sync_produces_no_issue() -> None:
    assert lint_used_components(SCREEN_OK, "app/posts/page.tsx") == []


def test_used_components_mismatch_reports_missing_and_extra() -> None:
    issues = lint_used_components(SCREEN_DRIFTED, "app/posts/page.tsx")

    assert [issue.message for issue in issues] == [
        "@usedComponents is missing imported components: Dialog",
        "@usedComponents lists components that are not imported: Legacy",
    ]
    assert all(issue.rule == RULE_USED_COMPONENTS for issue in issues)
    assert all(issue.severity == "warning" for issue in issues)
    assert issues[0].line == 5


def test_rule_severity_is_applied() -> None:
    issues = lint_used_components(SCREEN_DRIFTED, "app/posts/page.tsx", UsedComponentsRule(severity="error"))
    assert {issue.severity for issue in issues} == {"error"}


def test_missing_annotation_counts_every_import_as_missing() -> None:
    content = 'import { Card } from "@/components/ui/card";\nexport function Widget() {}\n'
    issues = lint_used_components(content, "components/widget.tsx")
    assert [issue.message for issue in issues] == ["@usedComponents is missing imported components: Card"]
    assert issues[0].line == 1


def test_screen_annotation_required() -> None:
    result = check_screen_annotation("export default function Page() {}\n", "app/page.tsx")
    assert not result.valid
    issue = result.issues[0]
    assert issue.rule == RULE_SCREEN_REQUIRED
    assert issue.message == "Missing @screen annotation in page file"
    assert issue.line == 1

    assert check_screen_annotation(SCREEN_OK, "app/posts/page.tsx").issues == []


def test_empty_screen_tag_does_not_count() -> None:
    result = check_screen_annotation("/**\n * @screen\n */\nexport default function Page() {}\n", "app/page.tsx")
    assert len(result.issues) == 1


def test_excluded_paths_are_skipped() -> None:
    result = check_screen_annotation("", "app/not-found.tsx", ["**/not-found.tsx"])
    assert result.skipped
    assert result.issues == []


def test_component_annotation_is_info_by_default() -> None:
    result = check_component_annotation("export function Card() {}\n", "components/card.tsx")
    assert result.issues[0].rule == RULE_COMPONENT_REQUIRED
    assert result.issues[0].severity == "info"
    assert result.valid


def test_run_annotation_lint_summary(tmp_path: Path) -> None:
    files = [
        ("app/posts/page.tsx", SCREEN_DRIFTED),
        ("app/about/page.tsx", "export default function About() {}\n"),
        ("components/widget.tsx", "export function Widget() {}\n"),
        ("components/ui/button.tsx", "export function Button() {}\n"),
        ("components/__tests__/widget.test.tsx", "export function Widget() {}\n"),
        ("lib/format.ts", "export const x = 1;\n"),
    ]
    report = run_annotation_lint(files, _config(tmp_path))
    summary = report.summary

    assert summary.files_checked == 5
    assert summary.files_with_issues == 3
    assert summary.used_components_mismatch == 1
    assert summary.missing_screen == 1
    assert summary.missing_component == 1
    assert summary.warning_count == 3
    assert summary.info_count == 1
    assert summary.error_count == 0
    assert not report.passed
    assert [result.path for result in report.results if result.valid] == [
        "components/widget.tsx",
        "components/ui/button.tsx",
        "lib/format.ts",
    ]


def test_disabled_rules_are_not_run(tmp_path: Path) -> None:
    config = _config(tmp_path)
    config.lint.screen_required.enabled = False
    config.lint.used_components.enabled = False
    report = run_annotation_lint([("app/posts/page.tsx", SCREEN_DRIFTED)], config)
    assert report.issues() == []
    assert report.passed


def test_exit_code_only_fails_strict_runs_with_errors(tmp_path: Path) -> None:
    config = _config(tmp_path)
    config.lint.screen_required.severity = "error"
    report = run_annotation_lint([("app/page.tsx", "export default function P() {}\n")], config)

    assert report.summary.error_count == 1
    assert exit_code(report, strict=False) == 0
    assert exit_code(report, strict=True) == 1

    warnings_only = run_annotation_lint([("app/posts/page.tsx", SCREEN_DRIFTED)], _config(tmp_path))
    assert exit_code(warnings_only, strict=True) == 0


def test_used_components_skips_unannotated_and_excluded_components(tmp_path: Path) -> None:
    dialog = 'import { Button } from "@/components/ui/button";\nexport function Dialog() {}\n'
    annotated = 'import { Button } from "@/components/ui/button";\n/**\n * @usedComponents Card\n */\nexport function Panel() {}\n'
    files = [
        ("components/ui/dialog.tsx", dialog),
        ("components/ui/sheet.tsx", annotated),
        ("components/widget.tsx", dialog),
        ("components/panel.tsx", annotated),
    ]
    report = run_annotation_lint(files, _config(tmp_path))

    mismatches = [(issue.path, issue.message) for issue in report.issues() if issue.rule == RULE_USED_COMPONENTS]
    assert mismatches == [
        ("components/panel.tsx", "@usedComponents is missing imported components: Button"),
        ("components/panel.tsx", "@usedComponents lists components that are not imported: Card"),
    ]
