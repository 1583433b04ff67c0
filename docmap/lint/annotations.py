"""Annotation lint: required tags and ``@usedComponents`` consistency."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from ..analyzers.diff import diff
from ..analyzers.references import extract_component_imports
from ..config import DocMapConfig, PathRule, UsedComponentsRule
from ..models import DiffResult
from ..parsers.declarations import iter_doc_blocks
from ..parsers.tags import parse_comment_block
from ..paths import is_component_file, is_screen_file, matches_any

RULE_USED_COMPONENTS = "usedComponents-match"
RULE_SCREEN_REQUIRED = "screen-required"
RULE_COMPONENT_REQUIRED = "component-required"


class AnnotationLintError(RuntimeError):
    """Raised when a strict annotation lint run finds error-severity issues."""

    def __init__(self, message: str, issues: Sequence["LintIssue"]) -> None:
        super().__init__(message)
        self.issues = list(issues)


@dataclass
class LintIssue:
    rule: str
    severity: str
    message: str
    path: str
    line: Optional[int] = None
    annotation: Optional[str] = None


@dataclass
class FileLintResult:
    """Issues found in one file; ``skipped`` when an exclude pattern matched."""

    path: str
    issues: List[LintIssue] = field(default_factory=list)
    skipped: bool = False

    @property
    def valid(self) -> bool:
        return not any(issue.severity in ("error", "warning") for issue in self.issues)


@dataclass
class LintSummary:
    files_checked: int = 0
    files_with_issues: int = 0
    used_components_mismatch: int = 0
    missing_screen: int = 0
    missing_component: int = 0
    error_count: int = 0
    warning_count: int = 0
    info_count: int = 0


@dataclass
class LintReport:
    results: List[FileLintResult] = field(default_factory=list)
    summary: LintSummary = field(default_factory=LintSummary)

    @property
    def passed(self) -> bool:
        return self.summary.error_count == 0 and self.summary.warning_count == 0

    def issues(self, severity: Optional[str] = None) -> List[LintIssue]:
        return [
            issue
            for result in self.results
            for issue in result.issues
            if severity is None or issue.severity == severity
        ]


def _line_of(content: str, index: int) -> int:
    return content.count("\n", 0, index) + 1


def _find_tag_block(content: str, tag: str) -> Optional[Tuple[int, List[str]]]:
    for start, _end, text in iter_doc_blocks(content):
        parsed = parse_comment_block(text)
        if parsed.has(tag):
            return start, parsed.get_list(tag)
    return None


def extract_used_components_annotation(content: str) -> List[str]:
    """Names listed by the first ``@usedComponents`` tag of the file."""
    found = _find_tag_block(content, "usedComponents")
    return found[1] if found else []


def _has_named_tag(content: str, tag: str) -> bool:
    for _start, _end, text in iter_doc_blocks(content):
        if parse_comment_block(text).get_text(tag):
            return True
    return False


def _required_tag(
    content: str,
    path: str,
    *,
    tag: str,
    rule: str,
    severity: str,
    exclude: Sequence[str],
    message: str,
) -> FileLintResult:
    if matches_any(path, exclude):
        return FileLintResult(path=path, skipped=True)
    result = FileLintResult(path=path)
    if not _has_named_tag(content, tag):
        result.issues.append(
            LintIssue(rule=rule, severity=severity, message=message, path=path, line=1, annotation=f"@{tag}")
        )
    return result


def check_screen_annotation(
    content: str,
    path: str,
    exclude: Sequence[str] = (),
    *,
    severity: str = "warning",
) -> FileLintResult:
    return _required_tag(
        content,
        path,
        tag="screen",
        rule=RULE_SCREEN_REQUIRED,
        severity=severity,
        exclude=exclude,
        message="Missing @screen annotation in page file",
    )


def check_component_annotation(
    content: str,
    path: str,
    exclude: Sequence[str] = (),
    *,
    severity: str = "info",
) -> FileLintResult:
    return _required_tag(
        content,
        path,
        tag="component",
        rule=RULE_COMPONENT_REQUIRED,
        severity=severity,
        exclude=exclude,
        message="Missing @component annotation in component file",
    )


def compare_used_components(
    content: str,
    rule: UsedComponentsRule,
    *,
    ui_segment: str = "components",
    hook_prefix: str = "use",
) -> DiffResult:
    return diff(
        extract_used_components_annotation(content),
        extract_component_imports(
            content,
            exclude_hooks=rule.exclude_hooks,
            ui_segment=ui_segment,
            hook_prefix=hook_prefix,
        ),
    )


def lint_used_components(
    content: str,
    path: str,
    rule: Optional[UsedComponentsRule] = None,
    *,
    ui_segment: str = "components",
    hook_prefix: str = "use",
) -> List[LintIssue]:
    """Compare the declared ``@usedComponents`` list with the UI imports.

    Imported but undeclared names are reported as missing; declared names
    that are not imported are reported as extra.
    """
    rule = rule or UsedComponentsRule()
    result = compare_used_components(content, rule, ui_segment=ui_segment, hook_prefix=hook_prefix)
    if result.valid:
        return []
    found = _find_tag_block(content, "usedComponents")
    line = _line_of(content, found[0]) if found else 1
    issues: List[LintIssue] = []
    if result.missing:
        issues.append(
            LintIssue(
                rule=RULE_USED_COMPONENTS,
                severity=rule.severity,
                message=f"@usedComponents is missing imported components: {', '.join(result.missing)}",
                path=path,
                line=line,
                annotation="@usedComponents",
            )
        )
    if result.extra:
        issues.append(
            LintIssue(
                rule=RULE_USED_COMPONENTS,
                severity=rule.severity,
                message=f"@usedComponents lists components that are not imported: {', '.join(result.extra)}",
                path=path,
                line=line,
                annotation="@usedComponents",
            )
        )
    return issues


def _applies(path: str, rule: PathRule) -> bool:
    return rule.enabled and matches_any(path, rule.paths)


def rule_covers(path: str, rule: PathRule) -> bool:
    """Whether ``rule`` is enabled for ``path`` and does not exclude it."""
    return _applies(path, rule) and not matches_any(path, rule.exclude)


def _checks_used_components(content: str, path: str, config: DocMapConfig) -> bool:
    if is_screen_file(path, config.app_dir):
        return True
    if not is_component_file(path, config.ui_dir):
        return False
    # Component files are checked only once annotated, and never when excluded.
    if matches_any(path, config.lint.component_required.exclude):
        return False
    return _find_tag_block(content, "usedComponents") is not None


def _count(summary: LintSummary, issue: LintIssue) -> None:
    if issue.severity == "error":
        summary.error_count += 1
    elif issue.severity == "warning":
        summary.warning_count += 1
    else:
        summary.info_count += 1


def run_annotation_lint(files: Sequence[Tuple[str, str]], config: DocMapConfig) -> LintReport:
    """Lint ``(path, content)`` pairs in the order given."""
    lint = config.lint
    report = LintReport()
    for path, content in files:
        if matches_any(path, lint.exclude):
            continue
        report.summary.files_checked += 1
        result = FileLintResult(path=path)

        if _applies(path, lint.screen_required):
            check = check_screen_annotation(
                content, path, lint.screen_required.exclude, severity=lint.screen_required.severity
            )
            if check.issues:
                report.summary.missing_screen += 1
            result.issues.extend(check.issues)

        if _applies(path, lint.component_required):
            check = check_component_annotation(
                content, path, lint.component_required.exclude, severity=lint.component_required.severity
            )
            if check.issues:
                report.summary.missing_component += 1
            result.issues.extend(check.issues)

        if lint.used_components.enabled and _checks_used_components(content, path, config):
            issues = lint_used_components(
                content,
                path,
                lint.used_components,
                ui_segment=config.ui_dir,
                hook_prefix=config.hook_prefix,
            )
            if issues:
                report.summary.used_components_mismatch += 1
            result.issues.extend(issues)

        if result.issues:
            report.summary.files_with_issues += 1
        for issue in result.issues:
            _count(report.summary, issue)
        report.results.append(result)
    return report


def exit_code(report: LintReport, strict: bool) -> int:
    """0 unless ``strict`` and at least one error-severity issue exists."""
    if strict and report.summary.error_count > 0:
        return 1
    return 0


__all__ = [
    "AnnotationLintError",
    "FileLintResult",
    "LintIssue",
    "LintReport",
    "LintSummary",
    "check_component_annotation",
    "check_screen_annotation",
    "compare_used_components",
    "exit_code",
    "extract_used_components_annotation",
    "lint_used_components",
    "rule_covers",
    "run_annotation_lint",
]
