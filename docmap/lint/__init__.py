"""Annotation lint rules, fixers and report formatters."""

from .annotations import AnnotationLintError, LintIssue, LintReport, exit_code, run_annotation_lint
from .fixer import FixOptions, apply_fixes, fix_route, fix_screen, fix_used_components
from .formatters import format_report

__all__ = [
    "AnnotationLintError",
    "FixOptions",
    "LintIssue",
    "LintReport",
    "apply_fixes",
    "exit_code",
    "fix_route",
    "fix_screen",
    "fix_used_components",
    "format_report",
    "run_annotation_lint",
]
