"""Text renderings of an annotation lint report."""

from __future__ import annotations

import json
from typing import Dict

from .annotations import LintIssue, LintReport

FORMATS = ("terminal", "json", "summary")

_SYMBOLS = {"error": "x", "warning": "!", "info": "i"}


def _issue_line(issue: LintIssue) -> str:
    symbol = _SYMBOLS.get(issue.severity, "-")
    location = f"L{issue.line}: " if issue.line else ""
    return f"  {symbol} {location}{issue.message} ({issue.rule})"


def _counts(report: LintReport) -> str:
    summary = report.summary
    parts = []
    if summary.error_count:
        parts.append(f"{summary.error_count} errors")
    if summary.warning_count:
        parts.append(f"{summary.warning_count} warnings")
    if summary.info_count:
        parts.append(f"{summary.info_count} info")
    return " | ".join(parts)


def format_terminal(report: LintReport) -> str:
    lines = ["", "Annotation Lint Results", "=" * 50, ""]
    for result in report.results:
        if not result.issues:
            lines.append(f"pass {result.path}")
            continue
        lines.append(f"warn {result.path}")
        lines.extend(_issue_line(issue) for issue in result.issues)
        lines.append("")

    summary = report.summary
    lines.extend(["", "-" * 50, "Summary", ""])
    lines.append(
        " | ".join(
            [
                f"{summary.files_checked} files",
                f"{summary.files_with_issues} with issues",
                f"{summary.used_components_mismatch} usedComponents mismatches",
                f"{summary.missing_screen} missing @screen",
                f"{summary.missing_component} missing @component",
            ]
        )
    )
    counts = _counts(report)
    if counts:
        lines.append(counts)
    lines.append("")
    lines.append("PASS - All checks passed" if report.passed else "FAIL - Some checks failed")
    lines.append("")
    return "\n".join(lines)


def report_to_dict(report: LintReport) -> Dict[str, object]:
    summary = report.summary
    return {
        "passed": report.passed,
        "summary": {
            "filesChecked": summary.files_checked,
            "filesWithIssues": summary.files_with_issues,
            "usedComponentsMismatch": summary.used_components_mismatch,
            "missingScreen": summary.missing_screen,
            "missingComponent": summary.missing_component,
            "errorCount": summary.error_count,
            "warningCount": summary.warning_count,
            "infoCount": summary.info_count,
        },
        "results": [
            {
                "file": result.path,
                "issues": [
                    {
                        "rule": issue.rule,
                        "severity": issue.severity,
                        "message": issue.message,
                        "line": issue.line,
                        "annotation": issue.annotation,
                    }
                    for issue in result.issues
                ],
            }
            for result in report.results
            if result.issues
        ],
    }


def format_json(report: LintReport) -> str:
    return json.dumps(report_to_dict(report), indent=2)


def format_summary(report: LintReport) -> str:
    summary = report.summary
    status = "PASSED" if report.passed else "FAILED"
    return (
        f"{summary.files_checked} files checked, {summary.error_count} errors, "
        f"{summary.warning_count} warnings, {summary.info_count} info - {status}"
    )


def format_report(report: LintReport, fmt: str = "terminal") -> str:
    if fmt == "json":
        return format_json(report)
    if fmt == "summary":
        return format_summary(report)
    return format_terminal(report)


__all__ = ["FORMATS", "format_json", "format_report", "format_summary", "format_terminal", "report_to_dict"]
