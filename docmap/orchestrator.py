"""Pipeline orchestration for feature-map, lint and extract flows."""

from __future__ import annotations

import difflib
import json
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from .analyzers.cross_refs import EdgeIssue, check_edge_consistency, merge_reverse_references
from .analyzers.feature_graph import build_feature_graph, collect_module_maps, graph_to_dict
from .config import CONFIG_FILENAME, DocMapConfig, load_config
from .lint.annotations import AnnotationLintError, LintReport, exit_code, rule_covers, run_annotation_lint
from .lint.fixer import FixOptions, apply_fixes
from .logging import get_logger
from .models import FeatureGraph, RepoManifest
from .parsers.declarations import FileAnnotations, parse_file
from .parsers.function_body import extract_function_code
from .paths import matches_any
from .render.markdown import MarkdownRenderer
from .repo_scanner import RepoScanner
from .stores.snapshots import SnapshotChanges, SnapshotStore, compare_snapshots

SourceFile = Tuple[str, str]


@dataclass
class FeatureMapOutcome:
    """Result of a feature-map run."""

    graph: FeatureGraph
    content: str
    path: Optional[Path] = None
    changes: Optional[SnapshotChanges] = None
    edge_issues: List[EdgeIssue] = field(default_factory=list)


@dataclass
class LintOutcome:
    """Result of an annotation lint run."""

    report: LintReport
    exit_code: int
    fixed: List[str] = field(default_factory=list)
    diff: str = ""
    dry_run: bool = False


class Orchestrator:
    """Coordinates repository scans with the extraction, lint and fix core."""

    def __init__(
        self,
        scanner: RepoScanner | None = None,
        renderer: MarkdownRenderer | None = None,
        *,
        max_workers: int | None = None,
    ) -> None:
        self.scanner = scanner
        self.renderer = renderer or MarkdownRenderer()
        self.max_workers = max_workers
        self.logger = get_logger("orchestrator")

    def run_feature_map(
        self,
        path: str,
        *,
        fmt: str = "json",
        output: Optional[str] = None,
        write: bool = True,
        check_edges: bool = False,
    ) -> FeatureMapOutcome:
        """Build the feature graph of a repository and optionally persist it."""
        repo_path = Path(path).expanduser().resolve()
        self.logger.info("Building feature map for %s", repo_path)
        config = self._load_config(repo_path)
        manifest = self._scan(repo_path, config)
        sources = self._read_sources(repo_path, self._source_paths(manifest), config)

        annotations: List[FileAnnotations] = [
            parse_file(content, rel_path, auto_components=config.feature_map.auto_components)
            for rel_path, content in sources
        ]
        records = [record for item in annotations for record in item.records]
        if config.feature_map.reverse_references:
            records = merge_reverse_references(records)
        descriptions, types, utilities = collect_module_maps(annotations)
        graph = build_feature_graph(records, descriptions, types, utilities)
        self.logger.debug("Extracted %d records from %d files", len(records), len(sources))

        edge_issues = check_edge_consistency(graph) if check_edges else []
        for issue in edge_issues:
            self.logger.debug("Edge issue in %s: %s", issue.path, issue.message)

        if fmt == "markdown":
            content = self.renderer.render(graph)
            outcome = FeatureMapOutcome(graph=graph, content=content, edge_issues=edge_issues)
            if output and write:
                target = self._resolve_output(repo_path, output)
                target.parent.mkdir(parents=True, exist_ok=True)
                target.write_text(content, encoding="utf-8")
                outcome.path = target
                self.logger.info("Feature map written to %s", target)
            return outcome

        content = json.dumps(graph_to_dict(graph), indent=2, ensure_ascii=False)
        outcome = FeatureMapOutcome(graph=graph, content=content, edge_issues=edge_issues)
        if write:
            store = SnapshotStore(self._resolve_output(repo_path, output or config.feature_map.output))
            outcome.changes = compare_snapshots(store.load(), graph)
            outcome.path = store.save(graph)
            changes = outcome.changes
            self.logger.info(
                "Feature map written to %s (%d added, %d removed, %d changed)",
                outcome.path,
                len(changes.added),
                len(changes.removed),
                len(changes.changed),
            )
        return outcome

    def run_lint(
        self,
        path: str,
        *,
        fix: bool = False,
        dry_run: bool = False,
        strict: Optional[bool] = None,
        raise_on_failure: bool = False,
    ) -> LintOutcome:
        """Lint annotations, optionally repairing them first.

        With ``fix`` the repaired content is written back unless ``dry_run``
        is set, in which case a unified diff is returned instead. The report
        always reflects the content after repairs.
        """
        repo_path = Path(path).expanduser().resolve()
        self.logger.info("Linting annotations in %s", repo_path)
        config = self._load_config(repo_path)
        strict_mode = config.lint.strict if strict is None else strict
        if not config.lint.enabled:
            self.logger.info("Annotation lint disabled in %s", CONFIG_FILENAME)
            return LintOutcome(report=LintReport(), exit_code=0, dry_run=dry_run)

        manifest = self._scan(repo_path, config)
        sources = self._read_sources(repo_path, self._source_paths(manifest), config)

        fixed: List[str] = []
        diffs: List[str] = []
        if fix:
            roles = {meta.path: meta.role for meta in manifest.files}
            repaired: List[SourceFile] = []
            for rel_path, content in sources:
                options = self._fix_options(rel_path, roles.get(rel_path, "src"), config)
                if options is None:
                    repaired.append((rel_path, content))
                    continue
                result = apply_fixes(content, rel_path, options)
                if result.changed:
                    fixed.append(rel_path)
                    self.logger.info("Fixed %s in %s", ", ".join(result.changes), rel_path)
                    if dry_run:
                        diffs.append(self._render_diff(rel_path, content, result.content))
                    else:
                        (repo_path / rel_path).write_text(result.content, encoding="utf-8", newline="")
                repaired.append((rel_path, result.content))
            sources = repaired

        report = run_annotation_lint(sources, config)
        code = exit_code(report, strict_mode)
        summary = report.summary
        self.logger.info(
            "Checked %d files: %d errors, %d warnings, %d info",
            summary.files_checked,
            summary.error_count,
            summary.warning_count,
            summary.info_count,
        )
        if code and raise_on_failure:
            raise AnnotationLintError(
                f"Annotation lint failed with {summary.error_count} error(s)",
                report.issues("error"),
            )
        return LintOutcome(report=report, exit_code=code, fixed=fixed, diff="".join(diffs), dry_run=dry_run)

    def run_extract(self, file: str, name: str) -> str:
        """Return the source of declaration ``name`` in ``file`` with its doc block."""
        source_path = Path(file).expanduser()
        source = source_path.read_text(encoding="utf-8")
        extracted = extract_function_code(source, name)
        if extracted == source:
            self.logger.warning("Declaration %s not found in %s; returning whole file", name, source_path)
        return extracted

    @staticmethod
    def _load_config(repo_path: Path) -> DocMapConfig:
        return load_config(repo_path / CONFIG_FILENAME)

    def _scan(self, repo_path: Path, config: DocMapConfig) -> RepoManifest:
        scanner = self.scanner or RepoScanner(config)
        manifest = scanner.scan(str(repo_path))
        self.logger.debug("Scanner discovered %d files", len(manifest.files))
        return manifest

    @staticmethod
    def _source_paths(manifest: RepoManifest) -> List[str]:
        return [meta.path for meta in manifest.files if meta.role != "test"]

    def _read_sources(self, repo_path: Path, rel_paths: Sequence[str], config: DocMapConfig) -> List[SourceFile]:
        """Read files concurrently; results follow ``rel_paths`` order."""

        def _read(rel_path: str) -> Optional[str]:
            try:
                with (repo_path / rel_path).open(encoding="utf-8", errors="replace", newline="") as handle:
                    return handle.read()
            except OSError as exc:
                self.logger.warning("Skipping unreadable file %s: %s", rel_path, exc)
                return None

        workers = max(1, self.max_workers or config.workers)
        if len(rel_paths) <= 1 or workers == 1:
            contents = [_read(rel_path) for rel_path in rel_paths]
        else:
            with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="docmap-read") as executor:
                contents = list(executor.map(_read, rel_paths))
        return [(rel_path, content) for rel_path, content in zip(rel_paths, contents) if content is not None]

    @staticmethod
    def _fix_options(rel_path: str, role: str, config: DocMapConfig) -> Optional[FixOptions]:
        """Fixers for one file; ``None`` when lint excludes or rules skip it."""
        lint = config.lint
        if matches_any(rel_path, lint.exclude):
            return None
        conventions = {"ui_segment": config.ui_dir, "hook_prefix": config.hook_prefix, "app_dir": config.app_dir}
        if role == "screen" and rule_covers(rel_path, lint.screen_required):
            return FixOptions(used_components=True, screen=True, route=True, **conventions)
        if role == "component" and rule_covers(rel_path, lint.component_required):
            return FixOptions(used_components=True, **conventions)
        return None

    @staticmethod
    def _resolve_output(repo_path: Path, output: str) -> Path:
        target = Path(output).expanduser()
        return target if target.is_absolute() else repo_path / target

    @staticmethod
    def _render_diff(rel_path: str, original: str, updated: str) -> str:
        diff = difflib.unified_diff(
            original.splitlines(keepends=True),
            updated.splitlines(keepends=True),
            fromfile=f"{rel_path} (original)",
            tofile=f"{rel_path} (fixed)",
        )
        return "".join(diff)


__all__ = ["FeatureMapOutcome", "LintOutcome", "Orchestrator"]
