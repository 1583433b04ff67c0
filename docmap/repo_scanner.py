"""Repository scanning and manifest building utilities."""

from __future__ import annotations

import os
from dataclasses import dataclass
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Iterator, List, Optional, Sequence

from .config import CONFIG_FILENAME, ConfigError, DocMapConfig, load_config
from .logging import get_logger
from .models import FileMeta, RepoManifest
from .paths import (
    is_action_file,
    is_component_file,
    is_layout_file,
    is_middleware_file,
    is_screen_file,
    matches_any,
    path_matches,
)

_EXCLUDED_DIRS = {
    ".git",
    ".hg",
    ".svn",
    "node_modules",
    ".next",
    ".turbo",
    ".vercel",
    "dist",
    "build",
    "out",
    "coverage",
    ".docmap",
    "__pycache__",
    ".idea",
}

_EXCLUDED_FILES = {
    ".DS_Store",
    "Thumbs.db",
}

_LANGUAGE_BY_SUFFIX = {
    ".ts": "TypeScript",
    ".tsx": "TypeScript",
    ".mts": "TypeScript",
    ".cts": "TypeScript",
    ".js": "JavaScript",
    ".jsx": "JavaScript",
    ".mjs": "JavaScript",
    ".cjs": "JavaScript",
}

_TEST_MARKERS = ("/__tests__/", "/tests/", "/e2e/")
_TEST_SUFFIXES = (".test.ts", ".test.tsx", ".spec.ts", ".spec.tsx", ".test.js", ".spec.js")


logger = get_logger("repo_scanner")


@dataclass
class IgnoreRule:
    """Represents an ignore rule parsed from .gitignore or .docmap.yml."""

    pattern: str
    directory_only: bool
    anchored: bool
    negate: bool
    has_slash: bool

    def matches(self, rel_path: str, is_dir: bool) -> bool:
        if not self.pattern:
            return False
        if "**" in self.pattern:
            return path_matches(rel_path, self.pattern) or (
                is_dir and path_matches(rel_path + "/", self.pattern)
            )
        if self.directory_only and not is_dir:
            return False

        target = rel_path
        if self.anchored or self.has_slash:
            if fnmatchcase(target, self.pattern):
                return True
            if self.directory_only and target.startswith(f"{self.pattern}/"):
                return True
            return False

        for part in target.split("/"):
            if fnmatchcase(part, self.pattern):
                return True
        return False


def _build_ignore_rule(pattern: str, negate: bool = False) -> IgnoreRule | None:
    pattern = pattern.strip()
    if not pattern:
        return None

    directory_only = pattern.endswith("/")
    if directory_only:
        pattern = pattern[:-1]

    anchored = pattern.startswith("/")
    if anchored:
        pattern = pattern[1:]

    return IgnoreRule(
        pattern=pattern,
        directory_only=directory_only,
        anchored=anchored,
        negate=negate,
        has_slash="/" in pattern,
    )


def _parse_gitignore(path: Path) -> List[IgnoreRule]:
    if not path.exists():
        return []

    rules: List[IgnoreRule] = []
    for raw_line in path.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        negate = line.startswith("!")
        if negate:
            line = line[1:]
        rule = _build_ignore_rule(line, negate=negate)
        if rule is not None:
            rules.append(rule)
    return rules


def _config_rules(config: DocMapConfig) -> List[IgnoreRule]:
    rules: List[IgnoreRule] = []
    for pattern in config.exclude_paths:
        rule = _build_ignore_rule(pattern)
        if rule is not None:
            rules.append(rule)
    return rules


def _load_ignore_rules(root: Path, config: DocMapConfig) -> List[IgnoreRule]:
    rules = _parse_gitignore(root / ".gitignore")
    rules.extend(_config_rules(config))
    return rules


def _should_ignore(rel_path: str, is_dir: bool, rules: Sequence[IgnoreRule]) -> bool:
    ignored = False
    for rule in rules:
        if rule.matches(rel_path, is_dir):
            ignored = not rule.negate
    return ignored


def _iter_files(root: Path, rules: Sequence[IgnoreRule], globs: Sequence[str]) -> Iterator[Path]:
    for dirpath, dirnames, filenames in os.walk(root):
        current_dir = Path(dirpath)
        rel_dir = current_dir.relative_to(root).as_posix() if current_dir != root else ""

        dirnames.sort()
        dirnames[:] = [
            name
            for name in dirnames
            if name not in _EXCLUDED_DIRS
            and not _should_ignore(f"{rel_dir}/{name}" if rel_dir else name, True, rules)
        ]

        for filename in sorted(filenames):
            if filename in _EXCLUDED_FILES:
                continue
            rel_path = f"{rel_dir}/{filename}" if rel_dir else filename
            if not matches_any(rel_path, globs):
                continue
            if _should_ignore(rel_path, False, rules):
                continue
            yield current_dir / filename


def _detect_language(path: Path) -> str | None:
    return _LANGUAGE_BY_SUFFIX.get(path.suffix.lower())


def detect_role(relative_path: str, config: Optional[DocMapConfig] = None) -> str:
    """Classify a source file as screen, layout, component, action, middleware, test or src."""
    app_dir = config.app_dir if config else "app"
    ui_dir = config.ui_dir if config else "components"
    rooted = f"/{relative_path}"
    if any(marker in rooted for marker in _TEST_MARKERS) or relative_path.endswith(_TEST_SUFFIXES):
        return "test"
    if is_screen_file(relative_path, app_dir):
        return "screen"
    if is_layout_file(relative_path, app_dir):
        return "layout"
    if is_middleware_file(relative_path):
        return "middleware"
    if is_component_file(relative_path, ui_dir):
        return "component"
    if is_action_file(relative_path):
        return "action"
    return "src"


class RepoScanner:
    """Walks the repository to produce a manifest of annotated source files."""

    def __init__(self, config: Optional[DocMapConfig] = None) -> None:
        self._config = config

    def scan(self, root: str) -> RepoManifest:
        """Return a manifest describing source files and their roles, sorted by path."""
        root_path = Path(root).expanduser().resolve()
        if not root_path.exists():
            raise FileNotFoundError(f"Repository path not found: {root}")
        if not root_path.is_dir():
            raise NotADirectoryError(f"Repository path is not a directory: {root}")

        config = self._config
        if config is None:
            try:
                config = load_config(root_path / CONFIG_FILENAME)
            except ConfigError:
                logger.warning("Ignoring unreadable %s during scan", CONFIG_FILENAME)
                config = DocMapConfig(root=root_path)

        rules = _load_ignore_rules(root_path, config)

        files: List[FileMeta] = []
        for path in _iter_files(root_path, rules, config.source_globs):
            rel_path = path.relative_to(root_path).as_posix()
            files.append(
                FileMeta(
                    path=rel_path,
                    size=path.stat().st_size,
                    language=_detect_language(path),
                    role=detect_role(rel_path, config),
                )
            )

        logger.debug("Scanned %d source files under %s", len(files), root_path)
        files.sort(key=lambda meta: meta.path)
        return RepoManifest(root=str(root_path), files=files)


__all__ = ["IgnoreRule", "RepoScanner", "detect_role"]
