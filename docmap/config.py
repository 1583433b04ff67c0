"""Configuration loading for docmap (.docmap.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

CONFIG_FILENAME = ".docmap.yml"
SEVERITIES = ("error", "warning", "info")

DEFAULT_SOURCE_GLOBS = ["**/*.ts", "**/*.tsx", "**/*.js", "**/*.jsx"]
DEFAULT_LINT_EXCLUDE = ["**/node_modules/**", "**/__tests__/**"]


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class UsedComponentsRule:
    """Compare `@usedComponents` with the components a file imports."""

    enabled: bool = True
    severity: str = "warning"
    exclude_hooks: bool = True


@dataclass
class PathRule:
    """Require an annotation on files matching ``paths`` but not ``exclude``."""

    enabled: bool = True
    severity: str = "warning"
    paths: List[str] = field(default_factory=list)
    exclude: List[str] = field(default_factory=list)


def _default_screen_rule() -> PathRule:
    return PathRule(
        severity="warning",
        paths=["**/app/**/page.tsx"],
        exclude=["**/not-found.tsx", "**/error.tsx", "**/loading.tsx"],
    )


def _default_component_rule() -> PathRule:
    return PathRule(
        severity="info",
        paths=["**/components/**/*.tsx"],
        exclude=["**/components/ui/**", "**/providers/**"],
    )


@dataclass
class LintConfig:
    """Annotation lint settings."""

    enabled: bool = True
    strict: bool = False
    exclude: List[str] = field(default_factory=lambda: list(DEFAULT_LINT_EXCLUDE))
    used_components: UsedComponentsRule = field(default_factory=UsedComponentsRule)
    screen_required: PathRule = field(default_factory=_default_screen_rule)
    component_required: PathRule = field(default_factory=_default_component_rule)


@dataclass
class FeatureMapConfig:
    """Feature map generation settings."""

    output: str = ".docmap/feature-map.json"
    auto_components: bool = False
    reverse_references: bool = False


@dataclass
class DocMapConfig:
    """Represents the high-level settings defined in .docmap.yml."""

    root: Path
    source_globs: List[str] = field(default_factory=lambda: list(DEFAULT_SOURCE_GLOBS))
    exclude_paths: List[str] = field(default_factory=list)
    ui_dir: str = "components"
    hook_prefix: str = "use"
    app_dir: str = "app"
    feature_map: FeatureMapConfig = field(default_factory=FeatureMapConfig)
    lint: LintConfig = field(default_factory=LintConfig)
    workers: int = 8


def load_config(config_path: Path) -> DocMapConfig:
    """Load configuration from disk; a missing file yields defaults."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return DocMapConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    config = DocMapConfig(root=root)

    globs = _as_str_list(data.get("source_globs"))
    if globs:
        config.source_globs = globs
    config.exclude_paths = _as_str_list(data.get("exclude_paths"))
    workers = _as_int(data.get("workers"))
    if workers is not None and workers > 0:
        config.workers = workers

    conventions = _as_dict(data.get("conventions"))
    config.ui_dir = (_as_str(conventions.get("ui_dir")) or config.ui_dir).strip("/")
    config.hook_prefix = _as_str(conventions.get("hook_prefix")) or config.hook_prefix
    config.app_dir = (_as_str(conventions.get("app_dir")) or config.app_dir).strip("/")

    feature_data = _as_dict(data.get("feature_map"))
    if feature_data:
        config.feature_map = FeatureMapConfig(
            output=_as_str(feature_data.get("output")) or FeatureMapConfig.output,
            auto_components=_as_bool(feature_data.get("auto_components")) or False,
            reverse_references=_as_bool(feature_data.get("reverse_references")) or False,
        )

    lint_data = _as_dict(data.get("lint"))
    if lint_data:
        config.lint = _parse_lint(lint_data)

    return config


def _parse_lint(data: Dict[str, Any]) -> LintConfig:
    lint = LintConfig()
    enabled = _as_bool(data.get("enabled"))
    if enabled is not None:
        lint.enabled = enabled
    lint.strict = _as_bool(data.get("strict")) or False
    if "exclude" in data:
        lint.exclude = _as_str_list(data.get("exclude"))

    rules = _as_dict(data.get("rules"))

    used = _as_dict(rules.get("usedComponents-match"))
    if used:
        rule = lint.used_components
        rule.enabled = _bool_or(used.get("enabled"), rule.enabled)
        rule.severity = _severity(used.get("severity"), rule.severity, "usedComponents-match")
        rule.exclude_hooks = _bool_or(used.get("exclude_hooks", used.get("excludeHooks")), rule.exclude_hooks)

    for key, rule in (
        ("screen-required", lint.screen_required),
        ("component-required", lint.component_required),
    ):
        rule_data = _as_dict(rules.get(key))
        if not rule_data:
            continue
        rule.enabled = _bool_or(rule_data.get("enabled"), rule.enabled)
        rule.severity = _severity(rule_data.get("severity"), rule.severity, key)
        if "paths" in rule_data:
            rule.paths = _as_str_list(rule_data.get("paths"))
        if "exclude" in rule_data:
            rule.exclude = _as_str_list(rule_data.get("exclude"))

    return lint


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    if config_path.name != CONFIG_FILENAME:
        return (config_path.parent / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Any:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Failed to read {path.name}: {exc}") from exc
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return {} if loaded is None else loaded


def _severity(value: Any, default: str, rule: str) -> str:
    if value is None:
        return default
    text = str(value).strip().lower()
    if text not in SEVERITIES:
        raise ConfigError(
            f"Rule {rule!r} has unknown severity {value!r}; expected one of {', '.join(SEVERITIES)}"
        )
    return text


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float, bool)) else None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1", "on"}:
            return True
        if lowered in {"false", "no", "0", "off"}:
            return False
    return None


def _bool_or(value: Any, default: bool) -> bool:
    coerced = _as_bool(value)
    return default if coerced is None else coerced


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value] if value.strip() else []
    if isinstance(value, (list, tuple)):
        return [str(item) for item in value if isinstance(item, (str, int, float)) and str(item).strip()]
    return []


__all__ = [
    "CONFIG_FILENAME",
    "ConfigError",
    "DocMapConfig",
    "FeatureMapConfig",
    "LintConfig",
    "PathRule",
    "SEVERITIES",
    "UsedComponentsRule",
    "load_config",
]
