"""Tests for docmap.config."""

from __future__ import annotations

from pathlib import Path

import pytest

from docmap.config import ConfigError, DocMapConfig, load_config


def test_load_config_returns_defaults_when_missing(tmp_path: Path) -> None:
    config = load_config(tmp_path)

    assert isinstance(config, DocMapConfig)
    assert config.root == tmp_path.resolve()
    assert config.ui_dir == "components"
    assert config.hook_prefix == "use"
    assert config.app_dir == "app"
    assert config.exclude_paths == []
    assert config.feature_map.output == ".docmap/feature-map.json"
    assert config.feature_map.auto_components is False
    assert config.lint.enabled is True
    assert config.lint.strict is False
    assert config.lint.used_components.severity == "warning"
    assert config.lint.used_components.exclude_hooks is True
    assert config.lint.screen_required.paths == ["**/app/**/page.tsx"]
    assert config.lint.component_required.severity == "info"
    assert "**/components/ui/**" in config.lint.component_required.exclude


def test_load_config_parses_expected_fields(tmp_path: Path) -> None:
    config_file = tmp_path / ".docmap.yml"
    config_file.write_text(
        """
source_globs:
  - "src/**/*.tsx"
exclude_paths:
  - "legacy/"
workers: 2
conventions:
  ui_dir: "/ui/"
  hook_prefix: "use"
  app_dir: "pages"
feature_map:
  output: "docs/feature-map.json"
  auto_components: true
  reverse_references: "yes"
lint:
  strict: true
  exclude:
    - "**/generated/**"
  rules:
    usedComponents-match:
      severity: error
      exclude_hooks: false
    screen-required:
      enabled: false
    component-required:
      severity: warning
      paths: ["**/ui/**/*.tsx"]
""",
        encoding="utf-8",
    )

    config = load_config(config_file)

    assert config.source_globs == ["src/**/*.tsx"]
    assert config.exclude_paths == ["legacy/"]
    assert config.workers == 2
    assert config.ui_dir == "ui"
    assert config.app_dir == "pages"
    assert config.feature_map.output == "docs/feature-map.json"
    assert config.feature_map.auto_components is True
    assert config.feature_map.reverse_references is True
    assert config.lint.strict is True
    assert config.lint.exclude == ["**/generated/**"]
    assert config.lint.used_components.severity == "error"
    assert config.lint.used_components.exclude_hooks is False
    assert config.lint.screen_required.enabled is False
    assert config.lint.component_required.severity == "warning"
    assert config.lint.component_required.paths == ["**/ui/**/*.tsx"]
    assert config.lint.component_required.exclude == ["**/components/ui/**", "**/providers/**"]


def test_load_config_rejects_unknown_severity(tmp_path: Path) -> None:
    (tmp_path / ".docmap.yml").write_text(
        "lint:\n  rules:\n    screen-required:\n      severity: fatal\n", encoding="utf-8"
    )
    with pytest.raises(ConfigError, match="unknown severity"):
        load_config(tmp_path)


def test_load_config_rejects_invalid_yaml(tmp_path: Path) -> None:
    (tmp_path / ".docmap.yml").write_text("lint: [unclosed\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(tmp_path / ".docmap.yml")


def test_load_config_requires_mapping(tmp_path: Path) -> None:
    (tmp_path / ".docmap.yml").write_text("- just\n- a list\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="mapping"):
        load_config(tmp_path)


def test_empty_config_file_uses_defaults(tmp_path: Path) -> None:
    (tmp_path / ".docmap.yml").write_text("\n", encoding="utf-8")
    config = load_config(tmp_path)
    assert config.lint.enabled is True
    assert config.workers == 8
