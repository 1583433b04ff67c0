"""Tests for UI component import extraction."""

from __future__ import annotations

from docmap.analyzers.references import (
    extract_component_imports,
    is_hook_name,
    resolves_to_ui_dir,
)


def test_resolves_to_ui_dir_strips_relative_and_alias_prefixes() -> None:
    assert resolves_to_ui_dir("@/components/ui/button")
    assert resolves_to_ui_dir("~/components/card")
    assert resolves_to_ui_dir("../../components/card")
    assert resolves_to_ui_dir("./components")
    assert not resolves_to_ui_dir("@/lib/components/card")
    assert not resolves_to_ui_dir("react")
    assert resolves_to_ui_dir("@/ui/button", "ui")


def test_extracts_named_and_default_imports_in_source_order() -> None:
    content = (
        'import Header from "@/components/header";\n'
        'import { Card, CardBody as Body } from "@/components/ui/card";\n'
        'import { useState } from "react";\n'
        'import { Dialog } from "../components/dialog";\n'
    )
    assert extract_component_imports(content) == ["Header", "Card", "CardBody", "Dialog"]


def test_multiline_import_clause() -> None:
    content = 'import {\n  Table,\n  TableRow,\n} from "@/components/ui/table";\n'
    assert extract_component_imports(content) == ["Table", "TableRow"]


def test_type_and_namespace_imports_are_ignored() -> None:
    content = (
        'import type { ButtonProps } from "@/components/ui/button";\n'
        'import { type CardProps, Card } from "@/components/ui/card";\n'
        'import * as Icons from "@/components/icons";\n'
    )
    assert extract_component_imports(content) == ["Card"]


def test_hooks_excluded_on_request() -> None:
    content = 'import { Toast, useToast } from "@/components/ui/toast";\n'
    assert extract_component_imports(content) == ["Toast"]
    assert extract_component_imports(content, exclude_hooks=True) == ["Toast"]
    assert is_hook_name("useToast")
    assert not is_hook_name("Toast")


def test_custom_predicate_and_hook_prefix() -> None:
    content = 'import { withTheme, UseCard, Card } from "@/components/card";\n'
    everything = extract_component_imports(content, predicate=lambda name: True)
    assert everything == ["withTheme", "UseCard", "Card"]

    without_hooks = extract_component_imports(
        content, exclude_hooks=True, hook_prefix="Use", predicate=lambda name: True
    )
    assert without_hooks == ["withTheme", "Card"]


def test_imports_inside_comments_are_ignored() -> None:
    content = '// import { Ghost } from "@/components/ghost";\nimport { Real } from "@/components/real";\n'
    assert extract_component_imports(content) == ["Real"]


def test_duplicate_imports_are_reported_once() -> None:
    content = (
        'import { Card } from "@/components/ui/card";\n'
        'import { Card as Again } from "@/components/ui/card";\n'
    )
    assert extract_component_imports(content) == ["Card"]
