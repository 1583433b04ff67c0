"""Tests for exported type and utility extraction."""

from __future__ import annotations

from docmap.parsers.exports import extract_exported_types, extract_exported_utilities


def test_constants_are_previewed() -> None:
    long_value = '"' + "x" * 80 + '"'
    content = (
        "/** Page size. */\n"
        "export const PAGE_SIZE: number = 20;\n"
        f"export const BANNER = {long_value};\n"
        "export const handler = () => null;\n"
    )
    utilities = extract_exported_utilities(content)

    assert [item.name for item in utilities] == ["PAGE_SIZE", "BANNER"]
    page_size, banner = utilities
    assert page_size.description == "Page size."
    assert page_size.type == "number"
    assert page_size.value == "20"
    assert banner.value == long_value[:50] + "..."


def test_functions_need_non_structural_doc_block() -> None:
    content = (
        "/**\n * Formats a date.\n */\n"
        "export function formatDate(value: Date, locale?: string): string {\n  return '';\n}\n"
        "export function undocumented() {}\n"
        "/**\n * @serverAction\n */\n"
        "export async function save(input) {}\n"
    )
    utilities = extract_exported_utilities(content)

    assert [item.name for item in utilities] == ["formatDate"]
    helper = utilities[0]
    assert helper.kind == "function"
    assert helper.type == "string"
    assert [(param.name, param.type) for param in helper.params] == [("value", "Date"), ("locale", "string")]


def test_generic_interface_with_extends() -> None:
    content = "export interface Page<T> extends Base {\n  items: T[];\n}\n"
    types = extract_exported_types(content)
    assert types[0].name == "Page"
    assert types[0].fields[0].name == "items"
    assert types[0].source_code.startswith("export interface Page<T>")


def test_object_type_alias() -> None:
    content = "export type Options = {\n  // Maximum entries\n  limit: number;\n};\n"
    item = extract_exported_types(content)[0]
    assert (item.name, item.kind) == ("Options", "type")
    assert item.fields[0].description == "Maximum entries"
