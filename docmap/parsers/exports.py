"""Exported types and helper utilities documented in a module."""

from __future__ import annotations

import re
from typing import List, Optional

from ..models import TypeField, TypeItem, UtilityItem
from .literals import code_mask, find_matching_brace
from .tags import find_preceding_comment, parse_comment_block

_INTERFACE = re.compile(r"export\s+interface\s+(\w+)(?:\s*<[^>{]*>)?(?:\s+extends\s+[^{]+)?\s*\{")
_OBJECT_TYPE = re.compile(r"export\s+type\s+(\w+)(?:\s*<[^>=]*>)?\s*=\s*\{")
_SIMPLE_TYPE = re.compile(r"export\s+type\s+(\w+)(?:\s*<[^>=]*>)?\s*=\s*([^;{]+);")
_ENUM = re.compile(r"export\s+(?:const\s+)?enum\s+(\w+)\s*\{")

_CONSTANT = re.compile(r"export\s+const\s+(\w+)(?:\s*:\s*([^=\n]+?))?\s*=\s*([^;\n]+)")
_FUNCTION = re.compile(
    r"export\s+(?:async\s+)?function\s+(\w+)\s*(?:<[^>]*>)?\s*\(([^)]*)\)(?:\s*:\s*([^{]+?))?\s*\{"
)

_FIELD = re.compile(r"^(\w+)\??\s*:\s*(.+?);?\s*$")
_INLINE_DOC = re.compile(r"/\*\*\s*(.+?)\s*\*/")

_VALUE_PREVIEW = 50


def _description(block: Optional[str]) -> Optional[str]:
    if not block:
        return None
    return parse_comment_block(block).description or None


def _with_comment(content: str, start: int, text: str) -> tuple[Optional[str], str]:
    block, _ = find_preceding_comment(content, start)
    if block is None:
        return None, text.strip()
    return block, f"{block}\n{text}".strip()


def _interface_fields(body: str) -> List[TypeField]:
    fields: List[TypeField] = []
    pending: Optional[str] = None
    for line in body.split("\n"):
        stripped = line.strip()
        doc = _INLINE_DOC.search(stripped)
        if doc and stripped.startswith("/**"):
            pending = doc.group(1)
            continue
        if stripped.startswith("//"):
            pending = stripped[2:].strip()
            continue
        match = _FIELD.match(stripped)
        if match:
            fields.append(TypeField(name=match.group(1), type=match.group(2).rstrip(";").strip(), description=pending))
            pending = None
    return fields


def _enum_values(body: str) -> List[str]:
    values: List[str] = []
    for part in body.split(","):
        match = re.match(r"\s*(\w+)", part)
        if match:
            values.append(match.group(1))
    return values


def _braced(content: str, mask: List[bool], match: re.Match[str]) -> Optional[tuple[str, str]]:
    """Return ``(full declaration text, body)`` for a match ending at ``{``."""
    if not mask[match.start()]:
        return None
    open_index = match.end() - 1
    close_index = find_matching_brace(content, open_index)
    if close_index is None:
        return None
    return content[match.start() : close_index + 1], content[open_index + 1 : close_index]


def extract_exported_types(content: str) -> List[TypeItem]:
    """Exported interfaces, type aliases and enums, each with its doc block."""
    mask = code_mask(content)
    types: List[TypeItem] = []

    for pattern, kind in ((_INTERFACE, "interface"), (_OBJECT_TYPE, "type")):
        for match in pattern.finditer(content):
            braced = _braced(content, mask, match)
            if braced is None:
                continue
            text, body = braced
            block, source_code = _with_comment(content, match.start(), text)
            types.append(
                TypeItem(
                    name=match.group(1),
                    kind=kind,
                    description=_description(block),
                    fields=_interface_fields(body),
                    source_code=source_code,
                )
            )

    for match in _SIMPLE_TYPE.finditer(content):
        name = match.group(1)
        if not mask[match.start()] or any(item.name == name for item in types):
            continue
        block, source_code = _with_comment(content, match.start(), match.group(0))
        types.append(TypeItem(name=name, kind="type", description=_description(block), source_code=source_code))

    for match in _ENUM.finditer(content):
        braced = _braced(content, mask, match)
        if braced is None:
            continue
        text, body = braced
        block, source_code = _with_comment(content, match.start(), text)
        types.append(
            TypeItem(
                name=match.group(1),
                kind="enum",
                description=_description(block),
                values=_enum_values(body),
                source_code=source_code,
            )
        )
    return types


def _parse_params(text: str) -> List[TypeField]:
    params: List[TypeField] = []
    for part in text.split(","):
        stripped = part.strip()
        if not stripped:
            continue
        match = re.match(r"^(\w+)\??\s*:\s*(.+)$", stripped)
        if match:
            params.append(TypeField(name=match.group(1), type=match.group(2).strip()))
            continue
        name = re.match(r"^(\w+)", stripped)
        if name:
            params.append(TypeField(name=name.group(1), type="unknown"))
    return params


def extract_exported_utilities(content: str) -> List[UtilityItem]:
    """Exported non-function constants and helper functions that are not actions."""
    mask = code_mask(content)
    utilities: List[UtilityItem] = []

    for match in _CONSTANT.finditer(content):
        if not mask[match.start()]:
            continue
        value = match.group(3).strip()
        if value.startswith("(") or value.startswith("async") or "=>" in value or value.startswith("function"):
            continue
        block, _ = find_preceding_comment(content, match.start())
        if block is not None and parse_comment_block(block).has("dbTable"):
            continue
        annotation = match.group(2)
        utilities.append(
            UtilityItem(
                name=match.group(1),
                kind="constant",
                description=_description(block),
                type=annotation.strip() if annotation else None,
                value=value if len(value) <= _VALUE_PREVIEW else value[:_VALUE_PREVIEW] + "...",
            )
        )

    for match in _FUNCTION.finditer(content):
        if not mask[match.start()]:
            continue
        block, _ = find_preceding_comment(content, match.start())
        if block is None:
            continue
        parsed = parse_comment_block(block)
        if parsed.has_structural_tag():
            continue
        return_type = match.group(3)
        utilities.append(
            UtilityItem(
                name=match.group(1),
                kind="function",
                description=parsed.description or None,
                type=return_type.strip() if return_type else None,
                params=_parse_params(match.group(2)),
            )
        )
    return utilities


__all__ = ["extract_exported_types", "extract_exported_utilities"]
