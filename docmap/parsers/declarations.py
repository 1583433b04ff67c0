"""Declaration scanning and per-file record extraction."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterator, List, Optional

from ..models import DeclarationRecord, DeclarationSite, TypeItem, UtilityItem
from ..paths import (
    extract_module_name,
    infer_action_type,
    infer_app_from_path,
    is_component_file,
)
from .exports import extract_exported_types, extract_exported_utilities
from .literals import block_comments, code_mask
from .tags import ParsedComment, find_preceding_comment, is_doc_block, parse_comment_block

_IDENT = r"[A-Za-z_$][\w$]*"

# Alternation order is the match priority for a given line.
_DECLARATION = re.compile(
    rf"""^(?P<indent>[ \t]*)(?:
        (?:export[ \t]+)?(?:async[ \t]+)?function(?:[ \t]*\*[ \t]*|[ \t]+)(?P<function>{_IDENT})[ \t]*[<(]
      | (?P<default_decl>export[ \t]+default[ \t]+(?:async[ \t]+)?function\b[ \t]*\*?[ \t]*(?P<default>{_IDENT})?[ \t]*[<(])
      | (?P<exported>export[ \t]+)?(?:const|let|var)[ \t]+(?P<binding>{_IDENT})[ \t]*(?::[^=\n]*)?=(?!=)
    )""",
    re.MULTILINE | re.VERBOSE,
)

_COMPONENT_EXPORTS = (
    re.compile(r"export\s+(?:async\s+)?function\s+([A-Z][A-Za-z0-9]*)\s*[(<]"),
    re.compile(r"export\s+default\s+(?:async\s+)?function\s+([A-Z][A-Za-z0-9]*)\s*[(<]"),
    re.compile(r"export\s+const\s+([A-Z][A-Za-z0-9]*)\s*[=:]"),
)

_DIRECTIVE = re.compile(r"""(['"])use [\w -]+\1[ \t]*;?""")


@dataclass
class FileMetadata:
    """File-level values taken from the header doc block."""

    feature: Optional[str] = None
    used_in_screens: List[str] = field(default_factory=list)
    used_in_components: List[str] = field(default_factory=list)
    db_tables: List[str] = field(default_factory=list)
    module_description: Optional[str] = None
    module_name: Optional[str] = None


@dataclass
class FileAnnotations:
    """Everything extracted from one source file."""

    path: str
    module_name: str
    records: List[DeclarationRecord] = field(default_factory=list)
    metadata: FileMetadata = field(default_factory=FileMetadata)
    types: List[TypeItem] = field(default_factory=list)
    utilities: List[UtilityItem] = field(default_factory=list)


def scan_declarations(content: str) -> List[DeclarationSite]:
    """Locate declaration sites in source order.

    Recognised forms are named functions, default-exported functions and
    ``const``/``let``/``var`` bindings that are exported or sit at the top
    level. Matches inside strings and comments are ignored.
    """
    mask = code_mask(content)
    sites: List[DeclarationSite] = []
    for match in _DECLARATION.finditer(content):
        start = match.start() + len(match.group("indent"))
        if start >= len(mask) or not mask[start]:
            continue
        if match.group("function"):
            name, form = match.group("function"), "function"
        elif match.group("binding"):
            if not match.group("exported") and match.group("indent"):
                continue
            name, form = match.group("binding"), "binding"
        elif match.group("default_decl"):
            name, form = match.group("default") or "default", "default"
        else:  # pragma: no cover - regex alternation is exhaustive
            continue
        comment, comment_start = find_preceding_comment(content, start)
        sites.append(
            DeclarationSite(
                name=name,
                start=start,
                comment=comment,
                comment_start=comment_start,
                form=form,
            )
        )
    return sites


def iter_doc_blocks(content: str) -> Iterator[tuple[int, int, str]]:
    """Yield ``(start, end, text)`` for every `/** */` block outside literals."""
    for start, end in block_comments(content):
        text = content[start:end]
        if text.startswith("/**") and is_doc_block(text):
            yield start, end, text


def find_code_start(content: str) -> int:
    """Index of the first token that is not whitespace, a comment or a directive.

    Everything before it is the file header. Returns ``len(content)`` for
    files holding only comments.
    """
    index = 0
    length = len(content)
    while index < length:
        char = content[index]
        if char.isspace():
            index += 1
            continue
        if content.startswith("//", index):
            newline = content.find("\n", index)
            index = length if newline == -1 else newline + 1
            continue
        if content.startswith("/*", index):
            close = content.find("*/", index + 2)
            if close == -1:
                return index
            index = close + 2
            continue
        directive = _DIRECTIVE.match(content, index)
        if directive:
            index = directive.end()
            continue
        return index
    return length


def extract_exported_component_name(content: str) -> Optional[str]:
    for pattern in _COMPONENT_EXPORTS:
        match = pattern.search(content)
        if match:
            return match.group(1)
    return None


def extract_file_metadata(header: Optional[ParsedComment]) -> FileMetadata:
    if header is None:
        return FileMetadata()
    return FileMetadata(
        feature=header.get_text("feature") or None,
        used_in_screens=header.get_list("usedInScreen", "usedInScreens"),
        # At file level @usedComponents names the components using this module.
        used_in_components=header.get_list("usedComponents"),
        db_tables=header.get_list("dbTables"),
        module_description=header.description or None,
        module_name=header.get_text("module") or None,
    )


def _resolve_kind(parsed: ParsedComment) -> Optional[str]:
    if parsed.has("screen"):
        return "screen"
    if parsed.has("component"):
        return "component"
    if parsed.has("serverAction"):
        return "action"
    if parsed.has("dbTable"):
        return "table"
    return None


def build_record(
    parsed: ParsedComment,
    path: str,
    declaration_name: Optional[str],
    metadata: FileMetadata,
) -> Optional[DeclarationRecord]:
    """Turn a parsed block into a record, or None when it is not structural."""
    kind = _resolve_kind(parsed)
    if kind is None:
        return None

    if kind == "action":
        name = declaration_name
    else:
        tag_name = {"screen": "screen", "component": "component", "table": "dbTable"}[kind]
        name = parsed.get_text(tag_name) or declaration_name
    if not name:
        return None

    record = DeclarationRecord(
        kind=kind,
        name=name,
        path=path,
        feature=parsed.get_text("feature") or metadata.feature,
        description=parsed.description,
        app=infer_app_from_path(path),
    )

    if kind == "screen":
        record.route = parsed.get_text("route") or None
        record.used_components = parsed.get_list("usedComponents")
        record.used_actions = parsed.get_list("usedActions")
    elif kind == "component":
        record.used_in_screens = parsed.get_list("usedInScreen", "usedInScreens")
        record.used_components = parsed.get_list("usedComponents")
        record.used_actions = parsed.get_list("usedActions")
    elif kind == "action":
        record.used_in_screens = parsed.get_list("usedInScreen", "usedInScreens") or list(
            metadata.used_in_screens
        )
        record.used_in_components = parsed.get_list("usedInComponent", "usedInComponents") or list(
            metadata.used_in_components
        )
        record.db_tables = parsed.get_list("dbTables") or list(metadata.db_tables)
        record.action_type = parsed.get_text("actionType") or infer_action_type(path)
        record.auth_level = parsed.get_text("authLevel") or None
        record.input_schema = parsed.get_text("inputSchema") or None
        record.output_schema = parsed.get_text("outputSchema") or None
    else:
        record.used_in_actions = parsed.get_list("usedInActions", "usedInAction")
    return record


def _adjacent_declaration(sites: List[DeclarationSite], block_start: int) -> Optional[str]:
    for site in sites:
        if site.comment_start == block_start:
            return site.name
    return None


def _first_declaration_after(sites: List[DeclarationSite], offset: int) -> Optional[str]:
    for site in sites:
        if site.start >= offset:
            return site.name
    return None


def parse_file(content: str, path: str, *, auto_components: bool = False) -> FileAnnotations:
    """Extract records, header metadata, exported types and utilities from a file.

    The first doc block of the header (text before the first import, export or
    declaration) describes the module. When it carries a structural tag it
    also yields a record. Every later doc block with a structural tag yields
    a record named after the declaration that follows it.
    """
    annotations = FileAnnotations(path=path, module_name=extract_module_name(path))
    code_start = find_code_start(content)
    sites = scan_declarations(content)
    blocks = list(iter_doc_blocks(content))

    header_block = next((block for block in blocks if block[0] < code_start), None)
    header = parse_comment_block(header_block[2]) if header_block else None
    metadata = extract_file_metadata(header)
    annotations.metadata = metadata

    if header is not None and header_block is not None and header.has_structural_tag():
        record = build_record(
            header,
            path,
            _adjacent_declaration(sites, header_block[0])
            or _first_declaration_after(sites, header_block[1]),
            metadata,
        )
        if record is not None:
            annotations.records.append(record)

    for start, _end, text in blocks:
        if header_block is not None and start == header_block[0]:
            continue
        parsed = parse_comment_block(text)
        if not parsed.has_structural_tag():
            continue
        record = build_record(parsed, path, _adjacent_declaration(sites, start), metadata)
        if record is not None:
            annotations.records.append(record)

    if auto_components and is_component_file(path):
        if not any(record.kind == "component" for record in annotations.records):
            name = extract_exported_component_name(content)
            if name:
                annotations.records.insert(
                    0,
                    DeclarationRecord(
                        kind="component",
                        name=name,
                        path=path,
                        feature=metadata.feature,
                        description=(header.description if header else ""),
                        used_in_screens=list(metadata.used_in_screens),
                        used_components=header.get_list("usedComponents") if header else [],
                        used_actions=header.get_list("usedActions") if header else [],
                        app=infer_app_from_path(path),
                    ),
                )

    annotations.types = extract_exported_types(content)
    annotations.utilities = extract_exported_utilities(content)
    return annotations


def parse_records(content: str, path: str) -> List[DeclarationRecord]:
    """Records documented in one file, in source order."""
    return parse_file(content, path).records


__all__ = [
    "FileAnnotations",
    "FileMetadata",
    "build_record",
    "extract_exported_component_name",
    "extract_file_metadata",
    "find_code_start",
    "find_preceding_comment",
    "iter_doc_blocks",
    "parse_file",
    "parse_records",
    "scan_declarations",
]
