"""In-place repair of ``@usedComponents``, ``@screen`` and ``@route`` tags."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, NamedTuple, Optional

from ..analyzers.diff import diff
from ..analyzers.references import extract_component_imports
from ..models import DeclarationSite, FixResult
from ..parsers.declarations import find_code_start, iter_doc_blocks, scan_declarations
from ..parsers.tags import parse_comment_block
from ..paths import generate_route, generate_screen_name

_SINGLE_LINE_BLOCK = re.compile(r"^/\*\*\s*(.*?)\s*\*/$", re.DOTALL)
_CLOSING_LINE = re.compile(r"^(?P<lead>[ \t]*)(?P<body>.*?)[ \t]*\*/[ \t]*$")


@dataclass
class FixOptions:
    """Which fixers ``apply_fixes`` runs and the path conventions they use."""

    used_components: bool = False
    screen: bool = False
    route: bool = False
    ui_segment: str = "components"
    hook_prefix: str = "use"
    app_dir: str = "app"


class _Block(NamedTuple):
    start: int
    end: int
    text: str


def _unchanged(content: str) -> FixResult:
    return FixResult(changed=False, content=content)


def _blocks(content: str) -> List[_Block]:
    return [_Block(start, end, text) for start, end, text in iter_doc_blocks(content)]


def _line_start(content: str, index: int) -> int:
    return content.rfind("\n", 0, index) + 1


def _indent_at(content: str, index: int) -> str:
    prefix = content[_line_start(content, index) : index]
    return prefix if not prefix.strip() else re.match(r"[ \t]*", prefix).group(0)


def _primary_site(content: str) -> Optional[DeclarationSite]:
    """The declaration a synthesized block documents: default export first."""
    sites = scan_declarations(content)
    for site in sites:
        if site.form == "default":
            return site
    for site in sites:
        if site.name[:1].isupper():
            return site
    return sites[0] if sites else None


def _target_block(content: str, tag: str) -> Optional[_Block]:
    blocks = _blocks(content)
    parsed = [(block, parse_comment_block(block.text)) for block in blocks]
    for block, comment in parsed:
        if comment.has(tag):
            return block
    for block, comment in parsed:
        if comment.has_structural_tag():
            return block
    site = _primary_site(content)
    if site is not None and site.comment_start is not None:
        for block in blocks:
            if block.start == site.comment_start:
                return block
    code_start = find_code_start(content)
    for block in blocks:
        if block.start < code_start:
            return block
    return None


def _marker_body(line: str, first: bool) -> str:
    stripped = line.strip()
    if first:
        return stripped[3:].strip() if stripped.startswith("/**") else stripped
    if stripped.startswith("*") and not stripped.startswith("*/"):
        return stripped[1:].strip()
    return stripped


def _is_marked(line: str) -> bool:
    stripped = line.strip()
    return stripped.startswith("*") and not stripped.startswith("*/")


def _expand(block_text: str, indent: str) -> List[str]:
    match = _SINGLE_LINE_BLOCK.match(block_text.strip())
    inner = match.group(1) if match else ""
    lines = ["/**"]
    if inner:
        lines.append(f"{indent} * {inner}")
    lines.append(f"{indent} */")
    return lines


def _replace_tag_line(lines: List[str], index: int, tag: str, value: str) -> List[str]:
    line = lines[index]
    at = line.find(f"@{tag}")
    if "*/" in line[at:]:
        return lines[:index] + [f"{line[:at]}@{tag} {value} */"] + lines[index + 1 :]

    last = len(lines) - 1
    stop = index + 1
    while stop < last and _is_marked(lines[stop]):
        body = _marker_body(lines[stop], False)
        # A blank marked line or the next tag ends the continuation.
        if not body or body.startswith("@"):
            break
        stop += 1

    tail = lines[stop:]
    closing = _CLOSING_LINE.match(lines[last])
    if stop == last and closing and closing.group("body").startswith("*") and closing.group("body")[1:].strip():
        # Trailing text on the closing line continues the tag too.
        tail = tail[:-1] + [f"{closing.group('lead')}*/"]
    return lines[:index] + [f"{line[:at]}@{tag} {value}"] + tail


def _insert_tag_line(lines: List[str], tag: str, value: str) -> List[str]:
    closing = _CLOSING_LINE.match(lines[-1])
    if closing is None:
        return lines
    lead, body = closing.group("lead"), closing.group("body")
    if not body:
        return lines[:-1] + [f"{lead}* @{tag} {value}", lines[-1]]
    return lines[:-1] + [f"{lead}{body}", f"{lead}* @{tag} {value}", f"{lead}*/"]


def _newline(text: str) -> str:
    return "\r\n" if "\r\n" in text else "\n"


def set_block_tag(
    block_text: str, tag: str, value: str, indent: str = "", newline: Optional[str] = None
) -> str:
    """Rewrite ``@tag`` inside a doc block, or add it before the terminator.

    A rewritten tag keeps its position; its continuation lines are dropped.
    Single-line blocks are expanded to the multi-line form first. Lines are
    joined with ``newline``, defaulting to the block's own line ending.
    """
    newline = newline or _newline(block_text)
    lines = block_text.replace("\r\n", "\n").split("\n")
    if len(lines) == 1:
        lines = _expand(block_text, indent)
    pattern = re.compile(rf"@{re.escape(tag)}(?![\w-])")
    for index, line in enumerate(lines):
        if pattern.match(_marker_body(line, index == 0)):
            return newline.join(_replace_tag_line(lines, index, tag, value))
    return newline.join(_insert_tag_line(lines, tag, value))


def _write_tag(content: str, tag: str, value: str) -> str:
    newline = _newline(content)
    block = _target_block(content, tag)
    if block is not None:
        updated = set_block_tag(block.text, tag, value, _indent_at(content, block.start), newline)
        return content[: block.start] + updated + content[block.end :]

    site = _primary_site(content)
    if site is not None:
        position = site.start
        indent = _indent_at(content, position)
    else:
        code_start = find_code_start(content)
        position = _line_start(content, code_start) if code_start < len(content) else 0
        indent = ""
    synthesized = f"/**{newline}{indent} * @{tag} {value}{newline}{indent} */{newline}{indent}"
    return content[:position] + synthesized + content[position:]


def _has_tag(content: str, tag: str) -> bool:
    return any(parse_comment_block(block.text).has(tag) for block in _blocks(content))


def fix_used_components(
    content: str,
    path: str,
    *,
    ui_segment: str = "components",
    hook_prefix: str = "use",
) -> FixResult:
    """Sync ``@usedComponents`` with the UI components the file imports.

    Hooks are never listed. Nothing changes when no component is imported
    or when the declared list already matches (order is ignored).
    """
    computed = extract_component_imports(
        content, exclude_hooks=True, ui_segment=ui_segment, hook_prefix=hook_prefix
    )
    if not computed:
        return _unchanged(content)
    for block in _blocks(content):
        parsed = parse_comment_block(block.text)
        if parsed.has("usedComponents"):
            if diff(parsed.get_list("usedComponents"), computed).valid:
                return _unchanged(content)
            break
    updated = _write_tag(content, "usedComponents", ", ".join(computed))
    return FixResult(changed=updated != content, content=updated)


def fix_screen(content: str, path: str, *, app_dir: str = "app") -> FixResult:
    if _has_tag(content, "screen"):
        return _unchanged(content)
    updated = _write_tag(content, "screen", generate_screen_name(path, app_dir))
    return FixResult(changed=updated != content, content=updated)


def fix_route(content: str, path: str, *, app_dir: str = "app") -> FixResult:
    if _has_tag(content, "route"):
        return _unchanged(content)
    updated = _write_tag(content, "route", generate_route(path, app_dir))
    return FixResult(changed=updated != content, content=updated)


def apply_fixes(content: str, path: str, options: Optional[FixOptions] = None) -> FixResult:
    """Run the selected fixers in order and collect their change labels."""
    options = options or FixOptions(used_components=True)
    current = content
    changes: List[str] = []

    if options.used_components:
        result = fix_used_components(
            current, path, ui_segment=options.ui_segment, hook_prefix=options.hook_prefix
        )
        if result.changed:
            current = result.content
            changes.append("@usedComponents")
    if options.screen:
        result = fix_screen(current, path, app_dir=options.app_dir)
        if result.changed:
            current = result.content
            changes.append("@screen")
    if options.route:
        result = fix_route(current, path, app_dir=options.app_dir)
        if result.changed:
            current = result.content
            changes.append("@route")

    if not changes:
        return _unchanged(content)
    return FixResult(changed=True, content=current, changes=changes)


__all__ = [
    "FixOptions",
    "apply_fixes",
    "fix_route",
    "fix_screen",
    "fix_used_components",
    "set_block_tag",
]
