"""Tag parsing for `/** ... */` documentation blocks."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

STRUCTURAL_TAGS = ("screen", "component", "serverAction", "dbTable")

MARKER_TAGS = frozenset({"serverAction"})

SINGLE_LINE_TAGS = frozenset(
    {
        "screen",
        "component",
        "dbTable",
        "feature",
        "route",
        "layer",
        "module",
        "category",
        "inputSchema",
        "outputSchema",
        "authLevel",
        "rateLimit",
        "returns",
        "return",
        "type",
        "default",
        "since",
        "version",
        "deprecated",
        "see",
        "link",
        "author",
        "license",
        "actionType",
    }
)

COMMA_LIST_TAGS = frozenset(
    {
        "usedComponents",
        "usedActions",
        "usedInScreen",
        "usedInScreens",
        "usedInComponent",
        "usedInComponents",
        "usedInAction",
        "usedInActions",
        "dbTables",
    }
)

# Identifier tags never take continuation lines.
IDENTIFIER_TAGS = frozenset({"screen", "component", "dbTable", "route"})

DASH_LIST_TAGS = frozenset({"columns", "indexes", "relations"})

TEXT_TAGS = frozenset({"description", "example", "remarks", "note"})

_TAG_LINE = re.compile(r"^@([A-Za-z][\w-]*)(?:\s+(.*))?$")
_DASH_ENTRY = re.compile(r"^-\s*(?P<key>[^:]+?)\s*(?::\s*(?P<value>.*?))?\s*(?:\((?P<meta>[^)]*)\))?\s*$")
_ERROR_CODE = re.compile(r"^-\s*(?P<code>[\w.-]+)\s*:\s*(?P<desc>.*?)\s*(?:\((?P<status>\d{3})\))?\s*$")


@dataclass
class ListEntry:
    """Item of a `- key: value (meta)` list tag such as ``@columns``."""

    key: str
    value: str = ""
    meta: Optional[str] = None


@dataclass
class ErrorCode:
    """Item of an ``@errorCodes`` list."""

    code: str
    description: str = ""
    status: Optional[int] = None


@dataclass
class ParamTag:
    """An ``@param`` or ``@throws`` entry of the form ``{type} name - description``."""

    name: str
    type: Optional[str] = None
    description: str = ""


@dataclass
class ParsedComment:
    """Tags and free text recovered from one comment block.

    ``tags`` holds known tags with typed values, ``extra`` keeps every
    unrecognised tag verbatim and ``tag_names`` lists every tag seen, in
    source order, including markers.
    """

    description: str = ""
    tags: Dict[str, Any] = field(default_factory=dict)
    extra: Dict[str, str] = field(default_factory=dict)
    tag_names: List[str] = field(default_factory=list)
    raw: str = ""

    def has(self, *names: str) -> bool:
        return any(name in self.tag_names for name in names)

    def has_structural_tag(self) -> bool:
        return self.has(*STRUCTURAL_TAGS)

    def get_text(self, *names: str) -> Optional[str]:
        """Return the first single-valued tag among ``names`` (aliases)."""
        for name in names:
            value = self.tags.get(name, self.extra.get(name))
            if isinstance(value, str):
                return value
            if value is True:
                return ""
        return None

    def get_list(self, *names: str) -> List[str]:
        """Concatenate comma-list tags among ``names``; duplicates collapse."""
        merged: List[str] = []
        for name in names:
            value = self.tags.get(name)
            if isinstance(value, list):
                merged.extend(item for item in value if isinstance(item, str))
        return _dedupe(merged)

    @property
    def is_empty(self) -> bool:
        return not self.tag_names and not self.description


def parse_list(value: Optional[str]) -> List[str]:
    """Split a comma-separated value into trimmed, non-empty, unique tokens."""
    if not value:
        return []
    return _dedupe(token.strip() for token in value.split(","))


def _dedupe(tokens: Iterable[str]) -> List[str]:
    seen: set[str] = set()
    result: List[str] = []
    for token in tokens:
        if token and token not in seen:
            seen.add(token)
            result.append(token)
    return result


def is_doc_block(block: str) -> bool:
    text = block.strip()
    return text.startswith("/**") and text.find("*/", 3) != -1


def find_preceding_comment(content: str, offset: int) -> tuple[Optional[str], Optional[int]]:
    """Return the `/** */` block that ends right before ``offset`` and its start.

    Only whitespace may separate the block from ``offset``; anything else
    means the declaration is undocumented and ``(None, None)`` is returned.
    """
    before = content[:offset].rstrip()
    if not before.endswith("*/"):
        return None, None
    close = len(before) - 2
    start = before.rfind("/**", 0, close)
    if start == -1 or before.find("*/", start + 3) != close:
        return None, None
    return before[start:], start


def comment_lines(block: str) -> List[tuple[str, bool]]:
    """Return ``(content, has_marker)`` pairs for the lines inside a doc block.

    ``has_marker`` is true when the line carries the leading ``*`` of a
    comment continuation. The first line (after ``/**``) always counts as
    marked. An unterminated block yields no lines.
    """
    text = block.strip()
    if not text.startswith("/**"):
        return []
    end = text.find("*/", 3)
    if end == -1:
        return []
    inner = text[3:end]
    result: List[tuple[str, bool]] = []
    for position, line in enumerate(inner.split("\n")):
        if position == 0:
            result.append((line.strip(), True))
            continue
        stripped = line.strip()
        if stripped.startswith("*"):
            content = stripped[1:]
            if content.startswith(" "):
                content = content[1:]
            result.append((content.rstrip(), True))
        else:
            result.append((stripped, False))
    return result


def parse_comment_block(block: str) -> ParsedComment:
    """Parse a `/** ... */` block into description text and tags.

    Malformed blocks (no ``/**`` opener or no terminator) produce an empty
    result rather than an error.
    """
    lines = comment_lines(block)
    parsed = ParsedComment(raw=block)
    if not lines:
        return parsed

    description: List[str] = []
    collected: List[tuple[str, List[str]]] = []
    current: Optional[tuple[str, List[str]]] = None

    for content, has_marker in lines:
        stripped = content.strip()
        match = _TAG_LINE.match(stripped) if stripped.startswith("@") else None
        if match:
            name = match.group(1)
            current = (name, [match.group(2) or ""])
            collected.append(current)
            if name in IDENTIFIER_TAGS:
                current = None
            continue
        if current is not None and has_marker and (stripped or current[0] == "example"):
            current[1].append(content)
            continue
        if current is not None:
            # A blank or unmarked line ends the running tag.
            current = None
        if stripped:
            description.append(stripped if not has_marker else content)

    parsed.description = "\n".join(description).strip()
    for name, value_lines in collected:
        parsed.tag_names.append(name)
        _store_tag(parsed, name, value_lines)

    if not parsed.description:
        text = parsed.tags.get("description")
        if isinstance(text, str):
            parsed.description = text
    return parsed


def _store_tag(parsed: ParsedComment, name: str, value_lines: List[str]) -> None:
    tags = parsed.tags
    if name in MARKER_TAGS:
        tags[name] = True
    elif name in SINGLE_LINE_TAGS:
        tags[name] = " ".join(part.strip() for part in value_lines if part.strip())
    elif name in COMMA_LIST_TAGS:
        items: List[str] = list(tags.get(name, []))
        items.extend(_parse_comma_lines(value_lines))
        tags[name] = _dedupe(items)
    elif name in DASH_LIST_TAGS:
        entries: List[ListEntry] = list(tags.get(name, []))
        entries.extend(_parse_dash_entries(value_lines))
        tags[name] = entries
    elif name == "errorCodes":
        codes: List[ErrorCode] = list(tags.get(name, []))
        codes.extend(_parse_error_codes(value_lines))
        tags[name] = codes
    elif name in ("param", "throws"):
        params: List[ParamTag] = list(tags.get(name, []))
        text = " ".join(part.strip() for part in value_lines if part.strip())
        param = _parse_param(text, named=name == "param")
        if param is not None:
            params.append(param)
        tags[name] = params
    elif name in TEXT_TAGS:
        tags[name] = "\n".join(value_lines).strip()
    else:
        parsed.extra[name] = "\n".join(value_lines).strip()


def _parse_comma_lines(value_lines: List[str]) -> List[str]:
    joined: List[str] = []
    for part in value_lines:
        text = part.strip()
        if text.startswith("- "):
            text = text[2:]
        if text:
            joined.append(text)
    return parse_list(",".join(joined))


def _parse_dash_entries(value_lines: List[str]) -> List[ListEntry]:
    entries: List[ListEntry] = []
    for part in value_lines:
        text = part.strip()
        if not text.startswith("-"):
            continue
        match = _DASH_ENTRY.match(text)
        if not match:
            continue
        meta = match.group("meta")
        entries.append(
            ListEntry(
                key=match.group("key").strip(),
                value=(match.group("value") or "").strip(),
                meta=meta.strip() if meta else None,
            )
        )
    return entries


def _parse_error_codes(value_lines: List[str]) -> List[ErrorCode]:
    codes: List[ErrorCode] = []
    for part in value_lines:
        match = _ERROR_CODE.match(part.strip())
        if not match:
            continue
        status = match.group("status")
        codes.append(
            ErrorCode(
                code=match.group("code"),
                description=match.group("desc").strip(),
                status=int(status) if status else None,
            )
        )
    return codes


def _parse_param(text: str, *, named: bool = True) -> Optional[ParamTag]:
    if not text:
        return None
    param_type: Optional[str] = None
    if text.startswith("{"):
        close = text.find("}")
        if close != -1:
            param_type = text[1:close].strip() or None
            text = text[close + 1 :].strip()
    if named:
        name, _, rest = text.partition(" ")
    else:
        name, rest = "", text
    description = rest.strip()
    if description.startswith("- "):
        description = description[2:].strip()
    elif description == "-":
        description = ""
    return ParamTag(name=name, type=param_type, description=description)


__all__ = [
    "COMMA_LIST_TAGS",
    "DASH_LIST_TAGS",
    "IDENTIFIER_TAGS",
    "ErrorCode",
    "ListEntry",
    "ParamTag",
    "ParsedComment",
    "SINGLE_LINE_TAGS",
    "STRUCTURAL_TAGS",
    "TEXT_TAGS",
    "comment_lines",
    "find_preceding_comment",
    "is_doc_block",
    "parse_comment_block",
    "parse_list",
]
