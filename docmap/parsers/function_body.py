"""Extract the full source of one named declaration, doc block included."""

from __future__ import annotations

import re
from typing import List, Optional

from .literals import code_mask, find_matching_brace, iter_code
from .tags import find_preceding_comment

# A "{" following one of these sits in a type annotation, not a body.
_TYPE_POSITION = set(":|&,<")

_NEXT_STATEMENT = re.compile(r"\s*(?:export|import|const|let|var|function|class|type|interface|enum)\b")


def _patterns(name: str) -> List[tuple[re.Pattern[str], bool]]:
    escaped = re.escape(name)
    lead = r"(?<![\w$.])"
    # Default exports first so the "export default" prefix stays in the match.
    return [
        (re.compile(rf"{lead}(?:export\s+)?default\s+(?:async\s+)?function\s*\*?\s*{escaped}\s*[<({{]"), False),
        (re.compile(rf"{lead}(?:export\s+)?(?:async\s+)?function\s*\*?\s*{escaped}\s*[<({{]"), False),
        (re.compile(rf"{lead}(?:export\s+)?(?:const|let|var)\s+{escaped}\s*[:=](?!=)"), True),
    ]


def _find_declaration(source: str, name: str) -> Optional[tuple[int, bool]]:
    mask = code_mask(source)
    for pattern, is_binding in _patterns(name):
        for match in pattern.finditer(source):
            if mask[match.start()]:
                return match.start(), is_binding
    return None


def _locate_end(source: str, start: int, is_binding: bool) -> Optional[int]:
    """Phase A then phase B: return the index just past the declaration."""
    paren_depth = 0
    seen_params = False
    prev = ""
    skip_until = -1
    for index, char in iter_code(source, start):
        if index <= skip_until:
            continue
        if char == "(":
            paren_depth += 1
            seen_params = True
        elif char == ")":
            paren_depth -= 1
        elif paren_depth == 0:
            if char == "{":
                if seen_params and prev not in _TYPE_POSITION:
                    close = find_matching_brace(source, index)
                    return None if close is None else close + 1
                # Object literal value or inline type literal.
                close = find_matching_brace(source, index)
                if close is None:
                    return None
                skip_until = close
                prev = "}"
                continue
            if is_binding and char == ";":
                return index + 1
            if is_binding and char == "\n" and prev not in ("=", "", ">", ",", "(", ":"):
                if _NEXT_STATEMENT.match(source, index + 1):
                    return index
        if not char.isspace():
            prev = char
    return None


def extract_function_code(source: str, target_name: str) -> str:
    """Return the named declaration with its preceding doc block.

    Phase A walks from the declaration keyword counting parentheses to the
    end of the parameter list and stops at the first top-level ``{`` that is
    not part of a type annotation. Phase B follows that brace to its match.
    Bindings without a function body (``const x = 1;``) end at their
    terminating semicolon. When no declaration named ``target_name`` exists
    the input is returned unchanged.
    """
    if not target_name:
        return source
    found = _find_declaration(source, target_name)
    if found is None:
        return source
    start, is_binding = found
    end = _locate_end(source, start, is_binding)
    if end is None:
        return source
    _, comment_start = find_preceding_comment(source, start)
    if comment_start is not None:
        start = comment_start
    return source[start:end].strip()


__all__ = ["extract_function_code"]
