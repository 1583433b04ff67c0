"""Literal- and comment-aware character scanning for JS/TS source text.

The scanner is a small explicit state machine rather than a parser. It walks
raw text and reports only the characters that sit in *code* position, so
callers can count parentheses and braces without being fooled by string,
template, regex or comment content.

Modes:

* ``code``: ordinary source characters (yielded to the caller);
* ``string``: inside ``'...'`` or ``"..."`` (``quote`` holds the delimiter);
* ``template``: inside a backtick literal; ``${`` re-enters code mode and the
  matching ``}`` returns to the template;
* ``line_comment`` / ``block_comment``;
* ``regex``: inside a regular expression literal.

Quoted strings cannot span lines in JS. When a quote is still open at a
newline the quote character is re-read as code, which keeps apostrophes in
JSX text (``<p>Don't</p>``) from swallowing the rest of a body. Regex
literals get the same treatment.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, List, Optional

CODE = "code"
STRING = "string"
TEMPLATE = "template"
LINE_COMMENT = "line_comment"
BLOCK_COMMENT = "block_comment"
REGEX = "regex"

# A "/" after one of these starts a regex literal rather than a division.
_REGEX_PRECEDERS = set("([{:;,=!?&|+-*%^~")
_REGEX_KEYWORDS = {
    "return",
    "typeof",
    "instanceof",
    "case",
    "do",
    "else",
    "in",
    "of",
    "new",
    "delete",
    "void",
    "throw",
    "yield",
    "await",
}


def _is_ident_char(char: str) -> bool:
    return char.isalnum() or char in "_$"


@dataclass
class ScanState:
    """Mutable scanner state; exposed for tests and debugging."""

    mode: str = CODE
    quote: str = ""
    escaped: bool = False
    in_class: bool = False
    literal_start: int = -1
    prev_nonspace: str = ""
    prev_char: str = ""
    word: str = ""
    interpolations: List[int] = field(default_factory=list)

    def regex_allowed(self) -> bool:
        if not self.prev_nonspace:
            return True
        if self.prev_nonspace in _REGEX_PRECEDERS:
            return True
        return _is_ident_char(self.prev_nonspace) and self.word in _REGEX_KEYWORDS


def iter_code(
    source: str,
    start: int = 0,
    end: Optional[int] = None,
    *,
    comments: Optional[List[tuple[int, int]]] = None,
) -> Iterator[tuple[int, str]]:
    """Yield ``(index, char)`` for every code-position character in ``source[start:end]``.

    Characters inside literals and comments are consumed silently. The
    ``${`` and closing ``}`` of a template interpolation are not yielded,
    but everything between them is. When ``comments`` is given, the
    ``(start, end)`` span of every terminated block comment is appended to it.
    """
    limit = len(source) if end is None else min(end, len(source))
    state = ScanState()
    plain_at = -1
    i = start
    while i < limit:
        char = source[i]
        nxt = source[i + 1] if i + 1 < limit else ""
        mode = state.mode

        if mode == CODE:
            if i != plain_at:
                if char == "/" and nxt == "/":
                    state.mode = LINE_COMMENT
                    i += 2
                    continue
                if char == "/" and nxt == "*":
                    state.mode = BLOCK_COMMENT
                    state.literal_start = i
                    i += 2
                    continue
                if char in "'\"":
                    state.mode = STRING
                    state.quote = char
                    state.literal_start = i
                    i += 1
                    continue
                if char == "`":
                    state.mode = TEMPLATE
                    i += 1
                    continue
                if char == "/" and state.regex_allowed():
                    state.mode = REGEX
                    state.in_class = False
                    state.literal_start = i
                    i += 1
                    continue
            if state.interpolations:
                if char == "{":
                    state.interpolations[-1] += 1
                elif char == "}":
                    if state.interpolations[-1] == 0:
                        state.interpolations.pop()
                        state.mode = TEMPLATE
                        i += 1
                        continue
                    state.interpolations[-1] -= 1
            yield i, char
            if not char.isspace():
                if _is_ident_char(char):
                    state.word = state.word + char if _is_ident_char(state.prev_char) else char
                else:
                    state.word = ""
                state.prev_nonspace = char
            state.prev_char = char
            i += 1
            continue

        if mode == STRING:
            if state.escaped:
                state.escaped = False
            elif char == "\\":
                state.escaped = True
            elif char == state.quote:
                state.mode = CODE
                state.prev_nonspace = char
                state.word = ""
            elif char == "\n" or i + 1 >= limit:
                # Unterminated on this line: re-read the quote as code.
                state.mode = CODE
                state.escaped = False
                plain_at = state.literal_start
                i = state.literal_start
                continue
            i += 1
            continue

        if mode == TEMPLATE:
            if state.escaped:
                state.escaped = False
            elif char == "\\":
                state.escaped = True
            elif char == "`":
                state.mode = CODE
                state.prev_nonspace = char
                state.word = ""
            elif char == "$" and nxt == "{":
                state.interpolations.append(0)
                state.mode = CODE
                state.prev_nonspace = "{"
                state.word = ""
                i += 2
                continue
            i += 1
            continue

        if mode == LINE_COMMENT:
            if char == "\n":
                state.mode = CODE
            i += 1
            continue

        if mode == BLOCK_COMMENT:
            if char == "*" and nxt == "/":
                state.mode = CODE
                if comments is not None:
                    comments.append((state.literal_start, i + 2))
                i += 2
                continue
            i += 1
            continue

        # REGEX
        if state.escaped:
            state.escaped = False
        elif char == "\\":
            state.escaped = True
        elif char == "[":
            state.in_class = True
        elif char == "]":
            state.in_class = False
        elif char == "/" and not state.in_class:
            state.mode = CODE
            state.prev_nonspace = ")"
            state.word = ""
            i += 1
            continue
        elif char == "\n" or i + 1 >= limit:
            state.mode = CODE
            state.escaped = False
            plain_at = state.literal_start
            i = state.literal_start
            continue
        i += 1


def find_matching_brace(source: str, open_index: int) -> Optional[int]:
    """Return the index of the ``}`` closing the ``{`` at ``open_index``, or None."""
    if not 0 <= open_index < len(source) or source[open_index] != "{":
        return None
    depth = 0
    for index, char in iter_code(source, open_index):
        if char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return index
    return None


def count_braces(line: str) -> int:
    """Net brace balance of ``line`` (``{`` counts +1, ``}`` counts -1)."""
    balance = 0
    for _, char in iter_code(line):
        if char == "{":
            balance += 1
        elif char == "}":
            balance -= 1
    return balance


def block_comments(source: str) -> List[tuple[int, int]]:
    """Return ``(start, end)`` spans of the block comments in ``source``, in order."""
    spans: List[tuple[int, int]] = []
    for _ in iter_code(source, comments=spans):
        pass
    return spans


def code_mask(source: str) -> List[bool]:
    """Per-index flags telling whether a character is in code position."""
    mask = [False] * len(source)
    for index, _ in iter_code(source):
        mask[index] = True
    return mask


__all__ = [
    "ScanState",
    "block_comments",
    "code_mask",
    "count_braces",
    "find_matching_brace",
    "iter_code",
]
