"""Import-based reference extraction for UI component usage."""

from __future__ import annotations

import re
from typing import Callable, List

from ..parsers.literals import code_mask

ComponentPredicate = Callable[[str], bool]

_IMPORT = re.compile(
    r"""\bimport\s+(?!type\s)(?P<clause>[^;'"`]*?)\s*\bfrom\s*(?P<quote>["'])(?P<source>[^"'\n]+)(?P=quote)""",
    re.DOTALL,
)
_IDENTIFIER = re.compile(r"^[A-Za-z_$][\w$]*$")
_ALIASES = ("@/", "~/")


def is_component_name(name: str) -> bool:
    """Default heuristic: component bindings start with an uppercase letter."""
    return bool(name) and name[0].isupper()


def is_hook_name(name: str, prefix: str = "use") -> bool:
    return name.startswith(prefix)


def resolves_to_ui_dir(source: str, ui_segment: str = "components") -> bool:
    """Whether an import specifier points into the reusable-UI directory.

    Relative prefixes (``./``, ``../``) and the ``@/`` and ``~/`` aliases are
    stripped before a prefix match; the filesystem is never consulted.
    """
    path = source.strip()
    while True:
        if path.startswith("./"):
            path = path[2:]
        elif path.startswith("../"):
            path = path[3:]
        else:
            break
    for alias in _ALIASES:
        if path.startswith(alias):
            path = path[len(alias) :]
            break
    segment = ui_segment.strip("/")
    return path == segment or path.startswith(segment + "/")


def _clause_bindings(clause: str) -> List[str]:
    """Imported (not local) names of an import clause, namespace imports excluded."""
    names: List[str] = []
    text = " ".join(clause.split())
    brace_open = text.find("{")
    default_part = text if brace_open == -1 else text[:brace_open]
    default_part = default_part.strip().rstrip(",").strip()
    if default_part and not default_part.startswith("*") and _IDENTIFIER.match(default_part):
        names.append(default_part)
    if brace_open != -1:
        brace_close = text.find("}", brace_open)
        inner = text[brace_open + 1 : brace_close if brace_close != -1 else len(text)]
        for specifier in inner.split(","):
            specifier = specifier.strip()
            if not specifier or specifier.startswith("type "):
                continue
            original = re.split(r"\s+as\s+", specifier)[0].strip()
            if _IDENTIFIER.match(original):
                names.append(original)
    return names


def extract_component_imports(
    content: str,
    *,
    exclude_hooks: bool = False,
    ui_segment: str = "components",
    hook_prefix: str = "use",
    predicate: ComponentPredicate = is_component_name,
) -> List[str]:
    """Component-like names imported from the UI directory, in source order.

    For ``import { A as B }`` the exported name ``A`` is reported. Type-only
    imports are ignored. ``predicate`` decides what counts as a component
    name and can be swapped per project.
    """
    mask = code_mask(content)
    seen: set[str] = set()
    result: List[str] = []
    for match in _IMPORT.finditer(content):
        if not mask[match.start()]:
            continue
        if not resolves_to_ui_dir(match.group("source"), ui_segment):
            continue
        for name in _clause_bindings(match.group("clause")):
            if exclude_hooks and is_hook_name(name, hook_prefix):
                continue
            if not predicate(name) or name in seen:
                continue
            seen.add(name)
            result.append(name)
    return result


__all__ = [
    "ComponentPredicate",
    "extract_component_imports",
    "is_component_name",
    "is_hook_name",
    "resolves_to_ui_dir",
]
