"""File-path conventions: globs, file roles, routes and screen names."""

from __future__ import annotations

import re
from functools import lru_cache
from typing import Iterable, Mapping, Optional

_SOURCE_SUFFIX = re.compile(r"\.(?:ts|tsx|js|jsx|mts|cts)$")
_PAGE_FILE = re.compile(r"/?page\.(?:tsx|ts|jsx|js)$")

_MODULE_SKIP_DIRS = {
    "app",
    "lib",
    "src",
    "components",
    "actions",
    "schema",
    "apps",
    "packages",
    "web",
    "admin",
    "public",
}


def normalize_path(path: str) -> str:
    normalized = path.replace("\\", "/")
    while normalized.startswith("./"):
        normalized = normalized[2:]
    return normalized


@lru_cache(maxsize=512)
def glob_to_regex(pattern: str) -> re.Pattern[str]:
    """Translate a ``**``-aware glob into an anchored regular expression.

    ``*`` and ``?`` never cross a ``/``; ``**/`` matches zero or more whole
    directories and a trailing ``/**`` matches everything below a directory.
    """
    parts: list[str] = []
    index = 0
    length = len(pattern)
    while index < length:
        char = pattern[index]
        if pattern.startswith("**/", index):
            parts.append("(?:.*/)?")
            index += 3
            continue
        if pattern.startswith("/**", index) and index + 3 == length:
            parts.append("(?:/.*)?")
            index += 3
            continue
        if pattern.startswith("**", index):
            parts.append(".*")
            index += 2
            continue
        if char == "*":
            parts.append("[^/]*")
        elif char == "?":
            parts.append("[^/]")
        elif char == "[":
            close = pattern.find("]", index + 1)
            if close == -1:
                parts.append(re.escape(char))
            else:
                body = pattern[index + 1 : close].replace("\\", "\\\\")
                if body.startswith("!"):
                    body = "^" + body[1:]
                parts.append(f"[{body}]")
                index = close + 1
                continue
        else:
            parts.append(re.escape(char))
        index += 1
    return re.compile("".join(parts) + r"\Z")


def path_matches(path: str, pattern: str) -> bool:
    return glob_to_regex(pattern).match(normalize_path(path)) is not None


def matches_any(path: str, patterns: Iterable[str]) -> bool:
    return any(path_matches(path, pattern) for pattern in patterns)


def _rooted(path: str) -> str:
    return "/" + normalize_path(path).lstrip("/")


def is_screen_file(path: str, app_dir: str = "app") -> bool:
    rooted = _rooted(path)
    return f"/{app_dir}/" in rooted and rooted.endswith("/page.tsx")


def is_layout_file(path: str, app_dir: str = "app") -> bool:
    rooted = _rooted(path)
    return f"/{app_dir}/" in rooted and rooted.endswith("/layout.tsx")


def is_component_file(path: str, ui_dir: str = "components") -> bool:
    rooted = _rooted(path)
    return f"/{ui_dir}/" in rooted and rooted.endswith(".tsx")


def is_action_file(path: str) -> bool:
    rooted = _rooted(path)
    return "/actions/" in rooted and rooted.endswith(".ts")


def is_middleware_file(path: str) -> bool:
    return _rooted(path).endswith(("/middleware.ts", "/middleware.tsx"))


def _segments_after_app(path: str, app_dir: str) -> Optional[list[str]]:
    parts = normalize_path(path).split("/")
    if app_dir not in parts[:-1]:
        return None
    return parts[parts.index(app_dir) + 1 : -1]


def infer_route_from_path(path: str, app_dir: str = "app") -> Optional[str]:
    """Route of a page file, keeping dynamic segments and dropping ``(groups)``.

    ``apps/web/app/[locale]/(dashboard)/[orgSlug]/page.tsx`` gives
    ``/[locale]/[orgSlug]``. Non-page files give None.
    """
    normalized = normalize_path(path)
    if not _PAGE_FILE.search(normalized):
        return None
    rooted = "/" + normalized.lstrip("/")
    marker = f"/{app_dir}/"
    position = rooted.find(marker)
    if position == -1:
        return None
    route_part = _PAGE_FILE.sub("", rooted[position + len(marker) :])
    segments = [segment for segment in route_part.split("/") if segment and not segment.startswith("(")]
    return "/" + "/".join(segments)


def normalize_route(route: str) -> str:
    normalized = route if route.startswith("/") else "/" + route
    normalized = re.sub(r"/+", "/", normalized)
    if len(normalized) > 1 and normalized.endswith("/"):
        normalized = normalized[:-1]
    return normalized


def apply_route_params(route: str, params: Mapping[str, str]) -> str:
    result = route
    for placeholder, value in params.items():
        result = result.replace(placeholder, value)
    return result


def _is_convention_segment(segment: str) -> bool:
    return segment == "[locale]" or segment.startswith("(")


def _pascal(word: str) -> str:
    return "".join(part[:1].upper() + part[1:] for part in re.split(r"[-_]", word) if part)


def generate_screen_name(path: str, app_dir: str = "app") -> str:
    """PascalCase screen name derived from the route segments of ``path``.

    ``app/[locale]/posts/[id]/page.tsx`` gives ``PostsIdScreen``; a page at
    the app root gives ``HomeScreen`` and a file outside the app directory
    gives ``UnknownScreen``.
    """
    segments = _segments_after_app(path, app_dir)
    if segments is None:
        return "UnknownScreen"
    meaningful = [segment for segment in segments if not _is_convention_segment(segment)]
    if not meaningful:
        return "HomeScreen"
    words = []
    for segment in meaningful:
        if segment.startswith("[") and segment.endswith("]"):
            segment = segment[1:-1].lstrip(".")
        words.append(_pascal(segment))
    return "".join(words) + "Screen"


def generate_route(path: str, app_dir: str = "app") -> str:
    segments = _segments_after_app(path, app_dir)
    if segments is None:
        return "/"
    meaningful = [segment for segment in segments if not _is_convention_segment(segment)]
    return "/" + "/".join(meaningful)


def extract_module_name(path: str) -> str:
    """Nearest meaningful directory name of ``path``.

    Route groups contribute their inner name, dynamic segments are skipped
    and framework directories (``app``, ``lib``, ``components`` ...) are
    passed over. Falls back to the file stem.
    """
    segments = normalize_path(path).split("/")
    file_name = _SOURCE_SUFFIX.sub("", segments[-1])
    for directory in reversed(segments[:-1]):
        if directory.startswith("(") and directory.endswith(")"):
            return directory[1:-1]
        if directory.startswith("[") and directory.endswith("]"):
            continue
        if directory and directory.lower() not in _MODULE_SKIP_DIRS:
            return directory
    return file_name


def infer_action_type(path: str) -> Optional[str]:
    rooted = _rooted(path)
    if "/actions/crud/" in rooted:
        return "CRUD"
    if "/actions/domain/" in rooted:
        return "Domain"
    return None


def infer_app_from_path(path: str) -> Optional[str]:
    match = re.match(r"^apps/([^/]+)/", normalize_path(path))
    if not match:
        return None
    return _pascal(match.group(1))


__all__ = [
    "apply_route_params",
    "extract_module_name",
    "generate_route",
    "generate_screen_name",
    "glob_to_regex",
    "infer_action_type",
    "infer_app_from_path",
    "infer_route_from_path",
    "is_action_file",
    "is_component_file",
    "is_layout_file",
    "is_middleware_file",
    "is_screen_file",
    "matches_any",
    "normalize_path",
    "normalize_route",
    "path_matches",
]
