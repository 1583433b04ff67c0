"""Tests for path conventions: globs, roles, routes and names."""

from __future__ import annotations

import pytest

from docmap.paths import (
    apply_route_params,
    extract_module_name,
    generate_route,
    generate_screen_name,
    infer_action_type,
    infer_app_from_path,
    infer_route_from_path,
    is_action_file,
    is_component_file,
    is_screen_file,
    normalize_route,
    path_matches,
)


@pytest.mark.parametrize(
    ("path", "pattern", "expected"),
    [
        ("app/page.tsx", "**/app/**/page.tsx", True),
        ("apps/web/app/posts/[id]/page.tsx", "**/app/**/page.tsx", True),
        ("components/ui/button.tsx", "**/components/ui/**", True),
        ("src/components/card.tsx", "**/components/*.tsx", True),
        ("src/components/ui/card.tsx", "**/components/*.tsx", False),
        ("node_modules/pkg/index.js", "**/node_modules/**", True),
        ("lib/util.ts", "*.ts", False),
    ],
)
def test_path_matches(path: str, pattern: str, expected: bool) -> None:
    assert path_matches(path, pattern) is expected


def test_role_predicates() -> None:
    assert is_screen_file("app/posts/page.tsx")
    assert not is_screen_file("app/posts/layout.tsx")
    assert is_screen_file("src/pages/posts/page.tsx", app_dir="pages")
    assert is_component_file("components/card.tsx")
    assert not is_component_file("components/card.ts")
    assert is_action_file("apps/web/actions/crud/posts.ts")


def test_generate_screen_name() -> None:
    assert generate_screen_name("app/[locale]/posts/[id]/page.tsx") == "PostsIdScreen"
    assert generate_screen_name("app/(marketing)/about-us/page.tsx") == "AboutUsScreen"
    assert generate_screen_name("app/page.tsx") == "HomeScreen"
    assert generate_screen_name("src/page.tsx") == "UnknownScreen"


def test_generate_route() -> None:
    assert generate_route("app/posts/[id]/page.tsx") == "/posts/[id]"
    assert generate_route("app/[locale]/(dashboard)/settings/page.tsx") == "/settings"
    assert generate_route("app/page.tsx") == "/"


def test_infer_route_keeps_dynamic_segments() -> None:
    assert infer_route_from_path("apps/web/app/[locale]/(dashboard)/[orgSlug]/page.tsx") == "/[locale]/[orgSlug]"
    assert infer_route_from_path("app/posts/layout.tsx") is None


def test_route_helpers() -> None:
    assert normalize_route("posts//new/") == "/posts/new"
    assert normalize_route("/") == "/"
    assert apply_route_params("/[locale]/posts/[id]", {"[locale]": "en", "[id]": "42"}) == "/en/posts/42"


def test_module_and_app_inference() -> None:
    assert extract_module_name("apps/web/app/(billing)/invoices/page.tsx") == "invoices"
    assert extract_module_name("apps/web/app/(billing)/[id]/page.tsx") == "billing"
    assert extract_module_name("lib/format.ts") == "format"
    assert infer_app_from_path("apps/admin-portal/app/page.tsx") == "AdminPortal"
    assert infer_app_from_path("app/page.tsx") is None
    assert infer_action_type("actions/domain/publish.ts") == "Domain"
    assert infer_action_type("actions/misc.ts") is None
