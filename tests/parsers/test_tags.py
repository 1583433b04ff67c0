"""Tests for doc-block tag parsing."""

from __future__ import annotations

from docmap.parsers.tags import (
    ErrorCode,
    ListEntry,
    find_preceding_comment,
    parse_comment_block,
    parse_list,
)


def test_parse_list_trims_and_drops_empty_tokens() -> None:
    assert parse_list("Button,  Card ,Dialog") == ["Button", "Card", "Dialog"]
    assert parse_list("Button,,Card,") == ["Button", "Card"]
    assert parse_list("") == []
    assert parse_list(None) == []


def test_parse_list_collapses_duplicates() -> None:
    assert parse_list("Card, Button, Card") == ["Card", "Button"]


def test_parse_screen_block() -> None:
    block = """/**
     * Shows the dashboard.
     *
     * @screen DashboardScreen
     * @route /dashboard
     * @feature Dashboard
     * @usedComponents Card, Chart
     * @usedActions getStats
     */"""
    parsed = parse_comment_block(block)

    assert parsed.description == "Shows the dashboard."
    assert parsed.get_text("screen") == "DashboardScreen"
    assert parsed.get_text("route") == "/dashboard"
    assert parsed.get_text("feature") == "Dashboard"
    assert parsed.get_list("usedComponents") == ["Card", "Chart"]
    assert parsed.get_list("usedActions") == ["getStats"]
    assert parsed.has_structural_tag()


def test_marker_tag_has_no_text_value() -> None:
    parsed = parse_comment_block("/**\n * @serverAction\n * @dbTables posts\n */")
    assert parsed.has("serverAction")
    assert parsed.get_text("serverAction") == ""
    assert parsed.get_list("dbTables") == ["posts"]


def test_comma_list_continues_over_marked_lines() -> None:
    block = "/**\n * @usedComponents Button,\n *   Card, Dialog\n */"
    parsed = parse_comment_block(block)
    assert parsed.get_list("usedComponents") == ["Button", "Card", "Dialog"]


def test_comma_list_accepts_dash_items() -> None:
    block = "/**\n * @usedInScreens\n * - HomeScreen\n * - PostScreen\n */"
    parsed = parse_comment_block(block)
    assert parsed.get_list("usedInScreens", "usedInScreen") == ["HomeScreen", "PostScreen"]


def test_repeated_list_tags_are_concatenated() -> None:
    block = "/**\n * @usedComponents Button\n * @usedComponents Card, Button\n */"
    parsed = parse_comment_block(block)
    assert parsed.get_list("usedComponents") == ["Button", "Card"]


def test_dash_list_and_error_codes() -> None:
    block = """/**
     * @dbTable posts
     * @columns
     * - id: uuid (primary key)
     * - title: text
     * @errorCodes
     * - NOT_FOUND: Post does not exist (404)
     * - FORBIDDEN: Not allowed
     */"""
    parsed = parse_comment_block(block)

    assert parsed.tags["columns"] == [
        ListEntry(key="id", value="uuid", meta="primary key"),
        ListEntry(key="title", value="text"),
    ]
    assert parsed.tags["errorCodes"] == [
        ErrorCode(code="NOT_FOUND", description="Post does not exist", status=404),
        ErrorCode(code="FORBIDDEN", description="Not allowed"),
    ]


def test_param_tags() -> None:
    block = "/**\n * @param {string} id - Post identifier\n * @param limit\n * @throws {Error} When missing\n */"
    parsed = parse_comment_block(block)

    first, second = parsed.tags["param"]
    assert (first.name, first.type, first.description) == ("id", "string", "Post identifier")
    assert (second.name, second.type, second.description) == ("limit", None, "")
    thrown = parsed.tags["throws"][0]
    assert thrown.type == "Error"
    assert thrown.description == "When missing"


def test_unknown_tags_are_kept_verbatim() -> None:
    parsed = parse_comment_block("/**\n * @customThing some value\n */")
    assert parsed.extra == {"customThing": "some value"}
    assert parsed.get_text("customThing") == "some value"


def test_description_tag_used_when_no_free_text() -> None:
    parsed = parse_comment_block("/**\n * @component Card\n * @description Displays a card.\n */")
    assert parsed.description == "Displays a card."


def test_single_line_block() -> None:
    parsed = parse_comment_block("/** @screen HomeScreen */")
    assert parsed.get_text("screen") == "HomeScreen"


def test_malformed_block_yields_empty_result() -> None:
    assert parse_comment_block("/** @screen Broken").is_empty
    assert parse_comment_block("// @screen Nope").is_empty


def test_find_preceding_comment_requires_adjacency() -> None:
    content = "/** doc */\n\nexport function a() {}\n/** other */\nconst x = 1;\nexport function b() {}"
    block, start = find_preceding_comment(content, content.index("export function a"))
    assert block == "/** doc */"
    assert start == 0

    assert find_preceding_comment(content, content.index("export function b")) == (None, None)


def test_blank_marker_line_ends_list_tag() -> None:
    block = (
        "/**\n"
        " * @usedComponents Button\n"
        " *\n"
        " * Renders the posts list for the signed-in user.\n"
        " */"
    )
    parsed = parse_comment_block(block)
    assert parsed.get_list("usedComponents") == ["Button"]
    assert parsed.description == "Renders the posts list for the signed-in user."


def test_identifier_tags_keep_to_their_own_line() -> None:
    block = "/**\n * @screen PostsScreen\n * Lists posts.\n * @route /posts\n */"
    parsed = parse_comment_block(block)
    assert parsed.get_text("screen") == "PostsScreen"
    assert parsed.get_text("route") == "/posts"
    assert parsed.description == "Lists posts."


def test_example_tag_keeps_blank_lines() -> None:
    block = "/**\n * @example\n * const a = 1;\n *\n * const b = 2;\n */"
    parsed = parse_comment_block(block)
    assert parsed.tags["example"] == "const a = 1;\n\nconst b = 2;"
