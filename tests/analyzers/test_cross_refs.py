"""Tests for reverse-edge derivation and edge consistency checks."""

from __future__ import annotations

from docmap.analyzers.cross_refs import check_edge_consistency, merge_reverse_references
from docmap.analyzers.feature_graph import build_feature_graph
from docmap.models import DeclarationRecord


def _record(kind: str, name: str, **extra: object) -> DeclarationRecord:
    return DeclarationRecord(kind=kind, name=name, path=f"src/{name}.ts", **extra)


def test_reverse_references_are_derived() -> None:
    records = [
        _record("screen", "HomeScreen", used_components=["Card"], used_actions=["load"]),
        _record("component", "Card", used_components=["Icon"], used_in_screens=["Legacy"]),
        _record("component", "Icon"),
        _record("action", "load", db_tables=["posts"]),
        _record("table", "posts"),
    ]
    merged = {record.name: record for record in merge_reverse_references(records)}

    assert merged["Card"].used_in_screens == ["Legacy", "HomeScreen"]
    assert merged["Icon"].used_in_components == ["Card"]
    assert merged["load"].used_in_screens == ["HomeScreen"]
    assert merged["posts"].used_in_actions == ["load"]


def test_merge_does_not_mutate_input_or_add_duplicates() -> None:
    card = _record("component", "Card", used_in_screens=["HomeScreen"], used_components=["Card"])
    screen = _record("screen", "HomeScreen", used_components=["Card"])
    merged = merge_reverse_references([screen, card])

    assert merged[1].used_in_screens == ["HomeScreen"]
    assert merged[1].used_in_components == []
    assert merged[1] is not card
    assert card.used_in_screens == ["HomeScreen"]


def test_edge_consistency_reports_dangling_and_one_way_edges() -> None:
    graph = build_feature_graph(
        [
            _record("screen", "HomeScreen", feature="Home", used_components=["Card", "Ghost"]),
            _record("component", "Card", feature="UI"),
            _record("action", "save", db_tables=["posts"]),
            _record("table", "posts", used_in_actions=["save"]),
        ]
    )
    issues = check_edge_consistency(graph)

    assert [(issue.kind, issue.target) for issue in issues] == [
        ("missing-reverse", "Card"),
        ("missing-target", "Ghost"),
    ]
    assert issues[0].message == "component Card does not declare being used by screen HomeScreen"
    assert issues[1].message == "screen HomeScreen references unknown component Ghost"
    assert issues[1].path == "src/HomeScreen.ts"


def test_consistent_graph_has_no_issues() -> None:
    records = merge_reverse_references(
        [
            _record("screen", "HomeScreen", used_components=["Card"]),
            _record("component", "Card"),
        ]
    )
    assert check_edge_consistency(build_feature_graph(records)) == []
