"""Tests for the literal-aware source scanner."""

from __future__ import annotations

from docmap.parsers.literals import block_comments, code_mask, count_braces, find_matching_brace


def test_find_matching_brace_skips_braces_in_strings_and_comments() -> None:
    source = 'function f() { const s = "}"; /* } */ // }\n return `${a}`; }'
    open_index = source.index("{")
    assert find_matching_brace(source, open_index) == len(source) - 1


def test_find_matching_brace_returns_none_when_unbalanced() -> None:
    source = "function f() { if (x) { return 1; }"
    assert find_matching_brace(source, source.index("{")) is None


def test_template_interpolation_braces_are_balanced() -> None:
    source = "const f = () => { return `a ${obj({ b: 1 })} c`; }"
    open_index = source.index("{")
    assert find_matching_brace(source, open_index) == len(source) - 1


def test_regex_literal_is_not_code() -> None:
    source = "const re = /[}]/g;\nconst x = { a: 1 };"
    mask = code_mask(source)
    assert mask[source.index("}")] is False
    assert mask[source.index("{ a")] is True


def test_block_comments_reports_spans() -> None:
    source = "/** one */\nconst a = '/* not */';\n/* two */"
    spans = block_comments(source)
    assert [source[start:end] for start, end in spans] == ["/** one */", "/* two */"]


def test_count_braces_reports_net_balance() -> None:
    assert count_braces("if (a) { b({ c: 1 }") == 1
    assert count_braces("} }") == -2
    assert count_braces("const s = '{';") == 0
