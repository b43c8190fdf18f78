import pytest

import json_parser as jp
from json_value import Array, Integer, Object, Text


def test_invalid_single_escape_reports_position():
    bad = '["\\q"]'
    with pytest.raises(jp.ParseError) as ei:
        jp.parse(bad)
    err = ei.value
    assert "unavailable escape character '\\q'" in str(err)
    # Reported at the escaped character, not at the backslash.
    assert (err.line, err.column) == (1, 4)


def test_invalid_escape_in_key():
    with pytest.raises(jp.ParseError) as ei:
        jp.parse('{"a\\x": 1}')
    assert "unavailable escape character" in ei.value.message
    assert ei.value.column == 5


def test_invalid_escape_on_later_line():
    with pytest.raises(jp.ParseError) as ei:
        jp.parse('[\n"\\q"]')
    assert (ei.value.line, ei.value.column) == (2, 3)


@pytest.mark.parametrize("escape", ["\\u0041", "\\/", "\\0"])
def test_escapes_outside_the_table_are_rejected(escape):
    with pytest.raises(jp.ParseError) as ei:
        jp.parse('["' + escape + '"]')
    assert "unavailable escape character" in ei.value.message


def test_newline_escape_resolves():
    root = jp.parse('["a\\nb"]')
    assert root == Array([Text("a\nb")])
    assert len(root[0].value) == 3


def test_every_supported_escape():
    root = jp.parse(r'["\b\f\n\t\r\\\""]')
    assert root == Array([Text('\b\f\n\t\r\\"')])


def test_escaped_quote_in_key():
    assert jp.parse(r'{"k\"ey": 1}') == Object({'k"ey': Integer(1)})


def test_escaped_backslash_before_closing_quote():
    assert jp.parse(r'["a\\"]') == Array([Text("a\\")])


def test_raw_newline_inside_string_is_kept():
    assert jp.parse('["a\nb"]') == Array([Text("a\nb")])


def test_delimiters_inside_strings_are_text():
    assert jp.parse('["a,b]}{[:"]') == Array([Text("a,b]}{[:")])


def test_whitespace_inside_strings_is_preserved():
    assert jp.parse('{" k ": "  a  b "}') == Object({" k ": Text("  a  b ")})


def test_empty_strings():
    assert jp.parse('{"": ""}') == Object({"": Text("")})


def test_non_ascii_text():
    assert jp.parse('["héllo, 世界"]') == Array([Text("héllo, 世界")])


def test_unterminated_string_is_incomplete():
    with pytest.raises(jp.ParseError) as ei:
        jp.parse('["abc')
    assert ei.value.message == "incomplete structure"


def test_trailing_backslash_is_incomplete():
    with pytest.raises(jp.ParseError) as ei:
        jp.parse('["abc\\')
    assert ei.value.message == "incomplete structure"
