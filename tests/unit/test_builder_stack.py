import logging

import pytest

import json_parser as jp
from json_parser import (
    Context,
    OpenMarker,
    PendingEntry,
    PendingKey,
    PendingValue,
    context_of,
    pack_array,
    pack_entry,
    pack_object,
)
from json_value import Array, Integer, Object, Text

OBJ = OpenMarker(Context.OBJECT)
ARR = OpenMarker(Context.ARRAY)


def test_context_of_empty_stack_is_finished():
    assert context_of([]) is Context.FINISHED


def test_context_of_uses_nearest_marker():
    assert context_of([OBJ, PendingKey("a")]) is Context.OBJECT
    assert context_of([OBJ, PendingKey("a"), ARR, PendingValue(Integer(1))]) is Context.ARRAY
    assert context_of([ARR, OBJ]) is Context.OBJECT


def test_context_of_ignores_finished_values():
    assert context_of([PendingValue(Array(()))]) is Context.FINISHED


def test_pack_entry_pairs_key_and_value():
    stack = [OBJ, PendingKey("a"), PendingValue(Integer(1))]
    pack_entry(stack)
    assert stack == [OBJ, PendingEntry("a", Integer(1))]


def test_pack_entry_requires_value_on_top():
    with pytest.raises(ValueError) as ei:
        pack_entry([OBJ, PendingKey("a")])
    assert "expected a value" in str(ei.value)


def test_pack_entry_requires_key_beneath():
    with pytest.raises(ValueError) as ei:
        pack_entry([OBJ, PendingValue(Integer(1))])
    assert "expected a key" in str(ei.value)


def test_pack_entry_on_empty_stack():
    with pytest.raises(ValueError):
        pack_entry([])


def test_pack_object_last_write_wins_in_source_order():
    stack = [
        ARR,
        OBJ,
        PendingEntry("a", Integer(1)),
        PendingEntry("b", Integer(2)),
        PendingEntry("a", Integer(3)),
    ]
    pack_object(stack)
    assert stack == [ARR, PendingValue(Object({"a": Integer(3), "b": Integer(2)}))]
    assert list(stack[-1].value.keys()) == ["a", "b"]


def test_pack_object_rejects_leftovers():
    with pytest.raises(ValueError) as ei:
        pack_object([OBJ, PendingKey("dangling")])
    assert "unprocessed leftovers" in str(ei.value)


def test_pack_object_without_marker():
    with pytest.raises(ValueError):
        pack_object([PendingEntry("a", Integer(1))])


def test_pack_array_restores_source_order():
    stack = [ARR, PendingValue(Integer(1)), PendingValue(Text("two")), PendingValue(Integer(3))]
    pack_array(stack)
    assert stack == [PendingValue(Array([Integer(1), Text("two"), Integer(3)]))]


@pytest.mark.parametrize(
    "stray,message",
    [
        (PendingKey("k"), "a key cannot appear inside an array"),
        (PendingEntry("k", Integer(1)), "an entry cannot appear inside an array"),
        (OBJ, "found an open object marker while closing an array"),
    ],
)
def test_pack_array_rejects_object_material(stray, message):
    with pytest.raises(ValueError) as ei:
        pack_array([ARR, stray])
    assert message in str(ei.value)


def test_parse_error_rendering():
    err = jp.ParseError(3, 7, "boom")
    assert str(err) == "Line[3], Char[7]: boom"
    assert (err.line, err.column, err.message) == (3, 7, "boom")
    assert (err.lineno, err.offset) == (3, 7)


def test_parse_error_is_a_syntax_error():
    with pytest.raises(SyntaxError):
        jp.parse('{"a":1 "b"}')


def test_parse_is_independent_across_calls():
    with pytest.raises(jp.ParseError):
        jp.parse('{"a": [1, 2')
    assert jp.parse('[1]') == Array([Integer(1)])


def test_debug_logging_traces_transitions(caplog):
    caplog.set_level(logging.DEBUG, logger="json_parser")
    jp.parse('[1]')
    messages = [r.getMessage() for r in caplog.records]
    assert any("start/ready -> array/ready" in m for m in messages)
    assert any("array/ready -> array/building-primitive" in m for m in messages)
    assert any("parse finished" in m for m in messages)


def test_no_trace_records_above_debug(caplog):
    caplog.set_level(logging.INFO, logger="json_parser")
    jp.parse('{"a": [true]}')
    assert not caplog.records
