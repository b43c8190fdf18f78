# json_parser.py
# Single-pass, character-driven JSON parser and command-line front end.
#
# =============================================================================
#  PARSER IMPLEMENTATION: FINITE-STATE MACHINE OVER A BUILDER STACK
# =============================================================================
#
# The parser never recurses. Each character is dispatched on a two-axis state
# (container context x sub-state) and partially assembled values live on an
# explicit builder stack:
#
#   OpenMarker(kind)       a container is being assembled
#   PendingKey(text)       an object key waiting for its value
#   PendingValue(value)    a finished value waiting to be packed
#   PendingEntry(k, v)     a key/value pair waiting for its object to close
#
# "Packing" pops entries back to an open marker and replaces them with one
# finished value. The container context is a cache of the nearest open marker
# and is recomputed from the stack whenever a container closes, so nesting
# depth is bounded by memory rather than by the interpreter's recursion limit.
#
# Every failure, whether malformed input or a broken stack invariant, raises
# ParseError carrying the 1-based line and column of the offending character.
# =============================================================================

import argparse
import logging
import sys
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional, Tuple, Union

import json_pretty
import lexer
from json_value import Array, Object, Text, Value

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# CONSTANTS AND TUNABLES
# ---------------------------------------------------------------------------
DEPTH_LIMIT_DEFAULT = None      # None = bounded by memory only
LOG_FORMAT          = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# ---------------------------------------------------------------------------
# ERRORS
# ---------------------------------------------------------------------------
class ParseError(SyntaxError):
    """
    The only error the parser raises.

    Subclasses SyntaxError so callers that already catch SyntaxError keep
    working; line/column are mirrored onto lineno/offset for the same reason.
    """

    def __init__(self, line: int, column: int, message: str):
        super().__init__(message)
        self.line = line
        self.column = column
        self.message = message
        self.lineno = line
        self.offset = column

    def __str__(self) -> str:
        return f"Line[{self.line}], Char[{self.column}]: {self.message}"


# ---------------------------------------------------------------------------
# STATE AXES
# ---------------------------------------------------------------------------
class Context(Enum):
    START    = "start"
    OBJECT   = "object"
    ARRAY    = "array"
    FINISHED = "finished"


class SubState(Enum):
    READY              = "ready"
    EXPECT_KEY         = "expect-key"
    BUILDING_KEY       = "building-key"
    KEY_CLOSED         = "key-closed"
    EXPECT_VALUE       = "expect-value"
    BUILDING_PRIMITIVE = "building-primitive"
    PRIMITIVE_CLOSED   = "primitive-closed"
    BUILDING_STRING    = "building-string"
    STRING_CLOSED      = "string-closed"
    CONTAINER_CLOSED   = "container-closed"


_KEY_STATES   = frozenset({SubState.EXPECT_KEY, SubState.BUILDING_KEY, SubState.KEY_CLOSED})
_VALUE_CLOSED = frozenset({SubState.PRIMITIVE_CLOSED, SubState.STRING_CLOSED, SubState.CONTAINER_CLOSED})
_CLOSERS      = {Context.OBJECT: "}", Context.ARRAY: "]"}
_OPENED_BY    = {"{": Context.OBJECT, "[": Context.ARRAY}


# ---------------------------------------------------------------------------
# BUILDER STACK ENTRIES
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class OpenMarker:
    kind: Context


@dataclass(frozen=True)
class PendingValue:
    value: Value


@dataclass(frozen=True)
class PendingKey:
    text: str


@dataclass(frozen=True)
class PendingEntry:
    key: str
    value: Value


Entry = Union[OpenMarker, PendingValue, PendingKey, PendingEntry]


# ---------------------------------------------------------------------------
# STACK OPERATIONS
# ---------------------------------------------------------------------------
# These raise ValueError with a bare message; the parser context turns that
# into a ParseError at the current position.
def context_of(stack: List[Entry]) -> Context:
    """Context implied by the nearest open marker, FINISHED when none is left."""
    for entry in reversed(stack):
        if isinstance(entry, OpenMarker):
            return entry.kind
    return Context.FINISHED


def pack_entry(stack: List[Entry]) -> None:
    """Pair the PendingValue on top with the PendingKey beneath it."""
    if not stack:
        raise ValueError("builder stack is empty, expected a value")
    top = stack.pop()
    if not isinstance(top, PendingValue):
        raise ValueError(f"expected a value on the builder stack, found {type(top).__name__}")
    if not stack:
        raise ValueError("builder stack is empty, expected a key")
    below = stack.pop()
    if not isinstance(below, PendingKey):
        raise ValueError(f"expected a key on the builder stack, found {type(below).__name__}")
    stack.append(PendingEntry(below.text, top.value))


def pack_object(stack: List[Entry]) -> None:
    """Pop entries back to the object's open marker and push the finished Object."""
    entries: List[PendingEntry] = []
    while stack:
        entry = stack.pop()
        if isinstance(entry, PendingEntry):
            entries.append(entry)
        elif isinstance(entry, OpenMarker) and entry.kind is Context.OBJECT:
            members = {}
            # Popped newest-first; replay in source order so the last duplicate wins.
            for pair in reversed(entries):
                members[pair.key] = pair.value
            stack.append(PendingValue(Object(members)))
            return
        else:
            raise ValueError("unprocessed leftovers on the builder stack while closing an object")
    raise ValueError("no open object on the builder stack")


def pack_array(stack: List[Entry]) -> None:
    """Pop entries back to the array's open marker and push the finished Array."""
    items: List[Value] = []
    while stack:
        entry = stack.pop()
        if isinstance(entry, PendingValue):
            items.append(entry.value)
        elif isinstance(entry, OpenMarker):
            if entry.kind is not Context.ARRAY:
                raise ValueError("found an open object marker while closing an array")
            items.reverse()
            stack.append(PendingValue(Array(tuple(items))))
            return
        elif isinstance(entry, PendingKey):
            raise ValueError("a key cannot appear inside an array")
        else:
            raise ValueError("an entry cannot appear inside an array")
    raise ValueError("no open array on the builder stack")


# ---------------------------------------------------------------------------
# PARSER CONTEXT
# ---------------------------------------------------------------------------
class _ParserContext:
    """
    All mutable state of one parse() call.

    Built fresh per call and dropped afterwards, so concurrent parses on
    separate inputs share nothing.
    """

    def __init__(self, max_depth: Optional[int]):
        self.stack: List[Entry] = []
        self.context = Context.START
        self.sub = SubState.READY
        self.pending_key: Optional[List[str]] = None
        self.pending_value: Optional[List[str]] = None
        self.escape_active = False
        self.depth = 0
        self.max_depth = max_depth
        self.line = 1
        self.column = 0
        self._after_newline = False
        self._trace = logger.isEnabledFor(logging.DEBUG)

    # -- diagnostics ---------------------------------------------------------
    def _error(self, message: str) -> ParseError:
        return ParseError(self.line, self.column, message)

    def _end_position(self) -> Tuple[int, int]:
        if self._after_newline:
            return self.line + 1, 1
        return self.line, self.column + 1

    def _advance(self, ch: str) -> None:
        if self._after_newline:
            self.line += 1
            self.column = 1
        else:
            self.column += 1
        self._after_newline = ch == "\n"

    def _mismatch(self, ch: str) -> ParseError:
        return self._error(f"unexpected '{ch}' inside an {self.context.value}")

    def _pack(self, operation) -> None:
        try:
            operation(self.stack)
        except ValueError as exc:
            raise self._error(str(exc)) from None

    # -- top-level dispatch --------------------------------------------------
    def feed(self, ch: str) -> None:
        self._advance(ch)
        before = (self.context, self.sub)

        if self.context is Context.OBJECT:
            self._on_object(ch)
        elif self.context is Context.ARRAY:
            self._on_array(ch)
        elif self.context is Context.START:
            self._on_start(ch)
        else:
            self._on_finished(ch)

        if self._trace and (self.context, self.sub) != before:
            logger.debug(
                "Line[%d], Char[%d] %r: %s/%s -> %s/%s (stack depth %d)",
                self.line, self.column, ch,
                before[0].value, before[1].value,
                self.context.value, self.sub.value,
                len(self.stack),
            )

    def _on_start(self, ch: str) -> None:
        if lexer.is_whitespace(ch):
            return
        if ch in lexer.OPENERS:
            self._open(_OPENED_BY[ch])
            return
        raise self._error("expected '{' or '['")

    def _on_finished(self, ch: str) -> None:
        if lexer.is_whitespace(ch):
            return
        if ch in lexer.OPENERS:
            raise self._error("more than one JSON structure found")
        raise self._error("trailing character after root")

    def _on_object(self, ch: str) -> None:
        sub = self.sub
        if sub is SubState.BUILDING_KEY or sub is SubState.BUILDING_STRING:
            self._build_text(ch)
            return
        if sub is SubState.BUILDING_PRIMITIVE:
            self._build_primitive(ch)
            return
        if lexer.is_whitespace(ch):
            return

        if sub is SubState.READY or sub is SubState.EXPECT_KEY:
            if ch == '"':
                self.pending_key = []
                self.sub = SubState.BUILDING_KEY
            elif ch == "}" and sub is SubState.READY:
                self._close()
            elif ch == "}":
                raise self._error("expected a string key after ','")
            elif ch == "]":
                raise self._mismatch(ch)
            else:
                raise self._error("expected a string key")
        elif sub is SubState.KEY_CLOSED:
            if ch != ":":
                raise self._error("expected ':' after key")
            self.sub = SubState.EXPECT_VALUE
        elif sub is SubState.EXPECT_VALUE:
            self._begin_value(ch)
        elif sub in _VALUE_CLOSED:
            self._after_value(ch)
        else:
            raise self._error(f"state {sub.value} is not valid inside an object")

    def _on_array(self, ch: str) -> None:
        sub = self.sub
        if sub in _KEY_STATES:
            raise self._error(f"state {sub.value} is not allowed inside an array")
        if sub is SubState.BUILDING_STRING:
            self._build_text(ch)
            return
        if sub is SubState.BUILDING_PRIMITIVE:
            self._build_primitive(ch)
            return
        if lexer.is_whitespace(ch):
            return

        if sub is SubState.READY or sub is SubState.EXPECT_VALUE:
            if ch == "]" and sub is SubState.READY:
                self._close()
            elif ch == "]":
                raise self._error("expected a value after ','")
            else:
                self._begin_value(ch)
        elif sub in _VALUE_CLOSED:
            self._after_value(ch)
        else:
            raise self._error(f"state {sub.value} is not valid inside an array")

    # -- containers ----------------------------------------------------------
    def _open(self, kind: Context) -> None:
        if self.max_depth is not None and self.depth >= self.max_depth:
            raise self._error("depth limit exceeded")
        self.stack.append(OpenMarker(kind))
        self.depth += 1
        self.context = kind
        self.sub = SubState.READY

    def _close(self) -> None:
        self._pack(pack_object if self.context is Context.OBJECT else pack_array)
        self.depth -= 1
        self.context = context_of(self.stack)
        if self.context is Context.OBJECT:
            # The finished container is the value of the key beneath it.
            self._pack(pack_entry)
        self.sub = SubState.CONTAINER_CLOSED

    # -- values --------------------------------------------------------------
    def _begin_value(self, ch: str) -> None:
        if ch in lexer.OPENERS:
            self._open(_OPENED_BY[ch])
        elif ch == '"':
            self.pending_value = []
            self.sub = SubState.BUILDING_STRING
        elif lexer.starts_primitive(ch):
            self.pending_value = [ch]
            self.sub = SubState.BUILDING_PRIMITIVE
        elif ch in "}]" and ch != _CLOSERS[self.context]:
            raise self._mismatch(ch)
        else:
            raise self._error("expected a value: number, string, true, false, null, object or array")

    def _complete_value(self, value: Value, closed: SubState) -> None:
        self.stack.append(PendingValue(value))
        if self.context is Context.OBJECT:
            self._pack(pack_entry)
        self.sub = closed

    def _after_value(self, ch: str) -> None:
        closer = _CLOSERS[self.context]
        if ch == ",":
            self._next_slot()
        elif ch == closer:
            self._close()
        elif ch in "}]":
            raise self._mismatch(ch)
        else:
            raise self._error(f"expected ',' or '{closer}'")

    def _next_slot(self) -> None:
        self.sub = SubState.EXPECT_KEY if self.context is Context.OBJECT else SubState.EXPECT_VALUE

    def _build_text(self, ch: str) -> None:
        building_key = self.sub is SubState.BUILDING_KEY
        if self.escape_active:
            try:
                ch = lexer.resolve_escape(ch)
            except ValueError as exc:
                raise self._error(str(exc)) from None
            self.escape_active = False
        elif ch == "\\":
            self.escape_active = True
            return
        elif ch == '"':
            if building_key:
                self.stack.append(PendingKey("".join(self.pending_key)))
                self.pending_key = None
                self.sub = SubState.KEY_CLOSED
            else:
                text = "".join(self.pending_value)
                self.pending_value = None
                self._complete_value(Text(text), SubState.STRING_CLOSED)
            return

        if building_key:
            self.pending_key.append(ch)
        else:
            self.pending_value.append(ch)

    def _build_primitive(self, ch: str) -> None:
        closer = _CLOSERS[self.context]
        if ch == "," or ch == closer or lexer.is_whitespace(ch):
            raw = "".join(self.pending_value)
            self.pending_value = None
            try:
                value = lexer.interpret_primitive(raw)
            except ValueError as exc:
                raise self._error(str(exc)) from None
            self._complete_value(value, SubState.PRIMITIVE_CLOSED)
            if ch == ",":
                self._next_slot()
            elif ch == closer:
                self._close()
        elif ch in "}]":
            raise self._mismatch(ch)
        else:
            self.pending_value.append(ch)

    # -- termination ---------------------------------------------------------
    def finish(self) -> Value:
        line, column = self._end_position()
        if self.context is not Context.FINISHED:
            raise ParseError(line, column, "incomplete structure")
        if len(self.stack) != 1:
            raise ParseError(line, column, "more than one JSON structure found")
        entry = self.stack[0]
        if not isinstance(entry, PendingValue):
            raise ParseError(line, column, "unexpected final entries on the builder stack")
        if not entry.value.is_container:
            raise ParseError(line, column, "unexpected root value type")
        return entry.value


# ---------------------------------------------------------------------------
# PUBLIC API
# ---------------------------------------------------------------------------
def parse(text: Iterable[str], *, max_depth: Optional[int] = DEPTH_LIMIT_DEFAULT) -> Value:
    """
    Parse JSON text into a Value tree.

    `text` is a str or any iterable of single characters. The root must be an
    object or an array and the whole input must be consumed. Raises ParseError
    at the first malformed character; nothing partial is returned.
    """
    ctx = _ParserContext(max_depth)
    logger.debug("parse start (max_depth=%s)", max_depth)
    for ch in text:
        ctx.feed(ch)
    root = ctx.finish()
    logger.debug("parse finished at Line[%d], Char[%d]: %s root", ctx.line, ctx.column, type(root).__name__)
    return root


# ---------------------------------------------------------------------------
# CLI ENTRYPOINT
# ---------------------------------------------------------------------------
def _read_input(path: str) -> str:
    if path == "-":
        return sys.stdin.read()
    with open(path, "r", encoding="utf-8") as fh:
        return fh.read()


def _cli(argv: List[str]) -> int:
    """
    Parse a JSON file and pretty-print it.

    Exit codes: 0 on success, 1 on ParseError, 2 when the input cannot be read
    (argparse also uses 2 for bad arguments).
    """
    ap = argparse.ArgumentParser(description="FSM JSON parser and pretty-printer")
    ap.add_argument("file", help="JSON file to parse, '-' reads stdin")
    indent = ap.add_mutually_exclusive_group()
    indent.add_argument("--indent", default=json_pretty.DEFAULT_INDENT,
                        help="indent unit for the pretty-printer (default: two spaces)")
    indent.add_argument("--tabs", action="store_true", help="indent with tabs")
    ap.add_argument("--check", action="store_true", help="validate only and print OK")
    ap.add_argument("--debug", action="store_true", help="trace parser state transitions to stderr")
    ap.add_argument("--max-depth", type=int, default=DEPTH_LIMIT_DEFAULT,
                    help="reject containers nested deeper than this")
    args = ap.parse_args(argv)

    if args.debug:
        logging.basicConfig(level=logging.DEBUG, stream=sys.stderr, format=LOG_FORMAT)

    try:
        data = _read_input(args.file)
    except (OSError, UnicodeDecodeError) as exc:
        print(f"error: cannot read {args.file}: {exc}", file=sys.stderr)
        return 2

    try:
        root = parse(data, max_depth=args.max_depth)
    except ParseError as exc:
        print(f"ParseError: {exc}", file=sys.stderr)
        return 1

    if args.check:
        print("OK")
        return 0
    json_pretty.write(root, sys.stdout, "\t" if args.tabs else args.indent)
    return 0


def main() -> int:
    return _cli(sys.argv[1:])


__all__ = [
    "parse",
    "ParseError",
    "Context",
    "SubState",
    "OpenMarker",
    "PendingValue",
    "PendingKey",
    "PendingEntry",
    "context_of",
    "pack_entry",
    "pack_object",
    "pack_array",
    "main",
]

# ---------------------------------------------------------------------------
# MAIN GUARD
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    sys.exit(main())
