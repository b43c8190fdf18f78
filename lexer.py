"""
lexer.py - Character classes, escape table and primitive interpretation.

The FSM in json_parser decides *where* a token starts and stops; the helpers
here decide *what* the accumulated characters mean. Failures raise ValueError
with a bare message and the parser attaches the line/column.
"""

import re

from json_value import INT64_MAX, INT64_MIN, Boolean, Float, Integer, Null, Value

# ---------------------------------------------------------------------------
# CHARACTER CLASSES
# ---------------------------------------------------------------------------
WHITESPACE       = frozenset(" \t\r\n")
PRIMITIVE_START  = frozenset("0123456789-tfn")
OPENERS          = frozenset("{[")

# ---------------------------------------------------------------------------
# ESCAPE TABLE
# ---------------------------------------------------------------------------
ESCAPES = {
    "b":  "\b",
    "f":  "\f",
    "n":  "\n",
    "t":  "\t",
    "r":  "\r",
    "\\": "\\",
    '"':  '"',
}

# ---------------------------------------------------------------------------
# NUMBER SHAPES
# ---------------------------------------------------------------------------
# int() and float() accept spellings JSON does not (" 1", "+1", "1_0", "nan",
# "inf"), so the raw text is shape-checked before conversion.
_INTEGER_RE = re.compile(r"-?[0-9]+")
_FLOAT_RE   = re.compile(r"-?[0-9]+(?:\.[0-9]+)?(?:[eE][+-]?[0-9]+)?")

_KEYWORDS = {
    "null":  Null(),
    "true":  Boolean(True),
    "false": Boolean(False),
}


def is_whitespace(ch: str) -> bool:
    return ch in WHITESPACE


def starts_primitive(ch: str) -> bool:
    return ch in PRIMITIVE_START


def resolve_escape(ch: str) -> str:
    """Map the character after a backslash to the character it stands for."""
    try:
        return ESCAPES[ch]
    except KeyError:
        raise ValueError(f"unavailable escape character '\\{ch}'") from None


def interpret_primitive(raw: str) -> Value:
    """
    Turn the raw text of a number or keyword into a Value.

    Order matters: keywords first, then the leading-zero guard, then a signed
    64-bit integer, then a double. Integer literals that overflow 64 bits fall
    through to Float.
    """
    keyword = _KEYWORDS.get(raw)
    if keyword is not None:
        return keyword
    if raw.startswith("00"):
        raise ValueError(f"too many leading zeros in '{raw}'")
    if _INTEGER_RE.fullmatch(raw):
        number = int(raw)
        if INT64_MIN <= number <= INT64_MAX:
            return Integer(number)
    if _FLOAT_RE.fullmatch(raw):
        return Float(float(raw))
    raise ValueError(f"unparsable primitive '{raw}'")


__all__ = [
    "WHITESPACE",
    "PRIMITIVE_START",
    "OPENERS",
    "ESCAPES",
    "is_whitespace",
    "starts_primitive",
    "resolve_escape",
    "interpret_primitive",
]
