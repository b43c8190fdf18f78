"""
json_pretty.py - Indented re-serializer for Value trees.

Depth-first walk over an Object or Array root. Output shape:

    {
      "key": 1,
      "list": [
        true,
        null
      ]
    }

The walk only reads the tree, so one tree may be rendered from several
threads at once.
"""

import math
from typing import Iterator, List, Optional, TextIO, Tuple

from json_value import Array, Boolean, Float, Integer, Null, Object, Text, Value

DEFAULT_INDENT = "  "

# (remaining (index, (prefix, child)) pairs, depth, closing bracket)
_Frame = Tuple[Iterator[Tuple[int, Tuple[str, Value]]], int, str]


class NotAContainerError(ValueError):
    """Raised when the root handed to the printer is a scalar."""


def _escape(text: str) -> str:
    # Only the two characters that would end the string early; the parser
    # takes every other character, newlines included, literally.
    return text.replace("\\", "\\\\").replace('"', '\\"')


def _scalar(value: Value) -> str:
    if isinstance(value, Text):
        return f'"{_escape(value.value)}"'
    if isinstance(value, Boolean):
        return "true" if value.value else "false"
    if isinstance(value, Null):
        return "null"
    if isinstance(value, Integer):
        return str(value.value)
    if isinstance(value, Float):
        # 1e999 overflows back to inf on re-parse
        if math.isinf(value.value):
            return "1e999" if value.value > 0 else "-1e999"
        return repr(value.value)
    raise TypeError(f"not a JSON scalar: {value!r}")


def _open(value: Value, depth: int, out: List[str]) -> Optional[_Frame]:
    """Emit a container's opener. Returns its frame, or None when it is empty."""
    if isinstance(value, Object):
        opener, closer = "{", "}"
        children = [(f'"{_escape(k)}": ', v) for k, v in value.members.items()]
    else:
        opener, closer = "[", "]"
        children = [("", v) for v in value.items]

    if not children:
        out.append(opener + closer)
        return None
    out.append(opener)
    return enumerate(children), depth, closer


def _render(root: Value, unit: str, out: List[str]) -> None:
    # Explicit frame stack instead of recursion: the parser accepts any
    # nesting depth, so the printer must too.
    frames: List[_Frame] = []
    frame = _open(root, 0, out)
    if frame is not None:
        frames.append(frame)

    while frames:
        children, depth, closer = frames[-1]
        step = next(children, None)
        if step is None:
            frames.pop()
            out.append("\n" + unit * depth + closer)
            continue

        i, (prefix, child) = step
        out.append(",\n" if i else "\n")
        out.append(unit * (depth + 1) + prefix)
        if child.is_container:
            frame = _open(child, depth + 1, out)
            if frame is not None:
                frames.append(frame)
        else:
            out.append(_scalar(child))


def render(value: Value, indent_unit: str = DEFAULT_INDENT) -> str:
    """Render an Object or Array root as indented text, without a trailing newline."""
    if not isinstance(value, (Object, Array)):
        raise NotAContainerError("expected a JSON object or array")
    out: List[str] = []
    _render(value, indent_unit, out)
    return "".join(out)


def write(value: Value, sink: TextIO, indent_unit: str = DEFAULT_INDENT) -> None:
    """Render `value` to a text sink followed by a newline."""
    sink.write(render(value, indent_unit))
    sink.write("\n")


__all__ = ["render", "write", "NotAContainerError", "DEFAULT_INDENT"]
