# json_value.py
# Tree model produced by the FSM parser and consumed by the pretty-printer.
#
# =============================================================================
#  VALUE MODEL: A CLOSED TAGGED UNION
# =============================================================================
#
# Seven variants, one per JSON kind. Every variant is a frozen dataclass so
# equality and repr are structural. Containers own their children outright;
# the grammar cannot produce sharing or cycles.
# =============================================================================

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Tuple

INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1


class Value:
    """Base class for the seven JSON variants below; each variant defines to_python()."""

    __slots__ = ()

    @property
    def is_container(self) -> bool:
        return isinstance(self, (Object, Array))


# ---------------------------------------------------------------------------
# SCALARS
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class Integer(Value):
    value: int

    def to_python(self) -> int:
        return self.value


@dataclass(frozen=True)
class Float(Value):
    value: float

    def to_python(self) -> float:
        return self.value


@dataclass(frozen=True)
class Text(Value):
    value: str

    def to_python(self) -> str:
        return self.value


@dataclass(frozen=True)
class Boolean(Value):
    value: bool

    def to_python(self) -> bool:
        return self.value


@dataclass(frozen=True)
class Null(Value):
    def to_python(self) -> None:
        return None


# ---------------------------------------------------------------------------
# CONTAINERS
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class Array(Value):
    """Ordered sequence of values. A list handed to the constructor is frozen to a tuple."""

    items: Tuple[Value, ...] = ()

    def __post_init__(self):
        if not isinstance(self.items, tuple):
            object.__setattr__(self, "items", tuple(self.items))

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self):
        return iter(self.items)

    def __getitem__(self, index: int) -> Value:
        return self.items[index]

    def to_python(self) -> list:
        return [item.to_python() for item in self.items]


@dataclass(frozen=True)
class Object(Value):
    """
    Mapping from key text to value.

    Equality follows dict equality, so member order never matters. The members
    are copied into a read-only mapping proxy on construction.
    """

    members: Mapping[str, Value] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "members", MappingProxyType(dict(self.members)))

    def __eq__(self, other):
        if not isinstance(other, Object):
            return NotImplemented
        return dict(self.members) == dict(other.members)

    def __hash__(self):
        return hash(frozenset(self.members.items()))

    def __len__(self) -> int:
        return len(self.members)

    def __contains__(self, key: str) -> bool:
        return key in self.members

    def __getitem__(self, key: str) -> Value:
        return self.members[key]

    def keys(self):
        return self.members.keys()

    def items(self):
        return self.members.items()

    def to_python(self) -> dict:
        return {key: value.to_python() for key, value in self.members.items()}


# ---------------------------------------------------------------------------
# CONVERSION FROM NATIVE DATA
# ---------------------------------------------------------------------------
def from_python(obj: Any) -> Value:
    """
    Build a Value tree from native Python data.

    bool is tested before int since bool is an int subclass. Integers outside
    the signed 64-bit range are refused rather than silently widened.
    """
    if obj is None:
        return Null()
    if isinstance(obj, bool):
        return Boolean(obj)
    if isinstance(obj, int):
        if not INT64_MIN <= obj <= INT64_MAX:
            raise ValueError(f"integer {obj} does not fit in 64 bits")
        return Integer(obj)
    if isinstance(obj, float):
        return Float(obj)
    if isinstance(obj, str):
        return Text(obj)
    if isinstance(obj, (list, tuple)):
        return Array(tuple(from_python(item) for item in obj))
    if isinstance(obj, dict):
        members = {}
        for key, item in obj.items():
            if not isinstance(key, str):
                raise TypeError(f"object keys must be str, got {type(key).__name__}")
            members[key] = from_python(item)
        return Object(members)
    raise TypeError(f"cannot convert {type(obj).__name__} to a JSON value")


__all__ = [
    "Value",
    "Integer",
    "Float",
    "Text",
    "Boolean",
    "Null",
    "Array",
    "Object",
    "from_python",
    "INT64_MIN",
    "INT64_MAX",
]
