"""Runtime values for Mp.

Every value the evaluator produces is one of the dataclasses below. The set
is closed: `Value` names the union and the evaluator dispatches over it with
structural pattern matching. Values are immutable; operations such as
`push` build a new value instead of changing an existing one.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Tuple, Union


@dataclass(frozen=True)
class IntVal:
    value: int

    def __repr__(self) -> str:
        return f"Int({self.value})"


@dataclass(frozen=True)
class FloatVal:
    value: float

    def __repr__(self) -> str:
        return f"Float({self.value!r})"


@dataclass(frozen=True)
class BoolVal:
    value: bool

    def __repr__(self) -> str:
        return f"Bool({self.value})"


@dataclass(frozen=True)
class StrVal:
    value: str

    def __repr__(self) -> str:
        return f"Str({self.value!r})"


@dataclass(frozen=True)
class ArrayVal:
    """Ordered sequence of values. Items are a tuple, so an array never changes
    after construction."""
    items: Tuple['Value', ...] = ()

    def __repr__(self) -> str:
        return f"Array({list(self.items)!r})"


@dataclass(frozen=True)
class ObjectVal:
    """Mapping from names to values. Equality ignores key order."""
    entries: Dict[str, 'Value'] = field(default_factory=dict)

    def __repr__(self) -> str:
        return f"Object({self.entries!r})"


@dataclass(frozen=True)
class NilVal:
    """Absence of a value; the result of statements and empty blocks."""

    def __repr__(self) -> str:
        return 'Nil'


NIL = NilVal()

Number = Union[IntVal, FloatVal]
Value = Union[IntVal, FloatVal, BoolVal, StrVal, ArrayVal, ObjectVal, NilVal]


def make_number(raw: Union[int, float]) -> Number:
    """Wrap a numeric literal payload in the matching Number subvariant."""
    if isinstance(raw, int):
        return IntVal(raw)
    return FloatVal(raw)


def type_name(value: Value) -> str:
    """Return the Mp type name of a runtime value."""
    match value:
        case IntVal():
            return 'Int'
        case FloatVal():
            return 'Float'
        case BoolVal():
            return 'Boolean'
        case StrVal():
            return 'String'
        case ArrayVal():
            return 'Array'
        case ObjectVal():
            return 'Object'
        case NilVal():
            return 'Nil'
    raise TypeError(f"not an Mp value: {value!r}")


def to_string(value: Value) -> str:
    """Convert a value to the text `print` and `toString` produce."""
    match value:
        case IntVal(n):
            return str(n)
        case FloatVal(f):
            return repr(f)
        case BoolVal(b):
            return 'true' if b else 'false'
        case StrVal(s):
            return s
        case ArrayVal(items):
            return '[' + ', '.join(to_string(item) for item in items) + ']'
        case ObjectVal(entries):
            return '{' + ', '.join(f"{k}: {to_string(v)}" for k, v in entries.items()) + '}'
        case NilVal():
            return 'nil'
    raise TypeError(f"not an Mp value: {value!r}")


def inspect(value: Value) -> str:
    """Like `to_string`, but strings are quoted so the REPL echo is unambiguous."""
    match value:
        case StrVal(s):
            escaped = s.replace('\\', '\\\\').replace('"', '\\"').replace('\n', '\\n')
            return f'"{escaped}"'
        case ArrayVal(items):
            return '[' + ', '.join(inspect(item) for item in items) + ']'
        case ObjectVal(entries):
            return '{' + ', '.join(f"{k}: {inspect(v)}" for k, v in entries.items()) + '}'
    return to_string(value)
