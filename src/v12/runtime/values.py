"""
Runtime value wrappers for the V12 interpreter.

A Value is a closed tagged union over three kinds: integers (BigInt),
text and booleans. Values are immutable; operators build new Values.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Union

from ..bigint import BigInt, parse_integer, from_int, to_decimal_string


class ValueKind(Enum):
    """The kinds of runtime value."""
    INTEGER = "integer"
    TEXT = "text"
    BOOLEAN = "boolean"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Value:
    """
    A runtime value with its kind tag.

    The `data` field holds a BigInt, str or bool according to `type`.
    """
    data: Any
    type: ValueKind

    def __repr__(self) -> str:
        return f"Value({render(self)!r}, {self.type})"


# Convenience constructors

def int_val(n: Union[BigInt, str, int]) -> Value:
    """Create an integer value from a BigInt, decimal text or Python int."""
    if isinstance(n, BigInt):
        return Value(n, ValueKind.INTEGER)
    if isinstance(n, str):
        return Value(parse_integer(n), ValueKind.INTEGER)
    return Value(from_int(n), ValueKind.INTEGER)


def text_val(s: str) -> Value:
    """Create a text value."""
    return Value(str(s), ValueKind.TEXT)


def bool_val(b: bool) -> Value:
    """Create a boolean value."""
    return Value(bool(b), ValueKind.BOOLEAN)


TRUE = bool_val(True)
FALSE = bool_val(False)


def render(value: Value) -> str:
    """
    Render a value to its canonical text.

    Integers print as decimal digits, booleans as true/false and text as-is.
    """
    if value.type is ValueKind.INTEGER:
        return to_decimal_string(value.data)
    elif value.type is ValueKind.BOOLEAN:
        return "true" if value.data else "false"
    elif value.type is ValueKind.TEXT:
        return value.data
    raise ValueError(f"Unknown value kind: {value.type!r}")
