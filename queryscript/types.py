"""Runtime values for QueryScript.

The value union is closed:

* None      -> `NoneVal()`
* Number    -> Python `float`
* String    -> Python `str`
* List      -> `ListVal`
* Native    -> `NativeFunction` (see `builtin_function`)

All values are immutable, so binding a value to several names never lets
one binding observe a change made through another.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Tuple

from .builtin_function import NativeFunction


@dataclass(frozen=True)
class NoneVal:
    """Marker object for the QueryScript `None` value."""

    def __repr__(self) -> str:
        return 'None'


@dataclass(frozen=True)
class ListVal:
    """An ordered sequence of values."""
    items: Tuple[Any, ...] = ()

    def __repr__(self) -> str:
        return f"List({list(self.items)!r})"

    def __len__(self) -> int:
        return len(self.items)


def is_number(value: Any) -> bool:
    # bool is a subclass of int; it never reaches scripts as a number
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def type_name(value: Any) -> str:
    """Return the QueryScript type name of a runtime value."""
    if isinstance(value, NoneVal):
        return 'None'
    if is_number(value):
        return 'Number'
    if isinstance(value, str):
        return 'String'
    if isinstance(value, ListVal):
        return 'List'
    if isinstance(value, NativeFunction):
        return 'NativeFunction'
    return type(value).__name__


def to_string(value: Any) -> str:
    """Render a value for humans, keeping numbers, strings and lists distinct."""
    if isinstance(value, NoneVal):
        return 'None'
    if is_number(value):
        return repr(float(value))
    if isinstance(value, str):
        return '"' + value + '"'
    if isinstance(value, ListVal):
        return '[' + ', '.join(to_string(item) for item in value.items) + ']'
    if isinstance(value, NativeFunction):
        return repr(value)
    return str(value)
