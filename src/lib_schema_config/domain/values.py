"""Canonical value types and the rules that relate them.

Purpose
-------
Describe the closed set of canonical leaf values (``str``, ``int``, ``float``,
``bool`` and homogeneous lists of those), classify raw Python values into type
tags, decide type compatibility, and coerce raw values into canonical form.

Contents
--------
* :class:`ValueKind` / :class:`TypeTag` – canonical type descriptors.
* :func:`type_tag_of` – classify a raw value.
* :func:`is_compatible` – the loose top-level compatibility check.
* :func:`coerce` – the strict, element-wise normalisation.
* :func:`zero_value` / :func:`copy_value` – helpers for the store accessors.
"""

from __future__ import annotations

import numbers
from dataclasses import dataclass
from enum import Enum
from typing import Any, Union

from .errors import TypeMismatch

Scalar = Union[str, int, float, bool]


class ValueKind(str, Enum):
    """Scalar classes a canonical value can belong to."""

    STRING = "string"
    INT = "int"
    FLOAT = "float"
    BOOL = "bool"


@dataclass(frozen=True, slots=True)
class TypeTag:
    """Canonical type of a leaf: a scalar kind, optionally wrapped in a list.

    ``kind`` may be ``None`` for a list whose element type is unknown (an empty
    raw list). Such a tag is still list-shaped and therefore compatible with any
    other list tag.

    Examples
    --------
    >>> str(TypeTag(ValueKind.INT))
    'int'
    >>> str(TypeTag(ValueKind.STRING, is_list=True))
    '[string]'
    """

    kind: ValueKind | None
    is_list: bool = False

    def __str__(self) -> str:
        name = self.kind.value if self.kind is not None else ""
        return f"[{name}]" if self.is_list else name


_PYTHON_TYPES: dict[ValueKind, type] = {
    ValueKind.STRING: str,
    ValueKind.INT: int,
    ValueKind.FLOAT: float,
    ValueKind.BOOL: bool,
}

_ZERO: dict[ValueKind, Scalar] = {
    ValueKind.STRING: "",
    ValueKind.INT: 0,
    ValueKind.FLOAT: 0.0,
    ValueKind.BOOL: False,
}


def kind_of(value: object) -> ValueKind | None:
    """Return the scalar class of *value* or ``None`` for unsupported values.

    ``bool`` is checked first because it is an ``int`` subclass.

    Examples
    --------
    >>> kind_of(True), kind_of(3), kind_of(2.5), kind_of("x"), kind_of(None)
    (<ValueKind.BOOL: 'bool'>, <ValueKind.INT: 'int'>, <ValueKind.FLOAT: 'float'>, <ValueKind.STRING: 'string'>, None)
    """

    if isinstance(value, bool):
        return ValueKind.BOOL
    if isinstance(value, numbers.Integral):
        return ValueKind.INT
    if isinstance(value, numbers.Real):
        return ValueKind.FLOAT
    if isinstance(value, str):
        return ValueKind.STRING
    return None


def kind_from_type(python_type: type) -> ValueKind | None:
    """Map a Python type (``int``, ``str`` ...) onto its :class:`ValueKind`."""

    for kind, candidate in _PYTHON_TYPES.items():
        if python_type is candidate:
            return kind
    return None


def type_tag_of(value: object) -> TypeTag | None:
    """Classify *value*; lists take the class of their first element."""

    if isinstance(value, (list, tuple)):
        first = kind_of(value[0]) if value else None
        return TypeTag(first, is_list=True)
    kind = kind_of(value)
    if kind is None:
        return None
    return TypeTag(kind)


def describe(value: object) -> str:
    """Render the type of *value* for error messages."""

    tag = type_tag_of(value)
    if tag is not None:
        return str(tag)
    if isinstance(value, dict):
        return "section"
    return type(value).__name__


def is_compatible(left: TypeTag | None, right: TypeTag | None) -> bool:
    """Return whether two tags may replace each other.

    Any two list-shaped tags are compatible here; element types are enforced by
    :func:`coerce`.

    Examples
    --------
    >>> is_compatible(TypeTag(ValueKind.INT), TypeTag(ValueKind.INT))
    True
    >>> is_compatible(TypeTag(ValueKind.INT, True), TypeTag(ValueKind.STRING, True))
    True
    >>> is_compatible(TypeTag(ValueKind.INT), TypeTag(ValueKind.FLOAT))
    False
    """

    if left is None or right is None:
        return False
    if left.is_list or right.is_list:
        return left.is_list and right.is_list
    return left.kind == right.kind


def coerce_scalar(value: object, kind: ValueKind) -> Scalar | None:
    """Return *value* in the canonical width of *kind* or ``None`` when it does not fit."""

    if kind_of(value) != kind:
        return None
    if kind is ValueKind.INT:
        return int(value)  # type: ignore[call-overload]
    if kind is ValueKind.FLOAT:
        return float(value)  # type: ignore[arg-type]
    return value  # type: ignore[return-value]


def coerce(value: object, expected: TypeTag, key: str) -> Scalar | list[Scalar]:
    """Normalise *value* into the canonical representation of *expected*.

    Raises
    ------
    TypeMismatch
        When *value* (or any list element) does not belong to the expected class.

    Examples
    --------
    >>> coerce((1, 2), TypeTag(ValueKind.INT, True), "ints")
    [1, 2]
    >>> coerce(["a", 1], TypeTag(ValueKind.STRING, True), "strs")
    Traceback (most recent call last):
    ...
    lib_schema_config.domain.errors.TypeMismatch: type mismatch: want `[string]`, got `[int]` for key `strs`
    """

    assert expected.kind is not None
    if expected.is_list:
        if not isinstance(value, (list, tuple)):
            raise TypeMismatch(key, expected, describe(value))
        items: list[Scalar] = []
        for item in value:
            canonical = coerce_scalar(item, expected.kind)
            if canonical is None:
                raise TypeMismatch(key, expected, TypeTag(kind_of(item), is_list=True))
            items.append(canonical)
        return items
    canonical = coerce_scalar(value, expected.kind)
    if canonical is None:
        raise TypeMismatch(key, expected, describe(value))
    return canonical


def zero_value(tag: TypeTag) -> Scalar | list[Scalar]:
    """Return the zero value used by best-effort reads."""

    if tag.is_list or tag.kind is None:
        return []
    return _ZERO[tag.kind]


def copy_value(value: Any) -> Any:
    """Return a caller-owned copy of a canonical value (lists are duplicated)."""

    if isinstance(value, (list, tuple)):
        return list(value)
    return value
