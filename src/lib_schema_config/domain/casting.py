"""Conversion between untyped text and canonical values.

Used to drive a store from string input (command lines, remote calls) and to
render stored values back to text. List values are joined with ``" ;; "``.

Examples
--------
>>> from lib_schema_config.domain.values import TypeTag, ValueKind
>>> cast_text(TypeTag(ValueKind.INT, is_list=True), "3 ;; 2 ;; 1", "ints")
[3, 2, 1]
>>> uncast_value([1.0, 2.5])
'1 ;; 2.5'
"""

from __future__ import annotations

import math
import re
from typing import Any

from .errors import InvalidFormat
from .values import Scalar, TypeTag, ValueKind

LIST_SEPARATOR = ";;"

_INT_PATTERN = re.compile(r"[+-]?\d+")
_TRUE = frozenset({"1", "t", "T", "TRUE", "true", "True"})
_FALSE = frozenset({"0", "f", "F", "FALSE", "false", "False"})


def cast_text(tag: TypeTag, text: str, key: str) -> Scalar | list[Scalar]:
    """Parse *text* into the canonical type described by *tag*.

    Raises
    ------
    InvalidFormat
        When *text* (or any list element) does not parse.
    """

    assert tag.kind is not None
    if not tag.is_list:
        return _cast_scalar(tag.kind, text, key)
    if not text.strip():
        return []
    return [_cast_scalar(tag.kind, part.strip(), key) for part in text.split(LIST_SEPARATOR)]


def _cast_scalar(kind: ValueKind, text: str, key: str) -> Scalar:
    if kind is ValueKind.STRING:
        return text
    if kind is ValueKind.INT:
        if not _INT_PATTERN.fullmatch(text):
            raise InvalidFormat(f"cannot cast `{text}` to int for key `{key}`")
        return int(text, 10)
    if kind is ValueKind.FLOAT:
        # float() would also accept digit separators and padding
        if "_" in text or text != text.strip():
            raise InvalidFormat(f"cannot cast `{text}` to float for key `{key}`")
        try:
            return float(text)
        except ValueError as exc:
            raise InvalidFormat(f"cannot cast `{text}` to float for key `{key}`") from exc
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise InvalidFormat(f"cannot cast `{text}` to bool for key `{key}`")


def uncast_value(value: Any) -> str:
    """Render a canonical value in its natural textual form.

    >>> uncast_value(True), uncast_value(3.0), uncast_value(["a", "b"])
    ('true', '3', 'a ;; b')
    """

    if isinstance(value, (list, tuple)):
        return f" {LIST_SEPARATOR} ".join(uncast_value(item) for item in value)
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if math.isfinite(value) and value.is_integer():
            return str(int(value))
        return repr(value)
    return str(value)
