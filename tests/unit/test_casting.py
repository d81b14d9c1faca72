"""Text conversion used to drive a store from untyped input."""

from __future__ import annotations

import pytest
from hypothesis import given
from hypothesis import strategies as st

from lib_schema_config.domain.casting import cast_text, uncast_value
from lib_schema_config.domain.errors import InvalidFormat
from lib_schema_config.domain.values import TypeTag, ValueKind

INT = TypeTag(ValueKind.INT)
FLOAT = TypeTag(ValueKind.FLOAT)
BOOL = TypeTag(ValueKind.BOOL)
STRING = TypeTag(ValueKind.STRING)


@pytest.mark.parametrize(
    ("tag", "text", "expected"),
    [
        (INT, "5", 5),
        (INT, "-12", -12),
        (INT, "+3", 3),
        (FLOAT, "2.5", 2.5),
        (FLOAT, "1e3", 1000.0),
        (STRING, " padded ", " padded "),
        (TypeTag(ValueKind.INT, is_list=True), "3 ;; 2 ;; 1", [3, 2, 1]),
        (TypeTag(ValueKind.STRING, is_list=True), "a;;b", ["a", "b"]),
        (TypeTag(ValueKind.FLOAT, is_list=True), "", []),
    ],
)
def test_cast_text(tag: TypeTag, text: str, expected) -> None:
    assert cast_text(tag, text, "k") == expected


@pytest.mark.parametrize("text", ["1", "t", "T", "TRUE", "true", "True"])
def test_true_literals(text: str) -> None:
    assert cast_text(BOOL, text, "k") is True


@pytest.mark.parametrize("text", ["0", "f", "F", "FALSE", "false", "False"])
def test_false_literals(text: str) -> None:
    assert cast_text(BOOL, text, "k") is False


@pytest.mark.parametrize(
    ("tag", "text"),
    [
        (INT, "1.0"),
        (INT, "0x10"),
        (INT, "1_000"),
        (INT, ""),
        (FLOAT, "1_0.5"),
        (FLOAT, " 1.5"),
        (FLOAT, "abc"),
        (BOOL, "yes"),
        (TypeTag(ValueKind.INT, is_list=True), "1 ;; x ;; 3"),
    ],
)
def test_cast_failures_raise_invalid_format(tag: TypeTag, text: str) -> None:
    with pytest.raises(InvalidFormat):
        cast_text(tag, text, "k")


@pytest.mark.parametrize(
    ("value", "text"),
    [
        (True, "true"),
        (False, "false"),
        (3.0, "3"),
        (2.5, "2.5"),
        (42, "42"),
        ("x", "x"),
        ([1, 2, 3], "1 ;; 2 ;; 3"),
        (("a",), "a"),
        ([], ""),
    ],
)
def test_uncast_value(value, text: str) -> None:
    assert uncast_value(value) == text


@given(st.lists(st.integers(), min_size=1, max_size=6))
def test_int_lists_survive_text(values: list[int]) -> None:
    tag = TypeTag(ValueKind.INT, is_list=True)
    assert cast_text(tag, uncast_value(values), "k") == values


@given(st.floats(allow_nan=False, allow_infinity=False))
def test_floats_survive_text(value: float) -> None:
    assert cast_text(FLOAT, uncast_value(value), "k") == value
