"""Reusable validators for schema entries.

Validators are frozen dataclasses so that two schemas declared separately with
the same validator arguments still compare equal. Each one is called with the
canonical value and raises :class:`ValidationError` on rejection.

Examples
--------
>>> IntRangeValidator(1, 10)(5)
>>> IntRangeValidator(1, 10)(11)
Traceback (most recent call last):
...
lib_schema_config.domain.errors.ValidationError: 11 is out of range [1, 10]
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable

from .durations import is_duration
from .errors import ValidationError

Validator = Callable[[Any], None]


@dataclass(frozen=True, slots=True)
class IntRangeValidator:
    """Accept integers within ``[low, high]`` (inclusive)."""

    low: int
    high: int

    def __call__(self, value: Any) -> None:
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValidationError(f"not an int: {value!r}")
        if not self.low <= value <= self.high:
            raise ValidationError(f"{value} is out of range [{self.low}, {self.high}]")


@dataclass(frozen=True, slots=True)
class FloatRangeValidator:
    """Accept floats within ``[low, high]`` (inclusive)."""

    low: float
    high: float

    def __call__(self, value: Any) -> None:
        if not isinstance(value, float):
            raise ValidationError(f"not a float: {value!r}")
        if not self.low <= value <= self.high:
            raise ValidationError(f"{value} is out of range [{self.low}, {self.high}]")


@dataclass(frozen=True, slots=True, init=False)
class EnumValidator:
    """Accept only one of the declared *choices*.

    >>> EnumValidator("snappy", "lz4")("zstd")
    Traceback (most recent call last):
    ...
    lib_schema_config.domain.errors.ValidationError: invalid value `zstd`; allowed: snappy, lz4
    """

    choices: tuple[Any, ...]

    def __init__(self, *choices: Any) -> None:
        object.__setattr__(self, "choices", tuple(choices))

    def __call__(self, value: Any) -> None:
        if value not in self.choices:
            allowed = ", ".join(str(choice) for choice in self.choices)
            raise ValidationError(f"invalid value `{value}`; allowed: {allowed}")


@dataclass(frozen=True, slots=True)
class DurationValidator:
    """Accept strings that parse as durations (``"10m"``, ``"1h30m"``)."""

    def __call__(self, value: Any) -> None:
        if not is_duration(value):
            raise ValidationError(f"invalid duration: {value!r}")


@dataclass(frozen=True, slots=True)
class ListValidator:
    """Apply *item* to every element of a list value."""

    item: Validator

    def __call__(self, value: Any) -> None:
        if not isinstance(value, (list, tuple)):
            raise ValidationError(f"not a list: {value!r}")
        for element in value:
            self.item(element)
