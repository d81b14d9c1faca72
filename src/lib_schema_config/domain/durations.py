"""Textual duration encoding.

Durations are stored as text (``"5m20s"``, ``"300ms"``, ``"1h0m0s"``) so the
data tree only ever holds canonical scalars. This module converts between that
text and :class:`datetime.timedelta`.
"""

from __future__ import annotations

import re
from datetime import timedelta
from decimal import Decimal, InvalidOperation

_UNIT_MICROSECONDS: dict[str, Decimal] = {
    "ns": Decimal("0.001"),
    "us": Decimal(1),
    "µs": Decimal(1),
    "μs": Decimal(1),
    "ms": Decimal(1_000),
    "s": Decimal(1_000_000),
    "m": Decimal(60_000_000),
    "h": Decimal(3_600_000_000),
}

_COMPONENT = re.compile(r"(\d+\.?\d*|\.\d+)(ns|us|µs|μs|ms|s|m|h)")


def parse_duration(text: str) -> timedelta:
    """Parse a duration such as ``"1h2m3.5s"`` into a :class:`timedelta`.

    A bare ``"0"`` is accepted; every other value needs a unit. Sub-microsecond
    precision is rounded.

    Raises
    ------
    ValueError
        When *text* is not a valid duration.

    Examples
    --------
    >>> parse_duration("5m20s")
    datetime.timedelta(seconds=320)
    >>> parse_duration("-1.5ms")
    datetime.timedelta(days=-1, seconds=86399, microseconds=998500)
    """

    if not isinstance(text, str):
        raise ValueError(f"invalid duration: {text!r}")
    body = text.strip()
    sign = 1
    if body[:1] in ("+", "-"):
        sign = -1 if body[0] == "-" else 1
        body = body[1:]
    if body == "0":
        return timedelta(0)
    if not body:
        raise ValueError(f"invalid duration: {text!r}")

    total = Decimal(0)
    position = 0
    while position < len(body):
        match = _COMPONENT.match(body, position)
        if match is None:
            raise ValueError(f"invalid duration: {text!r}")
        try:
            amount = Decimal(match.group(1))
        except InvalidOperation as exc:  # pragma: no cover - regex guarantees a number
            raise ValueError(f"invalid duration: {text!r}") from exc
        total += amount * _UNIT_MICROSECONDS[match.group(2)]
        position = match.end()
    return timedelta(microseconds=sign * int(total.to_integral_value()))


def format_duration(value: timedelta) -> str:
    """Render *value* in the canonical textual form.

    Examples
    --------
    >>> format_duration(timedelta(minutes=20))
    '20m0s'
    >>> format_duration(timedelta(hours=1, seconds=1.5))
    '1h0m1.5s'
    >>> format_duration(timedelta(milliseconds=300))
    '300ms'
    >>> format_duration(timedelta(0))
    '0s'
    """

    micros = (value.days * 86_400 + value.seconds) * 1_000_000 + value.microseconds
    if micros == 0:
        return "0s"
    sign = "-" if micros < 0 else ""
    micros = abs(micros)

    if micros < 1_000:
        return f"{sign}{micros}µs"
    if micros < 1_000_000:
        return f"{sign}{_trim(Decimal(micros) / 1_000)}ms"

    hours, rest = divmod(micros, 3_600_000_000)
    minutes, rest = divmod(rest, 60_000_000)
    seconds = _trim(Decimal(rest) / 1_000_000)
    if hours:
        return f"{sign}{hours}h{minutes}m{seconds}s"
    if minutes:
        return f"{sign}{minutes}m{seconds}s"
    return f"{sign}{seconds}s"


def is_duration(text: object) -> bool:
    """Return ``True`` when *text* parses as a duration."""

    try:
        parse_duration(text)  # type: ignore[arg-type]
    except ValueError:
        return False
    return True


def _trim(amount: Decimal) -> str:
    """Format *amount* without exponent and without trailing zeros."""

    rendered = format(amount, "f")
    if "." in rendered:
        rendered = rendered.rstrip("0").rstrip(".")
    return rendered
