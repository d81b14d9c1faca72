"""Domain-level exception hierarchy.

Purpose
-------
Expose the stable error taxonomy shared by the schema, the store, the codecs,
and consuming applications. The hierarchy lives in the domain layer so every
outer layer can raise and catch the same types.

Contents
--------
* :class:`ConfigError` – umbrella base class for all recoverable configuration
  issues.
* :class:`InvalidFormat` – decode and cast failures.
* :class:`NotFound` – a configuration file that does not exist.
* :class:`SchemaError` – a malformed schema declaration.
* :class:`SchemaMismatch` – merge attempted between stores of different schemas.
* :class:`ValidationError` – data that does not fit the schema.
* :class:`InvalidKey` / :class:`TypeMismatch` – specialised validation errors.
* :class:`ConfigDefect` – programmer defects raised under fail-fast strictness.

System Role
-----------
Data errors are raised as :class:`ConfigError` subclasses so callers can catch a
single family. Programmer defects (unknown keys, sections used as leaves) are
raised as :class:`ConfigDefect`, which deliberately does *not* inherit from
:class:`ConfigError`; an ``except ConfigError`` block never hides a bug.
"""

from __future__ import annotations


class ConfigError(Exception):
    """Base type for all recoverable errors emitted by ``lib_schema_config``.

    Why
    ----
    Provide a single catch-all type for consumers that do not need fine-grained
    handling.
    """


class InvalidFormat(ConfigError):
    """Raised when input text cannot be parsed into structured data.

    Typical Sources
    ---------------
    The YAML decoder and :meth:`ConfigStore.cast`.
    """


class NotFound(ConfigError):
    """Represents a configuration file that does not exist."""


class SchemaError(ConfigError):
    """Raised while constructing a schema that cannot describe canonical values."""


class SchemaMismatch(ConfigError):
    """Raised by :meth:`ConfigStore.merge` when both stores use different schemas."""


class ValidationError(ConfigError):
    """Signifies that a value or a data tree failed schema checks.

    Validators attached to schema entries raise this type directly.
    """


class InvalidKey(ValidationError):
    """A dotted key that does not denote a schema leaf.

    Attributes
    ----------
    key:
        The offending dotted key (absolute, i.e. including any section prefix).
    reason:
        ``"unknown"`` when no schema node matches, ``"section"`` when the key
        names a section where a leaf was expected.
    """

    def __init__(self, key: str, reason: str = "unknown") -> None:
        if reason == "section":
            message = f"key denotes a section: {key}"
        else:
            message = f"no default for key: {key}"
        super().__init__(message)
        self.key = key
        self.reason = reason


class TypeMismatch(ValidationError):
    """A value whose canonical type is incompatible with the schema entry.

    Examples
    --------
    >>> str(TypeMismatch("daemon.port", "int", "string"))
    'type mismatch: want `int`, got `string` for key `daemon.port`'
    """

    def __init__(self, key: str, expected: object, actual: object) -> None:
        super().__init__(f"type mismatch: want `{expected}`, got `{actual}` for key `{key}`")
        self.key = key
        self.expected = expected
        self.actual = actual


class ConfigDefect(RuntimeError):
    """A programmer defect detected under fail-fast strictness.

    Why
    ----
    Using a wrong key or reading a value with the wrong accessor is a bug in the
    calling code, not a runtime condition. These errors are not meant to be
    caught.
    """
