"""Application-layer ports describing codec responsibilities.

Purpose
-------
Define the structural contracts a serialisation format must satisfy so the
store can load and save snapshots without depending on a concrete format.

Contents
--------
* :class:`Decoder` – produces ``(version, tree)`` from some external source.
* :class:`Encoder` – writes ``(version, tree)`` to some external sink.

System Role
-----------
These protocols keep the store format-agnostic. The YAML adapter in
:mod:`lib_schema_config.adapters.codecs.yaml` is the reference implementation;
tests and embedding applications may provide their own.
"""

from __future__ import annotations

from typing import Any, Mapping, Protocol, runtime_checkable


@runtime_checkable
class Decoder(Protocol):
    """Read a versioned configuration snapshot.

    Why
    ----
    Segregate parsing concerns from validation and storage.
    """

    def decode(self) -> tuple[int, Mapping[str, Any]]:
        """Return ``(version, tree)`` or raise ``InvalidFormat``."""


@runtime_checkable
class Encoder(Protocol):
    """Write a versioned configuration snapshot."""

    def encode(self, version: int, tree: Mapping[str, Any]) -> None:
        """Serialise *tree* tagged with *version*."""
