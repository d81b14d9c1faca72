"""Composition root for ``lib_schema_config``.

Purpose
-------
Provide the entry points that wire a decoder, a schema and the store together
and that persist a store through an encoder. Applications that keep their
configuration in a YAML file only ever need :func:`load_config` and
:func:`save_config`.

Contents
--------
* :func:`open_config` – build a store from any :class:`Decoder` (or defaults).
* :func:`load_config` – build a store from a YAML file.
* :func:`save_config` – write a store to a YAML file.
* :func:`reload_config` – reload a store from a YAML file.

System Role
-----------
This module connects the YAML adapter with the application-layer store while
emitting structured observability signals. It is the canonical place for
adding new persistence helpers.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping, Optional, Union

from .adapters.codecs.yaml import read_file, write_file
from .application.ports import Decoder
from .application.store import ConfigStore, Strictness
from .domain.schema import Section
from .observability import log_info, make_event

PathLike = Union[str, Path]


def open_config(
    decoder: Optional[Decoder],
    schema: Section,
    *,
    strictness: Strictness = Strictness.FAIL_FAST,
) -> ConfigStore:
    """Return a store holding the snapshot produced by *decoder*.

    Why
    ----
    Opening is the only way to get a store whose data was checked against the
    schema; passing ``None`` yields a store holding pure defaults at version 0.

    Parameters
    ----------
    decoder:
        Source of ``(version, tree)`` or ``None``.
    schema:
        Root section every key is resolved against.
    strictness:
        Policy for programmer defects, see :class:`Strictness`.

    Raises
    ------
    InvalidFormat
        When the decoder cannot parse its input.
    ValidationError
        When the decoded data does not fit *schema*.

    Examples
    --------
    >>> from lib_schema_config.adapters.codecs.yaml import YamlDecoder
    >>> from lib_schema_config.domain.schema import Entry, Section
    >>> store = open_config(YamlDecoder("# version: 4\\nport: 80\\n"), Section({"port": Entry(6666)}))
    >>> store.version, store.get_int("port")
    (4, 80)
    """

    if decoder is None:
        return ConfigStore(schema, None, strictness=strictness)
    version, tree = decoder.decode()
    return ConfigStore(schema, tree, version=version, strictness=strictness)


def load_config(
    path: PathLike,
    schema: Section,
    *,
    strictness: Strictness = Strictness.FAIL_FAST,
) -> ConfigStore:
    """Open the YAML file at *path* against *schema*.

    Raises
    ------
    NotFound
        When *path* does not exist. Callers wanting "defaults if missing"
        catch it and call ``open_config(None, schema)``.
    """

    store = open_config(read_file(path), schema, strictness=strictness)
    log_info("config_loaded", **make_event("load", None, {"path": str(path), "version": store.version}))
    return store


def reload_config(store: ConfigStore, path: PathLike) -> None:
    """Replace the contents of *store* with the YAML file at *path*."""

    store.reload(read_file(path))


def save_config(store: ConfigStore, path: PathLike) -> None:
    """Write every value of *store* (defaults included) to *path*."""

    store.save(_FileEncoder(path))


class _FileEncoder:
    """Encoder adapter bridging :meth:`ConfigStore.save` and :func:`write_file`."""

    def __init__(self, path: PathLike) -> None:
        self._path = path

    def encode(self, version: int, tree: Mapping[str, Any]) -> None:
        write_file(self._path, version, tree)


__all__ = ["open_config", "load_config", "reload_config", "save_config"]
