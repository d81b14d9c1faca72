"""Adapter contract tests for the codec ports.

Verify the YAML adapters keep satisfying the application-layer ports defined
in ``lib_schema_config.application.ports`` and that the store works with any
other implementation of them.
"""

from __future__ import annotations

import io
from typing import Any, Mapping

from lib_schema_config.adapters.codecs.yaml import YamlDecoder, YamlEncoder
from lib_schema_config.application import ports
from lib_schema_config.core import open_config

from tests.support import SCHEMA


class DictDecoder:
    def __init__(self, version: int, tree: Mapping[str, Any]) -> None:
        self.version = version
        self.tree = tree

    def decode(self) -> tuple[int, Mapping[str, Any]]:
        return self.version, self.tree


class ListEncoder:
    def __init__(self) -> None:
        self.calls: list[tuple[int, Mapping[str, Any]]] = []

    def encode(self, version: int, tree: Mapping[str, Any]) -> None:
        self.calls.append((version, tree))


def test_yaml_adapters_satisfy_ports() -> None:
    assert isinstance(YamlDecoder(""), ports.Decoder)
    assert isinstance(YamlEncoder(io.StringIO()), ports.Encoder)


def test_store_accepts_foreign_codecs() -> None:
    decoder = DictDecoder(6, {"daemon": {"port": 6000}})
    assert isinstance(decoder, ports.Decoder)
    store = open_config(decoder, SCHEMA)
    assert store.version == 6
    assert store.get_int("daemon.port") == 6000

    encoder = ListEncoder()
    assert isinstance(encoder, ports.Encoder)
    store.save(encoder)
    version, tree = encoder.calls[0]
    assert version == 6
    assert tree["daemon"]["port"] == 6000


def test_open_config_without_decoder_yields_defaults() -> None:
    store = open_config(None, SCHEMA)
    assert store.version == 0
    assert store.is_default("daemon.port")
