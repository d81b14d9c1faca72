"""Public package surface for ``lib_schema_config``.

The store, the schema building blocks, the error taxonomy and the YAML
persistence helpers are re-exported here so applications only ever need
``import lib_schema_config``. Submodules stay importable for callers that want
the lower-level pieces (the key resolver, the normaliser, the codecs).
"""

from __future__ import annotations

from .adapters.codecs.yaml import YamlDecoder, YamlEncoder
from .application.ports import Decoder, Encoder
from .application.store import ConfigStore, Strictness
from .core import load_config, open_config, reload_config, save_config
from .domain.durations import format_duration, parse_duration
from .domain.errors import (
    ConfigDefect,
    ConfigError,
    InvalidFormat,
    InvalidKey,
    NotFound,
    SchemaError,
    SchemaMismatch,
    TypeMismatch,
    ValidationError,
)
from .domain.schema import Entry, Section
from .domain.validators import (
    DurationValidator,
    EnumValidator,
    FloatRangeValidator,
    IntRangeValidator,
    ListValidator,
)
from .observability import bind_trace_id, get_logger

__all__ = [
    "ConfigStore",
    "Strictness",
    "Entry",
    "Section",
    "Decoder",
    "Encoder",
    "YamlDecoder",
    "YamlEncoder",
    "open_config",
    "load_config",
    "reload_config",
    "save_config",
    "parse_duration",
    "format_duration",
    "IntRangeValidator",
    "FloatRangeValidator",
    "EnumValidator",
    "DurationValidator",
    "ListValidator",
    "ConfigError",
    "ConfigDefect",
    "InvalidFormat",
    "InvalidKey",
    "NotFound",
    "SchemaError",
    "SchemaMismatch",
    "TypeMismatch",
    "ValidationError",
    "bind_trace_id",
    "get_logger",
]
