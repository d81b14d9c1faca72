"""Example schema and config generation helpers for ``lib_schema_config``."""

from .demo import DEMO_SCHEMA, MOUNT_SCHEMA
from .generate import generate_default_config, render_default_config

__all__ = [
    "DEMO_SCHEMA",
    "MOUNT_SCHEMA",
    "generate_default_config",
    "render_default_config",
]
