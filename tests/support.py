"""Shared schema and helpers for the test-suite.

The schema mirrors a small file-syncing daemon: a port guarded by a range
validator, some nested toggles, typed lists, and a ``mounts`` section whose
children are matched by a wildcard template next to a literal ``default``.
"""

from __future__ import annotations

from lib_schema_config.adapters.codecs.yaml import YamlDecoder
from lib_schema_config.application.store import ConfigStore, Strictness
from lib_schema_config.core import open_config
from lib_schema_config.domain.schema import Entry, Section
from lib_schema_config.domain.validators import DurationValidator, EnumValidator, IntRangeValidator, ListValidator

MOUNT = Section(
    {
        "path": Entry("", docs="Mount point"),
        "read_only": Entry(False, docs="Refuse writes"),
    }
)


def build_schema() -> Section:
    """Return a freshly built schema; equal to every other result of this call."""

    return Section(
        {
            "daemon": Section(
                {
                    "port": Entry(
                        6666,
                        needs_restart=True,
                        docs="Port of the daemon process",
                        validator=IntRangeValidator(1, 65535),
                    ),
                }
            ),
            "fs": Section(
                {
                    "sync": Section(
                        {
                            "ignore_removed": Entry(False, docs="Do not remove what the remote removed"),
                            "ignore_moved": Entry(False, docs="Do not move what the remote moved"),
                            "conflict_strategy": Entry("marker", validator=EnumValidator("marker", "ignore")),
                            "pin_interval": Entry("5m0s", validator=DurationValidator()),
                            "loose_interval": Entry("1s"),
                        }
                    ),
                    "compress": Section(
                        {
                            "default_algo": Entry(
                                "snappy",
                                docs="What compression algorithm to use by default",
                                validator=EnumValidator("snappy", "lz4", "none"),
                            ),
                        }
                    ),
                }
            ),
            "repo": Section(
                {
                    "current_user": Entry("", needs_restart=True),
                    "ratio": Entry(0.5),
                    "names": Entry(["a", "b"]),
                    "ports": Entry([1, 2, 3]),
                    "weights": Entry([1.5]),
                    "flags": Entry([True, False]),
                    "remotes": Entry([], element_type=str),
                    "timeouts": Entry(["1s"], validator=ListValidator(DurationValidator())),
                }
            ),
            "data": Section({"ipfs": Section({"path": Entry("", needs_restart=True)})}),
            "mounts": Section({"default": MOUNT}, template=MOUNT),
        }
    )


SCHEMA = build_schema()

SAMPLE_YAML = """# version: 3
daemon:
  port: 6667
data:
  ipfs:
    path: x
mounts:
  alpha:
    path: /mnt/alpha
"""


def open_text(text: str, *, strictness: Strictness = Strictness.FAIL_FAST) -> ConfigStore:
    """Open *text* as YAML against :data:`SCHEMA`."""

    return open_config(YamlDecoder(text), SCHEMA, strictness=strictness)
