"""Demo schema used by the CLI, the documentation and the test-suite.

Models the configuration of a small file-syncing daemon: a listening port, a
few synchronisation toggles, compression settings and a map of mounts whose
names are chosen by the user (the ``mounts`` section declares a wildcard
template plus a literal ``default`` sibling).
"""

from __future__ import annotations

from ..domain.schema import Entry, Section
from ..domain.validators import DurationValidator, EnumValidator, IntRangeValidator, ListValidator

MOUNT_SCHEMA = Section(
    {
        "path": Entry("", docs="Directory the mount is exposed at"),
        "read_only": Entry(False, docs="Refuse writes through this mount"),
    }
)

DEMO_SCHEMA = Section(
    {
        "daemon": Section(
            {
                "port": Entry(
                    6666,
                    needs_restart=True,
                    docs="Port of the daemon process",
                    validator=IntRangeValidator(1, 65535),
                ),
                "ping_interval": Entry(
                    "15s",
                    docs="How often peers are pinged",
                    validator=DurationValidator(),
                ),
            }
        ),
        "fs": Section(
            {
                "sync": Section(
                    {
                        "ignore_removed": Entry(False, docs="Do not remove what the remote removed"),
                        "ignore_moved": Entry(False, docs="Do not move what the remote moved"),
                        "conflict_strategy": Entry(
                            "marker",
                            docs="What to do when both sides changed a file",
                            validator=EnumValidator("marker", "ignore"),
                        ),
                        "pin_interval": Entry(
                            "20m0s",
                            docs="How often pins are refreshed",
                            validator=DurationValidator(),
                        ),
                    }
                ),
                "compress": Section(
                    {
                        "default_algo": Entry(
                            "snappy",
                            docs="What compression algorithm to use by default",
                            validator=EnumValidator("snappy", "lz4", "none"),
                        ),
                        "level": Entry(0.5, docs="Compression effort between 0 and 1"),
                    }
                ),
            }
        ),
        "repo": Section(
            {
                "current_user": Entry(
                    "",
                    needs_restart=True,
                    docs="The repository owner that is published to the outside",
                ),
                "remotes": Entry(
                    [],
                    element_type=str,
                    docs="Names of the remotes to synchronise with",
                ),
            }
        ),
        "data": Section(
            {
                "ipfs": Section(
                    {
                        "path": Entry("", needs_restart=True, docs="Root directory of the ipfs repository"),
                        "ports": Entry(
                            [4001, 5001],
                            docs="Swarm and API ports",
                            validator=ListValidator(IntRangeValidator(1, 65535)),
                        ),
                    }
                ),
            }
        ),
        "mounts": Section({"default": MOUNT_SCHEMA}, template=MOUNT_SCHEMA),
    }
)
"""Schema of the demo daemon; ``lib_schema_config.examples:DEMO_SCHEMA`` on the CLI."""
