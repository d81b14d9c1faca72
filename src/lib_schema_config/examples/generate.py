"""Default configuration file generation.

Purpose
-------
Write a fully populated, commented YAML file for a schema so operators start
from a document that lists every setting with its documentation.

Contents
    - ``render_default_config``: render the commented document as text.
    - ``generate_default_config``: write it to disk honouring ``force``.

System Role
-----------
Backs the ``generate`` CLI command. Nothing here touches a live store.
"""

from __future__ import annotations

import io
from pathlib import Path

from ..adapters.codecs.yaml import YamlEncoder
from ..application.normalize import normalize_tree
from ..domain.schema import Section, iter_entries


def render_default_config(schema: Section) -> str:
    """Return a YAML document holding every default of *schema*.

    The body is preceded by one comment line per documented key. Template
    subtrees are listed with a ``*`` segment but never written as values.

    Examples
    --------
    >>> from lib_schema_config.domain.schema import Entry
    >>> print(render_default_config(Section({"port": Entry(1, docs="Port")})), end="")
    # version: 0
    # port: Port
    port: 1
    """

    tree, _ = normalize_tree(None, schema)
    buffer = io.StringIO()
    YamlEncoder(buffer).encode(0, tree)
    header, _, body = buffer.getvalue().partition("\n")
    lines = [header]
    for key, entry in iter_entries(schema):
        if entry.docs:
            restart = " (needs restart)" if entry.needs_restart else ""
            lines.append(f"# {key}: {entry.docs}{restart}")
    return "\n".join(lines) + "\n" + body


def generate_default_config(schema: Section, destination: str | Path, *, force: bool = False) -> bool:
    """Write the default document for *schema* to *destination*.

    Returns
    -------
    bool
        ``True`` when the file was written, ``False`` when it already existed
        and *force* was not given.
    """

    path = Path(destination)
    if path.exists() and not force:
        return False
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(render_default_config(schema), encoding="utf-8")
    return True
