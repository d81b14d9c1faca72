"""Application-layer helpers for bulk mutation.

Purpose
-------
Merge, reload and reset all change many keys at once and must notify exactly
once per key whose *resolved* value changed. The helpers below snapshot data
trees, compute those value-level diffs, and keep the default-sourced key set
in sync. They perform no locking and no I/O.

Contents
    - ``snapshot``: resolved leaf values below a prefix.
    - ``explicit_values``: leaves that were set explicitly.
    - ``changed_keys``: value-level diff between two snapshots.
    - ``clear_branch``: drop default markers of a subtree.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from ..domain.schema import Section, resolve_entry
from ..domain.tree import Tree, deepcopy_tree, iter_leaves, locate_section


def snapshot(tree: Tree, prefix: str = "") -> dict[str, Any]:
    """Return ``{absolute_key: value}`` for every leaf materialised below *prefix*.

    Examples
    --------
    >>> snapshot({"a": {"b": 1}, "c": 2}, "a")
    {'a.b': 1}
    """

    subtree = locate_section(tree, prefix)
    if subtree is None:
        return {}
    return dict(iter_leaves(deepcopy_tree(subtree), prefix))


def explicit_values(tree: Tree, default_keys: Iterable[str], prefix: str = "") -> dict[str, Any]:
    """Return the snapshot below *prefix* without default-sourced keys."""

    defaults = set(default_keys)
    return {key: value for key, value in snapshot(tree, prefix).items() if key not in defaults}


def changed_keys(schema: Section, before: dict[str, Any], after: dict[str, Any]) -> list[str]:
    """Return the sorted keys whose resolved value differs between two snapshots.

    A key missing from one side resolves to its schema default on that side.

    >>> from lib_schema_config.domain.schema import Entry, Section
    >>> schema = Section({"a": Entry(1), "b": Entry(2)})
    >>> changed_keys(schema, {"a": 1, "b": 5}, {"a": 1})
    ['b']
    """

    changed: list[str] = []
    for key in sorted(set(before) | set(after)):
        if _resolved(schema, before, key) != _resolved(schema, after, key):
            changed.append(key)
    return changed


def _resolved(schema: Section, values: dict[str, Any], key: str) -> Any:
    if key in values:
        return values[key]
    return resolve_entry(schema, key).default_value()


def clear_branch(default_keys: set[str], prefix: str) -> None:
    """Remove default markers that belong to *prefix* or its descendants."""

    if not prefix:
        default_keys.clear()
        return
    for key in list(default_keys):
        if key == prefix or key.startswith(prefix + "."):
            default_keys.discard(key)


def within(key: str, prefix: str) -> bool:
    """Return whether absolute *key* lies in the subtree rooted at *prefix*.

    >>> within("fs.sync.x", "fs"), within("fsx.y", "fs"), within("a", "")
    (True, False, True)
    """

    return not prefix or key == prefix or key.startswith(prefix + ".")


def relative(key: str, prefix: str) -> str:
    """Strip *prefix* from absolute *key*."""

    if not prefix:
        return key
    return key[len(prefix) + 1 :] if key != prefix else ""


__all__ = [
    "snapshot",
    "explicit_values",
    "changed_keys",
    "clear_branch",
    "within",
    "relative",
]
