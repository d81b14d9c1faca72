"""Helpers operating on raw data trees.

Purpose
-------
A data tree is a nested ``dict`` whose leaves are canonical values. The store
keeps exactly one of them per view family; these helpers copy, walk, and
address it by dotted key without knowing anything about the schema.

Contents
--------
* :func:`deepcopy_tree` – clone a tree so callers never alias shared state.
* :func:`iter_leaves` – depth-first ``(dotted_key, value)`` iteration.
* :func:`locate` – find the container holding a leaf.
* :func:`make_containers` – create missing intermediate sections.
* :func:`remove` – drop a leaf or a subtree.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from typing import Any, Optional

from .schema import join_key, split_key

Tree = dict[str, Any]


def deepcopy_tree(mapping: Mapping[str, Any]) -> Tree:
    """Recursively clone *mapping* so callers receive a mutable copy.

    Examples
    --------
    >>> source = {"a": {"b": [1, 2]}}
    >>> clone = deepcopy_tree(source)
    >>> clone["a"]["b"].append(3)
    >>> source["a"]["b"]
    [1, 2]
    """

    result: Tree = {}
    for key, value in mapping.items():
        result[key] = _deepcopy_value(value)
    return result


def _deepcopy_value(value: Any) -> Any:
    if isinstance(value, Mapping):
        return deepcopy_tree(value)
    if isinstance(value, (list, tuple)):
        return [_deepcopy_value(item) for item in value]
    return value


def iter_leaves(tree: Mapping[str, Any], prefix: str = "") -> Iterator[tuple[str, Any]]:
    """Yield every leaf of *tree* as ``(dotted_key, value)``.

    >>> sorted(iter_leaves({"a": {"b": 1, "c": {"d": 2}}, "e": 3}))
    [('a.b', 1), ('a.c.d', 2), ('e', 3)]
    """

    for key, value in tree.items():
        dotted = join_key(prefix, key)
        if isinstance(value, Mapping):
            yield from iter_leaves(value, dotted)
        else:
            yield dotted, value


def locate(tree: Tree, key: str) -> Optional[tuple[Tree, str]]:
    """Return ``(parent, name)`` for the leaf at *key* or ``None`` if it is absent.

    A key that stops at a section, or walks through a leaf, is absent.

    >>> tree = {"daemon": {"port": 1}}
    >>> locate(tree, "daemon.port") == (tree["daemon"], "port")
    True
    >>> locate(tree, "daemon") is None
    True
    """

    segments = split_key(key)
    if not segments:
        return None
    node: Any = tree
    for segment in segments[:-1]:
        node = node.get(segment) if isinstance(node, dict) else None
        if not isinstance(node, dict):
            return None
    last = segments[-1]
    if last not in node or isinstance(node[last], dict):
        return None
    return node, last


def locate_section(tree: Tree, key: str) -> Optional[Tree]:
    """Return the sub-mapping at *key* (the tree itself for ``""``) or ``None``."""

    node: Any = tree
    for segment in split_key(key):
        node = node.get(segment) if isinstance(node, dict) else None
        if not isinstance(node, dict):
            return None
    return node


def make_containers(tree: Tree, key: str) -> tuple[Tree, str]:
    """Create every missing section on the way to *key* and return ``(parent, name)``.

    Raises
    ------
    ValueError
        When an intermediate segment already holds a leaf value.
    """

    segments = split_key(key)
    node = tree
    for segment in segments[:-1]:
        child = node.setdefault(segment, {})
        if not isinstance(child, dict):
            raise ValueError(f"trying to override value with section: {key}")
        node = child
    return node, segments[-1]


def remove(tree: Tree, key: str) -> bool:
    """Delete the leaf or subtree at *key*; return whether anything was removed."""

    segments = split_key(key)
    if not segments:
        return False
    parent = locate_section(tree, join_key(*segments[:-1]))
    if parent is None or segments[-1] not in parent:
        return False
    del parent[segments[-1]]
    return True
