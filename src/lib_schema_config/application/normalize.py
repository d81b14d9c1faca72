"""Normalisation and validation of raw data trees against a schema.

Purpose
-------
Turn a freshly decoded tree (arbitrary numeric widths, tuples, nested
mappings) into a canonical data tree that satisfies the schema, and record
which keys were filled in from schema defaults.

Contents
    - ``normalize_tree``: public entry point used by open, reload and reset.
    - ``_validate_section``: depth-first walk checking every leaf.
    - ``merge_defaults``: defaulting pass injecting declared entries.

System Role
-----------
Fail-closed: the input is cloned first, the first problem raises, and nothing
partial ever reaches a store.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from ..domain.errors import InvalidKey, TypeMismatch, ValidationError
from ..domain.schema import Entry, Section, join_key
from ..domain.tree import Tree, deepcopy_tree
from ..domain.values import coerce, describe, is_compatible, type_tag_of


def normalize_tree(raw: Mapping[str, Any] | None, schema: Section) -> tuple[Tree, set[str]]:
    """Validate *raw* against *schema* and return ``(tree, default_keys)``.

    ``raw`` is never mutated; ``None`` is treated as an empty tree (all
    defaults).

    Raises
    ------
    ValidationError
        (or one of its subclasses) for the first leaf that does not fit.

    Examples
    --------
    >>> from lib_schema_config.domain.schema import Entry, Section
    >>> schema = Section({"a": Entry(1), "b": Entry("")})
    >>> tree, defaults = normalize_tree({"a": 2}, schema)
    >>> tree, sorted(defaults)
    ({'a': 2, 'b': ''}, ['b'])
    """

    if raw is not None and not isinstance(raw, Mapping):
        raise ValidationError(f"config root is not a mapping: {describe(raw)}")
    tree = deepcopy_tree(raw or {})
    _validate_section(tree, schema, "")
    default_keys: set[str] = set()
    merge_defaults(tree, schema, default_keys, "")
    return tree, default_keys


def _validate_section(tree: Tree, section: Section, prefix: str) -> None:
    """Check and canonicalise every leaf below *tree* in place."""

    for name in list(tree):
        if not isinstance(name, str):
            raise ValidationError(f"config contains non string keys: {name!r}")
        dotted = join_key(prefix, name)
        if not name or "." in name:
            raise InvalidKey(dotted or repr(name), "unknown")
        node = section.child(name)
        if node is None:
            raise InvalidKey(dotted, "unknown")

        value = tree[name]
        if isinstance(value, Mapping):
            if isinstance(node, Entry):
                raise TypeMismatch(dotted, node.type_tag, "section")
            tree[name] = dict(value)
            _validate_section(tree[name], node, dotted)
            continue
        if isinstance(node, Section):
            raise InvalidKey(dotted, "section")
        tree[name] = validate_leaf(node, value, dotted)


def validate_leaf(entry: Entry, value: Any, key: str) -> Any:
    """Coerce *value* for *entry* and run its validator; return the canonical value."""

    if not is_compatible(type_tag_of(value), entry.type_tag):
        raise TypeMismatch(key, entry.type_tag, describe(value))
    canonical = coerce(value, entry.type_tag, key)
    if entry.validator is not None:
        entry.validator(canonical)
    return canonical


def merge_defaults(tree: Tree, section: Section, default_keys: set[str], prefix: str) -> None:
    """Fill every declared entry missing from *tree* with its default.

    Only literal child names are materialised; a wildcard template never is.
    Injected keys are added to *default_keys* as absolute dotted keys.
    """

    for name, node in section.children.items():
        dotted = join_key(prefix, name)
        if isinstance(node, Section):
            child = tree.get(name)
            if not isinstance(child, dict):
                child = {}
                tree[name] = child
            merge_defaults(child, node, default_keys, dotted)
        elif name not in tree:
            tree[name] = node.default_value()
            default_keys.add(dotted)
