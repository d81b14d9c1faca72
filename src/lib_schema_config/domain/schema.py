"""Immutable schema tree and key resolution.

Purpose
-------
Declare every legal configuration key, its canonical type, default value,
documentation, optional validator and restart flag. The schema is built once by
the embedding application and shared read-only by every store built from it.

Contents
--------
* :class:`Entry` – a leaf declaration.
* :class:`Section` – named children plus an optional wildcard ``template``.
* :func:`lookup` / :func:`resolve_entry` / :func:`resolve_section` – the key
  resolver, applying the wildcard rule.
* :func:`iter_entries` – flat listing used for documentation output.
* :func:`split_key` / :func:`join_key` – dotted key helpers.

System Role
-----------
The normaliser walks data trees against a :class:`Section`; the store resolves
every accessor key through :func:`resolve_entry`. Nothing here touches a data
tree.

Examples
--------
>>> schema = Section({
...     "daemon": Section({"port": Entry(6666, docs="Port of the daemon")}),
...     "mounts": Section(template=Section({"path": Entry("")})),
... })
>>> resolve_entry(schema, "daemon.port").default
6666
>>> resolve_entry(schema, "mounts.anything.path").default
''
>>> lookup(schema, "daemon.missing") is None
True
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Optional, Union

from .errors import InvalidKey, SchemaError
from .validators import Validator
from .values import Scalar, TypeTag, ValueKind, copy_value, kind_from_type, kind_of

#: Segment used by :func:`iter_entries` to render template subtrees.
TEMPLATE_SEGMENT = "*"


@dataclass(frozen=True, slots=True)
class Entry:
    """Schema leaf: default value plus metadata.

    Parameters
    ----------
    default:
        Fallback value. Its type defines the canonical type of the key. Lists
        (or tuples) must be homogeneous and are stored as tuples.
    needs_restart:
        Whether the embedding application must restart to honour a change.
    docs:
        Human readable documentation.
    validator:
        Optional callable raising :class:`ValidationError` on bad values.
    element_type:
        Element type for list entries; required when ``default`` is empty.

    Examples
    --------
    >>> Entry([1, 2]).type_tag
    TypeTag(kind=<ValueKind.INT: 'int'>, is_list=True)
    >>> Entry([], element_type=str).default
    ()
    """

    default: Union[Scalar, tuple[Scalar, ...]]
    needs_restart: bool = False
    docs: str = ""
    validator: Optional[Validator] = None
    element_type: Optional[type] = None
    type_tag: TypeTag = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if isinstance(self.default, (list, tuple)):
            items = tuple(self.default)
            tag = TypeTag(_list_kind(items, self.element_type), is_list=True)
            for item in items:
                if kind_of(item) != tag.kind:
                    raise SchemaError(f"list default is not homogeneous: {list(items)!r}")
            object.__setattr__(self, "default", tuple(_widen(item, tag) for item in items))
        else:
            kind = kind_of(self.default)
            if kind is None:
                raise SchemaError(f"unsupported default value: {self.default!r}")
            tag = TypeTag(kind)
            object.__setattr__(self, "default", _widen(self.default, tag))
        object.__setattr__(self, "type_tag", tag)

    def default_value(self) -> Any:
        """Return a fresh, mutable copy of the default for storing in a data tree."""

        return copy_value(self.default)


@dataclass(frozen=True, slots=True)
class Section:
    """Schema node holding named children and an optional wildcard template.

    The template applies to any child name not declared in ``children``; a
    literal child always wins over the template.
    """

    children: Mapping[str, "Node"] = field(default_factory=dict)
    template: Optional["Node"] = None

    def __post_init__(self) -> None:
        frozen = dict(self.children or {})
        for name, node in frozen.items():
            if not isinstance(name, str) or not name or "." in name:
                raise SchemaError(f"invalid schema child name: {name!r}")
            if not isinstance(node, (Entry, Section)):
                raise SchemaError(f"schema child {name!r} is neither an Entry nor a Section")
        if self.template is not None and not isinstance(self.template, (Entry, Section)):
            raise SchemaError("schema template is neither an Entry nor a Section")
        object.__setattr__(self, "children", MappingProxyType(frozen))

    def child(self, name: str) -> Optional["Node"]:
        """Return the node for *name*: the literal child first, then the template."""

        node = self.children.get(name)
        if node is not None:
            return node
        return self.template

    def declares(self, name: str) -> bool:
        """Return ``True`` when *name* is a literal (non-template) child."""

        return name in self.children


Node = Union[Entry, Section]


def split_key(key: str) -> list[str]:
    """Split a dotted key; the empty key denotes the root and has no segments.

    Empty segments (``a..b``, ``.a``, ``a.``) are kept so resolvers can reject them.
    """

    return key.split(".") if key else []


def join_key(*parts: str) -> str:
    """Join key fragments with dots while skipping empty fragments.

    Fragments are not cleaned up; a stray dot survives and makes the key invalid.

    >>> join_key("fs", "", "sync.ignore_moved")
    'fs.sync.ignore_moved'
    """

    return ".".join(part for part in parts if part)


def lookup(schema: Section, key: str) -> Optional[Node]:
    """Return the schema node denoted by *key* or ``None`` when nothing matches.

    A key with an empty segment never matches, not even the template.
    """

    node: Node = schema
    for segment in split_key(key):
        if not segment or not isinstance(node, Section):
            return None
        child = node.child(segment)
        if child is None:
            return None
        node = child
    return node


def resolve_entry(schema: Section, key: str) -> Entry:
    """Return the :class:`Entry` for *key*.

    Raises
    ------
    InvalidKey
        ``reason="unknown"`` for keys without schema node, ``reason="section"``
        for keys naming a section.
    """

    node = lookup(schema, key)
    if node is None:
        raise InvalidKey(key, "unknown")
    if isinstance(node, Section):
        raise InvalidKey(key, "section")
    return node


def resolve_section(schema: Section, key: str) -> Section:
    """Return the :class:`Section` for *key* or raise :class:`InvalidKey`."""

    node = lookup(schema, key)
    if node is None:
        raise InvalidKey(key, "unknown")
    if not isinstance(node, Section):
        raise InvalidKey(key, "unknown")
    return node


def is_literal_path(schema: Section, key: str) -> bool:
    """Return ``True`` when every segment of *key* matches a declared child name."""

    node: Node = schema
    for segment in split_key(key):
        if not isinstance(node, Section) or not node.declares(segment):
            return False
        node = node.children[segment]
    return True


def iter_entries(schema: Section, prefix: str = "") -> Iterator[tuple[str, Entry]]:
    """Yield ``(dotted_key, entry)`` for every declared entry, sorted by name.

    Template subtrees are rendered with a ``*`` segment.

    >>> schema = Section({"a": Entry(1)}, template=Section({"b": Entry("x")}))
    >>> [key for key, _ in iter_entries(schema)]
    ['a', '*.b']
    """

    for name in sorted(schema.children):
        yield from _iter_node(schema.children[name], join_key(prefix, name))
    if schema.template is not None:
        yield from _iter_node(schema.template, join_key(prefix, TEMPLATE_SEGMENT))


def _iter_node(node: Node, key: str) -> Iterator[tuple[str, Entry]]:
    if isinstance(node, Section):
        yield from iter_entries(node, key)
    else:
        yield key, node


def _list_kind(items: tuple[Any, ...], element_type: Optional[type]):
    """Determine the element kind of a list default."""

    if element_type is not None:
        kind = kind_from_type(element_type)
        if kind is None:
            raise SchemaError(f"unsupported list element type: {element_type!r}")
        return kind
    if not items:
        raise SchemaError("empty list default needs an explicit element_type")
    kind = kind_of(items[0])
    if kind is None:
        raise SchemaError(f"unsupported list element: {items[0]!r}")
    return kind


def _widen(value: Any, tag: TypeTag) -> Any:
    """Bring a default into its canonical width (``numpy.int32`` -> ``int`` etc.)."""

    if isinstance(value, bool) or tag.kind is None:
        return value
    if tag.kind is ValueKind.INT:
        return int(value)
    if tag.kind is ValueKind.FLOAT:
        return float(value)
    return value
