"""The mutable configuration store and its section views.

Purpose
-------
Hold one validated data tree per view family behind a single lock and expose
typed accessors, change notification, and bulk operations (reload, merge,
reset) that keep the schema invariants intact.

Contents
--------
* :class:`Strictness` – fail-fast vs best-effort handling of key defects.
* :class:`ConfigStore` – the store handle. The root store and every view
  returned by :meth:`ConfigStore.section` are peers sharing lock and data.

System Role
-----------
Built by :func:`lib_schema_config.core.open_config` from a decoded tree and a
schema. Every mutation collects the matching subscriptions while holding the
lock and fires them right after releasing it, so callbacks may re-enter the
store freely.

Examples
--------
>>> from lib_schema_config.domain.schema import Entry, Section
>>> store = ConfigStore(Section({"a": Entry(1), "b": Entry("")}))
>>> store.get("a"), store.is_default("a")
(1, True)
>>> fired = []
>>> _ = store.subscribe("a", fired.append)
>>> store.set_int("a", 2)
>>> store.get_int("a"), fired
(2, ['a'])
"""

from __future__ import annotations

import threading
from datetime import timedelta
from enum import Enum
from itertools import count
from typing import Any, Iterable, Mapping, NoReturn, Optional

from ..domain.casting import cast_text, uncast_value
from ..domain.durations import format_duration, parse_duration
from ..domain.errors import ConfigDefect, ConfigError, InvalidFormat, InvalidKey, SchemaError, SchemaMismatch, TypeMismatch
from ..domain.schema import Entry, Section, is_literal_path, join_key, lookup, resolve_entry
from ..domain.tree import Tree, deepcopy_tree, iter_leaves, locate, locate_section, make_containers, remove
from ..domain.values import TypeTag, ValueKind, coerce, copy_value, describe, is_compatible, type_tag_of
from ..observability import log_debug, log_error, log_info, make_event
from .events import ChangeCallback, EventRegistry, Notification
from .merge import changed_keys, clear_branch, explicit_values, relative, snapshot, within
from .normalize import merge_defaults, normalize_tree
from .ports import Decoder, Encoder

_BOOL = TypeTag(ValueKind.BOOL)
_STR = TypeTag(ValueKind.STRING)
_INT = TypeTag(ValueKind.INT)
_FLOAT = TypeTag(ValueKind.FLOAT)
_BOOLS = TypeTag(ValueKind.BOOL, is_list=True)
_STRS = TypeTag(ValueKind.STRING, is_list=True)
_INTS = TypeTag(ValueKind.INT, is_list=True)
_FLOATS = TypeTag(ValueKind.FLOAT, is_list=True)

_MISSING = object()


class Strictness(str, Enum):
    """How a store reacts to invalid keys and wrong accessor types.

    ``FAIL_FAST`` raises :class:`ConfigDefect`; ``BEST_EFFORT`` makes reads
    return the zero value of the requested type and makes mutators raise the
    recoverable :class:`InvalidKey` instead.
    """

    FAIL_FAST = "fail-fast"
    BEST_EFFORT = "best-effort"


class _Family:
    """State shared by a root store and all views derived from it."""

    __slots__ = ("lock", "schema", "strictness", "data", "version", "default_keys", "ids")

    def __init__(self, schema: Section, strictness: Strictness, data: Tree, version: int, default_keys: set[str]):
        self.lock = threading.Lock()
        self.schema = schema
        self.strictness = strictness
        self.data = data
        self.version = version
        self.default_keys = default_keys
        self.ids = count()


class ConfigStore:
    """Typed, schema-validated configuration store.

    Parameters
    ----------
    schema:
        Root :class:`Section` describing every legal key. It is never copied or
        changed; build a new store to use a different schema.
    data:
        Raw nested mapping to validate; ``None`` means "all defaults".
    version:
        Non-negative version tag of *data*.
    strictness:
        :class:`Strictness` policy shared by every view of this store.

    Raises
    ------
    ValidationError
        When *data* does not fit *schema*. Nothing is kept in that case.
    """

    def __init__(
        self,
        schema: Section,
        data: Optional[Mapping[str, Any]] = None,
        *,
        version: int = 0,
        strictness: Strictness = Strictness.FAIL_FAST,
    ) -> None:
        if not isinstance(schema, Section):
            raise SchemaError("need a schema section")
        _check_version(version)
        try:
            tree, default_keys = normalize_tree(data, schema)
        except ConfigError as exc:
            log_error("config_invalid", **make_event("open", getattr(exc, "key", None), {"error": str(exc)}))
            raise
        self._family = _Family(schema, Strictness(strictness), tree, version, default_keys)
        self._prefix = ""
        self._events = EventRegistry(self._family.ids)
        log_info("config_opened", **make_event("open", None, {"version": version, "defaults": len(default_keys)}))

    @classmethod
    def _view(cls, family: _Family, prefix: str) -> "ConfigStore":
        view = cls.__new__(cls)
        view._family = family
        view._prefix = prefix
        view._events = EventRegistry(family.ids)
        return view

    def __repr__(self) -> str:
        return f"ConfigStore(prefix={self._prefix!r}, strictness={self._family.strictness.value!r})"

    # ------------------------------------------------------------------ meta

    @property
    def schema(self) -> Section:
        return self._family.schema

    @property
    def strictness(self) -> Strictness:
        return self._family.strictness

    @property
    def prefix(self) -> str:
        """Absolute key of the section this handle addresses (``""`` for the root)."""

        return self._prefix

    @property
    def version(self) -> int:
        """Version tag of the loaded snapshot; only :meth:`reload` changes it."""

        with self._family.lock:
            return self._family.version

    # --------------------------------------------------------------- getters

    def get(self, key: str) -> Any:
        """Return the value at *key* (or its default); ``None`` on best-effort failures."""

        with self._family.lock:
            return self._read(key, None, None)

    def get_bool(self, key: str) -> bool:
        with self._family.lock:
            return self._read(key, _BOOL, False)

    def get_str(self, key: str) -> str:
        with self._family.lock:
            return self._read(key, _STR, "")

    def get_int(self, key: str) -> int:
        with self._family.lock:
            return self._read(key, _INT, 0)

    def get_float(self, key: str) -> float:
        with self._family.lock:
            return self._read(key, _FLOAT, 0.0)

    def get_duration(self, key: str) -> timedelta:
        """Parse the duration text stored at *key*.

        A stored value that does not parse is always a :class:`ConfigDefect`;
        attach a :class:`DurationValidator` to the entry to rule that out.
        """

        with self._family.lock:
            text = self._read(key, _STR, _MISSING)
        if text is _MISSING:
            return timedelta(0)
        return _parse_stored_duration(text)

    def get_bools(self, key: str) -> list[bool]:
        with self._family.lock:
            return self._read(key, _BOOLS, [])

    def get_strs(self, key: str) -> list[str]:
        with self._family.lock:
            return self._read(key, _STRS, [])

    def get_ints(self, key: str) -> list[int]:
        with self._family.lock:
            return self._read(key, _INTS, [])

    def get_floats(self, key: str) -> list[float]:
        with self._family.lock:
            return self._read(key, _FLOATS, [])

    def get_durations(self, key: str) -> list[timedelta]:
        with self._family.lock:
            texts = self._read(key, _STRS, [])
        return [_parse_stored_duration(text) for text in texts]

    # --------------------------------------------------------------- setters

    def set(self, key: str, value: Any) -> None:
        """Set *key* to *value*, which must be compatible with the stored type."""

        self._commit(key, value, None)

    def set_bool(self, key: str, value: bool) -> None:
        self._commit(key, value, _BOOL)

    def set_str(self, key: str, value: str) -> None:
        self._commit(key, value, _STR)

    def set_int(self, key: str, value: int) -> None:
        self._commit(key, value, _INT)

    def set_float(self, key: str, value: float) -> None:
        self._commit(key, value, _FLOAT)

    def set_duration(self, key: str, value: timedelta) -> None:
        self._commit(key, format_duration(value), _STR)

    def set_bools(self, key: str, value: Iterable[bool]) -> None:
        self._commit(key, list(value), _BOOLS)

    def set_strs(self, key: str, value: Iterable[str]) -> None:
        self._commit(key, list(value), _STRS)

    def set_ints(self, key: str, value: Iterable[int]) -> None:
        self._commit(key, list(value), _INTS)

    def set_floats(self, key: str, value: Iterable[float]) -> None:
        self._commit(key, list(value), _FLOATS)

    def set_durations(self, key: str, value: Iterable[timedelta]) -> None:
        self._commit(key, [format_duration(item) for item in value], _STRS)

    # --------------------------------------------------------- introspection

    def keys(self) -> list[str]:
        """Return the sorted leaf keys materialised below this handle's prefix."""

        with self._family.lock:
            subtree = locate_section(self._family.data, self._prefix)
            if subtree is None:
                return []
            return sorted(key for key, _ in iter_leaves(subtree))

    def is_valid_key(self, key: str) -> bool:
        """Return whether *key* names a schema leaf; safe for untrusted input."""

        return isinstance(lookup(self._family.schema, self._absolute(key)), Entry)

    def is_default(self, key: str) -> bool:
        """Return whether the value at *key* comes from the schema default."""

        with self._family.lock:
            absolute = self._absolute(key)
            try:
                resolve_entry(self._family.schema, absolute)
            except InvalidKey as exc:
                return self._soft_fail(exc, False)
            if absolute in self._family.default_keys:
                return True
            return locate(self._family.data, absolute) is None

    def get_default(self, key: str) -> Optional[Entry]:
        """Return the schema :class:`Entry` (default, docs, restart flag) for *key*."""

        absolute = self._absolute(key)
        try:
            return resolve_entry(self._family.schema, absolute)
        except InvalidKey as exc:
            return self._soft_fail(exc, None)

    def to_dict(self) -> dict[str, Any]:
        """Return a deep copy of the data tree visible through this handle."""

        with self._family.lock:
            return deepcopy_tree(locate_section(self._family.data, self._prefix) or {})

    # ---------------------------------------------------------------- events

    def subscribe(self, key: str, callback: ChangeCallback) -> int:
        """Call *callback* with the changed key whenever *key* changes.

        ``key == ""`` subscribes to every change visible through this handle.
        Returns an id for :meth:`unsubscribe`.
        """

        with self._family.lock:
            if key:
                absolute = self._absolute(key)
                self._require_entry(absolute)
                key = relative(absolute, self._prefix)
            return self._events.add(key, callback)

    def unsubscribe(self, subscription_id: int) -> None:
        with self._family.lock:
            self._events.remove(subscription_id)

    def clear_subscriptions(self) -> None:
        """Drop every subscription registered on this handle."""

        with self._family.lock:
            self._events.clear()

    # -------------------------------------------------------------- sections

    def section(self, prefix: str) -> "ConfigStore":
        """Return a view addressing keys relative to *prefix*.

        The view shares lock and data with this store but has its own, empty
        subscription table.
        """

        absolute = self._absolute(prefix)
        if not isinstance(lookup(self._family.schema, absolute), Section):
            self._reject(InvalidKey(absolute, "unknown"))
        return ConfigStore._view(self._family, absolute)

    # ------------------------------------------------------------------ bulk

    def reload(self, decoder: Optional[Decoder] = None) -> None:
        """Replace all data with the snapshot produced by *decoder*.

        ``None`` reloads pure defaults with version 0. Fires one notification
        per key whose value changed. On failure nothing changes.
        """

        if decoder is not None:
            version, raw = decoder.decode()
        else:
            version, raw = 0, {}
        _check_version(version)
        try:
            tree, default_keys = normalize_tree(raw, self._family.schema)
        except ConfigError as exc:
            log_error("config_invalid", **make_event("reload", getattr(exc, "key", None), {"error": str(exc)}))
            raise

        with self._family.lock:
            family = self._family
            before = snapshot(family.data)
            family.data = tree
            family.version = version
            family.default_keys = default_keys
            changed = changed_keys(family.schema, before, snapshot(tree))
            notifications = self._gather(changed)
        log_info("config_reloaded", **make_event("reload", None, {"version": version, "changed": len(changed)}))
        _dispatch(notifications)

    def merge(self, other: "ConfigStore") -> None:
        """Copy every explicitly set value of *other* that differs from ours.

        Keys that are default-sourced in *other* are skipped. *other* is never
        modified.

        Raises
        ------
        SchemaMismatch
            When both stores were built from different schemas.
        """

        if other._family.schema is not self._family.schema and other._family.schema != self._family.schema:
            log_error("config_merge_refused", **make_event("merge", self._prefix or None))
            raise SchemaMismatch("refusing to merge: different schemas")
        if other._family is self._family:
            return

        with other._family.lock:
            incoming = explicit_values(other._family.data, other._family.default_keys, self._prefix)

        with self._family.lock:
            family = self._family
            changed: list[str] = []
            for key, value in sorted(incoming.items()):
                located = locate(family.data, key)
                current = located[0][located[1]] if located else resolve_entry(family.schema, key).default_value()
                if value == current:
                    continue
                parent, name = located if located else make_containers(family.data, key)
                parent[name] = value
                family.default_keys.discard(key)
                changed.append(key)
            notifications = self._gather(changed)
        log_info("config_merged", **make_event("merge", self._prefix or None, {"changed": len(changed)}))
        _dispatch(notifications)

    def reset(self, key: str = "") -> None:
        """Revert *key* to its default.

        A leaf goes through the normal set path. A section loses every value
        below it; declared entries are re-materialised with their defaults while
        template-matched children disappear. ``""`` resets everything visible
        through this handle.
        """

        absolute = self._absolute(key)
        node = lookup(self._family.schema, absolute)
        if node is None:
            self._reject(InvalidKey(absolute, "unknown"))

        with self._family.lock:
            family = self._family
            if isinstance(node, Entry):
                changed = [absolute] if self._assign(absolute, node.default_value(), None) else []
                if locate(family.data, absolute) is not None:
                    family.default_keys.add(absolute)
                notifications = self._gather(changed)
            else:
                before = snapshot(family.data, absolute)
                if not absolute:
                    family.data, family.default_keys = normalize_tree(None, family.schema)
                else:
                    remove(family.data, absolute)
                    clear_branch(family.default_keys, absolute)
                    if is_literal_path(family.schema, absolute):
                        parent, name = make_containers(family.data, absolute)
                        merge_defaults(parent.setdefault(name, {}), node, family.default_keys, absolute)
                changed = changed_keys(family.schema, before, snapshot(family.data, absolute))
                notifications = self._gather(changed)
        log_info("config_reset", **make_event("reset", absolute or None, {"changed": len(changed)}))
        _dispatch(notifications)

    # ----------------------------------------------------------- cast/uncast

    def cast(self, key: str, text: str) -> Any:
        """Parse *text* into the canonical type of *key*.

        >>> from lib_schema_config.domain.schema import Entry, Section
        >>> ConfigStore(Section({"a": Entry(1)})).cast("a", "5")
        5
        """

        absolute = self._absolute(key)
        entry = self._require_entry(absolute)
        return cast_text(entry.type_tag, text, absolute)

    def uncast(self, key: str) -> str:
        """Render the current value of *key* as text (``""`` on best-effort failures)."""

        with self._family.lock:
            value = self._read(key, None, _MISSING)
        if value is _MISSING:
            return ""
        return uncast_value(value)

    # ------------------------------------------------------------ persistence

    def save(self, encoder: Encoder) -> None:
        """Hand a snapshot of the whole data tree and the version to *encoder*."""

        with self._family.lock:
            version = self._family.version
            tree = deepcopy_tree(self._family.data)
        encoder.encode(version, tree)
        log_debug("config_saved", **make_event("save", None, {"version": version}))

    # -------------------------------------------------------------- internals

    def _absolute(self, key: str) -> str:
        return join_key(self._prefix, key)

    def _read(self, key: str, expected: Optional[TypeTag], zero: Any) -> Any:
        """Return a copy of the value at *key*; call with the lock held."""

        absolute = self._absolute(key)
        try:
            entry = resolve_entry(self._family.schema, absolute)
        except InvalidKey as exc:
            return self._soft_fail(exc, zero)
        if expected is not None and entry.type_tag != expected:
            return self._soft_fail(TypeMismatch(absolute, expected, entry.type_tag), zero)
        located = locate(self._family.data, absolute)
        if located is None:
            return entry.default_value()
        parent, name = located
        return copy_value(parent[name])

    def _commit(self, key: str, value: Any, expected: Optional[TypeTag]) -> None:
        absolute = self._absolute(key)
        with self._family.lock:
            changed = self._assign(absolute, value, expected)
            notifications = self._gather([absolute]) if changed else []
        _dispatch(notifications)

    def _assign(self, absolute: str, value: Any, expected: Optional[TypeTag]) -> bool:
        """Validate and store *value* at *absolute*; return whether anything changed.

        Call with the lock held. Nothing is touched before validation passed.
        """

        family = self._family
        entry = self._require_entry(absolute)
        if expected is not None and not _matches(expected, type_tag_of(value)):
            raise TypeMismatch(absolute, expected, describe(value))

        located = locate(family.data, absolute)
        current = located[0][located[1]] if located else entry.default_value()
        if not is_compatible(type_tag_of(current), type_tag_of(value)):
            raise TypeMismatch(absolute, entry.type_tag, describe(value))
        canonical = coerce(value, entry.type_tag, absolute)
        if canonical == current:
            return False
        if entry.validator is not None:
            entry.validator(canonical)

        parent, name = located if located else make_containers(family.data, absolute)
        parent[name] = canonical
        family.default_keys.discard(absolute)
        log_debug("config_key_set", **make_event("set", absolute, {"handle": self._prefix}))
        return True

    def _gather(self, keys: Iterable[str]) -> list[Notification]:
        notifications: list[Notification] = []
        for key in keys:
            if within(key, self._prefix) and key != self._prefix:
                notifications.extend(self._events.gather(relative(key, self._prefix)))
        return notifications

    def _require_entry(self, absolute: str) -> Entry:
        try:
            return resolve_entry(self._family.schema, absolute)
        except InvalidKey as exc:
            self._reject(exc)

    def _reject(self, exc: InvalidKey) -> NoReturn:
        if self._family.strictness is Strictness.FAIL_FAST:
            raise ConfigDefect(f"bug: invalid config key: {exc.key}") from exc
        raise exc

    def _soft_fail(self, exc: ConfigError, zero: Any) -> Any:
        if self._family.strictness is Strictness.FAIL_FAST:
            if isinstance(exc, TypeMismatch):
                raise ConfigDefect(f"bug: wrong accessor for config key: {exc}") from exc
            raise ConfigDefect(f"bug: invalid config key: {getattr(exc, 'key', exc)}") from exc
        log_debug("config_key_invalid", **make_event("read", getattr(exc, "key", None), {"error": str(exc)}))
        return zero


def _matches(expected: TypeTag, actual: Optional[TypeTag]) -> bool:
    """Return whether a value handed to a typed setter has the setter's type."""

    if actual is None or actual.is_list != expected.is_list:
        return False
    return actual.kind is None or actual.kind == expected.kind


def _dispatch(notifications: list[Notification]) -> None:
    for notification in notifications:
        notification.fire()


def _parse_stored_duration(text: str) -> timedelta:
    try:
        return parse_duration(text)
    except ValueError as exc:
        raise ConfigDefect(f"invalid duration: {text}; use the duration validator!") from exc


def _check_version(version: Any) -> None:
    if isinstance(version, bool) or not isinstance(version, int) or version < 0:
        raise InvalidFormat(f"invalid version tag: {version!r}")


__all__ = ["ConfigStore", "Strictness"]
