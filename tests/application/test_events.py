"""Subscription bookkeeping and per-handle change notification."""

from __future__ import annotations

from itertools import count

from lib_schema_config import ConfigStore
from lib_schema_config.application.events import ALL_KEYS, EventRegistry
from lib_schema_config.testing import ChangeRecorder, recording

from tests.support import SCHEMA


def test_registry_ids_increase_and_buckets_are_pruned() -> None:
    registry = EventRegistry(count())
    first = registry.add("a", print)
    second = registry.add(ALL_KEYS, print)
    assert second > first
    assert len(registry) == 2
    registry.remove(first)
    assert [note.key for note in registry.gather("a")] == ["a"]
    registry.remove(second)
    assert registry.gather("a") == []
    assert len(registry) == 0
    registry.remove(12345)


def test_registry_gathers_exact_and_global_subscribers() -> None:
    exact, everything = ChangeRecorder(), ChangeRecorder()
    registry = EventRegistry(count())
    registry.add("a", exact)
    registry.add("", everything)
    for notification in registry.gather("a") + registry.gather("b"):
        notification.fire()
    assert exact.keys == ["a"]
    assert everything.keys == ["a", "b"]


def test_registry_clear() -> None:
    registry = EventRegistry(count())
    registry.add("a", print)
    registry.clear()
    assert len(registry) == 0


def test_exact_and_global_subscriptions(store: ConfigStore) -> None:
    port, everything = ChangeRecorder(), ChangeRecorder()
    store.subscribe("daemon.port", port)
    store.subscribe("", everything)
    store.set_int("daemon.port", 7000)
    store.set_bool("fs.sync.ignore_moved", True)
    assert port.keys == ["daemon.port"]
    assert everything.keys == ["daemon.port", "fs.sync.ignore_moved"]


def test_subscribing_to_template_keys(store: ConfigStore) -> None:
    recorder, _ = recording(store, "mounts.alpha.path")
    store.set_str("mounts.beta.path", "/b")
    store.set_str("mounts.alpha.path", "/a")
    assert recorder.keys == ["mounts.alpha.path"]


def test_unsubscribe_and_clear(store: ConfigStore) -> None:
    recorder, subscription = recording(store, "daemon.port")
    other, _ = recording(store)
    store.unsubscribe(subscription)
    store.set_int("daemon.port", 7000)
    assert recorder.keys == []
    assert other.keys == ["daemon.port"]
    store.clear_subscriptions()
    store.set_int("daemon.port", 7001)
    assert other.keys == ["daemon.port"]
    store.unsubscribe(subscription)


def test_ids_are_unique_across_a_view_family(store: ConfigStore) -> None:
    view = store.section("fs")
    ids = [
        store.subscribe("", print),
        view.subscribe("", print),
        store.section("daemon").subscribe("port", print),
        store.subscribe("daemon.port", print),
    ]
    assert ids == sorted(ids)
    assert len(set(ids)) == len(ids)


def test_changes_only_notify_the_committing_handle(store: ConfigStore) -> None:
    view = store.section("fs.sync")
    on_root, _ = recording(store, "fs.sync.ignore_moved")
    on_view, _ = recording(view, "ignore_moved")
    view_all, _ = recording(view)

    view.set_bool("ignore_moved", True)
    assert on_view.keys == ["ignore_moved"]
    assert view_all.keys == ["ignore_moved"]
    assert on_root.keys == []

    store.set_bool("fs.sync.ignore_moved", False)
    assert on_root.keys == ["fs.sync.ignore_moved"]
    assert on_view.keys == ["ignore_moved"]


def test_views_of_other_stores_are_independent() -> None:
    first, second = ConfigStore(SCHEMA), ConfigStore(SCHEMA)
    recorder, _ = recording(second)
    first.set_int("daemon.port", 7000)
    assert recorder.keys == []
    assert second.get_int("daemon.port") == 6666
