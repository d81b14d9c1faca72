"""Per-handle subscription table for change notifications.

Purpose
-------
Keep the callbacks registered on one store handle, keyed by the exact key they
watch or by ``""`` for "every change". The registry holds no lock of its own;
the owning store calls it while holding the family lock and invokes the
gathered callbacks only after releasing it.

Contents
    - ``ChangeCallback``: callable signature receiving the changed key.
    - ``Notification``: a callback bound to the key it will be called with.
    - ``EventRegistry``: add / remove / clear / gather.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterator

ChangeCallback = Callable[[str], None]

#: Bucket name for subscriptions that fire on every change.
ALL_KEYS = ""


@dataclass(frozen=True, slots=True)
class Notification:
    """A gathered callback and the key it has to be called with."""

    callback: ChangeCallback
    key: str

    def fire(self) -> None:
        self.callback(self.key)


class EventRegistry:
    """Subscriptions of a single store handle.

    Ids are drawn from *ids*, an iterator shared by every handle of a view
    family, so they stay unique across the family and are never reused.

    Examples
    --------
    >>> from itertools import count
    >>> seen = []
    >>> registry = EventRegistry(count())
    >>> registry.add("daemon.port", seen.append)
    0
    >>> registry.add("", seen.append)
    1
    >>> for notification in registry.gather("daemon.port"):
    ...     notification.fire()
    >>> seen
    ['daemon.port', 'daemon.port']
    """

    def __init__(self, ids: Iterator[int]) -> None:
        self._ids = ids
        self._buckets: dict[str, dict[int, ChangeCallback]] = {}

    def add(self, key: str, callback: ChangeCallback) -> int:
        """Register *callback* for *key* and return its id."""

        subscription_id = next(self._ids)
        self._buckets.setdefault(key, {})[subscription_id] = callback
        return subscription_id

    def remove(self, subscription_id: int) -> None:
        """Drop *subscription_id* wherever it is registered; prune empty buckets."""

        for key in list(self._buckets):
            bucket = self._buckets[key]
            bucket.pop(subscription_id, None)
            if not bucket:
                del self._buckets[key]

    def clear(self) -> None:
        self._buckets.clear()

    def gather(self, key: str) -> list[Notification]:
        """Return notifications for a committed change of *key* (relative to the handle)."""

        notifications: list[Notification] = []
        for bucket_key in (key, ALL_KEYS):
            for callback in self._buckets.get(bucket_key, {}).values():
                notifications.append(Notification(callback, key))
        return notifications

    def __len__(self) -> int:
        return sum(len(bucket) for bucket in self._buckets.values())
