"""Testing helpers that keep change notifications observable and predictable.

Purpose
    Provide a ready-made subscriber that records every key a store reports as
    changed, so test-suites and notebooks can assert on exact notification
    sequences without writing throwaway closures.

Contents
    - ``ChangeRecorder``: callable collecting changed keys in firing order.
    - ``recording``: subscribe a fresh recorder and return it with its id.

System Integration
    Used by the library's own test-suite and available to applications that
    want to assert on how their code mutates configuration.
"""

from __future__ import annotations

import threading
from collections import Counter

from .application.store import ConfigStore


class ChangeRecorder:
    """Record changed keys in the order their notifications fired.

    Why
        Notifications are synchronous, so a plain list is enough to capture
        the exact sequence; the lock only matters when several threads mutate
        the same store.

    Examples
    --------
    >>> recorder = ChangeRecorder()
    >>> recorder("daemon.port")
    >>> recorder.keys, recorder.counts()["daemon.port"]
    (['daemon.port'], 1)
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._keys: list[str] = []

    def __call__(self, key: str) -> None:
        with self._lock:
            self._keys.append(key)

    @property
    def keys(self) -> list[str]:
        with self._lock:
            return list(self._keys)

    def counts(self) -> Counter[str]:
        """Return how often each key fired."""

        with self._lock:
            return Counter(self._keys)

    def clear(self) -> None:
        with self._lock:
            self._keys.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._keys)


def recording(store: ConfigStore, key: str = "") -> tuple[ChangeRecorder, int]:
    """Subscribe a new :class:`ChangeRecorder` to *key* on *store*."""

    recorder = ChangeRecorder()
    return recorder, store.subscribe(key, recorder)
