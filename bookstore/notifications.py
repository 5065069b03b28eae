"""
Change-notification bus keyed by content address.

Observers learn that the data behind an address may have changed and re-query;
notifications carry no payload beyond the address itself.
"""

import itertools
import logging
import threading
from typing import Callable, Dict, List, Tuple

from bookstore.exceptions import InvalidAddress
from bookstore.routing import split_uri

logger = logging.getLogger(__name__)

Observer = Callable[[str], None]
_Key = Tuple[str, Tuple[str, ...]]


class Subscription:
    """Handle returned by ``ChangeNotifier.register``."""

    def __init__(self, notifier: "ChangeNotifier", observer_id: int, uri: str) -> None:
        self._notifier = notifier
        self.observer_id = observer_id
        self.uri = uri

    @property
    def active(self) -> bool:
        return self._notifier.is_registered(self)

    def cancel(self) -> bool:
        return self._notifier.unregister(self)


class ChangeNotifier:
    """Thread-safe registry of observers for content addresses.

    An observer registered at address O hears about a change at address U when
    U equals O, when U lies below O and the observer asked for descendants, or
    when O lies below U (a change to a whole collection touches every item).
    """

    def __init__(self) -> None:
        self._observers: Dict[int, Tuple[_Key, Observer, bool]] = {}
        self._lock = threading.RLock()
        self._ids = itertools.count(1)

    @staticmethod
    def _make_key(uri: str) -> _Key:
        split = split_uri(uri)
        if split is None:
            raise InvalidAddress(uri, "observe")
        return split

    def register(self, uri: str, callback: Observer, notify_for_descendants: bool = False) -> Subscription:
        key = self._make_key(uri)
        with self._lock:
            observer_id = next(self._ids)
            self._observers[observer_id] = (key, callback, notify_for_descendants)
        return Subscription(self, observer_id, uri)

    def unregister(self, subscription: Subscription) -> bool:
        with self._lock:
            return self._observers.pop(subscription.observer_id, None) is not None

    def is_registered(self, subscription: Subscription) -> bool:
        with self._lock:
            return subscription.observer_id in self._observers

    def observer_count(self) -> int:
        with self._lock:
            return len(self._observers)

    def clear(self) -> None:
        with self._lock:
            self._observers.clear()

    def notify_change(self, uri: str) -> int:
        """Call every observer interested in ``uri``; returns how many were called."""
        changed_authority, changed = self._make_key(uri)
        with self._lock:
            targets: List[Observer] = [
                callback
                for (authority, segments), callback, descendants in self._observers.values()
                if authority == changed_authority and self._interested(segments, changed, descendants)
            ]

        # Callbacks run outside the lock so they may query or re-register.
        for callback in targets:
            try:
                callback(uri)
            except Exception:
                logger.exception(f"Change observer failed for {uri}")
        return len(targets)

    @staticmethod
    def _interested(observed: Tuple[str, ...], changed: Tuple[str, ...], descendants: bool) -> bool:
        if observed[:len(changed)] == changed:
            return True
        return descendants and changed[:len(observed)] == observed
