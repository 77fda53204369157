"""In-memory item state store.

This is the only component allowed to change item state.  Every change is
written and then delivered synchronously to the identifier's observers, in
the order they subscribed.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from typing import Any, Generic, TypeVar

from pybatchload.state import transitions
from pybatchload.state.models import NEW_ITEM_STATE, ItemCallback, ItemState

_logger = logging.getLogger(__name__)

T = TypeVar("T")


class ItemStateStore(Generic[T]):
    """Subscription registry and state for every known identifier.

    An identifier is *registered* while it has observers, or, with
    ``keep_cache`` enabled, from its first subscription onwards.  The
    registry entry and the state are always created and evicted together.
    """

    def __init__(self, *, keep_cache: bool = False) -> None:
        self._keep_cache = keep_cache
        self._subscriptions: dict[str, list[ItemCallback[T]]] = {}
        self._states: dict[str, ItemState[T]] = {}

    def get(self, item_id: str) -> ItemState[T]:
        return self._states.get(item_id, NEW_ITEM_STATE)

    def ids(self) -> list[str]:
        return list(self._subscriptions)

    def register(self, item_id: str) -> bool:
        """Create the registry entry and default state for ``item_id``.

        Returns ``False`` when the identifier was already registered.
        """
        if item_id in self._subscriptions:
            return False
        self._subscriptions[item_id] = []
        self._states[item_id] = NEW_ITEM_STATE
        return True

    def add_observer(self, item_id: str, callback: ItemCallback[T]) -> None:
        self.register(item_id)
        self._subscriptions[item_id].append(callback)

    def unregister(self, item_id: str, callback: ItemCallback[T]) -> None:
        """Remove an observer, evicting the identifier once nobody is left."""
        callbacks = self._subscriptions.get(item_id)
        if callbacks is None:
            return
        remaining = [cb for cb in callbacks if cb != callback]
        self._subscriptions[item_id] = remaining
        if not remaining and not self._keep_cache:
            del self._subscriptions[item_id]
            self._states.pop(item_id, None)
            _logger.debug("Evicted %s", item_id)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def mark_queued(self, item_id: str | None) -> None:
        self._apply(item_id, transitions.queued)

    def mark_loading(self, item_ids: Iterable[str | None]) -> None:
        for item_id in item_ids:
            self._apply(item_id, transitions.loading)

    def mark_succeeded(self, item_id: str, data: T) -> None:
        self._apply(item_id, lambda state: transitions.succeeded(state, data))

    def mark_failed(self, item_ids: Iterable[str | None]) -> None:
        for item_id in item_ids:
            self._apply(item_id, transitions.failed)

    def _apply(self, item_id: str | None, transition: Callable[[ItemState[Any]], ItemState[Any]]) -> None:
        # Sentinel and unregistered identifiers have nothing to update.
        if item_id is None or item_id not in self._subscriptions:
            return
        state = transition(self._states[item_id])
        self._states[item_id] = state
        # Observers may unsubscribe each other while being notified; removed
        # ones are not called for the rest of the pass.
        for callback in list(self._subscriptions[item_id]):
            if callback not in self._subscriptions.get(item_id, ()):
                continue
            try:
                callback(state)
            except Exception:
                _logger.warning("Observer for %s failed", item_id, exc_info=True)
