"""Deterministic item state transitions.

Each function derives the next state from the previous one.  Flags that a
transition does not name are carried over unchanged, and ``data`` is only
ever replaced on success.
"""

from __future__ import annotations

from typing import TypeVar

from pybatchload.state.models import ItemState

T = TypeVar("T")


def queued(state: ItemState[T]) -> ItemState[T]:
    return state.model_copy(update={"is_queued": True})


def loading(state: ItemState[T]) -> ItemState[T]:
    return state.model_copy(update={"has_errors": False, "is_queued": False, "is_loading": True})


def succeeded(state: ItemState[T], data: T) -> ItemState[T]:
    """Attach freshly loaded data.

    ``is_queued`` is left alone: an identifier refreshed while this load was
    in flight is still waiting for the next one.
    """
    return state.model_copy(update={"has_errors": False, "is_loading": False, "data": data})


def failed(state: ItemState[T]) -> ItemState[T]:
    """Flag a failed load, keeping whatever data was loaded previously."""
    return state.model_copy(update={"has_errors": True, "is_loading": False})
