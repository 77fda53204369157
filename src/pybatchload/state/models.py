"""Per-identifier load state and the callable shapes around it."""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterable
from typing import Any, Generic, TypeAlias, TypeVar

from pydantic import BaseModel, ConfigDict

T = TypeVar("T")


class ItemState(BaseModel, Generic[T]):
    """Load state of a single identifier.

    Instances are immutable; every transition produces a new value, so an
    observer may keep the state it was handed without it changing under it.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", arbitrary_types_allowed=True)

    is_loading: bool = False
    is_queued: bool = True
    has_errors: bool = False
    data: T | None = None


#: State reported for identifiers that were never registered (or were evicted).
NEW_ITEM_STATE: ItemState[Any] = ItemState()

ItemCallback: TypeAlias = Callable[[ItemState[T]], None]
IdGetter: TypeAlias = Callable[[T], str]
Loader: TypeAlias = Callable[[list[str]], Iterable[T] | Awaitable[Iterable[T]]]

#: Pending identifiers; ``None`` is the unkeyed "load without items" request.
Queue: TypeAlias = list[str | None]
