"""Debounced batch loader.

Individual ``subscribe``/``refresh`` requests are queued and collapsed into a
single bulk load once the queue has been quiet for ``debounce_ms``.  Results
are matched back to the queued identifiers and fanned out through the
:class:`~pybatchload.state.store.ItemStateStore`.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Callable
from typing import Any, Generic, TypeVar

from pybatchload.config import BatchLoaderConfig
from pybatchload.exceptions import (
    BatchLoaderClosedError,
    BatchLoaderConfigError,
    BatchLoaderError,
    NoLoaderError,
)
from pybatchload.state.models import IdGetter, ItemCallback, ItemState, Loader, Queue
from pybatchload.state.store import ItemStateStore

_logger = logging.getLogger(__name__)

T = TypeVar("T")


def _no_loader(item_ids: list[str]) -> list[Any]:
    raise NoLoaderError("No loading function provided")


class BatchLoader(Generic[T]):
    """Batching cache for items fetched through a bulk loader.

    Usage::

        async with BatchLoader(lambda user: user["id"], fetch_users) as users:
            unsubscribe = users.subscribe("42", on_change)
            ...
            unsubscribe()

    The loader receives a list of identifiers and returns the matching items,
    either directly or as an awaitable.  It does not need to preserve order or
    return every identifier: anything it leaves out is reported as failed.
    Load failures are never raised; observers see them as ``has_errors``.
    """

    def __init__(
        self,
        get_id: IdGetter[T],
        loader: Loader[T] | None = None,
        config: BatchLoaderConfig | None = None,
        *,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        self._config = config or BatchLoaderConfig()
        self._get_id = get_id
        self._loader: Loader[T] = loader or _no_loader
        self._debounce_ms = self._config.debounce_ms
        self._store: ItemStateStore[T] = ItemStateStore(keep_cache=self._config.keep_cache)
        self._loop = loop
        self._queue: Queue = []
        self._timer: asyncio.TimerHandle | None = None
        self._flushes: set[asyncio.Task[None]] = set()
        self._closed = False

        if self._config.load_without_items:
            self._add_to_queue(None)

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> BatchLoader[T]:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Stop scheduling, drop queued requests and cancel in-flight loads."""
        if self._closed:
            return
        self._closed = True
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        self._queue = []
        flushes = list(self._flushes)
        for task in flushes:
            task.cancel()
        if flushes:
            await asyncio.gather(*flushes, return_exceptions=True)
        _logger.debug("Batch loader closed (%d in-flight loads cancelled)", len(flushes))

    async def drain(self) -> None:
        """Wait until nothing is scheduled and no load is in flight."""
        while self._timer is not None or self._flushes:
            if self._flushes:
                await asyncio.gather(*self._flushes, return_exceptions=True)
                continue
            assert self._timer is not None  # noqa: S101
            delay = self._timer.when() - self._require_loop().time()
            await asyncio.sleep(max(0.0, delay))

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def config(self) -> BatchLoaderConfig:
        return self._config

    @property
    def debounce_ms(self) -> int:
        return self._debounce_ms

    @property
    def pending_ids(self) -> Queue:
        """Identifiers waiting for the next flush (``None`` is the unkeyed request)."""
        return list(self._queue)

    @property
    def is_closed(self) -> bool:
        return self._closed

    def set_loader(self, loader: Loader[T]) -> None:
        """Replace the bulk loader; loads already in flight keep the old one."""
        self._loader = loader

    def set_debounce(self, debounce_ms: int) -> None:
        """Replace the debounce used the next time a flush is scheduled."""
        if debounce_ms < 0:
            raise BatchLoaderConfigError(f"debounce_ms must be >= 0, got {debounce_ms}")
        self._debounce_ms = debounce_ms

    def get_item(self, item_id: str) -> ItemState[T]:
        return self._store.get(item_id)

    def refresh(self, item_id: str) -> None:
        """Queue ``item_id`` for the next bulk load, even if it is already pending."""
        self._add_to_queue(item_id)

    def refresh_all(self) -> None:
        """Queue every registered identifier (and the unkeyed request, if enabled)."""
        for item_id in self._store.ids():
            self._add_to_queue(item_id)
        if self._config.load_without_items:
            self._add_to_queue(None)

    def subscribe(self, item_id: str, callback: ItemCallback[T]) -> Callable[[], None]:
        """Observe ``item_id``; returns a callable that removes the observer.

        The first subscription to an identifier queues its load.  The callback
        is not called for that queued transition, only for the ones after it;
        use :meth:`get_item` for the current state.  Raises
        :class:`~pybatchload.exceptions.BatchLoaderClosedError` once closed.
        """
        self._ensure_schedulable()
        if self._store.register(item_id):
            self._add_to_queue(item_id)
        self._store.add_observer(item_id, callback)

        def unsubscribe() -> None:
            self._store.unregister(item_id, callback)

        return unsubscribe

    # ------------------------------------------------------------------
    # Scheduling
    # ------------------------------------------------------------------

    def _require_loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            try:
                self._loop = asyncio.get_running_loop()
            except RuntimeError as exc:
                raise BatchLoaderError(
                    "No event loop available. Create the BatchLoader inside a running loop or pass loop=..."
                ) from exc
        return self._loop

    def _ensure_schedulable(self) -> asyncio.AbstractEventLoop:
        if self._closed:
            raise BatchLoaderClosedError("Batch loader is closed")
        return self._require_loop()

    def _add_to_queue(self, item_id: str | None) -> None:
        loop = self._ensure_schedulable()
        self._queue.append(item_id)
        self._store.mark_queued(item_id)
        self._schedule_load(loop)

    def _schedule_load(self, loop: asyncio.AbstractEventLoop) -> None:
        if self._timer is not None:
            self._timer.cancel()
        self._timer = loop.call_later(self._debounce_ms / 1000, self._flush)

    def _flush(self) -> None:
        self._timer = None
        queue, self._queue = self._queue, []
        self._store.mark_loading(queue)
        task = self._require_loop().create_task(self._load(queue, self._loader))
        self._flushes.add(task)
        task.add_done_callback(self._flushes.discard)

    async def _load(self, queue: Queue, loader: Loader[T]) -> None:
        item_ids = [item_id for item_id in queue if item_id is not None]
        _logger.debug("Loading %d items (%d queued requests)", len(item_ids), len(queue))
        try:
            result = loader(item_ids)
            if inspect.isawaitable(result):
                result = await result
            loaded: dict[str, T] = {}
            for item in result:
                loaded.setdefault(self._get_id(item), item)
        except Exception:
            _logger.warning("Bulk load of %d items failed", len(item_ids), exc_info=True)
            self._store.mark_failed(queue)
            return
        self._report_finished(queue, loaded)

    def _report_finished(self, queue: Queue, loaded: dict[str, T]) -> None:
        missing: list[str] = []
        for item_id in queue:
            if item_id is None:
                continue
            if item_id not in loaded:
                missing.append(item_id)
                continue
            self._store.mark_succeeded(item_id, loaded[item_id])
        if missing:
            _logger.debug("Loader returned no result for %s", missing)
        self._store.mark_failed(missing)
