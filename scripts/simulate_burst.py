#!/usr/bin/env python3
"""Simulate a burst of item subscriptions against a fake backend.

Subscribes a number of identifiers with a small stagger between them and
prints every bulk call the fake backend receives, followed by the final
state of each identifier.  Handy for seeing how ``debounce_ms`` trades
latency for batch size.

Usage
-----
::

    python scripts/simulate_burst.py --items 20 --stagger-ms 5 --debounce-ms 25

Options::

    --items N            Number of identifiers to subscribe (default: 10)
    --stagger-ms MS      Delay between subscriptions (default: 5)
    --debounce-ms MS     Loader debounce (default: BATCHLOAD_DEBOUNCE_MS or 0)
    --latency-ms MS      Simulated backend latency (default: 50)
    --drop ID            Identifier the backend "forgets" (repeatable)
    --keep-cache         Keep state after unsubscribing
    --debug              Enable debug logging
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
import time
from pathlib import Path
from typing import Any

# Allow running from the repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from pybatchload import BatchLoader, BatchLoaderConfig, ItemState  # noqa: E402


class _FakeBackend:
    def __init__(self, *, latency_s: float, dropped: set[str]) -> None:
        self._latency_s = latency_s
        self._dropped = dropped
        self._started = time.monotonic()
        self.calls = 0

    async def fetch(self, item_ids: list[str]) -> list[dict[str, Any]]:
        self.calls += 1
        elapsed_ms = (time.monotonic() - self._started) * 1000
        print(f"[{elapsed_ms:7.1f} ms] bulk call #{self.calls}: {len(item_ids)} ids {item_ids}")
        await asyncio.sleep(self._latency_s)
        return [{"id": item_id, "value": f"value-{item_id}"} for item_id in item_ids if item_id not in self._dropped]


def _describe(state: ItemState[Any]) -> str:
    if state.is_loading:
        return "loading"
    if state.has_errors:
        return "failed"
    if state.data is not None:
        return f"ok ({state.data['value']})"
    return "queued" if state.is_queued else "idle"


async def main() -> None:
    parser = argparse.ArgumentParser(description="Simulate bursts of batched item loads.")
    parser.add_argument("--items", type=int, default=10)
    parser.add_argument("--stagger-ms", type=float, default=5.0)
    parser.add_argument("--debounce-ms", type=int, default=None)
    parser.add_argument("--latency-ms", type=float, default=50.0)
    parser.add_argument("--drop", action="append", default=[])
    parser.add_argument("--keep-cache", action="store_true")
    parser.add_argument("--debug", action="store_true")
    args = parser.parse_args()

    if args.debug:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    else:
        logging.basicConfig(level=logging.WARNING)

    overrides: dict[str, Any] = {"keep_cache": args.keep_cache}
    if args.debounce_ms is not None:
        overrides["debounce_ms"] = args.debounce_ms
    config = BatchLoaderConfig.from_env(**overrides)

    backend = _FakeBackend(latency_s=args.latency_ms / 1000, dropped=set(args.drop))
    item_ids = [str(n) for n in range(1, args.items + 1)]
    notifications = 0

    def on_change(state: ItemState[Any]) -> None:
        nonlocal notifications
        notifications += 1

    async with BatchLoader(lambda item: item["id"], backend.fetch, config) as loader:
        disposers = []
        for item_id in item_ids:
            disposers.append(loader.subscribe(item_id, on_change))
            await asyncio.sleep(args.stagger_ms / 1000)
        await loader.drain()

        print()
        print(f"debounce={config.debounce_ms} ms, bulk calls={backend.calls}, notifications={notifications}")
        for item_id in item_ids:
            print(f"  {item_id:>4}: {_describe(loader.get_item(item_id))}")

        for dispose in disposers:
            dispose()


if __name__ == "__main__":
    asyncio.run(main())
