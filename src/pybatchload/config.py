"""Loader configuration for pybatchload."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from pybatchload.exceptions import BatchLoaderConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


def _env_int(name: str, value: str) -> int:
    try:
        return int(value.strip())
    except ValueError as exc:
        raise BatchLoaderConfigError(f"{name} must be an integer, got {value!r}") from exc


@dataclasses.dataclass(frozen=True)
class BatchLoaderConfig:
    """Batch loader configuration.

    Parameters
    ----------
    debounce_ms : int
        Quiet period in milliseconds.  Every enqueue restarts the window,
        so a burst collapses into one bulk load fired ``debounce_ms`` after
        the last request.  ``0`` still defers the load to the next event
        loop iteration, which batches everything requested synchronously.
    keep_cache : bool
        Keep an identifier's state after its last observer unsubscribes.
        A later subscriber then gets the cached state without a reload.
    load_without_items : bool
        Issue a bulk load with an empty identifier list on construction and
        on every :meth:`~pybatchload.loader.BatchLoader.refresh_all`, even
        when nothing is subscribed.
    """

    debounce_ms: int = 0
    keep_cache: bool = False
    load_without_items: bool = False

    def __post_init__(self) -> None:
        if self.debounce_ms < 0:
            raise BatchLoaderConfigError(f"debounce_ms must be >= 0, got {self.debounce_ms}")

    @classmethod
    def from_env(cls, **overrides: Any) -> BatchLoaderConfig:
        """Create configuration from environment variables.

        Reads ``BATCHLOAD_DEBOUNCE_MS``, ``BATCHLOAD_KEEP_CACHE`` and
        ``BATCHLOAD_LOAD_WITHOUT_ITEMS``.  Explicit keyword arguments
        override environment values.

        Parameters
        ----------
        **overrides
            Explicit field values that take precedence over env vars.

        Returns
        -------
        BatchLoaderConfig
            Populated configuration.
        """
        env = os.environ
        config_kwargs: dict[str, Any] = {}

        debounce_env = env.get("BATCHLOAD_DEBOUNCE_MS")
        if debounce_env is not None and "debounce_ms" not in overrides:
            config_kwargs["debounce_ms"] = _env_int("BATCHLOAD_DEBOUNCE_MS", debounce_env)

        if "keep_cache" not in overrides:
            config_kwargs["keep_cache"] = _env_bool(env.get("BATCHLOAD_KEEP_CACHE"), False)

        if "load_without_items" not in overrides:
            config_kwargs["load_without_items"] = _env_bool(
                env.get("BATCHLOAD_LOAD_WITHOUT_ITEMS"),
                False,
            )

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
