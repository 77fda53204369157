"""Custom exception hierarchy for pybatchload."""

from __future__ import annotations


class BatchLoaderError(Exception):
    """Base exception for all pybatchload errors."""


class BatchLoaderConfigError(BatchLoaderError):
    """Invalid configuration (e.g. a negative debounce)."""


class BatchLoaderClosedError(BatchLoaderError):
    """An identifier was enqueued on a loader that has been closed."""


class NoLoaderError(BatchLoaderError):
    """A flush ran before any bulk loader was configured.

    Raised by the placeholder loader a :class:`~pybatchload.loader.BatchLoader`
    gets when constructed without one.  Like any other loader failure it is
    reported through ``has_errors`` and never reaches the caller.
    """
