"""pybatchload - Debounced batching cache for bulk-loaded items."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pybatchload")
except PackageNotFoundError:
    __version__ = "0+local"
from pybatchload.config import BatchLoaderConfig
from pybatchload.exceptions import (
    BatchLoaderClosedError,
    BatchLoaderConfigError,
    BatchLoaderError,
    NoLoaderError,
)
from pybatchload.loader import BatchLoader
from pybatchload.state.models import (
    NEW_ITEM_STATE,
    IdGetter,
    ItemCallback,
    ItemState,
    Loader,
)
from pybatchload.state.store import ItemStateStore

__all__ = [
    "__version__",
    "NEW_ITEM_STATE",
    "BatchLoader",
    "BatchLoaderClosedError",
    "BatchLoaderConfig",
    "BatchLoaderConfigError",
    "BatchLoaderError",
    "IdGetter",
    "ItemCallback",
    "ItemState",
    "ItemStateStore",
    "Loader",
    "NoLoaderError",
]
