"""Cache manager for symbol descriptors."""

from loader.config import CONFIG_FILENAME, ConfigError, SymcacheConfig, load_config
from loader.errors import LoaderNotInitialized
from loader.loader import SymbolLoader, open_loader
from loader.modes import ModeKind, RefreshMode

__all__ = [
    "CONFIG_FILENAME",
    "ConfigError",
    "LoaderNotInitialized",
    "ModeKind",
    "RefreshMode",
    "SymbolLoader",
    "SymcacheConfig",
    "load_config",
    "open_loader",
]
