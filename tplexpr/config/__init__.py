from .load import CACHE_ENV, DEFAULT_CONFIG_FILE, load_config, load_context
from .model import EngineConfig
from .typed import ConfigError, build_typed

__all__ = [
    "EngineConfig",
    "ConfigError",
    "build_typed",
    "load_config",
    "load_context",
    "DEFAULT_CONFIG_FILE",
    "CACHE_ENV",
]
