from .loader import ConfigError, GrouperConfig, load_config, resolve_config

__all__ = [
    "ConfigError",
    "GrouperConfig",
    "load_config",
    "resolve_config",
]
