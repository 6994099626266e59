from .loader import DEFAULT_CONFIG_TEMPLATE, PROJECT_CONFIG, load_config
from .models import (
    LoggingConfig,
    Puml2PngConfig,
    ServerConfig,
    WatchConfig,
)

__all__ = [
    "DEFAULT_CONFIG_TEMPLATE",
    "LoggingConfig",
    "PROJECT_CONFIG",
    "Puml2PngConfig",
    "ServerConfig",
    "WatchConfig",
    "load_config",
]
