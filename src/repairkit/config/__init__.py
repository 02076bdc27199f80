from .settings import (
    Config,
    FallbackConfig,
    JSONRulesConfig,
    LoggingConfig,
    RepairConfig,
    XMLRulesConfig,
    config,
    get_config,
    reload_config,
)

__all__ = [
    "Config",
    "FallbackConfig",
    "JSONRulesConfig",
    "LoggingConfig",
    "RepairConfig",
    "XMLRulesConfig",
    "config",
    "get_config",
    "reload_config",
]
