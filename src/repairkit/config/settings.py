"""
Configuration management for repairkit.
Centralizes rule thresholds, fallback settings and logging paths.
"""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

DEFAULT_CONFIG_PATH = "~/.repairkit/config.json"

XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>'


@dataclass
class JSONRulesConfig:
    """JSON rule pipeline settings."""

    # Unterminated strings longer than this are closed at the first
    # structural character instead of at the end of the line.
    unclosed_string_threshold: int = 200


@dataclass
class XMLRulesConfig:
    """XML rule pipeline settings."""

    declaration: str = XML_DECLARATION
    invalid_tag_prefix: str = "tag"
    max_tag_edit_distance: int = 1


@dataclass
class FallbackConfig:
    """Generative fallback settings."""

    use_ai: bool = False
    json_max_new_tokens: int = 200
    xml_max_new_tokens: int = 300
    temperature: float = 0.7


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "WARNING"
    format: str = "{time:YYYY-MM-DD HH:mm:ss} | {level} | {message}"
    logs_dir: str = "~/.repairkit/logs"


@dataclass
class RepairConfig:
    json_rules: JSONRulesConfig = field(default_factory=JSONRulesConfig)
    xml_rules: XMLRulesConfig = field(default_factory=XMLRulesConfig)
    fallback: FallbackConfig = field(default_factory=FallbackConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


class Config:
    """Main configuration class."""

    def __init__(self, config_file: Optional[str] = None):
        """Initialize configuration from JSON file."""
        self.config_file = os.path.expanduser(
            config_file or os.getenv("REPAIRKIT_CONFIG") or DEFAULT_CONFIG_PATH
        )
        self._load_config()

    def _expand_paths_in_config(self, config_dict: dict) -> dict:
        """Recursively expand tilde paths in configuration dictionary."""
        expanded_config = {}
        for key, value in config_dict.items():
            if isinstance(value, str) and value.startswith("~/"):
                expanded_config[key] = str(Path.home() / value[2:])
            elif isinstance(value, dict):
                expanded_config[key] = self._expand_paths_in_config(value)
            else:
                expanded_config[key] = value
        return expanded_config

    def _load_config(self) -> None:
        """Load configuration from JSON file, keeping defaults when it is absent."""
        config_data = {}
        if os.path.exists(self.config_file):
            try:
                with open(self.config_file, "r") as f:
                    config_data = json.load(f)
                config_data = self._expand_paths_in_config(config_data)
            except Exception as e:
                raise ValueError(f"Failed to load config file {self.config_file}: {e}")

        try:
            self.json_rules = JSONRulesConfig(**config_data.get("json_rules", {}))
            self.xml_rules = XMLRulesConfig(**config_data.get("xml_rules", {}))
            self.fallback = FallbackConfig(**config_data.get("fallback", {}))
            self.logging = LoggingConfig(**config_data.get("logging", {}))
        except TypeError as e:
            raise ValueError(f"Invalid configuration in {self.config_file}: {e}")

        self.logging.logs_dir = os.path.expanduser(self.logging.logs_dir)

    def as_repair_config(self) -> RepairConfig:
        return RepairConfig(
            json_rules=self.json_rules,
            xml_rules=self.xml_rules,
            fallback=self.fallback,
            logging=self.logging,
        )


# Global configuration instance (lazy initialization)
_config_instance = None


def get_config(force_reload: bool = False) -> Config:
    """Get the global configuration instance."""
    global _config_instance
    if _config_instance is None or force_reload:
        _config_instance = Config()
    return _config_instance


def reload_config() -> None:
    """Reload the configuration by resetting the global instance."""
    global _config_instance
    _config_instance = None
    get_config(force_reload=True)


class _ConfigProxy:
    def __getattr__(self, name):
        return getattr(get_config(), name)


config = _ConfigProxy()
