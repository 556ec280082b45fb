# config_loader.py
import os
from typing import Any, Dict

import yaml

from signage_client.monitoring.structured_logger import log_info, log_warning

# Sentinel object to distinguish between "key not found" and "key exists but is None"
_NOT_FOUND = object()


class ConfigLoader:
    """Dynamic configuration loader that can reload config when needed"""

    def __init__(self, config_file: str = "config.yaml"):
        self.config_file = config_file
        self._config = None
        self._last_modified = 0
        self._load_config()

    def _load_config(self):
        """Load configuration from file"""
        try:
            if os.path.exists(self.config_file):
                current_modified = os.path.getmtime(self.config_file)
                if current_modified > self._last_modified or self._config is None:
                    with open(self.config_file, "r", encoding="utf-8") as f:
                        self._config = yaml.safe_load(f) or {}
                    self._last_modified = current_modified
                    log_info("config.reloaded", f"Configuration reloaded from {self.config_file}")
            elif self._config is None:
                self._config = {}
        except (OSError, yaml.YAMLError) as e:
            log_warning("config.load_failed", f"Error loading config: {e}", file=self.config_file)
            if self._config is None:
                self._config = {}

    def _get_nested(self, config: Dict, key: str) -> Any:
        """Walk a dotted key path (e.g. 'xmds.url'); returns _NOT_FOUND if any segment is missing"""
        value = config
        for k in key.split('.'):
            if not isinstance(value, dict) or k not in value:
                return _NOT_FOUND
            value = value[k]
        return value

    def get(self, key: str, default: Any = None) -> Any:
        """Get a configuration value, reloading config if needed. Supports dot notation for nested keys."""
        self._load_config()
        if '.' in key:
            result = self._get_nested(self._config, key)
            if result is not _NOT_FOUND:
                return result if result is not None else default
        return self._config.get(key, default)

    def get_str(self, key: str, default: str = "") -> str:
        value = self.get(key, default)
        return default if value is None else str(value)

    def get_bool(self, key: str, default: bool = False) -> bool:
        """Get a boolean configuration value"""
        value = self.get(key, default)
        if isinstance(value, str):
            return value.strip().lower() in ("1", "true", "yes", "on")
        return bool(value)

    def get_int(self, key: str, default: int = 0) -> int:
        """Get an integer configuration value"""
        return int(self.get(key, default))

    def get_float(self, key: str, default: float = 0.0) -> float:
        """Get a float configuration value"""
        return float(self.get(key, default))

    def reload(self):
        """Force reload of configuration"""
        self._last_modified = 0
        self._load_config()
