import logging
import os
from typing import Any, Dict

import yaml

from spritegen.core import BASE

logger = logging.getLogger(__name__)


class ApiConfig:
    """Configuration manager for the generation API"""

    def __init__(self, config_path: str = os.path.join(BASE, "conf", "api.yaml")):
        self.config_path = config_path
        self.config = self._load_config()

    def _load_config(self) -> Dict[str, Any]:
        """Load configuration from api.yaml, falling back to the example file"""
        path = self.config_path
        if not os.path.exists(path):
            example = path.replace(".yaml", ".example.yaml")
            if os.path.exists(example):
                path = example
        try:
            if os.path.exists(path):
                with open(path, "r", encoding="utf-8") as f:
                    config = yaml.safe_load(f) or {}
                logger.info(f"[config] Loaded API config from {path}")
                return self._merge(self._get_default_config(), config)
            logger.warning(
                f"[config] API config not found at {self.config_path}, using defaults"
            )
            return self._get_default_config()
        except (OSError, yaml.YAMLError) as e:
            logger.error(f"[config] Failed to load API config: {e}, using defaults")
            return self._get_default_config()

    @staticmethod
    def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        merged = dict(base)
        for key, value in override.items():
            if isinstance(value, dict) and isinstance(merged.get(key), dict):
                merged[key] = ApiConfig._merge(merged[key], value)
            else:
                merged[key] = value
        return merged

    def _get_default_config(self) -> Dict[str, Any]:
        """Return default configuration"""
        return {
            "server": {
                "host": "127.0.0.1",
                "port": 8008,
                "log_level": "info",
                "reload": False,
            },
            "security": {
                "api_key_env": "SPRITEGEN_API_KEY",
            },
        }

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value by key path (e.g., 'server.port')"""
        keys = key.split(".")
        value = self.config

        for k in keys:
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default

        return value

    def reload(self):
        """Reload configuration from file"""
        self.config = self._load_config()
        logger.info("[config] API config reloaded")


# Global config instance
api_config = ApiConfig()
