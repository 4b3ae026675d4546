"""
Configuration Management System

Centralized configuration for the perception and signal decision engine.
Every YAML and JSON file in the config directory is loaded under its file
stem, so ``detection.yaml`` becomes the ``detection`` section.

Supports dot-notation access, runtime overrides and reloading. A missing
config directory is not an error: every component carries built-in defaults
matching the shipped files.
"""

import os
import json
import logging
from pathlib import Path
from typing import Dict, Any, Optional

import yaml

from traffic_engine.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

CONFIG_DIR_ENV = "TRAFFIC_ENGINE_CONFIG_DIR"


class ConfigManager:
    """
    Manage engine configuration from YAML and JSON files

    Provides:
    - Load all config files on startup
    - Dot notation access: config.get('traffic.defaultJunction.maxGreenTime')
    - Hot reload capability
    - Default values for missing keys
    """

    def __init__(self, config_dir: Optional[str] = None):
        """
        Initialize configuration manager

        Args:
            config_dir: Path to config directory. Falls back to the
                TRAFFIC_ENGINE_CONFIG_DIR environment variable, then to
                backend/config next to this package.
        """
        if config_dir:
            self.config_dir = Path(config_dir)
        elif os.getenv(CONFIG_DIR_ENV):
            self.config_dir = Path(os.environ[CONFIG_DIR_ENV])
        else:
            self.config_dir = Path(__file__).parent.parent / "config"

        self.configs: Dict[str, Any] = {}
        self._load_all_configs()

    def _load_all_configs(self):
        """Load all configuration files from config directory"""
        if not self.config_dir.is_dir():
            logger.info("Config directory %s not found, using built-in defaults", self.config_dir)
            return

        for yaml_file in sorted(self.config_dir.glob("*.yaml")):
            try:
                with open(yaml_file, 'r') as f:
                    self.configs[yaml_file.stem] = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigurationError(f"Failed to parse {yaml_file.name}: {e}") from e
            logger.debug("Loaded config file %s", yaml_file.name)

        for json_file in sorted(self.config_dir.glob("*.json")):
            try:
                with open(json_file, 'r') as f:
                    self.configs[json_file.stem] = json.load(f)
            except json.JSONDecodeError as e:
                raise ConfigurationError(f"Failed to parse {json_file.name}: {e}") from e
            logger.debug("Loaded config file %s", json_file.name)

        for name, section in self.configs.items():
            if not isinstance(section, dict):
                raise ConfigurationError(f"Config file '{name}' must contain a mapping")

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value by dot notation key

        Examples:
            config.get('detection.confidenceThreshold')
            config.get('traffic.defaultJunction.maxGreenTime')

        Args:
            key: Dot-separated key path
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        value = self.configs
        for k in key.split('.'):
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default
        return value

    def get_detection_config(self) -> Dict[str, Any]:
        """Get detection decoder configuration section"""
        return self.configs.get('detection', {})

    def get_traffic_config(self) -> Dict[str, Any]:
        """Get density and signal timing configuration section"""
        return self.configs.get('traffic', {})

    def get_emergency_config(self) -> Dict[str, Any]:
        """Get emergency monitor configuration section"""
        return self.configs.get('emergency', {})

    def reload(self):
        """Reload all configuration files"""
        logger.info("Reloading configuration from %s", self.config_dir)
        self.configs.clear()
        self._load_all_configs()

    def set(self, key: str, value: Any):
        """
        Set a configuration value (runtime only, not persisted)

        Args:
            key: Dot-separated key path
            value: Value to set
        """
        keys = key.split('.')
        config = self.configs

        for k in keys[:-1]:
            if not isinstance(config.get(k), dict):
                config[k] = {}
            config = config[k]

        config[keys[-1]] = value


# Global configuration instance, created on first use
_config: Optional[ConfigManager] = None


def get_config() -> ConfigManager:
    """Get the global configuration instance"""
    global _config
    if _config is None:
        _config = ConfigManager()
    return _config


def init_config(config_dir: Optional[str] = None) -> ConfigManager:
    """Replace the global configuration instance"""
    global _config
    _config = ConfigManager(config_dir)
    return _config
