"""
Configuration management for logsource.

Configuration is layered, later layers winning:
- Packaged defaults (default.yaml next to this module)
- A user-supplied YAML file
- Environment variables
"""

import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

DEFAULT_CONFIG_PATH = Path(__file__).parent / "default.yaml"


class Config:
    """Configuration manager for logsource."""
    
    def __init__(self, config_file: Optional[str] = None):
        """
        Initialize configuration.
        
        Args:
            config_file: Path to a YAML configuration file. If None, only
                defaults and environment overrides apply.
        """
        self._config: Dict[str, Any] = {}
        self._load_default_config()
        
        if config_file:
            self._load_config_file(config_file)
        
        self._apply_env_overrides()
    
    def _load_default_config(self) -> None:
        if DEFAULT_CONFIG_PATH.exists():
            self._load_config_file(str(DEFAULT_CONFIG_PATH))
    
    def _load_config_file(self, config_file: str) -> None:
        """
        Load configuration from YAML file.
        
        Args:
            config_file: Path to YAML configuration file
        """
        with open(config_file, "r") as f:
            file_config = yaml.safe_load(f) or {}
            self._merge_config(file_config)
    
    def _merge_config(self, new_config: Dict[str, Any]) -> None:
        self._config = self._deep_merge(self._config, new_config)
    
    def _deep_merge(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """
        Deep merge two dictionaries.
        
        Args:
            base: Base dictionary
            override: Override dictionary
        
        Returns:
            Merged dictionary
        """
        result = base.copy()
        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value
        return result
    
    def _apply_env_overrides(self) -> None:
        """Apply environment variable overrides."""
        if stream := os.getenv("LOGSOURCE_STREAM"):
            self.set("source.stream_name", stream)
        
        if checkpoint_dir := os.getenv("LOGSOURCE_CHECKPOINT_DIR"):
            self.set("source.checkpoint_dir", checkpoint_dir)
        
        if max_events := os.getenv("LOGSOURCE_MAX_EVENTS_PER_CYCLE"):
            self.set("source.max_events_per_cycle", int(max_events))
        
        if strategy := os.getenv("LOGSOURCE_LOCALITY_STRATEGY"):
            self.set("source.locality_strategy", strategy)
        
        if log_level := os.getenv("LOG_LEVEL"):
            self.set("logging.level", log_level)
    
    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value using dot notation.
        
        Args:
            key: Configuration key in dot notation (e.g., "source.stream_name")
            default: Default value if key not found
        
        Returns:
            Configuration value
        """
        keys = key.split(".")
        value = self._config
        for k in keys:
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default
        return value
    
    def set(self, key: str, value: Any) -> None:
        """
        Set configuration value using dot notation.
        
        Args:
            key: Configuration key in dot notation
            value: Value to set
        """
        keys = key.split(".")
        config = self._config
        for k in keys[:-1]:
            if k not in config:
                config[k] = {}
            config = config[k]
        config[keys[-1]] = value
    
    def to_dict(self) -> Dict[str, Any]:
        """Get entire configuration as dictionary."""
        return self._config.copy()

