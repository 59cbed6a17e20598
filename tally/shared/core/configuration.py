"""
Configuration Management System for Tally

This module provides a centralized configuration system that supports a 4-tier
precedence hierarchy: environment → project → user → system defaults.
"""

import logging
import os
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Literal, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS_DIR = Path(__file__).resolve().parent.parent / "config" / "settings"


class ValidationLevel(Enum):
    """Configuration validation strictness levels"""
    STRICT = "strict"      # Fail fast on validation errors
    LENIENT = "lenient"    # Log warnings, use defaults


class StoreConfig(BaseModel):
    """Shared State Store backend configuration"""
    model_config = ConfigDict(extra='forbid')

    backend: Literal["memory", "duckdb"] = Field(default="duckdb", description="Store backend")
    db_path: str = Field(default="data/db/tally_state.duckdb", description="Durable store file path")
    counters_path: str = Field(default="data/db/tally_counters.duckdb", description="Application counter records file path")
    flush_interval: float = Field(default=0.5, ge=0.01, le=60.0, description="Seconds between background flushes")


class WidgetConfig(BaseModel):
    """Widget surface configuration"""
    model_config = ConfigDict(extra='forbid')

    placeholder_title: str = Field(default="횟수 체크", description="Title shown before a product is pinned")
    increase_request_code: int = Field(default=0)
    decrease_request_code: int = Field(default=1)
    reset_request_code: int = Field(default=2)
    refresh_on_dispatch: bool = Field(default=False, description="Redraw right after a press, before the application applies it")


class ConsumerConfig(BaseModel):
    """Application-side command consumer configuration"""
    model_config = ConfigDict(extra='forbid')

    poll_interval: float = Field(default=1.0, ge=0.01, le=300.0, description="Seconds between pending-command checks")
    count_floor: int = Field(default=0, ge=0, description="Lowest value a decrease may reach")


class ChannelConfig(BaseModel):
    """Cross-boundary method channel configuration"""
    model_config = ConfigDict(extra='forbid')

    name: str = Field(default="com.example.knitknit/widget", description="Method channel name")


class SystemConfig(BaseModel):
    """Complete system configuration"""
    model_config = ConfigDict(extra='forbid')

    store: StoreConfig = Field(default_factory=StoreConfig)
    widget: WidgetConfig = Field(default_factory=WidgetConfig)
    consumer: ConsumerConfig = Field(default_factory=ConsumerConfig)
    channel: ChannelConfig = Field(default_factory=ChannelConfig)

    schema_version: int = Field(default=1, description="Configuration schema version")


def _parse_bool(value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in ("1", "true", "yes", "on"):
        return True
    if lowered in ("0", "false", "no", "off"):
        return False
    raise ValueError(value)


# env var -> (section, key, converter)
ENV_OVERRIDES = {
    'TALLY_STORE_BACKEND': ('store', 'backend', str),
    'TALLY_DB_PATH': ('store', 'db_path', str),
    'TALLY_COUNTERS_PATH': ('store', 'counters_path', str),
    'TALLY_FLUSH_INTERVAL': ('store', 'flush_interval', float),
    'TALLY_POLL_INTERVAL': ('consumer', 'poll_interval', float),
    'TALLY_PLACEHOLDER_TITLE': ('widget', 'placeholder_title', str),
    'TALLY_REFRESH_ON_DISPATCH': ('widget', 'refresh_on_dispatch', _parse_bool),
    'TALLY_CHANNEL_NAME': ('channel', 'name', str),
}


class ConfigManager:
    """Centralized configuration manager with 4-tier precedence hierarchy"""

    def __init__(self, config_dir: Optional[Path] = None):
        self.config_dir = Path(config_dir) if config_dir is not None else DEFAULT_SETTINGS_DIR
        self._system_config: Optional[SystemConfig] = None
        self._user_config: Optional[Dict[str, Any]] = None
        self._project_config: Optional[Dict[str, Any]] = None

    def _load_yaml_file(self, file_path: Path) -> Dict[str, Any]:
        """Load YAML configuration file"""
        if not file_path.exists():
            return {}

        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                return yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            logger.warning(f"Failed to load {file_path}: {e}")
            return {}

    def _save_yaml_file(self, file_path: Path, data: Dict[str, Any]) -> bool:
        """Save configuration to YAML file"""
        try:
            file_path.parent.mkdir(parents=True, exist_ok=True)
            with open(file_path, 'w', encoding='utf-8') as f:
                yaml.dump(data, f, default_flow_style=False, sort_keys=False, indent=2, allow_unicode=True)
            return True
        except OSError as e:
            logger.error(f"Failed to save {file_path}: {e}")
            return False

    def _load_system_defaults(self) -> SystemConfig:
        """Load system default configuration"""
        if self._system_config is None:
            defaults_dict = self._load_yaml_file(self.config_dir / "defaults.yaml")
            try:
                self._system_config = SystemConfig(**defaults_dict)
            except ValidationError as e:
                logger.warning(f"System defaults validation failed: {e}")
                self._system_config = SystemConfig()

        return self._system_config

    def _load_user_config(self) -> Dict[str, Any]:
        """Load user-level configuration"""
        if self._user_config is None:
            self._user_config = self._load_yaml_file(self.config_dir / "user.yaml")
        return self._user_config

    def _load_project_config(self) -> Dict[str, Any]:
        """Load project-specific configuration"""
        if self._project_config is None:
            self._project_config = self._load_yaml_file(self.config_dir / "project.yaml")
        return self._project_config

    def _merge_configs(self) -> Dict[str, Any]:
        """Merge configurations with precedence: env → project → user → system"""
        merged = self._load_system_defaults().model_dump()
        self._deep_merge(merged, self._load_user_config())
        self._deep_merge(merged, self._load_project_config())
        self._deep_merge(merged, self._get_env_overrides())
        return merged

    def _deep_merge(self, base: Dict[str, Any], updates: Dict[str, Any]) -> None:
        """Deep merge configuration dictionaries"""
        for key, value in updates.items():
            if key in base and isinstance(base[key], dict) and isinstance(value, dict):
                self._deep_merge(base[key], value)
            else:
                base[key] = value

    def _get_env_overrides(self) -> Dict[str, Any]:
        """Extract configuration overrides from environment variables"""
        overrides: Dict[str, Any] = {}
        for env_key, (section, config_key, convert) in ENV_OVERRIDES.items():
            value = os.getenv(env_key)
            if value is None:
                continue
            try:
                overrides.setdefault(section, {})[config_key] = convert(value)
            except ValueError:
                logger.warning(f"Ignoring {env_key}={value!r}: not a valid {convert.__name__}")
        return overrides

    def get_config(self, validation_level: ValidationLevel = ValidationLevel.STRICT) -> SystemConfig:
        """Get merged configuration with validation"""
        merged_config = self._merge_configs()

        try:
            return SystemConfig(**merged_config)
        except ValidationError as e:
            if validation_level == ValidationLevel.STRICT:
                raise ConfigurationError(f"Configuration validation failed: {e}") from e
            logger.warning(f"Configuration validation failed, using defaults: {e}")
            return SystemConfig()

    def save_project_config(self, config_updates: Dict[str, Any]) -> bool:
        """Save project-specific configuration updates"""
        project_path = self.config_dir / "project.yaml"
        existing_config = self._load_yaml_file(project_path)
        self._deep_merge(existing_config, config_updates)

        success = self._save_yaml_file(project_path, existing_config)
        if success:
            self._project_config = None
        return success

    def reload_config(self) -> None:
        """Clear cached configurations and reload from files"""
        self._system_config = None
        self._user_config = None
        self._project_config = None


# Global instance
_config_manager: Optional[ConfigManager] = None


def get_config_manager(config_dir: Optional[Path] = None) -> ConfigManager:
    """Get global configuration manager instance"""
    global _config_manager
    if _config_manager is None or config_dir is not None:
        _config_manager = ConfigManager(config_dir)
    return _config_manager


def get_config(validation_level: ValidationLevel = ValidationLevel.STRICT) -> SystemConfig:
    """Get current system configuration"""
    return get_config_manager().get_config(validation_level)
