"""
Configuration Management System for Keeper

This module provides a centralized configuration system that supports a 3-tier
precedence hierarchy: environment → user → packaged defaults.
"""

import logging
import os
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Literal, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS_DIR = Path(__file__).resolve().parent.parent / "config" / "settings"


class ValidationLevel(Enum):
    """Configuration validation strictness levels"""
    STRICT = "strict"      # Fail fast on validation errors
    LENIENT = "lenient"    # Log warnings, use defaults


class StorageConfig(BaseModel):
    """Key-value persistence backend configuration"""
    model_config = ConfigDict(extra='forbid')

    backend: Literal["memory", "duckdb"] = Field(default="duckdb", description="Key-value backend")
    db_path: str = Field(default="data/db/keeper.duckdb", description="DuckDB database file path")
    table_name: str = Field(default="kv_store", pattern=r"^[A-Za-z_][A-Za-z0-9_]*$", description="Key-value table")


class SessionConfig(BaseModel):
    """Session store configuration"""
    model_config = ConfigDict(extra='forbid')

    user_storage_key: str = Field(default="AUTH_USER", min_length=1, description="Key holding the user record")
    auth_timeout_seconds: Optional[float] = Field(default=10.0, gt=0.0, le=300.0, description="Credential check timeout (None disables)")
    reject_concurrent: bool = Field(default=True, description="Reject login/signup while another session operation runs")
    simulated_auth_delay: float = Field(default=0.0, ge=0.0, le=30.0, description="Artificial latency of the local verifier (seconds)")


class PreferenceConfig(BaseModel):
    """Preference store configuration"""
    model_config = ConfigDict(extra='forbid')

    theme_storage_key: str = Field(default="@app_theme", min_length=1, description="Key holding the display mode")
    default_theme: Literal["light", "dark"] = Field(default="light", description="Mode used until a stored value is found")


class LoggingConfig(BaseModel):
    """Logging configuration"""
    model_config = ConfigDict(extra='forbid')

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(default="INFO", description="Root/file log level")
    console_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(default="WARNING", description="Console log level")
    log_file: Optional[str] = Field(default=None, description="Rotating log file path (None disables file logging)")


class SystemConfig(BaseModel):
    """Complete system configuration"""
    model_config = ConfigDict(extra='forbid')

    storage: StorageConfig = Field(default_factory=StorageConfig)
    session: SessionConfig = Field(default_factory=SessionConfig)
    preferences: PreferenceConfig = Field(default_factory=PreferenceConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    # Metadata
    schema_version: int = Field(default=1, description="Configuration schema version")


# env var -> (section, key, converter)
_ENV_MAP = {
    'KEEPER_STORAGE_BACKEND': ('storage', 'backend', str),
    'KEEPER_DB_PATH': ('storage', 'db_path', str),
    'KEEPER_AUTH_TIMEOUT': ('session', 'auth_timeout_seconds', float),
    'KEEPER_REJECT_CONCURRENT': ('session', 'reject_concurrent', bool),
    'KEEPER_SIMULATED_AUTH_DELAY': ('session', 'simulated_auth_delay', float),
    'KEEPER_DEFAULT_THEME': ('preferences', 'default_theme', str),
    'LOG_LEVEL': ('logging', 'level', str),
    'KEEPER_LOG_FILE': ('logging', 'log_file', str),
}


class ConfigManager:
    """Centralized configuration manager with 3-tier precedence hierarchy"""

    def __init__(self, config_dir: Optional[Path] = None, defaults_dir: Optional[Path] = None):
        self.config_dir = Path(config_dir) if config_dir else DEFAULT_SETTINGS_DIR
        self.defaults_dir = Path(defaults_dir) if defaults_dir else DEFAULT_SETTINGS_DIR
        self._system_config: Optional[SystemConfig] = None
        self._user_config: Optional[Dict[str, Any]] = None

    def _load_yaml_file(self, file_path: Path) -> Dict[str, Any]:
        """Load YAML configuration file"""
        if not file_path.exists():
            return {}

        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            logger.warning(f"Failed to load {file_path}: {e}")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Ignoring {file_path}: top level is not a mapping")
            return {}
        return data

    def _save_yaml_file(self, file_path: Path, data: Dict[str, Any]) -> bool:
        """Save configuration to YAML file"""
        try:
            file_path.parent.mkdir(parents=True, exist_ok=True)
            with open(file_path, 'w', encoding='utf-8') as f:
                yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False, indent=2)
            return True
        except OSError as e:
            logger.error(f"Failed to save {file_path}: {e}")
            return False

    def _load_system_defaults(self) -> SystemConfig:
        """Load packaged default configuration"""
        if self._system_config is None:
            defaults_dict = self._load_yaml_file(self.defaults_dir / "defaults.yaml")

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

    def _merge_configs(self) -> Dict[str, Any]:
        """Merge configurations with precedence: env → user → defaults"""
        merged = self._load_system_defaults().model_dump()
        self._deep_merge(merged, self._load_user_config())
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
        for env_key, (section, config_key, convert) in _ENV_MAP.items():
            value = os.getenv(env_key)
            if value is None or value == "":
                continue

            if convert is bool:
                converted: Any = value.lower() in ('true', '1', 'yes', 'on')
            elif convert is float:
                if value.lower() in ('none', 'null', 'off'):
                    converted = None
                else:
                    try:
                        converted = float(value)
                    except ValueError:
                        logger.warning(f"Ignoring {env_key}={value!r}: not a number")
                        continue
            elif config_key == 'level':
                converted = value.upper()
            else:
                converted = value

            overrides.setdefault(section, {})[config_key] = converted

        return overrides

    def get_config(self, validation_level: ValidationLevel = ValidationLevel.STRICT) -> SystemConfig:
        """Get merged configuration with validation"""
        merged_config = self._merge_configs()

        try:
            return SystemConfig(**merged_config)
        except ValidationError as e:
            if validation_level == ValidationLevel.STRICT:
                raise ValueError(f"Configuration validation failed: {e}") from e
            logger.warning(f"Configuration validation failed, using defaults: {e}")
            return SystemConfig()

    def save_user_config(self, config_updates: Dict[str, Any]) -> bool:
        """Save user-level configuration updates"""
        user_path = self.config_dir / "user.yaml"

        existing_config = self._load_yaml_file(user_path)
        self._deep_merge(existing_config, config_updates)

        success = self._save_yaml_file(user_path, existing_config)
        if success:
            # Clear cached user config to force reload
            self._user_config = None

        return success


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
