"""Configuration management for optirules."""

import logging
import os
from dataclasses import dataclass, field
from typing import Any, Optional

import yaml

from optirules.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATHS = [
    "config.yaml",
    "config/config.yaml",
    "/etc/optirules/config.yaml",
]


@dataclass
class RoutingConfig:
    """Optimization routing configuration."""
    enabled: bool = True
    default_model: Optional[str] = None  # Used when no rule matches and the request names no model
    include_team_rules: bool = False  # Match against org + team rules instead of org/provider rules


@dataclass
class GeneralConfig:
    """General configuration."""
    database_url: Optional[str] = None
    log_level: str = "INFO"
    sql_echo: bool = False
    db_pool_size: int = 10
    db_max_overflow: int = 20


@dataclass
class OptiRulesConfig:
    """Full configuration."""
    routing: RoutingConfig = field(default_factory=RoutingConfig)
    general: GeneralConfig = field(default_factory=GeneralConfig)


def _resolve_env_vars(value: Any) -> Any:
    """Resolve environment variables in configuration values.

    Supports format: os.environ/VAR_NAME or ${VAR_NAME}

    Args:
        value: Configuration value

    Returns:
        Resolved value
    """
    if isinstance(value, str):
        if value.startswith("os.environ/"):
            return os.environ.get(value[len("os.environ/"):])
        elif value.startswith("${") and value.endswith("}"):
            return os.environ.get(value[2:-1])
    elif isinstance(value, dict):
        return {k: _resolve_env_vars(v) for k, v in value.items()}
    elif isinstance(value, list):
        return [_resolve_env_vars(v) for v in value]
    return value


def _as_bool(value: Any, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


def load_config(config_path: Optional[str] = None) -> OptiRulesConfig:
    """Load configuration from file.

    Args:
        config_path: Path to configuration file. If None, uses default locations.

    Returns:
        Configuration with defaults for anything the file omits

    Raises:
        ConfigurationError: If the file cannot be parsed
    """
    if config_path is None:
        for path in DEFAULT_CONFIG_PATHS:
            if os.path.exists(path):
                config_path = path
                break

    config = OptiRulesConfig()

    if not config_path or not os.path.exists(config_path):
        config.general.database_url = os.environ.get("DATABASE_URL")
        return config

    try:
        with open(config_path, "r") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {config_path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Configuration root must be a mapping: {config_path}")

    data = _resolve_env_vars(data)

    if "routing_settings" in data:
        routing = data["routing_settings"] or {}
        config.routing = RoutingConfig(
            enabled=_as_bool(routing.get("enabled"), True),
            default_model=routing.get("default_model"),
            include_team_rules=_as_bool(routing.get("include_team_rules"), False),
        )

    if "general_settings" in data:
        general = data["general_settings"] or {}
        try:
            config.general = GeneralConfig(
                database_url=general.get("database_url"),
                log_level=str(general.get("log_level", "INFO")).upper(),
                sql_echo=_as_bool(general.get("sql_echo"), False),
                db_pool_size=int(general.get("db_pool_size", 10)),
                db_max_overflow=int(general.get("db_max_overflow", 20)),
            )
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid general_settings: {e}") from e

    if config.general.database_url is None:
        config.general.database_url = os.environ.get("DATABASE_URL")

    logger.debug("Loaded configuration from %s", config_path)
    return config


def configure_logging(config: OptiRulesConfig) -> None:
    """Apply the configured log level to the optirules logger tree."""
    level = logging.getLevelName(config.general.log_level.upper())
    if not isinstance(level, int):
        raise ConfigurationError(f"Unknown log level: {config.general.log_level}")
    logging.getLogger("optirules").setLevel(level)
