"""Server configuration loader.

Loads runtime settings from a YAML file. String values may reference
environment variables with ``${VAR_NAME}`` syntax.
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

# Fallback league when neither the config file nor the environment sets one
DEFAULT_LEAGUE_ID = "1248432621554237440"
DEFAULT_API_BASE_URL = "https://api.sleeper.app/v1"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

_ENV_PATTERN = re.compile(r"\$\{([^}]+)\}")


class ConfigLoadError(Exception):
    """Raised when configuration loading or validation fails."""

    pass


def expand_env_vars(value: str) -> str:
    """Expand environment variables in a string.

    Supports ${VAR_NAME} syntax. Unknown variables are left unchanged.

    Args:
        value: String potentially containing environment variable references.

    Returns:
        String with known environment variables expanded.
    """

    def replacer(match: re.Match[str]) -> str:
        env_value = os.environ.get(match.group(1))
        if env_value is not None:
            return env_value
        return match.group(0)

    return _ENV_PATTERN.sub(replacer, value)


def _resolve_league_id(raw: Any) -> str:
    """Pick the default league id from config, environment, or built-in fallback."""
    if raw is not None:
        value = expand_env_vars(str(raw)).strip()
        if value and not _ENV_PATTERN.search(value):
            return value
    return os.environ.get("DEFAULT_LEAGUE_ID") or DEFAULT_LEAGUE_ID


@dataclass
class ServerConfig:
    """Runtime configuration for the MCP server."""

    host: str = "127.0.0.1"
    port: int = 8000

    # Upstream provider
    api_base_url: str = DEFAULT_API_BASE_URL
    default_league_id: str = DEFAULT_LEAGUE_ID
    http_timeout: float = 10.0

    # Transports
    websocket_subprotocol: str = "mcp"
    heartbeat_interval: float = 25.0

    log_level: str = "INFO"
    audit_log_file: str = ""

    @classmethod
    def from_dict(cls, config: dict[str, Any]) -> ServerConfig:
        """Create a ServerConfig from a configuration dictionary.

        Args:
            config: Dictionary parsed from YAML configuration.

        Returns:
            ServerConfig instance with all settings populated.

        Raises:
            ConfigLoadError: If a value is out of range or has the wrong type.
        """
        server = config.get("server") or {}
        sleeper = config.get("sleeper") or {}
        transport = config.get("transport") or {}
        logging_cfg = config.get("logging") or {}
        audit = config.get("audit") or {}

        try:
            instance = cls(
                host=str(server.get("host", "127.0.0.1")),
                port=int(server.get("port", 8000)),
                api_base_url=expand_env_vars(
                    str(sleeper.get("base_url", DEFAULT_API_BASE_URL))
                ).rstrip("/"),
                default_league_id=_resolve_league_id(sleeper.get("default_league_id")),
                http_timeout=float(sleeper.get("timeout", 10.0)),
                websocket_subprotocol=str(transport.get("websocket_subprotocol", "mcp")),
                heartbeat_interval=float(transport.get("heartbeat_interval", 25.0)),
                log_level=str(logging_cfg.get("level", "INFO")).upper(),
                audit_log_file=expand_env_vars(str(audit.get("log_file") or "")),
            )
        except (TypeError, ValueError) as e:
            raise ConfigLoadError(f"Invalid configuration value: {e}") from e

        instance.validate()
        return instance

    def validate(self) -> None:
        """Check value ranges.

        Raises:
            ConfigLoadError: If any setting is out of range.
        """
        if not 1 <= self.port <= 65535:
            raise ConfigLoadError(f"Port must be between 1 and 65535, got {self.port}")
        if self.heartbeat_interval <= 0:
            raise ConfigLoadError("transport.heartbeat_interval must be positive")
        if self.http_timeout <= 0:
            raise ConfigLoadError("sleeper.timeout must be positive")
        if self.log_level not in LOG_LEVELS:
            raise ConfigLoadError(f"logging.level must be one of {', '.join(LOG_LEVELS)}")
        if not self.api_base_url.startswith(("http://", "https://")):
            raise ConfigLoadError(f"sleeper.base_url must be an http(s) URL: {self.api_base_url}")


def load_config(path: Path) -> ServerConfig:
    """Load server configuration from a YAML file.

    Args:
        path: Path to the YAML configuration file.

    Returns:
        Loaded ServerConfig.

    Raises:
        ConfigLoadError: If the file is missing, unparseable, or invalid.
    """
    if not path.exists():
        raise ConfigLoadError(f"Config file not found: {path}")

    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigLoadError(f"Invalid YAML in config file: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigLoadError("Config file must contain a YAML mapping")

    return ServerConfig.from_dict(data)
