"""
Server Configuration
--------------------
Loads configuration from an optional YAML file with environment variable
overrides. Enablement switches are NOT read here; the gate reads those
from its own mapping.
"""

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Mapping, Optional
import logging
import os

import yaml

from core.errors import ConfigurationError

SERVER_NAME = "bolide-ai-mcp"
SERVER_VERSION = "0.4.0"

DEFAULT_API_URL = "https://bolide.ai/api"
COMPANION_APP_NAME = "Bolide AI Companion"

# Field -> environment variable
ENV_OVERRIDES: Dict[str, str] = {
    "api_url": "BOLIDEAI_API_URL",
    "api_token": "BOLIDEAI_API_TOKEN",
    "workspace_paths": "WORKSPACE_FOLDER_PATHS",
    "project_dir_name": "BOLIDEAI_PROJECT_DIR",
    "companion_app_name": "BOLIDEAI_COMPANION_APP_NAME",
    "applications_dir": "BOLIDEAI_APPLICATIONS_DIR",
    "template_dir": "BOLIDEAI_TEMPLATE_DIR",
    "request_timeout_seconds": "BOLIDEAI_REQUEST_TIMEOUT",
    "log_level": "BOLIDEAI_MCP_LOG_LEVEL",
    "log_dir": "BOLIDEAI_MCP_LOG_DIR",
}

DEBUG_ENV = "BOLIDEAI_MCP_DEBUG"


@dataclass
class ServerConfig:
    """Runtime configuration shared by handlers."""
    api_url: str = DEFAULT_API_URL
    api_token: Optional[str] = None
    workspace_paths: Optional[str] = None
    project_dir_name: str = "marketing"
    companion_app_name: str = COMPANION_APP_NAME
    applications_dir: str = "/Applications"
    template_dir: Optional[str] = None
    request_timeout_seconds: float = 30.0
    log_level: str = "INFO"
    log_dir: Optional[str] = None
    debug: bool = False

    @property
    def companion_app_path(self) -> str:
        return f"{self.applications_dir}/{self.companion_app_name}.app"

    @property
    def companion_app_binary(self) -> str:
        return f"{self.companion_app_path}/Contents/MacOS/{self.companion_app_name}"

    @classmethod
    def load(
        cls,
        env: Optional[Mapping[str, str]] = None,
        config_path: Optional[str] = None,
    ) -> "ServerConfig":
        """
        Build configuration.

        Order of precedence: environment, then YAML file, then defaults.
        """
        logger = logging.getLogger("bolide.infra.config")
        env = os.environ if env is None else env

        values: Dict[str, Any] = {}
        if config_path:
            values.update(_load_yaml(Path(config_path)))
            logger.info(f"Loaded config from {config_path}")

        for key, env_key in ENV_OVERRIDES.items():
            env_value = env.get(env_key)
            if env_value:
                values[key] = env_value

        values["debug"] = env.get(DEBUG_ENV) == "true" or bool(values.get("debug", False))

        known = {f.name for f in fields(cls)}
        unknown = sorted(set(values) - known)
        if unknown:
            logger.warning(f"Ignoring unknown config keys: {', '.join(unknown)}")

        config = cls(**{k: v for k, v in values.items() if k in known})
        config.request_timeout_seconds = _as_float(
            config.request_timeout_seconds, "request_timeout_seconds"
        )
        config.api_url = str(config.api_url).rstrip("/")
        config.log_level = str(config.log_level).upper()
        if config.debug:
            config.log_level = "DEBUG"
        return config

    def redacted(self) -> Dict[str, Any]:
        """Configuration as a dict with the token masked."""
        data = {f.name: getattr(self, f.name) for f in fields(self)}
        if data.get("api_token"):
            data["api_token"] = "***"
        return data


def _load_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise ConfigurationError(f"Config file not found: {path}")

    try:
        with open(path, "r") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {path}", str(e)) from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file must contain a mapping: {path}")

    # Allow either a flat mapping or a `server:` section
    section = data.get("server", data)
    if not isinstance(section, dict):
        raise ConfigurationError(f"`server` section must be a mapping: {path}")
    return dict(section)


def _as_float(value: Any, name: str) -> float:
    try:
        return float(value)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"{name} must be a number, got {value!r}") from e
