"""Configuration management for the task streaming action."""

import os
from typing import Any

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError, field_validator

from .exceptions import ConfigurationError

DEFAULT_CONFIG_PATH = os.path.join(os.path.dirname(__file__), "config.yaml")


class ActionSettings(BaseModel):
    """Validated inputs for one task run."""
    api_key: str = Field(min_length=1)
    prompt: str = Field(min_length=1)
    api_url: str
    timeout_seconds: int = Field(gt=0)
    repository: str = ""
    github_token: str = ""

    @field_validator("api_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @property
    def stream_timeout(self) -> float:
        return float(self.timeout_seconds)


class Configuration:
    """Manages configuration and environment variables for the action."""

    def __init__(self, config_path: str | None = None) -> None:
        """Initialize configuration from YAML and environment variables."""
        self.load_env()  # Load .env for local runs
        self._config = self._load_yaml_config(config_path or DEFAULT_CONFIG_PATH)

    @staticmethod
    def load_env() -> None:
        """Load environment variables from .env file."""
        load_dotenv()

    @staticmethod
    def _load_yaml_config(config_path: str) -> dict[str, Any]:
        """Load configuration from YAML file."""
        try:
            with open(config_path) as file:
                config = yaml.safe_load(file)
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Cannot load config file {config_path}: {e}") from e

        if not isinstance(config, dict):
            raise ConfigurationError(
                f"Config file must be YAML dict, got {type(config)}"
            )
        return config

    @staticmethod
    def get_input(name: str, required: bool = False) -> str:
        """Read an action input the way the Actions runner exposes it.

        Args:
            name: Input name as declared by the action, e.g. ``api-key``.
            required: Raise when the input is missing or blank.

        Returns:
            The stripped input value, or an empty string.

        Raises:
            ConfigurationError: If a required input is not supplied.
        """
        env_name = f"INPUT_{name.replace(' ', '_').upper()}"
        value = os.getenv(env_name, "").strip()
        if required and not value:
            raise ConfigurationError(f"Input required and not supplied: {name}")
        return value

    def _require(self, section: str, key: str) -> Any:
        section_config = self._config.get(section, {})
        if key not in section_config:
            raise ConfigurationError(
                f"{section}.{key} must be explicitly configured in config.yaml"
            )
        return section_config[key]

    def get_config_dict(self) -> dict[str, Any]:
        """Get the full configuration dictionary."""
        return self._config

    def get_api_config(self) -> dict[str, Any]:
        """Get API connection configuration from YAML.

        Returns:
            API configuration dictionary with validated values.

        Raises:
            ConfigurationError: If required API parameters are missing or invalid.
        """
        url = self._require("api", "url")
        user_agent = self._require("api", "user_agent")
        connect_timeout = self._require("api", "connect_timeout")

        if not isinstance(connect_timeout, int | float) or connect_timeout <= 0:
            raise ConfigurationError("api.connect_timeout must be positive")

        return {
            "url": url,
            "user_agent": user_agent,
            "connect_timeout": float(connect_timeout),
        }

    def get_task_config(self) -> dict[str, Any]:
        """Get task defaults from YAML.

        Raises:
            ConfigurationError: If required task parameters are missing or invalid.
        """
        task_type = self._require("task", "type")
        timeout_seconds = self._require("task", "timeout_seconds")

        if not isinstance(timeout_seconds, int) or timeout_seconds < 1:
            raise ConfigurationError("task.timeout_seconds must be a positive integer")

        return {"type": task_type, "timeout_seconds": timeout_seconds}

    def get_logging_config(self) -> dict[str, Any]:
        """Get logging configuration from YAML."""
        logging_config = self._config.get("logging", {})
        return {
            "level": logging_config.get("level", "INFO"),
            "colors": bool(logging_config.get("colors", False)),
        }

    def get_action_settings(self) -> ActionSettings:
        """Build validated settings from action inputs and YAML defaults.

        Raises:
            ConfigurationError: If an input is missing or invalid.
        """
        api_config = self.get_api_config()
        task_config = self.get_task_config()

        api_key = self.get_input("api-key", required=True)
        prompt = self.get_input("prompt", required=True)
        api_url = self.get_input("api-url") or api_config["url"]
        timeout_raw = self.get_input("timeout") or str(task_config["timeout_seconds"])

        try:
            return ActionSettings(
                api_key=api_key,
                prompt=prompt,
                api_url=api_url,
                timeout_seconds=timeout_raw,
                repository=os.getenv("GITHUB_REPOSITORY", ""),
                github_token=os.getenv("GITHUB_TOKEN", ""),
            )
        except ValidationError as e:
            fields = ", ".join(str(err["loc"][0]) for err in e.errors())
            raise ConfigurationError(f"Invalid action inputs: {fields}") from e
