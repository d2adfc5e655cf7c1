"""
Manages loading and saving of the INI configuration file.
"""

import configparser
import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from audiobait_client.exceptions import ConfigurationError
from audiobait_client.models.config import ClientConfig

log = logging.getLogger(__name__)

SECTION = "device"


class ConfigManager:
    """Handles all operations related to the application's INI config file."""

    def __init__(self, config_file_path: Path):
        self.config_file_path = config_file_path
        self._parser = configparser.ConfigParser(interpolation=None)

    def load_config(self, cli_options: dict[str, Any] | None = None) -> ClientConfig:
        """
        Loads configuration from the INI file, applies CLI overrides, and validates it.

        Args:
            cli_options: A dictionary of options provided via the command line.
                Options set to None are ignored.

        Returns:
            A validated ClientConfig object.

        Raises:
            ConfigurationError: If the config file is missing, invalid, or validation
            fails.
        """
        if not self.config_file_path.is_file():
            raise ConfigurationError(
                f"Configuration file not found at '{self.config_file_path}'. "
                "Please run 'audiobait-client init' first."
            )

        try:
            self._parser.read(self.config_file_path, encoding="utf-8")
        except configparser.Error as e:
            raise ConfigurationError(f"Error parsing configuration file: {e}") from e

        if not self._parser.has_section(SECTION):
            raise ConfigurationError(
                f"Configuration file '{self.config_file_path}' has no [{SECTION}] section."
            )

        config_from_file = self._get_config_as_dict()

        # Override with CLI options
        if cli_options:
            config_from_file.update(
                {k: v for k, v in cli_options.items() if v is not None}
            )

        try:
            return ClientConfig(
                **config_from_file, config_path=str(self.config_file_path.parent)
            )
        except ValidationError as e:
            raise ConfigurationError(f"Configuration validation failed:\n{e}") from e

    def save_new_config(self, settings: dict[str, Any]) -> None:
        """
        Creates and saves a new configuration file.

        Args:
            settings: A dictionary of settings to save.
        """
        try:
            validated = ClientConfig(**settings)
        except ValidationError as e:
            raise ConfigurationError(f"Configuration validation failed:\n{e}") from e

        config = configparser.ConfigParser(interpolation=None)
        config[SECTION] = {
            key: str(getattr(validated, key))
            for key in sorted(ClientConfig.get_ini_keys())
        }
        self._write(config)

    def save_credentials(self, password: str, token: str = "") -> None:
        """
        Persists device credentials into an existing configuration file.

        Called after a fresh registration so the next run can reuse them.
        """
        config = configparser.ConfigParser(interpolation=None)
        try:
            config.read(self.config_file_path, encoding="utf-8")
        except configparser.Error as e:
            raise ConfigurationError(f"Error parsing configuration file: {e}") from e
        if not config.has_section(SECTION):
            config.add_section(SECTION)
        config[SECTION]["password"] = password
        if token:
            config[SECTION]["token"] = token
        self._write(config)
        log.debug(f"Saved device credentials to '{self.config_file_path}'")

    def _write(self, config: configparser.ConfigParser) -> None:
        try:
            self.config_file_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.config_file_path, "w", encoding="utf-8") as configfile:
                config.write(configfile)
        except OSError as e:
            raise ConfigurationError(f"Failed to save configuration file: {e}") from e

    def _get_config_as_dict(self) -> dict[str, Any]:
        """Reads the device section of the INI file into a dictionary."""
        section = self._parser[SECTION]
        defaults = ClientConfig.model_fields
        try:
            return {
                "server_url": section.get("server_url", ""),
                "group": section.get("group", ""),
                "device_name": section.get("device_name", ""),
                "password": section.get("password", ""),
                "token": section.get("token", ""),
                "files_dir": section.get(
                    "files_dir", defaults["files_dir"].default
                ),
                "request_timeout": section.getfloat(
                    "request_timeout", defaults["request_timeout"].default
                ),
                "max_attempts": section.getint(
                    "max_attempts", defaults["max_attempts"].default
                ),
                "retry_base_delay": section.getfloat(
                    "retry_base_delay", defaults["retry_base_delay"].default
                ),
            }
        except ValueError as e:
            raise ConfigurationError(f"Invalid value in configuration file: {e}") from e
