"""
Configuration loader service for YAML-based configuration.

Loads and caches config.yml, validated against the models in
``core.models.config_models``. When the file is absent every getter returns
None and callers fall back to the environment settings.

Usage:
    from portal_resources.core.shared.config_loader import config_loader

    resources_config = config_loader.get_resources_config()
    spreadsheet_id = config_loader.get("resources.spreadsheet_id")
"""

import logging
import os
from pathlib import Path
from typing import Any, List, Optional

from ..models.config_models import AppConfig, GoogleConfig, ResourcesConfig

logger = logging.getLogger("portal_resources.config_loader")


class ConfigLoader:
    """
    Configuration loader and cache manager.

    Loads config.yml from the project root (or ``CONFIG_PATH``), resolves
    environment variable references and provides typed access methods.
    """

    def __init__(self, config_path: Optional[str] = None):
        if config_path is None:
            config_path = os.getenv("CONFIG_PATH")
        if config_path is None:
            backend_dir = Path(__file__).resolve().parents[3]
            candidate_paths = [
                backend_dir.parent / "config.yml",
                Path.cwd() / "config.yml",
            ]
            config_path = str(candidate_paths[0])
            for candidate in candidate_paths:
                if candidate.exists():
                    config_path = str(candidate)
                    break

        self.config_path = config_path
        self._config: Optional[AppConfig] = None
        self._loaded = False

    def load(self) -> AppConfig:
        """
        Load and parse configuration file.

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If YAML is invalid or validation fails
        """
        logger.info(f"Loading configuration from: {self.config_path}")

        try:
            self._config = AppConfig.from_yaml(self.config_path)
            self._loaded = True
            logger.info("Configuration loaded successfully")
            return self._config
        except FileNotFoundError:
            logger.debug(f"Configuration file not found: {self.config_path}, using environment variables")
            self._loaded = False
            raise
        except Exception as e:
            logger.error(f"Failed to load configuration: {e}")
            self._loaded = False
            raise ValueError(f"Configuration error: {e}") from e

    def reload(self) -> AppConfig:
        logger.info("Reloading configuration")
        self._config = None
        self._loaded = False
        return self.load()

    def is_loaded(self) -> bool:
        return self._loaded and self._config is not None

    def get_config(self) -> Optional[AppConfig]:
        """
        Get the full configuration object.

        Returns:
            AppConfig instance, or None when the file is missing. An invalid
            file is an error, not a silent fallback.
        """
        if not self.is_loaded():
            try:
                return self.load()
            except FileNotFoundError:
                return None
        return self._config

    def get(self, key_path: str, default: Any = None) -> Any:
        """
        Get configuration value by dot-notation path.

        Examples:
            >>> config_loader.get("resources.term_sheet_name")
            'Term'
            >>> config_loader.get("google.timeout", 60)
            60
        """
        config = self.get_config()
        if config is None:
            return default

        obj = config
        for key in key_path.split('.'):
            if hasattr(obj, key):
                obj = getattr(obj, key)
            elif isinstance(obj, dict) and key in obj:
                obj = obj[key]
            else:
                return default
            if obj is None:
                return default

        return obj

    def validate(self) -> List[str]:
        """List of configuration problems (empty if the file is usable)."""
        errors = []
        try:
            config = self.get_config()
        except ValueError as e:
            return [str(e)]

        if config is None:
            errors.append(f"Configuration file not found: {self.config_path}")
            return errors

        if config.google is None:
            logger.warning("google section not found, credentials come from the environment")
        elif not (config.google.service_account_file or config.google.access_token):
            errors.append("google: set service_account_file or access_token")

        if config.resources is None:
            logger.warning("resources section not found, locations come from the environment")

        return errors

    def get_google_config(self) -> Optional[GoogleConfig]:
        config = self.get_config()
        return config.google if config else None

    def get_resources_config(self) -> Optional[ResourcesConfig]:
        config = self.get_config()
        return config.resources if config else None


# Global configuration loader instance
config_loader = ConfigLoader()


def get_config_loader() -> ConfigLoader:
    return config_loader
