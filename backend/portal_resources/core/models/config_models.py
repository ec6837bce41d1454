"""
Pydantic models for YAML configuration validation.

This module defines the schema for config.yml. Every section is optional;
values missing from the file fall back to the environment settings in
``portal_resources.config``.

Usage:
    from portal_resources.core.models.config_models import AppConfig
    config = AppConfig.from_yaml("config.yml")
"""

import os
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class GoogleConfig(BaseModel):
    """
    Google API credentials.

    Either a service-account key file (JWT bearer flow) or a static access
    token must be given; the static token wins when both are set.
    """
    model_config = ConfigDict(extra='forbid')

    service_account_file: Optional[str] = Field(
        default=None,
        description="Path to a service-account JSON key"
    )
    access_token: Optional[str] = Field(
        default=None,
        description="Static OAuth access token"
    )
    token_url: str = Field(
        default="https://oauth2.googleapis.com/token",
        description="OAuth token endpoint"
    )
    timeout: float = Field(
        default=120.0,
        gt=0,
        le=600,
        description="Request timeout in seconds"
    )


class ResourcesConfig(BaseModel):
    """Where resources live: the spreadsheet tabs and the Drive root folder."""
    model_config = ConfigDict(extra='forbid')

    spreadsheet_id: str = Field(
        description="Spreadsheet holding the resource and term tabs"
    )
    resources_sheet_name: str = Field(
        default="Resources Material",
        description="Tab with one row per resource"
    )
    term_sheet_name: str = Field(
        default="Term",
        description="Tab with Batch/Term/Domain/Subject rows"
    )
    drive_root_folder_id: str = Field(
        description="Top-level Drive folder every resource path hangs off"
    )
    normal_upload_limit: int = Field(
        default=50 * 1024 * 1024,
        ge=1,
        description="Payloads strictly larger than this (bytes) use the resumable protocol"
    )
    resumable_chunk_size: Optional[int] = Field(
        default=None,
        ge=256 * 1024,
        description="Bytes per resumable transfer request (unset = whole file)"
    )
    timezone: str = Field(
        default="Asia/Kolkata",
        description="Timezone for created/edited timestamps"
    )


class AppConfig(BaseModel):
    """
    Root application configuration.

    This is the top-level configuration object that contains all service configs.
    """
    model_config = ConfigDict(extra='forbid')

    version: str = Field(
        default="1.0",
        description="Configuration file version"
    )
    google: Optional[GoogleConfig] = Field(
        default=None,
        description="Google API credentials"
    )
    resources: Optional[ResourcesConfig] = Field(
        default=None,
        description="Spreadsheet and Drive locations"
    )

    @classmethod
    def from_yaml(cls, yaml_path: str) -> "AppConfig":
        """
        Load and parse configuration from YAML file.

        Args:
            yaml_path: Path to config.yml file

        Returns:
            Validated AppConfig instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If an ${ENV_VAR} reference is not set
        """
        import yaml

        if not os.path.exists(yaml_path):
            raise FileNotFoundError(f"Configuration file not found: {yaml_path}")

        with open(yaml_path, 'r') as f:
            raw_config = yaml.safe_load(f) or {}

        return cls(**cls._resolve_env_vars(raw_config))

    @classmethod
    def _resolve_env_vars(cls, obj: Any) -> Any:
        """Recursively replace whole-string ``${ENV_VAR}`` values with the variable's value."""
        if isinstance(obj, dict):
            return {k: cls._resolve_env_vars(v) for k, v in obj.items()}
        elif isinstance(obj, list):
            return [cls._resolve_env_vars(item) for item in obj]
        elif isinstance(obj, str):
            if obj.startswith("${") and obj.endswith("}"):
                var_name = obj[2:-1]
                value = os.getenv(var_name)
                if value is None:
                    raise ValueError(f"Environment variable not set: {var_name}")
                return value
            return obj
        else:
            return obj
