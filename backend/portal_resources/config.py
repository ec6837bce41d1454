# ============================================================================
# Portal Resources - Application Configuration
# ============================================================================
"""
Application configuration module using Pydantic Settings.

This module defines all configuration parameters for the Portal Resources
backend, including:
- API/CORS settings
- Google Sheets (tabular store) location and tab names
- Google Drive (blob store) root folder and upload limits
- Google credentials
- Backend selection (google or in-memory)

Environment Variables:
    See config.yml.example for the YAML equivalent of every setting.

Usage:
    from portal_resources.config import settings
    limit = settings.normal_upload_limit
"""

from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # =========================================================================
    # API SETTINGS
    # =========================================================================
    api_title: str = "Portal Resources API"
    api_version: str = "1.0.0"
    debug: bool = Field(default=False, description="Enable verbose logging & dev helpers")

    # =========================================================================
    # CORS SETTINGS
    # =========================================================================
    cors_origins: List[str] = Field(
        default=["http://localhost:3000", "http://127.0.0.1:3000"],
        description="Allowed origins for CORS",
    )

    # =========================================================================
    # BACKEND SELECTION
    # =========================================================================
    storage_backend: str = Field(
        default="google",
        description="'google' for Drive/Sheets, 'memory' for the in-process backends",
    )

    # =========================================================================
    # TABULAR STORE (GOOGLE SHEETS)
    # =========================================================================
    spreadsheet_id: str = Field(default="", description="Spreadsheet holding the resource and term tabs")
    resources_sheet_name: str = Field(default="Resources Material", description="Tab with one row per resource")
    term_sheet_name: str = Field(default="Term", description="Tab with Batch/Term/Domain/Subject rows")
    sheets_base_url: str = Field(default="https://sheets.googleapis.com/v4", description="Sheets API base URL")

    # =========================================================================
    # BLOB STORE (GOOGLE DRIVE)
    # =========================================================================
    drive_root_folder_id: str = Field(default="", description="Top-level folder every resource path hangs off")
    drive_base_url: str = Field(default="https://www.googleapis.com/drive/v3", description="Drive API base URL")
    drive_upload_url: str = Field(
        default="https://www.googleapis.com/upload/drive/v3/files",
        description="Drive media upload endpoint",
    )
    normal_upload_limit: int = Field(
        default=50 * 1024 * 1024,
        description="Payloads strictly larger than this (bytes) use the resumable protocol",
    )
    resumable_chunk_size: Optional[int] = Field(
        default=None,
        description="Bytes per resumable transfer request; None sends the whole file in one request",
    )

    # =========================================================================
    # GOOGLE CREDENTIALS
    # =========================================================================
    google_service_account_file: Optional[str] = Field(
        default=None, description="Path to a service-account JSON key"
    )
    google_access_token: Optional[str] = Field(
        default=None, description="Static OAuth access token (overrides the service account)"
    )
    google_token_url: str = Field(default="https://oauth2.googleapis.com/token", description="OAuth token endpoint")
    google_http_timeout: float = Field(default=120.0, description="Timeout (s) for Google API requests")

    # =========================================================================
    # RECORD DEFAULTS
    # =========================================================================
    timezone: str = Field(default="Asia/Kolkata", description="Timezone used for created/edited timestamps")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"

    @property
    def use_google(self) -> bool:
        return self.storage_backend.lower() == "google"


# Global settings instance (imported elsewhere)
settings = Settings()
