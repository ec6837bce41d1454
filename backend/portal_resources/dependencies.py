# backend/portal_resources/dependencies.py
"""
Process-wide service wiring for the FastAPI routes.

Each factory builds its service once (``lru_cache``) and is used with
``Depends``. ``STORAGE_BACKEND`` picks the Google Drive/Sheets clients or the
in-process backends; locations and credentials come from config.yml first and
the environment second.

Usage:
    from fastapi import Depends
    from portal_resources.dependencies import get_resource_service

    @router.get("/resources")
    def list_resources(service: ResourceService = Depends(get_resource_service)):
        return service.list_resources()
"""

import logging
from functools import lru_cache
from typing import Any

from .config import settings
from .core.auth.google_token_manager import GoogleTokenManager
from .core.records.google_sheets_service import GoogleSheetsService
from .core.records.record_store import RecordStore
from .core.records.row_schema import COLUMNS
from .core.records.tabular_store import InMemoryTabularStore, TabularStore
from .core.shared.config_loader import config_loader
from .core.shared.resource_service import ResourceService
from .core.storage.container_store import BlobService, InMemoryBlobService
from .core.storage.google_drive_service import GoogleDriveService
from .core.storage.storage_path_service import StoragePathService
from .core.storage.upload_transport import UploadTransport
from .core.taxonomy.taxonomy_index import TERM_HEADER, TaxonomyIndexBuilder

logger = logging.getLogger("portal_resources.dependencies")

# config.yml google section key -> Settings attribute
_GOOGLE_SETTINGS = {
    "service_account_file": "google_service_account_file",
    "access_token": "google_access_token",
    "token_url": "google_token_url",
    "timeout": "google_http_timeout",
}


def resource_setting(name: str) -> Any:
    """``resources.<name>`` from config.yml, else the environment setting of the same name."""
    resources_config = config_loader.get_resources_config()
    if resources_config is not None:
        return getattr(resources_config, name)
    return getattr(settings, name)


def google_setting(name: str) -> Any:
    google_config = config_loader.get_google_config()
    if google_config is not None:
        return getattr(google_config, name)
    return getattr(settings, _GOOGLE_SETTINGS[name])


@lru_cache()
def get_token_manager() -> GoogleTokenManager:
    token_url = google_setting("token_url")
    access_token = google_setting("access_token")
    if access_token:
        logger.info("Using static Google access token")
        return GoogleTokenManager(static_token=access_token, token_url=token_url)

    key_file = google_setting("service_account_file")
    if not key_file:
        raise ValueError("Google credentials not configured: set GOOGLE_SERVICE_ACCOUNT_FILE or GOOGLE_ACCESS_TOKEN")
    logger.info(f"Using Google service account key {key_file}")
    return GoogleTokenManager.from_service_account_file(key_file, token_url=token_url)


@lru_cache()
def get_tabular_store() -> TabularStore:
    if not settings.use_google:
        logger.info("Using in-memory tabular store")
        store = InMemoryTabularStore()
        store.create_table(resource_setting("resources_sheet_name"), COLUMNS)
        store.create_table(resource_setting("term_sheet_name"), TERM_HEADER)
        return store

    return GoogleSheetsService(get_token_manager(), spreadsheet_id=resource_setting("spreadsheet_id"))


@lru_cache()
def get_blob_service() -> BlobService:
    if not settings.use_google:
        logger.info("Using in-memory blob service")
        return InMemoryBlobService()

    return GoogleDriveService(get_token_manager(), root_folder_id=resource_setting("drive_root_folder_id"))


@lru_cache()
def get_resource_service() -> ResourceService:
    tabular_store = get_tabular_store()
    blob_service = get_blob_service()
    record_store = RecordStore(
        tabular_store,
        StoragePathService(blob_service),
        UploadTransport(
            blob_service,
            normal_upload_limit=resource_setting("normal_upload_limit"),
            chunk_size=resource_setting("resumable_chunk_size"),
        ),
        table_name=resource_setting("resources_sheet_name"),
        timezone=resource_setting("timezone"),
    )
    taxonomy_builder = TaxonomyIndexBuilder(tabular_store, resource_setting("term_sheet_name"))
    return ResourceService(record_store, taxonomy_builder)


def reset_services() -> None:
    """Drop every cached service so the next request rebuilds them."""
    for factory in (get_resource_service, get_blob_service, get_tabular_store, get_token_manager):
        factory.cache_clear()
