import os
import tempfile
from pathlib import Path

import pytest

# Force the in-process backends and keep any local config.yml out of the
# test run before importing app modules.
os.environ["STORAGE_BACKEND"] = "memory"
os.environ["CONFIG_PATH"] = str(Path(tempfile.gettempdir()) / "portal_resources_pytest_missing_config.yml")

from portal_resources.core.records.record_store import RecordStore  # noqa: E402
from portal_resources.core.records.row_schema import COLUMNS  # noqa: E402
from portal_resources.core.records.tabular_store import InMemoryTabularStore  # noqa: E402
from portal_resources.core.shared.resource_service import ResourceService  # noqa: E402
from portal_resources.core.storage.container_store import InMemoryBlobService  # noqa: E402
from portal_resources.core.storage.storage_path_service import StoragePathService  # noqa: E402
from portal_resources.core.storage.upload_transport import UploadTransport  # noqa: E402
from portal_resources.core.taxonomy.taxonomy_index import TERM_HEADER, TaxonomyIndexBuilder  # noqa: E402

RESOURCES_TAB = "Resources Material"
TERM_TAB = "Term"


@pytest.fixture
def tabular_store():
    store = InMemoryTabularStore()
    store.create_table(RESOURCES_TAB, COLUMNS)
    store.create_table(TERM_TAB, TERM_HEADER)
    return store


@pytest.fixture
def blob_service():
    return InMemoryBlobService()


@pytest.fixture
def record_store(tabular_store, blob_service):
    return RecordStore(
        tabular_store,
        StoragePathService(blob_service),
        UploadTransport(blob_service),
        table_name=RESOURCES_TAB,
        timezone="Asia/Kolkata",
    )


@pytest.fixture
def resource_service(record_store, tabular_store):
    return ResourceService(record_store, TaxonomyIndexBuilder(tabular_store, TERM_TAB))
