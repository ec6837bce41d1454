"""
Record Store.

CRUD over the resources tab. One resource is one 37-column row (see
``row_schema``); rows are located by a linear scan on the id column and
rewritten whole. Nothing is ever physically removed: deletion flips the
status cell to ``Archived``.

There is no locking. Two concurrent updates of the same row both succeed and
the later write wins.
"""

import logging
import secrets
import time
from datetime import datetime
from typing import List, Optional, Sequence, Tuple
from zoneinfo import ZoneInfo

from ...config import settings
from ..errors import NotFoundError, ResourceValidationError
from ..models.resource_models import (
    MAX_FILE_SLOTS,
    FileRef,
    FileUpload,
    Resource,
    ResourceCreateRequest,
    ResourceFile,
    ResourceFilters,
    ResourceMutationResult,
    ResourceStatus,
    ResourceUpdateRequest,
)
from ..storage.container_store import Container
from ..storage.storage_path_service import StoragePathService
from ..storage.upload_transport import UploadTransport
from .field_codec import encode_links
from .row_schema import (
    FILTER_COLUMNS,
    ID_COL,
    SCALAR_FIELDS_HEAD,
    STATUS_COL,
    URLS_COL,
    build_row,
    cell_text,
    normalize_row,
    row_to_resource,
)
from .tabular_store import Row, TabularStore

logger = logging.getLogger("portal_resources.record_store")

ID_ALPHABET = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ"
TIMESTAMP_FORMAT = "%d-%b-%Y %H:%M:%S"

# Columns an update can never change.
IMMUTABLE_FIELDS = {"id", "posted_by", "created_at", "edited_at", "edited_by"}


def generate_resource_id() -> str:
    """``RES_<epoch ms>_<5 uppercase base36 chars>``. Uniqueness is by generation only."""
    suffix = "".join(secrets.choice(ID_ALPHABET) for _ in range(5))
    return f"RES_{int(time.time() * 1000)}_{suffix}"


def format_timestamp(tz_name: Optional[str] = None, now: Optional[datetime] = None) -> str:
    """Current time as ``18-Oct-2026 14:05:09`` in the configured timezone."""
    zone = ZoneInfo(tz_name or settings.timezone)
    moment = now.astimezone(zone) if now else datetime.now(zone)
    return moment.strftime(TIMESTAMP_FORMAT)


def _text(value: Optional[str]) -> str:
    return value if value is not None else ""


class RecordStore:
    """
    Resource CRUD over a ``TabularStore``.

    Files are stored before the row is written: a failed container or upload
    leaves the tab untouched. A failed row write after successful uploads
    leaves those files orphaned in the blob store.
    """

    def __init__(
        self,
        tabular_store: TabularStore,
        path_service: StoragePathService,
        upload_transport: UploadTransport,
        table_name: Optional[str] = None,
        timezone: Optional[str] = None,
    ):
        self.tabular_store = tabular_store
        self.path_service = path_service
        self.upload_transport = upload_transport
        self.table_name = table_name or settings.resources_sheet_name
        self.timezone = timezone or settings.timezone

    def _now(self) -> str:
        return format_timestamp(self.timezone)

    # =========================================================================
    # HELPERS
    # =========================================================================

    def _read_rows(self) -> List[Row]:
        return self.tabular_store.read_all_rows(self.table_name)

    def _find_row(self, resource_id: str) -> Tuple[int, List[str]]:
        """Return (row index, normalized cells) of ``resource_id``; row 0 is the header."""
        rows = self._read_rows()
        for index in range(1, len(rows)):
            row = rows[index]
            if row and cell_text(row[ID_COL]) == resource_id:
                return index, normalize_row(row)
        raise NotFoundError("Resource not found")

    @staticmethod
    def _check_file_count(files: Sequence[ResourceFile]) -> None:
        if len(files) > MAX_FILE_SLOTS:
            raise ResourceValidationError(
                f"A resource holds at most {MAX_FILE_SLOTS} files, got {len(files)}"
            )

    def _store_files(self, container: Optional[Container], files: Sequence[ResourceFile]) -> List[FileRef]:
        """Upload payloads into ``container``; already hosted files pass through unchanged."""
        stored: List[FileRef] = []
        for item in files:
            if isinstance(item, FileUpload):
                uploaded = self.upload_transport.upload(
                    container,
                    item.name,
                    item.decode(),
                    item.mime_type,
                    declared_size=item.declared_size,
                )
                stored.append(FileRef(name=uploaded.name, url=uploaded.url))
            else:
                stored.append(FileRef(name=item.name, url=item.url))
        return stored

    # =========================================================================
    # OPERATIONS
    # =========================================================================

    def create(self, request: ResourceCreateRequest) -> ResourceMutationResult:
        """
        Append a new resource row.

        Files trigger container creation under the resource's taxonomy path;
        without files no container is created and the folder link stays
        empty.

        Raises:
            ResourceValidationError: more than five files, or a payload that is not base64
            NotFoundError: the resources tab does not exist
            ContainerCreationFailure / UpstreamTransportFailure: storage failed
        """
        self._check_file_count(request.files)
        for item in request.files:
            if isinstance(item, FileUpload):
                item.decode()
        # Fails with NotFoundError before anything is uploaded.
        self._read_rows()

        resource_id = generate_resource_id()
        timestamp = self._now()
        logger.info(f"Creating resource {resource_id}: {request.title!r}")

        folder_link = ""
        files: List[FileRef] = []
        if request.files:
            container = self.path_service.ensure_container(
                request.batch, request.level, request.term, request.domain, request.subject
            )
            folder_link = container.url
            files = self._store_files(container, request.files)

        scalars = {
            "id": resource_id,
            "publish": request.publish or "No",
            "posted_by": request.posted_by,
            "created_at": timestamp,
            "edited_at": "",
            "edited_by": "",
            "start_date_time": request.start_date_time or timestamp,
            "end_date_time": _text(request.end_date_time),
            "target_batch": request.target_batch or request.batch,
            "show_other_batches": request.show_other_batches or "No",
            "title": request.title,
            "description": _text(request.description),
            "term": _text(request.term),
            "domain": _text(request.domain),
            "subject": _text(request.subject),
            "session_name": _text(request.session_name),
            "level": request.level.value,
            "resource_type": request.resource_type.value,
            "resource_type_custom": _text(request.resource_type_custom),
            "priority": request.priority or "Medium",
            "learning_objectives": _text(request.learning_objectives),
            "prerequisites": _text(request.prerequisites),
        }
        row = build_row(
            scalars,
            files,
            encode_links(request.urls),
            folder_link,
            ResourceStatus.PUBLISHED.value,
            _text(request.notes),
        )
        self.tabular_store.append_row(self.table_name, row)

        logger.info(f"Resource created: {resource_id} ({len(files)} files)")
        return ResourceMutationResult(
            id=resource_id,
            message="Resource created successfully",
            drive_folder_link=folder_link,
            resource=row_to_resource(row),
        )

    def list(self, filters: Optional[ResourceFilters] = None) -> List[Resource]:
        """All resources matching every non-empty filter, in row order."""
        wanted = {
            FILTER_COLUMNS[name]: value
            for name, value in (filters or ResourceFilters()).model_dump().items()
            if value
        }
        resources = []
        for row in self._read_rows()[1:]:
            cells = normalize_row(row)
            if not cells[ID_COL]:
                continue
            if any(cells[col] != value for col, value in wanted.items()):
                continue
            resources.append(row_to_resource(cells))
        logger.debug(f"Listed {len(resources)} resources with filters {wanted}")
        return resources

    def update(self, resource_id: str, request: ResourceUpdateRequest) -> ResourceMutationResult:
        """
        Merge ``request`` into the stored row and rewrite it in place.

        Only fields present in the request change. ``files`` present replaces
        every slot; a container is created only when files are supplied and
        the resource has none yet. New uploads for a resource that already
        has a folder go into that folder, whatever its taxonomy is now.
        """
        provided = request.provided_fields()
        new_files = request.files if "files" in provided else None
        if new_files is not None:
            self._check_file_count(new_files)
            for item in new_files:
                if isinstance(item, FileUpload):
                    item.decode()

        row_index, cells = self._find_row(resource_id)
        existing = row_to_resource(cells)
        logger.info(f"Updating resource {resource_id} (fields: {sorted(provided)})")

        scalars = {field: cells[index] for index, field in enumerate(SCALAR_FIELDS_HEAD)}
        for field in SCALAR_FIELDS_HEAD:
            if field in provided and field not in IMMUTABLE_FIELDS:
                scalars[field] = provided[field]
        scalars["edited_at"] = self._now()
        scalars["edited_by"] = provided.get("edited_by", "")

        folder_link = existing.drive_folder_link
        files = existing.files
        if new_files is not None:
            container = None
            needs_upload = any(isinstance(item, FileUpload) for item in new_files)
            if folder_link:
                # files already have a home; later additions go there too
                if needs_upload:
                    container = self.path_service.existing_container(folder_link)
            elif new_files:
                container = self.path_service.ensure_container(
                    provided.get("batch") or scalars["target_batch"],
                    scalars["level"],
                    scalars["term"],
                    scalars["domain"],
                    scalars["subject"],
                )
                folder_link = container.url
            files = self._store_files(container, new_files)

        urls_cell = encode_links(request.urls) if "urls" in provided else cells[URLS_COL]
        row = build_row(
            scalars,
            files,
            urls_cell,
            folder_link,
            provided.get("status", existing.status),
            provided.get("notes", existing.notes),
        )
        self.tabular_store.write_row(self.table_name, row_index, row)

        logger.info(f"Resource updated: {resource_id}")
        return ResourceMutationResult(
            id=resource_id,
            message="Resource updated successfully",
            drive_folder_link=folder_link,
            resource=row_to_resource(row),
        )

    def soft_delete(self, resource_id: str) -> ResourceMutationResult:
        """Flip the status cell to ``Archived``; the row stays."""
        row_index, _ = self._find_row(resource_id)
        self.tabular_store.write_cell(self.table_name, row_index, STATUS_COL, ResourceStatus.ARCHIVED.value)
        logger.info(f"Resource archived: {resource_id}")
        return ResourceMutationResult(id=resource_id, message="Resource deleted successfully")
