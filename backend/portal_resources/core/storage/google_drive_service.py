"""
Google Drive storage service.

Implements the container/blob contract used by the resource core on top of
the Drive v3 REST API:

- folders as containers (get-or-create by exact name under a parent)
- multipart uploads for single-request transfers
- resumable upload sessions (initiate + byte-range PUT)
- "anyone with link can view" permissions

Integration:
- Uses portal_resources.config.settings for endpoints and timeouts
- GoogleTokenManager supplies bearer tokens
- All HTTP goes through one synchronous httpx.Client
"""

import json
import logging
import re
from typing import Any, Dict, Optional

import httpx

from ...config import settings
from ..auth.google_token_manager import GoogleTokenManager
from ..errors import UpstreamTransportFailure
from .container_store import Container, ResumableMetadata, StoredFile

logger = logging.getLogger("portal_resources.google_drive")

FOLDER_MIME_TYPE = "application/vnd.google-apps.folder"
MULTIPART_BOUNDARY = "portal_resources_upload_boundary"
FOLDER_ID_PATTERN = re.compile(r"/folders/([A-Za-z0-9_-]+)|[?&]id=([A-Za-z0-9_-]+)")


def folder_url(folder_id: str) -> str:
    return f"https://drive.google.com/drive/folders/{folder_id}"


def file_view_url(file_id: str) -> str:
    return f"https://drive.google.com/file/d/{file_id}/view?usp=drivesdk"


def _escape_query_value(value: str) -> str:
    return value.replace("\\", "\\\\").replace("'", "\\'")


class GoogleDriveService:
    """
    Drive-backed blob service.

    Every method raises ``UpstreamTransportFailure`` on a non-2xx answer or a
    network error; nothing is retried here.
    """

    def __init__(
        self,
        token_manager: GoogleTokenManager,
        root_folder_id: Optional[str] = None,
        client: Optional[httpx.Client] = None,
        base_url: Optional[str] = None,
        upload_url: Optional[str] = None,
    ):
        self.token_manager = token_manager
        self.root_folder_id = root_folder_id or settings.drive_root_folder_id
        self.base_url = (base_url or settings.drive_base_url).rstrip("/")
        self.upload_url = upload_url or settings.drive_upload_url
        self._client = client or httpx.Client(timeout=settings.google_http_timeout)

    def close(self) -> None:
        self._client.close()

    # =========================================================================
    # HTTP HELPERS
    # =========================================================================

    def _headers(self, extra: Optional[Dict[str, str]] = None) -> Dict[str, str]:
        headers = self.token_manager.get_headers(self._client)
        if extra:
            headers.update(extra)
        return headers

    def _request(self, method: str, url: str, **kwargs) -> httpx.Response:
        extra_headers = kwargs.pop("headers", None)
        try:
            response = self._client.request(method, url, headers=self._headers(extra_headers), **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"Drive request failed ({method} {url}): {e}")
            raise UpstreamTransportFailure(f"Drive request failed: {e}") from e
        return response

    @staticmethod
    def _expect(response: httpx.Response, *ok_statuses: int, action: str) -> httpx.Response:
        if response.status_code not in ok_statuses:
            logger.error(f"Drive {action} failed: HTTP {response.status_code} {response.text}")
            raise UpstreamTransportFailure(
                f"Failed to {action}: HTTP {response.status_code} {response.text}",
                status_code=response.status_code,
            )
        return response

    @staticmethod
    def _to_stored_file(payload: Dict[str, Any]) -> StoredFile:
        size = payload.get("size")
        return StoredFile(
            id=payload["id"],
            name=payload.get("name", ""),
            url=payload.get("webViewLink") or file_view_url(payload["id"]),
            mime_type=payload.get("mimeType"),
            size=int(size) if size is not None else None,
        )

    # =========================================================================
    # CONTAINERS
    # =========================================================================

    def get_root(self) -> Container:
        if not self.root_folder_id:
            raise UpstreamTransportFailure("DRIVE_ROOT_FOLDER_ID is not configured")
        return Container(id=self.root_folder_id, name=self.root_folder_id, url=folder_url(self.root_folder_id))

    def get_or_create_container(self, parent: Container, name: str) -> Container:
        """Return the folder ``name`` under ``parent``, creating it when the lookup finds none."""
        query = (
            f"name = '{_escape_query_value(name)}' and '{parent.id}' in parents "
            f"and mimeType = '{FOLDER_MIME_TYPE}' and trashed = false"
        )
        response = self._request(
            "GET",
            f"{self.base_url}/files",
            params={
                "q": query,
                "fields": "files(id,name,webViewLink)",
                "pageSize": 1,
                "supportsAllDrives": "true",
                "includeItemsFromAllDrives": "true",
            },
        )
        found = self._expect(response, 200, action=f"look up folder '{name}'").json().get("files", [])
        if found:
            folder = found[0]
            return Container(id=folder["id"], name=folder.get("name", name), url=folder_url(folder["id"]))

        response = self._request(
            "POST",
            f"{self.base_url}/files",
            params={"fields": "id,name,webViewLink", "supportsAllDrives": "true"},
            json={"name": name, "mimeType": FOLDER_MIME_TYPE, "parents": [parent.id]},
        )
        created = self._expect(response, 200, action=f"create folder '{name}'").json()
        logger.info(f"Created Drive folder '{name}' ({created['id']}) under {parent.id}")
        return Container(id=created["id"], name=created.get("name", name), url=folder_url(created["id"]))

    def container_from_link(self, link: str) -> Optional[Container]:
        """Folder id parsed from a stored ``/folders/<id>`` or ``?id=<id>`` link; no request is made."""
        match = FOLDER_ID_PATTERN.search(link or "")
        if not match:
            return None
        folder_id = match.group(1) or match.group(2)
        return Container(id=folder_id, name=folder_id, url=link)

    # =========================================================================
    # FILES
    # =========================================================================

    def create_file(self, container: Container, name: str, data: bytes, mime_type: str) -> StoredFile:
        """Single-request multipart upload (metadata part + media part)."""
        metadata = json.dumps({"name": name, "parents": [container.id]}).encode("utf-8")
        body = b"".join([
            f"--{MULTIPART_BOUNDARY}\r\n".encode(),
            b"Content-Type: application/json; charset=UTF-8\r\n\r\n",
            metadata,
            f"\r\n--{MULTIPART_BOUNDARY}\r\n".encode(),
            f"Content-Type: {mime_type}\r\n\r\n".encode(),
            data,
            f"\r\n--{MULTIPART_BOUNDARY}--".encode(),
        ])
        response = self._request(
            "POST",
            self.upload_url,
            params={
                "uploadType": "multipart",
                "fields": "id,name,mimeType,size,webViewLink",
                "supportsAllDrives": "true",
            },
            headers={"Content-Type": f"multipart/related; boundary={MULTIPART_BOUNDARY}"},
            content=body,
        )
        return self._to_stored_file(self._expect(response, 200, action=f"upload '{name}'").json())

    def set_public_view_sharing(self, stored_file: StoredFile) -> None:
        response = self._request(
            "POST",
            f"{self.base_url}/files/{stored_file.id}/permissions",
            params={"supportsAllDrives": "true"},
            json={"role": "reader", "type": "anyone"},
        )
        self._expect(response, 200, action=f"share '{stored_file.name}'")

    def initiate_resumable_session(self, metadata: ResumableMetadata) -> str:
        """
        Open a resumable session.

        Only HTTP 200 with a ``Location`` header counts as success.
        """
        response = self._request(
            "POST",
            self.upload_url,
            params={"uploadType": "resumable", "supportsAllDrives": "true"},
            headers={
                "Content-Type": "application/json; charset=UTF-8",
                "X-Upload-Content-Type": metadata.mime_type,
                "X-Upload-Content-Length": str(metadata.total_size),
            },
            json={"name": metadata.name, "mimeType": metadata.mime_type, "parents": [metadata.parent_id]},
        )
        if response.status_code != 200:
            logger.error(f"Failed to initiate upload: {response.text}")
            raise UpstreamTransportFailure(
                f"Failed to initiate upload: {response.text}", status_code=response.status_code
            )
        session_url = response.headers.get("Location")
        if not session_url:
            raise UpstreamTransportFailure("Failed to initiate upload: no session URL returned", status_code=200)
        logger.info(f"Resumable upload session created for '{metadata.name}'")
        return session_url

    def put_chunk(self, session_url: str, data: bytes, content_range: str) -> Optional[StoredFile]:
        """
        PUT one byte range to a resumable session.

        Returns the stored file on 200/201, None on 308 (more bytes expected).
        """
        try:
            response = self._client.put(
                session_url,
                headers=self._headers({"Content-Length": str(len(data)), "Content-Range": content_range}),
                content=data,
            )
        except httpx.HTTPError as e:
            logger.error(f"Resumable transfer failed: {e}")
            raise UpstreamTransportFailure(f"Upload failed: {e}") from e

        if response.status_code == 308:
            return None
        if response.status_code not in (200, 201):
            logger.error(f"Upload failed: {response.text}")
            raise UpstreamTransportFailure(f"Upload failed: {response.text}", status_code=response.status_code)
        return self._to_stored_file(response.json())
