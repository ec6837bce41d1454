"""
Upload transport: picks and runs the direct or the resumable protocol.

Payloads up to ``normal_upload_limit`` bytes (50 MiB by default) go out in a
single request. Larger payloads open a resumable session first and then
transfer the bytes against it. Either way the stored file is shared as
"anyone with link may view" before its URL is returned.

The transfer phase iterates over byte ranges. With the default chunk size
(whole file) that is exactly one PUT carrying
``Content-Range: bytes 0-<last>/<total>``; a smaller ``chunk_size`` turns it
into a multi-request transfer against the same session.
"""

import logging
from dataclasses import dataclass
from typing import Iterator, Optional, Tuple

from ...config import settings
from ..errors import UpstreamTransportFailure
from .container_store import BlobService, Container, ResumableMetadata, StoredFile

logger = logging.getLogger("portal_resources.upload")

DIRECT = "direct"
RESUMABLE = "resumable"


@dataclass
class UploadedFile:
    name: str
    url: str
    protocol: str


def content_range(start: int, end: int, total: int) -> str:
    """``Content-Range`` header value for bytes ``start..end`` inclusive."""
    return f"bytes {start}-{end}/{total}"


def iter_chunks(total: int, chunk_size: Optional[int]) -> Iterator[Tuple[int, int]]:
    """Yield inclusive (start, end) byte ranges covering ``total`` bytes."""
    step = chunk_size if chunk_size and chunk_size > 0 else max(total, 1)
    start = 0
    while start < total:
        end = min(start + step, total) - 1
        yield start, end
        start = end + 1


class UploadTransport:
    """
    Dual-mode uploader on top of a ``BlobService``.

    Attributes:
        normal_upload_limit: Largest payload (bytes) sent with the direct protocol
        chunk_size: Bytes per resumable transfer request; None means whole file
    """

    def __init__(
        self,
        blob_service: BlobService,
        normal_upload_limit: Optional[int] = None,
        chunk_size: Optional[int] = None,
    ):
        self.blob_service = blob_service
        self.normal_upload_limit = normal_upload_limit or settings.normal_upload_limit
        self.chunk_size = chunk_size if chunk_size is not None else settings.resumable_chunk_size

    def choose_protocol(self, size: int) -> str:
        return RESUMABLE if size > self.normal_upload_limit else DIRECT

    def upload(
        self,
        container: Container,
        file_name: str,
        raw_bytes: bytes,
        mime_type: str,
        declared_size: Optional[int] = None,
    ) -> UploadedFile:
        """
        Store ``raw_bytes`` in ``container`` and return its public URL.

        ``declared_size`` is what the client claimed; only the real payload
        length decides the protocol.

        Raises:
            UpstreamTransportFailure: either phase failed; nothing is retried
        """
        size = len(raw_bytes)
        if declared_size is not None and declared_size != size:
            logger.warning(
                f"Declared size {declared_size} for '{file_name}' does not match payload ({size} bytes)"
            )

        protocol = self.choose_protocol(size)
        logger.info(f"Uploading '{file_name}' ({size / (1024 * 1024):.2f} MB) using {protocol} upload")

        if protocol == RESUMABLE:
            stored = self._upload_resumable(container, file_name, raw_bytes, mime_type)
        else:
            stored = self.blob_service.create_file(container, file_name, raw_bytes, mime_type)

        self.blob_service.set_public_view_sharing(stored)
        logger.info(f"File uploaded: {stored.url}")
        return UploadedFile(name=stored.name or file_name, url=stored.url, protocol=protocol)

    def _upload_resumable(self, container: Container, file_name: str, raw_bytes: bytes, mime_type: str) -> StoredFile:
        total = len(raw_bytes)
        session_url = self.blob_service.initiate_resumable_session(
            ResumableMetadata(name=file_name, mime_type=mime_type, parent_id=container.id, total_size=total)
        )

        stored = None
        for start, end in iter_chunks(total, self.chunk_size):
            stored = self.blob_service.put_chunk(
                session_url, raw_bytes[start:end + 1], content_range(start, end, total)
            )

        if stored is None:
            raise UpstreamTransportFailure(f"Upload of '{file_name}' did not complete")
        return stored
