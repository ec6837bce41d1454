"""
Container store and blob service contracts, plus the in-process backend.

A container is a named grouping node (a Drive folder). Children are matched
by exact name under their parent, so ``get_or_create_container`` is
idempotent for a single caller. De-duplicating concurrent creates of the same
name is left to the backing store; when it cannot, duplicate containers are
tolerated.
"""

import itertools
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Protocol, Tuple

logger = logging.getLogger("portal_resources.container_store")


@dataclass
class Container:
    """A directory-like node in the blob store."""
    id: str
    name: str
    url: str


@dataclass
class StoredFile:
    """A file held by the blob store."""
    id: str
    name: str
    url: str
    mime_type: Optional[str] = None
    size: Optional[int] = None


@dataclass
class ResumableMetadata:
    """What the initiate phase of a resumable upload declares up front."""
    name: str
    mime_type: str
    parent_id: str
    total_size: int


class ContainerStore(Protocol):
    def get_root(self) -> Container:
        """The single well-known container every resource path starts from."""
        ...

    def get_or_create_container(self, parent: Container, name: str) -> Container:
        """Return the child named ``name`` under ``parent``, creating it if missing."""
        ...

    def container_from_link(self, link: str) -> Optional[Container]:
        """The container a stored folder link points at, or None when the link is not one of ours."""
        ...


class BlobService(ContainerStore, Protocol):
    def create_file(self, container: Container, name: str, data: bytes, mime_type: str) -> StoredFile:
        """Store ``data`` as a new file in one request."""
        ...

    def set_public_view_sharing(self, stored_file: StoredFile) -> None:
        """Allow anyone with the link to view the file."""
        ...

    def initiate_resumable_session(self, metadata: ResumableMetadata) -> str:
        """Open a resumable upload session and return its URL."""
        ...

    def put_chunk(self, session_url: str, data: bytes, content_range: str) -> Optional[StoredFile]:
        """
        Send one byte range to an open session.

        Returns the stored file once the final byte has been received, None
        while the session still expects more data.
        """
        ...


@dataclass
class _Session:
    metadata: ResumableMetadata
    received: bytearray = field(default_factory=bytearray)


class InMemoryBlobService:
    """
    Dictionary-backed blob service.

    Used by the test suite and by ``STORAGE_BACKEND=memory``. Keeps every
    container, file body and sharing flag in process memory.

    Storage Structure:
        - containers: Dict[str, Container] - container id -> container
        - _children: Dict[Tuple[str, str], str] - (parent id, name) -> child id
        - files: Dict[str, StoredFile] - file id -> metadata
        - contents: Dict[str, bytes] - file id -> body
        - public_files: set of file ids shared with "anyone with link"
    """

    def __init__(self, root_id: str = "root", base_url: str = "memory://drive"):
        self.base_url = base_url
        self._ids = itertools.count(1)
        self.root = Container(id=root_id, name=root_id, url=f"{base_url}/folders/{root_id}")
        self.containers: Dict[str, Container] = {root_id: self.root}
        self.container_parents: Dict[str, str] = {}
        self._children: Dict[Tuple[str, str], str] = {}
        self.files: Dict[str, StoredFile] = {}
        self.file_parents: Dict[str, str] = {}
        self.contents: Dict[str, bytes] = {}
        self.public_files = set()
        self.sessions: Dict[str, _Session] = {}
        self.chunk_log: List[Tuple[str, str, int]] = []

    def _next_id(self, prefix: str) -> str:
        return f"{prefix}{next(self._ids)}"

    def get_root(self) -> Container:
        return self.root

    def get_or_create_container(self, parent: Container, name: str) -> Container:
        key = (parent.id, name)
        existing = self._children.get(key)
        if existing:
            return self.containers[existing]
        container_id = self._next_id("folder-")
        container = Container(id=container_id, name=name, url=f"{self.base_url}/folders/{container_id}")
        self.containers[container_id] = container
        self.container_parents[container_id] = parent.id
        self._children[key] = container_id
        logger.debug(f"Created container {name!r} under {parent.id}")
        return container

    def container_from_link(self, link: str) -> Optional[Container]:
        prefix = f"{self.base_url}/folders/"
        if not link.startswith(prefix):
            return None
        return self.containers.get(link[len(prefix):])

    def path_of(self, container: Container) -> List[str]:
        """Names from just below the root down to ``container``."""
        names = []
        current = container.id
        while current in self.container_parents:
            names.append(self.containers[current].name)
            current = self.container_parents[current]
        return list(reversed(names))

    def _store(self, parent_id: str, name: str, data: bytes, mime_type: str) -> StoredFile:
        file_id = self._next_id("file-")
        stored = StoredFile(
            id=file_id,
            name=name,
            url=f"{self.base_url}/files/{file_id}/view",
            mime_type=mime_type,
            size=len(data),
        )
        self.files[file_id] = stored
        self.file_parents[file_id] = parent_id
        self.contents[file_id] = bytes(data)
        return stored

    def create_file(self, container: Container, name: str, data: bytes, mime_type: str) -> StoredFile:
        return self._store(container.id, name, data, mime_type)

    def set_public_view_sharing(self, stored_file: StoredFile) -> None:
        self.public_files.add(stored_file.id)

    def initiate_resumable_session(self, metadata: ResumableMetadata) -> str:
        session_url = f"{self.base_url}/upload/sessions/{self._next_id('session-')}"
        self.sessions[session_url] = _Session(metadata=metadata)
        return session_url

    def put_chunk(self, session_url: str, data: bytes, content_range: str) -> Optional[StoredFile]:
        session = self.sessions[session_url]
        session.received.extend(data)
        self.chunk_log.append((session_url, content_range, len(data)))
        if len(session.received) < session.metadata.total_size:
            return None
        meta = session.metadata
        del self.sessions[session_url]
        return self._store(meta.parent_id, meta.name, bytes(session.received), meta.mime_type)
