"""
Storage Path Service.

Derives the container path a resource's files are stored under from its
taxonomy fields, and walks that path through a container store, creating any
missing folder on the way.

Storage Structure:
    {root folder}/
    └── {batch}/
        └── Resources/
            └── {term}/                       # level = Term
                └── {domain}/                 # level = Domain
                    └── {subject}/            # level = Subject or Session
                        ├── lecture-01.pdf
                        └── ...

Session-level files share their subject's folder; there is no per-session
folder. A level whose required fields are not all present degrades to the
``{batch}/Resources`` prefix instead of failing; so does level ``Other``.
"""

import logging
from typing import List, Optional, Union

from ..errors import ContainerCreationFailure
from ..models.resource_models import ResourceLevel
from .container_store import Container, ContainerStore

logger = logging.getLogger("portal_resources.storage_path")

RESOURCES_SEGMENT = "Resources"

# Taxonomy fields each level needs beyond the batch, in path order.
LEVEL_FIELDS = {
    ResourceLevel.TERM: ("term",),
    ResourceLevel.DOMAIN: ("term", "domain"),
    ResourceLevel.SUBJECT: ("term", "domain", "subject"),
    ResourceLevel.SESSION: ("term", "domain", "subject"),
}


def _clean(value: Optional[str]) -> str:
    return (value or "").strip()


def _as_level(level: Union[ResourceLevel, str, None]) -> Optional[ResourceLevel]:
    if isinstance(level, ResourceLevel):
        return level
    try:
        return ResourceLevel(_clean(level))
    except ValueError:
        return None


def resource_path(
    batch: str,
    level: Union[ResourceLevel, str, None],
    term: Optional[str] = None,
    domain: Optional[str] = None,
    subject: Optional[str] = None,
) -> List[str]:
    """
    Generate the container names for a resource, below the root container.

    Args:
        batch: Batch name (first segment)
        level: Resource level deciding how deep the path goes
        term: Term name
        domain: Domain name
        subject: Subject name

    Returns:
        Path like ``[batch, "Resources", term, domain, subject]``

    Examples:
        >>> resource_path("2024-26", "Domain", "Term-1", "Finance")
        ['2024-26', 'Resources', 'Term-1', 'Finance']

        >>> resource_path("2024-26", "Domain", "Term-1", "")
        ['2024-26', 'Resources']
    """
    path = [_clean(batch), RESOURCES_SEGMENT]
    fields = LEVEL_FIELDS.get(_as_level(level))
    if not fields:
        return path

    values = {"term": _clean(term), "domain": _clean(domain), "subject": _clean(subject)}
    if all(values[name] for name in fields):
        path.extend(values[name] for name in fields)
    return path


class StoragePathService:
    """
    Resolves resource paths and materializes them in a container store.

    Usage:
        paths = StoragePathService(blob_service)
        container = paths.ensure_container("2024-26", "Subject", "Term-1", "Finance", "Accounting")
        container.url  # folder link stored on the resource
    """

    def __init__(self, store: ContainerStore):
        self.store = store

    def resolve(
        self,
        batch: str,
        level: Union[ResourceLevel, str, None],
        term: Optional[str] = None,
        domain: Optional[str] = None,
        subject: Optional[str] = None,
    ) -> List[str]:
        """Generate path for a resource (no side effects)."""
        return resource_path(batch, level, term, domain, subject)

    def ensure_container(
        self,
        batch: str,
        level: Union[ResourceLevel, str, None],
        term: Optional[str] = None,
        domain: Optional[str] = None,
        subject: Optional[str] = None,
    ) -> Container:
        """
        Get or create every container on the resolved path.

        Raises:
            ContainerCreationFailure: batch is empty or the store failed on
                any segment. Segments created before the failure are left in
                place and nothing is retried.
        """
        path = self.resolve(batch, level, term, domain, subject)
        if not path[0]:
            raise ContainerCreationFailure("Batch is required to create a resource folder")

        logger.info(f"Creating resource folder for level {level}: {'/'.join(path)}")
        try:
            current = self.store.get_root()
            for name in path:
                current = self.store.get_or_create_container(current, name)
        except ContainerCreationFailure:
            raise
        except Exception as e:
            logger.error(f"Error creating resource folder {'/'.join(path)}: {e}")
            raise ContainerCreationFailure(f"Failed to create folder '{'/'.join(path)}': {e}") from e

        logger.info(f"Folder ready: {current.url}")
        return current

    def existing_container(self, folder_link: str) -> Container:
        """
        The container behind a folder link already stored on a resource.

        Raises:
            ContainerCreationFailure: the link does not name a container this
                store knows about
        """
        container = self.store.container_from_link(folder_link)
        if container is None:
            raise ContainerCreationFailure(f"Stored folder link is not a known folder: {folder_link}")
        return container
