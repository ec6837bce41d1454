"""
Resource service: the public boundary of the resource core.

Every operation returns a ``ServiceResult`` envelope and never raises. Core
errors (``ResourceError`` subclasses) become ``{success: false}`` with their
message and kind; anything else is logged with its traceback and reported
with kind ``Error``.

Usage:
    from portal_resources.dependencies import get_resource_service

    result = get_resource_service().list_resources(ResourceFilters(status="Published"))
    if result.success:
        for resource in result.data:
            ...
"""

import logging
from typing import Callable, Optional

from ..errors import ResourceError
from ..models.resource_models import (
    ResourceCreateRequest,
    ResourceFilters,
    ResourceUpdateRequest,
    ServiceResult,
)
from ..records.record_store import RecordStore
from ..taxonomy.taxonomy_index import TaxonomyIndexBuilder

logger = logging.getLogger("portal_resources.resource_service")


class ResourceService:
    def __init__(self, record_store: RecordStore, taxonomy_builder: TaxonomyIndexBuilder):
        self.record_store = record_store
        self.taxonomy_builder = taxonomy_builder

    @staticmethod
    def _run(action: str, operation: Callable[[], object]) -> ServiceResult:
        try:
            return ServiceResult.ok(operation())
        except ResourceError as e:
            logger.error(f"Error {action}: {e}")
            return ServiceResult.fail(str(e), e.kind)
        except Exception as e:
            logger.exception(f"Unexpected error {action}: {e}")
            return ServiceResult.fail(str(e))

    def create_resource(self, request: ResourceCreateRequest) -> ServiceResult:
        return self._run("creating resource", lambda: self.record_store.create(request))

    def list_resources(self, filters: Optional[ResourceFilters] = None) -> ServiceResult:
        return self._run("getting resources", lambda: self.record_store.list(filters))

    def update_resource(self, resource_id: str, request: ResourceUpdateRequest) -> ServiceResult:
        return self._run(
            f"updating resource {resource_id}", lambda: self.record_store.update(resource_id, request)
        )

    def soft_delete_resource(self, resource_id: str) -> ServiceResult:
        return self._run(
            f"deleting resource {resource_id}", lambda: self.record_store.soft_delete(resource_id)
        )

    def get_taxonomy_index(self) -> ServiceResult:
        return self._run("getting term dropdowns", self.taxonomy_builder.build)
