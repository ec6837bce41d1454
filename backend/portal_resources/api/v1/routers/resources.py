# backend/portal_resources/api/v1/routers/resources.py
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from ....core.models.resource_models import ResourceCreateRequest, ResourceFilters, ResourceUpdateRequest
from ....core.shared.resource_service import ResourceService
from ....dependencies import get_resource_service
from ..envelope import envelope_response

router = APIRouter(prefix="/resources", tags=["Resources"])


@router.get("")
def list_resources(
    batch: Optional[str] = Query(None, description="Exact match on the target batch"),
    term: Optional[str] = Query(None),
    domain: Optional[str] = Query(None),
    subject: Optional[str] = Query(None),
    level: Optional[str] = Query(None),
    resource_type: Optional[str] = Query(None),
    status: Optional[str] = Query(None, description="Published or Archived"),
    service: ResourceService = Depends(get_resource_service),
) -> JSONResponse:
    """List resources matching every given filter."""
    filters = ResourceFilters(
        batch=batch,
        term=term,
        domain=domain,
        subject=subject,
        level=level,
        resource_type=resource_type,
        status=status,
    )
    return envelope_response(service.list_resources(filters))


@router.post("")
def create_resource(
    request: ResourceCreateRequest,
    service: ResourceService = Depends(get_resource_service),
) -> JSONResponse:
    """Create a resource, uploading any base64 file payloads first."""
    return envelope_response(service.create_resource(request), success_status=201)


@router.put("/{resource_id}")
def update_resource(
    resource_id: str,
    request: ResourceUpdateRequest,
    service: ResourceService = Depends(get_resource_service),
) -> JSONResponse:
    """Update only the fields present in the body."""
    return envelope_response(service.update_resource(resource_id, request))


@router.delete("/{resource_id}")
def delete_resource(
    resource_id: str,
    service: ResourceService = Depends(get_resource_service),
) -> JSONResponse:
    """Soft delete: the resource is archived, not removed."""
    return envelope_response(service.soft_delete_resource(resource_id))
