# backend/portal_resources/api/v1/routers/taxonomy.py
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from ....core.shared.resource_service import ResourceService
from ....dependencies import get_resource_service
from ..envelope import envelope_response

router = APIRouter(tags=["Taxonomy"])


@router.get("/taxonomy")
def get_taxonomy(service: ResourceService = Depends(get_resource_service)) -> JSONResponse:
    """Dropdown lists and the batch -> term -> domain -> subject hierarchy."""
    return envelope_response(service.get_taxonomy_index())
