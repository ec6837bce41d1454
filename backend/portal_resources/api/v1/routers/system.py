# backend/portal_resources/api/v1/routers/system.py
import logging
from datetime import datetime

from fastapi import APIRouter, Depends

from ....config import settings
from ....core.records.tabular_store import TabularStore
from ....dependencies import get_tabular_store, resource_setting
from ..models import HealthStatus

logger = logging.getLogger("portal_resources.api.system")

router = APIRouter(prefix="/system", tags=["System"])


@router.get("/health", response_model=HealthStatus)
def health_check(store: TabularStore = Depends(get_tabular_store)):
    """Health check endpoint; reads the resources tab to prove the store is reachable."""
    error = None
    try:
        store.read_all_rows(resource_setting("resources_sheet_name"))
    except Exception as e:
        logger.warning(f"Health check could not read the resources tab: {e}")
        error = str(e)

    return HealthStatus(
        status="healthy" if error is None else "degraded",
        timestamp=datetime.now(),
        version=settings.api_version,
        backend=settings.storage_backend,
        spreadsheet_available=error is None,
        error=error,
    )
