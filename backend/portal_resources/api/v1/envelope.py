# backend/portal_resources/api/v1/envelope.py
"""Turns a ``ServiceResult`` into a JSON response with a matching status code."""

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from ...core.models.resource_models import ServiceResult

# error_kind -> HTTP status; anything unlisted is a 500
ERROR_STATUS = {
    "NotFound": 404,
    "Validation": 400,
    "UpstreamTransportFailure": 502,
    "ContainerCreationFailure": 502,
}


def envelope_response(result: ServiceResult, success_status: int = 200) -> JSONResponse:
    status_code = success_status if result.success else ERROR_STATUS.get(result.error_kind, 500)
    return JSONResponse(status_code=status_code, content=jsonable_encoder(result))
