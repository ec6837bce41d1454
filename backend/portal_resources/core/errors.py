"""
Error types raised inside the resource core.

Every error carries a ``kind`` used by the service boundary to build the
``{success: false, error}`` envelope and by the HTTP layer to choose a status
code. None of these escape ``ResourceService``.
"""

from typing import Optional


class ResourceError(RuntimeError):
    """Base class for failures raised by the resource core."""

    kind = "Error"


class NotFoundError(ResourceError):
    """A record, tab or container that was expected to exist is missing."""

    kind = "NotFound"


class UpstreamTransportFailure(ResourceError):
    """The blob or tabular service answered with a non-2xx status or was unreachable."""

    kind = "UpstreamTransportFailure"

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class ContainerCreationFailure(ResourceError):
    """A container on the storage path could not be resolved or created."""

    kind = "ContainerCreationFailure"


class ResourceValidationError(ResourceError):
    """The request cannot be stored as given (too many files, bad payload encoding)."""

    kind = "Validation"
