# ============================================================================
# Portal Resources - Resource Data Models
# ============================================================================
"""
Pydantic models for learning resources, their files and links, the taxonomy
dropdown index and the uniform service result envelope.

Request models keep the distinction between a field that was omitted and a
field that was sent, which the update merge relies on
(``model_fields_set``).
"""

import base64
import binascii
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field

from ..errors import ResourceValidationError


# ============================================================================
# ENUMERATION TYPES
# ============================================================================

# Reserved choice meaning "none of the listed values, see the free-text field".
OTHER_OPTION = "Other"


class ResourceLevel(str, Enum):
    """Taxonomy depth a resource is filed at."""
    SESSION = "Session"
    SUBJECT = "Subject"
    DOMAIN = "Domain"
    TERM = "Term"
    OTHER = OTHER_OPTION


class ResourceType(str, Enum):
    """
    Kind of learning material.

    ``OTHER`` is paired with ``resource_type_custom`` on the resource.
    """
    LECTURE_SLIDES = "Lecture Slides"
    READING_MATERIAL = "Reading Material"
    ASSIGNMENT = "Assignment"
    COURSE_MATERIAL = "Course Material"
    REFERENCE_BOOK = "Reference Book"
    VIDEO_TUTORIAL = "Video Tutorial"
    PRACTICE_PROBLEMS = "Practice Problems"
    CASE_STUDY = "Case Study"
    COURSE_OUTLINE = "Course Outline"
    OTHER = OTHER_OPTION


class ResourceStatus(str, Enum):
    """Lifecycle state; ARCHIVED is the soft-deleted state."""
    PUBLISHED = "Published"
    ARCHIVED = "Archived"


MAX_FILE_SLOTS = 5
MAX_LINKS = 50


# ============================================================================
# FILES AND LINKS
# ============================================================================

class FileRef(BaseModel):
    """A hosted file occupying one of the five file slots of a resource."""
    name: str
    url: str


class LinkEntry(BaseModel):
    """One entry of the free-form link list; partial entries are dropped on encode."""
    name: str = ""
    url: str = ""


class FileUpload(BaseModel):
    """
    A file payload to be uploaded into the resource's storage container.

    ``data`` is the base64 encoded content. ``declared_size`` is informational
    only; the upload protocol is chosen from the decoded payload length.
    """
    name: str
    mime_type: str = Field(default="application/octet-stream")
    data: str = Field(..., description="Base64 encoded file content")
    declared_size: Optional[int] = Field(default=None, description="Size reported by the client")

    def decode(self) -> bytes:
        try:
            return base64.b64decode(self.data, validate=True)
        except (binascii.Error, ValueError) as e:
            raise ResourceValidationError(f"File '{self.name}' is not valid base64: {e}") from e


ResourceFile = Union[FileUpload, FileRef]


# ============================================================================
# RESOURCE
# ============================================================================

class Resource(BaseModel):
    """
    A learning resource as stored in one row of the resources tab.

    Values read back from the tab are kept as strings so rows written by
    older clients still load.
    """
    id: str
    publish: str = ""
    posted_by: str = ""
    created_at: str = ""
    edited_at: str = ""
    edited_by: str = ""
    start_date_time: str = ""
    end_date_time: str = ""
    target_batch: str = ""
    show_other_batches: str = ""
    title: str = ""
    description: str = ""
    term: str = ""
    domain: str = ""
    subject: str = ""
    session_name: str = ""
    level: str = ""
    resource_type: str = ""
    resource_type_custom: str = ""
    priority: str = ""
    learning_objectives: str = ""
    prerequisites: str = ""
    files: List[FileRef] = Field(default_factory=list)
    urls: List[LinkEntry] = Field(default_factory=list)
    drive_folder_link: str = ""
    file_count: int = 0
    status: str = ResourceStatus.PUBLISHED.value
    notes: str = ""


class ResourceCreateRequest(BaseModel):
    """Payload for creating a resource. Optional fields fall back to defaults."""
    batch: str = Field(..., description="Batch the storage path is rooted at")
    title: str
    level: ResourceLevel
    resource_type: ResourceType
    posted_by: str = ""
    publish: Optional[str] = None
    start_date_time: Optional[str] = None
    end_date_time: Optional[str] = None
    target_batch: Optional[str] = None
    show_other_batches: Optional[str] = None
    description: Optional[str] = None
    term: Optional[str] = None
    domain: Optional[str] = None
    subject: Optional[str] = None
    session_name: Optional[str] = None
    resource_type_custom: Optional[str] = None
    priority: Optional[str] = None
    learning_objectives: Optional[str] = None
    prerequisites: Optional[str] = None
    files: List[ResourceFile] = Field(default_factory=list)
    urls: List[LinkEntry] = Field(default_factory=list)
    notes: Optional[str] = None


class ResourceUpdateRequest(BaseModel):
    """
    Payload for updating a resource.

    Only fields present in the request (and not null) replace stored values.
    An explicit empty string clears a field. ``files`` present replaces all
    five slots; ``batch`` is used only to locate the storage container.
    """
    edited_by: Optional[str] = None
    batch: Optional[str] = None
    publish: Optional[str] = None
    start_date_time: Optional[str] = None
    end_date_time: Optional[str] = None
    target_batch: Optional[str] = None
    show_other_batches: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    term: Optional[str] = None
    domain: Optional[str] = None
    subject: Optional[str] = None
    session_name: Optional[str] = None
    level: Optional[ResourceLevel] = None
    resource_type: Optional[ResourceType] = None
    resource_type_custom: Optional[str] = None
    priority: Optional[str] = None
    learning_objectives: Optional[str] = None
    prerequisites: Optional[str] = None
    files: Optional[List[ResourceFile]] = None
    urls: Optional[List[LinkEntry]] = None
    status: Optional[ResourceStatus] = None
    notes: Optional[str] = None

    def provided_fields(self) -> Dict[str, Any]:
        """Fields the caller actually sent, excluding explicit nulls."""
        data = self.model_dump(mode="json", exclude_unset=True)
        return {key: value for key, value in data.items() if value is not None}


class ResourceFilters(BaseModel):
    """AND-combined exact-match filters for listing. Empty values are ignored."""
    batch: Optional[str] = None
    term: Optional[str] = None
    domain: Optional[str] = None
    subject: Optional[str] = None
    level: Optional[str] = None
    resource_type: Optional[str] = None
    status: Optional[str] = None


class ResourceMutationResult(BaseModel):
    id: str
    message: str
    drive_folder_link: str = ""
    resource: Optional[Resource] = None


# ============================================================================
# TAXONOMY
# ============================================================================

class TaxonomyHierarchy(BaseModel):
    """Parent -> children adjacency keyed by ``batch``, ``batch|term`` and ``batch|term|domain``."""
    batches: Dict[str, List[str]] = Field(default_factory=dict)
    terms: Dict[str, List[str]] = Field(default_factory=dict)
    domains: Dict[str, List[str]] = Field(default_factory=dict)


class TaxonomyIndex(BaseModel):
    batches: List[str] = Field(default_factory=list)
    terms: List[str] = Field(default_factory=list)
    domains: List[str] = Field(default_factory=list)
    subjects: List[str] = Field(default_factory=list)
    sessions: List[str] = Field(default_factory=list)
    resource_types: List[str] = Field(default_factory=list)
    resource_levels: List[str] = Field(default_factory=list)
    hierarchy: TaxonomyHierarchy = Field(default_factory=TaxonomyHierarchy)


# ============================================================================
# SERVICE ENVELOPE
# ============================================================================

class ServiceResult(BaseModel):
    """
    Uniform ``{success, data | error}`` envelope returned by every public
    resource operation.
    """
    success: bool
    data: Optional[Any] = None
    error: Optional[str] = None
    error_kind: Optional[str] = None

    @classmethod
    def ok(cls, data: Any = None) -> "ServiceResult":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: str, kind: str = "Error") -> "ServiceResult":
        return cls(success=False, error=error, error_kind=kind)
