# backend/portal_resources/api/v1/models.py
from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class HealthStatus(BaseModel):
    status: str
    timestamp: datetime
    version: str
    backend: str
    spreadsheet_available: bool
    error: Optional[str] = None
