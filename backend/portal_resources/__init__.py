# backend/portal_resources/__init__.py
"""Portal Resources - learning material storage and hierarchical upload API."""

__version__ = "1.0.0"
__title__ = "Portal Resources API"
__description__ = "Register course resources against the batch/term/domain/subject taxonomy"
