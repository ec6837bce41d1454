from fastapi import APIRouter

# Aggregate all v1 routers here
from .routers import resources, system, taxonomy

api_router = APIRouter()
api_router.include_router(resources.router)
api_router.include_router(taxonomy.router)
api_router.include_router(system.router)

__all__ = ["api_router"]
