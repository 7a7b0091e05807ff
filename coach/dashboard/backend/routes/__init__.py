"""API Routes Package

Aggregates the route handlers into a single router that is included in the
main FastAPI application.
"""

from fastapi import APIRouter

from .memory import router as memory_router
from .whatsapp import router as whatsapp_router


# Create main API router
api_router = APIRouter(prefix="/api")

api_router.include_router(memory_router, prefix="/memory", tags=["memory"])
api_router.include_router(whatsapp_router, prefix="/whatsapp", tags=["whatsapp"])

__all__ = ["api_router"]
