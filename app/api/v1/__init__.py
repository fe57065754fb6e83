"""
API v1 Router
"""

from fastapi import APIRouter

from app.api.v1 import images

router = APIRouter()

# Include all endpoint routers
router.include_router(images.router)

__all__ = ["router"]
