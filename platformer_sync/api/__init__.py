"""
HTTP routes for Platformer Sync.
"""

from fastapi import APIRouter

from platformer_sync.api.debug import router as debug_router
from platformer_sync.api.state import router as state_router

api_router = APIRouter()

api_router.include_router(debug_router, prefix="/debug", tags=["debug"])

__all__ = ["api_router", "state_router"]
