"""
Shared FastAPI dependencies.
The world and broadcast engine are created with the app and kept on app.state.
"""

from fastapi import HTTPException, Request, status

from platformer_sync.broadcast.engine import BroadcastEngine
from platformer_sync.config import Settings
from platformer_sync.world.state import World


def get_world(request: Request) -> World:
    return request.app.state.world


def get_broadcast_engine(request: Request) -> BroadcastEngine:
    return request.app.state.broadcast_engine


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def require_debug_mode(request: Request) -> None:
    """Hide debug routes unless debug_mode is enabled."""
    if not get_app_settings(request).debug_mode:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Not Found",
        )
