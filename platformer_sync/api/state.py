"""
Plain HTTP views of the world state.
"""

from typing import Annotated, Any

from fastapi import APIRouter, Depends

from platformer_sync.api.deps import get_broadcast_engine, get_world
from platformer_sync.broadcast.engine import BroadcastEngine
from platformer_sync.world.state import World

router = APIRouter()


@router.get("/state")
async def get_state(
    world: Annotated[World, Depends(get_world)],
) -> dict[str, Any]:
    """
    Current world snapshot, in the same shape as a broadcast message.
    """
    snapshot = await world.snapshot()
    return snapshot.to_dict()


@router.get("/health")
async def health_check(
    world: Annotated[World, Depends(get_world)],
    engine: Annotated[BroadcastEngine, Depends(get_broadcast_engine)],
) -> dict[str, Any]:
    """Health check endpoint."""
    return {
        "status": "healthy",
        "broadcast_running": engine.is_running,
        "broadcast_count": engine.broadcast_count,
        "players": world.player_count,
    }
