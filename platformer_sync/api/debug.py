"""
Debug API routes for Platformer Sync.
All endpoints require debug_mode to be enabled.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel

from platformer_sync.api.deps import (
    get_broadcast_engine,
    get_world,
    require_debug_mode,
)
from platformer_sync.broadcast.engine import BroadcastEngine
from platformer_sync.world.state import World

router = APIRouter(dependencies=[Depends(require_debug_mode)])


# Response schemas
class ConnectionResponse(BaseModel):
    """Info about a connected client."""

    player_id: str
    connection_id: UUID


class ConnectionsResponse(BaseModel):
    """Response schema for connected clients list."""

    connections: list[ConnectionResponse]


class BroadcastStatsResponse(BaseModel):
    """One recorded broadcast."""

    sequence: int
    trigger: str
    duration_ms: float
    recipients: int
    failures: int


class BroadcastStatusResponse(BaseModel):
    """Response schema for broadcast engine status."""

    broadcast_count: int
    is_running: bool
    is_paused: bool
    interval_ms: int
    failed_sends: int
    recent: list[BroadcastStatsResponse]


# Routes
@router.get("/connections", response_model=ConnectionsResponse)
async def list_connections(
    world: Annotated[World, Depends(get_world)],
) -> ConnectionsResponse:
    """
    List registered connections.
    """
    connections = await world.connections()
    return ConnectionsResponse(
        connections=[
            ConnectionResponse(player_id=info.player_id, connection_id=info.connection_id)
            for info in connections
        ]
    )


@router.get("/broadcast/status", response_model=BroadcastStatusResponse)
async def broadcast_status(
    engine: Annotated[BroadcastEngine, Depends(get_broadcast_engine)],
) -> BroadcastStatusResponse:
    """
    Get broadcast engine status and recent broadcasts.
    """
    return BroadcastStatusResponse(
        broadcast_count=engine.broadcast_count,
        is_running=engine.is_running,
        is_paused=engine.is_paused,
        interval_ms=engine.interval_ms,
        failed_sends=engine.failed_sends,
        recent=[
            BroadcastStatsResponse(
                sequence=s.sequence,
                trigger=s.trigger,
                duration_ms=s.duration_ms,
                recipients=s.recipients,
                failures=s.failures,
            )
            for s in engine.get_recent_stats()[-10:]
        ],
    )


@router.post("/broadcast/pause")
async def pause_broadcast(
    engine: Annotated[BroadcastEngine, Depends(get_broadcast_engine)],
) -> dict:
    """
    Pause the broadcast timer.
    Updates from clients are still broadcast.
    """
    engine.pause()
    return {"status": "paused", "broadcast_count": engine.broadcast_count}


@router.post("/broadcast/resume")
async def resume_broadcast(
    engine: Annotated[BroadcastEngine, Depends(get_broadcast_engine)],
) -> dict:
    """
    Resume the broadcast timer.
    """
    engine.resume()
    return {"status": "running", "broadcast_count": engine.broadcast_count}


@router.post("/broadcast/step")
async def step_broadcast(
    engine: Annotated[BroadcastEngine, Depends(get_broadcast_engine)],
) -> dict:
    """
    Send a single timer broadcast.
    Only works when the timer is paused.
    """
    if not engine.is_paused:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Broadcast timer must be paused to step",
        )

    await engine.step()
    return {"status": "stepped", "broadcast_count": engine.broadcast_count}
