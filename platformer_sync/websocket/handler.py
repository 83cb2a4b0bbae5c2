"""
Per-connection lifecycle and ingest loop for Platformer Sync.
"""

import asyncio
import logging

from fastapi import WebSocket, WebSocketDisconnect, status
from pydantic import ValidationError
from starlette.websockets import WebSocketState

from platformer_sync.broadcast.engine import BroadcastEngine
from platformer_sync.websocket.protocol import decode_update
from platformer_sync.websocket.registry import ConnectionInfo
from platformer_sync.world.state import World

logger = logging.getLogger(__name__)


class ConnectionHandler:
    """
    Drives one client through Connecting -> Active -> Closed.
    """

    def __init__(
        self,
        world: World,
        engine: BroadcastEngine,
        info: ConnectionInfo,
    ) -> None:
        self.world = world
        self.engine = engine
        self.info = info

    async def run(self) -> None:
        """Register the client, ingest until it goes away, then clean up."""
        previous = await self.world.join(self.info)
        try:
            if previous is not None:
                await _close_quietly(previous.websocket, code=status.WS_1000_NORMAL_CLOSURE)

            logger.info(f"Player connected: {self.info.player_id}")
            await self.engine.broadcast(trigger="join")
            await self.ingest()
        finally:
            await self.close()

    async def ingest(self) -> None:
        """
        Apply client updates until the transport closes.

        Expected (non-fatal) errors:
        - WebSocketDisconnect: client disconnected
        - asyncio.TimeoutError: transport timeout
        - ConnectionResetError, BrokenPipeError: connection lost

        Malformed messages are logged and skipped.
        """
        try:
            while True:
                payload = await self._receive()
                try:
                    update = decode_update(payload)
                except ValidationError as e:
                    logger.warning(f"Invalid message from {self.info.player_id}: {e}")
                    continue

                applied = await self.world.apply_update(
                    self.info.player_id, update, self.info.connection_id
                )
                if applied:
                    await self.engine.broadcast(trigger="update")
        except WebSocketDisconnect as e:
            logger.info(f"Connection closed for {self.info.player_id}: code {e.code}")
        except asyncio.TimeoutError:
            logger.warning(f"Timeout for player {self.info.player_id}")
        except (ConnectionResetError, BrokenPipeError, OSError) as e:
            logger.info(f"Connection lost for player {self.info.player_id}: {e}")

    async def _receive(self) -> str | bytes:
        """Next text or binary frame. Raises WebSocketDisconnect on close."""
        message = await self.info.websocket.receive()
        if message["type"] == "websocket.disconnect":
            raise WebSocketDisconnect(message.get("code", status.WS_1000_NORMAL_CLOSURE))
        if message.get("text") is not None:
            return message["text"]
        return message.get("bytes") or b""

    async def close(self) -> None:
        """Remove the player, release the socket and tell everyone else."""
        removed = await self.world.leave(self.info.player_id, self.info.connection_id)
        await _close_quietly(self.info.websocket)
        if removed is not None:
            logger.info(f"Player disconnected: {self.info.player_id}")
        await self.engine.broadcast(trigger="leave")


async def handle_websocket(
    websocket: WebSocket, world: World, engine: BroadcastEngine
) -> None:
    """
    Entry point for a new WebSocket.
    The client id comes from the `id` query parameter; without one the
    connection is closed right after the handshake.
    """
    await websocket.accept()

    player_id = websocket.query_params.get("id", "")
    if not player_id:
        logger.warning("Missing player ID, closing connection")
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    handler = ConnectionHandler(
        world=world,
        engine=engine,
        info=ConnectionInfo(player_id=player_id, websocket=websocket),
    )
    await handler.run()


async def _close_quietly(websocket: WebSocket, code: int = status.WS_1000_NORMAL_CLOSURE) -> None:
    """Close a socket that may already be closed on either side."""
    if (
        websocket.application_state != WebSocketState.CONNECTED
        or websocket.client_state != WebSocketState.CONNECTED
    ):
        return
    try:
        await websocket.close(code=code)
    except (RuntimeError, OSError) as e:
        # Old connection might already be closed
        logger.debug(f"Ignoring close failure: {e}")
