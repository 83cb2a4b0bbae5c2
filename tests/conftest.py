"""
Pytest fixtures for Platformer Sync tests.
"""

import asyncio
import json
import random
from typing import Any, AsyncGenerator, Callable

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from starlette.websockets import WebSocketState

from platformer_sync.broadcast.engine import BroadcastEngine
from platformer_sync.config import Settings
from platformer_sync.main import create_app
from platformer_sync.world.state import World


class FakeWebSocket:
    """
    Stand-in for a Starlette WebSocket.
    Replays scripted incoming frames, then reports a client disconnect.
    """

    def __init__(
        self,
        incoming: list[str | bytes] | None = None,
        query_params: dict[str, str] | None = None,
        fail_send: bool = False,
        stall_send: bool = False,
        gate: asyncio.Event | None = None,
    ) -> None:
        self.incoming = list(incoming or [])
        self.query_params = query_params or {}
        self.fail_send = fail_send
        self.stall_send = stall_send
        self.gate = gate
        self.sent: list[str] = []
        self.accepted = False
        self.close_code: int | None = None
        self.application_state = WebSocketState.CONNECTING
        self.client_state = WebSocketState.CONNECTED

    async def accept(self) -> None:
        self.accepted = True
        self.application_state = WebSocketState.CONNECTED

    async def receive(self) -> dict[str, Any]:
        if self.gate is not None:
            await self.gate.wait()
        if not self.incoming:
            self.client_state = WebSocketState.DISCONNECTED
            return {"type": "websocket.disconnect", "code": 1000}
        frame = self.incoming.pop(0)
        if isinstance(frame, bytes):
            return {"type": "websocket.receive", "bytes": frame}
        return {"type": "websocket.receive", "text": frame}

    async def send_text(self, data: str) -> None:
        if self.fail_send:
            raise RuntimeError("send failed")
        if self.stall_send:
            await asyncio.Event().wait()
        self.sent.append(data)

    async def close(self, code: int = 1000, reason: str | None = None) -> None:
        self.close_code = code
        self.application_state = WebSocketState.DISCONNECTED

    def messages(self) -> list[dict[str, Any]]:
        """Sent frames, decoded."""
        return [json.loads(m) for m in self.sent]


@pytest.fixture
def make_ws() -> Callable[..., FakeWebSocket]:
    """Factory for connected fake websockets."""

    def factory(*args, **kwargs) -> FakeWebSocket:
        ws = FakeWebSocket(*args, **kwargs)
        ws.application_state = WebSocketState.CONNECTED
        return ws

    return factory


@pytest.fixture
def settings(tmp_path) -> Settings:
    """Test settings: seeded world, debug routes on, timer effectively off."""
    return Settings(
        _env_file=None,
        broadcast_interval_ms=60_000,
        send_timeout_seconds=0.2,
        world_seed=1234,
        debug_mode=True,
        static_dir=str(tmp_path / "static"),
    )


@pytest.fixture
def world(settings: Settings) -> World:
    return World(
        width=settings.screen_width,
        height=settings.screen_height,
        rng=random.Random(settings.world_seed),
    )


@pytest.fixture
def engine(world: World, settings: Settings) -> BroadcastEngine:
    return BroadcastEngine(
        world=world,
        interval_ms=settings.broadcast_interval_ms,
        send_timeout=settings.send_timeout_seconds,
    )


@pytest.fixture
def app(settings: Settings) -> FastAPI:
    return create_app(settings)


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Create an async test client."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client
