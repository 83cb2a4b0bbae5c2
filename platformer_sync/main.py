"""
Main FastAPI application for Platformer Sync.
"""

import logging
import random
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, WebSocket
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from platformer_sync.api import api_router, state_router
from platformer_sync.broadcast.engine import BroadcastEngine
from platformer_sync.config import Settings, get_settings
from platformer_sync.websocket.handler import handle_websocket
from platformer_sync.world.state import World

# Configure logging
logging.basicConfig(
    level=get_settings().log_level.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.
    Starts and stops the broadcast timer.
    """
    engine: BroadcastEngine = app.state.broadcast_engine

    logger.info(f"Starting broadcast timer (interval: {engine.interval_ms}ms)...")
    await engine.start()

    logger.info("Platformer Sync started successfully!")

    yield

    # Shutdown
    logger.info("Shutting down...")
    await engine.stop()
    logger.info("Platformer Sync stopped.")


def create_app(settings: Settings | None = None) -> FastAPI:
    """
    Build the application and the single world it serves.
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="Platformer Sync",
        description="Real-time shared-state server for a multiplayer platformer",
        version="0.1.0",
        lifespan=lifespan,
    )

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    world = World(
        width=settings.screen_width,
        height=settings.screen_height,
        rng=random.Random(settings.world_seed),
    )
    app.state.settings = settings
    app.state.world = world
    app.state.broadcast_engine = BroadcastEngine(
        world=world,
        interval_ms=settings.broadcast_interval_ms,
        send_timeout=settings.send_timeout_seconds,
    )

    app.include_router(state_router)
    app.include_router(api_router, prefix="/api")

    @app.websocket("/ws")
    async def websocket_endpoint(websocket: WebSocket):
        """
        Main WebSocket endpoint.
        Requires the id query parameter.
        """
        await handle_websocket(
            websocket,
            world=websocket.app.state.world,
            engine=websocket.app.state.broadcast_engine,
        )

    # Static files last so the routes above take precedence
    static_dir = Path(settings.static_dir)
    if static_dir.is_dir():
        app.mount("/", StaticFiles(directory=static_dir, html=True), name="static")
    else:
        logger.warning(f"Static directory {static_dir} not found, not serving files")

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "platformer_sync.main:app",
        host=settings.host,
        port=settings.port,
    )
