"""
Authoritative world state for Platformer Sync.

Players, coins, platforms and the connection registry live behind a single
asyncio.Lock so a snapshot never sees a half-applied update or a registry
entry without its player.
"""

import asyncio
import logging
import random
from dataclasses import replace
from typing import Iterable
from uuid import UUID

from platformer_sync.websocket.protocol import PlayerUpdate
from platformer_sync.websocket.registry import ConnectionInfo, ConnectionRegistry
from platformer_sync.world.models import (
    Coin,
    Platform,
    Player,
    PlayerColor,
    WorldSnapshot,
)

logger = logging.getLogger(__name__)

COIN_COUNT = 10
COIN_START_X = 50.0
COIN_SPACING = 70.0
COIN_JITTER = 50.0

SPAWN_X = 50.0
SPAWN_HEIGHT_OFFSET = 70.0
GROUND_HEIGHT = 50.0


def ground_platform(width: float, height: float) -> Platform:
    """The full-width ground rectangle at the bottom of the world."""
    return Platform(x=0, y=height - GROUND_HEIGHT, width=width, height=GROUND_HEIGHT)


def default_platforms(width: float, height: float) -> list[Platform]:
    return [
        ground_platform(width, height),
        Platform(x=300, y=400, width=200, height=20),
        Platform(x=100, y=300, width=150, height=20),
    ]


def generate_coins(height: float, rng: random.Random) -> dict[str, Coin]:
    """
    Lay out the coins: evenly spaced horizontally, jittered vertically
    within 50px of the world's vertical center.
    """
    coins = {}
    for i in range(COIN_COUNT):
        coin_id = f"coin{i}"
        coins[coin_id] = Coin(
            id=coin_id,
            x=COIN_START_X + i * COIN_SPACING,
            y=height / 2 + rng.random() * 2 * COIN_JITTER - COIN_JITTER,
        )
    return coins


class World:
    """
    The single shared world of a running server.
    All access goes through the methods below, each of which holds the lock.
    """

    def __init__(
        self,
        width: float,
        height: float,
        rng: random.Random | None = None,
        platforms: Iterable[Platform] | None = None,
    ) -> None:
        self.width = width
        self.height = height
        self._rng = rng or random.Random()
        self._lock = asyncio.Lock()

        self._players: dict[str, Player] = {}
        self._coins = generate_coins(height, self._rng)
        self._platforms: list[Platform] = (
            list(platforms) if platforms is not None else default_platforms(width, height)
        )
        self._connections = ConnectionRegistry()

    @property
    def spawn_point(self) -> tuple[float, float]:
        return (SPAWN_X, self.height - SPAWN_HEIGHT_OFFSET)

    def _random_color(self) -> PlayerColor:
        return self._rng.choice(list(PlayerColor))

    async def join(self, info: ConnectionInfo) -> ConnectionInfo | None:
        """
        Create the player for a new connection and register the connection.
        Returns the connection this one displaced, if the id was in use.
        """
        x, y = self.spawn_point
        async with self._lock:
            self._players[info.player_id] = Player(
                id=info.player_id,
                x=x,
                y=y,
                color=self._random_color(),
            )
            previous = self._connections.register(info)

        if previous is not None:
            logger.info(
                f"Player {info.player_id} reconnecting, replacing connection "
                f"{previous.connection_id} with {info.connection_id}"
            )
        return previous

    async def apply_update(
        self,
        player_id: str,
        update: PlayerUpdate,
        connection_id: UUID | None = None,
    ) -> bool:
        """
        Overwrite the client-owned fields of a player.
        A (0, 0) position keeps the stored position. Returns False if the
        player no longer exists or, with connection_id, if that connection
        has been replaced.
        """
        async with self._lock:
            if connection_id is not None:
                current = self._connections.get(player_id)
                if current is None or current.connection_id != connection_id:
                    return False

            player = self._players.get(player_id)
            if player is None:
                return False

            if update.has_position:
                player.x = update.x
                player.y = update.y
            player.velocity_y = update.velocity_y
            player.is_jumping = update.is_jumping
            player.score = update.score
            return True

    async def leave(
        self, player_id: str, connection_id: UUID | None = None
    ) -> ConnectionInfo | None:
        """
        Remove a player and its connection.
        With connection_id, nothing happens unless it is still the current
        connection for player_id.
        """
        async with self._lock:
            return self._remove_locked(player_id, connection_id)

    async def evict(self, infos: Iterable[ConnectionInfo]) -> list[ConnectionInfo]:
        """Remove each of the given connections that is still current."""
        removed = []
        async with self._lock:
            for info in infos:
                if self._remove_locked(info.player_id, info.connection_id) is not None:
                    removed.append(info)
        return removed

    def _remove_locked(
        self, player_id: str, connection_id: UUID | None
    ) -> ConnectionInfo | None:
        info = self._connections.unregister(player_id, connection_id)
        if info is None and connection_id is not None:
            return None
        self._players.pop(player_id, None)
        return info

    async def snapshot(self) -> WorldSnapshot:
        """
        Copy the world for serialization.
        All-zero platforms are reset to the ground rectangle first.
        """
        async with self._lock:
            for i, platform in enumerate(self._platforms):
                if platform.is_zero():
                    logger.warning(f"Platform {i} was all zero, resetting to ground")
                    self._platforms[i] = ground_platform(self.width, self.height)

            return WorldSnapshot(
                players={pid: replace(p) for pid, p in self._players.items()},
                coins={cid: replace(c) for cid, c in self._coins.items()},
                platforms=tuple(self._platforms),
                recipients=tuple(self._connections.values()),
            )

    async def connections(self) -> list[ConnectionInfo]:
        async with self._lock:
            return self._connections.values()

    async def membership(self) -> tuple[set[str], set[str]]:
        """Player ids and registered connection ids, read together."""
        async with self._lock:
            return set(self._players), self._connections.ids()

    @property
    def player_count(self) -> int:
        return len(self._players)
