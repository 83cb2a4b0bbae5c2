"""
Connection registry for Platformer Sync.
Maps client identifiers to their live WebSocket.
"""

import logging
from dataclasses import dataclass, field
from uuid import UUID, uuid4

from fastapi import WebSocket

logger = logging.getLogger(__name__)


@dataclass
class ConnectionInfo:
    """Information about a connected client."""

    player_id: str
    websocket: WebSocket
    connection_id: UUID = field(default_factory=uuid4)


class ConnectionRegistry:
    """
    Client id -> ConnectionInfo.

    Not synchronized on its own: the World calls it only while holding the
    world lock.
    """

    def __init__(self) -> None:
        self._connections: dict[str, ConnectionInfo] = {}

    def register(self, info: ConnectionInfo) -> ConnectionInfo | None:
        """
        Register a connection.
        Returns the entry it replaced, if the id was already registered.
        """
        previous = self._connections.get(info.player_id)
        self._connections[info.player_id] = info
        return previous

    def unregister(
        self, player_id: str, connection_id: UUID | None = None
    ) -> ConnectionInfo | None:
        """
        Remove a connection and return it.
        If connection_id is provided, only remove if it matches the current
        connection, so a stale handler cannot remove a newer one.
        """
        info = self._connections.get(player_id)
        if info is None:
            return None

        if connection_id is not None and info.connection_id != connection_id:
            logger.debug(
                f"Ignoring stale unregister for {player_id}: "
                f"expected {connection_id}, current is {info.connection_id}"
            )
            return None

        del self._connections[player_id]
        return info

    def get(self, player_id: str) -> ConnectionInfo | None:
        return self._connections.get(player_id)

    def ids(self) -> set[str]:
        return set(self._connections)

    def values(self) -> list[ConnectionInfo]:
        return list(self._connections.values())
