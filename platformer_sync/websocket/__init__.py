"""
WebSocket handling for Platformer Sync.
"""

from platformer_sync.websocket.protocol import PlayerUpdate, decode_update
from platformer_sync.websocket.registry import ConnectionInfo, ConnectionRegistry

__all__ = ["ConnectionInfo", "ConnectionRegistry", "PlayerUpdate", "decode_update"]
