"""
State broadcasting for Platformer Sync.
"""

from platformer_sync.broadcast.engine import BroadcastEngine, BroadcastStats

__all__ = ["BroadcastEngine", "BroadcastStats"]
