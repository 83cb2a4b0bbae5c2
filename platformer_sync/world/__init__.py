"""
Shared world model for Platformer Sync.
"""

from platformer_sync.world.models import Coin, Platform, Player, PlayerColor, WorldSnapshot
from platformer_sync.world.state import World

__all__ = ["Coin", "Platform", "Player", "PlayerColor", "World", "WorldSnapshot"]
