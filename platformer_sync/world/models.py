"""
Data types for the shared platformer world.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from platformer_sync.websocket.registry import ConnectionInfo


class PlayerColor(str, Enum):
    """Display colors assigned to players on connect."""

    RED = "red"
    BLUE = "blue"
    GREEN = "green"
    PURPLE = "purple"
    ORANGE = "orange"


@dataclass
class Player:
    """
    A connected client's character.
    Every field except id and color is owned by the client and overwritten
    by its updates.
    """

    id: str
    x: float
    y: float
    velocity_y: float = 0.0
    is_jumping: bool = False
    score: int = 0
    color: PlayerColor = PlayerColor.RED

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "x": self.x,
            "y": self.y,
            "velocityY": self.velocity_y,
            "isJumping": self.is_jumping,
            "score": self.score,
            "color": self.color.value,
        }


@dataclass
class Coin:
    """A fixed-position collectible."""

    id: str
    x: float
    y: float
    active: bool = True

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "x": self.x, "y": self.y, "active": self.active}


@dataclass(frozen=True)
class Platform:
    """Static axis-aligned rectangle."""

    x: float
    y: float
    width: float
    height: float

    def is_zero(self) -> bool:
        """True when every field is zero, which marks a corrupted entry."""
        return self.x == 0 and self.y == 0 and self.width == 0 and self.height == 0

    def to_dict(self) -> dict[str, float]:
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}


@dataclass(frozen=True)
class WorldSnapshot:
    """
    Point-in-time copy of the world.

    recipients holds the connections registered when the snapshot was taken.
    It is not part of the wire format.
    """

    players: dict[str, Player]
    coins: dict[str, Coin]
    platforms: tuple[Platform, ...]
    recipients: tuple[ConnectionInfo, ...] = field(default=())

    def to_dict(self) -> dict[str, Any]:
        """Build the three-field message sent to clients."""
        return {
            "players": {pid: p.to_dict() for pid, p in self.players.items()},
            "coins": {cid: c.to_dict() for cid, c in self.coins.items()},
            "platforms": [p.to_dict() for p in self.platforms],
        }
