"""
Client message types for Platformer Sync.
"""

from pydantic import BaseModel, ConfigDict, Field


class PlayerUpdate(BaseModel):
    """
    State reported by a client for its own player.

    Missing fields default to zero values. The id field is accepted but
    never used for routing: the connection's own id is authoritative.
    A position of exactly (0, 0) means "no position update".
    """

    model_config = ConfigDict(populate_by_name=True, strict=True, extra="ignore")

    id: str = ""
    x: float = 0.0
    y: float = 0.0
    velocity_y: float = Field(default=0.0, alias="velocityY")
    is_jumping: bool = Field(default=False, alias="isJumping")
    score: int = 0

    @property
    def has_position(self) -> bool:
        return not (self.x == 0 and self.y == 0)


def decode_update(payload: str | bytes) -> PlayerUpdate:
    """
    Parse a raw client frame.
    Raises pydantic.ValidationError for malformed JSON or wrong field types.
    """
    return PlayerUpdate.model_validate_json(payload)
