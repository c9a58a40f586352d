"""
Reaction models for Daybook.

Rows exchanged with the emoji reactions backend.
"""

from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class ReactionRow(BaseModel):
    """
    Aggregated count of one emoji on one piece of content.
    """

    model_config = ConfigDict(populate_by_name=True)

    content_id: Optional[str] = Field(
        default=None,
        description="Content the row belongs to, only set by batch reads"
    )

    emoji: str = Field(..., description="The emoji character")

    count: int = Field(default=0, description="Number of active reactions")

    is_active: bool = Field(
        default=False,
        alias="isActive",
        description="Whether the viewer identified by the user hash reacted"
    )


class ToggleResult(BaseModel):
    """
    Result row of toggling one emoji reaction.
    """

    emoji: str
    new_count: int
    is_active: bool
