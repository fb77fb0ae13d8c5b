"""Participant data model."""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field


class Participant(BaseModel):
    """A user's enrollment in one competition (competitions/{year}/participants/{userId})."""

    user_id: str = Field(..., alias="userId")
    name: str
    start_weight: float = Field(..., gt=0, alias="startWeight")
    joined_at: Optional[datetime] = Field(default=None, alias="joinedAt")
    is_active: bool = Field(default=True, alias="isActive")
    is_test_user: bool = Field(default=False, alias="isTestUser")

    class Config:
        """Pydantic configuration."""

        populate_by_name = True
