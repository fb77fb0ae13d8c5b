"""Weigh-in data models."""

from datetime import date as Date, datetime
from typing import Optional
from pydantic import BaseModel, Field, field_validator

from .. import config


class WeighIn(BaseModel):
    """A stored weekly weigh-in (.../weigh-ins/{weekNumber})."""

    week_number: int = Field(..., ge=1, le=config.COMPETITION_WEEKS, alias="weekNumber")
    weight: float = Field(..., gt=0)
    date: Optional[Date] = None
    timestamp: Optional[datetime] = None
    notes: str = ""

    class Config:
        """Pydantic configuration."""

        populate_by_name = True


class WeighInSubmission(BaseModel):
    """
    A weigh-in as submitted by a user.

    Validation rules:
    - week number within the competition (1-12)
    - weight positive and no larger than WEIGHT_MAX
    - weight kept to two decimal places
    """

    week_number: int = Field(..., ge=1, le=config.COMPETITION_WEEKS, alias="weekNumber")
    weight: float = Field(..., gt=0, le=config.WEIGHT_MAX)
    notes: Optional[str] = Field(default=None, max_length=500)

    class Config:
        """Pydantic configuration."""

        populate_by_name = True

    @field_validator("weight")
    @classmethod
    def round_weight(cls, value: float) -> float:
        return round(value, 2)
