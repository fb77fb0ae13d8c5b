"""Derived statistics models. Computed on read, never persisted."""

from datetime import date
from typing import Optional
from pydantic import BaseModel, Field


class UserStats(BaseModel):
    """Full statistics for one participant."""

    user_id: str = Field(..., alias="userId")
    display_name: str = Field(..., alias="displayName")
    start_weight: float = Field(..., alias="startWeight")
    current_weight: float = Field(..., alias="currentWeight")
    total_weight_loss: float = Field(..., alias="totalWeightLoss")
    total_weight_loss_percentage: float = Field(..., alias="totalWeightLossPercentage")
    average_weekly_loss: float = Field(..., alias="averageWeeklyLoss")
    weeks_participated: int = Field(..., alias="weeksParticipated")
    total_weigh_ins: int = Field(..., alias="totalWeighIns")
    last_weigh_in: Optional[date] = Field(default=None, alias="lastWeighIn")

    class Config:
        """Pydantic configuration."""

        populate_by_name = True


class PublicStats(BaseModel):
    """What a regular user may see about another participant."""

    display_name: str = Field(..., alias="displayName")
    total_weight_loss_percentage: float = Field(..., alias="totalWeightLossPercentage")

    class Config:
        """Pydantic configuration."""

        populate_by_name = True


class RankedUserStats(UserStats):
    """Full statistics with leaderboard position."""

    rank: int


class RankedPublicStats(PublicStats):
    """Public statistics with leaderboard position."""

    rank: int


class ProgressPoint(BaseModel):
    """One point of a participant's progress series."""

    week: int
    weight: float
    weight_loss: float = Field(..., alias="weightLoss")
    weight_loss_percentage: float = Field(..., alias="weightLossPercentage")
    weekly_change: float = Field(..., alias="weeklyChange")

    class Config:
        """Pydantic configuration."""

        populate_by_name = True


class SeriesPoint(BaseModel):
    """Loss percentage of a participant at one week."""

    week: int
    weight_loss_percentage: float = Field(..., alias="weightLossPercentage")

    class Config:
        """Pydantic configuration."""

        populate_by_name = True


class ParticipantSeries(BaseModel):
    """Loss percentage over time for one participant."""

    user_id: str = Field(..., alias="userId")
    name: str
    data: list[SeriesPoint] = []

    class Config:
        """Pydantic configuration."""

        populate_by_name = True


class CompetitionSummary(BaseModel):
    """Aggregate statistics for a competition (admin view)."""

    total_participants: int = Field(..., alias="totalParticipants")
    participants_losing_weight: int = Field(..., alias="participantsLosingWeight")
    total_weigh_ins: int = Field(..., alias="totalWeighIns")
    total_weight_loss: float = Field(..., alias="totalWeightLoss")
    average_weight_loss: float = Field(..., alias="averageWeightLoss")
    average_weight_loss_percentage: float = Field(..., alias="averageWeightLossPercentage")
    average_weeks_participated: float = Field(..., alias="averageWeeksParticipated")
    top_performers: list[UserStats] = Field(default_factory=list, alias="topPerformers")
    most_consistent: list[UserStats] = Field(default_factory=list, alias="mostConsistent")

    class Config:
        """Pydantic configuration."""

        populate_by_name = True
