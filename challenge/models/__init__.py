"""Data models for the weight loss challenge application."""

from challenge.models.competition import Competition, CompetitionStatus
from challenge.models.participant import Participant
from challenge.models.stats import (
    UserStats,
    PublicStats,
    RankedUserStats,
    RankedPublicStats,
    ProgressPoint,
    SeriesPoint,
    ParticipantSeries,
    CompetitionSummary,
)
from challenge.models.user import User, UserRole, Session
from challenge.models.weigh_in import WeighIn, WeighInSubmission

__all__ = [
    "User", "UserRole", "Session",
    "Competition", "CompetitionStatus",
    "Participant",
    "WeighIn", "WeighInSubmission",
    "UserStats", "PublicStats", "RankedUserStats", "RankedPublicStats",
    "ProgressPoint", "SeriesPoint", "ParticipantSeries", "CompetitionSummary",
]
