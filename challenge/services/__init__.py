"""Business logic for the weight loss challenge."""

from .competition_service import CompetitionService
from .weigh_in_service import WeighInService
from .stats_service import StatsService
from .user_service import UserService
from .test_data_service import TestDataService

__all__ = [
    "CompetitionService",
    "WeighInService",
    "StatsService",
    "UserService",
    "TestDataService",
]
