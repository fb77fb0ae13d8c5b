"""Competition data model."""

from datetime import date, datetime, timedelta
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field

from .. import config


class CompetitionStatus(str, Enum):
    """Lifecycle states of a competition."""

    DRAFT = "draft"
    ACTIVE = "active"
    ARCHIVED = "archived"


# Forward-only status transitions
ALLOWED_TRANSITIONS = {
    CompetitionStatus.DRAFT: {CompetitionStatus.ACTIVE, CompetitionStatus.ARCHIVED},
    CompetitionStatus.ACTIVE: {CompetitionStatus.ARCHIVED},
    CompetitionStatus.ARCHIVED: set(),
}


def generate_weigh_in_dates(start_date: date, weeks: int = config.COMPETITION_WEEKS) -> list[date]:
    """Generate one weigh-in date per week, starting on the start date."""
    return [start_date + timedelta(weeks=i) for i in range(weeks)]


def compute_end_date(start_date: date, weeks: int = config.COMPETITION_WEEKS) -> date:
    """End date of a competition starting on start_date."""
    return start_date + timedelta(weeks=weeks)


class Competition(BaseModel):
    """Represents one year's competition (competitions/{year})."""

    year: int = Field(..., gt=0)
    start_date: date = Field(..., alias="startDate")
    end_date: date = Field(..., alias="endDate")
    status: CompetitionStatus = CompetitionStatus.DRAFT
    weigh_in_dates: list[date] = Field(default_factory=list, alias="weighInDates")
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")
    created_by: str = Field(default="", alias="createdBy")
    updated_at: Optional[datetime] = Field(default=None, alias="updatedAt")

    class Config:
        """Pydantic configuration."""

        populate_by_name = True

    def current_week(self, today: Optional[date] = None) -> int:
        """Get the competition week (1-12) that today falls in."""
        today = today or date.today()
        diff_weeks = (today - self.start_date).days // 7
        return max(1, min(config.COMPETITION_WEEKS, diff_weeks + 1))

    def next_weigh_in_date(self, today: Optional[date] = None) -> date:
        """Date of the weigh-in following the current week."""
        return self.start_date + timedelta(weeks=self.current_week(today))

    def is_active(self, today: Optional[date] = None) -> bool:
        """Check if the competition is active and today is within its dates."""
        today = today or date.today()
        return (
            self.status == CompetitionStatus.ACTIVE and
            self.start_date <= today <= self.end_date
        )

    def can_transition_to(self, status: CompetitionStatus) -> bool:
        """Check if moving to the given status is allowed."""
        return status == self.status or status in ALLOWED_TRANSITIONS[self.status]
