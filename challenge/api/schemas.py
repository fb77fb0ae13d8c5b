"""Request bodies of the HTTP API."""

from datetime import date
from typing import Optional, List
from pydantic import BaseModel, Field

from ..models import CompetitionStatus, UserRole


class _Body(BaseModel):
    class Config:
        """Pydantic configuration."""

        populate_by_name = True


class RegisterRequest(_Body):
    email: str
    password: str
    display_name: str = Field(..., alias="displayName")


class LoginRequest(_Body):
    email: str
    password: str
    remember_me: bool = Field(default=False, alias="rememberMe")


class ProfileUpdate(_Body):
    display_name: str = Field(..., alias="displayName")


class RoleUpdate(_Body):
    role: UserRole


class CompetitionCreate(_Body):
    year: int
    start_date: date = Field(..., alias="startDate")
    status: CompetitionStatus = CompetitionStatus.DRAFT
    weigh_in_dates: Optional[List[date]] = Field(default=None, alias="weighInDates")


class CompetitionUpdate(_Body):
    start_date: Optional[date] = Field(default=None, alias="startDate")
    status: Optional[CompetitionStatus] = None
    weigh_in_dates: Optional[List[date]] = Field(default=None, alias="weighInDates")


class JoinRequest(_Body):
    start_weight: float = Field(..., alias="startWeight")


class ActiveUpdate(_Body):
    is_active: bool = Field(..., alias="isActive")


# Range checks happen in the service so they answer 400 like every other
# rejected input
class WeighInRequest(_Body):
    weight: float
    notes: Optional[str] = None


class GenerateRequest(_Body):
    existing_users: bool = Field(default=False, alias="existingUsers")
    seed: Optional[int] = None
