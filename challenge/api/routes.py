"""Competition, weigh-in and statistics routes."""

import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..errors import NotFoundError
from ..models import Session
from ..services import CompetitionService, StatsService, WeighInService
from ..services.stats import SORT_BY_PERCENTAGE
from .dependencies import (
    get_competition_service,
    get_current_session,
    get_stats_service,
    get_weigh_in_service,
    require_admin_session,
)
from .schemas import (
    ActiveUpdate,
    CompetitionCreate,
    CompetitionUpdate,
    JoinRequest,
    WeighInRequest,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/competitions", tags=["competitions"])


def _dump(value):
    """Serialize models (or lists of models) with camelCase keys."""
    if isinstance(value, BaseModel):
        return value.model_dump(by_alias=True, mode="json")
    if isinstance(value, list):
        return [_dump(item) for item in value]
    if isinstance(value, dict):
        return {key: _dump(item) for key, item in value.items()}
    return value


# ============================================================================
# COMPETITIONS
# ============================================================================

@router.get("")
async def list_competitions(
    session: Session = Depends(get_current_session),
    competitions: CompetitionService = Depends(get_competition_service),
) -> JSONResponse:
    """List all competitions, newest first."""
    return JSONResponse(content=_dump(competitions.list_competitions()))


@router.get("/active")
async def get_active_competition(
    fallback: bool = Query(True, description="Return the newest competition when none is running"),
    session: Session = Depends(get_current_session),
    competitions: CompetitionService = Depends(get_competition_service),
) -> JSONResponse:
    """Get the competition running today."""
    competition = competitions.find_active(fallback=fallback)
    if competition is None:
        raise NotFoundError("No active competition")
    return JSONResponse(content=_dump(competition))


@router.post("", status_code=201)
async def create_competition(
    body: CompetitionCreate,
    session: Session = Depends(require_admin_session),
    competitions: CompetitionService = Depends(get_competition_service),
) -> JSONResponse:
    """Create a competition. Weigh-in dates default to weekly from the start date."""
    competition = competitions.create_competition(
        session,
        body.year,
        body.start_date,
        status=body.status,
        weigh_in_dates=body.weigh_in_dates,
    )
    return JSONResponse(status_code=201, content=_dump(competition))


@router.get("/{year}")
async def get_competition(
    year: int,
    session: Session = Depends(get_current_session),
    competitions: CompetitionService = Depends(get_competition_service),
) -> JSONResponse:
    return JSONResponse(content=_dump(competitions.get_competition(year)))


@router.patch("/{year}")
async def update_competition(
    year: int,
    body: CompetitionUpdate,
    session: Session = Depends(require_admin_session),
    competitions: CompetitionService = Depends(get_competition_service),
) -> JSONResponse:
    """Update dates or status. Status only moves forward."""
    competition = competitions.update_competition(
        session,
        year,
        start_date=body.start_date,
        status=body.status,
        weigh_in_dates=body.weigh_in_dates,
    )
    return JSONResponse(content=_dump(competition))


@router.post("/{year}/archive")
async def archive_competition(
    year: int,
    session: Session = Depends(require_admin_session),
    competitions: CompetitionService = Depends(get_competition_service),
) -> JSONResponse:
    return JSONResponse(content=_dump(competitions.archive_competition(session, year)))


@router.get("/{year}/status")
async def get_weigh_in_status(
    year: int,
    today: Optional[date] = Query(None, description="Reference date (defaults to today)"),
    session: Session = Depends(get_current_session),
    weigh_ins: WeighInService = Depends(get_weigh_in_service),
) -> JSONResponse:
    """Current week, next weigh-in date and whether the caller already weighed in."""
    return JSONResponse(content=weigh_ins.get_weigh_in_status(session, year, today))


# ============================================================================
# PARTICIPANTS
# ============================================================================

@router.post("/{year}/participants", status_code=201)
async def join_competition(
    year: int,
    body: JoinRequest,
    session: Session = Depends(get_current_session),
    weigh_ins: WeighInService = Depends(get_weigh_in_service),
) -> JSONResponse:
    """Join a competition with a start weight."""
    participant = weigh_ins.join_competition(session, year, body.start_weight)
    return JSONResponse(status_code=201, content=_dump(participant))


@router.get("/{year}/participants")
async def list_participants(
    year: int,
    session: Session = Depends(require_admin_session),
    weigh_ins: WeighInService = Depends(get_weigh_in_service),
) -> JSONResponse:
    return JSONResponse(content=_dump(weigh_ins.list_participants(session, year)))


@router.put("/{year}/participants/{user_id}/active")
async def set_participant_active(
    year: int,
    user_id: str,
    body: ActiveUpdate,
    session: Session = Depends(require_admin_session),
    weigh_ins: WeighInService = Depends(get_weigh_in_service),
) -> JSONResponse:
    """Include or exclude a participant from the leaderboard."""
    participant = weigh_ins.set_participant_active(session, year, user_id, body.is_active)
    return JSONResponse(content=_dump(participant))


# ============================================================================
# WEIGH-INS
# ============================================================================

@router.get("/{year}/weigh-ins")
async def list_my_weigh_ins(
    year: int,
    session: Session = Depends(get_current_session),
    weigh_ins: WeighInService = Depends(get_weigh_in_service),
) -> JSONResponse:
    return JSONResponse(content=_dump(weigh_ins.get_weigh_ins(session, year, session.uid)))


@router.get("/{year}/weigh-ins/{week}")
async def get_my_weigh_in(
    year: int,
    week: int,
    session: Session = Depends(get_current_session),
    weigh_ins: WeighInService = Depends(get_weigh_in_service),
) -> JSONResponse:
    return JSONResponse(content=_dump(weigh_ins.get_weigh_in(session, year, session.uid, week)))


@router.put("/{year}/weigh-ins/{week}")
async def submit_my_weigh_in(
    year: int,
    week: int,
    body: WeighInRequest,
    session: Session = Depends(get_current_session),
    weigh_ins: WeighInService = Depends(get_weigh_in_service),
) -> JSONResponse:
    """Submit or replace the caller's weigh-in for a week."""
    weigh_in = weigh_ins.submit_weigh_in(session, year, session.uid, week, body.weight, body.notes)
    return JSONResponse(content=_dump(weigh_in))


@router.get("/{year}/participants/{user_id}/weigh-ins")
async def list_weigh_ins(
    year: int,
    user_id: str,
    session: Session = Depends(get_current_session),
    weigh_ins: WeighInService = Depends(get_weigh_in_service),
) -> JSONResponse:
    return JSONResponse(content=_dump(weigh_ins.get_weigh_ins(session, year, user_id)))


@router.get("/{year}/participants/{user_id}/weigh-ins/{week}")
async def get_weigh_in(
    year: int,
    user_id: str,
    week: int,
    session: Session = Depends(get_current_session),
    weigh_ins: WeighInService = Depends(get_weigh_in_service),
) -> JSONResponse:
    return JSONResponse(content=_dump(weigh_ins.get_weigh_in(session, year, user_id, week)))


@router.put("/{year}/participants/{user_id}/weigh-ins/{week}")
async def submit_weigh_in(
    year: int,
    user_id: str,
    week: int,
    body: WeighInRequest,
    session: Session = Depends(get_current_session),
    weigh_ins: WeighInService = Depends(get_weigh_in_service),
) -> JSONResponse:
    """Submit a weigh-in for a participant. Admins may correct anyone's."""
    weigh_in = weigh_ins.submit_weigh_in(session, year, user_id, week, body.weight, body.notes)
    return JSONResponse(content=_dump(weigh_in))


# ============================================================================
# STATISTICS
# ============================================================================

@router.get("/{year}/stats")
async def list_user_stats(
    year: int,
    session: Session = Depends(require_admin_session),
    stats: StatsService = Depends(get_stats_service),
) -> JSONResponse:
    """Full statistics of every participant."""
    return JSONResponse(content=_dump(stats.get_all_user_stats(session, year)))


@router.get("/{year}/stats/me")
async def get_my_stats(
    year: int,
    session: Session = Depends(get_current_session),
    stats: StatsService = Depends(get_stats_service),
) -> JSONResponse:
    return JSONResponse(content=_dump(stats.get_user_stats(session, year, session.uid)))


@router.get("/{year}/participants/{user_id}/stats")
async def get_user_stats(
    year: int,
    user_id: str,
    session: Session = Depends(get_current_session),
    stats: StatsService = Depends(get_stats_service),
) -> JSONResponse:
    """Statistics of a participant; only name and loss percentage for other users' records."""
    return JSONResponse(content=_dump(stats.get_user_stats(session, year, user_id)))


@router.get("/{year}/leaderboard")
async def get_leaderboard(
    year: int,
    sort: str = Query(SORT_BY_PERCENTAGE, description="percentage or total"),
    session: Session = Depends(get_current_session),
    stats: StatsService = Depends(get_stats_service),
) -> JSONResponse:
    """Ranked active participants."""
    return JSONResponse(content=_dump(stats.get_leaderboard(session, year, sort)))


@router.get("/{year}/leaderboard/series")
async def get_leaderboard_series(
    year: int,
    session: Session = Depends(get_current_session),
    stats: StatsService = Depends(get_stats_service),
) -> JSONResponse:
    """Loss percentage per week for the leaderboard chart."""
    return JSONResponse(content=_dump(stats.get_leaderboard_series(session, year)))


@router.get("/{year}/progress")
async def get_my_progress(
    year: int,
    session: Session = Depends(get_current_session),
    stats: StatsService = Depends(get_stats_service),
) -> JSONResponse:
    return JSONResponse(content=_dump(stats.get_progress(session, year, session.uid)))


@router.get("/{year}/participants/{user_id}/progress")
async def get_progress(
    year: int,
    user_id: str,
    session: Session = Depends(get_current_session),
    stats: StatsService = Depends(get_stats_service),
) -> JSONResponse:
    return JSONResponse(content=_dump(stats.get_progress(session, year, user_id)))


@router.get("/{year}/summary")
async def get_summary(
    year: int,
    session: Session = Depends(require_admin_session),
    stats: StatsService = Depends(get_stats_service),
) -> JSONResponse:
    """Aggregate statistics for the admin dashboard."""
    return JSONResponse(content=_dump(stats.get_summary(session, year)))
