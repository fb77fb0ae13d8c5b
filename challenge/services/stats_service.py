"""
Stats Service - Role-gated statistics, leaderboards and charts.

Admins see everyone's full statistics. A regular user sees their own full
statistics and, for everybody else, only the display name and loss
percentage.
"""

import logging
from typing import List, Union, Dict, Any

from ..errors import InvalidInputError
from ..models import (
    Participant,
    Session,
    UserStats,
    PublicStats,
    RankedUserStats,
    RankedPublicStats,
    ProgressPoint,
    CompetitionSummary,
)
from ..storage import DatabaseInterface, parse_document
from . import stats
from .access import require_admin, require_self_or_admin
from .weigh_in_service import WeighInService

logger = logging.getLogger(__name__)

StatsView = Union[UserStats, PublicStats]
RankedView = Union[RankedUserStats, RankedPublicStats]


def public_view(user_stats: UserStats) -> PublicStats:
    """Strip everything but name and loss percentage."""
    return PublicStats(
        display_name=user_stats.display_name,
        total_weight_loss_percentage=user_stats.total_weight_loss_percentage,
    )


def visible_stats(session: Session, user_stats: UserStats) -> StatsView:
    """The statistics of a participant as the caller may see them."""
    if session.is_admin or session.uid == user_stats.user_id:
        return user_stats
    return public_view(user_stats)


class StatsService:
    """Statistics over a competition, filtered by the caller's role."""

    def __init__(self, db: DatabaseInterface):
        self.db = db
        self.weigh_ins = WeighInService(db)

    def _participants(self, year: int, active_only: bool = False) -> List[Participant]:
        self.weigh_ins.competitions.get_competition(year)
        participants = [parse_document(Participant, doc) for doc in self.db.get_participants(year)]
        if active_only:
            participants = [p for p in participants if p.is_active]
        return participants

    def _compute(self, year: int, participant: Participant) -> UserStats:
        return stats.compute_user_stats(participant, self.weigh_ins.load_weigh_ins(year, participant.user_id))

    def _compute_all(self, year: int, active_only: bool = True) -> List[UserStats]:
        return [self._compute(year, p) for p in self._participants(year, active_only)]

    # =========================================================================
    # PER-USER
    # =========================================================================

    def get_user_stats(self, session: Session, year: int, user_id: str) -> StatsView:
        """
        Statistics of one participant.

        Returns:
            UserStats for the caller's own record or for an admin,
            PublicStats otherwise
        """
        participant = self.weigh_ins.get_participant(year, user_id)
        return visible_stats(session, self._compute(year, participant))

    def get_progress(self, session: Session, year: int, user_id: str) -> List[ProgressPoint]:
        """Week-by-week weights of one participant (self or admin)."""
        require_self_or_admin(session, user_id)
        participant = self.weigh_ins.get_participant(year, user_id)
        return stats.progress_series(participant, self.weigh_ins.load_weigh_ins(year, user_id))

    # =========================================================================
    # COMPETITION-WIDE
    # =========================================================================

    def get_all_user_stats(self, session: Session, year: int) -> List[UserStats]:
        """Full statistics of every participant, inactive ones included (admin only)."""
        require_admin(session)
        return [s for _, s in stats.rank_stats(self._compute_all(year, active_only=False))]

    def get_leaderboard(
        self,
        session: Session,
        year: int,
        sort_by: str = stats.SORT_BY_PERCENTAGE
    ) -> List[RankedView]:
        """
        Ranked active participants.

        Args:
            session: Caller; decides which entries carry full statistics
            year: Competition year
            sort_by: "percentage" or "total"

        Raises:
            InvalidInputError: Unknown sort key
        """
        if sort_by not in stats.SORT_KEYS:
            raise InvalidInputError(
                f"Unknown sort key: {sort_by}. Valid options: {', '.join(stats.SORT_KEYS)}"
            )

        entries = []
        for rank, user_stats in stats.rank_stats(self._compute_all(year), sort_by):
            view = visible_stats(session, user_stats)
            if isinstance(view, UserStats):
                entries.append(RankedUserStats(rank=rank, **view.model_dump()))
            else:
                entries.append(RankedPublicStats(rank=rank, **view.model_dump()))
        return entries

    def get_leaderboard_series(self, session: Session, year: int) -> Dict[str, Any]:
        """
        Loss percentage over time for every active participant.

        Only percentages are exposed, so the result is the same for every role.

        Returns:
            {"participants": [ParticipantSeries...], "weeks": [{"week": n, userId: pct}...]}
        """
        series = [
            stats.participant_series(p, self.weigh_ins.load_weigh_ins(year, p.user_id))
            for p in self._participants(year, active_only=True)
        ]
        return {
            'participants': series,
            'weeks': stats.weekly_pivot(series),
        }

    def get_summary(self, session: Session, year: int) -> CompetitionSummary:
        """Aggregate statistics of a competition (admin only)."""
        require_admin(session)
        return stats.summarize(self._compute_all(year, active_only=False))
