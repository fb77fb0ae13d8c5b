"""
Competition Service - Manages the yearly competitions.

A competition runs for 12 weeks from its start date, with one weigh-in
date per week. Its status moves forward only: draft -> active -> archived
(a draft may also be archived directly).
"""

import logging
from datetime import date, datetime, timezone
from typing import Optional, List

from ..errors import ConflictError, InvalidInputError, NotFoundError
from ..models import Competition, CompetitionStatus, Session
from ..models.competition import compute_end_date, generate_weigh_in_dates
from ..storage import DatabaseInterface, parse_document, to_document
from .. import config
from .access import require_admin

logger = logging.getLogger(__name__)


class CompetitionService:
    """Create, query and update competitions."""

    def __init__(self, db: DatabaseInterface):
        self.db = db

    # =========================================================================
    # QUERIES
    # =========================================================================

    def list_competitions(self) -> List[Competition]:
        """Get all competitions, newest year first."""
        return [parse_document(Competition, doc) for doc in self.db.get_competitions()]

    def find_competition(self, year: int) -> Optional[Competition]:
        """Get a competition, or None if the year has none."""
        return parse_document(Competition, self.db.get_competition(year))

    def get_competition(self, year: int) -> Competition:
        """
        Get a competition.

        Raises:
            NotFoundError: If no competition exists for the year
        """
        competition = self.find_competition(year)
        if competition is None:
            raise NotFoundError(f"No competition found for {year}")
        return competition

    def find_active(self, today: Optional[date] = None, fallback: bool = False) -> Optional[Competition]:
        """
        Find the competition running today.

        Args:
            today: Reference date (defaults to today)
            fallback: Return the newest competition when none is active

        Returns:
            The active competition, or None
        """
        competitions = self.list_competitions()
        for competition in competitions:
            if competition.is_active(today):
                return competition
        if fallback and competitions:
            return competitions[0]
        return None

    # =========================================================================
    # ADMIN OPERATIONS
    # =========================================================================

    def create_competition(
        self,
        session: Session,
        year: int,
        start_date: date,
        status: CompetitionStatus = CompetitionStatus.DRAFT,
        weigh_in_dates: Optional[List[date]] = None
    ) -> Competition:
        """
        Create a new competition.

        Args:
            session: Caller, must be an admin
            year: Competition year (its key, immutable)
            start_date: First day; the end date is 12 weeks later
            status: Initial status
            weigh_in_dates: 12 reminder dates; generated weekly from the
                            start date when omitted

        Raises:
            ConflictError: If a competition already exists for the year
        """
        require_admin(session)
        if year <= 0:
            raise InvalidInputError("Year must be a positive number")
        if self.db.get_competition(year) is not None:
            raise ConflictError(f"A competition already exists for {year}")

        dates = weigh_in_dates or generate_weigh_in_dates(start_date)
        self._check_weigh_in_dates(dates)

        competition = Competition(
            year=year,
            start_date=start_date,
            end_date=compute_end_date(start_date),
            status=status,
            weigh_in_dates=dates,
            created_at=datetime.now(timezone.utc),
            created_by=session.uid,
        )
        self.db.save_competition(to_document(competition))
        logger.info(f"Competition {year} created by {session.uid} ({status.value})")
        return competition

    def update_competition(
        self,
        session: Session,
        year: int,
        start_date: Optional[date] = None,
        status: Optional[CompetitionStatus] = None,
        weigh_in_dates: Optional[List[date]] = None
    ) -> Competition:
        """
        Update a competition's settings.

        A new start date moves the end date with it, and the weigh-in dates
        too unless new ones are given. The year cannot change.

        Raises:
            ConflictError: If the status change is not a forward transition
        """
        require_admin(session)
        competition = self.get_competition(year)
        updates = {}

        if start_date is not None:
            updates['start_date'] = start_date
            updates['end_date'] = compute_end_date(start_date)

        if weigh_in_dates is not None:
            self._check_weigh_in_dates(weigh_in_dates)
            updates['weigh_in_dates'] = weigh_in_dates
        elif start_date is not None:
            updates['weigh_in_dates'] = generate_weigh_in_dates(start_date)

        if status is not None:
            if not competition.can_transition_to(status):
                raise ConflictError(
                    f"Cannot change status from {competition.status.value} to {status.value}"
                )
            updates['status'] = status

        updates['updated_at'] = datetime.now(timezone.utc)
        updated = competition.model_copy(update=updates)
        self.db.save_competition(to_document(updated))
        logger.info(f"Competition {year} updated by {session.uid}: {sorted(updates)}")
        return updated

    def archive_competition(self, session: Session, year: int) -> Competition:
        """Move a competition to archived."""
        return self.update_competition(session, year, status=CompetitionStatus.ARCHIVED)

    @staticmethod
    def _check_weigh_in_dates(dates: List[date]) -> None:
        if len(dates) != config.COMPETITION_WEEKS:
            raise InvalidInputError(
                f"A competition needs exactly {config.COMPETITION_WEEKS} weigh-in dates"
            )
