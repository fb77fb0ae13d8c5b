"""
Weigh-in Service - Participants and their weekly weigh-ins.

Handles joining a competition, submitting weigh-ins (one per week,
last write wins) and the weekly status shown to a participant.
"""

import logging
from datetime import date, datetime, timezone
from typing import Optional, List, Dict, Any

from pydantic import ValidationError

from ..errors import ConflictError, InvalidInputError, NotFoundError
from ..models import (
    Competition,
    CompetitionStatus,
    Participant,
    Session,
    WeighIn,
    WeighInSubmission,
)
from ..storage import DatabaseInterface, parse_document, to_document
from .. import config
from .access import require_admin, require_self_or_admin
from .competition_service import CompetitionService

logger = logging.getLogger(__name__)


def _validation_message(error: ValidationError) -> str:
    """First validation error as 'field: message'."""
    first = error.errors()[0]
    field = ".".join(str(part) for part in first.get('loc', ()))
    return f"{field}: {first['msg']}" if field else first['msg']


def validate_submission(week_number: int, weight: float, notes: Optional[str] = None) -> WeighInSubmission:
    """
    Validate a weigh-in before it is written.

    Raises:
        InvalidInputError: If the week is outside 1-12 or the weight is not
                           in (0, WEIGHT_MAX]
    """
    try:
        return WeighInSubmission(week_number=week_number, weight=weight, notes=notes)
    except ValidationError as e:
        raise InvalidInputError(_validation_message(e)) from e


def validate_start_weight(weight: float) -> float:
    """Validate and round a start weight like a weigh-in weight."""
    if weight is None or not 0 < weight <= config.WEIGHT_MAX:
        raise InvalidInputError(
            f"Start weight must be greater than 0 and at most {config.WEIGHT_MAX:g}"
        )
    return round(weight, 2)


class WeighInService:
    """Join competitions and record weekly weigh-ins."""

    def __init__(self, db: DatabaseInterface):
        self.db = db
        self.competitions = CompetitionService(db)

    # =========================================================================
    # PARTICIPANTS
    # =========================================================================

    def _open_competition(self, year: int) -> Competition:
        competition = self.competitions.get_competition(year)
        if competition.status == CompetitionStatus.ARCHIVED:
            raise ConflictError(f"The {year} competition is archived")
        return competition

    def find_participant(self, year: int, user_id: str) -> Optional[Participant]:
        return parse_document(Participant, self.db.get_participant(year, user_id))

    def get_participant(self, year: int, user_id: str) -> Participant:
        """
        Get a participant.

        Raises:
            NotFoundError: If the user has not joined the competition
        """
        participant = self.find_participant(year, user_id)
        if participant is None:
            raise NotFoundError(f"User {user_id} is not a participant of {year}")
        return participant

    def join_competition(self, session: Session, year: int, start_weight: float) -> Participant:
        """
        Enroll the caller in a competition.

        Args:
            session: The joining user
            year: Competition year
            start_weight: Baseline weight, fixed from now on

        Raises:
            ConflictError: If already joined or the competition is archived
        """
        start_weight = validate_start_weight(start_weight)
        self._open_competition(year)

        if self.db.get_participant(year, session.uid) is not None:
            raise ConflictError(f"You have already joined the {year} competition")

        participant = Participant(
            user_id=session.uid,
            name=session.display_name or session.email,
            start_weight=start_weight,
            joined_at=datetime.now(timezone.utc),
        )
        self.db.save_participant(year, to_document(participant))
        logger.info(f"{session.uid} joined {year} at {start_weight}")
        return participant

    def list_participants(self, session: Session, year: int) -> List[Participant]:
        """All participants of a competition, by name (admin only)."""
        require_admin(session)
        self.competitions.get_competition(year)
        return [parse_document(Participant, doc) for doc in self.db.get_participants(year)]

    def set_participant_active(self, session: Session, year: int, user_id: str, active: bool) -> Participant:
        """Include or exclude a participant from the rankings (admin only)."""
        require_admin(session)
        participant = self.get_participant(year, user_id)
        updated = participant.model_copy(update={'is_active': active})
        self.db.save_participant(year, to_document(updated))
        logger.info(f"Participant {user_id} in {year} set active={active} by {session.uid}")
        return updated

    # =========================================================================
    # WEIGH-INS
    # =========================================================================

    def submit_weigh_in(
        self,
        session: Session,
        year: int,
        user_id: str,
        week_number: int,
        weight: float,
        notes: Optional[str] = None,
        today: Optional[date] = None
    ) -> WeighIn:
        """
        Create or overwrite the weigh-in of one week.

        Input is validated before anything is read or written. A second
        submission for the same week replaces the first.

        Raises:
            InvalidInputError: Bad week number or weight
            PermissionDeniedError: Writing someone else's weigh-in as a regular user
            NotFoundError: Unknown competition or user has not joined
            ConflictError: Competition is archived
        """
        submission = validate_submission(week_number, weight, notes)
        require_self_or_admin(session, user_id)

        self._open_competition(year)
        self.get_participant(year, user_id)

        weigh_in = WeighIn(
            week_number=submission.week_number,
            weight=submission.weight,
            date=today or date.today(),
            timestamp=datetime.now(timezone.utc),
            notes=submission.notes or "",
        )
        self.db.save_weigh_in(year, user_id, to_document(weigh_in))
        logger.info(f"Weigh-in {year}/{user_id}/week {weigh_in.week_number}: {weigh_in.weight}")
        return weigh_in

    def get_weigh_ins(self, session: Session, year: int, user_id: str) -> List[WeighIn]:
        """All weigh-ins of a participant, by week."""
        require_self_or_admin(session, user_id)
        return self.load_weigh_ins(year, user_id)

    def load_weigh_ins(self, year: int, user_id: str) -> List[WeighIn]:
        return [parse_document(WeighIn, doc) for doc in self.db.get_weigh_ins(year, user_id)]

    def get_weigh_in(self, session: Session, year: int, user_id: str, week_number: int) -> WeighIn:
        """
        The weigh-in of one week.

        Raises:
            NotFoundError: If nothing was submitted for that week
        """
        require_self_or_admin(session, user_id)
        weigh_in = parse_document(WeighIn, self.db.get_weigh_in(year, user_id, week_number))
        if weigh_in is None:
            raise NotFoundError(f"No weigh-in for week {week_number}")
        return weigh_in

    def has_weigh_in_for_week(self, session: Session, year: int, user_id: str, week_number: int) -> bool:
        require_self_or_admin(session, user_id)
        return self.db.get_weigh_in(year, user_id, week_number) is not None

    def get_weigh_in_status(self, session: Session, year: int, today: Optional[date] = None) -> Dict[str, Any]:
        """
        Weekly status for the caller.

        Returns:
            Dictionary with year, currentWeek, nextWeighInDate, isParticipant,
            hasSubmittedThisWeek and lastWeighIn
        """
        competition = self.competitions.get_competition(year)
        current_week = competition.current_week(today)
        is_participant = self.db.get_participant(year, session.uid) is not None

        submitted = False
        last_weigh_in = None
        if is_participant:
            weigh_ins = self.load_weigh_ins(year, session.uid)
            submitted = any(w.week_number == current_week for w in weigh_ins)
            if weigh_ins:
                last_weigh_in = to_document(weigh_ins[-1])

        return {
            'year': competition.year,
            'status': competition.status.value,
            'currentWeek': current_week,
            'nextWeighInDate': competition.next_weigh_in_date(today).isoformat(),
            'isParticipant': is_participant,
            'hasSubmittedThisWeek': submitted,
            'lastWeighIn': last_weigh_in,
        }
