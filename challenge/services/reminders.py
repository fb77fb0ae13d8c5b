"""Find participants who still owe this week's weigh-in."""

from datetime import date
from typing import Optional, List, Dict, Any

from ..models import Competition, Participant
from ..storage import DatabaseInterface, parse_document


def pending_weigh_ins(db: DatabaseInterface, today: Optional[date] = None) -> List[Dict[str, Any]]:
    """
    Reminders due today.

    Only competitions that are active today and have today as one of
    their weigh-in dates are checked.

    Returns:
        One entry per such competition:
        {"year": ..., "week": ..., "participants": [{"userId", "name"}...]}
    """
    today = today or date.today()
    due = []

    for doc in db.get_competitions():
        competition = parse_document(Competition, doc)
        if not competition.is_active(today) or today not in competition.weigh_in_dates:
            continue

        week = competition.current_week(today)
        missing = []
        for participant_doc in db.get_participants(competition.year):
            participant = parse_document(Participant, participant_doc)
            if not participant.is_active:
                continue
            if db.get_weigh_in(competition.year, participant.user_id, week) is None:
                missing.append({'userId': participant.user_id, 'name': participant.name})

        due.append({'year': competition.year, 'week': week, 'participants': missing})

    return due
