"""
The storage contract every challenge backend implements.

Documents are plain dictionaries with camelCase keys, laid out like a
hierarchical document store:

    users/{uid}
    competitions/{year}
    competitions/{year}/participants/{userId}
    competitions/{year}/participants/{userId}/weigh-ins/{weekNumber}
"""

from abc import ABC, abstractmethod
from typing import Optional, List, Dict, Any

from ..types import DatabaseStatsDict


class DatabaseInterface(ABC):
    """
    Keyed document storage for the challenge.

    Writes are whole-document upserts; reads return fresh dicts the caller
    may mutate. Implementations are shared across request threads.
    """

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    @abstractmethod
    def initialize(self) -> None:
        """
        Connect and make sure the four collections exist.

        Called by the factory before the instance is shared. Calling it
        again is a no-op.
        """
        pass

    @abstractmethod
    def close(self) -> None:
        """Release connections. Called on app shutdown and by reset_database()."""
        pass

    @abstractmethod
    def health_check(self) -> bool:
        """True when the backend answers a trivial query. Used by /health."""
        pass

    # =========================================================================
    # USERS
    # =========================================================================

    @abstractmethod
    def save_user(self, user: Dict[str, Any]) -> None:
        """
        Create or overwrite a user document.

        Args:
            user: User document, must contain 'uid'
        """
        pass

    @abstractmethod
    def update_user(self, uid: str, fields: Dict[str, Any]) -> bool:
        """
        Merge fields into an existing user document.

        Args:
            uid: The user to update
            fields: Keys to overwrite; other keys are kept

        Returns:
            True if the user existed, False otherwise
        """
        pass

    @abstractmethod
    def get_user(self, uid: str) -> Optional[Dict[str, Any]]:
        """
        Get a user document.

        Returns:
            The document, or None if not found
        """
        pass

    @abstractmethod
    def get_users(self) -> List[Dict[str, Any]]:
        """
        Get all user documents, ordered by display name.
        """
        pass

    # =========================================================================
    # COMPETITIONS
    # =========================================================================

    @abstractmethod
    def save_competition(self, competition: Dict[str, Any]) -> None:
        """
        Create or overwrite a competition document.

        Args:
            competition: Competition document, must contain 'year'
        """
        pass

    @abstractmethod
    def get_competition(self, year: int) -> Optional[Dict[str, Any]]:
        """
        Get the competition for a year.

        Returns:
            The document, or None if not found
        """
        pass

    @abstractmethod
    def get_competitions(self) -> List[Dict[str, Any]]:
        """
        Get all competitions, ordered by year descending (newest first).
        """
        pass

    # =========================================================================
    # PARTICIPANTS
    # =========================================================================

    @abstractmethod
    def save_participant(self, year: int, participant: Dict[str, Any]) -> None:
        """
        Create or overwrite a participant document.

        Args:
            year: The competition year
            participant: Participant document, must contain 'userId'
        """
        pass

    @abstractmethod
    def get_participant(self, year: int, user_id: str) -> Optional[Dict[str, Any]]:
        """
        Get one participant of a competition.

        Returns:
            The document, or None if the user has not joined
        """
        pass

    @abstractmethod
    def get_participants(self, year: int) -> List[Dict[str, Any]]:
        """
        Get all participants of a competition, ordered by name.
        """
        pass

    @abstractmethod
    def delete_participant(self, year: int, user_id: str) -> bool:
        """
        Delete a participant and all of their weigh-ins.

        Returns:
            True if the participant existed
        """
        pass

    # =========================================================================
    # WEIGH-INS
    # =========================================================================

    @abstractmethod
    def save_weigh_in(self, year: int, user_id: str, weigh_in: Dict[str, Any]) -> None:
        """
        Create or overwrite the weigh-in for one week.

        Args:
            year: The competition year
            user_id: The participant
            weigh_in: Weigh-in document, keyed by its 'weekNumber'

        Behavior:
            - Last write wins per (year, user_id, weekNumber)
        """
        pass

    @abstractmethod
    def get_weigh_in(self, year: int, user_id: str, week_number: int) -> Optional[Dict[str, Any]]:
        """
        Get the weigh-in for one week.

        Returns:
            The document, or None if nothing was submitted for that week
        """
        pass

    @abstractmethod
    def get_weigh_ins(self, year: int, user_id: str) -> List[Dict[str, Any]]:
        """
        Get all weigh-ins of a participant, ordered by week number ascending.
        """
        pass

    @abstractmethod
    def delete_weigh_ins(self, year: int, user_id: str) -> int:
        """
        Delete all weigh-ins of a participant.

        Returns:
            Number of weigh-ins deleted
        """
        pass

    # =========================================================================
    # METADATA
    # =========================================================================

    @abstractmethod
    def get_stats(self) -> DatabaseStatsDict:
        """
        Get document counts.

        Returns:
            Dictionary with counts for users, competitions, participants, weigh_ins
        """
        pass

    @abstractmethod
    def get_database_size(self) -> int:
        """Approximate storage used, in bytes; 0 when the backend cannot tell."""
        pass

    # =========================================================================
    # MAINTENANCE
    # =========================================================================

    @abstractmethod
    def clear_all(self) -> None:
        """Delete every document, children first. Tables are kept."""
        pass
