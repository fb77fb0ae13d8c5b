"""
Supabase Database Storage for the weight loss challenge.

Provides PostgreSQL-based cloud storage using Supabase's REST API.
Key differences from SQLite:
- Uses supabase-py client library (REST API)
- upsert() with on_conflict instead of INSERT OR REPLACE
- Composite keys (year, user_id[, week_number]) for the nested collections
- initialize() verifies tables exist (doesn't create them)

Requires: pip install supabase
Schema must be created first via scripts/supabase_schema.sql
"""

import os
import json
from datetime import datetime, timezone
from typing import Optional, List, Dict, Any

from ..types import DatabaseStatsDict
from .base import DatabaseInterface
from .exceptions import ConfigurationError, ConnectionError, QueryError, SchemaError


class SupabaseDatabase(DatabaseInterface):
    """
    Supabase cloud database implementation.

    Uses PostgreSQL via Supabase's REST API.
    Implements the DatabaseInterface abstract base class.
    """

    def __init__(self):
        """
        Create Supabase database instance.

        Reads configuration from environment variables:
        - SUPABASE_URL: Project URL (e.g., https://your-project.supabase.co)
        - SUPABASE_KEY: Service key
        """
        self._url = os.environ.get('SUPABASE_URL')
        self._key = os.environ.get('SUPABASE_KEY')
        self._client = None
        self._initialized = False

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    def initialize(self) -> None:
        """Initialize the database connection and verify schema."""
        if self._initialized:
            return

        if not self._url:
            raise ConfigurationError(
                "SUPABASE_URL environment variable is required for Supabase backend"
            )
        if not self._key:
            raise ConfigurationError(
                "SUPABASE_KEY environment variable is required for Supabase backend"
            )

        client = self._get_client()
        try:
            for table in ('users', 'competitions', 'participants', 'weigh_ins'):
                client.table(table).select('data').limit(1).execute()
        except Exception as e:
            raise SchemaError(
                f"Challenge tables missing or unreachable on Supabase. "
                f"Run scripts/supabase_schema.sql in Supabase SQL Editor first. "
                f"Error: {e}"
            )

        self._initialized = True

    def _get_client(self):
        """Get or create Supabase client."""
        if self._client is None:
            try:
                from supabase import create_client
            except ImportError:
                raise ConfigurationError(
                    "supabase package not installed. "
                    "Install with: pip install supabase"
                )

            try:
                self._client = create_client(self._url, self._key)
            except Exception as e:
                raise ConnectionError(f"Failed to create Supabase client: {e}")

        return self._client

    def close(self) -> None:
        """Close database connection (no-op for Supabase REST API)."""
        # REST API doesn't maintain persistent connections
        self._client = None

    def health_check(self) -> bool:
        """Check if the database connection is healthy."""
        try:
            client = self._get_client()
            client.table('competitions').select('year').limit(1).execute()
            return True
        except Exception:
            return False

    @staticmethod
    def _now() -> str:
        return datetime.now(timezone.utc).isoformat()

    @staticmethod
    def _run(query):
        """Execute a query, turning client failures into QueryError."""
        try:
            return query.execute()
        except Exception as e:
            raise QueryError(f"Supabase query failed: {e}")

    @staticmethod
    def _first(response) -> Optional[Dict[str, Any]]:
        """Decode the document of the first row of a response."""
        if not response.data:
            return None
        return json.loads(response.data[0]['data'])

    @staticmethod
    def _all(response) -> List[Dict[str, Any]]:
        return [json.loads(row['data']) for row in response.data]

    # =========================================================================
    # USERS
    # =========================================================================

    def save_user(self, user: Dict[str, Any]) -> None:
        self._run(self._get_client().table('users').upsert({
            'uid': user['uid'],
            'email': user.get('email'),
            'display_name': user.get('displayName'),
            'role': user.get('role'),
            'data': json.dumps(user, ensure_ascii=False),
            'updated_at': self._now()
        }, on_conflict='uid'))

    def update_user(self, uid: str, fields: Dict[str, Any]) -> bool:
        existing = self.get_user(uid)
        if existing is None:
            return False
        existing.update(fields)
        self.save_user(existing)
        return True

    def get_user(self, uid: str) -> Optional[Dict[str, Any]]:
        response = self._run(
            self._get_client().table('users')
            .select('data')
            .eq('uid', uid)
            .limit(1)
        )
        return self._first(response)

    def get_users(self) -> List[Dict[str, Any]]:
        response = self._run(
            self._get_client().table('users')
            .select('data')
            .order('display_name')
        )
        return self._all(response)

    # =========================================================================
    # COMPETITIONS
    # =========================================================================

    def save_competition(self, competition: Dict[str, Any]) -> None:
        self._run(self._get_client().table('competitions').upsert({
            'year': int(competition['year']),
            'status': competition.get('status'),
            'data': json.dumps(competition, ensure_ascii=False),
            'updated_at': self._now()
        }, on_conflict='year'))

    def get_competition(self, year: int) -> Optional[Dict[str, Any]]:
        response = self._run(
            self._get_client().table('competitions')
            .select('data')
            .eq('year', int(year))
            .limit(1)
        )
        return self._first(response)

    def get_competitions(self) -> List[Dict[str, Any]]:
        response = self._run(
            self._get_client().table('competitions')
            .select('data')
            .order('year', desc=True)
        )
        return self._all(response)

    # =========================================================================
    # PARTICIPANTS
    # =========================================================================

    def save_participant(self, year: int, participant: Dict[str, Any]) -> None:
        self._run(self._get_client().table('participants').upsert({
            'year': int(year),
            'user_id': participant['userId'],
            'name': participant.get('name'),
            'data': json.dumps(participant, ensure_ascii=False),
            'updated_at': self._now()
        }, on_conflict='year,user_id'))

    def get_participant(self, year: int, user_id: str) -> Optional[Dict[str, Any]]:
        response = self._run(
            self._get_client().table('participants')
            .select('data')
            .eq('year', int(year))
            .eq('user_id', user_id)
            .limit(1)
        )
        return self._first(response)

    def get_participants(self, year: int) -> List[Dict[str, Any]]:
        response = self._run(
            self._get_client().table('participants')
            .select('data')
            .eq('year', int(year))
            .order('name')
        )
        return self._all(response)

    def delete_participant(self, year: int, user_id: str) -> bool:
        self.delete_weigh_ins(year, user_id)
        response = self._run(
            self._get_client().table('participants')
            .delete()
            .eq('year', int(year))
            .eq('user_id', user_id)
        )
        return bool(response.data)

    # =========================================================================
    # WEIGH-INS
    # =========================================================================

    def save_weigh_in(self, year: int, user_id: str, weigh_in: Dict[str, Any]) -> None:
        self._run(self._get_client().table('weigh_ins').upsert({
            'year': int(year),
            'user_id': user_id,
            'week_number': int(weigh_in['weekNumber']),
            'data': json.dumps(weigh_in, ensure_ascii=False),
            'updated_at': self._now()
        }, on_conflict='year,user_id,week_number'))

    def get_weigh_in(self, year: int, user_id: str, week_number: int) -> Optional[Dict[str, Any]]:
        response = self._run(
            self._get_client().table('weigh_ins')
            .select('data')
            .eq('year', int(year))
            .eq('user_id', user_id)
            .eq('week_number', int(week_number))
            .limit(1)
        )
        return self._first(response)

    def get_weigh_ins(self, year: int, user_id: str) -> List[Dict[str, Any]]:
        response = self._run(
            self._get_client().table('weigh_ins')
            .select('data')
            .eq('year', int(year))
            .eq('user_id', user_id)
            .order('week_number')
        )
        return self._all(response)

    def delete_weigh_ins(self, year: int, user_id: str) -> int:
        response = self._run(
            self._get_client().table('weigh_ins')
            .delete()
            .eq('year', int(year))
            .eq('user_id', user_id)
        )
        return len(response.data or [])

    # =========================================================================
    # METADATA
    # =========================================================================

    def get_stats(self) -> DatabaseStatsDict:
        client = self._get_client()
        key_columns = {
            'users': 'uid',
            'competitions': 'year',
            'participants': 'user_id',
            'weigh_ins': 'week_number',
        }
        stats = {}
        for table, column in key_columns.items():
            response = self._run(client.table(table).select(column, count='exact'))
            stats[table] = response.count or 0
        return stats

    def get_database_size(self) -> int:
        """Rough estimate from row counts (size is not exposed via REST)."""
        stats = self.get_stats()
        return sum(stats.values()) * 500

    # =========================================================================
    # MAINTENANCE
    # =========================================================================

    def clear_all(self) -> None:
        """Clear all data from database."""
        client = self._get_client()

        # Children first; filters that match all rows
        self._run(client.table('weigh_ins').delete().gte('week_number', 0))
        self._run(client.table('participants').delete().neq('user_id', ''))
        self._run(client.table('competitions').delete().gte('year', 0))
        self._run(client.table('users').delete().neq('uid', ''))
