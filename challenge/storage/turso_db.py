"""
Turso Database Storage for the weight loss challenge.

Provides cloud-hosted SQLite-compatible storage using Turso's libSQL.
Key differences from local SQLite:
- Connection via URL + auth token
- No executescript() - execute statements individually
- Row access via index (row[0]) instead of dict key
- No reliable rowcount - existence is checked before deletes

Requires: pip install libsql-experimental
"""

import os
import json
from typing import Optional, List, Dict, Any

from ..types import DatabaseStatsDict
from .base import DatabaseInterface
from .exceptions import ConfigurationError, ConnectionError, QueryError


class TursoDatabase(DatabaseInterface):
    """
    Turso cloud database implementation.

    Uses libSQL for SQLite-compatible cloud storage with edge replicas.
    Implements the DatabaseInterface abstract base class.
    """

    SCHEMA_VERSION = 1

    def __init__(self):
        """
        Create Turso database instance.

        Reads configuration from environment variables:
        - TURSO_DATABASE_URL: Database URL (e.g., libsql://your-db.turso.io)
        - TURSO_AUTH_TOKEN: Authentication token
        """
        self._url = os.environ.get('TURSO_DATABASE_URL')
        self._token = os.environ.get('TURSO_AUTH_TOKEN')
        self._conn = None
        self._initialized = False

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    def initialize(self) -> None:
        """Initialize the database connection and schema."""
        if self._initialized:
            return

        if not self._url:
            raise ConfigurationError(
                "TURSO_DATABASE_URL environment variable is required for Turso backend"
            )
        if not self._token:
            raise ConfigurationError(
                "TURSO_AUTH_TOKEN environment variable is required for Turso backend"
            )

        self._init_schema()
        self._initialized = True

    def _get_connection(self):
        """Get or create database connection."""
        if self._conn is None:
            try:
                import libsql_experimental as libsql
            except ImportError:
                raise ConfigurationError(
                    "libsql-experimental package not installed. "
                    "Install with: pip install libsql-experimental"
                )

            try:
                self._conn = libsql.connect(
                    self._url,
                    auth_token=self._token
                )
            except Exception as e:
                raise ConnectionError(f"Failed to connect to Turso: {e}")

        return self._conn

    def close(self) -> None:
        """Close database connection."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def health_check(self) -> bool:
        """Check if the database connection is healthy."""
        try:
            conn = self._get_connection()
            conn.execute("SELECT 1")
            return True
        except Exception:
            return False

    def _init_schema(self) -> None:
        """Initialize database schema."""
        # Execute each statement individually (no executescript in libsql)
        statements = [
            '''CREATE TABLE IF NOT EXISTS metadata (
                key TEXT PRIMARY KEY,
                value TEXT,
                updated_at TEXT DEFAULT CURRENT_TIMESTAMP
            )''',
            '''CREATE TABLE IF NOT EXISTS users (
                uid TEXT PRIMARY KEY,
                email TEXT,
                display_name TEXT,
                role TEXT,
                data TEXT NOT NULL,
                updated_at TEXT DEFAULT CURRENT_TIMESTAMP
            )''',
            '''CREATE TABLE IF NOT EXISTS competitions (
                year INTEGER PRIMARY KEY,
                status TEXT,
                data TEXT NOT NULL,
                updated_at TEXT DEFAULT CURRENT_TIMESTAMP
            )''',
            '''CREATE TABLE IF NOT EXISTS participants (
                year INTEGER NOT NULL,
                user_id TEXT NOT NULL,
                name TEXT,
                data TEXT NOT NULL,
                updated_at TEXT DEFAULT CURRENT_TIMESTAMP,
                PRIMARY KEY (year, user_id)
            )''',
            '''CREATE TABLE IF NOT EXISTS weigh_ins (
                year INTEGER NOT NULL,
                user_id TEXT NOT NULL,
                week_number INTEGER NOT NULL,
                data TEXT NOT NULL,
                updated_at TEXT DEFAULT CURRENT_TIMESTAMP,
                PRIMARY KEY (year, user_id, week_number)
            )''',
            'CREATE INDEX IF NOT EXISTS idx_users_display_name ON users(display_name)',
            'CREATE INDEX IF NOT EXISTS idx_participants_year ON participants(year)',
        ]
        for statement in statements:
            self._execute(statement)
        self._execute(
            "INSERT OR REPLACE INTO metadata (key, value) VALUES (?, ?)",
            ('schema_version', str(self.SCHEMA_VERSION))
        )

    def _execute(self, sql: str, params: tuple = ()) -> None:
        """Execute a write statement and commit."""
        conn = self._get_connection()
        try:
            conn.execute(sql, params)
            conn.commit()
        except Exception as e:
            raise QueryError(f"Turso query failed: {e}")

    def _fetch_one(self, sql: str, params: tuple = ()) -> Optional[Dict[str, Any]]:
        """Fetch the JSON document of the first matching row."""
        conn = self._get_connection()
        try:
            row = conn.execute(sql, params).fetchone()
        except Exception as e:
            raise QueryError(f"Turso query failed: {e}")
        return json.loads(row[0]) if row else None

    def _fetch_all(self, sql: str, params: tuple = ()) -> List[Dict[str, Any]]:
        """Fetch the JSON documents of all matching rows."""
        conn = self._get_connection()
        try:
            rows = conn.execute(sql, params).fetchall()
        except Exception as e:
            raise QueryError(f"Turso query failed: {e}")
        return [json.loads(row[0]) for row in rows]

    # =========================================================================
    # USERS
    # =========================================================================

    def save_user(self, user: Dict[str, Any]) -> None:
        self._execute(
            '''INSERT OR REPLACE INTO users (uid, email, display_name, role, data)
               VALUES (?, ?, ?, ?, ?)''',
            (
                user['uid'],
                user.get('email'),
                user.get('displayName'),
                user.get('role'),
                json.dumps(user, ensure_ascii=False)
            )
        )

    def update_user(self, uid: str, fields: Dict[str, Any]) -> bool:
        existing = self.get_user(uid)
        if existing is None:
            return False
        existing.update(fields)
        self.save_user(existing)
        return True

    def get_user(self, uid: str) -> Optional[Dict[str, Any]]:
        return self._fetch_one("SELECT data FROM users WHERE uid = ?", (uid,))

    def get_users(self) -> List[Dict[str, Any]]:
        return self._fetch_all(
            "SELECT data FROM users ORDER BY display_name COLLATE NOCASE, uid"
        )

    # =========================================================================
    # COMPETITIONS
    # =========================================================================

    def save_competition(self, competition: Dict[str, Any]) -> None:
        self._execute(
            "INSERT OR REPLACE INTO competitions (year, status, data) VALUES (?, ?, ?)",
            (
                int(competition['year']),
                competition.get('status'),
                json.dumps(competition, ensure_ascii=False)
            )
        )

    def get_competition(self, year: int) -> Optional[Dict[str, Any]]:
        return self._fetch_one("SELECT data FROM competitions WHERE year = ?", (int(year),))

    def get_competitions(self) -> List[Dict[str, Any]]:
        return self._fetch_all("SELECT data FROM competitions ORDER BY year DESC")

    # =========================================================================
    # PARTICIPANTS
    # =========================================================================

    def save_participant(self, year: int, participant: Dict[str, Any]) -> None:
        self._execute(
            '''INSERT OR REPLACE INTO participants (year, user_id, name, data)
               VALUES (?, ?, ?, ?)''',
            (
                int(year),
                participant['userId'],
                participant.get('name'),
                json.dumps(participant, ensure_ascii=False)
            )
        )

    def get_participant(self, year: int, user_id: str) -> Optional[Dict[str, Any]]:
        return self._fetch_one(
            "SELECT data FROM participants WHERE year = ? AND user_id = ?",
            (int(year), user_id)
        )

    def get_participants(self, year: int) -> List[Dict[str, Any]]:
        return self._fetch_all(
            "SELECT data FROM participants WHERE year = ? ORDER BY name COLLATE NOCASE, user_id",
            (int(year),)
        )

    def delete_participant(self, year: int, user_id: str) -> bool:
        existed = self.get_participant(year, user_id) is not None
        self.delete_weigh_ins(year, user_id)
        self._execute(
            "DELETE FROM participants WHERE year = ? AND user_id = ?",
            (int(year), user_id)
        )
        return existed

    # =========================================================================
    # WEIGH-INS
    # =========================================================================

    def save_weigh_in(self, year: int, user_id: str, weigh_in: Dict[str, Any]) -> None:
        self._execute(
            '''INSERT OR REPLACE INTO weigh_ins (year, user_id, week_number, data)
               VALUES (?, ?, ?, ?)''',
            (
                int(year),
                user_id,
                int(weigh_in['weekNumber']),
                json.dumps(weigh_in, ensure_ascii=False)
            )
        )

    def get_weigh_in(self, year: int, user_id: str, week_number: int) -> Optional[Dict[str, Any]]:
        return self._fetch_one(
            "SELECT data FROM weigh_ins WHERE year = ? AND user_id = ? AND week_number = ?",
            (int(year), user_id, int(week_number))
        )

    def get_weigh_ins(self, year: int, user_id: str) -> List[Dict[str, Any]]:
        return self._fetch_all(
            "SELECT data FROM weigh_ins WHERE year = ? AND user_id = ? ORDER BY week_number",
            (int(year), user_id)
        )

    def delete_weigh_ins(self, year: int, user_id: str) -> int:
        count = len(self.get_weigh_ins(year, user_id))
        self._execute(
            "DELETE FROM weigh_ins WHERE year = ? AND user_id = ?",
            (int(year), user_id)
        )
        return count

    # =========================================================================
    # METADATA
    # =========================================================================

    def get_stats(self) -> DatabaseStatsDict:
        conn = self._get_connection()
        stats = {}
        try:
            for table in ('users', 'competitions', 'participants', 'weigh_ins'):
                stats[table] = conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0]
        except Exception as e:
            raise QueryError(f"Turso query failed: {e}")
        return stats

    def get_database_size(self) -> int:
        """Size is managed by the Turso service."""
        return 0

    # =========================================================================
    # MAINTENANCE
    # =========================================================================

    def clear_all(self) -> None:
        for table in ('weigh_ins', 'participants', 'competitions', 'users'):
            self._execute(f"DELETE FROM {table}")
