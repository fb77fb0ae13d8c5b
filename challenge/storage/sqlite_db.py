"""
SQLite Database Storage for the weight loss challenge.

Maps the document hierarchy onto four tables:
- users (uid)
- competitions (year)
- participants (year, user_id)
- weigh_ins (year, user_id, week_number)

Each row keeps the full document in a JSON column next to the key and
sort columns. Concurrent read access via WAL mode.

This is the SQLite implementation of the DatabaseInterface.
"""

import sqlite3
import json
from contextlib import contextmanager
from pathlib import Path
from typing import Optional, Iterator, List, Dict, Any
import threading

from ..types import DatabaseStatsDict
from .base import DatabaseInterface
from .exceptions import QueryError


class SQLiteDatabase(DatabaseInterface):
    """
    SQLite database for challenge data storage.
    Thread-safe with connection per thread.

    Implements the DatabaseInterface abstract base class.
    """

    SCHEMA_VERSION = 1

    def __init__(self, db_path: str = "data/challenge.db"):
        """
        Create SQLite database instance.

        Args:
            db_path: Path to the SQLite database file
        """
        self.db_path = Path(db_path)
        self._local = threading.local()
        self._initialized = False

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    def initialize(self) -> None:
        """Initialize the database connection and schema."""
        if self._initialized:
            return

        # Ensure parent directory exists
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        self._init_schema()
        self._initialized = True

    def close(self) -> None:
        """Close database connections and clean up resources."""
        if hasattr(self._local, 'conn') and self._local.conn is not None:
            self._local.conn.close()
            self._local.conn = None

    def health_check(self) -> bool:
        """Check if the database connection is healthy."""
        try:
            conn = self._get_connection()
            conn.execute("SELECT 1")
            return True
        except Exception:
            return False

    # =========================================================================
    # CONNECTION MANAGEMENT
    # =========================================================================

    def _get_connection(self) -> sqlite3.Connection:
        """Get thread-local database connection."""
        if not hasattr(self._local, 'conn') or self._local.conn is None:
            self._local.conn = sqlite3.connect(
                str(self.db_path),
                check_same_thread=False,
                timeout=30.0
            )
            self._local.conn.row_factory = sqlite3.Row
            # Enable WAL mode for better concurrent access
            self._local.conn.execute("PRAGMA journal_mode=WAL")
            self._local.conn.execute("PRAGMA synchronous=NORMAL")
        return self._local.conn

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        """Context manager for database transactions."""
        conn = self._get_connection()
        try:
            yield conn
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            raise QueryError(str(e)) from e
        except Exception:
            conn.rollback()
            raise

    def _init_schema(self) -> None:
        """Initialize database schema."""
        with self.transaction() as conn:
            conn.executescript('''
                -- Metadata table
                CREATE TABLE IF NOT EXISTS metadata (
                    key TEXT PRIMARY KEY,
                    value TEXT,
                    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                );

                -- Users
                CREATE TABLE IF NOT EXISTS users (
                    uid TEXT PRIMARY KEY,
                    email TEXT,
                    display_name TEXT,
                    role TEXT,
                    data JSON NOT NULL,
                    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                );

                -- Competitions (one per year)
                CREATE TABLE IF NOT EXISTS competitions (
                    year INTEGER PRIMARY KEY,
                    status TEXT,
                    data JSON NOT NULL,
                    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                );

                -- Participants (one per competition and user)
                CREATE TABLE IF NOT EXISTS participants (
                    year INTEGER NOT NULL,
                    user_id TEXT NOT NULL,
                    name TEXT,
                    data JSON NOT NULL,
                    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                    PRIMARY KEY (year, user_id)
                );

                -- Weigh-ins (one per participant and week)
                CREATE TABLE IF NOT EXISTS weigh_ins (
                    year INTEGER NOT NULL,
                    user_id TEXT NOT NULL,
                    week_number INTEGER NOT NULL,
                    data JSON NOT NULL,
                    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                    PRIMARY KEY (year, user_id, week_number)
                );

                CREATE INDEX IF NOT EXISTS idx_users_display_name ON users(display_name);
                CREATE INDEX IF NOT EXISTS idx_participants_year ON participants(year);
            ''')

            conn.execute(
                "INSERT OR REPLACE INTO metadata (key, value) VALUES (?, ?)",
                ('schema_version', str(self.SCHEMA_VERSION))
            )

    @staticmethod
    def _load(row: Optional[sqlite3.Row]) -> Optional[Dict[str, Any]]:
        """Decode the JSON document stored in a row."""
        if row is None:
            return None
        return json.loads(row['data'])

    def _fetch_one(self, sql: str, params: tuple = ()) -> Optional[Dict[str, Any]]:
        """Fetch the document of the first matching row."""
        try:
            row = self._get_connection().execute(sql, params).fetchone()
        except sqlite3.Error as e:
            raise QueryError(str(e)) from e
        return self._load(row)

    def _fetch_all(self, sql: str, params: tuple = ()) -> List[Dict[str, Any]]:
        """Fetch the documents of all matching rows."""
        try:
            rows = self._get_connection().execute(sql, params).fetchall()
        except sqlite3.Error as e:
            raise QueryError(str(e)) from e
        return [self._load(row) for row in rows]

    # =========================================================================
    # USERS
    # =========================================================================

    def save_user(self, user: Dict[str, Any]) -> None:
        with self.transaction() as conn:
            conn.execute('''
                INSERT OR REPLACE INTO users (uid, email, display_name, role, data)
                VALUES (?, ?, ?, ?, ?)
            ''', (
                user['uid'],
                user.get('email'),
                user.get('displayName'),
                user.get('role'),
                json.dumps(user, ensure_ascii=False)
            ))

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
        return self._fetch_all("SELECT data FROM users ORDER BY display_name COLLATE NOCASE, uid")

    # =========================================================================
    # COMPETITIONS
    # =========================================================================

    def save_competition(self, competition: Dict[str, Any]) -> None:
        with self.transaction() as conn:
            conn.execute('''
                INSERT OR REPLACE INTO competitions (year, status, data)
                VALUES (?, ?, ?)
            ''', (
                int(competition['year']),
                competition.get('status'),
                json.dumps(competition, ensure_ascii=False)
            ))

    def get_competition(self, year: int) -> Optional[Dict[str, Any]]:
        return self._fetch_one("SELECT data FROM competitions WHERE year = ?", (int(year),))

    def get_competitions(self) -> List[Dict[str, Any]]:
        return self._fetch_all("SELECT data FROM competitions ORDER BY year DESC")

    # =========================================================================
    # PARTICIPANTS
    # =========================================================================

    def save_participant(self, year: int, participant: Dict[str, Any]) -> None:
        with self.transaction() as conn:
            conn.execute('''
                INSERT OR REPLACE INTO participants (year, user_id, name, data)
                VALUES (?, ?, ?, ?)
            ''', (
                int(year),
                participant['userId'],
                participant.get('name'),
                json.dumps(participant, ensure_ascii=False)
            ))

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
        with self.transaction() as conn:
            conn.execute(
                "DELETE FROM weigh_ins WHERE year = ? AND user_id = ?",
                (int(year), user_id)
            )
            cursor = conn.execute(
                "DELETE FROM participants WHERE year = ? AND user_id = ?",
                (int(year), user_id)
            )
            return cursor.rowcount > 0

    # =========================================================================
    # WEIGH-INS
    # =========================================================================

    def save_weigh_in(self, year: int, user_id: str, weigh_in: Dict[str, Any]) -> None:
        with self.transaction() as conn:
            conn.execute('''
                INSERT OR REPLACE INTO weigh_ins (year, user_id, week_number, data)
                VALUES (?, ?, ?, ?)
            ''', (
                int(year),
                user_id,
                int(weigh_in['weekNumber']),
                json.dumps(weigh_in, ensure_ascii=False)
            ))

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
        with self.transaction() as conn:
            cursor = conn.execute(
                "DELETE FROM weigh_ins WHERE year = ? AND user_id = ?",
                (int(year), user_id)
            )
            return cursor.rowcount

    # =========================================================================
    # METADATA
    # =========================================================================

    def get_stats(self) -> DatabaseStatsDict:
        conn = self._get_connection()
        stats = {}
        try:
            for table in ('users', 'competitions', 'participants', 'weigh_ins'):
                stats[table] = conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0]
        except sqlite3.Error as e:
            raise QueryError(str(e)) from e
        return stats

    def get_database_size(self) -> int:
        try:
            return self.db_path.stat().st_size
        except OSError:
            return 0

    # =========================================================================
    # MAINTENANCE
    # =========================================================================

    def clear_all(self) -> None:
        with self.transaction() as conn:
            conn.executescript('''
                DELETE FROM weigh_ins;
                DELETE FROM participants;
                DELETE FROM competitions;
                DELETE FROM users;
            ''')
