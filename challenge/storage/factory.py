"""
Backend selection for challenge storage.

One DatabaseInterface instance is shared by the API, the services and the
reminder scheduler. DB_TYPE picks the backend when it is first requested.
"""

import os
import threading
from typing import Callable, Dict, Optional

from .base import DatabaseInterface
from .exceptions import ConfigurationError
from .. import config


def _sqlite() -> DatabaseInterface:
    from .sqlite_db import SQLiteDatabase
    return SQLiteDatabase(db_path=os.path.join(config.get_data_dir(), 'challenge.db'))


def _turso() -> DatabaseInterface:
    from .turso_db import TursoDatabase
    return TursoDatabase()


def _supabase() -> DatabaseInterface:
    from .supabase_db import SupabaseDatabase
    return SupabaseDatabase()


# Backend modules import their client libraries lazily
BACKENDS: Dict[str, Callable[[], DatabaseInterface]] = {
    'sqlite': _sqlite,
    'turso': _turso,
    'supabase': _supabase,
}

_db_instance: Optional[DatabaseInterface] = None
_db_lock = threading.Lock()


def get_database() -> DatabaseInterface:
    """
    Get the shared database, creating and initializing it on first use.

    DB_TYPE is read from the environment on every cold start, so tests can
    switch backends between reset_database() calls:
    - "sqlite" (default): challenge.db under DATA_DIR
    - "turso": TURSO_DATABASE_URL, TURSO_AUTH_TOKEN
    - "supabase": SUPABASE_URL, SUPABASE_KEY

    Raises:
        ConfigurationError: Unknown DB_TYPE or missing credentials
    """
    global _db_instance

    with _db_lock:
        if _db_instance is None:
            db_type = os.environ.get('DB_TYPE', 'sqlite').strip().lower()
            factory = BACKENDS.get(db_type)
            if factory is None:
                raise ConfigurationError(
                    f"Unknown DB_TYPE: {db_type}. Valid options: {', '.join(BACKENDS)}"
                )

            print(f"[*] Database type: {db_type}")
            instance = factory()
            # A failed initialize leaves the slot empty so the next call retries
            instance.initialize()
            _db_instance = instance

        return _db_instance


def reset_database() -> None:
    """Close and forget the shared database."""
    global _db_instance
    with _db_lock:
        if _db_instance is not None:
            _db_instance.close()
            _db_instance = None
