"""
Document storage for users, competitions, participants and weigh-ins.

Backends: SQLite (default, one file under DATA_DIR), Turso and Supabase.
Services read documents as dicts and turn them into models with
parse_document():

    db = get_database()
    competition = parse_document(Competition, db.get_competition(2025))
"""

from .base import DatabaseInterface
from .factory import get_database, reset_database
from .documents import parse_document, to_document
from .exceptions import (
    DatabaseError,
    ConnectionError,
    ConfigurationError,
    SchemaError,
    QueryError,
    DocumentError
)

__all__ = [
    'DatabaseInterface',
    'get_database',
    'reset_database',
    'parse_document',
    'to_document',
    'DatabaseError',
    'ConnectionError',
    'ConfigurationError',
    'SchemaError',
    'QueryError',
    'DocumentError'
]
