"""
Storage layer exceptions.

Everything a backend raises derives from DatabaseError, which the API
answers with a generic 500 after logging the details. Validation and
permission problems are not storage errors; see challenge.errors.
"""


class DatabaseError(Exception):
    """A backend failed to read or write challenge documents."""


class ConnectionError(DatabaseError):
    """Backend unreachable or client could not be created."""


class ConfigurationError(DatabaseError):
    """DB_TYPE, AUTH_PROVIDER or backend credentials are missing or invalid."""


class SchemaError(DatabaseError):
    """Tables for users, competitions, participants or weigh-ins are missing."""


class QueryError(DatabaseError):
    """A statement against the backend failed."""


class DocumentError(DatabaseError):
    """
    A stored document no longer matches its model.

    Raised when reading, never when writing: documents are built from
    validated models before they reach a backend.
    """
