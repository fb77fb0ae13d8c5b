"""
Application configuration.

Loads settings from environment variables with sensible defaults.
"""

import os


def _get_int(key: str, default: int) -> int:
    """Get integer from environment variable."""
    value = os.environ.get(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _get_float(key: str, default: float) -> float:
    """Get float from environment variable."""
    value = os.environ.get(key)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _get_bool(key: str, default: bool) -> bool:
    """Get boolean from environment variable."""
    value = os.environ.get(key)
    if value is None:
        return default
    return value.lower() in ('true', '1', 'yes')


def _get_str(key: str, default: str) -> str:
    """Get string from environment variable."""
    return os.environ.get(key, default)


def get_data_dir() -> str:
    """
    Resolve the data directory.

    Priority: DATA_DIR > RAILWAY_VOLUME_MOUNT_PATH > /app/data (container) > data (local)
    """
    return (
        os.environ.get('DATA_DIR') or
        os.environ.get('RAILWAY_VOLUME_MOUNT_PATH') or
        ('/app/data' if os.path.exists('/app') else 'data')
    )


# =============================================================================
# SERVER SETTINGS
# =============================================================================
PORT = _get_int('PORT', 8000)
HOST = _get_str('HOST', '0.0.0.0')

# =============================================================================
# STORAGE SETTINGS
# =============================================================================
# sqlite (default), turso or supabase
DB_TYPE = _get_str('DB_TYPE', 'sqlite')
DATA_DIR = get_data_dir()

# =============================================================================
# AUTHENTICATION
# =============================================================================
# local (default) or supabase
AUTH_PROVIDER = _get_str('AUTH_PROVIDER', 'local')

# Session-scoped logins expire after this many minutes (default 12 hours)
SESSION_TTL_MINUTES = _get_int('SESSION_TTL_MINUTES', 720)

# "Remember me" logins expire after this many days
REMEMBER_ME_TTL_DAYS = _get_int('REMEMBER_ME_TTL_DAYS', 30)

MIN_PASSWORD_LENGTH = _get_int('MIN_PASSWORD_LENGTH', 6)

# Failed sign-ins allowed per email before it is locked out for a while
MAX_FAILED_LOGINS = _get_int('MAX_FAILED_LOGINS', 5)
LOGIN_LOCKOUT_SECONDS = _get_int('LOGIN_LOCKOUT_SECONDS', 300)

PASSWORD_HASH_ITERATIONS = _get_int('PASSWORD_HASH_ITERATIONS', 100_000)

# Accounts registered with these emails (comma separated) start as admins
ADMIN_EMAILS = [
    email.strip().lower()
    for email in _get_str('ADMIN_EMAILS', '').split(',')
    if email.strip()
]

# =============================================================================
# COMPETITION RULES
# =============================================================================
COMPETITION_WEEKS = 12

# Upper bound for a weight entry (same unit the participants use)
WEIGHT_MAX = _get_float('WEIGHT_MAX', 1000.0)

# =============================================================================
# ADMIN TOOLING
# =============================================================================
# Cooldown between test data generation requests (in seconds)
TEST_DATA_COOLDOWN_SECONDS = _get_int('TEST_DATA_COOLDOWN_SECONDS', 60)

# =============================================================================
# REMINDERS
# =============================================================================
# Daily time (HH:MM, local) at which weigh-in reminders are checked
REMINDER_TIME = _get_str('REMINDER_TIME', '08:00')

# Run one check as soon as the scheduler starts
REMINDERS_ON_STARTUP = _get_bool('REMINDERS_ON_STARTUP', True)

# =============================================================================
# LOGGING
# =============================================================================
LOG_LEVEL = _get_str('LOG_LEVEL', 'INFO')
