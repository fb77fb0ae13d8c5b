"""FastAPI dependencies for dependency injection."""

from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ..auth import IdentityProvider, get_identity_provider
from ..errors import AuthenticationError, PermissionDeniedError
from ..models import Session
from ..services import (
    CompetitionService,
    StatsService,
    TestDataService,
    UserService,
    WeighInService,
)
from ..storage import DatabaseInterface, get_database

bearer_scheme = HTTPBearer(auto_error=False)


def get_db() -> DatabaseInterface:
    """Get database dependency."""
    return get_database()


def get_identity() -> IdentityProvider:
    """Get identity provider dependency."""
    return get_identity_provider()


def get_user_service(
    db: DatabaseInterface = Depends(get_db),
    identity: IdentityProvider = Depends(get_identity),
) -> UserService:
    return UserService(db, identity)


def get_competition_service(db: DatabaseInterface = Depends(get_db)) -> CompetitionService:
    return CompetitionService(db)


def get_weigh_in_service(db: DatabaseInterface = Depends(get_db)) -> WeighInService:
    return WeighInService(db)


def get_stats_service(db: DatabaseInterface = Depends(get_db)) -> StatsService:
    return StatsService(db)


def get_test_data_service(db: DatabaseInterface = Depends(get_db)) -> TestDataService:
    return TestDataService(db)


def get_bearer_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> str:
    """Raw bearer token of the request."""
    if credentials is None or not credentials.credentials:
        raise AuthenticationError('invalid-session')
    return credentials.credentials


def get_current_session(
    token: str = Depends(get_bearer_token),
    users: UserService = Depends(get_user_service),
) -> Session:
    """Resolve the caller once per request."""
    return users.resolve_session(token)


def require_admin_session(session: Session = Depends(get_current_session)) -> Session:
    """Like get_current_session, but only for admins."""
    if not session.is_admin:
        raise PermissionDeniedError("Administrator access required")
    return session
