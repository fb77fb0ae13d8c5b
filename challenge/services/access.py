"""Role checks shared by the services."""

from ..errors import PermissionDeniedError
from ..models import Session


def require_admin(session: Session) -> None:
    """Raise unless the caller is an administrator."""
    if not session.is_admin:
        raise PermissionDeniedError("Administrator access required")


def require_self_or_admin(session: Session, user_id: str) -> None:
    """Raise unless the caller is the given user or an administrator."""
    if session.uid != user_id and not session.is_admin:
        raise PermissionDeniedError("You can only access your own data")
