"""Account and profile routes."""

import logging

from fastapi import APIRouter, Depends, Response
from fastapi.responses import JSONResponse

from ..auth import AuthResult
from ..models import Session, User
from ..services import UserService
from ..types import AuthSessionDict
from .dependencies import get_bearer_token, get_current_session, get_user_service
from .schemas import LoginRequest, ProfileUpdate, RegisterRequest

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api", tags=["auth"])


def _session_payload(result: AuthResult, user: User) -> AuthSessionDict:
    return {
        "token": result.token,
        "persistent": result.persistent,
        "expiresIn": result.expires_in,
        "user": user.model_dump(by_alias=True, mode="json"),
    }


@router.post("/auth/register", status_code=201)
async def register(
    body: RegisterRequest,
    users: UserService = Depends(get_user_service),
) -> JSONResponse:
    """Create an account. The new user starts with the regular role."""
    result, user = users.register(body.email, body.password, body.display_name)
    logger.info(f"Registered {user.uid}")
    return JSONResponse(status_code=201, content=_session_payload(result, user))


@router.post("/auth/login")
async def login(
    body: LoginRequest,
    users: UserService = Depends(get_user_service),
) -> JSONResponse:
    """Sign in.

    Returns:
        Bearer token, whether it is persistent, its lifetime and the user
    """
    result, user = users.sign_in(body.email, body.password, remember_me=body.remember_me)
    return JSONResponse(content=_session_payload(result, user))


@router.post("/auth/logout", status_code=204)
async def logout(
    token: str = Depends(get_bearer_token),
    users: UserService = Depends(get_user_service),
):
    users.sign_out(token)
    return Response(status_code=204)


@router.get("/me")
async def get_me(
    session: Session = Depends(get_current_session),
    users: UserService = Depends(get_user_service),
) -> JSONResponse:
    """Profile of the signed-in user."""
    return JSONResponse(content=users.get_profile(session).model_dump(by_alias=True, mode="json"))


@router.patch("/me")
async def update_me(
    body: ProfileUpdate,
    session: Session = Depends(get_current_session),
    users: UserService = Depends(get_user_service),
) -> JSONResponse:
    """Change the display name."""
    user = users.update_display_name(session, body.display_name)
    return JSONResponse(content=user.model_dump(by_alias=True, mode="json"))
