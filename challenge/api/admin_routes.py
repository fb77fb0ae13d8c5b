"""Admin-only routes: users and test data."""

import logging
from typing import Optional

from fastapi import APIRouter, Body, Depends
from fastapi.responses import JSONResponse

from ..models import Session
from ..services import TestDataService, UserService
from .dependencies import get_test_data_service, get_user_service, require_admin_session
from .rate_limit import test_data_rate_limiter
from .schemas import GenerateRequest, RoleUpdate

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api", tags=["admin"])


@router.get("/users")
async def list_users(
    session: Session = Depends(require_admin_session),
    users: UserService = Depends(get_user_service),
) -> JSONResponse:
    """All users, by display name."""
    return JSONResponse(
        content=[u.model_dump(by_alias=True, mode="json") for u in users.list_users(session)]
    )


@router.put("/users/{uid}/role")
async def set_user_role(
    uid: str,
    body: RoleUpdate,
    session: Session = Depends(require_admin_session),
    users: UserService = Depends(get_user_service),
) -> JSONResponse:
    user = users.set_role(session, uid, body.role)
    return JSONResponse(content=user.model_dump(by_alias=True, mode="json"))


@router.post("/admin/test-data/{year}")
async def generate_test_data(
    year: int,
    body: Optional[GenerateRequest] = Body(None),
    session: Session = Depends(require_admin_session),
    test_data: TestDataService = Depends(get_test_data_service),
) -> JSONResponse:
    """
    Generate demo participants and weigh-ins.

    Rate limited per year by TEST_DATA_COOLDOWN_SECONDS.
    """
    body = body or GenerateRequest()

    allowed, wait_seconds = test_data_rate_limiter.try_acquire(str(year))
    if not allowed:
        return JSONResponse(
            status_code=429,
            content={
                "status": "rate_limited",
                "detail": f"Please wait {wait_seconds} seconds before generating again",
                "retry_after": wait_seconds,
            },
            headers={"Retry-After": str(wait_seconds)},
        )

    if body.seed is not None:
        test_data.rng.seed(body.seed)

    if body.existing_users:
        result = test_data.generate_for_existing_users(session, year)
    else:
        result = test_data.generate_test_users(session, year)

    return JSONResponse(content={"status": "completed", **result})


@router.delete("/admin/test-data/{year}")
async def clear_test_data(
    year: int,
    session: Session = Depends(require_admin_session),
    test_data: TestDataService = Depends(get_test_data_service),
) -> JSONResponse:
    """Delete every participant and weigh-in of a year."""
    removed = test_data.clear_test_data(session, year)
    return JSONResponse(content={"status": "completed", "participants_removed": removed})


@router.delete("/admin/test-users")
async def clear_test_users(
    session: Session = Depends(require_admin_session),
    test_data: TestDataService = Depends(get_test_data_service),
) -> JSONResponse:
    """Delete generated test participants from all competitions."""
    removed = test_data.clear_test_users(session)
    return JSONResponse(content={"status": "completed", "participants_removed": removed})
