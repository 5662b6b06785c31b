"""
Bookshelf API — Authentication Route Handlers
==============================================

What:  POST /register, POST /login, POST /logout, GET /user.
How:   Bodies are validated by Pydantic (422 through the global handler);
       CredentialService does the work.

Rate limiting:
    POST /login is limited to LOGIN_RATE_LIMIT_REQUESTS per
    LOGIN_RATE_LIMIT_WINDOW seconds per client IP by RateLimitMiddleware.
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from bookshelf.config import settings
from bookshelf.database import get_db_session
from bookshelf.dependencies import require_token
from bookshelf.schemas.common import ErrorResponse
from bookshelf.schemas.user import (
    LoginRequest,
    MessageResponse,
    RegisterRequest,
    TokenResponse,
    UserResponse,
)
from bookshelf.services.credential_service import (
    AccessContext,
    credential_service,
    user_view,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix=settings.api_prefix, tags=["Authentication"])


@router.post(
    "/register",
    status_code=201,
    response_model=TokenResponse,
    summary="Register a user",
    description="Creates an account and returns its first bearer token.",
    responses={422: {"description": "Validation failed", "model": ErrorResponse}},
)
async def register(
    data: RegisterRequest,
    db: AsyncSession = Depends(get_db_session),
) -> TokenResponse:
    user, token = await credential_service.register(db, data)
    return TokenResponse(token=token, user=user_view(user))


@router.post(
    "/login",
    response_model=TokenResponse,
    summary="Log in",
    description="Exchanges email and password for a new bearer token. Limited to 10 attempts per minute.",
    responses={
        422: {"description": "Invalid credentials or body", "model": ErrorResponse},
        429: {"description": "Too many login attempts", "model": ErrorResponse},
    },
)
async def login(
    data: LoginRequest,
    db: AsyncSession = Depends(get_db_session),
) -> TokenResponse:
    user, token = await credential_service.login(db, data)
    return TokenResponse(token=token, user=user_view(user))


@router.post(
    "/logout",
    response_model=MessageResponse,
    summary="Log out",
    description="Revokes the bearer token used for this request. Other tokens stay valid.",
    responses={401: {"description": "Missing or invalid bearer token", "model": ErrorResponse}},
)
async def logout(
    access: AccessContext = Depends(require_token),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    await credential_service.revoke(db, access.token)
    return MessageResponse(message="Logged out.")


@router.get(
    "/user",
    response_model=UserResponse,
    summary="Current user",
    responses={401: {"description": "Missing or invalid bearer token", "model": ErrorResponse}},
)
async def current_user(access: AccessContext = Depends(require_token)) -> UserResponse:
    return user_view(access.user)
