"""
Authentication endpoints: sign-up, login, logout, current user.

Sessions are opaque bearer tokens stored in ``auth_sessions``.
"""

import logging

from fastapi import APIRouter, Depends

from src.api.middleware.auth import CurrentUser, require_user
from src.core.config import get_settings
from src.core.models import Credentials, SessionResponse, UserResponse
from src.services.storage.database import get_session
from src.services.storage.repository import RantRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


def _to_user_response(user) -> UserResponse:
    return UserResponse(
        id=user.id,
        email=user.email,
        username=user.username,
        created_at=user.created_at,
    )


async def _open_session(repo: RantRepository, user) -> SessionResponse:
    auth_session = await repo.create_session(user.id, get_settings().session_ttl_hours)
    return SessionResponse(
        token=auth_session.token,
        expires_at=auth_session.expires_at,
        user=_to_user_response(user),
    )


@router.post("/signup", response_model=SessionResponse, status_code=201)
async def signup(body: Credentials):
    """Create an account with a generated username and sign it in."""
    async with get_session() as session:
        repo = RantRepository(session)
        user = await repo.create_user(body.email, body.password)
        result = await _open_session(repo, user)
    logger.info("New user %s signed up as %s", user.id, user.username)
    return result


@router.post("/login", response_model=SessionResponse)
async def login(body: Credentials):
    """Exchange email + password for a bearer session."""
    async with get_session() as session:
        repo = RantRepository(session)
        user = await repo.authenticate(body.email, body.password)
        return await _open_session(repo, user)


@router.post("/logout", status_code=204)
async def logout(user: CurrentUser = Depends(require_user)):
    """Revoke the bearer token used for this request."""
    async with get_session() as session:
        await RantRepository(session).delete_session(user.token)


@router.get("/me", response_model=UserResponse)
async def me(user: CurrentUser = Depends(require_user)):
    """Return the signed-in user."""
    return _to_user_response(user)
