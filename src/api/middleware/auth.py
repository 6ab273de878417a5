"""
Session authentication middleware.

Resolves ``Authorization: Bearer <token>`` headers on ``/api/v1/`` routes
to the signed-in user and stores it on ``request.state.user``.  Requests
without a header pass through anonymously; a header carrying an unknown or
expired token is rejected with 401.  Endpoints that need a user call
:func:`require_user`.
"""

import logging
from dataclasses import dataclass
from datetime import datetime

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from src.api.middleware.error_handler import error_envelope
from src.core.exceptions import AuthenticationError
from src.services.storage.database import get_session
from src.services.storage.repository import RantRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CurrentUser:
    """Snapshot of the authenticated user, detached from the DB session."""

    id: str
    email: str
    username: str
    created_at: datetime
    token: str


def bearer_token(header: str | None) -> str | None:
    """Extract the token from an ``Authorization`` header value."""
    if not header or not header.startswith("Bearer "):
        return None
    return header[len("Bearer ") :].strip() or None


async def resolve_user(token: str) -> CurrentUser | None:
    """Look up the user owning *token*, or ``None`` if invalid/expired."""
    async with get_session() as session:
        user = await RantRepository(session).get_session_user(token)
        if user is None:
            return None
        return CurrentUser(
            id=user.id,
            email=user.email,
            username=user.username,
            created_at=user.created_at,
            token=token,
        )


class SessionAuthMiddleware(BaseHTTPMiddleware):
    """Attach the bearer session's user to every /api/v1/ request."""

    _SKIP_PATHS = ("/api/v1/health", "/api/v1/auth/signup", "/api/v1/auth/login")

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request.state.user = None
        path = request.url.path

        # Only /api/v1/ carries sessions; docs, health and /ws/ are handled elsewhere
        if not path.startswith("/api/v1/") or path in self._SKIP_PATHS:
            return await call_next(request)

        token = bearer_token(request.headers.get("authorization"))
        if token is None:
            return await call_next(request)

        user = await resolve_user(token)
        if user is None:
            logger.info("Rejected invalid session token on %s", path)
            return JSONResponse(
                status_code=401,
                content=error_envelope("Invalid or expired session", "AUTH_REQUIRED"),
            )

        request.state.user = user
        return await call_next(request)


def optional_user(request: Request) -> CurrentUser | None:
    """FastAPI dependency: the signed-in user, if any."""
    return getattr(request.state, "user", None)


def require_user(request: Request) -> CurrentUser:
    """FastAPI dependency: the signed-in user, or 401."""
    user = optional_user(request)
    if user is None:
        raise AuthenticationError()
    return user
