"""
Pydantic v2 request / response models used across the API layer.

Auth, Rant, Comment, Like, Speech, WebSocket, Error
"""

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, Field

# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------


class HealthResponse(BaseModel):
    """GET /health response."""

    status: str = "ok"
    version: str = "0.1.0"
    timestamp: datetime


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------


class Credentials(BaseModel):
    """POST /auth/signup and /auth/login request body."""

    email: str = Field(min_length=3, max_length=255)
    password: str = Field(min_length=6, max_length=128)


class UserResponse(BaseModel):
    """Public view of a user account."""

    id: str
    email: str
    username: str
    created_at: datetime


class SessionResponse(BaseModel):
    """Bearer session issued on sign-up / login."""

    token: str
    expires_at: datetime
    user: UserResponse


# ---------------------------------------------------------------------------
# Rant
# ---------------------------------------------------------------------------


class TranscriptStatus(StrEnum):
    """Lifecycle of asynchronous speech-to-text for a rant."""

    pending = "pending"
    complete = "complete"
    error = "error"


class RantSort(StrEnum):
    """Ordering for the public rants listing."""

    latest = "latest"
    top = "top"


class TimeRange(StrEnum):
    """Window applied to the *top* listing."""

    day = "day"
    week = "week"
    month = "month"
    year = "year"
    all = "all"


class RantResponse(BaseModel):
    """Standard rant representation returned by the API.

    ``owner_name`` is ``"Anonymous"`` for anonymous rants and the owner's
    username otherwise. ``owner_id`` is hidden for anonymous rants unless
    the caller is the owner.
    """

    id: str
    owner_id: str | None = None
    owner_name: str
    title: str
    transcript: str | None = None
    transcript_status: TranscriptStatus
    is_private: bool = False
    anonymous: bool = False
    audio_url: str | None = None
    views: int = 0
    created_at: datetime


class DeleteRantResponse(BaseModel):
    """DELETE /rants/{id} response."""

    rant_id: str
    db_deleted: bool = True
    audio_deleted: bool = False


# ---------------------------------------------------------------------------
# Comment
# ---------------------------------------------------------------------------


class CommentCreate(BaseModel):
    """POST /rants/{id}/comments request body."""

    text: str = Field(min_length=1, max_length=2000)
    parent_id: str | None = None
    anonymous: bool = False


class CommentResponse(BaseModel):
    """A single comment, optionally carrying its direct replies."""

    id: str
    rant_id: str
    author_id: str | None = None
    author_name: str
    parent_id: str | None = None
    text: str
    anonymous: bool = False
    likes: int = 0
    liked_by_me: bool = False
    created_at: datetime
    replies: list["CommentResponse"] = Field(default_factory=list)


class LikeToggleResponse(BaseModel):
    """POST /comments/{id}/like response."""

    comment_id: str
    liked: bool
    likes: int


# ---------------------------------------------------------------------------
# Speech
# ---------------------------------------------------------------------------


class TranscribeRequest(BaseModel):
    """POST /speech/transcribe request body."""

    rant_id: str | None = None


class TranscribeResponse(BaseModel):
    """POST /speech/transcribe response."""

    message: str
    transcript: str | None = None
    transcript_status: TranscriptStatus


# ---------------------------------------------------------------------------
# WebSocket
# ---------------------------------------------------------------------------


class WebSocketMessageType(StrEnum):
    """Discriminator for messages sent over the recording WebSocket."""

    recording = "recording"
    countdown = "countdown"
    saved = "saved"
    error = "error"


class WebSocketMessage(BaseModel):
    """JSON message sent from server to client over WebSocket."""

    type: WebSocketMessageType
    data: dict = Field(default_factory=dict)


# ---------------------------------------------------------------------------
# Error
# ---------------------------------------------------------------------------


class ErrorResponse(BaseModel):
    """Standard error envelope returned by the API."""

    detail: str
    code: str
    timestamp: str
