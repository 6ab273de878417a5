"""
CRUD repository for all Rant to Reflection tables.

``RantRepository`` receives an ``AsyncSession`` and provides all
data-access methods.  It calls ``flush()`` rather than ``commit()`` so
that transaction boundaries are controlled by the caller (typically
:func:`get_session`).

Counter updates (``views``, ``likes``) are plain read-then-write sequences
without row locks or version columns, so concurrent requests can lose
increments.
"""

import logging
import secrets
from datetime import UTC, datetime, timedelta

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from werkzeug.security import check_password_hash, generate_password_hash

from src.core.exceptions import (
    CommentNotFoundError,
    EmailAlreadyRegisteredError,
    InvalidCredentialsError,
    InvalidRequestError,
    RantNotFoundError,
)
from src.core.models import RantSort, TimeRange, TranscriptStatus
from src.core.utils import generate_username
from src.services.storage.models_db import AuthSession, Comment, CommentLike, Rant, User

logger = logging.getLogger(__name__)

_TIME_RANGES: dict[TimeRange, timedelta | None] = {
    TimeRange.day: timedelta(days=1),
    TimeRange.week: timedelta(weeks=1),
    TimeRange.month: timedelta(days=30),
    TimeRange.year: timedelta(days=365),
    TimeRange.all: None,
}


def _utcnow_naive() -> datetime:
    # SQLite returns naive datetimes; compare in naive UTC
    return datetime.now(UTC).replace(tzinfo=None)


class RantRepository:
    """Data-access layer for the Rant to Reflection schema.

    All methods use ``flush()`` instead of ``commit()`` so transaction
    boundaries are controlled by the caller (typically ``get_session()``
    context manager which commits on clean exit).

    Args:
        session: An active SQLAlchemy ``AsyncSession``.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    # ------------------------------------------------------------------
    # Users & sessions
    # ------------------------------------------------------------------

    async def create_user(self, email: str, password: str, username: str | None = None) -> User:
        """Register a user with a hashed password and a generated username."""
        email = email.strip().lower()
        if await self.get_user_by_email(email) is not None:
            raise EmailAlreadyRegisteredError(email)
        user = User(
            email=email,
            password_hash=generate_password_hash(password),
            username=username or generate_username(),
        )
        self._session.add(user)
        await self._session.flush()
        return user

    async def get_user(self, user_id: str) -> User | None:
        """Return a user by ID, or ``None`` if not found."""
        return await self._session.get(User, user_id)

    async def get_user_by_email(self, email: str) -> User | None:
        """Return a user by (case-insensitive) email, or ``None``."""
        stmt = select(User).where(User.email == email.strip().lower())
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def authenticate(self, email: str, password: str) -> User:
        """Return the user for valid credentials or raise :class:`InvalidCredentialsError`."""
        user = await self.get_user_by_email(email)
        if user is None or not check_password_hash(user.password_hash, password):
            raise InvalidCredentialsError()
        return user

    async def create_session(self, user_id: str, ttl_hours: int) -> AuthSession:
        """Issue a new opaque bearer token for *user_id*."""
        auth_session = AuthSession(
            token=secrets.token_urlsafe(32),
            user_id=user_id,
            expires_at=_utcnow_naive() + timedelta(hours=ttl_hours),
        )
        self._session.add(auth_session)
        await self._session.flush()
        return auth_session

    async def get_session_user(self, token: str) -> User | None:
        """Resolve a bearer token to its user; expired tokens are deleted."""
        auth_session = await self._session.get(AuthSession, token)
        if auth_session is None:
            return None
        if auth_session.expires_at.replace(tzinfo=None) <= _utcnow_naive():
            await self._session.delete(auth_session)
            await self._session.flush()
            return None
        return auth_session.user

    async def delete_session(self, token: str) -> None:
        """Revoke a bearer token (no-op if it does not exist)."""
        await self._session.execute(delete(AuthSession).where(AuthSession.token == token))
        await self._session.flush()

    # ------------------------------------------------------------------
    # Rants
    # ------------------------------------------------------------------

    async def create_rant(
        self,
        owner_id: str,
        title: str,
        is_private: bool = False,
        anonymous: bool = False,
        audio_url: str | None = None,
    ) -> Rant:
        """Create and return a new rant with a *pending* transcript."""
        rant = Rant(
            owner_id=owner_id,
            title=title,
            is_private=is_private,
            anonymous=anonymous,
            audio_url=audio_url,
            transcript=None,
            transcript_status=TranscriptStatus.pending.value,
        )
        self._session.add(rant)
        await self._session.flush()
        await self._session.refresh(rant, attribute_names=["owner"])
        return rant

    async def get_rant(self, rant_id: str) -> Rant:
        """Return a rant by ID or raise :class:`RantNotFoundError`."""
        rant = await self._session.get(Rant, rant_id)
        if rant is None:
            raise RantNotFoundError(rant_id)
        return rant

    async def get_visible_rant(self, rant_id: str, viewer_id: str | None) -> Rant:
        """Return a rant the viewer may see; private rants are owner-only.

        A private rant requested by someone else is reported as not found
        so its existence is not leaked.
        """
        rant = await self.get_rant(rant_id)
        if rant.is_private and rant.owner_id != viewer_id:
            raise RantNotFoundError(rant_id)
        return rant

    async def list_public_rants(
        self,
        sort: RantSort = RantSort.latest,
        time_range: TimeRange = TimeRange.all,
        limit: int = 50,
        offset: int = 0,
    ) -> list[Rant]:
        """Return public rants, newest first or most viewed within *time_range*."""
        stmt = select(Rant).where(Rant.is_private.is_(False))
        if sort == RantSort.top:
            window = _TIME_RANGES[time_range]
            if window is not None:
                stmt = stmt.where(Rant.created_at >= _utcnow_naive() - window)
            stmt = stmt.order_by(Rant.views.desc(), Rant.created_at.desc())
        else:
            stmt = stmt.order_by(Rant.created_at.desc())
        stmt = stmt.limit(limit).offset(offset)
        result = await self._session.execute(stmt)
        return list(result.scalars().unique().all())

    async def list_user_rants(self, owner_id: str, limit: int = 50, offset: int = 0) -> list[Rant]:
        """Return every rant (public and private) owned by *owner_id*, newest first."""
        stmt = (
            select(Rant)
            .where(Rant.owner_id == owner_id)
            .order_by(Rant.created_at.desc())
            .limit(limit)
            .offset(offset)
        )
        result = await self._session.execute(stmt)
        return list(result.scalars().unique().all())

    async def increment_views(self, rant_id: str) -> Rant:
        """Bump the view counter (read-then-write, not concurrency-safe)."""
        rant = await self.get_rant(rant_id)
        rant.views = (rant.views or 0) + 1
        await self._session.flush()
        return rant

    async def update_transcript(
        self,
        rant_id: str,
        transcript: str,
        status: TranscriptStatus = TranscriptStatus.complete,
    ) -> Rant:
        """Store transcription output and its status."""
        rant = await self.get_rant(rant_id)
        rant.transcript = transcript
        rant.transcript_status = status.value
        await self._session.flush()
        return rant

    async def set_transcript_status(self, rant_id: str, status: TranscriptStatus) -> Rant:
        """Update only the transcript status of a rant."""
        rant = await self.get_rant(rant_id)
        rant.transcript_status = status.value
        await self._session.flush()
        return rant

    async def update_audio_url(self, rant_id: str, audio_url: str) -> Rant:
        """Attach an audio reference once the upload has succeeded."""
        rant = await self.get_rant(rant_id)
        rant.audio_url = audio_url
        await self._session.flush()
        return rant

    async def delete_rant(self, rant_id: str) -> str | None:
        """Delete a rant (cascading to comments and likes).

        Returns:
            The rant's audio reference so the caller can remove the blob.
        """
        rant = await self.get_rant(rant_id)
        audio_url = rant.audio_url
        comment_ids = select(Comment.id).where(Comment.rant_id == rant_id)
        await self._session.execute(
            delete(CommentLike).where(CommentLike.comment_id.in_(comment_ids))
        )
        await self._session.execute(delete(Comment).where(Comment.rant_id == rant_id))
        await self._session.delete(rant)
        await self._session.flush()
        return audio_url

    # ------------------------------------------------------------------
    # Comments
    # ------------------------------------------------------------------

    async def create_comment(
        self,
        rant_id: str,
        author: User,
        text: str,
        parent_id: str | None = None,
        anonymous: bool = False,
    ) -> Comment:
        """Create a comment; a parent must exist on the same rant."""
        await self.get_rant(rant_id)
        if parent_id is not None:
            parent = await self._session.get(Comment, parent_id)
            if parent is None or parent.rant_id != rant_id:
                raise InvalidRequestError(
                    f"Parent comment {parent_id} does not exist on rant {rant_id}"
                )
        comment = Comment(
            rant_id=rant_id,
            author_id=author.id,
            author_name=author.username,
            parent_id=parent_id,
            text=text,
            anonymous=anonymous,
            likes=0,
        )
        self._session.add(comment)
        await self._session.flush()
        return comment

    async def get_comment(self, comment_id: str) -> Comment:
        """Return a comment by ID or raise :class:`CommentNotFoundError`."""
        comment = await self._session.get(Comment, comment_id)
        if comment is None:
            raise CommentNotFoundError(comment_id)
        return comment

    async def list_comments(self, rant_id: str) -> list[Comment]:
        """Return all comments of a rant, oldest first."""
        stmt = select(Comment).where(Comment.rant_id == rant_id).order_by(Comment.created_at)
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def delete_comment(self, comment_id: str) -> None:
        """Delete a comment, its likes, and every reply beneath it."""
        comment = await self.get_comment(comment_id)
        doomed = [comment.id]
        frontier = [comment.id]
        while frontier:
            stmt = select(Comment.id).where(Comment.parent_id.in_(frontier))
            result = await self._session.execute(stmt)
            frontier = [cid for (cid,) in result.all()]
            doomed.extend(frontier)
        await self._session.execute(delete(CommentLike).where(CommentLike.comment_id.in_(doomed)))
        await self._session.execute(delete(Comment).where(Comment.id.in_(doomed)))
        await self._session.flush()

    # ------------------------------------------------------------------
    # Likes
    # ------------------------------------------------------------------

    async def has_liked(self, comment_id: str, user_id: str) -> bool:
        """Whether *user_id* currently likes *comment_id*."""
        stmt = select(CommentLike.id).where(
            CommentLike.comment_id == comment_id,
            CommentLike.user_id == user_id,
        )
        result = await self._session.execute(stmt)
        return result.first() is not None

    async def liked_comment_ids(self, rant_id: str, user_id: str) -> set[str]:
        """Return the IDs of the rant's comments that *user_id* has liked."""
        stmt = (
            select(CommentLike.comment_id)
            .join(Comment, Comment.id == CommentLike.comment_id)
            .where(Comment.rant_id == rant_id, CommentLike.user_id == user_id)
        )
        result = await self._session.execute(stmt)
        return {cid for (cid,) in result.all()}

    async def toggle_like(self, comment_id: str, user_id: str) -> tuple[bool, int]:
        """Like or unlike a comment for *user_id*.

        The join row gates the toggle; the counter is a read-then-write
        update and never drops below zero.

        Returns:
            ``(liked, likes)`` after the toggle.
        """
        comment = await self.get_comment(comment_id)
        stmt = select(CommentLike).where(
            CommentLike.comment_id == comment_id,
            CommentLike.user_id == user_id,
        )
        result = await self._session.execute(stmt)
        existing = result.scalar_one_or_none()

        if existing is None:
            self._session.add(CommentLike(comment_id=comment_id, user_id=user_id))
            comment.likes = (comment.likes or 0) + 1
            liked = True
        else:
            await self._session.delete(existing)
            comment.likes = max((comment.likes or 0) - 1, 0)
            liked = False

        await self._session.flush()
        logger.debug("Comment %s like toggled by %s -> %s", comment_id, user_id, liked)
        return liked, comment.likes
