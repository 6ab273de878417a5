"""
SQLAlchemy ORM models for the Rant to Reflection schema.

Tables: ``users``, ``auth_sessions``, ``rants``, ``comments``, ``comment_likes``.
"""

import uuid
from datetime import UTC, datetime

from sqlalchemy import Boolean, ForeignKey, Index, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.services.storage.database import Base


def _new_id() -> str:
    return str(uuid.uuid4())


def _now() -> datetime:
    return datetime.now(UTC)


class User(Base):
    """A registered account."""

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    password_hash: Mapped[str] = mapped_column(String(255))
    username: Mapped[str] = mapped_column(String(64))
    created_at: Mapped[datetime] = mapped_column(default=_now)

    rants: Mapped[list["Rant"]] = relationship(
        back_populates="owner",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<User id={self.id} username={self.username!r}>"


class AuthSession(Base):
    """An opaque bearer token issued at sign-up / login."""

    __tablename__ = "auth_sessions"

    token: Mapped[str] = mapped_column(String(128), primary_key=True)
    user_id: Mapped[str] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    created_at: Mapped[datetime] = mapped_column(default=_now)
    expires_at: Mapped[datetime] = mapped_column()

    user: Mapped["User"] = relationship(lazy="joined")

    def __repr__(self) -> str:
        return f"<AuthSession user={self.user_id} expires={self.expires_at}>"


class Rant(Base):
    """A user-submitted voice entry, optionally public, optionally anonymous."""

    __tablename__ = "rants"
    __table_args__ = (Index("ix_rants_private_created", "is_private", "created_at"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    owner_id: Mapped[str] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    title: Mapped[str] = mapped_column(String(255))
    transcript: Mapped[str | None] = mapped_column(Text, nullable=True)
    transcript_status: Mapped[str] = mapped_column(String(20), default="pending", index=True)
    is_private: Mapped[bool] = mapped_column(Boolean, default=False)
    anonymous: Mapped[bool] = mapped_column(Boolean, default=False)
    audio_url: Mapped[str | None] = mapped_column(String(512), nullable=True)
    views: Mapped[int] = mapped_column(default=0)
    created_at: Mapped[datetime] = mapped_column(default=_now)

    owner: Mapped["User"] = relationship(back_populates="rants", lazy="joined")
    comments: Mapped[list["Comment"]] = relationship(
        back_populates="rant",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<Rant id={self.id} status={self.transcript_status!r}>"


class Comment(Base):
    """A comment on a rant; ``parent_id`` points at the comment it replies to."""

    __tablename__ = "comments"
    __table_args__ = (Index("ix_comments_rant_created", "rant_id", "created_at"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    rant_id: Mapped[str] = mapped_column(ForeignKey("rants.id", ondelete="CASCADE"))
    author_id: Mapped[str] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"))
    author_name: Mapped[str] = mapped_column(String(64))
    parent_id: Mapped[str | None] = mapped_column(
        ForeignKey("comments.id", ondelete="CASCADE"), nullable=True
    )
    text: Mapped[str] = mapped_column(Text)
    anonymous: Mapped[bool] = mapped_column(Boolean, default=False)
    likes: Mapped[int] = mapped_column(default=0)
    created_at: Mapped[datetime] = mapped_column(default=_now)

    rant: Mapped["Rant"] = relationship(back_populates="comments")
    like_rows: Mapped[list["CommentLike"]] = relationship(
        back_populates="comment",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<Comment id={self.id} rant={self.rant_id} parent={self.parent_id}>"


class CommentLike(Base):
    """Join row recording that a user liked a comment."""

    __tablename__ = "comment_likes"
    __table_args__ = (UniqueConstraint("comment_id", "user_id", name="uq_comment_user_like"),)

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    comment_id: Mapped[str] = mapped_column(ForeignKey("comments.id", ondelete="CASCADE"))
    user_id: Mapped[str] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    created_at: Mapped[datetime] = mapped_column(default=_now)

    comment: Mapped["Comment"] = relationship(back_populates="like_rows")

    def __repr__(self) -> str:
        return f"<CommentLike comment={self.comment_id} user={self.user_id}>"
