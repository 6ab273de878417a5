"""
Storage module - Database and blob storage operations.
"""

from src.services.storage.blob import BlobStore
from src.services.storage.database import (
    Base,
    close_db,
    get_engine,
    get_session,
    init_db,
    reset_engine,
)
from src.services.storage.models_db import AuthSession, Comment, CommentLike, Rant, User
from src.services.storage.repository import RantRepository

__all__ = [
    "AuthSession",
    "Base",
    "BlobStore",
    "Comment",
    "CommentLike",
    "Rant",
    "RantRepository",
    "User",
    "close_db",
    "get_engine",
    "get_session",
    "init_db",
    "reset_engine",
]
