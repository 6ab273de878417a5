"""
Comment and like endpoints.

Comments are listed as a one-level thread (top-level comments with their
direct replies).  Likes are toggled per user via the ``comment_likes`` join
table.
"""

import logging

from fastapi import APIRouter, Depends

from src.api.middleware.auth import CurrentUser, optional_user, require_user
from src.core.exceptions import ForbiddenError
from src.core.models import CommentCreate, CommentResponse, LikeToggleResponse
from src.services.comments import thread_comments
from src.services.storage.database import get_session
from src.services.storage.repository import RantRepository

logger = logging.getLogger(__name__)

router = APIRouter(tags=["comments"])


def to_comment_response(
    comment, viewer_id: str | None = None, liked: bool = False
) -> CommentResponse:
    """Convert an ORM Comment to its API model, masking anonymous authors."""
    is_author = viewer_id is not None and comment.author_id == viewer_id
    return CommentResponse(
        id=comment.id,
        rant_id=comment.rant_id,
        author_id=comment.author_id if (not comment.anonymous or is_author) else None,
        author_name="Anonymous" if comment.anonymous else comment.author_name,
        parent_id=comment.parent_id,
        text=comment.text,
        anonymous=comment.anonymous,
        likes=comment.likes,
        liked_by_me=liked,
        created_at=comment.created_at,
    )


@router.get("/rants/{rant_id}/comments", response_model=list[CommentResponse])
async def list_comments(rant_id: str, viewer: CurrentUser | None = Depends(optional_user)):
    """Return the rant's comments as a thread."""
    viewer_id = viewer.id if viewer else None
    async with get_session() as session:
        repo = RantRepository(session)
        await repo.get_visible_rant(rant_id, viewer_id)
        comments = await repo.list_comments(rant_id)
        liked = await repo.liked_comment_ids(rant_id, viewer_id) if viewer_id else set()
    return thread_comments(
        to_comment_response(c, viewer_id, c.id in liked) for c in comments
    )


@router.post("/rants/{rant_id}/comments", response_model=CommentResponse, status_code=201)
async def create_comment(
    rant_id: str,
    body: CommentCreate,
    user: CurrentUser = Depends(require_user),
):
    """Comment on a rant, optionally as a reply to another comment."""
    async with get_session() as session:
        repo = RantRepository(session)
        await repo.get_visible_rant(rant_id, user.id)
        author = await repo.get_user(user.id)
        comment = await repo.create_comment(
            rant_id,
            author,
            body.text.strip(),
            parent_id=body.parent_id,
            anonymous=body.anonymous,
        )
        return to_comment_response(comment, user.id)


@router.delete("/comments/{comment_id}", status_code=204)
async def delete_comment(comment_id: str, user: CurrentUser = Depends(require_user)):
    """Delete one of your own comments (and its replies)."""
    async with get_session() as session:
        repo = RantRepository(session)
        comment = await repo.get_comment(comment_id)
        if comment.author_id != user.id:
            raise ForbiddenError("Only the author can delete this comment")
        await repo.delete_comment(comment_id)
    logger.info("Comment %s deleted by %s", comment_id, user.id)


@router.post("/comments/{comment_id}/like", response_model=LikeToggleResponse)
async def toggle_like(comment_id: str, user: CurrentUser = Depends(require_user)):
    """Like the comment, or unlike it if already liked."""
    async with get_session() as session:
        repo = RantRepository(session)
        comment = await repo.get_comment(comment_id)
        await repo.get_visible_rant(comment.rant_id, user.id)
        liked, likes = await repo.toggle_like(comment_id, user.id)
    return LikeToggleResponse(comment_id=comment_id, liked=liked, likes=likes)
