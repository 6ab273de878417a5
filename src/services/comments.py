"""Comment threading for the rant detail view."""

from collections.abc import Iterable
from typing import TypeVar

from src.core.models import CommentResponse

C = TypeVar("C", bound=CommentResponse)


def thread_comments(comments: Iterable[C]) -> list[C]:
    """Group flat comment rows into top-level comments with direct replies.

    Rows are ordered by ``created_at`` ascending (stable for ties).  Only one
    level is materialized: a reply whose parent is itself a reply, or whose
    parent is not in *comments*, is dropped from the result.
    """
    ordered = sorted(comments, key=lambda c: c.created_at)
    top_level = [c for c in ordered if c.parent_id is None]
    by_id = {c.id: c for c in top_level}

    for comment in top_level:
        comment.replies = []
    for comment in ordered:
        if comment.parent_id is None:
            continue
        parent = by_id.get(comment.parent_id)
        if parent is not None:
            comment.replies = []
            parent.replies.append(comment)
    return top_level
