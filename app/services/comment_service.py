"""
Comment service: list, create and author-only delete.

A comment's author is the authenticated actor that created it.  Only
that same actor may delete it: ``comment.user_id == actor_id``, compared
exactly, with no role that bypasses the check.

The post a comment points at is checked by the injected
``ReferencePolicy``; with the default policy only the id format is
validated, so a comment may reference a post that does not exist.

Authors are exposed as ``{"id", "username"}`` and nothing more.
"""
import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload

from app.errors import Forbidden, NotFound
from app.models import Comment
from app.references import ReferencePolicy, default_policy
from app.validation import clean_text, raise_for_errors, require_id, text_error

logger = logging.getLogger(__name__)


def _comment_to_dict(comment: Comment) -> dict:
    author = comment.author
    return {
        "id": comment.id,
        "post_id": comment.post_id,
        "user": {"id": author.id, "username": author.username} if author else None,
        "content": comment.content,
        "created_at": comment.created_at.isoformat() if comment.created_at else None,
    }


async def list_comments(db: AsyncSession, post_id: str) -> list[dict]:
    """Comments on *post_id* in creation order.  The post need not exist."""
    require_id("post_id", post_id)
    q = (
        select(Comment)
        .where(Comment.post_id == post_id)
        .options(joinedload(Comment.author))
        .order_by(Comment.id)
    )
    result = await db.execute(q)
    return [_comment_to_dict(c) for c in result.scalars().all()]


async def create_comment(
    db: AsyncSession,
    post_id: str,
    actor_id: str,
    content,
    *,
    policy: ReferencePolicy | None = None,
) -> dict:
    policy = policy or default_policy()
    raise_for_errors(
        await policy.check_post(db, post_id),
        text_error("content", content),
    )

    comment = Comment(post_id=post_id, user_id=actor_id, content=clean_text(content))
    db.add(comment)
    await db.flush()

    q = (
        select(Comment)
        .where(Comment.id == comment.id)
        .options(joinedload(Comment.author))
        .execution_options(populate_existing=True)
    )
    comment = (await db.execute(q)).scalar_one()
    logger.info("User %s commented on post %s (comment %s)", actor_id, post_id, comment.id)
    return _comment_to_dict(comment)


async def delete_comment(db: AsyncSession, comment_id: str, actor_id: str) -> dict:
    require_id("id", comment_id)
    comment = await db.get(Comment, comment_id)
    if comment is None:
        raise NotFound("Comment not found")
    if comment.user_id != actor_id:
        logger.info("User %s refused deletion of comment %s", actor_id, comment_id)
        raise Forbidden("Not authorized")

    await db.delete(comment)
    await db.flush()
    logger.info("User %s deleted comment %s", actor_id, comment_id)
    return {"message": "Comment deleted"}
