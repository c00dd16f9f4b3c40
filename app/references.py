"""
Reference validity policy.

Posts point at a category and comments at a post by identifier only; there
are no foreign keys.  Whether such a reference is acceptable is decided in
one place, a ``ReferencePolicy``, which the services receive as an argument:

- ``FormatReferencePolicy`` (default) checks the identifier shape and
  nothing else.  A post may therefore name a category that does not exist,
  and a comment may be attached to a post that does not exist.
- ``ExistingReferencePolicy`` additionally requires the target to exist.

``settings.STRICT_REFERENCES`` picks between them.
"""
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.errors import FieldError
from app.ids import id_error
from app.models import Category, Post


class ReferencePolicy:
    """Decides whether a category or post reference may be stored."""

    async def check_category(self, db: AsyncSession, category_id) -> FieldError | None:
        raise NotImplementedError

    async def check_post(self, db: AsyncSession, post_id) -> FieldError | None:
        raise NotImplementedError


class FormatReferencePolicy(ReferencePolicy):
    """Accept any well-formed identifier without looking it up."""

    async def check_category(self, db: AsyncSession, category_id) -> FieldError | None:
        return id_error("category", category_id, "Valid category is required")

    async def check_post(self, db: AsyncSession, post_id) -> FieldError | None:
        return id_error("post_id", post_id, "Invalid post id")


class ExistingReferencePolicy(FormatReferencePolicy):
    """Well-formed and pointing at an existing record."""

    async def check_category(self, db: AsyncSession, category_id) -> FieldError | None:
        error = await super().check_category(db, category_id)
        if error is None and not await _exists(db, Category, category_id):
            error = FieldError("category", "Category does not exist")
        return error

    async def check_post(self, db: AsyncSession, post_id) -> FieldError | None:
        error = await super().check_post(db, post_id)
        if error is None and not await _exists(db, Post, post_id):
            error = FieldError("post_id", "Post does not exist")
        return error


async def _exists(db: AsyncSession, model, record_id: str) -> bool:
    result = await db.execute(select(model.id).where(model.id == record_id))
    return result.scalar_one_or_none() is not None


def default_policy() -> ReferencePolicy:
    if settings.STRICT_REFERENCES:
        return ExistingReferencePolicy()
    return FormatReferencePolicy()
