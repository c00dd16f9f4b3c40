"""
Category service: list and create.

Categories are never updated or deleted.  Name uniqueness (case-sensitive)
is enforced by the unique index on ``categories.name``: the insert either
succeeds or fails atomically, and a failure is reported as ConflictError
with nothing written.  No existence query runs before the insert.
"""
import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.cache import cache
from app.config import settings
from app.errors import ConflictError
from app.models import Category
from app.validation import clean_text, raise_for_errors, text_error

logger = logging.getLogger(__name__)


def _category_to_dict(category: Category) -> dict:
    return {"id": category.id, "name": category.name}


async def list_categories(db: AsyncSession) -> list[dict]:
    cached = await cache.get(cache.CATEGORIES_KEY)
    if cached is not None:
        return cached

    result = await db.execute(select(Category).order_by(Category.id))
    categories = [_category_to_dict(c) for c in result.scalars().all()]
    await cache.set(cache.CATEGORIES_KEY, categories, ttl=settings.CACHE_TTL_LIST)
    return categories


async def create_category(db: AsyncSession, name) -> dict:
    raise_for_errors(text_error("name", name, "Name is required"))

    category = Category(name=clean_text(name))
    db.add(category)
    try:
        await db.flush()
    except IntegrityError:
        # The failed INSERT leaves the transaction unusable.
        await db.rollback()
        raise ConflictError("Category already exists")

    await cache.invalidate_categories()
    logger.info("Created category %s (%r)", category.id, category.name)
    return _category_to_dict(category)
