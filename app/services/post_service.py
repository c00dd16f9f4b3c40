"""
Post service: listing, detail and writes for the Post resource.

Design notes
------------
- Lists and detail reads go through the Redis cache-aside layer; every
  write drops the list pages and the touched detail entry.
- The category is a read-time join (``joinedload``) on a plain id
  column.  A post whose category id points nowhere is returned with
  ``category: None``.
- Whether a category reference is acceptable on write is decided by the
  injected ``ReferencePolicy``; by default only its format is checked.
- Any authenticated caller may update or delete any post.  Comments, by
  contrast, can only be deleted by their author.
- All checks run before the image is stored or a row is written.
- Service functions flush but do not commit; ``get_db`` owns the
  transaction.
"""
import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload

from app.cache import cache
from app.config import settings
from app.errors import NotFound
from app.models import Post
from app.query import PostQuery
from app.references import ReferencePolicy, default_policy
from app.schemas import PaginatedResponse, PostCreate, PostUpdate
from app.storage import ImageStorage, ImageUpload, default_storage
from app.validation import clean_text, raise_for_errors, require_id, text_error

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Serialisation helpers
# ---------------------------------------------------------------------------

def _post_to_dict(post: Post) -> dict:
    category = post.category
    return {
        "id": post.id,
        "title": post.title,
        "content": post.content,
        "category_id": post.category_id,
        "category": {"id": category.id, "name": category.name} if category else None,
        "featured_image": post.featured_image,
        "created_at": post.created_at.isoformat() if post.created_at else None,
        "updated_at": post.updated_at.isoformat() if post.updated_at else None,
    }


async def _load_post(db: AsyncSession, post_id: str) -> Post:
    q = (
        select(Post)
        .where(Post.id == post_id)
        .options(joinedload(Post.category))
        .execution_options(populate_existing=True)
    )
    post = (await db.execute(q)).scalar_one_or_none()
    if post is None:
        raise NotFound("Post not found")
    return post


async def _store_image(image: ImageUpload | None, storage: ImageStorage | None) -> str | None:
    if image is None:
        return None
    return await (storage or default_storage()).save(image)


# ---------------------------------------------------------------------------
# Public service functions
# ---------------------------------------------------------------------------

async def list_posts(db: AsyncSession, query: PostQuery | None = None) -> PaginatedResponse:
    """
    Return one page of posts matching *query*, in id (creation) order.

    ``total`` counts every matching post; ``items`` holds at most
    ``query.limit`` of them.
    """
    query = query or PostQuery.from_params()
    cache_key = cache.posts_list_key(query.page, query.limit, query.search, query.category)
    cached = await cache.get(cache_key)
    if cached:
        return PaginatedResponse(**cached)

    conditions = query.conditions()
    count_q = select(func.count()).select_from(Post).where(*conditions)
    total: int = (await db.execute(count_q)).scalar_one()

    posts_q = (
        select(Post)
        .where(*conditions)
        .options(joinedload(Post.category))
        .order_by(Post.id)
        .offset(query.skip)
        .limit(query.limit)
    )
    posts = (await db.execute(posts_q)).scalars().all()

    response = PaginatedResponse(
        items=[_post_to_dict(p) for p in posts],
        total=total,
        page=query.page,
        limit=query.limit,
        pages=query.total_pages(total),
    )
    await cache.set(cache_key, response.model_dump(mode="json"), ttl=settings.CACHE_TTL_LIST)
    return response


async def get_post(db: AsyncSession, post_id: str) -> dict:
    require_id("id", post_id)
    cache_key = cache.post_detail_key(post_id)
    cached = await cache.get(cache_key)
    if cached:
        return cached

    data = _post_to_dict(await _load_post(db, post_id))
    await cache.set(cache_key, data, ttl=settings.CACHE_TTL_DETAIL)
    return data


async def create_post(
    db: AsyncSession,
    data: PostCreate,
    image: ImageUpload | None = None,
    *,
    storage: ImageStorage | None = None,
    policy: ReferencePolicy | None = None,
) -> dict:
    """
    Create a post.  Title, content and category are checked together and
    every failing field is reported in one ValidationError.
    """
    policy = policy or default_policy()
    raise_for_errors(
        text_error("title", data.title),
        text_error("content", data.content),
        await policy.check_category(db, data.category),
    )

    image_ref = await _store_image(image, storage)
    post = Post(
        title=clean_text(data.title),
        content=clean_text(data.content),
        category_id=data.category,
        featured_image=image_ref or "",
    )
    db.add(post)
    await db.flush()

    await cache.invalidate_posts()
    logger.info("Created post %s in category %s", post.id, post.category_id)
    return _post_to_dict(await _load_post(db, post.id))


async def update_post(
    db: AsyncSession,
    post_id: str,
    data: PostUpdate,
    image: ImageUpload | None = None,
    *,
    storage: ImageStorage | None = None,
    policy: ReferencePolicy | None = None,
) -> dict:
    """
    Replace the fields supplied in *data* (and the image, if given).

    An update with no fields and no image returns the post unchanged.
    No ownership check is made.
    """
    require_id("id", post_id)
    policy = policy or default_policy()
    fields = data.supplied()
    raise_for_errors(
        text_error("title", fields["title"]) if "title" in fields else None,
        text_error("content", fields["content"]) if "content" in fields else None,
        await policy.check_category(db, fields["category"]) if "category" in fields else None,
    )

    post = await _load_post(db, post_id)
    if not fields and image is None:
        return _post_to_dict(post)

    image_ref = await _store_image(image, storage)
    if "title" in fields:
        post.title = clean_text(fields["title"])
    if "content" in fields:
        post.content = clean_text(fields["content"])
    if "category" in fields:
        post.category_id = fields["category"]
    if image_ref:
        post.featured_image = image_ref
    await db.flush()

    await cache.invalidate_posts(post_id)
    logger.info("Updated post %s (%s)", post_id, ", ".join(sorted(fields)) or "image")
    return _post_to_dict(await _load_post(db, post_id))


async def delete_post(db: AsyncSession, post_id: str) -> dict:
    """Delete a post; its comments are left in place.  No ownership check."""
    require_id("id", post_id)
    post = await db.get(Post, post_id)
    if post is None:
        raise NotFound("Post not found")

    await db.delete(post)
    await db.flush()
    await cache.invalidate_posts(post_id)
    logger.info("Deleted post %s", post_id)
    return {"message": "Post deleted"}
