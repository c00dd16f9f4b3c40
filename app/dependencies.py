from fastapi import Depends, Query
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.auth import decode_access_token
from app.errors import Unauthenticated
from app.query import PostQuery
from app.references import ReferencePolicy, default_policy
from app.storage import ImageStorage, default_storage

_bearer = HTTPBearer(auto_error=False)


class PostListParams:
    """
    FastAPI dependency that reads the post list query string.

    ``page`` and ``limit`` are taken as raw strings so that a missing,
    non-numeric or non-positive value falls back to the default instead of
    producing a 4xx.  A valid ``limit`` is used as given.

    Usage::

        @router.get("")
        async def list_posts(params: PostListParams = Depends()):
            ...
    """

    def __init__(
        self,
        page: str | None = Query(None, description="Page number (1-based)."),
        limit: str | None = Query(None, description="Posts per page."),
        search: str | None = Query(
            None, description="Case-insensitive substring of title or content."
        ),
        category: str | None = Query(None, description="Only posts in this category id."),
    ) -> None:
        self.query = PostQuery.from_params(page, limit, search, category)


async def get_current_user_id(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
) -> str:
    """The authenticated actor's user id; raises Unauthenticated without one."""
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise Unauthenticated()
    return decode_access_token(credentials.credentials)


def get_reference_policy() -> ReferencePolicy:
    return default_policy()


def get_image_storage() -> ImageStorage:
    return default_storage()
