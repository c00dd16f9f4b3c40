"""
Bearer-token identity.

Requests that write carry ``Authorization: Bearer <jwt>``.  The token is
an HS256 JWT whose ``sub`` claim is the acting user's id; the services
only ever see that id.  Tokens are issued elsewhere; ``create_access_token``
exists for local seeding and tests.
"""
import logging
from datetime import datetime, timedelta, timezone

import jwt

from app.config import settings
from app.errors import Unauthenticated
from app.ids import is_valid_id

logger = logging.getLogger(__name__)


def create_access_token(user_id: str, ttl_minutes: int | None = None) -> str:
    now = datetime.now(timezone.utc)
    ttl = timedelta(minutes=ttl_minutes or settings.ACCESS_TOKEN_TTL_MINUTES)
    payload = {"sub": user_id, "iat": now, "exp": now + ttl}
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> str:
    """Return the user id carried by *token*, or raise Unauthenticated."""
    try:
        claims = jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.JWT_ALGORITHM],
            options={"require": ["sub", "exp"]},
        )
    except jwt.ExpiredSignatureError:
        raise Unauthenticated("Token expired")
    except jwt.PyJWTError as exc:
        logger.debug("Rejected token: %s", exc)
        raise Unauthenticated("Invalid token")

    user_id = claims.get("sub")
    if not is_valid_id(user_id):
        raise Unauthenticated("Invalid token")
    return user_id
