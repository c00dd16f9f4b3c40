"""
User service: the actor records behind authenticated identities.

Comments resolve their author through this table.  Username and email
uniqueness is enforced by unique constraints; a duplicate is reported
as ConflictError.
"""
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.errors import ConflictError, NotFound
from app.models import User
from app.schemas import UserCreate
from app.validation import require_id


def _user_to_dict(user: User) -> dict:
    return {
        "id": user.id,
        "username": user.username,
        "email": user.email,
        "created_at": user.created_at.isoformat() if user.created_at else None,
    }


async def get_user(db: AsyncSession, user_id: str) -> dict:
    require_id("id", user_id)
    user = await db.get(User, user_id)
    if user is None:
        raise NotFound("User not found")
    return _user_to_dict(user)


async def create_user(db: AsyncSession, data: UserCreate) -> dict:
    user = User(username=data.username, email=data.email)
    db.add(user)
    try:
        await db.flush()
    except IntegrityError:
        await db.rollback()
        raise ConflictError("A user with this username or email already exists")
    return _user_to_dict(user)
