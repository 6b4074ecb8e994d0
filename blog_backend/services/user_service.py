"""
User service: read, edit and remove for the User aggregate.

Users are registered elsewhere; this service never creates them.  Removal
is delegated to the cascade module because it touches sessions, articles
and comments as well.
"""
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from blog_backend.models import User
from blog_backend.schemas import UserUpdate
from blog_backend.services import cascade


# ---------------------------------------------------------------------------
# Serialisation helpers
# ---------------------------------------------------------------------------

def user_to_dict(user: User | None) -> dict | None:
    """Serialise a User ORM instance; ``None`` passes through."""
    if user is None:
        return None
    return {
        "id": user.id,
        "username": user.username,
        "email": user.email,
        "display_name": user.display_name,
        "bio": user.bio,
        "is_removed": user.is_removed,
        "created_at": user.created_at.isoformat() if user.created_at else None,
    }


# ---------------------------------------------------------------------------
# Public service functions
# ---------------------------------------------------------------------------

async def get_user(db: AsyncSession, user_id: int) -> dict | None:
    """Return the user dict, or None when no such user exists."""
    result = await db.execute(select(User).where(User.id == user_id))
    return user_to_dict(result.scalar_one_or_none())


async def update_user(db: AsyncSession, user_id: int, data: UserUpdate) -> dict | None:
    """
    Apply the fields set in *data* and return the updated user dict.

    Returns None when the user does not exist.  Username/email clashes
    surface as ``IntegrityError`` on flush; the router maps them to 409.
    """
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if user is None:
        return None

    for field, value in data.model_dump(exclude_unset=True).items():
        setattr(user, field, value)

    await db.flush()
    return user_to_dict(user)


async def remove_user(db: AsyncSession, user_id: int) -> dict | None:
    """Soft-delete the user and cascade; None when the user does not exist."""
    return user_to_dict(await cascade.remove_user(db, user_id))
