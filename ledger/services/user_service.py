"""
User service — the identity store.

The ledger core depends on exactly one operation here: user_exists(), which
account creation and re-assignment use to validate the owner. The remaining
functions back the /users endpoints.

Deleting a user does not touch the accounts it owns. Those accounts keep
their user_id and simply point at nothing until re-assigned.
"""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ledger.exceptions import DuplicateUserError, UserNotFoundError
from ledger.models.user import User
from ledger.security import hash_password

logger = logging.getLogger(__name__)


async def user_exists(db: AsyncSession, user_id: int) -> bool:
    """Return True if a user with this id exists."""
    result = await db.execute(select(User.id).where(User.id == user_id))
    return result.scalar_one_or_none() is not None


async def _ensure_unique(
    db: AsyncSession,
    username: str | None,
    email: str | None,
    exclude_id: int | None = None,
) -> None:
    """Raise DuplicateUserError if username or email belongs to another user."""
    for field, column, value in (
        ("username", User.username, username),
        ("email", User.email, email),
    ):
        if value is None:
            continue
        query = select(User.id).where(column == value)
        if exclude_id is not None:
            query = query.where(User.id != exclude_id)
        result = await db.execute(query)
        if result.scalar_one_or_none() is not None:
            raise DuplicateUserError(field, value)


async def create_user(
    db: AsyncSession,
    username: str,
    email: str,
    password: str,
) -> User:
    """
    Register a new user.

    Raises:
        DuplicateUserError: If the username or email is already taken.
    """
    await _ensure_unique(db, username, email)

    user = User(
        username=username,
        email=email,
        hashed_password=hash_password(password),
    )
    db.add(user)
    await db.flush()
    logger.info("Created user %s (%s)", user.id, username)
    return user


async def get_user(db: AsyncSession, user_id: int) -> User:
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()

    if user is None:
        raise UserNotFoundError(user_id)

    return user


async def list_users(db: AsyncSession) -> list[User]:
    result = await db.execute(select(User).order_by(User.id))
    return list(result.scalars().all())


async def update_user(
    db: AsyncSession,
    user_id: int,
    username: str | None = None,
    email: str | None = None,
    password: str | None = None,
) -> User:
    """
    Partially update a user. Fields left as None are unchanged.

    Raises:
        UserNotFoundError: If the user doesn't exist.
        DuplicateUserError: If the new username or email is taken by someone else.
    """
    user = await get_user(db, user_id)
    await _ensure_unique(db, username, email, exclude_id=user_id)

    if username is not None:
        user.username = username
    if email is not None:
        user.email = email
    if password is not None:
        user.hashed_password = hash_password(password)

    await db.flush()
    return user


async def delete_user(db: AsyncSession, user_id: int) -> User:
    """Remove a user. Accounts owned by the user are left untouched."""
    user = await get_user(db, user_id)
    await db.delete(user)
    await db.flush()
    logger.info("Deleted user %s", user_id)
    return user
