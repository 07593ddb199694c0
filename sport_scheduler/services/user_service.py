"""
User service layer for account database operations.
"""

from typing import Optional, Dict
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sport_scheduler.database.models import User, UserRole
from sport_scheduler.services import auth_service
from sport_scheduler.services.errors import InvalidInput, NotFound
import logging

logger = logging.getLogger(__name__)


async def create_user(
    session: AsyncSession,
    name: str,
    email: str,
    password_hash: str,
    role: str = UserRole.PLAYER.value,
) -> int:
    """
    Create a new user account.

    Args:
        session: Database session
        name: Display name
        email: Email address (will be normalized to lowercase)
        password_hash: Hashed password
        role: "player" or "admin"

    Returns:
        User ID of the created user

    Raises:
        InvalidInput: If the role is unknown, the name is blank or the email is taken
    """
    if role not in {r.value for r in UserRole}:
        raise InvalidInput("Invalid role. Must be player or admin")
    if not name or not name.strip():
        raise InvalidInput("Name is required")
    if not email or not email.strip():
        raise InvalidInput("Email is required")

    email = auth_service.normalize_email(email)
    result = await session.execute(select(User.id).where(User.email == email))
    if result.scalar_one_or_none():
        raise InvalidInput("User already exists")

    new_user = User(
        name=name.strip(), email=email, password_hash=password_hash, role=UserRole(role)
    )
    session.add(new_user)
    try:
        await session.flush()
    except IntegrityError:
        # Lost a race with a concurrent signup for the same email
        await session.rollback()
        raise InvalidInput("User already exists")
    user_id = new_user.id
    await session.commit()

    logger.info(f"Created {role} user {user_id}")
    return user_id


async def get_user_by_id(session: AsyncSession, user_id: int) -> Optional[Dict]:
    """
    Get user by ID.

    Args:
        session: Database session
        user_id: User ID

    Returns:
        User dictionary or None if not found
    """
    result = await session.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    return _user_to_dict(user) if user else None


async def get_user_by_email(session: AsyncSession, email: str) -> Optional[Dict]:
    """
    Get user by email address.

    Args:
        session: Database session
        email: Email address (will be normalized to lowercase)

    Returns:
        User dictionary (including password_hash) or None if not found
    """
    email = auth_service.normalize_email(email) if email else None
    if not email:
        return None

    result = await session.execute(select(User).where(User.email == email).limit(1))
    user = result.scalar_one_or_none()
    return _user_to_dict(user) if user else None


async def update_profile(
    session: AsyncSession,
    user_id: int,
    name: Optional[str] = None,
    current_password: Optional[str] = None,
    new_password: Optional[str] = None,
) -> Dict:
    """
    Update a user's name and/or password.

    A new password requires the correct current password. A current password
    sent without a new one is still verified.

    Raises:
        NotFound: If the user does not exist
        InvalidInput: On a wrong current password, a weak new password or no changes
    """
    result = await session.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if user is None:
        raise NotFound("User not found")

    if new_password or current_password:
        if not auth_service.verify_password(current_password, user.password_hash):
            raise InvalidInput("Current password is incorrect")

    changed = False
    if name and name.strip():
        user.name = name.strip()
        changed = True
    if new_password:
        auth_service.validate_password(new_password)
        user.password_hash = auth_service.hash_password(new_password)
        changed = True

    if not changed:
        raise InvalidInput("No changes provided")

    await session.commit()
    await session.refresh(user)
    logger.info(f"Updated profile for user {user_id}")
    return _user_to_dict(user)


def _user_to_dict(user: User) -> Dict:
    """
    Convert a User ORM instance to a dictionary.

    Args:
        user: User ORM instance

    Returns:
        User dictionary
    """
    return {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "password_hash": user.password_hash,
        "role": user.role.value if user.role else None,
        "created_at": user.created_at.isoformat() if user.created_at else None,
    }


def public_user(user: Dict) -> Dict:
    """Strip credential fields from a user dictionary."""
    return {key: user[key] for key in ("id", "name", "email", "role")}
