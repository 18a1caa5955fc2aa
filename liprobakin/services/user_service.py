"""
User service layer for account, profile and refresh token database operations.
"""

import logging
from datetime import datetime
from typing import Dict, Optional

import pytz
from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession

from liprobakin.database.models import User, RefreshToken, Team, RosterPlayer
from liprobakin.utils.constants import FAN_ROLE
from liprobakin.utils.datetime_utils import utcnow, isoformat_or_none

logger = logging.getLogger(__name__)


async def create_user(
    session: AsyncSession,
    email: str,
    password_hash: str,
    first_name: str,
    last_name: str,
    phone_number: Optional[str] = None,
    commit: bool = True,
) -> int:
    """
    Create a new user account.

    first_name/last_name are the account's identity and are never changed
    by profile setup or verification.

    Args:
        session: Database session
        email: Normalized email address
        password_hash: bcrypt hash
        first_name: Given name from sign-up
        last_name: Family name from sign-up
        phone_number: Optional phone number
        commit: Commit immediately; pass False to join a larger transaction

    Returns:
        User ID of the created user

    Raises:
        ValueError: If the email is already registered or a name is blank
    """
    if not first_name or not first_name.strip() or not last_name or not last_name.strip():
        raise ValueError("First and last name are required")

    result = await session.execute(select(User.id).where(User.email == email))
    if result.scalar_one_or_none():
        raise ValueError(f"Email {email} is already registered")

    new_user = User(
        email=email,
        password_hash=password_hash,
        first_name=first_name.strip(),
        last_name=last_name.strip(),
        phone_number=phone_number,
    )
    session.add(new_user)
    await session.flush()
    user_id = new_user.id
    if commit:
        await session.commit()

    return user_id


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
        "email": user.email,
        "password_hash": user.password_hash,
        "first_name": user.first_name,
        "last_name": user.last_name,
        "phone_number": user.phone_number,
        "role": user.role,
        "team_id": user.team_id,
        "team_name": user.team_name,
        "verification_status": user.verification_status,
        "verification_image_url": user.verification_image_url,
        "verification_submitted_at": isoformat_or_none(user.verification_submitted_at),
        "verification_reviewed_at": isoformat_or_none(user.verification_reviewed_at),
        "verification_reviewed_by": user.verification_reviewed_by,
        "verification_notes": user.verification_notes,
        "linked_player_id": user.linked_player_id,
        "linked_player_name": user.linked_player_name,
        "favorite_team_id": user.favorite_team_id,
        "favorite_team_name": user.favorite_team_name,
        "favorite_athlete_id": user.favorite_athlete_id,
        "favorite_athlete_name": user.favorite_athlete_name,
        "created_at": isoformat_or_none(user.created_at),
        "updated_at": isoformat_or_none(user.updated_at),
    }


async def get_user_by_id(session: AsyncSession, user_id: int) -> Optional[Dict]:
    """Get user by ID, or None if not found."""
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
        User dictionary or None if not found
    """
    normalized = email.strip().lower()
    result = await session.execute(select(User).where(User.email == normalized).limit(1))
    user = result.scalar_one_or_none()
    return _user_to_dict(user) if user else None


async def update_fan_profile(
    session: AsyncSession, user_id: int, favorite_team_id: int, favorite_athlete_id: int
) -> Dict:
    """
    Complete profile setup as a fan.

    Args:
        session: Database session
        user_id: User ID
        favorite_team_id: Team the fan follows
        favorite_athlete_id: Roster player the fan follows

    Returns:
        Updated user dictionary

    Raises:
        LookupError: If the user, team or athlete doesn't exist
        ValueError: If the user already completed profile setup
    """
    user = await session.get(User, user_id)
    if user is None:
        raise LookupError("User not found")
    if user.role and user.role != FAN_ROLE:
        raise ValueError("Profile setup has already been completed")

    team = await session.get(Team, favorite_team_id)
    if team is None:
        raise LookupError("Team not found")
    athlete = await session.get(RosterPlayer, favorite_athlete_id)
    if athlete is None:
        raise LookupError("Athlete not found")

    user.role = FAN_ROLE
    user.favorite_team_id = team.id
    user.favorite_team_name = team.name
    user.favorite_athlete_id = athlete.id
    user.favorite_athlete_name = athlete.name
    await session.commit()
    await session.refresh(user)
    return _user_to_dict(user)


async def update_password_hash(
    session: AsyncSession, user_id: int, password_hash: str, commit: bool = True
) -> bool:
    """Replace a user's password hash. Returns False if the user doesn't exist."""
    user = await session.get(User, user_id)
    if user is None:
        return False
    user.password_hash = password_hash
    if commit:
        await session.commit()
    return True


async def create_refresh_token(
    session: AsyncSession, user_id: int, token: str, expires_at: datetime
) -> bool:
    """
    Create a refresh token record, replacing any previous tokens for the user.

    Returns:
        True if successful, False otherwise
    """
    try:
        await session.execute(delete(RefreshToken).where(RefreshToken.user_id == user_id))
        session.add(RefreshToken(user_id=user_id, token=token, expires_at=expires_at))
        await session.commit()
        return True
    except Exception as e:
        logger.error(f"Error creating refresh token for user {user_id}: {e}")
        await session.rollback()
        return False


async def get_refresh_token(session: AsyncSession, token: str) -> Optional[Dict]:
    """
    Get refresh token record by token string.

    Returns:
        Dict with user_id, expires_at and is_expired, or None if not found
    """
    result = await session.execute(select(RefreshToken).where(RefreshToken.token == token))
    refresh_token = result.scalar_one_or_none()
    if refresh_token is None:
        return None

    expires_at = refresh_token.expires_at
    if expires_at.tzinfo is None:
        expires_at = pytz.UTC.localize(expires_at)
    return {
        "id": refresh_token.id,
        "user_id": refresh_token.user_id,
        "token": refresh_token.token,
        "expires_at": expires_at.isoformat(),
        "is_expired": expires_at <= utcnow(),
    }


async def delete_refresh_token(session: AsyncSession, token: str) -> bool:
    """Delete a refresh token (on logout or token rotation)."""
    result = await session.execute(delete(RefreshToken).where(RefreshToken.token == token))
    await session.commit()
    return result.rowcount > 0
