"""
Admin user management: creation, role changes, activation, deletion and passwords.

Every mutation other than an admin's own first-login/password flow requires
the acting admin to hold the master role, and appends an audit entry.
"""

import logging
from typing import Dict, List, Optional

from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession

from liprobakin.database.models import AdminUser, User
from liprobakin.services import audit_service, auth_service, user_service
from liprobakin.services.permission_service import merge_permissions, is_master, validate_roles
from liprobakin.utils.datetime_utils import utcnow, isoformat_or_none

logger = logging.getLogger(__name__)


class ConflictError(ValueError):
    """Raised when a record with the same identity already exists."""


def _admin_to_dict(admin: AdminUser) -> Dict:
    roles = list(admin.roles or [])
    return {
        "id": admin.id,
        "user_id": admin.user_id,
        "email": admin.email,
        "display_name": admin.display_name,
        "roles": roles,
        "permissions": admin.permissions or merge_permissions(roles),
        "is_first_login": admin.is_first_login if admin.is_first_login is not None else True,
        "is_active": admin.is_active if admin.is_active is not None else True,
        "created_by": admin.created_by,
        "created_at": isoformat_or_none(admin.created_at),
        "last_login": isoformat_or_none(admin.last_login),
        "last_activity": isoformat_or_none(admin.last_activity),
    }


def _require_master(actor: Dict, message: str = "Unauthorized: only master admins can manage admin users") -> None:
    if not is_master(actor) or not actor.get("is_active", True):
        raise PermissionError(message)


def _split_display_name(display_name: str):
    parts = display_name.strip().split(None, 1)
    return parts[0], parts[1] if len(parts) > 1 else parts[0]


async def _get_admin_row(session: AsyncSession, user_id: int) -> Optional[AdminUser]:
    result = await session.execute(select(AdminUser).where(AdminUser.user_id == user_id))
    return result.scalar_one_or_none()


async def get_admin_by_user_id(session: AsyncSession, user_id: int) -> Optional[Dict]:
    """Admin dictionary for a user account, or None if the user is not an admin."""
    admin = await _get_admin_row(session, user_id)
    return _admin_to_dict(admin) if admin else None


async def list_admin_users(session: AsyncSession) -> List[Dict]:
    """All admin users, oldest first."""
    result = await session.execute(select(AdminUser).order_by(AdminUser.created_at, AdminUser.id))
    return [_admin_to_dict(admin) for admin in result.scalars().all()]


async def create_admin_user(
    session: AsyncSession,
    creator: Dict,
    email: str,
    display_name: str,
    password: str,
    roles: List[str],
) -> Dict:
    """
    Create a sign-in identity and its admin record.

    Args:
        session: Database session
        creator: Acting admin dict (must be master)
        email: New admin's email
        display_name: New admin's display name
        password: Initial password (>= 6 characters)
        roles: Role tags to grant

    Returns:
        The created admin dictionary

    Raises:
        PermissionError: If the creator is not a master admin
        ValueError: If a field is missing or invalid
        ConflictError: If the email is already registered
    """
    if not email or not display_name or not display_name.strip() or not password or not roles:
        raise ValueError("Missing required fields")
    auth_service.validate_password(password)
    _require_master(creator, "Unauthorized")
    roles = validate_roles(roles)
    email = auth_service.normalize_email(email)

    if await user_service.get_user_by_email(session, email):
        raise ConflictError("An admin with this email already exists")

    first_name, last_name = _split_display_name(display_name)
    user_id = await user_service.create_user(
        session,
        email=email,
        password_hash=auth_service.hash_password(password),
        first_name=first_name,
        last_name=last_name,
        commit=False,
    )
    admin = AdminUser(
        user_id=user_id,
        email=email,
        display_name=display_name.strip(),
        roles=roles,
        permissions=merge_permissions(roles),
        is_first_login=True,
        is_active=True,
        created_by=creator["user_id"],
    )
    session.add(admin)
    await session.commit()
    await session.refresh(admin)
    logger.info(f"Admin user created: {email} with roles {roles}")
    result = _admin_to_dict(admin)

    await audit_service.log_audit_action(
        session,
        "admin_user_created",
        creator["user_id"],
        creator.get("email"),
        "admin",
        user_id,
        email,
        {"roles": roles},
    )
    return result


async def update_admin_roles(session: AsyncSession, actor: Dict, target_user_id: int, roles: List[str]) -> Dict:
    """
    Replace an admin's roles and re-merge their permissions.

    Raises:
        PermissionError: If the actor is not a master admin
        LookupError: If the target is not an admin
        ValueError: If the roles are empty or unknown
    """
    _require_master(actor)
    roles = validate_roles(roles)
    admin = await _get_admin_row(session, target_user_id)
    if admin is None:
        raise LookupError("Admin user not found")

    previous = list(admin.roles or [])
    admin.roles = roles
    admin.permissions = merge_permissions(roles)
    await session.commit()
    await session.refresh(admin)
    result = _admin_to_dict(admin)

    await audit_service.log_audit_action(
        session,
        "admin_roles_updated",
        actor["user_id"],
        actor.get("email"),
        "admin",
        target_user_id,
        admin.email,
        {"previous_roles": previous, "roles": roles},
    )
    return result


async def set_admin_active(session: AsyncSession, actor: Dict, target_user_id: int, is_active: bool) -> Dict:
    """
    Deactivate or reactivate an admin.

    Raises:
        PermissionError: If the actor is not a master admin
        LookupError: If the target is not an admin
    """
    _require_master(actor)
    admin = await _get_admin_row(session, target_user_id)
    if admin is None:
        raise LookupError("Admin user not found")

    admin.is_active = is_active
    await session.commit()
    await session.refresh(admin)
    result = _admin_to_dict(admin)

    await audit_service.log_audit_action(
        session,
        "admin_user_reactivated" if is_active else "admin_user_deactivated",
        actor["user_id"],
        actor.get("email"),
        "admin",
        target_user_id,
        admin.email,
    )
    return result


async def delete_admin_user(session: AsyncSession, actor: Dict, target_user_id: int) -> None:
    """
    Delete an admin and their sign-in identity.

    Raises:
        PermissionError: If the actor is not master, targets themself, or targets another master
        LookupError: If the target is not an admin
    """
    _require_master(actor, "Unauthorized: Only master admins can delete users")
    if target_user_id == actor["user_id"]:
        raise PermissionError("Cannot delete your own account")

    admin = await _get_admin_row(session, target_user_id)
    if admin is None:
        raise LookupError("Admin user not found")
    if "master" in (admin.roles or []):
        raise PermissionError("Cannot delete another master admin")

    target_email = admin.email
    await session.execute(delete(AdminUser).where(AdminUser.user_id == target_user_id))
    await session.execute(delete(User).where(User.id == target_user_id))
    await session.commit()
    logger.info(f"Admin user {target_email} deleted by {actor.get('email')}")

    await audit_service.log_audit_action(
        session,
        "admin_user_deleted",
        actor["user_id"],
        actor.get("email"),
        "admin",
        target_user_id,
        target_email,
    )


async def change_admin_password(
    session: AsyncSession, actor: Dict, target_user_id: int, new_password: str
) -> None:
    """
    Set a new password for an admin. Masters may change anyone's; others only their own.

    Raises:
        ValueError: If the password is too short
        PermissionError: If the actor may not change this password
        LookupError: If the target is not an admin
    """
    auth_service.validate_password(new_password)
    if target_user_id != actor["user_id"]:
        _require_master(actor)

    admin = await _get_admin_row(session, target_user_id)
    if admin is None:
        raise LookupError("Admin user not found")

    await user_service.update_password_hash(
        session, target_user_id, auth_service.hash_password(new_password), commit=False
    )
    await session.commit()
    logger.info(f"Password changed for admin user {target_user_id}")

    await audit_service.log_audit_action(
        session,
        "admin_password_changed",
        actor["user_id"],
        actor.get("email"),
        "admin",
        target_user_id,
        admin.email,
    )


async def complete_first_login(session: AsyncSession, user_id: int, display_name: str) -> Dict:
    """Record the admin's chosen display name and clear the first-login flag."""
    if not display_name or not display_name.strip():
        raise ValueError("Display name is required")
    admin = await _get_admin_row(session, user_id)
    if admin is None:
        raise LookupError("Admin user not found")

    admin.display_name = display_name.strip()
    admin.is_first_login = False
    await session.commit()
    await session.refresh(admin)
    return _admin_to_dict(admin)


async def record_login(session: AsyncSession, user_id: int) -> bool:
    """Stamp last_login/last_activity for an admin. Returns False for non-admins."""
    admin = await _get_admin_row(session, user_id)
    if admin is None:
        return False
    now = utcnow()
    admin.last_login = now
    admin.last_activity = now
    await session.commit()
    return True
