"""
Authentication dependencies for FastAPI routes.
"""

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from liprobakin.services import auth_service, user_service, admin_service
from liprobakin.services.permission_service import has_permission, is_master
from liprobakin.database.db import get_db_session

security = HTTPBearer()


async def get_current_user(
    session: AsyncSession = Depends(get_db_session),
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> dict:
    """
    Dependency to get the current authenticated user from JWT token.

    Args:
        session: Database session
        credentials: HTTP Bearer token credentials

    Returns:
        User dictionary

    Raises:
        HTTPException: If token is invalid or user not found
    """
    token = credentials.credentials

    payload = auth_service.verify_token(token)
    if payload is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user_id = payload.get("user_id")
    if user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token payload",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user = await user_service.get_user_by_id(session, user_id)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return user


async def require_admin(
    user: dict = Depends(get_current_user), session: AsyncSession = Depends(get_db_session)
) -> dict:
    """
    Require an active admin account.

    Returns:
        Admin dictionary (user_id, email, roles, permissions, ...)
    """
    admin = await admin_service.get_admin_by_user_id(session, user["id"])
    if admin is None:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")
    if not admin.get("is_active", True):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin account is deactivated")
    return admin


async def require_master(admin: dict = Depends(require_admin)) -> dict:
    """Require an active admin holding the master role."""
    if not is_master(admin):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Master admin access required")
    return admin


def require_permission(permission: str):
    """Build a dependency requiring an active admin with the given capability."""
    async def _dep(admin: dict = Depends(require_admin)) -> dict:
        if not has_permission(admin, permission):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Missing permission: {permission}",
            )
        return admin

    return _dep
