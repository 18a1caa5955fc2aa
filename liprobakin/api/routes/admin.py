"""Admin back-office route handlers: admin users, verification review, audit log, record sync."""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from liprobakin.database.db import get_db_session
from liprobakin.services import admin_service, audit_service, standings_service, verification_service
from liprobakin.services.admin_service import ConflictError
from liprobakin.api.auth_dependencies import require_admin, require_permission
from liprobakin.models.schemas import (
    AdminUserCreate,
    AdminUserResponse,
    AdminRolesUpdate,
    AdminActiveUpdate,
    AdminPasswordChange,
    FirstLoginRequest,
    ReviewRequest,
    VerificationRequestResponse,
)

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/api/admin/me", response_model=AdminUserResponse)
async def get_admin_me(admin: dict = Depends(require_admin)):
    """Current admin with roles and merged permissions."""
    return admin


@router.post("/api/admin/first-login", response_model=AdminUserResponse)
async def complete_first_login(
    payload: FirstLoginRequest,
    admin: dict = Depends(require_admin),
    session: AsyncSession = Depends(get_db_session),
):
    """Set the display name chosen on first sign-in."""
    try:
        return await admin_service.complete_first_login(session, admin["user_id"], payload.display_name)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))


# ============================================================================
# Admin users
# ============================================================================

@router.get("/api/admin/users", response_model=List[AdminUserResponse])
async def list_admin_users(
    admin: dict = Depends(require_permission("can_manage_admins")),
    session: AsyncSession = Depends(get_db_session),
):
    return await admin_service.list_admin_users(session)


@router.post("/api/admin/users", response_model=AdminUserResponse)
async def create_admin_user(
    payload: AdminUserCreate,
    admin: dict = Depends(require_admin),
    session: AsyncSession = Depends(get_db_session),
):
    """Create an admin account. Master admins only."""
    try:
        return await admin_service.create_admin_user(
            session, admin, payload.email, payload.display_name, payload.password, payload.roles
        )
    except HTTPException:
        raise
    except ConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except PermissionError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except Exception as e:
        logger.error(f"Error creating admin user: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to create admin user")


@router.put("/api/admin/users/{user_id}/roles", response_model=AdminUserResponse)
async def update_admin_roles(
    user_id: int,
    payload: AdminRolesUpdate,
    admin: dict = Depends(require_admin),
    session: AsyncSession = Depends(get_db_session),
):
    try:
        return await admin_service.update_admin_roles(session, admin, user_id, payload.roles)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except PermissionError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.error(f"Error updating roles for admin {user_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to update admin roles")


@router.put("/api/admin/users/{user_id}/active", response_model=AdminUserResponse)
async def set_admin_active(
    user_id: int,
    payload: AdminActiveUpdate,
    admin: dict = Depends(require_admin),
    session: AsyncSession = Depends(get_db_session),
):
    """Deactivate or reactivate an admin. Master admins only."""
    try:
        return await admin_service.set_admin_active(session, admin, user_id, payload.is_active)
    except PermissionError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.error(f"Error changing active state for admin {user_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to update admin user")


@router.delete("/api/admin/users/{user_id}")
async def delete_admin_user(
    user_id: int,
    admin: dict = Depends(require_admin),
    session: AsyncSession = Depends(get_db_session),
):
    """Delete an admin and their sign-in identity. Master admins only."""
    try:
        await admin_service.delete_admin_user(session, admin, user_id)
        return {"status": "success", "message": "Admin user deleted"}
    except PermissionError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.error(f"Error deleting admin {user_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to delete admin user")


@router.put("/api/admin/users/{user_id}/password")
async def change_admin_password(
    user_id: int,
    payload: AdminPasswordChange,
    admin: dict = Depends(require_admin),
    session: AsyncSession = Depends(get_db_session),
):
    """Change an admin's password. Masters may change anyone's; other admins only their own."""
    try:
        await admin_service.change_admin_password(session, admin, user_id, payload.new_password)
        return {"status": "success", "message": "Password updated"}
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except PermissionError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.error(f"Error changing password for admin {user_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to change password")


# ============================================================================
# Verification review
# ============================================================================

@router.get("/api/admin/verifications", response_model=List[VerificationRequestResponse])
async def list_pending_verifications(
    admin: dict = Depends(require_permission("can_manage_players")),
    session: AsyncSession = Depends(get_db_session),
):
    """Pending verification requests, oldest first."""
    return await verification_service.list_pending_requests(session)


@router.get("/api/admin/verifications/{request_id}", response_model=VerificationRequestResponse)
async def get_verification(
    request_id: int,
    admin: dict = Depends(require_permission("can_manage_players")),
    session: AsyncSession = Depends(get_db_session),
):
    """A single request in any state, with its review stamp."""
    request = await verification_service.get_request(session, request_id)
    if request is None:
        raise HTTPException(status_code=404, detail="Verification request not found")
    return request


@router.post("/api/admin/verifications/{request_id}/review", response_model=List[VerificationRequestResponse])
async def review_verification(
    request_id: int,
    payload: ReviewRequest,
    admin: dict = Depends(require_permission("can_manage_players")),
    session: AsyncSession = Depends(get_db_session),
):
    """
    Approve or reject a pending request.

    Returns:
        The refreshed list of pending requests
    """
    try:
        await verification_service.review_request(session, request_id, payload.decision, admin, payload.notes)
        return await verification_service.list_pending_requests(session)
    except HTTPException:
        raise
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except PermissionError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.error(f"Error reviewing verification {request_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to review verification request")


# ============================================================================
# Audit log / maintenance
# ============================================================================

@router.get("/api/admin/audit-logs")
async def list_audit_logs(
    limit: int = 100,
    action: Optional[str] = None,
    target_type: Optional[str] = None,
    admin: dict = Depends(require_admin),
    session: AsyncSession = Depends(get_db_session),
):
    """Most recent audit entries first."""
    return await audit_service.list_audit_logs(session, limit=min(limit, 500), action=action, target_type=target_type)


@router.post("/api/admin/teams/sync-records")
async def sync_team_records(
    admin: dict = Depends(require_permission("can_manage_teams")),
    session: AsyncSession = Depends(get_db_session),
):
    """Recompute every team's stored wins/losses from decided games."""
    try:
        count = await standings_service.sync_team_records(session)
        await audit_service.log_audit_action(
            session,
            "team_records_synced",
            admin["user_id"],
            admin.get("email"),
            "team",
            details={"teams": count},
        )
        return {"status": "success", "teams_updated": count}
    except Exception as e:
        logger.error(f"Error syncing team records: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to sync team records")
