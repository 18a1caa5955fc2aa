"""Team, roster and coaching staff route handlers."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from liprobakin.database.db import get_db_session
from liprobakin.services import team_service, audit_service
from liprobakin.api.auth_dependencies import require_permission
from liprobakin.models.schemas import (
    TeamCreate,
    TeamUpdate,
    RosterPlayerCreate,
    RosterPlayerUpdate,
    CoachStaffCreate,
)

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/api/teams")
async def list_teams(gender: Optional[str] = None, session: AsyncSession = Depends(get_db_session)):
    """List teams, optionally for one division."""
    try:
        return await team_service.list_teams(session, gender)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error listing teams: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Error listing teams")


@router.get("/api/teams/{team_id}")
async def get_team(team_id: int, session: AsyncSession = Depends(get_db_session)):
    """Team with roster and coaching staff."""
    team = await team_service.get_team(session, team_id)
    if team is None:
        raise HTTPException(status_code=404, detail="Team not found")
    return team


@router.post("/api/teams")
async def create_team(
    payload: TeamCreate,
    admin: dict = Depends(require_permission("can_manage_teams")),
    session: AsyncSession = Depends(get_db_session),
):
    try:
        team = await team_service.create_team(session, **payload.model_dump())
        await audit_service.log_audit_action(
            session, "team_created", admin["user_id"], admin.get("email"), "team", team["id"], team["name"]
        )
        return team
    except HTTPException:
        raise
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error creating team: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Error creating team")


@router.put("/api/teams/{team_id}")
async def update_team(
    team_id: int,
    payload: TeamUpdate,
    admin: dict = Depends(require_permission("can_manage_teams")),
    session: AsyncSession = Depends(get_db_session),
):
    try:
        team = await team_service.update_team(session, team_id, payload.model_dump(exclude_unset=True))
        if team is None:
            raise HTTPException(status_code=404, detail="Team not found")
        await audit_service.log_audit_action(
            session, "team_updated", admin["user_id"], admin.get("email"), "team", team_id, team["name"]
        )
        return team
    except HTTPException:
        raise
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error updating team {team_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Error updating team")


@router.delete("/api/teams/{team_id}")
async def delete_team(
    team_id: int,
    admin: dict = Depends(require_permission("can_manage_teams")),
    session: AsyncSession = Depends(get_db_session),
):
    try:
        if not await team_service.delete_team(session, team_id):
            raise HTTPException(status_code=404, detail="Team not found")
        await audit_service.log_audit_action(
            session, "team_deleted", admin["user_id"], admin.get("email"), "team", team_id
        )
        return {"status": "success", "message": "Team deleted"}
    except HTTPException:
        raise
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error deleting team {team_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Error deleting team")


# ============================================================================
# Roster
# ============================================================================

@router.post("/api/teams/{team_id}/roster")
async def add_roster_player(
    team_id: int,
    payload: RosterPlayerCreate,
    admin: dict = Depends(require_permission("can_manage_players")),
    session: AsyncSession = Depends(get_db_session),
):
    try:
        player = await team_service.add_roster_player(session, team_id, **payload.model_dump())
        await audit_service.log_audit_action(
            session, "player_added", admin["user_id"], admin.get("email"), "player", player["id"], player["name"]
        )
        return player
    except HTTPException:
        raise
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.error(f"Error adding player to team {team_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Error adding player")


@router.put("/api/roster/{player_id}")
async def update_roster_player(
    player_id: int,
    payload: RosterPlayerUpdate,
    admin: dict = Depends(require_permission("can_manage_players")),
    session: AsyncSession = Depends(get_db_session),
):
    try:
        player = await team_service.update_roster_player(session, player_id, payload.model_dump(exclude_unset=True))
        if player is None:
            raise HTTPException(status_code=404, detail="Player not found")
        await audit_service.log_audit_action(
            session, "player_updated", admin["user_id"], admin.get("email"), "player", player_id, player["name"]
        )
        return player
    except HTTPException:
        raise
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error updating player {player_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Error updating player")


@router.delete("/api/roster/{player_id}")
async def delete_roster_player(
    player_id: int,
    admin: dict = Depends(require_permission("can_manage_players")),
    session: AsyncSession = Depends(get_db_session),
):
    if not await team_service.delete_roster_player(session, player_id):
        raise HTTPException(status_code=404, detail="Player not found")
    await audit_service.log_audit_action(
        session, "player_deleted", admin["user_id"], admin.get("email"), "player", player_id
    )
    return {"status": "success", "message": "Player deleted"}


@router.post("/api/teams/{team_id}/staff")
async def add_coach_staff(
    team_id: int,
    payload: CoachStaffCreate,
    admin: dict = Depends(require_permission("can_manage_players")),
    session: AsyncSession = Depends(get_db_session),
):
    try:
        staff = await team_service.add_coach_staff(session, team_id, **payload.model_dump())
        await audit_service.log_audit_action(
            session, "coach_added", admin["user_id"], admin.get("email"), "coach", staff["id"], staff["name"]
        )
        return staff
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.delete("/api/staff/{staff_id}")
async def delete_coach_staff(
    staff_id: int,
    admin: dict = Depends(require_permission("can_manage_players")),
    session: AsyncSession = Depends(get_db_session),
):
    if not await team_service.delete_coach_staff(session, staff_id):
        raise HTTPException(status_code=404, detail="Staff member not found")
    await audit_service.log_audit_action(
        session, "coach_deleted", admin["user_id"], admin.get("email"), "coach", staff_id
    )
    return {"status": "success", "message": "Staff member deleted"}
