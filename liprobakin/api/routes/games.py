"""Game scheduling, box score and result route handlers."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from liprobakin.database.db import get_db_session
from liprobakin.services import game_service, audit_service
from liprobakin.api.auth_dependencies import require_permission
from liprobakin.models.schemas import GameCreate, BoxScoreRequest, GameCompleteRequest

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/api/games")
async def list_games(
    completed: bool = False,
    gender: Optional[str] = None,
    session: AsyncSession = Depends(get_db_session),
):
    """List games newest first; ``completed=true`` limits to finished games."""
    return await game_service.list_games(session, completed_only=completed, gender=gender)


@router.get("/api/games/{game_id}")
async def get_game(game_id: int, session: AsyncSession = Depends(get_db_session)):
    """Game detail with box score, team totals, shooting percentages and leaders."""
    game = await game_service.get_game_detail(session, game_id)
    if game is None:
        raise HTTPException(status_code=404, detail="Game not found")
    return game


@router.post("/api/games")
async def create_game(
    payload: GameCreate,
    admin: dict = Depends(require_permission("can_manage_games")),
    session: AsyncSession = Depends(get_db_session),
):
    try:
        game = await game_service.create_game(session, **payload.model_dump())
        await audit_service.log_audit_action(
            session,
            "game_created",
            admin["user_id"],
            admin.get("email"),
            "game",
            game["id"],
            f"{game['home_team_name']} vs {game['away_team_name']}",
        )
        return game
    except HTTPException:
        raise
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.error(f"Error creating game: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Error creating game")


@router.put("/api/games/{game_id}/box-score")
async def save_box_score(
    game_id: int,
    payload: BoxScoreRequest,
    admin: dict = Depends(require_permission("can_manage_games")),
    session: AsyncSession = Depends(get_db_session),
):
    """Replace the game's box score. Not allowed once the game is completed."""
    try:
        entries = [entry.model_dump(exclude_none=True) for entry in payload.player_stats]
        game = await game_service.save_box_score(session, game_id, entries)
        await audit_service.log_audit_action(
            session,
            "game_stats_updated",
            admin["user_id"],
            admin.get("email"),
            "game",
            game_id,
            details={"entries": len(entries)},
        )
        return game
    except HTTPException:
        raise
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.error(f"Error saving box score for game {game_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Error saving box score")


@router.post("/api/games/{game_id}/complete")
async def complete_game(
    game_id: int,
    payload: GameCompleteRequest,
    admin: dict = Depends(require_permission("can_manage_games")),
    session: AsyncSession = Depends(get_db_session),
):
    """Record the final score. Ties are rejected."""
    try:
        game = await game_service.complete_game(session, game_id, payload.home_score, payload.away_score)
        await audit_service.log_audit_action(
            session,
            "game_completed",
            admin["user_id"],
            admin.get("email"),
            "game",
            game_id,
            details={"home_score": payload.home_score, "away_score": payload.away_score},
        )
        return game
    except HTTPException:
        raise
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.error(f"Error completing game {game_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Error completing game")


@router.delete("/api/games/{game_id}")
async def delete_game(
    game_id: int,
    admin: dict = Depends(require_permission("can_manage_games")),
    session: AsyncSession = Depends(get_db_session),
):
    """Delete a scheduled game. Played games are kept as the historical record."""
    try:
        deleted = await game_service.delete_game(session, game_id)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not deleted:
        raise HTTPException(status_code=404, detail="Game not found")
    await audit_service.log_audit_action(
        session, "game_deleted", admin["user_id"], admin.get("email"), "game", game_id
    )
    return {"status": "success", "message": "Game deleted"}
