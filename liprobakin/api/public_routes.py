"""
Public API routes. No authentication required.

Read-only endpoints backing the public site: standings, team pages,
player game logs and news. All routes are prefixed with /api/public.
"""

import logging
from typing import Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from liprobakin.database.db import get_db_session
from liprobakin.models.schemas import StandingsResponse
from liprobakin.services import standings_service, team_service, news_service

logger = logging.getLogger(__name__)


async def _cache_public(response: Response):
    """Set Cache-Control headers on all public API responses (5min TTL)."""
    response.headers["Cache-Control"] = "public, max-age=300, s-maxage=300"


public_router = APIRouter(
    prefix="/api/public", tags=["public"], dependencies=[Depends(_cache_public)]
)


@public_router.get("/standings", response_model=StandingsResponse)
async def get_standings(
    gender: Optional[Literal["men", "women"]] = Query(None),
    session: AsyncSession = Depends(get_db_session),
):
    """
    League table per division, recomputed from decided games.

    Ranked by wins, then total points scored.
    """
    try:
        return {"standings": await standings_service.get_standings(session, gender)}
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception:
        logger.error("Error computing standings", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")


@public_router.get("/teams/{slug}")
async def get_team(slug: str, session: AsyncSession = Depends(get_db_session)):
    """Team page with roster and record."""
    try:
        team = await team_service.get_public_team(session, slug)
    except Exception:
        logger.error(f"Error fetching team {slug}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")
    if team is None:
        raise HTTPException(status_code=404, detail="Team not found")
    return team


@public_router.get("/players/{player_id}/game-log")
async def get_player_game_log(player_id: int, session: AsyncSession = Depends(get_db_session)):
    """Last five decided games for a roster player, newest first."""
    try:
        return await team_service.get_player_game_log(session, player_id)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception:
        logger.error(f"Error fetching game log for player {player_id}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")


@public_router.get("/news")
async def get_news(
    limit: int = Query(20, ge=1, le=100),
    session: AsyncSession = Depends(get_db_session),
):
    """Latest news, with English fields translated when missing."""
    try:
        return await news_service.list_articles(session, limit=limit, translate=True)
    except Exception:
        logger.error("Error fetching news", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")
