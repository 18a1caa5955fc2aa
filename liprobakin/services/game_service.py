"""
Game service layer: scheduling, box scores and final results.
"""

import logging
from datetime import date
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from liprobakin.database.models import Game, Team
from liprobakin.services import stats_service
from liprobakin.services.standings_service import is_decided
from liprobakin.utils.constants import GENDERS
from liprobakin.utils.datetime_utils import isoformat_or_none

logger = logging.getLogger(__name__)


def _game_to_dict(game: Game, team_names: Optional[Dict[int, str]] = None) -> Dict:
    team_names = team_names or {}
    return {
        "id": game.id,
        "home_team_id": game.home_team_id,
        "home_team_name": team_names.get(game.home_team_id),
        "away_team_id": game.away_team_id,
        "away_team_name": team_names.get(game.away_team_id),
        "game_date": isoformat_or_none(game.game_date),
        "game_time": game.game_time,
        "venue": game.venue,
        "gender": game.gender,
        "completed": bool(game.completed),
        "winner_team_id": game.winner_team_id,
        "loser_team_id": game.loser_team_id,
        "winner_score": game.winner_score,
        "loser_score": game.loser_score,
        "decided": is_decided(game),
    }


async def _team_names(session: AsyncSession) -> Dict[int, str]:
    result = await session.execute(select(Team.id, Team.name))
    return {row.id: row.name for row in result.all()}


async def create_game(
    session: AsyncSession,
    home_team_id: int,
    away_team_id: int,
    gender: str,
    game_date: Optional[date] = None,
    game_time: Optional[str] = None,
    venue: Optional[str] = None,
) -> Dict:
    """
    Schedule a game between two teams.

    Raises:
        ValueError: If the teams are the same or the gender is invalid
        LookupError: If either team doesn't exist
    """
    if home_team_id == away_team_id:
        raise ValueError("Home and away teams must be different")
    if gender not in GENDERS:
        raise ValueError(f"gender must be one of: {', '.join(GENDERS)}")
    for team_id in (home_team_id, away_team_id):
        if await session.get(Team, team_id) is None:
            raise LookupError(f"Team {team_id} not found")

    game = Game(
        home_team_id=home_team_id,
        away_team_id=away_team_id,
        gender=gender,
        game_date=game_date,
        game_time=game_time,
        venue=venue,
        completed=False,
        player_stats=[],
        team_stats={},
    )
    session.add(game)
    await session.commit()
    await session.refresh(game)
    logger.info(f"Game {game.id} scheduled: {home_team_id} vs {away_team_id}")
    return _game_to_dict(game, await _team_names(session))


async def list_games(
    session: AsyncSession, completed_only: bool = False, gender: Optional[str] = None
) -> List[Dict]:
    """List games by date, newest first."""
    query = select(Game).order_by(Game.game_date.desc(), Game.id.desc())
    if completed_only:
        query = query.where(Game.completed.is_(True))
    if gender:
        query = query.where(Game.gender == gender)
    result = await session.execute(query)
    names = await _team_names(session)
    return [_game_to_dict(game, names) for game in result.scalars().all()]


async def get_game_detail(session: AsyncSession, game_id: int) -> Optional[Dict]:
    """
    Game with its box score, per-team totals and shooting percentages, and leaders.
    """
    game = await session.get(Game, game_id)
    if game is None:
        return None
    data = _game_to_dict(game, await _team_names(session))
    data["player_stats"] = list(game.player_stats or [])
    data["team_stats"] = stats_service.game_team_stats(game)
    data["leaders"] = stats_service.game_leaders(game.player_stats)
    return data


async def save_box_score(session: AsyncSession, game_id: int, player_stats: List[Dict[str, Any]]) -> Dict:
    """
    Replace a game's box score and recompute its cached team totals.

    Raises:
        LookupError: If the game doesn't exist
        ValueError: If the game is already completed or an entry belongs to neither team
    """
    game = await session.get(Game, game_id)
    if game is None:
        raise LookupError("Game not found")
    if game.completed:
        raise ValueError("Box score cannot be changed once the game is completed")

    allowed = {str(game.home_team_id), str(game.away_team_id)}
    for entry in player_stats:
        if str(entry.get("team_id")) not in allowed:
            raise ValueError(f"Entry for player {entry.get('player_id')} is not on either team")

    game.player_stats = [dict(entry) for entry in player_stats]
    game.team_stats = stats_service.game_team_stats(game)
    await session.commit()
    await session.refresh(game)
    logger.info(f"Box score saved for game {game_id} ({len(player_stats)} entries)")
    return await get_game_detail(session, game_id)


async def complete_game(session: AsyncSession, game_id: int, home_score: int, away_score: int) -> Dict:
    """
    Record the final score. Winner, loser, scores and the completed flag are written together.

    Raises:
        LookupError: If the game doesn't exist
        ValueError: If the game is already completed, a score is negative, or the scores are tied
    """
    game = await session.get(Game, game_id)
    if game is None:
        raise LookupError("Game not found")
    if game.completed:
        raise ValueError("Game is already completed")
    if home_score < 0 or away_score < 0:
        raise ValueError("Scores cannot be negative")
    if home_score == away_score:
        raise ValueError("Basketball games cannot end in a tie")

    if home_score > away_score:
        winner, loser, winner_score, loser_score = game.home_team_id, game.away_team_id, home_score, away_score
    else:
        winner, loser, winner_score, loser_score = game.away_team_id, game.home_team_id, away_score, home_score

    game.winner_team_id = winner
    game.loser_team_id = loser
    game.winner_score = winner_score
    game.loser_score = loser_score
    game.completed = True
    await session.commit()
    await session.refresh(game)
    logger.info(f"Game {game_id} completed: {winner} beat {loser} {winner_score}-{loser_score}")
    return _game_to_dict(game, await _team_names(session))


async def delete_game(session: AsyncSession, game_id: int) -> bool:
    """
    Delete a game that has not been played.

    Raises:
        ValueError: If the game is completed or already has a result
    """
    game = await session.get(Game, game_id)
    if game is None:
        return False
    if game.completed or is_decided(game):
        raise ValueError("Completed games cannot be deleted")
    await session.delete(game)
    await session.commit()
    return True
