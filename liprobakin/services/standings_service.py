"""
Standings service.
Aggregates decided games into per-division team standings.
"""

import logging
from typing import Dict, Iterable, List, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from liprobakin.database.models import Game, Team
from liprobakin.utils.constants import GENDERS, POINTS_PER_WIN, POINTS_PER_LOSS

logger = logging.getLogger(__name__)


def is_decided(game: Game) -> bool:
    """A game counts toward standings only once both winner and loser are set."""
    return game.winner_team_id is not None and game.loser_team_id is not None


# ============================================================================
# TeamStanding Class
# ============================================================================

class TeamStanding:
    """Running tally for one team in one division."""

    def __init__(self, team_id: int, gender: str, team_name: Optional[str] = None):
        self.team_id = team_id
        self.gender = gender
        self.team_name = team_name
        self.wins = 0
        self.losses = 0
        self.total_points = 0
        self.seed = 0

    @property
    def games_played(self) -> int:
        return self.wins + self.losses

    @property
    def league_points(self) -> int:
        """Table points: 2 per win, 1 per loss."""
        return self.wins * POINTS_PER_WIN + self.losses * POINTS_PER_LOSS

    def record_win(self, score: Optional[int]) -> None:
        self.wins += 1
        self.total_points += score or 0

    def record_loss(self, score: Optional[int]) -> None:
        self.losses += 1
        self.total_points += score or 0

    def to_dict(self) -> Dict:
        return {
            "seed": self.seed,
            "team_id": self.team_id,
            "team_name": self.team_name,
            "gender": self.gender,
            "wins": self.wins,
            "losses": self.losses,
            "games_played": self.games_played,
            "total_points": self.total_points,
            "league_points": self.league_points,
        }


# ============================================================================
# StandingsTracker Class
# ============================================================================

class StandingsTracker:
    """Tracks standings for every team across a set of games."""

    def __init__(self, teams: Optional[Dict[int, Team]] = None):
        self.teams = teams or {}
        self.standings: Dict[Tuple[str, int], TeamStanding] = {}

    def _division_for(self, team_id: int, game: Game) -> str:
        team = self.teams.get(team_id)
        if team is not None and team.gender:
            return team.gender
        return game.gender

    def get_standing(self, team_id: int, game: Game) -> TeamStanding:
        """Get or create a team's tally in its division."""
        gender = self._division_for(team_id, game)
        key = (gender, team_id)
        if key not in self.standings:
            team = self.teams.get(team_id)
            self.standings[key] = TeamStanding(team_id, gender, team.name if team else None)
        return self.standings[key]

    def process_game(self, game: Game) -> bool:
        """
        Attribute a game's result to its winner and loser.

        Returns:
            True if the game was decided and counted, False if skipped
        """
        if not is_decided(game):
            return False

        self.get_standing(game.winner_team_id, game).record_win(game.winner_score)
        self.get_standing(game.loser_team_id, game).record_loss(game.loser_score)
        return True

    def ranked(self) -> Dict[str, List[Dict]]:
        """
        Rank each division by wins, then total points scored, and number seeds 1..N.

        Equal wins and points keep the order in which teams were first seen.
        """
        divisions: Dict[str, List[TeamStanding]] = {gender: [] for gender in GENDERS}
        for standing in self.standings.values():
            divisions.setdefault(standing.gender, []).append(standing)

        result = {}
        for gender, rows in divisions.items():
            rows.sort(key=lambda s: (-s.wins, -s.total_points))
            for seed, standing in enumerate(rows, start=1):
                standing.seed = seed
            result[gender] = [s.to_dict() for s in rows]
        return result


def compute_standings(
    games: Iterable[Game], teams: Optional[Dict[int, Team]] = None
) -> Dict[str, List[Dict]]:
    """
    Build ranked standings per division from a set of games.

    Undecided games are ignored, and a team with no decided games does not
    appear. Scores are credited by comparing team ids with the winner/loser
    ids, never by home/away side.

    Args:
        games: Game records (any order)
        teams: Optional {team_id: Team} used for names and the team's division

    Returns:
        {"men": [row, ...], "women": [row, ...]}
    """
    tracker = StandingsTracker(teams)
    counted = 0
    for game in games:
        if tracker.process_game(game):
            counted += 1
    logger.debug(f"Standings computed from {counted} decided games")
    return tracker.ranked()


def team_record(games: Iterable[Game], team_id: int) -> Tuple[int, int]:
    """Wins and losses for one team across its decided games."""
    wins = 0
    losses = 0
    for game in games:
        if not is_decided(game):
            continue
        if game.winner_team_id == team_id:
            wins += 1
        elif game.loser_team_id == team_id:
            losses += 1
    return wins, losses


# ============================================================================
# Database-backed helpers
# ============================================================================

async def _load_games_and_teams(session: AsyncSession) -> Tuple[List[Game], Dict[int, Team]]:
    games_result = await session.execute(select(Game))
    teams_result = await session.execute(select(Team))
    games = list(games_result.scalars().all())
    teams = {team.id: team for team in teams_result.scalars().all()}
    return games, teams


async def get_standings(session: AsyncSession, gender: Optional[str] = None) -> Dict[str, List[Dict]]:
    """
    Re-read all games and teams and return current standings.

    Args:
        session: Database session
        gender: Optional division filter ("men" or "women")

    Returns:
        Standings keyed by division
    """
    if gender is not None and gender not in GENDERS:
        raise ValueError(f"gender must be one of: {', '.join(GENDERS)}")

    games, teams = await _load_games_and_teams(session)
    standings = compute_standings(games, teams)
    if gender is not None:
        return {gender: standings.get(gender, [])}
    return standings


async def sync_team_records(session: AsyncSession) -> int:
    """
    Overwrite every team's stored wins/losses with values derived from decided games.

    Teams without decided games are reset to 0-0.

    Returns:
        Number of teams updated
    """
    games, teams = await _load_games_and_teams(session)
    for team_id, team in teams.items():
        wins, losses = team_record(games, team_id)
        team.wins = wins
        team.losses = losses
    await session.commit()
    logger.info(f"Synced win/loss records for {len(teams)} teams")
    return len(teams)
