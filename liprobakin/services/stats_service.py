"""
Box-score statistics.
Rolls per-player box-score entries up into team totals and shooting percentages.
"""

from typing import Any, Dict, Iterable, List, Optional

from liprobakin.database.models import Game
from liprobakin.services.standings_service import is_decided
from liprobakin.utils.constants import GAME_LOG_LIMIT
from liprobakin.utils.datetime_utils import game_sort_key

# Box-score keys summed into team totals, mapped to TeamStats attribute names
COUNTING_FIELDS = {
    "oreb": "offensive_rebounds",
    "dreb": "defensive_rebounds",
    "ast": "assists",
    "stl": "steals",
    "blk": "blocks",
    "to": "turnovers",
    "pf": "personal_fouls",
    "two_pm": "fg2_made",
    "two_pa": "fg2_attempted",
    "three_pm": "fg3_made",
    "three_pa": "fg3_attempted",
    "ft_m": "ft_made",
    "ft_a": "ft_attempted",
}


def percentage(made: int, attempted: int) -> int:
    """
    Shooting percentage rounded to a whole number.

    Returns 0 when nothing was attempted.
    """
    if not attempted:
        return 0
    # Halves round up (62.5 -> 63)
    return int(100 * made / attempted + 0.5)


def _value(entry: Dict[str, Any], key: str) -> int:
    return int(entry.get(key) or 0)


def entry_points(entry: Dict[str, Any]) -> int:
    """Points for one entry, derived from made shots when not recorded."""
    if entry.get("pts") is not None:
        return _value(entry, "pts")
    return 2 * _value(entry, "two_pm") + 3 * _value(entry, "three_pm") + _value(entry, "ft_m")


def entry_rebounds(entry: Dict[str, Any]) -> int:
    """Total rebounds for one entry, falling back to offensive + defensive."""
    if entry.get("reb") is not None:
        return _value(entry, "reb")
    return _value(entry, "oreb") + _value(entry, "dreb")


def same_team(entry: Dict[str, Any], team_id: Any) -> bool:
    return entry.get("team_id") is not None and str(entry.get("team_id")) == str(team_id)


# ============================================================================
# TeamStats Class
# ============================================================================

class TeamStats:
    """Summed box-score categories for one team in one game."""

    def __init__(self, team_id: Any):
        self.team_id = team_id
        self.points = 0
        self.rebounds = 0
        for attr in COUNTING_FIELDS.values():
            setattr(self, attr, 0)

    def add(self, entry: Dict[str, Any]) -> None:
        self.points += entry_points(entry)
        self.rebounds += entry_rebounds(entry)
        for key, attr in COUNTING_FIELDS.items():
            setattr(self, attr, getattr(self, attr) + _value(entry, key))

    @property
    def fg_made(self) -> int:
        """Field goals made: 2pt + 3pt. Free throws are excluded."""
        return self.fg2_made + self.fg3_made

    @property
    def fg_attempted(self) -> int:
        return self.fg2_attempted + self.fg3_attempted

    @property
    def fg_percentage(self) -> int:
        return percentage(self.fg_made, self.fg_attempted)

    @property
    def fg2_percentage(self) -> int:
        return percentage(self.fg2_made, self.fg2_attempted)

    @property
    def fg3_percentage(self) -> int:
        return percentage(self.fg3_made, self.fg3_attempted)

    @property
    def ft_percentage(self) -> int:
        return percentage(self.ft_made, self.ft_attempted)

    def to_dict(self) -> Dict[str, Any]:
        data = {"team_id": self.team_id, "points": self.points, "rebounds": self.rebounds}
        for attr in COUNTING_FIELDS.values():
            data[attr] = getattr(self, attr)
        data.update(
            {
                "fg_made": self.fg_made,
                "fg_attempted": self.fg_attempted,
                "fg_percentage": self.fg_percentage,
                "fg2_percentage": self.fg2_percentage,
                "fg3_percentage": self.fg3_percentage,
                "ft_percentage": self.ft_percentage,
            }
        )
        return data


def aggregate_team_stats(player_stats: Optional[Iterable[Dict[str, Any]]], team_id: Any) -> TeamStats:
    """
    Sum every box-score entry belonging to ``team_id``.

    Args:
        player_stats: Box-score entries for a game (may be None)
        team_id: Team to filter by

    Returns:
        TeamStats totals (all zero if the team has no entries)
    """
    totals = TeamStats(team_id)
    for entry in player_stats or []:
        if same_team(entry, team_id):
            totals.add(entry)
    return totals


def game_team_stats(game: Game) -> Dict[str, Dict[str, Any]]:
    """Totals for both sides of a game, keyed by team id as a string."""
    return {
        str(team_id): aggregate_team_stats(game.player_stats, team_id).to_dict()
        for team_id in (game.home_team_id, game.away_team_id)
    }


def game_leaders(player_stats: Optional[List[Dict[str, Any]]]) -> Dict[str, Optional[Dict[str, Any]]]:
    """
    Points, rebounds and assists leaders across both teams.

    The first entry wins ties. Leaders are None when there are no entries.
    """
    entries = list(player_stats or [])
    if not entries:
        return {"points": None, "rebounds": None, "assists": None}

    def leader(value_fn):
        best = entries[0]
        for entry in entries[1:]:
            if value_fn(entry) > value_fn(best):
                best = entry
        return {
            "player_id": best.get("player_id"),
            "player_name": best.get("player_name"),
            "team_id": best.get("team_id"),
            "value": value_fn(best),
        }

    return {
        "points": leader(entry_points),
        "rebounds": leader(entry_rebounds),
        "assists": leader(lambda e: _value(e, "ast")),
    }


def player_game_log(
    games: Iterable[Game], player_id: Any, team_id: Any, limit: int = GAME_LOG_LIMIT
) -> List[Dict[str, Any]]:
    """
    Most recent decided games in which a roster player has a box-score line.

    Args:
        games: Game records
        player_id: Roster player id
        team_id: The player's team id
        limit: Maximum entries returned

    Returns:
        Newest-first list of game log rows
    """
    logs = []
    for game in games:
        if not is_decided(game):
            continue
        if str(team_id) not in (str(game.home_team_id), str(game.away_team_id)):
            continue

        entry = next(
            (
                e
                for e in (game.player_stats or [])
                if str(e.get("player_id")) == str(player_id) and same_team(e, team_id)
            ),
            None,
        )
        if entry is None:
            continue

        home = str(game.home_team_id) == str(team_id)
        logs.append(
            {
                "game_id": game.id,
                "date": game.game_date.isoformat() if game.game_date else None,
                "opponent_team_id": game.away_team_id if home else game.home_team_id,
                "result": "W" if str(game.winner_team_id) == str(team_id) else "L",
                "pts": entry_points(entry),
                "reb": entry_rebounds(entry),
                "ast": _value(entry, "ast"),
                "stl": _value(entry, "stl"),
                "blk": _value(entry, "blk"),
                "to": _value(entry, "to"),
                "pf": _value(entry, "pf"),
                "fg": f"{_value(entry, 'two_pm') + _value(entry, 'three_pm')}-"
                f"{_value(entry, 'two_pa') + _value(entry, 'three_pa')}",
                "fg3": f"{_value(entry, 'three_pm')}-{_value(entry, 'three_pa')}",
                "ft": f"{_value(entry, 'ft_m')}-{_value(entry, 'ft_a')}",
                "fg_percentage": percentage(
                    _value(entry, "two_pm") + _value(entry, "three_pm"),
                    _value(entry, "two_pa") + _value(entry, "three_pa"),
                ),
            }
        )

    logs.sort(key=lambda log: game_sort_key(log["date"]), reverse=True)
    return logs[:limit]
