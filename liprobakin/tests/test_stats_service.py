"""
Tests for box-score aggregation and shooting percentages.
"""
from datetime import date

import pytest
from liprobakin.database.models import Game
from liprobakin.services import stats_service
from liprobakin.services.stats_service import aggregate_team_stats, percentage


def test_percentage_zero_attempts():
    for made in (0, 1, 5):
        assert percentage(made, 0) == 0


def test_percentage_zero_made():
    assert percentage(0, 12) == 0


def test_percentage_rounding():
    assert percentage(7, 15) == 47
    assert percentage(1, 3) == 33
    assert percentage(2, 3) == 67
    assert percentage(5, 8) == 63
    assert percentage(10, 10) == 100


def test_percentage_stays_in_range():
    for attempted in range(1, 30):
        for made in range(0, attempted + 1):
            value = percentage(made, attempted)
            assert isinstance(value, int)
            assert 0 <= value <= 100


def test_field_goals_combine_two_and_three_pointers():
    stats = aggregate_team_stats(
        [{"team_id": "A", "two_pm": 5, "two_pa": 10, "three_pm": 2, "three_pa": 5}], "A"
    )
    assert stats.fg2_made == 5
    assert stats.fg2_attempted == 10
    assert stats.fg3_made == 2
    assert stats.fg3_attempted == 5
    assert stats.fg_percentage == 47


def test_free_throws_excluded_from_field_goals():
    stats = aggregate_team_stats(
        [{"team_id": 1, "two_pm": 1, "two_pa": 2, "ft_m": 10, "ft_a": 10}], 1
    )
    assert stats.fg_made == 1
    assert stats.fg_attempted == 2
    assert stats.fg_percentage == 50
    assert stats.ft_percentage == 100


def test_only_entries_for_the_team_are_summed():
    entries = [
        {"team_id": 1, "player_id": 11, "oreb": 2, "dreb": 5, "ast": 4, "stl": 1, "blk": 0, "to": 3, "pf": 2,
         "two_pm": 4, "two_pa": 9, "three_pm": 1, "three_pa": 4, "ft_m": 2, "ft_a": 2},
        {"team_id": 1, "player_id": 12, "oreb": 1, "dreb": 2, "ast": 6, "stl": 2, "blk": 1, "to": 1, "pf": 4,
         "two_pm": 2, "two_pa": 3, "three_pm": 3, "three_pa": 6, "ft_m": 1, "ft_a": 3},
        {"team_id": 2, "player_id": 21, "oreb": 9, "dreb": 9, "ast": 9, "two_pm": 9, "two_pa": 9},
    ]
    stats = aggregate_team_stats(entries, 1)
    assert stats.offensive_rebounds == 3
    assert stats.defensive_rebounds == 7
    assert stats.rebounds == 10
    assert stats.assists == 10
    assert stats.steals == 3
    assert stats.blocks == 1
    assert stats.turnovers == 4
    assert stats.personal_fouls == 6
    # 2*(4+2) + 3*(1+3) + (2+1)
    assert stats.points == 27


def test_team_id_matching_ignores_type():
    stats = aggregate_team_stats([{"team_id": "7", "pts": 12}], 7)
    assert stats.points == 12


def test_recorded_points_and_rebounds_take_precedence():
    stats = aggregate_team_stats([{"team_id": 1, "pts": 30, "reb": 12, "two_pm": 1, "oreb": 1}], 1)
    assert stats.points == 30
    assert stats.rebounds == 12


def test_empty_box_score():
    stats = aggregate_team_stats(None, 1)
    data = stats.to_dict()
    assert data["points"] == 0
    assert data["fg_percentage"] == 0
    assert data["ft_percentage"] == 0


def test_game_team_stats_keys_both_teams():
    game = Game(
        home_team_id=1,
        away_team_id=2,
        player_stats=[{"team_id": 1, "pts": 10}, {"team_id": 2, "pts": 8}],
    )
    totals = stats_service.game_team_stats(game)
    assert set(totals) == {"1", "2"}
    assert totals["1"]["points"] == 10
    assert totals["2"]["points"] == 8


def test_game_leaders():
    entries = [
        {"player_id": 1, "player_name": "Mbala", "team_id": 1, "pts": 20, "reb": 4, "ast": 7},
        {"player_id": 2, "player_name": "Kabongo", "team_id": 2, "pts": 25, "reb": 11, "ast": 2},
        {"player_id": 3, "player_name": "Tshibanda", "team_id": 1, "pts": 25, "reb": 3, "ast": 9},
    ]
    leaders = stats_service.game_leaders(entries)
    # First entry wins ties
    assert leaders["points"]["player_id"] == 2
    assert leaders["points"]["value"] == 25
    assert leaders["rebounds"]["player_name"] == "Kabongo"
    assert leaders["assists"]["player_id"] == 3


def test_game_leaders_empty():
    assert stats_service.game_leaders([]) == {"points": None, "rebounds": None, "assists": None}


def _decided(game_id, day, winner, loser, entries):
    return Game(
        id=game_id,
        home_team_id=1,
        away_team_id=2,
        game_date=date(2025, 4, day),
        winner_team_id=winner,
        loser_team_id=loser,
        winner_score=70,
        loser_score=60,
        player_stats=entries,
    )


def test_player_game_log_newest_first_and_limited():
    games = [
        _decided(day, day, 1 if day % 2 else 2, 2 if day % 2 else 1,
                 [{"player_id": 11, "team_id": 1, "two_pm": day, "two_pa": day + 1}])
        for day in range(1, 8)
    ]
    games.append(Game(id=99, home_team_id=1, away_team_id=2, game_date=date(2025, 5, 1),
                      player_stats=[{"player_id": 11, "team_id": 1}]))

    log = stats_service.player_game_log(games, 11, 1)
    assert len(log) == 5
    assert [row["game_id"] for row in log] == [7, 6, 5, 4, 3]
    assert log[0]["result"] == "W"
    assert log[1]["result"] == "L"
    assert log[0]["opponent_team_id"] == 2
    assert log[0]["fg"] == "7-8"
    assert log[0]["pts"] == 14


def test_player_game_log_skips_games_without_entry():
    games = [_decided(1, 1, 1, 2, [{"player_id": 12, "team_id": 1, "pts": 4}])]
    assert stats_service.player_game_log(games, 11, 1) == []
