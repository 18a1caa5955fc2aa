"""
Tests for scheduling games, saving box scores and recording final scores.
"""
from datetime import date

import pytest
import pytest_asyncio

from liprobakin.services import game_service, standings_service, team_service

# db_session fixture is provided by conftest.py


@pytest_asyncio.fixture
async def teams(db_session):
    home = await team_service.create_team(db_session, "AS Vita Club", "men")
    away = await team_service.create_team(db_session, "Espoir Basket", "men")
    return home, away


@pytest_asyncio.fixture
async def game(db_session, teams):
    home, away = teams
    return await game_service.create_game(
        db_session, home["id"], away["id"], "men", game_date=date(2025, 3, 14), game_time="19:30", venue="Stade Tata Raphaël"
    )


def _box_score(home_id, away_id):
    return [
        {
            "player_id": 1,
            "player_name": "Espoir Fukash",
            "team_id": home_id,
            "two_pm": 5,
            "two_pa": 10,
            "three_pm": 2,
            "three_pa": 5,
            "ft_m": 3,
            "ft_a": 4,
            "oreb": 2,
            "dreb": 5,
            "ast": 4,
        },
        {
            "player_id": 2,
            "player_name": "Jonathan Kazadi",
            "team_id": home_id,
            "pts": 6,
            "two_pm": 3,
            "two_pa": 4,
            "reb": 3,
            "ast": 7,
        },
        {
            "player_id": 3,
            "player_name": "Glody Ngoy",
            "team_id": away_id,
            "pts": 12,
            "reb": 11,
            "ast": 1,
        },
    ]


@pytest.mark.asyncio
async def test_create_game(db_session, game, teams):
    home, away = teams
    assert game["home_team_name"] == "AS Vita Club"
    assert game["away_team_name"] == "Espoir Basket"
    assert game["game_date"] == "2025-03-14"
    assert game["completed"] is False
    assert game["decided"] is False


@pytest.mark.asyncio
async def test_create_game_validation(db_session, teams):
    home, away = teams
    with pytest.raises(ValueError, match="must be different"):
        await game_service.create_game(db_session, home["id"], home["id"], "men")
    with pytest.raises(ValueError, match="gender"):
        await game_service.create_game(db_session, home["id"], away["id"], "mixed")
    with pytest.raises(LookupError):
        await game_service.create_game(db_session, home["id"], 9999, "men")


@pytest.mark.asyncio
async def test_box_score_recomputes_team_totals(db_session, game, teams):
    home, away = teams
    detail = await game_service.save_box_score(db_session, game["id"], _box_score(home["id"], away["id"]))

    home_totals = detail["team_stats"][str(home["id"])]
    assert home_totals["points"] == 25
    assert home_totals["rebounds"] == 10
    assert home_totals["assists"] == 11
    assert home_totals["fg_made"] == 10
    assert home_totals["fg_attempted"] == 19
    assert home_totals["fg_percentage"] == 53
    assert home_totals["fg2_percentage"] == 57
    assert home_totals["fg3_percentage"] == 40
    assert home_totals["ft_percentage"] == 75

    away_totals = detail["team_stats"][str(away["id"])]
    assert away_totals["points"] == 12
    assert away_totals["fg_percentage"] == 0

    assert detail["leaders"]["points"]["player_name"] == "Espoir Fukash"
    assert detail["leaders"]["points"]["value"] == 19
    assert detail["leaders"]["rebounds"]["player_name"] == "Glody Ngoy"
    assert detail["leaders"]["assists"]["player_name"] == "Jonathan Kazadi"


@pytest.mark.asyncio
async def test_box_score_replaces_previous_entries(db_session, game, teams):
    home, away = teams
    await game_service.save_box_score(db_session, game["id"], _box_score(home["id"], away["id"]))
    detail = await game_service.save_box_score(
        db_session, game["id"], [{"player_id": 9, "player_name": "Solo", "team_id": away["id"], "pts": 2}]
    )

    assert len(detail["player_stats"]) == 1
    assert detail["team_stats"][str(home["id"])]["points"] == 0
    assert detail["team_stats"][str(away["id"])]["points"] == 2


@pytest.mark.asyncio
async def test_box_score_rejects_entry_from_other_team(db_session, game, teams):
    with pytest.raises(ValueError, match="not on either team"):
        await game_service.save_box_score(
            db_session, game["id"], [{"player_id": 1, "player_name": "Stray", "team_id": 9999, "pts": 2}]
        )


@pytest.mark.asyncio
async def test_box_score_for_missing_game(db_session):
    with pytest.raises(LookupError):
        await game_service.save_box_score(db_session, 9999, [])


@pytest.mark.asyncio
async def test_complete_game_sets_result_together(db_session, game, teams):
    home, away = teams
    result = await game_service.complete_game(db_session, game["id"], 68, 75)

    assert result["completed"] is True
    assert result["decided"] is True
    assert result["winner_team_id"] == away["id"]
    assert result["loser_team_id"] == home["id"]
    assert result["winner_score"] == 75
    assert result["loser_score"] == 68

    standings = await standings_service.get_standings(db_session, gender="men")
    top = standings["men"][0]
    assert top["team_id"] == away["id"]
    assert top["wins"] == 1


@pytest.mark.asyncio
@pytest.mark.parametrize("home_score,away_score,message", [(70, 70, "tie"), (-1, 50, "negative")])
async def test_complete_game_rejects_invalid_scores(db_session, game, home_score, away_score, message):
    with pytest.raises(ValueError, match=message):
        await game_service.complete_game(db_session, game["id"], home_score, away_score)

    detail = await game_service.get_game_detail(db_session, game["id"])
    assert detail["completed"] is False
    assert detail["winner_team_id"] is None


@pytest.mark.asyncio
async def test_completed_game_is_locked(db_session, game, teams):
    home, away = teams
    await game_service.complete_game(db_session, game["id"], 80, 70)

    with pytest.raises(ValueError, match="already completed"):
        await game_service.complete_game(db_session, game["id"], 90, 70)
    with pytest.raises(ValueError, match="completed"):
        await game_service.save_box_score(db_session, game["id"], _box_score(home["id"], away["id"]))


@pytest.mark.asyncio
async def test_list_games_completed_only(db_session, game, teams):
    home, away = teams
    later = await game_service.create_game(db_session, away["id"], home["id"], "men", game_date=date(2025, 4, 1))
    await game_service.complete_game(db_session, game["id"], 80, 70)

    everything = await game_service.list_games(db_session)
    assert [g["id"] for g in everything] == [later["id"], game["id"]]

    done = await game_service.list_games(db_session, completed_only=True)
    assert [g["id"] for g in done] == [game["id"]]

    assert await game_service.list_games(db_session, gender="women") == []


@pytest.mark.asyncio
async def test_delete_game(db_session, game):
    assert await game_service.delete_game(db_session, game["id"]) is True
    assert await game_service.get_game_detail(db_session, game["id"]) is None
    assert await game_service.delete_game(db_session, game["id"]) is False


@pytest.mark.asyncio
async def test_completed_game_cannot_be_deleted(db_session, game, teams):
    home, away = teams
    await game_service.complete_game(db_session, game["id"], 80, 70)

    with pytest.raises(ValueError, match="cannot be deleted"):
        await game_service.delete_game(db_session, game["id"])

    detail = await game_service.get_game_detail(db_session, game["id"])
    assert detail["completed"] is True
    standings = await standings_service.get_standings(db_session, gender="men")
    assert [row["team_id"] for row in standings["men"]] == [home["id"], away["id"]]
