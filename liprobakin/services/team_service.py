"""
Team service layer: teams, rosters and coaching staff.
"""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import select, update, delete, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from liprobakin.database.models import Team, RosterPlayer, CoachStaff, Game
from liprobakin.services import stats_service
from liprobakin.services.standings_service import team_record
from liprobakin.utils.constants import GENDERS, GAME_LOG_LIMIT
from liprobakin.utils.datetime_utils import isoformat_or_none
from liprobakin.utils.slugify import slugify

logger = logging.getLogger(__name__)

TEAM_FIELDS = (
    "name",
    "city",
    "logo_url",
    "primary_color",
    "secondary_color",
    "gender",
    "conference",
    "nationality",
)

# linked_user_* is owned by the verification workflow and never set here
ROSTER_FIELDS = ("name", "number", "position", "height", "nationality", "headshot_url", "stats")
STAFF_FIELDS = ("name", "title", "headshot_url")


def _validate_gender(gender: Optional[str]) -> None:
    if gender is not None and gender not in GENDERS:
        raise ValueError(f"gender must be one of: {', '.join(GENDERS)}")


def _roster_player_to_dict(player: RosterPlayer) -> Dict:
    return {
        "id": player.id,
        "team_id": player.team_id,
        "name": player.name,
        "number": player.number,
        "position": player.position,
        "height": player.height,
        "nationality": player.nationality,
        "headshot_url": player.headshot_url,
        "stats": player.stats or {},
        "linked_user_id": player.linked_user_id,
        "linked_user_name": player.linked_user_name,
        "linked_at": isoformat_or_none(player.linked_at),
    }


def _staff_to_dict(staff: CoachStaff) -> Dict:
    return {
        "id": staff.id,
        "team_id": staff.team_id,
        "name": staff.name,
        "title": staff.title,
        "headshot_url": staff.headshot_url,
        "linked_user_id": staff.linked_user_id,
        "linked_user_name": staff.linked_user_name,
        "linked_at": isoformat_or_none(staff.linked_at),
    }


def _team_to_dict(team: Team, include_roster: bool = False) -> Dict:
    data = {
        "id": team.id,
        "name": team.name,
        "slug": team.slug,
        "city": team.city,
        "logo_url": team.logo_url,
        "primary_color": team.primary_color,
        "secondary_color": team.secondary_color,
        "gender": team.gender,
        "conference": team.conference,
        "nationality": team.nationality,
        "wins": team.wins or 0,
        "losses": team.losses or 0,
        "created_at": isoformat_or_none(team.created_at),
        "updated_at": isoformat_or_none(team.updated_at),
    }
    if include_roster:
        data["roster"] = [_roster_player_to_dict(p) for p in sorted(team.roster, key=lambda p: p.number)]
        data["coach_staff"] = [_staff_to_dict(s) for s in team.coach_staff]
    return data


async def _load_team(session: AsyncSession, *criteria) -> Optional[Team]:
    result = await session.execute(
        select(Team)
        .options(selectinload(Team.roster), selectinload(Team.coach_staff))
        .where(*criteria)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


# ============================================================================
# Teams
# ============================================================================

async def create_team(
    session: AsyncSession,
    name: str,
    gender: str,
    city: Optional[str] = None,
    conference: Optional[str] = None,
    logo_url: Optional[str] = None,
    primary_color: Optional[str] = None,
    secondary_color: Optional[str] = None,
    nationality: Optional[str] = None,
) -> Dict:
    """
    Create a team. The slug is derived from the name.

    Raises:
        ValueError: If the name is blank, the gender is invalid or the slug is taken
    """
    if not name or not name.strip():
        raise ValueError("Team name is required")
    _validate_gender(gender)

    slug = slugify(name)
    if not slug:
        raise ValueError("Team name must contain letters or digits")
    existing = await session.execute(select(Team.id).where(Team.slug == slug))
    if existing.scalar_one_or_none():
        raise ValueError(f"A team with slug '{slug}' already exists")

    team = Team(
        name=name.strip(),
        slug=slug,
        gender=gender,
        city=city,
        conference=conference,
        logo_url=logo_url,
        primary_color=primary_color,
        secondary_color=secondary_color,
        nationality=nationality,
        wins=0,
        losses=0,
    )
    session.add(team)
    await session.commit()
    await session.refresh(team)
    logger.info(f"Team created: {team.name} ({team.gender})")
    return _team_to_dict(team)


async def list_teams(session: AsyncSession, gender: Optional[str] = None) -> List[Dict]:
    """List teams ordered by name, optionally for one division."""
    _validate_gender(gender)
    query = select(Team).order_by(Team.name)
    if gender:
        query = query.where(Team.gender == gender)
    result = await session.execute(query)
    return [_team_to_dict(team) for team in result.scalars().all()]


async def get_team(session: AsyncSession, team_id: int) -> Optional[Dict]:
    """Team with roster (sorted by jersey number) and coaching staff."""
    team = await _load_team(session, Team.id == team_id)
    return _team_to_dict(team, include_roster=True) if team else None


async def get_team_by_slug(session: AsyncSession, slug: str) -> Optional[Dict]:
    team = await _load_team(session, Team.slug == slug)
    return _team_to_dict(team, include_roster=True) if team else None


async def update_team(session: AsyncSession, team_id: int, updates: Dict[str, Any]) -> Optional[Dict]:
    """Update team fields. The slug follows the name."""
    update_values = {key: value for key, value in updates.items() if key in TEAM_FIELDS and value is not None}
    _validate_gender(update_values.get("gender"))
    if "name" in update_values:
        slug = slugify(update_values["name"])
        clash = await session.execute(select(Team.id).where(Team.slug == slug, Team.id != team_id))
        if clash.scalar_one_or_none():
            raise ValueError(f"A team with slug '{slug}' already exists")
        update_values["slug"] = slug

    if update_values:
        await session.execute(update(Team).where(Team.id == team_id).values(**update_values))
        await session.commit()
    return await get_team(session, team_id)


async def delete_team(session: AsyncSession, team_id: int) -> bool:
    """
    Delete a team together with its roster and staff.

    Raises:
        ValueError: If the team has scheduled or played games
    """
    games = await session.execute(
        select(Game.id).where(or_(Game.home_team_id == team_id, Game.away_team_id == team_id)).limit(1)
    )
    if games.scalar_one_or_none():
        raise ValueError("Cannot delete a team that has games")

    await session.execute(delete(RosterPlayer).where(RosterPlayer.team_id == team_id))
    await session.execute(delete(CoachStaff).where(CoachStaff.team_id == team_id))
    result = await session.execute(delete(Team).where(Team.id == team_id))
    await session.commit()
    return result.rowcount > 0


# ============================================================================
# Roster
# ============================================================================

async def _jersey_taken(
    session: AsyncSession, team_id: int, number: int, exclude_player_id: Optional[int] = None
) -> bool:
    query = select(RosterPlayer.id).where(RosterPlayer.team_id == team_id, RosterPlayer.number == number)
    if exclude_player_id is not None:
        query = query.where(RosterPlayer.id != exclude_player_id)
    result = await session.execute(query)
    return result.first() is not None


async def get_roster_player(session: AsyncSession, player_id: int) -> Optional[Dict]:
    player = await session.get(RosterPlayer, player_id)
    return _roster_player_to_dict(player) if player else None


async def add_roster_player(
    session: AsyncSession,
    team_id: int,
    name: str,
    number: int,
    position: Optional[str] = None,
    height: Optional[str] = None,
    nationality: Optional[str] = None,
    headshot_url: Optional[str] = None,
    stats: Optional[Dict[str, Any]] = None,
) -> Dict:
    """
    Add a player to a team's roster.

    Raises:
        LookupError: If the team doesn't exist
        ValueError: If the name is blank or the jersey number is already used on the team
    """
    if not name or not name.strip():
        raise ValueError("Player name is required")
    team = await session.get(Team, team_id)
    if team is None:
        raise LookupError("Team not found")
    if await _jersey_taken(session, team_id, number):
        raise ValueError(f"Jersey number {number} is already taken on {team.name}")

    player = RosterPlayer(
        team_id=team_id,
        name=name.strip(),
        number=number,
        position=position,
        height=height,
        nationality=nationality,
        headshot_url=headshot_url,
        stats=stats or {},
    )
    session.add(player)
    await session.commit()
    await session.refresh(player)
    return _roster_player_to_dict(player)


async def update_roster_player(session: AsyncSession, player_id: int, updates: Dict[str, Any]) -> Optional[Dict]:
    """
    Update roster fields. Verification links (linked_user_*) are left as they are.

    Raises:
        ValueError: If the new jersey number is already used on the team
    """
    player = await session.get(RosterPlayer, player_id)
    if player is None:
        return None

    update_values = {key: value for key, value in updates.items() if key in ROSTER_FIELDS and value is not None}
    if "number" in update_values and await _jersey_taken(
        session, player.team_id, update_values["number"], exclude_player_id=player_id
    ):
        raise ValueError(f"Jersey number {update_values['number']} is already taken")

    for key, value in update_values.items():
        setattr(player, key, value)
    await session.commit()
    await session.refresh(player)
    return _roster_player_to_dict(player)


async def delete_roster_player(session: AsyncSession, player_id: int) -> bool:
    result = await session.execute(delete(RosterPlayer).where(RosterPlayer.id == player_id))
    await session.commit()
    return result.rowcount > 0


async def add_coach_staff(
    session: AsyncSession,
    team_id: int,
    name: str,
    title: Optional[str] = None,
    headshot_url: Optional[str] = None,
) -> Dict:
    """Add a coach or staff member that users may later claim."""
    if not name or not name.strip():
        raise ValueError("Name is required")
    if await session.get(Team, team_id) is None:
        raise LookupError("Team not found")

    staff = CoachStaff(team_id=team_id, name=name.strip(), title=title, headshot_url=headshot_url)
    session.add(staff)
    await session.commit()
    await session.refresh(staff)
    return _staff_to_dict(staff)


async def delete_coach_staff(session: AsyncSession, staff_id: int) -> bool:
    result = await session.execute(delete(CoachStaff).where(CoachStaff.id == staff_id))
    await session.commit()
    return result.rowcount > 0


# ============================================================================
# Public views
# ============================================================================

async def _team_games(session: AsyncSession, team_id: int) -> List[Game]:
    result = await session.execute(
        select(Game).where(or_(Game.home_team_id == team_id, Game.away_team_id == team_id))
    )
    return list(result.scalars().all())


async def get_public_team(session: AsyncSession, slug: str) -> Optional[Dict]:
    """Team page: roster plus a win/loss record derived from decided games."""
    team = await _load_team(session, Team.slug == slug)
    if team is None:
        return None
    data = _team_to_dict(team, include_roster=True)
    wins, losses = team_record(await _team_games(session, team.id), team.id)
    data["wins"] = wins
    data["losses"] = losses
    return data


async def get_player_game_log(session: AsyncSession, player_id: int, limit: int = GAME_LOG_LIMIT) -> Dict:
    """
    A roster player's most recent decided games.

    Raises:
        LookupError: If the roster player doesn't exist
    """
    player = await session.get(RosterPlayer, player_id)
    if player is None:
        raise LookupError("Player not found")
    games = await _team_games(session, player.team_id)
    return {
        "player": _roster_player_to_dict(player),
        "games": stats_service.player_game_log(games, player.id, player.team_id, limit),
    }
