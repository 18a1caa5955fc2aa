"""
Pydantic models for API request/response validation.
"""

from datetime import date
from typing import Optional, List, Dict, Any, Literal
from pydantic import BaseModel, Field, ConfigDict, model_validator

GenderLiteral = Literal["men", "women"]


# ============================================================================
# Auth
# ============================================================================

class SignupRequest(BaseModel):
    """Request to sign up a new user."""

    email: str
    password: str
    first_name: str
    last_name: str
    phone_number: Optional[str] = None


class LoginRequest(BaseModel):
    """Request to login with email and password."""

    email: str
    password: str


class AuthResponse(BaseModel):
    """Authentication response with JWT token."""

    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    user_id: int
    email: str
    is_admin: bool = False


class RefreshTokenRequest(BaseModel):
    """Request to refresh access token."""

    refresh_token: str


class RefreshTokenResponse(BaseModel):
    """Response with new access token."""

    access_token: str
    token_type: str = "bearer"


class UserResponse(BaseModel):
    """Public view of a user account."""

    id: int
    email: str
    first_name: str
    last_name: str
    phone_number: Optional[str] = None
    role: Optional[str] = None
    team_id: Optional[int] = None
    team_name: Optional[str] = None
    verification_status: Optional[str] = None
    linked_player_id: Optional[int] = None
    linked_player_name: Optional[str] = None
    favorite_team_id: Optional[int] = None
    favorite_team_name: Optional[str] = None
    favorite_athlete_id: Optional[int] = None
    favorite_athlete_name: Optional[str] = None


# ============================================================================
# Profile setup / verification
# ============================================================================

class FanProfileRequest(BaseModel):
    """Complete profile setup as a fan."""

    favorite_team_id: int
    favorite_athlete_id: int


class VerificationRequestResponse(BaseModel):
    """Verification request as shown in the admin review queue."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    user_first_name: str
    user_last_name: str
    user_phone: Optional[str] = None
    role: str
    team_id: Optional[int] = None
    team_name: Optional[str] = None
    selected_person_id: Optional[int] = None
    selected_person_name: Optional[str] = None
    id_image_url: str
    status: str
    submitted_at: Optional[str] = None
    reviewed_at: Optional[str] = None
    reviewed_by: Optional[str] = None
    notes: Optional[str] = None


class ReviewRequest(BaseModel):
    """Admin decision on a verification request."""

    decision: Literal["approved", "rejected"]
    notes: Optional[str] = None


# ============================================================================
# Admin users
# ============================================================================

class AdminUserCreate(BaseModel):
    """Request to create an admin user."""

    email: str
    display_name: str
    password: str
    roles: List[str]


class AdminRolesUpdate(BaseModel):
    roles: List[str]


class AdminActiveUpdate(BaseModel):
    is_active: bool


class AdminPasswordChange(BaseModel):
    new_password: str


class FirstLoginRequest(BaseModel):
    display_name: str


class AdminUserResponse(BaseModel):
    """Admin user with merged permissions."""

    id: int
    user_id: int
    email: str
    display_name: Optional[str] = None
    roles: List[str]
    permissions: Dict[str, bool]
    is_first_login: bool
    is_active: bool
    created_by: Optional[int] = None
    created_at: Optional[str] = None
    last_login: Optional[str] = None
    last_activity: Optional[str] = None


# ============================================================================
# Teams / roster
# ============================================================================

class TeamCreate(BaseModel):
    """Request to create a team."""

    name: str
    gender: GenderLiteral
    city: Optional[str] = None
    conference: Optional[str] = None
    logo_url: Optional[str] = None
    primary_color: Optional[str] = None
    secondary_color: Optional[str] = None
    nationality: Optional[str] = None


class TeamUpdate(BaseModel):
    """Request to update a team."""

    name: Optional[str] = None
    gender: Optional[GenderLiteral] = None
    city: Optional[str] = None
    conference: Optional[str] = None
    logo_url: Optional[str] = None
    primary_color: Optional[str] = None
    secondary_color: Optional[str] = None
    nationality: Optional[str] = None


class RosterPlayerCreate(BaseModel):
    name: str
    number: int = Field(ge=0, le=99)
    position: Optional[str] = None
    height: Optional[str] = None
    nationality: Optional[str] = None
    headshot_url: Optional[str] = None
    stats: Optional[Dict[str, Any]] = None


class RosterPlayerUpdate(BaseModel):
    name: Optional[str] = None
    number: Optional[int] = Field(default=None, ge=0, le=99)
    position: Optional[str] = None
    height: Optional[str] = None
    nationality: Optional[str] = None
    headshot_url: Optional[str] = None
    stats: Optional[Dict[str, Any]] = None


class CoachStaffCreate(BaseModel):
    name: str
    title: Optional[str] = None
    headshot_url: Optional[str] = None


# ============================================================================
# Games
# ============================================================================

class GameCreate(BaseModel):
    """Request to schedule a game."""

    home_team_id: int
    away_team_id: int
    gender: GenderLiteral
    game_date: Optional[date] = None
    game_time: Optional[str] = None  # "19:30"
    venue: Optional[str] = None

    @model_validator(mode="after")
    def validate_distinct_teams(self):
        """A team cannot play itself."""
        if self.home_team_id == self.away_team_id:
            raise ValueError("Home and away teams must be different")
        return self


class PlayerStatEntry(BaseModel):
    """One player's line in a box score."""

    player_id: int
    player_name: Optional[str] = None
    team_id: int
    pts: Optional[int] = Field(default=None, ge=0)
    reb: Optional[int] = Field(default=None, ge=0)
    oreb: int = Field(default=0, ge=0)
    dreb: int = Field(default=0, ge=0)
    ast: int = Field(default=0, ge=0)
    stl: int = Field(default=0, ge=0)
    blk: int = Field(default=0, ge=0)
    to: int = Field(default=0, ge=0)
    pf: int = Field(default=0, ge=0)
    two_pm: int = Field(default=0, ge=0)
    two_pa: int = Field(default=0, ge=0)
    three_pm: int = Field(default=0, ge=0)
    three_pa: int = Field(default=0, ge=0)
    ft_m: int = Field(default=0, ge=0)
    ft_a: int = Field(default=0, ge=0)

    @model_validator(mode="after")
    def validate_made_not_above_attempted(self):
        """Made shots can never exceed attempts."""
        for made, attempted in (("two_pm", "two_pa"), ("three_pm", "three_pa"), ("ft_m", "ft_a")):
            if getattr(self, made) > getattr(self, attempted):
                raise ValueError(f"{made} cannot exceed {attempted}")
        return self


class BoxScoreRequest(BaseModel):
    player_stats: List[PlayerStatEntry]


class GameCompleteRequest(BaseModel):
    """Final score of a game."""

    home_score: int = Field(ge=0)
    away_score: int = Field(ge=0)

    @model_validator(mode="after")
    def validate_not_tied(self):
        if self.home_score == self.away_score:
            raise ValueError("Basketball games cannot end in a tie")
        return self


# ============================================================================
# Standings / news
# ============================================================================

class StandingRow(BaseModel):
    """One ranked team in a division table."""

    seed: int
    team_id: int
    team_name: Optional[str] = None
    gender: str
    wins: int
    losses: int
    games_played: int
    total_points: int
    league_points: int


class StandingsResponse(BaseModel):
    standings: Dict[str, List[StandingRow]]


class NewsArticleCreate(BaseModel):
    title: str
    headline: Optional[str] = None
    summary: Optional[str] = None
    category: Optional[str] = None
    image_url: Optional[str] = None
    title_en: Optional[str] = None
    headline_en: Optional[str] = None
    summary_en: Optional[str] = None


class NewsArticleUpdate(BaseModel):
    title: Optional[str] = None
    headline: Optional[str] = None
    summary: Optional[str] = None
    category: Optional[str] = None
    image_url: Optional[str] = None
    title_en: Optional[str] = None
    headline_en: Optional[str] = None
    summary_en: Optional[str] = None


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    message: str
