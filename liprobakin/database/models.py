"""
SQLAlchemy ORM models for the Liprobakin league.
"""

import enum
from sqlalchemy import (
    JSON,
    Column,
    Integer,
    String,
    Text,
    Boolean,
    Date,
    DateTime,
    ForeignKey,
    UniqueConstraint,
    CheckConstraint,
    Index,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from liprobakin.database.db import Base

# JSONB on PostgreSQL, plain JSON elsewhere
JSONType = JSON().with_variant(JSONB(), "postgresql")


class Gender(str, enum.Enum):
    """League division."""

    MEN = "men"
    WOMEN = "women"


class VerificationStatus(str, enum.Enum):
    """Verification request status enum."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class Team(Base):
    """League franchises."""

    __tablename__ = "teams"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False)
    slug = Column(String(100), nullable=False, unique=True)
    city = Column(String, nullable=True)
    logo_url = Column(String, nullable=True)
    primary_color = Column(String(20), nullable=True)
    secondary_color = Column(String(20), nullable=True)
    gender = Column(String(10), nullable=False, default=Gender.MEN.value)
    conference = Column(String, nullable=True)
    nationality = Column(String, nullable=True)
    # Stored record, refreshed from decided games by the record sync
    wins = Column(Integer, nullable=False, default=0)
    losses = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    roster = relationship(
        "RosterPlayer", back_populates="team", cascade="all, delete-orphan", order_by="RosterPlayer.number"
    )
    coach_staff = relationship("CoachStaff", back_populates="team", cascade="all, delete-orphan")

    __table_args__ = (
        CheckConstraint("gender IN ('men', 'women')", name="ck_teams_gender"),
        Index("idx_teams_gender", "gender"),
    )


class RosterPlayer(Base):
    """Players on a team roster."""

    __tablename__ = "roster_players"

    id = Column(Integer, primary_key=True, autoincrement=True)
    team_id = Column(Integer, ForeignKey("teams.id", ondelete="CASCADE"), nullable=False)
    name = Column(String, nullable=False)  # Official roster name
    number = Column(Integer, nullable=False)
    position = Column(String(20), nullable=True)
    height = Column(String(20), nullable=True)
    nationality = Column(String, nullable=True)
    headshot_url = Column(String, nullable=True)
    stats = Column(JSONType, nullable=True)  # Season snapshot: pts/reb/ast/blk/stl
    # Link to a verified user account (set only on verification approval)
    linked_user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    linked_user_name = Column(String, nullable=True)
    linked_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    team = relationship("Team", back_populates="roster")

    __table_args__ = (
        UniqueConstraint("team_id", "number", name="uq_roster_players_team_number"),
        Index("idx_roster_players_team_id", "team_id"),
    )


class CoachStaff(Base):
    """Coaches and staff attached to a team."""

    __tablename__ = "coach_staff"

    id = Column(Integer, primary_key=True, autoincrement=True)
    team_id = Column(Integer, ForeignKey("teams.id", ondelete="CASCADE"), nullable=False)
    name = Column(String, nullable=False)
    title = Column(String, nullable=True)  # e.g. "Head Coach", "Physio"
    headshot_url = Column(String, nullable=True)
    linked_user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    linked_user_name = Column(String, nullable=True)
    linked_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    team = relationship("Team", back_populates="coach_staff")

    __table_args__ = (Index("idx_coach_staff_team_id", "team_id"),)


class Game(Base):
    """Scheduled and completed games. Box scores are embedded as JSON."""

    __tablename__ = "games"

    id = Column(Integer, primary_key=True, autoincrement=True)
    home_team_id = Column(Integer, ForeignKey("teams.id"), nullable=False)
    away_team_id = Column(Integer, ForeignKey("teams.id"), nullable=False)
    game_date = Column(Date, nullable=True)
    game_time = Column(String(10), nullable=True)  # "19:30"
    venue = Column(String, nullable=True)
    gender = Column(String(10), nullable=False, default=Gender.MEN.value)
    completed = Column(Boolean, nullable=False, default=False)
    winner_team_id = Column(Integer, ForeignKey("teams.id"), nullable=True)
    loser_team_id = Column(Integer, ForeignKey("teams.id"), nullable=True)
    winner_score = Column(Integer, nullable=True)
    loser_score = Column(Integer, nullable=True)
    player_stats = Column(JSONType, nullable=True)  # List of box-score entries
    team_stats = Column(JSONType, nullable=True)  # {team_id: totals} cached on box-score save
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    home_team = relationship("Team", foreign_keys=[home_team_id])
    away_team = relationship("Team", foreign_keys=[away_team_id])

    __table_args__ = (
        CheckConstraint("home_team_id != away_team_id", name="ck_games_distinct_teams"),
        CheckConstraint("gender IN ('men', 'women')", name="ck_games_gender"),
        Index("idx_games_date", "game_date"),
        Index("idx_games_completed", "completed"),
    )


class User(Base):
    """User accounts: sign-in identity plus profile."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String, nullable=False, unique=True)
    password_hash = Column(String, nullable=False)
    # Identity from sign-up; never overwritten by roster data
    first_name = Column(String, nullable=False)
    last_name = Column(String, nullable=False)
    phone_number = Column(String, nullable=True)
    role = Column(String(20), nullable=True)  # player | coach | staff | fan
    team_id = Column(Integer, ForeignKey("teams.id", ondelete="SET NULL"), nullable=True)
    team_name = Column(String, nullable=True)
    verification_status = Column(String(20), nullable=True)
    verification_image_url = Column(String, nullable=True)
    verification_submitted_at = Column(DateTime(timezone=True), nullable=True)
    verification_reviewed_at = Column(DateTime(timezone=True), nullable=True)
    verification_reviewed_by = Column(String, nullable=True)
    verification_notes = Column(Text, nullable=True)
    linked_player_id = Column(Integer, nullable=True)
    linked_player_name = Column(String, nullable=True)
    favorite_team_id = Column(Integer, ForeignKey("teams.id", ondelete="SET NULL"), nullable=True)
    favorite_team_name = Column(String, nullable=True)
    favorite_athlete_id = Column(Integer, nullable=True)
    favorite_athlete_name = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    refresh_tokens = relationship(
        "RefreshToken", back_populates="user", cascade="all, delete-orphan"
    )

    __table_args__ = (Index("idx_users_email", "email"),)


class RefreshToken(Base):
    """Refresh tokens for JWT authentication."""

    __tablename__ = "refresh_tokens"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    token = Column(String, nullable=False, unique=True)
    expires_at = Column(DateTime(timezone=True), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    user = relationship("User", back_populates="refresh_tokens")

    __table_args__ = (Index("idx_refresh_tokens_token", "token"),)


class VerificationRequest(Base):
    """A user's claim to be a player/coach/staff member of a team."""

    __tablename__ = "verification_requests"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    # Snapshot of the user's identity at submission
    user_first_name = Column(String, nullable=False)
    user_last_name = Column(String, nullable=False)
    user_phone = Column(String, nullable=True)
    role = Column(String(20), nullable=False)
    team_id = Column(Integer, ForeignKey("teams.id", ondelete="SET NULL"), nullable=True)
    team_name = Column(String, nullable=True)
    selected_person_id = Column(Integer, nullable=True)
    selected_person_name = Column(String, nullable=True)
    id_image_url = Column(String, nullable=False)
    status = Column(String(20), nullable=False, default=VerificationStatus.PENDING.value)
    submitted_at = Column(DateTime(timezone=True), server_default=func.now())
    reviewed_at = Column(DateTime(timezone=True), nullable=True)
    reviewed_by = Column(String, nullable=True)
    notes = Column(Text, nullable=True)

    __table_args__ = (
        CheckConstraint(
            "status IN ('pending', 'approved', 'rejected')", name="ck_verification_requests_status"
        ),
        Index("idx_verification_requests_status", "status"),
        Index("idx_verification_requests_user_id", "user_id"),
    )


class AdminUser(Base):
    """Back-office accounts. Roles are merged into a permission map."""

    __tablename__ = "admin_users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True)
    email = Column(String, nullable=False)
    display_name = Column(String, nullable=True)
    roles = Column(JSONType, nullable=False, default=list)
    permissions = Column(JSONType, nullable=True)
    is_first_login = Column(Boolean, nullable=False, default=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_by = Column(Integer, nullable=True)  # user_id of the creating master admin
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    last_login = Column(DateTime(timezone=True), nullable=True)
    last_activity = Column(DateTime(timezone=True), nullable=True)

    __table_args__ = (Index("idx_admin_users_email", "email"),)


class AuditLog(Base):
    """Append-only record of back-office actions."""

    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    action = Column(String(50), nullable=False)
    user_id = Column(Integer, nullable=True)
    user_email = Column(String, nullable=True)
    target_type = Column(String(20), nullable=False)
    target_id = Column(String, nullable=True)
    target_name = Column(String, nullable=True)
    details = Column(JSONType, nullable=True)
    timestamp = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        Index("idx_audit_logs_timestamp", "timestamp"),
        Index("idx_audit_logs_action", "action"),
    )


class NewsArticle(Base):
    """League news. French is the source language; English fields are translations."""

    __tablename__ = "news_articles"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String, nullable=False)
    headline = Column(String, nullable=True)
    summary = Column(Text, nullable=True)
    category = Column(String(50), nullable=True)
    image_url = Column(String, nullable=True)
    title_en = Column(String, nullable=True)
    headline_en = Column(String, nullable=True)
    summary_en = Column(Text, nullable=True)
    created_by = Column(Integer, nullable=True)
    published_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (Index("idx_news_articles_published_at", "published_at"),)
