"""
SQLAlchemy ORM models for the sport session scheduler.
"""

import enum
from sqlalchemy import (
    Column,
    Integer,
    String,
    Text,
    DateTime,
    Enum,
    ForeignKey,
    UniqueConstraint,
    CheckConstraint,
    Index,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from sport_scheduler.database.db import Base


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


class UserRole(str, enum.Enum):
    """User role enum."""

    PLAYER = "player"
    ADMIN = "admin"


class SessionStatus(str, enum.Enum):
    """Session status enum."""

    ACTIVE = "active"
    CANCELLED = "cancelled"


class User(Base):
    """User accounts with email/password authentication."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, unique=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(
        Enum(UserRole, name="user_role", values_callable=_enum_values),
        nullable=False,
        default=UserRole.PLAYER,
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    sports = relationship("Sport", back_populates="creator", cascade="all, delete-orphan")
    created_sessions = relationship(
        "Session", back_populates="creator", cascade="all, delete-orphan"
    )
    memberships = relationship(
        "SessionPlayer", back_populates="player", cascade="all, delete-orphan"
    )

    __table_args__ = (Index("idx_users_email", "email"),)


class Sport(Base):
    """Sports that sessions can be scheduled for."""

    __tablename__ = "sports"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    created_by = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    creator = relationship("User", back_populates="sports")
    sessions = relationship("Session", back_populates="sport", cascade="all, delete-orphan")


class Session(Base):
    """A scheduled instance of a sport at a venue with a player cap."""

    __tablename__ = "sessions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    sport_id = Column(Integer, ForeignKey("sports.id", ondelete="CASCADE"), nullable=False)
    creator_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    date_time = Column(DateTime(timezone=True), nullable=False)  # UTC
    venue = Column(String(255), nullable=False)
    max_players = Column(Integer, nullable=False)
    status = Column(
        Enum(SessionStatus, name="session_status", values_callable=_enum_values),
        nullable=False,
        default=SessionStatus.ACTIVE,
    )
    cancel_reason = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    sport = relationship("Sport", back_populates="sessions")
    creator = relationship("User", back_populates="created_sessions")
    players = relationship("SessionPlayer", back_populates="session", cascade="all, delete-orphan")

    __table_args__ = (
        CheckConstraint("max_players > 0", name="ck_sessions_max_players_positive"),
        Index("idx_sessions_date_time", "date_time"),
        Index("idx_sessions_creator", "creator_id"),
        Index("idx_sessions_sport", "sport_id"),
    )


class SessionPlayer(Base):
    """Membership of one player in one session, on team 1 or 2."""

    __tablename__ = "session_players"

    id = Column(Integer, primary_key=True, autoincrement=True)
    session_id = Column(Integer, ForeignKey("sessions.id", ondelete="CASCADE"), nullable=False)
    player_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    team = Column(Integer, nullable=False)
    joined_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    session = relationship("Session", back_populates="players")
    player = relationship("User", back_populates="memberships")

    __table_args__ = (
        UniqueConstraint("session_id", "player_id", name="uq_session_players_session_player"),
        CheckConstraint("team IN (1, 2)", name="ck_session_players_team"),
        Index("idx_session_players_session", "session_id"),
        Index("idx_session_players_player", "player_id"),
    )
