"""
Pydantic models for API request/response validation.
"""

from datetime import datetime
from typing import Optional, List
from pydantic import BaseModel, Field


class SignupRequest(BaseModel):
    """Request to create an account."""

    name: str
    email: str
    password: str
    role: Optional[str] = None  # Defaults to "player"


class SigninRequest(BaseModel):
    """Email/password login."""

    email: str
    password: str


class UserResponse(BaseModel):
    """Public user fields."""

    id: int
    name: str
    email: str
    role: str


class AuthResponse(BaseModel):
    """User plus bearer token."""

    user: UserResponse
    token: str


class UpdateProfileRequest(BaseModel):
    """Change display name and/or password."""

    name: Optional[str] = None
    currentPassword: Optional[str] = None
    newPassword: Optional[str] = None


class MessageResponse(BaseModel):
    message: str


class SportCreate(BaseModel):
    """Request to create a sport (admin only)."""

    name: str


class SportResponse(BaseModel):
    id: int
    name: str
    created_by: Optional[int] = None
    created_at: Optional[str] = None


class CreateSessionRequest(BaseModel):
    """
    Request to schedule a session.

    Fields are optional here so the service can report missing values as
    InvalidInput. Naive date_time values are read in the scheduler time zone.
    """

    sport_id: Optional[int] = None
    date_time: Optional[datetime] = None
    venue: Optional[str] = None
    max_players: Optional[int] = None
    existing_players: List[int] = Field(default_factory=list)


class SeedFailure(BaseModel):
    player_id: int
    reason: str


class SessionResponse(BaseModel):
    """Session with whichever derived fields the view provides."""

    id: int
    sport_id: int
    creator_id: int
    date_time: str
    venue: str
    max_players: int
    status: str
    cancel_reason: Optional[str] = None
    created_at: Optional[str] = None
    sport_name: Optional[str] = None
    creator_name: Optional[str] = None
    current_players: Optional[int] = None
    is_joinable: Optional[bool] = None
    has_joined: Optional[bool] = None
    team: Optional[int] = None


class CreateSessionResponse(SessionResponse):
    seed_failures: List[SeedFailure] = Field(default_factory=list)


class JoinSessionResponse(BaseModel):
    message: str
    team: int


class CancelSessionRequest(BaseModel):
    reason: Optional[str] = None


class SportPopularity(BaseModel):
    name: str
    session_count: int


class SessionReportResponse(BaseModel):
    total_sessions: int
    sport_popularity: List[SportPopularity]


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    database: str
