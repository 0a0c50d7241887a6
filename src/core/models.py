"""
Boundary layer data model(s).

These objects can be used to communicate with the Services.
Hence, both the API layer (higher) and domain/db layers (lower) will use model(s) defined here to send to/receive from the Services
(Decouples the data model specific to the DB layer, API layer, or domain layer from the information needed to send across boundaries)
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional
from uuid import UUID

# Type aliases to make the models easier to read
PlayerColor = str
PlayerId = str


@dataclass
class GameModel:
    """Transport-safe representation of a backgammon game used between API, Service, DB, and Game layers."""

    position_id: str
    current_player: PlayerColor
    registered_players: dict[PlayerColor, PlayerId]
    status: str
    mode: str
    is_ranked: bool
    dice: list[int] = field(default_factory=list)
    dice_left: list[int] = field(default_factory=list)
    moves: list[str] = field(default_factory=list)
    difficulty: Optional[str] = None
    winner: Optional[PlayerColor] = None
    white_score: int = 0
    black_score: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass
class UserModel:
    id: UUID
    email: str
    username: str
    password_hash: str
    elo: int
    level: str
    subscription_type: str
    avatar: Optional[str] = None
    is_active: bool = True
    email_verified: bool = False
    created_at: Optional[datetime] = None
    last_login_at: Optional[datetime] = None


@dataclass
class AnalysisModel:
    user_id: UUID
    position_id: str
    dice: list[int]
    move: str
    best_move: str
    equity: float
    pr: float
    explanation: str
    alternatives: list[str]
    analysis_type: str
    created_at: Optional[datetime] = None


@dataclass
class CoachUsageModel:
    user_id: UUID
    month: str  # "YYYY-MM"
    requests: int
