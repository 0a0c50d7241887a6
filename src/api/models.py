"""Requests and Response models"""

from datetime import datetime
from typing import Any, Generic, Optional, TypeVar
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel

from src.backgammon.board import BAR, NUM_POINTS, OFF
from src.backgammon.position_id import POSITION_ID_LENGTH
from src.core.config import settings
from src.core.exceptions import InvalidRequestError
from src.core.shared_types import Color, Difficulty, GameMode, UserLevel

PlayerColor = str
PlayerId = str

USERNAME_MIN_LENGTH = 3
USERNAME_MAX_LENGTH = 30

T = TypeVar("T")


class CamelModel(BaseModel):
    """JSON fields are camelCase on the wire (the frontend's convention), snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _validate_username(value: str) -> str:
    value = value.strip().lower()
    if not USERNAME_MIN_LENGTH <= len(value) <= USERNAME_MAX_LENGTH:
        raise InvalidRequestError(
            f"Username must be between {USERNAME_MIN_LENGTH} and {USERNAME_MAX_LENGTH} characters."
        )
    if not all(character.isalnum() or character in "_-." for character in value):
        raise InvalidRequestError(
            "Username may only contain letters, digits, '_', '-' and '.'."
        )
    return value


# --- REQUEST MODELS ---
class RegisterRequest(CamelModel):
    email: EmailStr
    password: str
    username: str

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.lower()

    @field_validator("password")
    @classmethod
    def validate_password(cls, value: str) -> str:
        if len(value) < settings.MIN_PASSWORD_LENGTH:
            raise InvalidRequestError(
                f"Password must be at least {settings.MIN_PASSWORD_LENGTH} characters."
            )
        return value

    @field_validator("username")
    @classmethod
    def validate_username(cls, value: str) -> str:
        return _validate_username(value)


class LoginRequest(CamelModel):
    email: EmailStr
    password: str

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.lower()


class RefreshRequest(CamelModel):
    refresh_token: str


class UpdateProfileRequest(CamelModel):
    username: Optional[str] = None
    avatar: Optional[str] = None

    @field_validator("username")
    @classmethod
    def validate_username(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        return _validate_username(value)


class CreateGameRequest(CamelModel):
    mode: GameMode
    is_ranked: bool
    difficulty: Optional[Difficulty] = None


class MoveRequest(CamelModel):
    """
    Points are 0..23 (white moves up, black moves down), 24 is the bar (as a source), 25 is off the board (as a destination).
    """

    from_point: int = Field(alias="from")
    to_point: int = Field(alias="to")
    die: int = Field(alias="diceValue")

    @field_validator("from_point")
    @classmethod
    def validate_from_point(cls, value: int) -> int:
        if not 0 <= value <= BAR:
            raise InvalidRequestError(
                f"Cannot interpret from: {value!r} as a point (0-{NUM_POINTS - 1}) or the bar ({BAR})."
            )
        return value

    @field_validator("to_point")
    @classmethod
    def validate_to_point(cls, value: int) -> int:
        if not (0 <= value < NUM_POINTS or value == OFF):
            raise InvalidRequestError(
                f"Cannot interpret to: {value!r} as a point (0-{NUM_POINTS - 1}) or off the board ({OFF})."
            )
        return value

    @field_validator("die")
    @classmethod
    def validate_die(cls, value: int) -> int:
        if not 1 <= value <= 6:
            raise InvalidRequestError(f"Die value must be between 1 and 6, got {value}.")
        return value


class AnalyzeRequest(CamelModel):
    board_state: str
    dice: list[int]
    move: str
    player_color: Color = Color.WHITE
    analysis_type: str = "full"

    @field_validator("board_state")
    @classmethod
    def validate_board_state(cls, value: str) -> str:
        if len(value) != POSITION_ID_LENGTH:
            raise InvalidRequestError(
                f"Board state must be a {POSITION_ID_LENGTH} character position ID."
            )
        return value

    @field_validator("dice")
    @classmethod
    def validate_dice(cls, value: list[int]) -> list[int]:
        if len(value) != 2 or any(not 1 <= die <= 6 for die in value):
            raise InvalidRequestError("Invalid dice format: expected two values between 1 and 6.")
        return value


class ChatRequest(CamelModel):
    message: str = Field(min_length=1)
    game_context: Optional[dict[str, Any]] = None
    player_level: Optional[UserLevel] = None


# --- RESPONSE MODELS ---
class Envelope(CamelModel, Generic[T]):
    success: bool = True
    message: Optional[str] = None
    data: T


class UserResponse(CamelModel):
    id: UUID
    email: str
    username: str
    elo: int
    level: str
    subscription_type: str
    avatar: Optional[str] = None
    is_active: bool
    email_verified: bool
    created_at: Optional[datetime] = None
    last_login_at: Optional[datetime] = None


class TokenResponse(CamelModel):
    access_token: str
    refresh_token: str
    token_type: str = "Bearer"
    expires_in: int


class AuthResponse(CamelModel):
    user: UserResponse
    tokens: TokenResponse


class EmailAvailabilityResponse(CamelModel):
    email: str
    is_available: bool


class UsernameAvailabilityResponse(CamelModel):
    username: str
    is_available: bool


class DiceResponse(CamelModel):
    die1: int
    die2: int


class BoardPoint(CamelModel):
    point: int
    player: PlayerColor
    checkers: int


class GameResponse(CamelModel):
    id: UUID
    status: str
    mode: str
    is_ranked: bool
    difficulty: Optional[str] = None
    current_player: PlayerColor
    players: dict[PlayerColor, PlayerId]
    board_state: str
    board: list[BoardPoint]
    bar: dict[PlayerColor, int]
    off: dict[PlayerColor, int]
    pip_count: dict[PlayerColor, int]
    dice: Optional[DiceResponse] = None
    dice_left: list[int]
    moves: list[str]
    move_count: int
    winner: Optional[PlayerColor] = None
    white_score: int
    black_score: int
    player_color: Optional[PlayerColor] = None
    is_player_turn: bool
    can_move: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class RollResponse(CamelModel):
    game_id: UUID
    dice: DiceResponse
    current_player: PlayerColor
    turn_passed: bool
    game: GameResponse


class MoveView(CamelModel):
    from_point: int = Field(serialization_alias="from")
    to_point: int = Field(serialization_alias="to")
    dice_value: int
    notation: str


class LegalMovesResponse(CamelModel):
    game_id: UUID
    player_color: PlayerColor
    dice_left: list[int]
    legal_moves: list[MoveView]


class AnalysisResponse(CamelModel):
    best_move: str
    equity: float
    pr: float
    explanation: str
    alternatives: list[str]
    analysis_type: str
    confidence: float
    analysis_id: Optional[UUID] = None
    quota_remaining: int
    processed_at: datetime


class MoveSuggestion(CamelModel):
    move: str
    equity: float
    win_probability: float
    rank: int
    is_best: bool


class PositionEvaluation(CamelModel):
    win_probability: float
    equity: float
    cubeful_equity: float
    pip_count: dict[PlayerColor, int]


class ChatUsage(CamelModel):
    remaining: Optional[int] = None
    total: Optional[int] = None


class ChatResponse(CamelModel):
    response: str
    usage: ChatUsage


class RankingEntry(CamelModel):
    user_id: UUID
    username: str
    elo: int
    rank: int
    games_played: int


class LeaderboardResponse(CamelModel):
    rankings: list[RankingEntry]
    total: int


class UserRankResponse(CamelModel):
    global_rank: int
    total_players: int
    percentile: int
