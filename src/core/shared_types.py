"""
Type definitions used across layers
"""

from enum import StrEnum


class Status(StrEnum):
    WAITING = "waiting"
    PLAYING = "playing"
    COMPLETED = "completed"
    ABANDONED = "abandoned"


class Color(StrEnum):
    WHITE = "white"
    BLACK = "black"

    @property
    def opponent(self) -> "Color":
        return Color.BLACK if self == Color.WHITE else Color.WHITE


class GameMode(StrEnum):
    PLAYER_VS_PLAYER = "pvp"
    PLAYER_VS_COMPUTER = "pvc"


class Difficulty(StrEnum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class GameType(StrEnum):
    """How much a finished game weighs in the rating update."""

    RATED = "rated"
    CASUAL = "casual"
    TOURNAMENT = "tournament"


class SubscriptionType(StrEnum):
    FREE = "FREE"
    PREMIUM = "PREMIUM"


class UserLevel(StrEnum):
    BEGINNER = "BEGINNER"
    INTERMEDIATE = "INTERMEDIATE"
    ADVANCED = "ADVANCED"
    EXPERT = "EXPERT"


class TokenType(StrEnum):
    ACCESS = "access"
    REFRESH = "refresh"


# --- Identifier of the built-in opponent in games against the computer
AI_OPPONENT_ID = "ai-opponent"
