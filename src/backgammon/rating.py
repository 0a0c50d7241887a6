"""ELO rating updates after a finished game."""

import math
from dataclasses import dataclass

from src.core.shared_types import GameType

INITIAL_ELO = 1500
MIN_ELO = 800
MAX_ELO = 2800

BASE_K_FACTOR: dict[GameType, int] = {
    GameType.RATED: 32,
    GameType.CASUAL: 16,
    GameType.TOURNAMENT: 48,
}

NEW_PLAYER_THRESHOLD = 1600
MASTER_THRESHOLD = 2400


@dataclass(frozen=True)
class RatingChange:
    winner_change: int
    loser_change: int
    new_winner_elo: int
    new_loser_elo: int


def round_half_up(value: float) -> int:
    """Halves round towards positive infinity: 6.5 -> 7, -6.5 -> -6."""
    return math.floor(value + 0.5)


def expected_score(player_elo: float, opponent_elo: float) -> float:
    return 1 / (1 + 10 ** ((opponent_elo - player_elo) / 400))


def k_factor(game_type: GameType, player_elo: int, opponent_elo: int) -> int:
    """Base K for the game type; more volatile for newcomers, damped among masters."""
    k = float(BASE_K_FACTOR[game_type])
    if min(player_elo, opponent_elo) < NEW_PLAYER_THRESHOLD:
        k *= 1.5
    if (player_elo + opponent_elo) / 2 > MASTER_THRESHOLD:
        k *= 0.8
    return round_half_up(k)


def clamp_elo(elo: int) -> int:
    return max(MIN_ELO, min(MAX_ELO, elo))


def rate_game(
    winner_elo: int,
    loser_elo: int,
    game_type: GameType = GameType.RATED,
    is_draw: bool = False,
) -> RatingChange:
    k = k_factor(game_type, winner_elo, loser_elo)
    winner_actual = 0.5 if is_draw else 1.0
    loser_actual = 0.5 if is_draw else 0.0

    winner_change = round_half_up(k * (winner_actual - expected_score(winner_elo, loser_elo)))
    loser_change = round_half_up(k * (loser_actual - expected_score(loser_elo, winner_elo)))

    return RatingChange(
        winner_change=winner_change,
        loser_change=loser_change,
        new_winner_elo=clamp_elo(winner_elo + winner_change),
        new_loser_elo=clamp_elo(loser_elo + loser_change),
    )
