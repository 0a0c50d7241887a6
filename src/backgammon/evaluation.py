"""
Full plays and a heuristic position evaluation.

This stands in for a real engine (GNU Backgammon) when none is configured: plays are generated exactly,
but positions are only scored with a handful of hand-tuned features (race, blots, home board points, bar).
"""

import math
from dataclasses import dataclass

from src.backgammon.board import BAR, HOME_BOARD, NUM_POINTS, Board
from src.backgammon.moves import Move, apply_move, candidate_moves
from src.core.shared_types import Color

RACE_WEIGHT = 0.01
BLOT_PENALTY = 0.05
HOME_POINT_BONUS = 0.04
BAR_WEIGHT = 0.1


@dataclass(frozen=True)
class Play:
    """A full play: the checker moves of one turn, and the position they lead to."""

    moves: tuple[Move, ...]
    board: Board

    @property
    def notation(self) -> str:
        return canonical_play(move.to_notation() for move in self.moves)


def _sort_key(token: str) -> tuple[int, int]:
    from_text, to_text = token.split("/")
    from_value = BAR + 1 if from_text == "bar" else int(from_text)
    to_value = 0 if to_text == "off" else int(to_text)
    return -from_value, -to_value


def canonical_play(tokens) -> str:
    """Order the checker moves of a play so that equal plays written differently compare equal."""
    return " ".join(sorted(tokens, key=_sort_key))


def _position_key(board: Board) -> tuple:
    return (tuple(board.points), tuple(board.bar.values()), tuple(board.off.values()))


def generate_plays(board: Board, color: Color, dice: list[int]) -> list[Play]:
    """
    Every distinct full play for the dice (one entry per reachable position).
    Only plays using the largest possible number of dice are kept; if only one die can be used,
    the larger one must be played when possible.
    """
    plays: dict[tuple, Play] = {}
    visited: set[tuple] = set()

    def explore(current: Board, dice_left: list[int], played: tuple[Move, ...]) -> None:
        state = (_position_key(current), tuple(sorted(dice_left)))
        if state in visited:
            return
        visited.add(state)

        options = candidate_moves(current, color, dice_left) if dice_left else []
        if not options:
            if played:
                plays.setdefault(_position_key(current), Play(played, current))
            return
        for move in options:
            remaining = list(dice_left)
            remaining.remove(move.die)
            explore(apply_move(current, color, move), remaining, played + (move,))

    explore(board, list(dice), ())

    if not plays:
        return []
    most_dice = max(len(play.moves) for play in plays.values())
    full_plays = [play for play in plays.values() if len(play.moves) == most_dice]
    if most_dice == 1 and len(set(dice)) == 2:
        highest = max(play.moves[0].die for play in full_plays)
        full_plays = [play for play in full_plays if play.moves[0].die == highest]
    return full_plays


def heuristic_score(board: Board, color: Color) -> float:
    """Positive when 'color' stands better."""
    opponent = color.opponent
    score = RACE_WEIGHT * (board.pip_count(opponent) - board.pip_count(color))
    for point in range(NUM_POINTS):
        checkers = board.checkers_on(point, color)
        if checkers == 1:
            score -= BLOT_PENALTY
        elif checkers >= 2 and point in HOME_BOARD[color]:
            score += HOME_POINT_BONUS
    score += BAR_WEIGHT * (board.bar[opponent] - board.bar[color])
    return score


def equity(board: Board, color: Color) -> float:
    """Heuristic score squashed into the [-1, 1] range of cubeless money equity."""
    return round(math.tanh(heuristic_score(board, color)), 3)


def win_probability(equity_value: float) -> float:
    return round((equity_value + 1) / 2, 3)


def ranked_plays(board: Board, color: Color, dice: list[int]) -> list[tuple[Play, float]]:
    """Plays with the equity of their resulting position (for the player who moved), best first."""
    scored = [(play, equity(play.board, color)) for play in generate_plays(board, color, dice)]
    return sorted(scored, key=lambda item: (-item[1], item[0].notation))
