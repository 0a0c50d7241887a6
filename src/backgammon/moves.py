"""
Movement rules for a single checker.

A Move takes one checker from a point (or from the bar) and moves it by the value of one die.
Turn-level bookkeeping (which dice are left, whose turn it is) is done later by Game.
"""

from dataclasses import dataclass
from typing import Self

from src.backgammon.board import (
    BAR,
    DIRECTION,
    NUM_POINTS,
    OFF,
    Board,
    relative_point,
)
from src.core.exceptions import IllegalMoveError, InvalidRequestError
from src.core.shared_types import Color

BAR_NAME = "bar"
OFF_NAME = "off"


@dataclass(frozen=True)
class Move:
    """basic definition of a move to be made"""

    from_point: int  # 0..23 or BAR
    to_point: int  # 0..23 or OFF
    die: int

    @classmethod
    def from_notation(cls, notation: str, die: int) -> Self:
        """
        Notation uses 1-indexed points and the literals 'bar' / 'off'

        examples:
        * "13/10": move a checker from point 13 to point 10
        * "bar/4": enter a checker from the bar on point 4
        * "20/off": bear a checker off from point 20
        """
        parts = notation.strip().lower().split("/")
        if len(parts) != 2:
            raise InvalidRequestError(
                f"Cannot interpret {notation!r} as a move. Expected '<from>/<to>'."
            )
        from_text, to_text = parts
        from_point = BAR if from_text == BAR_NAME else _parse_point(from_text)
        to_point = OFF if to_text == OFF_NAME else _parse_point(to_text)
        return cls(from_point, to_point, die)

    def to_notation(self) -> str:
        from_text = BAR_NAME if self.from_point == BAR else str(self.from_point + 1)
        to_text = OFF_NAME if self.to_point == OFF else str(self.to_point + 1)
        return f"{from_text}/{to_text}"


def _parse_point(text: str) -> int:
    if not text.isdigit() or not 1 <= int(text) <= NUM_POINTS:
        raise InvalidRequestError(f"Cannot interpret {text!r} as a point (1-24).")
    return int(text) - 1


def destination(color: Color, from_point: int, die: int) -> int:
    """Where a checker of 'color' lands when moved 'die' pips. Past the last point means borne off."""
    if from_point == BAR:
        return die - 1 if color == Color.WHITE else NUM_POINTS - die
    target = from_point + DIRECTION[color] * die
    if target < 0 or target >= NUM_POINTS:
        return OFF
    return target


def check_move(board: Board, color: Color, move: Move) -> None:
    """Raise IllegalMoveError, with the reason, if 'color' may not play 'move' on 'board'."""
    if not 1 <= move.die <= 6:
        raise IllegalMoveError(f"Die value {move.die} is not between 1 and 6.")

    # checkers on the bar must enter before anything else moves
    if board.bar[color] > 0 and move.from_point != BAR:
        raise IllegalMoveError("Must enter checkers from the bar first.")
    if move.from_point == BAR and board.bar[color] == 0:
        raise IllegalMoveError("No checker on the bar to move.")
    if move.from_point != BAR and board.checkers_on(move.from_point, color) == 0:
        raise IllegalMoveError(
            f"No {color} checker on point {move.from_point + 1}."
        )

    target = destination(color, move.from_point, move.die)
    if target != move.to_point:
        raise IllegalMoveError(
            f"Move {move.to_notation()} does not match die value {move.die}."
        )

    if target == OFF:
        _check_bear_off(board, color, move)
        return

    if board.is_blocked(target, color):
        raise IllegalMoveError(f"Point {target + 1} is blocked.")


def _check_bear_off(board: Board, color: Color, move: Move) -> None:
    if not board.all_home(color):
        raise IllegalMoveError(
            "Cannot bear off until all checkers are in the home board."
        )
    distance = relative_point(move.from_point, color) + 1
    if move.die == distance:
        return
    # a higher die may only bear off the checker furthest from home
    further_back = any(
        board.checkers_on(point, color) > 0
        for point in range(NUM_POINTS)
        if relative_point(point, color) > relative_point(move.from_point, color)
    )
    if further_back:
        raise IllegalMoveError(
            f"Die value {move.die} cannot bear off from point {move.from_point + 1} while checkers remain further back."
        )


def is_legal(board: Board, color: Color, move: Move) -> bool:
    try:
        check_move(board, color, move)
    except IllegalMoveError:
        return False
    return True


def candidate_moves(board: Board, color: Color, dice_left: list[int]) -> list[Move]:
    """Every legal single-checker move for the remaining dice (each die value considered once)."""
    sources = [BAR] if board.bar[color] > 0 else [
        point for point in range(NUM_POINTS) if board.checkers_on(point, color) > 0
    ]
    moves: list[Move] = []
    for die in sorted(set(dice_left), reverse=True):
        for from_point in sources:
            move = Move(from_point, destination(color, from_point, die), die)
            if is_legal(board, color, move):
                moves.append(move)
    return moves


def apply_move(board: Board, color: Color, move: Move) -> Board:
    """Return the board after the (already checked) move. A lone opposing checker on the landing point is hit."""
    new_board = board.copy()
    new_board.remove_checker(move.from_point, color)
    if move.to_point != OFF and new_board.checkers_on(move.to_point, color.opponent) == 1:
        new_board.hit(move.to_point, color.opponent)
    new_board.add_checker(move.to_point, color)
    return new_board
