"""Unit tests for src/backgammon/moves.py"""

import pytest

from src.backgammon.board import BAR, OFF, Board
from src.backgammon.moves import (
    Move,
    apply_move,
    candidate_moves,
    check_move,
    destination,
    is_legal,
)
from src.core.exceptions import IllegalMoveError, InvalidRequestError
from src.core.shared_types import Color


@pytest.fixture
def bear_off_board() -> Board:
    """White has every checker home: 2 on point 19, 13 on point 21 (1-indexed)."""
    board = Board.empty()
    board.place(18, Color.WHITE, 2)
    board.place(20, Color.WHITE, 13)
    board.place(0, Color.BLACK, 15)
    return board


# --- NOTATION ---
@pytest.mark.parametrize(
    "notation, die, expected",
    [
        ("13/10", 3, Move(12, 9, 3)),
        ("bar/4", 4, Move(BAR, 3, 4)),
        ("20/off", 5, Move(19, OFF, 5)),
    ],
)
def test_from_notation(notation: str, die: int, expected: Move) -> None:
    move = Move.from_notation(notation, die)
    assert move == expected
    assert move.to_notation() == notation


@pytest.mark.parametrize("notation", ["13-10", "0/3", "25/20", "x/4", "13/10/7"])
def test_invalid_notation(notation: str) -> None:
    with pytest.raises(InvalidRequestError):
        Move.from_notation(notation, 3)


# --- DESTINATION ---
@pytest.mark.parametrize(
    "color, from_point, die, expected",
    [
        (Color.WHITE, 0, 3, 3),
        (Color.BLACK, 23, 3, 20),
        (Color.WHITE, BAR, 4, 3),
        (Color.BLACK, BAR, 4, 20),
        (Color.WHITE, 22, 3, OFF),
        (Color.BLACK, 1, 2, OFF),
    ],
)
def test_destination(color: Color, from_point: int, die: int, expected: int) -> None:
    assert destination(color, from_point, die) == expected


# --- LEGALITY ---
def test_simple_legal_move() -> None:
    check_move(Board.initial(), Color.WHITE, Move(0, 3, 3))


def test_cannot_land_on_blocked_point() -> None:
    with pytest.raises(IllegalMoveError, match="blocked"):
        check_move(Board.initial(), Color.WHITE, Move(0, 5, 5))


def test_die_must_match_distance() -> None:
    with pytest.raises(IllegalMoveError):
        check_move(Board.initial(), Color.WHITE, Move(0, 4, 3))


def test_must_move_own_checker() -> None:
    with pytest.raises(IllegalMoveError):
        check_move(Board.initial(), Color.WHITE, Move(23, 20, 3))


def test_checkers_on_bar_enter_first() -> None:
    board = Board.initial()
    board.remove_checker(0, Color.WHITE)
    board.bar[Color.WHITE] = 1
    with pytest.raises(IllegalMoveError, match="bar"):
        check_move(board, Color.WHITE, Move(11, 14, 3))
    check_move(board, Color.WHITE, Move(BAR, 2, 3))


def test_cannot_bear_off_before_all_home() -> None:
    board = Board.initial()
    with pytest.raises(IllegalMoveError, match="home board"):
        check_move(board, Color.WHITE, Move(18, OFF, 6))


def test_bear_off_with_exact_die(bear_off_board: Board) -> None:
    assert is_legal(bear_off_board, Color.WHITE, Move(20, OFF, 4))
    assert is_legal(bear_off_board, Color.WHITE, Move(18, OFF, 6))


def test_higher_die_only_bears_off_furthest_checker(bear_off_board: Board) -> None:
    assert not is_legal(bear_off_board, Color.WHITE, Move(20, OFF, 6))

    bear_off_board.points[18] = 0
    bear_off_board.off[Color.WHITE] = 2
    assert is_legal(bear_off_board, Color.WHITE, Move(20, OFF, 6))


# --- CANDIDATES ---
def test_candidate_moves_from_start() -> None:
    moves = candidate_moves(Board.initial(), Color.WHITE, [3, 1])
    assert Move(0, 3, 3) in moves
    assert Move(16, 19, 3) in moves
    assert Move(18, 19, 1) in moves
    # 12 -> 13 would land on black's five checkers
    assert Move(11, 12, 1) not in moves
    assert all(is_legal(Board.initial(), Color.WHITE, move) for move in moves)


def test_candidate_moves_only_from_bar() -> None:
    board = Board.initial()
    board.remove_checker(0, Color.WHITE)
    board.bar[Color.WHITE] = 1
    moves = candidate_moves(board, Color.WHITE, [6, 5])
    assert moves
    assert all(move.from_point == BAR for move in moves)


def test_no_candidates_against_closed_board() -> None:
    board = Board.empty()
    for point in range(6):
        board.place(point, Color.BLACK, 2)
    board.bar[Color.WHITE] = 1
    assert candidate_moves(board, Color.WHITE, [1, 2, 3, 4, 5, 6]) == []


# --- APPLY ---
def test_apply_move_hits_blot() -> None:
    board = Board.initial()
    board.remove_checker(5, Color.BLACK)
    board.remove_checker(5, Color.BLACK)
    board.remove_checker(5, Color.BLACK)
    board.remove_checker(5, Color.BLACK)

    new_board = apply_move(board, Color.WHITE, Move(0, 5, 5))
    assert new_board.bar[Color.BLACK] == 1
    assert new_board.checkers_on(5, Color.WHITE) == 1
    # the original board is left untouched
    assert board.checkers_on(5, Color.BLACK) == 1


def test_apply_move_bears_off(bear_off_board: Board) -> None:
    new_board = apply_move(bear_off_board, Color.WHITE, Move(20, OFF, 4))
    assert new_board.off[Color.WHITE] == 1
    assert new_board.checkers_on(20, Color.WHITE) == 12
