"""Unit tests for src/backgammon/position_id.py"""

import pytest

from src.backgammon.board import BAR, Board
from src.backgammon.position_id import (
    POSITION_ID_LENGTH,
    STARTING_POSITION_ID,
    decode_position_id,
    encode_position_id,
    is_valid_position_id,
)
from src.core.exceptions import InvalidRequestError
from src.core.shared_types import Color


# --- ENCODING ---
@pytest.mark.parametrize("on_roll", [Color.WHITE, Color.BLACK])
def test_starting_position_id(on_roll: Color) -> None:
    """The starting position is symmetric, so it encodes the same for either player on roll."""
    assert encode_position_id(Board.initial(), on_roll) == STARTING_POSITION_ID


def test_encoded_length() -> None:
    board = Board.empty()
    board.place(20, Color.WHITE, 3)
    board.place(2, Color.BLACK, 1)
    board.bar[Color.BLACK] = 1
    assert len(encode_position_id(board, Color.WHITE)) == POSITION_ID_LENGTH


# --- DECODING ---
def test_decode_starting_position() -> None:
    assert decode_position_id(STARTING_POSITION_ID, Color.WHITE) == Board.initial()


def test_decode_restores_bar_and_borne_off_checkers() -> None:
    board = Board.empty()
    board.place(22, Color.WHITE, 4)
    board.place(19, Color.WHITE, 2)
    board.bar[Color.WHITE] = 1
    board.off[Color.WHITE] = 8
    board.place(3, Color.BLACK, 13)
    board.bar[Color.BLACK] = 2

    for on_roll in Color:
        decoded = decode_position_id(encode_position_id(board, on_roll), on_roll)
        assert decoded == board
        assert decoded.checkers_on(BAR, Color.BLACK) == 2
        assert decoded.off[Color.WHITE] == 8


def test_decoding_depends_on_player_on_roll() -> None:
    """The first half of the bits belongs to the player on roll."""
    board = Board.empty()
    board.place(23, Color.WHITE, 15)
    board.place(3, Color.BLACK, 15)
    position_id = encode_position_id(board, Color.WHITE)
    assert decode_position_id(position_id, Color.WHITE) == board
    assert decode_position_id(position_id, Color.BLACK) != board


@pytest.mark.parametrize(
    "position_id",
    [
        "4HPwATDgc/AB",  # too short
        "4HPwATDgc/ABMAAA",  # too long
        "4HPwATDgc/AB#A",  # not base64
        "//////////////",  # more than 15 checkers
    ],
)
def test_invalid_position_ids(position_id: str) -> None:
    with pytest.raises(InvalidRequestError):
        decode_position_id(position_id, Color.WHITE)
    assert not is_valid_position_id(position_id)


def test_valid_position_id() -> None:
    assert is_valid_position_id(STARTING_POSITION_ID)
