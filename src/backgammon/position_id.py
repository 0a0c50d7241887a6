"""
GNU Backgammon Position ID
----

Compact 14 character encoding of a backgammon position, the "board encoding" exchanged with the frontend
and with an analysis engine.

For the player on roll and then for the opponent, each of the 25 points (from that player's ace point up to
the bar) contributes one '1' bit per checker followed by a single '0' bit. The resulting 80 bits are packed
little-endian (bit i goes into byte i // 8 at position i % 8) and base64 encoded without padding.

Checkers that appear nowhere are borne off.
"""

import base64
import binascii

from src.backgammon.board import (
    BAR,
    CHECKERS_PER_SIDE,
    NUM_POINTS,
    Board,
    absolute_point,
)
from src.core.exceptions import InvalidRequestError
from src.core.shared_types import Color

POSITION_ID_BITS = 80
POSITION_ID_BYTES = POSITION_ID_BITS // 8
POSITION_ID_LENGTH = 14

STARTING_POSITION_ID = "4HPwATDgc/ABMA"


def _side_points(color: Color) -> list[int]:
    """Points of one side in encoding order: ace point ... 24-point, then the bar."""
    return [absolute_point(relative, color) for relative in range(NUM_POINTS)] + [BAR]


def encode_position_id(board: Board, on_roll: Color) -> str:
    bits: list[int] = []
    for color in (on_roll, on_roll.opponent):
        for point in _side_points(color):
            bits.extend([1] * board.checkers_on(point, color))
            bits.append(0)

    data = bytearray(POSITION_ID_BYTES)
    for index, bit in enumerate(bits):
        if bit:
            data[index // 8] |= 1 << (index % 8)
    return base64.b64encode(bytes(data)).decode("ascii").rstrip("=")


def decode_position_id(position_id: str, on_roll: Color) -> Board:
    if len(position_id) != POSITION_ID_LENGTH:
        raise InvalidRequestError(
            f"Position ID must be {POSITION_ID_LENGTH} characters long, got {len(position_id)}."
        )
    try:
        data = base64.b64decode(position_id + "==", validate=True)
    except binascii.Error as exc:
        raise InvalidRequestError(
            f"Position ID {position_id!r} is not valid base64."
        ) from exc

    bits = [(data[index // 8] >> (index % 8)) & 1 for index in range(POSITION_ID_BITS)]
    cursor = 0
    board = Board.empty()
    for color in (on_roll, on_roll.opponent):
        total = 0
        for point in _side_points(color):
            checkers = 0
            while cursor < POSITION_ID_BITS and bits[cursor] == 1:
                checkers += 1
                cursor += 1
            if cursor >= POSITION_ID_BITS:
                raise InvalidRequestError(
                    f"Position ID {position_id!r} is truncated."
                )
            cursor += 1  # separator bit
            total += checkers
            if total > CHECKERS_PER_SIDE:
                raise InvalidRequestError(
                    f"Position ID {position_id!r} holds more than {CHECKERS_PER_SIDE} {color} checkers."
                )
            if checkers == 0:
                continue
            if point == BAR:
                board.bar[color] = checkers
            elif board.owner(point) is not None:
                raise InvalidRequestError(
                    f"Position ID {position_id!r} puts both colors on point {point + 1}."
                )
            else:
                board.place(point, color, checkers)
        board.off[color] = CHECKERS_PER_SIDE - total
    return board


def is_valid_position_id(position_id: str) -> bool:
    try:
        decode_position_id(position_id, Color.WHITE)
    except InvalidRequestError:
        return False
    return True
