"""Unit tests for src/api/models.py"""

import pytest
from pydantic import ValidationError

from src.api.models import (
    AnalyzeRequest,
    CreateGameRequest,
    Envelope,
    MoveRequest,
    MoveView,
    RegisterRequest,
    UpdateProfileRequest,
)
from src.backgammon.board import BAR, OFF
from src.backgammon.position_id import STARTING_POSITION_ID
from src.core.shared_types import Color, GameMode


# -- Validation - RegisterRequest --
def test_valid_registration() -> None:
    request = RegisterRequest(email="Alice@Example.com", password="secret", username="Alice_B")
    assert request.email == "alice@example.com"
    assert request.username == "alice_b"


def test_password_shorter_than_six_characters() -> None:
    with pytest.raises(ValidationError):
        RegisterRequest(email="alice@example.com", password="12345", username="alice")


@pytest.mark.parametrize(
    "username",
    [
        "ab",  # too short
        "a" * 31,  # too long
        "alice!",  # forbidden character
    ],
)
def test_invalid_username(username: str) -> None:
    with pytest.raises(ValidationError):
        RegisterRequest(email="alice@example.com", password="secret", username=username)


def test_invalid_email() -> None:
    with pytest.raises(ValidationError):
        RegisterRequest(email="not-an-email", password="secret", username="alice")


def test_profile_update_is_optional() -> None:
    request = UpdateProfileRequest()
    assert request.username is None
    assert request.avatar is None


# -- Validation - CreateGameRequest --
def test_create_game_from_camel_case() -> None:
    request = CreateGameRequest.model_validate({"mode": "pvc", "isRanked": False, "difficulty": "hard"})
    assert request.mode == GameMode.PLAYER_VS_COMPUTER
    assert request.is_ranked is False


@pytest.mark.parametrize(
    "payload",
    [
        {"isRanked": True},  # no mode
        {"mode": "pvp"},  # no isRanked
        {"mode": "solo", "isRanked": True},  # unknown mode
    ],
)
def test_create_game_requires_fields(payload: dict) -> None:
    with pytest.raises(ValidationError):
        CreateGameRequest.model_validate(payload)


# -- Validation - MoveRequest --
def test_move_request_aliases() -> None:
    request = MoveRequest.model_validate({"from": BAR, "to": 3, "diceValue": 4})
    assert (request.from_point, request.to_point, request.die) == (BAR, 3, 4)

    request = MoveRequest.model_validate({"from": 20, "to": OFF, "diceValue": 4})
    assert request.to_point == OFF


@pytest.mark.parametrize(
    "payload",
    [
        {"from": 26, "to": 3, "diceValue": 4},  # no such source
        {"from": 0, "to": BAR, "diceValue": 4},  # the bar is not a destination
        {"from": 0, "to": 3, "diceValue": 7},  # not a die value
    ],
)
def test_invalid_move_request(payload: dict) -> None:
    with pytest.raises(ValidationError):
        MoveRequest.model_validate(payload)


# -- Validation - AnalyzeRequest --
def test_analyze_request_defaults() -> None:
    request = AnalyzeRequest.model_validate(
        {"boardState": STARTING_POSITION_ID, "dice": [3, 1], "move": "8/5 6/5"}
    )
    assert request.player_color == Color.WHITE
    assert request.analysis_type == "full"


@pytest.mark.parametrize(
    "board_state, dice",
    [
        ("short", [3, 1]),
        (STARTING_POSITION_ID, [3]),
        (STARTING_POSITION_ID, [0, 1]),
        (STARTING_POSITION_ID, [3, 1, 2]),
    ],
)
def test_invalid_analyze_request(board_state: str, dice: list[int]) -> None:
    with pytest.raises(ValidationError):
        AnalyzeRequest(board_state=board_state, dice=dice, move="8/5 6/5")


# -- Serialization --
def test_responses_are_camel_case() -> None:
    envelope = Envelope(data=MoveView(from_point=0, to_point=3, dice_value=3, notation="1/4"))
    assert envelope.model_dump(by_alias=True) == {
        "success": True,
        "message": None,
        "data": {"from": 0, "to": 3, "diceValue": 3, "notation": "1/4"},
    }
