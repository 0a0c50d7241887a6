"""/api/games routes"""

from uuid import UUID

from fastapi import APIRouter, Depends, status

from src.api.dependencies import (
    current_user,
    get_analysis_service,
    get_game_service,
    limit_api,
)
from src.api.models import (
    CreateGameRequest,
    Envelope,
    GameResponse,
    LegalMovesResponse,
    MoveRequest,
    MoveSuggestion,
    PositionEvaluation,
    RollResponse,
)
from src.core.models import UserModel
from src.services.analysis_service import AnalysisService
from src.services.game_service import BackgammonService

router = APIRouter(prefix="/api/games", tags=["games"], dependencies=[Depends(limit_api)])


@router.post("", status_code=status.HTTP_201_CREATED, response_model=Envelope[GameResponse])
def create_game(
    request: CreateGameRequest,
    user: UserModel = Depends(current_user),
    games: BackgammonService = Depends(get_game_service),
) -> Envelope[GameResponse]:
    return Envelope(message="Game created successfully", data=games.create_game(user, request))


@router.get("", response_model=Envelope[list[GameResponse]])
def list_games(
    user: UserModel = Depends(current_user),
    games: BackgammonService = Depends(get_game_service),
) -> Envelope[list[GameResponse]]:
    return Envelope(data=games.list_games(user))


@router.get("/available", response_model=Envelope[list[GameResponse]])
def list_available_games(
    user: UserModel = Depends(current_user),
    games: BackgammonService = Depends(get_game_service),
) -> Envelope[list[GameResponse]]:
    return Envelope(data=games.list_available_games(user))


@router.get("/{game_id}", response_model=Envelope[GameResponse])
def get_game(
    game_id: UUID,
    user: UserModel = Depends(current_user),
    games: BackgammonService = Depends(get_game_service),
) -> Envelope[GameResponse]:
    return Envelope(data=games.get_game_state(user, game_id))


@router.delete("/{game_id}", response_model=Envelope[None])
def delete_game(
    game_id: UUID,
    user: UserModel = Depends(current_user),
    games: BackgammonService = Depends(get_game_service),
) -> Envelope[None]:
    games.delete_game(user, game_id)
    return Envelope(message="Game deleted", data=None)


@router.post("/{game_id}/join", response_model=Envelope[GameResponse])
def join_game(
    game_id: UUID,
    user: UserModel = Depends(current_user),
    games: BackgammonService = Depends(get_game_service),
) -> Envelope[GameResponse]:
    return Envelope(message="Joined game", data=games.join_game(user, game_id))


@router.post("/{game_id}/roll", response_model=Envelope[RollResponse])
def roll_dice(
    game_id: UUID,
    user: UserModel = Depends(current_user),
    games: BackgammonService = Depends(get_game_service),
) -> Envelope[RollResponse]:
    return Envelope(message="Dice rolled", data=games.roll_dice(user, game_id))


@router.get("/{game_id}/moves", response_model=Envelope[LegalMovesResponse])
def legal_moves(
    game_id: UUID,
    user: UserModel = Depends(current_user),
    games: BackgammonService = Depends(get_game_service),
) -> Envelope[LegalMovesResponse]:
    return Envelope(data=games.legal_moves(user, game_id))


@router.post("/{game_id}/move", response_model=Envelope[GameResponse])
def make_move(
    game_id: UUID,
    request: MoveRequest,
    user: UserModel = Depends(current_user),
    games: BackgammonService = Depends(get_game_service),
) -> Envelope[GameResponse]:
    return Envelope(message="Move played", data=games.make_move(user, game_id, request))


@router.post("/{game_id}/resign", response_model=Envelope[GameResponse])
def resign(
    game_id: UUID,
    user: UserModel = Depends(current_user),
    games: BackgammonService = Depends(get_game_service),
) -> Envelope[GameResponse]:
    return Envelope(message="Game resigned", data=games.resign(user, game_id))


@router.get("/{game_id}/suggestions", response_model=Envelope[list[MoveSuggestion]])
def suggestions(
    game_id: UUID,
    user: UserModel = Depends(current_user),
    analysis: AnalysisService = Depends(get_analysis_service),
) -> Envelope[list[MoveSuggestion]]:
    return Envelope(data=analysis.suggestions(user, game_id))


@router.get("/{game_id}/evaluate", response_model=Envelope[PositionEvaluation])
def evaluate(
    game_id: UUID,
    user: UserModel = Depends(current_user),
    analysis: AnalysisService = Depends(get_analysis_service),
) -> Envelope[PositionEvaluation]:
    return Envelope(data=analysis.evaluate(user, game_id))
