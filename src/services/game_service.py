"""Orchestration of communication from API router to business logic and persistence layers (and the reverse direction)."""

import logging
from uuid import UUID

from src.api.models import (
    BoardPoint,
    CreateGameRequest,
    DiceResponse,
    GameResponse,
    LegalMovesResponse,
    MoveRequest,
    MoveView,
    RollResponse,
)
from src.backgammon.dice import Dice
from src.backgammon.game import DiceRoller, Game
from src.backgammon.moves import Move
from src.backgammon.rating import rate_game
from src.core.exceptions import (
    GameNotFoundError,
    GameStateError,
    PermissionDeniedError,
)
from src.core.models import GameModel, UserModel
from src.core.shared_types import Color, GameMode, GameType, Status
from src.db.repository import GameRepository, UserRepository

logger = logging.getLogger(__name__)

FINISHED = (Status.COMPLETED, Status.ABANDONED)


class BackgammonService:
    """Orchestration of layers for a backgammon game."""

    def __init__(
        self,
        repository: GameRepository,
        users: UserRepository,
        dice: DiceRoller | None = None,
    ) -> None:
        self.repo = repository
        self.users = users
        self.dice = dice or Dice()

    # -- API routes logic ---
    def create_game(self, user: UserModel, request: CreateGameRequest) -> GameResponse:
        """Player requested to create a new game. The creator plays white."""
        new_game = Game.new_game(
            player=str(user.id),
            mode=request.mode,
            is_ranked=request.is_ranked,
            difficulty=request.difficulty,
        )
        stored_game, game_id = self.repo.create_game(new_game.to_model())
        logger.info(
            "Game created: %s (mode=%s, ranked=%s) by %s",
            game_id,
            request.mode,
            request.is_ranked,
            user.id,
        )
        return self._create_game_response(game_id, stored_game, user)

    def list_games(self, user: UserModel) -> list[GameResponse]:
        return [
            self._create_game_response(game_id, model, user)
            for game_id, model in self.repo.list_games(str(user.id))
        ]

    def list_available_games(self, user: UserModel) -> list[GameResponse]:
        """Games created by other players that are still waiting for an opponent to join."""
        return [
            self._create_game_response(game_id, model, user)
            for game_id, model in self.repo.list_waiting_games(str(user.id))
        ]

    def get_game_state(self, user: UserModel, game_id: UUID) -> GameResponse:
        """
        Retrieve current game state.
        ----
        Used in "polling" loop by frontend to check when it is the player's turn for instance.
        """
        game_model = self._fetch_game(game_id)
        self._assert_participant(game_model, user)
        return self._create_game_response(game_id, game_model, user)

    def join_game(self, user: UserModel, game_id: UUID) -> GameResponse:
        """Second player requested to join a game."""
        game = Game.from_model(self._fetch_game(game_id))
        game.register_player(str(user.id))
        logger.info("Player %s joined game %s", user.id, game_id)
        return self._save(game_id, game, user)

    def roll_dice(self, user: UserModel, game_id: UUID) -> RollResponse:
        """Roll at the start of the turn. If nothing can be played the turn passes (and the computer may play)."""
        stored_model = self._fetch_game(game_id)
        game = Game.from_model(stored_model)
        player_color = game.current_player

        result = game.roll(str(user.id), self.dice)
        turn_passed = game.current_player != player_color
        logger.info(
            "Dice rolled in game %s: %s-%s%s",
            game_id,
            result.die1,
            result.die2,
            " (no legal move, turn passes)" if turn_passed else "",
        )

        self._let_computer_play(game)
        response = self._save(game_id, game, user)
        return RollResponse(
            game_id=game_id,
            dice=DiceResponse(die1=result.die1, die2=result.die2),
            current_player=player_color,
            turn_passed=turn_passed,
            game=response,
        )

    def legal_moves(self, user: UserModel, game_id: UUID) -> LegalMovesResponse:
        """retrieve set of legal single-checker moves for the dice left."""
        game = Game.from_model(self._fetch_game(game_id))
        legal_moves = game.legal_moves(str(user.id))
        return LegalMovesResponse(
            game_id=game_id,
            player_color=game.current_player,
            dice_left=game.dice_left,
            legal_moves=[to_move_view(move) for move in legal_moves],
        )

    def make_move(self, user: UserModel, game_id: UUID, request: MoveRequest) -> GameResponse:
        """Make a move attempt."""
        stored_model = self._fetch_game(game_id)
        game = Game.from_model(stored_model)
        status_before = game.status

        move = Move(request.from_point, request.to_point, request.die)
        game.make_move(str(user.id), move)
        logger.info("Move played in game %s: %s", game_id, game.moves[-1])

        self._let_computer_play(game)
        self._record_result_if_finished(game_id, game, status_before)
        return self._save(game_id, game, user)

    def resign(self, user: UserModel, game_id: UUID) -> GameResponse:
        game = Game.from_model(self._fetch_game(game_id))
        status_before = game.status
        game.resign(str(user.id))
        logger.info("Player %s resigned game %s", user.id, game_id)
        self._record_result_if_finished(game_id, game, status_before)
        return self._save(game_id, game, user)

    def delete_game(self, user: UserModel, game_id: UUID) -> None:
        """Handle a request to delete a Game record. Only the creator may delete, and only before the game started."""
        game_model = self._fetch_game(game_id)
        if game_model.registered_players.get(Color.WHITE) != str(user.id):
            raise PermissionDeniedError("Only the creator of a game can delete it.")
        if game_model.status != Status.WAITING:
            raise GameStateError(
                f"Only games waiting for players can be deleted. status: {game_model.status}"
            )
        self.repo.delete_game(game_id)
        logger.info("Game deleted: %s", game_id)

    def current_game(self, user: UserModel, game_id: UUID) -> Game:
        """The domain Game, for services (analysis) that need the position of a game the user takes part in."""
        game_model = self._fetch_game(game_id)
        self._assert_participant(game_model, user)
        return Game.from_model(game_model)

    # -- Internal helpers --
    def _let_computer_play(self, game: Game) -> None:
        if game.is_computer_turn:
            moves_before = len(game.moves)
            game.play_computer_turn(self.dice)
            logger.info("Computer opponent played %d checker moves", len(game.moves) - moves_before)

    def _record_result_if_finished(
        self, game_id: UUID, game: Game, status_before: Status
    ) -> None:
        """Update the ELO ratings once a ranked game between two registered players is decided."""
        if status_before in FINISHED or game.status not in FINISHED:
            return
        logger.info("Game finished: %s (status=%s, winner=%s)", game_id, game.status, game.winner)
        if not game.is_ranked or game.mode != GameMode.PLAYER_VS_PLAYER or game.winner is None:
            return

        winner = self.users.get_user(UUID(game.players[game.winner]))
        loser = self.users.get_user(UUID(game.players[game.winner.opponent]))
        if winner is None or loser is None:
            logger.warning("Cannot rate game %s: player record missing", game_id)
            return

        change = rate_game(winner.elo, loser.elo, GameType.RATED)
        winner.elo = change.new_winner_elo
        loser.elo = change.new_loser_elo
        self.users.update_user(winner)
        self.users.update_user(loser)
        logger.info(
            "ELO updated after game %s: winner %+d, loser %+d",
            game_id,
            change.winner_change,
            change.loser_change,
        )

    def _save(self, game_id: UUID, game: Game, viewer: UserModel) -> GameResponse:
        updated = self.repo.update_game(game_id, game.to_model())
        if updated is None:
            raise GameNotFoundError(f"Game with {game_id=} not found.")
        return self._create_game_response(game_id, updated, viewer)

    def _create_game_response(
        self, game_id: UUID, model: GameModel, viewer: UserModel
    ) -> GameResponse:
        """Convert info in GameModel to a GameResponse (for game with given ID), as seen by 'viewer'."""
        game = Game.from_model(model)
        viewer_id = str(viewer.id)
        player_color = game.player_color(viewer_id)
        is_player_turn = (
            game.status == Status.PLAYING
            and game.players.get(game.current_player) == viewer_id
        )
        return GameResponse(
            id=game_id,
            status=model.status,
            mode=model.mode,
            is_ranked=model.is_ranked,
            difficulty=model.difficulty,
            current_player=model.current_player,
            players=model.registered_players,
            board_state=model.position_id,
            board=[BoardPoint(**point) for point in game.board.to_points()],
            bar={str(color): game.board.bar[color] for color in Color},
            off={str(color): game.board.off[color] for color in Color},
            pip_count={str(color): game.board.pip_count(color) for color in Color},
            dice=DiceResponse(die1=model.dice[0], die2=model.dice[1]) if model.dice else None,
            dice_left=model.dice_left,
            moves=model.moves,
            move_count=len(model.moves),
            winner=model.winner,
            white_score=model.white_score,
            black_score=model.black_score,
            player_color=player_color,
            is_player_turn=is_player_turn,
            can_move=is_player_turn and bool(model.dice_left),
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    def _fetch_game(self, game_id: UUID) -> GameModel:
        """Attempt to find the game in the repository and raise error if it fails."""
        game_model = self.repo.get_game(game_id)
        if game_model is None:
            raise GameNotFoundError(f"Game with {game_id=} not found.")
        return game_model

    @staticmethod
    def _assert_participant(model: GameModel, user: UserModel) -> None:
        if str(user.id) not in model.registered_players.values():
            raise PermissionDeniedError("Access denied")


def to_move_view(move: Move) -> MoveView:
    return MoveView(
        from_point=move.from_point,
        to_point=move.to_point,
        dice_value=move.die,
        notation=move.to_notation(),
    )
