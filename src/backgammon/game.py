"""
The Game class will be the entrypoint into the domain layer for the service layer.
It is responsible for orchestrating all the business logic required to play a turn of backgammon -->
passes this information to the service layer, which can then pass it onwards to the API layer.
"""

from dataclasses import dataclass, field
from typing import Optional, Protocol, Self

from src.backgammon.board import (
    BAR,
    CHECKERS_PER_SIDE,
    HOME_BOARD,
    NUM_POINTS,
    OFF,
    Board,
    relative_point,
)
from src.backgammon.dice import DiceRoll
from src.backgammon.moves import Move, apply_move, candidate_moves, check_move
from src.backgammon.position_id import encode_position_id, decode_position_id
from src.core.exceptions import (
    GameStateError,
    IllegalMoveError,
    NotYourTurnError,
    PermissionDeniedError,
)
from src.core.models import GameModel
from src.core.shared_types import AI_OPPONENT_ID, Color, Difficulty, GameMode, Status

# Allowed status transitions
TRANSITIONS: dict[Status, set[Status]] = {
    Status.WAITING: {Status.PLAYING, Status.ABANDONED},
    Status.PLAYING: {Status.COMPLETED, Status.ABANDONED},
    Status.COMPLETED: set(),
    Status.ABANDONED: set(),
}

SINGLE_GAME = 1
GAMMON = 2
BACKGAMMON = 3

BAR_PIPS = NUM_POINTS + 1


class DiceRoller(Protocol):
    def roll(self) -> DiceRoll: ...


@dataclass
class Game:
    # --- DOMAIN LAYER API CALLED BY SERVICE---

    board: Board
    current_player: Color
    players: dict[Color, str]
    status: Status
    mode: GameMode
    is_ranked: bool
    difficulty: Optional[Difficulty] = None
    dice: list[int] = field(default_factory=list)
    dice_left: list[int] = field(default_factory=list)
    moves: list[str] = field(default_factory=list)
    winner: Optional[Color] = None
    scores: dict[Color, int] = field(
        default_factory=lambda: {Color.WHITE: 0, Color.BLACK: 0}
    )

    @classmethod
    def from_model(cls, model: GameModel) -> Self:
        """Define how to construct a Game from the information the Service layer actually has"""

        # Validation
        if model.status not in {status.value for status in Status}:
            raise GameStateError(
                f"Invalid status code: {model.status!r}. \nPick one from {','.join(Status)}"
            )
        if model.current_player not in {color.value for color in Color}:
            raise GameStateError(f"Invalid player to move: {model.current_player!r}.")

        current_player = Color(model.current_player)
        return cls(
            board=decode_position_id(model.position_id, current_player),
            current_player=current_player,
            players={
                Color(color): player
                for color, player in model.registered_players.items()
            },
            status=Status(model.status),
            mode=GameMode(model.mode),
            is_ranked=model.is_ranked,
            difficulty=Difficulty(model.difficulty) if model.difficulty else None,
            dice=list(model.dice),
            dice_left=list(model.dice_left),
            moves=list(model.moves),
            winner=Color(model.winner) if model.winner else None,
            scores={Color.WHITE: model.white_score, Color.BLACK: model.black_score},
        )

    def to_model(self) -> GameModel:
        """Encode back into a format the Service layer uses"""

        return GameModel(
            position_id=encode_position_id(self.board, self.current_player),
            current_player=str(self.current_player),
            registered_players={
                str(color): player for color, player in self.players.items()
            },
            status=str(self.status),
            mode=str(self.mode),
            is_ranked=self.is_ranked,
            difficulty=str(self.difficulty) if self.difficulty else None,
            dice=list(self.dice),
            dice_left=list(self.dice_left),
            moves=list(self.moves),
            winner=str(self.winner) if self.winner else None,
            white_score=self.scores[Color.WHITE],
            black_score=self.scores[Color.BLACK],
        )

    @classmethod
    def new_game(
        cls,
        player: str,
        mode: GameMode,
        is_ranked: bool = False,
        difficulty: Optional[Difficulty] = None,
    ) -> Self:
        """
        The creator always plays white and moves first.
        Against the computer the built-in opponent takes black right away, so the game starts immediately.
        """
        players = {Color.WHITE: player}
        status = Status.WAITING
        if mode == GameMode.PLAYER_VS_COMPUTER:
            players[Color.BLACK] = AI_OPPONENT_ID
            status = Status.PLAYING
            difficulty = difficulty or Difficulty.MEDIUM
        return cls(
            board=Board.initial(),
            current_player=Color.WHITE,
            players=players,
            status=status,
            mode=mode,
            is_ranked=is_ranked,
            difficulty=difficulty,
        )

    @property
    def opponent_is_computer(self) -> bool:
        return self.players.get(Color.BLACK) == AI_OPPONENT_ID

    @property
    def is_computer_turn(self) -> bool:
        return (
            self.status == Status.PLAYING
            and self.players.get(self.current_player) == AI_OPPONENT_ID
        )

    def player_color(self, player: str) -> Optional[Color]:
        return next(
            (color for color, name in self.players.items() if name == player), None
        )

    def register_player(self, player: str) -> None:
        """Registering the 2nd player to an open game"""
        if self.status != Status.WAITING:
            raise GameStateError(
                f"Cannot join this game. Game is not accepting new players. status: {self.status}"
            )
        if self.player_color(player) is not None:
            raise GameStateError("You are already registered in this game.")

        self.players[Color.BLACK] = player
        self._change_status(Status.PLAYING)

    def roll(self, player: str, dice: DiceRoller) -> DiceRoll:
        """
        Roll the dice at the start of a turn.
        When no checker can move with the rolled dice, the turn passes straight to the opponent.
        """
        self._assert_in_progress()
        self._assert_your_turn(player)
        if self.dice_left:
            raise GameStateError(
                f"Dice already rolled: play the remaining dice {self.dice_left} first."
            )

        result = dice.roll()
        self.dice = result.to_list()
        self.dice_left = result.moves()

        if not self._can_move():
            self._end_turn()
        return result

    def legal_moves(self, player: str) -> list[Move]:
        """
        Service will request the set of legal single-checker moves for the dice that are left.
        ----
        An empty list when the dice still have to be rolled.
        """
        self._assert_in_progress()
        self._assert_your_turn(player)
        if not self.dice_left:
            return []
        return candidate_moves(self.board, self.current_player, self.dice_left)

    def make_move(self, player: str, move: Move) -> None:
        """
        Attempt to move one checker
        -----

        1. the game is in progress and it is your turn
        2. the die is one of the dice still left to play
        3. the checker move itself is legal
        4. update board, history and dice left
        5. end the game (all checkers borne off) or the turn (dice used up / no legal move left)
        """
        self._assert_in_progress()
        self._assert_your_turn(player)
        if not self.dice_left:
            raise GameStateError("Roll the dice before moving.")
        if move.die not in self.dice_left:
            raise IllegalMoveError(
                f"Die value {move.die} is not available. Dice left: {self.dice_left}"
            )

        color = self.current_player
        check_move(self.board, color, move)

        self.board = apply_move(self.board, color, move)
        self.dice_left.remove(move.die)
        self.moves.append(f"{color} {move.to_notation()}")

        if self.board.off[color] == CHECKERS_PER_SIDE:
            self._finish(winner=color)
        elif not self.dice_left or not self._can_move():
            self._end_turn()

    def resign(self, player: str) -> None:
        """The resigning player concedes a single game to the opponent (if there is one)."""
        color = self.player_color(player)
        if color is None:
            raise PermissionDeniedError("You are not a player in this game.")
        if self.status not in (Status.WAITING, Status.PLAYING):
            raise GameStateError(f"Game is already over. status: {self.status}")

        self.dice_left = []
        if color.opponent in self.players:
            self.winner = color.opponent
            self.scores[color.opponent] += SINGLE_GAME
        self._change_status(Status.ABANDONED)

    def play_computer_turn(self, dice: DiceRoller) -> None:
        """
        Placeholder opponent: rolls and plays one candidate move per die until its turn is over.
        Not a real engine -- it only prefers bearing off, then hitting, then moving the checker furthest back.
        """
        while self.is_computer_turn:
            if not self.dice_left:
                self.roll(AI_OPPONENT_ID, dice)
                continue
            candidates = candidate_moves(self.board, self.current_player, self.dice_left)
            self.make_move(AI_OPPONENT_ID, self._choose_computer_move(candidates))

    def result_points(self, winner: Color) -> int:
        """Single game, gammon (loser bore off nothing) or backgammon (... and is still on the bar / in winner's home)."""
        loser = winner.opponent
        if self.board.off[loser] > 0:
            return SINGLE_GAME
        in_winner_home = any(
            self.board.checkers_on(point, loser) > 0 for point in HOME_BOARD[winner]
        )
        if self.board.bar[loser] > 0 or in_winner_home:
            return BACKGAMMON
        return GAMMON

    # -- PRIVATE HELPERS ---
    def _choose_computer_move(self, candidates: list[Move]) -> Move:
        color = self.current_player

        def preference(move: Move) -> tuple[bool, bool, int]:
            bears_off = move.to_point == OFF
            hits = (
                not bears_off
                and self.board.checkers_on(move.to_point, color.opponent) == 1
            )
            pips_from_home = (
                BAR_PIPS
                if move.from_point == BAR
                else relative_point(move.from_point, color) + 1
            )
            return bears_off, hits, pips_from_home

        return max(candidates, key=preference)

    def _can_move(self) -> bool:
        return bool(candidate_moves(self.board, self.current_player, self.dice_left))

    def _end_turn(self) -> None:
        self.dice_left = []
        self.dice = []
        self.current_player = self.current_player.opponent

    def _finish(self, winner: Color) -> None:
        self.dice_left = []
        self.winner = winner
        self.scores[winner] += self.result_points(winner)
        self._change_status(Status.COMPLETED)

    def _assert_in_progress(self) -> None:
        if self.status != Status.PLAYING:
            raise GameStateError(f"Game is not in progress. status: {self.status}")

    def _assert_your_turn(self, player: str) -> None:
        """You must wait for your turn before rolling / making a move."""
        if self.player_color(player) is None:
            raise PermissionDeniedError("You are not a player in this game.")
        player_to_move = self.players[self.current_player]
        if player != player_to_move:
            raise NotYourTurnError(
                f"It is not your turn. Waiting for {self.current_player} to move first."
            )

    def _change_status(self, new_status: Status) -> None:
        if new_status not in TRANSITIONS[self.status]:
            raise GameStateError(
                f"Cannot change game status from {self.status} to {new_status}."
            )
        self.status = new_status
