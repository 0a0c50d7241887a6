"""
"GNUBG analysis" facade.

Analyses are produced by an AnalysisEngine. Without a configured GNUBG service the LocalAnalysisEngine answers
with exact move generation but a heuristic (templated) evaluation; with one, requests are forwarded over HTTP.
"""

import logging
from datetime import datetime, timezone
from typing import Protocol
from uuid import UUID

import requests

from src.api.models import (
    AnalysisResponse,
    AnalyzeRequest,
    MoveSuggestion,
    PositionEvaluation,
)
from src.backgammon.board import Board
from src.backgammon.dice import DiceRoll
from src.backgammon.evaluation import canonical_play, equity, ranked_plays, win_probability
from src.backgammon.position_id import decode_position_id, encode_position_id
from src.core.config import settings
from src.core.exceptions import (
    AnalysisUnavailableError,
    GameStateError,
    InvalidRequestError,
    QuotaExceededError,
)
from src.core.models import AnalysisModel, UserModel
from src.core.shared_types import Color, SubscriptionType
from src.db.repository import AnalysisRepository
from src.services.game_service import BackgammonService

logger = logging.getLogger(__name__)

MAX_SUGGESTIONS = 5
MAX_ALTERNATIVES = 2
NO_MOVE = "no legal move"


def _canonical_notation(move: str) -> str:
    """Hit markers ('*') and case are ignored. Raises ValueError for anything but 'from/to' tokens."""
    return canonical_play(token.rstrip("*") for token in move.lower().split())


class AnalysisEngine(Protocol):
    confidence: float

    def rank_plays(self, board: Board, color: Color, dice: list[int]) -> list[MoveSuggestion]:
        """Full plays for the dice, best first."""
        ...

    def evaluate(self, board: Board, color: Color) -> float:
        """Cubeless equity of the position for 'color'."""
        ...


class LocalAnalysisEngine:
    """Templated analysis: exact plays, heuristic equities."""

    confidence = 0.85

    def rank_plays(self, board: Board, color: Color, dice: list[int]) -> list[MoveSuggestion]:
        return [
            MoveSuggestion(
                move=play.notation,
                equity=play_equity,
                win_probability=win_probability(play_equity),
                rank=rank,
                is_best=rank == 1,
            )
            for rank, (play, play_equity) in enumerate(ranked_plays(board, color, dice), start=1)
        ]

    def evaluate(self, board: Board, color: Color) -> float:
        return equity(board, color)


class RemoteAnalysisEngine:
    """Forwards analyses to a GNUBG HTTP service."""

    confidence = 1.0

    def __init__(
        self,
        base_url: str,
        api_key: str = "",
        timeout: float = settings.GNUBG_TIMEOUT,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self.session = session or requests.Session()

    def rank_plays(self, board: Board, color: Color, dice: list[int]) -> list[MoveSuggestion]:
        data = self._post(
            "/analyze",
            {
                "board": encode_position_id(board, color),
                "dice": dice[:2],
                "player": str(color),
                "analysis": "best_moves",
            },
        )
        return [
            MoveSuggestion(
                move=move["notation"],
                equity=move["equity"],
                win_probability=move.get("winProb", win_probability(move["equity"])),
                rank=move["rank"],
                is_best=move["rank"] == 1,
            )
            for move in data.get("moves", [])
        ]

    def evaluate(self, board: Board, color: Color) -> float:
        data = self._post(
            "/analyze",
            {
                "board": encode_position_id(board, color),
                "player": str(color),
                "analysis": "evaluation",
            },
        )
        evaluation = data.get("evaluation") or {}
        return float(evaluation.get("equity", 0.0))

    def _post(self, endpoint: str, body: dict) -> dict:
        url = f"{self.base_url}{endpoint}"
        try:
            response = self.session.post(
                url,
                json=body,
                headers={
                    "Authorization": f"Bearer {self.api_key}",
                    "User-Agent": "GammonGuru-Backend/1.0",
                },
                timeout=self.timeout,
            )
            response.raise_for_status()
            data = response.json()
        except requests.RequestException as exc:
            logger.error("GNUBG service call failed: %s", exc)
            raise AnalysisUnavailableError("Analysis service temporarily unavailable") from exc
        except ValueError as exc:
            raise AnalysisUnavailableError("GNUBG service returned invalid JSON") from exc

        if data.get("error"):
            raise AnalysisUnavailableError(f"GNUBG API error: {data['error']}")
        return data


def build_engine() -> AnalysisEngine:
    if settings.GNUBG_SERVICE_URL:
        return RemoteAnalysisEngine(settings.GNUBG_SERVICE_URL, settings.GNUBG_API_KEY)
    return LocalAnalysisEngine()


def start_of_month(now: datetime) -> datetime:
    return now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


class AnalysisService:
    """Position / move analysis with a monthly quota per subscription."""

    def __init__(
        self,
        repository: AnalysisRepository,
        games: BackgammonService,
        engine: AnalysisEngine | None = None,
    ) -> None:
        self.repo = repository
        self.games = games
        self.engine = engine or build_engine()

    # -- API routes logic ---
    def analyze(self, user: UserModel, request: AnalyzeRequest) -> AnalysisResponse:
        """Compare the user's play with the best play for the position and dice."""
        remaining = self.quota_remaining(user)
        if remaining <= 0:
            raise QuotaExceededError(
                "Quota exceeded. Upgrade to Premium for unlimited analyses.", remaining=0
            )

        color = request.player_color
        board = decode_position_id(request.board_state, color)
        dice = DiceRoll(*request.dice).moves()
        suggestions = self.engine.rank_plays(board, color, dice)

        if suggestions:
            best = suggestions[0]
            played = self._find_play(suggestions, request.move)
            pr = round(max(best.equity - played.equity, 0.0), 3)
            best_move, best_equity = best.move, best.equity
            explanation = self._explain(best, played)
        else:
            best_move, best_equity, pr = NO_MOVE, self.engine.evaluate(board, color), 0.0
            explanation = f"No checker can move with {request.dice[0]}-{request.dice[1]}."

        analysis, analysis_id = self.repo.create_analysis(
            AnalysisModel(
                user_id=user.id,
                position_id=request.board_state,
                dice=request.dice,
                move=request.move,
                best_move=best_move,
                equity=best_equity,
                pr=pr,
                explanation=explanation,
                alternatives=[suggestion.move for suggestion in suggestions[1 : 1 + MAX_ALTERNATIVES]],
                analysis_type=request.analysis_type,
            )
        )
        logger.info("Analysis %s stored for user %s (pr=%.3f)", analysis_id, user.id, pr)

        return AnalysisResponse(
            best_move=analysis.best_move,
            equity=analysis.equity,
            pr=analysis.pr,
            explanation=analysis.explanation,
            alternatives=analysis.alternatives,
            analysis_type=analysis.analysis_type,
            confidence=self.engine.confidence,
            analysis_id=analysis_id,
            quota_remaining=remaining - 1,
            processed_at=datetime.now(timezone.utc),
        )

    def suggestions(self, user: UserModel, game_id: UUID) -> list[MoveSuggestion]:
        """Best plays for the dice left in one of the user's games."""
        game = self.games.current_game(user, game_id)
        if not game.dice_left:
            raise GameStateError("Roll the dice before asking for suggestions.")
        return self.engine.rank_plays(game.board, game.current_player, game.dice_left)[:MAX_SUGGESTIONS]

    def evaluate(self, user: UserModel, game_id: UUID) -> PositionEvaluation:
        """Evaluation of one of the user's games, for the player on roll."""
        game = self.games.current_game(user, game_id)
        position_equity = self.engine.evaluate(game.board, game.current_player)
        return PositionEvaluation(
            win_probability=win_probability(position_equity),
            equity=position_equity,
            cubeful_equity=position_equity,
            pip_count={str(color): game.board.pip_count(color) for color in Color},
        )

    def quota_remaining(self, user: UserModel) -> int:
        quota = (
            settings.PREMIUM_ANALYSIS_QUOTA
            if user.subscription_type == SubscriptionType.PREMIUM
            else settings.FREE_ANALYSIS_QUOTA
        )
        used = self.repo.count_analyses_since(user.id, start_of_month(datetime.now(timezone.utc)))
        return max(quota - used, 0)

    # -- Internal helpers --
    @staticmethod
    def _find_play(suggestions: list[MoveSuggestion], move: str) -> MoveSuggestion:
        try:
            wanted = _canonical_notation(move)
        except ValueError as exc:
            raise InvalidRequestError(f"Cannot interpret {move!r} as a play.") from exc
        for suggestion in suggestions:
            try:
                if _canonical_notation(suggestion.move) == wanted:
                    return suggestion
            except ValueError:
                logger.warning("Skipping unreadable engine play %r", suggestion.move)
        raise InvalidRequestError(f"{move!r} is not a legal play for these dice.")

    @staticmethod
    def _explain(best: MoveSuggestion, played: MoveSuggestion) -> str:
        if played.move == best.move:
            return f"Your play {played.move} is the best play, with an equity of {best.equity:.3f}."
        return (
            f"The best play is {best.move} with an equity of {best.equity:.3f}. "
            f"Your play {played.move} has an equity of {played.equity:.3f}."
        )
