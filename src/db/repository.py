"""Protocol repositories (implemented with SQLAlchemy in src/db/sql_repository.py, mocked with dictionaries in tests)"""

from datetime import datetime
from typing import Protocol
from uuid import UUID

from src.core.models import AnalysisModel, CoachUsageModel, GameModel, UserModel


class GameRepository(Protocol):
    """Persistence layer orchestration"""

    def get_game(self, game_id: UUID) -> GameModel | None:
        """Get game by ID, if record exists."""
        ...

    def create_game(self, game: GameModel) -> tuple[GameModel, UUID]:
        """Store new game and return the stored data + newly created game ID."""
        ...

    def update_game(self, game_id: UUID, game: GameModel) -> GameModel | None:
        """Add new info to existing record."""
        ...

    def delete_game(self, game_id: UUID) -> GameModel | None:
        """Remove a game's record."""
        ...

    def list_games(self, player_id: str) -> list[tuple[UUID, GameModel]]:
        """All games a player is registered in, most recent first."""
        ...

    def list_waiting_games(self, exclude_player: str) -> list[tuple[UUID, GameModel]]:
        """Games still waiting for an opponent, not created by 'exclude_player', most recent first."""
        ...

    def count_finished_games(self, player_id: str) -> int:
        """Finished games the player took part in against a registered opponent."""
        ...


class UserRepository(Protocol):
    def get_user(self, user_id: UUID) -> UserModel | None: ...

    def get_user_by_email(self, email: str) -> UserModel | None: ...

    def get_user_by_username(self, username: str) -> UserModel | None: ...

    def create_user(self, user: UserModel) -> UserModel: ...

    def update_user(self, user: UserModel) -> UserModel | None: ...

    def list_active_users(self, limit: int, offset: int) -> list[UserModel]:
        """Active users ordered by ELO, best first."""
        ...

    def count_active_users(self, min_elo_exclusive: int | None = None) -> int: ...


class AnalysisRepository(Protocol):
    def create_analysis(self, analysis: AnalysisModel) -> tuple[AnalysisModel, UUID]: ...

    def count_analyses_since(self, user_id: UUID, since: datetime) -> int: ...


class CoachUsageRepository(Protocol):
    def get_usage(self, user_id: UUID, month: str) -> CoachUsageModel | None: ...

    def save_usage(self, usage: CoachUsageModel) -> CoachUsageModel: ...
