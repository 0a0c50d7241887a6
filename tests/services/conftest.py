"""Mock repositories (dictionaries) shared by the service tests."""

from dataclasses import replace
from datetime import datetime, timezone
from typing import Generator
from uuid import UUID, uuid4

import pytest

from src.backgammon.rating import INITIAL_ELO
from src.core.models import AnalysisModel, CoachUsageModel, GameModel, UserModel
from src.core.shared_types import Color, Status, SubscriptionType, UserLevel


def make_user(
    username: str = "alice",
    elo: int = INITIAL_ELO,
    subscription_type: SubscriptionType = SubscriptionType.FREE,
) -> UserModel:
    return UserModel(
        id=uuid4(),
        email=f"{username}@example.com",
        username=username,
        password_hash="not-a-real-hash",
        elo=elo,
        level=UserLevel.BEGINNER,
        subscription_type=subscription_type,
    )


# --- MOCK DEPENDENCIES ----
class MockGameRepository:
    """Mock the GameRepository using a dictionary of game models."""

    def __init__(self) -> None:
        self._games: dict[UUID, GameModel] = {}

    def create_game(self, game: GameModel) -> tuple[GameModel, UUID]:
        game_id = uuid4()
        self._games[game_id] = game
        return game, game_id

    def get_game(self, game_id: UUID) -> GameModel | None:
        return self._games.get(game_id)

    def update_game(self, game_id: UUID, game: GameModel) -> GameModel | None:
        if game_id not in self._games:
            return None
        self._games[game_id] = game
        return game

    def delete_game(self, game_id: UUID) -> GameModel | None:
        return self._games.pop(game_id, None)

    def list_games(self, player_id: str) -> list[tuple[UUID, GameModel]]:
        return [
            (game_id, game)
            for game_id, game in self._games.items()
            if player_id in game.registered_players.values()
        ]

    def list_waiting_games(self, exclude_player: str) -> list[tuple[UUID, GameModel]]:
        return [
            (game_id, game)
            for game_id, game in self._games.items()
            if game.status == Status.WAITING
            and game.registered_players.get(Color.WHITE) != exclude_player
        ]

    def count_finished_games(self, player_id: str) -> int:
        return sum(
            1
            for _, game in self.list_games(player_id)
            if game.status in (Status.COMPLETED, Status.ABANDONED)
            and Color.BLACK in game.registered_players
        )

    def clear(self) -> None:
        self._games.clear()


class MockUserRepository:
    def __init__(self) -> None:
        self._users: dict[UUID, UserModel] = {}

    def get_user(self, user_id: UUID) -> UserModel | None:
        user = self._users.get(user_id)
        return replace(user) if user else None

    def get_user_by_email(self, email: str) -> UserModel | None:
        return next((replace(u) for u in self._users.values() if u.email == email), None)

    def get_user_by_username(self, username: str) -> UserModel | None:
        return next((replace(u) for u in self._users.values() if u.username == username), None)

    def create_user(self, user: UserModel) -> UserModel:
        self._users[user.id] = replace(user)
        return replace(user)

    def update_user(self, user: UserModel) -> UserModel | None:
        if user.id not in self._users:
            return None
        self._users[user.id] = replace(user)
        return replace(user)

    def list_active_users(self, limit: int, offset: int) -> list[UserModel]:
        active = sorted(
            (u for u in self._users.values() if u.is_active),
            key=lambda u: (-u.elo, u.username),
        )
        return [replace(u) for u in active[offset : offset + limit]]

    def count_active_users(self, min_elo_exclusive: int | None = None) -> int:
        return sum(
            1
            for u in self._users.values()
            if u.is_active and (min_elo_exclusive is None or u.elo > min_elo_exclusive)
        )

    def clear(self) -> None:
        self._users.clear()


class MockAnalysisRepository:
    def __init__(self) -> None:
        self.analyses: dict[UUID, AnalysisModel] = {}

    def create_analysis(self, analysis: AnalysisModel) -> tuple[AnalysisModel, UUID]:
        analysis_id = uuid4()
        analysis.created_at = analysis.created_at or datetime.now(timezone.utc)
        self.analyses[analysis_id] = analysis
        return analysis, analysis_id

    def count_analyses_since(self, user_id: UUID, since: datetime) -> int:
        return sum(
            1
            for analysis in self.analyses.values()
            if analysis.user_id == user_id and analysis.created_at >= since
        )


class MockCoachUsageRepository:
    def __init__(self) -> None:
        self.usage: dict[tuple[UUID, str], CoachUsageModel] = {}

    def get_usage(self, user_id: UUID, month: str) -> CoachUsageModel | None:
        usage = self.usage.get((user_id, month))
        return replace(usage) if usage else None

    def save_usage(self, usage: CoachUsageModel) -> CoachUsageModel:
        self.usage[(usage.user_id, usage.month)] = replace(usage)
        return usage


@pytest.fixture
def game_repository() -> Generator[MockGameRepository, None, None]:
    """Ensures to clear the repository between tests"""
    repo = MockGameRepository()
    try:
        yield repo
    finally:
        repo.clear()


@pytest.fixture
def user_repository() -> Generator[MockUserRepository, None, None]:
    repo = MockUserRepository()
    try:
        yield repo
    finally:
        repo.clear()


@pytest.fixture
def alice(user_repository: MockUserRepository) -> UserModel:
    return user_repository.create_user(make_user("alice"))


@pytest.fixture
def bob(user_repository: MockUserRepository) -> UserModel:
    return user_repository.create_user(make_user("bob"))


@pytest.fixture
def create_user(user_repository: MockUserRepository):
    """Factory storing new users in the mock repository."""

    def _create(username: str, **kwargs) -> UserModel:
        return user_repository.create_user(make_user(username, **kwargs))

    return _create


@pytest.fixture
def analysis_repository() -> MockAnalysisRepository:
    return MockAnalysisRepository()


@pytest.fixture
def coach_usage_repository() -> MockCoachUsageRepository:
    return MockCoachUsageRepository()
