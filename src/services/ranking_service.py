"""Leaderboard and the rank of a single player, both ordered by ELO among active users."""

from src.api.models import LeaderboardResponse, RankingEntry, UserRankResponse
from src.backgammon.rating import round_half_up
from src.core.models import UserModel
from src.db.repository import GameRepository, UserRepository

MAX_PAGE_SIZE = 100


class RankingService:
    def __init__(self, users: UserRepository, games: GameRepository) -> None:
        self.users = users
        self.games = games

    def leaderboard(self, limit: int = 50, offset: int = 0) -> LeaderboardResponse:
        limit = max(1, min(limit, MAX_PAGE_SIZE))
        offset = max(offset, 0)
        rankings = [
            RankingEntry(
                user_id=user.id,
                username=user.username,
                elo=user.elo,
                rank=offset + position,
                games_played=self.games.count_finished_games(str(user.id)),
            )
            for position, user in enumerate(self.users.list_active_users(limit, offset), start=1)
        ]
        return LeaderboardResponse(rankings=rankings, total=self.users.count_active_users())

    def user_rank(self, user: UserModel) -> UserRankResponse:
        """Players with an equal rating share a rank."""
        total = self.users.count_active_users()
        above = self.users.count_active_users(min_elo_exclusive=user.elo)
        percentile = round_half_up((total - above) / total * 100) if total else 0
        return UserRankResponse(global_rank=above + 1, total_players=total, percentile=percentile)
