"""Implementation of the repositories using SQLAlchemy"""

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from src.core.models import AnalysisModel, CoachUsageModel, GameModel, UserModel
from src.core.shared_types import Color, Status
from src.db.schema import DBAnalysis, DBCoachUsage, DBGame, DBUser


class SQLGameRepository:
    """Data stored using SQL / methods implemented using SQLAlchemy"""

    def __init__(self, db_session: Session) -> None:
        self.db = db_session

    def get_game(self, game_id: UUID) -> GameModel | None:
        """Get game by ID, if record exists."""
        game_db = self._fetch_game(game_id)
        if game_db:
            return self._to_model(game_db)
        return None

    def create_game(self, game: GameModel) -> tuple[GameModel, UUID]:
        """Store new game and return the stored data + newly created game ID."""

        new_id = uuid4()
        game_db = DBGame(id=new_id)
        self._copy_into(game, game_db)
        self.db.add(game_db)
        self.db.commit()
        self.db.refresh(game_db)
        return self._to_model(game_db), new_id

    def update_game(self, game_id: UUID, game: GameModel) -> GameModel | None:
        """Add new info to existing record."""
        game_db = self._fetch_game(game_id)
        if not game_db:
            return None
        self._copy_into(game, game_db)
        self.db.commit()
        self.db.refresh(game_db)
        return self._to_model(game_db)

    def delete_game(self, game_id: UUID) -> GameModel | None:
        """Remove a game's record."""
        game_db = self._fetch_game(game_id)
        if not game_db:
            return None
        game_model = self._to_model(game_db)
        self.db.delete(game_db)
        self.db.commit()
        return game_model

    def list_games(self, player_id: str) -> list[tuple[UUID, GameModel]]:
        query = (
            select(DBGame)
            .where(or_(DBGame.white_player == player_id, DBGame.black_player == player_id))
            .order_by(DBGame.created_at.desc())
        )
        return [(game_db.id, self._to_model(game_db)) for game_db in self.db.scalars(query)]

    def list_waiting_games(self, exclude_player: str) -> list[tuple[UUID, GameModel]]:
        query = (
            select(DBGame)
            .where(DBGame.status == Status.WAITING)
            .where(DBGame.white_player != exclude_player)
            .order_by(DBGame.created_at.desc())
        )
        return [(game_db.id, self._to_model(game_db)) for game_db in self.db.scalars(query)]

    def count_finished_games(self, player_id: str) -> int:
        query = (
            select(func.count())
            .select_from(DBGame)
            .where(or_(DBGame.white_player == player_id, DBGame.black_player == player_id))
            .where(DBGame.status.in_([Status.COMPLETED, Status.ABANDONED]))
            .where(DBGame.black_player.is_not(None))
        )
        return self.db.scalar(query) or 0

    def _fetch_game(self, game_id: UUID) -> DBGame | None:
        query = select(DBGame).where(DBGame.id == game_id)
        return self.db.scalar(query)

    @staticmethod
    def _copy_into(game: GameModel, game_db: DBGame) -> None:
        game_db.position_id = game.position_id
        game_db.current_player = game.current_player
        game_db.registered_players = dict(game.registered_players)
        game_db.white_player = game.registered_players.get(Color.WHITE)
        game_db.black_player = game.registered_players.get(Color.BLACK)
        game_db.status = game.status
        game_db.mode = game.mode
        game_db.is_ranked = game.is_ranked
        game_db.difficulty = game.difficulty
        game_db.dice = list(game.dice)
        game_db.dice_left = list(game.dice_left)
        game_db.moves = list(game.moves)
        game_db.winner = game.winner
        game_db.white_score = game.white_score
        game_db.black_score = game.black_score

    def _to_model(self, game_db: DBGame) -> GameModel:
        """Convert SQLAlchemy model to data transfer model."""
        return GameModel(
            position_id=game_db.position_id,
            current_player=game_db.current_player,
            registered_players=dict(game_db.registered_players),
            status=game_db.status,
            mode=game_db.mode,
            is_ranked=game_db.is_ranked,
            difficulty=game_db.difficulty,
            dice=list(game_db.dice),
            dice_left=list(game_db.dice_left),
            moves=list(game_db.moves),
            winner=game_db.winner,
            white_score=game_db.white_score,
            black_score=game_db.black_score,
            created_at=game_db.created_at,
            updated_at=game_db.updated_at,
        )


class SQLUserRepository:
    def __init__(self, db_session: Session) -> None:
        self.db = db_session

    def get_user(self, user_id: UUID) -> UserModel | None:
        user_db = self.db.get(DBUser, user_id)
        return self._to_model(user_db) if user_db else None

    def get_user_by_email(self, email: str) -> UserModel | None:
        user_db = self.db.scalar(select(DBUser).where(DBUser.email == email.lower()))
        return self._to_model(user_db) if user_db else None

    def get_user_by_username(self, username: str) -> UserModel | None:
        user_db = self.db.scalar(
            select(DBUser).where(DBUser.username == username.lower())
        )
        return self._to_model(user_db) if user_db else None

    def create_user(self, user: UserModel) -> UserModel:
        user_db = DBUser(id=user.id)
        self._copy_into(user, user_db)
        self.db.add(user_db)
        self.db.commit()
        self.db.refresh(user_db)
        return self._to_model(user_db)

    def update_user(self, user: UserModel) -> UserModel | None:
        user_db = self.db.get(DBUser, user.id)
        if not user_db:
            return None
        self._copy_into(user, user_db)
        self.db.commit()
        self.db.refresh(user_db)
        return self._to_model(user_db)

    def list_active_users(self, limit: int, offset: int) -> list[UserModel]:
        query = (
            select(DBUser)
            .where(DBUser.is_active.is_(True))
            .order_by(DBUser.elo.desc(), DBUser.username)
            .offset(offset)
            .limit(limit)
        )
        return [self._to_model(user_db) for user_db in self.db.scalars(query)]

    def count_active_users(self, min_elo_exclusive: int | None = None) -> int:
        query = select(func.count()).select_from(DBUser).where(DBUser.is_active.is_(True))
        if min_elo_exclusive is not None:
            query = query.where(DBUser.elo > min_elo_exclusive)
        return self.db.scalar(query) or 0

    @staticmethod
    def _copy_into(user: UserModel, user_db: DBUser) -> None:
        user_db.email = user.email
        user_db.username = user.username
        user_db.password_hash = user.password_hash
        user_db.elo = user.elo
        user_db.level = user.level
        user_db.subscription_type = user.subscription_type
        user_db.avatar = user.avatar
        user_db.is_active = user.is_active
        user_db.email_verified = user.email_verified
        user_db.last_login_at = user.last_login_at
        if user.created_at is not None:
            user_db.created_at = user.created_at

    def _to_model(self, user_db: DBUser) -> UserModel:
        return UserModel(
            id=user_db.id,
            email=user_db.email,
            username=user_db.username,
            password_hash=user_db.password_hash,
            elo=user_db.elo,
            level=user_db.level,
            subscription_type=user_db.subscription_type,
            avatar=user_db.avatar,
            is_active=user_db.is_active,
            email_verified=user_db.email_verified,
            created_at=user_db.created_at,
            last_login_at=user_db.last_login_at,
        )


class SQLAnalysisRepository:
    def __init__(self, db_session: Session) -> None:
        self.db = db_session

    def create_analysis(self, analysis: AnalysisModel) -> tuple[AnalysisModel, UUID]:
        new_id = uuid4()
        analysis_db = DBAnalysis(
            id=new_id,
            user_id=analysis.user_id,
            position_id=analysis.position_id,
            dice=list(analysis.dice),
            move=analysis.move,
            best_move=analysis.best_move,
            equity=analysis.equity,
            pr=analysis.pr,
            explanation=analysis.explanation,
            alternatives=list(analysis.alternatives),
            analysis_type=analysis.analysis_type,
        )
        self.db.add(analysis_db)
        self.db.commit()
        self.db.refresh(analysis_db)
        return self._to_model(analysis_db), new_id

    def count_analyses_since(self, user_id: UUID, since: datetime) -> int:
        query = (
            select(func.count())
            .select_from(DBAnalysis)
            .where(DBAnalysis.user_id == user_id)
            .where(DBAnalysis.created_at >= since)
        )
        return self.db.scalar(query) or 0

    def _to_model(self, analysis_db: DBAnalysis) -> AnalysisModel:
        return AnalysisModel(
            user_id=analysis_db.user_id,
            position_id=analysis_db.position_id,
            dice=list(analysis_db.dice),
            move=analysis_db.move,
            best_move=analysis_db.best_move,
            equity=analysis_db.equity,
            pr=analysis_db.pr,
            explanation=analysis_db.explanation,
            alternatives=list(analysis_db.alternatives),
            analysis_type=analysis_db.analysis_type,
            created_at=analysis_db.created_at,
        )


class SQLCoachUsageRepository:
    def __init__(self, db_session: Session) -> None:
        self.db = db_session

    def get_usage(self, user_id: UUID, month: str) -> CoachUsageModel | None:
        usage_db = self._fetch_usage(user_id, month)
        if usage_db is None:
            return None
        return CoachUsageModel(
            user_id=usage_db.user_id, month=usage_db.month, requests=usage_db.requests
        )

    def save_usage(self, usage: CoachUsageModel) -> CoachUsageModel:
        """Insert or update the counter of (user, month)"""
        usage_db = self._fetch_usage(usage.user_id, usage.month)
        if usage_db is None:
            usage_db = DBCoachUsage(user_id=usage.user_id, month=usage.month)
            self.db.add(usage_db)
        usage_db.requests = usage.requests
        self.db.commit()
        return usage

    def _fetch_usage(self, user_id: UUID, month: str) -> DBCoachUsage | None:
        query = select(DBCoachUsage).where(
            DBCoachUsage.user_id == user_id, DBCoachUsage.month == month
        )
        return self.db.scalar(query)
