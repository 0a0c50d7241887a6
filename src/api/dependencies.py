"""Dependencies injected into the routers: database session, repositories, services and the authenticated user."""

from typing import Optional

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from src.api.rate_limit import FixedWindowRateLimiter, RateLimit
from src.core.config import settings
from src.core.exceptions import AuthenticationError
from src.core.models import UserModel
from src.db.database import get_db
from src.db.sql_repository import (
    SQLAnalysisRepository,
    SQLCoachUsageRepository,
    SQLGameRepository,
    SQLUserRepository,
)
from src.services.analysis_service import AnalysisService
from src.services.auth_service import AuthService
from src.services.coach_service import CoachService
from src.services.game_service import BackgammonService
from src.services.ranking_service import RankingService

# --- Rate limiters (one counter set per process)
login_limiter = FixedWindowRateLimiter(
    settings.LOGIN_RATE_LIMIT,
    settings.LOGIN_RATE_WINDOW,
    message="Too many login attempts, please try again later.",
)
api_limiter = FixedWindowRateLimiter(settings.API_RATE_LIMIT, settings.API_RATE_WINDOW)

limit_login = RateLimit(login_limiter)
limit_api = RateLimit(api_limiter)


# --- Services
def get_auth_service(db: Session = Depends(get_db)) -> AuthService:
    return AuthService(SQLUserRepository(db))


def get_game_service(db: Session = Depends(get_db)) -> BackgammonService:
    return BackgammonService(SQLGameRepository(db), SQLUserRepository(db))


def get_analysis_service(
    db: Session = Depends(get_db),
    games: BackgammonService = Depends(get_game_service),
) -> AnalysisService:
    return AnalysisService(SQLAnalysisRepository(db), games)


def get_coach_service(db: Session = Depends(get_db)) -> CoachService:
    return CoachService(SQLCoachUsageRepository(db))


def get_ranking_service(db: Session = Depends(get_db)) -> RankingService:
    return RankingService(SQLUserRepository(db), SQLGameRepository(db))


# --- Authentication
def current_user(
    authorization: Optional[str] = Header(default=None),
    auth: AuthService = Depends(get_auth_service),
) -> UserModel:
    """The user owning the 'Authorization: Bearer <token>' header."""
    if not authorization:
        raise AuthenticationError("Authorization token required")
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise AuthenticationError("Authorization token required")
    return auth.authenticate(token.strip())
