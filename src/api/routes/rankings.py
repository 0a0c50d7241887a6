"""/api/rankings routes"""

from fastapi import APIRouter, Depends, Query

from src.api.dependencies import current_user, get_ranking_service, limit_api
from src.api.models import Envelope, LeaderboardResponse, UserRankResponse
from src.core.models import UserModel
from src.services.ranking_service import MAX_PAGE_SIZE, RankingService

router = APIRouter(prefix="/api/rankings", tags=["rankings"], dependencies=[Depends(limit_api)])


@router.get("", response_model=Envelope[LeaderboardResponse])
def leaderboard(
    limit: int = Query(default=50, ge=1, le=MAX_PAGE_SIZE),
    offset: int = Query(default=0, ge=0),
    rankings: RankingService = Depends(get_ranking_service),
) -> Envelope[LeaderboardResponse]:
    return Envelope(data=rankings.leaderboard(limit, offset))


@router.get("/me", response_model=Envelope[UserRankResponse])
def my_rank(
    user: UserModel = Depends(current_user),
    rankings: RankingService = Depends(get_ranking_service),
) -> Envelope[UserRankResponse]:
    return Envelope(data=rankings.user_rank(user))
