"""/api/coach routes"""

from fastapi import APIRouter, Depends

from src.api.dependencies import current_user, get_coach_service, limit_api
from src.api.models import ChatRequest, ChatResponse, Envelope
from src.core.models import UserModel
from src.services.coach_service import CoachService

router = APIRouter(prefix="/api/coach", tags=["coach"], dependencies=[Depends(limit_api)])


@router.post("/chat", response_model=Envelope[ChatResponse])
def chat(
    request: ChatRequest,
    user: UserModel = Depends(current_user),
    coach: CoachService = Depends(get_coach_service),
) -> Envelope[ChatResponse]:
    return Envelope(data=coach.chat(user, request))
