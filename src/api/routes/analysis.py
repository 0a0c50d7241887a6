"""/api/analysis routes"""

from fastapi import APIRouter, Depends

from src.api.dependencies import current_user, get_analysis_service, limit_api
from src.api.models import AnalysisResponse, AnalyzeRequest, Envelope
from src.core.models import UserModel
from src.services.analysis_service import AnalysisService

router = APIRouter(prefix="/api/analysis", tags=["analysis"], dependencies=[Depends(limit_api)])


@router.post("", response_model=Envelope[AnalysisResponse])
def analyze(
    request: AnalyzeRequest,
    user: UserModel = Depends(current_user),
    analysis: AnalysisService = Depends(get_analysis_service),
) -> Envelope[AnalysisResponse]:
    return Envelope(message="Analysis completed", data=analysis.analyze(user, request))
