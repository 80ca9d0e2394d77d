import logging

from fastapi import APIRouter, Depends, Request

from app.api.deps import get_current_user, get_services
from app.core.errors import AppError, ValidationError
from app.core.rate_limit import rate_limit
from app.core.security import SessionUser
from app.core.services import AppServices
from app.schemas.match import MatchRequest, MatchResponse

logger = logging.getLogger(__name__)

router = APIRouter()

MAX_TRACKED_LABELS = 5


@router.post("/match/analyze", response_model=MatchResponse, response_model_exclude_none=True)
@rate_limit()
async def analyze_match(
    request: Request,
    payload: MatchRequest,
    user: SessionUser = Depends(get_current_user),
    services: AppServices = Depends(get_services),
):
    _ = request
    if not payload.resume_text.strip() or not payload.job_description.strip():
        raise ValidationError("Resume text and job description are required")

    analysis = await services.scorer.analyze(
        payload.resume_text,
        payload.job_description,
        payload.job_category,
    )

    tracked = False
    if payload.job_title and payload.job_title.strip():
        try:
            services.profiles.track_analysis(
                user,
                job_title=payload.job_title.strip(),
                score=analysis.overall_match,
                company_name=payload.company_name,
                job_category=payload.job_category,
                strengths=analysis.strengths[:MAX_TRACKED_LABELS],
                weaknesses=analysis.weaknesses[:MAX_TRACKED_LABELS],
            )
            tracked = True
        except AppError as exc:
            logger.warning("match_tracking_failed user_id=%s reason=%s: %s", user.user_id, type(exc).__name__, exc)

    return MatchResponse(analysis=analysis, tracked=tracked)
