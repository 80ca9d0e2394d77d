from fastapi import APIRouter, Depends, Request

from app.api.deps import get_current_user, get_services
from app.core.errors import ValidationError
from app.core.rate_limit import rate_limit
from app.core.security import SessionUser
from app.core.services import AppServices
from app.schemas.cover_letter import CoverLetterRequest, CoverLetterResponse

router = APIRouter()


@router.post("/cover-letter/generate", response_model=CoverLetterResponse, response_model_exclude_none=True)
@rate_limit()
async def generate_cover_letter(
    request: Request,
    payload: CoverLetterRequest,
    user: SessionUser = Depends(get_current_user),
    services: AppServices = Depends(get_services),
):
    _ = request
    required = (payload.resume_text, payload.job_description, payload.job_title, payload.company_name)
    if not all(value.strip() for value in required):
        raise ValidationError("Resume text, job description, job title, and company name are required")

    letter = await services.cover_letters.generate(
        payload.resume_text,
        payload.job_description,
        payload.job_title,
        payload.company_name,
        candidate_name=payload.candidate_name or user.display_name or None,
        tone=payload.tone,
    )
    return CoverLetterResponse(cover_letter=letter)
