from __future__ import annotations

from fastapi import APIRouter, Depends

from app.api.deps import get_current_user, get_services
from app.core.security import SessionUser
from app.core.services import AppServices
from app.schemas.profile import ProfileUpdate, TrackAnalysisRequest
from app.schemas.resume import SaveResumeRequest, SaveResumeResponse
from app.services.profile_service import profile_payload

router = APIRouter()


@router.get("/user/profile")
async def get_profile(
    user: SessionUser = Depends(get_current_user),
    services: AppServices = Depends(get_services),
):
    profile = services.profiles.get_or_create_profile(user)
    return {"success": True, "profile": profile_payload(profile)}


@router.post("/user/profile")
async def update_profile(
    payload: ProfileUpdate,
    user: SessionUser = Depends(get_current_user),
    services: AppServices = Depends(get_services),
):
    services.profiles.update_profile(user, payload)
    return {"success": True, "message": "Profile updated successfully"}


@router.post("/user/resumes", response_model=SaveResumeResponse)
async def save_resume(
    payload: SaveResumeRequest,
    user: SessionUser = Depends(get_current_user),
    services: AppServices = Depends(get_services),
):
    resume_id = services.profiles.save_resume(
        user,
        name=payload.name,
        content=payload.content,
        file_name=payload.file_name,
        file_size=payload.file_size,
        is_default=payload.is_default,
    )
    return SaveResumeResponse(resume_id=resume_id)


@router.delete("/user/resumes/{resume_id}")
async def delete_resume(
    resume_id: str,
    user: SessionUser = Depends(get_current_user),
    services: AppServices = Depends(get_services),
):
    services.profiles.delete_resume(user, resume_id)
    return {"success": True}


@router.post("/user/resumes/{resume_id}/default")
async def set_default_resume(
    resume_id: str,
    user: SessionUser = Depends(get_current_user),
    services: AppServices = Depends(get_services),
):
    services.profiles.set_default_resume(user, resume_id)
    return {"success": True}


@router.post("/user/analyses")
async def track_analysis(
    payload: TrackAnalysisRequest,
    user: SessionUser = Depends(get_current_user),
    services: AppServices = Depends(get_services),
):
    stats = services.profiles.track_analysis(
        user,
        job_title=payload.job_title,
        score=payload.score,
        company_name=payload.company_name,
        job_category=payload.job_category,
        strengths=payload.strengths,
        weaknesses=payload.weaknesses,
    )
    return {"success": True, "stats": stats.model_dump(mode="json", by_alias=True)}
