from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, Iterable, Protocol

from app.core.errors import AuthError, NotFoundError, ValidationError
from app.core.security import SessionUser
from app.schemas.profile import ProfileUpdate, SavedResume, UserProfile, UserStats
from app.services.profile_stats import apply_analysis, iso_timestamp, new_analysis_record, new_record_id, utc_now

logger = logging.getLogger(__name__)

MIN_RESUME_CHARS = 100
INVALIDATED_VIEWS = ("profile", "dashboard")


class ProfileDocumentStore(Protocol):
    def get(self, user_id: str) -> dict[str, Any] | None:
        ...

    def create(self, user_id: str, document: dict[str, Any]) -> dict[str, Any]:
        ...

    def update(self, user_id: str, fields: dict[str, Any]) -> bool:
        ...


def _dump(model: Any) -> Any:
    return model.model_dump(mode="json", by_alias=True)


def profile_payload(profile: UserProfile) -> dict[str, Any]:
    """Serialized profile with ``isDefault`` derived on every saved resume."""
    payload = _dump(profile)
    for resume in payload.get("savedResumes", []):
        resume["isDefault"] = resume.get("id") == profile.default_resume_id
    return payload


class ProfileService:
    def __init__(self, store: ProfileDocumentStore, *, clock: Callable[[], datetime] = utc_now):
        self._store = store
        self._clock = clock

    @staticmethod
    def _require_user(user: SessionUser | None) -> SessionUser:
        if user is None or not user.user_id:
            raise AuthError("Not authenticated")
        return user

    def _load(self, user_id: str) -> UserProfile:
        document = self._store.get(user_id)
        if document is None:
            raise NotFoundError("User profile not found")
        return UserProfile.model_validate(document)

    def _write(self, user_id: str, fields: dict[str, Any]) -> None:
        if not self._store.update(user_id, fields):
            raise NotFoundError("User profile not found")

    def _default_profile(self, user: SessionUser) -> UserProfile:
        now = iso_timestamp(self._clock())
        display_name = user.display_name or (user.email.split("@")[0] if user.email else "") or "User"
        return UserProfile(
            user_id=user.user_id,
            display_name=display_name,
            email=user.email,
            photo_url=user.photo_url,
            stats=UserStats(last_active=now),
            created_at=now,
            updated_at=now,
        )

    def get_or_create_profile(self, user: SessionUser | None) -> UserProfile:
        user = self._require_user(user)
        document = self._store.get(user.user_id)
        if document is not None:
            return UserProfile.model_validate(document)
        profile = self._default_profile(user)
        stored = self._store.create(user.user_id, _dump(profile))
        logger.info("profile_created user_id=%s", user.user_id)
        return UserProfile.model_validate(stored)

    def update_profile(self, user: SessionUser | None, patch: ProfileUpdate) -> None:
        user = self._require_user(user)
        # keys come out under the same aliases the stored document uses
        updated = patch.model_dump(mode="json", by_alias=True, exclude_none=True)
        preferences_patch = updated.pop("preferences", None)
        if not updated and not preferences_patch:
            raise ValidationError("No profile fields to update")

        profile = self._load(user.user_id)
        if preferences_patch:
            updated["preferences"] = {**_dump(profile.preferences), **preferences_patch}
        updated["updatedAt"] = iso_timestamp(self._clock())
        self._write(user.user_id, updated)
        self._invalidate(user.user_id, "update_profile")

    def save_resume(
        self,
        user: SessionUser | None,
        *,
        name: str,
        content: str,
        file_name: str = "",
        file_size: int = 0,
        is_default: bool = False,
    ) -> str:
        user = self._require_user(user)
        if not content:
            raise ValidationError("Resume content is missing")
        if len(content) < MIN_RESUME_CHARS:
            raise ValidationError("Resume content is too short or incomplete")

        profile = self._load(user.user_id)
        now = self._clock()
        resume = SavedResume(
            id=new_record_id(now),
            name=name,
            date_uploaded=iso_timestamp(now),
            content=content,
            file_name=file_name,
            file_size=file_size,
        )
        fields: dict[str, Any] = {
            "savedResumes": [_dump(item) for item in [*profile.saved_resumes, resume]],
            "updatedAt": iso_timestamp(now),
        }
        if is_default or not profile.saved_resumes:
            fields["defaultResumeId"] = resume.id
        self._write(user.user_id, fields)
        logger.info("resume_saved user_id=%s resume_id=%s chars=%s", user.user_id, resume.id, len(content))
        self._invalidate(user.user_id, "save_resume")
        return resume.id

    def delete_resume(self, user: SessionUser | None, resume_id: str) -> None:
        user = self._require_user(user)
        profile = self._load(user.user_id)
        remaining = [item for item in profile.saved_resumes if item.id != resume_id]
        if len(remaining) == len(profile.saved_resumes):
            raise NotFoundError("Resume not found")

        fields: dict[str, Any] = {
            "savedResumes": [_dump(item) for item in remaining],
            "updatedAt": iso_timestamp(self._clock()),
        }
        if profile.default_resume_id == resume_id:
            fields["defaultResumeId"] = remaining[0].id if remaining else None
        self._write(user.user_id, fields)
        self._invalidate(user.user_id, "delete_resume")

    def set_default_resume(self, user: SessionUser | None, resume_id: str) -> None:
        user = self._require_user(user)
        profile = self._load(user.user_id)
        if not any(item.id == resume_id for item in profile.saved_resumes):
            raise NotFoundError("Resume not found")
        self._write(
            user.user_id,
            {"defaultResumeId": resume_id, "updatedAt": iso_timestamp(self._clock())},
        )
        self._invalidate(user.user_id, "set_default_resume")

    def track_analysis(
        self,
        user: SessionUser | None,
        *,
        job_title: str,
        score: int,
        company_name: str | None = None,
        job_category: str | None = None,
        strengths: Iterable[str] | None = None,
        weaknesses: Iterable[str] | None = None,
    ) -> UserStats:
        user = self._require_user(user)
        profile = self._load(user.user_id)
        now = self._clock()
        record = new_analysis_record(
            job_title=job_title,
            score=score,
            now=now,
            company_name=company_name,
            job_category=job_category,
            strengths=strengths,
            weaknesses=weaknesses,
        )
        stats = apply_analysis(profile.stats, record, now)
        # stats and updatedAt land in a single write; a failed write fails the call
        self._write(user.user_id, {"stats": _dump(stats), "updatedAt": iso_timestamp(now)})
        logger.info(
            "analysis_tracked user_id=%s record_id=%s score=%s total=%s",
            user.user_id,
            record.id,
            score,
            stats.total_analyses,
        )
        self._invalidate(user.user_id, "track_analysis")
        return stats

    def _invalidate(self, user_id: str, reason: str) -> None:
        logger.info(
            "profile_views_invalidated user_id=%s views=%s reason=%s",
            user_id,
            ",".join(INVALIDATED_VIEWS),
            reason,
        )
