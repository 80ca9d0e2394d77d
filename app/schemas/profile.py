from __future__ import annotations

from typing import Any, Literal

from pydantic import ConfigDict, Field

from .base import CamelModel

ImprovementTrend = Literal["not-enough-data", "improving", "declining", "stable"]
EmailFrequency = Literal["daily", "weekly", "monthly", "none"]
Theme = Literal["dark", "light", "system"]

MAX_HISTORY = 50
MAX_RANKED_LABELS = 10


class AnalysisRecord(CamelModel):
    id: str
    date: str
    job_title: str
    company_name: str = "Not specified"
    job_category: str = "Not specified"
    score: int = Field(ge=0, le=100)
    strengths: list[str] = Field(default_factory=list)
    weaknesses: list[str] = Field(default_factory=list)


class UserStats(CamelModel):
    total_analyses: int = 0
    highest_match_score: int = 0
    average_match_score: float = 0.0
    analyses_this_month: int = 0
    analyses_history: list[AnalysisRecord] = Field(default_factory=list)
    top_strengths: list[str] = Field(default_factory=list)
    common_weaknesses: list[str] = Field(default_factory=list)
    strength_counts: dict[str, int] = Field(default_factory=dict)
    weakness_counts: dict[str, int] = Field(default_factory=dict)
    improvement_trend: ImprovementTrend = "not-enough-data"
    last_active: str = ""


class SavedResume(CamelModel):
    id: str
    name: str
    date_uploaded: str
    content: str
    file_name: str = ""
    file_size: int = 0


class SavedSearch(CamelModel):
    id: str
    name: str
    parameters: dict[str, Any] = Field(default_factory=dict)
    date_created: str = ""


class Preferences(CamelModel):
    job_alerts: bool = True
    email_frequency: EmailFrequency = "weekly"
    theme: Theme = "dark"
    private_profile: bool = False


class UserProfile(CamelModel):
    user_id: str
    display_name: str = ""
    email: str = ""
    photo_url: str = Field(default="", alias="photoURL")
    profession: str | None = None
    career_level: str | None = None
    target_industry: str | None = None
    target_role: str | None = None
    location: str | None = None
    bio: str | None = None
    skills: list[str] = Field(default_factory=list)
    saved_resumes: list[SavedResume] = Field(default_factory=list)
    saved_jobs: list[str] = Field(default_factory=list)
    saved_searches: list[SavedSearch] = Field(default_factory=list)
    preferences: Preferences = Field(default_factory=Preferences)
    default_resume_id: str | None = None
    stats: UserStats = Field(default_factory=UserStats)
    created_at: str = ""
    updated_at: str = ""


class PreferencesUpdate(CamelModel):
    model_config = ConfigDict(extra="forbid")

    job_alerts: bool | None = None
    email_frequency: EmailFrequency | None = None
    theme: Theme | None = None
    private_profile: bool | None = None


class ProfileUpdate(CamelModel):
    model_config = ConfigDict(extra="forbid")

    display_name: str | None = Field(default=None, max_length=200)
    photo_url: str | None = Field(default=None, alias="photoURL", max_length=2000)
    profession: str | None = Field(default=None, max_length=200)
    career_level: str | None = Field(default=None, max_length=100)
    target_industry: str | None = Field(default=None, max_length=200)
    target_role: str | None = Field(default=None, max_length=200)
    location: str | None = Field(default=None, max_length=200)
    bio: str | None = Field(default=None, max_length=5000)
    skills: list[str] | None = Field(default=None, max_length=200)
    preferences: PreferencesUpdate | None = None


class TrackAnalysisRequest(CamelModel):
    job_title: str = Field(min_length=1, max_length=300)
    score: int = Field(ge=0, le=100)
    company_name: str | None = Field(default=None, max_length=300)
    job_category: str | None = Field(default=None, max_length=200)
    strengths: list[str] = Field(default_factory=list, max_length=50)
    weaknesses: list[str] = Field(default_factory=list, max_length=50)
