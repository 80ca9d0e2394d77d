from __future__ import annotations

from pydantic import Field

from .base import CamelModel


class MatchScores(CamelModel):
    technical_skills: int = Field(ge=0, le=100)
    experience_match: int = Field(ge=0, le=100)
    keyword_alignment: int = Field(ge=0, le=100)
    soft_skills: int = Field(ge=0, le=100)


class Suggestion(CamelModel):
    category: str
    original: str
    improved: str
    reason: str


class MatchAnalysis(CamelModel):
    overall_match: int = Field(ge=0, le=100)
    scores: MatchScores
    strengths: list[str]
    weaknesses: list[str]
    suggestions: list[Suggestion] = Field(default_factory=list)
    missing_keywords: list[str] = Field(default_factory=list)
    matched_keywords: list[str] = Field(default_factory=list)
    note: str | None = None


class MatchRequest(CamelModel):
    resume_text: str = Field(default="", max_length=100000)
    job_description: str = Field(default="", max_length=100000)
    job_category: str | None = Field(default=None, max_length=200)
    job_title: str | None = Field(default=None, max_length=300)
    company_name: str | None = Field(default=None, max_length=300)


class MatchResponse(CamelModel):
    success: bool = True
    analysis: MatchAnalysis
    tracked: bool = False
