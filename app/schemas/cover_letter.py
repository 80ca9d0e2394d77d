from __future__ import annotations

from typing import Literal

from pydantic import Field

from .base import CamelModel

Tone = Literal["professional", "friendly", "confident"]


class CoverLetterSections(CamelModel):
    opening: str
    body: str
    closing: str


class AlternativeVersions(CamelModel):
    concise: str = ""
    detailed: str = ""


class CoverLetter(CamelModel):
    cover_letter: str = Field(min_length=1)
    sections: CoverLetterSections
    key_highlights: list[str] = Field(default_factory=list)
    keywords_used: list[str] = Field(default_factory=list)
    strengths_highlighted: list[str] = Field(default_factory=list)
    suggestions: list[str] = Field(default_factory=list)
    alternative_versions: AlternativeVersions = Field(default_factory=AlternativeVersions)
    note: str | None = None


class CoverLetterRequest(CamelModel):
    resume_text: str = Field(default="", max_length=100000)
    job_description: str = Field(default="", max_length=100000)
    job_title: str = Field(default="", max_length=300)
    company_name: str = Field(default="", max_length=300)
    candidate_name: str | None = Field(default=None, max_length=200)
    tone: Tone = "professional"


class CoverLetterResponse(CamelModel):
    success: bool = True
    cover_letter: CoverLetter
