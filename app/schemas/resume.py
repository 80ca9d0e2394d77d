from __future__ import annotations

from pydantic import Field

from .base import CamelModel


class ExtractTextResponse(CamelModel):
    success: bool = True
    text: str
    filename: str
    file_size: int = Field(ge=0)


class ResumeValidationResult(CamelModel):
    is_resume: bool
    confidence: int = Field(ge=0, le=100)
    reasons: list[str] = Field(default_factory=list)
    document_type: str = "Unknown Document"
    suggestions: list[str] = Field(default_factory=list)


class ResumeUploadResponse(CamelModel):
    success: bool = True
    resume_text: str
    filename: str
    validation: ResumeValidationResult


class SaveResumeRequest(CamelModel):
    name: str = Field(min_length=1, max_length=200)
    content: str = Field(default="", max_length=200000)
    file_name: str = Field(default="", max_length=255)
    file_size: int = Field(default=0, ge=0)
    is_default: bool = False


class SaveResumeResponse(CamelModel):
    success: bool = True
    resume_id: str
