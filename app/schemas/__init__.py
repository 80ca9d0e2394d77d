from .cover_letter import CoverLetter, CoverLetterRequest, CoverLetterResponse, CoverLetterSections
from .match import MatchAnalysis, MatchRequest, MatchResponse, MatchScores, Suggestion
from .profile import (
    AnalysisRecord,
    Preferences,
    ProfileUpdate,
    SavedResume,
    TrackAnalysisRequest,
    UserProfile,
    UserStats,
)
from .resume import (
    ExtractTextResponse,
    ResumeUploadResponse,
    ResumeValidationResult,
    SaveResumeRequest,
    SaveResumeResponse,
)

__all__ = [
    "AnalysisRecord",
    "CoverLetter",
    "CoverLetterRequest",
    "CoverLetterResponse",
    "CoverLetterSections",
    "ExtractTextResponse",
    "MatchAnalysis",
    "MatchRequest",
    "MatchResponse",
    "MatchScores",
    "Preferences",
    "ProfileUpdate",
    "ResumeUploadResponse",
    "ResumeValidationResult",
    "SavedResume",
    "SaveResumeRequest",
    "SaveResumeResponse",
    "Suggestion",
    "TrackAnalysisRequest",
    "UserProfile",
    "UserStats",
]
