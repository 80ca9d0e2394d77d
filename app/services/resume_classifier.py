from __future__ import annotations

import logging

from app.ai.types import AIClient
from app.schemas.resume import ResumeValidationResult
from app.services.llm_json import complete_as

logger = logging.getLogger(__name__)

MIN_CONFIDENCE = 70
FALLBACK_THRESHOLD = 60

CONTACT_TERMS = ("email", "phone", "address", "@", "+1", "linkedin", "github")
WORK_TERMS = (
    "experience",
    "employment",
    "worked",
    "company",
    "position",
    "manager",
    "developer",
    "analyst",
    "coordinator",
)
EDUCATION_TERMS = ("education", "university", "college", "degree", "bachelor", "master", "phd", "graduated", "gpa")
SKILL_TERMS = (
    "skills",
    "proficient",
    "experienced",
    "javascript",
    "python",
    "java",
    "react",
    "node",
    "sql",
    "html",
    "css",
)
STRUCTURE_TERMS = ("summary", "objective", "achievements", "accomplishments", "responsibilities", "projects")
NON_RESUME_TERMS = (
    "chapter",
    "section",
    "page",
    "figure",
    "table of contents",
    "references",
    "bibliography",
    "abstract",
)

# (vocabulary, minimum hits, points, reason)
_RULES = (
    (CONTACT_TERMS, 1, 20, "Contains contact information"),
    (WORK_TERMS, 2, 20, "Contains work experience information"),
    (EDUCATION_TERMS, 1, 20, "Contains education information"),
    (SKILL_TERMS, 2, 20, "Contains technical skills"),
    (STRUCTURE_TERMS, 1, 15, "Has resume-like structure"),
    (NON_RESUME_TERMS, 2, -30, "Contains academic/manual content indicators"),
)

SYSTEM_PROMPT = (
    "You are an expert document classifier specializing in resume/CV identification. "
    "Be strict: a document must clearly be a resume/CV to be classified as one. Answer with strict JSON only."
)


def _build_prompt(text: str) -> str:
    return (
        f"DOCUMENT CONTENT:\n{text}\n\n"
        "Determine if this document is a resume/CV by checking for:\n"
        "1. PERSONAL INFORMATION: name, contact details\n"
        "2. PROFESSIONAL SUMMARY/OBJECTIVE\n"
        "3. WORK EXPERIENCE: job titles, companies, dates, responsibilities\n"
        "4. EDUCATION: degrees, institutions, graduation dates\n"
        "5. SKILLS: technical skills, software proficiency, languages\n"
        "6. ACHIEVEMENTS: accomplishments, awards, certifications\n\n"
        "A true resume has at least 4 of the 6 elements, a partial resume 2-3, anything else is not a resume. "
        "If your confidence is below 70, mark it as not a resume.\n\n"
        "Respond with JSON of exactly this shape:\n"
        "{"
        "\"isResume\": true,"
        "\"confidence\": 0,"
        "\"reasons\": [\"...\"],"
        "\"documentType\": \"Full Resume|Partial Resume|Cover Letter|Academic Paper|Manual|Article|Unknown Document|Other\","
        "\"suggestions\": [\"...\"]"
        "}"
    )


def fallback_classification(text: str) -> ResumeValidationResult:
    lowered = text.lower()
    score = 0
    reasons: list[str] = []
    for vocabulary, minimum, points, reason in _RULES:
        hits = sum(1 for term in vocabulary if term in lowered)
        if hits >= minimum:
            score += points
            reasons.append(reason)

    is_resume = score >= FALLBACK_THRESHOLD
    return ResumeValidationResult(
        is_resume=is_resume,
        confidence=min(100, max(0, score)),
        reasons=reasons or ["Unable to determine document type clearly"],
        document_type="Resume/CV" if is_resume else "Other Document",
        suggestions=[] if is_resume else [
            "This appears to be a non-resume document. Please upload a proper CV/resume."
        ],
    )


class ResumeClassifier:
    def __init__(self, llm: AIClient, *, max_tokens: int = 500):
        self._llm = llm
        self._max_tokens = max_tokens

    async def classify(self, text: str) -> ResumeValidationResult:
        try:
            result = await complete_as(
                self._llm,
                ResumeValidationResult,
                system_prompt=SYSTEM_PROMPT,
                user_prompt=_build_prompt(text),
                max_tokens=self._max_tokens,
                tool_slug="resume-classifier",
            )
        except Exception as exc:  # noqa: BLE001 - deterministic fallback is expected
            logger.warning("resume_classifier_fallback reason=%s: %s", type(exc).__name__, exc)
            return fallback_classification(text)

        if result.is_resume and result.confidence < MIN_CONFIDENCE:
            return result.model_copy(
                update={
                    "is_resume": False,
                    "reasons": [*result.reasons, f"Confidence {result.confidence} is below {MIN_CONFIDENCE}"],
                }
            )
        return result
