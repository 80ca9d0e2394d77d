from __future__ import annotations

import logging

from app.ai.types import AIClient
from app.schemas.match import MatchAnalysis, MatchScores, Suggestion
from app.services.llm_json import complete_as

logger = logging.getLogger(__name__)

TECH_TERMS = (
    "javascript",
    "python",
    "react",
    "node",
    "sql",
    "aws",
    "docker",
    "git",
    "api",
    "typescript",
    "html",
    "css",
)

SOFT_SKILL_TERMS = (
    "leadership",
    "team",
    "communication",
    "management",
    "collaboration",
    "problem",
    "solution",
)

# Weights in percent: technical, experience, keywords, soft skills.
WEIGHTS = (30, 30, 25, 15)

FALLBACK_NOTE = (
    "Analysis generated using the fallback keyword matcher because the AI service was unavailable. "
    "For full AI-powered analysis, check the language model API key and quota."
)

SYSTEM_PROMPT = (
    "You are an expert ATS (Applicant Tracking System) specialist and career advisor. "
    "You score resumes against job descriptions and answer with strict JSON only."
)


def _build_prompt(resume_text: str, job_description: str, job_category: str | None) -> str:
    return (
        "Analyze the following resume against the job description and provide a detailed scoring report.\n\n"
        f"RESUME:\n{resume_text}\n\n"
        f"JOB DESCRIPTION:\n{job_description}\n\n"
        f"JOB CATEGORY: {job_category or 'General'}\n\n"
        "Respond with JSON of exactly this shape:\n"
        "{"
        "\"overallMatch\": 85,"
        "\"scores\": {\"technicalSkills\": 90, \"experienceMatch\": 80, \"keywordAlignment\": 75, \"softSkills\": 85},"
        "\"strengths\": [\"...\"],"
        "\"weaknesses\": [\"...\"],"
        "\"suggestions\": [{\"category\": \"...\", \"original\": \"...\", \"improved\": \"...\", \"reason\": \"...\"}],"
        "\"missingKeywords\": [\"...\"],"
        "\"matchedKeywords\": [\"...\"]"
        "}\n\n"
        "SCORING CRITERIA (each 0-100):\n"
        "1. Technical Skills (30%): alignment of technical competencies\n"
        "2. Experience Match (30%): relevance of work history\n"
        "3. Keyword Alignment (25%): ATS optimization and job-specific terms\n"
        "4. Soft Skills (15%): professional presentation and interpersonal skills\n\n"
        "overallMatch is the weighted average of the four scores. "
        "Give specific, actionable suggestions and be honest about gaps."
    )


def _terms_in(text: str, vocabulary: tuple[str, ...]) -> list[str]:
    return [term for term in vocabulary if term in text]


def weighted_overall(scores: MatchScores) -> int:
    """Weighted score rounded half-up; integer maths keeps it exact."""
    total = (
        WEIGHTS[0] * scores.technical_skills
        + WEIGHTS[1] * scores.experience_match
        + WEIGHTS[2] * scores.keyword_alignment
        + WEIGHTS[3] * scores.soft_skills
    )
    return (total + 50) // 100


def fallback_analysis(resume_text: str, job_description: str) -> MatchAnalysis:
    resume_lower = resume_text.lower()
    job_lower = job_description.lower()

    resume_tech = set(_terms_in(resume_lower, TECH_TERMS))
    job_tech = _terms_in(job_lower, TECH_TERMS)
    resume_soft = set(_terms_in(resume_lower, SOFT_SKILL_TERMS))
    job_soft = _terms_in(job_lower, SOFT_SKILL_TERMS)

    matched_tech = [term for term in job_tech if term in resume_tech]
    matched_soft = [term for term in job_soft if term in resume_soft]
    missing_tech = [term for term in job_tech if term not in resume_tech]

    scores = MatchScores(
        technical_skills=min(95, 20 * len(matched_tech)),
        experience_match=max(60, min(90, len(resume_text) // 100)),
        keyword_alignment=min(90, 15 * (len(matched_tech) + len(matched_soft))),
        soft_skills=min(90, 18 * len(matched_soft)),
    )
    overall = weighted_overall(scores)

    strengths: list[str] = []
    if len(matched_tech) > 2:
        strengths.append("Strong technical skill alignment")
    if len(matched_soft) > 1:
        strengths.append("Good soft skills presentation")
    if len(resume_text) > 2000:
        strengths.append("Comprehensive experience documentation")

    weaknesses: list[str] = []
    if len(missing_tech) > 2:
        weaknesses.append("Missing key technical skills")
    if overall < 70:
        weaknesses.append("Limited keyword optimization")
    if len(resume_text) < 1000:
        weaknesses.append("Brief experience descriptions")

    suggestions = [
        Suggestion(
            category="Technical Skills",
            original="Current skill set",
            improved=f"Add specific experience with: {', '.join(missing_tech[:3])}",
            reason="These keywords appear in the job description but not in your resume",
        ),
        Suggestion(
            category="Keyword Optimization",
            original="General descriptions",
            improved="Use specific terms from the job posting",
            reason="ATS systems look for exact keyword matches",
        ),
    ]

    return MatchAnalysis(
        overall_match=overall,
        scores=scores,
        strengths=strengths,
        weaknesses=weaknesses,
        suggestions=suggestions,
        missing_keywords=missing_tech[:6],
        matched_keywords=(matched_tech + matched_soft)[:8],
        note=FALLBACK_NOTE,
    )


class MatchScorer:
    def __init__(self, llm: AIClient, *, max_tokens: int = 2000):
        self._llm = llm
        self._max_tokens = max_tokens

    async def analyze(
        self,
        resume_text: str,
        job_description: str,
        job_category: str | None = None,
    ) -> MatchAnalysis:
        try:
            analysis = await complete_as(
                self._llm,
                MatchAnalysis,
                system_prompt=SYSTEM_PROMPT,
                user_prompt=_build_prompt(resume_text, job_description, job_category),
                max_tokens=self._max_tokens,
                tool_slug="match-analyze",
            )
        except Exception as exc:  # noqa: BLE001 - deterministic fallback is expected
            logger.warning("match_analysis_fallback reason=%s: %s", type(exc).__name__, exc)
            return fallback_analysis(resume_text, job_description)
        # note is reserved for the fallback path
        return analysis.model_copy(update={"note": None})
