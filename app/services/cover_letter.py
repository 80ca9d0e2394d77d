from __future__ import annotations

import logging

from app.ai.types import AIClient
from app.schemas.cover_letter import AlternativeVersions, CoverLetter, CoverLetterSections, Tone
from app.services.llm_json import complete_as

logger = logging.getLogger(__name__)

TEMPLATE_TECH_TERMS = (
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
)

FALLBACK_NOTE = (
    "Cover letter generated from a template because the AI service was unavailable. "
    "For full AI-powered generation, please try again later."
)

SYSTEM_PROMPT = (
    "You are a professional career writer specializing in compelling, personalized cover letters. "
    "Never invent companies, certifications, or metrics that are not in the resume. "
    "Answer with strict JSON only."
)


def _build_prompt(
    resume_text: str,
    job_description: str,
    job_title: str,
    company_name: str,
    candidate_name: str | None,
    tone: Tone,
) -> str:
    return (
        f"CANDIDATE RESUME:\n{resume_text}\n\n"
        "TARGET JOB:\n"
        f"- Position: {job_title}\n"
        f"- Company: {company_name}\n"
        f"- Job Description: {job_description}\n\n"
        f"CANDIDATE NAME: {candidate_name or 'Job Applicant'}\n"
        f"TONE: {tone}\n\n"
        "Write a 3-4 paragraph (250-400 words) cover letter that highlights relevant skills and achievements "
        f"from the resume, shows knowledge of the role, keeps a {tone} tone, and uses relevant keywords.\n\n"
        "Respond with JSON of exactly this shape:\n"
        "{"
        "\"coverLetter\": \"complete letter text\","
        "\"sections\": {\"opening\": \"...\", \"body\": \"...\", \"closing\": \"...\"},"
        "\"keyHighlights\": [\"...\"],"
        "\"keywordsUsed\": [\"...\"],"
        "\"strengthsHighlighted\": [\"...\"],"
        "\"suggestions\": [\"...\"],"
        "\"alternativeVersions\": {\"concise\": \"~200 word version\", \"detailed\": \"400+ word version\"}"
        "}"
    )


def fallback_cover_letter(
    resume_text: str,
    job_description: str,
    job_title: str,
    company_name: str,
    candidate_name: str,
) -> CoverLetter:
    resume_lower = resume_text.lower()
    job_lower = job_description.lower()
    matched = [term for term in TEMPLATE_TECH_TERMS if term in resume_lower and term in job_lower]

    skills_phrase = ", ".join(matched[:3]) if matched else "various technologies"
    focus_area = matched[0] if matched else "software development"

    opening = (
        f"Dear {company_name} Hiring Manager,\n\n"
        f"I am writing to express my strong interest in the {job_title} position at {company_name}. "
        "With my background in software development and proven track record of delivering high-quality "
        "solutions, I am excited about the opportunity to contribute to your team."
    )
    body = (
        f"In my previous roles, I have gained valuable experience working with {skills_phrase} and have "
        "consistently delivered projects that meet both technical requirements and business objectives. "
        "My experience aligns well with the requirements outlined in your job description, particularly "
        f"in areas of {focus_area} and collaborative team environments.\n\n"
        f"I am particularly drawn to {company_name} because of your commitment to innovation and excellence. "
        "I believe my technical skills and passion for problem-solving would make me a valuable addition "
        "to your development team."
    )
    closing = (
        "I would welcome the opportunity to discuss how my experience and enthusiasm can contribute to "
        f"{company_name}'s continued success. Thank you for considering my application. "
        f"I look forward to hearing from you.\n\nSincerely,\n{candidate_name}"
    )
    first_body_paragraph = body.split("\n\n")[0]

    return CoverLetter(
        cover_letter=f"{opening}\n\n{body}\n\n{closing}",
        sections=CoverLetterSections(opening=opening, body=body, closing=closing),
        key_highlights=[
            "Technical experience alignment",
            "Interest in company values",
            "Problem-solving abilities",
        ],
        keywords_used=matched[:5],
        strengths_highlighted=[
            "Software development experience",
            "Team collaboration",
            "Project delivery",
        ],
        suggestions=[
            "Customize the opening to mention specific company achievements",
            "Add specific project examples from your resume",
            "Research the company culture to personalize further",
        ],
        alternative_versions=AlternativeVersions(
            concise=f"{opening}\n\n{first_body_paragraph}\n\n{closing}",
            detailed=(
                f"{opening}\n\n{body}\n\n"
                "Additionally, I have experience in project management and cross-functional collaboration, "
                f"which I believe would be valuable in this role.\n\n{closing}"
            ),
        ),
        note=FALLBACK_NOTE,
    )


class CoverLetterGenerator:
    def __init__(self, llm: AIClient, *, max_tokens: int = 2500):
        self._llm = llm
        self._max_tokens = max_tokens

    async def generate(
        self,
        resume_text: str,
        job_description: str,
        job_title: str,
        company_name: str,
        candidate_name: str | None = None,
        tone: Tone = "professional",
    ) -> CoverLetter:
        try:
            letter = await complete_as(
                self._llm,
                CoverLetter,
                system_prompt=SYSTEM_PROMPT,
                user_prompt=_build_prompt(
                    resume_text, job_description, job_title, company_name, candidate_name, tone
                ),
                max_tokens=self._max_tokens,
                tool_slug="cover-letter",
            )
        except Exception as exc:  # noqa: BLE001 - deterministic fallback is expected
            logger.warning("cover_letter_fallback reason=%s: %s", type(exc).__name__, exc)
            return fallback_cover_letter(
                resume_text,
                job_description,
                job_title,
                company_name,
                candidate_name or "Applicant",
            )
        return letter.model_copy(update={"note": None})
