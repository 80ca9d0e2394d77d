import json
import sys
import unittest
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from app.ai.providers.disabled_provider import DisabledProvider  # noqa: E402
from app.services.cover_letter import FALLBACK_NOTE, CoverLetterGenerator, fallback_cover_letter  # noqa: E402


class ScriptedLLM:
    def __init__(self, reply):
        self.reply = reply
        self.prompts = []

    async def complete(self, messages, *, max_tokens=1000):
        self.prompts.append(messages[-1].content)
        return self.reply


RESUME = "Backend developer. Python, SQL, Docker, AWS and Git on every project."
JOB = "Looking for Python and AWS engineers comfortable with Docker, SQL and Git."


class FallbackCoverLetterTests(unittest.TestCase):
    def test_template_mentions_company_role_and_skills(self):
        letter = fallback_cover_letter(RESUME, JOB, "Platform Engineer", "Acme", "Jane Doe")

        self.assertTrue(letter.cover_letter.startswith("Dear Acme Hiring Manager,"))
        self.assertIn("Platform Engineer position at Acme", letter.sections.opening)
        # first three matched terms in vocabulary order
        self.assertIn("working with python, sql, aws and", letter.sections.body)
        self.assertIn("areas of python", letter.sections.body)
        self.assertTrue(letter.sections.closing.endswith("Sincerely,\nJane Doe"))
        self.assertEqual(letter.keywords_used, ["python", "sql", "aws", "docker", "git"])
        self.assertEqual(letter.note, FALLBACK_NOTE)

    def test_no_matches_uses_generic_phrases(self):
        letter = fallback_cover_letter("Chef", "Sommelier", "Host", "Bistro", "Sam")
        self.assertIn("various technologies", letter.sections.body)
        self.assertIn("areas of software development", letter.sections.body)
        self.assertEqual(letter.keywords_used, [])

    def test_alternative_versions_differ_in_length(self):
        letter = fallback_cover_letter(RESUME, JOB, "Engineer", "Acme", "Jane")
        concise = letter.alternative_versions.concise
        detailed = letter.alternative_versions.detailed
        self.assertLess(len(concise), len(letter.cover_letter))
        self.assertGreater(len(detailed), len(letter.cover_letter))
        self.assertIn("cross-functional collaboration", detailed)


class CoverLetterGeneratorTests(unittest.IsolatedAsyncioTestCase):
    async def test_valid_reply_is_returned_without_note(self):
        reply = {
            "coverLetter": "Dear team, ...",
            "sections": {"opening": "Dear team,", "body": "I build APIs.", "closing": "Best"},
            "keyHighlights": ["APIs"],
            "note": "model chatter",
        }
        llm = ScriptedLLM(json.dumps(reply))
        letter = await CoverLetterGenerator(llm).generate(RESUME, JOB, "Engineer", "Acme", tone="confident")

        self.assertEqual(letter.cover_letter, "Dear team, ...")
        self.assertIsNone(letter.note)
        self.assertIn("TONE: confident", llm.prompts[0])

    async def test_missing_sections_falls_back(self):
        llm = ScriptedLLM(json.dumps({"coverLetter": "Hello"}))
        letter = await CoverLetterGenerator(llm).generate(RESUME, JOB, "Engineer", "Acme", "Jane")
        self.assertEqual(letter.note, FALLBACK_NOTE)
        self.assertIn("Sincerely,\nJane", letter.cover_letter)

    async def test_disabled_llm_signs_as_applicant(self):
        generator = CoverLetterGenerator(DisabledProvider(reason="off"))
        letter = await generator.generate(RESUME, JOB, "Engineer", "Acme")
        self.assertTrue(letter.cover_letter.endswith("Sincerely,\nApplicant"))


if __name__ == "__main__":
    unittest.main()
